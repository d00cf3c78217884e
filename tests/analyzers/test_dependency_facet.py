"""Tests for the dependency facet."""

from __future__ import annotations

import pytest

from repoprompt.analyzers.dependencies import DependencyAnalyzer, risk_level
from tests._fixtures.repo_builder import RepoBuilder


def _analyze(repo_builder: RepoBuilder):
    scanner = repo_builder.scanner()
    return DependencyAnalyzer().analyze(scanner, repo_builder.context(scanner))


def test_node_manifest_security_maintenance_and_licensing(repo_builder: RepoBuilder) -> None:
    repo_builder.write_json(
        "package.json",
        {
            "name": "legacy-app",
            "license": "GPL-3.0",
            "dependencies": {"lodash": "^0.9.0", "request": "^2.88.0", "backbone": "1.4.0"},
            "devDependencies": {"jest": "^29.0.0"},
        },
    )

    result = _analyze(repo_builder)

    assert result.security.vulnerable_packages == ("lodash",)
    assert result.security.vulnerabilities == 1
    assert result.security.outdated == 2
    assert result.security.risk_level == "medium"

    assert result.maintenance.deprecated == ("request",)
    assert result.maintenance.alternatives["request"] == ("axios", "node-fetch")
    assert result.maintenance.unmaintained == ("lodash", "backbone")

    assert result.licensing.types == ("GPL-3.0",)
    assert result.licensing.compliance == "issues"
    assert "License specified in package.json but no LICENSE file found" in result.licensing.issues
    assert "No third-party license attribution found" in result.licensing.issues

    assert result.usage.direct == 3
    assert result.usage.bundle_size_kb == 130
    assert result.usage.treeshaking is False

    assert result.recommendations == (
        "Schedule upgrades for outdated dependencies",
        "Replace deprecated packages with maintained alternatives",
        "Evaluate unmaintained packages for replacement",
        "Review copyleft license obligations before distribution",
        "Add license files and third-party attribution notices",
    )


def test_permissive_license_with_files_is_compliant(repo_builder: RepoBuilder) -> None:
    repo_builder.write_json(
        "package.json",
        {"license": "MIT", "type": "module", "dependencies": {"dayjs": "^1.11.10"}},
    )
    repo_builder.write({"LICENSE": "MIT License\n", "THIRD-PARTY-NOTICES": "dayjs: MIT\n"})

    result = _analyze(repo_builder)

    assert result.licensing.compliance == "compliant"
    assert result.licensing.issues == ()
    assert result.security.risk_level == "low"
    assert result.usage.treeshaking is True


def test_python_requirements_are_watched(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"requirements.txt": "Django==2.2\nrequests>=2.31\n"})

    result = _analyze(repo_builder)

    assert result.security.vulnerable_packages == ("django", "requests")
    assert result.security.risk_level == "low"
    assert result.usage.direct == 2


def test_lockfile_audit_and_transitive_counts(repo_builder: RepoBuilder) -> None:
    repo_builder.write_json("package.json", {"dependencies": {"express": "^4.18.2"}})
    repo_builder.write_json(
        "package-lock.json",
        {
            "dependencies": {"express": {}, "accepts": {}, "body-parser": {}},
            "vulnerabilities": {"body-parser": {"severity": "high"}},
        },
    )

    result = _analyze(repo_builder)

    assert result.usage.transitive == 2
    assert "body-parser" in result.security.vulnerable_packages


@pytest.mark.parametrize(
    ("vulnerabilities", "outdated", "expected"),
    [
        (11, 0, "critical"),
        (0, 21, "critical"),
        (6, 0, "high"),
        (0, 11, "high"),
        (1, 0, "medium"),
        (0, 0, "low"),
    ],
)
def test_risk_level_thresholds(vulnerabilities: int, outdated: int, expected: str) -> None:
    assert risk_level(vulnerabilities, outdated) == expected
