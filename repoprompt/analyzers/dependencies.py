"""Dependency facet: security exposure, maintenance, licensing and footprint."""

from __future__ import annotations

from typing import Callable, Dict, List, Tuple

from ..models import (
    DependencyAnalysis,
    DependencyMaintenance,
    DependencySecurity,
    DependencyUsage,
    LicensingInfo,
    freeze,
)
from ..repo_scanner import EvidenceScanner
from .base import FacetAnalyzer, FacetContext
from .utils import Dependencies, is_old_version, load_json, version_parts

VULNERABLE_PACKAGES = (
    "lodash",
    "moment",
    "request",
    "bower",
    "grunt",
    "jquery",
    "bootstrap",
    "angular",
    "react",
)
PYTHON_WATCHLIST = ("django", "flask", "requests", "urllib3")

DEPRECATED: Dict[str, Tuple[str, ...]] = {
    "request": ("axios", "node-fetch"),
    "moment": ("dayjs", "date-fns"),
    "bower": ("npm", "yarn"),
    "grunt": ("webpack", "rollup", "vite"),
    "gulp": ("webpack", "rollup", "vite"),
    "node-sass": ("sass", "dart-sass"),
    "istanbul": ("nyc", "c8"),
    "tslint": ("eslint",),
    "protractor": ("cypress", "playwright"),
}
UNMAINTAINED = (
    "jquery-ui",
    "backbone",
    "underscore",
    "coffee-script",
    "grunt-contrib-jshint",
    "node-uuid",
    "colors",
)

COPYLEFT_LICENSES = ("GPL-2.0", "GPL-3.0", "AGPL-3.0", "LGPL-2.1")
PERMISSIVE_LICENSES = ("MIT", "Apache-2.0", "BSD-2-Clause", "BSD-3-Clause", "ISC")
LICENSE_FILES = ("LICENSE", "LICENSE.txt", "LICENSE.md", "COPYING")
ATTRIBUTION_FILES = ("THIRD-PARTY-NOTICES", "THIRD-PARTY-LICENSES", "ACKNOWLEDGMENTS", "licenses")

BUNDLE_SIZES_KB: Dict[str, int] = {
    "react": 50,
    "react-dom": 120,
    "vue": 80,
    "angular": 200,
    "lodash": 70,
    "moment": 150,
    "jquery": 85,
    "bootstrap": 60,
    "webpack": 100,
    "typescript": 40,
}
DEFAULT_BUNDLE_KB = 20
TREESHAKING_CONFIGS = ("webpack.config.js", "rollup.config.js", "vite.config.js")

# (vulnerabilities above, outdated above, level), first hit wins.
RISK_THRESHOLDS: Tuple[Tuple[int, int, str], ...] = (
    (10, 20, "critical"),
    (5, 10, "high"),
    (0, 5, "medium"),
)

RECOMMENDATION_RULES: Tuple[Tuple[Callable[[DependencyAnalysis], bool], str], ...] = (
    (
        lambda dep: dep.security.risk_level in ("critical", "high"),
        "Run a dependency security audit and upgrade vulnerable packages immediately",
    ),
    (
        lambda dep: dep.security.risk_level == "medium",
        "Schedule upgrades for outdated dependencies",
    ),
    (
        lambda dep: bool(dep.maintenance.deprecated),
        "Replace deprecated packages with maintained alternatives",
    ),
    (
        lambda dep: bool(dep.maintenance.unmaintained),
        "Evaluate unmaintained packages for replacement",
    ),
    (
        lambda dep: dep.licensing.compliance == "issues",
        "Review copyleft license obligations before distribution",
    ),
    (
        lambda dep: bool(dep.licensing.issues),
        "Add license files and third-party attribution notices",
    ),
    (
        lambda dep: dep.usage.bundle_size_kb > 500 and not dep.usage.treeshaking,
        "Enable tree shaking to reduce bundle size",
    ),
)


def risk_level(vulnerabilities: int, outdated: int) -> str:
    for vuln_limit, outdated_limit, level in RISK_THRESHOLDS:
        if vulnerabilities > vuln_limit or outdated > outdated_limit:
            return level
    return "low"


class DependencyAnalyzer(FacetAnalyzer):
    """Scores declared dependencies for security and maintenance risk."""

    name = "dependencies"

    def analyze(self, scanner: EvidenceScanner, context: FacetContext) -> DependencyAnalysis:
        deps = context.dependencies
        lock = load_json(scanner, "package-lock.json")
        record = DependencyAnalysis(
            security=self._security(scanner, deps, lock),
            maintenance=self._maintenance(deps),
            licensing=self._licensing(scanner, deps),
            usage=self._usage(scanner, deps, lock),
        )
        recommendations = tuple(text for condition, text in RECOMMENDATION_RULES if condition(record))
        return DependencyAnalysis(
            security=record.security,
            maintenance=record.maintenance,
            licensing=record.licensing,
            usage=record.usage,
            recommendations=recommendations,
        )

    def _security(
        self, scanner: EvidenceScanner, deps: Dependencies, lock: Dict[str, object]
    ) -> DependencySecurity:
        vulnerable: List[str] = []
        outdated = 0
        level = "low"

        if deps.package_json:
            every = {**deps.node, **deps.node_dev}
            for name, version in every.items():
                if name in VULNERABLE_PACKAGES and is_old_version(version):
                    vulnerable.append(name)
                if is_old_version(version):
                    outdated += 1
            audit = lock.get("vulnerabilities")
            if isinstance(audit, dict):
                vulnerable.extend(str(name) for name in audit)

        requirements = scanner.read_or_empty("requirements.txt").lower()
        vulnerable.extend(name for name in PYTHON_WATCHLIST if name in requirements)

        vulnerable = list(dict.fromkeys(vulnerable))
        if deps.package_json:
            level = risk_level(len(vulnerable), outdated)
        return DependencySecurity(
            vulnerabilities=len(vulnerable),
            outdated=outdated,
            risk_level=level,
            vulnerable_packages=tuple(vulnerable),
        )

    def _maintenance(self, deps: Dependencies) -> DependencyMaintenance:
        deprecated: List[str] = []
        unmaintained: List[str] = []
        alternatives: Dict[str, Tuple[str, ...]] = {}
        every = {**deps.node, **deps.node_dev}

        for name, version in every.items():
            if name in DEPRECATED:
                deprecated.append(name)
                alternatives[name] = DEPRECATED[name]
            elif name in UNMAINTAINED:
                unmaintained.append(name)
            else:
                parts = version_parts(version)
                if parts and parts[0] in (0, 1):
                    unmaintained.append(name)

        return DependencyMaintenance(
            deprecated=tuple(deprecated),
            unmaintained=tuple(unmaintained),
            alternatives=freeze(alternatives),
        )

    def _licensing(self, scanner: EvidenceScanner, deps: Dependencies) -> LicensingInfo:
        types: List[str] = []
        issues: List[str] = []
        compliance = "unknown"

        license_name = deps.package_json.get("license")
        if isinstance(license_name, str) and license_name:
            types.append(license_name)
            if license_name in COPYLEFT_LICENSES:
                issues.append(f"Project uses {license_name} which may have copyleft restrictions")
                compliance = "issues"
            elif license_name in PERMISSIVE_LICENSES:
                compliance = "compliant"
            if not scanner.any_exists(LICENSE_FILES):
                issues.append("License specified in package.json but no LICENSE file found")

        if not scanner.any_exists(ATTRIBUTION_FILES):
            issues.append("No third-party license attribution found")

        return LicensingInfo(types=tuple(types), issues=tuple(issues), compliance=compliance)

    def _usage(
        self, scanner: EvidenceScanner, deps: Dependencies, lock: Dict[str, object]
    ) -> DependencyUsage:
        direct = len(deps.node) + len(deps.other)
        locked = lock.get("dependencies")
        transitive = max(0, len(locked) - len(deps.node)) if isinstance(locked, dict) else 0

        every = [*deps.node, *deps.node_dev]
        bundle = sum(BUNDLE_SIZES_KB.get(name, DEFAULT_BUNDLE_KB) for name in every)

        module_field = deps.package_json.get("type") == "module" or "module" in deps.package_json
        treeshaking = scanner.any_exists(TREESHAKING_CONFIGS) or bool(module_field)

        return DependencyUsage(
            direct=direct, transitive=transitive, bundle_size_kb=bundle, treeshaking=treeshaking
        )


__all__ = ["DependencyAnalyzer", "RECOMMENDATION_RULES", "risk_level"]
