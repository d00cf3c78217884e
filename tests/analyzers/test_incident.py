"""Tests for the incident-readiness facet."""

from __future__ import annotations

from repoprompt.analyzers.incident import IncidentAnalyzer
from tests._fixtures.repo_builder import RepoBuilder


def _analyze(repo_builder: RepoBuilder):
    scanner = repo_builder.scanner()
    return IncidentAnalyzer().analyze(scanner, repo_builder.context(scanner))


def test_unprepared_repository_lists_risk_areas(repo_builder: RepoBuilder) -> None:
    repo_builder.write_json(
        "package.json",
        {"dependencies": {"redis": "^4.6.0", "stripe": "^14.0.0", "react": "^18.2.0"}},
    )

    result = _analyze(repo_builder)

    assert result.preparedness.runbooks is False
    assert result.response.rollback is False
    assert result.risk_areas == (
        "Potential single points of failure in architecture",
        "Database dependencies require special incident handling",
        "External service dependencies: STRIPE",
        "Payment systems require immediate incident response due to financial impact",
        "User-facing systems directly impact customer experience",
    )
    assert "Conduct risk assessment and create mitigation strategies" in result.recommendations
    assert "Implement redundancy and failover mechanisms" in result.recommendations
    assert "Create fallback strategies for external service failures" in result.recommendations
    assert "Create operational runbooks for common incident scenarios" in result.recommendations


def test_prepared_repository_needs_only_playbooks(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "runbooks/database.md": "# Restore\n",
            "prometheus.yml": "scrape_configs: []\n",
            "alerts/rules.yml": "groups: []\n",
            "ESCALATION.md": "# On-call\n",
            "docs/incident-response/template.md": "# Status update\n",
            "ROLLBACK.md": "# Rollback\n",
            "postmortems/2024-01-01.md": "# Outage\n",
            "docker-compose.yml": "services:\n  web:\n    deploy:\n      replicas: 2\n",
        }
    )

    result = _analyze(repo_builder)

    assert result.preparedness.monitoring is True
    assert result.preparedness.alerting is True
    assert result.response.escalation is True
    assert result.response.communication is True
    assert result.response.postmortem is True
    assert result.risk_areas == ()
    assert result.recommendations == ("Develop automation playbooks for incident response",)


def test_monitoring_detected_from_source_keywords(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/server.js": "const requests = new client.Counter({ name: 'requests' })\n"})

    assert _analyze(repo_builder).preparedness.monitoring is True


def test_rollback_detected_from_ci_configuration(repo_builder: RepoBuilder) -> None:
    repo_builder.write({".github/workflows/deploy.yml": "steps:\n  - run: ./rollback.sh\n"})

    assert _analyze(repo_builder).response.rollback is True
