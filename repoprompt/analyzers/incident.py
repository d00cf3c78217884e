"""Incident-readiness facet: preparedness, response capability and risk areas."""

from __future__ import annotations

import re
from typing import Callable, List, Tuple

from ..models import IncidentAnalysis, IncidentPreparedness, ResponseCapability
from ..repo_scanner import EvidenceScanner
from .base import FacetAnalyzer, FacetContext
from .utils import contains_any, read_all

RUNBOOK_PATHS = (
    "runbooks",
    "docs/runbooks",
    "docs/operations",
    "ops",
    "playbooks",
    "procedures",
    "RUNBOOK.md",
    "OPERATIONS.md",
    "INCIDENT_RESPONSE.md",
    "TROUBLESHOOTING.md",
)
MONITORING_PATHS = (
    "prometheus.yml",
    "grafana",
    "datadog.yaml",
    "newrelic.yml",
    "monitoring",
    "metrics",
    "telemetry",
)
MONITORING_KEYWORDS = (
    "prometheus",
    "metrics",
    "gauge",
    "counter",
    "histogram",
    "datadog",
    "newrelic",
    "monitoring",
    "telemetry",
)
MONITORING_SAMPLE = ("**/*.{js,ts,py,java,go}",)
ALERTING_PATHS = ("alerts", "alerting", "notifications", "pagerduty", "opsgenie", "alert-manager")
PLAYBOOK_PATHS = ("playbooks", "ansible", "chef", "puppet", "saltstack")

ESCALATION_PATHS = ("ESCALATION.md", "ONCALL.md", "CONTACTS.md", "docs/escalation", "docs/oncall")
COMMUNICATION_PATHS = (
    "COMMUNICATION.md",
    "INCIDENT_COMMUNICATION.md",
    "docs/communication",
    "docs/incident-response",
)
ROLLBACK_PATHS = ("ROLLBACK.md", "DEPLOYMENT.md", "docs/rollback", "docs/deployment")
ROLLBACK_CI_FILES = (".github/workflows/*.{yml,yaml}", ".gitlab-ci.yml", "Jenkinsfile", ".circleci/config.yml")
_ROLLBACK_RE = re.compile(r"rollback|revert|canary|blue.?green", re.I)
POSTMORTEM_PATHS = (
    "POSTMORTEM.md",
    "POST_MORTEM.md",
    "docs/postmortem",
    "docs/post-mortem",
    "postmortems",
    "incidents",
)

REDUNDANCY_PATHS = ("load-balancer", "nginx.conf", "haproxy", "docker-compose.yml", "kubernetes", "k8s")
_SCALING_RE = re.compile(r"replicas:|scale:")

EXTERNAL_SERVICES = (
    "aws",
    "azure",
    "gcp",
    "stripe",
    "paypal",
    "twilio",
    "sendgrid",
    "mailgun",
    "cloudinary",
    "auth0",
    "okta",
)

SINGLE_POINT_OF_FAILURE = "Potential single points of failure in architecture"
EXTERNAL_SERVICES_PREFIX = "External service dependencies: "

# (keywords matched inside dependency names, risk text)
DEPENDENCY_RISKS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (
        ("database", "postgres", "mysql", "mongodb", "redis", "elasticsearch"),
        "Database dependencies require special incident handling",
    ),
    (
        ("auth", "passport", "jwt", "oauth", "saml", "ldap"),
        "Authentication/authorization systems are critical failure points",
    ),
    (
        ("etl", "pipeline", "stream", "kafka", "rabbit", "celery"),
        "Data processing pipelines may require specialized recovery procedures",
    ),
    (
        ("socket", "websocket", "sse", "realtime", "pusher"),
        "Real-time systems may have cascading failure effects",
    ),
    (
        ("stripe", "paypal", "payment", "billing", "checkout"),
        "Payment systems require immediate incident response due to financial impact",
    ),
    (
        ("react", "vue", "angular", "frontend", "ui", "web"),
        "User-facing systems directly impact customer experience",
    ),
)

Rule = Callable[[IncidentAnalysis], bool]

RECOMMENDATION_RULES: Tuple[Tuple[Rule, str], ...] = (
    (lambda inc: not inc.preparedness.runbooks, "Create operational runbooks for common incident scenarios"),
    (lambda inc: not inc.preparedness.monitoring, "Implement comprehensive monitoring and observability"),
    (lambda inc: not inc.preparedness.alerting, "Set up automated alerting for critical system metrics"),
    (lambda inc: not inc.preparedness.playbooks, "Develop automation playbooks for incident response"),
    (lambda inc: not inc.response.escalation, "Document clear escalation paths and on-call procedures"),
    (lambda inc: not inc.response.communication, "Create incident communication templates and procedures"),
    (lambda inc: not inc.response.rollback, "Implement automated rollback procedures for deployments"),
    (lambda inc: not inc.response.postmortem, "Establish postmortem processes for continuous improvement"),
    (lambda inc: len(inc.risk_areas) > 3, "Conduct risk assessment and create mitigation strategies"),
    (
        lambda inc: SINGLE_POINT_OF_FAILURE in inc.risk_areas,
        "Implement redundancy and failover mechanisms",
    ),
    (
        lambda inc: any(area.startswith(EXTERNAL_SERVICES_PREFIX) for area in inc.risk_areas),
        "Create fallback strategies for external service failures",
    ),
)


class IncidentAnalyzer(FacetAnalyzer):
    """Assesses how ready the project is to detect and respond to incidents."""

    name = "incident"

    def analyze(self, scanner: EvidenceScanner, context: FacetContext) -> IncidentAnalysis:
        record = IncidentAnalysis(
            preparedness=IncidentPreparedness(
                runbooks=scanner.any_exists(RUNBOOK_PATHS),
                monitoring=self._has_monitoring(scanner),
                alerting=scanner.any_exists(ALERTING_PATHS),
                playbooks=scanner.any_exists(PLAYBOOK_PATHS),
            ),
            response=ResponseCapability(
                escalation=scanner.any_exists(ESCALATION_PATHS),
                communication=scanner.any_exists(COMMUNICATION_PATHS),
                rollback=self._has_rollback(scanner),
                postmortem=scanner.any_exists(POSTMORTEM_PATHS),
            ),
            risk_areas=tuple(self._risk_areas(scanner, context)),
        )
        recommendations = tuple(text for condition, text in RECOMMENDATION_RULES if condition(record))
        return IncidentAnalysis(
            preparedness=record.preparedness,
            response=record.response,
            risk_areas=record.risk_areas,
            recommendations=recommendations,
        )

    def _has_monitoring(self, scanner: EvidenceScanner) -> bool:
        if scanner.any_exists(MONITORING_PATHS):
            return True
        return any(
            contains_any(text.lower(), MONITORING_KEYWORDS)
            for _, text in scanner.sample(MONITORING_SAMPLE)
        )

    def _has_rollback(self, scanner: EvidenceScanner) -> bool:
        if scanner.any_exists(ROLLBACK_PATHS):
            return True
        return bool(_ROLLBACK_RE.search(read_all(scanner, scanner.find_any(ROLLBACK_CI_FILES))))

    def _risk_areas(self, scanner: EvidenceScanner, context: FacetContext) -> List[str]:
        names = [name.lower() for name in context.dependencies.runtime_names]
        risks: List[str] = []

        compose = scanner.read_or_empty("docker-compose.yml")
        if not scanner.any_exists(REDUNDANCY_PATHS) and not _SCALING_RE.search(compose):
            risks.append(SINGLE_POINT_OF_FAILURE)

        database_rule, *other_rules = DEPENDENCY_RISKS
        if any(contains_any(name, database_rule[0]) for name in names):
            risks.append(database_rule[1])

        services: List[str] = []
        for name in names:
            service = next((pattern for pattern in EXTERNAL_SERVICES if pattern in name), None)
            if service is not None and service.upper() not in services:
                services.append(service.upper())
        if services:
            risks.append(EXTERNAL_SERVICES_PREFIX + ", ".join(services))

        for keywords, text in other_rules:
            if any(contains_any(name, keywords) for name in names):
                risks.append(text)
        return risks


__all__ = ["IncidentAnalyzer", "RECOMMENDATION_RULES"]
