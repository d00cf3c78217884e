"""Governance facet: compliance standards, policies and enforced rulesets."""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Tuple

from ..models import ComplianceInfo, GovernanceAnalysis, PolicyInfo, RulesetInfo
from ..repo_scanner import EvidenceScanner
from .base import FacetAnalyzer, FacetContext
from .utils import contains_any, first_match, read_all, readme_text

COMPLIANCE_PATTERNS = (
    "COMPLIANCE*",
    "SECURITY*",
    "PRIVACY*",
    "GDPR*",
    "HIPAA*",
    "docs/compliance*",
    "docs/security*",
    "docs/privacy*",
    "docs/compliance/**",
    "docs/security/**",
    "docs/privacy/**",
)

STANDARDS: Tuple[Tuple[str, re.Pattern[str]], ...] = (
    ("GDPR", re.compile(r"gdpr|general data protection regulation", re.I)),
    ("HIPAA", re.compile(r"hipaa|health insurance portability", re.I)),
    ("SOX", re.compile(r"sox|sarbanes.?oxley", re.I)),
    ("PCI-DSS", re.compile(r"pci.?dss|payment card industry", re.I)),
    ("CCPA", re.compile(r"ccpa|california consumer privacy", re.I)),
    ("ISO 27001", re.compile(r"iso.?27001|information security management", re.I)),
    ("SOC 2", re.compile(r"soc.?2|service organization control", re.I)),
    ("NIST", re.compile(r"nist|national institute of standards", re.I)),
    ("OWASP", re.compile(r"owasp|open web application security", re.I)),
)

FRAMEWORKS: Tuple[Tuple[str, re.Pattern[str]], ...] = (
    ("ISO 27001", re.compile(r"iso.?27001", re.I)),
    ("SOC 2", re.compile(r"soc.?2", re.I)),
    ("NIST Cybersecurity Framework", re.compile(r"nist.*cybersecurity.*framework", re.I)),
    ("COBIT", re.compile(r"cobit", re.I)),
    ("ITIL", re.compile(r"itil", re.I)),
)

PROJECT_TYPES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("healthcare", ("health", "medical")),
    ("financial", ("stripe", "payment", "finance")),
    ("ecommerce", ("shop", "commerce", "cart")),
    ("data", ("data", "analytics", "ml")),
)

PCI_GAP = "PCI-DSS compliance required for payment processing"

# project type -> ordered (missing item, collection it is looked up in, gap text)
TYPE_GAPS: Dict[str, Tuple[Tuple[str, str, str], ...]] = {
    "healthcare": (
        ("HIPAA", "standards", "HIPAA compliance documentation missing for healthcare application"),
        ("ISO 27001", "frameworks", "ISO 27001 framework implementation recommended for healthcare data"),
    ),
    "financial": (
        ("SOX", "standards", "SOX compliance considerations needed for financial application"),
        ("PCI-DSS", "standards", PCI_GAP),
    ),
    "ecommerce": (
        ("GDPR", "standards", "GDPR compliance needed for customer data protection"),
        ("PCI-DSS", "standards", PCI_GAP),
    ),
    "data": (
        ("GDPR", "standards", "GDPR compliance essential for data processing applications"),
        (
            "NIST Cybersecurity Framework",
            "frameworks",
            "NIST Cybersecurity Framework recommended for data applications",
        ),
    ),
}
GENERAL_NO_STANDARDS = "No compliance standards identified - consider GDPR for data protection"
GENERAL_NO_FRAMEWORKS = "No security frameworks identified - consider ISO 27001 or SOC 2"

POLICY_FILES = (
    "SECURITY.md",
    "PRIVACY.md",
    "DATA_RETENTION.md",
    "ACCESS_CONTROL.md",
    "policies",
    "docs/policies",
)
POLICY_KEYWORDS: Dict[str, str] = {
    "security": "security",
    "privacy": "privacy",
    "data_retention": "retention",
    "access_control": "access",
}
POLICY_TEXT: Dict[str, re.Pattern[str]] = {
    "security": re.compile(r"security.*policy|policy.*security", re.I),
    "privacy": re.compile(r"privacy.*policy|policy.*privacy", re.I),
    "data_retention": re.compile(r"data.*retention|retention.*policy", re.I),
    "access_control": re.compile(r"access.*control|access.*policy", re.I),
}

RULESET_FILES: Dict[str, Tuple[str, ...]] = {
    "linting": (
        ".eslintrc.js",
        ".eslintrc.json",
        ".eslintrc.yml",
        "eslint.config.js",
        "tslint.json",
        ".jshintrc",
        "pyproject.toml",
        "setup.cfg",
        ".flake8",
    ),
    "security": (".snyk", "security.yml", ".github/workflows/security.yml", "bandit.yml", "safety.json"),
    "accessibility": (".a11yrc", "accessibility.json", "axe.config.js"),
    "performance": ("lighthouse.config.js", "performance.json", "web-vitals.config.js"),
}
A11Y_PACKAGE_KEYWORDS = ("a11y", "accessibility", "axe")

RECOMMENDATION_RULES: Tuple[Tuple[Callable[[GovernanceAnalysis], bool], str], ...] = (
    (
        lambda gov: bool(gov.compliance.gaps),
        "Close identified compliance gaps with documented controls",
    ),
    (
        lambda gov: not gov.policies.security,
        "Publish a security policy describing vulnerability reporting",
    ),
    (
        lambda gov: not gov.policies.privacy,
        "Document the privacy policy and data handling practices",
    ),
    (lambda gov: not gov.policies.data_retention, "Define a data retention policy"),
    (lambda gov: not gov.policies.access_control, "Document access control policies"),
    (lambda gov: not gov.rulesets.linting, "Add linting rules to enforce coding standards"),
    (lambda gov: not gov.rulesets.security, "Add security scanning rules to the build"),
)


def project_type(dependency_names: List[str]) -> str:
    text = " ".join(name.lower() for name in dependency_names)
    return first_match(text, PROJECT_TYPES, "general")


class GovernanceAnalyzer(FacetAnalyzer):
    """Checks compliance posture, published policies and enforced rulesets."""

    name = "governance"

    def analyze(self, scanner: EvidenceScanner, context: FacetContext) -> GovernanceAnalysis:
        readme = readme_text(scanner)
        record = GovernanceAnalysis(
            compliance=self._compliance(scanner, context, readme),
            policies=self._policies(scanner, readme),
            rulesets=self._rulesets(scanner, context),
        )
        recommendations = tuple(text for condition, text in RECOMMENDATION_RULES if condition(record))
        return GovernanceAnalysis(
            compliance=record.compliance,
            policies=record.policies,
            rulesets=record.rulesets,
            recommendations=recommendations,
        )

    def _compliance(
        self, scanner: EvidenceScanner, context: FacetContext, readme: str
    ) -> ComplianceInfo:
        files = scanner.find_any(COMPLIANCE_PATTERNS)
        text = read_all(scanner, files) + "\n" + readme
        standards = [name for name, pattern in STANDARDS if pattern.search(text)]
        frameworks = [name for name, pattern in FRAMEWORKS if pattern.search(text)]
        kind = project_type(context.dependencies.runtime_names)

        found = {"standards": set(standards), "frameworks": set(frameworks)}
        gaps: List[str] = []
        if kind == "general":
            if not standards:
                gaps.append(GENERAL_NO_STANDARDS)
            if not frameworks:
                gaps.append(GENERAL_NO_FRAMEWORKS)
        else:
            for item, collection, gap in TYPE_GAPS[kind]:
                if item not in found[collection] and gap not in gaps:
                    gaps.append(gap)

        return ComplianceInfo(
            standards=tuple(standards),
            frameworks=tuple(frameworks),
            project_type=kind,
            files=tuple(files),
            gaps=tuple(gaps),
        )

    def _policies(self, scanner: EvidenceScanner, readme: str) -> PolicyInfo:
        flags = {key: False for key in POLICY_KEYWORDS}
        for path in POLICY_FILES:
            if not scanner.exists(path):
                continue
            lowered = path.lower()
            for key, keyword in POLICY_KEYWORDS.items():
                if keyword in lowered:
                    flags[key] = True
        for key, pattern in POLICY_TEXT.items():
            if pattern.search(readme):
                flags[key] = True
        return PolicyInfo(**flags)

    def _rulesets(self, scanner: EvidenceScanner, context: FacetContext) -> RulesetInfo:
        found = {key: scanner.existing(paths) for key, paths in RULESET_FILES.items()}
        names = [name.lower() for name in context.dependencies.all_names]
        if any(contains_any(name, A11Y_PACKAGE_KEYWORDS) for name in names):
            found["accessibility"].append("package.json (dependencies)")
        return RulesetInfo(**{key: tuple(paths) for key, paths in found.items()})


__all__ = ["GovernanceAnalyzer", "RECOMMENDATION_RULES", "project_type"]
