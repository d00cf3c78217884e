"""Documentation facet: detect doc types, score quality, list gaps."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Tuple

from ..errors import ScanIncomplete
from ..models import DocumentationAnalysis, DocumentationQuality, DocumentationTypes
from ..repo_scanner import EvidenceScanner
from .base import FacetAnalyzer, FacetContext
from .utils import contains_any

README_FILES = ("README.md", "README.txt", "README.rst", "readme.md")
API_DOC_PATHS = ("docs/api", "api-docs", "swagger.json", "openapi.yaml", "docs/swagger", "apidoc")
DOC_DIRS = ("docs", "documentation", "wiki", "guides")
ARCHITECTURE_PATHS = ("docs/architecture", "architecture.md", "ARCHITECTURE.md", "docs/design", "adr")
OPERATIONAL_PATHS = ("docs/deployment", "DEPLOYMENT.md", "docs/ops", "runbooks", "docs/runbooks")
DEPLOYMENT_CONFIG = (
    "Dockerfile",
    "docker-compose.yml",
    "k8s",
    "kubernetes",
    ".github/workflows",
    "deploy",
    "deployment",
)
CHANGELOG_FILES = ("CHANGELOG.md", "HISTORY.md", "RELEASES.md")
README_SECTIONS = ("installation", "usage", "api", "contributing", "license")
LOCALIZED_DIRS = ("docs/en", "docs/es", "docs/fr", "i18n", "locale")

COMMENT_SAMPLE_PATTERNS = ("**/*.{js,ts,jsx,tsx,py,java}",)
API_CODE_PATTERNS = ("**/api/**/*.{js,ts,py}", "**/routes/**/*.{js,ts,py}")
_COMMENT_MARKERS = ("//", "/*", "*", "#")

_DOC_FORMATS = {
    "markdown": "**/*.md",
    "restructured-text": "**/*.rst",
    "plain-text": "**/*.txt",
    "html": "**/*.html",
}
_IMAGE_PATTERN = "**/*.{png,jpg,jpeg,gif,svg}"

_GUIDE_RE = re.compile(r"guide|tutorial|manual", re.I)
_ARCHITECTURE_RE = re.compile(r"architecture|design|adr", re.I)
_RUNBOOK_RE = re.compile(r"runbook|playbook|ops|deployment", re.I)
_TOC_RE = re.compile(r"table of contents|toc", re.I)
_CONTENTS_HEADING_RE = re.compile(r"^#+.*contents", re.I | re.M)
_INLINE_CODE_RE = re.compile(r"`[^`\n]+`")

COMMENT_RATIO_THRESHOLD = 0.1


@dataclass(frozen=True)
class DocEvidence:
    """Everything the scoring and gap rules read, gathered in one pass."""

    types: DocumentationTypes
    readme: str
    comment_ratio: float
    has_api_code: bool
    has_deployment_config: bool
    has_contributing: bool
    has_code_of_conduct: bool
    has_changelog: bool


GapRule = Tuple[Callable[[DocEvidence], bool], str]

GAP_RULES: Tuple[GapRule, ...] = (
    (lambda ev: not ev.types.readme, "Missing README file"),
    (
        lambda ev: ev.has_api_code and not ev.types.api_docs,
        "API endpoints detected but no API documentation found",
    ),
    (lambda ev: not ev.types.architecture_docs, "Missing architecture documentation"),
    (
        lambda ev: ev.has_deployment_config and not ev.types.runbooks,
        "Deployment configuration found but no deployment documentation",
    ),
    (lambda ev: not ev.has_contributing, "Missing contributing guidelines"),
    (lambda ev: not ev.has_code_of_conduct, "Missing code of conduct"),
    (lambda ev: not ev.has_changelog, "Missing changelog documentation"),
)

RecommendationRule = Tuple[Callable[[DocEvidence, DocumentationQuality, List[str]], bool], str]

RECOMMENDATION_RULES: Tuple[RecommendationRule, ...] = (
    (
        lambda ev, quality, gaps: quality.completeness < 70,
        "Improve documentation completeness by adding missing sections",
    ),
    (
        lambda ev, quality, gaps: quality.accessibility < 60,
        "Make documentation more accessible with better formatting and examples",
    ),
    (
        lambda ev, quality, gaps: not ev.types.readme,
        "Create a comprehensive README with setup, usage, and contribution guidelines",
    ),
    (
        lambda ev, quality, gaps: not ev.types.api_docs and ev.has_api_code,
        "Generate API documentation using OpenAPI/Swagger",
    ),
    (
        lambda ev, quality, gaps: not ev.types.architecture_docs,
        "Create architecture documentation including system design and decision records",
    ),
    (
        lambda ev, quality, gaps: not ev.types.runbooks,
        "Develop operational runbooks for deployment and troubleshooting",
    ),
    (
        lambda ev, quality, gaps: len(gaps) > 3,
        "Prioritize filling documentation gaps to improve project maintainability",
    ),
)


def estimate_comment_ratio(scanner: EvidenceScanner) -> float:
    """Fraction of sampled source lines that start with a comment marker."""
    total = 0
    comments = 0
    for _, text in scanner.sample(COMMENT_SAMPLE_PATTERNS):
        for line in text.splitlines():
            total += 1
            if line.strip().startswith(_COMMENT_MARKERS):
                comments += 1
    return comments / total if total else 0.0


def coverage_bucket(score: float) -> str:
    if score >= 80:
        return "excellent"
    if score >= 60:
        return "good"
    if score >= 40:
        return "moderate"
    return "poor"


class DocumentationAnalyzer(FacetAnalyzer):
    """Scores documentation presence, completeness, accuracy and accessibility."""

    name = "documentation"

    def analyze(self, scanner: EvidenceScanner, context: FacetContext) -> DocumentationAnalysis:
        evidence = self.collect(scanner)
        quality = DocumentationQuality(
            completeness=self._completeness(scanner, evidence),
            accuracy=self._accuracy(evidence, context),
            accessibility=self._accessibility(scanner, evidence),
        )
        gaps = [text for condition, text in GAP_RULES if condition(evidence)]
        recommendations = [
            text for condition, text in RECOMMENDATION_RULES if condition(evidence, quality, gaps)
        ]

        type_fraction = evidence.types.count() / 6
        quality_fraction = (quality.completeness + quality.accuracy + quality.accessibility) / 300
        overall = (type_fraction * 0.6 + quality_fraction * 0.4) * 100

        return DocumentationAnalysis(
            coverage=coverage_bucket(overall),
            types=evidence.types,
            quality=quality,
            gaps=tuple(gaps),
            recommendations=tuple(recommendations),
            comment_ratio=round(evidence.comment_ratio, 4),
            overall_score=round(overall, 2),
        )

    def collect(self, scanner: EvidenceScanner) -> DocEvidence:
        listing = " ".join(self._doc_dir_entries(scanner))
        comment_ratio = estimate_comment_ratio(scanner)
        readme_path = next((path for path in README_FILES if scanner.exists(path)), None)

        types = DocumentationTypes(
            readme=readme_path is not None,
            api_docs=scanner.any_exists(API_DOC_PATHS),
            user_guides=bool(_GUIDE_RE.search(listing)),
            architecture_docs=bool(_ARCHITECTURE_RE.search(listing))
            or scanner.any_exists(ARCHITECTURE_PATHS),
            runbooks=bool(_RUNBOOK_RE.search(listing)) or scanner.any_exists(OPERATIONAL_PATHS),
            code_comments=comment_ratio > COMMENT_RATIO_THRESHOLD,
        )
        return DocEvidence(
            types=types,
            readme=scanner.read_or_empty(readme_path) if readme_path else "",
            comment_ratio=comment_ratio,
            has_api_code=bool(scanner.find_any(API_CODE_PATTERNS)),
            has_deployment_config=scanner.any_exists(DEPLOYMENT_CONFIG),
            has_contributing=scanner.exists("CONTRIBUTING.md"),
            has_code_of_conduct=scanner.exists("CODE_OF_CONDUCT.md"),
            has_changelog=scanner.any_exists(CHANGELOG_FILES),
        )

    def _doc_dir_entries(self, scanner: EvidenceScanner) -> List[str]:
        entries: List[str] = []
        for directory in DOC_DIRS:
            if not scanner.is_dir(directory):
                continue
            try:
                entries.extend(scanner.list_dir(directory))
            except ScanIncomplete as exc:
                scanner.record(exc)
        return entries

    def _completeness(self, scanner: EvidenceScanner, evidence: DocEvidence) -> int:
        score = 0.0
        readme = evidence.readme.lower()
        if readme:
            found = sum(1 for section in README_SECTIONS if section in readme)
            score += found / len(README_SECTIONS) * 20
        if evidence.types.api_docs:
            score += 25
        score += min(30.0, evidence.comment_ratio * 100)
        if evidence.types.architecture_docs:
            score += 15
        if evidence.types.runbooks:
            score += 10
        return round(score / 100 * 100)

    def _accuracy(self, evidence: DocEvidence, context: FacetContext) -> int:
        score = 70
        readme = evidence.readme.lower()
        names = [name.lower() for name in context.dependencies.all_names]
        if readme and names and contains_any(readme, names):
            score += 10
        return min(100, score)

    def _accessibility(self, scanner: EvidenceScanner, evidence: DocEvidence) -> int:
        score = 0.0
        formats = sum(
            1 for pattern in _DOC_FORMATS.values() if next(scanner.find_files(pattern), None)
        )
        score += min(20.0, formats / 2 * 20)

        readme = evidence.readme
        if _TOC_RE.search(readme) or _CONTENTS_HEADING_RE.search(readme):
            score += 15
        if "```" in readme or len(_INLINE_CODE_RE.findall(readme)) > 5:
            score += 25
        if next(scanner.find_files(_IMAGE_PATTERN), None) is not None:
            score += 20
        if scanner.any_exists(LOCALIZED_DIRS):
            score += 20
        return round(score)


__all__ = [
    "DocumentationAnalyzer",
    "GAP_RULES",
    "RECOMMENDATION_RULES",
    "coverage_bucket",
    "estimate_comment_ratio",
]
