"""Merge analyzer outputs into one immutable ``CodebaseAnalysis``."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from typing import Any, Callable, Iterable, Mapping, Tuple

from .models import (
    CodebaseAnalysis,
    CodeExample,
    CodeQualityMetrics,
    FileNode,
    Insights,
    PatternDetection,
    ProjectStructure,
    Technology,
    freeze,
)

Clock = Callable[[], datetime]
InsightRule = Tuple[str, Callable[[CodebaseAnalysis], bool], str]

FACET_SLOTS = ("documentation", "workflow", "dependencies", "incident", "governance", "business")
_JS_LANGUAGES = {"JavaScript", "TypeScript"}


def _technology_names(analysis: CodebaseAnalysis, *categories: str) -> set[str]:
    return {
        tech.name
        for category in categories
        for tech in analysis.technologies.get(category, ())
    }


def _has_pattern(analysis: CodebaseAnalysis, fragment: str) -> bool:
    return any(fragment in pattern.name for pattern in analysis.patterns)


def _uses_javascript(analysis: CodebaseAnalysis) -> bool:
    return bool(_JS_LANGUAGES & _technology_names(analysis, "languages"))


def _has_api_code(analysis: CodebaseAnalysis) -> bool:
    return bool(analysis.examples.get("apis")) or analysis.structure.type in ("backend", "fullstack")


def _missing_ci(analysis: CodebaseAnalysis) -> bool:
    return analysis.workflow is not None and not analysis.workflow.cicd.has_ci


def _has_test_framework(analysis: CodebaseAnalysis) -> bool:
    if analysis.structure.test_frameworks:
        return True
    names = _technology_names(analysis, "tools", "libraries")
    return bool(names & {"Jest", "Vitest", "Cypress", "Playwright", "pytest", "Testing"})


# (bucket, condition, text); evaluated in order, each text emitted at most once
INSIGHT_RULES: Tuple[InsightRule, ...] = (
    # strengths
    (
        "strengths",
        lambda a: a.quality.comment_ratio > 0.15,
        "Good code documentation with adequate comments",
    ),
    (
        "strengths",
        lambda a: a.quality.maintainability_index > 75,
        "High maintainability index indicates well-structured code",
    ),
    (
        "strengths",
        lambda a: "TypeScript" in _technology_names(a, "languages", "tools"),
        "TypeScript usage provides type safety and better tooling",
    ),
    (
        "strengths",
        lambda a: _has_pattern(a, "Test"),
        "Comprehensive testing patterns indicate good software practices",
    ),
    (
        "strengths",
        lambda a: a.documentation is not None and a.documentation.coverage == "excellent",
        "Excellent documentation coverage supports onboarding and maintenance",
    ),
    (
        "strengths",
        lambda a: a.workflow is not None and a.workflow.cicd.has_ci and a.workflow.cicd.has_cd,
        "Automated CI/CD pipeline covers both integration and delivery",
    ),
    # improvements
    (
        "improvements",
        lambda a: a.quality.comment_ratio < 0.1,
        "Add more code comments to improve maintainability",
    ),
    (
        "improvements",
        lambda a: a.quality.cyclomatic_complexity > 10,
        "Reduce cyclomatic complexity by breaking down large functions",
    ),
    (
        "improvements",
        lambda a: a.quality.duplicate_code_percentage > 15,
        "Reduce code duplication by extracting common functionality",
    ),
    (
        "improvements",
        lambda a: not _has_pattern(a, "Error"),
        "Implement consistent error handling patterns",
    ),
    (
        "improvements",
        _missing_ci,
        "Implement CI/CD pipeline for automated testing and deployment",
    ),
    (
        "improvements",
        lambda a: a.documentation is not None and a.documentation.coverage == "poor",
        "Raise documentation coverage, starting with the README and architecture notes",
    ),
    # opportunities
    (
        "opportunities",
        lambda a: _uses_javascript(a) and "ESLint" not in _technology_names(a, "tools"),
        "Add ESLint for code quality and consistency",
    ),
    (
        "opportunities",
        lambda a: _uses_javascript(a) and "Prettier" not in _technology_names(a, "tools"),
        "Add Prettier for consistent code formatting",
    ),
    (
        "opportunities",
        lambda a: "React" in _technology_names(a, "frameworks") and not _has_pattern(a, "Hook"),
        "Consider using custom hooks for reusable stateful logic",
    ),
    (
        "opportunities",
        lambda a: _missing_ci(a) and _has_api_code(a),
        "Automate API contract and integration tests in a CI pipeline",
    ),
    # risks
    (
        "risks",
        lambda a: a.quality.maintainability_index < 50,
        "Low maintainability index may lead to technical debt",
    ),
    (
        "risks",
        lambda a: a.quality.cognitive_complexity > 15,
        "High cognitive complexity makes code difficult to understand",
    ),
    (
        "risks",
        lambda a: not _has_test_framework(a),
        "Lack of testing framework increases risk of bugs",
    ),
    (
        "risks",
        lambda a: len(a.all_technologies()) > 10,
        "Large number of technologies may indicate over-engineering",
    ),
    (
        "risks",
        lambda a: a.dependencies is not None and a.dependencies.security.risk_level == "critical",
        "Critical dependency vulnerabilities require immediate remediation",
    ),
    (
        "risks",
        lambda a: any("scan truncated" in issue for issue in a.scan_issues),
        "Repository scan was truncated; findings may be incomplete",
    ),
)


def derive_insights(
    analysis: CodebaseAnalysis, rules: Iterable[InsightRule] = INSIGHT_RULES
) -> Insights:
    buckets: dict[str, list[str]] = {
        "strengths": [],
        "improvements": [],
        "opportunities": [],
        "risks": [],
    }
    for bucket, condition, text in rules:
        if condition(analysis) and text not in buckets[bucket]:
            buckets[bucket].append(text)
    return Insights(**{key: tuple(values) for key, values in buckets.items()})


def utc_now() -> datetime:
    return datetime.now(UTC)


def format_timestamp(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat().replace("+00:00", "Z")


class AnalysisComposer:
    """Pure merge of analyzer outputs plus rule-based insight derivation."""

    def __init__(self, clock: Clock | None = None, rules: Iterable[InsightRule] = INSIGHT_RULES) -> None:
        self.clock = clock or utc_now
        self.rules = tuple(rules)

    def compose(
        self,
        *,
        name: str,
        path: str,
        technologies: Mapping[str, Iterable[Technology]],
        structure: ProjectStructure,
        file_tree: FileNode,
        examples: Mapping[str, Iterable[CodeExample]],
        patterns: Iterable[PatternDetection],
        metrics: CodeQualityMetrics,
        facets: Mapping[str, Any] | None = None,
        scan_issues: Iterable[str] = (),
    ) -> CodebaseAnalysis:
        facets = facets or {}
        unknown = set(facets) - set(FACET_SLOTS)
        if unknown:
            raise ValueError(f"Unknown facet records: {', '.join(sorted(unknown))}")

        draft = CodebaseAnalysis(
            name=name,
            path=path,
            analyzed_at=format_timestamp(self.clock()),
            technologies=freeze(technologies),
            structure=structure,
            file_tree=file_tree,
            examples=freeze(examples),
            patterns=tuple(patterns),
            quality=metrics,
            insights=Insights(),
            scan_issues=tuple(sorted(set(scan_issues))),
            **{slot: facets.get(slot) for slot in FACET_SLOTS},
        )
        return replace(draft, insights=derive_insights(draft, self.rules))


__all__ = [
    "AnalysisComposer",
    "FACET_SLOTS",
    "INSIGHT_RULES",
    "derive_insights",
    "format_timestamp",
]
