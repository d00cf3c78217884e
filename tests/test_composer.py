"""Tests for analysis composition and insight derivation."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from repoprompt.composer import AnalysisComposer, format_timestamp
from repoprompt.models import (
    AutomationInfo,
    BranchingInfo,
    CICDInfo,
    CodeQualityMetrics,
    CollaborationInfo,
    FileNode,
    PatternDetection,
    ProjectStructure,
    Technology,
    WorkflowAnalysis,
)

FIXED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _workflow(has_ci: bool) -> WorkflowAnalysis:
    return WorkflowAnalysis(
        cicd=CICDInfo(has_ci=has_ci),
        branching=BranchingInfo(),
        automation=AutomationInfo(),
        collaboration=CollaborationInfo(),
    )


def _compose(**overrides):
    options = {
        "name": "demo",
        "path": "/tmp/demo",
        "technologies": {"languages": [Technology("JavaScript", 0.6)], "tools": []},
        "structure": ProjectStructure(type="backend"),
        "file_tree": FileNode(name="demo", path="", type="directory", importance="high"),
        "examples": {"apis": []},
        "patterns": [],
        "metrics": CodeQualityMetrics(comment_ratio=0.05, maintainability_index=90),
    }
    options.update(overrides)
    return AnalysisComposer(clock=lambda: FIXED).compose(**options)


def test_compose_stamps_time_and_keeps_missing_facets_absent() -> None:
    analysis = _compose()

    assert analysis.analyzed_at == "2024-05-01T12:00:00Z"
    assert analysis.documentation is None
    assert analysis.workflow is None
    assert analysis.to_dict()["documentation"] is None


def test_insights_for_javascript_backend_without_tooling() -> None:
    insights = _compose().insights

    assert "High maintainability index indicates well-structured code" in insights.strengths
    assert "Add more code comments to improve maintainability" in insights.improvements
    assert "Implement consistent error handling patterns" in insights.improvements
    assert "Add ESLint for code quality and consistency" in insights.opportunities
    assert "Add Prettier for consistent code formatting" in insights.opportunities
    assert "Lack of testing framework increases risk of bugs" in insights.risks


def test_missing_ci_insight_requires_workflow_facet() -> None:
    ci_text = "Implement CI/CD pipeline for automated testing and deployment"

    assert ci_text not in _compose().insights.improvements

    with_workflow = _compose(facets={"workflow": _workflow(has_ci=False)})
    assert ci_text in with_workflow.insights.improvements
    assert (
        "Automate API contract and integration tests in a CI pipeline"
        in with_workflow.insights.opportunities
    )


def test_python_repository_gets_no_javascript_tooling_advice() -> None:
    insights = _compose(technologies={"languages": [Technology("Python", 0.6)]}).insights

    assert "Add ESLint for code quality and consistency" not in insights.opportunities


def test_error_pattern_and_test_framework_suppress_advice() -> None:
    analysis = _compose(
        patterns=[PatternDetection("Error Handling Middleware", "d", 2)],
        structure=ProjectStructure(type="backend", test_frameworks=("Jest",)),
    )

    assert "Implement consistent error handling patterns" not in analysis.insights.improvements
    assert "Lack of testing framework increases risk of bugs" not in analysis.insights.risks


def test_truncated_scan_surfaces_as_risk() -> None:
    analysis = _compose(scan_issues=["repo: scan truncated: cancelled", "repo: scan truncated: cancelled"])

    assert analysis.scan_issues == ("repo: scan truncated: cancelled",)
    assert "Repository scan was truncated; findings may be incomplete" in analysis.insights.risks


def test_unknown_facet_is_rejected() -> None:
    with pytest.raises(ValueError):
        _compose(facets={"astrology": object()})


def test_composed_collections_are_read_only() -> None:
    analysis = _compose()

    with pytest.raises(TypeError):
        analysis.technologies["languages"] = ()  # type: ignore[index]


def test_format_timestamp_assumes_utc_for_naive_values() -> None:
    assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05Z"
