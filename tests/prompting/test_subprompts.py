"""Tests for sub-prompt decomposition."""

from __future__ import annotations

from dataclasses import replace

import pytest

from repoprompt.models import AutomationInfo, GeneratedPrompt, PromptContext, PromptUsage
from repoprompt.prompting import SubPromptGenerator
from repoprompt.prompting.subprompts import automation_level, should_decompose, step_context
from tests._fixtures.sample_analysis import FACETS, build_analysis


def _prompt(category: str, complexity: str, prompt_id: str = "sample") -> GeneratedPrompt:
    return GeneratedPrompt(
        id=prompt_id,
        title="Sample Task",
        category=category,
        subcategory="sample",
        description="Do the sample task",
        template="Implement the sample task.\n",
        context=PromptContext(),
        usage=PromptUsage(when="Always"),
        complexity=complexity,
        estimated_time_to_complete="1 hour",
    )


def test_intermediate_prompt_gets_three_ordered_steps() -> None:
    steps = SubPromptGenerator(build_analysis()).generate(_prompt("implementation", "intermediate"))

    assert [step.id for step in steps] == ["sample-setup", "sample-implementation", "sample-validation"]
    assert [step.order for step in steps] == [1, 2, 3]
    assert {step.parent_id for step in steps} == {"sample"}
    assert "Architecture: monolith" in steps[1].template
    assert "Patterns to Follow: Express Middleware Pattern" in steps[1].template
    assert steps[0].template.startswith("Setup and preparation for: Sample Task\n")
    assert steps[0].template.endswith("\n")


def test_advanced_phase_prompt_appends_phase_steps() -> None:
    steps = SubPromptGenerator(build_analysis(facets=FACETS)).generate(
        _prompt("governance", "advanced", prompt_id="governance-compliance")
    )

    assert [step.id for step in steps] == [
        "governance-compliance-planning",
        "governance-compliance-implementation",
        "governance-compliance-integration",
        "governance-compliance-review",
        "governance-compliance-compliance-audit",
        "governance-compliance-compliance-plan",
    ]
    assert [step.order for step in steps] == list(range(1, 7))
    planning = steps[0].template
    assert "Project: shop" in planning
    assert "Technologies: JavaScript" in planning
    assert "Quality Score: 80/100" in planning
    assert "Current Standards: None identified" in steps[4].template
    assert "Existing Policies: None" in steps[5].template


def test_beginner_steps_carry_the_prompt_description() -> None:
    steps = SubPromptGenerator(build_analysis()).generate(_prompt("documentation", "beginner"))

    assert [step.title for step in steps] == [
        "Understanding the Task",
        "Research & Examples",
        "Step-by-Step Implementation",
    ]
    assert "Task Context: Do the sample task" in steps[0].template


def test_workflow_and_incident_steps_use_facet_evidence() -> None:
    generator = SubPromptGenerator(build_analysis(facets=FACETS))

    workflow = generator.generate(_prompt("workflow", "intermediate"))
    incident = generator.generate(_prompt("incident", "intermediate"))

    audit = workflow[3].template
    assert "Current CI/CD Setup: None" in audit
    assert "Automation Level: Low" in audit
    assert "Our Current Workflow: CI/CD: None, Automation: Low" in workflow[4].template
    assert "System Type: fullstack" in incident[3].template
    assert "Critical Components: Potential single points of failure in architecture" in incident[3].template


def test_business_steps_use_business_evidence() -> None:
    steps = SubPromptGenerator(build_analysis(facets=FACETS)).generate(_prompt("business", "beginner"))

    analysis_step, strategy_step = steps[3], steps[4]
    assert analysis_step.template.startswith("Analyze business opportunities for our Software Product:")
    assert "Current Focus: General Users" in analysis_step.template
    assert "Identified Opportunities: add coupon support" in analysis_step.template
    assert "Key Constraints: Monolithic architecture may limit scalability" in strategy_step.template


def test_missing_facets_fall_back_to_placeholders() -> None:
    context = step_context(build_analysis())

    assert context["cicd_platforms"] == "Not detected"
    assert context["automation_level"] == "Unknown"
    assert context["workflow_summary"] == "No workflow analysis available"
    assert context["risk_areas"] == "To be identified"
    assert context["standards"] == "None identified"
    assert context["data_sources"] == "Application logs and monitoring"
    assert step_context(build_analysis(facets=FACETS))["data_sources"] == "Dependency analysis"


def test_automation_level_thresholds() -> None:
    analysis = build_analysis(facets=FACETS)

    def with_flags(*flags: bool):
        workflow = replace(FACETS["workflow"], automation=AutomationInfo(*flags))
        return replace(analysis, workflow=workflow)

    assert automation_level(analysis) == "Low"
    assert automation_level(with_flags(True, True, True, False, False)) == "Medium"
    assert automation_level(with_flags(True, True, True, True, False)) == "High"
    assert automation_level(build_analysis()) == "Unknown"


@pytest.mark.parametrize(
    ("category", "complexity", "expected"),
    [
        ("implementation", "advanced", True),
        ("workflow", "intermediate", True),
        ("incident", "beginner", True),
        ("testing", "intermediate", False),
        ("business", "intermediate", False),
    ],
)
def test_should_decompose(category: str, complexity: str, expected: bool) -> None:
    assert should_decompose(_prompt(category, complexity)) is expected
