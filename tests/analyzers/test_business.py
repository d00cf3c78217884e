"""Tests for the business facet."""

from __future__ import annotations

from repoprompt.analyzers.business import (
    MARKETS,
    OPTIMIZATIONS,
    RISK_LIMIT,
    BusinessAnalyzer,
    extract_bullets,
    extract_sections,
)
from tests._fixtures.repo_builder import RepoBuilder

README = """
# ShopCart

An online store for independent sellers.

## Problem

- Independent sellers struggle to take payments online
- Checkout flows are hard to build correctly

## Features

- Drag and drop storefront builder for merchants
"""


def _analyze(repo_builder: RepoBuilder):
    scanner = repo_builder.scanner()
    return BusinessAnalyzer().analyze(scanner, repo_builder.context(scanner))


def test_empty_repository_falls_back_to_defaults(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/index.js": "export const a = 1\n"})

    result = _analyze(repo_builder)

    assert result.domain.industry == "Technology"
    assert result.domain.business_model == "Software Product"
    assert result.domain.target_audience == "General Users"
    assert result.gaps == (
        "No problem statement found in project documentation",
        "No feature or solution summary found in project documentation",
    )
    assert result.opportunities.integrations == ()
    assert result.opportunities.optimizations == OPTIMIZATIONS
    assert result.opportunities.markets == MARKETS[:4]


def test_readme_drives_domain_and_value_proposition(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"README.md": README})

    result = _analyze(repo_builder)

    assert result.domain.industry == "E-commerce"
    assert result.value.problems == (
        "Independent sellers struggle to take payments online",
        "Checkout flows are hard to build correctly",
    )
    assert result.value.solutions == ("Drag and drop storefront builder for merchants",)
    assert result.gaps == ()
    assert "Highlight what differentiates the project from alternatives" in result.recommendations


def test_feature_todos_and_integrations(repo_builder: RepoBuilder) -> None:
    repo_builder.write_json("package.json", {"dependencies": {"stripe": "^14.0.0", "typescript": "^5.3.0"}})
    repo_builder.write({"src/cart.js": "// TODO: add coupon support\n// TODO: fix rounding\n"})

    result = _analyze(repo_builder)

    assert result.opportunities.features == ("add coupon support",)
    assert result.opportunities.integrations == (
        "Payment processing with additional providers (PayPal, Square)",
        "API marketplace listings for wider reach",
        "Webhook integration for real-time data sync",
    )
    assert result.value.advantages == ("Type-safe development with TypeScript reduces bugs",)
    assert "Prioritize feature TODOs that align with the product roadmap" in result.recommendations


def test_risks_share_one_budget_filled_technical_first(repo_builder: RepoBuilder) -> None:
    repo_builder.write_json(
        "package.json", {"dependencies": {f"pkg-{index}": "^2.0.0" for index in range(60)}}
    )

    risks = _analyze(repo_builder).risks

    assert risks.technical[0] == "High dependency count increases security and maintenance risks"
    assert len(risks.technical) == 4
    assert len(risks.market) == 4
    assert risks.operational == ()
    assert len(risks.technical) + len(risks.market) + len(risks.operational) == RISK_LIMIT


def test_extract_sections_and_bullets() -> None:
    content = "# Intro\n## Benefits\n- Saves hours every week\n- short\n1. Numbered benefit item\n## Next\n- ignored entry here\n"

    sections = extract_sections(content, ("benefits",))

    assert len(sections) == 1
    assert extract_bullets(sections[0]) == ["Saves hours every week", "Numbered benefit item"]
