"""Tests for prompt quality validation."""

from __future__ import annotations

from repoprompt.models import CodeExample, GeneratedPrompt, PromptContext, PromptUsage
from repoprompt.prompting import PromptValidator
from tests._fixtures.sample_analysis import build_analysis

CLEAR_TEMPLATE = (
    "Implement the cart feature in our JavaScript codebase for shop.\n"
    "Requirements: [YOUR REQUIREMENTS]\n"
    "Ensure you follow the existing patterns, see src/routes/cart.js.\n"
    "1. Provide the code\n"
    "2. Test the result\n"
)


def _prompt(
    template: str,
    *,
    prompt_id: str = "implementation-cart",
    complexity: str = "intermediate",
    examples=(),
    files=("src/**",),
) -> GeneratedPrompt:
    return GeneratedPrompt(
        id=prompt_id,
        title="Cart feature",
        category="implementation",
        subcategory="feature",
        description="Build the cart",
        template=template,
        context=PromptContext(real_examples=tuple(examples)),
        usage=PromptUsage(when="Adding cart behaviour"),
        complexity=complexity,
        estimated_time_to_complete="1 hour",
        applicable_to_files=tuple(files),
    )


def test_clear_grounded_prompt_scores_full_marks() -> None:
    validation = PromptValidator(build_analysis()).validate(_prompt(CLEAR_TEMPLATE))

    assert validation.score == 100
    assert validation.issues.count() == 0
    assert validation.suggestions == ()
    assert validation.optimized_template is None


def test_vague_prompt_collects_issues_and_is_rewritten() -> None:
    prompt = _prompt("Maybe just do something.", complexity="advanced", files=())

    validation = PromptValidator(build_analysis()).validate(prompt)

    assert validation.score == 0
    assert validation.issues.clarity == (
        'Contains unclear language: "maybe"',
        'Contains unclear language: "just"',
    )
    assert len(validation.issues.completeness) == 8
    assert validation.issues.specificity == (
        'Contains generic term: "something"',
        "Lacks project-specific context",
        "Lacks specific file or path references",
        "Not tailored to project technologies",
    )
    assert validation.issues.actionability == (
        "Lacks clear action verbs",
        "Advanced task lacks resource or tool requirements",
        "Missing validation or testing steps",
    )
    assert len(validation.suggestions) == validation.issues.count() == 17
    assert validation.optimized_template == (
        "Working on shop (fullstack project):\n"
        "- Technologies: JavaScript\n"
        "- Architecture: monolith\n"
        "\n"
        "Maybe just do something.\n"
        "\n"
        "Requirements: [DESCRIBE YOUR SPECIFIC REQUIREMENTS]\n"
        "\n"
        "Validation Steps:\n"
        "1. Test the implementation\n"
        "2. Verify it meets requirements\n"
        "3. Check for any errors or edge cases\n"
    )


def test_citations_outside_the_analysis_are_flagged() -> None:
    ghost = CodeExample("src/ghost.js", 1, 3, "ghost()", "api", "simple")
    template = CLEAR_TEMPLATE + "See src/routes/cart.js (lines 2-30)\nSee src/ghost.js (lines 1-3)\n"

    validation = PromptValidator(build_analysis()).validate(_prompt(template, examples=[ghost]))

    assert validation.issues.specificity == ("Cites src/ghost.js, which is not an example from this analysis",)
    assert validation.score == 90


def test_jargon_needs_an_explanation() -> None:
    validator = PromptValidator(build_analysis())

    bare = validator.validate(_prompt(CLEAR_TEMPLATE + "Add logging middleware.\n"))
    explained = validator.validate(_prompt(CLEAR_TEMPLATE + "Add logging middleware (request wrappers).\n"))

    assert bare.issues.clarity == ('Uses technical jargon "middleware" without explanation',)
    assert bare.score == 85
    assert explained.score == 100


def test_phrases_match_whole_words_only() -> None:
    validation = PromptValidator(build_analysis()).validate(_prompt(CLEAR_TEMPLATE + "Adjust the totals.\n"))

    assert validation.score == 100


def test_library_score_is_the_rounded_mean() -> None:
    validator = PromptValidator(build_analysis())
    prompts = [
        _prompt(CLEAR_TEMPLATE, prompt_id="clear"),
        _prompt("Maybe just do something.", prompt_id="vague", complexity="advanced", files=()),
    ]

    result = validator.validate_library(prompts)

    assert result.score == 50
    assert list(result.prompts) == ["clear", "vague"]
    assert result.prompts["clear"].score == 100
    assert result.recommendations == ("Use the optimized templates provided for low-scoring prompts",)


def test_empty_library_has_no_recommendations() -> None:
    result = PromptValidator(build_analysis()).validate_library([])

    assert result.score == 0
    assert result.recommendations == ()
    assert result.to_dict() == {"score": 0, "prompts": {}, "recommendations": []}


def test_validation_is_deterministic() -> None:
    analysis = build_analysis()
    prompt = _prompt("Maybe just do something.", complexity="advanced", files=())

    assert PromptValidator(analysis).validate(prompt) == PromptValidator(analysis).validate(prompt)
