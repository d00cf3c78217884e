"""Deterministic quality checks for synthesized prompts.

Every check reads only the prompt text and the analysis the prompt was
synthesized from, so the same library always validates to the same scores.
Each issue lowers the score by its category weight; prompts scoring below
``OPTIMIZE_BELOW`` also receive a rewritten template that addresses the
issues found.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Sequence, Set, Tuple

from ..logging import get_logger
from ..models import CodebaseAnalysis, GeneratedPrompt, PromptValidation, Record, ValidationIssues

OPTIMIZE_BELOW = 70

ISSUE_WEIGHTS: Dict[str, int] = {
    "clarity": 15,
    "completeness": 12,
    "specificity": 10,
    "actionability": 8,
}

_UNCLEAR_PHRASES = (
    "somehow",
    "maybe",
    "perhaps",
    "might want to",
    "could be",
    "sort of",
    "kind of",
    "basically",
    "just",
    "simply",
    "easily",
)
_JARGON_TERMS = (
    "microservices",
    "containerization",
    "orchestration",
    "middleware",
    "polymorphism",
    "encapsulation",
    "dependency injection",
)
_ESSENTIAL_ELEMENTS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("context", ("current", "existing", "our project", "our codebase")),
    ("objective", ("implement", "create", "build", "develop", "analy")),
    ("requirements", ("requirement", "need", "must", "should")),
    ("constraints", ("consider", "ensure", "follow", "based on")),
    ("output", ("provide", "generate", "create", "output", "deliver")),
)
_SUCCESS_INDICATORS = ("result", "outcome", "success", "complet", "done", "finished")
_GENERIC_TERMS = (
    "something",
    "anything",
    "everything",
    "stuff",
    "things",
    "whatever",
    "somehow",
    "somewhere",
    "appropriate",
    "relevant",
    "suitable",
)
_ACTION_VERBS = (
    "create",
    "implement",
    "build",
    "develop",
    "write",
    "add",
    "update",
    "modify",
    "test",
    "analy",
    "review",
    "optimi",
    "refactor",
)
_CONDITIONAL_PHRASES = (
    "if possible",
    "when appropriate",
    "as needed",
    "if necessary",
    "might need",
    "could consider",
    "potentially",
)
_RESOURCE_INDICATORS = ("tool", "librar", "dependenc", "install", "setup", "set up")
_VALIDATION_INDICATORS = ("test", "verify", "check", "validat", "ensure")

_PLACEHOLDER_RE = re.compile(r"\[([^\]]+)\]")
_SENTENCE_RE = re.compile(r"[.!?]+|\n")
_CITATION_RE = re.compile(r"See (\S+) \(lines")
_MAX_SENTENCE_WORDS = 30


def _has_word(text: str, phrase: str) -> bool:
    return re.search(rf"\b{re.escape(phrase)}\b", text) is not None


def _has_stem(text: str, stem: str) -> bool:
    return re.search(rf"\b{re.escape(stem)}", text) is not None


def _has_any_stem(text: str, stems: Sequence[str]) -> bool:
    return any(_has_stem(text, stem) for stem in stems)


@dataclass(frozen=True)
class LibraryValidation(Record):
    """Validation of every prompt in a library plus library-level advice."""

    score: int
    prompts: Mapping[str, PromptValidation] = field(default_factory=lambda: MappingProxyType({}))
    recommendations: Tuple[str, ...] = ()


class _Findings:
    def __init__(self) -> None:
        self.issues: Dict[str, List[str]] = {name: [] for name in ISSUE_WEIGHTS}
        self.suggestions: List[str] = []
        self.flags: Set[str] = set()

    def add(self, category: str, flag: str, issue: str, suggestion: str) -> None:
        self.issues[category].append(issue)
        self.suggestions.append(suggestion)
        self.flags.add(flag)

    def score(self) -> int:
        penalty = sum(ISSUE_WEIGHTS[name] * len(items) for name, items in self.issues.items())
        return max(0, 100 - penalty)


class PromptValidator:
    """Scores prompts for clarity, completeness, specificity and actionability."""

    def __init__(self, analysis: CodebaseAnalysis) -> None:
        self.analysis = analysis
        self.logger = get_logger("prompting.validator")
        self._languages = tuple(tech.name for tech in analysis.technologies.get("languages", ()))
        self._example_files = {example.file for example in analysis.all_examples()}
        self._known_examples = set(analysis.all_examples())

    def validate(self, prompt: GeneratedPrompt) -> PromptValidation:
        findings = _Findings()
        text = prompt.template
        lowered = text.lower()

        self._check_clarity(text, lowered, findings)
        self._check_completeness(prompt, text, lowered, findings)
        self._check_specificity(prompt, text, lowered, findings)
        self._check_actionability(prompt, text, lowered, findings)

        score = findings.score()
        optimized = self._optimize(prompt, findings) if score < OPTIMIZE_BELOW else None
        return PromptValidation(
            score=score,
            issues=ValidationIssues(**{name: tuple(items) for name, items in findings.issues.items()}),
            suggestions=tuple(findings.suggestions),
            optimized_template=optimized,
        )

    def validate_library(self, prompts: Sequence[GeneratedPrompt]) -> LibraryValidation:
        validations = {prompt.id: self.validate(prompt) for prompt in prompts}
        mean = sum(item.score for item in validations.values()) / len(validations) if validations else 0.0
        score = int(math.floor(mean + 0.5))
        self.logger.debug("Validated %d prompts, overall score %d", len(validations), score)
        return LibraryValidation(
            score=score,
            prompts=MappingProxyType(validations),
            recommendations=tuple(library_recommendations(validations.values(), mean)) if validations else (),
        )

    def _check_clarity(self, text: str, lowered: str, findings: _Findings) -> None:
        for phrase in _UNCLEAR_PHRASES:
            if _has_word(lowered, phrase):
                findings.add(
                    "clarity",
                    "unclear",
                    f'Contains unclear language: "{phrase}"',
                    f'Replace vague terms like "{phrase}" with specific instructions',
                )

        for sentence in _SENTENCE_RE.split(text):
            if len(sentence.split()) > _MAX_SENTENCE_WORDS:
                findings.add(
                    "clarity",
                    "long-sentence",
                    "Contains overly long sentences that may be hard to follow",
                    "Break long sentences into shorter, clearer instructions",
                )
                break

        for term in _JARGON_TERMS:
            if _has_word(lowered, term) and f"{term} (" not in lowered:
                findings.add(
                    "clarity",
                    "jargon",
                    f'Uses technical jargon "{term}" without explanation',
                    f'Provide brief explanation or context for technical terms like "{term}"',
                )

        if "\n1." not in text and "- " not in text and "```" not in text and len(text) > 200:
            findings.add(
                "clarity",
                "structure",
                "Lacks clear structure with numbered lists or bullet points",
                "Use numbered lists or bullet points to structure instructions clearly",
            )

    def _check_completeness(
        self, prompt: GeneratedPrompt, text: str, lowered: str, findings: _Findings
    ) -> None:
        for element, stems in _ESSENTIAL_ELEMENTS:
            if not _has_any_stem(lowered, stems):
                findings.add(
                    "completeness",
                    element,
                    f"Missing {element} information",
                    f"Add clear {element} to help the assistant understand what's needed",
                )

        if not _PLACEHOLDER_RE.search(text):
            findings.add(
                "completeness",
                "placeholders",
                "No placeholders for user customization",
                "Add placeholders like [YOUR REQUIREMENTS] for user customization",
            )

        references = _has_stem(lowered, "example") or _has_word(lowered, "see") or _has_word(lowered, "like")
        if not references and not prompt.context.real_examples:
            findings.add(
                "completeness",
                "examples",
                "Lacks examples or references to existing code",
                "Include examples or references to existing code patterns",
            )

        if not _has_any_stem(lowered, _SUCCESS_INDICATORS):
            findings.add(
                "completeness",
                "success",
                "Missing success criteria or expected outcomes",
                "Add clear success criteria or expected outcomes",
            )

    def _check_specificity(
        self, prompt: GeneratedPrompt, text: str, lowered: str, findings: _Findings
    ) -> None:
        for term in _GENERIC_TERMS:
            if _has_word(lowered, term):
                findings.add(
                    "specificity",
                    "generic",
                    f'Contains generic term: "{term}"',
                    f'Replace generic terms like "{term}" with specific details',
                )

        project_type = self.analysis.structure.type
        project_context = (
            self.analysis.name in text
            or (project_type != "unknown" and project_type in lowered)
            or any(name in text for name in self._languages)
        )
        if not project_context:
            findings.add(
                "specificity",
                "project-context",
                "Lacks project-specific context",
                "Include specific project technologies, patterns, or architecture details",
            )

        file_references = (
            ".js" in text or ".ts" in text or ".py" in text or "/" in text or prompt.context.real_examples
        )
        if not file_references and not prompt.applicable_to_files:
            findings.add(
                "specificity",
                "file-references",
                "Lacks specific file or path references",
                "Include specific file paths or patterns from the codebase",
            )

        main_languages = self._languages[:3]
        if main_languages and not any(name.lower() in lowered for name in main_languages):
            findings.add(
                "specificity",
                "technologies",
                "Not tailored to project technologies",
                f"Include specific instructions for {', '.join(main_languages)}",
            )

        unknown = [example.file for example in prompt.context.real_examples if example not in self._known_examples]
        unknown.extend(path for path in _CITATION_RE.findall(text) if path not in self._example_files)
        for path in dict.fromkeys(unknown):
            findings.add(
                "specificity",
                "ungrounded",
                f"Cites {path}, which is not an example from this analysis",
                "Cite only files that appear in the repository analysis",
            )

    def _check_actionability(
        self, prompt: GeneratedPrompt, text: str, lowered: str, findings: _Findings
    ) -> None:
        if not _has_any_stem(lowered, _ACTION_VERBS):
            findings.add(
                "actionability",
                "verbs",
                "Lacks clear action verbs",
                'Use clear action verbs like "implement", "create", "analyze"',
            )

        numbered = "1." in text or "2." in text
        bullets = "- " in text or "* " in text
        if not numbered and not bullets and len(text) > 300:
            findings.add(
                "actionability",
                "steps",
                "Lacks step-by-step breakdown",
                "Break down complex tasks into numbered steps or bullet points",
            )

        for phrase in _CONDITIONAL_PHRASES:
            if _has_word(lowered, phrase):
                findings.add(
                    "actionability",
                    "conditional",
                    f'Contains conditional language: "{phrase}"',
                    f'Replace conditional phrases like "{phrase}" with definitive instructions',
                )

        if prompt.complexity == "advanced" and not _has_any_stem(lowered, _RESOURCE_INDICATORS):
            findings.add(
                "actionability",
                "resources",
                "Advanced task lacks resource or tool requirements",
                "Specify required tools, libraries, or setup steps",
            )

        if not _has_any_stem(lowered, _VALIDATION_INDICATORS):
            findings.add(
                "actionability",
                "validation",
                "Missing validation or testing steps",
                "Include steps to test or validate the implementation",
            )

    def _optimize(self, prompt: GeneratedPrompt, findings: _Findings) -> str:
        template = prompt.template
        if "structure" in findings.flags:
            template = _add_structure(template)
        if "placeholders" in findings.flags:
            template = _add_placeholder(template)
        if "project-context" in findings.flags:
            languages = ", ".join(self._languages) or "not detected"
            template = (
                f"Working on {self.analysis.name} ({self.analysis.structure.type} project):\n"
                f"- Technologies: {languages}\n"
                f"- Architecture: {self.analysis.structure.architecture}\n\n"
                + template
            )
        if "validation" in findings.flags:
            template = template.rstrip("\n") + (
                "\n\nValidation Steps:\n"
                "1. Test the implementation\n"
                "2. Verify it meets requirements\n"
                "3. Check for any errors or edge cases\n"
            )
        if "examples" in findings.flags and prompt.context.real_examples:
            cited = "\n".join(
                f"- {example.category}: {example.file}" for example in prompt.context.real_examples[:2]
            )
            template = template.rstrip("\n") + f"\n\nExisting Examples:\n{cited}\n"
        return template


def _add_structure(template: str) -> str:
    if "\n1." in template or "- " in template:
        return template
    sentences = [sentence.strip() for sentence in re.split(r"[.!?]+", template) if sentence.strip()]
    if len(sentences) <= 3:
        return template
    return "\n".join(f"{index}. {sentence}" for index, sentence in enumerate(sentences, start=1)) + "\n"


def _add_placeholder(template: str) -> str:
    lines = template.split("\n")
    lines[1:1] = ["", "Requirements: [DESCRIBE YOUR SPECIFIC REQUIREMENTS]", ""]
    return "\n".join(lines)


def library_recommendations(validations: Iterable[PromptValidation], mean: float) -> List[str]:
    """Advice derived from issue counts summed across every validated prompt."""
    totals = {name: 0 for name in ISSUE_WEIGHTS}
    for validation in validations:
        for name in totals:
            totals[name] += len(getattr(validation.issues, name))

    recommendations: List[str] = []
    if totals["clarity"] > totals["completeness"]:
        recommendations.append("Focus on improving prompt clarity: use simpler language and better structure")
    if totals["specificity"] > 5:
        recommendations.append("Add more project-specific context to prompts")
    if totals["actionability"] > 3:
        recommendations.append("Include more step-by-step instructions and validation steps")
    if mean < OPTIMIZE_BELOW:
        recommendations.append("Use the optimized templates provided for low-scoring prompts")
    elif mean < 85:
        recommendations.append("Good prompt quality: focus on addressing the specific issues identified")
    else:
        recommendations.append("Excellent prompt quality: use these prompts as templates for future ones")
    return recommendations


__all__ = [
    "ISSUE_WEIGHTS",
    "LibraryValidation",
    "OPTIMIZE_BELOW",
    "PromptValidator",
    "library_recommendations",
]
