"""Binds catalog templates to evidence from a composed analysis."""

from __future__ import annotations

import hashlib
import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..errors import SynthesisSkip
from ..logging import get_logger
from ..models import (
    CodebaseAnalysis,
    CodeExample,
    GeneratedPrompt,
    LibraryInstructions,
    LibraryMetadata,
    PromptContext,
    PromptLibrary,
    PromptUsage,
    Technology,
    freeze,
)
from .catalog import CATALOG, PromptTemplate
from .constants import (
    ANALYSIS_ID_LENGTH,
    LIBRARY_VERSION,
    MAX_REAL_EXAMPLES,
    MAX_STRUCTURE_ENTRIES,
    MAX_TECHNOLOGIES,
    PHASES,
)
from .subprompts import SubPromptGenerator, should_decompose
from .validator import LibraryValidation, PromptValidator

_MAIN_TECHNOLOGY_CATEGORIES = ("languages", "frameworks", "tools")
_UI_FRAMEWORKS = ("React", "Vue.js", "Angular", "Svelte", "React Native")

SlotBinder = Callable[[CodebaseAnalysis, Sequence[CodeExample]], Any]


def main_technologies(analysis: CodebaseAnalysis) -> List[Technology]:
    """Languages, frameworks and tools ordered by descending confidence then name."""
    pool = [
        tech
        for category in _MAIN_TECHNOLOGY_CATEGORIES
        for tech in analysis.technologies.get(category, ())
    ]
    return sorted(pool, key=lambda tech: (-tech.confidence, tech.name))


def best_examples(analysis: CodebaseAnalysis, categories: Sequence[str]) -> Tuple[CodeExample, ...]:
    wanted = set(categories)
    matches = [example for example in analysis.all_examples() if example.category in wanted]
    matches.sort(key=lambda item: (-item.score, item.file, item.start_line))
    return tuple(matches[:MAX_REAL_EXAMPLES])


def file_structure_overview(analysis: CodebaseAnalysis) -> str:
    directories = [
        child.name
        for child in analysis.file_tree.children
        if child.type == "directory" and child.importance == "high"
    ]
    return "\n".join(f"- {name}/" for name in directories[:MAX_STRUCTURE_ENTRIES])


def code_conventions(analysis: CodebaseAnalysis) -> Tuple[str, ...]:
    languages = {tech.name for tech in analysis.technologies.get("languages", ())}
    tools = {tech.name for tech in analysis.technologies.get("tools", ())}
    conventions: List[str] = []
    if "TypeScript" in languages:
        conventions.append("TypeScript with strict typing")
    if "ESLint" in tools:
        conventions.append("ESLint for code quality")
    if "Prettier" in tools:
        conventions.append("Prettier for code formatting")
    if analysis.structure.test_frameworks:
        conventions.append(f"{', '.join(analysis.structure.test_frameworks)} for automated tests")
    if analysis.structure.package_manager != "unknown":
        conventions.append(f"{analysis.structure.package_manager} for package management")
    return tuple(conventions)


def framework_name(analysis: CodebaseAnalysis) -> str:
    frameworks = [tech.name for tech in analysis.technologies.get("frameworks", ())]
    for name in _UI_FRAMEWORKS:
        if name in frameworks:
            return name
    if frameworks:
        return frameworks[0]
    languages = analysis.technologies.get("languages", ())
    return languages[0].name if languages else "UI"


def analysis_id(analysis: CodebaseAnalysis) -> str:
    payload = json.dumps(analysis.to_dict(), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:ANALYSIS_ID_LENGTH]


def _first(items: Sequence[Any]) -> Any:
    return items[0] if items else None


SLOT_BINDERS: Dict[str, SlotBinder] = {
    "technology": lambda analysis, examples: _first(main_technologies(analysis)),
    "example": lambda analysis, examples: _first(examples),
    "pattern": lambda analysis, examples: _first(analysis.patterns),
    "structure": lambda analysis, examples: file_structure_overview(analysis) or None,
    "documentation": lambda analysis, examples: analysis.documentation,
    "workflow": lambda analysis, examples: analysis.workflow,
    "dependencies": lambda analysis, examples: analysis.dependencies,
    "incident": lambda analysis, examples: analysis.incident,
    "governance": lambda analysis, examples: analysis.governance,
    "business": lambda analysis, examples: analysis.business,
}


class PromptSynthesizer:
    """Renders every applicable catalog template against one analysis.

    Synthesis is stateless: the same analysis always yields the same ordered
    prompts. A template whose required slot has no evidence is skipped.
    Advanced, workflow and incident prompts are decomposed into sub-prompts,
    and every prompt is scored by ``PromptValidator`` unless disabled.
    """

    def __init__(
        self,
        catalog: Sequence[PromptTemplate] = CATALOG,
        templates_dir: Path | None = None,
        *,
        decompose: bool = True,
        validate: bool = True,
    ) -> None:
        self.catalog = tuple(catalog)
        self.decompose = decompose
        self.validate = validate
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = self._create_env(self.templates_dir)
        self.logger = get_logger("prompting")

    def synthesize(self, analysis: CodebaseAnalysis) -> PromptLibrary:
        technologies = tuple(tech.name for tech in main_technologies(analysis)[:MAX_TECHNOLOGIES])
        shared = {
            "analysis": analysis,
            "repo_name": analysis.name,
            "project": analysis.structure,
            "quality": analysis.quality,
            "insights": analysis.insights,
            "technologies": technologies,
            "patterns": tuple(pattern.name for pattern in analysis.patterns),
            "file_structure": file_structure_overview(analysis),
            "conventions": code_conventions(analysis),
            "framework": framework_name(analysis),
            "databases": tuple(tech.name for tech in analysis.technologies.get("databases", ())),
        }

        grouped: Dict[str, List[GeneratedPrompt]] = {phase: [] for phase in PHASES}
        skipped: List[str] = []
        for template in self.catalog:
            if not template.condition(analysis):
                continue
            try:
                prompt = self._render(template, analysis, shared)
            except SynthesisSkip as exc:
                self.logger.debug("Skipping prompt %s: %s", template.id, exc)
                skipped.append(template.id)
                continue
            grouped.setdefault(template.phase, []).append(prompt)

        categories = {phase: prompts for phase, prompts in grouped.items() if prompts}
        if self.decompose:
            generator = SubPromptGenerator(analysis)
            categories = {
                phase: [
                    replace(prompt, sub_prompts=generator.generate(prompt)) if should_decompose(prompt) else prompt
                    for prompt in prompts
                ]
                for phase, prompts in categories.items()
            }
        validation: LibraryValidation | None = None
        if self.validate:
            validation = PromptValidator(analysis).validate_library(
                [prompt for prompts in categories.values() for prompt in prompts]
            )
            categories = {
                phase: [replace(prompt, validation=validation.prompts[prompt.id]) for prompt in prompts]
                for phase, prompts in categories.items()
            }
        total = sum(len(prompts) for prompts in categories.values())
        return PromptLibrary(
            metadata=LibraryMetadata(
                repo_name=analysis.name,
                generated_at=analysis.analyzed_at,
                version=LIBRARY_VERSION,
                total_prompts=total,
                analysis_id=analysis_id(analysis),
                skipped=tuple(skipped),
                validation_score=validation.score if validation else None,
                validation_recommendations=validation.recommendations if validation else (),
            ),
            categories=freeze(categories),
            instructions=self._instructions(analysis, technologies),
        )

    def _render(
        self, template: PromptTemplate, analysis: CodebaseAnalysis, shared: Dict[str, Any]
    ) -> GeneratedPrompt:
        examples = best_examples(analysis, template.example_categories)
        slots = {name: binder(analysis, examples) for name, binder in SLOT_BINDERS.items()}
        for slot in template.required_slots:
            if slots.get(slot) is None:
                raise SynthesisSkip(template.id, slot)

        body = self._env.get_template(template.template).render(
            **shared, **slots, examples=examples
        )
        return GeneratedPrompt(
            id=template.id,
            title=template.title.format(name=analysis.name, framework=shared["framework"]),
            category=template.phase,
            subcategory=template.subcategory,
            description=template.description,
            template=body.strip() + "\n",
            context=PromptContext(
                real_examples=examples,
                patterns=shared["patterns"],
                technologies=shared["technologies"],
                file_structure=shared["file_structure"],
                conventions=shared["conventions"],
            ),
            usage=PromptUsage(
                when=template.when,
                triggers=template.triggers,
                related_prompts=template.related_prompts,
                expected_outcome=template.expected_outcome,
            ),
            complexity=template.complexity,
            estimated_time_to_complete=template.estimated_time,
            prerequisites=template.prerequisites,
            applicable_to_files=template.applicable_to_files,
        )

    @staticmethod
    def _instructions(analysis: CodebaseAnalysis, technologies: Sequence[str]) -> LibraryInstructions:
        setup = f"These prompts are specifically designed for {analysis.name}"
        if technologies:
            setup += f" using {', '.join(technologies[:3])}"
        cited = sorted({example.file for example in analysis.all_examples()})[:3]
        examples = ["Each prompt includes real examples from your codebase and follows your established patterns."]
        examples.extend(f"Cited source: {path}" for path in cited)
        return LibraryInstructions(
            setup=setup + ".",
            usage=(
                "Copy any prompt, replace the bracketed placeholders with your specific "
                "requirements, and paste it into your coding assistant."
            ),
            examples=tuple(examples),
        )

    @staticmethod
    def _create_env(templates_dir: Path) -> Environment:
        directories = [str(templates_dir)]
        default_dir = str(Path(__file__).with_name("templates"))
        if default_dir not in directories:
            directories.append(default_dir)
        return Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )


__all__ = [
    "PromptSynthesizer",
    "SLOT_BINDERS",
    "analysis_id",
    "best_examples",
    "code_conventions",
    "file_structure_overview",
    "main_technologies",
]
