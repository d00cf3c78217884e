"""Categorized, ranked code excerpts cited by analysis and prompts."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..config import AnalysisConfig
from ..logging import get_logger
from ..models import CodeExample, freeze
from ..repo_scanner import EvidenceScanner
from .quality import excerpt, line_of

TEST_EXCLUDES = ("**/*.test.*", "**/*.spec.*", "**/test_*.py", "**/*_test.py")

_REACT_COMPONENT = re.compile(
    r"export\s+(?:default\s+)?(?:function|const)\s+[A-Z][a-zA-Z]*"
    r"|function\s+[A-Z][a-zA-Z]*\s*\("
    r"|class\s+[A-Z][a-zA-Z]*\s+extends"
)
_VUE_COMPONENT = re.compile(r"<script[^>]*>|export\s+default\s*\{")
_FUNCTION_DECLARATIONS = (
    re.compile(r"export\s+(?:async\s+)?function\s+([a-zA-Z_$][a-zA-Z0-9_$]*)\s*\("),
    re.compile(r"export\s+const\s+([a-zA-Z_$][a-zA-Z0-9_$]*)\s*=\s*(?:async\s+)?\("),
    re.compile(r"(?:async\s+)?function\s+([a-zA-Z_$][a-zA-Z0-9_$]*)\s*\("),
    re.compile(r"const\s+([a-zA-Z_$][a-zA-Z0-9_$]*)\s*=\s*(?:async\s+)?\("),
    re.compile(r"^(?:async\s+)?def\s+([a-zA-Z_][a-zA-Z0-9_]*)\s*\(", re.MULTILINE),
)
_TEST_SUITE = re.compile(r"(?:describe|test|it)\s*\(\s*['\"`]|^\s*def\s+test_\w+", re.MULTILINE)
_API_DECLARATIONS = (
    re.compile(r"app\.(?:get|post|put|delete|patch)\s*\("),
    re.compile(r"router\.(?:get|post|put|delete|patch)\s*\("),
    re.compile(r"export\s+(?:async\s+)?function\s+[a-zA-Z]*(?:Controller|Handler|Route)"),
    re.compile(r"@(?:Get|Post|Put|Delete|Patch)\s*\("),
    re.compile(r"@\w+\.(?:get|post|put|delete|patch|route)\s*\("),
)
_PRISMA_MODEL = re.compile(r"model\s+[A-Z][a-zA-Z]*\s*\{")
_MODEL_DECLARATIONS = (
    re.compile(r"(?:export\s+)?interface\s+[A-Z][a-zA-Z]*"),
    re.compile(r"(?:export\s+)?type\s+[A-Z][a-zA-Z]*"),
    re.compile(r"(?:export\s+)?class\s+[A-Z][a-zA-Z]*"),
)
_UTIL_DECLARATION = re.compile(
    r"export\s+(?:const|function)\s+[a-zA-Z_$][a-zA-Z0-9_$]*|^def\s+[a-zA-Z_]\w*", re.MULTILINE
)

_GENERIC_NAMES = {"get", "set", "is", "has", "can"}
_INTERESTING_TOKENS = (
    "async",
    "await",
    "try",
    "catch",
    "except",
    "if",
    "for",
    "while",
    "return",
    "throw",
    "raise",
    "Promise",
    "map",
    "filter",
    "reduce",
    "yield",
)
FUNCTIONS_PER_FILE = 3
FUNCTION_SPAN = 30

# (keyword pairs that must all appear, tag), evaluated per category
COMMON_TAGS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("async", "await"), "async-await"),
    (("try", "catch"), "error-handling"),
    (("try", "except"), "error-handling"),
    (("interface",), "typescript"),
)
CATEGORY_TAGS: Dict[str, Tuple[Tuple[Tuple[str, ...], str], ...]] = {
    "component": (
        (("useState",), "react-hooks"),
        (("useEffect",), "lifecycle"),
        (("props",), "component-props"),
        (("children",), "composition"),
    ),
    "api": (
        (("router.",), "express-router"),
        (("middleware",), "middleware"),
        (("req", "res"), "request-response"),
    ),
    "test": (
        (("describe",), "test-structure"),
        (("def test_",), "test-structure"),
        (("expect",), "assertions"),
        (("assert",), "assertions"),
        (("mock",), "mocking"),
    ),
    "function": (
        (("map",), "functional-programming"),
        (("filter",), "functional-programming"),
        (("reduce",), "functional-programming"),
        (("Promise",), "promises"),
        ((".then",), "promises"),
    ),
}


def identify_patterns(code: str, category: str) -> List[str]:
    tags: List[str] = []
    for keywords, tag in (*COMMON_TAGS, *CATEGORY_TAGS.get(category, ())):
        if all(keyword in code for keyword in keywords) and tag not in tags:
            tags.append(tag)
    return tags


def _tagged(path: str, lines: Sequence[str], start: int, end: int, category: str) -> CodeExample:
    code = "\n".join(lines[max(0, start) : end])
    return excerpt(
        path, lines, start, end, category=category, patterns=identify_patterns(code, category)
    )


def _first_match(text: str, patterns: Sequence[re.Pattern[str]]) -> Optional[re.Match[str]]:
    matches = [match for match in (pattern.search(text) for pattern in patterns) if match]
    return min(matches, key=lambda match: match.start()) if matches else None


def _block_end(lines: Sequence[str], start: int, limit: int) -> int:
    """End index (exclusive) of the brace or indentation block opened at ``start``."""
    first = lines[start]
    if "{" in first or (start + 1 < len(lines) and lines[start + 1].strip().startswith("{")):
        depth = 0
        opened = False
        for index in range(start, min(len(lines), start + limit)):
            depth += lines[index].count("{") - lines[index].count("}")
            opened = opened or "{" in lines[index]
            if opened and depth <= 0:
                return index + 1
        return min(len(lines), start + limit)

    indent = len(first) - len(first.lstrip())
    for index in range(start + 1, min(len(lines), start + limit)):
        line = lines[index]
        if line.strip() and len(line) - len(line.lstrip()) <= indent:
            return index
    return min(len(lines), start + limit)


def _interesting(name: str, text: str, offset: int) -> bool:
    if len(name) < 3 or name in _GENERIC_NAMES:
        return False
    window = text[offset : offset + 500]
    if len(window.split("\n")) < 3:
        return False
    return sum(1 for token in _INTERESTING_TOKENS if token in window) >= 2


# Per-category extraction


def _components(path: str, text: str) -> List[CodeExample]:
    pattern = _VUE_COMPONENT if path.endswith(".vue") else _REACT_COMPONENT
    match = pattern.search(text)
    if match is None:
        return []
    lines = text.split("\n")
    return [_tagged(path, lines, 0, line_of(text, match.start()) + 50, "component")]


def _functions(path: str, text: str) -> List[CodeExample]:
    lines = text.split("\n")
    found: List[CodeExample] = []
    seen: set[int] = set()
    for pattern in _FUNCTION_DECLARATIONS:
        for match in pattern.finditer(text):
            if len(found) >= FUNCTIONS_PER_FILE:
                return found
            start = line_of(text, match.start())
            if start in seen or not _interesting(match.group(1), text, match.start()):
                continue
            seen.add(start)
            end = _block_end(lines, start, FUNCTION_SPAN)
            found.append(_tagged(path, lines, start, end, "function"))
    return found


def _tests(path: str, text: str) -> List[CodeExample]:
    if _TEST_SUITE.search(text) is None:
        return []
    return [_tagged(path, text.split("\n"), 0, 40, "test")]


def _configs(path: str, text: str) -> List[CodeExample]:
    return [_tagged(path, text.split("\n"), 0, 50, "config")]


def _apis(path: str, text: str) -> List[CodeExample]:
    match = _first_match(text, _API_DECLARATIONS)
    if match is None:
        return []
    start = line_of(text, match.start())
    return [_tagged(path, text.split("\n"), start - 5, start + 30, "api")]


def _models(path: str, text: str) -> List[CodeExample]:
    lines = text.split("\n")
    if path.endswith(".prisma"):
        match = _PRISMA_MODEL.search(text)
        if match is None:
            return []
        start = line_of(text, match.start())
        end = _block_end(lines, start, len(lines))
        return [excerpt(path, lines, start, end, category="model", patterns=("prisma-model",))]
    for pattern in _MODEL_DECLARATIONS:
        match = pattern.search(text)
        if match is not None:
            start = line_of(text, match.start())
            return [
                excerpt(
                    path, lines, start, start + 20, category="model", patterns=("type-definitions",)
                )
            ]
    return []


def _utils(path: str, text: str) -> List[CodeExample]:
    match = _UTIL_DECLARATION.search(text)
    if match is None:
        return []
    start = line_of(text, match.start())
    return [_tagged(path, text.split("\n"), start - 2, start + 25, "util")]


@dataclass(frozen=True)
class ExampleSource:
    """Where one example category looks and how it cuts excerpts."""

    key: str
    patterns: Tuple[str, ...]
    extract: Callable[[str, str], List[CodeExample]]
    exclude: Tuple[str, ...] = ()
    is_test: bool = False


SOURCES: Tuple[ExampleSource, ...] = (
    ExampleSource(
        "components",
        (
            "**/components/**/*.{js,ts,jsx,tsx,vue}",
            "**/*.component.{js,ts,jsx,tsx}",
            "**/pages/**/*.{js,ts,jsx,tsx,vue}",
            "**/views/**/*.{js,ts,jsx,tsx,vue}",
        ),
        _components,
        exclude=TEST_EXCLUDES,
    ),
    ExampleSource(
        "functions",
        (
            "**/src/**/*.{js,ts,py}",
            "**/lib/**/*.{js,ts,py}",
            "**/utils/**/*.{js,ts,py}",
            "**/helpers/**/*.{js,ts,py}",
            "**/services/**/*.{js,ts,py}",
        ),
        _functions,
        exclude=(*TEST_EXCLUDES, "**/components/**", "**/pages/**", "**/tests/**"),
    ),
    ExampleSource(
        "tests",
        (
            "**/*.test.{js,ts,jsx,tsx}",
            "**/*.spec.{js,ts,jsx,tsx}",
            "**/tests/**/*.{js,ts,jsx,tsx,py}",
            "**/__tests__/**/*.{js,ts,jsx,tsx}",
            "**/cypress/**/*.{js,ts}",
            "**/e2e/**/*.{js,ts}",
            "**/test_*.py",
            "**/*_test.py",
        ),
        _tests,
        is_test=True,
    ),
    ExampleSource(
        "configs",
        (
            "**/webpack.config.{js,ts}",
            "**/vite.config.{js,ts}",
            "**/next.config.{js,ts}",
            "**/nuxt.config.{js,ts}",
            "**/vue.config.{js,ts}",
            "**/jest.config.{js,ts}",
            "**/cypress.config.{js,ts}",
            "**/tailwind.config.{js,ts}",
            "**/rollup.config.{js,ts}",
            "**/.eslintrc.{js,ts}",
            "**/babel.config.{js,ts}",
            "**/prettier.config.{js,ts}",
            "**/pyproject.toml",
            "**/setup.cfg",
        ),
        _configs,
    ),
    ExampleSource(
        "apis",
        (
            "**/api/**/*.{js,ts,py}",
            "**/routes/**/*.{js,ts,py}",
            "**/controllers/**/*.{js,ts,py}",
            "**/endpoints/**/*.{js,ts,py}",
            "**/server/**/*.{js,ts,py}",
            "**/backend/**/*.{js,ts,py}",
        ),
        _apis,
        exclude=TEST_EXCLUDES,
    ),
    ExampleSource(
        "models",
        (
            "**/models/**/*.{js,ts,py}",
            "**/models.py",
            "**/schemas/**/*.{js,ts,py}",
            "**/entities/**/*.{js,ts}",
            "**/types/**/*.{js,ts}",
            "**/interfaces/**/*.{js,ts}",
            "**/*.model.{js,ts}",
            "**/*.schema.{js,ts}",
            "**/prisma/schema.prisma",
        ),
        _models,
        exclude=TEST_EXCLUDES,
    ),
    ExampleSource(
        "utils",
        (
            "**/utils/**/*.{js,ts,py}",
            "**/helpers/**/*.{js,ts,py}",
            "**/lib/**/*.{js,ts,py}",
            "**/common/**/*.{js,ts,py}",
            "**/shared/**/*.{js,ts,py}",
        ),
        _utils,
        exclude=(*TEST_EXCLUDES, "**/components/**"),
    ),
)

EXAMPLE_CATEGORIES = tuple(source.key for source in SOURCES)


def rank(examples: Sequence[CodeExample], limit: int) -> Tuple[CodeExample, ...]:
    """Best-scored examples first; file and line break ties."""
    ordered = sorted(examples, key=lambda item: (-item.score, item.file, item.start_line))
    return tuple(ordered[:limit])


class ExampleExtractor:
    """Collects up to ``max_examples_per_category`` excerpts for each category."""

    def __init__(
        self, config: AnalysisConfig | None = None, sources: Sequence[ExampleSource] = SOURCES
    ) -> None:
        self.config = config or AnalysisConfig()
        self.sources = tuple(sources)
        self.logger = get_logger("examples")

    def extract(self, scanner: EvidenceScanner) -> Mapping[str, Tuple[CodeExample, ...]]:
        limit = self.config.max_examples_per_category
        collected: Dict[str, Tuple[CodeExample, ...]] = {}
        for source in self.sources:
            if limit <= 0 or (source.is_test and not self.config.include_tests):
                collected[source.key] = ()
                continue
            candidates: List[CodeExample] = []
            for path, text in scanner.sample(source.patterns, limit=limit * 2, exclude=source.exclude):
                candidates.extend(source.extract(path, text))
            collected[source.key] = rank(candidates, limit)

        self.logger.debug(
            "Extracted %d code examples", sum(len(items) for items in collected.values())
        )
        return freeze(collected)


__all__ = ["EXAMPLE_CATEGORIES", "ExampleExtractor", "ExampleSource", "identify_patterns", "rank"]
