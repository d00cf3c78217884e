"""Whole-repository code quality heuristics and shared excerpt helpers."""

from __future__ import annotations

import hashlib
import re
from collections import Counter
from dataclasses import replace
from pathlib import PurePosixPath
from typing import Iterable, List, Sequence, Tuple

from ..models import CodeExample, CodeQualityMetrics
from ..repo_scanner import EvidenceScanner
from .documentation import estimate_comment_ratio

CODE_EXTENSIONS = ("js", "ts", "jsx", "tsx", "vue", "py", "java", "cs", "go", "rs", "php", "rb")
CODE_PATTERNS = ("**/*.{" + ",".join(CODE_EXTENSIONS) + "}",)

_DECISION_RE = re.compile(
    r"\b(?:if|elif|else|for|while|switch|case|catch|except|do|try|finally|and|or)\b|&&|\|\|"
)
_NESTING_RE = re.compile(r"\b(?:if|for|while|try)\b")
_CONTROL_RE = re.compile(r"\b(?:if|elif|else|for|while|switch|case|catch|except)\b")
_LOGICAL_RE = re.compile(r"&&|\|\||\band\b|\bor\b")

SHINGLE_SIZE = 5
MIN_SHINGLE_CHARS = 50
_COMMENT_LED = re.compile(r"^\s*(?://|\*|#)")
_NORMALISE = (
    (re.compile(r"\s+"), " "),
    (re.compile(r"\b[a-zA-Z_$][a-zA-Z0-9_$]*\b"), "VAR"),
    (re.compile(r"\d+"), "NUM"),
    (re.compile(r"['\"`][^'\"`]*['\"`]"), "STR"),
)

# Excerpt classification

COMPLEXITY_SCORES = {"simple": 1, "moderate": 2, "complex": 3}
CATEGORY_SCORES = {
    "component": 3,
    "api": 3,
    "function": 2,
    "test": 2,
    "model": 2,
    "config": 1,
    "util": 1,
}


def cyclomatic_complexity(text: str) -> int:
    """Decision-point count plus one for the base path."""
    return len(_DECISION_RE.findall(text)) + 1


def cognitive_complexity(text: str) -> int:
    """Control structures weighted by brace/keyword nesting depth."""
    complexity = 0
    nesting = 0
    for raw in text.splitlines():
        line = raw.strip()
        if "{" in line or _NESTING_RE.search(line):
            nesting += 1
        if "}" in line:
            nesting = max(0, nesting - 1)
        if _CONTROL_RE.search(line):
            complexity += 1 + nesting
        complexity += len(_LOGICAL_RE.findall(line))
    return complexity


def complexity_bucket(text: str) -> str:
    lines = len(text.split("\n"))
    cyclomatic = cyclomatic_complexity(text)
    if lines > 40 or cyclomatic > 8:
        return "complex"
    if lines > 15 or cyclomatic > 4:
        return "moderate"
    return "simple"


def categorize(path: str) -> str:
    """Guess the example category of a file from its name and directory."""
    posix = PurePosixPath(path.lower())
    name, parent = posix.name, str(posix.parent)
    if "test" in name or "spec" in name or "test" in parent:
        return "test"
    if "config" in name or "config" in parent:
        return "config"
    if "component" in name or "component" in parent:
        return "component"
    if "api" in parent or "route" in parent:
        return "api"
    if "model" in parent or "schema" in parent:
        return "model"
    if "util" in parent or "helper" in parent:
        return "util"
    return "function"


def score_example(example: CodeExample) -> int:
    lines = len(example.content.split("\n"))
    return (
        COMPLEXITY_SCORES[example.complexity]
        + len(example.patterns)
        + min(2, lines // 10)
        + CATEGORY_SCORES.get(example.category, 1)
    )


def line_of(text: str, offset: int) -> int:
    """Zero-based line index of a character offset."""
    return text.count("\n", 0, offset)


def excerpt(
    path: str,
    lines: Sequence[str],
    start: int,
    end: int,
    *,
    category: str | None = None,
    patterns: Iterable[str] = (),
) -> CodeExample:
    """Build a scored ``CodeExample`` over ``lines[start:end]`` (zero-based, end exclusive)."""
    start = max(0, start)
    end = max(start + 1, min(len(lines), end))
    content = "\n".join(lines[start:end])
    draft = CodeExample(
        file=path,
        start_line=start + 1,
        end_line=end,
        content=content,
        category=category or categorize(path),
        complexity=complexity_bucket(content),
        patterns=tuple(dict.fromkeys(patterns)),
    )
    return replace(draft, score=score_example(draft))


# Duplication


def _normalise(block: str) -> str:
    for pattern, replacement in _NORMALISE:
        block = pattern.sub(replacement, block)
    return block.strip()


def shingle_digests(text: str) -> List[str]:
    """Digests of every normalised ``SHINGLE_SIZE``-line window worth comparing."""
    lines = text.split("\n")
    digests: List[str] = []
    for index in range(len(lines) - SHINGLE_SIZE + 1):
        block = "\n".join(lines[index : index + SHINGLE_SIZE]).strip()
        if len(block) < MIN_SHINGLE_CHARS or _COMMENT_LED.match(block):
            continue
        digests.append(hashlib.sha1(_normalise(block).encode("utf-8")).hexdigest())
    return digests


def duplicate_percentage(shingles: Counter, total_lines: int) -> float:
    """Repeated window occurrences relative to total sampled lines."""
    if total_lines <= 0:
        return 0.0
    repeated = sum(count - 1 for count in shingles.values() if count > 1)
    return repeated / total_lines * 100


class QualityAnalyzer:
    """Aggregates size, complexity, comment and duplication metrics over sampled code."""

    def analyze(self, scanner: EvidenceScanner) -> CodeQualityMetrics:
        samples = scanner.sample(CODE_PATTERNS)
        sizes = [scanner.size_of(path) for path, _ in samples]
        return self.measure(samples, sizes, estimate_comment_ratio(scanner))

    def measure(
        self,
        samples: Sequence[Tuple[str, str]],
        sizes: Sequence[int],
        comment_ratio: float = 0.0,
    ) -> CodeQualityMetrics:
        if not samples:
            return CodeQualityMetrics(comment_ratio=comment_ratio, maintainability_index=100.0)

        total_lines = 0
        cyclomatic = 0
        cognitive = 0
        shingles: Counter = Counter()
        for _, text in samples:
            total_lines += len(text.split("\n"))
            cyclomatic += cyclomatic_complexity(text)
            cognitive += cognitive_complexity(text)
            shingles.update(shingle_digests(text))

        count = len(samples)
        average_cyclomatic = cyclomatic / count
        average_cognitive = cognitive / count

        return CodeQualityMetrics(
            average_file_size=round(sum(sizes) / count, 2),
            total_lines=total_lines,
            comment_ratio=comment_ratio,
            duplicate_code_percentage=duplicate_percentage(shingles, total_lines),
            maintainability_index=100
            - average_cyclomatic * 2
            - average_cognitive * 1.5
            + comment_ratio * 10,
            cyclomatic_complexity=round(average_cyclomatic, 2),
            cognitive_complexity=round(average_cognitive, 2),
        )


__all__ = [
    "CODE_PATTERNS",
    "QualityAnalyzer",
    "categorize",
    "cognitive_complexity",
    "complexity_bucket",
    "cyclomatic_complexity",
    "duplicate_percentage",
    "excerpt",
    "score_example",
    "shingle_digests",
]
