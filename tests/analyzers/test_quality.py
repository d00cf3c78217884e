"""Tests for code quality heuristics."""

from __future__ import annotations

from collections import Counter

import pytest

from repoprompt.analyzers.quality import (
    QualityAnalyzer,
    categorize,
    cognitive_complexity,
    complexity_bucket,
    cyclomatic_complexity,
    duplicate_percentage,
    excerpt,
    shingle_digests,
)
from tests._fixtures.repo_builder import RepoBuilder

DUPLICATED = """
def load_orders(session, customer_id):
    query = session.query(Order).filter(Order.customer_id == customer_id)
    orders = [row.to_dict() for row in query.all()]
    total = sum(order["amount"] for order in orders)
    return {"orders": orders, "total": total}
"""


def test_empty_sample_is_fully_maintainable() -> None:
    metrics = QualityAnalyzer().measure([], [], comment_ratio=0.25)

    assert metrics.maintainability_index == 100.0
    assert metrics.total_lines == 0
    assert metrics.comment_ratio == 0.25


def test_measure_single_simple_file() -> None:
    metrics = QualityAnalyzer().measure([("a.py", "x = 1")], [5])

    assert metrics.average_file_size == 5.0
    assert metrics.total_lines == 1
    assert metrics.cyclomatic_complexity == 1.0
    assert metrics.cognitive_complexity == 0.0
    assert metrics.maintainability_index == 98.0
    assert metrics.duplicate_code_percentage == 0.0


def test_identical_files_report_duplication() -> None:
    metrics = QualityAnalyzer().measure(
        [("a/orders.py", DUPLICATED), ("b/orders.py", DUPLICATED)], [300, 300]
    )

    assert metrics.duplicate_code_percentage > 0


def test_analyze_reuses_sampled_comment_ratio(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/app.py": "# setup\nx = 1\n# teardown\ny = 2\n"})

    metrics = QualityAnalyzer().analyze(repo_builder.scanner())

    assert metrics.comment_ratio == 0.5
    assert metrics.total_lines == 5


def test_cyclomatic_counts_decision_points() -> None:
    assert cyclomatic_complexity("if a and b:\n    return 1\nelse:\n    return 2") == 4


def test_cognitive_weights_nesting() -> None:
    assert cognitive_complexity("if a:\n    if b:\n        pass") == 5


def test_duplicate_percentage_counts_repeats_only() -> None:
    assert duplicate_percentage(Counter({"a": 3, "b": 1}), 10) == pytest.approx(20.0)
    assert duplicate_percentage(Counter(), 0) == 0.0


def test_shingles_skip_short_and_comment_blocks() -> None:
    assert shingle_digests("a\nb\nc\nd\ne") == []
    assert shingle_digests("# " + "x" * 60 + "\n1\n2\n3\n4") == []
    assert len(shingle_digests(DUPLICATED.strip())) == 1


def test_complexity_buckets() -> None:
    assert complexity_bucket("x = 1") == "simple"
    assert complexity_bucket("\n".join(["x = 1"] * 20)) == "moderate"
    assert complexity_bucket("\n".join(["x = 1"] * 41)) == "complex"


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("src/components/Button.jsx", "component"),
        ("tests/test_app.py", "test"),
        ("src/api/users.js", "api"),
        ("src/models/user.py", "model"),
        ("webpack.config.js", "config"),
        ("src/helpers/format.js", "util"),
        ("src/index.js", "function"),
    ],
)
def test_categorize(path: str, expected: str) -> None:
    assert categorize(path) == expected


def test_excerpt_clamps_range_and_scores() -> None:
    example = excerpt("src/index.js", ["a", "b", "c"], -5, 100, patterns=("x", "x"))

    assert (example.start_line, example.end_line) == (1, 3)
    assert example.content == "a\nb\nc"
    assert example.patterns == ("x",)
    assert example.score == 1 + 1 + 0 + 2
