"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json

import pytest

from repoprompt.cli import _build_parser, _overrides, main
from tests._fixtures.repo_builder import RepoBuilder


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "analyze"])
    assert args.verbose is True
    assert args.command == "analyze"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["prompts", "some/repo", "--verbose"])
    assert args.verbose is True
    assert args.command == "prompts"
    assert args.path == "some/repo"


def test_cli_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args([])


def test_serve_defaults() -> None:
    args = _build_parser().parse_args(["serve", "--port", "9000"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 9000


def test_overrides_only_include_given_options() -> None:
    parser = _build_parser()

    assert _overrides(parser.parse_args(["analyze"])) == {}

    args = parser.parse_args(
        [
            "analyze",
            "--exclude",
            "vendor/**",
            "--exclude",
            "*.min.js",
            "--sample-limit",
            "5",
            "--max-file-size-kb",
            "64",
            "--no-tests",
            "--facets",
            "documentation, workflow",
        ]
    )
    assert _overrides(args) == {
        "exclude_patterns": ["vendor/**", "*.min.js"],
        "sample_limit": 5,
        "max_file_size_kb": 64,
        "include_tests": False,
        "facets": ["documentation", "workflow"],
    }


def test_analyze_writes_json_to_output(repo_builder: RepoBuilder, tmp_path) -> None:
    repo_builder.write({"README.md": "# Demo\n", "app.py": "print('hi')\n"})
    output = tmp_path / "out" / "analysis.json"

    main(["analyze", str(repo_builder.path()), "--facets", "documentation", "--output", str(output)])

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["name"] == "repo"
    assert payload["documentation"]["types"]["readme"] is True
    assert payload["workflow"] is None
    assert "analyzedAt" in payload


def test_prompts_prints_library(repo_builder: RepoBuilder, capsys) -> None:
    repo_builder.write({"app.py": "def main():\n    return 1\n"})

    main(["prompts", str(repo_builder.path())])

    payload = json.loads(capsys.readouterr().out)
    assert payload["metadata"]["repoName"] == "repo"
    assert payload["metadata"]["totalPrompts"] == sum(len(items) for items in payload["categories"].values())


def test_missing_repository_exits_with_error(tmp_path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", str(tmp_path / "missing")])

    assert excinfo.value.code == 1
    assert "missing" in capsys.readouterr().err


def test_unknown_facet_exits_with_error(repo_builder: RepoBuilder, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", str(repo_builder.path()), "--facets", "astrology"])

    assert excinfo.value.code == 1
    assert "astrology" in capsys.readouterr().err


def test_validate_prints_scores_per_prompt(repo_builder: RepoBuilder, capsys) -> None:
    repo_builder.write({"app.py": "def main():\n    return 1\n"})

    main(["validate", str(repo_builder.path())])

    report = json.loads(capsys.readouterr().out)
    assert report["repoName"] == "repo"
    assert 0 <= report["score"] <= 100
    assert report["recommendations"]
    assert report["prompts"]
    for entry in report["prompts"]:
        assert set(entry) >= {"id", "title", "subPrompts", "score", "issues", "suggestions"}


def test_validate_fails_below_min_score(repo_builder: RepoBuilder, capsys) -> None:
    repo_builder.write({"app.py": "def main():\n    return 1\n"})

    with pytest.raises(SystemExit) as excinfo:
        main(["validate", str(repo_builder.path()), "--min-score", "101"])

    assert excinfo.value.code == 1
    assert "below --min-score 101" in capsys.readouterr().err


def test_validate_accepts_min_score_option() -> None:
    args = _build_parser().parse_args(["validate", "repo", "--min-score", "70"])
    assert args.command == "validate"
    assert args.min_score == 70
