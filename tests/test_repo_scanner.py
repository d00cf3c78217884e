"""Tests for repoprompt.repo_scanner."""

from __future__ import annotations

from pathlib import Path

import pytest

from repoprompt.config import AnalysisConfig
from repoprompt.errors import ScanIncomplete
from repoprompt.repo_scanner import CancellationToken, EvidenceScanner, compile_glob


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_snapshot_lists_files_and_skips_vendor_directories(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _write(repo_root / "src" / "app.py", "print('hi')\n")
    _write(repo_root / "docs" / "overview.md", "# Overview\n")
    _write(repo_root / "node_modules" / "left-pad" / "index.js", "module.exports = 1\n")
    _write(repo_root / ".venv" / "should_ignore.py", "print('nope')\n")

    scanner = EvidenceScanner(repo_root)

    assert "src/app.py" in scanner.files
    assert "docs/overview.md" in scanner.files
    assert not any(path.startswith("node_modules/") for path in scanner.files)
    assert ".venv/should_ignore.py" not in scanner.files
    assert "src" in scanner.directories
    assert scanner.size_of("src/app.py") == len("print('hi')\n")


def test_scanner_rejects_missing_directory(tmp_path: Path) -> None:
    missing = tmp_path / "missing"
    with pytest.raises(FileNotFoundError) as excinfo:
        EvidenceScanner(missing)
    assert str(missing) in str(excinfo.value)


def test_scanner_rejects_file_root(tmp_path: Path) -> None:
    target = tmp_path / "file.txt"
    _write(target, "x")
    with pytest.raises(NotADirectoryError):
        EvidenceScanner(target)


def test_scan_respects_gitignore_and_exclude_patterns(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _write(repo_root / ".gitignore", "generated/\n*.log\n")
    _write(repo_root / "src" / "main.py", "print('ok')\n")
    _write(repo_root / "generated" / "artifact.txt", "data\n")
    _write(repo_root / "notes.log", "ignore me\n")
    _write(repo_root / "sandbox" / "scratch.py", "x = 1\n")

    scanner = EvidenceScanner(repo_root, AnalysisConfig(exclude_patterns=["sandbox/"]))

    assert "src/main.py" in scanner.files
    assert "generated/artifact.txt" not in scanner.files
    assert "notes.log" not in scanner.files
    assert "sandbox/scratch.py" not in scanner.files


def test_point_queries_treat_excluded_paths_as_absent(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _write(repo_root / ".gitignore", "secrets/\n")
    _write(repo_root / "README.md", "# Demo\n")
    _write(repo_root / "docs" / "architecture.md", "# Layers\n")
    _write(repo_root / "secrets" / "token.txt", "abc\n")
    _write(repo_root / "src" / "a.js", "x\n")
    _write(repo_root / ".git" / "config", '[branch "main"]\n')

    scanner = EvidenceScanner(repo_root, AnalysisConfig(exclude_patterns=["README.md", "docs"]))

    assert scanner.files == (".gitignore", "src/a.js")
    assert scanner.exists("README.md") is False
    assert scanner.is_dir("docs") is False
    assert scanner.exists("docs/architecture.md") is False
    assert scanner.exists("secrets/token.txt") is False
    assert scanner.read_or_empty("README.md") == ""
    assert scanner.list_dir("") == [".git", ".gitignore", "src"]
    with pytest.raises(FileNotFoundError):
        scanner.list_dir("docs")
    with pytest.raises(ScanIncomplete, match="excluded from scan"):
        scanner.read_text("secrets/token.txt")
    assert "main" in scanner.read_or_empty(".git/config")


def test_file_budget_truncates_and_records_issue(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    for index in range(5):
        _write(repo_root / f"file_{index}.txt", "x\n")

    scanner = EvidenceScanner(repo_root, AnalysisConfig(max_files=3))

    assert len(scanner.files) == 3
    assert scanner.truncated is True
    assert any("file budget of 3 reached" in message for message in scanner.issue_messages())


def test_time_budget_stops_walk(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _write(repo_root / "a.txt", "a\n")
    ticks = iter([0.0, 10.0, 10.0, 10.0, 10.0])

    scanner = EvidenceScanner(
        repo_root,
        AnalysisConfig(time_budget_seconds=1.0),
        clock=lambda: next(ticks, 10.0),
    )

    assert scanner.files == ()
    assert any("time budget exhausted" in message for message in scanner.issue_messages())


def test_cancelled_token_yields_empty_evidence(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _write(repo_root / "README.md", "# Demo\n")
    token = CancellationToken()
    token.cancel()

    scanner = EvidenceScanner(repo_root, cancel_token=token)

    assert scanner.files == ()
    assert scanner.exists("README.md") is False
    assert scanner.read_or_empty("README.md") == ""
    with pytest.raises(ScanIncomplete):
        scanner.read_text("README.md")


def test_read_text_caps_at_max_bytes(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _write(repo_root / "big.txt", "a" * 2048)

    sample = EvidenceScanner(repo_root).read_text("big.txt", max_bytes=100)

    assert sample.truncated is True
    assert len(sample.text) == 100


def test_read_text_refuses_paths_outside_root(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _write(repo_root / "a.txt", "a\n")
    _write(tmp_path / "secret.txt", "secret\n")

    scanner = EvidenceScanner(repo_root)

    assert scanner.exists("../secret.txt") is False
    with pytest.raises(ScanIncomplete):
        scanner.read_text("../secret.txt")


def test_read_or_empty_handles_missing_files(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()

    assert EvidenceScanner(repo_root).read_or_empty("absent.md") == ""


def test_list_dir_errors(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _write(repo_root / "docs" / "b.md", "b\n")
    _write(repo_root / "docs" / "a.md", "a\n")
    scanner = EvidenceScanner(repo_root)

    assert scanner.list_dir("docs") == ["a.md", "b.md"]
    with pytest.raises(FileNotFoundError):
        scanner.list_dir("missing")
    with pytest.raises(NotADirectoryError):
        scanner.list_dir("docs/a.md")


def test_search_yields_line_hits(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _write(repo_root / "src" / "server.js", "const express = require('express')\nconst app = express()\n")
    _write(repo_root / "src" / "other.py", "import os\n")

    hits = list(EvidenceScanner(repo_root).search(r"express\(\)", "**/*.js"))

    assert [(hit.path, hit.line_no) for hit in hits] == [("src/server.js", 2)]


def test_sample_respects_limit_and_size_cutoff(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    for index in range(4):
        _write(repo_root / "src" / f"mod_{index}.py", "x = 1\n")
    _write(repo_root / "src" / "huge.py", "y = 2\n" * 400)

    scanner = EvidenceScanner(repo_root, AnalysisConfig(max_file_size_kb=1, sample_limit=3))
    samples = scanner.sample(("**/*.py",))

    assert len(samples) == 3
    assert all(path != "src/huge.py" for path, _ in samples)
    assert scanner.sample(("**/*.py",), limit=0) == []


def test_compile_glob_supports_braces_and_globstar() -> None:
    matcher = compile_glob("**/*.{js,ts}")
    assert matcher("index.js")
    assert matcher("src/deep/app.ts")
    assert not matcher("src/app.py")

    workflows = compile_glob(".github/workflows/*.yml")
    assert workflows(".github/workflows/ci.yml")
    assert not workflows(".github/workflows/nested/ci.yml")
