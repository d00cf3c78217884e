"""Helper utilities for constructing temporary repositories in tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, Mapping

from repoprompt.analyzers.base import FacetContext
from repoprompt.analyzers.utils import load_dependencies
from repoprompt.config import build_config
from repoprompt.repo_scanner import EvidenceScanner


class RepoBuilder:
    """Utility for writing files into a throwaway repository and scanning it."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "repo"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the repository."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def write_json(self, relative: str, payload: Mapping[str, Any]) -> None:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def mkdir(self, *relatives: str) -> None:
        for relative in relatives:
            (self.root / relative).mkdir(parents=True, exist_ok=True)

    def scanner(self, **options: Any) -> EvidenceScanner:
        """Return a fresh scanner over the repository with the given options."""
        return EvidenceScanner(self.root, build_config(options))

    def context(self, scanner: EvidenceScanner) -> FacetContext:
        return FacetContext(config=scanner.config, dependencies=load_dependencies(scanner))

    def path(self) -> Path:
        """Return the repository root path."""
        return self.root


__all__ = ["RepoBuilder"]
