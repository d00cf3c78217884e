"""Base classes for facet analyzer plugins."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ..config import AnalysisConfig
from ..repo_scanner import EvidenceScanner
from .utils import Dependencies


@dataclass(frozen=True)
class FacetContext:
    """Read-only inputs shared by every facet during one run."""

    config: AnalysisConfig = field(default_factory=AnalysisConfig)
    dependencies: Dependencies = field(default_factory=Dependencies)


class FacetAnalyzer(ABC):
    """Contract for analyzers that score one facet of repository health."""

    name: str = ""

    def supports(self, scanner: EvidenceScanner) -> bool:
        """Return True when this facet should run for the repository."""
        return True

    @abstractmethod
    def analyze(self, scanner: EvidenceScanner, context: FacetContext) -> Any:
        """Produce the facet record from scanner evidence."""


__all__ = ["FacetAnalyzer", "FacetContext"]
