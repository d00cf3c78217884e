"""Tests for facet discovery utilities."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from repoprompt.analyzers import FacetAnalyzer, discover_facets
from repoprompt.analyzers.documentation import DocumentationAnalyzer
from repoprompt.config import FACET_NAMES
from repoprompt.errors import ConfigurationError


class DummyDocumentation(FacetAnalyzer):
    """Test facet used for plugin discovery validation."""

    def analyze(self, scanner, context):  # pragma: no cover - unused
        return None


def _patch_entry_points(monkeypatch, entries) -> None:
    class DummyEntryPoints(list):
        def select(self, **kwargs):
            if kwargs.get("group") == "repoprompt.facets":
                return self
            return []

    monkeypatch.setattr(
        "repoprompt.analyzers.metadata.entry_points",
        lambda: DummyEntryPoints(entries),
        raising=False,
    )


def test_discover_facets_returns_builtins_in_canonical_order() -> None:
    facets = discover_facets()
    assert [facet.name for facet in facets] == list(FACET_NAMES)
    assert isinstance(facets[0], DocumentationAnalyzer)


def test_discover_facets_respects_enabled_filter() -> None:
    facets = discover_facets(["business", "documentation"])
    assert [facet.name for facet in facets] == ["documentation", "business"]


def test_entry_point_replaces_builtin_of_same_name(monkeypatch) -> None:
    _patch_entry_points(
        monkeypatch, [SimpleNamespace(name="documentation", load=lambda: DummyDocumentation)]
    )

    facets = discover_facets(["documentation"])

    assert len(facets) == 1
    assert isinstance(facets[0], DummyDocumentation)
    assert facets[0].name == "documentation"


def test_entry_point_without_facet_slot_is_ignored(monkeypatch) -> None:
    _patch_entry_points(monkeypatch, [SimpleNamespace(name="astrology", load=lambda: DummyDocumentation)])

    facets = discover_facets()

    assert not any(isinstance(facet, DummyDocumentation) for facet in facets)


def test_discover_facets_raises_for_unknown_name() -> None:
    with pytest.raises(ConfigurationError):
        discover_facets(["does-not-exist"])
