"""Facet analyzer implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable, List, Sequence

from ..config import FACET_NAMES
from ..errors import ConfigurationError
from ..logging import get_logger
from .base import FacetAnalyzer, FacetContext
from .business import BusinessAnalyzer
from .dependencies import DependencyAnalyzer
from .documentation import DocumentationAnalyzer
from .governance import GovernanceAnalyzer
from .incident import IncidentAnalyzer
from .workflow import WorkflowAnalyzer

_ENTRY_POINT_GROUP = "repoprompt.facets"

_BUILTIN_FACTORIES: dict[str, Callable[[], FacetAnalyzer]] = {
    "documentation": DocumentationAnalyzer,
    "workflow": WorkflowAnalyzer,
    "dependencies": DependencyAnalyzer,
    "incident": IncidentAnalyzer,
    "governance": GovernanceAnalyzer,
    "business": BusinessAnalyzer,
}


def discover_facets(enabled: Sequence[str] | None = None) -> List[FacetAnalyzer]:
    """Return instantiated facet analyzers in canonical facet order.

    Entry points in the ``repoprompt.facets`` group replace the builtin analyzer
    registered under the same name; names without a slot on the analysis record
    are ignored.
    """

    wanted = list(FACET_NAMES) if enabled is None else [name.lower() for name in enabled]
    unknown = sorted(set(wanted) - set(FACET_NAMES))
    if unknown:
        raise ConfigurationError(f"Unknown facets requested: {', '.join(unknown)}")

    factories: Dict[str, Callable[[], FacetAnalyzer]] = dict(_BUILTIN_FACTORIES)
    logger = get_logger("analyzers")
    for entry in _iter_entry_points():
        key = entry.name.lower()
        if key not in factories:
            logger.warning("Ignoring facet entry point '%s': no such facet", entry.name)
            continue
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - defensive guard
            raise RuntimeError(f"Failed to load facet entry point '{entry.name}': {exc}") from exc

        def _factory(obj: object = loaded) -> FacetAnalyzer:
            return _coerce_analyzer(obj)

        factories[key] = _factory

    analyzers: List[FacetAnalyzer] = []
    for name in FACET_NAMES:
        if name not in wanted:
            continue
        instance = factories[name]()
        if not isinstance(instance, FacetAnalyzer):
            raise TypeError(f"Facet factory for '{name}' did not return a FacetAnalyzer instance")
        instance.name = name
        analyzers.append(instance)
    return analyzers


def _coerce_analyzer(obj: object) -> FacetAnalyzer:
    if isinstance(obj, FacetAnalyzer):
        return obj
    if isinstance(obj, type) and issubclass(obj, FacetAnalyzer):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, FacetAnalyzer):
            return instance
    raise TypeError("Facet entry point must be a FacetAnalyzer subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    try:
        entry_points = metadata.entry_points()
    except Exception:  # pragma: no cover - defensive guard
        return []

    if hasattr(entry_points, "select"):
        return entry_points.select(group=_ENTRY_POINT_GROUP)  # type: ignore[return-value]

    return entry_points.get(_ENTRY_POINT_GROUP, [])  # type: ignore[return-value]


__all__ = [
    "discover_facets",
    "FacetAnalyzer",
    "FacetContext",
]
