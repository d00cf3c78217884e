"""Run coordination: config, scan, concurrent analysis, composition and synthesis."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar

from .analyzers import FacetAnalyzer, FacetContext, discover_facets
from .analyzers.examples import ExampleExtractor
from .analyzers.patterns import PatternDetector
from .analyzers.quality import QualityAnalyzer
from .analyzers.structure import StructureAnalyzer, build_file_tree
from .analyzers.technology import CATEGORIES, TechnologyDetector
from .analyzers.utils import Dependencies, load_dependencies
from .composer import AnalysisComposer, Clock
from .config import CONFIG_FILENAME, AnalysisConfig, load_config
from .logging import get_logger
from .models import CodebaseAnalysis, CodeQualityMetrics, FileNode, ProjectStructure, PromptLibrary
from .prompting import PromptSynthesizer
from .repo_scanner import CancellationToken, EvidenceScanner

T = TypeVar("T")


class Orchestrator:
    """Coordinates one analysis run per call; holds no per-repository state."""

    def __init__(
        self,
        config_overrides: Mapping[str, Any] | None = None,
        facets: Optional[Iterable[FacetAnalyzer]] = None,
        composer: AnalysisComposer | None = None,
        synthesizer: PromptSynthesizer | None = None,
        clock: Clock | None = None,
        max_workers: int | None = None,
        detector: TechnologyDetector | None = None,
    ) -> None:
        self.config_overrides = dict(config_overrides or {})
        self._facet_overrides = list(facets) if facets is not None else None
        self.composer = composer or AnalysisComposer(clock)
        self.synthesizer = synthesizer or PromptSynthesizer()
        self.detector = detector or TechnologyDetector()
        self.max_workers = max_workers
        self.logger = get_logger("orchestrator")

    def analyze(self, path: str | Path, cancel_token: CancellationToken | None = None) -> CodebaseAnalysis:
        """Analyse the repository at ``path`` and return the composed record."""
        repo_path = Path(path).expanduser().resolve()
        self.logger.info("Starting analysis of %s", repo_path)

        config = self._load_config(repo_path)
        scanner = EvidenceScanner(repo_path, config, cancel_token=cancel_token)
        facets = self._select_facets(config)
        dependencies = self._guard("dependencies manifest", lambda: load_dependencies(scanner), Dependencies())
        context = FacetContext(config=config, dependencies=dependencies)

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="repoprompt") as pool:
            technologies = pool.submit(
                self._guard,
                "technology detection",
                lambda: self.detector.detect(scanner, dependencies),
                {category: () for category in CATEGORIES},
            )
            structure = pool.submit(
                self._guard,
                "structure",
                lambda: StructureAnalyzer().analyze(scanner, dependencies),
                ProjectStructure(),
            )
            tree = pool.submit(
                self._guard,
                "file tree",
                lambda: build_file_tree(scanner, config.max_depth),
                FileNode(name=repo_path.name, path="", type="directory", importance="high"),
            )
            quality = pool.submit(
                self._guard, "quality metrics", lambda: QualityAnalyzer().analyze(scanner), CodeQualityMetrics()
            )
            patterns = pool.submit(
                self._guard, "pattern detection", lambda: PatternDetector().detect(scanner), ()
            )
            examples = pool.submit(
                self._guard, "example extraction", lambda: ExampleExtractor(config).extract(scanner), {}
            )
            facet_futures: Dict[str, Future[Any]] = {
                facet.name: pool.submit(self._run_facet, facet, scanner, context) for facet in facets
            }

        facet_records = {name: future.result() for name, future in facet_futures.items()}
        analysis = self.composer.compose(
            name=repo_path.name,
            path=str(repo_path),
            technologies=technologies.result(),
            structure=structure.result(),
            file_tree=tree.result(),
            examples=examples.result(),
            patterns=patterns.result(),
            metrics=quality.result(),
            facets={name: record for name, record in facet_records.items() if record is not None},
            scan_issues=scanner.issue_messages(),
        )
        self.logger.info(
            "Analysis of %s finished: %d technologies, %d patterns, %d of %d facets, %d scan issues",
            repo_path,
            len(analysis.all_technologies()),
            len(analysis.patterns),
            sum(1 for record in facet_records.values() if record is not None),
            len(facets),
            len(analysis.scan_issues),
        )
        return analysis

    def generate(
        self, path: str | Path, cancel_token: CancellationToken | None = None
    ) -> Tuple[CodebaseAnalysis, PromptLibrary]:
        """Analyse the repository and synthesize its prompt library."""
        analysis = self.analyze(path, cancel_token=cancel_token)
        library = self.synthesizer.synthesize(analysis)
        self.logger.info(
            "Synthesized %d prompts for %s (%d skipped)",
            library.metadata.total_prompts,
            analysis.name,
            len(library.metadata.skipped),
        )
        return analysis, library

    def _load_config(self, repo_path: Path) -> AnalysisConfig:
        config_file = repo_path / CONFIG_FILENAME if repo_path.is_dir() else None
        return load_config(config_file, self.config_overrides)

    def _select_facets(self, config: AnalysisConfig) -> List[FacetAnalyzer]:
        if self._facet_overrides is not None:
            return [facet for facet in self._facet_overrides if facet.name in config.facets]
        return discover_facets(config.facets)

    def _run_facet(
        self, facet: FacetAnalyzer, scanner: EvidenceScanner, context: FacetContext
    ) -> Any:
        try:
            if not facet.supports(scanner):
                self.logger.debug("Facet %s does not apply; skipping", facet.name)
                return None
            return facet.analyze(scanner, context)
        except Exception as exc:
            self._log_exception(f"Facet {facet.name} failed", exc)
            return None

    def _guard(self, label: str, func: Callable[[], T], fallback: T) -> T:
        try:
            return func()
        except Exception as exc:
            self._log_exception(f"Analysis step '{label}' failed", exc)
            return fallback

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.warning("%s: %s", message, exc)


__all__ = ["Orchestrator"]
