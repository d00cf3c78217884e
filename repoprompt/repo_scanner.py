"""Bounded repository walking and evidence queries for analyzers."""

from __future__ import annotations

import os
import re
import threading
import time
from dataclasses import dataclass
from fnmatch import fnmatchcase
from functools import lru_cache
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .config import AnalysisConfig
from .errors import ScanIncomplete
from .logging import get_logger

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "bower_components",
    "dist",
    "build",
    "coverage",
    ".next",
    ".nuxt",
    "vendor",
    "target",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".venv",
    "venv",
    ".idea",
    ".vscode",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}


class CancellationToken:
    """Cooperative cancellation flag checked between file reads."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class TextSample:
    """Decoded file contents and whether the read hit the byte cap."""

    text: str
    truncated: bool


@dataclass(frozen=True)
class SearchHit:
    path: str
    line_no: int
    line: str


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or configured exclusions."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def _build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return []

    rules: List[IgnoreRule] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = _build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _load_ignore_rules(root: Path, exclude_patterns: Sequence[str]) -> List[IgnoreRule]:
    rules = _parse_gitignore(root / ".gitignore")
    for pattern in exclude_patterns:
        rule = _build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _is_ignored(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    """Apply ignore rules to ``rel_path`` and to each directory above it."""
    if not rules:
        return False
    parts = rel_path.split("/")
    for depth in range(1, len(parts)):
        if _should_ignore("/".join(parts[:depth]), True, rules):
            return True
    return _should_ignore(rel_path, is_dir, rules)


def _expand_braces(pattern: str) -> List[str]:
    match = re.search(r"\{([^{}]*)\}", pattern)
    if match is None:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: List[str] = []
    for option in match.group(1).split(","):
        expanded.extend(_expand_braces(f"{head}{option}{tail}"))
    return expanded


def _translate(pattern: str) -> str:
    parts: List[str] = []
    index = 0
    while index < len(pattern):
        char = pattern[index]
        if pattern.startswith("**/", index):
            parts.append("(?:.*/)?")
            index += 3
        elif pattern.startswith("**", index):
            parts.append(".*")
            index += 2
        elif char == "*":
            parts.append("[^/]*")
            index += 1
        elif char == "?":
            parts.append("[^/]")
            index += 1
        else:
            parts.append(re.escape(char))
            index += 1
    return "".join(parts)


@lru_cache(maxsize=512)
def compile_glob(pattern: str) -> Callable[[str], bool]:
    """Compile a glob (``**``, ``*``, ``?`` and ``{a,b}``) into a path predicate."""
    alternatives = "|".join(_translate(item) for item in _expand_braces(pattern))
    regex = re.compile(rf"^(?:{alternatives})$")
    return lambda path: regex.match(path) is not None


class EvidenceScanner:
    """Read-only, request-scoped view over a repository tree.

    The walk is performed once, lazily, and bounded by the configured file-count
    and wall-clock budgets. Point queries (``exists``, ``list_dir``, ``read_text``)
    go to the filesystem so metadata such as ``.git/config`` stays reachable, but
    paths matched by ``.gitignore`` or ``exclude_patterns`` are reported as absent.
    """

    def __init__(
        self,
        root: str | Path,
        config: AnalysisConfig | None = None,
        *,
        cancel_token: CancellationToken | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Repository path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Repository path is not a directory: {root}")

        self.root = root_path
        self.config = config or AnalysisConfig()
        self.cancel_token = cancel_token or CancellationToken()
        self.logger = get_logger("scanner")
        self.truncated = False
        self._clock = clock
        self._started = clock()
        self._rules = _load_ignore_rules(root_path, self.config.exclude_patterns)
        self._lock = threading.Lock()
        self._files: Optional[Dict[str, int]] = None
        self._dirs: List[str] = []
        self._issues: List[ScanIncomplete] = []

    # Snapshot

    @property
    def files(self) -> Tuple[str, ...]:
        return tuple(self._snapshot())

    @property
    def directories(self) -> Tuple[str, ...]:
        self._snapshot()
        return tuple(self._dirs)

    @property
    def issues(self) -> Tuple[ScanIncomplete, ...]:
        with self._lock:
            return tuple(self._issues)

    def issue_messages(self) -> Tuple[str, ...]:
        return tuple(sorted({str(issue) for issue in self.issues}))

    def size_of(self, rel_path: str) -> int:
        return self._snapshot().get(rel_path, 0)

    @property
    def exhausted(self) -> bool:
        """True once cancelled or past the wall-clock budget."""
        if self.cancel_token.cancelled:
            return True
        budget = self.config.time_budget_seconds
        return budget is not None and self._clock() - self._started > budget

    def _snapshot(self) -> Dict[str, int]:
        with self._lock:
            if self._files is None:
                self._files = self._walk()
            return self._files

    def _walk(self) -> Dict[str, int]:
        files: Dict[str, int] = {}
        limit = self.config.max_files
        for dirpath, dirnames, filenames in os.walk(self.root):
            if self.exhausted:
                reason = "cancelled" if self.cancel_token.cancelled else "time budget exhausted"
                self._truncate(dirpath, reason)
                break

            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(self.root).as_posix() if current_dir != self.root else ""

            kept_dirs = []
            for name in sorted(dirnames):
                if name in _EXCLUDED_DIRS:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if _should_ignore(rel_path, True, self._rules):
                    continue
                kept_dirs.append(name)
                self._dirs.append(rel_path)
            dirnames[:] = kept_dirs

            for filename in sorted(filenames):
                if filename in _EXCLUDED_FILES:
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if _should_ignore(rel_path, False, self._rules):
                    continue
                if len(files) >= limit:
                    self._truncate(rel_path, f"file budget of {limit} reached")
                    return files
                try:
                    files[rel_path] = (current_dir / filename).stat().st_size
                except OSError as exc:
                    self._issues.append(ScanIncomplete(rel_path, exc.strerror or str(exc)))

        self.logger.debug("Scanner snapshot holds %d files under %s", len(files), self.root)
        return files

    def _truncate(self, where: str, reason: str) -> None:
        self.truncated = True
        self._issues.append(ScanIncomplete(str(where), f"scan truncated: {reason}"))
        self.logger.warning("Scan of %s truncated (%s)", self.root, reason)

    def record(self, issue: ScanIncomplete) -> None:
        with self._lock:
            self._issues.append(issue)

    # Point queries

    def _resolve(self, rel_path: str) -> Path | None:
        candidate = (self.root / rel_path).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            return None
        return candidate

    def _excluded(self, target: Path) -> bool:
        if target == self.root:
            return False
        relative = target.relative_to(self.root).as_posix()
        return _is_ignored(relative, target.is_dir(), self._rules)

    def exists(self, rel_path: str) -> bool:
        if self.cancel_token.cancelled:
            return False
        target = self._resolve(rel_path)
        try:
            return target is not None and target.exists() and not self._excluded(target)
        except OSError:
            return False

    def is_dir(self, rel_path: str) -> bool:
        if self.cancel_token.cancelled:
            return False
        target = self._resolve(rel_path)
        try:
            return target is not None and target.is_dir() and not self._excluded(target)
        except OSError:
            return False

    def any_exists(self, paths: Iterable[str]) -> bool:
        return any(self.exists(path) for path in paths)

    def existing(self, paths: Iterable[str]) -> List[str]:
        return [path for path in paths if self.exists(path)]

    def list_dir(self, rel_path: str = "") -> List[str]:
        """Return sorted entry names of a directory inside the repository."""
        if self.cancel_token.cancelled:
            raise ScanIncomplete(rel_path, "cancelled")
        target = self._resolve(rel_path)
        if target is None or not target.exists() or self._excluded(target):
            raise FileNotFoundError(f"Path not found in repository: {rel_path}")
        if not target.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {rel_path}")
        try:
            names = sorted(os.listdir(target))
        except OSError as exc:
            raise ScanIncomplete(rel_path, exc.strerror or str(exc)) from exc
        return [name for name in names if not self._excluded(target / name)]

    def read_text(self, rel_path: str, max_bytes: int | None = None) -> TextSample:
        """Read up to ``max_bytes`` (default: the size cutoff) of a file as UTF-8."""
        if self.cancel_token.cancelled:
            raise ScanIncomplete(rel_path, "cancelled")
        if self.exhausted:
            raise ScanIncomplete(rel_path, "time budget exhausted")

        target = self._resolve(rel_path)
        if target is None:
            raise ScanIncomplete(rel_path, "outside repository root")
        if self._excluded(target):
            raise ScanIncomplete(rel_path, "excluded from scan")

        limit = self.config.max_file_bytes if max_bytes is None else max_bytes
        try:
            with target.open("rb") as handle:
                data = handle.read(limit + 1)
        except OSError as exc:
            raise ScanIncomplete(rel_path, exc.strerror or str(exc)) from exc

        truncated = len(data) > limit
        return TextSample(data[:limit].decode("utf-8", errors="replace"), truncated)

    def read_or_empty(self, rel_path: str) -> str:
        """Return file text, or an empty string when it is absent or unreadable."""
        if not self.exists(rel_path):
            return ""
        try:
            return self.read_text(rel_path).text
        except ScanIncomplete as exc:
            self.record(exc)
            return ""

    # Snapshot queries

    def find_files(self, pattern: str, exclude: Sequence[str] = ()) -> Iterator[str]:
        """Yield snapshot files matching ``pattern``; each call starts a fresh pass."""
        matcher = compile_glob(pattern)
        excluders = [compile_glob(item) for item in exclude]
        for path in self._snapshot():
            if self.cancel_token.cancelled:
                return
            if matcher(path) and not any(excluder(path) for excluder in excluders):
                yield path

    def find_any(self, patterns: Iterable[str], exclude: Sequence[str] = ()) -> List[str]:
        """Return unique files matching any pattern, in snapshot order."""
        matchers = [compile_glob(item) for item in patterns]
        excluders = [compile_glob(item) for item in exclude]
        found: List[str] = []
        for path in self._snapshot():
            if self.cancel_token.cancelled:
                break
            if any(matcher(path) for matcher in matchers) and not any(
                excluder(path) for excluder in excluders
            ):
                found.append(path)
        return found

    def find_dirs(self, pattern: str) -> List[str]:
        matcher = compile_glob(pattern)
        return [path for path in self.directories if matcher(path)]

    def search(
        self, regex: str | re.Pattern[str], pattern: str = "**/*", limit: int | None = None
    ) -> Iterator[SearchHit]:
        """Yield line-level matches of ``regex`` within files matching ``pattern``."""
        compiled = re.compile(regex) if isinstance(regex, str) else regex
        emitted = 0
        for path in self.find_files(pattern):
            if self.size_of(path) > self.config.max_file_bytes:
                continue
            for line_no, line in enumerate(self.read_or_empty(path).splitlines(), start=1):
                if compiled.search(line):
                    yield SearchHit(path, line_no, line)
                    emitted += 1
                    if limit is not None and emitted >= limit:
                        return
            if self.exhausted:
                return

    def sample(
        self, patterns: Iterable[str], limit: int | None = None, exclude: Sequence[str] = ()
    ) -> List[Tuple[str, str]]:
        """Return up to ``limit`` (default ``sample_limit``) ``(path, text)`` pairs."""
        cap = self.config.sample_limit if limit is None else limit
        samples: List[Tuple[str, str]] = []
        if cap <= 0:
            return samples
        for path in self.find_any(patterns, exclude):
            if self.size_of(path) > self.config.max_file_bytes:
                continue
            try:
                samples.append((path, self.read_text(path).text))
            except ScanIncomplete as exc:
                self.record(exc)
                if self.exhausted:
                    break
                continue
            if len(samples) >= cap:
                break
        return samples


__all__ = [
    "CancellationToken",
    "EvidenceScanner",
    "IgnoreRule",
    "SearchHit",
    "TextSample",
    "compile_glob",
]
