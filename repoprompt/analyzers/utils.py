"""Shared helper utilities for analyzer implementations."""

from __future__ import annotations

import json
import re
import tomllib
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..repo_scanner import EvidenceScanner

_REQUIREMENT_SPLIT = re.compile(r"[<>=!~;\[\s]")
_VERSION_PREFIX = re.compile(r"^[\^~>=<]+")


@dataclass(frozen=True)
class Dependencies:
    """Declared dependencies gathered from every recognised manifest."""

    node: Dict[str, str] = field(default_factory=dict)
    node_dev: Dict[str, str] = field(default_factory=dict)
    other: Dict[str, str] = field(default_factory=dict)
    package_json: Dict[str, Any] = field(default_factory=dict)

    @property
    def runtime_names(self) -> List[str]:
        return list(dict.fromkeys([*self.node, *self.other]))

    @property
    def all_names(self) -> List[str]:
        return list(dict.fromkeys([*self.node, *self.node_dev, *self.other]))

    def version_of(self, name: str) -> Optional[str]:
        for source in (self.node, self.node_dev, self.other):
            if name in source:
                return source[name] or None
        return None

    def has(self, name: str) -> bool:
        return name in self.node or name in self.node_dev or name in self.other


# Manifest loading


def load_dependencies(scanner: EvidenceScanner) -> Dependencies:
    """Collect dependencies from Node, Python, JVM, Ruby, PHP, Go and Rust manifests."""
    package_json = load_json(scanner, "package.json")
    node = _string_map(package_json.get("dependencies"))
    node_dev = _string_map(package_json.get("devDependencies"))

    other: Dict[str, str] = {}
    other.update(_parse_requirements(scanner.read_or_empty("requirements.txt")))
    other.update(_parse_pyproject(scanner.read_or_empty("pyproject.toml")))
    other.update(_parse_pom(scanner.read_or_empty("pom.xml")))
    for gradle in ("build.gradle", "build.gradle.kts"):
        other.update(_parse_gradle(scanner.read_or_empty(gradle)))
    other.update(_parse_gemfile(scanner.read_or_empty("Gemfile")))
    other.update(_string_map(load_json(scanner, "composer.json").get("require")))
    other.update(_parse_go_mod(scanner.read_or_empty("go.mod")))
    other.update(_parse_cargo(scanner.read_or_empty("Cargo.toml")))

    return Dependencies(node=node, node_dev=node_dev, other=other, package_json=package_json)


def load_json(scanner: EvidenceScanner, rel_path: str) -> Dict[str, Any]:
    """Return a parsed JSON object, or an empty dict when absent or malformed."""
    text = scanner.read_or_empty(rel_path)
    if not text.strip():
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def package_scripts(dependencies: Dependencies) -> Dict[str, str]:
    return _string_map(dependencies.package_json.get("scripts"))


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _string_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): str(item) if item is not None else "" for key, item in value.items()}


def _parse_requirements(text: str) -> Dict[str, str]:
    packages: Dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", "-")):
            continue
        name = _REQUIREMENT_SPLIT.split(stripped, 1)[0].strip()
        if name:
            packages[name.lower()] = stripped[len(name) :].strip().lstrip("=<>!~ ")
    return packages


def _parse_pyproject(text: str) -> Dict[str, str]:
    if not text.strip():
        return {}
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError:
        return {}

    packages: Dict[str, str] = {}
    project_deps = _mapping(data.get("project")).get("dependencies")
    if isinstance(project_deps, list):
        for dep in project_deps:
            if isinstance(dep, str):
                packages.update(_parse_requirements(dep))

    poetry = _mapping(_mapping(data.get("tool")).get("poetry"))
    for name, spec in _mapping(poetry.get("dependencies")).items():
        if name.lower() == "python":
            continue
        version = spec if isinstance(spec, str) else ""
        packages[name.lower()] = version.lstrip("^~=")
    return packages


def _parse_pom(text: str) -> Dict[str, str]:
    if not text.strip():
        return {}
    try:
        root = ET.fromstring(text)
    except ET.ParseError:
        return {}

    match = re.match(r"\{(.+)}", root.tag)
    prefix = f"{{{match.group(1)}}}" if match else ""
    packages: Dict[str, str] = {}
    for dep in root.findall(f".//{prefix}dependency"):
        group = dep.findtext(f"{prefix}groupId", default="")
        artifact = dep.findtext(f"{prefix}artifactId", default="")
        if group and artifact:
            packages[f"{group}:{artifact}"] = dep.findtext(f"{prefix}version", default="")
    return packages


def _parse_gradle(text: str) -> Dict[str, str]:
    packages: Dict[str, str] = {}
    pattern = re.compile(r"['\"]([\w\-.]+:[\w\-.]+)(?::([\w\-.]+))?['\"]")
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("//"):
            continue
        if any(token in line for token in ("implementation", "api", "compile", "runtimeOnly")):
            match = pattern.search(line)
            if match:
                packages[match.group(1)] = match.group(2) or ""
    return packages


def _parse_gemfile(text: str) -> Dict[str, str]:
    packages: Dict[str, str] = {}
    for match in re.finditer(r"^\s*gem\s+['\"]([\w\-.]+)['\"](?:\s*,\s*['\"]([^'\"]+)['\"])?", text, re.M):
        packages[match.group(1)] = (match.group(2) or "").lstrip("~>= ")
    return packages


def _parse_go_mod(text: str) -> Dict[str, str]:
    packages: Dict[str, str] = {}
    for match in re.finditer(r"^\s*(?:require\s+)?([\w.\-]+\.[\w.\-]+/[\w.\-/]+)\s+v([\w.\-+]+)", text, re.M):
        packages[match.group(1)] = match.group(2)
    return packages


def _parse_cargo(text: str) -> Dict[str, str]:
    if not text.strip():
        return {}
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError:
        return {}
    packages: Dict[str, str] = {}
    for name, spec in _mapping(data.get("dependencies")).items():
        if isinstance(spec, str):
            packages[name] = spec
        elif isinstance(spec, dict):
            packages[name] = str(spec.get("version", ""))
    return packages


# Version helpers


def clean_version(version: str | None) -> str:
    return _VERSION_PREFIX.sub("", (version or "").strip())


def version_parts(version: str | None) -> Tuple[int, ...]:
    """Return the leading numeric components of a version spec (``^1.4.2`` -> (1, 4, 2))."""
    parts: List[int] = []
    for piece in clean_version(version).split("."):
        match = re.match(r"\d+", piece)
        if match is None:
            break
        parts.append(int(match.group(0)))
    return tuple(parts)


def is_old_version(version: str | None) -> bool:
    """Major 0, or major 1 below minor 5, counts as old; unparseable specs never do."""
    parts = version_parts(version)
    if len(parts) < 2:
        return False
    major, minor = parts[0], parts[1]
    return major == 0 or (major == 1 and minor < 5)


# Text helpers


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def first_match(text: str, table: Iterable[Tuple[str, Iterable[str]]], default: str) -> str:
    """Return the label of the first ``(label, keywords)`` entry with a keyword in ``text``."""
    for label, keywords in table:
        if contains_any(text, keywords):
            return label
    return default


def read_all(scanner: EvidenceScanner, paths: Iterable[str]) -> str:
    return "\n".join(scanner.read_or_empty(path) for path in paths)


def readme_text(scanner: EvidenceScanner) -> str:
    for candidate in ("README.md", "README.rst", "README.txt", "readme.md", "README"):
        if scanner.exists(candidate):
            return scanner.read_or_empty(candidate)
    return ""


__all__ = [
    "Dependencies",
    "clean_version",
    "contains_any",
    "first_match",
    "is_old_version",
    "load_dependencies",
    "load_json",
    "package_scripts",
    "read_all",
    "readme_text",
    "version_parts",
]
