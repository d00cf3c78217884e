"""Tests for structure analysis and the file tree."""

from __future__ import annotations

from repoprompt.analyzers.structure import StructureAnalyzer, build_file_tree, file_importance
from repoprompt.analyzers.utils import load_dependencies
from tests._fixtures.repo_builder import RepoBuilder


def _structure(repo_builder: RepoBuilder):
    scanner = repo_builder.scanner()
    return StructureAnalyzer().analyze(scanner, load_dependencies(scanner))


def test_react_and_express_repository_is_fullstack_monolith(repo_builder: RepoBuilder) -> None:
    repo_builder.write_json(
        "package.json",
        {
            "dependencies": {"react": "^18.2.0", "express": "^4.18.2"},
            "devDependencies": {"jest": "^29.7.0"},
            "scripts": {"build": "vite build", "vite": "echo unrelated"},
        },
    )
    repo_builder.write(
        {
            "src/App.jsx": "export default function App() {}\n",
            "server.js": "const express = require('express')\n",
            "yarn.lock": "",
        }
    )

    structure = _structure(repo_builder)

    assert structure.type == "fullstack"
    assert structure.architecture == "monolith"
    assert structure.package_manager == "yarn"
    assert structure.build_system == ("Vite",)
    assert structure.test_frameworks == ("Jest",)
    assert "server.js" in structure.important_files.entry_points
    assert "package.json" in structure.important_files.config


def test_script_names_do_not_count_as_build_tools(repo_builder: RepoBuilder) -> None:
    repo_builder.write_json("package.json", {"scripts": {"webpack": "node build.js"}})

    assert _structure(repo_builder).build_system == ()


def test_python_service_layout(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "requirements.txt": "fastapi==0.110.0\npytest==8.0.0\n",
            "app.py": "from fastapi import FastAPI\n",
            "tests/conftest.py": "",
        }
    )

    structure = _structure(repo_builder)

    assert structure.type == "backend"
    assert structure.package_manager == "pip"
    assert structure.test_frameworks == ("pytest",)
    assert "app.py" in structure.important_files.entry_points


def test_empty_repository_is_unknown(repo_builder: RepoBuilder) -> None:
    structure = _structure(repo_builder)

    assert structure.type == "unknown"
    assert structure.architecture == "monolith"
    assert structure.package_manager == "unknown"


def test_microservices_detected_from_compose_and_k8s(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"docker-compose.yml": "services: {}\n", "k8s/deployment.yaml": "kind: Deployment\n"})

    assert _structure(repo_builder).architecture == "microservices"


def test_file_tree_orders_and_annotates_importance(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "README.md": "# Demo\n",
            "notes.txt": "scratch\n",
            "src/index.js": "export {}\n",
            "misc/deep/a/b/c.txt": "x\n",
        }
    )

    tree = build_file_tree(repo_builder.scanner(), max_depth=3)

    assert tree.importance == "high"
    assert [child.name for child in tree.children] == ["src", "misc", "README.md", "notes.txt"]
    src = tree.children[0]
    assert src.importance == "high"
    assert src.children[0].importance == "high"
    misc = tree.children[1]
    deep = misc.children[0]
    assert deep.children[0].name == "a"
    assert deep.children[0].children == ()


def test_file_importance_rules() -> None:
    assert file_importance("package.json", "package.json") == "high"
    assert file_importance("main.py", "main.py") == "high"
    assert file_importance("button.component.tsx", "src/button.component.tsx") == "medium"
    assert file_importance("client.js", "src/api/client.js") == "medium"
    assert file_importance("notes.txt", "notes.txt") == "low"
