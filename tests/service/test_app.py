"""Tests for the FastAPI service mode."""

from __future__ import annotations

from typing import Any, Dict

from fastapi.testclient import TestClient

from repoprompt.errors import ConfigurationError
from repoprompt.orchestrator import Orchestrator
from repoprompt.service.app import AnalysisOptions, create_app
from tests._fixtures.repo_builder import RepoBuilder


class _RecordingFactory:
    """Builds real orchestrators while remembering the overrides it was given."""

    def __init__(self) -> None:
        self.calls: list[Dict[str, Any]] = []

    def __call__(self, overrides: Dict[str, Any]) -> Orchestrator:
        self.calls.append(overrides)
        return Orchestrator(config_overrides=overrides)


class _FailingOrchestrator:
    def analyze(self, path: str):
        raise ConfigurationError("Unknown facets requested: astrology")


def test_health_endpoint() -> None:
    client = TestClient(create_app())
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_analyze_endpoint_passes_aliased_options(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"README.md": "# Demo\n", "src/app.py": "print('hi')\n"})
    factory = _RecordingFactory()
    client = TestClient(create_app(factory))

    response = client.post(
        "/analyze",
        json={
            "path": str(repo_builder.path()),
            "options": {"excludePatterns": ["build/**"], "maxFileSizeKB": 200, "includeTests": False, "facets": ["documentation"]},
        },
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["name"] == "repo"
    assert payload["documentation"]["types"]["readme"] is True
    assert payload["business"] is None
    assert factory.calls == [
        {
            "exclude_patterns": ["build/**"],
            "max_file_size_kb": 200,
            "include_tests": False,
            "facets": ["documentation"],
        }
    ]


def test_prompts_endpoint_returns_library(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/app.py": "def main():\n    return 1\n"})
    client = TestClient(create_app())

    response = client.post("/prompts", json={"path": str(repo_builder.path())})

    assert response.status_code == 200
    metadata = response.json()["metadata"]
    assert metadata["repoName"] == "repo"
    assert len(metadata["analysisId"]) == 16


def test_missing_repository_maps_to_404(tmp_path) -> None:
    client = TestClient(create_app())

    response = client.post("/analyze", json={"path": str(tmp_path / "missing")})

    assert response.status_code == 404
    assert "not found" in response.json()["detail"]


def test_file_path_maps_to_400(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"notes.txt": "hello"})
    client = TestClient(create_app())

    response = client.post("/analyze", json={"path": str(repo_builder.path() / "notes.txt")})

    assert response.status_code == 400


def test_configuration_error_maps_to_400() -> None:
    client = TestClient(create_app(lambda overrides: _FailingOrchestrator()))

    response = client.post("/analyze", json={"path": "."})

    assert response.status_code == 400
    assert "astrology" in response.json()["detail"]


def test_invalid_payload_is_rejected() -> None:
    client = TestClient(create_app())

    response = client.post("/analyze", json={"options": {}})

    assert response.status_code == 422


def test_options_accept_field_names() -> None:
    options = AnalysisOptions(sample_limit=3)

    assert options.overrides() == {"sample_limit": 3}
