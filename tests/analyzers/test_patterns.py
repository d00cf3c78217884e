"""Tests for pattern detection."""

from __future__ import annotations

from repoprompt.analyzers.patterns import PatternDetector
from tests._fixtures.repo_builder import RepoBuilder

HOOK = "export function useCart() {\n  return 1\n}\n"
MIDDLEWARE = (
    "const app = express()\n"
    "app.use((req, res, next) => {\n"
    "  next()\n"
    "})\n"
    "app.use((req, res, next) => next())\n"
)


def _names(detections):
    return [detection.name for detection in detections]


def test_detects_hooks_by_path_and_code() -> None:
    detections = PatternDetector().detect_in([("src/hooks/useCart.js", HOOK)])

    hook = next(item for item in detections if item.name == "Custom React Hooks")
    assert hook.frequency == 1
    assert hook.examples[0].file == "src/hooks/useCart.js"
    assert hook.examples[0].patterns == ("Custom React Hooks",)


def test_detections_sorted_by_frequency() -> None:
    detections = PatternDetector().detect_in(
        [("src/hooks/useCart.js", HOOK), ("src/server.js", MIDDLEWARE)]
    )

    names = _names(detections)
    middleware = next(item for item in detections if item.name == "Express Middleware Pattern")
    assert middleware.frequency == 2
    assert names.index("Express Middleware Pattern") < names.index("Custom React Hooks")
    frequencies = [item.frequency for item in detections]
    assert frequencies == sorted(frequencies, reverse=True)


def test_path_only_rule_counts_files() -> None:
    detections = PatternDetector().detect_in(
        [
            ("app/controllers/users.py", "class UsersController:\n    pass\n"),
            ("app/models/user.py", "class User:\n    pass\n"),
        ]
    )

    mvc = next(item for item in detections if item.name == "Model-View-Controller (MVC)")
    assert mvc.frequency == 2
    assert len(mvc.examples) == 2


def test_no_samples_no_patterns() -> None:
    assert PatternDetector().detect_in([]) == ()


def test_detect_reads_scanner_sample(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {"src/middleware/auth.js": "export function requireAuth(req, res, next) {\n  next()\n}\n"}
    )

    assert "Authentication Middleware" in _names(PatternDetector().detect(repo_builder.scanner()))
