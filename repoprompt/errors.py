"""Error taxonomy shared by the scanner, analyzers and prompt synthesis."""

from __future__ import annotations


class RepoPromptError(RuntimeError):
    """Base class for every error raised by repoprompt."""


class ConfigurationError(RepoPromptError):
    """Raised when analysis options are invalid. Fatal, raised before scanning."""


class ScanIncomplete(RepoPromptError):
    """A read failed, was skipped or was cut short by a budget or cancellation.

    Analyzers treat this as missing evidence rather than a failure of the run.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class SynthesisSkip(RepoPromptError):
    """A prompt template could not bind a required slot to real evidence."""

    def __init__(self, template_id: str, slot: str) -> None:
        super().__init__(f"Template '{template_id}' has no evidence for slot '{slot}'")
        self.template_id = template_id
        self.slot = slot


__all__ = ["ConfigurationError", "RepoPromptError", "ScanIncomplete", "SynthesisSkip"]
