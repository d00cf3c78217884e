"""Shared constants for prompt synthesis."""

from __future__ import annotations

LIBRARY_VERSION = "1.0.0"

PHASES: tuple[str, ...] = (
    "planning",
    "design",
    "implementation",
    "testing",
    "review",
    "deployment",
    "maintenance",
    "documentation",
    "workflow",
    "incident",
    "analysis",
    "governance",
    "business",
)

PHASE_TITLES: dict[str, str] = {
    "planning": "Planning",
    "design": "Design",
    "implementation": "Implementation",
    "testing": "Testing",
    "review": "Code Review",
    "deployment": "Deployment",
    "maintenance": "Maintenance",
    "documentation": "Documentation",
    "workflow": "Workflow & Automation",
    "incident": "Incident Response",
    "analysis": "Analysis",
    "governance": "Governance",
    "business": "Business",
}

MAX_REAL_EXAMPLES = 5
MAX_TECHNOLOGIES = 10
MAX_STRUCTURE_ENTRIES = 5
ANALYSIS_ID_LENGTH = 16


__all__ = [
    "ANALYSIS_ID_LENGTH",
    "LIBRARY_VERSION",
    "MAX_REAL_EXAMPLES",
    "MAX_STRUCTURE_ENTRIES",
    "MAX_TECHNOLOGIES",
    "PHASES",
    "PHASE_TITLES",
]
