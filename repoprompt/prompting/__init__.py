"""Prompt catalog, synthesis, decomposition and validation."""

from .catalog import CATALOG, PromptTemplate
from .constants import PHASE_TITLES, PHASES
from .subprompts import SubPromptGenerator
from .synthesizer import PromptSynthesizer
from .validator import LibraryValidation, PromptValidator

__all__ = [
    "CATALOG",
    "LibraryValidation",
    "PHASES",
    "PHASE_TITLES",
    "PromptSynthesizer",
    "PromptTemplate",
    "PromptValidator",
    "SubPromptGenerator",
]
