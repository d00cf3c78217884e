"""Immutable analysis records shared across repoprompt components."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _serialise(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {
            _camel(item.name): _serialise(getattr(value, item.name)) for item in fields(value)
        }
    if isinstance(value, Mapping):
        return {str(key): _serialise(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialise(item) for item in value]
    return value


def clamp(value: float, low: float, high: float) -> float:
    """Clamp ``value`` into the closed range ``[low, high]``."""
    if value != value:  # NaN
        return low
    return max(low, min(high, value))


def freeze(mapping: Mapping[str, Iterable[Any]] | None) -> Mapping[str, Tuple[Any, ...]]:
    """Return a read-only mapping whose values are tuples, preserving key order."""
    return MappingProxyType({key: tuple(values) for key, values in (mapping or {}).items()})


class Record:
    """Mixin providing JSON-ready serialisation with camelCase field names."""

    def to_dict(self) -> Dict[str, Any]:
        return _serialise(self)


@dataclass(frozen=True)
class Technology(Record):
    """A detected technology with its confidence and supporting evidence."""

    name: str
    confidence: float
    evidence: Tuple[str, ...] = ()
    version: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", round(clamp(float(self.confidence), 0.0, 1.0), 4))
        object.__setattr__(self, "evidence", tuple(dict.fromkeys(self.evidence)))


@dataclass(frozen=True)
class CodeExample(Record):
    """A cited excerpt of repository source."""

    file: str
    start_line: int
    end_line: int
    content: str
    category: str
    complexity: str
    patterns: Tuple[str, ...] = ()
    score: int = 0


@dataclass(frozen=True)
class FileNode(Record):
    """Node of the importance-annotated file tree."""

    name: str
    path: str
    type: str
    importance: str
    children: Tuple["FileNode", ...] = ()


@dataclass(frozen=True)
class ImportantFiles(Record):
    config: Tuple[str, ...] = ()
    entry_points: Tuple[str, ...] = ()
    documentation: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ProjectStructure(Record):
    """Project-level classification derived from layout and manifests."""

    type: str = "unknown"
    architecture: str = "monolith"
    build_system: Tuple[str, ...] = ()
    package_manager: str = "unknown"
    test_frameworks: Tuple[str, ...] = ()
    important_files: ImportantFiles = field(default_factory=ImportantFiles)


@dataclass(frozen=True)
class PatternDetection(Record):
    name: str
    description: str
    frequency: int
    examples: Tuple[CodeExample, ...] = ()
    recommendation: str = ""


@dataclass(frozen=True)
class CodeQualityMetrics(Record):
    """Whole-repository heuristics computed over sampled source files."""

    average_file_size: float = 0.0
    total_lines: int = 0
    comment_ratio: float = 0.0
    duplicate_code_percentage: float = 0.0
    maintainability_index: float = 0.0
    cyclomatic_complexity: float = 0.0
    cognitive_complexity: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "comment_ratio", round(clamp(self.comment_ratio, 0.0, 1.0), 4))
        object.__setattr__(
            self,
            "duplicate_code_percentage",
            round(clamp(self.duplicate_code_percentage, 0.0, 100.0), 2),
        )
        object.__setattr__(
            self, "maintainability_index", round(clamp(self.maintainability_index, 0.0, 100.0), 2)
        )


# Documentation facet


@dataclass(frozen=True)
class DocumentationTypes(Record):
    readme: bool = False
    api_docs: bool = False
    user_guides: bool = False
    architecture_docs: bool = False
    runbooks: bool = False
    code_comments: bool = False

    def count(self) -> int:
        return sum(1 for item in fields(self) if getattr(self, item.name))


@dataclass(frozen=True)
class DocumentationQuality(Record):
    completeness: int = 0
    accuracy: int = 0
    accessibility: int = 0

    def __post_init__(self) -> None:
        for name in ("completeness", "accuracy", "accessibility"):
            object.__setattr__(self, name, int(clamp(getattr(self, name), 0, 100)))


@dataclass(frozen=True)
class DocumentationAnalysis(Record):
    coverage: str
    types: DocumentationTypes
    quality: DocumentationQuality
    gaps: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()
    comment_ratio: float = 0.0
    overall_score: float = 0.0


# Workflow facet


@dataclass(frozen=True)
class CICDInfo(Record):
    platforms: Tuple[str, ...] = ()
    has_ci: bool = False
    has_cd: bool = False
    quality: str = "basic"
    gaps: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BranchingInfo(Record):
    strategy: str = "unknown"
    protection: bool = False
    review_required: bool = False


@dataclass(frozen=True)
class AutomationInfo(Record):
    testing: bool = False
    linting: bool = False
    formatting: bool = False
    security: bool = False
    deployment: bool = False


@dataclass(frozen=True)
class CollaborationInfo(Record):
    issue_templates: bool = False
    pr_templates: bool = False
    codeowners: bool = False
    discussions: bool = False


@dataclass(frozen=True)
class WorkflowAnalysis(Record):
    cicd: CICDInfo
    branching: BranchingInfo
    automation: AutomationInfo
    collaboration: CollaborationInfo
    recommendations: Tuple[str, ...] = ()


# Dependency facet


@dataclass(frozen=True)
class DependencySecurity(Record):
    vulnerabilities: int = 0
    outdated: int = 0
    risk_level: str = "low"
    vulnerable_packages: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DependencyMaintenance(Record):
    deprecated: Tuple[str, ...] = ()
    unmaintained: Tuple[str, ...] = ()
    alternatives: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: freeze({}))


@dataclass(frozen=True)
class LicensingInfo(Record):
    types: Tuple[str, ...] = ()
    issues: Tuple[str, ...] = ()
    compliance: str = "unknown"


@dataclass(frozen=True)
class DependencyUsage(Record):
    direct: int = 0
    transitive: int = 0
    bundle_size_kb: int = 0
    treeshaking: bool = False


@dataclass(frozen=True)
class DependencyAnalysis(Record):
    security: DependencySecurity
    maintenance: DependencyMaintenance
    licensing: LicensingInfo
    usage: DependencyUsage
    recommendations: Tuple[str, ...] = ()


# Incident facet


@dataclass(frozen=True)
class IncidentPreparedness(Record):
    runbooks: bool = False
    monitoring: bool = False
    alerting: bool = False
    playbooks: bool = False


@dataclass(frozen=True)
class ResponseCapability(Record):
    escalation: bool = False
    communication: bool = False
    rollback: bool = False
    postmortem: bool = False


@dataclass(frozen=True)
class IncidentAnalysis(Record):
    preparedness: IncidentPreparedness
    response: ResponseCapability
    risk_areas: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()


# Governance facet


@dataclass(frozen=True)
class ComplianceInfo(Record):
    standards: Tuple[str, ...] = ()
    frameworks: Tuple[str, ...] = ()
    project_type: str = "general"
    files: Tuple[str, ...] = ()
    gaps: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PolicyInfo(Record):
    security: bool = False
    privacy: bool = False
    data_retention: bool = False
    access_control: bool = False


@dataclass(frozen=True)
class RulesetInfo(Record):
    linting: Tuple[str, ...] = ()
    security: Tuple[str, ...] = ()
    accessibility: Tuple[str, ...] = ()
    performance: Tuple[str, ...] = ()


@dataclass(frozen=True)
class GovernanceAnalysis(Record):
    compliance: ComplianceInfo
    policies: PolicyInfo
    rulesets: RulesetInfo
    recommendations: Tuple[str, ...] = ()


# Business facet


@dataclass(frozen=True)
class BusinessDomain(Record):
    industry: str = "Technology"
    business_model: str = "Software Product"
    target_audience: str = "General Users"


@dataclass(frozen=True)
class ValueProposition(Record):
    problems: Tuple[str, ...] = ()
    solutions: Tuple[str, ...] = ()
    advantages: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BusinessOpportunities(Record):
    features: Tuple[str, ...] = ()
    integrations: Tuple[str, ...] = ()
    optimizations: Tuple[str, ...] = ()
    markets: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BusinessRisks(Record):
    technical: Tuple[str, ...] = ()
    market: Tuple[str, ...] = ()
    operational: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BusinessAnalysis(Record):
    domain: BusinessDomain
    value: ValueProposition
    opportunities: BusinessOpportunities
    risks: BusinessRisks
    gaps: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()


# Composition


@dataclass(frozen=True)
class Insights(Record):
    strengths: Tuple[str, ...] = ()
    improvements: Tuple[str, ...] = ()
    opportunities: Tuple[str, ...] = ()
    risks: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CodebaseAnalysis(Record):
    """Root aggregate of one analysis run. Read-only once composed."""

    name: str
    path: str
    analyzed_at: str
    technologies: Mapping[str, Tuple[Technology, ...]]
    structure: ProjectStructure
    file_tree: FileNode
    examples: Mapping[str, Tuple[CodeExample, ...]]
    patterns: Tuple[PatternDetection, ...]
    quality: CodeQualityMetrics
    insights: Insights
    documentation: Optional[DocumentationAnalysis] = None
    workflow: Optional[WorkflowAnalysis] = None
    dependencies: Optional[DependencyAnalysis] = None
    incident: Optional[IncidentAnalysis] = None
    governance: Optional[GovernanceAnalysis] = None
    business: Optional[BusinessAnalysis] = None
    scan_issues: Tuple[str, ...] = ()

    def all_technologies(self) -> Tuple[Technology, ...]:
        return tuple(tech for items in self.technologies.values() for tech in items)

    def all_examples(self) -> Tuple[CodeExample, ...]:
        return tuple(example for items in self.examples.values() for example in items)


# Prompt synthesis


@dataclass(frozen=True)
class PromptContext(Record):
    real_examples: Tuple[CodeExample, ...] = ()
    patterns: Tuple[str, ...] = ()
    technologies: Tuple[str, ...] = ()
    file_structure: str = ""
    conventions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PromptUsage(Record):
    when: str
    triggers: Tuple[str, ...] = ()
    related_prompts: Tuple[str, ...] = ()
    expected_outcome: str = ""


@dataclass(frozen=True)
class SubPrompt(Record):
    """One ordered step of a decomposed prompt."""

    id: str
    parent_id: str
    title: str
    description: str
    template: str
    order: int
    estimated_time: str
    prerequisites: Tuple[str, ...] = ()
    outputs: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidationIssues(Record):
    clarity: Tuple[str, ...] = ()
    completeness: Tuple[str, ...] = ()
    specificity: Tuple[str, ...] = ()
    actionability: Tuple[str, ...] = ()

    def count(self) -> int:
        return sum(len(getattr(self, item.name)) for item in fields(self))


@dataclass(frozen=True)
class PromptValidation(Record):
    """Quality score (0-100) of one prompt with the issues that lowered it."""

    score: int
    issues: ValidationIssues
    suggestions: Tuple[str, ...] = ()
    optimized_template: Optional[str] = None


@dataclass(frozen=True)
class GeneratedPrompt(Record):
    """A lifecycle-phase prompt bound to evidence from one analysis."""

    id: str
    title: str
    category: str
    subcategory: str
    description: str
    template: str
    context: PromptContext
    usage: PromptUsage
    complexity: str
    estimated_time_to_complete: str
    prerequisites: Tuple[str, ...] = ()
    applicable_to_files: Tuple[str, ...] = ()
    sub_prompts: Tuple[SubPrompt, ...] = ()
    validation: Optional[PromptValidation] = None


@dataclass(frozen=True)
class LibraryMetadata(Record):
    repo_name: str
    generated_at: str
    version: str
    total_prompts: int
    analysis_id: str
    skipped: Tuple[str, ...] = ()
    validation_score: Optional[int] = None
    validation_recommendations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LibraryInstructions(Record):
    setup: str
    usage: str
    examples: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PromptLibrary(Record):
    metadata: LibraryMetadata
    categories: Mapping[str, Tuple[GeneratedPrompt, ...]]
    instructions: LibraryInstructions

    def prompts(self) -> Tuple[GeneratedPrompt, ...]:
        return tuple(prompt for items in self.categories.values() for prompt in items)


__all__ = [
    "AutomationInfo",
    "BranchingInfo",
    "BusinessAnalysis",
    "BusinessDomain",
    "BusinessOpportunities",
    "BusinessRisks",
    "CICDInfo",
    "CodeExample",
    "CodeQualityMetrics",
    "CodebaseAnalysis",
    "CollaborationInfo",
    "ComplianceInfo",
    "DependencyAnalysis",
    "DependencyMaintenance",
    "DependencySecurity",
    "DependencyUsage",
    "DocumentationAnalysis",
    "DocumentationQuality",
    "DocumentationTypes",
    "FileNode",
    "GeneratedPrompt",
    "GovernanceAnalysis",
    "ImportantFiles",
    "IncidentAnalysis",
    "IncidentPreparedness",
    "Insights",
    "LibraryInstructions",
    "LibraryMetadata",
    "LicensingInfo",
    "PatternDetection",
    "PolicyInfo",
    "ProjectStructure",
    "PromptContext",
    "PromptLibrary",
    "PromptUsage",
    "PromptValidation",
    "Record",
    "ResponseCapability",
    "RulesetInfo",
    "SubPrompt",
    "Technology",
    "ValidationIssues",
    "ValueProposition",
    "WorkflowAnalysis",
    "clamp",
    "freeze",
]
