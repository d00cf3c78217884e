"""Decomposition of large prompts into ordered, smaller sub-prompts."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Dict, List, Sequence, Tuple

from ..models import CodebaseAnalysis, GeneratedPrompt, SubPrompt

DECOMPOSED_PHASES = ("workflow", "incident")


@dataclass(frozen=True)
class SubPromptStep:
    """Declarative step; ``body`` is a ``str.format`` template over the step context."""

    suffix: str
    title: str
    description: str
    estimated_time: str
    prerequisites: Tuple[str, ...]
    outputs: Tuple[str, ...]
    body: str


_PLANNING = SubPromptStep(
    suffix="planning",
    title="Planning & Architecture Review",
    description="Review existing architecture and plan the implementation approach",
    estimated_time="30-45 minutes",
    prerequisites=("Understanding of current system architecture",),
    outputs=("Implementation plan", "Architecture decisions", "Risk assessment"),
    body="""Planning phase for: {title}

Current System Context:
{system_context}

Planning Focus: [YOUR SPECIFIC REQUIREMENTS]

Please plan:
1. Detailed implementation approach
2. Architecture decisions and rationale
3. Risk assessment and mitigation strategies
4. Resource requirements and timeline
5. Success criteria and validation methods""",
)

_IMPLEMENTATION_BODY = """Implementation phase for: {title}

Following the planned approach, implement:

Requirements: [FROM PLANNING PHASE]
Architecture: {architecture}
Patterns to Follow: {patterns}

Implement:
1. Core functionality following our patterns
2. Error handling and edge cases
3. Unit tests for critical paths
4. Documentation for new code
5. Integration with existing systems"""

STEPS_BY_COMPLEXITY: Dict[str, Tuple[SubPromptStep, ...]] = {
    "advanced": (
        _PLANNING,
        SubPromptStep(
            suffix="implementation",
            title="Core Implementation",
            description="Implement the main functionality following the planned approach",
            estimated_time="60-90 minutes",
            prerequisites=("Completed planning phase", "Development environment setup"),
            outputs=("Working implementation", "Unit tests", "Documentation"),
            body=_IMPLEMENTATION_BODY,
        ),
        SubPromptStep(
            suffix="integration",
            title="Integration & Testing",
            description="Integrate with existing systems and perform comprehensive testing",
            estimated_time="45-60 minutes",
            prerequisites=("Core implementation completed",),
            outputs=("Integration tests", "Performance validation", "Error handling"),
            body="""Integration and testing phase for: {title}

Integration Requirements: [SPECIFY YOUR INTEGRATION NEEDS]

Test and integrate:
1. Integration with existing APIs/services
2. End-to-end testing scenarios
3. Performance testing and optimization
4. Error handling and fallback mechanisms
5. Monitoring and observability""",
        ),
        SubPromptStep(
            suffix="review",
            title="Code Review & Optimization",
            description="Review implementation for quality, security, and performance",
            estimated_time="30-45 minutes",
            prerequisites=("Implementation and testing completed",),
            outputs=("Code review feedback", "Performance optimizations", "Security validation"),
            body="""Code review and optimization for: {title}

Review Focus: [SPECIFY REVIEW PRIORITIES]

Review for:
1. Code quality and maintainability
2. Security vulnerabilities and best practices
3. Performance optimizations
4. Accessibility compliance
5. Documentation completeness""",
        ),
    ),
    "intermediate": (
        SubPromptStep(
            suffix="setup",
            title="Setup & Preparation",
            description="Prepare the development environment and gather requirements",
            estimated_time="15-30 minutes",
            prerequisites=("Access to codebase",),
            outputs=("Environment setup", "Requirements clarification"),
            body="""Setup and preparation for: {title}

Setup Requirements: [YOUR SPECIFIC SETUP NEEDS]

Prepare:
1. Development environment
2. Required dependencies and tools
3. Configuration files
4. Test data and fixtures
5. Documentation review""",
        ),
        SubPromptStep(
            suffix="implementation",
            title="Implementation",
            description="Implement the required functionality",
            estimated_time="45-75 minutes",
            prerequisites=("Setup completed",),
            outputs=("Working code", "Basic tests"),
            body=_IMPLEMENTATION_BODY,
        ),
        SubPromptStep(
            suffix="validation",
            title="Validation & Testing",
            description="Test the implementation and validate it meets requirements",
            estimated_time="20-30 minutes",
            prerequisites=("Implementation completed",),
            outputs=("Test results", "Validation report"),
            body="""Validation and testing for: {title}

Validation Criteria: [YOUR ACCEPTANCE CRITERIA]

Validate:
1. Functional requirements met
2. Non-functional requirements (performance, security)
3. Integration points working correctly
4. Error scenarios handled properly
5. User experience and accessibility""",
        ),
    ),
    "beginner": (
        SubPromptStep(
            suffix="understand",
            title="Understanding the Task",
            description="Break down the requirements and understand what needs to be done",
            estimated_time="10-15 minutes",
            prerequisites=("Basic understanding of the project",),
            outputs=("Clear task breakdown", "Questions clarified"),
            body="""Understanding the task: {title}

Task Context: {description}

Break down and understand:
1. What exactly needs to be accomplished
2. Why this task is important
3. How it fits into the larger system
4. What resources and tools are needed
5. What success looks like""",
        ),
        SubPromptStep(
            suffix="research",
            title="Research & Examples",
            description="Look at existing examples and understand the patterns used",
            estimated_time="15-20 minutes",
            prerequisites=("Task understanding",),
            outputs=("Example analysis", "Pattern identification"),
            body="""Research and examples for: {title}

Research Focus: [YOUR LEARNING OBJECTIVES]

Research:
1. Similar implementations in our codebase
2. Best practices for this type of task
3. Common patterns and approaches
4. Potential pitfalls and how to avoid them
5. Tools and libraries that can help""",
        ),
        SubPromptStep(
            suffix="implement",
            title="Step-by-Step Implementation",
            description="Implement the solution following the identified patterns",
            estimated_time="30-45 minutes",
            prerequisites=("Research completed",),
            outputs=("Working implementation",),
            body="""Step-by-step implementation: {title}

Implementation Plan: [FROM RESEARCH PHASE]

Implement step by step:
1. Start with the simplest version that works
2. Add complexity gradually
3. Test each step before moving forward
4. Follow the patterns you researched
5. Ask for help when needed""",
        ),
    ),
}

STEPS_BY_PHASE: Dict[str, Tuple[SubPromptStep, ...]] = {
    "workflow": (
        SubPromptStep(
            suffix="audit",
            title="Current Workflow Audit",
            description="Analyze existing workflow processes and identify bottlenecks",
            estimated_time="30 minutes",
            prerequisites=("Access to CI/CD configurations",),
            outputs=("Workflow assessment report", "Improvement recommendations"),
            body="""Audit the current workflow setup in our project:

Current CI/CD Setup: {cicd_platforms}
Automation Level: {automation_level}

Please analyze:
1. Current workflow efficiency
2. Bottlenecks and pain points
3. Security gaps in the workflow
4. Opportunities for automation
5. Best practices not currently implemented""",
        ),
        SubPromptStep(
            suffix="optimization",
            title="Workflow Optimization",
            description="Implement improvements to the workflow based on audit findings",
            estimated_time="60-90 minutes",
            prerequisites=("Workflow audit completed",),
            outputs=("Optimized workflow configuration", "Implementation guide"),
            body="""Optimize our workflow based on the audit findings:

Focus Areas: [YOUR PRIORITY AREAS FROM AUDIT]

Our Current Workflow: {workflow_summary}

Please implement:
1. Workflow optimizations for identified bottlenecks
2. Additional automation where beneficial
3. Security improvements in the pipeline
4. Performance enhancements
5. Monitoring and alerting improvements""",
        ),
    ),
    "incident": (
        SubPromptStep(
            suffix="preparation",
            title="Incident Response Preparation",
            description="Set up incident response procedures and documentation",
            estimated_time="45 minutes",
            prerequisites=("Understanding of system architecture",),
            outputs=("Incident response playbook", "Contact procedures", "Templates"),
            body="""Prepare incident response procedures for our application:

System Type: {project_type}
Critical Components: {risk_areas}

Create:
1. Incident classification system (P0-P3)
2. Response team contact information
3. Escalation procedures
4. Communication templates
5. Initial response checklist""",
        ),
        SubPromptStep(
            suffix="runbooks",
            title="Create Operational Runbooks",
            description="Develop specific runbooks for common incident scenarios",
            estimated_time="90 minutes",
            prerequisites=("Incident response procedures defined",),
            outputs=("Scenario-specific runbooks", "Diagnostic scripts", "Recovery procedures"),
            body="""Create operational runbooks for common incident scenarios:

Common Issues in {project_type} applications:
- Database connectivity issues
- High memory/CPU usage
- API endpoint failures
- Authentication service disruptions

For each scenario, create:
1. Problem identification steps
2. Immediate response actions
3. Diagnostic procedures
4. Resolution steps
5. Post-incident tasks""",
        ),
    ),
    "business": (
        SubPromptStep(
            suffix="opportunity-analysis",
            title="Business Opportunity Analysis",
            description="Analyze and prioritize business opportunities",
            estimated_time="60 minutes",
            prerequisites=("Business context understanding",),
            outputs=("Opportunity assessment matrix", "Prioritization framework"),
            body="""Analyze business opportunities for our {business_model}:

Current Focus: {target_audience}
Identified Opportunities: {features}

Analyze:
1. Market size and potential for each opportunity
2. Technical feasibility and effort required
3. Competitive landscape and differentiation
4. Revenue potential and business impact
5. Resource requirements and timeline""",
        ),
        SubPromptStep(
            suffix="strategy",
            title="Business Strategy Development",
            description="Develop actionable business strategy based on analysis",
            estimated_time="75 minutes",
            prerequisites=("Opportunity analysis completed",),
            outputs=("Business roadmap", "GTM strategy", "Success metrics"),
            body="""Develop business strategy based on opportunity analysis:

Top Opportunities: [FROM PREVIOUS ANALYSIS]
Key Constraints: {business_risks}

Create:
1. 6-month roadmap with prioritized features
2. Go-to-market strategy for new opportunities
3. Resource allocation plan
4. Success metrics and KPIs
5. Risk mitigation strategies""",
        ),
    ),
    "governance": (
        SubPromptStep(
            suffix="compliance-audit",
            title="Compliance Gap Analysis",
            description="Identify compliance gaps and requirements",
            estimated_time="45 minutes",
            prerequisites=("Understanding of business domain",),
            outputs=("Compliance gap report", "Requirement matrix"),
            body="""Perform compliance gap analysis for our application:

Current Standards: {standards}
Industry Requirements: [SPECIFY YOUR INDUSTRY REQUIREMENTS]

Analyze:
1. Required compliance standards for our industry
2. Current compliance status and gaps
3. Legal and regulatory requirements
4. Data protection and privacy obligations
5. Implementation priorities and timeline""",
        ),
        SubPromptStep(
            suffix="compliance-plan",
            title="Compliance Implementation Plan",
            description="Create detailed plan to address compliance gaps",
            estimated_time="90 minutes",
            prerequisites=("Gap analysis completed",),
            outputs=("Implementation roadmap", "Policy templates", "Technical requirements"),
            body="""Create compliance implementation plan:

Priority Gaps: [FROM GAP ANALYSIS]
Existing Policies: {policies}

Develop:
1. Policy development roadmap
2. Technical implementation requirements
3. Training and documentation needs
4. Monitoring and audit procedures
5. Timeline and resource allocation""",
        ),
    ),
    "analysis": (
        SubPromptStep(
            suffix="data-collection",
            title="Data Collection & Metrics",
            description="Gather and organize data for analysis",
            estimated_time="30 minutes",
            prerequisites=("Access to monitoring and analytics tools",),
            outputs=("Data collection report", "Metrics baseline"),
            body="""Collect and organize data for analysis:

Analysis Focus: [YOUR ANALYSIS OBJECTIVE]
Available Data Sources: {data_sources}

Collect:
1. Quantitative metrics from monitoring/analytics
2. Qualitative feedback from users/stakeholders
3. Performance and usage statistics
4. Error logs and incident data
5. Business metrics and KPIs""",
        ),
        SubPromptStep(
            suffix="insights",
            title="Analysis & Insights Generation",
            description="Analyze collected data and generate actionable insights",
            estimated_time="60 minutes",
            prerequisites=("Data collection completed",),
            outputs=("Analysis report", "Recommendations", "Action plan"),
            body="""Analyze collected data and generate insights:

Data Set: [FROM COLLECTION PHASE]
Analysis Method: [SPECIFY YOUR APPROACH]

Perform:
1. Trend analysis and pattern identification
2. Root cause analysis for issues
3. Performance benchmarking
4. User behavior analysis
5. Business impact assessment""",
        ),
    ),
}


def should_decompose(prompt: GeneratedPrompt) -> bool:
    return prompt.complexity == "advanced" or prompt.category in DECOMPOSED_PHASES


def automation_level(analysis: CodebaseAnalysis) -> str:
    if analysis.workflow is None:
        return "Unknown"
    automation = analysis.workflow.automation
    flags = [getattr(automation, item.name) for item in fields(automation)]
    percentage = 100 * sum(1 for flag in flags if flag) / len(flags)
    if percentage >= 80:
        return "High"
    if percentage >= 50:
        return "Medium"
    return "Low"


def _joined(items: Sequence[str], fallback: str) -> str:
    return ", ".join(items) or fallback


def step_context(analysis: CodebaseAnalysis) -> Dict[str, str]:
    """Analysis-derived values available to every step body."""
    languages = [tech.name for tech in analysis.technologies.get("languages", ())]
    structure = analysis.structure
    workflow = analysis.workflow
    cicd = _joined(workflow.cicd.platforms, "None") if workflow else "Not detected"

    sources: List[str] = []
    if workflow and workflow.cicd.has_ci:
        sources.append("CI/CD metrics")
    if analysis.quality.total_lines:
        sources.append("Code quality metrics")
    if analysis.dependencies:
        sources.append("Dependency analysis")

    business = analysis.business
    risks: Tuple[str, ...] = ()
    if business:
        risks = business.risks.technical + business.risks.market + business.risks.operational
    policies: List[str] = []
    standards: Tuple[str, ...] = ()
    if analysis.governance:
        standards = analysis.governance.compliance.standards
        policy_info = analysis.governance.policies
        policies = [
            item.name.replace("_", " ") for item in fields(policy_info) if getattr(policy_info, item.name)
        ]
    risk_areas = analysis.incident.risk_areas if analysis.incident else ()

    return {
        "repo_name": analysis.name,
        "project_type": structure.type,
        "architecture": structure.architecture,
        "patterns": _joined([pattern.name for pattern in analysis.patterns[:3]], "None detected"),
        "system_context": "\n".join(
            (
                f"Project: {analysis.name}",
                f"Type: {structure.type}",
                f"Architecture: {structure.architecture}",
                f"Technologies: {_joined(languages, 'Not detected')}",
                f"Quality Score: {round(analysis.quality.maintainability_index)}/100",
            )
        ),
        "cicd_platforms": cicd,
        "automation_level": automation_level(analysis),
        "workflow_summary": (
            f"CI/CD: {cicd}, Automation: {automation_level(analysis)}"
            if workflow
            else "No workflow analysis available"
        ),
        "risk_areas": _joined(risk_areas, "To be identified"),
        "business_model": business.domain.business_model if business else "application",
        "target_audience": business.domain.target_audience if business else "General users",
        "features": _joined(business.opportunities.features, "To be identified") if business else "To be identified",
        "business_risks": _joined(risks, "To be identified"),
        "standards": _joined(standards, "None identified"),
        "policies": _joined(policies, "None"),
        "data_sources": _joined(sources, "Application logs and monitoring"),
    }


class SubPromptGenerator:
    """Breaks a prompt into complexity steps followed by phase-specific steps."""

    def __init__(self, analysis: CodebaseAnalysis) -> None:
        self.analysis = analysis
        self._context = step_context(analysis)

    def generate(self, prompt: GeneratedPrompt) -> Tuple[SubPrompt, ...]:
        steps = STEPS_BY_COMPLEXITY.get(prompt.complexity, ()) + STEPS_BY_PHASE.get(prompt.category, ())
        values = dict(self._context, title=prompt.title, description=prompt.description)
        sub_prompts: List[SubPrompt] = []
        seen = set()
        for order, step in enumerate(steps, start=1):
            step_id = f"{prompt.id}-{step.suffix}"
            if step_id in seen:
                step_id = f"{step_id}-{order}"
            seen.add(step_id)
            sub_prompts.append(
                SubPrompt(
                    id=step_id,
                    parent_id=prompt.id,
                    title=step.title,
                    description=step.description,
                    template=step.body.format(**values) + "\n",
                    order=order,
                    estimated_time=step.estimated_time,
                    prerequisites=step.prerequisites,
                    outputs=step.outputs,
                )
            )
        return tuple(sub_prompts)


__all__ = [
    "DECOMPOSED_PHASES",
    "STEPS_BY_COMPLEXITY",
    "STEPS_BY_PHASE",
    "SubPromptGenerator",
    "SubPromptStep",
    "automation_level",
    "should_decompose",
    "step_context",
]
