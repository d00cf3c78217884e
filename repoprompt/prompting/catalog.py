"""Declarative catalog of lifecycle prompt templates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Tuple

from ..models import CodebaseAnalysis

Condition = Callable[[CodebaseAnalysis], bool]


def always(analysis: CodebaseAnalysis) -> bool:
    return True


def is_frontend(analysis: CodebaseAnalysis) -> bool:
    return analysis.structure.type in ("frontend", "fullstack")


def is_backend(analysis: CodebaseAnalysis) -> bool:
    return analysis.structure.type in ("backend", "fullstack")


def has_database(analysis: CodebaseAnalysis) -> bool:
    return bool(analysis.technologies.get("databases")) or bool(analysis.examples.get("models"))


@dataclass(frozen=True)
class PromptTemplate:
    """One catalog entry; ``template`` names a jinja2 file under ``templates/``."""

    id: str
    title: str
    phase: str
    subcategory: str
    description: str
    template: str
    example_categories: Tuple[str, ...]
    required_slots: Tuple[str, ...]
    when: str
    triggers: Tuple[str, ...]
    related_prompts: Tuple[str, ...]
    expected_outcome: str
    complexity: str
    estimated_time: str
    applicable_to_files: Tuple[str, ...]
    prerequisites: Tuple[str, ...] = ()
    condition: Condition = always


CATALOG: Tuple[PromptTemplate, ...] = (
    # planning
    PromptTemplate(
        id="planning-feature-analysis",
        title="Feature Planning for {name}",
        phase="planning",
        subcategory="feature-planning",
        description="Analyze and plan new features based on existing codebase patterns",
        template="planning_feature_analysis.j2",
        example_categories=("component", "api", "function"),
        required_slots=("technology", "structure"),
        when="Starting any new feature development or major enhancement",
        triggers=("New feature request", "Epic planning", "Sprint planning"),
        related_prompts=("design-architecture", "implementation-component"),
        expected_outcome="Detailed technical breakdown with implementation approach",
        complexity="intermediate",
        estimated_time="30-60 minutes",
        applicable_to_files=("**/*.{js,ts,jsx,tsx,py}", "**/components/**", "**/pages/**"),
    ),
    PromptTemplate(
        id="planning-requirements-analysis",
        title="Requirements Analysis & Impact Assessment",
        phase="planning",
        subcategory="requirements",
        description="Analyze requirements and assess impact on existing codebase",
        template="planning_requirements_analysis.j2",
        example_categories=("api", "model"),
        required_slots=("technology",),
        when="Analyzing new requirements or changes to existing features",
        triggers=("Business requirements change", "New user story", "API changes"),
        related_prompts=("planning-feature-analysis", "testing-unit-tests"),
        expected_outcome="Requirements breakdown with technical implications",
        complexity="advanced",
        estimated_time="45-90 minutes",
        applicable_to_files=("**/*",),
    ),
    # design
    PromptTemplate(
        id="design-architecture",
        title="Architecture Design Following Our Patterns",
        phase="design",
        subcategory="architecture",
        description="Design system architecture following established patterns",
        template="design_architecture.j2",
        example_categories=("component", "api", "config"),
        required_slots=("technology", "pattern"),
        when="Designing new features or refactoring existing architecture",
        triggers=("Complex feature design", "Architecture review", "Refactoring planning"),
        related_prompts=("planning-feature-analysis", "implementation-component"),
        expected_outcome="Detailed architecture design with component relationships",
        complexity="advanced",
        estimated_time="60-120 minutes",
        applicable_to_files=("**/*.{js,ts,jsx,tsx,py}",),
    ),
    PromptTemplate(
        id="design-database-schema",
        title="Database Schema Design",
        phase="design",
        subcategory="database",
        description="Design database schema following existing patterns",
        template="design_database_schema.j2",
        example_categories=("model",),
        required_slots=("technology",),
        when="Adding new data models or modifying existing schema",
        triggers=("New data requirements", "Schema migration", "Data model changes"),
        related_prompts=("design-architecture", "implementation-business-logic"),
        expected_outcome="Database schema with migration strategy",
        complexity="intermediate",
        estimated_time="30-60 minutes",
        applicable_to_files=("**/models/**", "**/schemas/**", "**/*.prisma"),
        condition=has_database,
    ),
    # implementation
    PromptTemplate(
        id="implementation-component",
        title="Implement {framework} Component Following Our Patterns",
        phase="implementation",
        subcategory="frontend",
        description="Create components following established patterns and conventions",
        template="implementation_component.j2",
        example_categories=("component",),
        required_slots=("example",),
        when="Creating new UI components or updating existing ones",
        triggers=("New UI requirement", "Component refactoring", "Design system update"),
        related_prompts=("design-architecture", "testing-unit-tests"),
        expected_outcome="Complete component implementation with proper typing and patterns",
        complexity="intermediate",
        estimated_time="30-90 minutes",
        applicable_to_files=("**/components/**", "**/pages/**", "**/*.{jsx,tsx,vue}"),
        condition=is_frontend,
    ),
    PromptTemplate(
        id="implementation-api-endpoint",
        title="Implement API Endpoint Following Our Patterns",
        phase="implementation",
        subcategory="backend",
        description="Create API endpoints following established patterns",
        template="implementation_api_endpoint.j2",
        example_categories=("api",),
        required_slots=("example",),
        when="Creating new API endpoints or modifying existing ones",
        triggers=("New API requirement", "Endpoint refactoring", "Integration needs"),
        related_prompts=("design-architecture", "testing-integration-tests"),
        expected_outcome="Complete API endpoint with validation, error handling, and documentation",
        complexity="intermediate",
        estimated_time="45-90 minutes",
        applicable_to_files=("**/api/**", "**/routes/**", "**/controllers/**"),
        condition=is_backend,
    ),
    PromptTemplate(
        id="implementation-business-logic",
        title="Implement Business Logic Following Our Patterns",
        phase="implementation",
        subcategory="logic",
        description="Implement business logic functions following established patterns",
        template="implementation_business_logic.j2",
        example_categories=("function", "util"),
        required_slots=("example",),
        when="Implementing core business functionality or utility functions",
        triggers=("New business rule", "Logic refactoring", "Utility function needed"),
        related_prompts=("design-architecture", "testing-unit-tests"),
        expected_outcome="Well-structured business logic with proper error handling",
        complexity="intermediate",
        estimated_time="30-60 minutes",
        applicable_to_files=("**/services/**", "**/utils/**", "**/lib/**"),
    ),
    # testing
    PromptTemplate(
        id="testing-unit-tests",
        title="Write Unit Tests Following Our Patterns",
        phase="testing",
        subcategory="unit",
        description="Create comprehensive unit tests following established testing patterns",
        template="testing_unit_tests.j2",
        example_categories=("test",),
        required_slots=("example",),
        when="Writing tests for new functionality or existing code",
        triggers=("New feature implementation", "Bug fix", "Code review requirement"),
        related_prompts=("implementation-component", "testing-integration-tests"),
        expected_outcome="Comprehensive test suite with good coverage and clear test cases",
        complexity="intermediate",
        estimated_time="30-60 minutes",
        applicable_to_files=("**/*.test.{js,ts}", "**/*.spec.{js,ts}", "**/__tests__/**", "**/test_*.py"),
        prerequisites=("A configured test runner",),
    ),
    PromptTemplate(
        id="testing-integration-tests",
        title="Write Integration Tests for API Endpoints",
        phase="testing",
        subcategory="integration",
        description="Create integration tests for API endpoints and database interactions",
        template="testing_integration_tests.j2",
        example_categories=("api", "test"),
        required_slots=("technology",),
        when="Testing API endpoints and database interactions",
        triggers=("New API endpoints", "Database changes", "Integration issues"),
        related_prompts=("implementation-api-endpoint", "testing-unit-tests"),
        expected_outcome="Complete integration test suite covering API behavior and data flow",
        complexity="advanced",
        estimated_time="60-120 minutes",
        applicable_to_files=("**/tests/**", "**/integration/**", "**/*.integration.{js,ts}"),
        prerequisites=("A configured test runner", "An isolated test database or service stubs"),
        condition=is_backend,
    ),
    # review
    PromptTemplate(
        id="review-code-quality",
        title="Code Review Following Our Standards",
        phase="review",
        subcategory="quality",
        description="Perform comprehensive code review based on project standards",
        template="review_code_quality.j2",
        example_categories=("component", "function", "api"),
        required_slots=("technology",),
        when="Reviewing code before merging or during development",
        triggers=("Pull request review", "Code quality assessment", "Refactoring evaluation"),
        related_prompts=("review-security", "maintenance-performance"),
        expected_outcome="Detailed code review with specific recommendations and improvements",
        complexity="advanced",
        estimated_time="30-90 minutes",
        applicable_to_files=("**/*.{js,ts,jsx,tsx,py}",),
    ),
    PromptTemplate(
        id="review-security",
        title="Security Review & Vulnerability Assessment",
        phase="review",
        subcategory="security",
        description="Review code for security vulnerabilities and best practices",
        template="review_security.j2",
        example_categories=("api", "function"),
        required_slots=("technology",),
        when="Reviewing code for security issues or before production deployment",
        triggers=("Security audit", "Production deployment", "Sensitive data handling"),
        related_prompts=("review-code-quality", "deployment-preparation"),
        expected_outcome="Security assessment with vulnerability identification and remediation steps",
        complexity="advanced",
        estimated_time="45-90 minutes",
        applicable_to_files=("**/api/**", "**/auth/**", "**/middleware/**"),
    ),
    # deployment
    PromptTemplate(
        id="deployment-preparation",
        title="Deployment Preparation & Checklist",
        phase="deployment",
        subcategory="preparation",
        description="Prepare application for deployment following best practices",
        template="deployment_preparation.j2",
        example_categories=("config",),
        required_slots=("technology",),
        when="Preparing for production deployment or environment setup",
        triggers=("Production release", "Environment setup", "CI/CD configuration"),
        related_prompts=("review-security", "workflow-cicd-optimization"),
        expected_outcome="Complete deployment checklist with configuration and monitoring setup",
        complexity="advanced",
        estimated_time="60-120 minutes",
        applicable_to_files=("**/config/**", "Dockerfile", "docker-compose.yml", ".github/**"),
    ),
    # maintenance
    PromptTemplate(
        id="maintenance-performance",
        title="Performance Optimization Analysis",
        phase="maintenance",
        subcategory="performance",
        description="Analyze and optimize application performance",
        template="maintenance_performance.j2",
        example_categories=("component", "api", "function"),
        required_slots=("technology",),
        when="Investigating performance issues or optimizing application",
        triggers=("Performance problems", "Optimization requirements", "Scalability concerns"),
        related_prompts=("review-code-quality", "maintenance-refactoring"),
        expected_outcome="Performance analysis with specific optimization recommendations",
        complexity="advanced",
        estimated_time="60-120 minutes",
        applicable_to_files=("**/*.{js,ts,jsx,tsx,py}",),
    ),
    PromptTemplate(
        id="maintenance-refactoring",
        title="Code Refactoring Following Our Patterns",
        phase="maintenance",
        subcategory="refactoring",
        description="Refactor code to improve structure and maintainability",
        template="maintenance_refactoring.j2",
        example_categories=("component", "function"),
        required_slots=("example",),
        when="Improving code structure, reducing technical debt, or enhancing maintainability",
        triggers=("Technical debt reduction", "Code smell elimination", "Architecture improvement"),
        related_prompts=("review-code-quality", "testing-unit-tests"),
        expected_outcome="Refactored code with improved structure and maintainability",
        complexity="intermediate",
        estimated_time="45-90 minutes",
        applicable_to_files=("**/*.{js,ts,jsx,tsx,py}",),
    ),
    # documentation
    PromptTemplate(
        id="documentation-api",
        title="Generate API Documentation",
        phase="documentation",
        subcategory="api",
        description="Create comprehensive API documentation following OpenAPI standards",
        template="documentation_api.j2",
        example_categories=("api",),
        required_slots=("example",),
        when="Creating or updating API documentation",
        triggers=("New API endpoints", "Documentation update", "API versioning"),
        related_prompts=("implementation-api-endpoint", "documentation-code"),
        expected_outcome="Complete API documentation with examples and schemas",
        complexity="intermediate",
        estimated_time="30-60 minutes",
        applicable_to_files=("**/api/**", "**/routes/**", "**/docs/**"),
        condition=is_backend,
    ),
    PromptTemplate(
        id="documentation-code",
        title="Generate Code Documentation",
        phase="documentation",
        subcategory="code",
        description="Create comprehensive code documentation and comments",
        template="documentation_code.j2",
        example_categories=("component", "function"),
        required_slots=("example",),
        when="Adding documentation to existing code or new implementations",
        triggers=("Documentation requirement", "Code review feedback", "Team onboarding"),
        related_prompts=("documentation-api", "maintenance-refactoring"),
        expected_outcome="Well-documented code with clear comments and examples",
        complexity="beginner",
        estimated_time="15-30 minutes",
        applicable_to_files=("**/*.{js,ts,jsx,tsx,py}",),
    ),
    # workflow
    PromptTemplate(
        id="workflow-cicd-optimization",
        title="CI/CD Pipeline Optimization Analysis",
        phase="workflow",
        subcategory="cicd",
        description="Analyze and optimize CI/CD pipeline for better performance and reliability",
        template="workflow_cicd_optimization.j2",
        example_categories=("config",),
        required_slots=("workflow", "technology"),
        when="Optimizing CI/CD pipelines or implementing new automation",
        triggers=("Slow deployments", "Pipeline failures", "Process automation needs"),
        related_prompts=("deployment-preparation", "review-security"),
        expected_outcome="Optimized CI/CD pipeline with improved performance and reliability",
        complexity="advanced",
        estimated_time="90-120 minutes",
        applicable_to_files=(".github/workflows/**", "Jenkinsfile", ".gitlab-ci.yml"),
    ),
    PromptTemplate(
        id="workflow-automation",
        title="Development Workflow Automation",
        phase="workflow",
        subcategory="automation",
        description="Automate repetitive development workflow tasks",
        template="workflow_automation.j2",
        example_categories=("config",),
        required_slots=("workflow",),
        when="Setting up automation for repetitive tasks",
        triggers=("Manual processes", "Repetitive tasks", "Developer productivity concerns"),
        related_prompts=("workflow-cicd-optimization", "governance-compliance"),
        expected_outcome="Automated workflow processes reducing manual effort",
        complexity="intermediate",
        estimated_time="60-90 minutes",
        applicable_to_files=("package.json", ".husky/**", ".pre-commit-config.yaml"),
    ),
    # incident
    PromptTemplate(
        id="incident-response-planning",
        title="Incident Response Plan Development",
        phase="incident",
        subcategory="planning",
        description="Create comprehensive incident response procedures and runbooks",
        template="incident_response_planning.j2",
        example_categories=("api", "config"),
        required_slots=("incident",),
        when="Preparing for production incidents or improving response capabilities",
        triggers=("Production incidents", "Compliance requirements", "Team growth"),
        related_prompts=("deployment-preparation", "review-security"),
        expected_outcome="Complete incident response plan with runbooks and procedures",
        complexity="advanced",
        estimated_time="120-180 minutes",
        applicable_to_files=("docs/runbooks/**", "INCIDENT_RESPONSE.md"),
    ),
    PromptTemplate(
        id="incident-postmortem",
        title="Post-Incident Analysis & Learning",
        phase="incident",
        subcategory="postmortem",
        description="Conduct thorough post-incident analysis to prevent future occurrences",
        template="incident_postmortem.j2",
        example_categories=("api", "function"),
        required_slots=("incident",),
        when="After resolving production incidents",
        triggers=("Incident resolution", "Learning requirements", "Process improvement"),
        related_prompts=("incident-response-planning", "analysis-performance"),
        expected_outcome="Detailed postmortem with actionable improvements",
        complexity="intermediate",
        estimated_time="60-90 minutes",
        applicable_to_files=("docs/postmortems/**", "POSTMORTEM_TEMPLATE.md"),
    ),
    # analysis
    PromptTemplate(
        id="analysis-performance",
        title="System Performance Analysis",
        phase="analysis",
        subcategory="performance",
        description="Comprehensive performance analysis and optimization recommendations",
        template="analysis_performance.j2",
        example_categories=("component", "api", "function"),
        required_slots=("technology",),
        when="Investigating performance issues or optimizing system performance",
        triggers=("Performance degradation", "Scaling requirements", "User complaints"),
        related_prompts=("maintenance-performance", "incident-postmortem"),
        expected_outcome="Performance analysis report with optimization recommendations",
        complexity="advanced",
        estimated_time="90-120 minutes",
        applicable_to_files=("**/*.{js,ts,jsx,tsx,py}",),
    ),
    PromptTemplate(
        id="analysis-dependencies",
        title="Dependency Security & Health Analysis",
        phase="analysis",
        subcategory="dependencies",
        description="Analyze project dependencies for security, maintenance, and optimization",
        template="analysis_dependencies.j2",
        example_categories=("config",),
        required_slots=("dependencies",),
        when="Auditing dependencies or preparing for updates",
        triggers=("Security audits", "Dependency updates", "Bundle size optimization"),
        related_prompts=("review-security", "maintenance-performance"),
        expected_outcome="Dependency analysis with update and optimization recommendations",
        complexity="intermediate",
        estimated_time="45-60 minutes",
        applicable_to_files=("package.json", "yarn.lock", "requirements.txt", "pyproject.toml"),
    ),
    # governance
    PromptTemplate(
        id="governance-compliance",
        title="Compliance Assessment & Gap Analysis",
        phase="governance",
        subcategory="compliance",
        description="Assess compliance requirements and identify gaps",
        template="governance_compliance.j2",
        example_categories=("config", "api"),
        required_slots=("governance",),
        when="Preparing for compliance audits or implementing governance policies",
        triggers=("Compliance requirements", "Audit preparation", "Policy implementation"),
        related_prompts=("review-security", "governance-policies"),
        expected_outcome="Compliance gap analysis with implementation roadmap",
        complexity="advanced",
        estimated_time="120-180 minutes",
        applicable_to_files=("docs/compliance/**", "COMPLIANCE.md"),
    ),
    PromptTemplate(
        id="governance-policies",
        title="Development Policy & Standards Creation",
        phase="governance",
        subcategory="policies",
        description="Create development policies and coding standards",
        template="governance_policies.j2",
        example_categories=("config",),
        required_slots=("governance",),
        when="Establishing development standards or updating policies",
        triggers=("Team scaling", "Quality issues", "Compliance requirements"),
        related_prompts=("governance-compliance", "review-code-quality"),
        expected_outcome="Development policies and enforceable standards",
        complexity="intermediate",
        estimated_time="75-90 minutes",
        applicable_to_files=("docs/policies/**", ".eslintrc.*", "CODING_STANDARDS.md"),
    ),
    # business
    PromptTemplate(
        id="business-opportunity-analysis",
        title="Business Opportunity & Feature Analysis",
        phase="business",
        subcategory="opportunity",
        description="Analyze business opportunities and prioritize feature development",
        template="business_opportunity_analysis.j2",
        example_categories=("component", "api"),
        required_slots=("business",),
        when="Planning product roadmap or evaluating new features",
        triggers=("Strategic planning", "Market research", "Product development"),
        related_prompts=("planning-feature-analysis", "business-competitive"),
        expected_outcome="Prioritized business opportunities with technical feasibility assessment",
        complexity="intermediate",
        estimated_time="90-120 minutes",
        applicable_to_files=("docs/business/**", "ROADMAP.md"),
    ),
    PromptTemplate(
        id="business-competitive",
        title="Competitive Technical Analysis",
        phase="business",
        subcategory="competitive",
        description="Analyze competitive landscape and technical differentiation opportunities",
        template="business_competitive.j2",
        example_categories=("component", "api"),
        required_slots=("business", "technology"),
        when="Evaluating competitive position or planning differentiation strategy",
        triggers=("Competitive research", "Product positioning", "Technical strategy"),
        related_prompts=("business-opportunity-analysis", "planning-feature-analysis"),
        expected_outcome="Competitive analysis with technical differentiation recommendations",
        complexity="advanced",
        estimated_time="60-90 minutes",
        applicable_to_files=("docs/competitive/**", "COMPETITIVE_ANALYSIS.md"),
    ),
)


__all__ = ["CATALOG", "PromptTemplate", "always", "has_database", "is_backend", "is_frontend"]
