"""A fully populated sample analysis for prompt synthesis tests."""

from __future__ import annotations

from datetime import datetime, timezone

from repoprompt.composer import AnalysisComposer
from repoprompt.models import (
    AutomationInfo,
    BranchingInfo,
    BusinessAnalysis,
    BusinessDomain,
    BusinessOpportunities,
    BusinessRisks,
    CICDInfo,
    CodeExample,
    CodeQualityMetrics,
    CollaborationInfo,
    ComplianceInfo,
    DependencyAnalysis,
    DependencyMaintenance,
    DependencySecurity,
    DependencyUsage,
    DocumentationAnalysis,
    DocumentationQuality,
    DocumentationTypes,
    FileNode,
    GovernanceAnalysis,
    IncidentAnalysis,
    IncidentPreparedness,
    LicensingInfo,
    PatternDetection,
    PolicyInfo,
    ProjectStructure,
    ResponseCapability,
    RulesetInfo,
    Technology,
    ValueProposition,
    WorkflowAnalysis,
)

EXAMPLES = {
    "components": [CodeExample("src/components/Cart.jsx", 1, 12, "export function Cart() {}", "component", "simple", score=6)],
    "functions": [CodeExample("src/lib/total.js", 3, 9, "function total(items) {}", "function", "simple", score=4)],
    "tests": [CodeExample("tests/cart.test.js", 1, 20, "describe('cart', () => {})", "test", "moderate", score=5)],
    "apis": [
        CodeExample("src/routes/cart.js", 2, 30, "router.get('/cart', handler)", "api", "moderate", score=7),
        CodeExample("src/routes/orders.js", 1, 10, "router.post('/orders', create)", "api", "simple", score=7),
    ],
    "models": [CodeExample("src/models/order.js", 1, 15, "class Order {}", "model", "simple", score=4)],
}

FACETS = {
    "documentation": DocumentationAnalysis(
        coverage="poor",
        types=DocumentationTypes(),
        quality=DocumentationQuality(),
        gaps=("Missing README file",),
    ),
    "workflow": WorkflowAnalysis(
        cicd=CICDInfo(gaps=("No continuous integration pipeline detected",)),
        branching=BranchingInfo(),
        automation=AutomationInfo(),
        collaboration=CollaborationInfo(),
    ),
    "dependencies": DependencyAnalysis(
        security=DependencySecurity(vulnerabilities=1, vulnerable_packages=("lodash",), risk_level="medium"),
        maintenance=DependencyMaintenance(deprecated=("request",)),
        licensing=LicensingInfo(types=("MIT",)),
        usage=DependencyUsage(direct=3),
    ),
    "incident": IncidentAnalysis(
        preparedness=IncidentPreparedness(),
        response=ResponseCapability(),
        risk_areas=("Potential single points of failure in architecture",),
    ),
    "governance": GovernanceAnalysis(
        compliance=ComplianceInfo(gaps=("PCI-DSS compliance required for payment processing",)),
        policies=PolicyInfo(),
        rulesets=RulesetInfo(),
    ),
    "business": BusinessAnalysis(
        domain=BusinessDomain(industry="E-commerce"),
        value=ValueProposition(),
        opportunities=BusinessOpportunities(features=("add coupon support",)),
        risks=BusinessRisks(technical=("Monolithic architecture may limit scalability",)),
    ),
}


def build_analysis(facets=None, examples=EXAMPLES, structure_type: str = "fullstack"):
    composer = AnalysisComposer(clock=lambda: datetime(2024, 5, 1, tzinfo=timezone.utc))
    return composer.compose(
        name="shop",
        path="/repos/shop",
        technologies={
            "languages": [Technology("JavaScript", 0.6)],
            "frameworks": [Technology("Express.js", 0.7), Technology("React", 1.0)],
            "databases": [Technology("PostgreSQL", 0.7)],
            "tools": [Technology("Jest", 0.8)],
        },
        structure=ProjectStructure(type=structure_type, package_manager="npm", test_frameworks=("Jest",)),
        file_tree=FileNode(
            name="shop",
            path="",
            type="directory",
            importance="high",
            children=(
                FileNode(name="src", path="src", type="directory", importance="high"),
                FileNode(name="scripts", path="scripts", type="directory", importance="low"),
            ),
        ),
        examples=examples,
        patterns=[PatternDetection("Express Middleware Pattern", "Request middleware", 3, recommendation="Keep it small")],
        metrics=CodeQualityMetrics(comment_ratio=0.2, maintainability_index=80),
        facets=facets,
    )
