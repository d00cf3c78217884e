"""Business facet: domain inference, value proposition, opportunities and risks."""

from __future__ import annotations

import re
from typing import Callable, Iterable, List, Sequence, Tuple

from ..models import (
    BusinessAnalysis,
    BusinessDomain,
    BusinessOpportunities,
    BusinessRisks,
    ValueProposition,
)
from ..repo_scanner import EvidenceScanner
from .base import FacetAnalyzer, FacetContext
from .utils import contains_any, first_match, readme_text

Table = Tuple[Tuple[str, Tuple[str, ...]], ...]

INDUSTRIES: Table = (
    ("E-commerce", ("shop", "store", "cart", "payment", "product", "checkout", "ecommerce")),
    ("FinTech", ("finance", "bank", "payment", "crypto", "blockchain", "trading", "fintech")),
    ("HealthTech", ("health", "medical", "patient", "doctor", "healthcare", "medicine")),
    ("EdTech", ("education", "learning", "course", "student", "teacher", "school", "edtech")),
    ("SaaS", ("software", "service", "platform", "api", "dashboard", "saas", "tool")),
    ("Gaming", ("game", "player", "gaming", "unity", "gamedev", "entertainment")),
    ("Social Media", ("social", "chat", "messaging", "community", "network", "feed")),
    ("IoT", ("sensor", "device", "hardware", "iot", "embedded", "arduino", "raspberry")),
    ("AI/ML", ("ai", "machine learning", "neural", "model", "prediction", "algorithm")),
    ("Media", ("video", "audio", "streaming", "content", "media", "publishing")),
    ("Real Estate", ("property", "real estate", "housing", "rental", "mortgage")),
    ("Transportation", ("transport", "delivery", "logistics", "shipping", "travel")),
    ("Manufacturing", ("manufacturing", "production", "factory", "industrial", "supply chain")),
)

BUSINESS_MODELS: Table = (
    ("B2B SaaS", ("api", "enterprise", "business", "dashboard", "analytics", "platform")),
    ("B2C App", ("user", "mobile", "app", "consumer", "personal", "individual")),
    ("Marketplace", ("marketplace", "seller", "buyer", "vendor", "commission", "listing")),
    ("E-commerce", ("shop", "store", "product", "cart", "checkout", "inventory")),
    ("Freemium", ("free", "premium", "subscription", "tier", "upgrade", "plan")),
    ("Open Source", ("open source", "community", "contribution", "license", "github")),
    ("API/Platform", ("api", "sdk", "developer", "integration", "webhook", "platform")),
    ("Subscription", ("subscription", "recurring", "monthly", "annual", "billing")),
    ("On-Demand", ("on-demand", "instant", "realtime", "immediate", "now")),
)

AUDIENCES: Table = (
    ("Developers", ("developer", "programmer", "coder", "api", "sdk", "framework", "library")),
    ("Businesses", ("business", "enterprise", "company", "organization", "corporate")),
    ("Consumers", ("consumer", "user", "personal", "individual", "family", "home")),
    ("Students", ("student", "education", "learning", "course", "university", "school")),
    ("Healthcare", ("patient", "doctor", "nurse", "healthcare", "medical", "clinic")),
    ("Designers", ("designer", "design", "creative", "ui", "ux", "graphics")),
    ("Marketers", ("marketing", "advertiser", "campaign", "analytics", "seo", "social")),
    ("Data Scientists", ("data", "analytics", "ml", "ai", "scientist", "analysis")),
    ("Small Business", ("small business", "startup", "entrepreneur", "freelancer", "solopreneur")),
    ("Enterprises", ("enterprise", "large", "corporation", "team", "organization")),
)

PROBLEM_KEYWORDS = ("problem", "challenge", "pain point", "issue", "motivation")
SOLUTION_KEYWORDS = ("solution", "features", "benefits", "capabilities", "what it does")
ADVANTAGE_KEYWORDS = ("advantage", "unique", "differentiator", "better", "why choose")

# (predicate over lower-cased runtime dependency names, advantage text)
TECH_ADVANTAGES: Tuple[Tuple[Callable[[Sequence[str]], bool], str], ...] = (
    (lambda names: "typescript" in names, "Type-safe development with TypeScript reduces bugs"),
    (
        lambda names: "next" in names or "nuxt" in names,
        "Server-side rendering for better performance and SEO",
    ),
    (lambda names: any("test" in name for name in names), "Comprehensive testing ensures reliability"),
    (lambda names: "graphql" in names, "GraphQL API provides flexible and efficient data fetching"),
    (lambda names: "redis" in names, "Redis caching improves application performance"),
)

INTEGRATIONS: Tuple[Tuple[Callable[[Sequence[str]], bool], str], ...] = (
    (lambda names: "stripe" in names, "Payment processing with additional providers (PayPal, Square)"),
    (
        lambda names: "sendgrid" in names or "nodemailer" in names,
        "Multi-channel communication (SMS, push notifications)",
    ),
    (lambda names: "aws-sdk" in names, "Multi-cloud strategy with Azure or GCP services"),
    (
        lambda names: any("db" in name or "database" in name for name in names),
        "Analytics and business intelligence integrations",
    ),
    (lambda names: True, "API marketplace listings for wider reach"),
    (lambda names: True, "Webhook integration for real-time data sync"),
)

OPTIMIZATIONS = (
    "Implement caching layer for improved response times",
    "Add CDN for global content delivery",
    "Database query optimization for better scalability",
    "Mobile app development for better user engagement",
    "Progressive web app features for offline functionality",
    "A/B testing framework for data-driven improvements",
    "Analytics dashboard for business insights",
    "Automated customer onboarding process",
    "Self-service support portal to reduce support load",
)

MARKETS = (
    "International expansion to emerging markets",
    "Vertical-specific solutions for niche industries",
    "API-first approach to enable partner ecosystem",
    "White-label solutions for B2B2C opportunities",
    "Enterprise features for upmarket expansion",
    "Mobile-first markets with smartphone penetration",
    "Compliance solutions for regulated industries",
    "AI-powered features for competitive differentiation",
)
MARKET_LIMIT = 4

ARCHITECTURE_RISKS = (
    "Monolithic architecture may limit scalability",
    "Single point of failure in critical system components",
    "Lack of automated testing increases bug risk in production",
)
MARKET_RISKS = (
    "Competitive pressure from established players",
    "Market saturation in target segment",
    "Technology disruption changing user expectations",
    "Economic downturn affecting customer spending",
    "Regulatory changes impacting business model",
)
OPERATIONAL_RISKS = (
    "Key person dependency for critical system knowledge",
    "Insufficient monitoring may delay issue detection",
)
HIGH_DEPENDENCY_COUNT = 50
RISK_LIMIT = 8
TOP_ITEMS = 5

TODO_SAMPLE = ("**/*.{js,ts,jsx,tsx,py,md}",)
_TODO_RE = re.compile(r"TODO:?\s*(.+)")
_FEATURE_TODO_RE = re.compile(r"feature|add|implement|create", re.I)
_HEADING_RE = re.compile(r"^#+")
_BULLET_RE = re.compile(r"^(?:[-*+]|\d+\.)\s+")

GAP_RULES: Tuple[Tuple[Callable[[ValueProposition], bool], str], ...] = (
    (lambda value: not value.problems, "No problem statement found in project documentation"),
    (lambda value: not value.solutions, "No feature or solution summary found in project documentation"),
)
RECOMMENDATION_RULES: Tuple[Tuple[Callable[[BusinessAnalysis], bool], str], ...] = (
    (
        lambda biz: not biz.value.problems,
        "Describe the problem the project solves in the README",
    ),
    (
        lambda biz: not biz.value.solutions,
        "Summarize key features and benefits in the README",
    ),
    (
        lambda biz: not biz.value.advantages,
        "Highlight what differentiates the project from alternatives",
    ),
    (
        lambda biz: bool(biz.opportunities.features),
        "Prioritize feature TODOs that align with the product roadmap",
    ),
)


def extract_sections(content: str, keywords: Iterable[str]) -> List[str]:
    """Return the text following every line that mentions a keyword, up to the next heading."""
    lines = content.split("\n")
    keywords = tuple(keywords)
    sections: List[str] = []
    for index, line in enumerate(lines):
        if not contains_any(line.lower(), keywords):
            continue
        body: List[str] = []
        for following in lines[index + 1 :]:
            if _HEADING_RE.match(following):
                break
            body.append(following)
        text = "\n".join(body).strip()
        if text:
            sections.append(text)
    return sections


def extract_bullets(section: str) -> List[str]:
    bullets: List[str] = []
    for line in section.split("\n"):
        stripped = line.strip()
        if _BULLET_RE.match(stripped):
            item = _BULLET_RE.sub("", stripped).strip()
            if len(item) > 10:
                bullets.append(item)
    return bullets


def _bullets_for(content: str, keywords: Iterable[str]) -> List[str]:
    return [bullet for section in extract_sections(content, keywords) for bullet in extract_bullets(section)]


class BusinessAnalyzer(FacetAnalyzer):
    """Infers business context from descriptive text and manifests."""

    name = "business"

    def analyze(self, scanner: EvidenceScanner, context: FacetContext) -> BusinessAnalysis:
        readme = readme_text(scanner)
        names = [name.lower() for name in context.dependencies.runtime_names]

        value = self._value(readme, names)
        record = BusinessAnalysis(
            domain=self._domain(readme, context),
            value=value,
            opportunities=self._opportunities(scanner, context, names),
            risks=self._risks(scanner, context),
            gaps=tuple(text for condition, text in GAP_RULES if condition(value)),
        )
        recommendations = tuple(text for condition, text in RECOMMENDATION_RULES if condition(record))
        return BusinessAnalysis(
            domain=record.domain,
            value=record.value,
            opportunities=record.opportunities,
            risks=record.risks,
            gaps=record.gaps,
            recommendations=recommendations,
        )

    def _domain(self, readme: str, context: FacetContext) -> BusinessDomain:
        package = context.dependencies.package_json
        description = package.get("description") if isinstance(package.get("description"), str) else ""
        keywords = package.get("keywords") if isinstance(package.get("keywords"), list) else []
        text = " ".join(
            [description, readme[:1000], " ".join(str(item) for item in keywords)]
        ).lower()
        return BusinessDomain(
            industry=first_match(text, INDUSTRIES, "Technology"),
            business_model=first_match(text, BUSINESS_MODELS, "Software Product"),
            target_audience=first_match(text, AUDIENCES, "General Users"),
        )

    def _value(self, readme: str, names: Sequence[str]) -> ValueProposition:
        advantages = [text for condition, text in TECH_ADVANTAGES if condition(names)]
        advantages.extend(_bullets_for(readme, ADVANTAGE_KEYWORDS))
        return ValueProposition(
            problems=tuple(_bullets_for(readme, PROBLEM_KEYWORDS)[:TOP_ITEMS]),
            solutions=tuple(_bullets_for(readme, SOLUTION_KEYWORDS)[:TOP_ITEMS]),
            advantages=tuple(advantages[:TOP_ITEMS]),
        )

    def _opportunities(
        self, scanner: EvidenceScanner, context: FacetContext, names: Sequence[str]
    ) -> BusinessOpportunities:
        todos: List[str] = []
        for _, text in scanner.sample(TODO_SAMPLE):
            todos.extend(match.group(1).strip() for match in _TODO_RE.finditer(text))
        features = [todo for todo in todos if _FEATURE_TODO_RE.search(todo)][:TOP_ITEMS]

        integrations: List[str] = []
        if context.dependencies.package_json:
            integrations = [text for condition, text in INTEGRATIONS if condition(names)]

        return BusinessOpportunities(
            features=tuple(features),
            integrations=tuple(integrations),
            optimizations=OPTIMIZATIONS,
            markets=MARKETS[:MARKET_LIMIT],
        )

    def _risks(self, scanner: EvidenceScanner, context: FacetContext) -> BusinessRisks:
        technical: List[str] = []
        if len(context.dependencies.node) > HIGH_DEPENDENCY_COUNT:
            technical.append("High dependency count increases security and maintenance risks")
        technical.extend(ARCHITECTURE_RISKS)

        operational: List[str] = []
        if not scanner.any_exists(("runbooks", "docs/ops")):
            operational.append("Lack of operational documentation increases incident response time")
        operational.extend(OPERATIONAL_RISKS)

        # A single budget of RISK_LIMIT is shared, filled technical-first.
        remaining = RISK_LIMIT
        capped: List[Tuple[str, ...]] = []
        for group in (technical, list(MARKET_RISKS), operational):
            capped.append(tuple(group[:remaining]))
            remaining = max(0, remaining - len(group))
        return BusinessRisks(technical=capped[0], market=capped[1], operational=capped[2])


__all__ = [
    "BusinessAnalyzer",
    "RECOMMENDATION_RULES",
    "extract_bullets",
    "extract_sections",
]
