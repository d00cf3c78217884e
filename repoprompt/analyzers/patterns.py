"""Recurring design and framework idioms detected in sampled source files."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..models import CodeExample, PatternDetection
from ..repo_scanner import EvidenceScanner
from .quality import CODE_PATTERNS, excerpt, line_of

MAX_EXAMPLES = 3
_MAIN_DECLARATION = re.compile(
    r"export\s+(?:default\s+)?(?:class|function|const)\s+[A-Z][a-zA-Z]*|class\s+[A-Z][a-zA-Z]*"
)


@dataclass(frozen=True)
class PatternRule:
    """A path and/or code regex identifying one idiom."""

    name: str
    description: str
    recommendation: str
    code: Optional[re.Pattern[str]] = None
    files: Optional[re.Pattern[str]] = None


def _rule(
    name: str, description: str, recommendation: str, code: str | None = None, files: str | None = None
) -> PatternRule:
    return PatternRule(
        name=name,
        description=description,
        recommendation=recommendation,
        code=re.compile(code, re.MULTILINE) if code else None,
        files=re.compile(files) if files else None,
    )


RULES: Tuple[PatternRule, ...] = (
    # React
    _rule(
        "Custom React Hooks",
        "Reusable stateful logic using custom hooks",
        "Custom hooks are a great way to share stateful logic between components",
        code=r"export\s+(const|function)\s+use[A-Z][a-zA-Z]*\s*[=\(]",
        files=r"use[A-Z][a-zA-Z]*\.(js|ts|jsx|tsx)$",
    ),
    _rule(
        "Higher-Order Components (HOC)",
        "Components that wrap other components to enhance functionality",
        "HOCs are useful for cross-cutting concerns, but consider hooks for simpler cases",
        code=r"with[A-Z][a-zA-Z]*\s*=\s*\([^)]*\)\s*=>\s*\([^)]*\)\s*=>",
    ),
    _rule(
        "React Context Pattern",
        "Global state management using React Context",
        "Context is great for avoiding prop drilling, but be mindful of performance",
        code=r"createContext\s*\(|useContext\s*\(",
    ),
    _rule(
        "Component Composition",
        "Building complex UIs by composing simpler components",
        "Composition is preferred over inheritance in React",
        code=r"children\s*[:\}]|React\.Children|cloneElement",
    ),
    # Vue
    _rule(
        "Vue Composition API",
        "Using setup() function and composition functions",
        "Composition API provides better TypeScript support and code reusability",
        code=r"setup\s*\(\s*\)|ref\s*\(|reactive\s*\(|computed\s*\(",
        files=r"\.(vue|js|ts)$",
    ),
    _rule(
        "Vue Composables",
        "Reusable composition functions",
        "Composables are the Vue 3 equivalent of custom hooks",
        code=r"export\s+(const|function)\s+use[A-Z][a-zA-Z]*",
        files=r"composables/.*\.(js|ts)$|use[A-Z][a-zA-Z]*\.(js|ts)$",
    ),
    # Express
    _rule(
        "Express Middleware Pattern",
        "Functions that execute during request-response cycle",
        "Middleware is essential for cross-cutting concerns in Express",
        code=r"\(req,\s*res,\s*next\)\s*=>",
    ),
    _rule(
        "Route Controllers",
        "Separating route logic into controller functions",
        "Controllers help organize and test route logic",
        code=r"exports?\.[a-zA-Z]+\s*=|export\s+(const|function)\s+[a-zA-Z]+",
        files=r"controllers?/.*\.(js|ts)$",
    ),
    _rule(
        "Error Handling Middleware",
        "Centralized error handling in Express",
        "Centralized error handling improves maintainability",
        code=r"\(err,\s*req,\s*res,\s*next\)\s*=>",
    ),
    # Testing
    _rule(
        "Page Object Model",
        "Encapsulating page interactions in test objects",
        "Page Object Model improves test maintainability",
        code=r"class\s+[A-Z][a-zA-Z]*Page|export\s+(class|const)\s+[A-Z][a-zA-Z]*Page",
        files=r"pages?/.*\.(js|ts)$|.*\.page\.(js|ts)$",
    ),
    _rule(
        "Test Factory Pattern",
        "Functions that create test data objects",
        "Factories make tests more readable and maintainable",
        code=r"create[A-Z][a-zA-Z]*|build[A-Z][a-zA-Z]*|make[A-Z][a-zA-Z]*",
        files=r"factories?/.*\.(js|ts|py)$|.*\.factory\.(js|ts)$",
    ),
    _rule(
        "Test Utilities",
        "Helper functions for testing",
        "Test utilities reduce duplication in test code",
        code=r"render[A-Z][a-zA-Z]*|setup[A-Z][a-zA-Z]*|mock[A-Z][a-zA-Z]*",
        files=r"test-utils|testing-utils|spec-helpers|conftest\.py$",
    ),
    # Design patterns
    _rule(
        "Singleton Pattern",
        "Ensuring only one instance of a class exists",
        "Be cautious with singletons as they can make testing difficult",
        code=r"private\s+static\s+instance|getInstance\s*\(\s*\)|_instance\s*=\s*None",
    ),
    _rule(
        "Factory Pattern",
        "Creating objects without specifying exact classes",
        "Factories provide flexibility in object creation",
        code=r"create[A-Z][a-zA-Z]*\s*\(|[A-Z][a-zA-Z]*Factory",
    ),
    _rule(
        "Observer Pattern",
        "Objects watching and reacting to state changes",
        "Observer pattern is great for loose coupling between components",
        code=r"addEventListener|removeEventListener|subscribe|unsubscribe|emit|on\s*\(",
    ),
    _rule(
        "Strategy Pattern",
        "Encapsulating algorithms and making them interchangeable",
        "Strategy pattern promotes code reusability and testing",
        code=r"Strategy\s*\{|implements\s+.*Strategy|extends\s+.*Strategy|class\s+\w+\(\w*Strategy\)",
    ),
    # Architecture
    _rule(
        "Model-View-Controller (MVC)",
        "Separating concerns into models, views, and controllers",
        "MVC helps organize code and separate concerns",
        files=r"(models?|views?|controllers?)/",
    ),
    _rule(
        "Repository Pattern",
        "Abstracting data access logic",
        "Repository pattern makes data access testable and swappable",
        code=r"class\s+[A-Z][a-zA-Z]*Repository|Repository\s*\{",
        files=r"repositories?/.*\.(js|ts|py)$|.*Repository\.(js|ts)$",
    ),
    _rule(
        "Service Layer Pattern",
        "Encapsulating business logic in service classes",
        "Service layer helps organize business logic",
        code=r"class\s+[A-Z][a-zA-Z]*Service|Service\s*\{",
        files=r"services?/.*\.(js|ts|py)$|.*Service\.(js|ts)$",
    ),
    _rule(
        "Dependency Injection",
        "Injecting dependencies rather than creating them internally",
        "Dependency injection improves testability and flexibility",
        code=r"constructor\s*\([^)]*[A-Z][a-zA-Z]*[^)]*\)|@Inject|@Injectable|Depends\(",
    ),
    # Data
    _rule(
        "ORM/ODM Pattern",
        "Object-relational mapping for database operations",
        "ORMs can simplify database operations but watch for N+1 queries",
        code=r"\.findOne\(|\.findMany\(|\.create\(|\.update\(|\.delete\(|Model\.|\.objects\.",
    ),
    _rule(
        "Database Migrations",
        "Version-controlled database schema changes",
        "Migrations help manage database schema changes across environments",
        files=r"migrations?/",
    ),
    _rule(
        "Database Seeding",
        "Populating database with initial or test data",
        "Seeding helps maintain consistent test and development data",
        code=r"seed\s*\(|createMany\s*\(",
        files=r"seeds?/|seeders?/",
    ),
    # Security
    _rule(
        "Authentication Middleware",
        "Protecting routes with authentication checks",
        "Always validate authentication on protected routes",
        code=r"requireAuth|isAuthenticated|checkAuth|authenticate|login_required",
    ),
    _rule(
        "Input Validation",
        "Validating and sanitizing user input",
        "Always validate input to prevent security vulnerabilities",
        code=r"validate|sanitize|Joi\.|yup\.|zod\.",
    ),
    _rule(
        "Rate Limiting",
        "Limiting request frequency to prevent abuse",
        "Rate limiting helps prevent abuse and DDoS attacks",
        code=r"rateLimit|rateLimiter|express-rate-limit|RateLimiter",
    ),
)


class PatternDetector:
    """Matches every pattern rule against a shared sample of code files."""

    def __init__(self, rules: Sequence[PatternRule] = RULES) -> None:
        self.rules = tuple(rules)

    def detect(self, scanner: EvidenceScanner) -> Tuple[PatternDetection, ...]:
        return self.detect_in(scanner.sample(CODE_PATTERNS))

    def detect_in(self, samples: Sequence[Tuple[str, str]]) -> Tuple[PatternDetection, ...]:
        detections = [
            detection
            for detection in (self._evaluate(rule, samples) for rule in self.rules)
            if detection is not None
        ]
        # ties keep rule order
        return tuple(sorted(detections, key=lambda item: -item.frequency))

    def _evaluate(
        self, rule: PatternRule, samples: Sequence[Tuple[str, str]]
    ) -> PatternDetection | None:
        frequency = 0
        examples: List[CodeExample] = []
        for path, text in samples:
            if rule.files is not None and not rule.files.search(path):
                continue
            if rule.code is None:
                frequency += 1
                if len(examples) < MAX_EXAMPLES:
                    examples.append(_file_example(rule, path, text))
                continue

            matches = list(rule.code.finditer(text))
            if not matches:
                continue
            frequency += len(matches)
            if len(examples) < MAX_EXAMPLES:
                start = line_of(text, matches[0].start())
                examples.append(
                    excerpt(path, text.split("\n"), start - 5, start + 15, patterns=(rule.name,))
                )

        if frequency == 0:
            return None
        return PatternDetection(
            name=rule.name,
            description=rule.description,
            frequency=frequency,
            examples=tuple(examples),
            recommendation=rule.recommendation,
        )


def _file_example(rule: PatternRule, path: str, text: str) -> CodeExample:
    lines = text.split("\n")
    match = _MAIN_DECLARATION.search(text)
    if match is None:
        return excerpt(path, lines, 0, 20, patterns=(rule.name,))
    start = line_of(text, match.start())
    return excerpt(path, lines, start - 2, start + 25, patterns=(rule.name,))


__all__ = ["PatternDetector", "PatternRule", "RULES"]
