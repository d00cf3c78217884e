"""Rule-driven technology detection over scanner evidence."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Dict, Iterable, List, Mapping, Tuple

from ..logging import get_logger
from ..models import Technology, freeze
from ..repo_scanner import EvidenceScanner
from .utils import Dependencies

MARKER_WEIGHT = 0.8
PACKAGE_WEIGHT = 0.7
EXTENSION_WEIGHT = 0.6
CONTENT_WEIGHT = 0.3

# Extension signals reach full weight at this many files.
_EXTENSION_SATURATION = 5

CATEGORIES: Tuple[str, ...] = ("languages", "frameworks", "databases", "tools", "libraries")


@dataclass(frozen=True)
class DetectionRule:
    """Signals that nominate one technology. Rules never consult each other."""

    name: str
    category: str
    markers: Tuple[str, ...] = ()
    extensions: Tuple[str, ...] = ()
    packages: Tuple[str, ...] = ()
    content: Tuple[Tuple[str, str], ...] = ()


def _lang(name: str, *extensions: str) -> DetectionRule:
    return DetectionRule(name, "languages", extensions=extensions)


def _fw(name: str, packages: Iterable[str] = (), markers: Iterable[str] = (), content=()) -> DetectionRule:
    return DetectionRule(
        name, "frameworks", markers=tuple(markers), packages=tuple(packages), content=tuple(content)
    )


def _db(name: str, packages: Iterable[str] = (), markers: Iterable[str] = (), extensions=()) -> DetectionRule:
    return DetectionRule(
        name, "databases", markers=tuple(markers), packages=tuple(packages), extensions=tuple(extensions)
    )


def _tool(name: str, markers: Iterable[str] = (), packages: Iterable[str] = ()) -> DetectionRule:
    return DetectionRule(name, "tools", markers=tuple(markers), packages=tuple(packages))


def _lib(name: str, *packages: str) -> DetectionRule:
    return DetectionRule(name, "libraries", packages=packages)


RULES: Tuple[DetectionRule, ...] = (
    _lang("TypeScript", ".ts", ".tsx"),
    _lang("JavaScript", ".js", ".jsx", ".mjs", ".cjs"),
    _lang("Python", ".py", ".pyx"),
    _lang("Java", ".java"),
    _lang("C#", ".cs"),
    _lang("Go", ".go"),
    _lang("Rust", ".rs"),
    _lang("PHP", ".php"),
    _lang("Ruby", ".rb"),
    _lang("Swift", ".swift"),
    _lang("Kotlin", ".kt", ".kts"),
    _lang("Dart", ".dart"),
    _lang("HTML", ".html", ".htm"),
    _lang("CSS", ".css", ".scss", ".sass", ".less"),
    _lang("SQL", ".sql"),
    _lang("Shell", ".sh", ".bash", ".zsh"),
    _lang("YAML", ".yml", ".yaml"),
    _lang("JSON", ".json"),
    _fw("React", ["react"], ["src/App.jsx", "src/App.tsx"]),
    _fw("Vue.js", ["vue"], ["src/App.vue", "vue.config.js"]),
    _fw("Angular", ["@angular/core"], ["angular.json", "src/app/app.component.ts"]),
    _fw("Svelte", ["svelte"], ["svelte.config.js"]),
    _fw("Express.js", ["express"], content=[("**/*.{js,ts}", r"require\(['\"]express['\"]\)|from ['\"]express['\"]")]),
    _fw("Fastify", ["fastify"]),
    _fw("Koa", ["koa"]),
    _fw("NestJS", ["@nestjs/core"], ["nest-cli.json"]),
    _fw("Next.js", ["next"], ["next.config.js", "next.config.mjs", "next.config.ts"]),
    _fw("Nuxt.js", ["nuxt"], ["nuxt.config.js", "nuxt.config.ts"]),
    _fw("Gatsby", ["gatsby"], ["gatsby-config.js"]),
    _fw("React Native", ["react-native"], ["metro.config.js"]),
    _fw("Electron", ["electron"], ["public/electron.js"]),
    _fw("Django", ["django"], ["manage.py"]),
    _fw("Flask", ["flask"], content=[("**/*.py", r"from flask import|import flask")]),
    _fw("FastAPI", ["fastapi"], content=[("**/*.py", r"from fastapi import")]),
    _fw("Tornado", ["tornado"]),
    _fw("Pyramid", ["pyramid"]),
    _fw("Laravel", ["laravel/framework"], ["artisan", "app/Http/Controllers"]),
    _fw("Rails", ["rails"], ["config/routes.rb", "app/controllers"]),
    _fw(
        "Spring Boot",
        ["org.springframework.boot:spring-boot-starter-web", "org.springframework.boot:spring-boot-starter"],
        ["src/main/java"],
    ),
    _db("PostgreSQL", ["pg", "postgres", "psycopg2", "psycopg2-binary", "asyncpg"], ["postgresql.conf"]),
    _db("MySQL", ["mysql", "mysql2", "pymysql", "mysqlclient"], ["my.cnf"]),
    _db("MongoDB", ["mongodb", "mongoose", "pymongo"], ["mongod.conf"]),
    _db("Redis", ["redis", "ioredis"], ["redis.conf"]),
    _db("SQLite", ["sqlite3", "better-sqlite3"], extensions=(".sqlite", ".db")),
    _db("Elasticsearch", ["@elastic/elasticsearch", "elasticsearch"], ["elasticsearch.yml"]),
    _db("SQL Database", markers=["schema.rb", "migrations", "db/migrations"], extensions=(".sql",)),
    _tool("Webpack", ["webpack.config.js", "webpack.config.ts"], ["webpack"]),
    _tool("Vite", ["vite.config.js", "vite.config.ts"], ["vite"]),
    _tool("Rollup", ["rollup.config.js"], ["rollup"]),
    _tool("Parcel", [".parcelrc"], ["parcel"]),
    _tool("ESBuild", ["esbuild.config.js"], ["esbuild"]),
    _tool("Babel", [".babelrc", "babel.config.js"], ["@babel/core"]),
    _tool("TypeScript", ["tsconfig.json"], ["typescript"]),
    _tool("ESLint", [".eslintrc", ".eslintrc.js", ".eslintrc.json", ".eslintrc.yml", "eslint.config.js"], ["eslint"]),
    _tool("Prettier", [".prettierrc", ".prettierrc.json", "prettier.config.js"], ["prettier"]),
    _tool("Jest", ["jest.config.js", "jest.config.ts"], ["jest"]),
    _tool("Vitest", ["vitest.config.js", "vitest.config.ts"], ["vitest"]),
    _tool("Cypress", ["cypress.config.js", "cypress.json"], ["cypress"]),
    _tool("Playwright", ["playwright.config.js", "playwright.config.ts"], ["@playwright/test"]),
    _tool("Storybook", [".storybook"], ["@storybook/react"]),
    _tool("pytest", ["pytest.ini", "conftest.py", "tests/conftest.py"], ["pytest"]),
    _tool("Docker", ["Dockerfile", "docker-compose.yml", "docker-compose.yaml"]),
    _tool("Kubernetes", ["k8s", "kubernetes", "helm"]),
    _tool("GitHub Actions", [".github/workflows"]),
    _tool("GitLab CI", [".gitlab-ci.yml"]),
    _tool("Jenkins", ["Jenkinsfile"]),
    _tool("CircleCI", [".circleci/config.yml"]),
    _tool("Travis CI", [".travis.yml"]),
    _lib("UI Libraries", "@mui/material", "antd", "react-bootstrap", "semantic-ui-react", "@chakra-ui/react"),
    _lib("State Management", "redux", "zustand", "recoil", "mobx", "vuex", "pinia"),
    _lib("HTTP Client", "axios", "superagent", "got", "node-fetch", "requests", "httpx"),
    _lib("Testing", "@testing-library/react", "enzyme", "sinon", "mocha", "chai"),
    _lib("Styling", "styled-components", "@emotion/react", "tailwindcss", "sass"),
    _lib("Date/Time", "moment", "dayjs", "date-fns", "luxon"),
    _lib("Validation", "joi", "yup", "zod", "ajv", "pydantic"),
    _lib("ORM/ODM", "prisma", "typeorm", "sequelize", "mongoose", "knex", "sqlalchemy"),
)


def merge_technologies(technologies: Iterable[Technology]) -> List[Technology]:
    """Fold duplicate nominations: max confidence, union of evidence, first version seen."""
    merged: Dict[str, Technology] = {}
    for tech in technologies:
        existing = merged.get(tech.name)
        if existing is None:
            merged[tech.name] = tech
            continue
        merged[tech.name] = Technology(
            name=tech.name,
            confidence=max(existing.confidence, tech.confidence),
            evidence=tuple(sorted(set(existing.evidence) | set(tech.evidence))),
            version=existing.version or tech.version,
        )
    return sorted(merged.values(), key=lambda item: (-item.confidence, item.name))


class TechnologyDetector:
    """Evaluates every detection rule against the scanner."""

    def __init__(self, rules: Iterable[DetectionRule] = RULES) -> None:
        self.rules = tuple(rules)
        self.logger = get_logger("technology")

    def detect(
        self, scanner: EvidenceScanner, dependencies: Dependencies
    ) -> Mapping[str, Tuple[Technology, ...]]:
        extension_files: Dict[str, List[str]] = {}
        for path in scanner.files:
            suffix = PurePosixPath(path).suffix.lower()
            if suffix:
                extension_files.setdefault(suffix, []).append(path)
        declared = {name.lower() for name in dependencies.all_names}

        nominations: Dict[str, List[Technology]] = {category: [] for category in CATEGORIES}
        for rule in self.rules:
            if scanner.cancel_token.cancelled:
                break
            tech = self._evaluate(rule, scanner, extension_files, declared, dependencies)
            if tech is not None:
                nominations.setdefault(rule.category, []).append(tech)

        detected = {category: tuple(merge_technologies(items)) for category, items in nominations.items()}
        self.logger.debug(
            "Detected %d technologies", sum(len(items) for items in detected.values())
        )
        return freeze(detected)

    def _evaluate(
        self,
        rule: DetectionRule,
        scanner: EvidenceScanner,
        extension_files: Mapping[str, List[str]],
        declared: set[str],
        dependencies: Dependencies,
    ) -> Technology | None:
        weight = 0.0
        evidence: List[str] = []
        version = None

        for marker in rule.markers:
            if scanner.exists(marker):
                weight += MARKER_WEIGHT
                evidence.append(marker)

        for package in rule.packages:
            if package.lower() in declared:
                weight += PACKAGE_WEIGHT
                evidence.append(f"dependency:{package}")
                version = version or dependencies.version_of(package)

        matched_files: List[str] = []
        for extension in rule.extensions:
            matched_files.extend(extension_files.get(extension, []))
        if matched_files:
            weight += EXTENSION_WEIGHT * min(1.0, len(matched_files) / _EXTENSION_SATURATION)
            evidence.extend(sorted(matched_files)[:5])

        for pattern, regex in rule.content:
            hit = next(scanner.search(regex, pattern, limit=1), None)
            if hit is not None:
                weight += CONTENT_WEIGHT
                evidence.append(f"{hit.path}:{hit.line_no}")

        if weight <= 0:
            return None
        return Technology(
            name=rule.name,
            confidence=min(1.0, weight),
            evidence=tuple(evidence),
            version=version or None,
        )


__all__ = [
    "CATEGORIES",
    "DetectionRule",
    "RULES",
    "TechnologyDetector",
    "merge_technologies",
]
