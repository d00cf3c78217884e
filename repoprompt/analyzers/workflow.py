"""Workflow facet: CI/CD platforms, branching, automation and collaboration."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from ..models import (
    AutomationInfo,
    BranchingInfo,
    CICDInfo,
    CollaborationInfo,
    WorkflowAnalysis,
)
from ..repo_scanner import EvidenceScanner
from .base import FacetAnalyzer, FacetContext
from .utils import package_scripts, read_all


@dataclass(frozen=True)
class Platform:
    """A CI/CD system recognised by its configuration files."""

    name: str
    files: Tuple[str, ...]
    ci: re.Pattern[str]
    cd: re.Pattern[str]


_ANY = re.compile(r"")
_DEPLOY_RELEASE = re.compile(r"deploy|release", re.I)

PLATFORMS: Tuple[Platform, ...] = (
    Platform(
        "GitHub Actions",
        (".github/workflows/*.yml", ".github/workflows/*.yaml"),
        re.compile(r"on:\s*\[?\s*(?:push|pull_request)|on:\s*\n\s+(?:push|pull_request)"),
        re.compile(r"deploy|release|publish", re.I),
    ),
    Platform("Jenkins", ("Jenkinsfile",), _ANY, re.compile(r"deploy|publish", re.I)),
    Platform("GitLab CI", (".gitlab-ci.yml",), _ANY, _DEPLOY_RELEASE),
    Platform("CircleCI", (".circleci/config.yml",), _ANY, _DEPLOY_RELEASE),
    Platform("Travis CI", (".travis.yml",), _ANY, _DEPLOY_RELEASE),
    Platform("Azure Pipelines", ("azure-pipelines.yml", ".azure/pipelines.yml"), _ANY, _DEPLOY_RELEASE),
)

ADVANCED_FEATURES: Tuple[re.Pattern[str], ...] = (
    re.compile(r"matrix:|strategy:"),
    re.compile(r"cache|Cache"),
    re.compile(r"security|vulnerability|scan|audit|codeql", re.I),
    re.compile(r"environment:|staging|production|dev"),
    re.compile(r"jobs:\s*\n\s*\w+:\s*\n[\s\S]*\w+:"),
)

CI_GAPS: Tuple[Tuple[Callable[[CICDInfo], bool], str], ...] = (
    (lambda info: not info.has_ci, "No continuous integration pipeline detected"),
    (lambda info: not info.has_cd, "No continuous deployment pipeline detected"),
    (lambda info: not info.platforms, "No CI/CD platform configuration found"),
)

SCRIPT_AUTOMATION: Dict[str, Tuple[str, ...]] = {
    "testing": ("test", "test:unit", "test:integration"),
    "linting": ("lint", "lint:check"),
    "formatting": ("format", "format:check", "prettier"),
    "security": ("security", "security:check", "audit"),
    "deployment": ("deploy", "build", "release"),
}

CI_AUTOMATION: Dict[str, re.Pattern[str]] = {
    "testing": re.compile(r"test|jest|mocha|pytest", re.I),
    "linting": re.compile(r"lint|eslint|flake8|rubocop", re.I),
    "formatting": re.compile(r"format|prettier|black|autopep8", re.I),
    "security": re.compile(r"security|audit|snyk|sonar", re.I),
    "deployment": re.compile(r"deploy|release|publish", re.I),
}

HOOK_FILES = (".pre-commit-config.yaml", ".husky")
CI_FILE_PATTERNS = (
    ".github/workflows/*.{yml,yaml}",
    ".gitlab-ci.yml",
    "Jenkinsfile",
    ".circleci/config.yml",
    ".travis.yml",
    "azure-pipelines.yml",
)

ISSUE_TEMPLATES = (".github/ISSUE_TEMPLATE", ".github/issue_template.md", ".github/ISSUE_TEMPLATE.md")
PR_TEMPLATES = (
    ".github/pull_request_template.md",
    ".github/PULL_REQUEST_TEMPLATE.md",
    ".github/PULL_REQUEST_TEMPLATE",
    "docs/pull_request_template.md",
)
CODEOWNERS = (".github/CODEOWNERS", "CODEOWNERS", "docs/CODEOWNERS")
DISCUSSIONS = (".github/DISCUSSION_TEMPLATE",)
STRATEGY_DOCS = ("README.md", "CONTRIBUTING.md", "docs/CONTRIBUTING.md")

_STRATEGY_KEYWORDS: Tuple[Tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"git.?flow", re.I), "gitflow"),
    (re.compile(r"github.?flow", re.I), "github-flow"),
    (re.compile(r"trunk.?based", re.I), "trunk"),
)
_PROTECTED_BRANCHES = re.compile(r"branches:\s*\[.*(?:main|master).*\]")

RECOMMENDATION_RULES: Tuple[Tuple[Callable[[WorkflowAnalysis], bool], str], ...] = (
    (
        lambda wf: not wf.cicd.has_ci,
        "Set up continuous integration to run tests on every push and pull request",
    ),
    (
        lambda wf: wf.cicd.has_ci and not wf.cicd.has_cd,
        "Automate deployments with a continuous deployment pipeline",
    ),
    (
        lambda wf: wf.cicd.has_ci and wf.cicd.quality != "advanced",
        "Add caching, build matrices and security scanning to the CI pipeline",
    ),
    (lambda wf: wf.branching.strategy == "unknown", "Document the branching strategy for contributors"),
    (lambda wf: not wf.branching.protection, "Enable branch protection for the main branch"),
    (lambda wf: not wf.automation.testing, "Automate test execution in scripts and CI"),
    (lambda wf: not wf.automation.linting, "Add automated linting to catch issues early"),
    (lambda wf: not wf.automation.formatting, "Enforce consistent formatting with an automated formatter"),
    (lambda wf: not wf.automation.security, "Add dependency and code security scanning to the workflow"),
    (lambda wf: not wf.collaboration.pr_templates, "Add a pull request template to standardise reviews"),
    (lambda wf: not wf.collaboration.issue_templates, "Add issue templates for bug reports and feature requests"),
    (lambda wf: not wf.collaboration.codeowners, "Define CODEOWNERS to route reviews automatically"),
)


class WorkflowAnalyzer(FacetAnalyzer):
    """Assesses development workflow maturity."""

    name = "workflow"

    def analyze(self, scanner: EvidenceScanner, context: FacetContext) -> WorkflowAnalysis:
        workflow_text = read_all(
            scanner, scanner.find_any((".github/workflows/*.yml", ".github/workflows/*.yaml"))
        )
        record = WorkflowAnalysis(
            cicd=self._cicd(scanner),
            branching=self._branching(scanner, workflow_text),
            automation=self._automation(scanner, context),
            collaboration=CollaborationInfo(
                issue_templates=scanner.any_exists(ISSUE_TEMPLATES),
                pr_templates=scanner.any_exists(PR_TEMPLATES),
                codeowners=scanner.any_exists(CODEOWNERS),
                discussions=scanner.any_exists(DISCUSSIONS),
            ),
        )
        recommendations = [text for condition, text in RECOMMENDATION_RULES if condition(record)]
        return WorkflowAnalysis(
            cicd=record.cicd,
            branching=record.branching,
            automation=record.automation,
            collaboration=record.collaboration,
            recommendations=tuple(recommendations),
        )

    def _cicd(self, scanner: EvidenceScanner) -> CICDInfo:
        platforms: List[str] = []
        has_ci = False
        has_cd = False
        config_texts: List[str] = []

        for platform in PLATFORMS:
            files = scanner.find_any(platform.files)
            if not files:
                files = [path for path in platform.files if "*" not in path and scanner.exists(path)]
            if not files:
                continue
            platforms.append(platform.name)
            for path in files:
                text = scanner.read_or_empty(path)
                config_texts.append(text)
                if platform.ci.search(text):
                    has_ci = True
                if platform.cd.search(text):
                    has_cd = True

        quality = "basic"
        if has_ci and has_cd:
            quality = "intermediate"
        combined = "\n".join(config_texts)
        if combined and sum(1 for feature in ADVANCED_FEATURES if feature.search(combined)) >= 3:
            quality = "advanced"

        info = CICDInfo(platforms=tuple(platforms), has_ci=has_ci, has_cd=has_cd, quality=quality)
        gaps = tuple(text for condition, text in CI_GAPS if condition(info))
        return CICDInfo(
            platforms=info.platforms, has_ci=has_ci, has_cd=has_cd, quality=quality, gaps=gaps
        )

    def _branching(self, scanner: EvidenceScanner, workflow_text: str) -> BranchingInfo:
        strategy = "unknown"
        git_config = scanner.read_or_empty(".git/config")
        if "develop" in git_config or "development" in git_config:
            strategy = "gitflow"
        elif "main" in git_config or "master" in git_config:
            strategy = "github-flow"

        if strategy == "unknown":
            docs = read_all(scanner, STRATEGY_DOCS)
            for pattern, label in _STRATEGY_KEYWORDS:
                if pattern.search(docs):
                    strategy = label
                    break

        return BranchingInfo(
            strategy=strategy,
            protection=bool(_PROTECTED_BRANCHES.search(workflow_text)),
            review_required="pull_request" in workflow_text,
        )

    def _automation(self, scanner: EvidenceScanner, context: FacetContext) -> AutomationInfo:
        flags = {key: False for key in SCRIPT_AUTOMATION}

        scripts = package_scripts(context.dependencies)
        for key, names in SCRIPT_AUTOMATION.items():
            if any(name in scripts for name in names):
                flags[key] = True

        if scanner.any_exists(HOOK_FILES):
            flags["testing"] = flags["linting"] = flags["formatting"] = True

        ci_text = read_all(scanner, scanner.find_any(CI_FILE_PATTERNS))
        if ci_text:
            for key, pattern in CI_AUTOMATION.items():
                if pattern.search(ci_text):
                    flags[key] = True

        return AutomationInfo(**flags)


__all__ = ["PLATFORMS", "RECOMMENDATION_RULES", "WorkflowAnalyzer"]
