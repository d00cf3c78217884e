"""Tests for the workflow facet."""

from __future__ import annotations

from repoprompt.analyzers.workflow import WorkflowAnalyzer
from tests._fixtures.repo_builder import RepoBuilder

CI_WORKFLOW = """
name: CI
on:
  push:
    branches: [main]
  pull_request:
jobs:
  test:
    runs-on: ubuntu-latest
    steps:
      - run: npm test
"""


def _analyze(repo_builder: RepoBuilder):
    scanner = repo_builder.scanner()
    return WorkflowAnalyzer().analyze(scanner, repo_builder.context(scanner))


def test_github_actions_ci_without_deployment(repo_builder: RepoBuilder) -> None:
    repo_builder.write({".github/workflows/ci.yml": CI_WORKFLOW})

    result = _analyze(repo_builder)

    assert result.cicd.platforms == ("GitHub Actions",)
    assert result.cicd.has_ci is True
    assert result.cicd.has_cd is False
    assert result.cicd.quality == "basic"
    assert result.cicd.gaps == ("No continuous deployment pipeline detected",)
    assert result.branching.protection is True
    assert result.branching.review_required is True
    assert result.automation.testing is True
    assert "Automate deployments with a continuous deployment pipeline" in result.recommendations


def test_deploy_job_makes_pipeline_intermediate(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {".github/workflows/release.yml": CI_WORKFLOW + "  deploy:\n    steps:\n      - run: ./deploy.sh\n"}
    )

    result = _analyze(repo_builder)

    assert result.cicd.has_cd is True
    assert result.cicd.quality == "intermediate"
    assert result.cicd.gaps == ()
    assert result.automation.deployment is True


def test_repository_without_ci(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/index.js": "export const a = 1\n"})

    result = _analyze(repo_builder)

    assert result.cicd.platforms == ()
    assert "No continuous integration pipeline detected" in result.cicd.gaps
    assert "No CI/CD platform configuration found" in result.cicd.gaps
    assert result.branching.strategy == "unknown"
    assert (
        "Set up continuous integration to run tests on every push and pull request"
        in result.recommendations
    )


def test_branching_strategy_from_git_config(repo_builder: RepoBuilder) -> None:
    repo_builder.write({".git/config": '[branch "main"]\n\tremote = origin\n'})

    assert _analyze(repo_builder).branching.strategy == "github-flow"


def test_branching_strategy_from_contributing_guide(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"CONTRIBUTING.md": "We practise trunk-based development.\n"})

    assert _analyze(repo_builder).branching.strategy == "trunk"


def test_automation_from_package_scripts_and_hooks(repo_builder: RepoBuilder) -> None:
    repo_builder.write_json("package.json", {"scripts": {"lint": "eslint .", "test": "jest"}})

    automation = _analyze(repo_builder).automation
    assert automation.linting is True
    assert automation.testing is True
    assert automation.formatting is False

    repo_builder.mkdir(".husky")
    assert _analyze(repo_builder).automation.formatting is True


def test_collaboration_templates(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            ".github/pull_request_template.md": "## Summary\n",
            ".github/CODEOWNERS": "* @team\n",
        }
    )

    collaboration = _analyze(repo_builder).collaboration

    assert collaboration.pr_templates is True
    assert collaboration.codeowners is True
    assert collaboration.issue_templates is False
