"""Project layout classification and the importance-annotated file tree."""

from __future__ import annotations

import re
from typing import Dict, List, Tuple

from ..models import FileNode, ImportantFiles, ProjectStructure
from ..repo_scanner import EvidenceScanner
from .utils import Dependencies, package_scripts

HIGH_FILES = {
    "package.json",
    "tsconfig.json",
    "webpack.config.js",
    "vite.config.ts",
    "next.config.js",
    "nuxt.config.js",
    "vue.config.js",
    "angular.json",
    "Dockerfile",
    "docker-compose.yml",
    "README.md",
    "CHANGELOG.md",
    "LICENSE",
    ".gitignore",
    ".env",
    ".env.example",
    "schema.prisma",
    "schema.sql",
    "pyproject.toml",
    "setup.py",
    "requirements.txt",
}
HIGH_FILE_PATTERNS = tuple(
    re.compile(pattern)
    for pattern in (
        r"^(index|main|app)\.(js|ts|jsx|tsx|py)$",
        r"^App\.(vue|jsx|tsx)$",
        r"^_app\.",
        r"^_document\.",
        r"\.config\.(js|ts)$",
        r"\.d\.ts$",
    )
)
MEDIUM_FILE_PATTERNS = tuple(
    re.compile(pattern)
    for pattern in (
        r"\.(component|service|controller|model|util|helper)\.(js|ts|jsx|tsx)$",
        r"\.(test|spec)\.",
        r"^test_.*\.py$",
        r"\.stories\.",
        r"routes?\.(js|ts|py)$",
        r"\.md$",
    )
)
MEDIUM_PATH_SEGMENTS = ("/api/", "/components/", "/services/", "/utils/")

HIGH_DIRS = {
    "src",
    "app",
    "lib",
    "pages",
    "components",
    "api",
    "server",
    "backend",
    "frontend",
    "services",
    "controllers",
    "models",
    "routes",
    "middleware",
    "config",
    "database",
    "schemas",
}
MEDIUM_DIRS = {
    "utils",
    "helpers",
    "hooks",
    "context",
    "store",
    "types",
    "interfaces",
    "constants",
    "assets",
    "public",
    "static",
    "tests",
    "__tests__",
    "test",
    "spec",
    "cypress",
    "e2e",
}
_IMPORTANCE_ORDER = {"high": 0, "medium": 1, "low": 2}

CONFIG_FILES = (
    "package.json",
    "tsconfig.json",
    "webpack.config.js",
    "vite.config.ts",
    "next.config.js",
    "nuxt.config.js",
    "vue.config.js",
    "angular.json",
    "jest.config.js",
    "cypress.config.js",
    "tailwind.config.js",
    "postcss.config.js",
    ".eslintrc.js",
    ".prettierrc",
    "Dockerfile",
    "docker-compose.yml",
    ".dockerignore",
    "schema.prisma",
    "prisma/schema.prisma",
    ".github/workflows",
    ".gitlab-ci.yml",
    "Jenkinsfile",
    "pyproject.toml",
    "setup.cfg",
    "requirements.txt",
)
ENTRY_POINTS = (
    "src/index.js",
    "src/index.ts",
    "src/main.js",
    "src/main.ts",
    "src/App.js",
    "src/App.ts",
    "src/App.jsx",
    "src/App.tsx",
    "src/App.vue",
    "pages/_app.js",
    "pages/_app.ts",
    "server.js",
    "server.ts",
    "app.js",
    "app.ts",
    "index.js",
    "index.ts",
    "main.js",
    "main.ts",
    "main.py",
    "app.py",
    "manage.py",
)
DOC_FILES = (
    "README.md",
    "CHANGELOG.md",
    "CONTRIBUTING.md",
    "LICENSE",
    "docs/README.md",
    "documentation/README.md",
)

TYPE_INDICATORS: Dict[str, Tuple[str, ...]] = {
    "frontend": (
        "src/App.jsx",
        "src/App.tsx",
        "src/App.vue",
        "pages/_app.js",
        "public/index.html",
        "src/components",
        "components",
    ),
    "backend": (
        "server.js",
        "app.js",
        "src/server.js",
        "routes",
        "controllers",
        "middleware",
        "api",
        "src/api",
    ),
    "mobile": ("App.js", "App.tsx", "android", "ios", "lib/main.dart"),
    "desktop": ("src-tauri", "public/electron.js"),
    "library": ("lib", "src/index.ts", "dist", "rollup.config.js", "lib/index.js"),
}
TYPE_DEPENDENCIES: Dict[str, Tuple[str, ...]] = {
    "frontend": ("react", "vue", "angular", "svelte", "@angular/core"),
    "backend": ("express", "fastify", "koa", "nestjs", "hapi", "django", "flask", "fastapi"),
    "mobile": ("react-native", "flutter", "ionic", "@react-native/metro-config"),
    "desktop": ("electron", "tauri", "nwjs"),
    "library": ("rollup", "microbundle", "tsdx"),
}

MICROSERVICE_INDICATORS = ("docker-compose.yml", "kubernetes", "k8s", "services", "microservices")
SERVERLESS_INDICATORS = ("serverless.yml", "netlify.toml", "vercel.json", "functions", "lambda", "api")
JAMSTACK_INDICATORS = (
    "static",
    "public",
    "_site",
    "dist",
    "gatsby-config.js",
    "next.config.js",
    "nuxt.config.js",
)
MVC_DIRS = ("models", "views", "controllers", "app/models", "app/views", "app/controllers")

BUILD_SYSTEM_FILES: Dict[str, Tuple[str, ...]] = {
    "Webpack": ("webpack.config.js", "webpack.config.ts"),
    "Vite": ("vite.config.js", "vite.config.ts"),
    "Rollup": ("rollup.config.js", "rollup.config.ts"),
    "Parcel": (".parcelrc", "parcel.config.js"),
    "ESBuild": ("esbuild.config.js",),
    "Gulp": ("gulpfile.js", "gulpfile.ts"),
    "Grunt": ("Gruntfile.js",),
    "Make": ("Makefile",),
    "Bazel": ("BUILD", "WORKSPACE"),
    "Rush": ("rush.json",),
    "Lerna": ("lerna.json",),
    "Nx": ("nx.json", "workspace.json"),
}
SCRIPT_BUILD_TOOLS = {"webpack": "Webpack", "vite": "Vite", "rollup": "Rollup", "parcel": "Parcel"}

LOCKFILES = (
    ("npm", "package-lock.json"),
    ("yarn", "yarn.lock"),
    ("pnpm", "pnpm-lock.yaml"),
    ("bun", "bun.lockb"),
)
OTHER_MANAGERS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("pip", ("requirements.txt", "Pipfile", "pyproject.toml")),
    ("conda", ("environment.yml", "conda.yml")),
    ("maven", ("pom.xml",)),
    ("gradle", ("build.gradle", "build.gradle.kts")),
    ("composer", ("composer.json",)),
    ("cargo", ("Cargo.toml",)),
    ("go mod", ("go.mod",)),
)

TEST_FRAMEWORK_PACKAGES: Dict[str, Tuple[str, ...]] = {
    "Jest": ("jest", "@types/jest"),
    "Vitest": ("vitest",),
    "Mocha": ("mocha",),
    "Jasmine": ("jasmine",),
    "Cypress": ("cypress",),
    "Playwright": ("@playwright/test",),
    "Puppeteer": ("puppeteer",),
    "Testing Library": ("@testing-library/react", "@testing-library/vue"),
    "Enzyme": ("enzyme",),
    "Karma": ("karma",),
    "Protractor": ("protractor",),
    "pytest": ("pytest",),
}
TEST_CONFIG_FILES: Dict[str, Tuple[str, ...]] = {
    "Jest": ("jest.config.js", "jest.config.ts"),
    "Cypress": ("cypress.config.js", "cypress.config.ts"),
    "Playwright": ("playwright.config.ts",),
    "Vitest": ("vitest.config.ts", "vitest.config.js"),
    "pytest": ("pytest.ini", "conftest.py", "tests/conftest.py"),
}


def file_importance(name: str, path: str) -> str:
    if name in HIGH_FILES or any(pattern.search(name) for pattern in HIGH_FILE_PATTERNS):
        return "high"
    if any(pattern.search(name) for pattern in MEDIUM_FILE_PATTERNS):
        return "medium"
    if any(segment in f"/{path}" for segment in MEDIUM_PATH_SEGMENTS):
        return "medium"
    return "low"


def directory_importance(name: str, children: Tuple[FileNode, ...]) -> str:
    if name in HIGH_DIRS:
        return "high"
    if any(child.importance == "high" for child in children) or name in MEDIUM_DIRS:
        return "medium"
    return "low"


def _sort_key(node: FileNode) -> tuple:
    return (node.type != "directory", _IMPORTANCE_ORDER[node.importance], node.name)


def build_file_tree(scanner: EvidenceScanner, max_depth: int) -> FileNode:
    """Assemble the snapshot into a tree no deeper than ``max_depth`` levels."""
    tree: Dict[str, dict] = {}
    for paths, leaf in ((scanner.directories, True), (scanner.files, False)):
        for path in paths:
            parts = path.split("/")
            if len(parts) > max_depth:
                continue
            cursor = tree
            for part in parts[:-1]:
                cursor = cursor.setdefault(part, {})
            cursor.setdefault(parts[-1], {} if leaf else None)

    def _build(name: str, path: str, entry: dict | None) -> FileNode:
        if entry is None:
            return FileNode(name=name, path=path, type="file", importance=file_importance(name, path))
        children = tuple(
            sorted(
                (
                    _build(child, f"{path}/{child}" if path else child, sub)
                    for child, sub in entry.items()
                ),
                key=_sort_key,
            )
        )
        return FileNode(
            name=name,
            path=path,
            type="directory",
            importance=directory_importance(name, children),
            children=children,
        )

    root = _build(scanner.root.name, "", tree)
    return FileNode(
        name=root.name, path="", type="directory", importance="high", children=root.children
    )


class StructureAnalyzer:
    """Classifies project type, architecture and tooling from layout evidence."""

    def analyze(self, scanner: EvidenceScanner, dependencies: Dependencies) -> ProjectStructure:
        declared = set(dependencies.all_names)
        return ProjectStructure(
            type=self._project_type(scanner, declared),
            architecture=self._architecture(scanner, declared),
            build_system=tuple(self._build_system(scanner, dependencies)),
            package_manager=self._package_manager(scanner),
            test_frameworks=tuple(self._test_frameworks(scanner, declared)),
            important_files=ImportantFiles(
                config=tuple(scanner.existing(CONFIG_FILES)),
                entry_points=tuple(scanner.existing(ENTRY_POINTS)),
                documentation=tuple(scanner.existing(DOC_FILES)),
            ),
        )

    def _project_type(self, scanner: EvidenceScanner, declared: set[str]) -> str:
        scores: Dict[str, int] = {}
        for kind, indicators in TYPE_INDICATORS.items():
            scores[kind] = sum(1 for indicator in indicators if scanner.exists(indicator))
            scores[kind] += 2 * sum(1 for dep in TYPE_DEPENDENCIES[kind] if dep in declared)

        best = max(scores.values())
        if best == 0:
            return "unknown"
        if scores["frontend"] > 0 and scores["backend"] > 0:
            return "fullstack"
        return next(kind for kind, score in scores.items() if score == best)

    def _architecture(self, scanner: EvidenceScanner, declared: set[str]) -> str:
        microservices = sum(1 for item in MICROSERVICE_INDICATORS if scanner.exists(item))
        serverless = sum(1 for item in SERVERLESS_INDICATORS if scanner.exists(item))
        jamstack = sum(1 for item in JAMSTACK_INDICATORS if scanner.exists(item))

        if declared & {"next", "gatsby", "nuxt"}:
            jamstack += 2
        if declared & {"serverless", "@serverless/compose"}:
            serverless += 2
        if {"express", "react"} <= declared:
            return "monolith"

        if microservices >= 2:
            return "microservices"
        if serverless >= 2:
            return "serverless"
        if jamstack >= 2:
            return "jamstack"
        if sum(1 for item in MVC_DIRS if scanner.is_dir(item)) >= 2:
            return "mvc"
        return "monolith"

    def _build_system(self, scanner: EvidenceScanner, dependencies: Dependencies) -> List[str]:
        systems = [name for name, files in BUILD_SYSTEM_FILES.items() if scanner.any_exists(files)]
        scripts = " ".join(package_scripts(dependencies).values())
        for keyword, name in SCRIPT_BUILD_TOOLS.items():
            if keyword in scripts and name not in systems:
                systems.append(name)
        return systems

    def _package_manager(self, scanner: EvidenceScanner) -> str:
        for manager, lockfile in LOCKFILES:
            if scanner.exists(lockfile):
                return manager
        if scanner.exists("package.json"):
            return "npm"
        for manager, files in OTHER_MANAGERS:
            if scanner.any_exists(files):
                return manager
        return "unknown"

    def _test_frameworks(self, scanner: EvidenceScanner, declared: set[str]) -> List[str]:
        frameworks = [
            name
            for name, packages in TEST_FRAMEWORK_PACKAGES.items()
            if any(package in declared for package in packages)
        ]
        for name, files in TEST_CONFIG_FILES.items():
            if name not in frameworks and scanner.any_exists(files):
                frameworks.append(name)
        return frameworks


__all__ = ["StructureAnalyzer", "build_file_tree", "directory_importance", "file_importance"]
