"""Detection of web frameworks used by a project."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from app_deployer.analyzer.types import FileInfo, Framework, Language

_GO_PATTERNS: dict[str, Framework] = {
    "gin": Framework.GIN,
    "echo": Framework.ECHO,
    "chi": Framework.CHI,
    "fiber": Framework.FIBER,
}

_NODE_DEPENDENCIES: dict[str, Framework] = {
    "express": Framework.EXPRESS,
    "@nestjs/core": Framework.NESTJS,
    "next": Framework.NEXTJS,
    "koa": Framework.KOA,
    "fastify": Framework.FASTIFY,
}

_PYTHON_PATTERNS: dict[str, Framework] = {
    "django": Framework.DJANGO,
    "flask": Framework.FLASK,
    "fastapi": Framework.FASTAPI,
}

_FRAMEWORK_INFO: dict[Framework, dict[str, Any]] = {
    Framework.EXPRESS: {
        "name": "Express.js",
        "language": "nodejs",
        "default_port": 3000,
        "build_command": "npm install",
        "start_command": "npm start",
    },
    Framework.NEXTJS: {
        "name": "Next.js",
        "language": "nodejs",
        "default_port": 3000,
        "build_command": "npm run build",
        "start_command": "npm start",
    },
    Framework.GIN: {
        "name": "Gin",
        "language": "go",
        "default_port": 8080,
        "build_command": "go build",
        "start_command": "./app",
    },
    Framework.FLASK: {
        "name": "Flask",
        "language": "python",
        "default_port": 5000,
        "build_command": "pip install -r requirements.txt",
        "start_command": "python app.py",
    },
    Framework.DJANGO: {
        "name": "Django",
        "language": "python",
        "default_port": 8000,
        "build_command": "pip install -r requirements.txt",
        "start_command": "python manage.py runserver",
    },
    Framework.SPRINGBOOT: {
        "name": "Spring Boot",
        "language": "java",
        "default_port": 8080,
        "build_command": "mvn clean install",
        "start_command": "java -jar target/app.jar",
    },
}


class FrameworkDetector:
    """Detects web frameworks from file listings and manifest files."""

    def detect(self, language: Language, files: Iterable[FileInfo]) -> Framework:
        """Return the framework suggested by the files for the given language."""
        files = list(files)
        detectors = {
            Language.GO: self._detect_go,
            Language.NODEJS: self._detect_node,
            Language.PYTHON: self._detect_python,
            Language.JAVA: self._detect_java,
        }
        detector = detectors.get(language)
        return detector(files) if detector else Framework.UNKNOWN

    @staticmethod
    def _detect_go(files: list[FileInfo]) -> Framework:
        for file in files:
            if file.extension != ".go":
                continue
            lower_path = file.path.lower()
            for pattern, framework in _GO_PATTERNS.items():
                if pattern in lower_path:
                    return framework
        return Framework.UNKNOWN

    @staticmethod
    def _detect_node(files: list[FileInfo]) -> Framework:
        # A package.json without a base path to read it from gives no answer.
        if any(file.name == "package.json" for file in files):
            return Framework.UNKNOWN
        if any(file.name in ("next.config.js", "next.config.mjs") for file in files):
            return Framework.NEXTJS
        return Framework.UNKNOWN

    @staticmethod
    def _detect_python(files: list[FileInfo]) -> Framework:
        if any(file.name in ("requirements.txt", "pyproject.toml") for file in files):
            return Framework.UNKNOWN
        for file in files:
            lower_path = file.path.lower()
            for pattern, framework in _PYTHON_PATTERNS.items():
                if pattern in lower_path:
                    return framework
        return Framework.UNKNOWN

    @staticmethod
    def _detect_java(files: list[FileInfo]) -> Framework:
        build_files = {"pom.xml", "build.gradle", "build.gradle.kts"}
        spring_config = {"application.properties", "application.yml"}
        if any(file.name in build_files for file in files):
            return Framework.SPRINGBOOT
        if any(file.name in spring_config for file in files):
            return Framework.SPRINGBOOT
        return Framework.UNKNOWN

    def parse_package_json_file(self, file_path: str | Path) -> Framework:
        """Detect a Node.js framework from the dependencies in a package.json."""
        try:
            package = json.loads(Path(file_path).read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return Framework.UNKNOWN
        if not isinstance(package, dict):
            return Framework.UNKNOWN

        all_deps: dict[str, Any] = {}
        for key in ("dependencies", "devDependencies"):
            deps = package.get(key)
            if deps is None:
                continue
            if not isinstance(deps, dict):
                return Framework.UNKNOWN
            all_deps.update(deps)

        for dependency, framework in _NODE_DEPENDENCIES.items():
            if dependency in all_deps:
                return framework
        return Framework.UNKNOWN

    def parse_requirements_file(self, file_path: str | Path) -> Framework:
        """Detect a Python framework from a requirements.txt."""
        try:
            content = Path(file_path).read_text(encoding="utf-8", errors="replace")
        except OSError:
            return Framework.UNKNOWN

        for line in content.lower().split("\n"):
            line = line.strip()
            if line.startswith("#"):
                continue
            for pattern, framework in _PYTHON_PATTERNS.items():
                if line.startswith(pattern):
                    return framework
        return Framework.UNKNOWN


def get_framework_info(framework: Framework | str) -> dict[str, Any]:
    """Return descriptive details about a framework."""
    info = _FRAMEWORK_INFO.get(framework)
    if info is not None:
        return dict(info)
    name = framework.value if isinstance(framework, Framework) else str(framework)
    return {"name": name, "language": "unknown"}