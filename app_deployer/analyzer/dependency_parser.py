"""Parsing of dependency manifests and build configuration."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from app_deployer.analyzer.types import BuildTool, Language

logger = logging.getLogger(__name__)

_PYTHON_MAIN_FILES = ("app.py", "main.py", "manage.py")
_GRADLE_FILES = ("build.gradle", "build.gradle.kts")


@dataclass
class BuildInfo:
    """Build and runtime details read from a project's manifests."""

    build_tool: BuildTool = BuildTool.UNKNOWN
    runtime: str = ""
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    start_command: str = ""
    build_command: str = ""
    port: int = 0


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def _string_map(value: Any) -> dict[str, str]:
    """Return a str-to-str mapping from a JSON value; None gives an empty map."""
    if value is None:
        return {}
    if not isinstance(value, dict) or not all(
        isinstance(item, str) for item in value.values()
    ):
        raise ValueError("expected an object of strings")
    return dict(value)


def _optional_string(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError("expected a string")
    return value


class DependencyParser:
    """Reads dependency files according to a project's language."""

    def parse(self, base_path: str | Path, language: Language) -> BuildInfo:
        """Return the build details for the project at ``base_path``."""
        base = Path(base_path)
        parsers = {
            Language.NODEJS: self._parse_nodejs,
            Language.GO: self._parse_go,
            Language.PYTHON: self._parse_python,
            Language.JAVA: self._parse_java,
        }
        parser = parsers.get(language)
        if parser is None:
            return BuildInfo(build_tool=BuildTool.UNKNOWN)
        return parser(base)

    @staticmethod
    def _parse_nodejs(base: Path) -> BuildInfo:
        info = BuildInfo(build_tool=BuildTool.NPM, runtime="node", port=3000)

        try:
            data = _read_text(base / "package.json")
        except OSError as exc:
            logger.warning("Failed to read package.json: %s", exc)
            return info

        try:
            package = json.loads(data)
            if not isinstance(package, dict):
                raise ValueError("package.json is not an object")
            _optional_string(package.get("name"))
            _optional_string(package.get("version"))
            scripts = _string_map(package.get("scripts"))
            dependencies = _string_map(package.get("dependencies"))
            dev_dependencies = _string_map(package.get("devDependencies"))
            engines = package.get("engines") or {}
            if not isinstance(engines, dict):
                raise ValueError("engines is not an object")
            node_version = _optional_string(engines.get("node"))
            _optional_string(engines.get("npm"))
        except ValueError as exc:
            logger.warning("Failed to parse package.json: %s", exc)
            return info

        info.dependencies = dependencies
        info.dev_dependencies = dev_dependencies

        if (base / "yarn.lock").exists():
            info.build_tool = BuildTool.YARN
            info.build_command = "yarn install && yarn build"
            info.start_command = "yarn start"
        elif (base / "pnpm-lock.yaml").exists():
            info.build_tool = BuildTool.PNPM
            info.build_command = "pnpm install && pnpm build"
            info.start_command = "pnpm start"
        else:
            info.build_command = "npm install && npm run build"
            info.start_command = "npm start"

        if scripts.get("start"):
            logger.debug("Found start script: %s", scripts["start"])
        if scripts.get("build"):
            logger.debug("Found build script: %s", scripts["build"])

        if node_version:
            info.runtime = "node:" + node_version
        return info

    @staticmethod
    def _parse_go(base: Path) -> BuildInfo:
        info = BuildInfo(
            build_tool=BuildTool.GO,
            runtime="go",
            build_command="go build -o app .",
            start_command="./app",
            port=8080,
        )

        try:
            data = _read_text(base / "go.mod")
        except OSError as exc:
            logger.warning("Failed to read go.mod: %s", exc)
            return info

        for line in data.split("\n"):
            line = line.strip()
            if line.startswith("go "):
                info.runtime = "go:" + line[len("go "):]
                break
        return info

    @staticmethod
    def _parse_python(base: Path) -> BuildInfo:
        info = BuildInfo(build_tool=BuildTool.PIP, runtime="python:3.11", port=5000)

        try:
            data = _read_text(base / "requirements.txt")
        except OSError:
            pass
        else:
            for line in data.split("\n"):
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                parts = line.split("==")
                if len(parts) == 2:
                    info.dependencies[parts[0]] = parts[1]
                else:
                    info.dependencies[line] = "*"
            info.build_command = "pip install -r requirements.txt"

        if (base / "pyproject.toml").exists():
            info.build_tool = BuildTool.POETRY
            info.build_command = "poetry install"
            info.start_command = "poetry run python app.py"
        else:
            main_file = next(
                (name for name in _PYTHON_MAIN_FILES if (base / name).exists()), None
            )
            if main_file is not None:
                info.start_command = "python " + main_file
        return info

    @staticmethod
    def _parse_java(base: Path) -> BuildInfo:
        info = BuildInfo(runtime="java:17", port=8080)

        if (base / "pom.xml").exists():
            info.build_tool = BuildTool.MAVEN
            info.build_command = "mvn clean package"
            info.start_command = "java -jar target/*.jar"
            return info

        if any((base / name).exists() for name in _GRADLE_FILES):
            info.build_tool = BuildTool.GRADLE
            info.build_command = "./gradlew build"
            info.start_command = "java -jar build/libs/*.jar"
            return info

        info.build_tool = BuildTool.UNKNOWN
        return info