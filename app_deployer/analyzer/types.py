"""Core value types produced by source-code analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Language(str, Enum):
    """A programming language the analyzer can recognise."""

    GO = "go"
    NODEJS = "nodejs"
    PYTHON = "python"
    JAVA = "java"
    RUST = "rust"
    RUBY = "ruby"
    PHP = "php"
    DOTNET = "dotnet"
    UNKNOWN = "unknown"


class Framework(str, Enum):
    """A web framework the analyzer can recognise."""

    # Go
    GIN = "gin"
    ECHO = "echo"
    CHI = "chi"
    FIBER = "fiber"
    # Node.js
    EXPRESS = "express"
    NESTJS = "nestjs"
    NEXTJS = "nextjs"
    KOA = "koa"
    FASTIFY = "fastify"
    # Python
    FLASK = "flask"
    DJANGO = "django"
    FASTAPI = "fastapi"
    # Java
    SPRINGBOOT = "springboot"
    QUARKUS = "quarkus"
    # Other
    UNKNOWN = "unknown"


class BuildTool(str, Enum):
    """A build tool used to produce an application."""

    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"
    GO = "go"
    PIP = "pip"
    POETRY = "poetry"
    MAVEN = "maven"
    GRADLE = "gradle"
    CARGO = "cargo"
    UNKNOWN = "unknown"


@dataclass
class FileInfo:
    """A file or directory found while scanning a source tree."""

    path: str
    name: str
    extension: str = ""
    is_directory: bool = False
    size: int = 0


@dataclass
class AnalysisResult:
    """Everything learned about a source tree."""

    language: Language = Language.UNKNOWN
    framework: Framework = Framework.UNKNOWN
    build_tool: BuildTool = BuildTool.UNKNOWN
    runtime: str = ""
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    start_command: str = ""
    build_command: str = ""
    port: int = 0
    has_dockerfile: bool = False
    files: list[str] = field(default_factory=list)
    confidence: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready dict; empty optional fields are left out."""
        data: dict[str, Any] = {
            "language": _value(self.language),
            "framework": _value(self.framework),
            "build_tool": _value(self.build_tool),
        }
        optional = {
            "runtime": self.runtime,
            "dependencies": dict(self.dependencies or {}),
            "dev_dependencies": dict(self.dev_dependencies or {}),
            "start_command": self.start_command,
            "build_command": self.build_command,
            "port": self.port,
        }
        data.update((key, value) for key, value in optional.items() if value)
        data["has_dockerfile"] = self.has_dockerfile
        data["files"] = list(self.files)
        data["confidence"] = self.confidence
        return data


def _value(item: Any) -> str:
    return item.value if isinstance(item, Enum) else str(item)