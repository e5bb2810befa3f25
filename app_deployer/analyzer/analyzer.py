"""Source tree analysis: language, framework, dependencies."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from app_deployer.analyzer.dependency_parser import DependencyParser
from app_deployer.analyzer.framework_detector import FrameworkDetector
from app_deployer.analyzer.language_detector import LanguageDetector
from app_deployer.analyzer.types import AnalysisResult, FileInfo

logger = logging.getLogger(__name__)

_IGNORED_DIRS = frozenset(
    {"node_modules", "vendor", "venv", ".git", "dist", "build", "target", "__pycache__"}
)


class AnalysisError(Exception):
    """Raised when a source tree cannot be analysed."""


def _extension(name: str) -> str:
    index = name.rfind(".")
    return name[index:].lower() if index >= 0 else ""


def _base_name(path: str) -> str:
    return os.path.basename(os.path.normpath(path)) or path


class Analyzer:
    """Detects language, framework and build details of a source tree."""

    def __init__(
        self,
        language_detector: LanguageDetector | None = None,
        framework_detector: FrameworkDetector | None = None,
        dependency_parser: DependencyParser | None = None,
    ) -> None:
        self.language_detector = language_detector or LanguageDetector()
        self.framework_detector = framework_detector or FrameworkDetector()
        self.dependency_parser = dependency_parser or DependencyParser()

    def analyze(self, path: str | Path) -> AnalysisResult:
        """Analyse the directory at ``path``."""
        path = os.fspath(path)
        logger.info("Starting source code analysis of %s", path)

        if not os.path.lexists(path):
            raise AnalysisError(f"path does not exist: {path}")

        try:
            files = self.scan_directory(path)
        except OSError as exc:
            raise AnalysisError(f"failed to scan directory: {exc}") from exc

        if not files:
            raise AnalysisError("no files found in directory")

        result = AnalysisResult(files=[file.name for file in files])

        result.language, result.confidence = self.language_detector.detect(files)
        logger.info(
            "Language detected: %s (confidence %.2f)",
            result.language.value,
            result.confidence,
        )

        result.framework = self.framework_detector.detect(result.language, files)

        try:
            build_info = self.dependency_parser.parse(path, result.language)
        except (OSError, ValueError) as exc:
            logger.warning("Failed to parse dependencies: %s", exc)
        else:
            result.build_tool = build_info.build_tool
            result.runtime = build_info.runtime
            result.dependencies = build_info.dependencies
            result.dev_dependencies = build_info.dev_dependencies
            result.start_command = build_info.start_command
            result.build_command = build_info.build_command
            result.port = build_info.port

        result.has_dockerfile = any(
            file.name.lower().startswith("dockerfile") for file in files
        )

        logger.info(
            "Analysis complete: language=%s framework=%s build_tool=%s has_dockerfile=%s",
            result.language.value,
            result.framework.value,
            result.build_tool.value,
            result.has_dockerfile,
        )
        return result

    def scan_directory(self, path: str | Path) -> list[FileInfo]:
        """List the tree at ``path``, root first, skipping hidden and build dirs."""
        root = os.fspath(path)
        return list(self._walk(root, root, _base_name(root)))

    def _walk(self, root: str, current: str, name: str) -> Iterator[FileInfo]:
        stat = os.lstat(current)
        is_dir = os.path.isdir(current) and not os.path.islink(current)

        if name.startswith(".") and name != ".":
            return
        if is_dir and name in _IGNORED_DIRS:
            return

        yield FileInfo(
            path=os.path.relpath(current, root),
            name=name,
            extension=_extension(name),
            is_directory=is_dir,
            size=stat.st_size,
        )

        if is_dir:
            for child in sorted(os.listdir(current)):
                yield from self._walk(root, os.path.join(current, child), child)