"""Generation of optimised Dockerfiles from analysis results."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from app_deployer.analyzer.types import AnalysisResult
from app_deployer.builder.dockerfile.templates import (
    UnsupportedLanguageError,
    build_dockerfile_content,
    get_template,
)

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8080
REQUIRED_INSTRUCTIONS = ("FROM", "WORKDIR", "COPY", "CMD")


class DockerfileError(Exception):
    """Raised when a Dockerfile cannot be generated, written or validated."""


def _instructions(dockerfile: str) -> set[str]:
    found = set()
    for line in dockerfile.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        found.add(line.split(None, 1)[0].upper())
    return found


class Generator:
    """Builds Dockerfiles for analysed projects."""

    def generate(self, analysis: AnalysisResult | None) -> str:
        """Return Dockerfile content for the analysed project."""
        if analysis is None:
            raise DockerfileError("analysis result is nil")

        if analysis.has_dockerfile:
            logger.debug("Project has a Dockerfile; generating an optimised one instead")

        try:
            template = get_template(analysis)
        except UnsupportedLanguageError as exc:
            raise DockerfileError(f"failed to get template: {exc}") from exc

        port = analysis.port or DEFAULT_PORT
        return build_dockerfile_content(template, port)

    def generate_and_write(
        self, analysis: AnalysisResult | None, output_path: str | Path
    ) -> Path:
        """Generate a Dockerfile and write it into ``output_path``."""
        try:
            dockerfile = self.generate(analysis)
        except DockerfileError as exc:
            raise DockerfileError(f"failed to generate dockerfile: {exc}") from exc

        dockerfile_path = Path(output_path) / "Dockerfile"
        try:
            dockerfile_path.write_text(dockerfile, encoding="utf-8")
            os.chmod(dockerfile_path, 0o644)
        except OSError as exc:
            raise DockerfileError(f"failed to write dockerfile: {exc}") from exc
        return dockerfile_path

    def validate(self, dockerfile: str) -> None:
        """Raise DockerfileError if a required instruction is missing."""
        present = _instructions(dockerfile)
        for instruction in REQUIRED_INSTRUCTIONS:
            if instruction not in present:
                raise DockerfileError(f"missing required instruction: {instruction}")