"""Value types shared by the build pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from app_deployer.analyzer.types import AnalysisResult


@dataclass
class BuildContext:
    """Everything needed to build a container image for a deployment."""

    deployment_id: str
    app_name: str
    version: str
    source_path: str
    analysis: AnalysisResult | None = None
    registry_type: str = ""
    registry_host: str = ""
    build_id: str = ""


@dataclass
class BuildResult:
    """The outcome of a build operation."""

    image_tag: str = ""
    image_digest: str = ""
    build_duration: timedelta = field(default_factory=timedelta)
    build_log: str = ""
    success: bool = False
    error: Exception | None = None