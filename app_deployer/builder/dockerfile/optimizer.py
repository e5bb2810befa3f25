"""Advice on Dockerfile optimisation."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from app_deployer.analyzer.types import AnalysisResult, Language

_LANGUAGE_OPTIMIZATIONS: dict[Language, tuple[str, ...]] = {
    Language.GO: (
        "CGO_ENABLED=0 for static binary", "GOOS=linux for Linux containers",
        "Multi-stage build with alpine runtime", "Stripped binary for smaller size",
    ),
    Language.NODEJS: (
        "Use npm ci instead of npm install for faster, reproducible builds",
        "Copy package files before source code for better caching",
        "NODE_ENV=production for production builds", "Remove dev dependencies in production stage",
    ),
    Language.PYTHON: (
        "Use slim base images", "pip install --no-cache-dir to reduce image size",
        "Multi-stage build to separate build dependencies", "Copy only necessary files from build stage",
    ),
    Language.JAVA: (
        "Use JRE instead of JDK for runtime", "Multi-stage build to separate build tools",
        "Cache dependency downloads in separate layer", "Use alpine-based images for smaller size",
    ),
}

_SECURITY_HARDENING: tuple[str, ...] = (
    "Run as non-root user", "Use specific version tags, not 'latest'",
    "Minimal base images (alpine, distroless)", "Read-only root filesystem where possible",
    "Drop unnecessary capabilities",
)

_SIZE_ESTIMATES: dict[Language, str] = {
    Language.GO: "10-30 MB", Language.NODEJS: "150-300 MB",
    Language.PYTHON: "100-200 MB", Language.JAVA: "200-400 MB",
    Language.RUST: "10-50 MB", Language.RUBY: "150-250 MB",
    Language.PHP: "100-200 MB", Language.DOTNET: "150-300 MB",
}


@dataclass
class OptimizationOptions:
    """Which optimisations to apply; all are on by default."""

    enable_multi_stage: bool = True
    enable_layer_caching: bool = True
    minimal_base_image: bool = True
    security_hardening: bool = True


_Rule = Callable[[str, OptimizationOptions], bool]

_SUGGESTION_RULES: tuple[tuple[_Rule, str], ...] = (
    (lambda text, _: "USER" not in text, "Add non-root user for better security"),
    (lambda text, _: "FROM latest" in text, "Use specific version tags instead of 'latest'"),
    (
        lambda text, opts: "AS builder" not in text and opts.enable_multi_stage,
        "Consider using multi-stage build to reduce image size",
    ),
    (
        lambda text, _: "apt-get install" in text and "rm -rf /var/lib/apt/lists" not in text,
        "Clean apt cache to reduce image size",
    ),
)


class Optimizer:
    """Suggests language-specific and general Dockerfile improvements."""

    def __init__(self, options: OptimizationOptions | None = None) -> None:
        self.options = options if options is not None else OptimizationOptions()

    def optimize_for_language(self, analysis: AnalysisResult) -> list[str]:
        """Return the optimisations that apply to the analysed project."""
        optimizations = list(_LANGUAGE_OPTIMIZATIONS.get(analysis.language, ()))
        if self.options.security_hardening:
            optimizations.extend(_SECURITY_HARDENING)
        return optimizations

    def image_size_estimate(self, analysis: AnalysisResult) -> str:
        """Return a rough size range for the final image."""
        return _SIZE_ESTIMATES.get(analysis.language, "Unknown")

    def suggest_improvements(self, dockerfile: str) -> list[str]:
        """Return suggestions for common anti-patterns in a Dockerfile."""
        return [message for applies, message in _SUGGESTION_RULES
                if applies(dockerfile, self.options)]