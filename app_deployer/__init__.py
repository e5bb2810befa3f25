"""Source analysis, Dockerfile generation and Docker image builds."""

__version__ = "0.1.0"