"""Selection of the strategy used to build container images."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from app_deployer.builder.buildtypes import BuildContext
from app_deployer.builder.strategies.docker import DockerError, DockerStrategy

# Called with the build stage and the output produced in it.
BuildHook = Callable[[str, str], None]


class StrategyType(str, Enum):
    """The kinds of build strategy."""

    DOCKER = "docker"
    BUILDPACK = "buildpack"
    NIXPACK = "nixpack"


def _name(value: object) -> str:
    return value.value if isinstance(value, Enum) else str(value)


class StrategyNotImplementedError(Exception):
    """Raised for a strategy type that exists but is not available yet."""

    def __init__(self, strategy_type: StrategyType | str) -> None:
        self.strategy_type = strategy_type
        super().__init__(f"strategy not implemented: {_name(strategy_type)}")


class UnknownStrategyError(ValueError):
    """Raised for a strategy type that is not known at all."""

    def __init__(self, strategy_type: object) -> None:
        self.strategy_type = strategy_type
        super().__init__(f"unknown strategy type: {_name(strategy_type)}")


@dataclass
class BuildContextWithHooks:
    """A build context together with callbacks for build progress.

    Attributes of the wrapped build context can be read directly.
    """

    build_context: BuildContext
    on_progress: BuildHook | None = None
    on_stage: BuildHook | None = None
    on_complete: BuildHook | None = None

    def __getattr__(self, name: str) -> Any:
        if name == "build_context":
            raise AttributeError(name)
        return getattr(self.build_context, name)


class StrategyFactory:
    """Creates build strategies by type.

    ``docker_transport`` is handed to the Docker strategy; by default it
    talks to the daemon named by ``DOCKER_HOST``.
    """

    def __init__(self, docker_transport: Any | None = None) -> None:
        self._docker_transport = docker_transport

    def create_strategy(self, strategy_type: StrategyType | str) -> DockerStrategy:
        """Return a strategy of the given type."""
        try:
            kind = StrategyType(strategy_type)
        except ValueError:
            raise UnknownStrategyError(strategy_type) from None

        if kind is StrategyType.DOCKER:
            try:
                return DockerStrategy(self._docker_transport)
            except DockerError as exc:
                raise DockerError(f"failed to create docker client: {exc}") from exc
        raise StrategyNotImplementedError(kind)

    def default_strategy(self) -> DockerStrategy | None:
        """Return the Docker strategy, or None if it cannot be created."""
        try:
            return self.create_strategy(StrategyType.DOCKER)
        except DockerError:
            return None