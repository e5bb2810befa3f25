"""Container image builds through the Docker Engine API."""

from __future__ import annotations

import base64
import http.client
import io
import json
import logging
import os
import socket
import tarfile
import time
from collections.abc import Iterable, Iterator
from datetime import timedelta
from pathlib import Path
from typing import Any
from urllib.parse import quote, urlencode, urlsplit

from app_deployer.builder.buildtypes import BuildContext, BuildResult

logger = logging.getLogger(__name__)

STRATEGY_NAME = "docker"
GENERATED_DOCKERFILE = "Dockerfile.generated"
DEFAULT_DOCKER_HOST = "unix:///var/run/docker.sock"

_EXCLUDED = (".git", ".github", "node_modules", "vendor", ".env")
_EMPTY_AUTH = base64.urlsafe_b64encode(b"{}").decode("ascii")


class DockerError(Exception):
    """Raised when a Docker operation fails.

    ``build_log`` holds any output collected before the failure and
    ``result`` the partial build result, when there is one.
    """

    def __init__(
        self,
        message: str,
        *,
        build_log: str = "",
        result: BuildResult | None = None,
    ) -> None:
        super().__init__(message)
        self.build_log = build_log
        self.result = result


class _UnixHTTPConnection(http.client.HTTPConnection):
    def __init__(self, socket_path: str, timeout: float | None = None) -> None:
        super().__init__("localhost")
        self._socket_path = socket_path
        self._socket_timeout = timeout

    def connect(self) -> None:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(self._socket_timeout)
        sock.connect(self._socket_path)
        self.sock = sock


class _EngineClient:
    """Minimal HTTP client for the Docker Engine API."""

    def __init__(self, host: str = DEFAULT_DOCKER_HOST) -> None:
        parsed = urlsplit(host)
        if parsed.scheme == "unix":
            self._connect = lambda: _UnixHTTPConnection(parsed.path)
        elif parsed.scheme in ("tcp", "http"):
            self._connect = lambda: http.client.HTTPConnection(
                parsed.hostname or "localhost", parsed.port or 2375
            )
        elif parsed.scheme == "https":
            self._connect = lambda: http.client.HTTPSConnection(
                parsed.hostname or "localhost", parsed.port or 2376
            )
        else:
            raise DockerError(f"unsupported docker host: {host}")

    @classmethod
    def from_env(cls) -> _EngineClient:
        return cls(os.environ.get("DOCKER_HOST") or DEFAULT_DOCKER_HOST)

    def request(
        self,
        method: str,
        path: str,
        *,
        query: dict[str, str] | None = None,
        body: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> bytes:
        url = path + ("?" + urlencode(query) if query else "")
        conn = self._connect()
        try:
            conn.request(method, url, body=body, headers=headers or {})
            response = conn.getresponse()
            data = response.read()
        except OSError as exc:
            raise DockerError(str(exc)) from exc
        finally:
            conn.close()
        if response.status >= 400:
            raise DockerError(_error_message(data) or f"HTTP {response.status}")
        return data

    def close(self) -> None:
        """Connections are per request; nothing stays open."""


def _error_message(data: bytes) -> str:
    try:
        payload = json.loads(data)
    except ValueError:
        return data.decode("utf-8", "replace").strip()
    if isinstance(payload, dict):
        return str(payload.get("message", ""))
    return ""


def _image_path(name: str, suffix: str = "") -> str:
    return f"/images/{quote(name, safe='/:@')}{suffix}"


def _split_reference(reference: str) -> tuple[str, str]:
    slash = reference.rfind("/")
    colon = reference.rfind(":")
    if colon > slash:
        return reference[:colon], reference[colon + 1:]
    return reference, "latest"


def _json_messages(chunks: Iterable[str | bytes], what: str) -> Iterator[dict[str, Any]]:
    text = "".join(
        chunk.decode("utf-8", "replace") if isinstance(chunk, bytes) else chunk
        for chunk in chunks
    )
    decoder = json.JSONDecoder()
    index = 0
    while True:
        while index < len(text) and text[index].isspace():
            index += 1
        if index >= len(text):
            return
        try:
            message, index = decoder.raw_decode(text, index)
        except json.JSONDecodeError as exc:
            raise DockerError(f"failed to decode {what} output: {exc}") from exc
        if not isinstance(message, dict):
            raise DockerError(f"failed to decode {what} output: expected an object")
        yield message


def image_tag_for(build_ctx: BuildContext) -> str:
    """Return the local image tag for a build: lower-cased app name and version."""
    return f"{build_ctx.app_name.lower()}:{build_ctx.version}"


def _context_entries(root: str) -> Iterator[tuple[str, str]]:
    def visit(current: str) -> Iterator[tuple[str, str]]:
        rel = os.path.relpath(current, root)
        is_dir = os.path.isdir(current) and not os.path.islink(current)
        if any(pattern in rel for pattern in _EXCLUDED):
            return
        if not rel.endswith(".log"):
            yield current, rel.replace(os.sep, "/")
        if is_dir:
            for child in sorted(os.listdir(current)):
                yield from visit(os.path.join(current, child))

    return visit(root)


def create_build_context(source_path: str | Path) -> bytes:
    """Return a tar archive of the source tree, leaving out VCS, deps and logs."""
    root = os.fspath(source_path)
    buffer = io.BytesIO()
    try:
        with tarfile.open(fileobj=buffer, mode="w") as archive:
            for full_path, arcname in _context_entries(root):
                archive.add(full_path, arcname=arcname, recursive=False)
    except OSError as exc:
        raise DockerError(f"failed to create tar archive: {exc}") from exc
    return buffer.getvalue()


def parse_build_output(lines: Iterable[str | bytes]) -> str:
    """Collect the log from a Docker build JSON stream; raise on a build error."""
    log: list[str] = []
    for message in _json_messages(lines, "build"):
        error = message.get("error")
        if error:
            log.append(str(error))
            detail = message.get("errorDetail") or {}
            detail_message = detail.get("message", "") if isinstance(detail, dict) else ""
            raise DockerError(f"build error: {detail_message}", build_log="".join(log))
        stream = message.get("stream")
        if stream:
            log.append(str(stream))
            logger.debug("Build output: %s", str(stream).strip())
    return "".join(log)


def _parse_push_output(lines: Iterable[str | bytes]) -> str:
    log: list[str] = []
    for message in _json_messages(lines, "push"):
        error = message.get("error")
        if error:
            raise DockerError(f"push error: {error}", build_log="".join(log))
        status = message.get("status")
        if status:
            log.append(f"{status} {message.get('progress', '')}\n")
            logger.debug("Push progress: %s", status)
    return "".join(log)


def _failure(result: BuildResult, message: str) -> DockerError:
    error = DockerError(message, build_log=result.build_log, result=result)
    result.error = error
    return error


class DockerStrategy:
    """Builds images with a Docker daemon.

    ``transport`` is any object with ``request(method, path, *, query, body,
    headers) -> bytes`` and ``close()``; by default the daemon named by
    ``DOCKER_HOST`` is used.
    """

    def __init__(self, transport: Any | None = None) -> None:
        self._transport = transport if transport is not None else _EngineClient.from_env()

    def name(self) -> str:
        """Return the strategy name."""
        return STRATEGY_NAME

    def build(self, build_ctx: BuildContext, dockerfile: str) -> BuildResult:
        """Build an image; raise DockerError carrying the partial result on failure."""
        start = time.monotonic()
        result = BuildResult(success=False)

        try:
            self._transport.request("GET", "/_ping")
        except DockerError as exc:
            raise _failure(
                result, f"docker not accessible: docker daemon not accessible: {exc}"
            ) from exc

        image_tag = image_tag_for(build_ctx)
        logger.info(
            "Building Docker image %s for deployment %s",
            image_tag,
            build_ctx.deployment_id,
        )

        dockerfile_path = Path(build_ctx.source_path) / GENERATED_DOCKERFILE
        try:
            dockerfile_path.write_text(dockerfile, encoding="utf-8")
            os.chmod(dockerfile_path, 0o644)
        except OSError as exc:
            raise _failure(result, f"failed to write Dockerfile: {exc}") from exc

        try:
            try:
                context = create_build_context(build_ctx.source_path)
            except DockerError as exc:
                raise _failure(result, f"failed to create build context: {exc}") from exc

            labels = {
                "app.deployer.deployment": build_ctx.deployment_id,
                "app.deployer.app": build_ctx.app_name,
                "app.deployer.version": build_ctx.version,
                "app.deployer.build-id": build_ctx.build_id,
            }
            query = {
                "t": image_tag,
                "dockerfile": GENERATED_DOCKERFILE,
                "rm": "1",
                "forcerm": "1",
                "pull": "1",
                "nocache": "0",
                "labels": json.dumps(labels),
            }
            try:
                output = self._transport.request(
                    "POST",
                    "/build",
                    query=query,
                    body=context,
                    headers={"Content-Type": "application/x-tar"},
                )
            except DockerError as exc:
                raise _failure(result, f"docker build failed: {exc}") from exc
        finally:
            dockerfile_path.unlink(missing_ok=True)

        try:
            build_log = parse_build_output(output.splitlines())
        except DockerError as exc:
            result.build_log = exc.build_log
            raise _failure(result, f"failed to stream build output: {exc}") from exc

        try:
            inspect = json.loads(self._transport.request("GET", _image_path(image_tag, "/json")))
            digest = str(inspect.get("Id", "")) if isinstance(inspect, dict) else ""
        except (DockerError, ValueError) as exc:
            result.build_log = build_log
            raise _failure(result, f"failed to inspect built image: {exc}") from exc

        result.success = True
        result.image_tag = image_tag
        result.image_digest = digest
        result.build_duration = timedelta(seconds=time.monotonic() - start)
        result.build_log = build_log

        logger.info(
            "Docker build of %s completed (digest %s, %s)",
            image_tag,
            digest,
            result.build_duration,
        )
        return result

    def tag_image(self, source_tag: str, target_tag: str) -> None:
        """Give an existing image another tag."""
        logger.info("Tagging Docker image %s as %s", source_tag, target_tag)
        repo, tag = _split_reference(target_tag)
        try:
            self._transport.request(
                "POST", _image_path(source_tag, "/tag"), query={"repo": repo, "tag": tag}
            )
        except DockerError as exc:
            raise DockerError(f"failed to tag image: {exc}") from exc

    def remove_image(self, image_tag: str) -> None:
        """Remove an image from the local daemon, forcing and pruning children."""
        logger.info("Removing Docker image %s", image_tag)
        try:
            self._transport.request(
                "DELETE", _image_path(image_tag), query={"force": "1", "noprune": "0"}
            )
        except DockerError as exc:
            raise DockerError(f"failed to remove image: {exc}") from exc

    def push_image(self, image_tag: str) -> str:
        """Push an image without registry credentials; return the push log."""
        logger.info("Pushing Docker image %s", image_tag)
        name, tag = _split_reference(image_tag)
        try:
            output = self._transport.request(
                "POST",
                _image_path(name, "/push"),
                query={"tag": tag},
                headers={"X-Registry-Auth": _EMPTY_AUTH},
            )
        except DockerError as exc:
            raise DockerError(f"failed to push image: {exc}") from exc
        try:
            push_log = _parse_push_output(output.splitlines())
        except DockerError as exc:
            raise DockerError(f"push failed: {exc}", build_log=exc.build_log) from exc
        logger.info("Image %s pushed successfully", image_tag)
        return push_log

    def close(self) -> None:
        """Release the daemon connection."""
        if self._transport is not None:
            self._transport.close()