"""Language-specific Dockerfile templates."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from app_deployer.analyzer.types import AnalysisResult, BuildTool, Language


class UnsupportedLanguageError(ValueError):
    """Raised when no Dockerfile template exists for a language."""

    def __init__(self, language: object) -> None:
        self.language = language
        name = language.value if isinstance(language, Enum) else str(language)
        super().__init__(f"unsupported language: {name}")


@dataclass
class LanguageTemplate:
    """The pieces a Dockerfile is assembled from."""

    base_image: str
    build_stage: str
    runtime_stage: str
    work_dir: str = "/app"
    build_commands: list[str] = field(default_factory=list)
    run_command: str = ""


Block = Sequence[str]

_COPY_SOURCE: Block = ("# Copy source code", "COPY . .")
_COPY_SRC_DIR: Block = ("# Copy source code", "COPY src ./src")
_ALPINE_USER: Block = (
    "# Create non-root user",
    "RUN addgroup -g 1000 appuser && \\",
    "    adduser -D -u 1000 -G appuser appuser",
)
_USER: Block = ("USER appuser",)


def _or(value: str, default: str) -> str:
    return value if value else default


def _stage(*blocks: Block) -> str:
    """Join blocks of instruction lines, separated by blank lines."""
    return "\n\n".join("\n".join(block) for block in blocks)


def _builder_header(image: str) -> tuple[str, ...]:
    return ("# Build stage", f"FROM {image} AS builder", "WORKDIR /build")


def _runtime_header(image: str) -> tuple[str, ...]:
    return ("# Runtime stage", f"FROM {image}", "WORKDIR /app")


def _chown(target: str, recursive: bool = True) -> Block:
    flag = "-R " if recursive else ""
    return ("# Change ownership", f"RUN chown {flag}appuser:appuser {target}")


def _from_builder(comment: str, *copies: tuple[str, str]) -> Block:
    return (comment, *(f"COPY --from=builder {src} {dst}" for src, dst in copies))


def _go_template(analysis: AnalysisResult) -> LanguageTemplate:
    runtime = _or(analysis.runtime, "1.23")
    build_cmd = _or(analysis.build_command, "go build -o app .")
    image = f"{Language.GO.value}lang:{runtime}-alpine"

    build_stage = _stage(
        (*_builder_header(image), "RUN apk add --no-cache git ca-certificates"),
        ("# Copy go mod files", "COPY go.mod go.sum* ./", "RUN go mod download"),
        _COPY_SOURCE,
        ("# Build the application", f"RUN CGO_ENABLED=0 GOOS=linux {build_cmd}"),
    )
    runtime_stage = _stage(
        ("# Runtime stage", "FROM alpine:latest", "RUN apk --no-cache add ca-certificates",
         "WORKDIR /app"),
        _ALPINE_USER,
        _from_builder("# Copy binary from builder", ("/build/app", ".")),
        _chown("/app"),
        _USER,
    )
    return LanguageTemplate(
        base_image=image,
        build_stage=build_stage,
        runtime_stage=runtime_stage,
        run_command=_or(analysis.start_command, "./app"),
    )


_NODE_COMMANDS: dict[BuildTool, tuple[str, str]] = {
    BuildTool.YARN: ("yarn install --frozen-lockfile", "yarn build"),
    BuildTool.PNPM: ("pnpm install --frozen-lockfile", "pnpm build"),
}


def _node_template(analysis: AnalysisResult) -> LanguageTemplate:
    runtime = _or(analysis.runtime, "20")
    image = f"node:{runtime}-alpine"
    install_cmd, build_cmd = _NODE_COMMANDS.get(analysis.build_tool, ("npm ci", "npm run build"))
    build_cmd = _or(analysis.build_command, build_cmd)

    build_stage = _stage(
        _builder_header(image),
        ("# Copy package files", "COPY package*.json yarn.lock* pnpm-lock.yaml* ./"),
        ("# Install dependencies", f"RUN {install_cmd}"),
        _COPY_SOURCE,
        ("# Build application", f"RUN {build_cmd}"),
    )
    runtime_stage = _stage(
        _runtime_header(image),
        _ALPINE_USER,
        _from_builder(
            "# Copy built application",
            ("/build/dist", "./dist"),
            ("/build/node_modules", "./node_modules"),
            ("/build/package*.json", "./"),
        ),
        _chown("/app"),
        _USER,
    )
    return LanguageTemplate(
        base_image=image,
        build_stage=build_stage,
        runtime_stage=runtime_stage,
        run_command=_or(analysis.start_command, "node server.js"),
    )


def _python_template(analysis: AnalysisResult) -> LanguageTemplate:
    runtime = _or(analysis.runtime, "3.12")
    image = f"python:{runtime}-slim"

    install_blocks: list[Block]
    if analysis.build_tool == BuildTool.POETRY:
        install_blocks = [
            ("# Install poetry", "RUN pip install --no-cache-dir poetry"),
            ("# Copy poetry files", "COPY pyproject.toml poetry.lock* ./"),
            ("# Install dependencies", "RUN poetry config virtualenvs.create false && \\",
             "    poetry install --no-dev --no-interaction --no-ansi"),
        ]
    else:
        install_blocks = [
            ("# Copy requirements", "COPY requirements.txt ."),
            ("# Install dependencies", "RUN pip install --no-cache-dir -r requirements.txt"),
        ]

    site_packages = "/usr/local/lib/python*/site-packages"
    build_stage = _stage(_builder_header(image), *install_blocks, _COPY_SOURCE)
    runtime_stage = _stage(
        _runtime_header(image),
        ("# Create non-root user", "RUN useradd -m -u 1000 appuser"),
        _from_builder(
            "# Copy dependencies and code from builder",
            (site_packages, site_packages),
            ("/build", "."),
        ),
        _chown("/app"),
        _USER,
    )
    return LanguageTemplate(
        base_image=image,
        build_stage=build_stage,
        runtime_stage=runtime_stage,
        run_command=_or(analysis.start_command, "python app.py"),
    )


def _run_if_present(marker: str, command: str) -> str:
    return f'RUN if [ -f "{marker}" ]; then {command}; fi'


def _java_template(analysis: AnalysisResult) -> LanguageTemplate:
    runtime = _or(analysis.runtime, "21")
    image = f"eclipse-temurin:{runtime}-jdk-alpine"
    if analysis.build_tool == BuildTool.GRADLE:
        build_cmd = "./gradlew build -x test"
    else:
        build_cmd = "mvn clean package -DskipTests"
    build_cmd = _or(analysis.build_command, build_cmd)

    build_stage = _stage(
        _builder_header(image),
        ("# Copy build files",
         "COPY pom.xml* build.gradle* settings.gradle* gradlew* gradle* ./",
         "COPY gradle ./gradle", "COPY mvnw* .mvn* ./"),
        ("# Download dependencies (cached layer)",
         _run_if_present("pom.xml", "mvn dependency:go-offline"),
         _run_if_present("build.gradle", "./gradlew dependencies")),
        _COPY_SRC_DIR,
        ("# Build application", f"RUN {build_cmd}"),
    )
    runtime_stage = _stage(
        _runtime_header(f"eclipse-temurin:{runtime}-jre-alpine"),
        _ALPINE_USER,
        _from_builder("# Copy JAR file", ("/build/target/*.jar", "app.jar")),
        _chown("app.jar", recursive=False),
        _USER,
    )
    return LanguageTemplate(
        base_image=image,
        build_stage=build_stage,
        runtime_stage=runtime_stage,
        run_command="java -jar app.jar",
    )


def _rust_template(analysis: AnalysisResult) -> LanguageTemplate:
    image = "rust:1.75-alpine"
    build_stage = _stage(
        _builder_header(image),
        ("# Install build dependencies", "RUN apk add --no-cache musl-dev"),
        ("# Copy Cargo files", "COPY Cargo.toml Cargo.lock* ./"),
        _COPY_SRC_DIR,
        ("# Build application", "RUN cargo build --release"),
    )
    runtime_stage = _stage(
        _runtime_header("alpine:latest"),
        ("# Install runtime dependencies", "RUN apk --no-cache add ca-certificates"),
        _ALPINE_USER,
        _from_builder("# Copy binary from builder", ("/build/target/release/app", ".")),
        _chown("app", recursive=False),
        _USER,
    )
    return LanguageTemplate(
        base_image=image,
        build_stage=build_stage,
        runtime_stage=runtime_stage,
        run_command="./app",
    )


def _ruby_template(analysis: AnalysisResult) -> LanguageTemplate:
    runtime = _or(analysis.runtime, "3.3")
    image = f"ruby:{runtime}-alpine"
    build_stage = _stage(
        _builder_header(image),
        ("# Install build dependencies", "RUN apk add --no-cache build-base"),
        ("# Copy Gemfile", "COPY Gemfile Gemfile.lock* ./"),
        ("# Install gems", "RUN bundle install --without development test"),
        _COPY_SOURCE,
    )
    runtime_stage = _stage(
        _runtime_header(image),
        _ALPINE_USER,
        _from_builder(
            "# Copy gems and code from builder",
            ("/usr/local/bundle", "/usr/local/bundle"),
            ("/build", "."),
        ),
        _chown("/app"),
        _USER,
    )
    return LanguageTemplate(
        base_image=image,
        build_stage=build_stage,
        runtime_stage=runtime_stage,
        run_command=_or(analysis.start_command, "bundle exec ruby app.rb"),
    )


def _php_template(analysis: AnalysisResult) -> LanguageTemplate:
    runtime = _or(analysis.runtime, "8.3")
    image = f"php:{runtime}-fpm-alpine"
    composer = "/usr/bin/composer"
    build_stage = _stage(
        _builder_header(image),
        ("# Install composer", f"COPY --from=composer:latest {composer} {composer}"),
        ("# Copy composer files", "COPY composer.json composer.lock* ./"),
        ("# Install dependencies", "RUN composer install --no-dev --optimize-autoloader"),
        _COPY_SOURCE,
    )
    runtime_stage = _stage(
        _runtime_header(image),
        _ALPINE_USER,
        _from_builder("# Copy application from builder", ("/build", ".")),
        _chown("/app"),
        _USER,
    )
    return LanguageTemplate(
        base_image=image,
        build_stage=build_stage,
        runtime_stage=runtime_stage,
        run_command="php-fpm",
    )


def _dotnet_template(analysis: AnalysisResult) -> LanguageTemplate:
    runtime = _or(analysis.runtime, "8.0")
    registry = "mcr.microsoft.com/dotnet"
    image = f"{registry}/sdk:{runtime}-alpine"
    build_stage = _stage(
        _builder_header(image),
        ("# Copy csproj and restore", "COPY *.csproj ./", "RUN dotnet restore"),
        _COPY_SOURCE,
        ("# Build and publish", "RUN dotnet publish -c Release -o out"),
    )
    runtime_stage = _stage(
        _runtime_header(f"{registry}/aspnet:{runtime}-alpine"),
        _ALPINE_USER,
        _from_builder("# Copy published app", ("/build/out", ".")),
        _chown("/app"),
        _USER,
    )
    return LanguageTemplate(
        base_image=image,
        build_stage=build_stage,
        runtime_stage=runtime_stage,
        run_command="dotnet app.dll",
    )


_TEMPLATES: dict[Language, Callable[[AnalysisResult], LanguageTemplate]] = {
    Language.GO: _go_template,
    Language.NODEJS: _node_template,
    Language.PYTHON: _python_template,
    Language.JAVA: _java_template,
    Language.RUST: _rust_template,
    Language.RUBY: _ruby_template,
    Language.PHP: _php_template,
    Language.DOTNET: _dotnet_template,
}


def get_template(analysis: AnalysisResult) -> LanguageTemplate:
    """Return the Dockerfile template for the analysed project's language."""
    factory = _TEMPLATES.get(analysis.language)
    if factory is None:
        raise UnsupportedLanguageError(analysis.language)
    return factory(analysis)


def format_cmd(cmd: str) -> str:
    """Format a command as the quoted, comma-separated body of a CMD array."""
    return ", ".join(f'"{part}"' for part in cmd.split())


def build_dockerfile_content(template: LanguageTemplate, port: int) -> str:
    """Assemble a complete Dockerfile from a template."""
    parts = [template.build_stage, "\n\n", template.runtime_stage, "\n\n"]
    if port > 0:
        parts.append(f"EXPOSE {port}\n\n")
    parts.append(f"CMD [{format_cmd(template.run_command)}]\n")
    return "".join(parts)