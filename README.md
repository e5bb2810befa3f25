# app-deployer

A library that looks at an application's source tree, writes a Dockerfile for it
and builds a container image with a Docker daemon.

- **Analysis** (`app_deployer.analyzer`): finds the main language, web framework,
  build tool, runtime version, dependencies, start and build commands and the
  default port of a project directory.
- **Dockerfile generation** (`app_deployer.builder.dockerfile`): writes multi-stage
  Dockerfiles that run as a non-root user, for Go, Node.js, Python, Java, Rust,
  Ruby, PHP and .NET, and gives optimisation advice.
- **Image builds** (`app_deployer.builder.strategies`): builds, tags, pushes and
  removes images by talking to the Docker Engine API.

## Installation

```
pip install .
```

The package needs only the standard library.

## Analysing a project

```python
from app_deployer.analyzer.analyzer import Analyzer

result = Analyzer().analyze("path/to/project")
print(result.language, result.framework, result.build_tool, result.port)
print(result.to_dict())
```

`analyze` raises `AnalysisError` when the path does not exist or holds no files.
Hidden files and directories such as `node_modules`, `vendor`, `venv`, `dist`,
`build`, `target` and `__pycache__` are skipped while scanning.

The detectors can also be used alone:

```python
from app_deployer.analyzer.framework_detector import FrameworkDetector, get_framework_info
from app_deployer.analyzer.language_detector import LanguageDetector

FrameworkDetector().parse_package_json_file("package.json")      # Framework.EXPRESS, ...
FrameworkDetector().parse_requirements_file("requirements.txt")  # Framework.FLASK, ...
get_framework_info("flask")["default_port"]                      # 5000
```

## Generating a Dockerfile

```python
from app_deployer.builder.dockerfile.generator import Generator

generator = Generator()
print(generator.generate(result))
path = generator.generate_and_write(result, "path/to/project")  # writes <dir>/Dockerfile
generator.validate(path.read_text())
```

`generate` raises `DockerfileError` for a missing analysis or an unsupported
language; if the project sets no port the file exposes `8080`. `validate` raises
`DockerfileError` when `FROM`, `WORKDIR`, `COPY` or `CMD` is missing.

`app_deployer.builder.dockerfile.templates` offers `get_template`,
`build_dockerfile_content` and `format_cmd` for assembling files by hand, and
`app_deployer.builder.dockerfile.optimizer.Optimizer` lists language
optimisations (`optimize_for_language`), a rough image size
(`image_size_estimate`) and suggestions for an existing Dockerfile
(`suggest_improvements`).

## Building images

```python
from app_deployer.builder.buildtypes import BuildContext
from app_deployer.builder.strategies.strategy import StrategyFactory, StrategyType

strategy = StrategyFactory().create_strategy(StrategyType.DOCKER)
build_ctx = BuildContext(
    deployment_id="dep-1", app_name="MyApp", version="1.0.0",
    source_path="path/to/project", analysis=result,
)
build_result = strategy.build(build_ctx, Generator().generate(result))
print(build_result.image_tag, build_result.image_digest, build_result.build_duration)
strategy.tag_image(build_result.image_tag, "registry.example.com/myapp:1.0.0")
strategy.close()
```

The strategy connects to the daemon named by `DOCKER_HOST` (`unix://`, `tcp://`,
`http://` or `https://`), or to `/var/run/docker.sock` when it is unset. The image
is tagged `<app name in lower case>:<version>`. During the build a
`Dockerfile.generated` is written into the source directory and removed
afterwards; `.git`, `.github`, `node_modules`, `vendor`, `.env` and `*.log` files
are left out of the build context. A failure raises `DockerError`, whose
`result` and `build_log` hold what was produced before it.

`StrategyType.BUILDPACK` and `StrategyType.NIXPACK` raise
`StrategyNotImplementedError`; any other name raises `UnknownStrategyError`.

## What it does not do

- It has no registry clients: `push_image` pushes without registry credentials,
  and there is no sign-in to any hosted registry.
- It keeps no record of builds: there is no tracker, database or build service
  that runs the whole pipeline.
- It has no command-line tool and no HTTP server.

## Running the tests

```
pip install .[test]
pytest
```