import pytest

from app_deployer.analyzer.framework_detector import FrameworkDetector, get_framework_info
from app_deployer.analyzer.types import FileInfo, Framework, Language


def _file(path, extension=""):
    name = path.rsplit("/", 1)[-1]
    return FileInfo(path=path, name=name, extension=extension)


@pytest.fixture
def detector():
    return FrameworkDetector()


def test_detect_express_from_package_json(detector, tmp_path):
    package = tmp_path / "package.json"
    package.write_text('{"name": "test-app", "dependencies": {"express": "^4.18.0"}}')
    assert detector.parse_package_json_file(package) == Framework.EXPRESS


def test_detect_flask_from_requirements(detector, tmp_path):
    requirements = tmp_path / "requirements.txt"
    requirements.write_text("Flask==2.0.1\nrequests==2.26.0\n")
    assert detector.parse_requirements_file(requirements) == Framework.FLASK


def test_package_json_dev_dependencies_are_checked(detector, tmp_path):
    package = tmp_path / "package.json"
    package.write_text('{"devDependencies": {"@nestjs/core": "10.0.0"}}')
    assert detector.parse_package_json_file(package) == Framework.NESTJS


def test_package_json_missing_or_invalid(detector, tmp_path):
    assert detector.parse_package_json_file(tmp_path / "missing.json") == Framework.UNKNOWN
    broken = tmp_path / "package.json"
    broken.write_text("{not json")
    assert detector.parse_package_json_file(broken) == Framework.UNKNOWN


def test_requirements_comments_are_skipped(detector, tmp_path):
    requirements = tmp_path / "requirements.txt"
    requirements.write_text("# django is not used\nfastapi==0.100\n")
    assert detector.parse_requirements_file(requirements) == Framework.FASTAPI


def test_requirements_missing_file(detector, tmp_path):
    assert detector.parse_requirements_file(tmp_path / "nope.txt") == Framework.UNKNOWN


def test_detect_go_framework_from_path(detector):
    files = [_file("main.go", ".go"), _file("internal/gin/router.go", ".go")]
    assert detector.detect(Language.GO, files) == Framework.GIN


def test_detect_go_ignores_non_go_files(detector):
    files = [_file("docs/echo.md", ".md")]
    assert detector.detect(Language.GO, files) == Framework.UNKNOWN


def test_detect_node_next_config(detector):
    files = [_file("next.config.js", ".js"), _file("index.js", ".js")]
    assert detector.detect(Language.NODEJS, files) == Framework.NEXTJS


def test_detect_node_with_package_json_is_unknown(detector):
    files = [_file("package.json", ".json"), _file("next.config.js", ".js")]
    assert detector.detect(Language.NODEJS, files) == Framework.UNKNOWN


def test_detect_python_from_path(detector):
    files = [_file("mysite/django_settings.py", ".py")]
    assert detector.detect(Language.PYTHON, files) == Framework.DJANGO


def test_detect_python_with_requirements_is_unknown(detector):
    files = [_file("requirements.txt", ".txt"), _file("flask_app.py", ".py")]
    assert detector.detect(Language.PYTHON, files) == Framework.UNKNOWN


@pytest.mark.parametrize(
    "name", ["pom.xml", "build.gradle", "build.gradle.kts", "application.yml"]
)
def test_detect_java_spring_boot(detector, name):
    assert detector.detect(Language.JAVA, [_file(name)]) == Framework.SPRINGBOOT


def test_detect_other_language_is_unknown(detector):
    assert detector.detect(Language.RUST, [_file("main.rs", ".rs")]) == Framework.UNKNOWN


def test_get_framework_info_known():
    info = get_framework_info(Framework.DJANGO)
    assert info["name"] == "Django"
    assert info["default_port"] == 8000
    assert info["start_command"] == "python manage.py runserver"


def test_get_framework_info_unknown_framework():
    assert get_framework_info(Framework.KOA) == {"name": "koa", "language": "unknown"}


def test_get_framework_info_returns_copy():
    info = get_framework_info(Framework.GIN)
    info["name"] = "changed"
    assert get_framework_info(Framework.GIN)["name"] == "Gin"