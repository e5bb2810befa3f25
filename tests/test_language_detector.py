import pytest

from app_deployer.analyzer.language_detector import LanguageDetector
from app_deployer.analyzer.types import FileInfo, Language


def _file(name, extension, is_directory=False):
    return FileInfo(path=name, name=name, extension=extension, is_directory=is_directory)


@pytest.fixture
def detector():
    return LanguageDetector()


def test_detect_go(detector):
    files = [_file("main.go", ".go"), _file("handler.go", ".go"), _file("go.mod", ".mod")]
    language, confidence = detector.detect(files)
    assert language == Language.GO
    assert confidence >= 0.9


def test_detect_nodejs(detector):
    files = [_file("package.json", ".json"), _file("index.js", ".js"), _file("app.ts", ".ts")]
    language, confidence = detector.detect(files)
    assert language == Language.NODEJS
    assert confidence >= 0.9


def test_detect_python(detector):
    files = [_file("app.py", ".py"), _file("utils.py", ".py"), _file("requirements.txt", ".txt")]
    language, confidence = detector.detect(files)
    assert language == Language.PYTHON
    assert confidence >= 0.9


def test_key_file_gives_fixed_confidence(detector):
    language, confidence = detector.detect([_file("pom.xml", ".xml")])
    assert language == Language.JAVA
    assert confidence == 0.95


def test_key_file_name_lookup_is_lowercased(detector):
    language, _ = detector.detect([_file("Package.JSON", ".json")])
    assert language == Language.NODEJS


def test_extension_majority_wins(detector):
    files = [_file("a.py", ".py"), _file("b.py", ".py"), _file("c.js", ".js")]
    language, confidence = detector.detect(files)
    assert language == Language.PYTHON
    assert confidence == pytest.approx(2 / 3)


def test_directories_are_not_counted(detector):
    files = [_file("lib.rb", ".rb", is_directory=True), _file("main.rs", ".rs")]
    language, confidence = detector.detect(files)
    assert language == Language.RUST
    assert confidence == 1.0


def test_no_recognised_files_is_unknown(detector):
    files = [_file("README.md", ".md"), _file("notes.txt", ".txt")]
    assert detector.detect(files) == (Language.UNKNOWN, 0.0)


def test_empty_input_is_unknown(detector):
    assert detector.detect([]) == (Language.UNKNOWN, 0.0)