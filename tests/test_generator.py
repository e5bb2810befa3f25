import pytest

from app_deployer.analyzer.types import AnalysisResult, Language
from app_deployer.builder.dockerfile.generator import DockerfileError, Generator
from app_deployer.builder.dockerfile.templates import (
    build_dockerfile_content,
    get_template,
)


@pytest.fixture
def generator():
    return Generator()


def test_none_analysis_raises(generator):
    with pytest.raises(DockerfileError):
        generator.generate(None)


def test_unsupported_language_raises(generator):
    with pytest.raises(DockerfileError) as info:
        generator.generate(AnalysisResult(language=Language.UNKNOWN))
    assert "failed to get template" in str(info.value)


def test_default_port_used(generator):
    content = generator.generate(AnalysisResult(language=Language.GO))
    assert "EXPOSE 8080\n" in content


def test_detected_port_used(generator):
    analysis = AnalysisResult(language=Language.NODEJS, port=3000)
    content = generator.generate(analysis)
    assert "EXPOSE 3000\n" in content
    assert "EXPOSE 8080" not in content


def test_generate_matches_template_assembly(generator):
    analysis = AnalysisResult(language=Language.PYTHON, port=5000, has_dockerfile=True)
    expected = build_dockerfile_content(get_template(analysis), 5000)
    assert generator.generate(analysis) == expected


@pytest.mark.parametrize("language", [lang for lang in Language if lang is not Language.UNKNOWN])
def test_generated_content_validates(generator, language):
    content = generator.generate(AnalysisResult(language=language))
    generator.validate(content)
    assert content.endswith("]\n")


def test_validate_empty_raises(generator):
    with pytest.raises(DockerfileError):
        generator.validate("")


def test_validate_missing_cmd(generator):
    with pytest.raises(DockerfileError) as info:
        generator.validate("FROM base\nWORKDIR /app\nCOPY . .\n")
    assert "CMD" in str(info.value)


def test_generate_and_write(generator, tmp_path):
    analysis = AnalysisResult(language=Language.GO)
    path = generator.generate_and_write(analysis, tmp_path)
    assert path == tmp_path / "Dockerfile"
    assert path.read_text(encoding="utf-8") == generator.generate(analysis)


def test_generate_and_write_failure(generator, tmp_path):
    with pytest.raises(DockerfileError) as info:
        generator.generate_and_write(AnalysisResult(language=Language.UNKNOWN), tmp_path)
    assert "failed to generate dockerfile" in str(info.value)
    assert not (tmp_path / "Dockerfile").exists()


def test_generate_and_write_missing_dir(generator, tmp_path):
    with pytest.raises(DockerfileError) as info:
        generator.generate_and_write(AnalysisResult(language=Language.GO), tmp_path / "absent")
    assert "failed to write dockerfile" in str(info.value)