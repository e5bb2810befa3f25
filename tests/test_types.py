import json

from app_deployer.analyzer.types import (
    AnalysisResult,
    BuildTool,
    FileInfo,
    Framework,
    Language,
)


def test_enum_values_serialise_as_wire_strings():
    data = AnalysisResult(
        language=Language.NODEJS,
        framework=Framework.SPRINGBOOT,
        build_tool=BuildTool.POETRY,
    ).to_dict()
    assert data["language"] == "nodejs"
    assert data["framework"] == "springboot"
    assert data["build_tool"] == "poetry"


def test_enums_compare_equal_to_strings():
    assert Language("python") is Language.PYTHON
    assert Framework.GIN == "gin"


def test_file_info_defaults():
    info = FileInfo(path="main.go", name="main.go")
    assert info.is_directory is False
    assert info.size == 0
    assert info.extension == ""


def test_to_dict_omits_empty_optional_fields():
    result = AnalysisResult(language=Language.GO, files=["main.go"])
    data = result.to_dict()
    for key in ("runtime", "dependencies", "dev_dependencies",
                "start_command", "build_command", "port"):
        assert key not in data
    assert data["language"] == "go"
    assert data["framework"] == "unknown"
    assert data["files"] == ["main.go"]
    assert data["has_dockerfile"] is False


def test_to_dict_includes_filled_fields_and_round_trips_json():
    result = AnalysisResult(
        language=Language.NODEJS,
        framework=Framework.EXPRESS,
        build_tool=BuildTool.NPM,
        runtime="node:18.x",
        dependencies={"express": "^4.18.0"},
        start_command="npm start",
        build_command="npm install && npm run build",
        port=3000,
        has_dockerfile=True,
        files=["package.json", "index.js"],
        confidence=0.95,
    )
    data = json.loads(json.dumps(result.to_dict()))
    assert data["runtime"] == "node:18.x"
    assert data["dependencies"] == {"express": "^4.18.0"}
    assert data["port"] == 3000
    assert data["build_tool"] == "npm"
    assert data["confidence"] == 0.95
    assert data["has_dockerfile"] is True


def test_to_dict_copies_collections():
    result = AnalysisResult(dependencies={"flask": "*"}, files=["app.py"])
    data = result.to_dict()
    data["dependencies"]["other"] = "1"
    data["files"].append("x.py")
    assert result.dependencies == {"flask": "*"}
    assert result.files == ["app.py"]