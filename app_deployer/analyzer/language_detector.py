"""Detection of a project's primary programming language."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from app_deployer.analyzer.types import FileInfo, Language

_EXTENSIONS: dict[str, Language] = {
    ".go": Language.GO,
    ".js": Language.NODEJS,
    ".ts": Language.NODEJS,
    ".jsx": Language.NODEJS,
    ".tsx": Language.NODEJS,
    ".mjs": Language.NODEJS,
    ".py": Language.PYTHON,
    ".java": Language.JAVA,
    ".kt": Language.JAVA,
    ".rs": Language.RUST,
    ".rb": Language.RUBY,
    ".php": Language.PHP,
    ".cs": Language.DOTNET,
}

# Looked up by lower-cased file name.
_KEY_FILES: dict[str, Language] = {
    "package.json": Language.NODEJS,
    "go.mod": Language.GO,
    "requirements.txt": Language.PYTHON,
    "pyproject.toml": Language.PYTHON,
    "Pipfile": Language.PYTHON,
    "pom.xml": Language.JAVA,
    "build.gradle": Language.JAVA,
    "Cargo.toml": Language.RUST,
    "Gemfile": Language.RUBY,
    "composer.json": Language.PHP,
}

KEY_FILE_CONFIDENCE = 0.95


class LanguageDetector:
    """Detects the primary language from a list of files."""

    def __init__(self) -> None:
        self.extension_map = dict(_EXTENSIONS)
        self.key_files = dict(_KEY_FILES)

    def detect(self, files: Iterable[FileInfo]) -> tuple[Language, float]:
        """Return the most likely language and a confidence in [0, 1]."""
        files = list(files)

        for file in files:
            language = self.key_files.get(file.name.lower())
            if language is not None:
                return language, KEY_FILE_CONFIDENCE

        counts = Counter(
            self.extension_map[file.extension]
            for file in files
            if not file.is_directory and file.extension in self.extension_map
        )
        total = sum(counts.values())
        if total == 0:
            return Language.UNKNOWN, 0.0

        language, count = max(counts.items(), key=lambda item: item[1])
        return language, count / total