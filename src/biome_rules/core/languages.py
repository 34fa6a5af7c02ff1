from pathlib import Path

_LANGUAGE_ALIASES = {
    "json": "json",
    "jsonc": "json",
    "ts": "typescript",
    "tsx": "tsx",
    "typescript": "typescript",
}

_EXTENSION_LANGUAGE_MAP = {
    ".cts": "typescript",
    ".json": "json",
    ".jsonc": "json",
    ".mts": "typescript",
    ".ts": "typescript",
    ".tsx": "tsx",
}

_SOURCE_LANGUAGES = frozenset({"typescript", "tsx"})

_SUPPORTED_LANGUAGES = set(_EXTENSION_LANGUAGE_MAP.values())

# Suffixes tried, in order, when an import specifier omits its extension.
MODULE_SUFFIXES = (".ts", ".tsx", ".d.ts")
INDEX_FILES = ("index.ts", "index.tsx", "index.d.ts")


def normalize_language(language: str) -> str:
    normalized = language.strip().lower()
    resolved = _LANGUAGE_ALIASES.get(normalized, normalized)
    if resolved not in _SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language '{language}'. Supported: {sorted(_SUPPORTED_LANGUAGES)}")
    return resolved


def detect_language_from_path(file_path: Path) -> str:
    suffix = file_path.suffix.lower()
    if suffix in _EXTENSION_LANGUAGE_MAP:
        return _EXTENSION_LANGUAGE_MAP[suffix]
    raise ValueError(f"Unsupported file extension: {suffix}")


def is_source_file(file_path: Path) -> bool:
    """Return True for TypeScript sources the checker can analyse."""
    return _EXTENSION_LANGUAGE_MAP.get(file_path.suffix.lower()) in _SOURCE_LANGUAGES
