from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import TYPE_CHECKING, Any

from tree_sitter import Node, Tree

from biome_rules.core import jsonc
from biome_rules.core.ast import iter_errors, parse_source, position_of
from biome_rules.core.languages import INDEX_FILES, MODULE_SUFFIXES, detect_language_from_path, is_source_file
from biome_rules.models import Position

if TYPE_CHECKING:
    from biome_rules.core.types import TypeResolver

logger = logging.getLogger(__name__)

DEFAULT_TS_CONFIG = "tsconfig.json"


class ProjectLoadError(Exception):
    """Raised when the project or one of its files cannot be loaded."""


@dataclass(frozen=True)
class TextEdit:
    start_byte: int
    end_byte: int
    replacement: str


# ---------------------------------------------------------------------------
# Source files
# ---------------------------------------------------------------------------


class SourceFile:
    """A parsed TypeScript file whose content can be rewritten in memory."""

    def __init__(self, path: Path, source_bytes: bytes, language: str) -> None:
        self.path = path
        self.language = language
        self._source_bytes = source_bytes
        self._tree = parse_source(source_bytes, language)
        self._staged: list[TextEdit] = []
        self.modified = False

    @classmethod
    def from_path(cls, path: str | Path) -> SourceFile:
        file_path = Path(path).resolve()
        try:
            language = detect_language_from_path(file_path)
            source_bytes = file_path.read_bytes()
            source_bytes.decode("utf-8")
        except (OSError, ValueError) as exc:
            raise ProjectLoadError(f"Cannot load source file {file_path}: {exc}") from exc

        source = cls(file_path, source_bytes, language)
        for error in iter_errors(source.root):
            logger.warning(
                "Syntax error in %s at line %d; analysis continues on the recovered tree",
                file_path,
                error.start_point[0] + 1,
            )
            break
        return source

    @property
    def source_bytes(self) -> bytes:
        return self._source_bytes

    @property
    def text(self) -> str:
        return self._source_bytes.decode("utf-8")

    @property
    def tree(self) -> Tree:
        return self._tree

    @property
    def root(self) -> Node:
        return self._tree.root_node

    def position_of(self, node: Node) -> Position:
        return position_of(self._source_bytes, node)

    def stage_edit(self, edit: TextEdit) -> None:
        """Queue ``edit``. Staging an identical edit twice is a no-op."""
        if edit in self._staged:
            return
        for staged in self._staged:
            if edit.start_byte < staged.end_byte and staged.start_byte < edit.end_byte:
                raise ValueError(f"Overlapping edits in {self.path}")
        self._staged.append(edit)

    @property
    def has_staged_edits(self) -> bool:
        return bool(self._staged)

    def apply_staged_edits(self) -> int:
        """Apply staged edits in one pass and reparse. Returns the edit count."""
        if not self._staged:
            return 0
        content = self._source_bytes
        for edit in sorted(self._staged, key=lambda e: e.start_byte, reverse=True):
            content = content[: edit.start_byte] + edit.replacement.encode("utf-8") + content[edit.end_byte :]
        count = len(self._staged)
        self._staged.clear()
        self._source_bytes = content
        self._tree = parse_source(content, self.language)
        self.modified = True
        return count

    def save(self) -> None:
        self.path.write_bytes(self._source_bytes)
        self.modified = False


# ---------------------------------------------------------------------------
# tsconfig.json
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TsConfig:
    path: Path
    base_url: Path | None = None
    paths: dict[str, list[str]] = field(default_factory=dict)
    paths_base: Path | None = None


def _extends_targets(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return []


def read_ts_config(path: str | Path, _seen: frozenset[Path] = frozenset()) -> TsConfig:
    config_path = Path(path).resolve()
    if config_path in _seen:
        raise ProjectLoadError(f"Circular tsconfig extends: {config_path}")
    try:
        data = jsonc.load_file(config_path)
    except (OSError, ValueError) as exc:
        raise ProjectLoadError(f"Cannot read type configuration {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ProjectLoadError(f"Type configuration {config_path} must be a JSON object")

    base_url: Path | None = None
    paths: dict[str, list[str]] = {}
    paths_base: Path | None = None

    for target in _extends_targets(data.get("extends")):
        if not target.startswith((".", "/")):
            logger.debug("Skipping package tsconfig extends %s in %s", target, config_path)
            continue
        parent_path = (config_path.parent / target).resolve()
        if not parent_path.exists() and parent_path.suffix != ".json":
            parent_path = parent_path.with_name(parent_path.name + ".json")
        parent = read_ts_config(parent_path, _seen | {config_path})
        base_url = parent.base_url or base_url
        if parent.paths:
            paths, paths_base = parent.paths, parent.paths_base

    options = data.get("compilerOptions") or {}
    if not isinstance(options, dict):
        raise ProjectLoadError(f"compilerOptions in {config_path} must be an object")
    if isinstance(options.get("baseUrl"), str):
        base_url = (config_path.parent / options["baseUrl"]).resolve()
    if isinstance(options.get("paths"), dict):
        paths = {
            key: [t for t in targets if isinstance(t, str)]
            for key, targets in options["paths"].items()
            if isinstance(targets, list)
        }
        paths_base = base_url or config_path.parent

    return TsConfig(path=config_path, base_url=base_url, paths=paths, paths_base=paths_base)


def _match_path_pattern(pattern: str, specifier: str) -> str | None:
    """Return the text captured by ``*`` if ``specifier`` matches ``pattern``."""
    if "*" not in pattern:
        return "" if pattern == specifier else None
    prefix, _, suffix = pattern.partition("*")
    if specifier.startswith(prefix) and specifier.endswith(suffix) and len(specifier) >= len(prefix) + len(suffix):
        return specifier[len(prefix) : len(specifier) - len(suffix)]
    return None


# ---------------------------------------------------------------------------
# Project
# ---------------------------------------------------------------------------


class SourceProject:
    """Source files of one check run plus the type-resolution service.

    Root files are the ones selected for analysis. Files reached through
    imports are loaded on demand and only used for type resolution.
    """

    def __init__(self, cwd: str | Path, ts_config: TsConfig | None = None) -> None:
        self.cwd = Path(cwd).resolve()
        self.ts_config = ts_config
        self._files: dict[Path, SourceFile] = {}
        self._roots: list[Path] = []

    @classmethod
    def load(
        cls,
        cwd: str | Path,
        ts_config_path: str | None = None,
        files: Iterable[str | Path] = (),
    ) -> SourceProject:
        root = Path(cwd).resolve()
        if not root.is_dir():
            raise ProjectLoadError(f"Working directory does not exist: {root}")

        ts_config: TsConfig | None = None
        if ts_config_path:
            ts_config = read_ts_config(root / ts_config_path)
        elif (root / DEFAULT_TS_CONFIG).is_file():
            ts_config = read_ts_config(root / DEFAULT_TS_CONFIG)
        else:
            logger.debug("No %s under %s; resolving imports relative to files only", DEFAULT_TS_CONFIG, root)

        project = cls(root, ts_config)
        project.add_source_files(files)
        return project

    def add_source_file(self, path: str | Path) -> SourceFile:
        source = self.load_source_file(path)
        if source.path not in self._roots:
            self._roots.append(source.path)
        return source

    def add_source_files(self, paths: Iterable[str | Path]) -> list[SourceFile]:
        return [self.add_source_file(path) for path in paths]

    def load_source_file(self, path: str | Path) -> SourceFile:
        file_path = Path(path).resolve()
        source = self._files.get(file_path)
        if source is None:
            source = SourceFile.from_path(file_path)
            self._files[file_path] = source
        return source

    def get_source_file(self, path: str | Path) -> SourceFile | None:
        return self._files.get(Path(path).resolve())

    @property
    def source_files(self) -> list[SourceFile]:
        return [self._files[path] for path in self._roots]

    @cached_property
    def type_resolver(self) -> TypeResolver:
        from biome_rules.core.types import TypeResolver

        return TypeResolver(self)

    def resolve_module(self, importer: SourceFile, specifier: str) -> SourceFile | None:
        for candidate in self._module_candidates(importer, specifier):
            for path in self._expand_module_path(candidate):
                if path.is_file() and is_source_file(path):
                    return self.load_source_file(path)
        logger.debug("Unresolved module %s imported from %s", specifier, importer.path)
        return None

    def _module_candidates(self, importer: SourceFile, specifier: str) -> list[Path]:
        if specifier.startswith("."):
            return [importer.path.parent / specifier]
        if specifier.startswith("/"):
            return [Path(specifier)]

        candidates: list[Path] = []
        config = self.ts_config
        if config is not None:
            if config.paths and config.paths_base is not None:
                for pattern, targets in config.paths.items():
                    captured = _match_path_pattern(pattern, specifier)
                    if captured is None:
                        continue
                    candidates.extend(config.paths_base / target.replace("*", captured) for target in targets)
            if config.base_url is not None:
                candidates.append(config.base_url / specifier)
        return candidates

    @staticmethod
    def _expand_module_path(base: Path) -> list[Path]:
        paths = [base]
        if base.suffix in (".js", ".jsx", ".mjs", ".cjs"):
            stem = base.with_suffix("")
            paths.extend(stem.with_name(stem.name + suffix) for suffix in MODULE_SUFFIXES)
        paths.extend(base.with_name(base.name + suffix) for suffix in MODULE_SUFFIXES)
        paths.extend(base / index for index in INDEX_FILES)
        return paths

    def save(self) -> list[Path]:
        """Write every file modified in memory. Returns the written paths."""
        written: list[Path] = []
        for source in self._files.values():
            if source.modified:
                source.save()
                written.append(source.path)
                logger.info("Saved %s", source.path)
        return written
