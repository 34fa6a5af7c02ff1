"""Check that Next.js route handlers receive ``params`` as a ``Promise``.

Since Next.js 15 the ``params`` of the second route handler argument
(``{ params }: { params: Promise<{ id: string }> }``) is asynchronous. Handlers
still typed the Next.js 14 way compile but read ``params`` synchronously.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from tree_sitter import Node

from biome_rules.core.files import select_files
from biome_rules.core.fixer import WRAPPER, fix_nextjs_params
from biome_rules.core.project import SourceFile, SourceProject
from biome_rules.core.symbols import FUNCTION_DECLARATIONS, exported_declarations
from biome_rules.core.types import resolve_property_type
from biome_rules.models import DEFAULT_ROUTE_PATTERN, RunResult, Violation

logger = logging.getLogger(__name__)

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")

_PARAMETER_TYPES = frozenset({"required_parameter", "optional_parameter"})

_MESSAGE = 'Next.js 14+ route handler "{name}" params must be Promise<{{ ... }}>. Found: {found}'
_SUGGESTED_FIX = "Wrap params type with Promise<...>"


@dataclass(frozen=True)
class HandlerFunction:
    source: SourceFile
    name: str
    declaration: Node


def find_handler_functions(project: SourceProject, source: SourceFile) -> list[HandlerFunction]:
    """Exported plain function declarations named after an HTTP method."""
    scope = project.type_resolver.scope_of(source)
    handlers: list[HandlerFunction] = []
    for name, declarations in exported_declarations(scope).items():
        if name not in HTTP_METHODS:
            continue
        for declaration in declarations:
            if declaration.type not in FUNCTION_DECLARATIONS:
                logger.debug("Skipping %s in %s: %s is not a function declaration", name, source.path, declaration.type)
                continue
            handlers.append(HandlerFunction(source, name, declaration))
    return handlers


def function_parameters(declaration: Node) -> list[Node]:
    parameters = declaration.child_by_field_name("parameters")
    if parameters is None:
        return []
    return [child for child in parameters.named_children if child.type in _PARAMETER_TYPES]


def _check_handler(project: SourceProject, handler: HandlerFunction, fix: bool) -> Violation | None:
    """Return a violation for ``handler``, or None when it passes, is skipped or was fixed."""
    parameters = function_parameters(handler.declaration)
    if len(parameters) < 2:
        return None
    context = parameters[1]

    resolver = project.type_resolver
    context_type = resolver.type_of_parameter(handler.source, context)
    if context_type is None:
        return None
    params = context_type.get_property("params")
    if params is None:
        return None

    found = resolve_property_type(resolver, context_type, params)
    if found is None or WRAPPER in found:
        return None

    if fix and fix_nextjs_params(handler.source, handler.declaration, context):
        logger.info("Fixed %s params in %s", handler.name, handler.source.path)
        return None

    position = handler.source.position_of(context)
    return Violation(
        file_path=str(handler.source.path),
        line=position.line,
        column=position.column,
        message=_MESSAGE.format(name=handler.name, found=found),
        severity="error",
        fixable=True,
        suggested_fix=_SUGGESTED_FIX,
    )


def check_source_file(project: SourceProject, source: SourceFile, fix: bool = False) -> list[Violation]:
    violations: list[Violation] = []
    for handler in find_handler_functions(project, source):
        violation = _check_handler(project, handler, fix)
        if violation is not None:
            violations.append(violation)
    if source.has_staged_edits:
        source.apply_staged_edits()
    return violations


def check_nextjs_params(
    cwd: str | Path,
    ts_config_path: str | None = None,
    pattern: str = DEFAULT_ROUTE_PATTERN,
    fix: bool = False,
) -> RunResult:
    """Check every route handler matched by ``pattern`` under ``cwd``.

    Failures while loading or analysing the project are reported as an
    unsuccessful result rather than raised.
    """
    try:
        files = select_files(cwd, pattern)
        if not files:
            return RunResult(success=True, message=f"No files found matching pattern: {pattern}")

        project = SourceProject.load(cwd, ts_config_path, files)

        violations: list[Violation] = []
        for source in project.source_files:
            violations.extend(check_source_file(project, source, fix))

        if fix:
            fixed = project.save()
            if fixed:
                remaining = (
                    f"Found {len(violations)} remaining violation(s)." if violations else "All violations fixed!"
                )
                return RunResult(
                    success=not violations,
                    violations=violations,
                    message=f"Fixed {len(fixed)} file(s). {remaining}",
                )

        if not violations:
            return RunResult(success=True, message=f"All {len(files)} route handler file(s) passed validation")
        return RunResult(
            success=False,
            violations=violations,
            message=f"Found {len(violations)} violation(s) in {len(files)} file(s)",
        )
    except Exception as exc:
        logger.debug("Route params check failed", exc_info=True)
        return RunResult(success=False, message=f"Error: {exc}")
