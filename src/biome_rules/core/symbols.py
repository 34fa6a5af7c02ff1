"""Module-level symbol tables built from a TypeScript syntax tree."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field

from tree_sitter import Node

from biome_rules.core.ast import named_children_of_type, node_text, string_value

FUNCTION_DECLARATIONS = frozenset({"function_declaration", "generator_function_declaration"})
TYPE_DECLARATIONS = frozenset({"type_alias_declaration", "interface_declaration"})
VALUE_DECLARATIONS = frozenset(
    {
        "class_declaration",
        "abstract_class_declaration",
        "enum_declaration",
        "function_signature",
    }
)
VARIABLE_DECLARATIONS = frozenset({"lexical_declaration", "variable_declaration"})


@dataclass(frozen=True)
class ExportEntry:
    local_name: str
    specifier: str | None = None


@dataclass
class ModuleScope:
    types: dict[str, list[Node]] = field(default_factory=lambda: defaultdict(list))
    functions: dict[str, list[Node]] = field(default_factory=lambda: defaultdict(list))
    values: dict[str, list[Node]] = field(default_factory=lambda: defaultdict(list))
    # local name -> (module specifier, imported name)
    imports: dict[str, tuple[str, str]] = field(default_factory=dict)
    exports: dict[str, ExportEntry] = field(default_factory=dict)
    star_exports: list[str] = field(default_factory=list)

    def local_declarations(self, name: str) -> list[Node]:
        return [*self.functions.get(name, ()), *self.values.get(name, ()), *self.types.get(name, ())]


def _declared_name(declaration: Node) -> str | None:
    name = declaration.child_by_field_name("name")
    return node_text(name) if name is not None else None


def _is_default_export(statement: Node) -> bool:
    return any(child.type == "default" for child in statement.children)


def _collect_declaration(scope: ModuleScope, declaration: Node, exported: bool = False, default: bool = False) -> None:
    kind = declaration.type
    names: list[str] = []

    if kind in VARIABLE_DECLARATIONS:
        for declarator in named_children_of_type(declaration, "variable_declarator"):
            name_node = declarator.child_by_field_name("name")
            if name_node is None or name_node.type != "identifier":
                continue
            name = node_text(name_node)
            scope.values[name].append(declarator)
            names.append(name)
    else:
        name = _declared_name(declaration)
        if name is None:
            return
        if kind in TYPE_DECLARATIONS:
            scope.types[name].append(declaration)
        elif kind in FUNCTION_DECLARATIONS:
            scope.functions[name].append(declaration)
        elif kind in VALUE_DECLARATIONS:
            scope.values[name].append(declaration)
        else:
            return
        names.append(name)

    if default and names:
        scope.exports["default"] = ExportEntry(names[0])
    elif exported:
        for name in names:
            scope.exports[name] = ExportEntry(name)


def _collect_import(scope: ModuleScope, statement: Node) -> None:
    source = statement.child_by_field_name("source")
    if source is None:
        return
    specifier = string_value(source)
    for clause in named_children_of_type(statement, "import_clause"):
        for child in clause.named_children:
            if child.type == "identifier":
                scope.imports[node_text(child)] = (specifier, "default")
            elif child.type == "named_imports":
                for spec in named_children_of_type(child, "import_specifier"):
                    name = spec.child_by_field_name("name")
                    alias = spec.child_by_field_name("alias")
                    if name is None:
                        continue
                    imported = string_value(name) if name.type == "string" else node_text(name)
                    scope.imports[node_text(alias or name)] = (specifier, imported)


def _collect_export(scope: ModuleScope, statement: Node) -> None:
    declaration = statement.child_by_field_name("declaration")
    if declaration is not None:
        _collect_declaration(scope, declaration, exported=True, default=_is_default_export(statement))
        return

    source = statement.child_by_field_name("source")
    specifier = string_value(source) if source is not None else None
    clauses = list(named_children_of_type(statement, "export_clause"))
    for clause in clauses:
        for spec in named_children_of_type(clause, "export_specifier"):
            name = spec.child_by_field_name("name")
            alias = spec.child_by_field_name("alias")
            if name is None:
                continue
            local = string_value(name) if name.type == "string" else node_text(name)
            exported = node_text(alias) if alias is not None else local
            scope.exports[exported] = ExportEntry(local, specifier)
    if not clauses and specifier is not None and not list(named_children_of_type(statement, "namespace_export")):
        scope.star_exports.append(specifier)


def build_scope(root: Node) -> ModuleScope:
    scope = ModuleScope()
    for child in root.named_children:
        if child.type == "import_statement":
            _collect_import(scope, child)
        elif child.type == "export_statement":
            _collect_export(scope, child)
        else:
            _collect_declaration(scope, child)
    return scope


def exported_declarations(scope: ModuleScope) -> dict[str, list[Node]]:
    """Declarations exported by the module itself, keyed by exported name.

    Re-exports from other modules are not followed.
    """
    result: dict[str, list[Node]] = {}
    for exported, entry in scope.exports.items():
        if entry.specifier is not None:
            continue
        declarations = scope.local_declarations(entry.local_name)
        if declarations:
            result[exported] = declarations
    return result
