"""Structural type resolution over tree-sitter TypeScript trees.

This is not a type checker. It recovers the members of object-like types
written as inline literals, local or imported aliases and interfaces,
intersections, unions, generic aliases and a handful of built-in utility
types, and renders types back to text with aliases expanded.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from tree_sitter import Node, Tree

from biome_rules.core.ast import collapse_whitespace, first_named_child, named_children_of_type, node_text, string_value
from biome_rules.core.symbols import ModuleScope, build_scope

if TYPE_CHECKING:
    from biome_rules.core.project import SourceFile, SourceProject

logger = logging.getLogger(__name__)

MAX_DEPTH = 24

PASS_THROUGH_GENERICS = frozenset({"Readonly", "Required", "Partial", "NonNullable"})

_MEMBER_CONTAINERS = frozenset({"object_type", "interface_body"})


@dataclass(frozen=True, eq=False)
class TypeRef:
    """A type node, the file it lives in and the generic bindings in effect."""

    node: Node
    source: SourceFile
    bindings: Mapping[str, TypeRef] = field(default_factory=dict)

    def with_node(self, node: Node) -> TypeRef:
        return TypeRef(node, self.source, self.bindings)


@dataclass(frozen=True, eq=False)
class PropertySymbol:
    name: str
    # property_signature node when the member is written out in source
    declaration: Node | None = None
    type_ref: TypeRef | None = None
    # set for synthetic members (inference, unions, intersections)
    type_text: str | None = None


@dataclass
class ResolvedType:
    text: str
    properties: dict[str, PropertySymbol] = field(default_factory=dict)

    def get_property(self, name: str) -> PropertySymbol | None:
        return self.properties.get(name)


class TypeResolver:
    def __init__(self, project: SourceProject) -> None:
        self._project = project
        self._scopes: dict[Path, tuple[Tree, ModuleScope]] = {}

    # -- symbols ------------------------------------------------------------

    def scope_of(self, source: SourceFile) -> ModuleScope:
        cached = self._scopes.get(source.path)
        if cached is not None and cached[0] is source.tree:
            return cached[1]
        scope = build_scope(source.root)
        self._scopes[source.path] = (source.tree, scope)
        return scope

    def lookup_type(self, source: SourceFile, name: str, depth: int = 0) -> list[tuple[Node, SourceFile]]:
        """Find the alias or interface declarations visible as ``name`` in ``source``."""
        if depth > MAX_DEPTH:
            return []
        scope = self.scope_of(source)
        if name in scope.types:
            return [(node, source) for node in scope.types[name]]
        if name in scope.imports:
            specifier, imported = scope.imports[name]
            target = self._project.resolve_module(source, specifier)
            if target is not None:
                return self._lookup_export(target, imported, depth + 1)
        return []

    def _lookup_export(self, source: SourceFile, name: str, depth: int) -> list[tuple[Node, SourceFile]]:
        if depth > MAX_DEPTH:
            return []
        scope = self.scope_of(source)
        entry = scope.exports.get(name)
        if entry is not None:
            if entry.specifier is None:
                return self.lookup_type(source, entry.local_name, depth + 1)
            target = self._project.resolve_module(source, entry.specifier)
            return self._lookup_export(target, entry.local_name, depth + 1) if target is not None else []
        for specifier in scope.star_exports:
            target = self._project.resolve_module(source, specifier)
            if target is None:
                continue
            found = self._lookup_export(target, name, depth + 1)
            if found:
                return found
        return []

    # -- resolution -----------------------------------------------------------

    def resolve(self, ref: TypeRef, depth: int = 0) -> ResolvedType:
        node = ref.node
        kind = node.type
        if depth > MAX_DEPTH:
            logger.debug("Type resolution depth exceeded at %s:%d", ref.source.path, node.start_point[0] + 1)
            return ResolvedType(text=collapse_whitespace(node_text(node)))

        if kind == "parenthesized_type":
            inner = first_named_child(node)
            return self.resolve(ref.with_node(inner), depth + 1) if inner is not None else ResolvedType(text="")

        if kind == "type_identifier":
            name = node_text(node)
            if name in ref.bindings:
                return self.resolve(ref.bindings[name], depth + 1)
            declarations = self.lookup_type(ref.source, name)
            if declarations:
                return self._resolve_declarations(ref, declarations, [], depth)
            return ResolvedType(text=name)

        if kind == "generic_type":
            return self._resolve_generic(ref, depth)

        if kind in _MEMBER_CONTAINERS:
            return ResolvedType(text=self.render(ref, depth), properties=self._members(ref))

        if kind == "intersection_type":
            return self._resolve_intersection(ref, depth)

        if kind == "union_type":
            return self._resolve_union(ref, depth)

        return ResolvedType(text=self.render(ref, depth))

    def _type_arguments(self, ref: TypeRef) -> list[TypeRef]:
        arguments = ref.node.child_by_field_name("type_arguments")
        if arguments is None:
            return []
        return [ref.with_node(arg) for arg in arguments.named_children if arg.type != "comment"]

    def _resolve_generic(self, ref: TypeRef, depth: int) -> ResolvedType:
        name_node = ref.node.child_by_field_name("name")
        args = self._type_arguments(ref)
        if name_node is None or name_node.type != "type_identifier" or node_text(name_node) in ref.bindings:
            return ResolvedType(text=self.render(ref, depth))

        name = node_text(name_node)
        declarations = self.lookup_type(ref.source, name)
        if declarations:
            return self._resolve_declarations(ref, declarations, args, depth)
        if name in PASS_THROUGH_GENERICS and args:
            inner = self.resolve(args[0], depth + 1)
            return ResolvedType(text=self.render(ref, depth), properties=inner.properties)
        if name == "Record" and len(args) == 2:
            properties = {key: PropertySymbol(key, type_ref=args[1]) for key in self._literal_keys(args[0], depth)}
            return ResolvedType(text=self.render(ref, depth), properties=properties)
        return ResolvedType(text=self.render(ref, depth))

    def _literal_keys(self, ref: TypeRef, depth: int) -> list[str]:
        node = ref.node
        if node.type == "literal_type":
            literal = first_named_child(node)
            return [string_value(literal)] if literal is not None and literal.type == "string" else []
        if node.type == "union_type":
            return [key for part in node.named_children for key in self._literal_keys(ref.with_node(part), depth)]
        if node.type == "type_identifier" and depth < MAX_DEPTH:
            name = node_text(node)
            if name in ref.bindings:
                return self._literal_keys(ref.bindings[name], depth + 1)
            for declaration, source in self.lookup_type(ref.source, name):
                value = declaration.child_by_field_name("value")
                if declaration.type == "type_alias_declaration" and value is not None:
                    return self._literal_keys(TypeRef(value, source), depth + 1)
        return []

    def _bind(self, declaration: Node, source: SourceFile, args: list[TypeRef]) -> dict[str, TypeRef]:
        bindings: dict[str, TypeRef] = {}
        parameters = declaration.child_by_field_name("type_parameters")
        if parameters is None:
            return bindings
        for index, parameter in enumerate(named_children_of_type(parameters, "type_parameter")):
            name_node = parameter.child_by_field_name("name")
            if name_node is None:
                continue
            if index < len(args):
                bindings[node_text(name_node)] = args[index]
                continue
            default = parameter.child_by_field_name("value")
            default_type = first_named_child(default) if default is not None else None
            if default_type is not None:
                bindings[node_text(name_node)] = TypeRef(default_type, source, dict(bindings))
        return bindings

    def _resolve_declarations(
        self,
        ref: TypeRef,
        declarations: list[tuple[Node, SourceFile]],
        args: list[TypeRef],
        depth: int,
    ) -> ResolvedType:
        first, first_source = declarations[0]
        if first.type == "type_alias_declaration":
            value = first.child_by_field_name("value")
            if value is None:
                return ResolvedType(text=node_text(ref.node))
            bindings = self._bind(first, first_source, args)
            return self.resolve(TypeRef(value, first_source, bindings), depth + 1)

        # Interfaces: merged declarations, own members shadow inherited ones.
        properties: dict[str, PropertySymbol] = {}
        inherited: dict[str, PropertySymbol] = {}
        for declaration, source in declarations:
            if declaration.type != "interface_declaration":
                continue
            bindings = self._bind(declaration, source, args)
            body = declaration.child_by_field_name("body")
            if body is not None:
                properties.update(self._members(TypeRef(body, source, bindings)))
            for clause in named_children_of_type(declaration, "extends_type_clause"):
                for base in clause.named_children:
                    resolved = self.resolve(TypeRef(base, source, bindings), depth + 1)
                    for name, symbol in resolved.properties.items():
                        inherited.setdefault(name, symbol)
        return ResolvedType(text=self.render(ref, depth), properties={**inherited, **properties})

    def _members(self, ref: TypeRef) -> dict[str, PropertySymbol]:
        properties: dict[str, PropertySymbol] = {}
        for member in ref.node.named_children:
            if member.type not in ("property_signature", "method_signature"):
                continue
            name_node = member.child_by_field_name("name")
            if name_node is None or name_node.type == "computed_property_name":
                continue
            name = string_value(name_node) if name_node.type == "string" else node_text(name_node)
            if member.type == "method_signature":
                properties[name] = PropertySymbol(name, declaration=member, type_text=collapse_whitespace(node_text(member)))
                continue
            annotation = member.child_by_field_name("type")
            type_node = first_named_child(annotation) if annotation is not None else None
            properties[name] = PropertySymbol(
                name,
                declaration=member,
                type_ref=ref.with_node(type_node) if type_node is not None else None,
            )
        return properties

    def _resolve_intersection(self, ref: TypeRef, depth: int) -> ResolvedType:
        parts = [self.resolve(ref.with_node(part), depth + 1) for part in ref.node.named_children]
        properties: dict[str, PropertySymbol] = {}
        for part in parts:
            for name, symbol in part.properties.items():
                existing = properties.get(name)
                if existing is None:
                    properties[name] = symbol
                    continue
                text = f"{self.property_type_text(existing)} & {self.property_type_text(symbol)}"
                properties[name] = PropertySymbol(name, type_text=text)
        return ResolvedType(text=" & ".join(part.text for part in parts), properties=properties)

    def _resolve_union(self, ref: TypeRef, depth: int) -> ResolvedType:
        parts = [self.resolve(ref.with_node(part), depth + 1) for part in ref.node.named_children]
        text = " | ".join(part.text for part in parts)
        if not parts:
            return ResolvedType(text=text)
        common = [name for name in parts[0].properties if all(name in part.properties for part in parts[1:])]
        properties: dict[str, PropertySymbol] = {}
        for name in common:
            symbols = [part.properties[name] for part in parts]
            texts = list(dict.fromkeys(self.property_type_text(symbol) for symbol in symbols))
            properties[name] = symbols[0] if len(texts) == 1 else PropertySymbol(name, type_text=" | ".join(texts))
        return ResolvedType(text=text, properties=properties)

    # -- rendering --------------------------------------------------------------

    def render(self, ref: TypeRef, depth: int = 0) -> str:
        """Render a type to text, expanding aliases and generic bindings."""
        node = ref.node
        if depth > MAX_DEPTH:
            return collapse_whitespace(node_text(node))

        if node.type == "type_identifier":
            name = node_text(node)
            if name in ref.bindings:
                return self.render(ref.bindings[name], depth + 1)
            alias = self._alias_value(ref.source, name, [])
            return self.render(alias, depth + 1) if alias is not None else name

        if node.type == "generic_type":
            name_node = node.child_by_field_name("name")
            args = self._type_arguments(ref)
            if name_node is None:
                return collapse_whitespace(node_text(node))
            name = node_text(name_node)
            if name_node.type == "type_identifier" and name not in ref.bindings:
                alias = self._alias_value(ref.source, name, args)
                if alias is not None:
                    return self.render(alias, depth + 1)
            return f"{name}<{', '.join(self.render(arg, depth + 1) for arg in args)}>"

        return collapse_whitespace(node_text(node))

    def _alias_value(self, source: SourceFile, name: str, args: list[TypeRef]) -> TypeRef | None:
        for declaration, declared_in in self.lookup_type(source, name):
            if declaration.type != "type_alias_declaration":
                return None
            value = declaration.child_by_field_name("value")
            if value is not None:
                return TypeRef(value, declared_in, self._bind(declaration, declared_in, args))
        return None

    def property_type_text(self, symbol: PropertySymbol) -> str:
        if symbol.type_text is not None:
            return symbol.type_text
        if symbol.type_ref is not None:
            return self.render(symbol.type_ref)
        return "any"

    # -- parameters ---------------------------------------------------------------

    def type_of_parameter(self, source: SourceFile, parameter: Node) -> ResolvedType | None:
        """Resolve a formal parameter from its annotation, else its default value."""
        annotation = parameter.child_by_field_name("type")
        type_node = first_named_child(annotation) if annotation is not None else None
        if type_node is not None:
            return self.resolve(TypeRef(type_node, source))
        default = parameter.child_by_field_name("value")
        if default is not None:
            return self.infer_expression(source, default)
        return None

    def infer_expression(self, source: SourceFile, node: Node, depth: int = 0) -> ResolvedType:
        if node.type == "parenthesized_expression":
            inner = first_named_child(node)
            if inner is not None and depth < MAX_DEPTH:
                return self.infer_expression(source, inner, depth + 1)
        if node.type == "object" and depth < MAX_DEPTH:
            properties: dict[str, PropertySymbol] = {}
            for member in node.named_children:
                if member.type == "pair":
                    key = member.child_by_field_name("key")
                    value = member.child_by_field_name("value")
                    if key is None or value is None or key.type == "computed_property_name":
                        continue
                    name = string_value(key) if key.type == "string" else node_text(key)
                    properties[name] = PropertySymbol(name, type_text=self.infer_expression(source, value, depth + 1).text)
                elif member.type == "shorthand_property_identifier":
                    name = node_text(member)
                    properties[name] = PropertySymbol(name, type_text="any")
            body = "; ".join(f"{name}: {self.property_type_text(symbol)}" for name, symbol in properties.items())
            return ResolvedType(text=f"{{ {body}; }}" if body else "{}", properties=properties)
        return ResolvedType(text=self._infer_text(source, node, depth))

    def _infer_text(self, source: SourceFile, node: Node, depth: int) -> str:
        kind = node.type
        if kind in ("string", "template_string"):
            return "string"
        if kind == "number":
            return "number"
        if kind in ("true", "false"):
            return "boolean"
        if kind in ("null", "undefined"):
            return kind
        if kind == "as_expression":
            named = [child for child in node.named_children if child.type != "comment"]
            if len(named) == 2:
                return self.render(TypeRef(named[1], source))
            if named and depth < MAX_DEPTH:
                return self.infer_expression(source, named[0], depth + 1).text
        if kind == "satisfies_expression" and depth < MAX_DEPTH:
            expression = first_named_child(node)
            if expression is not None:
                return self.infer_expression(source, expression, depth + 1).text
        if kind == "new_expression":
            constructor = node.child_by_field_name("constructor")
            if constructor is not None and node_text(constructor) == "Promise":
                return "Promise<any>"
        if kind == "call_expression":
            return self._infer_call(source, node, depth)
        if kind == "object" and depth < MAX_DEPTH:
            return self.infer_expression(source, node, depth + 1).text
        return "any"

    def _infer_call(self, source: SourceFile, node: Node, depth: int) -> str:
        function = node.child_by_field_name("function")
        if function is None or function.type != "member_expression":
            return "any"
        target = function.child_by_field_name("object")
        method = function.child_by_field_name("property")
        if target is None or method is None or node_text(target) != "Promise":
            return "any"
        if node_text(method) == "reject":
            return "Promise<never>"
        if node_text(method) != "resolve":
            return "Promise<any>"
        arguments = node.child_by_field_name("arguments")
        first = first_named_child(arguments) if arguments is not None else None
        if first is None:
            return "Promise<void>"
        inner = self.infer_expression(source, first, depth + 1).text if depth < MAX_DEPTH else "any"
        return f"Promise<{inner}>"


# ---------------------------------------------------------------------------
# Property type strategies
# ---------------------------------------------------------------------------

PropertyTypeStrategy = Callable[[TypeResolver, ResolvedType, PropertySymbol], str | None]


def type_from_declaration(resolver: TypeResolver, owner: ResolvedType, symbol: PropertySymbol) -> str | None:
    """Type of the member's own annotation, when it has a declaration node.

    A property signature written without an annotation is implicitly ``any``.
    """
    if symbol.declaration is None:
        return None
    if symbol.type_ref is None:
        return "any" if symbol.declaration.type == "property_signature" else None
    return resolver.render(symbol.type_ref) or None


def type_at_location(resolver: TypeResolver, owner: ResolvedType, symbol: PropertySymbol) -> str | None:
    """Type of the member as seen through the owning type.

    Covers synthetic members that have no declaration node: ``Record`` keys,
    merged union and intersection members, and inferred default values.
    """
    member = owner.get_property(symbol.name)
    if member is None:
        return None
    if member.type_text is not None:
        return member.type_text or None
    if member.type_ref is not None:
        return resolver.render(member.type_ref) or None
    return None


PROPERTY_TYPE_STRATEGIES: tuple[PropertyTypeStrategy, ...] = (type_from_declaration, type_at_location)


def resolve_property_type(
    resolver: TypeResolver,
    owner: ResolvedType,
    symbol: PropertySymbol,
    strategies: tuple[PropertyTypeStrategy, ...] = PROPERTY_TYPE_STRATEGIES,
) -> str | None:
    for strategy in strategies:
        text = strategy(resolver, owner, symbol)
        if text:
            return text
    return None
