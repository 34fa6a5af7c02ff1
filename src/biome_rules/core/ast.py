from collections.abc import Iterator
from functools import cache
from typing import cast

from tree_sitter import Node, Parser, Tree
from tree_sitter_language_pack import SupportedLanguage, get_parser

from biome_rules.core.languages import normalize_language
from biome_rules.models import Position


@cache
def _parser_for(language: str) -> Parser:
    return get_parser(cast(SupportedLanguage, language))


def parse_source(source_bytes: bytes, language: str) -> Tree:
    return _parser_for(normalize_language(language)).parse(source_bytes)


def node_text(node: Node) -> str:
    return (node.text or b"").decode("utf-8")


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def string_value(node: Node) -> str:
    """Return the unquoted contents of a string literal node."""
    text = node_text(node)
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'`":
        return text[1:-1]
    return text


def named_children_of_type(node: Node, *types: str) -> Iterator[Node]:
    for child in node.named_children:
        if child.type in types:
            yield child


def first_named_child(node: Node) -> Node | None:
    for child in node.named_children:
        if child.type != "comment":
            return child
    return None


def position_of(source_bytes: bytes, node: Node) -> Position:
    """1-based line and character column of a node's first token."""
    row, byte_column = node.start_point
    line_start = node.start_byte - byte_column
    prefix = source_bytes[line_start : node.start_byte].decode("utf-8", errors="replace")
    return Position(line=row + 1, column=len(prefix) + 1)


def iter_errors(node: Node) -> Iterator[Node]:
    """Yield ERROR and MISSING nodes under ``node``."""
    if not node.has_error:
        return
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            yield current
            continue
        stack.extend(child for child in reversed(current.children) if child.has_error or child.is_missing)
