"""JSON-with-comments reading for ``biome.json`` and ``tsconfig.json``.

Both files are routinely written with ``//`` comments and trailing commas,
which ``json.loads`` rejects. The document is parsed with the tree-sitter JSON
grammar (comments are extras there), stray trailing commas are dropped, and
the syntax tree is converted to plain Python values.
"""

import json
from pathlib import Path
from typing import Any

from tree_sitter import Node

from biome_rules.core.ast import iter_errors, node_text, parse_source


class JsoncError(ValueError):
    pass


def _strip_trailing_commas(source_bytes: bytes) -> bytes:
    tree = parse_source(source_bytes, "json")
    spans: list[tuple[int, int]] = []
    for error in iter_errors(tree.root_node):
        text = node_text(error).strip()
        if text and set(text) == {","}:
            spans.append((error.start_byte, error.end_byte))
    for start, end in sorted(spans, reverse=True):
        source_bytes = source_bytes[:start] + source_bytes[end:]
    return source_bytes


def _to_python(node: Node) -> Any:
    kind = node.type
    if kind == "object":
        result: dict[str, Any] = {}
        for pair in node.named_children:
            if pair.type != "pair":
                continue
            key = pair.child_by_field_name("key")
            value = pair.child_by_field_name("value")
            if key is None or value is None:
                continue
            result[_to_python(key)] = _to_python(value)
        return result
    if kind == "array":
        return [_to_python(child) for child in node.named_children if child.type != "comment"]
    if kind in ("string", "number"):
        return json.loads(node_text(node))
    if kind == "true":
        return True
    if kind == "false":
        return False
    if kind == "null":
        return None
    raise JsoncError(f"Unexpected JSON node '{kind}' at line {node.start_point[0] + 1}")


def loads(text: str) -> Any:
    source_bytes = _strip_trailing_commas(text.encode("utf-8"))
    tree = parse_source(source_bytes, "json")
    root = tree.root_node
    for error in iter_errors(root):
        raise JsoncError(f"Malformed JSON at line {error.start_point[0] + 1}, column {error.start_point[1] + 1}")
    values = [child for child in root.named_children if child.type != "comment"]
    if not values:
        raise JsoncError("Empty JSON document")
    if len(values) > 1:
        raise JsoncError("JSON document has more than one top-level value")
    return _to_python(values[0])


def load_file(path: str | Path) -> Any:
    return loads(Path(path).read_text(encoding="utf-8"))
