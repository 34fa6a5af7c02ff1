"""Rewrite ``params`` annotations of route handlers to ``Promise<...>``."""

import logging
from dataclasses import dataclass

from tree_sitter import Node

from biome_rules.core.ast import first_named_child, named_children_of_type, node_text, string_value
from biome_rules.core.project import SourceFile, TextEdit

logger = logging.getLogger(__name__)

WRAPPER = "Promise"
PARAMS_PROPERTY = "params"


@dataclass(frozen=True)
class ParamsFix:
    applied: bool
    edit: TextEdit | None = None
    reason: str = ""


def _declined(reason: str) -> ParamsFix:
    return ParamsFix(applied=False, reason=reason)


def _params_member(object_type: Node) -> Node | None:
    for member in named_children_of_type(object_type, "property_signature"):
        name = member.child_by_field_name("name")
        if name is None:
            continue
        text = string_value(name) if name.type == "string" else node_text(name)
        if text == PARAMS_PROPERTY:
            return member
    return None


def plan_params_fix(parameter: Node) -> ParamsFix:
    """Compute the edit wrapping the ``params`` member type of ``parameter``.

    Only inline object-literal annotations are rewritten. A parameter typed
    through a named alias or interface is declined and the shared declaration
    is left untouched.
    """
    annotation = parameter.child_by_field_name("type")
    type_node = first_named_child(annotation) if annotation is not None else None
    if type_node is None:
        return _declined("parameter has no type annotation")
    if type_node.type != "object_type":
        return _declined(f"parameter type is a {type_node.type}, not an inline object type")

    member = _params_member(type_node)
    if member is None:
        return _declined("no params member")
    member_annotation = member.child_by_field_name("type")
    member_type = first_named_child(member_annotation) if member_annotation is not None else None
    if member_type is None:
        return _declined("params member has no type annotation")

    original = node_text(member_type)
    if WRAPPER in original:
        return _declined(f"params is already wrapped in {WRAPPER}")

    edit = TextEdit(member_type.start_byte, member_type.end_byte, f"{WRAPPER}<{original}>")
    return ParamsFix(applied=True, edit=edit)


def fix_nextjs_params(source: SourceFile, function: Node, parameter: Node) -> bool:
    """Stage the ``Promise`` wrap on ``source``. Returns True when an edit was staged."""
    plan = plan_params_fix(parameter)
    if not plan.applied or plan.edit is None:
        name = function.child_by_field_name("name")
        logger.debug(
            "Not fixing %s in %s: %s",
            node_text(name) if name is not None else "<anonymous>",
            source.path,
            plan.reason,
        )
        return False
    source.stage_edit(plan.edit)
    return True
