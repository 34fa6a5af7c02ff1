from biome_rules.config.loader import load_rule_registry
from biome_rules.core.ports.rule import RuleHandler
from biome_rules.models import RuleMeta
from biome_rules.rules import nextjs_promise_params

RULE_HANDLERS: dict[str, RuleHandler] = {
    nextjs_promise_params.RULE_ID: nextjs_promise_params.evaluate,
}


def get_rule_handler(rule_name: str) -> RuleHandler | None:
    return RULE_HANDLERS.get(rule_name)


def has_rule(rule_name: str) -> bool:
    return rule_name in load_rule_registry().rules or rule_name in RULE_HANDLERS


def get_rule_meta(rule_name: str) -> RuleMeta | None:
    return load_rule_registry().rules.get(rule_name)


def get_available_rules() -> list[str]:
    """Rule names known to the registry or backed by a handler."""
    return sorted({*load_rule_registry().rules, *RULE_HANDLERS})


__all__ = [
    "RULE_HANDLERS",
    "get_available_rules",
    "get_rule_handler",
    "get_rule_meta",
    "has_rule",
]
