"""Dispatch configured rules to their handlers and aggregate the results."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from biome_rules.config.loader import normalize_rule_config
from biome_rules.core.ports.rule import RuleHandler
from biome_rules.models import RuleConfig, RuleContext, RuleMeta, RuleRun, RunResult, RunSummary
from biome_rules.rules import get_rule_handler, get_rule_meta

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedRule:
    name: str
    config: RuleConfig
    handler: RuleHandler
    meta: RuleMeta | None


def plan_rules(rules: Mapping[str, Any]) -> list[PlannedRule]:
    """Resolve configured rules to handlers, in declaration order.

    Rules set to ``off`` are dropped. Unknown rules and malformed settings are
    logged and dropped.
    """
    planned: list[PlannedRule] = []
    for name, setting in rules.items():
        if setting == "off":
            continue
        try:
            config = normalize_rule_config(setting)
        except ValueError as exc:
            logger.warning("Ignoring rule %s: %s", name, exc)
            continue
        if config.level == "off":
            continue
        handler = get_rule_handler(name)
        if handler is None:
            logger.warning("Unknown rule: %s", name)
            continue
        planned.append(PlannedRule(name=name, config=config, handler=handler, meta=get_rule_meta(name)))
    return planned


def run_rule(rule: PlannedRule, cwd: str | Path, ts_config_path: str | None = None, fix: bool = False) -> RuleRun:
    context = RuleContext(cwd=Path(cwd), ts_config_path=ts_config_path, options=rule.config.options, fix=fix)
    try:
        result = rule.handler(context)
    except Exception as exc:
        logger.exception("Error running %s", rule.name)
        result = RunResult(success=False, message=f"Error: {exc}")
    return RuleRun(rule=rule.name, result=result)


def run_rules(
    rules: Mapping[str, Any],
    cwd: str | Path,
    ts_config_path: str | None = None,
    fix: bool = False,
) -> list[RuleRun]:
    """Run every enabled rule one after another.

    Rules run sequentially since a later rule may read files an earlier
    rule's auto-fix rewrote.
    """
    return [run_rule(rule, cwd, ts_config_path, fix) for rule in plan_rules(rules)]


def summarize(runs: list[RuleRun]) -> RunSummary:
    return RunSummary(
        success=all(run.result.success for run in runs),
        total_violations=sum(len(run.result.violations) for run in runs),
        rule_count=len(runs),
    )
