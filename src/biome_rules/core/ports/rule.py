from typing import Protocol

from biome_rules.models import RuleContext, RunResult


class RuleHandler(Protocol):
    def __call__(self, context: RuleContext) -> RunResult: ...
