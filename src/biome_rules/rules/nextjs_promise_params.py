from biome_rules.core.checker import check_nextjs_params
from biome_rules.models import RuleContext, RunResult

RULE_ID = "@gftdcojp/nextjs-require-promise-params"


def evaluate(context: RuleContext) -> RunResult:
    return check_nextjs_params(
        cwd=context.cwd,
        ts_config_path=context.ts_config_path,
        pattern=context.options.pattern,
        fix=context.fix_enabled,
    )
