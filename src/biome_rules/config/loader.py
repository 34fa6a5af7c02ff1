"""Load ``biome.json`` with its ``biomeRules`` section and the rule registry."""

import logging
from functools import cache
from pathlib import Path
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from biome_rules.core import jsonc
from biome_rules.models import RuleConfig, RuleLevel, RuleOptions, RuleRegistryData, RuleSetting

logger = logging.getLogger(__name__)

PresetName = Literal["recommended", "strict", "all"]

_RULE_LEVELS: tuple[str, ...] = get_args(RuleLevel)


class BiomeConfig(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    schema_url: str | None = Field(default=None, alias="$schema")
    extends: list[str] | str | None = None
    linter: dict[str, Any] | None = None
    formatter: dict[str, Any] | None = None
    files: dict[str, Any] | None = None
    biome_rules: dict[str, Any] = Field(default_factory=dict, alias="biomeRules")


@cache
def load_rule_registry() -> RuleRegistryData:
    registry_path = Path(__file__).parent.parent / "rules" / "registry.json"
    return RuleRegistryData.model_validate(jsonc.load_file(registry_path))


def load_preset(preset: str) -> dict[str, Any]:
    return dict(load_rule_registry().presets.get(preset, {}))


def load_biome_config(config_path: str | Path) -> BiomeConfig:
    """Read a biome configuration; an unreadable file yields an empty config."""
    full_path = Path(config_path).resolve()
    try:
        data = jsonc.load_file(full_path)
        return BiomeConfig.model_validate(data)
    except (OSError, ValueError, ValidationError) as exc:
        logger.warning("Failed to load config from %s: %s", config_path, exc)
        return BiomeConfig()


def merge_biome_rules_config(config: BiomeConfig, preset: str | None = None) -> BiomeConfig:
    """Merge a preset's rule levels under the explicitly configured rules."""
    if not preset:
        return config
    merged = {**load_preset(preset), **config.biome_rules}
    return config.model_copy(update={"biome_rules": merged})


def normalize_rule_config(setting: RuleSetting) -> RuleConfig:
    """Normalize ``"error"`` or ``["error", {...}]`` into a RuleConfig.

    Items after the options object are ignored.
    """
    if isinstance(setting, str):
        level, options = setting, None
    elif isinstance(setting, list | tuple) and setting:
        level = setting[0]
        options = setting[1] if len(setting) > 1 else None
    else:
        raise ValueError(f"Invalid rule setting: {setting!r}")

    if level not in _RULE_LEVELS:
        raise ValueError(f"Invalid rule level {level!r}. Expected one of: {', '.join(_RULE_LEVELS)}")
    if options is not None and not isinstance(options, dict):
        raise ValueError(f"Rule options must be an object, got {type(options).__name__}")

    return RuleConfig(level=level, options=RuleOptions.model_validate(options or {}))
