from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Severity = Literal["error", "warning"]
RuleLevel = Literal["off", "warn", "error"]

# Raw rule setting as written in biome.json: a bare level or [level, options].
RuleSetting = str | list[Any] | tuple[Any, ...]

DEFAULT_ROUTE_PATTERN = "**/app/api/**/route.ts"


class Position(BaseModel):
    line: int
    column: int


class Violation(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    file_path: str
    line: int
    column: int
    message: str
    severity: Severity = "error"
    fixable: bool = False
    suggested_fix: str | None = None


class RunResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    violations: list[Violation] = Field(default_factory=list)
    message: str = ""


class RuleOptions(BaseModel):
    model_config = ConfigDict(extra="allow")

    pattern: str = DEFAULT_ROUTE_PATTERN
    fix: bool = False


class RuleConfig(BaseModel):
    level: RuleLevel
    options: RuleOptions = Field(default_factory=RuleOptions)


class RuleContext(BaseModel):
    cwd: Path
    ts_config_path: str | None = None
    options: RuleOptions = Field(default_factory=RuleOptions)
    fix: bool = False

    @property
    def fix_enabled(self) -> bool:
        return self.fix or self.options.fix


class RuleRun(BaseModel):
    rule: str
    result: RunResult


class RunSummary(BaseModel):
    success: bool
    total_violations: int
    rule_count: int


class RuleMeta(BaseModel):
    model_config = ConfigDict(extra="allow")

    description: str = ""
    category: str | None = None
    fixable: bool = False
    docs: str | None = None


class RuleRegistryData(BaseModel):
    rules: dict[str, RuleMeta] = Field(default_factory=dict)
    presets: dict[str, dict[str, Any]] = Field(default_factory=dict)
