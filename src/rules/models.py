from pydantic import BaseModel, Field, field_validator, model_validator

from src.components.calculator import ALLOCATION_RULES, TAX_YEARS
from src.components.drip import DRIP_SEQUENCE


class ProjectRules(BaseModel):
    slug: str
    rules_version: str
    required_sections: list[str]

class SiteRules(BaseModel):
    name: str
    base_url: str
    support_email: str | None = None

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

class CalculatorRules(BaseModel):
    tax_year: int
    allocation_rule: str = "50/30/20"

    @field_validator("tax_year")
    @classmethod
    def known_tax_year(cls, v: int) -> int:
        if v not in TAX_YEARS:
            raise ValueError(f"tax_year {v} has no table; available: {sorted(TAX_YEARS)}")
        return v

    @field_validator("allocation_rule")
    @classmethod
    def known_allocation_rule(cls, v: str) -> str:
        if v not in ALLOCATION_RULES:
            raise ValueError(f"unknown allocation_rule '{v}'")
        return v

class DripRules(BaseModel):
    enabled: bool = True
    interval_seconds: int = Field(3600, gt=0)
    start_delay_seconds: int = Field(30, ge=0)
    batch_limit: int = Field(50, gt=0)
    delay_days: list[int]

    @model_validator(mode="after")
    def check_delays(self) -> "DripRules":
        if len(self.delay_days) != len(DRIP_SEQUENCE):
            raise ValueError(
                "delay_days must list one delay per sequence step "
                f"(expected {len(DRIP_SEQUENCE)}, got {len(self.delay_days)})"
            )
        if any(d < 0 for d in self.delay_days):
            raise ValueError("delay_days cannot be negative")
        if self.delay_days != sorted(self.delay_days):
            raise ValueError("delay_days must be non-decreasing")
        return self

class RateLimitWindow(BaseModel):
    window_seconds: int = Field(gt=0)
    max_requests: int = Field(gt=0)

class RateLimitRules(BaseModel):
    post: RateLimitWindow
    subscribe: RateLimitWindow
    login: RateLimitWindow = RateLimitWindow(window_seconds=300, max_requests=5)

class OpsRules(BaseModel):
    data_dir_required: bool
    required_env: list[str]

class Rules(BaseModel):
    project: ProjectRules
    site: SiteRules
    calculators: CalculatorRules
    drip: DripRules
    rate_limits: RateLimitRules
    ops: OpsRules
