"""
Versioned calculator tables.

Tax-year constants (single filer) and budget allocation rules. These are
immutable values passed into the calculation functions; pick one at startup
from rules.yaml rather than mutating them.
"""

from __future__ import annotations

import math

from src.components.calculator.models import (
    AllocationRule,
    CategoryRule,
    SubcategoryRule,
    TaxBracket,
    TaxYearConfig,
)

# --- Tax Years ---

TAX_YEAR_2024 = TaxYearConfig(
    year=2024,
    standard_deduction=14600.0,
    brackets=(
        TaxBracket(0, 11600, 0.10),
        TaxBracket(11600, 47150, 0.12),
        TaxBracket(47150, 100525, 0.22),
        TaxBracket(100525, 191950, 0.24),
        TaxBracket(191950, 243725, 0.32),
        TaxBracket(243725, 609350, 0.35),
        TaxBracket(609350, math.inf, 0.37),
    ),
    ss_wage_base=168600.0,
)

TAX_YEAR_2025 = TaxYearConfig(
    year=2025,
    standard_deduction=15750.0,
    brackets=(
        TaxBracket(0, 11925, 0.10),
        TaxBracket(11925, 48475, 0.12),
        TaxBracket(48475, 103350, 0.22),
        TaxBracket(103350, 197300, 0.24),
        TaxBracket(197300, 250525, 0.32),
        TaxBracket(250525, 626350, 0.35),
        TaxBracket(626350, math.inf, 0.37),
    ),
    ss_wage_base=176100.0,
)

TAX_YEARS: dict[int, TaxYearConfig] = {
    2024: TAX_YEAR_2024,
    2025: TAX_YEAR_2025,
}

DEFAULT_TAX_YEAR = TAX_YEAR_2024


def get_tax_year(year: int) -> TaxYearConfig:
    """Return the tax table for a year. Raises KeyError if not tabulated."""
    try:
        return TAX_YEARS[year]
    except KeyError:
        raise KeyError(f"No tax table for {year}; available: {sorted(TAX_YEARS)}") from None


# --- Allocation Rules ---

RULE_50_30_20 = AllocationRule(
    name="50/30/20",
    categories=(
        CategoryRule(
            "Needs",
            50,
            (
                SubcategoryRule("Housing", 25),
                SubcategoryRule("Utilities", 5),
                SubcategoryRule("Groceries", 10),
                SubcategoryRule("Transportation", 10),
            ),
        ),
        CategoryRule(
            "Wants",
            30,
            (
                SubcategoryRule("Dining Out", 5),
                SubcategoryRule("Subscriptions", 5),
                SubcategoryRule("Travel/Fun", 10),
                SubcategoryRule("Personal", 10),
            ),
        ),
        CategoryRule(
            "Savings",
            20,
            (
                SubcategoryRule("Emergency Fund", 10),
                SubcategoryRule("Investments", 5),
                SubcategoryRule("Goals", 5),
            ),
        ),
    ),
)

# High cost-of-living variant
RULE_60_20_20 = AllocationRule(
    name="60/20/20",
    categories=(
        CategoryRule(
            "Needs",
            60,
            (
                SubcategoryRule("Housing", 33),
                SubcategoryRule("Utilities", 6),
                SubcategoryRule("Groceries", 11),
                SubcategoryRule("Transportation", 10),
            ),
        ),
        CategoryRule(
            "Wants",
            20,
            (
                SubcategoryRule("Dining Out", 4),
                SubcategoryRule("Subscriptions", 3),
                SubcategoryRule("Travel/Fun", 7),
                SubcategoryRule("Personal", 6),
            ),
        ),
        CategoryRule(
            "Savings",
            20,
            (
                SubcategoryRule("Emergency Fund", 10),
                SubcategoryRule("Investments", 5),
                SubcategoryRule("Goals", 5),
            ),
        ),
    ),
)

ALLOCATION_RULES: dict[str, AllocationRule] = {
    RULE_50_30_20.name: RULE_50_30_20,
    RULE_60_20_20.name: RULE_60_20_20,
}

DEFAULT_ALLOCATION_RULE = RULE_50_30_20


def get_allocation_rule(name: str) -> AllocationRule:
    """Return an allocation rule by name (e.g. "50/30/20")."""
    try:
        return ALLOCATION_RULES[name]
    except KeyError:
        raise KeyError(
            f"Unknown allocation rule '{name}'; available: {sorted(ALLOCATION_RULES)}"
        ) from None
