"""
Calculator component models.

Result types, versioned configuration values and input/output commands for
the financial calculation engine. All money fields are whole currency units.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

# --- Configuration Values ---


@dataclass(frozen=True)
class TaxBracket:
    """One marginal bracket: income in [low, high) is taxed at rate."""

    low: float
    high: float
    rate: float


@dataclass(frozen=True)
class TaxYearConfig:
    """
    Tax-year specific constants for a single filer.

    Passed into the tax calculation so several years can be evaluated side
    by side. Brackets must be ordered and contiguous.
    """

    year: int
    standard_deduction: float
    brackets: tuple[TaxBracket, ...]
    ss_wage_base: float
    ss_rate: float = 0.062
    medicare_rate: float = 0.0145

    def __post_init__(self) -> None:
        if not self.brackets:
            raise ValueError("At least one tax bracket is required")
        if self.brackets[0].low != 0:
            raise ValueError("First tax bracket must start at zero")
        for prev, nxt in zip(self.brackets, self.brackets[1:]):
            if nxt.low != prev.high:
                raise ValueError(
                    f"Tax brackets must be contiguous: {prev.high} != {nxt.low}"
                )


@dataclass(frozen=True)
class SubcategoryRule:
    """Fixed share of net monthly income for a budget line."""

    name: str
    percent: int


@dataclass(frozen=True)
class CategoryRule:
    """Top-level budget category with its fixed sub-splits."""

    name: str
    percent: int
    subcategories: tuple[SubcategoryRule, ...]

    def __post_init__(self) -> None:
        total = sum(s.percent for s in self.subcategories)
        if total != self.percent:
            raise ValueError(
                f"Subcategories of '{self.name}' sum to {total}%, expected {self.percent}%"
            )


@dataclass(frozen=True)
class AllocationRule:
    """
    Percentage table for a budget allocation (e.g. 50/30/20).

    Weekly and daily figures divide the monthly amount by fixed
    approximations, not calendar-exact counts.
    """

    name: str
    categories: tuple[CategoryRule, ...]
    weeks_per_month: float = 4.33
    days_per_month: float = 30

    def __post_init__(self) -> None:
        total = sum(c.percent for c in self.categories)
        if total != 100:
            raise ValueError(f"Allocation rule '{self.name}' sums to {total}%, expected 100%")


@dataclass(frozen=True)
class RentVsBuyAssumptions:
    """Fixed market assumptions for the rent-vs-buy comparison."""

    property_tax_rate: float = 0.011  # annual, of home price
    monthly_insurance: float = 100
    maintenance_rate: float = 0.01  # annual, of home price
    pmi_rate: float = 0.005  # annual, of loan
    pmi_threshold_percent: float = 20
    principal_share: float = 0.30  # share of early mortgage payments going to principal
    invest_return: float = 0.07  # annual return on the invested down payment
    mortgage_months: int = 360


@dataclass(frozen=True)
class GigAssumptions:
    mileage_rate: float = 0.67  # per mile
    self_employment_tax_rate: float = 0.153
    work_hours_per_year: int = 2080


# --- Result Types ---


@dataclass(frozen=True)
class IncomeProjection:
    """Annualized income projected from year-to-date pay."""

    gross_annual: int
    gross_monthly: int
    gross_weekly: int
    gross_daily: int
    days_worked: int
    max_auto_payment: int
    max_rent: int


@dataclass(frozen=True)
class PITIBreakdown:
    """Monthly principal+interest, property tax, insurance and PMI."""

    principal_interest: int
    property_tax: int
    insurance: int
    pmi: int
    total_monthly: int


@dataclass(frozen=True)
class MortgageResult:
    home_price: float
    down_payment: int
    down_payment_percent: float
    loan_amount: int
    interest_rate: float
    term_years: int
    piti: PITIBreakdown
    total_payments: int
    total_interest: int


@dataclass(frozen=True)
class HousingAffordability:
    """Front-end ratio check (28% rule) for a mortgage."""

    housing_ratio: float
    affordable: bool


@dataclass(frozen=True)
class TaxBreakdown:
    gross_annual: int
    federal_tax: int
    state_tax: int
    fica: int
    social_security: int
    medicare: int
    retirement_401k: int
    health_insurance: int
    total_deductions: int
    net_annual: int
    net_monthly: int
    effective_tax_rate: float
    tax_year: int


@dataclass(frozen=True)
class BudgetSubcategory:
    name: str
    percent: int
    monthly: int


@dataclass(frozen=True)
class BudgetCategory:
    name: str
    percent: int
    monthly: int
    weekly: int
    daily: int
    subcategories: tuple[BudgetSubcategory, ...]


@dataclass(frozen=True)
class BudgetAllocation:
    """Net monthly income split by an allocation rule."""

    net_monthly: int
    rule: str
    categories: tuple[BudgetCategory, ...]

    def category(self, name: str) -> BudgetCategory:
        """Look up a category by name (case-insensitive)."""
        for c in self.categories:
            if c.name.lower() == name.lower():
                return c
        raise KeyError(name)

    @property
    def needs(self) -> BudgetCategory:
        return self.category("Needs")

    @property
    def wants(self) -> BudgetCategory:
        return self.category("Wants")

    @property
    def savings(self) -> BudgetCategory:
        return self.category("Savings")


@dataclass(frozen=True)
class AutoLoanResult:
    loan_amount: int
    monthly_payment: int
    term_months: int
    interest_rate: float
    total_payments: int
    total_interest: int
    true_cost: int
    max_payment: int  # 12% of gross monthly income, 0 when income unknown
    payment_percent: float  # monthly payment as % of max payment
    affordable: bool


@dataclass(frozen=True)
class CompoundGrowthResult:
    future_value: int
    total_invested: int
    interest_earned: int
    growth_multiple: float
    years: int


@dataclass(frozen=True)
class InflationResult:
    original: int
    future_value: int
    lost: int
    retained_percent: int
    years: int


@dataclass(frozen=True)
class RentVsBuyResult:
    buy_wins: bool
    savings: int
    years: int
    buy_monthly: int
    down_payment: int
    buy_total_paid: int
    home_value: int
    equity: int
    buy_net_cost: int
    rent_start: int
    rent_end: int
    rent_total: int
    investment_returns: int
    rent_net_cost: int
    price_to_rent: float


@dataclass(frozen=True)
class GigIncomeResult:
    total_ytd: int
    gross_annual: int
    gross_monthly: int
    days_worked: int
    mileage_deduction: int
    other_expenses: int
    total_expenses: int
    self_employment_tax: int
    net_after_expenses: int
    net_after_tax: int
    net_monthly: int
    effective_hourly: int


@dataclass(frozen=True)
class IncomeStream:
    name: str
    annual: int
    monthly: int
    percent: int


@dataclass(frozen=True)
class IncomeStreamsSummary:
    streams: tuple[IncomeStream, ...]
    total_annual: int
    total_monthly: int
    total_weekly: int

    @property
    def stream_count(self) -> int:
        return len(self.streams)


# --- Input Commands ---


@dataclass(frozen=True)
class IncomeInput:
    ytd_income: float
    start_date: date
    check_date: date


@dataclass(frozen=True)
class LoanAmountInput:
    monthly_payment: float
    annual_rate_percent: float
    term_months: int


@dataclass(frozen=True)
class MonthlyPaymentInput:
    principal: float
    annual_rate_percent: float
    term_months: int


@dataclass(frozen=True)
class MortgageInput:
    home_price: float
    down_payment_percent: float
    interest_rate_percent: float
    term_years: int = 30
    property_tax_rate_percent: float = 1.1
    annual_insurance: float = 1200
    annual_income: float = 0  # Optional, enables the 28% check


@dataclass(frozen=True)
class TaxInput:
    gross_annual: float
    retirement_401k_percent: float = 0
    health_insurance_annual: float = 0
    state_tax_rate_percent: float = 0


@dataclass(frozen=True)
class BudgetInput:
    net_monthly: float


@dataclass(frozen=True)
class AutoLoanInput:
    vehicle_price: float
    down_payment: float = 0
    trade_in: float = 0
    annual_rate_percent: float = 0
    term_months: int = 60
    monthly_income: float = 0


@dataclass(frozen=True)
class CompoundInput:
    principal: float
    monthly_contribution: float
    annual_rate_percent: float
    years: int


@dataclass(frozen=True)
class InflationInput:
    amount: float
    annual_rate_percent: float
    years: int


@dataclass(frozen=True)
class RentVsBuyInput:
    home_price: float
    down_payment_percent: float
    mortgage_rate_percent: float
    home_appreciation_percent: float
    monthly_rent: float
    rent_increase_percent: float
    years: int = 5


@dataclass(frozen=True)
class GigIncomeInput:
    gig_incomes: tuple[float, ...]
    start_date: date
    check_date: date
    miles_driven: float = 0
    other_expenses: float = 0


@dataclass(frozen=True)
class IncomeStreamsInput:
    streams: tuple[tuple[str, float], ...]  # (name, annual amount)


CalculationInput = (
    IncomeInput
    | LoanAmountInput
    | MonthlyPaymentInput
    | MortgageInput
    | TaxInput
    | BudgetInput
    | AutoLoanInput
    | CompoundInput
    | InflationInput
    | RentVsBuyInput
    | GigIncomeInput
    | IncomeStreamsInput
)


# --- Output ---


@dataclass(frozen=True)
class CalculatorValidationError:
    """Invalid input detail returned to callers."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class CalculationOutput:
    """Output from a calculation command."""

    success: bool
    result: object | None = None
    affordability: HousingAffordability | None = None
    errors: list[CalculatorValidationError] = field(default_factory=list)


# --- Error Types ---


class CalculatorError(Exception):
    """Base calculator error."""

    pass


class InvalidInputError(CalculatorError):
    """
    Input outside the domain of a calculation.

    Covers non-positive or non-finite amounts, terms that are non-positive
    or too long, a check date before the effective start date, and inputs
    whose result leaves float range.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(message)
