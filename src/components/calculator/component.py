"""
Calculator component.

Functional core for the personal-finance calculators. Every function is
pure: numbers and dates in, a frozen result out. Parsing, default filling
and formatting belong to the HTTP layer.

Key behaviors:
- Monetary outputs are whole units, rounded half away from zero
- Tax tables and allocation rules are explicit values passed in
- Invalid input raises InvalidInputError; run() turns it into an output
  with errors instead of raising

Invariants:
- Mortgage total_monthly is the exact sum of its four PITI components
- Tax fica == social_security + medicare, net_annual == gross - deductions
- PMI applies iff down payment percent < 20
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date

from src.components.calculator.models import (
    AllocationRule,
    AutoLoanInput,
    AutoLoanResult,
    BudgetAllocation,
    BudgetCategory,
    BudgetInput,
    BudgetSubcategory,
    CalculationInput,
    CalculationOutput,
    CalculatorValidationError,
    CompoundGrowthResult,
    CompoundInput,
    GigAssumptions,
    GigIncomeInput,
    GigIncomeResult,
    HousingAffordability,
    IncomeInput,
    IncomeProjection,
    IncomeStream,
    IncomeStreamsInput,
    IncomeStreamsSummary,
    InflationInput,
    InflationResult,
    InvalidInputError,
    LoanAmountInput,
    MonthlyPaymentInput,
    MortgageInput,
    MortgageResult,
    PITIBreakdown,
    RentVsBuyAssumptions,
    RentVsBuyInput,
    RentVsBuyResult,
    TaxBreakdown,
    TaxInput,
    TaxYearConfig,
)
from src.components.calculator.tables import DEFAULT_ALLOCATION_RULE, DEFAULT_TAX_YEAR

# --- Constants ---

MAX_AUTO_PAYMENT_SHARE = 0.12  # of gross monthly income
MAX_RENT_SHARE = 0.30
PMI_ANNUAL_RATE = 0.005
PMI_THRESHOLD_PERCENT = 20
HOUSING_RATIO_LIMIT = 28.0
MAX_INCOME_STREAMS = 4
MAX_TERM_MONTHS = 600
MAX_TERM_YEARS = 50
MAX_HORIZON_YEARS = 100

DEFAULT_RENT_VS_BUY = RentVsBuyAssumptions()
DEFAULT_GIG = GigAssumptions()


# --- Rounding ---


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    if not math.isfinite(value):
        raise InvalidInputError("input", "Inputs produce a result that is out of range")
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def round_one_decimal(value: float) -> float:
    return round_half_away(value * 10) / 10


# --- Validation Helpers ---


def _require_finite(value: float, field: str) -> None:
    if not math.isfinite(value):
        raise InvalidInputError(field, f"{field} must be a finite number")


def _require_positive(value: float, field: str) -> None:
    _require_finite(value, field)
    if not value > 0:
        raise InvalidInputError(field, f"{field} must be greater than zero")


def _require_non_negative(value: float, field: str) -> None:
    _require_finite(value, field)
    if value < 0:
        raise InvalidInputError(field, f"{field} cannot be negative")


def _require_term(value: int, field: str, maximum: int) -> None:
    if value <= 0:
        raise InvalidInputError(field, f"{field} must be a positive number of periods")
    if value > maximum:
        raise InvalidInputError(field, f"{field} cannot exceed {maximum}")


def _monthly_rate(annual_rate_percent: float) -> float:
    _require_non_negative(annual_rate_percent, "annual_rate_percent")
    return annual_rate_percent / 100 / 12


def _growth_factor(rate: float, periods: int, field: str) -> float:
    """(1 + rate) ** periods, as an input error when it leaves float range."""
    try:
        return (1 + rate) ** periods
    except OverflowError:
        raise InvalidInputError(field, f"{field} is too large for this term") from None


# --- Income Projection ---


def project_income(ytd_income: float, start_date: date, check_date: date) -> IncomeProjection:
    """
    Annualize year-to-date income.

    The effective start is clamped to January 1 of the check date's year and
    the day count is inclusive of both ends.

    Raises:
        InvalidInputError: non-positive income or check date before the
            effective start.
    """
    _require_positive(ytd_income, "ytd_income")

    effective_start = max(start_date, date(check_date.year, 1, 1))
    days_worked = (check_date - effective_start).days + 1
    if days_worked <= 0:
        raise InvalidInputError("check_date", "Check date must be on or after the start date")

    daily = ytd_income / days_worked
    annual = daily * 365
    monthly = annual / 12

    return IncomeProjection(
        gross_annual=round_half_away(annual),
        gross_monthly=round_half_away(monthly),
        gross_weekly=round_half_away(annual / 52),
        gross_daily=round_half_away(daily),
        days_worked=days_worked,
        max_auto_payment=round_half_away(monthly * MAX_AUTO_PAYMENT_SHARE),
        max_rent=round_half_away(monthly * MAX_RENT_SHARE),
    )


# --- Loan Amortization ---


def loan_amount_from_payment(
    monthly_payment: float, annual_rate_percent: float, term_months: int
) -> int:
    """Present value of a level monthly payment stream."""
    _require_positive(monthly_payment, "monthly_payment")
    _require_term(term_months, "term_months", MAX_TERM_MONTHS)
    r = _monthly_rate(annual_rate_percent)

    # Rates too small to move 1 + r are treated as zero
    if 1 + r == 1:
        return round_half_away(monthly_payment * term_months)
    growth = _growth_factor(r, term_months, "annual_rate_percent")
    return round_half_away(monthly_payment * (1 - 1 / growth) / r)


def monthly_payment_from_principal(
    principal: float, annual_rate_percent: float, term_months: int
) -> int:
    """Level monthly payment that amortizes principal over term_months."""
    _require_positive(principal, "principal")
    _require_term(term_months, "term_months", MAX_TERM_MONTHS)
    r = _monthly_rate(annual_rate_percent)

    if 1 + r == 1:
        return round_half_away(principal / term_months)
    growth = _growth_factor(r, term_months, "annual_rate_percent")
    return round_half_away(principal * r * growth / (growth - 1))


# --- Mortgage ---


def compute_mortgage(
    home_price: float,
    down_payment_percent: float,
    interest_rate_percent: float,
    term_years: int = 30,
    property_tax_rate_percent: float = 1.1,
    annual_insurance: float = 1200,
) -> MortgageResult:
    """
    Monthly PITI for a fixed-rate mortgage.

    PMI (0.5% of the loan per year) is charged only when the down payment is
    below 20% of the price. The monthly total is the sum of the rounded
    components so the breakdown always adds up.
    """
    _require_positive(home_price, "home_price")
    _require_non_negative(down_payment_percent, "down_payment_percent")
    if down_payment_percent >= 100:
        raise InvalidInputError("down_payment_percent", "Down payment must be below 100%")
    _require_term(term_years, "term_years", MAX_TERM_YEARS)
    _require_non_negative(property_tax_rate_percent, "property_tax_rate_percent")
    _require_non_negative(annual_insurance, "annual_insurance")

    down_payment = home_price * down_payment_percent / 100
    loan = home_price - down_payment
    term_months = term_years * 12

    principal_interest = monthly_payment_from_principal(loan, interest_rate_percent, term_months)
    property_tax = round_half_away(home_price * property_tax_rate_percent / 100 / 12)
    insurance = round_half_away(annual_insurance / 12)
    pmi = 0
    if down_payment_percent < PMI_THRESHOLD_PERCENT:
        pmi = round_half_away(loan * PMI_ANNUAL_RATE / 12)

    total_payments = principal_interest * term_months
    loan_amount = round_half_away(loan)

    return MortgageResult(
        home_price=home_price,
        down_payment=round_half_away(down_payment),
        down_payment_percent=down_payment_percent,
        loan_amount=loan_amount,
        interest_rate=interest_rate_percent,
        term_years=term_years,
        piti=PITIBreakdown(
            principal_interest=principal_interest,
            property_tax=property_tax,
            insurance=insurance,
            pmi=pmi,
            total_monthly=principal_interest + property_tax + insurance + pmi,
        ),
        total_payments=total_payments,
        total_interest=total_payments - loan_amount,
    )


def assess_housing_affordability(
    mortgage: MortgageResult, annual_income: float
) -> HousingAffordability:
    """Front-end ratio: housing cost as a percent of gross monthly income (28% rule)."""
    _require_positive(annual_income, "annual_income")
    ratio = round_one_decimal(mortgage.piti.total_monthly / (annual_income / 12) * 100)
    return HousingAffordability(housing_ratio=ratio, affordable=ratio <= HOUSING_RATIO_LIMIT)


# --- Taxes ---


def federal_income_tax(taxable_income: float, tax_year: TaxYearConfig) -> float:
    """Accumulate marginal tax bracket by bracket, lowest first."""
    tax = 0.0
    remaining = taxable_income
    for bracket in tax_year.brackets:
        if remaining <= 0:
            break
        taxed = min(remaining, bracket.high - bracket.low)
        tax += taxed * bracket.rate
        remaining -= taxed
    return tax


def compute_taxes(
    gross_annual: float,
    retirement_401k_percent: float = 0,
    health_insurance_annual: float = 0,
    state_tax_rate_percent: float = 0,
    tax_year: TaxYearConfig | None = None,
) -> TaxBreakdown:
    """
    Take-home pay for a single filer.

    Pre-tax 401(k) and health premiums reduce AGI; the standard deduction
    reduces taxable income. State tax is a flat rate on AGI, floored at zero
    when premiums exceed gross. Social Security is capped at the year's wage
    base; Medicare is uncapped and the 0.9% surtax is not modelled.
    """
    tax_year = tax_year or DEFAULT_TAX_YEAR
    _require_positive(gross_annual, "gross_annual")
    _require_non_negative(retirement_401k_percent, "retirement_401k_percent")
    _require_non_negative(health_insurance_annual, "health_insurance_annual")
    _require_non_negative(state_tax_rate_percent, "state_tax_rate_percent")

    retirement = gross_annual * retirement_401k_percent / 100
    agi = gross_annual - retirement - health_insurance_annual
    taxable_income = max(0.0, agi - tax_year.standard_deduction)

    federal = federal_income_tax(taxable_income, tax_year)
    state = max(0.0, agi) * state_tax_rate_percent / 100
    social_security = min(gross_annual, tax_year.ss_wage_base) * tax_year.ss_rate
    medicare = gross_annual * tax_year.medicare_rate

    federal_r = round_half_away(federal)
    state_r = round_half_away(state)
    ss_r = round_half_away(social_security)
    medicare_r = round_half_away(medicare)
    fica_r = ss_r + medicare_r
    retirement_r = round_half_away(retirement)
    health_r = round_half_away(health_insurance_annual)

    gross_r = round_half_away(gross_annual)
    total_deductions = federal_r + state_r + fica_r + retirement_r + health_r
    net_annual = gross_r - total_deductions

    effective = round_half_away(
        (federal + state + social_security + medicare) / gross_annual * 1000
    ) / 10

    return TaxBreakdown(
        gross_annual=gross_r,
        federal_tax=federal_r,
        state_tax=state_r,
        fica=fica_r,
        social_security=ss_r,
        medicare=medicare_r,
        retirement_401k=retirement_r,
        health_insurance=health_r,
        total_deductions=total_deductions,
        net_annual=net_annual,
        net_monthly=round_half_away(net_annual / 12),
        effective_tax_rate=effective,
        tax_year=tax_year.year,
    )


# --- Budget ---


def allocate_budget(net_monthly: float, rule: AllocationRule | None = None) -> BudgetAllocation:
    """Split net monthly income across the rule's categories and sub-lines."""
    rule = rule or DEFAULT_ALLOCATION_RULE
    _require_positive(net_monthly, "net_monthly")

    categories = []
    for cat in rule.categories:
        monthly = net_monthly * cat.percent / 100
        categories.append(
            BudgetCategory(
                name=cat.name,
                percent=cat.percent,
                monthly=round_half_away(monthly),
                weekly=round_half_away(monthly / rule.weeks_per_month),
                daily=round_half_away(monthly / rule.days_per_month),
                subcategories=tuple(
                    BudgetSubcategory(
                        name=sub.name,
                        percent=sub.percent,
                        monthly=round_half_away(net_monthly * sub.percent / 100),
                    )
                    for sub in cat.subcategories
                ),
            )
        )

    return BudgetAllocation(
        net_monthly=round_half_away(net_monthly),
        rule=rule.name,
        categories=tuple(categories),
    )


# --- Auto Loan ---


def compute_auto_loan(
    vehicle_price: float,
    down_payment: float = 0,
    trade_in: float = 0,
    annual_rate_percent: float = 0,
    term_months: int = 60,
    monthly_income: float = 0,
) -> AutoLoanResult:
    """
    Car loan cost and the 12% affordability rule.

    A zero monthly income means affordability is not assessed.
    """
    _require_positive(vehicle_price, "vehicle_price")
    _require_non_negative(down_payment, "down_payment")
    _require_non_negative(trade_in, "trade_in")
    _require_non_negative(monthly_income, "monthly_income")

    loan = vehicle_price - down_payment - trade_in
    if loan <= 0:
        raise InvalidInputError("down_payment", "Loan amount must be positive")

    payment = monthly_payment_from_principal(loan, annual_rate_percent, term_months)
    total_payments = payment * term_months
    total_interest = total_payments - round_half_away(loan)

    max_payment = 0
    payment_percent = 0.0
    affordable = False
    if monthly_income > 0:
        max_payment = round_half_away(monthly_income * MAX_AUTO_PAYMENT_SHARE)
        if max_payment > 0:
            payment_percent = round_one_decimal(payment / max_payment * 100)
        affordable = payment <= max_payment

    return AutoLoanResult(
        loan_amount=round_half_away(loan),
        monthly_payment=payment,
        term_months=term_months,
        interest_rate=annual_rate_percent,
        total_payments=total_payments,
        total_interest=total_interest,
        true_cost=round_half_away(vehicle_price) + total_interest,
        max_payment=max_payment,
        payment_percent=payment_percent,
        affordable=affordable,
    )


# --- Growth and Inflation ---


def compute_compound_growth(
    principal: float,
    monthly_contribution: float,
    annual_rate_percent: float,
    years: int,
) -> CompoundGrowthResult:
    _require_positive(principal, "principal")
    _require_non_negative(monthly_contribution, "monthly_contribution")
    _require_term(years, "years", MAX_HORIZON_YEARS)
    r = _monthly_rate(annual_rate_percent)

    months = years * 12
    balance = principal
    for _ in range(months):
        balance = balance * (1 + r) + monthly_contribution
    invested = principal + monthly_contribution * months

    return CompoundGrowthResult(
        future_value=round_half_away(balance),
        total_invested=round_half_away(invested),
        interest_earned=round_half_away(balance - invested),
        growth_multiple=round_one_decimal(balance / invested),
        years=years,
    )


def compute_inflation_erosion(
    amount: float, annual_rate_percent: float, years: int
) -> InflationResult:
    """Purchasing power of amount after years of inflation, compounded yearly."""
    _require_positive(amount, "amount")
    _require_non_negative(annual_rate_percent, "annual_rate_percent")
    _require_term(years, "years", MAX_HORIZON_YEARS)

    value = amount
    for _ in range(years):
        value /= 1 + annual_rate_percent / 100

    return InflationResult(
        original=round_half_away(amount),
        future_value=round_half_away(value),
        lost=round_half_away(amount - value),
        retained_percent=round_half_away(value / amount * 100),
        years=years,
    )


# --- Rent vs Buy ---


def compare_rent_vs_buy(
    home_price: float,
    down_payment_percent: float,
    mortgage_rate_percent: float,
    home_appreciation_percent: float,
    monthly_rent: float,
    rent_increase_percent: float,
    years: int = 5,
    assumptions: RentVsBuyAssumptions | None = None,
) -> RentVsBuyResult:
    """
    Net cost of buying versus renting over a horizon.

    Buying: payments plus down payment, minus equity (down payment,
    appreciation and an estimated principal share of mortgage payments).
    Renting: rent with yearly increases, minus what the down payment would
    have earned invested.
    """
    a = assumptions or DEFAULT_RENT_VS_BUY
    _require_positive(home_price, "home_price")
    _require_positive(monthly_rent, "monthly_rent")
    _require_non_negative(down_payment_percent, "down_payment_percent")
    if down_payment_percent >= 100:
        raise InvalidInputError("down_payment_percent", "Down payment must be below 100%")
    _require_term(years, "years", MAX_HORIZON_YEARS)
    for field, change in (
        ("home_appreciation_percent", home_appreciation_percent),
        ("rent_increase_percent", rent_increase_percent),
    ):
        _require_finite(change, field)
        if change <= -100:
            raise InvalidInputError(field, f"{field} must be above -100")

    months = years * 12
    down_payment = home_price * down_payment_percent / 100
    loan = home_price - down_payment
    mortgage = monthly_payment_from_principal(loan, mortgage_rate_percent, a.mortgage_months)
    property_tax = round_half_away(home_price * a.property_tax_rate / 12)
    maintenance = round_half_away(home_price * a.maintenance_rate / 12)
    insurance = round_half_away(a.monthly_insurance)
    pmi = 0
    if down_payment_percent < a.pmi_threshold_percent:
        pmi = round_half_away(loan * a.pmi_rate / 12)

    buy_monthly = mortgage + property_tax + insurance + maintenance + pmi
    buy_total_paid = buy_monthly * months + round_half_away(down_payment)

    home_value = home_price
    for _ in range(years):
        home_value *= 1 + home_appreciation_percent / 100

    principal_paid = round_half_away(mortgage * months * a.principal_share)
    equity = round_half_away(down_payment) + round_half_away(home_value - home_price) + principal_paid
    buy_net_cost = buy_total_paid - equity

    rent_total = 0
    rent = monthly_rent
    final_rent = monthly_rent
    for _ in range(years):
        rent_total += round_half_away(rent * 12)
        final_rent = rent
        rent *= 1 + rent_increase_percent / 100

    invested = down_payment
    for _ in range(years):
        invested *= 1 + a.invest_return
    investment_returns = round_half_away(invested - down_payment)
    rent_net_cost = rent_total - investment_returns

    buy_wins = buy_net_cost < rent_net_cost

    return RentVsBuyResult(
        buy_wins=buy_wins,
        savings=abs(rent_net_cost - buy_net_cost),
        years=years,
        buy_monthly=buy_monthly,
        down_payment=round_half_away(down_payment),
        buy_total_paid=buy_total_paid,
        home_value=round_half_away(home_value),
        equity=equity,
        buy_net_cost=buy_net_cost,
        rent_start=round_half_away(monthly_rent),
        rent_end=round_half_away(final_rent),
        rent_total=rent_total,
        investment_returns=investment_returns,
        rent_net_cost=rent_net_cost,
        price_to_rent=round_one_decimal(home_price / (monthly_rent * 12)),
    )


# --- Gig and Multi-stream Income ---


def project_gig_income(
    gig_incomes: Sequence[float],
    start_date: date,
    check_date: date,
    miles_driven: float = 0,
    other_expenses: float = 0,
    assumptions: GigAssumptions | None = None,
) -> GigIncomeResult:
    """Project combined gig earnings and net them of mileage, expenses and SE tax."""
    a = assumptions or DEFAULT_GIG
    _require_non_negative(miles_driven, "miles_driven")
    _require_non_negative(other_expenses, "other_expenses")
    for x in gig_incomes:
        _require_finite(x, "gig_incomes")
    if any(x < 0 for x in gig_incomes):
        raise InvalidInputError("gig_incomes", "Gig income cannot be negative")

    total_ytd = sum(gig_incomes)
    if total_ytd <= 0:
        raise InvalidInputError("gig_incomes", "Enter at least one gig income source")

    projection = project_income(total_ytd, start_date, check_date)
    gross = projection.gross_annual

    mileage = miles_driven * a.mileage_rate
    expenses = mileage + other_expenses
    se_tax = gross * a.self_employment_tax_rate
    net_after_expenses = gross - expenses
    net_after_tax = net_after_expenses - se_tax

    return GigIncomeResult(
        total_ytd=round_half_away(total_ytd),
        gross_annual=gross,
        gross_monthly=projection.gross_monthly,
        days_worked=projection.days_worked,
        mileage_deduction=round_half_away(mileage),
        other_expenses=round_half_away(other_expenses),
        total_expenses=round_half_away(expenses),
        self_employment_tax=round_half_away(se_tax),
        net_after_expenses=round_half_away(net_after_expenses),
        net_after_tax=round_half_away(net_after_tax),
        net_monthly=round_half_away(net_after_tax / 12),
        effective_hourly=round_half_away(net_after_tax / a.work_hours_per_year),
    )


def summarize_income_streams(streams: Sequence[tuple[str, float]]) -> IncomeStreamsSummary:
    """
    Totals and shares for several named annual income streams.

    Streams with a non-positive amount are ignored.
    """
    if len(streams) > MAX_INCOME_STREAMS:
        raise InvalidInputError("streams", f"At most {MAX_INCOME_STREAMS} income streams")

    for _, amount in streams:
        _require_finite(amount, "streams")
    kept = [(name, amount) for name, amount in streams if amount > 0]
    total = sum(amount for _, amount in kept)
    if total <= 0:
        raise InvalidInputError("streams", "Enter at least one income stream")

    return IncomeStreamsSummary(
        streams=tuple(
            IncomeStream(
                name=name,
                annual=round_half_away(amount),
                monthly=round_half_away(amount / 12),
                percent=round_half_away(amount / total * 100),
            )
            for name, amount in kept
        ),
        total_annual=round_half_away(total),
        total_monthly=round_half_away(total / 12),
        total_weekly=round_half_away(total / 52),
    )


# --- Component Entry Point ---


def _calculate(
    inp: CalculationInput,
    tax_year: TaxYearConfig | None,
    allocation_rule: AllocationRule | None,
) -> CalculationOutput:
    if isinstance(inp, IncomeInput):
        result: object = project_income(inp.ytd_income, inp.start_date, inp.check_date)
    elif isinstance(inp, LoanAmountInput):
        result = loan_amount_from_payment(
            inp.monthly_payment, inp.annual_rate_percent, inp.term_months
        )
    elif isinstance(inp, MonthlyPaymentInput):
        result = monthly_payment_from_principal(
            inp.principal, inp.annual_rate_percent, inp.term_months
        )
    elif isinstance(inp, MortgageInput):
        mortgage = compute_mortgage(
            inp.home_price,
            inp.down_payment_percent,
            inp.interest_rate_percent,
            inp.term_years,
            inp.property_tax_rate_percent,
            inp.annual_insurance,
        )
        affordability = None
        if inp.annual_income > 0:
            affordability = assess_housing_affordability(mortgage, inp.annual_income)
        return CalculationOutput(success=True, result=mortgage, affordability=affordability)
    elif isinstance(inp, TaxInput):
        result = compute_taxes(
            inp.gross_annual,
            inp.retirement_401k_percent,
            inp.health_insurance_annual,
            inp.state_tax_rate_percent,
            tax_year=tax_year,
        )
    elif isinstance(inp, BudgetInput):
        result = allocate_budget(inp.net_monthly, rule=allocation_rule)
    elif isinstance(inp, AutoLoanInput):
        result = compute_auto_loan(
            inp.vehicle_price,
            inp.down_payment,
            inp.trade_in,
            inp.annual_rate_percent,
            inp.term_months,
            inp.monthly_income,
        )
    elif isinstance(inp, CompoundInput):
        result = compute_compound_growth(
            inp.principal, inp.monthly_contribution, inp.annual_rate_percent, inp.years
        )
    elif isinstance(inp, InflationInput):
        result = compute_inflation_erosion(inp.amount, inp.annual_rate_percent, inp.years)
    elif isinstance(inp, RentVsBuyInput):
        result = compare_rent_vs_buy(
            inp.home_price,
            inp.down_payment_percent,
            inp.mortgage_rate_percent,
            inp.home_appreciation_percent,
            inp.monthly_rent,
            inp.rent_increase_percent,
            inp.years,
        )
    elif isinstance(inp, GigIncomeInput):
        result = project_gig_income(
            inp.gig_incomes,
            inp.start_date,
            inp.check_date,
            inp.miles_driven,
            inp.other_expenses,
        )
    elif isinstance(inp, IncomeStreamsInput):
        result = summarize_income_streams(inp.streams)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")

    return CalculationOutput(success=True, result=result)


def run(
    inp: CalculationInput,
    *,
    tax_year: TaxYearConfig | None = None,
    allocation_rule: AllocationRule | None = None,
) -> CalculationOutput:
    """
    Main component entry point (Atomic Component Pattern).

    Args:
        inp: Input command
        tax_year: Tax table for TaxInput (Optional, defaults to 2024)
        allocation_rule: Budget rule for BudgetInput (Optional, defaults to 50/30/20)

    Returns:
        CalculationOutput; invalid input yields success=False with errors
    """
    try:
        return _calculate(inp, tax_year, allocation_rule)
    except InvalidInputError as e:
        return CalculationOutput(
            success=False,
            errors=[CalculatorValidationError(code="INVALID_INPUT", message=e.message, field=e.field)],
        )
