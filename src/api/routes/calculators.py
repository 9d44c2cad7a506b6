"""
Calculator endpoints.

Endpoints:
- POST /api/calculate/income           - Annualize year-to-date pay
- POST /api/calculate/loan-amount      - Principal from a target payment
- POST /api/calculate/monthly-payment  - Payment from a principal
- POST /api/calculate/mortgage         - PITI breakdown (+ 28% check)
- POST /api/calculate/taxes            - Federal, state and FICA
- POST /api/calculate/budget           - Needs/wants/savings split
- POST /api/calculate/auto             - Car loan and the 12% rule
- POST /api/calculate/compound         - Compound growth
- POST /api/calculate/inflation        - Purchasing-power erosion
- POST /api/calculate/rent-vs-buy      - Rent vs buy comparison
- POST /api/calculate/gig              - Gig income projection
- POST /api/calculate/streams          - Income streams summary

Range checks live in the calculator component, so bad values come back as
400 with the offending field rather than 422.
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from src.api.deps import get_allocation_rule_config, get_tax_year_config
from src.components.calculator import (
    AllocationRule,
    AutoLoanInput,
    BudgetInput,
    CalculationInput,
    CompoundInput,
    GigIncomeInput,
    IncomeInput,
    IncomeStreamsInput,
    InflationInput,
    LoanAmountInput,
    MonthlyPaymentInput,
    MortgageInput,
    RentVsBuyInput,
    TaxInput,
    TaxYearConfig,
    run,
)

router = APIRouter()


# --- Request Models ---


class IncomeRequest(BaseModel):
    ytd_income: float
    start_date: date
    check_date: date


class LoanAmountRequest(BaseModel):
    monthly_payment: float
    annual_rate_percent: float
    term_months: int


class MonthlyPaymentRequest(BaseModel):
    principal: float
    annual_rate_percent: float
    term_months: int


class MortgageRequest(BaseModel):
    home_price: float
    down_payment_percent: float
    interest_rate_percent: float
    term_years: int = 30
    property_tax_rate_percent: float = 1.1
    annual_insurance: float = 1200
    annual_income: float = 0


class TaxRequest(BaseModel):
    gross_annual: float
    retirement_401k_percent: float = 0
    health_insurance_annual: float = 0
    state_tax_rate_percent: float = 0


class BudgetRequest(BaseModel):
    net_monthly: float


class AutoLoanRequest(BaseModel):
    vehicle_price: float
    down_payment: float = 0
    trade_in: float = 0
    annual_rate_percent: float = 0
    term_months: int = 60
    monthly_income: float = 0


class CompoundRequest(BaseModel):
    principal: float
    monthly_contribution: float = 0
    annual_rate_percent: float
    years: int


class InflationRequest(BaseModel):
    amount: float
    annual_rate_percent: float
    years: int


class RentVsBuyRequest(BaseModel):
    home_price: float
    down_payment_percent: float
    mortgage_rate_percent: float
    home_appreciation_percent: float
    monthly_rent: float
    rent_increase_percent: float
    years: int = 5


class GigRequest(BaseModel):
    gig_incomes: list[float] = Field(default_factory=list)
    start_date: date
    check_date: date
    miles_driven: float = 0
    other_expenses: float = 0


class StreamEntry(BaseModel):
    name: str
    annual: float


class StreamsRequest(BaseModel):
    streams: list[StreamEntry]


# --- Helpers ---


def _calculate(
    inp: CalculationInput,
    tax_year: TaxYearConfig | None = None,
    allocation_rule: AllocationRule | None = None,
) -> dict[str, Any]:
    out = run(inp, tax_year=tax_year, allocation_rule=allocation_rule)
    if not out.success:
        err = out.errors[0]
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"field": err.field, "message": err.message},
        )

    # Loan-amount and monthly-payment return a bare dollar figure
    result = out.result
    body: dict[str, Any] = {
        "result": asdict(result) if is_dataclass(result) else result  # type: ignore[arg-type]
    }
    if out.affordability is not None:
        body["affordability"] = asdict(out.affordability)
    return body


# --- Endpoints ---


@router.post("/income")
def calculate_income(req: IncomeRequest) -> dict[str, Any]:
    return _calculate(IncomeInput(req.ytd_income, req.start_date, req.check_date))


@router.post("/loan-amount")
def calculate_loan_amount(req: LoanAmountRequest) -> dict[str, Any]:
    return _calculate(
        LoanAmountInput(req.monthly_payment, req.annual_rate_percent, req.term_months)
    )


@router.post("/monthly-payment")
def calculate_monthly_payment(req: MonthlyPaymentRequest) -> dict[str, Any]:
    return _calculate(
        MonthlyPaymentInput(req.principal, req.annual_rate_percent, req.term_months)
    )


@router.post("/mortgage")
def calculate_mortgage(req: MortgageRequest) -> dict[str, Any]:
    return _calculate(MortgageInput(**req.model_dump()))


@router.post("/taxes")
def calculate_taxes(
    req: TaxRequest,
    tax_year: TaxYearConfig = Depends(get_tax_year_config),
) -> dict[str, Any]:
    return _calculate(TaxInput(**req.model_dump()), tax_year=tax_year)


@router.post("/budget")
def calculate_budget(
    req: BudgetRequest,
    rule: AllocationRule = Depends(get_allocation_rule_config),
) -> dict[str, Any]:
    return _calculate(BudgetInput(req.net_monthly), allocation_rule=rule)


@router.post("/auto")
def calculate_auto(req: AutoLoanRequest) -> dict[str, Any]:
    return _calculate(AutoLoanInput(**req.model_dump()))


@router.post("/compound")
def calculate_compound(req: CompoundRequest) -> dict[str, Any]:
    return _calculate(CompoundInput(**req.model_dump()))


@router.post("/inflation")
def calculate_inflation(req: InflationRequest) -> dict[str, Any]:
    return _calculate(InflationInput(**req.model_dump()))


@router.post("/rent-vs-buy")
def calculate_rent_vs_buy(req: RentVsBuyRequest) -> dict[str, Any]:
    return _calculate(RentVsBuyInput(**req.model_dump()))


@router.post("/gig")
def calculate_gig(req: GigRequest) -> dict[str, Any]:
    return _calculate(
        GigIncomeInput(
            gig_incomes=tuple(req.gig_incomes),
            start_date=req.start_date,
            check_date=req.check_date,
            miles_driven=req.miles_driven,
            other_expenses=req.other_expenses,
        )
    )


@router.post("/streams")
def calculate_streams(req: StreamsRequest) -> dict[str, Any]:
    return _calculate(IncomeStreamsInput(tuple((s.name, s.annual) for s in req.streams)))
