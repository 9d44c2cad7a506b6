"""
Calculator component.

Pure financial calculators: income projection, loan amortization, mortgage
PITI, progressive taxes, budget allocation and the supporting tools.
"""

from src.components.calculator.component import (
    HOUSING_RATIO_LIMIT,
    MAX_INCOME_STREAMS,
    allocate_budget,
    assess_housing_affordability,
    compare_rent_vs_buy,
    compute_auto_loan,
    compute_compound_growth,
    compute_inflation_erosion,
    compute_mortgage,
    compute_taxes,
    federal_income_tax,
    loan_amount_from_payment,
    monthly_payment_from_principal,
    project_gig_income,
    project_income,
    round_half_away,
    round_one_decimal,
    run,
    summarize_income_streams,
)
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
    CalculatorError,
    CalculatorValidationError,
    CategoryRule,
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
    SubcategoryRule,
    TaxBracket,
    TaxBreakdown,
    TaxInput,
    TaxYearConfig,
)
from src.components.calculator.tables import (
    ALLOCATION_RULES,
    DEFAULT_ALLOCATION_RULE,
    DEFAULT_TAX_YEAR,
    RULE_50_30_20,
    RULE_60_20_20,
    TAX_YEAR_2024,
    TAX_YEAR_2025,
    TAX_YEARS,
    get_allocation_rule,
    get_tax_year,
)

__all__ = [
    # Component
    "run",
    "project_income",
    "loan_amount_from_payment",
    "monthly_payment_from_principal",
    "compute_mortgage",
    "assess_housing_affordability",
    "compute_taxes",
    "federal_income_tax",
    "allocate_budget",
    "compute_auto_loan",
    "compute_compound_growth",
    "compute_inflation_erosion",
    "compare_rent_vs_buy",
    "project_gig_income",
    "summarize_income_streams",
    "round_half_away",
    "round_one_decimal",
    "HOUSING_RATIO_LIMIT",
    "MAX_INCOME_STREAMS",
    # Tables
    "TAX_YEAR_2024",
    "TAX_YEAR_2025",
    "TAX_YEARS",
    "DEFAULT_TAX_YEAR",
    "get_tax_year",
    "RULE_50_30_20",
    "RULE_60_20_20",
    "ALLOCATION_RULES",
    "DEFAULT_ALLOCATION_RULE",
    "get_allocation_rule",
    # Config values
    "TaxBracket",
    "TaxYearConfig",
    "AllocationRule",
    "CategoryRule",
    "SubcategoryRule",
    "RentVsBuyAssumptions",
    "GigAssumptions",
    # Results
    "IncomeProjection",
    "MortgageResult",
    "PITIBreakdown",
    "HousingAffordability",
    "TaxBreakdown",
    "BudgetAllocation",
    "BudgetCategory",
    "BudgetSubcategory",
    "AutoLoanResult",
    "CompoundGrowthResult",
    "InflationResult",
    "RentVsBuyResult",
    "GigIncomeResult",
    "IncomeStream",
    "IncomeStreamsSummary",
    # Inputs
    "CalculationInput",
    "IncomeInput",
    "LoanAmountInput",
    "MonthlyPaymentInput",
    "MortgageInput",
    "TaxInput",
    "BudgetInput",
    "AutoLoanInput",
    "CompoundInput",
    "InflationInput",
    "RentVsBuyInput",
    "GigIncomeInput",
    "IncomeStreamsInput",
    # Output
    "CalculationOutput",
    "CalculatorValidationError",
    # Errors
    "CalculatorError",
    "InvalidInputError",
]
