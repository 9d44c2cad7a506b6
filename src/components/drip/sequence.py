"""
Drip sequence content.

Eight weekly-ish financial education emails. Delays live in DripConfig;
this module only holds subjects and bodies. Bodies use {{name}}.
"""

from __future__ import annotations

from src.components.drip.models import DripStep

_CTA = (
    '<p><a href="{href}" style="display:inline-block;padding:12px 24px;'
    "background:#6366f1;color:#fff;border-radius:8px;text-decoration:none;"
    'font-weight:600">{label}</a></p>'
)


def _cta(href: str, label: str) -> str:
    return _CTA.format(href=href, label=label)


DRIP_SEQUENCE: tuple[DripStep, ...] = (
    DripStep(
        step=1,
        subject="Welcome to Autolytiq - Your Financial Clarity Starts Here",
        body_html=(
            "<h2>Welcome, {{name}}!</h2>"
            "<p>You now have every free calculator on the site at your fingertips:</p>"
            "<ul>"
            "<li><strong>Income projection</strong> from any paystub</li>"
            "<li><strong>50/30/20 budget</strong> built from your take-home pay</li>"
            "<li><strong>Tax estimate</strong> with federal, state and FICA</li>"
            "<li><strong>Housing and auto</strong> affordability checks</li>"
            "</ul>"
            + _cta("https://autolytiqs.com/calculator", "Start Calculating")
            + "<p>Over the next few weeks we'll send one practical tip at a time.</p>"
        ),
    ),
    DripStep(
        step=2,
        subject="The #1 Rule for Financial Clarity: Know Your Real Numbers",
        body_html=(
            "<h2>Do you know your real annual income, {{name}}?</h2>"
            "<p>Biweekly pay, variable hours or a mid-year start all make your "
            "quoted salary drift from what you will actually earn.</p>"
            "<p>Lenders, budgets and tax brackets all key off the real figure. "
            "Take your year-to-date pay and let the calculator annualize it.</p>"
            + _cta("https://autolytiqs.com/calculator", "Project My Income")
        ),
    ),
    DripStep(
        step=3,
        subject="The 50/30/20 Budget Rule (And When to Break It)",
        body_html=(
            "<h2>50% needs, 30% wants, 20% savings</h2>"
            "<p>It is a starting point, not a law. In high-cost cities needs can "
            "run closer to 60%, and that is fine as long as savings stay protected.</p>"
            + _cta("https://autolytiqs.com/smart-money", "Build My Budget")
        ),
    ),
    DripStep(
        step=4,
        subject="How Much House Can You Actually Afford?",
        body_html=(
            "<h2>Think in monthly payments, {{name}}</h2>"
            "<p>Principal and interest are only part of it. Property tax, "
            "insurance and PMI (under 20% down) all land in the same bill. "
            "Keep the total under 28% of gross monthly income.</p>"
            + _cta("https://autolytiqs.com/housing", "Check Affordability")
        ),
    ),
    DripStep(
        step=5,
        subject="Your Taxes Are Probably Higher Than You Think",
        body_html=(
            "<h2>Federal tax is only the first line</h2>"
            "<p>Social Security and Medicare take 7.65% before state tax even "
            "starts. Pre-tax 401(k) contributions lower your taxable income.</p>"
            + _cta("https://autolytiqs.com/taxes", "Estimate My Taxes")
        ),
    ),
    DripStep(
        step=6,
        subject="The Car Affordability Rule No One Talks About",
        body_html=(
            "<h2>Keep the payment under 12%</h2>"
            "<p>A car payment above 12% of gross monthly income squeezes every "
            "other goal. Look at total interest, not just the monthly number.</p>"
            + _cta("https://autolytiqs.com/auto", "Run the Numbers")
        ),
    ),
    DripStep(
        step=7,
        subject="The Power of Multiple Income Streams",
        body_html=(
            "<h2>One paycheck is one point of failure</h2>"
            "<p>Side gigs, freelance work and investments add resilience. Remember "
            "self-employment tax and mileage when you size them up, {{name}}.</p>"
            + _cta("https://autolytiqs.com/income-streams", "Track My Streams")
        ),
    ),
    DripStep(
        step=8,
        subject="Your 5-Year Financial Roadmap",
        body_html=(
            "<h2>Put it all together</h2>"
            "<p>Know your income, budget it, keep housing and transport in check "
            "and let compound growth do the rest. Revisit the calculators whenever "
            "your numbers change.</p>"
            + _cta("https://autolytiqs.com/free-tools", "See All Tools")
            + "<p>Thanks for reading along, {{name}}.</p>"
        ),
    ),
)
