"""
HarborQuote Quote Engine — Quote Summary
=========================================
Turns a completed WizardState into the numbers shown on the quote:
motor price from the pricing snapshot, accessories, trade-in credit,
tax, total, and an amortized monthly payment.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from core.config.rules import DEFAULT_TAX_RULE, TaxRule
from engines.quote.state import WizardState

_ZERO = Decimal("0")
_CENTS = Decimal("0.01")


def _whole(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class MonthlyPayment:
    amount: int
    apr_percent: Decimal
    term_months: int
    total_amount: int
    total_interest: int

    def to_dict(self) -> dict:
        return {
            "amount": self.amount,
            "apr_percent": str(self.apr_percent),
            "term_months": self.term_months,
            "total_amount": self.total_amount,
            "total_interest": self.total_interest,
        }


def monthly_payment(
    amount: Decimal,
    apr_percent: Decimal = Decimal("7.99"),
    term_months: int = 60,
) -> MonthlyPayment:
    """Standard amortization. Zero APR splits the principal evenly."""
    if term_months <= 0:
        raise ValueError("term_months must be > 0.")
    principal = max(_ZERO, Decimal(amount))
    rate = Decimal(apr_percent) / 100 / 12
    if principal == 0:
        payment = _ZERO
    elif rate == 0:
        payment = principal / term_months
    else:
        growth = (1 + rate) ** term_months
        payment = principal * (rate * growth) / (growth - 1)
    total = payment * term_months
    return MonthlyPayment(
        amount=_whole(payment),
        apr_percent=Decimal(apr_percent),
        term_months=term_months,
        total_amount=_whole(total),
        total_interest=_whole(total - principal),
    )


@dataclass(frozen=True)
class QuoteTotals:
    motor_price: Decimal
    accessory_total: Decimal
    promo_savings: Decimal
    trade_in_credit: Decimal
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    savings: Decimal
    down_payment: Decimal
    financed_amount: Decimal
    monthly: MonthlyPayment

    def to_dict(self) -> dict:
        return {
            "motor_price": str(self.motor_price),
            "accessory_total": str(self.accessory_total),
            "promo_savings": str(self.promo_savings),
            "trade_in_credit": str(self.trade_in_credit),
            "subtotal": str(self.subtotal),
            "tax": str(self.tax),
            "total": str(self.total),
            "savings": str(self.savings),
            "down_payment": str(self.down_payment),
            "financed_amount": str(self.financed_amount),
            "monthly": self.monthly.to_dict(),
        }


def compute_quote_totals(
    state: WizardState,
    accessory_total: Decimal = _ZERO,
    tax_rule: TaxRule = DEFAULT_TAX_RULE,
) -> QuoteTotals:
    """
    Totals for the selected motor. The motor price is the effective
    price captured when the motor was chosen, not a fresh evaluation.
    """
    if state.motor is None:
        raise ValueError("A motor must be selected before totalling a quote.")
    accessory_total = Decimal(accessory_total)
    if accessory_total < 0:
        raise ValueError("accessory_total cannot be negative.")

    pricing = state.motor.pricing
    motor_price = Decimal(pricing.effective_price)
    trade_in_credit = (
        state.trade_in_info.credit if state.trade_in_info is not None else _ZERO
    )
    subtotal = max(_ZERO, motor_price + accessory_total - trade_in_credit)
    subtotal = subtotal.quantize(_CENTS, rounding=ROUND_HALF_UP)
    tax = tax_rule.compute_tax(subtotal)
    total = subtotal + tax
    financing = state.financing
    financed = max(_ZERO, total - financing.down_payment)

    return QuoteTotals(
        motor_price=motor_price,
        accessory_total=accessory_total,
        promo_savings=pricing.savings,
        trade_in_credit=trade_in_credit,
        subtotal=subtotal,
        tax=tax,
        total=total,
        savings=pricing.savings + trade_in_credit,
        down_payment=financing.down_payment,
        financed_amount=financed,
        monthly=monthly_payment(financed, financing.apr_percent, financing.term_months),
    )
