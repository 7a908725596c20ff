"""
HarborQuote Quote Engine — Public API
"""

from engines.quote.actions import (
    Action,
    CompleteStep,
    LoadFromStorage,
    Reset,
    SetBoatInfo,
    SetCurrentStep,
    SetFinancing,
    SetFuelTankConfig,
    SetInstallConfig,
    SetMotor,
    SetPurchasePath,
    SetTradeInInfo,
)
from engines.quote.guards import (
    QuoteStep,
    accessibility_map,
    is_step_accessible,
    next_step,
    previous_step,
    visible_steps,
)
from engines.quote.persistence import PersistenceController
from engines.quote.reducer import reduce
from engines.quote.session import QuoteSession
from engines.quote.state import (
    BoatInfo,
    FinancingTerms,
    PurchasePath,
    SelectedMotor,
    TradeInEstimate,
    TradeInInfo,
    WizardState,
)
from engines.quote.summary import (
    MonthlyPayment,
    QuoteTotals,
    compute_quote_totals,
    monthly_payment,
)

__all__ = [
    "Action",
    "CompleteStep",
    "LoadFromStorage",
    "Reset",
    "SetBoatInfo",
    "SetCurrentStep",
    "SetFinancing",
    "SetFuelTankConfig",
    "SetInstallConfig",
    "SetMotor",
    "SetPurchasePath",
    "SetTradeInInfo",
    "QuoteStep",
    "accessibility_map",
    "is_step_accessible",
    "next_step",
    "previous_step",
    "visible_steps",
    "PersistenceController",
    "reduce",
    "QuoteSession",
    "BoatInfo",
    "FinancingTerms",
    "PurchasePath",
    "SelectedMotor",
    "TradeInEstimate",
    "TradeInInfo",
    "WizardState",
    "MonthlyPayment",
    "QuoteTotals",
    "compute_quote_totals",
    "monthly_payment",
]
