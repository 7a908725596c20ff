"""
HarborQuote Quote Engine — Actions
===================================
The closed set of transitions the wizard reducer accepts.
Every WizardState field is written by exactly one action;
adding a field means adding an action and its handler
(the reducer refuses to import with an unhandled action).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from engines.catalog.models import CatalogItem
from engines.promotion.models import PricingResult
from engines.quote.state import (
    BoatInfo,
    FinancingTerms,
    PurchasePath,
    TradeInInfo,
    WizardState,
)


class Action:
    """Base class for wizard actions."""

    __slots__ = ()


@dataclass(frozen=True)
class SetMotor(Action):
    item: CatalogItem
    pricing: PricingResult


@dataclass(frozen=True)
class SetPurchasePath(Action):
    path: PurchasePath

    def __post_init__(self):
        if not isinstance(self.path, PurchasePath):
            raise ValueError("path must be PurchasePath enum.")


@dataclass(frozen=True)
class SetBoatInfo(Action):
    boat_info: BoatInfo


@dataclass(frozen=True)
class SetTradeInInfo(Action):
    trade_in_info: TradeInInfo


@dataclass(frozen=True)
class SetFuelTankConfig(Action):
    config: Mapping[str, Any]


@dataclass(frozen=True)
class SetInstallConfig(Action):
    config: Mapping[str, Any]


@dataclass(frozen=True)
class SetFinancing(Action):
    financing: FinancingTerms


@dataclass(frozen=True)
class CompleteStep(Action):
    step: int

    def __post_init__(self):
        if self.step < 1:
            raise ValueError("step must be >= 1.")


@dataclass(frozen=True)
class SetCurrentStep(Action):
    step: int

    def __post_init__(self):
        if self.step < 1:
            raise ValueError("step must be >= 1.")


@dataclass(frozen=True)
class LoadFromStorage(Action):
    state: WizardState


@dataclass(frozen=True)
class Reset(Action):
    """Return to an empty quote. `initial` carries configured defaults."""
    initial: Optional[WizardState] = None


ACTION_TYPES: Tuple[type, ...] = (
    SetMotor,
    SetPurchasePath,
    SetBoatInfo,
    SetTradeInInfo,
    SetFuelTankConfig,
    SetInstallConfig,
    SetFinancing,
    CompleteStep,
    SetCurrentStep,
    LoadFromStorage,
    Reset,
)
