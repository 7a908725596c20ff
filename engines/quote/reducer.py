"""
HarborQuote Quote Engine — Reducer
===================================
reduce(state, action) -> new WizardState

RULES (NON-NEGOTIABLE):
- Pure: no I/O, no clock reads (callers pass `now`)
- Every action yields a NEW state object, never the input
- Business-invalid transitions are not errors; guards keep
  blocking navigation until the state is complete
- SetMotor recomputes the spec sheet in the same transition
"""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Callable, Dict, Optional

from engines.catalog.specs import match_spec_sheet
from engines.quote.actions import (
    ACTION_TYPES,
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
from engines.quote.state import SelectedMotor, WizardState, copy_options


def _set_motor(state: WizardState, action: SetMotor) -> WizardState:
    motor = SelectedMotor(
        item=action.item,
        pricing=action.pricing,
        spec_sheet=match_spec_sheet(action.item),
    )
    return dataclasses.replace(state, motor=motor)


def _set_purchase_path(state: WizardState, action: SetPurchasePath) -> WizardState:
    return dataclasses.replace(state, purchase_path=action.path)


def _set_boat_info(state: WizardState, action: SetBoatInfo) -> WizardState:
    return dataclasses.replace(state, boat_info=action.boat_info)


def _set_trade_in_info(state: WizardState, action: SetTradeInInfo) -> WizardState:
    return dataclasses.replace(state, trade_in_info=action.trade_in_info)


def _set_fuel_tank_config(state: WizardState, action: SetFuelTankConfig) -> WizardState:
    return dataclasses.replace(state, fuel_tank_config=copy_options(action.config))


def _set_install_config(state: WizardState, action: SetInstallConfig) -> WizardState:
    return dataclasses.replace(state, install_config=copy_options(action.config))


def _set_financing(state: WizardState, action: SetFinancing) -> WizardState:
    return dataclasses.replace(state, financing=action.financing)


def _complete_step(state: WizardState, action: CompleteStep) -> WizardState:
    return dataclasses.replace(
        state, completed_steps=state.completed_steps | {action.step}
    )


def _set_current_step(state: WizardState, action: SetCurrentStep) -> WizardState:
    return dataclasses.replace(state, current_step=action.step)


def _load_from_storage(state: WizardState, action: LoadFromStorage) -> WizardState:
    return dataclasses.replace(action.state)


def _reset(state: WizardState, action: Reset) -> WizardState:
    if action.initial is not None:
        return dataclasses.replace(action.initial)
    return WizardState()


_HANDLERS: Dict[type, Callable[[WizardState, Action], WizardState]] = {
    SetMotor: _set_motor,
    SetPurchasePath: _set_purchase_path,
    SetBoatInfo: _set_boat_info,
    SetTradeInInfo: _set_trade_in_info,
    SetFuelTankConfig: _set_fuel_tank_config,
    SetInstallConfig: _set_install_config,
    SetFinancing: _set_financing,
    CompleteStep: _complete_step,
    SetCurrentStep: _set_current_step,
    LoadFromStorage: _load_from_storage,
    Reset: _reset,
}

_unhandled = set(ACTION_TYPES) - set(_HANDLERS)
if _unhandled:
    raise ImportError(
        f"Wizard reducer has no handler for: {sorted(t.__name__ for t in _unhandled)}"
    )

# Actions that replace the whole state keep its own timestamps.
_WHOLE_STATE_ACTIONS = (LoadFromStorage, Reset)


def reduce(
    state: WizardState,
    action: Action,
    now: Optional[datetime] = None,
) -> WizardState:
    """
    Apply one action. When `now` is given, ordinary transitions stamp
    last_activity_at (and created_at on the first change).
    """
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unknown wizard action: {type(action).__name__}")
    new_state = handler(state, action)
    if now is not None and not isinstance(action, _WHOLE_STATE_ACTIONS):
        new_state = dataclasses.replace(
            new_state,
            created_at=new_state.created_at or now,
            last_activity_at=now,
        )
    return new_state
