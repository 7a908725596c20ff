"""
HarborQuote Quote Engine — Step Accessibility Guards
=====================================================
One pure predicate per wizard step. Evaluated after every
transition; never cached, never mutates state.

Step ids are stable across purchase paths:

    1 SELECT_MOTOR   2 PURCHASE_PATH   3 BOAT_INFO (fuel tank on loose)
    4 TRADE_IN       5 INSTALLATION    6 QUOTE     7 SCHEDULE

Installed path walks all seven. Loose path skips installation, and
shows step 3 (as a fuel-tank step) only for small tiller motors.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Callable, Dict, Optional, Tuple

from engines.catalog.models import is_small_tiller
from engines.quote.state import PurchasePath, WizardState


class QuoteStep(IntEnum):
    SELECT_MOTOR = 1
    PURCHASE_PATH = 2
    BOAT_INFO = 3
    TRADE_IN = 4
    INSTALLATION = 5
    QUOTE = 6
    SCHEDULE = 7


# ══════════════════════════════════════════════════════════════
# STEP SEQUENCES
# ══════════════════════════════════════════════════════════════

def visible_steps(state: WizardState) -> Tuple[int, ...]:
    """Ordered step ids shown for the state's purchase path."""
    if state.purchase_path is None:
        return (QuoteStep.SELECT_MOTOR, QuoteStep.PURCHASE_PATH)
    if state.purchase_path is PurchasePath.INSTALLED:
        return tuple(QuoteStep)
    steps = [QuoteStep.SELECT_MOTOR, QuoteStep.PURCHASE_PATH]
    if state.motor is not None and is_small_tiller(state.motor.item):
        steps.append(QuoteStep.BOAT_INFO)
    steps.extend((QuoteStep.TRADE_IN, QuoteStep.QUOTE, QuoteStep.SCHEDULE))
    return tuple(steps)


def previous_step(state: WizardState, step: int) -> Optional[int]:
    steps = visible_steps(state)
    if step not in steps:
        return None
    index = steps.index(step)
    return steps[index - 1] if index > 0 else None


def next_step(state: WizardState, step: int) -> Optional[int]:
    steps = visible_steps(state)
    if step not in steps:
        return None
    index = steps.index(step)
    return steps[index + 1] if index + 1 < len(steps) else None


# ══════════════════════════════════════════════════════════════
# PREDICATES
# ══════════════════════════════════════════════════════════════

def _has_motor_and_path(state: WizardState) -> bool:
    return state.motor is not None and state.purchase_path is not None


def _trade_in_ready(state: WizardState) -> bool:
    """A declared trade-in must carry its estimated value."""
    return state.trade_in_info is None or state.trade_in_info.is_valued


def _previous_completed(state: WizardState, step: int) -> bool:
    prev = previous_step(state, step)
    return prev is not None and prev in state.completed_steps


def _select_motor(state: WizardState) -> bool:
    return True


def _purchase_path(state: WizardState) -> bool:
    return state.motor is not None


def _boat_info(state: WizardState) -> bool:
    return _has_motor_and_path(state)


def _trade_in(state: WizardState) -> bool:
    if not _has_motor_and_path(state):
        return False
    if state.purchase_path is PurchasePath.INSTALLED:
        return state.boat_info is not None
    return True


def _installation(state: WizardState) -> bool:
    if state.purchase_path is not PurchasePath.INSTALLED:
        return False
    return (
        _trade_in(state)
        and _previous_completed(state, QuoteStep.INSTALLATION)
    )


def _quote(state: WizardState) -> bool:
    if not _trade_in(state):
        return False
    if state.purchase_path is PurchasePath.INSTALLED and state.install_config is None:
        return False
    return (
        _trade_in_ready(state)
        and _previous_completed(state, QuoteStep.QUOTE)
    )


def _schedule(state: WizardState) -> bool:
    return _trade_in(state) and _trade_in_ready(state)


_GUARDS: Dict[int, Callable[[WizardState], bool]] = {
    QuoteStep.SELECT_MOTOR: _select_motor,
    QuoteStep.PURCHASE_PATH: _purchase_path,
    QuoteStep.BOAT_INFO: _boat_info,
    QuoteStep.TRADE_IN: _trade_in,
    QuoteStep.INSTALLATION: _installation,
    QuoteStep.QUOTE: _quote,
    QuoteStep.SCHEDULE: _schedule,
}


def is_step_accessible(state: WizardState, step: int) -> bool:
    """Unknown step ids are never accessible."""
    guard = _GUARDS.get(step)
    if guard is None:
        return False
    return guard(state)


def accessibility_map(state: WizardState) -> Dict[int, bool]:
    return {int(step): is_step_accessible(state, step) for step in QuoteStep}
