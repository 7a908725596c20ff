"""
HarborQuote Quote Engine — Session Service
===========================================
Wires one shopper's wizard together: reducer for transitions,
guards for navigation, persistence controller for durability.

Event flow:
    dispatch(action) -> reduce -> PersistenceController.schedule
    start_over()     -> cancel pending write -> clear store -> Reset
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from core.config.rules import QuoteConfig
from core.time.clock import Clock, get_default_clock
from engines.catalog.models import CatalogItem
from engines.promotion.models import PricingResult
from engines.quote.actions import (
    Action,
    CompleteStep,
    LoadFromStorage,
    Reset,
    SetCurrentStep,
    SetMotor,
)
from engines.quote.guards import is_step_accessible, next_step, visible_steps
from engines.quote.persistence import PersistenceController
from engines.quote.reducer import reduce
from engines.quote.state import WizardState

logger = logging.getLogger("harborquote.quote")

StateListener = Callable[[WizardState], None]


class QuoteSession:
    def __init__(
        self,
        persistence: PersistenceController,
        clock: Optional[Clock] = None,
        config: Optional[QuoteConfig] = None,
    ):
        self._persistence = persistence
        self._clock = clock or get_default_clock()
        self._config = config or QuoteConfig()
        self._state = self._initial_state()
        self._listeners: List[StateListener] = []

    def _initial_state(self) -> WizardState:
        return WizardState.empty(self._config.financing)

    @property
    def state(self) -> WizardState:
        return self._state

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    # ── lifecycle ─────────────────────────────────────────────

    def restore(self) -> bool:
        """Load the persisted quote, if a fresh one exists."""
        saved = self._persistence.load_on_init()
        if saved is None:
            return False
        self._apply(LoadFromStorage(saved), persist=False)
        logger.info("Restored wizard state from storage.")
        return True

    def dispatch(self, action: Action) -> WizardState:
        return self._apply(action, persist=True)

    def start_over(self) -> WizardState:
        self._persistence.clear()
        state = self._apply(Reset(self._initial_state()), persist=False)
        logger.info("Quote reset by shopper.")
        return state

    def touch(self) -> None:
        self._persistence.touch()

    def close(self) -> None:
        self._persistence.close()

    # ── convenience ───────────────────────────────────────────

    def select_motor(self, item: CatalogItem, pricing: PricingResult) -> WizardState:
        return self.dispatch(SetMotor(item=item, pricing=pricing))

    def advance(self) -> Optional[int]:
        """
        Mark the current step complete and move to the next visible step
        if its guard allows. Returns the step the shopper ends up on.
        """
        current = self._state.current_step
        self.dispatch(CompleteStep(current))
        target = next_step(self._state, current)
        if target is None or not is_step_accessible(self._state, target):
            return current
        self.dispatch(SetCurrentStep(int(target)))
        return int(target)

    def go_to(self, step: int) -> bool:
        if not is_step_accessible(self._state, step):
            return False
        self.dispatch(SetCurrentStep(step))
        return True

    def is_step_accessible(self, step: int) -> bool:
        return is_step_accessible(self._state, step)

    def visible_steps(self) -> Tuple[int, ...]:
        return visible_steps(self._state)

    # ── internals ─────────────────────────────────────────────

    def _apply(self, action: Action, *, persist: bool) -> WizardState:
        self._state = reduce(self._state, action, now=self._clock.now_utc())
        if persist:
            self._persistence.schedule(self._state)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state
