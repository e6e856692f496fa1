from __future__ import annotations

from enum import Enum

from packages.runtime.ports import BarSeriesView, DecisionFunction


class Signal(str, Enum):
    ENTER = "ENTER"
    EXIT = "EXIT"
    NONE = "NONE"


class SignalEvaluator:
    """
    Asks the decision function about a freshly opened bar.

    Priority: should_enter wins; should_exit is only consulted when entering
    is refused. Exceptions from the decision function propagate.
    """

    def __init__(self, decision: DecisionFunction):
        self.decision = decision

    def evaluate(self, index: int, series: BarSeriesView) -> Signal:
        if self.decision.should_enter(index, series):
            return Signal.ENTER
        if self.decision.should_exit(index, series):
            return Signal.EXIT
        return Signal.NONE
