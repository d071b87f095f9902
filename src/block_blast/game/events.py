from __future__ import annotations

import warnings
from typing import Any, Callable, Dict, List, Tuple

from blinker import Signal


class EventBus:
    """Named blinker signals with ordered, isolated delivery.

    Receivers run synchronously in the order they subscribed. A receiver
    that raises does not stop the others; its exception is reported as a
    RuntimeWarning and returned from `emit`. Receivers get `sender` (the bus
    itself unless the emitter names one) as their first argument.
    """

    def __init__(self) -> None:
        self._signals: Dict[str, Signal] = {}

    def _signal(self, name: str) -> Signal:
        return self._signals.setdefault(name, Signal(name))

    def subscribe(self, name: str, fn: Callable[..., Any]) -> None:
        # Strong references so lambdas and bound methods stay connected
        self._signal(name).connect(fn, weak=False)

    def unsubscribe(self, name: str, fn: Callable[..., Any]) -> None:
        sig = self._signals.get(name)
        if sig is not None:
            sig.disconnect(fn)

    def emit(self, name: str, *, sender: Any = None, **payload: Any) -> List[Tuple[Callable[..., Any], Exception]]:
        sig = self._signals.get(name)
        if sig is None:
            return []
        failures: List[Tuple[Callable[..., Any], Exception]] = []
        # Signal.receivers keeps connection order
        for receiver in list(sig.receivers.values()):
            try:
                receiver(self if sender is None else sender, **payload)
            except Exception as exc:
                failures.append((receiver, exc))
                warnings.warn(f"Receiver {receiver!r} for {name!r} raised {exc!r}", RuntimeWarning, stacklevel=2)
        return failures


EVENT_STATE_CHANGED = "state_changed"    # payload: state=dict
EVENT_HAND_DEALT = "hand_dealt"          # payload: pieces=list[Piece]
EVENT_PIECE_PLACED = "piece_placed"      # payload: piece=Piece, row=int, col=int, score_gained=int
EVENT_LINES_CLEARED = "lines_cleared"    # payload: rows=tuple[int], cols=tuple[int], score=int
EVENT_GAME_OVER = "game_over"            # payload: score=int
EVENT_GAME_RESET = "game_reset"          # payload: none
