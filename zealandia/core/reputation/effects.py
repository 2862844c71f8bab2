"""Decaying effects registry

News coverage and scandals move approval immediately, then their residual
influence fades: each due turn a fraction of the residual is reversed, and
once what is left falls under the threshold the remainder is reversed and
the effect leaves the registry. Kept apart from the permanent score history.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple


class EffectKind(str, Enum):
    NEWS = "news"
    SCANDAL = "scandal"


@dataclass
class DecayingEffect:
    kind: EffectKind
    source_id: str  # article id / scandal id
    player_id: str
    slice_id: str
    residual: float  # signed, what is still in effect
    rate: float  # fraction removed per decay step
    interval: int  # decay every N turns
    started_turn: int
    last_decay_turn: int = -1

    @property
    def key(self) -> Tuple[str, str, str, str]:
        return (self.kind.value, self.source_id, self.player_id, self.slice_id)

    def is_due(self, turn: int) -> bool:
        # a skipped tick delays the step, it does not cancel it
        return turn - max(self.started_turn, self.last_decay_turn) >= self.interval


def decay_step(residual: float, rate: float, threshold: float) -> Tuple[float, bool]:
    """One decay step.

    Returns (amount removed from the residual, expired). On expiry the whole
    residual is removed.
    """
    reduction = residual * rate
    if abs(residual - reduction) < threshold:
        return residual, True
    return reduction, False


class DecayRegistry:
    """Active decaying effects keyed by (kind, source, player, slice).

    The store reads the active set from request threads while the engine
    registers and expires effects, so membership changes are locked.
    """

    def __init__(self) -> None:
        self._effects: Dict[Tuple[str, str, str, str], DecayingEffect] = {}
        self._lock = threading.Lock()

    def register(self, effect: DecayingEffect) -> None:
        with self._lock:
            self._effects[effect.key] = effect

    def remove(self, effect: DecayingEffect) -> None:
        with self._lock:
            self._effects.pop(effect.key, None)

    def due(self, turn: int) -> List[DecayingEffect]:
        with self._lock:
            return [e for e in self._effects.values() if e.is_due(turn)]

    def active(self, kind: Optional[EffectKind] = None) -> List[DecayingEffect]:
        with self._lock:
            return [
                e for e in self._effects.values() if kind is None or e.kind == kind
            ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._effects)
