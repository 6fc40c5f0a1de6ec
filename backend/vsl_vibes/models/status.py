"""
Generation state constants and the state machine transition table.

Centralized generation state definitions so routes, the orchestrator and
tests agree on the same names and legal transitions.
"""

from enum import Enum
from typing import Dict, FrozenSet

from ..core.exceptions import InvalidTransitionError


class GenerationState(Enum):
    """Enumeration of all generation run states."""

    IDLE = "idle"
    SPLITTING = "splitting"
    STYLING = "styling"
    RESOLVING_IMAGES = "resolving-images"
    ENRICHING = "enriching"
    DONE = "done"
    ERROR = "error"
    CANCELLED = "cancelled"

    def is_terminal(self) -> bool:
        """Check if this state ends a run."""
        return self in (GenerationState.DONE, GenerationState.ERROR, GenerationState.CANCELLED)

    def is_active(self) -> bool:
        """Check if this state indicates a run in progress."""
        return self in ACTIVE_STATES


ACTIVE_STATES: FrozenSet[GenerationState] = frozenset({
    GenerationState.SPLITTING,
    GenerationState.STYLING,
    GenerationState.RESOLVING_IMAGES,
    GenerationState.ENRICHING,
})

_STAGE_ORDER = {
    GenerationState.IDLE: GenerationState.SPLITTING,
    GenerationState.SPLITTING: GenerationState.STYLING,
    GenerationState.STYLING: GenerationState.RESOLVING_IMAGES,
    GenerationState.RESOLVING_IMAGES: GenerationState.ENRICHING,
    GenerationState.ENRICHING: GenerationState.DONE,
}


def _build_transitions() -> Dict[GenerationState, FrozenSet[GenerationState]]:
    table: Dict[GenerationState, set] = {state: set() for state in GenerationState}
    for source, target in _STAGE_ORDER.items():
        table[source].add(target)
    for state in ACTIVE_STATES:
        table[state].update({GenerationState.ERROR, GenerationState.CANCELLED})
    # Finished runs can be restarted
    for state in (GenerationState.DONE, GenerationState.ERROR, GenerationState.CANCELLED):
        table[state].add(GenerationState.SPLITTING)
    return {state: frozenset(targets) for state, targets in table.items()}


TRANSITIONS = _build_transitions()

# Progress percentage reported when a stage starts
STATE_PROGRESS = {
    GenerationState.IDLE: 0,
    GenerationState.SPLITTING: 5,
    GenerationState.STYLING: 30,
    GenerationState.RESOLVING_IMAGES: 60,
    GenerationState.ENRICHING: 85,
    GenerationState.DONE: 100,
    GenerationState.ERROR: 100,
    GenerationState.CANCELLED: 100,
}


def can_transition(source: GenerationState, target: GenerationState) -> bool:
    return target in TRANSITIONS[source]


def transition(source: GenerationState, target: GenerationState) -> GenerationState:
    """
    Validate a state change.

    Returns:
        The target state

    Raises:
        InvalidTransitionError: if the change is not in the transition table
    """
    if not can_transition(source, target):
        raise InvalidTransitionError(
            f"Illegal generation transition: {source.value} -> {target.value}"
        )
    return target


__all__ = [
    "GenerationState",
    "ACTIVE_STATES",
    "TRANSITIONS",
    "STATE_PROGRESS",
    "can_transition",
    "transition",
]
