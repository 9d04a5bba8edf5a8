"""
SWAPGUARD swap attempt state machine.

SWAP ATTEMPT CONTRACT:
======================

States (SwapState):
  PENDING    → attempt created, nothing checked yet
  CHECKED    → all checks passed, min_output staged
  COMMITTED  → counter and timestamp written to the trader config
  SUBMITTED  → venue call in flight
  CONFIRMED  → venue reported a fill
  REJECTED   → a check failed (config untouched)
  FAILED     → effects or venue failed

Transitions:
  PENDING    → CHECKED     (checks passed)
  PENDING    → REJECTED    (check failed)
  CHECKED    → COMMITTED   (effects applied)
  CHECKED    → FAILED      (counter overflow)
  COMMITTED  → SUBMITTED   (venue invoked)
  SUBMITTED  → CONFIRMED   (fill received)
  SUBMITTED  → FAILED      (venue error)

The venue can only be reached from COMMITTED, so effects always precede
the interaction.
======================
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.constants import SwapState


# Valid state transitions
VALID_TRANSITIONS: Dict[SwapState, List[SwapState]] = {
    SwapState.PENDING: [SwapState.CHECKED, SwapState.REJECTED],
    SwapState.CHECKED: [SwapState.COMMITTED, SwapState.FAILED],
    SwapState.COMMITTED: [SwapState.SUBMITTED],
    SwapState.SUBMITTED: [SwapState.CONFIRMED, SwapState.FAILED],
    SwapState.CONFIRMED: [],  # Terminal state
    SwapState.REJECTED: [],  # Terminal state
    SwapState.FAILED: [],  # Terminal state
}


@dataclass
class StateTransition:
    """Record of a state transition."""
    from_state: SwapState
    to_state: SwapState
    timestamp: str = ""
    reason: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""
    pass


def new_attempt_id() -> str:
    return f"swap_{uuid.uuid4().hex}"


@dataclass
class SwapAttempt:
    """
    State machine for one execution attempt.

    Tracks current state and transition history.
    """
    attempt_id: str = field(default_factory=new_attempt_id)
    state: SwapState = SwapState.PENDING
    history: List[StateTransition] = field(default_factory=list)
    error_code: Optional[str] = None

    def can_transition_to(self, new_state: SwapState) -> bool:
        """Check if transition to new_state is valid."""
        return new_state in VALID_TRANSITIONS.get(self.state, [])

    def transition_to(
        self,
        new_state: SwapState,
        reason: str = "",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> StateTransition:
        """
        Transition to a new state.

        Raises InvalidTransitionError if transition is not valid.
        """
        if not self.can_transition_to(new_state):
            raise InvalidTransitionError(
                f"Cannot transition from {self.state.value} to {new_state.value}. "
                f"Valid transitions: {[s.value for s in VALID_TRANSITIONS.get(self.state, [])]}"
            )

        transition = StateTransition(
            from_state=self.state,
            to_state=new_state,
            reason=reason,
            metadata=metadata or {},
        )

        self.history.append(transition)
        self.state = new_state

        return transition

    def fail(self, error_code: str, reason: str = "") -> StateTransition:
        """Move to REJECTED (before effects) or FAILED (after)."""
        target = SwapState.REJECTED if self.state == SwapState.PENDING else SwapState.FAILED
        self.error_code = error_code
        return self.transition_to(target, reason=reason or error_code)

    @property
    def is_terminal(self) -> bool:
        return len(VALID_TRANSITIONS.get(self.state, [])) == 0

    @property
    def effects_committed(self) -> bool:
        """True once the trader config has been written for this attempt."""
        return any(t.to_state == SwapState.COMMITTED for t in self.history)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "attempt_id": self.attempt_id,
            "state": self.state.value,
            "is_terminal": self.is_terminal,
            "effects_committed": self.effects_committed,
            "error_code": self.error_code,
            "history": [
                {
                    "from_state": t.from_state.value,
                    "to_state": t.to_state.value,
                    "timestamp": t.timestamp,
                    "reason": t.reason,
                    "metadata": t.metadata,
                }
                for t in self.history
            ],
        }
