"""
Grace-period state machine.

Turns one fresh probe outcome plus the previous consecutive-failure count
into the count to persist and the notification (if any) to send.

A service is HEALTHY while the count is 0 and DEGRADED(n) while it is n > 0.
The DOWN alert fires only on the probe where n first equals the threshold,
and the UP alert fires on recovery only if that DOWN alert was sent
(n >= threshold). Dips that recover before reaching the threshold are silent
in both directions.
"""
import enum
from dataclasses import dataclass


class Action(enum.Enum):
    NONE = "none"
    NOTIFY_DOWN = "notify_down"
    NOTIFY_UP = "notify_up"


@dataclass(frozen=True)
class GraceDecision:
    consecutive_failures: int
    action: Action


def advance(previous_consecutive_failures: int, up: bool, threshold: int) -> GraceDecision:
    """
    Compute the next grace-period state.

    Args:
        previous_consecutive_failures: count stored on the most recent record
        up: whether the new probe succeeded
        threshold: grace period, in consecutive failures

    Returns:
        GraceDecision with the count to persist and the action to take
    """
    if not up:
        failures = previous_consecutive_failures + 1
        # Equality, not >=: only the crossing edge alerts
        if failures == threshold:
            return GraceDecision(failures, Action.NOTIFY_DOWN)
        return GraceDecision(failures, Action.NONE)

    if previous_consecutive_failures >= threshold:
        return GraceDecision(0, Action.NOTIFY_UP)
    return GraceDecision(0, Action.NONE)


def describe_state(consecutive_failures: int, threshold: int) -> str:
    """Returns "healthy", "degraded" (below threshold) or "alerted"."""
    if consecutive_failures <= 0:
        return "healthy"
    if consecutive_failures < threshold:
        return "degraded"
    return "alerted"
