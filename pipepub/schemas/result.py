"""
Result schemas - transfer outcomes and the final publish result.

TransferOutcome is returned by a transfer worker for one output.
PublishResult is the single outcome of a publish, the value reported
back to the build and mirrored to the orchestrator.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pipepub.errors import FailureKind


class PublishState(str, Enum):
    """States of the publish protocol, in order."""
    START = "start"
    VALIDATED = "validated"
    TRANSFERRING = "transferring"
    SKIPPED_TRANSFER = "skipped_transfer"
    REPORTING = "reporting"
    CLEANED = "cleaned"
    DONE = "done"


@dataclass(frozen=True)
class TransferOutcome:
    """
    Outcome of transferring one output.

    Attributes:
        ok: True when the output was transferred
        reason: Failure reason (only when ok is False)
        location: Where the artifact ended up (only when ok is True)
    """
    ok: bool
    reason: Optional[str] = None
    location: Optional[str] = None

    def __post_init__(self):
        if self.ok and self.reason is not None:
            raise ValueError("Transferred outcomes cannot carry a failure reason")
        if not self.ok and not self.reason:
            raise ValueError("Failed outcomes must carry a reason")

    @classmethod
    def transferred(cls, location: Optional[str] = None) -> "TransferOutcome":
        return cls(ok=True, location=location)

    @classmethod
    def failed(cls, reason: str) -> "TransferOutcome":
        return cls(ok=False, reason=reason)


@dataclass(frozen=True)
class PublishResult:
    """
    Final outcome of one publish.

    Attributes:
        succeeded: Overall status reported for the build
        message: Empty on success, the failure message otherwise
        failure_kind: Classification of the failure (NONE on success)
        state: START when the protocol was not entered (no state, no job),
            DONE once the result was reported and the state cleaned up
    """
    succeeded: bool
    message: str = ""
    failure_kind: FailureKind = FailureKind.NONE
    state: PublishState = PublishState.DONE

    def to_dict(self) -> dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "message": self.message,
            "failure_kind": self.failure_kind.value,
            "state": self.state.value,
        }
