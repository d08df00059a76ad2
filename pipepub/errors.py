"""
Error classes for pipepub publishing.

These error types classify how a publish can fail so the publisher can
convert them into a single reported result:
- StateCorruptionError: No job state for this build (nothing to report against)
- OutputValidationError: Configured outputs do not match the pipeline job
- TransferError: Packaging or uploading an output failed (I/O, abort, bad argument)
- ReportError: The orchestrator rejected or never received the result call
- ConfigError: Configuration intake failed (raised at construction, not publish)

Every error carries a FailureKind. The publisher matches on the kind when it
writes the failure line to the build console.
"""

from enum import Enum


class FailureKind(str, Enum):
    """Why a publish did not succeed."""
    NONE = "none"
    BUILD_FAILED = "build_failed"
    STATE_CORRUPTION = "state_corruption"
    VALIDATION = "validation"
    TRANSFER = "transfer"
    REPORT = "report"
    INTERNAL = "internal"


class PipepubError(Exception):
    """Base exception for pipepub."""
    kind = FailureKind.INTERNAL


class ConfigError(PipepubError):
    """Configuration validation error."""
    pass


class StateCorruptionError(PipepubError):
    """
    No job state model was registered for the build.

    The upstream source integration populates the state store before the
    build step runs. A missing entry means the store and the build are out
    of sync; there is no job to report against.
    """
    kind = FailureKind.STATE_CORRUPTION


class OutputValidationError(PipepubError):
    """Configured outputs do not line up with the pipeline job's artifacts."""
    kind = FailureKind.VALIDATION


class TransferError(PipepubError):
    """
    Transfer of a build output failed.

    Examples:
    - Output path missing from the workspace
    - Archive or upload I/O failure
    - Invalid destination descriptor

    Outputs already transferred are not rolled back.
    """
    kind = FailureKind.TRANSFER


class TransferInterrupted(TransferError):
    """The build was aborted while an output was being transferred."""
    pass


class ReportError(PipepubError):
    """The success/failure report to the orchestrator raised."""
    kind = FailureKind.REPORT

    def __init__(self, job_id: str, message: str):
        self.job_id = job_id
        super().__init__(f"Failed to report result for job '{job_id}': {message}")
