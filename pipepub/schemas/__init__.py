"""
pipepub.schemas - Data structures for the publish step.

JobStateModel -> OutputDeclaration -> TransferOutcome -> PublishResult

Lifecycle:
1. JobStateModel: Per-build job state registered by the source integration
2. OutputDeclaration: Configured outputs, validated at construction
3. TransferOutcome: Result of moving one output to its artifact location
4. PublishResult: The single outcome reported for the build
"""

from .job_state import (
    CategoryType,
    CompressionType,
    Credentials,
    JobStateModel,
    OrchestratorJob,
    OutputArtifact,
)
from .build import BuildContext, BuildOutcome
from .outputs import OutputDeclaration
from .result import (
    PublishResult,
    PublishState,
    TransferOutcome,
)

__all__ = [
    # Build
    "BuildContext",
    "BuildOutcome",
    # Job state
    "CategoryType",
    "CompressionType",
    "Credentials",
    "JobStateModel",
    "OrchestratorJob",
    "OutputArtifact",
    # Outputs
    "OutputDeclaration",
    # Results
    "PublishResult",
    "PublishState",
    "TransferOutcome",
]
