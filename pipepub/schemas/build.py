"""
BuildContext schema - what the host build system hands to the publisher.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class BuildOutcome(str, Enum):
    """Result of the upstream build step."""
    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"
    ABORTED = "ABORTED"
    NOT_BUILT = "NOT_BUILT"

    @property
    def succeeded(self) -> bool:
        return self is BuildOutcome.SUCCESS


@dataclass(frozen=True)
class BuildContext:
    """
    A single build invocation.

    Attributes:
        build_id: Action/build identifier reported to the orchestrator
        project_name: Name of the build project (used to name archives)
        outcome: Result of the upstream build step
        workspace: Directory the configured outputs are resolved against
        state_key: Key of this build's entry in the JobStateStore (defaults to build_id)
    """
    build_id: str
    project_name: str
    outcome: BuildOutcome = BuildOutcome.SUCCESS
    workspace: Path = Path(".")
    state_key: Optional[str] = None

    @property
    def key(self) -> str:
        return self.state_key or self.build_id

    @property
    def succeeded(self) -> bool:
        return self.outcome.succeeded
