"""
JobStateModel schema - per-build view of the pipeline job being worked on.

The model is populated by the upstream source integration before the build
step runs, read by the publisher, and cleared once the result is reported.

Lifecycle:
1. Created with the orchestrator job, credentials and compression mode
2. Registered in a JobStateStore under the build's state key
3. Read (never mutated) while outputs are validated and transferred
4. clear_job() + compression reset, then removed from the store
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class CategoryType(str, Enum):
    """Category of the pipeline action that triggered the build."""
    BUILD = "Build"
    TEST = "Test"
    SOURCE = "Source"
    DEPLOY = "Deploy"
    APPROVAL = "Approval"
    INVOKE = "Invoke"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: Optional[str]) -> "CategoryType":
        """Case-insensitive lookup; unknown or missing values map to OTHER."""
        if not value:
            return cls.OTHER
        for member in cls:
            if member.value.lower() == str(value).lower():
                return member
        return cls.OTHER


class CompressionType(str, Enum):
    """Archive format used when packaging an output."""
    NONE = "None"
    ZIP = "Zip"
    TAR = "Tar"
    TAR_GZ = "TarGz"

    @classmethod
    def parse(cls, value: Optional[str]) -> "CompressionType":
        if not value:
            return cls.NONE
        for member in cls:
            if member.value.lower() == str(value).lower():
                return member
        raise ValueError(f"Unknown compression type: {value}")


@dataclass(frozen=True)
class Credentials:
    """Access credentials handed over by the source integration."""
    access_key: str = field(default="", repr=False)
    secret_key: str = field(default="", repr=False)
    session_token: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class OutputArtifact:
    """
    Destination descriptor for one output artifact of the pipeline job.

    Attributes:
        name: Artifact name as declared in the pipeline
        bucket: Artifact store bucket
        object_key: Object key within the bucket
    """
    name: str
    bucket: str = ""
    object_key: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OutputArtifact":
        location = data.get("location", {})
        return cls(
            name=data["name"],
            bucket=data.get("bucket", location.get("bucket", "")),
            object_key=data.get("object_key", location.get("object_key", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "bucket": self.bucket, "object_key": self.object_key}


@dataclass(frozen=True)
class OrchestratorJob:
    """A pipeline job polled from the orchestrator."""
    job_id: str
    output_artifacts: tuple[OutputArtifact, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrchestratorJob":
        return cls(
            job_id=data["job_id"],
            output_artifacts=tuple(
                OutputArtifact.from_dict(a) for a in data.get("output_artifacts", [])
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "output_artifacts": [a.to_dict() for a in self.output_artifacts],
        }


@dataclass
class JobStateModel:
    """
    Job state for a single build.

    Attributes:
        job: The orchestrator job, or None when the build was started manually
        action_category: Category of the triggering pipeline action
        credentials: Credentials for the orchestrator and artifact store
        proxy_host: Optional proxy host for outbound calls
        proxy_port: Proxy port (0 when no proxy)
        region: Orchestrator region
        compression_type: Archive format for outputs
    """
    job: Optional[OrchestratorJob] = None
    action_category: CategoryType = CategoryType.OTHER
    credentials: Credentials = field(default_factory=Credentials)
    proxy_host: Optional[str] = None
    proxy_port: int = 0
    region: Optional[str] = None
    compression_type: CompressionType = CompressionType.NONE

    @property
    def has_job(self) -> bool:
        return self.job is not None

    @property
    def output_artifacts(self) -> tuple[OutputArtifact, ...]:
        if self.job is None:
            return ()
        return self.job.output_artifacts

    def clear_job(self) -> None:
        """Drop the job reference once its result has been reported."""
        self.job = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobStateModel":
        """Build a model from a state file mapping."""
        job_data = data.get("job")
        creds = data.get("credentials", {})
        proxy = data.get("proxy", {})
        return cls(
            job=OrchestratorJob.from_dict(job_data) if job_data else None,
            action_category=CategoryType.parse(data.get("action_category")),
            credentials=Credentials(
                access_key=creds.get("access_key", ""),
                secret_key=creds.get("secret_key", ""),
                session_token=creds.get("session_token"),
            ),
            proxy_host=proxy.get("host"),
            proxy_port=int(proxy.get("port", 0) or 0),
            region=data.get("region"),
            compression_type=CompressionType.parse(data.get("compression_type")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize without credentials."""
        return {
            "job": self.job.to_dict() if self.job is not None else None,
            "action_category": self.action_category.value,
            "proxy": {"host": self.proxy_host, "port": self.proxy_port},
            "region": self.region,
            "compression_type": self.compression_type.value,
        }
