import io

import pytest
from unittest.mock import MagicMock

from pipepub.client import ClientFactory
from pipepub.schemas import (
    BuildContext,
    BuildOutcome,
    CategoryType,
    CompressionType,
    Credentials,
    JobStateModel,
    OrchestratorJob,
    OutputArtifact,
    TransferOutcome,
)
from pipepub.state_store import InMemoryJobStateStore
from pipepub.transfer import ArtifactTransferWorker
from pipepub.utils import BuildConsole


class RecordingWorker(ArtifactTransferWorker):
    """Transfer worker that records calls and can fail on a given call."""

    def __init__(self, fail_on: int | None = None, error: BaseException | None = None,
                 outcome: TransferOutcome | None = None):
        self.calls = []
        self._fail_on = fail_on
        self._error = error
        self._outcome = outcome

    def transfer(self, build_name, output, destination, credentials,
                 compression=CompressionType.NONE, workspace=None):
        self.calls.append((build_name, output.output, destination.name, compression))
        if self._fail_on is not None and len(self.calls) == self._fail_on:
            if self._error is not None:
                raise self._error
            return self._outcome
        return TransferOutcome.transferred(location=f"{destination.bucket}/{destination.object_key}")


def make_job(artifact_count: int, job_id: str = "job-1") -> OrchestratorJob:
    return OrchestratorJob(
        job_id=job_id,
        output_artifacts=tuple(
            OutputArtifact(name=f"Artifact{i}", bucket="bucket", object_key=f"key/{i}.zip")
            for i in range(artifact_count)
        ),
    )



@pytest.fixture
def store():
    return InMemoryJobStateStore()


@pytest.fixture
def model_factory():
    def _make(artifact_count: int = 2, category: CategoryType = CategoryType.BUILD,
              linked: bool = True) -> JobStateModel:
        return JobStateModel(
            job=make_job(artifact_count) if linked else None,
            action_category=category,
            credentials=Credentials(access_key="AKIA", secret_key="secret"),
            region="us-east-1",
            compression_type=CompressionType.ZIP,
        )
    return _make


@pytest.fixture
def client():
    return MagicMock(spec=["report_success", "report_failure"])


@pytest.fixture
def client_factory(client):
    return ClientFactory(lambda creds, host, port, region: client)


@pytest.fixture
def build_console():
    return BuildConsole(stream=io.StringIO())


@pytest.fixture
def build_factory():
    def _make(outcome: BuildOutcome = BuildOutcome.SUCCESS, build_id: str = "42") -> BuildContext:
        return BuildContext(build_id=build_id, project_name="web", outcome=outcome)
    return _make


@pytest.fixture
def worker_factory():
    return RecordingWorker


@pytest.fixture
def job_factory():
    return make_job
