"""
Publisher - publish-and-report protocol for a finished build step.

After the build step of a pipeline-bound build finishes, the publisher:
1. Looks up the build's JobStateModel in the JobStateStore
2. Pre-sets the failure message from the action category when the build failed
3. Returns early (no report) when the build is not linked to a pipeline job
4. Validates that configured outputs match the job's output artifacts 1:1
5. Transfers each output when the build succeeded and outputs are configured
6. Reports success or failure to the orchestrator, exactly once
7. Clears the job state and removes it from the store

States:
    START -> VALIDATED -> (TRANSFERRING | SKIPPED_TRANSFER) -> REPORTING -> CLEANED -> DONE

Steps 6 and 7 run from nested finally blocks: the report happens even when
validation or transfer raised, and cleanup happens even when the report
call raised.
"""

import logging
from typing import Iterable, Optional

from pipepub.client import ClientFactory, OrchestratorClient, put_job_result
from pipepub.config import MAX_OUTPUTS, parse_output_locations, validate_output_count
from pipepub.errors import (
    FailureKind,
    OutputValidationError,
    ReportError,
    TransferError,
)
from pipepub.schemas import (
    BuildContext,
    CategoryType,
    CompressionType,
    JobStateModel,
    OrchestratorJob,
    OutputDeclaration,
    PublishResult,
    PublishState,
)
from pipepub.state_store import JobStateStore
from pipepub.transfer import ArtifactTransferWorker, NoOpTransferWorker
from pipepub.utils import BuildConsole

logger = logging.getLogger(__name__)

NO_MODEL_MESSAGE = "Error with model state handling"
UNEXPECTED_FAILURE_MESSAGE = "Publish failed unexpectedly"


def expected_failure_message(category: CategoryType) -> str:
    """Failure message for a build whose upstream step did not succeed."""
    if category == CategoryType.BUILD:
        return "Build failed"
    if category == CategoryType.TEST:
        return "Tests failed"
    return "Failed"


def describe_failure(kind: FailureKind, message: str) -> str:
    """Console summary line for a publish outcome."""
    if kind == FailureKind.NONE:
        return "Publish succeeded"
    elif kind == FailureKind.BUILD_FAILED:
        return f"Upstream build did not succeed: {message}"
    elif kind == FailureKind.VALIDATION:
        return f"Output validation failed: {message}"
    elif kind == FailureKind.TRANSFER:
        return f"Artifact transfer failed: {message}"
    elif kind == FailureKind.STATE_CORRUPTION:
        return f"Job state unavailable: {message}"
    elif kind == FailureKind.REPORT:
        return f"Reporting the result failed: {message}"
    elif kind == FailureKind.INTERNAL:
        return f"Publish aborted by an unexpected error: {message}"
    raise ValueError(f"Unhandled failure kind: {kind}")


class PublishOrchestrator:
    """
    Publishes the outputs of a build and reports the result of its job.

    The configured outputs are fixed at construction; the job state and the
    build are supplied per call.

    Usage:
        publisher = PublishOrchestrator.from_config(
            [{"output": "dist"}],
            transfer_worker=ArchiveTransferWorker(artifact_root),
            client_factory=ClientFactory(make_client),
        )
        result = publisher.perform(build, store)
    """

    def __init__(
        self,
        outputs: Iterable[OutputDeclaration],
        transfer_worker: Optional[ArtifactTransferWorker] = None,
        client_factory: Optional[ClientFactory] = None,
        max_outputs: int = MAX_OUTPUTS,
    ):
        """
        Args:
            outputs: Configured outputs, in pipeline artifact order
            transfer_worker: Worker that packages and uploads outputs
            client_factory: Builds the orchestrator client for a build
            max_outputs: Maximum number of outputs

        Raises:
            ConfigError: If too many outputs are configured
        """
        self._outputs: tuple[OutputDeclaration, ...] = tuple(outputs)
        validate_output_count(list(self._outputs), max_outputs)
        self._transfer_worker = transfer_worker or NoOpTransferWorker()
        self._client_factory = client_factory or ClientFactory()

    @classmethod
    def from_config(
        cls,
        output_locations: Optional[Iterable[dict]],
        transfer_worker: Optional[ArtifactTransferWorker] = None,
        client_factory: Optional[ClientFactory] = None,
        max_outputs: int = MAX_OUTPUTS,
    ) -> "PublishOrchestrator":
        """Build a publisher from raw output-location entries."""
        return cls(
            parse_output_locations(output_locations),
            transfer_worker=transfer_worker,
            client_factory=client_factory,
            max_outputs=max_outputs,
        )

    @property
    def outputs(self) -> tuple[OutputDeclaration, ...]:
        return self._outputs

    def perform(
        self,
        build: BuildContext,
        store: JobStateStore,
        build_console: Optional[BuildConsole] = None,
    ) -> PublishResult:
        """
        Run the publish protocol for a finished build.

        Args:
            build: The finished build
            store: Store holding the build's JobStateModel under build.key
            build_console: Console to write progress to (stdout by default)

        Returns:
            PublishResult for the build

        Raises:
            ReportError: If the report call itself failed (after cleanup)
        """
        console = build_console or BuildConsole()

        model = store.get_model(build.key)
        if model is None:
            console.log(NO_MODEL_MESSAGE)
            return PublishResult(
                succeeded=False,
                message=NO_MODEL_MESSAGE,
                failure_kind=FailureKind.STATE_CORRUPTION,
                state=PublishState.START,
            )

        succeeded = build.succeeded
        message = ""
        kind = FailureKind.NONE
        if not succeeded:
            message = expected_failure_message(model.action_category)
            kind = FailureKind.BUILD_FAILED

        # Started outside a pipeline (manual build): nothing to publish or report.
        if model.job is None:
            console.log("No job, returning early")
            return PublishResult(succeeded=succeeded, message=message, failure_kind=kind, state=PublishState.START)

        job = model.job
        state = PublishState.START
        finished = False
        try:
            client = self._client_factory.get_client(
                model.credentials,
                model.proxy_host,
                model.proxy_port,
                model.region,
            )
            try:
                console.log("Publishing artifacts")
                self._validate_outputs(job)
                state = PublishState.VALIDATED

                if self._outputs and build.succeeded:
                    state = PublishState.TRANSFERRING
                    self._transfer_outputs(build, model, job, console)
                else:
                    state = PublishState.SKIPPED_TRANSFER
                finished = True
            except (OutputValidationError, TransferError) as exc:
                succeeded = False
                message = str(exc)
                kind = exc.kind
                console.log(message)
                console.log_exception(exc)
                finished = True
            finally:
                if not finished:
                    succeeded = False
                    message = message or UNEXPECTED_FAILURE_MESSAGE
                    kind = FailureKind.INTERNAL
                logger.debug(f"Build {build.build_id}: {state.value} -> {PublishState.REPORTING.value}")
                state = PublishState.REPORTING
                self._report(succeeded, message, build, job, client, console)
        finally:
            self._clean_up(model, store, build.key)
            state = PublishState.CLEANED

        console.log(describe_failure(kind, message))
        logger.debug(f"Build {build.build_id}: {state.value} -> {PublishState.DONE.value}")
        state = PublishState.DONE
        return PublishResult(succeeded=succeeded, message=message, failure_kind=kind, state=state)

    def _validate_outputs(self, job: OrchestratorJob) -> None:
        """Configured outputs must match the job's output artifacts one to one."""
        expected = len(job.output_artifacts)
        if len(self._outputs) != expected:
            raise OutputValidationError(
                "Error: number of output locations and number of pipeline outputs are "
                f"different. Number of outputs: {len(self._outputs)}, Number of pipeline "
                f"artifacts: {expected}. The number of build artifacts should match the "
                "number of output artifacts specified"
            )

    def _transfer_outputs(
        self,
        build: BuildContext,
        model: JobStateModel,
        job: OrchestratorJob,
        console: BuildConsole,
    ) -> None:
        """Transfer outputs in order, stopping at the first failure."""
        for output, artifact in zip(self._outputs, job.output_artifacts):
            console.log(f"Uploading {output.output} to output artifact {artifact.name}")
            try:
                outcome = self._transfer_worker.transfer(
                    build.project_name,
                    output,
                    artifact,
                    model.credentials,
                    compression=model.compression_type,
                    workspace=build.workspace,
                )
            except TransferError:
                raise
            except (OSError, ValueError) as e:
                raise TransferError(str(e) or type(e).__name__) from e

            if not outcome.ok:
                raise TransferError(outcome.reason)

    def _report(
        self,
        succeeded: bool,
        message: str,
        build: BuildContext,
        job: OrchestratorJob,
        client: OrchestratorClient,
        console: BuildConsole,
    ) -> None:
        try:
            put_job_result(succeeded, message, build.build_id, job.job_id, client, console)
        except Exception as e:
            console.log(f"Failed to report job result: {e}")
            raise ReportError(job.job_id, str(e)) from e

    def _clean_up(self, model: JobStateModel, store: JobStateStore, key: str) -> None:
        model.clear_job()
        model.compression_type = CompressionType.NONE
        store.remove_model(key)


def perform_publish(
    build: BuildContext,
    configured_outputs: Iterable[OutputDeclaration],
    store: JobStateStore,
    transfer_worker: Optional[ArtifactTransferWorker] = None,
    client_factory: Optional[ClientFactory] = None,
    build_console: Optional[BuildConsole] = None,
) -> PublishResult:
    """
    Publish a finished build in one call.

    Args:
        build: The finished build
        configured_outputs: Outputs configured for the build step
        store: Store holding the build's JobStateModel
        transfer_worker: Worker for artifact transfer (no-op by default)
        client_factory: Factory for the orchestrator client (logging client by default)
        build_console: Console to write progress to

    Returns:
        PublishResult for the build
    """
    publisher = PublishOrchestrator(
        configured_outputs,
        transfer_worker=transfer_worker,
        client_factory=client_factory,
    )
    return publisher.perform(build, store, build_console=build_console)
