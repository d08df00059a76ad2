"""
Orchestrator client boundary.

Reports the terminal result of a pipeline job back to the orchestrator.

Keeping the publisher free of orchestrator API details: the wire protocol
lives behind OrchestratorClient, and clients are built per build by a
ClientFactory from the credentials, proxy and region in the job state.
"""

import logging
from typing import Callable, Optional, Protocol, runtime_checkable

from pipepub.schemas import Credentials
from pipepub.utils import BuildConsole

logger = logging.getLogger(__name__)


@runtime_checkable
class OrchestratorClient(Protocol):
    """
    Protocol for reporting job results.

    This interface abstracts the pipeline API so that:
    1. The publisher has no orchestrator SDK imports
    2. The orchestrator backend can be swapped
    3. Testing is simplified via recording implementations

    Both calls may raise on network or auth failure. They are not retried.
    """

    def report_success(self, action_id: str, job_id: str) -> None:
        """Mark the job as succeeded."""
        ...

    def report_failure(self, action_id: str, job_id: str, message: str) -> None:
        """Mark the job as failed with a human-readable message."""
        ...


class LoggingOrchestratorClient:
    """
    Dry-run implementation of OrchestratorClient.

    Logs and records the calls instead of sending them.
    """

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def report_success(self, action_id: str, job_id: str) -> None:
        logger.info(f"[dry-run] report_success action={action_id} job={job_id}")
        self.calls.append(("success", action_id, job_id))

    def report_failure(self, action_id: str, job_id: str, message: str) -> None:
        logger.info(f"[dry-run] report_failure action={action_id} job={job_id}: {message}")
        self.calls.append(("failure", action_id, job_id, message))


ClientBuilder = Callable[[Credentials, Optional[str], int, Optional[str]], OrchestratorClient]


class ClientFactory:
    """
    Builds an OrchestratorClient for a build.

    Usage:
        factory = ClientFactory(lambda creds, host, port, region: MyClient(...))
        client = factory.get_client(model.credentials, model.proxy_host,
                                    model.proxy_port, model.region)

    Without a builder, every build gets a LoggingOrchestratorClient.
    """

    def __init__(self, builder: Optional[ClientBuilder] = None):
        self._builder = builder

    def get_client(
        self,
        credentials: Credentials,
        proxy_host: Optional[str] = None,
        proxy_port: int = 0,
        region: Optional[str] = None,
    ) -> OrchestratorClient:
        if self._builder is None:
            return LoggingOrchestratorClient()
        if proxy_host:
            logger.debug(f"Using proxy {proxy_host}:{proxy_port}")
        return self._builder(credentials, proxy_host, proxy_port, region)


def put_job_result(
    succeeded: bool,
    message: str,
    action_id: str,
    job_id: str,
    client: OrchestratorClient,
    build_console: BuildConsole,
) -> None:
    """
    Send the terminal result of a job to the orchestrator.

    Args:
        succeeded: Overall publish status
        message: Failure message (ignored on success)
        action_id: The build/action identifier
        job_id: The orchestrator job identifier
        client: Client to report through
        build_console: Console of the build being reported

    Raises:
        Exception: Whatever the client raises; nothing is retried here
    """
    if succeeded:
        build_console.log("Build succeeded, reporting job success")
        client.report_success(action_id, job_id)
    else:
        build_console.log("Build failed, reporting job failure")
        client.report_failure(action_id, job_id, message)
