"""Tests for the orchestrator client boundary."""

import io
from unittest.mock import MagicMock

import pytest

from pipepub.client import (
    ClientFactory,
    LoggingOrchestratorClient,
    OrchestratorClient,
    put_job_result,
)
from pipepub.schemas import Credentials
from pipepub.utils import BuildConsole


def test_logging_client_satisfies_protocol():
    assert isinstance(LoggingOrchestratorClient(), OrchestratorClient)


def test_factory_defaults_to_logging_client():
    client = ClientFactory().get_client(Credentials())
    assert isinstance(client, LoggingOrchestratorClient)


def test_factory_passes_connection_settings():
    builder = MagicMock()
    creds = Credentials(access_key="AKIA", secret_key="s")

    ClientFactory(builder).get_client(creds, "proxy.local", 3128, "us-east-1")

    builder.assert_called_once_with(creds, "proxy.local", 3128, "us-east-1")


def test_put_job_result_success():
    client = LoggingOrchestratorClient()
    console = BuildConsole(stream=io.StringIO())

    put_job_result(True, "", "42", "job-1", client, console)

    assert client.calls == [("success", "42", "job-1")]
    assert "reporting job success" in console.lines[-1]


def test_put_job_result_failure():
    client = LoggingOrchestratorClient()
    console = BuildConsole(stream=io.StringIO())

    put_job_result(False, "Build failed", "42", "job-1", client, console)

    assert client.calls == [("failure", "42", "job-1", "Build failed")]


def test_put_job_result_propagates_client_errors():
    client = MagicMock()
    client.report_failure.side_effect = TimeoutError("slow")

    with pytest.raises(TimeoutError):
        put_job_result(False, "x", "42", "job-1", client, BuildConsole(stream=io.StringIO()))
