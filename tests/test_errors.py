"""Tests for pipepub error classes.

Tests cover:
- Error hierarchy
- Failure kind carried by each error
- ReportError message formatting
"""

import pytest
from pipepub.errors import (
    ConfigError,
    FailureKind,
    OutputValidationError,
    PipepubError,
    ReportError,
    StateCorruptionError,
    TransferError,
    TransferInterrupted,
)


class TestPipepubError:
    """Tests for base PipepubError."""

    def test_is_exception(self):
        assert issubclass(PipepubError, Exception)

    def test_has_message(self):
        error = PipepubError("my message")
        assert str(error) == "my message"

    def test_default_kind_is_internal(self):
        assert PipepubError("x").kind == FailureKind.INTERNAL


class TestFailureKinds:
    """Each error maps to one failure kind."""

    @pytest.mark.parametrize("error_cls,kind", [
        (StateCorruptionError, FailureKind.STATE_CORRUPTION),
        (OutputValidationError, FailureKind.VALIDATION),
        (TransferError, FailureKind.TRANSFER),
        (TransferInterrupted, FailureKind.TRANSFER),
    ])
    def test_kind(self, error_cls, kind):
        assert error_cls("x").kind == kind
        assert issubclass(error_cls, PipepubError)

    def test_interrupted_can_be_caught_as_transfer_error(self):
        with pytest.raises(TransferError):
            raise TransferInterrupted("aborted")

    def test_config_error_is_not_a_transfer_error(self):
        assert not isinstance(ConfigError("bad"), TransferError)


class TestReportError:

    def test_message_names_job(self):
        error = ReportError("job-9", "timed out")
        assert error.job_id == "job-9"
        assert error.kind == FailureKind.REPORT
        assert str(error) == "Failed to report result for job 'job-9': timed out"
