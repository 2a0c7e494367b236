"""Tests for error handling and recovery mechanisms."""

import aiohttp
import pytest
from unittest.mock import AsyncMock

from figma_variables_export.error_handling import (
    AuthenticationError,
    BranchCollisionError,
    ConfigError,
    ErrorContext,
    ErrorRecoveryStrategy,
    ErrorSeverity,
    ExportCancelledError,
    GitHubAPIError,
    RepositoryNotFoundError,
    ResolutionError,
    TransientAPIError,
    classify_error,
    error_for_status,
    recoverable,
)


class TestErrorContext:
    """Test ErrorContext functionality."""

    def test_error_context_creation(self):
        error = ValueError("test error")
        context = ErrorContext(
            error=error,
            severity=ErrorSeverity.HIGH,
            operation="create_tree",
            job_id="job-123",
            recoverable=False,
            metadata={"key": "value"},
        )

        assert context.error == error
        assert context.severity == ErrorSeverity.HIGH
        assert context.operation == "create_tree"
        assert context.job_id == "job-123"
        assert context.recoverable is False
        assert context.metadata == {"key": "value"}
        assert context.handled is False
        assert context.retry_count == 0
        assert isinstance(context.error_time, float)

    def test_error_context_defaults(self):
        context = ErrorContext(RuntimeError("test error"))

        assert context.severity == ErrorSeverity.MEDIUM
        assert context.operation == ""
        assert context.job_id is None
        assert context.recoverable is True
        assert context.metadata == {}


class TestErrorRecoveryStrategy:
    """Test retry decisions and backoff."""

    def test_should_retry_recoverable(self):
        strategy = ErrorRecoveryStrategy(max_retries=2)
        context = ErrorContext(TransientAPIError("busy"), severity=ErrorSeverity.MEDIUM)

        assert strategy.should_retry(context) is True
        context.retry_count = 2
        assert strategy.should_retry(context) is False

    def test_never_retries_non_recoverable(self):
        strategy = ErrorRecoveryStrategy()
        assert strategy.should_retry(ErrorContext(ValueError("x"), recoverable=False)) is False

    def test_never_retries_high_severity(self):
        strategy = ErrorRecoveryStrategy()
        context = ErrorContext(ValueError("x"), severity=ErrorSeverity.HIGH, recoverable=True)
        assert strategy.should_retry(context) is False

    def test_exponential_backoff(self):
        strategy = ErrorRecoveryStrategy(backoff_factor=0.5)
        context = ErrorContext(TransientAPIError("busy"))

        delays = []
        for retry in range(3):
            context.retry_count = retry
            delays.append(strategy.get_retry_delay(context))
        assert delays == [0.5, 1.0, 2.0]

    def test_backoff_is_capped(self):
        strategy = ErrorRecoveryStrategy(backoff_factor=1.0, max_delay=3.0)
        context = ErrorContext(TransientAPIError("busy"))
        context.retry_count = 5
        assert strategy.get_retry_delay(context) == 3.0


class TestClassifyError:
    """Test error classification."""

    def test_export_errors_carry_their_own_severity(self):
        context = classify_error(ConfigError("missing owner"), "validate")
        assert context.severity == ErrorSeverity.CRITICAL
        assert context.recoverable is False
        assert context.operation == "validate"

    def test_transient_api_error_is_recoverable(self):
        context = classify_error(TransientAPIError("503"))
        assert context.severity == ErrorSeverity.MEDIUM
        assert context.recoverable is True

    def test_resolution_error_is_low(self):
        assert classify_error(ResolutionError("bad color")).severity == ErrorSeverity.LOW

    def test_connection_errors_are_recoverable(self):
        context = classify_error(aiohttp.ClientConnectionError("reset"))
        assert context.recoverable is True

    def test_cancellation_is_not_recoverable(self):
        assert classify_error(ExportCancelledError("stop")).recoverable is False

    def test_unknown_errors_are_high(self):
        context = classify_error(KeyError("x"))
        assert context.severity == ErrorSeverity.HIGH
        assert context.recoverable is False


class TestErrorForStatus:
    """Test status code to exception mapping."""

    @pytest.mark.parametrize(
        "status, message, expected",
        [
            (401, "Bad credentials", AuthenticationError),
            (403, "Resource not accessible", AuthenticationError),
            (404, "Not Found", RepositoryNotFoundError),
            (422, "Reference already exists", BranchCollisionError),
            (422, "Invalid tree", GitHubAPIError),
            (429, "rate limited", TransientAPIError),
            (502, "Bad Gateway", TransientAPIError),
        ],
    )
    def test_exception_class(self, status, message, expected):
        error = error_for_status(status, "create_tree", "acme/web", message)
        assert type(error) is expected
        assert error.status == status
        assert error.operation == "create_tree"
        assert error.api_message == message

    def test_guidance_in_messages(self):
        assert "settings/tokens" in error_for_status(401, "x", "acme/web").message
        assert "'repo' scope" in error_for_status(403, "x", "acme/web").message
        assert "https://github.com/acme/web" in error_for_status(404, "x", "acme/web").message

    def test_api_message_included(self):
        error = error_for_status(400, "create_commit", "acme/web", "Tree SHA is invalid")
        assert error.message == "Failed to create_commit: 400\nAPI Response: Tree SHA is invalid"


class TestRecoverableDecorator:
    """Test the retry decorator."""

    @pytest.mark.asyncio
    async def test_success_without_retry(self):
        calls = []

        @recoverable(max_retries=3, backoff_factor=0)
        async def operation():
            calls.append(1)
            return "ok"

        assert await operation() == "ok"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self):
        outcomes = [TransientAPIError("busy"), TransientAPIError("busy"), "done"]
        on_retry = AsyncMock()

        @recoverable(max_retries=3, backoff_factor=0, on_retry=on_retry)
        async def operation():
            outcome = outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        assert await operation() == "done"
        assert on_retry.await_count == 2
        contexts = [call.args[0] for call in on_retry.await_args_list]
        assert contexts[0] is contexts[1]
        assert contexts[1].retry_count == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        attempts = []

        @recoverable(max_retries=2, backoff_factor=0)
        async def operation():
            attempts.append(1)
            raise TransientAPIError("still busy")

        with pytest.raises(TransientAPIError):
            await operation()
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_other_errors_propagate_immediately(self):
        attempts = []

        @recoverable(max_retries=3, backoff_factor=0)
        async def operation():
            attempts.append(1)
            raise AuthenticationError("denied", status=401)

        with pytest.raises(AuthenticationError):
            await operation()
        assert len(attempts) == 1
