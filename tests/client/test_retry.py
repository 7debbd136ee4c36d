"""Tests for retry with exponential backoff."""

import pytest

from todoistsync.client.sync.retry import retry_with_backoff
from todoistsync.core.errors import (
    AuthenticationError,
    DecodeError,
    RateLimitError,
    TransportError,
)


class FailingThen:
    """Callable raising the given errors before returning a value."""

    def __init__(self, errors: list[Exception], value: str = "done") -> None:
        self.errors = list(errors)
        self.value = value
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.value


class TestRetryWithBackoff:
    """Tests for retry_with_backoff."""

    def test_success_first_try(self) -> None:
        """Should not sleep when the first call succeeds."""
        sleeps: list[float] = []
        func = FailingThen([])

        assert retry_with_backoff(func, sleep=sleeps.append) == "done"
        assert func.calls == 1
        assert sleeps == []

    def test_retries_network_errors(self) -> None:
        """Should retry with exponentially growing delays."""
        sleeps: list[float] = []
        func = FailingThen([TransportError("down"), TransportError("down"), TransportError("down", 502)])

        result = retry_with_backoff(
            func, initial_backoff=1.0, backoff_multiplier=2.0, sleep=sleeps.append
        )

        assert result == "done"
        assert func.calls == 4
        assert sleeps == [1.0, 2.0, 4.0]

    def test_backoff_capped(self) -> None:
        """Delays never exceed max_backoff."""
        sleeps: list[float] = []
        func = FailingThen([TransportError("down")] * 4)

        retry_with_backoff(
            func, initial_backoff=5.0, max_backoff=8.0, sleep=sleeps.append
        )

        assert sleeps == [5.0, 8.0, 8.0, 8.0]

    def test_gives_up(self) -> None:
        """Should re-raise the last error after max_retries."""
        sleeps: list[float] = []
        func = FailingThen([TransportError("down")] * 3)

        with pytest.raises(TransportError):
            retry_with_backoff(func, max_retries=2, sleep=sleeps.append)

        assert func.calls == 3
        assert len(sleeps) == 2

    def test_rate_limit_uses_retry_after(self) -> None:
        """Retry-After replaces the computed backoff."""
        sleeps: list[float] = []
        func = FailingThen([RateLimitError("slow down", retry_after=12.0)])

        retry_with_backoff(func, initial_backoff=1.0, sleep=sleeps.append)

        assert sleeps == [12.0]

    @pytest.mark.parametrize(
        "error",
        [
            AuthenticationError("bad token", 401),
            TransportError("bad request", 400),
            DecodeError("garbage"),
            ValueError("bad token"),
        ],
    )
    def test_non_retryable_raised_immediately(self, error: Exception) -> None:
        """Should not retry errors that would fail again."""
        sleeps: list[float] = []
        func = FailingThen([error])

        with pytest.raises(type(error)):
            retry_with_backoff(func, sleep=sleeps.append)

        assert func.calls == 1
        assert sleeps == []
