"""Retry policy for transient Google Photos API errors."""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from googleapiclient.errors import HttpError

# Rate limiting and temporary server trouble
TRANSIENT_STATUS_CODES = frozenset({429, 500, 502, 503})


@dataclass
class RetryPolicy:
    """How often and how fast a failed listing request is re-issued.

    Attributes:
        max_retries: Maximum number of retries per request, None for no limit
        base_delay_s: Delay before the first retry
        backoff_factor: Multiplier applied to the delay after each retry
        max_delay_s: Upper bound for a single delay
        retryable_status_codes: HTTP status codes treated as transient
    """
    max_retries: Optional[int] = None
    base_delay_s: float = 0.0
    backoff_factor: float = 1.0
    max_delay_s: float = 60.0
    retryable_status_codes: FrozenSet[int] = field(default=TRANSIENT_STATUS_CODES)

    def is_transient(self, status_code: Optional[int]) -> bool:
        """Check if a status code is expected to resolve itself on retry."""
        return status_code is not None and status_code in self.retryable_status_codes

    def should_retry(self, status_code: Optional[int], attempt: int) -> bool:
        """Check if a request that failed on the given attempt may be retried.

        Args:
            status_code: Status code of the failure, None for non-HTTP failures
            attempt: Number of retries already performed (0-indexed)

        Returns:
            True if the request should be issued again
        """
        if not self.is_transient(status_code):
            return False
        return self.max_retries is None or attempt < self.max_retries

    def compute_delay(self, attempt: int) -> float:
        """Compute the delay in seconds before the given retry."""
        if self.base_delay_s <= 0:
            return 0.0
        try:
            delay = self.base_delay_s * (self.backoff_factor ** attempt)
        except OverflowError:
            # Growth past the float range stays at the cap
            return self.max_delay_s
        return min(delay, self.max_delay_s)


def status_code_of(exc: BaseException) -> Optional[int]:
    """Extract the HTTP status code of an API error, if it has one."""
    if isinstance(exc, HttpError):
        try:
            return int(exc.resp.status)
        except (TypeError, ValueError):
            return None
    return None
