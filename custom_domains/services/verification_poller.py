"""Cancellable polling task for automatic domain verification.

The caller owns the poller: start it when the user is waiting on DNS, stop
it when they leave. Each attempt is an ordinary verify call, so nothing here
changes the verification semantics; it only paces repeated checks.

Usage:
    poller = VerificationPoller(make_verification_check(account_id))
    poller.start()
    ...
    poller.stop()
    result = await poller.wait()
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from uuid import UUID

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_delay,
    wait_fixed,
)

from custom_domains.config import settings
from custom_domains.database import async_session_factory
from custom_domains.services import domain_service
from custom_domains.services.dns_verifier import VerificationResult

logger = logging.getLogger(__name__)

VerificationCheck = Callable[[], Awaitable[VerificationResult]]


def _not_verified(result: VerificationResult) -> bool:
    return not result.verified


def _return_last_result(retry_state: RetryCallState) -> VerificationResult:
    return retry_state.outcome.result()


def make_verification_check(account_id: UUID) -> VerificationCheck:
    """
    Build a check that runs verify_domain in its own committed session.

    Args:
        account_id: Account whose domain to verify

    Returns:
        Zero-argument coroutine function suitable for VerificationPoller
    """
    async def check() -> VerificationResult:
        async with async_session_factory() as session:
            try:
                result, _ = await domain_service.verify_domain(session, account_id)
                await session.commit()
            except Exception:
                await session.rollback()
                raise
        return result

    return check


class VerificationPoller:
    """Repeats a verification check until it succeeds, times out, or is stopped."""

    def __init__(
        self,
        check: VerificationCheck,
        interval: float | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize the poller.

        Args:
            check: Coroutine function returning a VerificationResult
            interval: Seconds between attempts (defaults to settings)
            timeout: Seconds before giving up (defaults to settings)
        """
        self.check = check
        self.interval = interval if interval is not None else settings.VERIFY_POLL_INTERVAL_SECONDS
        self.timeout = timeout if timeout is not None else settings.VERIFY_POLL_TIMEOUT_SECONDS
        self.attempts = 0
        self.last_result: VerificationResult | None = None
        self._task: asyncio.Task | None = None
        self._stopped = False

    @property
    def running(self) -> bool:
        """True while the polling task is alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> "VerificationPoller":
        """Schedule the polling task on the running event loop."""
        if self.running:
            raise RuntimeError("Verification poller is already running")

        self._stopped = False
        self._task = asyncio.create_task(self._run())
        return self

    def stop(self) -> None:
        """Cancel polling. Safe to call more than once."""
        self._stopped = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait(self) -> VerificationResult | None:
        """
        Wait for polling to finish.

        Returns:
            The final result, or the last result seen if the poller was stopped
        """
        if self._task is None:
            return self.last_result
        try:
            return await self._task
        except asyncio.CancelledError:
            if self._stopped:
                return self.last_result
            raise

    async def _attempt(self) -> VerificationResult:
        self.attempts += 1
        result = await self.check()
        self.last_result = result
        logger.debug(
            f"Verification attempt {self.attempts}: verified={result.verified}, "
            f"transient={result.transient}"
        )
        return result

    async def _run(self) -> VerificationResult:
        retrying = AsyncRetrying(
            retry=retry_if_result(_not_verified),
            wait=wait_fixed(self.interval),
            stop=stop_after_delay(self.timeout),
            retry_error_callback=_return_last_result,
        )
        result = await retrying(self._attempt)

        if result.verified:
            logger.info(f"Automatic verification succeeded after {self.attempts} attempt(s)")
        else:
            logger.info(f"Automatic verification gave up after {self.attempts} attempt(s)")
        return result
