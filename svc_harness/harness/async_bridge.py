import asyncio
import logging
from typing import Any, Awaitable, Optional

from ..errors import AsyncStepFailure, AsyncTaskSetupFailure, StepAlreadyConsumed
from ..steps.step import AsyncStep

logger = logging.getLogger("svc-harness.async-bridge")


async def _drive(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


class AsyncStepDriver:
    """
    Runs async steps to completion from synchronous harness code.

    One event loop (asyncio.Runner) is created on the first async step and
    reused for every later one until close(). run() blocks until the step's
    awaitable resolves; there is no timeout and no cancellation.
    """

    def __init__(self):
        self._runner: Optional[asyncio.Runner] = None

    @property
    def started(self) -> bool:
        return self._runner is not None

    def _ensure_runner(self) -> asyncio.Runner:
        if self._runner is not None:
            return self._runner

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise AsyncTaskSetupFailure(
                RuntimeError("async steps cannot be driven from inside a running event loop")
            )

        try:
            runner = asyncio.Runner()
        except (OSError, RuntimeError) as e:
            raise AsyncTaskSetupFailure(e) from e
        try:
            runner.get_loop()
        except (OSError, RuntimeError) as e:
            runner.close()
            raise AsyncTaskSetupFailure(e) from e

        logger.debug("Async step driver created")
        self._runner = runner
        return runner

    def run(self, step: AsyncStep) -> Any:
        runner = self._ensure_runner()

        try:
            awaitable = step.take()
            result = runner.run(_drive(awaitable))
        except StepAlreadyConsumed:
            raise
        except (Exception, asyncio.CancelledError) as e:
            # A cancelled check counts as a failed check
            reason = str(e) or type(e).__name__
            raise AsyncStepFailure(step.name, reason) from e

        if result is False:
            raise AsyncStepFailure(step.name, "check reported failure")
        return result

    def close(self):
        if self._runner is not None:
            self._runner.close()
            self._runner = None
            logger.debug("Async step driver closed")

    def __enter__(self) -> "AsyncStepDriver":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
