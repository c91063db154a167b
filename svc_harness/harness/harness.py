import logging
from dataclasses import dataclass
from typing import List, Optional

from ..errors import HarnessAlreadyExecuted
from ..logger import run_context
from ..services.base_service import BaseService
from ..steps.step import AsyncStep, ServiceStep, Step
from .async_bridge import AsyncStepDriver
from .registry import ServiceHandle, ServiceRegistry

logger = logging.getLogger("svc-harness.harness")


@dataclass(frozen=True)
class CleanupOutcome:
    service_name: str
    stopped: bool
    error: Optional[BaseException] = None


class Harness:
    """
    Runs an ordered list of steps against a registry of services.

    Steps execute strictly one at a time. On the first failing step every
    running service is stopped, last registered first, and the failure is
    raised; later steps are not attempted. A harness can execute only once.
    """

    def __init__(self, test_name: str, root_dir: str = "."):
        self.test_name = test_name
        self.root_dir = root_dir
        self.services = ServiceRegistry()
        self.steps: List[Step] = []
        self.last_cleanup: List[CleanupOutcome] = []
        self._executed = False

    def add_service(self, service: BaseService) -> ServiceHandle:
        self._check_not_executed()
        return self.services.add(service)

    def add_step(self, step: Step):
        self._check_not_executed()
        if not isinstance(step, (ServiceStep, AsyncStep)):
            raise TypeError(f"Unsupported step type: {type(step).__name__}")
        self.steps.append(step)

    def execute(self) -> None:
        self._check_not_executed()
        self._executed = True

        logger.info(f"Executing test: {self.test_name} with rootdir: {self.root_dir}", extra=run_context(self.test_name))
        total_steps = len(self.steps)

        with AsyncStepDriver() as driver:
            for idx, step in enumerate(self.steps, start=1):
                ctx = run_context(self.test_name, f"{idx}/{total_steps}")
                logger.info(f"Executing step {idx}/{total_steps}: {step}", extra=ctx)
                try:
                    self._run_step(step, driver)
                except BaseException as e:
                    logger.error(f"Step execution failed ({idx}/{total_steps}): {e}", extra=ctx)
                    self.last_cleanup = self._cleanup_running_services()
                    raise
                logger.info(f"Step executed successfully: {idx}/{total_steps}", extra=ctx)

        logger.info(f"Test execution completed for {self.test_name}", extra=run_context(self.test_name))

    def _run_step(self, step: Step, driver: AsyncStepDriver):
        if isinstance(step, ServiceStep):
            step.executor.execute(self.services)
        else:
            driver.run(step)

    def _cleanup_running_services(self) -> List[CleanupOutcome]:
        """Stop every running service in reverse registration order, logging failures."""
        outcomes: List[CleanupOutcome] = []
        ctx = run_context(self.test_name, "cleanup")
        for service in reversed(self.services):
            if not service.is_running():
                continue
            try:
                logger.info(f"Stopping {service.name}...", extra=ctx)
                service.stop()
                logger.info(f"Service {service.name} stopped successfully", extra=ctx)
                outcomes.append(CleanupOutcome(service.name, stopped=True))
            except Exception as e:
                logger.error(f"Failed to stop service {service.name}: {e}", extra=ctx)
                outcomes.append(CleanupOutcome(service.name, stopped=False, error=e))
        return outcomes

    def _check_not_executed(self):
        if self._executed:
            raise HarnessAlreadyExecuted(self.test_name)
