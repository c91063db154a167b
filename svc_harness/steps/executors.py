import logging
import time
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Optional, Union

from ..errors import AlreadyRunning, NotRunning
from ..harness.registry import ServiceRef, ServiceRegistry

logger = logging.getLogger("svc-harness.steps.executors")

Delay = Union[float, int, timedelta]


def _to_seconds(delay: Optional[Delay]) -> Optional[float]:
    if delay is None:
        return None
    if isinstance(delay, timedelta):
        seconds = delay.total_seconds()
    else:
        seconds = float(delay)
    if seconds < 0:
        raise ValueError(f"wait_after must not be negative, got {seconds}s")
    return seconds


class ServiceStepExecutor(ABC):
    """
    A step that acts on the service registry, e.g. starting or stopping a service.
    """

    def __init__(
        self,
        target: ServiceRef,
        name: str,
        description: str = "",
        wait_after: Optional[Delay] = None,
    ):
        self.target = target
        self.name = name
        self.description = description
        self.wait_after = _to_seconds(wait_after)

    @abstractmethod
    def execute(self, services: ServiceRegistry) -> None:
        pass

    def _pause(self):
        if self.wait_after:
            logger.debug(f"{self.name}: waiting {self.wait_after}s after step")
            time.sleep(self.wait_after)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, description={self.description!r})"


class Starter(ServiceStepExecutor):
    """Starts the target service. wait_after gives it time to become ready."""

    def execute(self, services: ServiceRegistry) -> None:
        service = services.resolve(self.target)
        if service.is_running():
            raise AlreadyRunning(self.name)
        service.start()
        self._pause()


class Stopper(ServiceStepExecutor):
    """Stops the target service."""

    def execute(self, services: ServiceRegistry) -> None:
        service = services.resolve(self.target)
        if not service.is_running():
            raise NotRunning(self.name)
        service.stop()
        self._pause()
