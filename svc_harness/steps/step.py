from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Union

from ..errors import StepAlreadyConsumed
from .executors import ServiceStepExecutor

AsyncStepFactory = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class ServiceStep:
    """A step that executes over services, such as starting or stopping one."""
    executor: ServiceStepExecutor

    @property
    def name(self) -> str:
        return self.executor.name

    def __str__(self) -> str:
        return repr(self.executor)


@dataclass(eq=False)
class AsyncStep:
    """
    A step that awaits an externally supplied check.

    factory is called exactly once, when the step runs; the awaitable it
    returns resolves to success by returning, or to failure by raising or
    returning False.
    """
    name: str
    description: str
    factory: AsyncStepFactory = field(repr=False)
    _consumed: bool = field(default=False, init=False, repr=False)

    def take(self) -> Awaitable[Any]:
        if self._consumed:
            raise StepAlreadyConsumed(self.name)
        self._consumed = True
        return self.factory()

    def __str__(self) -> str:
        return f"AsyncStep(name={self.name!r}, description={self.description!r})"


Step = Union[ServiceStep, AsyncStep]
