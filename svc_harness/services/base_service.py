from abc import ABC, abstractmethod


class BaseService(ABC):
    """
    Base class for all harness-controlled services.
    Enforces the Service protocol expected by the Harness registry.
    """
    def __init__(self, name: str):
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @abstractmethod
    def start(self) -> None:
        """Start the service. Raises AlreadyRunning or SpawnFailure."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop the service. No-op when not running; raises StopFailure."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
