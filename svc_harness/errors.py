"""
Error taxonomy for the harness.

Every failure a step can report is a HarnessError. The execution loop
raises the first one it sees after the cleanup sweep has run.
"""
from typing import Optional


class HarnessError(Exception):
    """Base class for all harness failures."""


class AlreadyRunning(HarnessError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Service '{name}' is already running")


class NotRunning(HarnessError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Service '{name}' is not running")


class SpawnFailure(HarnessError):
    def __init__(self, name: str, cause: BaseException):
        self.name = name
        self.cause = cause
        super().__init__(f"Failed to start service '{name}': {cause}")


class StopFailure(HarnessError):
    def __init__(self, name: str, cause: BaseException):
        self.name = name
        self.cause = cause
        super().__init__(f"Failed to stop service '{name}': {cause}")


class AsyncTaskSetupFailure(HarnessError):
    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Failed to create async task driver: {cause}")


class AsyncStepFailure(HarnessError):
    def __init__(self, step_name: str, reason: str):
        self.step_name = step_name
        self.reason = reason
        super().__init__(f"Async step '{step_name}' failed: {reason}")


class InvalidServiceIndex(HarnessError):
    def __init__(self, index: int, size: int, detail: Optional[str] = None):
        self.index = index
        self.size = size
        message = f"Service index {index} is not valid for a registry of {size} service(s)"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class StepAlreadyConsumed(HarnessError):
    def __init__(self, step_name: str):
        self.step_name = step_name
        super().__init__(f"Async step '{step_name}' has already been run")


class HarnessAlreadyExecuted(HarnessError):
    def __init__(self, test_name: str):
        self.test_name = test_name
        super().__init__(f"Harness '{test_name}' has already been executed")
