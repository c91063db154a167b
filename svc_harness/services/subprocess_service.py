import logging
from typing import Dict, List, Optional, Sequence

import psutil

from ..config import settings
from ..errors import AlreadyRunning, SpawnFailure, StopFailure
from .base_service import BaseService

logger = logging.getLogger("svc-harness.services.subprocess")


class SubprocessService(BaseService):
    """
    Service backed by an OS child process.

    The service counts as running while it holds a process handle; the
    process itself is not re-queried. stop() kills the process and joins it
    with a bounded wait so the process has released its resources (ports,
    files) before the next step runs.
    """

    def __init__(
        self,
        name: str,
        command: str,
        args: Optional[Sequence[str]] = None,
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        stop_timeout: Optional[float] = None,
    ):
        super().__init__(name)
        self.command = command
        self.args: List[str] = list(args or [])
        self.cwd = cwd
        self.env = env
        self.stop_timeout = stop_timeout if stop_timeout is not None else settings.STOP_TIMEOUT
        self._process: Optional[psutil.Popen] = None

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process is not None else None

    def is_running(self) -> bool:
        return self._process is not None

    def start(self) -> None:
        if self.is_running():
            raise AlreadyRunning(self.name)

        cmdline = [self.command, *self.args]
        try:
            self._process = psutil.Popen(cmdline, cwd=self.cwd, env=self.env)
        except OSError as e:
            raise SpawnFailure(self.name, e) from e
        logger.info(f"Spawned {self.name} (pid={self._process.pid}): {' '.join(cmdline)}")

    def stop(self) -> None:
        process = self._process
        if process is None:
            return
        # The handle is released whatever the outcome below
        self._process = None

        try:
            process.kill()
        except psutil.NoSuchProcess:
            logger.info(f"{self.name} (pid={process.pid}) had already exited")
        except (psutil.Error, OSError) as e:
            raise StopFailure(self.name, e) from e

        try:
            returncode = process.wait(timeout=self.stop_timeout)
        except psutil.TimeoutExpired as e:
            raise StopFailure(self.name, e) from e
        logger.info(f"Stopped {self.name} (pid={process.pid}, returncode={returncode})")
