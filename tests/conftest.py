import pytest

from svc_harness.errors import StopFailure
from svc_harness.services.base_service import BaseService


class FakeService(BaseService):
    """In-memory service that records start/stop calls into a shared journal."""

    def __init__(self, name: str, journal: list, fail_stop: bool = False):
        super().__init__(name)
        self.journal = journal
        self.fail_stop = fail_stop
        self.running = False
        self.start_calls = 0
        self.stop_calls = 0

    def start(self):
        self.start_calls += 1
        self.journal.append(("start", self.name))
        self.running = True

    def stop(self):
        if not self.running:
            return
        self.stop_calls += 1
        self.journal.append(("stop", self.name))
        self.running = False
        if self.fail_stop:
            raise StopFailure(self.name, OSError("permission denied"))

    def is_running(self) -> bool:
        return self.running


@pytest.fixture
def journal():
    return []


@pytest.fixture
def make_service(journal):
    def _make(name: str, **kwargs) -> FakeService:
        return FakeService(name, journal, **kwargs)
    return _make
