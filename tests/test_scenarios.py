"""
End-to-end runs against a real `python -m http.server` process.
"""
import asyncio
import socket
import sys
import time

import httpx
import pytest

from svc_harness.checks.http_check import http_check_step
from svc_harness.errors import AlreadyRunning, AsyncStepFailure, NotRunning
from svc_harness.harness.harness import Harness
from svc_harness.services.subprocess_service import SubprocessService
from svc_harness.steps.executors import Starter, Stopper
from svc_harness.steps.step import AsyncStep, ServiceStep


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def _echo_service(port: int) -> SubprocessService:
    return SubprocessService(
        "echo",
        sys.executable,
        ["-m", "http.server", str(port), "--bind", "127.0.0.1"],
        stop_timeout=10,
    )


def _wait_until_listening(url: str, deadline: float = 15.0):
    """Readiness probe: polls url until the server answers or the deadline passes."""
    async def probe():
        started = time.monotonic()
        async with httpx.AsyncClient(timeout=1.0) as client:
            while True:
                try:
                    await client.get(url)
                    return
                except httpx.TransportError:
                    if time.monotonic() - started > deadline:
                        raise
                    await asyncio.sleep(0.1)
    return AsyncStep(name="Wait_Ready", description=f"Wait for {url}", factory=probe)


@pytest.fixture
def port():
    return _free_port()


def test_start_call_api_stop(port):
    url = f"http://127.0.0.1:{port}/"
    harness = Harness("PythonServerTester", ".")
    echo = harness.add_service(_echo_service(port))

    harness.add_step(ServiceStep(Starter(echo, "echo", "Starts the Python HTTP server")))
    harness.add_step(_wait_until_listening(url))
    harness.add_step(http_check_step("Call_API", url, "Check API response being 200"))
    harness.add_step(ServiceStep(Stopper(echo, "echo", "Stops the Python HTTP server")))

    harness.execute()

    assert harness.services.resolve(echo).is_running() is False


def test_double_start_is_cleaned_up(port):
    harness = Harness("DoubleStart")
    echo = harness.add_service(_echo_service(port))
    harness.add_step(ServiceStep(Starter(echo, "echo")))
    harness.add_step(ServiceStep(Starter(echo, "echo")))

    with pytest.raises(AlreadyRunning, match="echo"):
        harness.execute()

    assert harness.services.resolve(echo).is_running() is False
    assert harness.last_cleanup[0].stopped is True


def test_stop_without_start(port):
    harness = Harness("StopFirst")
    echo = harness.add_service(_echo_service(port))
    harness.add_step(ServiceStep(Stopper(echo, "echo")))

    with pytest.raises(NotRunning, match="echo"):
        harness.execute()

    assert harness.last_cleanup == []


def test_failed_check_stops_service(port):
    unused_port = _free_port()
    harness = Harness("NotReady")
    echo = harness.add_service(_echo_service(port))
    harness.add_step(ServiceStep(Starter(echo, "echo")))
    # Nothing listens on unused_port, so the connection is refused
    harness.add_step(http_check_step("Call_API", f"http://127.0.0.1:{unused_port}/", timeout=2.0))
    harness.add_step(ServiceStep(Stopper(echo, "echo")))

    with pytest.raises(AsyncStepFailure) as excinfo:
        harness.execute()

    assert excinfo.value.step_name == "Call_API"
    assert harness.services.resolve(echo).is_running() is False
    assert [o.service_name for o in harness.last_cleanup] == ["echo"]


def test_port_is_free_after_stop(port):
    url = f"http://127.0.0.1:{port}/"
    harness = Harness("Restart")
    echo = harness.add_service(_echo_service(port))
    harness.add_step(ServiceStep(Starter(echo, "echo")))
    harness.add_step(_wait_until_listening(url))
    harness.add_step(ServiceStep(Stopper(echo, "echo")))
    harness.add_step(ServiceStep(Starter(echo, "echo")))
    harness.add_step(_wait_until_listening(url))
    harness.add_step(http_check_step("Call_API", url))
    harness.add_step(ServiceStep(Stopper(echo, "echo")))

    harness.execute()
