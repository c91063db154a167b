import logging
import sys

from pythonjsonlogger import jsonlogger

from .config import settings

_TEXT_FORMAT = "%(asctime)s.%(msecs)03d  %(levelname)-8s %(name)s  %(run_context)s%(message)s"
_JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(test_name)s %(step)s %(message)s"


def run_context(test_name: str, step: str = "") -> dict:
    """extra= payload identifying the harness run (and step position, e.g. "2/5") of a log record."""
    return {"test_name": test_name, "step": step}


class HarnessFormatter(logging.Formatter):
    """
    Text formatter that tags each line with the test run and step it belongs to.

      2026-02-21 14:05:33.421  INFO     svc-harness.harness  [PythonServerTester 1/3] Executing step 1/3: ...
      2026-02-21 14:05:35.430  INFO     svc-harness.registry  Registered service: echo (index=0)

    Records logged without run_context() extras get no tag.
    """

    def __init__(self):
        super().__init__(fmt=_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        tag = " ".join(p for p in (getattr(record, "test_name", ""), getattr(record, "step", "")) if p)
        record.run_context = f"[{tag}] " if tag else ""
        return super().format(record)


class _RunContextDefaults(logging.Filter):
    """Fills test_name/step so the JSON format string never hits a missing field."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.test_name = getattr(record, "test_name", "")
        record.step = getattr(record, "step", "")
        return True


def setup_logging() -> logging.Logger:
    """
    Configures logging for a harness run.
    Uses JSON formatting in production, tagged text otherwise.
    Not called on import; test entry points opt in.
    """
    root = logging.getLogger()

    # clear existing handlers
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)

    if settings.ENVIRONMENT == "production":
        handler.addFilter(_RunContextDefaults())
        handler.setFormatter(jsonlogger.JsonFormatter(_JSON_FORMAT, json_ensure_ascii=False))
    else:
        handler.setFormatter(HarnessFormatter())

    root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL)

    # Reduce noise from libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return root
