import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class EndpointMetrics:
    calls: int = 0
    transport_errors: int = 0
    total_latency_ms: float = 0.0
    status_classes: Dict[str, int] = field(default_factory=dict)

    def observe(self, duration_ms: float, status_code: Optional[int]) -> None:
        """``status_code`` is None when no response came back."""
        self.calls += 1
        self.total_latency_ms += float(duration_ms)
        if status_code is None:
            self.transport_errors += 1
            return
        status_class = f"{status_code // 100}xx"
        self.status_classes[status_class] = self.status_classes.get(status_class, 0) + 1

    @property
    def avg_latency_ms(self) -> float:
        if self.calls == 0:
            return 0.0
        return self.total_latency_ms / self.calls


class InMemoryMetrics:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tools: Dict[str, EndpointMetrics] = {}

    def record(self, tool: str, duration_ms: float, status_code: Optional[int] = None) -> None:
        with self._lock:
            metrics = self._tools.setdefault(tool, EndpointMetrics())
            metrics.observe(duration_ms, status_code)

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return {
                name: {
                    "calls": m.calls,
                    "transport_errors": m.transport_errors,
                    "avg_latency_ms": round(m.avg_latency_ms, 3),
                    "status": dict(m.status_classes),
                }
                for name, m in self._tools.items()
            }


def format_metrics(metrics: InMemoryMetrics) -> str:
    return json.dumps(metrics.snapshot(), sort_keys=True, separators=(",", ":"))


class StructuredFormatter(logging.Formatter):
    """Fills in missing structured fields so the format string never fails."""

    FIELDS = ("tool", "method", "url", "status", "duration_ms")

    def format(self, record: logging.LogRecord) -> str:
        for name in self.FIELDS:
            if not hasattr(record, name):
                setattr(record, name, "")
        return super().format(record)


def setup_logger(level_name: str = "INFO") -> logging.Logger:
    # stdout carries the MCP channel, so the handler must stay on stderr
    logger = logging.getLogger("function_app_tester")
    if logger.handlers:
        return logger
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logger.setLevel(level)
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter(
        '{"ts":"%(asctime)s","level":"%(levelname)s","tool":"%(tool)s","method":"%(method)s",'
        '"url":"%(url)s","status":"%(status)s","duration_ms":"%(duration_ms)s","msg":"%(message)s"}'
    ))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
