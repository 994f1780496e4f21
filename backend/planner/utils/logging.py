"""Structured logging helpers."""

import logging
from typing import Any


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once at application start."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


class StructuredEventLogger:
    """Logs planner events with a structured payload under ``extra``."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def log_event(self, event: str, outcome: str, **fields: Any) -> None:
        """Log an event; non-success outcomes are warnings."""
        log_data: dict[str, Any] = {"event": event, "outcome": outcome, **fields}
        log_msg = f"{event} - {outcome}"

        if outcome == "success":
            self._logger.info(log_msg, extra={"structured": log_data})
        else:
            self._logger.warning(log_msg, extra={"structured": log_data})

    def log_rate_refresh(
        self,
        outcome: str,
        rate: float,
        source: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log one exchange rate refresh attempt."""
        fields: dict[str, Any] = {
            "rate": rate,
            "source": source,
            "latency_ms": round(latency_ms, 2),
        }
        if error_reason:
            fields["error_reason"] = error_reason
        self.log_event("fx_refresh", outcome, **fields)
