from __future__ import annotations
import logging
from typing import Any, Dict


class StructuredLogger:
    def __init__(self, name: str = "catalog.service"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

    def log_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_ms: float,
        request_id: str | None = None,
        extra: Dict[str, Any] | None = None,
    ) -> None:
        """Logs an API request with structured fields."""
        log_data = {
            "type": "api_request",
            "method": method,
            "path": path,
            "status_code": status_code,
            "duration_ms": round(duration_ms, 2),
            "request_id": request_id,
        }
        if extra:
            log_data.update(extra)
        self.logger.info(f"Structured log: {log_data}")

    def log_attempt_failed(
        self,
        label: str,
        attempt: str,
        index: int,
        error: BaseException,
        duration_ms: float,
        params: Dict[str, Any] | None = None,
    ) -> None:
        """One relaxation attempt was rejected or timed out."""
        log_data = {
            "type": "attempt_failed",
            "label": label,
            "attempt": attempt,
            "index": index,
            "error_type": type(error).__name__,
            "error": str(error),
            "duration_ms": round(duration_ms, 2),
            "params": params,
        }
        self.logger.warning(f"Structured log: {log_data}")

    def log_degraded_result(
        self,
        label: str,
        attempt: str,
        index: int,
        attempts_total: int,
    ) -> None:
        """A query was answered by a relaxed attempt."""
        log_data = {
            "type": "degraded_result",
            "label": label,
            "attempt": attempt,
            "index": index,
            "attempts_total": attempts_total,
        }
        self.logger.warning(f"Structured log: {log_data}")

    def log_exhausted(self, label: str, attempts_total: int) -> None:
        """Every attempt failed; the caller falls back to an empty result."""
        log_data = {
            "type": "attempts_exhausted",
            "label": label,
            "attempts_total": attempts_total,
        }
        self.logger.error(f"Structured error: {log_data}")


service_logger = StructuredLogger()
