"""
Request Logger - Logs generation and download requests for debugging.

Stores recent requests in memory; served by the /logs endpoint.
"""

from datetime import datetime, timezone
from typing import Optional
from collections import deque
import uuid


class RequestLogger:
    """In-memory request logger for development debugging."""

    def __init__(self, max_logs: int = 1000):
        """
        Initialize the logger.

        Args:
            max_logs: Maximum number of logs to retain in memory
        """
        self._logs: deque = deque(maxlen=max_logs)

    def log_request(
        self,
        endpoint: str,
        mode: str = "prod",
        subject: str = "",
        input_bytes: int = 0,
    ) -> str:
        """
        Log an incoming request.

        Args:
            endpoint: The API endpoint called
            mode: "mock" or "prod"
            subject: Subject slug from the request, if any
            input_bytes: Size of the uploaded PDF or LaTeX body

        Returns:
            Log ID for correlating with response
        """
        log_id = str(uuid.uuid4())[:8]

        self._logs.append({
            "id": log_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoint": endpoint,
            "mode": mode,
            "subject": subject,
            "input_bytes": input_bytes,
            "status": "pending",
            "response_time_ms": None,
            "output_bytes": None,
            "total_tokens": None,
            "error": None,
        })
        return log_id

    def log_response(
        self,
        log_id: str,
        success: bool,
        output_bytes: Optional[int] = None,
        total_tokens: Optional[int] = None,
        error: Optional[str] = None,
    ) -> None:
        """
        Update a log entry with response info.

        Args:
            log_id: The log ID from log_request
            success: Whether the request succeeded
            output_bytes: Size of the returned LaTeX or PDF
            total_tokens: Model tokens spent, for generation requests
            error: Error message if failed
        """
        for log in reversed(self._logs):
            if log["id"] == log_id:
                request_time = datetime.fromisoformat(log["timestamp"])
                response_time = datetime.now(timezone.utc)
                log["response_time_ms"] = int(
                    (response_time - request_time).total_seconds() * 1000
                )
                log["status"] = "success" if success else "error"
                log["output_bytes"] = output_bytes
                log["total_tokens"] = total_tokens
                if error:
                    log["error"] = error
                break

    def get_logs(self, limit: int = 100) -> list[dict]:
        """
        Get recent logs.

        Args:
            limit: Maximum number of logs to return

        Returns:
            List of log entries, most recent first
        """
        logs = list(self._logs)
        logs.reverse()
        return logs[:limit]

    def clear_logs(self) -> None:
        """Clear all logs."""
        self._logs.clear()


request_logger = RequestLogger()
