import logging
import traceback
from typing import Any, Dict, List

from .errors import CodeKeepError, NotFoundError, StoreError, TransportError, ValidationError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the shared ``codekeep`` logger once."""
    logger = logging.getLogger("codekeep")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger


class ErrorHandler:
    """Collects client-side failures and turns them into user-facing notices."""

    USER_MESSAGES = {
        ValidationError: "The snippet was rejected",
        NotFoundError: "That snippet no longer exists",
        StoreError: "The snippet service could not complete the request",
        TransportError: "Could not reach the snippet service. Make sure the backend server is running",
    }

    def __init__(self, log_level: str = "INFO"):
        self.logger = setup_logging(log_level)
        self.errors: List[Dict[str, Any]] = []

    def handle_error(self, error: Exception, context: Dict[str, Any]) -> Dict[str, Any]:
        """Log ``error`` with its context and keep it for the notification area."""
        error_info = {
            "type": type(error).__name__,
            "message": str(error),
            "notice": self.user_message(error),
            "context": context,
            "traceback": traceback.format_exc() if self.logger.level <= logging.DEBUG else None,
        }

        self.logger.error(
            "%s: %s | Context: %s", error_info["type"], error_info["message"], context
        )
        self.errors.append(error_info)
        return error_info

    def collect_operation_error(self, error: Exception, operation: str, snippet_id: str | None = None) -> Dict[str, Any]:
        context: Dict[str, Any] = {"operation": operation}
        if snippet_id:
            context["snippet_id"] = snippet_id
        return self.handle_error(error, context)

    def user_message(self, error: Exception) -> str:
        for error_type, message in self.USER_MESSAGES.items():
            if isinstance(error, error_type):
                return f"{message}: {error}"
        if isinstance(error, CodeKeepError):
            return str(error)
        return f"Unexpected error: {error}"

    def format_error_report(self) -> str:
        """Format the collected notices, newest last."""
        if not self.errors:
            return ""

        lines = [f"⚠️  {len(self.errors)} operation(s) failed"]
        for error in self.errors[-5:]:
            lines.append(f"  • {error['notice']}")
        if len(self.errors) > 5:
            lines.append(f"  ... and {len(self.errors) - 5} earlier")
        return "\n".join(lines)
