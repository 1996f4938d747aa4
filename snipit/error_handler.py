import logging
import traceback
from pathlib import Path
from typing import Any, Dict, List

LOGGER_NAME = "snipit"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stream handler to the project logger once."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


class ErrorHandler:
    """Collects per-record failures so a listing can keep going and report later."""

    def __init__(self) -> None:
        self.logger = logging.getLogger(LOGGER_NAME)
        self.errors: List[Dict[str, Any]] = []

    def handle_error(self, error: Exception, context: Dict[str, Any]) -> Dict[str, Any]:
        """Log ``error`` with its context and keep it for the summary."""
        error_info = {
            "type": type(error).__name__,
            "message": str(error),
            "context": context,
            "traceback": traceback.format_exc() if self.logger.isEnabledFor(logging.DEBUG) else None,
        }

        self.logger.error(
            "%s: %s | Context: %s", error_info["type"], error_info["message"], context
        )

        self.errors.append(error_info)
        return error_info

    def collect_record_error(self, error: Exception, file_path: str, operation: str) -> Dict[str, Any]:
        """Collect a failure tied to one snippet file."""
        context = {
            "file_path": file_path,
            "operation": operation,
            "file_name": Path(file_path).name if file_path else "unknown",
        }
        return self.handle_error(error, context)

    def get_error_summary(self) -> Dict[str, Any]:
        if not self.errors:
            return {"total_errors": 0, "error_types": {}, "failed_files": []}

        error_types: Dict[str, int] = {}
        failed_files = []

        for error in self.errors:
            error_type = error["type"]
            error_types[error_type] = error_types.get(error_type, 0) + 1

            context = error.get("context", {})
            if "file_path" in context:
                failed_files.append({
                    "file": context["file_path"],
                    "error": error["message"],
                    "operation": context.get("operation", "unknown"),
                })

        return {
            "total_errors": len(self.errors),
            "error_types": error_types,
            "failed_files": failed_files,
        }

    def clear_errors(self) -> None:
        self.errors.clear()

    def format_error_report(self) -> str:
        """Format a short, user-facing report of skipped records."""
        summary = self.get_error_summary()

        if summary["total_errors"] == 0:
            return ""

        lines = [f"\n⚠️  {summary['total_errors']} snippet file(s) could not be read", ""]

        for failure in summary["failed_files"][:5]:
            file_name = Path(failure["file"]).name
            lines.append(f"  • {file_name}: {failure['error']}")

        if len(summary["failed_files"]) > 5:
            lines.append(f"  ... and {len(summary['failed_files']) - 5} more")

        return "\n".join(lines)


__all__ = ["ErrorHandler", "LOGGER_NAME", "configure_logging"]
