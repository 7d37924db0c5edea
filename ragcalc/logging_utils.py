import logging
import os
import json
from datetime import datetime
from typing import Any

from ragcalc.config import LOG_DIR


def get_session_logger(session_id: str) -> logging.Logger:
    """
    Returns a logger configured to write to a session-specific file.
    Creates the logs directory if it doesn't exist.
    """
    if not os.path.exists(LOG_DIR):
        os.makedirs(LOG_DIR)

    logger_name = f"ragcalc_{session_id}"
    logger = logging.getLogger(logger_name)

    # Avoid adding multiple handlers if the logger already has them
    if not logger.handlers:
        logger.setLevel(logging.INFO)
        log_file = os.path.join(LOG_DIR, f"{logger_name}.log")

        file_handler = logging.FileHandler(log_file)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        # Also log to console for visibility
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def serialize(obj: Any) -> Any:
    """Best-effort conversion of pydantic models and lists for JSON logging."""
    if isinstance(obj, (list, tuple)):
        return [serialize(item) for item in obj]
    if isinstance(obj, (dict, str, int, float, bool)) or obj is None:
        return obj
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    return str(obj)


def log_api_call(
    logger: logging.Logger, provider: str, method: str, payload: Any, response: Any
):
    """
    Utility to log external requests and responses in a structured way.
    """
    log_entry = {
        "timestamp": datetime.now().isoformat(),
        "provider": provider,
        "method": method,
        "request": serialize(payload),
        "response": serialize(response),
    }

    logger.info("API_CALL: %s", json.dumps(log_entry, indent=2, default=str))
