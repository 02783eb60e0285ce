"""Debug logging of provider calls to JSON files.

Raw entropy is never written to disk: values are replaced by a count
before the record is persisted.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_SECRET_KEY_MARKERS = ("api_key", "authorization", "token", "secret", "password")
_ENTROPY_KEY_MARKERS = ("values", "data", "seed")


def get_logs_dir() -> Path:
    """Get logs directory, create if needed."""
    logs_dir = Path("./logs")
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def _sanitize_for_logs(value: Any, key_hint: str = "") -> Any:
    """Recursively redact secrets and entropy before persisting debug logs."""
    key = key_hint.lower()
    if any(marker in key for marker in _SECRET_KEY_MARKERS):
        return "[REDACTED_SECRET]"
    if any(marker in key for marker in _ENTROPY_KEY_MARKERS):
        if isinstance(value, (list, tuple, bytes, str)):
            return f"[REDACTED_ENTROPY length={len(value)}]"

    if isinstance(value, dict):
        return {
            str(k): _sanitize_for_logs(v, key_hint=str(k)) for k, v in value.items()
        }

    if isinstance(value, (list, tuple)):
        return [_sanitize_for_logs(item, key_hint=key_hint) for item in value]

    if isinstance(value, str) and len(value) > 200:
        return value[:200] + "...[truncated]"

    return value


def log_provider_call(
    provider: str,
    request: dict,
    values: list[int] | None,
    error: str | None = None,
) -> None:
    """Log sanitized request/outcome metadata of one provider call."""
    logs_dir = get_logs_dir()
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    log_file = logs_dir / f"{timestamp}_{provider}_fetch.json"

    log_data = {
        "timestamp": datetime.now().isoformat(),
        "provider": provider,
        "request": _sanitize_for_logs(request, key_hint="request"),
        "success": values is not None,
        "values": _sanitize_for_logs(values, key_hint="values")
        if values is not None
        else None,
        "error": error,
    }

    try:
        with open(log_file, "w", encoding="utf-8") as f:
            json.dump(log_data, f, indent=2, default=str)
    except Exception as exc:
        logger.warning("Failed to write provider debug log %s: %s", log_file, exc)
