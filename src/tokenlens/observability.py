"""Observability helpers for structured logging."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from tokenlens.settings import Settings, get_settings

EVENT_LOGGER_NAME = "tokenlens.observability"
_LOGGER = logging.getLogger(EVENT_LOGGER_NAME)


class Observability:
    """Emit structured log events tagged with a component name."""

    def __init__(
        self,
        *,
        settings: Settings,
        component: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.settings = settings
        self.component = component or "core"
        self._logger = logger or _LOGGER
        self._structured_logging = bool(settings.observability.structured_logging)
        self._service_name = settings.observability.service_name

    def emit_event(self, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
        """Emit a structured log if enabled, plain text otherwise."""

        if not self._logger.isEnabledFor(level):
            return
        payload = {
            "event": event,
            "service": self._service_name,
            "component": self.component,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **_sanitize_dict(fields),
        }
        if self._structured_logging:
            message = json.dumps(payload, default=_serialize)
            self._logger.log(level, message)
        else:
            self._logger.log(level, "%s | %s", event, payload)


def get_observability(*, component: str | None = None, settings: Settings | None = None) -> Observability:
    """Return an :class:`Observability` instance for the requested component."""

    resolved = settings or get_settings()
    return Observability(settings=resolved, component=component, logger=_LOGGER)


def configure_logging(settings: Settings | None = None) -> None:
    """Install a root handler at the configured runtime log level."""

    resolved = settings or get_settings()
    level = getattr(logging, resolved.log_level, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------


def _serialize(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, list):
        return [_serialize(item) for item in value]
    if isinstance(value, tuple):
        return tuple(_serialize(item) for item in value)
    if isinstance(value, dict):
        return {str(key): _serialize(val) for key, val in value.items()}
    return str(value)


def _sanitize_dict(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    sanitized: dict[str, Any] = {}
    for key, value in payload.items():
        if isinstance(value, Mapping):
            sanitized[str(key)] = _sanitize_dict(value)
        else:
            sanitized[str(key)] = value
    return sanitized


__all__ = ["EVENT_LOGGER_NAME", "Observability", "configure_logging", "get_observability"]
