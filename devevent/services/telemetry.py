"""Fire-and-forget usage tracking."""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class TelemetrySink:
    """Records usage events as INFO log lines on this module's logger.

    Events are not forwarded to an analytics service. Nothing in the write
    path reads them, and a disabled sink drops them.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    def capture(self, name: str, properties: dict[str, Any] | None = None) -> None:
        if self.enabled:
            logger.info("telemetry %s %s", name, properties or {})
