# sdk/views.py
import logging
from typing import Dict, Optional

log = logging.getLogger(__name__)


class RequestSequencer:
    """Numbers fetches per resource so a late, older response cannot
    overwrite state applied from a newer one."""

    def __init__(self) -> None:
        self._issued: Dict[str, int] = {}
        self._applied: Dict[str, int] = {}

    def begin(self, resource: str) -> int:
        seq = self._issued.get(resource, 0) + 1
        self._issued[resource] = seq
        return seq

    def accept(self, resource: str, seq: int) -> bool:
        """Mark ``seq`` applied; False when a newer response already landed."""
        if seq <= self._applied.get(resource, 0):
            log.debug(f"Discarding stale {resource} response #{seq}")
            return False
        self._applied[resource] = seq
        return True


class ViewState:
    """Shared banner handling: last error message, kept until dismissed."""

    def __init__(self) -> None:
        self.error: Optional[str] = None
        self.sequencer = RequestSequencer()

    def dismiss_error(self) -> None:
        self.error = None

    def _fail(self, message: str, exc: Exception) -> None:
        log.warning(f"{message}: {exc}")
        self.error = message
