"""In-memory, append-only log of executed calls.

Every call a session sends, successful or not, is recorded as an immutable
:class:`~spectui.models.HistoryEntry`.  Sequence numbers start at 0 and grow
by one per append; entries are never edited or removed, and the log is
discarded when the process exits.
"""

from __future__ import annotations

import logging
from typing import Optional

from spectui.exceptions import NotFoundError
from spectui.models import CallOutcome, HistoryEntry, OutboundRequest

logger = logging.getLogger(__name__)


class CallHistory:
    """Ordered record of request/outcome pairs.

    Example::

        history = CallHistory()
        seq = history.append(request, outcome, label="GET /pets")
        history.get(seq).outcome.status_code
    """

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []

    def append(
        self, request: OutboundRequest, outcome: CallOutcome, label: str = ""
    ) -> int:
        """Record a call and return its sequence number."""
        sequence = len(self._entries)
        entry = HistoryEntry(sequence=sequence, label=label, request=request, outcome=outcome)
        self._entries.append(entry)
        logger.debug("Recorded %s", entry.summary)
        return sequence

    def get(self, sequence: int) -> HistoryEntry:
        """Return the entry recorded as *sequence*.

        Raises:
            NotFoundError: If no call has that sequence number.
        """
        if 0 <= sequence < len(self._entries):
            return self._entries[sequence]
        raise NotFoundError(f"No history entry #{sequence}")

    def all(self) -> list[HistoryEntry]:
        """Return every entry, oldest first."""
        return list(self._entries)

    def latest(self) -> Optional[HistoryEntry]:
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)
