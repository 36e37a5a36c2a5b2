"""Hash-chained journal of served witnesses.

Each entry contains a SHA-256 hash of the previous entry so that
tampering is detectable.  The hint server appends one entry per request
it answers or refuses.
"""

from __future__ import annotations

import hashlib
import json
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

GENESIS = "0" * 64


@dataclass
class JournalEntry:
    timestamp: float
    request: str
    params: Dict[str, str]
    outcome: Dict[str, Any]
    prev_hash: str
    entry_hash: str


def _digest(timestamp: float, request: str, params: Dict[str, str],
            outcome: Dict[str, Any], prev_hash: str) -> str:
    payload = json.dumps(
        {
            "timestamp": timestamp,
            "request": request,
            "params": params,
            "outcome": outcome,
            "prev_hash": prev_hash,
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(payload.encode()).hexdigest()


class HintJournal:
    """Append-only record of witness requests."""

    def __init__(self) -> None:
        self._entries: List[JournalEntry] = []
        self._prev_hash: str = GENESIS

    def __len__(self) -> int:
        return len(self._entries)

    def record(
        self,
        request: str,
        params: Dict[str, int],
        limbs: Optional[List[int]] = None,
        flag: Optional[int] = None,
        error: Optional[str] = None,
    ) -> JournalEntry:
        """Append the outcome of one witness request.

        Integers are stored as decimal strings; they exceed JSON-safe
        ranges.
        """
        ts = time.time()
        str_params = {name: str(v) for name, v in params.items()}
        if error is not None:
            outcome: Dict[str, Any] = {"error": error}
        else:
            outcome = {"limbs": [str(v) for v in limbs or []], "flag": flag}
        entry_hash = _digest(ts, request, str_params, outcome, self._prev_hash)
        entry = JournalEntry(
            timestamp=ts,
            request=request,
            params=str_params,
            outcome=outcome,
            prev_hash=self._prev_hash,
            entry_hash=entry_hash,
        )
        self._entries.append(entry)
        self._prev_hash = entry_hash
        return entry

    def entries(self) -> List[Dict[str, Any]]:
        return [
            {
                "timestamp": e.timestamp,
                "request": e.request,
                "params": e.params,
                "outcome": e.outcome,
                "prev_hash": e.prev_hash,
                "entry_hash": e.entry_hash,
            }
            for e in self._entries
        ]

    def verify_chain(self) -> bool:
        """Verify the integrity of the full chain."""
        prev = GENESIS
        for e in self._entries:
            if e.prev_hash != prev:
                return False
            expected = _digest(e.timestamp, e.request, e.params, e.outcome, e.prev_hash)
            if e.entry_hash != expected:
                return False
            prev = e.entry_hash
        return True
