"""
Game event logging.

The log is the human-readable audit trail clients see. It is a bounded
ring: once it holds ``LOG_LIMIT`` entries the oldest is dropped for each new
one. Sequence numbers keep increasing so readers can ask for "everything
after N" even after entries have been dropped.
"""

import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, Dict, List, Optional

from src.core.game.config import LOG_LIMIT
from src.core.game.turn import now_ms


class EventType(Enum):
    """Types of game events."""

    ROOM_CREATED = "room_created"
    PLAYER_JOINED = "player_joined"
    GAME_START = "game_start"
    TURN_START = "turn_start"
    DICE_ROLL = "dice_roll"
    PASS_START = "pass_start"

    PURCHASE_OFFER = "purchase_offer"
    PURCHASE = "purchase"
    PURCHASE_PASSED = "purchase_passed"
    UPGRADE_OFFER = "upgrade_offer"
    UPGRADE = "upgrade"
    VISIT = "visit"

    RENT_PAYMENT = "rent_payment"
    TAX_PAYMENT = "tax_payment"

    CARD_DRAW = "card_draw"
    CARD_EFFECT = "card_effect"

    GO_TO_JAIL = "go_to_jail"
    JAIL_ATTEMPT = "jail_attempt"
    JAIL_RELEASE = "jail_release"

    REST = "rest"
    BANKRUPTCY = "bankruptcy"
    GAME_END = "game_end"


@dataclass
class LogEntry:
    """A logged, timestamped line of narration."""

    sequence: int
    message: str
    event_type: EventType
    player_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    timestamp: int = field(default_factory=now_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sequence": self.sequence,
            "message": self.message,
            "event_type": self.event_type.value,
            "player_id": self.player_id,
            "details": dict(self.details),
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:
        return f"[{self.sequence}] {self.event_type.value}: {self.message}"


class EventLog:
    """Manages the game event log."""

    def __init__(self, limit: int = LOG_LIMIT):
        self.entries: Deque[LogEntry] = deque(maxlen=limit)
        self._next_sequence = 0

    def log(
        self,
        message: str,
        event_type: EventType,
        player_id: Optional[str] = None,
        **details: Any,
    ) -> LogEntry:
        """Append an entry, dropping the oldest past the limit."""
        entry = LogEntry(self._next_sequence, message, event_type, player_id, details)
        self._next_sequence += 1
        self.entries.append(entry)
        return entry

    @property
    def last_sequence(self) -> int:
        """Sequence number of the newest entry, -1 when nothing was logged."""
        return self._next_sequence - 1

    def get_events(self) -> List[LogEntry]:
        return list(self.entries)

    def entries_since(self, sequence: int) -> List[LogEntry]:
        """Entries with a sequence number greater than ``sequence``."""
        return [e for e in self.entries if e.sequence > sequence]

    def messages(self) -> List[str]:
        return [e.message for e in self.entries]

    def __len__(self) -> int:
        return len(self.entries)
