"""
JSONL logger for room log entries.

Appends every new engine log entry of a room to a JSONL file, giving a
durable audit trail beyond the in-memory ring.
"""

import json
import os
from datetime import datetime
from typing import Optional


class GameLogger:
    """Logger that writes a room's log entries to a JSONL file."""

    def __init__(self, log_file: Optional[str] = None, room_id: Optional[str] = None):
        """
        Initialize game logger.

        Args:
            log_file: Path to log file. If None, generates timestamped filename.
            room_id: Room the entries belong to; stamped on every line.
        """
        if log_file is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file = f"banco_room_{room_id or 'unknown'}_{timestamp}.jsonl"

        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)

        self.log_file = log_file
        self.room_id = room_id
        self.event_count = 0
        self._last_sequence = -1

        # Create/clear log file
        with open(self.log_file, "w"):
            pass

    @classmethod
    def for_room(cls, directory: str, room_id: str) -> "GameLogger":
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return cls(os.path.join(directory, f"room_{room_id}_{timestamp}.jsonl"), room_id=room_id)

    def log_event(self, event_type: str, **kwargs) -> None:
        """Append one event line."""
        event = {
            "event_id": self.event_count,
            "room_id": self.room_id,
            "event_type": event_type,
            **kwargs,
        }

        with open(self.log_file, "a") as f:
            f.write(json.dumps(event) + "\n")

        self.event_count += 1

    def flush_engine_events(self, game) -> int:
        """Write log entries added since the last flush.

        Returns the number of entries written.
        """
        new_entries = game.event_log.entries_since(self._last_sequence)
        for entry in new_entries:
            data = entry.to_dict()
            etype = data.pop("event_type")
            data["turn_number"] = game.turn_number
            self.log_event(etype, **data)

        if new_entries:
            self._last_sequence = new_entries[-1].sequence
        return len(new_entries)
