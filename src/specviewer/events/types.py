"""Event type definitions for the reload channel."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

# Wire payload sent to every connected browser tab.
RELOAD_MESSAGE = "reload"


class ChangeKind(str, Enum):
    """Kinds of filesystem mutation forwarded to the coordinator."""

    CREATED = "created"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass
class ChangeEvent:
    """A single filesystem mutation under the watched root."""

    path: Path
    kind: ChangeKind
    detected_at: datetime = field(default_factory=lambda: datetime.now(UTC))
