"""
Data models for a single prompt/response exchange.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TurnStatus(str, Enum):
    IDLE = "idle"
    AWAITING = "awaiting"
    STREAMING = "streaming"
    FINAL = "final"


@dataclass
class Turn:
    """
    Represents a single conversation turn between user and assistant.
    """
    turn_id: int
    user_text: str = ""
    model: str = ""
    status: TurnStatus = TurnStatus.IDLE
    placeholder_id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status in (TurnStatus.AWAITING, TurnStatus.STREAMING)
