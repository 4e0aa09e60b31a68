"""
Chat messages and the ordered transcript they live in.
"""
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional


class Origin(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Kind(str, Enum):
    NORMAL = "normal"
    REASONING = "reasoning"


@dataclass
class Message:
    """
    A single entry of the transcript.

    Only the streaming placeholder is mutated after creation; finalized
    messages are left alone.
    """
    text: str
    origin: Origin
    kind: Kind = Kind.NORMAL
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        if self.origin is Origin.USER and self.kind is not Kind.NORMAL:
            raise ValueError("user messages are always normal")

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(text=text, origin=Origin.USER)

    @classmethod
    def assistant(cls, text: str, kind: Kind = Kind.NORMAL) -> "Message":
        return cls(text=text, origin=Origin.ASSISTANT, kind=kind)

    @property
    def is_user(self) -> bool:
        return self.origin is Origin.USER

    @property
    def is_reasoning(self) -> bool:
        return self.kind is Kind.REASONING


class Transcript:
    """Append-only ordering of messages; entries are never reordered."""

    def __init__(self, messages: Optional[Iterable[Message]] = None):
        self._messages: list[Message] = list(messages or [])

    def __iter__(self) -> Iterator[Message]:
        return iter(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __getitem__(self, index: int) -> Message:
        return self._messages[index]

    def append(self, message: Message) -> Message:
        self._messages.append(message)
        return message

    def index_of(self, message_id: str) -> int:
        for i, message in enumerate(self._messages):
            if message.id == message_id:
                return i
        raise KeyError(message_id)

    def get(self, message_id: str) -> Message:
        return self._messages[self.index_of(message_id)]

    def replace(self, message_id: str, messages: Iterable[Message]) -> None:
        """Swap one message for a sequence, keeping its position."""
        i = self.index_of(message_id)
        self._messages[i:i + 1] = list(messages)
