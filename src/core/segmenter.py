"""
Splitting model output into answer text and <think> reasoning.

``classify`` runs on every chunk while the response streams in and only
decides whether the tail of the stream is inside a reasoning span.
``finalize`` runs once on the complete text and cuts it into messages.
"""
from typing import NamedTuple

from models import Kind, Message

THINK_OPEN = "<think>"
THINK_CLOSE = "</think>"
REASONING_HEADER = "Thinking…\n"


class Classification(NamedTuple):
    display_text: str
    in_reasoning: bool
    header_inserted: bool


def strip_markers(text: str) -> str:
    return text.replace(THINK_OPEN, "").replace(THINK_CLOSE, "")


def _display(raw: str, in_reasoning: bool, prior_header_inserted: bool) -> Classification:
    display = strip_markers(raw)
    if in_reasoning and not prior_header_inserted:
        return Classification(REASONING_HEADER + display, True, True)
    return Classification(display, in_reasoning, prior_header_inserted)


def classify(raw: str, prior_header_inserted: bool = False) -> Classification:
    """
    Live view of a partial response.

    A span counts as open when more openers than closers have been seen so
    far; marker positions are not considered. The header is prefixed only
    when it has not been shown for the current span yet.
    """
    in_reasoning = raw.count(THINK_OPEN) > raw.count(THINK_CLOSE)
    return _display(raw, in_reasoning, prior_header_inserted)


def finalize(raw: str) -> list[Message]:
    """
    Cut a complete response into assistant messages in stream order.

    Text around matched pairs becomes normal messages, text inside them
    reasoning messages; blank pieces are dropped. Without a closer, an
    opener is just stripped and its text stays in the trailing normal message.
    """
    messages: list[Message] = []
    pos = 0
    while True:
        start = raw.find(THINK_OPEN, pos)
        if start == -1:
            break
        end = raw.find(THINK_CLOSE, start + len(THINK_OPEN))
        if end == -1:
            break

        before = strip_markers(raw[pos:start]).strip()
        if before:
            messages.append(Message.assistant(before))
        thought = strip_markers(raw[start + len(THINK_OPEN):end]).strip()
        if thought:
            messages.append(Message.assistant(thought, Kind.REASONING))
        pos = end + len(THINK_CLOSE)

    rest = strip_markers(raw[pos:]).strip()
    if rest:
        messages.append(Message.assistant(rest))
    return messages


class StreamAccumulator:
    """
    Raw buffer and marker counts for one streaming response.

    Counts are updated from each new chunk (plus the few characters before
    it, for markers split across chunks) instead of rescanning the buffer.
    """

    def __init__(self):
        self.raw = ""
        self.open_count = 0
        self.close_count = 0
        self.header_inserted = False

    @property
    def in_reasoning(self) -> bool:
        return self.open_count > self.close_count

    @staticmethod
    def _count_new(buffer: str, old_len: int, marker: str) -> int:
        return buffer.count(marker, max(0, old_len - len(marker) + 1))

    def feed(self, chunk: str) -> Classification:
        old_len = len(self.raw)
        self.raw += chunk
        self.open_count += self._count_new(self.raw, old_len, THINK_OPEN)
        self.close_count += self._count_new(self.raw, old_len, THINK_CLOSE)

        result = _display(self.raw, self.in_reasoning, self.header_inserted)
        # a closed span re-arms the header for the next one
        self.header_inserted = result.header_inserted and result.in_reasoning
        return result
