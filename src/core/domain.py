"""
Events emitted by a streaming session and consumed by the app's pump.
"""

from typing import Literal, TypedDict, Union


class StartedEvent(TypedDict, total=False):
    type: Literal['started']


class ChunkEvent(TypedDict, total=False):
    type: Literal['chunk']
    text: str


class DoneEvent(TypedDict, total=False):
    type: Literal['done']
    text: str


DomainEvent = Union[StartedEvent, ChunkEvent, DoneEvent]
