"""
Data models for the fleece-chat application.
"""
from .message import Kind, Message, Origin, Transcript
from .turn import Turn, TurnStatus

__all__ = ["Kind", "Message", "Origin", "Transcript", "Turn", "TurnStatus"]
