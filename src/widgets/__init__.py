"""
Custom UI widgets for the fleece-chat application.
"""
from .input_area import InputArea
from .chat_log import ChatLog, MessageBubble
from .select_option import SelectOption, SelectionMade

__all__ = ["InputArea", "ChatLog", "MessageBubble", "SelectOption", "SelectionMade"]
