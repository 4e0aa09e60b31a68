"""
Prompt input for the fleece-chat application.
"""
from textual import events
from textual.message import Message
from textual.widgets import TextArea


class InputArea(TextArea):
    """Multi-line prompt box: Enter sends, Shift+Enter or Ctrl+J adds a newline."""

    class Submit(Message, bubble=True):
        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def _on_key(self, event: events.Key) -> None:
        if event.key == "enter":
            event.prevent_default()
            event.stop()
            self.post_message(self.Submit(self.text))
        elif event.key in ("shift+enter", "ctrl+j"):
            event.prevent_default()
            event.stop()
            self.insert("\n")
