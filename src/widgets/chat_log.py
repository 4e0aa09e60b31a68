"""
Scrolling transcript view.
"""
from typing import Iterable

from textual.containers import VerticalScroll
from textual.widget import AwaitMount
from textual.widgets import Static

from models import Message


class MessageBubble(Static):
    DEFAULT_CSS = """
    MessageBubble {
        width: auto;
        max-width: 85%;
        padding: 0 1;
        margin: 0 1 1 1;
    }
    MessageBubble.user {
        background: $primary 30%;
        margin-left: 10;
    }
    MessageBubble.assistant {
        background: $panel;
    }
    MessageBubble.reasoning {
        background: $warning 15%;
        border-left: thick $warning;
        text-style: italic;
    }
    """

    def __init__(self, message: Message) -> None:
        super().__init__(message.text, markup=False, id=f"msg-{message.id}")
        self.message_id = message.id
        self._style(message)

    def _style(self, message: Message) -> None:
        self.set_class(message.is_user, "user")
        self.set_class(not message.is_user and not message.is_reasoning, "assistant")
        self.set_class(message.is_reasoning, "reasoning")

    def show(self, message: Message) -> None:
        self._style(message)
        self.update(message.text)


class ChatLog(VerticalScroll):
    """Keeps one bubble per transcript message, in transcript order."""

    def __init__(self, *, id: str | None = None) -> None:
        super().__init__(id=id)
        self._bubbles: dict[str, MessageBubble] = {}

    async def sync(self, messages: Iterable[Message]) -> None:
        messages = list(messages)
        wanted = {message.id for message in messages}
        for message_id in [mid for mid in self._bubbles if mid not in wanted]:
            await self._bubbles.pop(message_id).remove()

        # new messages only ever appear at the transcript tail, so bubbles and
        # notes stay in the order they were written
        for message in messages:
            bubble = self._bubbles.get(message.id)
            if bubble is None:
                bubble = MessageBubble(message)
                self._bubbles[message.id] = bubble
                await self.mount(bubble)
            else:
                bubble.show(message)
        self.scroll_end(animate=False)

    def write_note(self, text: str) -> AwaitMount:
        """Show an informational line that is not part of the transcript."""
        await_mount = self.mount(Static(text, markup=False, classes="note"))
        self.scroll_end(animate=False)
        return await_mount
