import asyncio
import logging
from typing import Any, Dict, Optional

from core.config import EngineConfig
from core.streaming import StreamingSession

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Runs streaming sessions and turns their callbacks into events.

    Callbacks never touch the transcript; they only put events on
    ``events_q``, which the app drains from a single pump worker.
    """

    def __init__(self, config: EngineConfig, events_q: asyncio.Queue):
        self.config = config
        self.events_q = events_q
        self.session: Optional[StreamingSession] = None

    def _emit(self, ev: Dict[str, Any]):
        self.events_q.put_nowait(ev)

    async def run(self, prompt: str, model: str):
        self.session = StreamingSession(self.config)
        try:
            await self.session.start(
                prompt,
                model,
                on_chunk=lambda text: self._emit({'type': 'chunk', 'text': text}),
                on_complete=lambda text: self._emit({'type': 'done', 'text': text}),
                on_started=lambda: self._emit({'type': 'started'}),
            )
        finally:
            self.session = None

    def cancel(self) -> bool:
        if self.session is None:
            return False
        self.session.cancel()
        return True
