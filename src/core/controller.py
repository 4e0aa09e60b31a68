"""
Turn state machine and transcript mutation.

Everything here runs on the app's interactive context (the pump worker);
streaming callbacks reach it only through queued events.
"""
import logging
from typing import Optional

from core.domain import DomainEvent
from core.errors import TurnInProgress
from core.segmenter import StreamAccumulator, finalize, strip_markers
from models import Kind, Message, Transcript, Turn, TurnStatus

logger = logging.getLogger(__name__)


class SessionController:
    def __init__(self, transcript: Optional[Transcript] = None):
        self.transcript = transcript if transcript is not None else Transcript()
        self.turn: Optional[Turn] = None
        self.next_turn_id = 1
        self._accumulator: Optional[StreamAccumulator] = None

    @property
    def status(self) -> TurnStatus:
        return self.turn.status if self.turn else TurnStatus.IDLE

    @property
    def busy(self) -> bool:
        return self.turn is not None and self.turn.is_active

    @property
    def placeholder(self) -> Optional[Message]:
        if self.turn is None or self.turn.placeholder_id is None:
            return None
        try:
            return self.transcript.get(self.turn.placeholder_id)
        except KeyError:
            return None

    def submit(self, prompt: str, model: str) -> Optional[Turn]:
        """
        Open a new turn: user message plus an empty assistant placeholder.

        Returns None when there is nothing to send or no model selected.

        Raises:
            TurnInProgress: the previous turn has not finished.
        """
        if self.busy:
            logger.info("rejected submit while turn %s is %s", self.turn.turn_id, self.turn.status.value)
            raise TurnInProgress(f"turn {self.turn.turn_id} is still running")
        if not prompt.strip() or not model:
            return None

        self.transcript.append(Message.user(prompt))
        placeholder = self.transcript.append(Message.assistant(""))
        self.turn = Turn(
            turn_id=self.next_turn_id,
            user_text=prompt,
            model=model,
            status=TurnStatus.AWAITING,
            placeholder_id=placeholder.id,
        )
        self.next_turn_id += 1
        self._accumulator = StreamAccumulator()
        return self.turn

    def mark_started(self) -> None:
        if self.turn and self.turn.status is TurnStatus.AWAITING:
            self.turn.status = TurnStatus.STREAMING

    def apply_chunk(self, text: str) -> Optional[Message]:
        if not self.busy or not text:
            return None
        self.mark_started()
        result = self._accumulator.feed(text)
        placeholder = self.placeholder
        if placeholder is not None:
            placeholder.text = result.display_text
            placeholder.kind = Kind.REASONING if result.in_reasoning else Kind.NORMAL
        return placeholder

    def complete(self, text: str) -> list[Message]:
        """
        Finish the turn with the full response text.

        The placeholder is replaced by the finalized segments; when there are
        none it keeps the marker-stripped text instead of going blank.
        """
        if not self.busy:
            return []
        placeholder = self.placeholder
        segments = finalize(text)
        if placeholder is not None:
            if segments:
                self.transcript.replace(placeholder.id, segments)
            else:
                placeholder.text = strip_markers(text)
                placeholder.kind = Kind.NORMAL
        self.turn.status = TurnStatus.FINAL
        self._accumulator = None
        return segments

    def apply_event(self, ev: DomainEvent) -> None:
        kind = ev.get('type', '')
        if kind == 'started':
            self.mark_started()
        elif kind == 'chunk':
            self.apply_chunk(ev.get('text', ''))
        elif kind == 'done':
            self.complete(ev.get('text', ''))
