"""
Streaming a single prompt through ``ollama run``.
"""
import asyncio
import codecs
import logging
from typing import Callable, Optional

from core.config import EngineConfig
from core.engine import model_identifier
from core.errors import ProcessExitError, SpawnFailure, error_text, with_error
from core.runner import decode_output

logger = logging.getLogger(__name__)

CANCELLED_TEXT = "Cancelled."
READ_SIZE = 4096


class StreamingSession:
    """
    One engine process per prompt.

    ``start`` writes the prompt, closes stdin and waits for the process while
    a separate reader task forwards decoded stdout chunks to ``on_chunk``.
    ``on_complete`` is called exactly once per started session, with the
    full output, or with an error/cancel sentinel appended to whatever
    output arrived before the failure.
    """

    def __init__(self, config: EngineConfig):
        self.config = config
        self._process: Optional[asyncio.subprocess.Process] = None
        self._cancelled = False
        self._completed = False
        self._started = False

    @property
    def running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    def cancel(self) -> None:
        """Stop the engine; ``start`` then completes with ``CANCELLED_TEXT``."""
        self._cancelled = True
        if self.running:
            logger.info("terminating engine process %s", self._process.pid)
            try:
                self._process.terminate()
            except ProcessLookupError:
                pass

    async def _read(self, stream: asyncio.StreamReader, received: list[str], on_chunk: Callable[[str], None]):
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            data = await stream.read(READ_SIZE)
            text = decoder.decode(data, final=not data)
            if text:
                received.append(text)
                on_chunk(text)
            if not data:
                break

    async def start(
        self,
        prompt: str,
        model: str,
        on_chunk: Callable[[str], None],
        on_complete: Callable[[str], None],
        on_started: Optional[Callable[[], None]] = None,
    ) -> None:
        if self._started:
            raise RuntimeError("a streaming session can only be started once")
        self._started = True

        def complete(text: str) -> None:
            if not self._completed:
                self._completed = True
                on_complete(text)

        model_id = model_identifier(model)
        try:
            process = await asyncio.create_subprocess_exec(
                self.config.engine_path, "run", model_id,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self.config.process_env(),
            )
        except OSError as exc:
            failure = SpawnFailure(self.config.engine_path, exc)
            logger.warning("%s", failure)
            complete(error_text(failure))
            return

        self._process = process
        logger.info("engine process %s started for %s", process.pid, model_id)
        if self._cancelled:
            self.cancel()
        elif on_started is not None:
            on_started()

        received: list[str] = []
        reader = asyncio.create_task(self._read(process.stdout, received, on_chunk))
        stderr_task = asyncio.create_task(process.stderr.read())
        write_error: Optional[OSError] = None
        try:
            try:
                process.stdin.write((prompt + "\n").encode("utf-8"))
                await process.stdin.drain()
            except (BrokenPipeError, ConnectionResetError) as exc:
                write_error = exc
            finally:
                process.stdin.close()

            returncode = await process.wait()
            await reader
            stderr = decode_output(await stderr_task)
        except asyncio.CancelledError:
            complete(with_error("".join(received), CANCELLED_TEXT))
            raise
        finally:
            for task in (reader, stderr_task):
                if not task.done():
                    task.cancel()
            if process.returncode is None:
                process.kill()
            self._process = None

        text = "".join(received)
        if self._cancelled:
            logger.info("engine process %s cancelled", process.pid)
            complete(with_error(text, CANCELLED_TEXT))
        elif write_error is not None:
            logger.warning("could not write prompt to engine: %s", write_error)
            complete(with_error(text, error_text(write_error)))
        elif returncode != 0:
            failure = ProcessExitError(self.config.engine_path, returncode, stderr)
            logger.warning("%s", failure)
            complete(with_error(text, error_text(failure)))
        else:
            complete(text)
