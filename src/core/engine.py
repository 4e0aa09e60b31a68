"""
Discovery and one-shot calls against the local ollama engine.
"""
import logging
from typing import Optional

from core.config import EngineConfig
from core.errors import FleeceError, ProcessExitError, SpawnFailure, error_text, with_error
from core.runner import run_command

logger = logging.getLogger(__name__)

SIZE_UNITS = {"B", "KB", "MB", "GB", "TB"}


def model_identifier(descriptor: str) -> str:
    """First whitespace token of a ``ollama list`` row, e.g. ``llama3:8b``."""
    tokens = descriptor.split()
    return tokens[0] if tokens else descriptor


def shorten_model(descriptor: str) -> str:
    """
    Display form of a model row: ``name (size)``.

    ``ollama list`` prints the size as ``4.7 GB``, so a bare unit in the next
    column is folded into the size.
    """
    tokens = descriptor.split()
    if len(tokens) < 3:
        return descriptor
    size = tokens[2]
    if len(tokens) > 3 and tokens[3].upper() in SIZE_UNITS:
        size = f"{size} {tokens[3]}"
    return f"{tokens[0]} ({size})"


def parse_model_list(output: str) -> list[str]:
    """Drop the header row, return the remaining non-blank rows trimmed."""
    rows = output.splitlines()[1:]
    return [row.strip() for row in rows if row.strip()]


class InferenceEngine:
    def __init__(self, config: EngineConfig):
        self.config = config

    def _run(self, args: list[str], input_text: Optional[str] = None, check: bool = False) -> str:
        return run_command(
            self.config.engine_path, args, self.config.process_env(), input_text=input_text, check=check
        )

    def is_installed(self) -> bool:
        try:
            output = run_command(
                self.config.resolver_path, [self.config.engine_name], self.config.process_env()
            )
        except SpawnFailure:
            return False
        return bool(output.strip())

    def list_models(self) -> list[str]:
        try:
            return parse_model_list(self._run(["list"]))
        except SpawnFailure:
            return []

    def send_message(self, message: str, model: str) -> str:
        """Send one prompt and wait for the whole answer (no streaming)."""
        try:
            return self._run(["run", model_identifier(model)], input_text=message + "\n", check=True)
        except ProcessExitError as exc:
            logger.warning("one-shot send failed: %s", exc)
            return with_error(exc.stdout, error_text(exc))
        except FleeceError as exc:
            logger.warning("one-shot send failed: %s", exc)
            return error_text(exc)

    def install_model(self, model: Optional[str] = None) -> bool:
        """Pull ``model`` (the configured default when omitted)."""
        model = model or self.config.default_model
        logger.info("pulling model %s", model)
        try:
            self._run(["pull", model], check=True)
        except FleeceError as exc:
            logger.warning("could not install %s: %s", model, exc)
            return False
        return True
