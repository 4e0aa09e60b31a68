"""
Blocking command execution for discovery and one-shot calls.
"""
import logging
import subprocess
from typing import Mapping, Optional, Sequence

from core.errors import ProcessExitError, SpawnFailure

logger = logging.getLogger(__name__)


def decode_output(data: Optional[bytes]) -> str:
    return (data or b"").decode("utf-8", errors="replace")


def run_command(
    executable: str,
    args: Sequence[str],
    env: Mapping[str, str],
    input_text: Optional[str] = None,
    check: bool = False,
) -> str:
    """
    Run ``executable`` with ``args`` to completion and return its stdout.

    Raises:
        SpawnFailure: the process could not be started.
        ProcessExitError: ``check`` is set and the process exited non-zero.
    """
    logger.debug("running %s %s", executable, " ".join(args))
    try:
        result = subprocess.run(
            [executable, *args],
            env=dict(env),
            input=input_text.encode("utf-8") if input_text is not None else None,
            stdin=None if input_text is not None else subprocess.DEVNULL,
            capture_output=True,
        )
    except OSError as exc:
        logger.warning("could not start %s: %s", executable, exc)
        raise SpawnFailure(executable, exc) from exc

    if check and result.returncode != 0:
        raise ProcessExitError(
            executable, result.returncode, decode_output(result.stderr), decode_output(result.stdout)
        )
    return decode_output(result.stdout)
