"""
Exceptions raised at the engine and session boundaries.
"""


class FleeceError(Exception):
    """Base class for all fleece-chat errors."""


class SpawnFailure(FleeceError):
    """The engine (or the PATH resolver) could not be started."""

    def __init__(self, executable: str, os_error: OSError):
        super().__init__(f"could not start {executable}: {os_error.strerror or os_error}")
        self.executable = executable
        self.os_error = os_error


class ProcessExitError(FleeceError):
    """A process exited with a non-zero status or was killed by a signal."""

    def __init__(self, executable: str, returncode: int, stderr: str = "", stdout: str = ""):
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else ""
        message = f"{executable} exited with status {returncode}"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.executable = executable
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout


class TurnInProgress(FleeceError):
    """A prompt was submitted while another turn is still running."""


def error_text(exc: BaseException) -> str:
    return f"Error: {exc}"


def with_error(text: str, error: str) -> str:
    """Append an error line to output received before the failure."""
    return f"{text.rstrip()}\n\n{error}" if text.strip() else error
