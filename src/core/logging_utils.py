"""
Logging setup for the TUI.

stdout belongs to Textual, so records go to the Textual devtools console and,
when configured, to a log file.
"""
import logging
from pathlib import Path
from typing import Optional

from textual.logging import TextualHandler

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# handlers added by configure_logging, replaced on every call
_installed: list[logging.Handler] = []


def configure_logging(level: str = "INFO", log_file: Optional[Path] = None) -> list[logging.Handler]:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()

    _installed.append(TextualHandler())
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        _installed.append(fh)

    for handler in _installed:
        root.addHandler(handler)
    return list(_installed)
