"""
Runtime configuration, read from the environment (and a local .env file).
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv


DEFAULT_ENGINE_PATH = "/usr/local/bin/ollama"
DEFAULT_RESOLVER_PATH = "/usr/bin/which"
DEFAULT_SEARCH_PATH = ("/usr/local/bin", "/opt/homebrew/bin", "/usr/bin", "/bin", "/usr/sbin", "/sbin")
DEFAULT_MODEL = "deepseek-r1:1.5b"

DOWNLOAD_URL = "https://ollama.com/download"
LIBRARY_URL = "https://ollama.com/library"


@dataclass(frozen=True)
class EngineConfig:
    """
    Where the engine lives and the environment every engine process gets.

    The child environment is never inherited from the caller so the engine
    behaves the same however the app was launched.
    """
    engine_path: str = DEFAULT_ENGINE_PATH
    resolver_path: str = DEFAULT_RESOLVER_PATH
    engine_name: str = "ollama"
    search_path: tuple[str, ...] = DEFAULT_SEARCH_PATH
    home: str = str(Path.home())
    default_model: str = DEFAULT_MODEL

    def process_env(self) -> dict[str, str]:
        return {"PATH": os.pathsep.join(self.search_path), "HOME": self.home}


@dataclass(frozen=True)
class AppConfig:
    engine: EngineConfig
    log_level: str = "INFO"
    log_file: Optional[Path] = None


def load_config(environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Build the app configuration.

    Args:
        environ: mapping to read instead of ``os.environ``; when given, no
            .env file is loaded.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    search_path = environ.get("FLEECE_SEARCH_PATH")
    engine = EngineConfig(
        engine_path=environ.get("FLEECE_ENGINE_PATH", DEFAULT_ENGINE_PATH),
        resolver_path=environ.get("FLEECE_RESOLVER_PATH", DEFAULT_RESOLVER_PATH),
        search_path=tuple(p for p in search_path.split(os.pathsep) if p) if search_path else DEFAULT_SEARCH_PATH,
        home=environ.get("FLEECE_HOME") or str(Path.home()),
        default_model=environ.get("FLEECE_DEFAULT_MODEL", DEFAULT_MODEL),
    )
    log_file = environ.get("FLEECE_LOG_FILE")
    return AppConfig(
        engine=engine,
        log_level=environ.get("FLEECE_LOG_LEVEL", "INFO").upper(),
        log_file=Path(log_file).expanduser() if log_file else None,
    )
