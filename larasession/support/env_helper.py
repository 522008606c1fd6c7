"""
EnvHelper
Environment access backed by an optional .env file (python-dotenv)
"""
import os
import threading
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv


class EnvHelper:
    """
    Reads SESSION_* settings from the process environment

    The .env file in the working directory is loaded on first access.
    Variables already set in the environment win unless load() is
    called with override=True.

    Usage:
        secret = EnvHelper.get('SESSION_SECRET_KEY')
        EnvHelper.load(Path('deploy/.env.production'), override=True)
    """

    _lock = threading.Lock()
    _env_path: Optional[Path] = None
    _loaded: bool = False

    @classmethod
    def initialize(cls, env_path: Optional[Path] = None):
        """Set the .env file read by load() (default: ./.env)"""
        cls._env_path = env_path or Path.cwd() / '.env'

    @classmethod
    def load(cls, env_path: Optional[Path] = None, override: bool = False) -> bool:
        """
        Load a .env file into os.environ

        Returns:
            True if the file existed and set at least one variable
        """
        with cls._lock:
            if env_path:
                cls._env_path = env_path
            elif cls._env_path is None:
                cls.initialize()

            cls._loaded = True
            if not cls._env_path.exists():
                return False
            return load_dotenv(cls._env_path, override=override)

    @classmethod
    def _ensure_loaded(cls):
        if not cls._loaded:
            cls.load()

    @classmethod
    def get(cls, key: str, default: Optional[str] = None) -> Optional[str]:
        cls._ensure_loaded()
        return os.getenv(key, default)

    @classmethod
    def has(cls, key: str) -> bool:
        cls._ensure_loaded()
        return key in os.environ

    @classmethod
    def reset(cls):
        """Forget the loaded file; the next access loads .env again"""
        with cls._lock:
            cls._env_path = None
            cls._loaded = False
