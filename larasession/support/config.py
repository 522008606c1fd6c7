"""
Config
Dot-notation access to session settings
"""

import importlib
import json
import threading
from typing import Any, Dict, Optional


class Config:
    """
    Session settings with dot-notation keys ('session.COOKIE_NAME')

    Keys are case-insensitive. A value is looked up in:
        1. Runtime overrides (Config.set)
        2. The host application's config/<file>.py module, e.g.
           COOKIE_NAME in config/session.py; nested dicts are walked
           with further dots ('session.COOKIE_SET_OPTIONS.domain')
        3. The <FILE>_<KEY> environment variable (SESSION_COOKIE_NAME),
           including values from .env, converted to the default's type
        4. The default

    Usage:
        ttl = Config.get('session.EXPIRE_AFTER_SECONDS')
        Config.set('session.DRIVER', 'redis')
    """

    _lock = threading.Lock()
    _loaded: Dict[str, Any] = {}
    _runtime_overrides: Dict[str, Any] = {}

    _NOT_FOUND = object()

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        key = key.lower()
        if key in cls._runtime_overrides:
            return cls._runtime_overrides[key]

        file_name, *path = key.split('.')

        value = cls._walk(cls._module(file_name), path)
        if value is not cls._NOT_FOUND:
            return value

        from larasession.support.env_helper import EnvHelper
        raw = EnvHelper.get('_'.join([file_name, *path]).upper())
        if raw is not None:
            return cls._coerce(raw, default)

        return default

    @classmethod
    def set(cls, key: str, value: Any):
        """Override a value for this process (config files are not touched)"""
        cls._runtime_overrides[key.lower()] = value

    @classmethod
    def has(cls, key: str) -> bool:
        return cls.get(key) is not None

    @classmethod
    def reload(cls):
        """Import config modules again on next access"""
        with cls._lock:
            cls._loaded.clear()

    @classmethod
    def clear_runtime_overrides(cls):
        cls._runtime_overrides.clear()

    # === Lookup ===

    @classmethod
    def _module(cls, file_name: str) -> Optional[Any]:
        """config.<file_name>, or None when the application has no such file"""
        with cls._lock:
            if file_name not in cls._loaded:
                try:
                    cls._loaded[file_name] = importlib.import_module(f'config.{file_name}')
                except ImportError:
                    cls._loaded[file_name] = None
            return cls._loaded[file_name]

    @classmethod
    def _walk(cls, node: Any, path: list) -> Any:
        if node is None:
            return cls._NOT_FOUND

        for part in path:
            if isinstance(node, dict):
                names = node.keys()
                fetch = node.__getitem__
            elif hasattr(node, '__dict__'):
                names = dir(node)
                fetch = lambda name, obj=node: getattr(obj, name)
            else:
                return cls._NOT_FOUND

            match = next((name for name in names if str(name).lower() == part), cls._NOT_FOUND)
            if match is cls._NOT_FOUND:
                return cls._NOT_FOUND
            node = fetch(match)

        return node

    @staticmethod
    def _coerce(raw: str, default: Any) -> Any:
        """Read an environment string as the type of the default (str if no default)"""
        if isinstance(default, bool):
            return raw.strip().lower() in ('true', '1', 'yes', 'on')
        if isinstance(default, int):
            try:
                return int(raw)
            except ValueError:
                return default
        if isinstance(default, list):
            return [item.strip() for item in raw.split(',') if item.strip()]
        if isinstance(default, dict):
            try:
                return json.loads(raw)
            except ValueError:
                return default
        return raw
