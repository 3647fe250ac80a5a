"""
Application configuration.

Settings are module-level constants read from the environment (and an
optional ``.env`` file); import them with ``from config import settings``.
"""

from . import settings

__all__ = ["settings"]
