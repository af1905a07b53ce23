"""Hookify - managed git, terminal, and custom hooks."""

__version__ = "0.1.0"

from .cli import cli, HookifyApp
from .config import ConfigManager
from .hooks import HookManager, HookStore, GitHookSynchronizer

__all__ = [
    "cli",
    "HookifyApp",
    "ConfigManager",
    "HookManager",
    "HookStore",
    "GitHookSynchronizer",
]
