"""Hookify theme: palette and shared consoles."""

from dataclasses import dataclass

from rich.console import Console


@dataclass(frozen=True)
class ColorPalette:
    """Core UI color palette."""

    text_bright: str = "#e8e8f0"
    text: str = "#b8b8cc"
    text_dim: str = "#4a4a60"
    accent: str = "#00d4e5"
    success: str = "#34d399"
    warning: str = "#e5c747"
    error: str = "#e55a6e"


@dataclass(frozen=True)
class StatusGlyphs:
    """Prefix glyphs for status lines."""

    success: str = "✔"
    failure: str = "✘"
    warning: str = "!"
    enabled: str = "✓"
    disabled: str = "✗"


@dataclass(frozen=True)
class HookifyTheme:
    palette: ColorPalette
    glyphs: StatusGlyphs


DEFAULT_THEME = HookifyTheme(palette=ColorPalette(), glyphs=StatusGlyphs())

console = Console()
err_console = Console(stderr=True)
