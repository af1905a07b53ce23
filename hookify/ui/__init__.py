"""Terminal UI components."""

from .theme import DEFAULT_THEME, console, err_console
from .output import (
    render_detail,
    render_error,
    render_hooks,
    render_report,
    render_script,
    render_success,
    render_templates,
    render_warning,
)

__all__ = [
    "DEFAULT_THEME",
    "console",
    "err_console",
    "render_detail",
    "render_error",
    "render_hooks",
    "render_report",
    "render_script",
    "render_success",
    "render_templates",
    "render_warning",
]
