"""Terminal rendering for hookify commands."""

from typing import Iterable, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.text import Text

from ..hooks.contract import ValidationResult
from ..hooks.schema import ExecutionReport, HookRegistration
from ..hooks.templates import HookTemplate
from .theme import DEFAULT_THEME, console as default_console, err_console


def _status_line(glyph: str, style: str, text: str) -> Text:
    line = Text()
    line.append(f"{glyph} ", style=f"bold {style}")
    line.append(text, style=style)
    return line


def render_success(text: str, console: Optional[Console] = None) -> None:
    theme = DEFAULT_THEME
    (console or default_console).print(
        _status_line(theme.glyphs.success, theme.palette.success, text)
    )


def render_warning(text: str, console: Optional[Console] = None) -> None:
    theme = DEFAULT_THEME
    (console or err_console).print(
        _status_line(theme.glyphs.warning, theme.palette.warning, text)
    )


def render_error(text: str, console: Optional[Console] = None) -> None:
    """Render an error message (stderr by default)."""
    theme = DEFAULT_THEME
    (console or err_console).print(
        _status_line(theme.glyphs.failure, theme.palette.error, text)
    )


def render_detail(text: str, console: Optional[Console] = None) -> None:
    """Indented secondary line under a status line."""
    (console or default_console).print(
        Text(f"   {text}", style=f"dim {DEFAULT_THEME.palette.text}")
    )


def render_templates(templates: Iterable[HookTemplate], console: Optional[Console] = None) -> None:
    """Available hook templates, one entry per two lines."""
    con = console or default_console
    palette = DEFAULT_THEME.palette

    con.print(Text("\nAvailable Hook Types:\n", style=f"bold {palette.accent}"))
    for template in templates:
        line = Text("  ")
        line.append(template.name.ljust(20), style=palette.text_bright)
        line.append(f" - {template.description}", style=palette.text)
        con.print(line)
        con.print(Text(
            f"  {' ' * 20}   Type: {template.type.value}, "
            f"Blocking: {str(template.blocking).lower()}",
            style=f"dim {palette.text_dim}",
        ))


def render_hooks(
    hooks: Iterable[tuple[HookRegistration, ValidationResult]],
    console: Optional[Console] = None,
) -> None:
    """Registered hooks with enabled mark and compliance status."""
    con = console or default_console
    theme = DEFAULT_THEME
    palette = theme.palette
    hooks = list(hooks)

    con.print(Text("\nRegistered Hooks:\n", style=f"bold {palette.accent}"))
    if not hooks:
        con.print(Text("  No hooks registered yet.", style=f"dim {palette.text_dim}"))
        return

    for hook, compliance in hooks:
        line = Text("  ")
        if hook.enabled:
            line.append(theme.glyphs.enabled, style=palette.success)
        else:
            line.append(theme.glyphs.disabled, style=palette.error)
        line.append(f" {hook.hook_key}", style=palette.text_bright)
        line.append(f"  [{hook.id}]", style=f"dim {palette.text_dim}")
        if not compliance.valid:
            line.append("  non-compliant", style=palette.warning)
        con.print(line)

        details = [
            f"Script: {hook.script_path}",
            f"Scope: {hook.scope.value}, Priority: {hook.priority}, "
            f"Blocking: {str(hook.blocking).lower()}, Timeout: {hook.timeout}ms",
        ]
        if hook.repos:
            details.append(f"Repos: {', '.join(hook.repos)}")
        if hook.governance is not None:
            details.append(f"Territory: {hook.governance.territory}")
        if not compliance.valid:
            details.append(f"Issues: {'; '.join(compliance.errors)}")
        for detail in details:
            con.print(Text(f"     {detail}", style=f"dim {palette.text}"))


def render_report(report: ExecutionReport, console: Optional[Console] = None) -> None:
    """Per-hook results of an execution run."""
    con = console or default_console
    theme = DEFAULT_THEME
    palette = theme.palette

    if not report.results:
        con.print(Text("No enabled hooks to run.", style=f"dim {palette.text_dim}"))
        return

    for result in report.results:
        if result.success:
            con.print(_status_line(
                theme.glyphs.success, palette.success,
                f"{result.hook_id} ({result.duration}s)",
            ))
        else:
            con.print(_status_line(
                theme.glyphs.failure, palette.error,
                f"{result.hook_id}: {result.error}",
            ))
        if result.output:
            for out_line in result.output.splitlines():
                con.print(Text(f"   {out_line}", style=f"dim {palette.text}"))

    if report.stopped_by:
        con.print(_status_line(
            theme.glyphs.warning, palette.warning,
            f"Stopped by blocking hook {report.stopped_by}",
        ))


def render_script(code: str, console: Optional[Console] = None) -> None:
    """Syntax-highlighted shell script."""
    (console or default_console).print(
        Syntax(code, "bash", theme="monokai", line_numbers=True)
    )
