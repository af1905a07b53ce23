"""Hookify CLI - turn any script into a managed hook."""

import functools
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.logging import RichHandler

from .config import ConfigManager
from .hooks import (
    GitHookSynchronizer,
    HookifyError,
    HookManager,
    HookStore,
    NotAGitRepositoryError,
    ValidationError,
    build_validator,
)
from .hooks.contract import validate
from .hooks.schema import HookScope, HookType, split_hook_key
from .hooks.sync import is_git_repo
from .hooks.templates import all_templates, create_script, get_template, resolve_hook_key
from .hooks.terminal import SHELL_RC_FILES, hookify_command, install_terminal_hooks
from .ui import (
    render_detail,
    render_error,
    render_hooks,
    render_report,
    render_script,
    render_success,
    render_templates,
    render_warning,
)
from .ui.theme import err_console


_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(log_dir: Path, verbose: bool = False) -> None:
    """Send hookify logs to hook-manager.log, and to stderr when verbose."""
    logger = logging.getLogger("hookify")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / "hook-manager.log", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(file_handler)
    except OSError as e:
        render_warning(f"Cannot write logs to {log_dir}: {e}")

    if verbose:
        logger.addHandler(RichHandler(console=err_console, show_path=False))


class HookifyApp:
    """Wire configuration, store, validator, manager, and synchronizer."""

    def __init__(self, config_path: Optional[str] = None, verbose: bool = False):
        self.config_path = config_path
        self.config = ConfigManager(config_path)
        self.paths = self.config.get_paths_config()
        configure_logging(self.paths["log_dir"], verbose)

        self.governance = self.config.get_governance_config()
        self.store = HookStore(str(self.paths["store"]))
        self.store.ensure()
        self.manager = HookManager(
            self.store,
            self.paths["log_dir"],
            validator=build_validator(self.governance),
        )
        self.synchronizer = GitHookSynchronizer(self.manager)

    @property
    def governed(self) -> bool:
        return self.governance.get("mode", "none") not in ("none", "", None)

    def sync_all(self) -> int:
        discovery = self.config.get_discovery_config()
        return self.synchronizer.sync_all(
            self.config.get_search_paths(),
            int(discovery.get("max_depth", 3)),
        )


def determine_scope(
    scope: Optional[str],
    global_: bool,
    project: bool,
    repos: tuple[str, ...],
    default: str,
) -> str:
    """Explicit --scope wins, then --global, --repos, --project, then config."""
    if scope:
        return scope
    if global_:
        return HookScope.GLOBAL.value
    if repos:
        return HookScope.REPO.value
    if project:
        return HookScope.PROJECT.value
    return default


def _split_csv(value: Optional[str]) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _parse_context(pairs: tuple[str, ...]) -> dict[str, str]:
    context = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--context")
        context[key] = value
    return context


def handle_errors(func):
    """Report expected failures without a traceback and exit 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ValidationError as e:
            render_error("Hook validation failed:")
            for reason in e.errors:
                render_detail(f"- {reason}", console=err_console)
            sys.exit(1)
        except HookifyError as e:
            render_error(str(e))
            sys.exit(1)

    return wrapper


pass_app = click.make_pass_decorator(HookifyApp)


# CLI Commands
@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Log to stderr as well as hook-manager.log")
@click.pass_context
@handle_errors
def cli(ctx, config_path, verbose):
    """HOOKIFY - Convert any script into a managed hook.

    Register scripts for git, terminal, and custom events, run them in
    priority order, and sync git hooks into repositories.
    """
    ctx.obj = HookifyApp(config_path, verbose=verbose)


@cli.command()
@click.argument("hook_name")
@click.argument("script_path")
@click.option("--blocking/--non-blocking", default=None, help="Stop the group when this hook fails")
@click.option("--scope", type=click.Choice([s.value for s in HookScope]), help="Propagation scope")
@click.option("--global", "global_", is_flag=True, help="Register as a global hook")
@click.option("--project", is_flag=True, help="Register as a project hook")
@click.option("--repos", help="Comma-separated repositories this hook applies to")
@click.option("--priority", type=int, help="Lower runs first (0-100)")
@click.option("--timeout", type=int, help="Timeout in milliseconds")
@click.option("--description", help="Hook description")
@click.option("--territory", help="Governance territory")
@click.option("--all-repos", is_flag=True, help="Sync to every discovered repository")
@pass_app
@handle_errors
def add(app, hook_name, script_path, blocking, scope, global_, project, repos,
        priority, timeout, description, territory, all_repos):
    """Add a script as a hook."""
    template = get_template(hook_name)

    defaults = app.config.get_defaults_config()
    repo_list = _split_csv(repos)
    hook = app.manager.register(
        template.type,
        template.name,
        script_path,
        scope=determine_scope(scope, global_, project, repo_list, defaults["scope"]),
        repos=repo_list,
        priority=defaults["priority"] if priority is None else priority,
        blocking=template.blocking if blocking is None else blocking,
        timeout=defaults["timeout"] if timeout is None else timeout,
        description=description or template.description,
        territory=territory or (template.territory if app.governed else None),
    )

    render_success(f"Added {hook_name} hook: {script_path}")
    render_detail(f"Type: {hook.type.value}")
    render_detail(f"Scope: {hook.scope.value}")
    render_detail(f"Blocking: {str(hook.blocking).lower()}")
    render_detail(f"Priority: {hook.priority}")
    if hook.governance is not None:
        render_detail(f"Territory: {hook.governance.territory}")

    if all_repos:
        count = app.sync_all()
        render_success(f"Synced hooks to {count} repositories")
    elif repo_list:
        count = app.synchronizer.sync_repos(repo_list)
        render_success(f"Synced hooks to {count} of {len(repo_list)} repositories")
    elif template.type == HookType.GIT and is_git_repo(Path.cwd()):
        if app.synchronizer.sync_to_repo(Path.cwd()):
            render_success(f"Synced hooks to {Path.cwd()}")


@cli.command()
@click.argument("hook_name")
@click.argument("script_path", required=False)
@pass_app
@handle_errors
def remove(app, hook_name, script_path):
    """Remove a hook (or one script from it)."""
    hook_key = resolve_hook_key(hook_name)
    removed = app.manager.unregister(hook_key, script_path)
    if removed:
        render_success(f"Removed {removed} hook(s): {hook_key}")
    else:
        render_warning(f"No matching hooks registered for {hook_key}")


def _toggle(app: HookifyApp, hook_name: str, enabled: bool) -> None:
    hook_key = resolve_hook_key(hook_name)
    changed = app.manager.toggle(hook_key, enabled)
    if not changed:
        render_warning(f"No hooks registered for {hook_key}")
        return
    verb = "Enabled" if enabled else "Disabled"
    render_success(f"{verb} {changed} hook(s): {hook_key}")
    if hook_key.startswith(f"{HookType.GIT.value}:"):
        render_detail("Run 'hookify sync' to update repositories")


@cli.command()
@click.argument("hook_name")
@pass_app
@handle_errors
def enable(app, hook_name):
    """Enable every hook registered for HOOK_NAME."""
    _toggle(app, hook_name, True)


@cli.command()
@click.argument("hook_name")
@pass_app
@handle_errors
def disable(app, hook_name):
    """Disable every hook registered for HOOK_NAME."""
    _toggle(app, hook_name, False)


@cli.command(name="list")
@click.option("--type", "hook_type", type=click.Choice([t.value for t in HookType]))
@click.option("--scope", type=click.Choice([s.value for s in HookScope]))
@click.option("--enabled/--disabled", default=None, help="Only enabled or disabled hooks")
@pass_app
@handle_errors
def list_hooks(app, hook_type, scope, enabled):
    """List available hook types and registered hooks."""
    render_templates(all_templates())
    hooks = app.manager.list(hook_type=hook_type, enabled=enabled, scope=scope)
    render_hooks((hook, validate(hook.to_dict(), app.manager.validator)) for hook in hooks)


@cli.command()
@click.argument("hook_name")
@click.argument("output_path", required=False)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@pass_app
@handle_errors
def create(app, hook_name, output_path, force):
    """Create a template hook script (does not register it)."""
    get_template(hook_name)
    path = Path(output_path) if output_path else app.paths["hook_dir"] / f"{hook_name}.sh"
    created = create_script(hook_name, path, force=force)
    render_success(f"Created {hook_name} template: {created}")
    render_detail("Edit the script and then run:")
    render_detail(f"hookify add {hook_name} {created}")


@cli.command()
@click.argument("repo_path", required=False)
@click.option("--all-repos", is_flag=True, help="Sync to every discovered repository")
@pass_app
@handle_errors
def sync(app, repo_path, all_repos):
    """Sync git hooks to a repository (default: current directory)."""
    if all_repos:
        render_detail("Syncing hooks to all repositories...")
        count = app.sync_all()
        render_success(f"Synced hooks to {count} repositories")
        return

    repo = Path(repo_path or Path.cwd())
    if not app.synchronizer.sync_to_repo(repo):
        raise NotAGitRepositoryError(str(repo))
    render_success(f"Synced hooks to {repo}")


@cli.command()
@click.argument("hook_name")
@click.option("--context", "-c", "context", multiple=True, help="KEY=VALUE passed to hooks")
@pass_app
@handle_errors
def run(app, hook_name, context):
    """Execute the hooks registered for HOOK_NAME."""
    hook_type, name = split_hook_key(resolve_hook_key(hook_name))
    ctx_data = {"cwd": str(Path.cwd()), **_parse_context(context)}
    report = app.manager.execute(hook_type, name, ctx_data)
    render_report(report)
    if not report.success:
        render_error(f"{hook_type}:{name} failed")
        sys.exit(1)


@cli.command()
@click.argument("hook_name")
@click.argument("repo_path", required=False)
@pass_app
@handle_errors
def show(app, hook_name, repo_path):
    """Preview the git wrapper script for HOOK_NAME."""
    hook_type, name = split_hook_key(resolve_hook_key(hook_name))
    if hook_type != HookType.GIT.value:
        raise HookifyError(f"Only git hooks are written to .git/hooks ({hook_type}:{name})")
    render_script(app.synchronizer.preview(name, repo_path))


@cli.command(name="install-terminal")
@pass_app
@handle_errors
def install_terminal(app):
    """Run session-start and cd-change hooks from bash and zsh."""
    installed = install_terminal_hooks(command=hookify_command(app.config_path))
    if not installed:
        render_warning(
            f"No shell rc file updated ({', '.join(SHELL_RC_FILES)} missing or already installed)"
        )
        return
    for rc_path in installed:
        render_success(f"Installed terminal hooks to {rc_path}")
    render_detail("Open a new shell to activate them")


if __name__ == "__main__":
    cli()
