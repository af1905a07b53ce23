"""Named hook templates for the hookify CLI.

Each template maps a friendly hook name to the hook type it registers as,
whether it blocks by default, and a description. ``create_script`` writes a
shell boilerplate for a template without registering it.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .errors import HookifyError, UnknownTemplateError
from .schema import HookType, make_hook_key


DEFAULT_TERRITORY = "operations"


@dataclass(frozen=True)
class HookTemplate:
    """A catalogue entry: friendly name -> registration defaults."""

    name: str
    type: HookType
    blocking: bool
    description: str
    territory: str = DEFAULT_TERRITORY

    @property
    def hook_key(self) -> str:
        return make_hook_key(self.type.value, self.name)


# -- Catalogue ----------------------------------------------------------------

_TEMPLATES: dict[str, HookTemplate] = {
    t.name: t for t in (
        HookTemplate("pre-commit", HookType.GIT, True, "Runs before git commit"),
        HookTemplate("pre-push", HookType.GIT, True, "Runs before git push"),
        HookTemplate("post-merge", HookType.GIT, False, "Runs after git merge"),
        HookTemplate("commit-msg", HookType.GIT, True, "Validates commit messages"),
        HookTemplate("session-start", HookType.TERMINAL, False, "Runs when terminal session starts"),
        HookTemplate("session-end", HookType.TERMINAL, False, "Runs when terminal session ends"),
        HookTemplate("cd-change", HookType.TERMINAL, False, "Runs when changing directories"),
        HookTemplate("pre-deploy", HookType.CUSTOM, True, "Runs before deployment"),
        HookTemplate("post-deploy", HookType.CUSTOM, False, "Runs after deployment"),
        HookTemplate("pre-test", HookType.CUSTOM, True, "Runs before tests"),
        HookTemplate("post-test", HookType.CUSTOM, False, "Runs after tests"),
    )
}

TEMPLATE_NAMES: tuple[str, ...] = tuple(_TEMPLATES)


def get_template(name: str) -> HookTemplate:
    """Look up a template by name. Raises UnknownTemplateError."""
    try:
        return _TEMPLATES[name]
    except KeyError:
        raise UnknownTemplateError(name, TEMPLATE_NAMES) from None


def all_templates() -> tuple[HookTemplate, ...]:
    return tuple(_TEMPLATES.values())


def resolve_hook_key(name: str) -> str:
    """Accept a template name (``pre-commit``) or a hookKey (``git:pre-commit``)."""
    if ":" in name:
        return name
    return get_template(name).hook_key


def render_script(name: str) -> str:
    """Bash boilerplate for a template's hook script."""
    template = get_template(name)
    return f"""#!/bin/bash
# Hookify hook: {template.name}
# {template.description}
#
# This hook was generated by: hookify create {template.name}
# Edit this script to add your custom logic

set -e

echo "Running {template.name} hook..."

# Your custom logic here
# Example:
# npm test
# npm run lint
# ./scripts/your-script.sh

echo "{template.name} hook complete"

exit 0
"""


def create_script(name: str, output_path: Union[str, Path], force: bool = False) -> Path:
    """Write a template script, executable. Does not register it."""
    content = render_script(name)
    path = Path(output_path).expanduser()
    if path.exists() and not force:
        raise HookifyError(f"Refusing to overwrite existing file: {path}")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    os.chmod(path, 0o755)
    return path
