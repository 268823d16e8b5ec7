"""Rich rendering of skill listings and install/remove outcomes.

Each function prints to a recording console and returns the captured text,
so callers can both show and log the same output.

Functions:
    render_skills_table: Table of skill records.
    render_install_result: Summary panel for an ``InstallResult``.
    render_remove_result: Summary panel for a ``RemoveResult``.
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from skillport.skills.config import InstallResult, RemoveResult, SkillRecord


def _ensure_console(console: Console | None) -> Console:
    """Return a recording console, matching the width of ``console`` if given."""
    if console is not None:
        return Console(record=True, width=console.width)
    return Console(record=True)


def render_skills_table(
    skills: Sequence[SkillRecord],
    *,
    title: str = "Skills",
    console: Console | None = None,
) -> str:
    """Render skill records as a table of id, name, source and description.

    Args:
        skills: Records to show, in display order.
        title: Table title.
        console: Optional console whose width is reused.

    Returns:
        The rendered text.
    """
    console = _ensure_console(console)

    if not skills:
        console.print(Panel("No skills found", title=title, expand=False))
        return console.export_text()

    table = Table(title=title)
    table.add_column("Id", style="bold cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Source", style="magenta")
    table.add_column("Description", overflow="fold")

    for skill in skills:
        table.add_row(skill.id, skill.name, skill.source.value, skill.description)

    console.print(table)
    return console.export_text()


def render_install_result(result: InstallResult, *, console: Console | None = None) -> str:
    """Render an install outcome as a key/value panel."""
    console = _ensure_console(console)

    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Skill", result.skill_id)
    table.add_row("Scope", result.scope.value)
    if result.agent_id:
        table.add_row("Agent", result.agent_id)
    table.add_row("Source", result.source.value)
    table.add_row("Installed", str(result.installed_path))
    table.add_row("Replaced", "yes" if result.replaced else "no")
    for path in result.workspace_install_paths:
        table.add_row("Workspace", str(path))

    console.print(Panel(table, title=f"Installed {result.skill_name}", expand=False))
    return console.export_text()


def render_remove_result(result: RemoveResult, *, console: Console | None = None) -> str:
    """Render a remove outcome, noting when nothing was removed."""
    console = _ensure_console(console)

    changed = result.removed_from_global or bool(result.removed_from_agent_ids)
    if not changed:
        console.print(Text(f"Skill '{result.skill_id}' was not installed; nothing removed.", style="dim"))
        return console.export_text()

    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Skill", result.skill_id)
    table.add_row("Scope", result.scope.value)
    if result.removed_from_global:
        table.add_row("Global store", "removed")
    for agent_id in result.removed_from_agent_ids:
        table.add_row("Agent", agent_id)
    if result.removed_from_agent_store:
        table.add_row("Agent store", "removed")
    if result.removed_from_config:
        table.add_row("Assignment", "removed")
    for path in result.removed_workspace_paths:
        table.add_row("Workspace", str(path))

    console.print(Panel(table, title=f"Removed {result.skill_id}", expand=False))
    return console.export_text()
