"""Interactive prompts used by the setup flow."""

import logging

import click

try:
    from simple_term_menu import TerminalMenu  # type: ignore[import-untyped]
except ModuleNotFoundError as exc:  # pragma: no cover - import-time dependency guard
    raise RuntimeError(
        "simple-term-menu is required for the interactive wizard. "
        "Install it with your package manager or pip."
    ) from exc

from .selection import GroupedOptions

logger = logging.getLogger(__name__)

_HEADER_PREFIX = "── "


def _build_menu(
    entries: list[str], *, title: str | None, **kwargs: object
) -> TerminalMenu:
    """Create a TerminalMenu, dropping kwargs older releases reject."""
    base_kwargs: dict[str, object] = {"clear_screen": False}
    base_kwargs.update(kwargs)
    try:
        return TerminalMenu(entries, title=title, **base_kwargs)
    except TypeError:
        for key in (
            "preselected_entries",
            "show_multi_select_hint",
            "multi_select",
            "multi_select_select_on_accept",
            "multi_select_empty_ok",
            "skip_empty_entries",
        ):
            base_kwargs.pop(key, None)
        return TerminalMenu(entries, title=title, **base_kwargs)


def _flatten_groups(
    grouped: GroupedOptions,
) -> tuple[list[str], list[str | None]]:
    """Lay grouped options out as menu entries.

    Returns the entry labels and, per entry, the option value or None for
    group headers and the blank lines between groups.
    """
    entries: list[str] = []
    values: list[str | None] = []
    for group_name, options in grouped.items():
        if not options:
            continue
        if entries:
            entries.append("")
            values.append(None)
        entries.append(f"{_HEADER_PREFIX}{group_name}")
        values.append(None)
        for label, value in options:
            entries.append(f"  {label}")
            values.append(value)
    return entries, values


def _menu_multi_select(
    title: str, entries: list[str], values: list[str | None], initial: list[str]
) -> list[str]:
    """Show one multi-select menu and return the chosen option values."""
    wanted = set(initial)
    preselected = [i for i, value in enumerate(values) if value in wanted]
    menu = _build_menu(
        entries,
        title=title,
        multi_select=True,
        show_multi_select_hint=True,
        preselected_entries=preselected,
        multi_select_select_on_accept=False,
        multi_select_empty_ok=True,
        skip_empty_entries=True,
    )
    choice = menu.show()
    # Escape and an empty accept both return None; only accept sets the key
    if choice is None and menu.chosen_accept_key is None:
        raise KeyboardInterrupt()
    if choice is None:
        return []
    indices = [choice] if isinstance(choice, int) else list(choice)

    chosen: list[str] = []
    for index in indices:
        value = values[int(index)]
        # Headers can be toggled but carry no feature
        if value is not None and value not in chosen:
            chosen.append(value)
    return chosen


def select_many(
    message: str,
    grouped: GroupedOptions,
    required: bool,
    initial: list[str],
) -> list[str]:
    """Grouped multi-select prompt.

    Args:
        message: Menu title
        grouped: Group name -> [(label, value), ...]
        required: Re-show the menu until at least one option is chosen
        initial: Values preselected when the menu opens

    Raises:
        KeyboardInterrupt: If the user cancels with Escape
    """
    entries, values = _flatten_groups(grouped)
    while True:
        chosen = _menu_multi_select(message, entries, values, initial)
        if chosen or not required:
            return chosen
        click.echo("Please select at least one option.", err=True)
        logger.debug("Empty selection rejected, showing menu again")


def confirm(message: str, default: bool) -> bool:
    """Yes/no prompt."""
    return click.confirm(message, default=default)


def warn(message: str) -> None:
    click.echo(click.style(message, fg="yellow"), err=True)
