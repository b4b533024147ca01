# src/todo_agenda/cli/commands.py

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Callable
from pathlib import Path
from typing import cast

from ..accounts.auth_api import register, sign_in, sign_out
from ..core import dates
from ..core.errors import AuthRequiredError, TodoError, ValidationError
from ..core.state import AppState
from ..tasks import task_api
from ..tasks.export import export_csv, export_filename
from ..tasks.task_models import Task
from ..tasks.view import AgendaScope, SortKey, StatusFilter, format_meta

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        User-facing failures (TodoError) become the reply; anything else propagates.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except TodoError as e:
            logger.debug("/%s rejected: %s", name, e.message)
            return e.message

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def render_task_line(index: int, task: Task, *, today_iso: str | None = None) -> str:
    mark = "x" if task.completed else " "
    meta = format_meta(task, today_iso=today_iso)
    meta_str = f"  ({meta})" if meta else ""
    return f"{index:>3}. [{mark}] {task.title}{meta_str}  #{task.id[:8]}"


def render_view_header(state: AppState) -> str:
    view = state.view
    head = f"Filter: {view.status_filter.value} | Sort: {view.sort_key.value}"
    if view.agenda_collapsed:
        return head
    if view.agenda_scope is AgendaScope.DAY:
        return f"{head} | Agenda: day {view.anchor}"
    if view.agenda_scope is AgendaScope.WEEK:
        week = dates.week_range(view.anchor)
        return f"{head} | Agenda: week {week.start}..{week.end}"
    return f"{head} | Agenda: all (anchor {view.anchor})"


def render_list(state: AppState) -> str:
    if not state.is_authenticated:
        return "Not signed in. Use /login or /register."
    visible = task_api.visible_tasks(state)
    lines = [render_view_header(state)]
    if not visible:
        lines.append("  No tasks to show.")
        return "\n".join(lines)
    today_iso = dates.today()
    for i, task in enumerate(visible, start=1):
        lines.append(render_task_line(i, task, today_iso=today_iso))
    return "\n".join(lines)


def _with_list(state: AppState, message: str) -> str:
    return f"{message}\n{render_list(state)}"


def _resolve_task(state: AppState, ref: str | None) -> Task:
    """
    A task reference is either a 1-based position in the visible list
    or a unique prefix of the task id.
    """
    if not state.is_authenticated:
        raise AuthRequiredError()
    if not ref:
        raise ValidationError("Which task? Give its number from /list or an id prefix.")

    ref = ref.lstrip("#")
    if ref.isdigit():
        visible = task_api.visible_tasks(state)
        pos = int(ref)
        if 1 <= pos <= len(visible):
            return visible[pos - 1]

    matches = [t for t in state.task_store.tasks if t.id.startswith(ref.lower())]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise ValidationError(f"Task reference '{ref}' is ambiguous.")
    raise ValidationError(f"No task matches '{ref}'.")


def _pop_option(args: list[str], name: str) -> tuple[list[str], str | None]:
    """Remove `--name value` from args."""
    if name not in args:
        return args, None
    i = args.index(name)
    if i + 1 >= len(args):
        raise ValidationError(f"Missing value for {name}.")
    value = args[i + 1]
    return args[:i] + args[i + 2 :], value


def _none_word(value: str) -> str | None:
    return None if value.lower() in ("none", "-", "clear", "off") else value


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    account = state.account
    who = f"{account.display_name} ({account.id})" if account else "not signed in"
    tasks = state.task_store.tasks
    done = sum(1 for t in tasks if t.completed)
    return (
        "Status:\n"
        f"  Account: {who}\n"
        f"  Tasks: {len(tasks)} total, {len(tasks) - done} active, {done} completed\n"
        f"  {render_view_header(state)}"
    )


def cmd_register(state: AppState, args: list[str]) -> str:
    """
    /register <username> <password> [confirm]
    """
    if len(args) < 2:
        return "Usage: /register <username> <password> [confirm]"
    confirm = args[2] if len(args) > 2 else None
    account = asyncio.run(register(state, args[0], args[1], confirm))
    return _with_list(state, f"Account created and signed in as {account.display_name}.")


def cmd_login(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /login <username> <password>"
    account = asyncio.run(sign_in(state, args[0], args[1]))
    return _with_list(state, f"Signed in as {account.display_name}.")


def cmd_logout(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not state.is_authenticated:
        return "Not signed in."
    if emit:
        with contextlib.suppress(Exception):
            emit(f"Signing out {state.account.display_name}...")  # type: ignore[union-attr]
    sign_out(state)
    return "Signed out. Sign in to continue."


def cmd_list(state: AppState, args: list[str]) -> str:
    return render_list(state)


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title> [--due DATE] [--priority low|med|high]
    """
    args, due_raw = _pop_option(args, "--due")
    args, priority = _pop_option(args, "--priority")
    title = " ".join(args)

    due = None
    if due_raw is not None:
        due = dates.normalize_date(due_raw)
        if due is None:
            raise ValidationError(f"Invalid date '{due_raw}'. Use YYYY-MM-DD.")

    task = task_api.add_task(state, title, due=due, priority=priority)
    return _with_list(state, f'Added "{task.title}".')


def _set_completed(state: AppState, args: list[str], completed: bool) -> str:
    task = _resolve_task(state, args[0] if args else None)
    task_api.set_completed(state, task.id, completed)
    verb = "Completed" if completed else "Reopened"
    return _with_list(state, f'{verb} "{task.title}".')


def cmd_done(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, True)


def cmd_undo(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, False)


def cmd_edit(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /edit <task> <new title>"
    task = _resolve_task(state, args[0])
    title = " ".join(args[1:])
    updated = task_api.edit_title(state, task.id, title)
    if updated is None or updated == task:
        return "Nothing changed."
    return _with_list(state, f'Renamed to "{updated.title}".')


def cmd_due(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /due <task> <YYYY-MM-DD|none>"
    task = _resolve_task(state, args[0])
    value = _none_word(args[1])
    if value is not None and dates.normalize_date(value) is None:
        raise ValidationError(f"Invalid date '{value}'. Use YYYY-MM-DD.")
    task_api.set_due(state, task.id, value)
    return _with_list(state, f'Due date updated for "{task.title}".')


def cmd_priority(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /priority <task> <low|med|high|none>"
    task = _resolve_task(state, args[0])
    value = _none_word(args[1])
    if value is not None and value.lower() not in ("low", "med", "high"):
        raise ValidationError("Priority must be low, med, high or none.")
    task_api.set_priority(state, task.id, value)
    return _with_list(state, f'Priority updated for "{task.title}".')


def cmd_rm(state: AppState, args: list[str]) -> str:
    task = _resolve_task(state, args[0] if args else None)
    removed = task_api.delete_task(state, task.id)
    if removed is None:
        return "Task already deleted."
    return _with_list(state, f'Deleted "{removed.title}".')


def cmd_filter(state: AppState, args: list[str]) -> str:
    if not args:
        return f"Filter is {state.view.status_filter.value}. Use /filter all|active|completed."
    state.view.status_filter = StatusFilter.parse(args[0])
    return render_list(state)


def cmd_sort(state: AppState, args: list[str]) -> str:
    if not args:
        return f"Sort is {state.view.sort_key.value}. Use /sort created|dueAt|priority."
    state.view.sort_key = SortKey.parse(args[0])
    return render_list(state)


def cmd_agenda(state: AppState, args: list[str]) -> str:
    """
    /agenda all|day|week     -> change scope
    /agenda prev|next [n]    -> move anchor date
    /agenda today            -> anchor = today
    /agenda date YYYY-MM-DD  -> anchor = date
    /agenda toggle           -> show/hide agenda in the list header
    """
    if not args:
        return (
            f"Agenda: {state.view.agenda_scope.value}, anchor {state.view.anchor}.\n"
            "Usage: /agenda all|day|week | prev [n] | next [n] | today | date YYYY-MM-DD | toggle"
        )

    sub = args[0].lower()
    if sub in ("all", "day", "week"):
        state.view.set_scope(sub)
    elif sub in ("prev", "next"):
        step = 1
        if len(args) > 1:
            if not args[1].isdigit():
                raise ValidationError("Step must be a whole number of days.")
            step = int(args[1])
        state.view.shift_anchor(-step if sub == "prev" else step)
    elif sub == "today":
        state.view.jump_to_today()
    elif sub == "date":
        if len(args) < 2:
            return "Usage: /agenda date YYYY-MM-DD"
        state.view.set_anchor(args[1])
    elif sub == "toggle":
        collapsed = state.view.toggle_agenda_collapsed()
        return "Agenda hidden." if collapsed else "Agenda shown."
    else:
        return "Unknown /agenda subcommand. Use /agenda for usage."
    return render_list(state)


def cmd_export(state: AppState, args: list[str]) -> str:
    """
    /export [path] -> write the visible list as CSV
    """
    if not state.is_authenticated:
        return "Sign in to export tasks."

    if args:
        path = Path(args[0]).expanduser()
    else:
        export_dir = Path(getattr(state.settings, "export_dir", "."))
        path = export_dir / export_filename()

    visible = task_api.visible_tasks(state)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(export_csv(visible), encoding="utf-8")
    logger.info("Exported %d tasks to %s", len(visible), path)
    return f"Exported {len(visible)} tasks to {path}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show account and view settings.", aliases=["whoami"])
registry.register("register", cmd_register, help_text="Create an account: /register <user> <password> [confirm].")
registry.register("login", cmd_login, help_text="Sign in: /login <user> <password>.", aliases=["signin"])
registry.register("logout", cmd_logout, help_text="Sign out.", aliases=["signout"])
registry.register("list", cmd_list, help_text="Show the visible tasks.", aliases=["ls"])
registry.register(
    "add", cmd_add, help_text="Add a task: /add <title> [--due DATE] [--priority low|med|high]."
)
registry.register("done", cmd_done, help_text="Mark a task completed: /done <task>.")
registry.register("undo", cmd_undo, help_text="Mark a task active again: /undo <task>.")
registry.register("edit", cmd_edit, help_text="Rename a task: /edit <task> <title>.")
registry.register("due", cmd_due, help_text="Set or clear a due date: /due <task> <date|none>.")
registry.register(
    "priority", cmd_priority, help_text="Set priority: /priority <task> <low|med|high|none>."
)
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <task>.", aliases=["delete"])
registry.register("filter", cmd_filter, help_text="Status filter: /filter all|active|completed.")
registry.register("sort", cmd_sort, help_text="Sort order: /sort created|dueAt|priority.")
registry.register("agenda", cmd_agenda, help_text="Agenda window: /agenda day|week|all|prev|next|today.")
registry.register("export", cmd_export, help_text="Export the visible list as CSV: /export [path].")
