# tests/test_commands.py

from __future__ import annotations

from pathlib import Path

from todo_agenda.cli.commands import CommandRegistry, registry
from todo_agenda.core.errors import ValidationError
from todo_agenda.core.state import AppState


def test_command_registry_routes_2_and_3_params(state: AppState) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bee"])

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/BEE y", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


def test_command_registry_unknown_and_non_command(state: AppState) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_registry_turns_user_errors_into_replies(state: AppState) -> None:
    reg = CommandRegistry()

    def boom(state, args):
        raise ValidationError("Bad input.")

    reg.register("boom", boom, "boom")
    assert reg.handle(state, "/boom") == "Bad input."


def test_signed_out_commands(state: AppState) -> None:
    assert "Not signed in" in registry.handle(state, "/list")
    assert registry.handle(state, "/add Milk") == "Sign in to add tasks."
    assert "Account not found" in registry.handle(state, "/login ghost secret12")
    assert registry.handle(state, "/export") == "Sign in to export tasks."


def test_task_references_need_sign_in(state: AppState) -> None:
    refs = ("/done 1", "/undo 1", "/edit 1 New", "/due 1 2024-03-02", "/priority 1 high", "/rm 1")
    for line in refs:
        assert registry.handle(state, line) == "Sign in to add tasks."


def test_task_workflow(state: AppState, tmp_path: Path) -> None:
    reply = registry.handle(state, "/register Carol secret12 secret12")
    assert "Account created and signed in as Carol." in reply

    reply = registry.handle(state, "/add Pay rent --due 2024-03-01 --priority high")
    assert 'Added "Pay rent".' in reply
    assert "High priority" in reply

    registry.handle(state, "/add Call mom")
    assert "/add" in registry.build_help()

    reply = registry.handle(state, "/sort priority")
    lines = reply.splitlines()
    assert lines[0].startswith("Filter: all | Sort: priority")
    assert "Pay rent" in lines[1]
    assert "Call mom" in lines[2]

    reply = registry.handle(state, "/done 1")
    assert 'Completed "Pay rent".' in reply

    reply = registry.handle(state, "/filter active")
    assert "Pay rent" not in reply
    assert "Call mom" in reply

    reply = registry.handle(state, "/agenda day")
    assert "No tasks to show." in reply

    registry.handle(state, "/filter all")
    registry.handle(state, "/agenda date 2024-03-01")
    reply = registry.handle(state, "/agenda week")
    assert "Agenda: week 2024-02-26..2024-03-03" in reply
    assert "Pay rent" in reply
    assert "Call mom" not in reply

    out = tmp_path / "out.csv"
    reply = registry.handle(state, f"/export {out}")
    assert reply == f"Exported 1 tasks to {out}"
    assert "Pay rent" in out.read_text(encoding="utf-8")

    reply = registry.handle(state, "/rm 1")
    assert 'Deleted "Pay rent".' in reply
    assert registry.handle(state, "/rm zz") == "No task matches 'zz'."


def test_edit_due_priority_and_id_prefix(state: AppState) -> None:
    registry.handle(state, "/register Dana secret12")
    registry.handle(state, "/add Draft")
    task = state.task_store.tasks[0]

    reply = registry.handle(state, f"/edit #{task.id[:6]} Final draft")
    assert 'Renamed to "Final draft".' in reply
    assert registry.handle(state, "/edit 1 Final draft") == "Nothing changed."

    registry.handle(state, "/due 1 2024-05-01")
    assert state.task_store.tasks[0].due_at == "2024-05-01"
    assert "Invalid date" in registry.handle(state, "/due 1 someday")
    registry.handle(state, "/due 1 none")
    assert state.task_store.tasks[0].due_at is None

    registry.handle(state, "/priority 1 med")
    assert state.task_store.tasks[0].priority == "med"
    assert "Priority must be" in registry.handle(state, "/priority 1 urgent")


def test_logout_and_status(state: AppState) -> None:
    registry.handle(state, "/register Erin secret12")
    registry.handle(state, "/add One")
    assert "Account: Erin (erin)" in registry.handle(state, "/status")

    notes: list[str] = []
    assert registry.handle(state, "/logout", emit=notes.append) == "Signed out. Sign in to continue."
    assert notes == ["Signing out Erin..."]
    assert "Account: not signed in" in registry.handle(state, "/whoami")
    assert "Signed in as Erin." in registry.handle(state, "/login erin secret12")
