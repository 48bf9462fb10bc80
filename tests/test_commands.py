# tests/test_commands.py

from __future__ import annotations

from desire_tracker.cli.commands import CommandRegistry, registry, resolve_task
from desire_tracker.connectors.console_connector import handle_line, run_console_loop
from desire_tracker.core.state import AppState
from desire_tracker.tasks.task_codec import decode_tasks
from desire_tracker.tasks.task_models import Category, StepSource


def test_command_registry_routes_and_aliases(state: AppState) -> None:
    reg = CommandRegistry()
    calls: list[tuple[list[str], str]] = []

    def h(state, args, rest):
        calls.append((args, rest))
        return "ok"

    reg.register("echo", h, "echo", aliases=["e"])

    assert reg.handle(state, "/echo a  b ") == "ok"
    assert reg.handle(state, "/E x") == "ok"
    assert calls == [(["a", "b"], "a  b "), (["x"], "x")]


def test_command_registry_unknown_and_non_command(state: AppState) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_plain_text_adds_task_and_switches_to_default_view(state: AppState) -> None:
    state.view = "done"

    reply = handle_line(state, "영어 공부")

    assert reply is not None and "영어 공부" in reply
    assert state.view == Category.SHORT.value
    assert [t.text for t in state.store] == ["영어 공부"]


def test_done_switches_view_only_on_completion(state: AppState) -> None:
    handle_line(state, "/add 영어 공부")

    handle_line(state, "/done 1")
    assert state.view == "done"
    assert state.store.filtered("done")[0].text == "영어 공부"

    # Row 1 of the "done" view is the same task; un-completing keeps the view.
    handle_line(state, "/done 1")
    assert state.view == "done"
    assert state.store.filtered("short")[0].text == "영어 공부"


def test_cat_moves_task_and_follows_it(state: AppState) -> None:
    handle_line(state, "/add read")
    task = state.store.tasks[0]
    state.store.toggle_done(task.id)

    reply = handle_line(state, f"/cat {task.id} 정보")

    assert reply is not None
    got = state.store.get(task.id)
    assert got.category == Category.INFO and got.done is False
    assert state.view == "info"
    assert "Unknown category" in (handle_line(state, f"/cat {task.id} done") or "")


def test_step_memo_assist_and_rm(state: AppState) -> None:
    handle_line(state, "/add 방 청소")
    tid = state.store.tasks[0].id

    handle_line(state, "/step add 1 창문 열기")
    handle_line(state, "/step toggle 1 1")
    handle_line(state, "/assist 1")
    handle_line(state, "/step rm 1 2")
    handle_line(state, r"/memo 1 line one\nline two")

    t = state.store.get(tid)
    assert [s.done for s in t.checklist][:1] == [True]
    assert t.checklist[0].source == StepSource.USER
    assert len(t.checklist) == 3
    assert all(s.source == StepSource.AI for s in t.checklist[1:])
    assert t.memo == "line one\nline two"

    detail = handle_line(state, "/show 1") or ""
    assert "창문 열기" in detail and "line two" in detail

    handle_line(state, "/memo 1")
    assert state.store.get(tid).memo == ""

    handle_line(state, "/rm 1")
    assert len(state.store) == 0


def test_memo_keeps_surrounding_whitespace(state: AppState) -> None:
    handle_line(state, "/add 메모")
    tid = state.store.tasks[0].id

    handle_line(state, "/memo 1   indented\\nsecond  ")
    assert state.store.get(tid).memo == "  indented\nsecond  "

    handle_line(state, f"/memo {tid}  x")
    assert state.store.get(tid).memo == " x"


def test_assist_disabled(state: AppState) -> None:
    state.assist_enabled = False
    handle_line(state, "/add 공부")

    assert "disabled" in (handle_line(state, "/assist 1") or "")
    assert state.store.tasks[0].checklist == ()


def test_resolve_task_by_row_or_id(state: AppState) -> None:
    a = state.store.add("a")
    b = state.store.add("b")
    assert a and b

    assert resolve_task(state, "1") == b
    assert resolve_task(state, "2") == a
    assert resolve_task(state, a.id) == a
    assert resolve_task(state, "9") is None
    assert resolve_task(state, "") is None


def test_list_unknown_view_and_empty_message(state: AppState) -> None:
    assert "Unknown view" in (handle_line(state, "/list someday") or "")
    assert "완료한 항목이 없어요." in (handle_line(state, "/list done") or "")
    assert state.view == "done"
    assert "이 카테고리에 항목이 없어요." in (handle_line(state, "/list 장기") or "")


def test_save_and_status(state: AppState, kv) -> None:
    handle_line(state, "/add x")
    assert "Pending write: yes" in (handle_line(state, "/status") or "")

    assert handle_line(state, "/save") == "Saved."
    assert [t.text for t in decode_tasks(kv.data["TASKS_V2"])] == ["x"]
    assert "Pending write: no" in (handle_line(state, "/status") or "")


def test_handler_crash_is_contained(state: AppState, monkeypatch) -> None:
    def boom(*_args):
        raise RuntimeError("handler failed")

    monkeypatch.setitem(registry._handlers, "status", boom)

    assert handle_line(state, "/status") == "Internal error while handling a command."


def test_console_loop_until_exit(state: AppState, capsys) -> None:
    lines = iter(["우유 사기", "", "/list", "/exit", "never read"])

    run_console_loop(state, read=lambda _prompt: next(lines))

    out = capsys.readouterr().out
    assert "우유 사기" in out
    assert [t.text for t in state.store] == ["우유 사기"]


def test_console_loop_stops_on_eof(state: AppState) -> None:
    def read(_prompt: str) -> str:
        raise EOFError

    run_console_loop(state, read=read)
