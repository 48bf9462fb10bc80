# src/desire_tracker/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.state import AppState
from ..tasks.assist import apply_assist
from ..tasks.task_models import DONE_VIEW, Category, Task
from .render import LABELS, parse_view, render_detail, render_list

# (state, args, rest) -> reply. `rest` is the raw text after the command name.
CommandHandler = Callable[[AppState, list[str], str], str]

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

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        head, _, rest = line[1:].partition(" ")
        name = head.strip().lower()
        if not name:
            return "Empty command. Use /help to list available commands."

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(state, rest.split(), rest)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  (plain text without a slash adds a task)")
        return "\n".join(lines)


registry = CommandRegistry()


def resolve_task(state: AppState, ref: str) -> Task | None:
    """A 1-based row number in the current view, or a task id."""
    ref = (ref or "").strip()
    if not ref:
        return None
    if ref.isdigit():
        rows = state.store.filtered(state.view)
        n = int(ref)
        if 1 <= n <= len(rows):
            return rows[n - 1]
    return state.store.get(ref)


def _list_current(state: AppState) -> str:
    return render_list(state.view, state.store.filtered(state.view), state.store.counts())


def _step_index(raw: str) -> int | None:
    try:
        return int(raw) - 1
    except ValueError:
        return None


def cmd_help(state: AppState, args: list[str], rest: str) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str], rest: str) -> str:
    task = state.store.add(rest)
    if task is None:
        return "Nothing to add."
    # New tasks land in the default tab; follow them there.
    state.view = Category.default().value
    return f"추가했어요: {task.text}\n{_list_current(state)}"


def cmd_list(state: AppState, args: list[str], rest: str) -> str:
    if args:
        view = parse_view(args[0])
        if view is None:
            return f"Unknown view: {args[0]}. Use one of: {', '.join(LABELS)}."
        state.view = view
    return _list_current(state)


def cmd_show(state: AppState, args: list[str], rest: str) -> str:
    if not args:
        return "Usage: /show <n|id>"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"
    return render_detail(task)


def cmd_done(state: AppState, args: list[str], rest: str) -> str:
    if not args:
        return "Usage: /done <n|id>"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"
    completed = state.store.toggle_done(task.id)
    if completed:
        state.view = DONE_VIEW
        return f"완료: {task.text}\n{_list_current(state)}"
    return f"다시 진행중: {task.text}\n{_list_current(state)}"


def cmd_cat(state: AppState, args: list[str], rest: str) -> str:
    if len(args) < 2:
        return "Usage: /cat <n|id> <short|info|long>"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"
    view = parse_view(args[1])
    category = Category.parse(view) if view else None
    if category is None:
        return f"Unknown category: {args[1]}. Use short, info or long."
    state.store.set_category(task.id, category)
    state.view = category.value
    return f"{LABELS[category.value]}(으)로 옮겼어요: {task.text}\n{_list_current(state)}"


def cmd_rm(state: AppState, args: list[str], rest: str) -> str:
    if not args:
        return "Usage: /rm <n|id>"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"
    state.store.remove(task.id)
    return f"삭제했어요: {task.text}\n{_list_current(state)}"


_STEP_USAGE = "Usage: /step add <n|id> <text> | /step toggle <n|id> <k> | /step rm <n|id> <k>"


def cmd_step(state: AppState, args: list[str], rest: str) -> str:
    if len(args) < 3:
        return _STEP_USAGE
    sub = args[0].lower()
    task = resolve_task(state, args[1])
    if task is None:
        return f"No such task: {args[1]}"

    if sub == "add":
        text = rest.split(maxsplit=2)[2]
        state.store.add_step(task.id, text)
    elif sub in ("toggle", "check"):
        idx = _step_index(args[2])
        if idx is None:
            return _STEP_USAGE
        state.store.toggle_step(task.id, idx)
    elif sub in ("rm", "remove", "del"):
        idx = _step_index(args[2])
        if idx is None:
            return _STEP_USAGE
        state.store.remove_step(task.id, idx)
    else:
        return _STEP_USAGE

    updated = state.store.get(task.id)
    return render_detail(updated) if updated else f"No such task: {args[1]}"


def cmd_memo(state: AppState, args: list[str], rest: str) -> str:
    """
    /memo <n|id> <text>  -> replace memo ("\\n" becomes a line break)
    /memo <n|id>         -> clear memo
    """
    if not args:
        return "Usage: /memo <n|id> [text]"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"
    # Everything after the ref and its single separator is kept verbatim.
    text = rest.lstrip()[len(args[0]) :]
    if text[:1].isspace():
        text = text[1:]
    text = text.replace("\\n", "\n")
    state.store.set_memo(task.id, text)
    return "메모를 저장했어요." if text else "메모를 지웠어요."


def cmd_assist(state: AppState, args: list[str], rest: str) -> str:
    if not state.assist_enabled:
        return "Assist is disabled (DESIRE_ASSIST_ENABLED=false)."
    if not args:
        return "Usage: /assist <n|id>"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"
    added = apply_assist(state.store, task.id)
    logger.debug("Assist added %d steps task=%s", added, task.id)
    updated = state.store.get(task.id)
    return render_detail(updated) if updated else f"No such task: {args[0]}"


def cmd_status(state: AppState, args: list[str], rest: str) -> str:
    settings = state.settings
    counts = state.store.counts()
    per_view = ", ".join(f"{LABELS[k]} {counts.get(k, 0)}" for k in LABELS)
    return (
        "Status:\n"
        f"  Tasks: {len(state.store)} ({per_view})\n"
        f"  Storage: {getattr(settings, 'storage_backend', '?')} key={state.writer.key}\n"
        f"  Debounce: {getattr(settings, 'save_debounce_ms', '?')} ms\n"
        f"  Pending write: {'yes' if state.writer.pending else 'no'}"
    )


def cmd_save(state: AppState, args: list[str], rest: str) -> str:
    if state.writer.flush():
        return "Saved."
    return "Nothing pending (or the write failed; see the log)."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add <text>.", aliases=["a"])
registry.register(
    "list", cmd_list, help_text="Show a tab: /list [short|info|long|done].", aliases=["ls", "view"]
)
registry.register("show", cmd_show, help_text="Task details: /show <n|id>.")
registry.register("done", cmd_done, help_text="Toggle done: /done <n|id>.", aliases=["d"])
registry.register("cat", cmd_cat, help_text="Move to a category: /cat <n|id> <short|info|long>.")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <n|id>.")
registry.register("step", cmd_step, help_text="Checklist: /step add|toggle|rm <n|id> ...")
registry.register("memo", cmd_memo, help_text="Set memo: /memo <n|id> [text].")
registry.register("assist", cmd_assist, help_text="Append a suggested checklist: /assist <n|id>.")
registry.register("status", cmd_status, help_text="Show counts and storage settings.")
registry.register("save", cmd_save, help_text="Write pending changes now.")
