# src/desire_tracker/cli/render.py

from __future__ import annotations

from datetime import datetime

from ..tasks.task_models import DONE_VIEW, Category, StepSource, Task

VIEW_ORDER: tuple[str, ...] = (Category.SHORT.value, Category.INFO.value, Category.LONG.value, DONE_VIEW)

LABELS: dict[str, str] = {
    Category.SHORT.value: "단기",
    Category.INFO.value: "정보",
    Category.LONG.value: "장기",
    DONE_VIEW: "완료",
}


def parse_view(raw: str) -> str | None:
    """Accept a view key ("short") or its label ("단기")."""
    s = (raw or "").strip().lower()
    if s in LABELS:
        return s
    for key, label in LABELS.items():
        if label == s:
            return key
    return None


def fmt_date(ts_ms: float) -> str:
    """2024. 05. 01. 오후 03:07"""
    d = datetime.fromtimestamp(ts_ms / 1000.0)
    ampm = "오후" if d.hour >= 12 else "오전"
    h = d.hour % 12 or 12
    return f"{d.year}. {d.month:02d}. {d.day:02d}. {ampm} {h:02d}:{d.minute:02d}"


def render_tabs(current: str, counts: dict[str, int]) -> str:
    parts = []
    for key in VIEW_ORDER:
        label = f"{LABELS[key]}({counts.get(key, 0)})"
        parts.append(f"[{label}]" if key == current else label)
    return " ".join(parts)


def render_row(n: int, task: Task) -> str:
    done, total = task.step_progress
    mark = "✔" if task.done else "•"
    return f"{n:>2}. {mark} {task.text}\n    {fmt_date(task.created_at)} • 스텝 {done}/{total}"


def render_list(view: str, tasks: list[Task], counts: dict[str, int]) -> str:
    lines = [render_tabs(view, counts)]
    if not tasks:
        lines.append("완료한 항목이 없어요." if view == DONE_VIEW else "이 카테고리에 항목이 없어요.")
        return "\n".join(lines)
    for i, t in enumerate(tasks, start=1):
        lines.append(render_row(i, t))
    return "\n".join(lines)


def render_detail(task: Task) -> str:
    status = "완료" if task.done else "진행중"
    category = "완료" if task.done else LABELS.get(task.category.value, "-")
    lines = [
        "항목 상세",
        f"  {task.text}",
        f"  상태: {status} · 분류: {category}",
        f"  id: {task.id} · {fmt_date(task.created_at)}",
    ]
    if task.checklist:
        done, total = task.step_progress
        lines.append(f"  체크리스트 ({done}/{total}):")
        for i, s in enumerate(task.checklist, start=1):
            box = "[x]" if s.done else "[ ]"
            tag = " (AI)" if s.source == StepSource.AI else ""
            lines.append(f"    {i}. {box} {s.text}{tag}")
    else:
        lines.append("  체크리스트: 없음")
    if task.memo:
        lines.append("  메모:")
        lines.extend(f"    {line}" for line in task.memo.splitlines())
    return "\n".join(lines)
