# src/desire_tracker/tasks/assist.py

"""
Canned checklist suggestions ("AI assist").

A static lookup table: the first rule whose keyword appears in the task title
decides the template. No model, no network.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .task_models import StepSource
from .task_store import TaskStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TemplateRule:
    keywords: tuple[str, ...]
    steps: tuple[str, ...]


# Order matters: first match wins.
TEMPLATE_RULES: tuple[TemplateRule, ...] = (
    TemplateRule(
        keywords=("공부", "영어", "시험", "study", "exam"),
        steps=("공부 범위 정하기", "30분 집중해서 공부하기", "배운 내용 복습하기"),
    ),
    TemplateRule(
        keywords=("운동", "헬스", "러닝", "산책", "workout", "run"),
        steps=("운동복 챙기기", "10분 스트레칭", "운동 기록 남기기"),
    ),
    TemplateRule(
        keywords=("청소", "정리", "빨래", "clean"),
        steps=("정리할 공간 정하기", "버릴 것 분리하기", "마무리 점검하기"),
    ),
    TemplateRule(
        keywords=("장보기", "구매", "사기", "쇼핑", "buy"),
        steps=("필요한 물건 목록 쓰기", "예산 정하기", "구매 후 영수증 확인하기"),
    ),
    TemplateRule(
        keywords=("여행", "trip", "travel"),
        steps=("일정과 예산 정하기", "숙소와 교통 예약하기", "짐 목록 만들기"),
    ),
    TemplateRule(
        keywords=("보고서", "과제", "발표", "report"),
        steps=("자료 조사하기", "초안 작성하기", "검토 후 제출하기"),
    ),
)

DEFAULT_STEPS: tuple[str, ...] = ("목표 구체화하기", "첫 단계 바로 시작하기", "결과 점검하기")


def suggest_steps(title: str) -> list[str]:
    """Return the template steps for a task title (never empty)."""
    haystack = (title or "").lower()
    for rule in TEMPLATE_RULES:
        if any(k in haystack for k in rule.keywords):
            return list(rule.steps)
    return list(DEFAULT_STEPS)


def apply_assist(store: TaskStore, task_id: str) -> int:
    """
    Append the suggested template to a task's checklist.

    Steps are tagged with StepSource.AI. Returns how many steps were appended
    (0 when the task does not exist).
    """
    task = store.get(task_id)
    if task is None:
        return 0
    steps = suggest_steps(task.text)
    added = store.add_steps(task_id, steps, source=StepSource.AI)
    logger.debug("Assist appended %d steps to task %s", added, task_id)
    return added
