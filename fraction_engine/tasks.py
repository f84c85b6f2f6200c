# fraction_engine/tasks.py
"""
Task orchestration: generate, validate, then decorate with options and
explanations.
"""
from __future__ import annotations

import dataclasses
import logging
import random
from typing import Any, Dict, Optional

from .distractors import generate_options
from .errors import UnsupportedTopic
from .explanations import explain
from .fallbacks import fallback_task
from .generators import GENERATORS
from .levels import normalize_level
from .validator import validate_task
from .values import Task

logger = logging.getLogger(__name__)

MAX_GENERATION_ATTEMPTS = 10

# Display order.
TOPICS = (
    "simplify",
    "mixed",
    "common_denom",
    "add",
    "subtract",
    "multiply",
    "divide",
    "combined",
    "to_decimal",
    "from_decimal",
    "mixed_decimal",
)

TOPIC_TITLES: Dict[str, Dict[str, str]] = {
    "simplify": {"ru": "Сокращение дробей", "de": "Brüche kürzen"},
    "mixed": {"ru": "Выделение целой части", "de": "Gemischte Zahlen"},
    "common_denom": {"ru": "Приведение к общему знаменателю", "de": "Gemeinsamer Nenner"},
    "add": {"ru": "Сложение дробей", "de": "Brüche addieren"},
    "subtract": {"ru": "Вычитание дробей", "de": "Brüche subtrahieren"},
    "multiply": {"ru": "Умножение дробей", "de": "Brüche multiplizieren"},
    "divide": {"ru": "Деление дробей", "de": "Brüche dividieren"},
    "combined": {"ru": "Комбинированные примеры", "de": "Kombinierte Aufgaben"},
    "to_decimal": {"ru": "Дробь → десятичная", "de": "Bruch → Dezimalzahl"},
    "from_decimal": {"ru": "Десятичная → дробь", "de": "Dezimalzahl → Bruch"},
    "mixed_decimal": {"ru": "Комбинированные с десятичными", "de": "Gemischte Dezimalaufgaben"},
}


def _candidate(topic: str, level: int, rng: random.Random) -> Optional[Task]:
    generator = GENERATORS[topic]
    for attempt in range(1, MAX_GENERATION_ATTEMPTS + 1):
        task = generator(level, rng)
        if task is not None and validate_task(task):
            return task
        logger.debug("Rejected %s candidate (level %s, attempt %s): %r", topic, level, attempt, task)
    return None


def generate_task(topic: str, level: Any = 2, rng: Optional[random.Random] = None) -> Task:
    """
    Build a complete task for topic at level.

    Unknown topics raise UnsupportedTopic; levels outside the table are
    treated as level 2. When every generation attempt is rejected the
    hand-authored task for the topic is used instead.
    """
    if topic not in GENERATORS:
        raise UnsupportedTopic(topic)

    rng = rng or random.Random()
    level = normalize_level(level)

    task = _candidate(topic, level, rng)
    if task is None:
        logger.warning("Falling back to the built-in %s task (level %s)", topic, level)
        task = fallback_task(topic, level)

    options, correct_index = generate_options(task, rng)
    task = dataclasses.replace(task, options=options, correct_index=correct_index)
    return dataclasses.replace(task, explanation=explain(task))
