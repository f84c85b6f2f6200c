from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query

from fraction_engine import TOPIC_TITLES, TOPICS, UnsupportedTopic, generate_task
from fraction_engine.formatting import (
    decimal_places_for_task,
    format_answer,
    format_question,
    format_value,
)
from fraction_engine.values import (
    CommonDenominatorAnswer,
    DecimalValue,
    ExpressionQuestion,
    Fraction,
    MixedNumber,
    PairQuestion,
    Task,
)
from schemas.tasks import TaskOut, TopicOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


# --- Serialisation ----------------------------------------------------------------


def _value_out(value: Any, places: Optional[int] = None) -> Dict[str, Any]:
    text = format_value(value, places)
    if isinstance(value, MixedNumber):
        return {"kind": "mixed", "text": text, "whole": value.whole, "num": value.num, "den": value.den}
    if isinstance(value, Fraction):
        return {"kind": "fraction", "text": text, "num": value.num, "den": value.den}
    if isinstance(value, DecimalValue):
        return {
            "kind": "decimal",
            "text": text,
            "decimal": value.decimal,
            "period": value.period,
            "display": value.display,
        }
    return {"kind": "integer", "text": text, "num": value, "den": 1}


def _raw_fraction_out(value: Fraction) -> Dict[str, Any]:
    # keep unreduced numbers (e.g. 5/15) exactly as given
    return {"kind": "fraction", "text": f"{value.num}/{value.den}", "num": value.num, "den": value.den}


def _question_out(task: Task) -> Dict[str, Any]:
    question = task.question
    out: Dict[str, Any] = {"kind": question.kind, "text": format_question(task)}
    if isinstance(question, PairQuestion):
        out["fractions"] = [_raw_fraction_out(f) for f in question.fractions]
    elif isinstance(question, ExpressionQuestion):
        out["operands"] = [_value_out(op) for op in question.operands]
        out["operators"] = list(question.operators)
        out["expression"] = question.expression
    elif isinstance(question.value, Fraction):
        out["value"] = _raw_fraction_out(question.value)
    else:
        out["value"] = _value_out(question.value)
    return out


def _answer_out(task: Task) -> Dict[str, Any]:
    answer = task.correct_answer
    out: Dict[str, Any] = {"kind": answer.kind, "text": format_answer(task)}
    if isinstance(answer, CommonDenominatorAnswer):
        out["fractions"] = [_raw_fraction_out(f) for f in answer.fractions]
        out["common_den"] = answer.common_den
    else:
        out["value"] = _value_out(answer)
    return out


def serialize_task(task: Task) -> Dict[str, Any]:
    places = decimal_places_for_task(task)
    return {
        "topic": task.topic,
        "level": task.level,
        "answer_type": task.answer_type,
        "question": _question_out(task),
        "correct_answer": _answer_out(task),
        "options": [_value_out(opt, places) for opt in task.options],
        "correct_index": task.correct_index,
        "explanation": dict(task.explanation),
    }


# --- Endpoints --------------------------------------------------------------------


@router.get("/topics", response_model=List[TopicOut])
def list_topics():
    return [{"code": code, "title": TOPIC_TITLES[code]} for code in TOPICS]


@router.get("/tasks/{topic}", response_model=TaskOut)
def get_task(
    topic: str,
    level: int = Query(default=2, ge=1, le=4),
    seed: Optional[int] = Query(default=None, description="Repeatable task for the same seed"),
):
    rng = random.Random(seed) if seed is not None else None
    try:
        task = generate_task(topic, level, rng)
    except UnsupportedTopic:
        logger.info("Unknown topic requested: %s", topic)
        raise HTTPException(status_code=404, detail="topic not found")
    return serialize_task(task)
