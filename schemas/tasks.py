# schemas/tasks.py
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel


class ValueOut(BaseModel):
    kind: str  # fraction | mixed | decimal | integer
    text: str
    num: Optional[int] = None
    den: Optional[int] = None
    whole: Optional[int] = None
    decimal: Optional[float] = None
    period: Optional[str] = None
    display: Optional[str] = None


class QuestionOut(BaseModel):
    kind: str  # value | pair | expression
    text: str
    value: Optional[ValueOut] = None
    fractions: Optional[List[ValueOut]] = None
    operands: Optional[List[ValueOut]] = None
    operators: Optional[List[str]] = None
    expression: Optional[str] = None


class AnswerOut(BaseModel):
    kind: str
    text: str
    value: Optional[ValueOut] = None
    # common_denom answers only
    fractions: Optional[List[ValueOut]] = None
    common_den: Optional[int] = None


class TaskOut(BaseModel):
    topic: str
    level: int
    answer_type: str
    question: QuestionOut
    correct_answer: AnswerOut
    options: List[ValueOut]
    correct_index: int
    explanation: Dict[str, str]


class TopicOut(BaseModel):
    code: str
    title: Dict[str, str]
