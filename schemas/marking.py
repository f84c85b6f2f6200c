# schemas/marking.py
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

# ---------- Evaluate ----------


class EvaluateRequest(BaseModel):
    # template over {i} placeholders, e.g. "({0} + {1}) × {2}"
    expression: str
    operands: List[str] = Field(default_factory=list)


class EvaluateResponse(BaseModel):
    ok: bool
    value: Optional[str] = None
    num: Optional[int] = None
    den: Optional[int] = None
    decimal: Optional[float] = None
    feedback: Optional[str] = None


# ---------- Mark ----------


class MarkRequest(BaseModel):
    expected: str
    answer: str
    answer_type: Literal["fraction", "mixed", "decimal", "common_denom"] = "fraction"


class MarkResponse(BaseModel):
    ok: bool
    correct: bool
    score: float
    feedback: str
    expected: Optional[str] = None
