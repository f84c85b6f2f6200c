# fraction_engine/levels.py
"""
Per-level generation bounds.

The defaults below can be overridden by a JSON file (``FRACTION_LEVELS_FILE``)
holding either a list of records with a ``level`` key or a mapping
``{"1": {...}, ...}``. Records that fail validation are skipped and the
built-in entry for that level is kept.
"""
from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, model_validator

import config

logger = logging.getLogger(__name__)

MAX_ABS_VALUE = 999
DEFAULT_LEVEL = 2


@dataclass(frozen=True)
class LevelParams:
    denoms: Optional[Tuple[int, ...]]
    min_den: int
    max_den: int
    max_num: int
    max_terms: int
    negatives: bool

    def random_denominator(self, rng: random.Random) -> int:
        if self.denoms:
            return rng.choice(self.denoms)
        return rng.randint(self.min_den, self.max_den)

    @property
    def largest_denominator(self) -> int:
        return max(self.denoms) if self.denoms else self.max_den


DEFAULT_LEVELS: Dict[int, LevelParams] = {
    1: LevelParams(denoms=(2, 3, 4, 5, 6, 8, 10, 12), min_den=2, max_den=12, max_num=12, max_terms=2, negatives=False),
    2: LevelParams(denoms=None, min_den=2, max_den=20, max_num=20, max_terms=2, negatives=False),
    3: LevelParams(denoms=None, min_den=2, max_den=50, max_num=50, max_terms=3, negatives=True),
    4: LevelParams(denoms=None, min_den=2, max_den=100, max_num=100, max_terms=4, negatives=True),
}


class LevelParamsModel(BaseModel):
    level: int = Field(ge=1, le=4)
    denoms: Optional[List[int]] = None
    min_den: int = Field(default=2, ge=2, le=MAX_ABS_VALUE)
    max_den: int = Field(ge=2, le=MAX_ABS_VALUE)
    max_num: int = Field(ge=1, le=MAX_ABS_VALUE)
    max_terms: int = Field(ge=2, le=4)
    negatives: bool = False

    @model_validator(mode="after")
    def _check_ranges(self) -> "LevelParamsModel":
        if self.min_den > self.max_den:
            raise ValueError("min_den must not exceed max_den")
        if self.denoms is not None:
            if not self.denoms or any(d < 2 or d > MAX_ABS_VALUE for d in self.denoms):
                raise ValueError("denoms must be a non-empty list of integers in 2..999")
            if any(d < self.min_den or d > self.max_den for d in self.denoms):
                raise ValueError("denoms must lie within min_den..max_den")
        return self

    def to_params(self) -> LevelParams:
        return LevelParams(
            denoms=tuple(self.denoms) if self.denoms else None,
            min_den=self.min_den,
            max_den=self.max_den,
            max_num=self.max_num,
            max_terms=self.max_terms,
            negatives=self.negatives,
        )


def _iter_records(data: Any) -> Iterable[Dict[str, Any]]:
    if isinstance(data, list):
        for obj in data:
            if isinstance(obj, dict):
                yield obj
    elif isinstance(data, dict):
        for key, obj in data.items():
            if isinstance(obj, dict):
                yield {"level": key, **obj}


def load_level_table(path: Optional[Path]) -> Dict[int, LevelParams]:
    table = dict(DEFAULT_LEVELS)
    if path is None or not path.exists():
        return table

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        # A broken override file keeps the defaults
        logger.warning("Ignoring level override %s: %s", path, e)
        return table

    for raw in _iter_records(data):
        try:
            record = LevelParamsModel(**raw)
        except ValidationError as e:
            logger.warning("Skipping invalid level record %r: %s", raw, e.errors()[0]["msg"])
            continue
        table[record.level] = record.to_params()
    return table


class LevelTable:
    _levels: Dict[int, LevelParams] = {}

    @classmethod
    def load(cls) -> Dict[int, LevelParams]:
        if not cls._levels:
            cls.reload()
        return cls._levels

    @classmethod
    def reload(cls) -> int:
        cls._levels = load_level_table(config.levels_file())
        return len(cls._levels)


# Public API
def get_level_params(level: Any) -> LevelParams:
    return LevelTable.load()[normalize_level(level)]


def normalize_level(level: Any) -> int:
    # 3.0 counts as level 3; "3", True and 2.5 do not
    if isinstance(level, float) and level.is_integer():
        level = int(level)
    if isinstance(level, bool) or not isinstance(level, int) or level not in LevelTable.load():
        return DEFAULT_LEVEL
    return level


def reload_levels() -> int:
    return LevelTable.reload()
