# fraction_engine/errors.py
from __future__ import annotations


class FractionEngineError(Exception):
    """Base class for every error raised by the task engine."""


class InvalidFraction(FractionEngineError, ValueError):
    pass


class DivisionByZero(FractionEngineError, ZeroDivisionError):
    pass


class MalformedExpression(FractionEngineError, ValueError):
    pass


class UnsupportedTopic(FractionEngineError, LookupError):
    def __init__(self, topic: object):
        super().__init__(f"Unsupported topic: {topic!r}")
        self.topic = topic
