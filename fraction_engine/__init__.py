from .distractors import generate_options
from .errors import (
    DivisionByZero,
    FractionEngineError,
    InvalidFraction,
    MalformedExpression,
    UnsupportedTopic,
)
from .explanations import generate_explanation
from .rational import (
    decimal_to_fraction,
    fraction_to_decimal,
    fractions_equal,
    gcd,
    lcm,
    simplify_fraction,
    to_improper,
    to_mixed,
)
from .tasks import MAX_GENERATION_ATTEMPTS, TOPIC_TITLES, TOPICS, generate_task
from .validator import validate_task
from .values import (
    CommonDenominatorAnswer,
    DecimalValue,
    ExpressionQuestion,
    Fraction,
    MixedNumber,
    PairQuestion,
    Task,
    ValueQuestion,
)

__all__ = [
    "CommonDenominatorAnswer",
    "DecimalValue",
    "DivisionByZero",
    "ExpressionQuestion",
    "Fraction",
    "FractionEngineError",
    "InvalidFraction",
    "MAX_GENERATION_ATTEMPTS",
    "MalformedExpression",
    "MixedNumber",
    "PairQuestion",
    "TOPICS",
    "TOPIC_TITLES",
    "Task",
    "UnsupportedTopic",
    "ValueQuestion",
    "decimal_to_fraction",
    "fraction_to_decimal",
    "fractions_equal",
    "gcd",
    "generate_explanation",
    "generate_options",
    "generate_task",
    "lcm",
    "simplify_fraction",
    "to_improper",
    "to_mixed",
    "validate_task",
]
