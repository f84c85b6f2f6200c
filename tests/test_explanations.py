import pytest

from fraction_engine.explanations import explain, generate_explanation
from fraction_engine.fallbacks import FALLBACK_TASKS
from fraction_engine.values import DecimalValue, Fraction, Task, ValueQuestion


@pytest.mark.parametrize(
    "topic, lang, expected",
    [
        ("simplify", "ru", "НОД(6, 8) = 2. 6÷2 / 8÷2 = 3/4"),
        ("simplify", "de", "ggT(6, 8) = 2. Zähler und Nenner durch den ggT teilen: 6÷2 / 8÷2 = 3/4"),
        ("mixed", "ru", "11 ÷ 4 = 2 остаток 3. 11/4 = 2 3/4"),
        ("mixed", "de", "11 ÷ 4 = 2 Rest 3. 11/4 = 2 3/4"),
        ("common_denom", "ru", "НОК(3, 5) = 15. 1/3 = 5/15, 2/5 = 6/15"),
        ("common_denom", "de", "kgV(3, 5) = 15. Nenner auf das kgV bringen: 1/3 = 5/15, 2/5 = 6/15"),
        ("add", "ru", "Шаг 1: Общий знаменатель = 12. Шаг 2: 1/3 + 1/4 = 7/12"),
        ("subtract", "de", "Schritt 1: Gemeinsamer Nenner = 12. Schritt 2: 3/4 − 1/3 = 5/12"),
        ("multiply", "ru", "2×3 / 3×5 = 6/15 = 2/5"),
        ("divide", "de", "2/3 ÷ 4/5 = 2/3 × 5/4 = 5/6"),
        ("combined", "ru", "Шаг 1: Сначала скобки и ×/÷, затем +/−. Шаг 2: (1/2 + 1/3) × 1/4 = 5/24"),
        (
            "combined",
            "de",
            "Schritt 1: Erst Klammern und ×/÷, dann +/−. Schritt 2: (1/2 + 1/3) × 1/4 = 5/24",
        ),
        ("to_decimal", "ru", "3 ÷ 8 = 0,375"),
        ("from_decimal", "de", "0,375 = 3/8"),
        ("mixed_decimal", "ru", "Шаг 1: 0,5 = 1/2. Шаг 2: 1/2 + 1/3 = 5/6"),
    ],
)
def test_explanations_for_fallback_tasks(topic, lang, expected):
    assert generate_explanation(FALLBACK_TASKS[topic], lang) == expected


def test_unknown_language_falls_back_to_russian():
    task = FALLBACK_TASKS["add"]
    assert generate_explanation(task, "fr") == generate_explanation(task, "ru")


def test_repeating_decimal_explanation():
    task = Task(
        "to_decimal",
        3,
        ValueQuestion(Fraction(1, 3)),
        DecimalValue(0.333, period="3", display="0,(3)"),
        "decimal",
    )
    assert generate_explanation(task, "de") == "1 ÷ 3 = 0,(3)"


def test_unknown_topic_uses_generic_step():
    task = Task("percent", 1, ValueQuestion(Fraction(1, 2)), Fraction(1, 2), "fraction")
    assert generate_explanation(task, "de") == "Schritt 1: 1/2 = 1/2"


def test_explain_covers_both_languages():
    bundle = explain(FALLBACK_TASKS["divide"])
    assert set(bundle) == {"ru", "de"}
    assert all(bundle.values())
