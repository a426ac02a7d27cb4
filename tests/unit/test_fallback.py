"""Unit tests for the canned fallback answers."""

import pytest

from framelink.assistant.fallback import (
    DEFAULT_ANSWER,
    PASSWORD_RESET_ANSWER,
    PRICING_ANSWER,
    UPLOAD_HELP_ANSWER,
    FallbackRule,
    fallback_answer,
)


@pytest.mark.parametrize(
    ("question", "expected"),
    [
        ("I forgot my password", PASSWORD_RESET_ANSWER),
        ("PASSWORD reset please", PASSWORD_RESET_ANSWER),
        ("What is your pricing?", PRICING_ANSWER),
        ("How much is the Professional plan?", PRICING_ANSWER),
        ("Can I upload a document?", UPLOAD_HELP_ANSWER),
        ("Where do I find my uploaded files?", UPLOAD_HELP_ANSWER),
        ("When are you open?", DEFAULT_ANSWER),
        ("How do I update my profile photo?", DEFAULT_ANSWER),
        ("Can I get an explanation of my lab results?", DEFAULT_ANSWER),
        ("", DEFAULT_ANSWER),
    ],
)
def test_fallback_answer(question: str, expected: str) -> None:
    assert fallback_answer(question) == expected


def test_first_matching_rule_wins() -> None:
    """A question matching several rules gets the earliest rule's answer."""
    assert fallback_answer("Does the price include a password manager?") == (
        PASSWORD_RESET_ANSWER
    )


def test_custom_rules() -> None:
    rules = (FallbackRule(lambda text: "hours" in text, "We open at 8:00."),)

    assert fallback_answer("Opening HOURS?", rules) == "We open at 8:00."
    assert fallback_answer("Something else", rules) == DEFAULT_ANSWER
