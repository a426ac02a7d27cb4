"""Canned answers used when the assistant cannot answer.

Rules are checked top to bottom against the lower-cased question; the first
matching rule wins and the last rule always matches.
"""

import re
from collections.abc import Callable
from typing import NamedTuple

PASSWORD_RESET_ANSWER = (
    "To reset your password, open the FrameLink login page and choose "
    '"Forgot password". Enter the email address linked to your account and '
    "follow the link we send you. The link is valid for 24 hours. If the email "
    "does not arrive, check your spam folder or contact our support team."
)

PRICING_ANSWER = (
    "FrameLink offers three plans: Basic for individual practitioners, "
    "Professional for clinics with several practitioners and shared scheduling, "
    "and Enterprise for larger organisations that need custom integrations and "
    "dedicated support. Contact our sales team for a quote tailored to your clinic."
)

UPLOAD_HELP_ANSWER = (
    "You can add documents on the Upload page. Supported formats are PDF, Word "
    "(DOCX), Excel (XLSX), CSV, JSON, Markdown and plain text. Uploaded documents "
    "are used to answer future questions and can be removed from the same page."
)

DEFAULT_ANSWER = (
    "Thank you for your question. Our assistant is unavailable at the moment, "
    "so a member of the FrameLink support team will get back to you as soon as "
    "possible. For urgent matters, please contact the Centro Médico de Algés "
    "reception directly."
)


class FallbackRule(NamedTuple):
    matches: Callable[[str], bool]
    answer: str


def _mentions(*keywords: str) -> Callable[[str], bool]:
    # Keywords must start a word: "files" matches "file", "profile" does not
    alternatives = "|".join(map(re.escape, keywords))
    pattern = re.compile(rf"\b(?:{alternatives})")

    def predicate(text: str) -> bool:
        return pattern.search(text) is not None

    return predicate


FALLBACK_RULES: tuple[FallbackRule, ...] = (
    FallbackRule(_mentions("password"), PASSWORD_RESET_ANSWER),
    FallbackRule(_mentions("pricing", "price", "plan"), PRICING_ANSWER),
    FallbackRule(_mentions("upload", "document", "file"), UPLOAD_HELP_ANSWER),
    FallbackRule(lambda _: True, DEFAULT_ANSWER),
)


def fallback_answer(question: str, rules: tuple[FallbackRule, ...] = FALLBACK_RULES) -> str:
    """Pick the canned answer for a question."""
    text = question.lower()
    for rule in rules:
        if rule.matches(text):
            return rule.answer
    return DEFAULT_ANSWER
