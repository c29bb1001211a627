"""
Input validation for the poem form: Arabic seed word + poem length.

Pure functions only. Callers decide how errors are shown.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal

from pydantic import BaseModel, Field

from messages import MessageCode, lookup

DEFAULT_POEM_LENGTH: int = 1000

WORD_FIELD = "word"
COUNT_FIELD = "count"

ARABIC_INDIC_DIGITS = "٠١٢٣٤٥٦٧٨٩"
_DIGIT_TABLE = str.maketrans(ARABIC_INDIC_DIGITS, "0123456789")

ARABIC_TEXT_RE = re.compile(r"[\u0600-\u06FF\s]+")
DIGITS_RE = re.compile(r"[0-9\u0660-\u0669]+")
NUMBER_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)")


class FieldError(BaseModel):
    code: MessageCode
    primary: str
    secondary: str

    @classmethod
    def from_code(cls, code: MessageCode) -> FieldError:
        message = lookup(code)
        return cls(code=code, primary=message.primary, secondary=message.secondary)

    def display(self) -> str:
        return f"{self.primary} / {self.secondary}"


class ValidatedInput(BaseModel):
    word: str
    count: int = Field(..., ge=1)


class ValidationOutcome(BaseModel):
    value: ValidatedInput | None = None
    errors: dict[str, FieldError] = Field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.is_valid


def normalize_digits(text: str) -> str:
    """Map Arabic-Indic digits (٠-٩) to 0-9, leaving everything else alone."""
    return text.translate(_DIGIT_TABLE)


def check_word(word: str) -> MessageCode | None:
    if not word.strip():
        return MessageCode.WORD_REQUIRED
    if len(word.split()) > 1:
        return MessageCode.WORD_SINGLE
    if not ARABIC_TEXT_RE.fullmatch(word):
        return MessageCode.WORD_ARABIC
    return None


def parse_count(count: str | int | None) -> tuple[int | None, MessageCode | None]:
    """Return (value, error). An empty count yields DEFAULT_POEM_LENGTH."""
    if count is None:
        return DEFAULT_POEM_LENGTH, None
    if isinstance(count, int):
        text = str(count)
    else:
        text = normalize_digits(count).strip()
    if not text:
        return DEFAULT_POEM_LENGTH, None

    if not NUMBER_RE.fullmatch(text):
        return None, MessageCode.COUNT_INTEGER
    number = Decimal(text)
    # range check runs before the integer check: "0.5" is reported as too small
    if number < 1:
        return None, MessageCode.COUNT_MIN
    # counts past the double range are not usable integers
    if math.isinf(float(text)) or number != number.to_integral_value():
        return None, MessageCode.COUNT_INTEGER
    return int(number), None


def validate(word: str, count: str | int | None) -> ValidationOutcome:
    errors: dict[str, FieldError] = {}

    word_error = check_word(word or "")
    if word_error is not None:
        errors[WORD_FIELD] = FieldError.from_code(word_error)

    value, count_error = parse_count(count)
    if count_error is not None:
        errors[COUNT_FIELD] = FieldError.from_code(count_error)

    if errors:
        return ValidationOutcome(errors=errors)
    return ValidationOutcome(value=ValidatedInput(word=word.strip(), count=value))


# Keystroke filters. Advisory only: pasted or IME input bypasses them, so
# validate() still runs on submit.

def accepts_word_key(key: str) -> bool:
    return bool(key) and ARABIC_TEXT_RE.fullmatch(key) is not None


def accepts_count_key(key: str) -> bool:
    return bool(key) and DIGITS_RE.fullmatch(key) is not None


def filter_word_input(text: str) -> str:
    return "".join(ch for ch in text if accepts_word_key(ch))


def filter_count_input(text: str) -> str:
    return normalize_digits("".join(ch for ch in text if accepts_count_key(ch)))
