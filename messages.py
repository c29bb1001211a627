"""
Bilingual message catalog. Every user-facing string is an English / Arabic pair.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class LocalizedMessage(BaseModel):
    primary: str
    secondary: str

    def display(self) -> str:
        return f"{self.primary} / {self.secondary}"


class MessageCode(str, Enum):
    WORD_REQUIRED = "word_required"
    WORD_SINGLE = "word_single"
    WORD_ARABIC = "word_arabic"
    COUNT_MIN = "count_min"
    COUNT_INTEGER = "count_integer"


CATALOG: dict[MessageCode, LocalizedMessage] = {
    MessageCode.WORD_REQUIRED: LocalizedMessage(
        primary="Please enter an Arabic word",
        secondary="يرجى إدخال كلمة عربية",
    ),
    MessageCode.WORD_SINGLE: LocalizedMessage(
        primary="Please enter only one word",
        secondary="يرجى إدخال كلمة واحدة فقط",
    ),
    MessageCode.WORD_ARABIC: LocalizedMessage(
        primary="Please enter a word in Arabic",
        secondary="يرجى إدخال كلمة باللغة العربية",
    ),
    MessageCode.COUNT_MIN: LocalizedMessage(
        primary="Please enter a number greater than or equal to 1",
        secondary="يرجى إدخال رقم أكبر من أو يساوي 1",
    ),
    MessageCode.COUNT_INTEGER: LocalizedMessage(
        primary="Please enter an integer",
        secondary="يرجى إدخال عدد صحيح",
    ),
}


def lookup(code: MessageCode) -> LocalizedMessage:
    return CATALOG[code]


# Fixed page strings
TITLE = LocalizedMessage(
    primary="Generate your own poem in the style of Al Mutanabi",
    secondary="اصنع قصيدتك الخاصة على طراز المتنبي",
)
WORD_LABEL = "Arabic Word"
COUNT_LABEL = "Number"
WORD_PLACEHOLDER = "أدخل كلمة عربية"
COUNT_PLACEHOLDER = "أدخل رقم"
SUBMIT_LABEL = "توليد"
BUSY_LABEL = "...جار إنشاء قصيدة"
