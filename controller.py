"""
Submission controller: drives one form through validation and generation.

IDLE -> VALIDATING -> INVALID | SUBMITTING -> SUCCEEDED | FAILED
Any edit puts the machine back in IDLE.
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, Field

from messages import BUSY_LABEL, SUBMIT_LABEL
from poem_engine import GenerationError, PoemClient
from validation import (
    DEFAULT_POEM_LENGTH,
    FieldError,
    ValidationOutcome,
    accepts_count_key,
    accepts_word_key,
    normalize_digits,
    validate,
)

logger = logging.getLogger("mutanabi")


class SubmissionState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    INVALID = "invalid"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FormState(BaseModel):
    word: str = ""
    count: str = ""
    field_errors: dict[str, FieldError] = Field(default_factory=dict)
    result_text: str = ""
    is_submitting: bool = False


class SubmissionController:
    """Owns a FormState and the network call behind the submit button.

    Resubmitting while a request is pending starts a second request; whichever
    response lands last becomes the result. With ``discard_stale=True`` only
    the most recent submission may write its response.
    """

    def __init__(
        self,
        client: PoemClient,
        form: FormState | None = None,
        discard_stale: bool = False,
    ) -> None:
        self.client = client
        self.form = form if form is not None else FormState()
        self.discard_stale = discard_stale
        self.state = SubmissionState.IDLE
        self._generation = 0

    # -- edits ----------------------------------------------------------

    def type_word(self, key: str) -> bool:
        if not accepts_word_key(key):
            return False
        self.set_word(self.form.word + key)
        return True

    def type_count(self, key: str) -> bool:
        if not accepts_count_key(key):
            return False
        self.set_count(self.form.count + key)
        return True

    def set_word(self, text: str) -> None:
        self.form.word = text
        self.state = SubmissionState.IDLE

    def set_count(self, text: str | int) -> None:
        self.form.count = normalize_digits(str(text))
        self.state = SubmissionState.IDLE

    # -- display --------------------------------------------------------

    @property
    def can_submit(self) -> bool:
        return bool(self.form.word) and bool(self.form.count) and not self.form.is_submitting

    @property
    def submit_label(self) -> str:
        return BUSY_LABEL if self.form.is_submitting else SUBMIT_LABEL

    # -- validation / submission ---------------------------------------

    def blur(self) -> ValidationOutcome:
        return self._validate()

    def _validate(self) -> ValidationOutcome:
        if not self.form.count.strip():
            self.form.count = str(DEFAULT_POEM_LENGTH)
        outcome = validate(self.form.word, self.form.count)
        self.form.field_errors = dict(outcome.errors)
        if outcome.errors:
            logger.debug("Form rejected: %s", sorted(outcome.errors))
        return outcome

    async def submit(self) -> SubmissionState:
        self.state = SubmissionState.VALIDATING
        outcome = self._validate()
        if not outcome:
            self.state = SubmissionState.INVALID
            return self.state

        value = outcome.value
        self._generation += 1
        generation = self._generation
        self.state = SubmissionState.SUBMITTING
        self.form.is_submitting = True

        try:
            text = await self.client.generate(value.word, value.count)
        except GenerationError as exc:
            logger.error("Poem generation failed for %s: %s", value.word, exc)
            return self._fail(generation)
        except Exception:
            logger.exception("Unexpected error generating poem for %s", value.word)
            return self._fail(generation)

        if not self._is_current(generation):
            logger.info("Dropping stale response for %s", value.word)
            return self.state

        self.form.is_submitting = False
        self.form.result_text = text
        self.state = SubmissionState.SUCCEEDED
        return self.state

    def _fail(self, generation: int) -> SubmissionState:
        if self._is_current(generation):
            self.form.is_submitting = False
            self.state = SubmissionState.FAILED
        return SubmissionState.FAILED

    def _is_current(self, generation: int) -> bool:
        return not self.discard_stale or generation == self._generation
