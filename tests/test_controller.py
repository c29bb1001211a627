"""Tests for the submission controller state machine."""

import asyncio

import httpx
import pytest

from controller import FormState, SubmissionController, SubmissionState
from messages import BUSY_LABEL, SUBMIT_LABEL, MessageCode
from poem_engine import PoemClient


class GatedClient(PoemClient):
    """Holds every request open until the test releases it."""

    def __init__(self):
        super().__init__(endpoint="https://poems.test/generate")
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple[str, int]] = []

    async def generate(self, seed, length):
        self.calls.append((seed, length))
        gate = self.gates[seed] = asyncio.Event()
        await gate.wait()
        return f"poem:{seed}"


def make_controller(client, word="قمر", count="5", **kwargs):
    controller = SubmissionController(client, **kwargs)
    controller.set_word(word)
    controller.set_count(count)
    return controller


class TestEdits:
    def test_rejected_keys_leave_fields_unchanged(self, fake_api):
        controller = SubmissionController(fake_api.client())

        assert controller.type_word("ق")
        assert not controller.type_word("x")
        assert controller.type_count("١")
        assert not controller.type_count("a")

        assert controller.form.word == "ق"
        assert controller.form.count == "1"

    def test_pasted_text_bypasses_key_filter(self, fake_api):
        controller = SubmissionController(fake_api.client())
        controller.set_word("hello")
        assert controller.form.word == "hello"

    def test_count_is_normalized_as_it_changes(self, fake_api):
        controller = SubmissionController(fake_api.client())
        controller.set_count("٢٠")
        assert controller.form.count == "20"

    @pytest.mark.asyncio
    async def test_edit_returns_to_idle(self, fake_api):
        controller = make_controller(fake_api.client(), word="hello")
        assert await controller.submit() is SubmissionState.INVALID

        controller.set_word("قمر")
        assert controller.state is SubmissionState.IDLE


class TestDisplay:
    def test_can_submit_needs_both_fields(self, fake_api):
        controller = SubmissionController(fake_api.client())
        assert not controller.can_submit
        controller.set_word("قمر")
        assert not controller.can_submit
        controller.set_count("5")
        assert controller.can_submit

    def test_submit_label_follows_busy_flag(self, fake_api):
        form = FormState(word="قمر", count="5", is_submitting=True)
        controller = SubmissionController(fake_api.client(), form=form)
        assert controller.submit_label == BUSY_LABEL
        assert not controller.can_submit

        form.is_submitting = False
        assert controller.submit_label == SUBMIT_LABEL


class TestSubmit:
    @pytest.mark.asyncio
    async def test_valid_input_generates_poem(self, fake_api):
        controller = make_controller(fake_api.client())

        state = await controller.submit()

        assert state is SubmissionState.SUCCEEDED
        assert len(fake_api.requests) == 1
        params = fake_api.requests[0].url.params
        assert params["seed"] == "قمر"
        assert params["length"] == "5"
        assert controller.form.result_text == fake_api.poem
        assert controller.form.is_submitting is False
        assert controller.form.field_errors == {}

    @pytest.mark.asyncio
    async def test_invalid_input_makes_no_request(self, fake_api):
        controller = make_controller(fake_api.client(), word="بيت شعر", count="0")

        state = await controller.submit()

        assert state is SubmissionState.INVALID
        assert fake_api.requests == []
        assert controller.form.is_submitting is False
        errors = controller.form.field_errors
        assert errors["word"].code is MessageCode.WORD_SINGLE
        assert errors["count"].code is MessageCode.COUNT_MIN

    @pytest.mark.asyncio
    async def test_empty_count_is_filled_with_default(self, fake_api):
        controller = make_controller(fake_api.client(), count="")

        await controller.submit()

        assert controller.form.count == "1000"
        assert fake_api.requests[0].url.params["length"] == "1000"

    @pytest.mark.asyncio
    async def test_failure_clears_busy_flag_without_result(self, fake_api, caplog):
        fake_api.fail_with = httpx.ConnectError("connection refused")
        controller = make_controller(fake_api.client())

        with caplog.at_level("ERROR", logger="mutanabi"):
            state = await controller.submit()

        assert state is SubmissionState.FAILED
        assert controller.form.is_submitting is False
        assert controller.form.result_text == ""
        assert controller.form.field_errors == {}
        assert "Poem generation failed" in caplog.text

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_result(self, fake_api):
        controller = make_controller(fake_api.client())
        await controller.submit()

        fake_api.body = b"not json"
        assert await controller.submit() is SubmissionState.FAILED
        assert controller.form.result_text == fake_api.poem

    @pytest.mark.asyncio
    async def test_oversized_count_is_invalid_and_not_busy(self, fake_api):
        controller = make_controller(fake_api.client(), count="1" * 5000)

        state = await controller.submit()

        assert state is SubmissionState.INVALID
        assert controller.form.field_errors["count"].code is MessageCode.COUNT_INTEGER
        assert controller.form.is_submitting is False
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_unexpected_client_error_clears_busy_flag(self, fake_api, caplog):
        fake_api.fail_with = ValueError("cannot encode query")
        controller = make_controller(fake_api.client())

        with caplog.at_level("ERROR", logger="mutanabi"):
            state = await controller.submit()

        assert state is SubmissionState.FAILED
        assert controller.state is SubmissionState.FAILED
        assert controller.form.is_submitting is False
        assert controller.can_submit
        assert "Unexpected error generating poem" in caplog.text

    def test_blur_surfaces_errors_without_request(self, fake_api):
        controller = make_controller(fake_api.client(), word="hello")

        outcome = controller.blur()

        assert not outcome
        assert controller.form.field_errors["word"].code is MessageCode.WORD_ARABIC
        assert fake_api.requests == []


class TestConcurrentSubmissions:
    @pytest.mark.asyncio
    async def test_last_response_wins(self):
        client = GatedClient()
        controller = make_controller(client)

        first = asyncio.create_task(controller.submit())
        await asyncio.sleep(0)
        controller.set_word("شمس")
        second = asyncio.create_task(controller.submit())
        await asyncio.sleep(0)
        assert controller.form.is_submitting

        client.gates["شمس"].set()
        await second
        assert controller.form.result_text == "poem:شمس"
        assert controller.form.is_submitting is False

        client.gates["قمر"].set()
        await first
        assert controller.form.result_text == "poem:قمر"
        assert len(client.calls) == 2

    @pytest.mark.asyncio
    async def test_discard_stale_keeps_latest_submission(self):
        client = GatedClient()
        controller = make_controller(client, discard_stale=True)

        first = asyncio.create_task(controller.submit())
        await asyncio.sleep(0)
        controller.set_word("شمس")
        second = asyncio.create_task(controller.submit())
        await asyncio.sleep(0)

        client.gates["قمر"].set()
        assert await first is SubmissionState.SUBMITTING
        assert controller.state is SubmissionState.SUBMITTING
        assert controller.form.result_text == ""
        assert controller.form.is_submitting

        client.gates["شمس"].set()
        await second
        assert controller.form.result_text == "poem:شمس"
        assert controller.form.is_submitting is False
        assert controller.state is SubmissionState.SUCCEEDED
