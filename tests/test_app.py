"""
End-to-end tests of the Textual app with a fake engine.
"""

import asyncio
from unittest.mock import patch

import pytest

from app import ChatApp
from core.config import AppConfig
from core.engine import InferenceEngine
from models import Kind, TurnStatus
from screens import EngineMissingScreen, NoModelScreen
from widgets import InputArea, MessageBubble

MODEL_ROW = "fake:1b    0123456789ab    1.1 GB    2 days ago"


async def wait_for(pilot, predicate, timeout=10.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await pilot.pause(0.05)


@pytest.mark.asyncio
async def test_engine_missing_screen_quit_exits(fake_engine):
    app = ChatApp(AppConfig(engine=fake_engine()))
    with patch.object(InferenceEngine, "is_installed", return_value=False):
        async with app.run_test() as pilot:
            await wait_for(pilot, lambda: isinstance(app.screen, EngineMissingScreen))
            await pilot.pause()
            with patch.object(app, "exit") as exit_app:
                await pilot.press("2")
                await wait_for(pilot, lambda: exit_app.called)
            assert not isinstance(app.screen, EngineMissingScreen)


@pytest.mark.asyncio
async def test_no_models_offers_install(fake_engine):
    app = ChatApp(AppConfig(engine=fake_engine()))
    with patch.object(InferenceEngine, "is_installed", return_value=True), \
            patch.object(InferenceEngine, "list_models", return_value=[]):
        async with app.run_test() as pilot:
            await wait_for(pilot, lambda: isinstance(app.screen, NoModelScreen))
            await pilot.press("3")
            await wait_for(pilot, lambda: not isinstance(app.screen, NoModelScreen))
            assert app.selected_model == ""


@pytest.mark.asyncio
async def test_prompt_streams_into_segmented_messages(fake_engine):
    app = ChatApp(AppConfig(engine=fake_engine()))
    with patch.object(InferenceEngine, "is_installed", return_value=True), \
            patch.object(InferenceEngine, "list_models", return_value=[MODEL_ROW]):
        async with app.run_test() as pilot:
            await wait_for(pilot, lambda: app.selected_model == MODEL_ROW)

            app.query_one(InputArea).post_message(InputArea.Submit("hello"))
            await wait_for(pilot, lambda: app.controller.status is TurnStatus.FINAL)
            await pilot.pause(0.1)

            transcript = list(app.controller.transcript)
            assert [(m.kind, m.text) for m in transcript] == [
                (Kind.NORMAL, "hello"),
                (Kind.REASONING, "pondering"),
                (Kind.NORMAL, "you said: hello (fake:1b)"),
            ]
            assert len(app.query(MessageBubble)) == 3
            assert app.query_one(InputArea).text == ""


@pytest.mark.asyncio
async def test_submit_without_model_is_ignored(fake_engine):
    app = ChatApp(AppConfig(engine=fake_engine()))
    with patch.object(InferenceEngine, "is_installed", return_value=True), \
            patch.object(InferenceEngine, "list_models", return_value=[]):
        async with app.run_test() as pilot:
            await wait_for(pilot, lambda: isinstance(app.screen, NoModelScreen))
            await pilot.press("3")
            await wait_for(pilot, lambda: not isinstance(app.screen, NoModelScreen))
            app.query_one(InputArea).post_message(InputArea.Submit("hello"))
            await pilot.pause(0.1)
            assert len(app.controller.transcript) == 0


HANGING_ENGINE = """#!/bin/sh
read prompt
printf 'thinking'
exec sleep 30
"""


@pytest.mark.asyncio
async def test_escape_cancels_turn_and_busy_submit_is_refused(fake_engine):
    app = ChatApp(AppConfig(engine=fake_engine(HANGING_ENGINE)))
    with patch.object(InferenceEngine, "is_installed", return_value=True), \
            patch.object(InferenceEngine, "list_models", return_value=[MODEL_ROW]):
        async with app.run_test() as pilot:
            await wait_for(pilot, lambda: app.selected_model == MODEL_ROW)
            input_area = app.query_one(InputArea)

            input_area.post_message(InputArea.Submit("first"))
            await wait_for(
                pilot,
                lambda: app.controller.status is TurnStatus.STREAMING
                and app.controller.placeholder is not None
                and app.controller.placeholder.text != "",
            )

            with patch.object(app, "notify") as notify:
                input_area.load_text("second")
                input_area.post_message(InputArea.Submit("second"))
                await pilot.pause(0.1)
            notify.assert_called_once()
            assert len(app.controller.transcript) == 2
            assert input_area.text == "second"

            await pilot.press("escape")
            await wait_for(pilot, lambda: app.controller.status is TurnStatus.FINAL)
            await pilot.pause(0.1)

            transcript = list(app.controller.transcript)
            assert transcript[0].text == "first"
            assert transcript[-1].text.endswith("Cancelled.")
            assert transcript[-1].text.startswith("thinking")
