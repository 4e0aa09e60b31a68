"""
fleece-chat: a terminal chat client for a local ollama engine.
"""

import asyncio
import logging
import webbrowser
from typing import Optional

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer, Static

from core.config import DOWNLOAD_URL, LIBRARY_URL, AppConfig, load_config
from core.controller import SessionController
from core.engine import InferenceEngine, shorten_model
from core.errors import TurnInProgress
from core.logging_utils import configure_logging
from core.orchestrator import Orchestrator
from screens import EngineMissingScreen, NoModelScreen
from widgets import ChatLog, InputArea, SelectOption, SelectionMade

logger = logging.getLogger(__name__)


class ChatApp(App):
    CSS = """
#chat_log {
    height: 1fr;
}
#model_select {
    height: auto;
    max-height: 10;
    border: round $secondary;
}
#input_text {
    height: 5;
}
#model_bar {
    height: 1;
    padding: 0 1;
}
#model_label {
    width: 1fr;
}
#status_label {
    width: auto;
    text-style: dim;
}
    """
    BINDINGS = [
        Binding("ctrl+l", "toggle_models", "Models"),
        Binding("escape", "cancel_turn", "Stop"),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, config: Optional[AppConfig] = None):
        """Initialize the chat application with default state."""
        super().__init__()
        self.config = config or load_config()
        self.engine = InferenceEngine(self.config.engine)
        self.event_q = asyncio.Queue()
        self.orchestrator = Orchestrator(self.config.engine, self.event_q)
        self.controller = SessionController()

        self.models: list[str] = []
        self.selected_model = ""

    def compose(self) -> ComposeResult:
        """
        Create the main UI layout.
        """
        yield ChatLog(id="chat_log")
        yield SelectOption(id="model_select")
        yield InputArea(id="input_text")
        with Horizontal(id="model_bar"):
            yield Static("Select Model", id="model_label", markup=False)
            yield Static("", id="status_label", markup=False)
        yield Footer()

    async def on_mount(self) -> None:
        """Initialize the application after the UI is mounted."""
        self._change_input_mode(is_selection=False)
        self._pump()
        self._startup_flow()

    @work(exclusive=True, group="startup")
    async def _startup_flow(self) -> None:
        """
        Handle the application startup sequence.

        This method:
        1. Checks that the engine is installed, offering the download page if not
        2. Lists the installed models, offering to install one if there are none
        3. Selects the first model
        """
        installed = await asyncio.to_thread(self.engine.is_installed)
        if not installed:
            logger.warning("engine %s not found", self.config.engine.engine_name)
            choice = await self.push_screen_wait(EngineMissingScreen(DOWNLOAD_URL))
            if choice == 'download':
                webbrowser.open(DOWNLOAD_URL)
                self._note("Restart fleece-chat once ollama is installed.")
            else:
                self.exit()
            return

        await self._load_models()

    async def _load_models(self) -> None:
        while True:
            self.models = await asyncio.to_thread(self.engine.list_models)
            if self.models:
                break

            default_model = self.config.engine.default_model
            choice = await self.push_screen_wait(NoModelScreen(default_model, LIBRARY_URL))
            if choice != 'install':
                if choice == 'browse':
                    webbrowser.open(LIBRARY_URL)
                self._note("No models installed. Pull one with `ollama pull <name>` and restart.")
                return

            self._set_status(f"installing {default_model}…")
            self._note(f"Installing {default_model}, this can take a while…")
            installed = await asyncio.to_thread(self.engine.install_model, default_model)
            self._set_status("")
            if not installed:
                self._note(f"Could not install {default_model}, see the log for details.")
                return

        logger.info("found %d models", len(self.models))
        self._select_model(self.models[0])
        self.query_one('#model_select', SelectOption).set_models(self.models, self.selected_model)

    def _select_model(self, model: str) -> None:
        self.selected_model = model
        self.query_one('#model_label', Static).update(shorten_model(model))

    def _set_status(self, text: str) -> None:
        self.query_one('#status_label', Static).update(text)

    def _note(self, text: str) -> None:
        self.query_one('#chat_log', ChatLog).write_note(text)

    def _change_input_mode(self, is_selection: bool):
        input_selection = self.query_one('#model_select')
        input_text = self.query_one('#input_text')

        input_selection.display = is_selection
        if is_selection:
            input_selection.focus()
        else:
            input_text.focus()

    async def on_input_area_submit(self, message: InputArea.Submit) -> None:
        """
        1. Opens a new turn (user message + assistant placeholder)
        2. Clears the input
        3. Starts streaming the response
        """
        try:
            turn = self.controller.submit(message.value, self.selected_model)
        except TurnInProgress:
            self.notify("Still answering, press Esc to stop.", severity="warning")
            return
        if turn is None:
            if message.value.strip() and not self.selected_model:
                self.notify("Select a model first (Ctrl+L).", severity="warning")
            return

        self.query_one('#input_text', InputArea).load_text("")
        self._set_status("waiting for model…")
        await self.query_one("#chat_log", ChatLog).sync(self.controller.transcript)
        self.run_infer(turn.user_text, turn.model)

    async def on_selection_made(self, message: SelectionMade) -> None:
        self._select_model(message.value)
        self._change_input_mode(is_selection=False)

    def action_toggle_models(self) -> None:
        self._change_input_mode(is_selection=not self.query_one('#model_select').display)

    def action_cancel_turn(self) -> None:
        if self.query_one('#model_select').display:
            self._change_input_mode(is_selection=False)
        elif self.orchestrator.cancel():
            self._set_status("stopping…")

    @work(exclusive=True, group='infer')
    async def run_infer(self, prompt: str, model: str):
        """
        Stream one response from the engine.
        """
        await self.orchestrator.run(prompt, model)

    @work(exclusive=True, group='pump')
    async def _pump(self):
        """
        Event processing loop; streamed output reaches the transcript only here.

        Event types handled:
        - 'started': the engine process is running
        - 'chunk': newly decoded output
        - 'done': the full response (or an error/cancel text)
        """
        chat_log = self.query_one("#chat_log", ChatLog)

        while True:
            ev = await self.event_q.get()
            self.controller.apply_event(ev)

            type = ev.get('type', '')
            if type in ('started', 'chunk'):
                self._set_status("streaming…")
            elif type == 'done':
                self._set_status("")
            await chat_log.sync(self.controller.transcript)


def main():
    config = load_config()
    configure_logging(config.log_level, config.log_file)
    app = ChatApp(config)
    app.run()


if __name__ == "__main__":
    main()
