from textual import on
from textual.widgets import OptionList
from textual.widgets.option_list import Option
from textual.message import Message

from core.engine import shorten_model


class SelectionMade(Message):
    def __init__(self, value: str) -> None:
        super().__init__()
        self.value = value


class SelectOption(OptionList):
    """Model picker: shows shortened names, reports the full ``ollama list`` row."""

    def __init__(self, id: str, models: list[str] | None = None) -> None:
        super().__init__(id=id)
        self.models: list[str] = []
        if models:
            self.set_models(models)

    def set_models(self, models: list[str], selected: str | None = None) -> None:
        self.models = list(models)
        self.clear_options()
        if not self.models:
            self.add_option(Option("No models available", disabled=True))
            return
        self.add_options(Option(shorten_model(model)) for model in self.models)
        self.highlighted = self.models.index(selected) if selected in self.models else 0

    @on(OptionList.OptionSelected)
    def on_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        if not self.models:
            return
        model = self.models[event.option_index]
        self.post_message(SelectionMade(model))
