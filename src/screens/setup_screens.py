"""
Modal screens shown while checking the engine at startup.
"""

from textual import on
from textual.widgets import Static, OptionList
from textual.widgets.option_list import Option
from textual.containers import Center, Vertical
from textual.screen import ModalScreen


class ChoiceScreen(ModalScreen[str]):
    """A titled message with numbered choices; dismisses with the chosen id."""
    CSS = """
#panel {
    width: 80%;
    max-width: 100;
    height: auto;
    border: round $secondary;
    padding: 1 2;
}
#choices {
    margin-top: 1;
    height: auto;
}
#panel OptionList {
    border: none;
    background: transparent;
}
    """
    BINDINGS = [
        ('1', 'choose(0)', 'first'),
        ('2', 'choose(1)', 'second'),
        ('3', 'choose(2)', 'third'),
        ('escape', 'dismiss_default', 'close'),
    ]

    TITLE_TEXT = ""
    BODY_TEXT = ""
    CHOICES: list[tuple[str, str]] = []
    DEFAULT_CHOICE = ""

    def compose(self):
        yield Center(
            Vertical(
                Static(f"[bold orange]{self.TITLE_TEXT}[/bold orange]\n", markup=True, classes="title"),
                Static(self.BODY_TEXT + "\n", markup=False),
                OptionList(
                    *(Option(f"{i}. {label}", id=choice_id)
                      for i, (choice_id, label) in enumerate(self.CHOICES, start=1)),
                    id="choices",
                ),
            ),
            id="panel",
        )

    def on_mount(self) -> None:
        # the screen can be torn down before its children finish mounting
        for ol in self.query(OptionList):
            ol.focus()
            ol.highlighted = 0

    @on(OptionList.OptionSelected)
    def on_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        self.dismiss(event.option_id)

    def action_choose(self, index: int) -> None:
        if 0 <= index < len(self.CHOICES):
            self.dismiss(self.CHOICES[index][0])

    def action_dismiss_default(self) -> None:
        self.dismiss(self.DEFAULT_CHOICE)


class EngineMissingScreen(ChoiceScreen):
    TITLE_TEXT = "Ollama Not Installed"
    CHOICES = [('download', 'Download Ollama'), ('quit', 'Quit')]
    DEFAULT_CHOICE = 'quit'

    def __init__(self, download_url: str) -> None:
        super().__init__()
        self.BODY_TEXT = (
            "fleece-chat talks to a local ollama engine, which was not found on this machine.\n"
            f"Install it from {download_url} and start fleece-chat again."
        )


class NoModelScreen(ChoiceScreen):
    TITLE_TEXT = "No Model Installed"
    DEFAULT_CHOICE = 'cancel'

    def __init__(self, default_model: str, library_url: str) -> None:
        super().__init__()
        self.CHOICES = [
            ('install', f'Install {default_model}'),
            ('browse', 'Browse the model library'),
            ('cancel', 'Cancel'),
        ]
        self.BODY_TEXT = (
            "Ollama is installed but has no models yet.\n"
            f"fleece-chat can pull {default_model} for you, or you can pick one from {library_url} "
            "and install it with `ollama pull <name>`."
        )
