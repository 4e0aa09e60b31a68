"""
Modal screens for the fleece-chat application.
"""
from .setup_screens import ChoiceScreen, EngineMissingScreen, NoModelScreen

__all__ = ["ChoiceScreen", "EngineMissingScreen", "NoModelScreen"]
