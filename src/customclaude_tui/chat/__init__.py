from .editor import InputMode, LineBuffer, ModalLineEditor
from .event_handlers import DomainEventProcessor
from .state import ApplicationState, NewConversation, PromptSubmitted, Quit, RunCommand, View

__all__ = [
    "ApplicationState",
    "DomainEventProcessor",
    "InputMode",
    "LineBuffer",
    "ModalLineEditor",
    "NewConversation",
    "PromptSubmitted",
    "Quit",
    "RunCommand",
    "View",
]
