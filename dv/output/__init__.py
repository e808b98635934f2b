"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)
from .prompt import (
    PromptProtocol,
    ScriptedPrompt,
    TerminalPrompt,
)

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "RichConsole",
    "Style",
    "PromptProtocol",
    "ScriptedPrompt",
    "TerminalPrompt",
]
