"""Command objects passed between the parser, dispatcher and response generator.

The parser turns an utterance into a VoiceCommand. The dispatcher applies it
to the market-run store and returns a CommandResponse. Both see the world
through a CommandContext snapshot taken when the utterance arrives.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple


class Intent(str, Enum):
    """What an utterance is asking for."""

    CREATE_RUN = "create_run"
    ADD_ITEM = "add_item"
    COMPLETE_ITEM = "complete_item"
    REMOVE_ITEM = "remove_item"
    ADD_NOTE = "add_note"
    SET_PRICE = "set_price"
    SET_BUDGET = "set_budget"
    COMPLETE_RUN = "complete_run"
    LIST_ITEMS = "list_items"
    BUDGET_STATUS = "budget_status"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class VoiceCommand:
    intent: Intent
    entity: Optional[str] = None   # item name or run title
    amount: Optional[float] = None  # price, budget, or quantity for add_item
    note: Optional[str] = None
    context: str = ""              # normalized input text
    confidence: float = 0.0        # 0 for unknown, else 0.1-1.0


@dataclass(frozen=True)
class CommandContext:
    """Read-only snapshot of the app state for one parse/dispatch call."""

    current_run: Any = None        # MarketRun or None
    current_page: str = "home"     # "home", "analytics" or "profile"
    recent_commands: Tuple[VoiceCommand, ...] = ()
    currency: str = "$"


@dataclass(frozen=True)
class CommandResponse:
    success: bool
    message: str
    data: Any = None


def unknown_command(context=""):
    """The command returned when no pattern matches."""
    return VoiceCommand(intent=Intent.UNKNOWN, context=context, confidence=0.0)
