"""Command parser: turns a spoken or typed utterance into a VoiceCommand.

Handles things like:
    "I need milk"                         -> add_item milk
    "don't forget the eggs"               -> add_item eggs
    "I got the chicken"                   -> complete_item chicken
    "remove kale"                         -> remove_item kale
    "note for bread, get sourdough"       -> add_note bread / get sourdough
    "the milk costs $3.50"                -> set_price milk 3.50
    "$4 for the eggs"                     -> set_price eggs 4
    "my budget is $50"                    -> set_budget 50
    "let's go shopping for the party"     -> create_run "the party"
    "what do I still need"                -> list_items
    "how much money do we have left"      -> budget_status

Parsing is pure: the same text and context always give the same command.
"""

import re
from datetime import date

from martruns.commands.command import (
    CommandContext, Intent, VoiceCommand, unknown_command,
)
from martruns.commands.patterns import CURRENCY_SYMBOLS, PATTERNS
from martruns.commands.resolve import (
    clean_item_name, extract_quantity, resolve_item_name, score_confidence,
)

DEFAULT_RUN_PREFIX = "Market Run - "

_STRIP_RE = re.compile(rf"[^\w\s{CURRENCY_SYMBOLS}.,]")
_SPACES_RE = re.compile(r"\s+")

_ADD_EXAMPLES = ["add milk to my list", "add bread", "add 2 pounds of rice"]


def normalize(text):
    """Lowercase, drop punctuation (keeping currency, '.' and ','), squash spaces."""
    t = _STRIP_RE.sub("", (text or "").lower())
    t = _SPACES_RE.sub(" ", t).strip()
    # STT output usually ends with a period
    return t.rstrip(".,").strip()


def _is_number(s):
    if s is None:
        return False
    try:
        float(s)
    except ValueError:
        return False
    return True


def _group(m, n):
    """Return capture group n stripped, or None if absent/empty."""
    if m.re.groups < n:
        return None
    value = m.group(n)
    if value is None:
        return None
    value = value.strip()
    return value or None


class CommandParser:
    """Matches text against the pattern library, first hit wins.

    Args:
        patterns: ordered ((intent, (compiled, ...)), ...) table.
        today: callable returning the date used in default run titles.
    """

    def __init__(self, patterns=PATTERNS, today=date.today):
        self._patterns = patterns
        self._today = today

    def parse(self, text, context=None):
        if context is None:
            context = CommandContext()
        clean = normalize(text)
        if not clean:
            return unknown_command(clean)

        for intent, patterns in self._patterns:
            for pattern in patterns:
                m = pattern.search(clean)
                if m is not None:
                    return self._extract(intent, m, clean, context)

        return unknown_command(clean)

    def default_run_title(self):
        return DEFAULT_RUN_PREFIX + self._today().strftime("%x")

    def _extract(self, intent, m, clean, context):
        run = context.current_run
        entity = amount = note = None

        if intent is Intent.CREATE_RUN:
            first, second = _group(m, 1), _group(m, 2)
            entity = first
            if _is_number(second):
                amount = float(second)
            elif _is_number(first) and second:
                # "create a list with a budget of 50 called party"
                amount = float(first)
                entity = second
            if not entity:
                entity = self.default_run_title()

        elif intent is Intent.ADD_ITEM:
            raw = _group(m, 1) or ""
            entity = clean_item_name(raw)
            amount = extract_quantity(raw)

        elif intent in (Intent.COMPLETE_ITEM, Intent.REMOVE_ITEM):
            entity = resolve_item_name(clean_item_name(_group(m, 1)), run)

        elif intent is Intent.ADD_NOTE:
            entity = resolve_item_name(clean_item_name(_group(m, 1)), run)
            note = _group(m, 2)

        elif intent is Intent.SET_PRICE:
            first, second = _group(m, 1), _group(m, 2)
            if _is_number(first) and not _is_number(second):
                amount, raw = float(first), second
            else:
                raw = first
                amount = float(second) if _is_number(second) else None
            entity = resolve_item_name(clean_item_name(raw), run)

        elif intent is Intent.SET_BUDGET:
            value = _group(m, 1)
            amount = float(value) if _is_number(value) else 0.0

        # complete_run, list_items, budget_status carry no fields

        return VoiceCommand(
            intent=intent,
            entity=entity,
            amount=amount,
            note=note,
            context=clean,
            confidence=score_confidence(entity, amount, run),
        )

    def suggestions(self, partial, context=None):
        """Example commands to show while the user is still typing/speaking."""
        t = (partial or "").lower()
        result = []
        if "add" in t:
            result.extend(_ADD_EXAMPLES)
        if "complete" in t and context is not None and context.current_run is not None:
            pending = [i for i in context.current_run.items if not i.completed][:3]
            result.extend(f"complete {i.name}" for i in pending)
        return result


def parse(text, context=None):
    """Module-level shortcut for CommandParser().parse()."""
    return CommandParser().parse(text, context)
