"""Command router: runs one utterance through parse -> dispatch -> response.

The router owns the parser, dispatcher, response generator and store for a
session. Each call takes a fresh snapshot of the current run, so parse-time
resolution and scoring see the list as it is now. Every request is appended
to a two-line entry in the log file.
"""

import asyncio
import os
from collections import deque
from datetime import datetime

from martruns.commands.command import CommandContext, CommandResponse, Intent
from martruns.commands.dispatcher import CommandDispatcher, UNKNOWN_COMMAND
from martruns.commands.parser import CommandParser
from martruns.commands.response import ResponseGenerator

# Log file: lives next to the martruns package directory
LOG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
    "martruns.log")

# How many past commands go into CommandContext.recent_commands
RECENT_COMMANDS = 10


def _log(msg):
    print(msg, flush=True)


class CommandRouter:

    def __init__(self, store, parser=None, dispatcher=None, responder=None,
                 currency="$", current_page="home", log_path=LOG_PATH):
        self.store = store
        self.parser = parser or CommandParser()
        self.dispatcher = dispatcher or CommandDispatcher()
        self.responder = responder or ResponseGenerator()
        self.currency = currency
        self.current_page = current_page
        self.log_path = log_path
        self.last_response = None  # most recent response, for "say that again"
        self._recent = deque(maxlen=RECENT_COMMANDS)

    async def snapshot(self):
        """Build the CommandContext for the next utterance."""
        try:
            run = await self.store.get_current_run()
        except Exception as e:
            _log(f"[router] couldn't read current run: {e}")
            run = None
        return CommandContext(
            current_run=run,
            current_page=self.current_page,
            recent_commands=tuple(self._recent),
            currency=self.currency,
        )

    async def route(self, text, source="[voice]"):
        """Handle one final transcript.

        Args:
            text: Transcribed or typed user input.
            source: Source tag for logging, e.g. "[voice]" or "[Telegram:Ann]".

        Returns:
            (response, command): the text to speak/show and the parsed command.
        """
        context = await self.snapshot()
        command = self.parser.parse(text, context)
        if command.intent is Intent.UNKNOWN:
            # Nothing to apply; the response is the help text
            result = CommandResponse(False, UNKNOWN_COMMAND)
        else:
            result = await self.dispatcher.dispatch(command, self.store, context)
        response = self.responder.generate(command, result, context)

        self._log_request(text, command, result, source)
        self._recent.append(command)
        self.last_response = response
        return response, command

    def route_sync(self, text, source="[voice]"):
        """route() for callers without a running event loop."""
        return asyncio.run(self.route(text, source))

    def _log_request(self, text, command, result, source):
        """Append a compact 2-line entry to the log file."""
        if not self.log_path:
            return
        ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        parts = [command.intent.value, f"confidence={command.confidence:.2f}"]
        for key in ("entity", "amount", "note"):
            value = getattr(command, key)
            if value is not None:
                parts.append(f"{key}={value!r}")
        parts.append("ok" if result.success else f"failed={result.message!r}")
        try:
            with open(self.log_path, "a") as f:
                f.write(f"{ts} {source}  {text}\n  -> {', '.join(parts)}\n")
        except OSError:
            pass
