from martruns.commands.command import (
    Intent, VoiceCommand, CommandContext, CommandResponse,
)
from martruns.commands.parser import CommandParser, parse
from martruns.commands.dispatcher import CommandDispatcher, dispatch
from martruns.commands.response import ResponseGenerator, generate_response
from martruns.commands.router import CommandRouter
