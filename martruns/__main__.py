"""Entry point for `python -m martruns`.

    python -m martruns                  voice loop (microphone + speakers)
    python -m martruns -parse <text>    show how one utterance parses
    python -m martruns -chat            type commands against the saved list
"""

import asyncio
import sys


def _fmt(val):
    if val is None:
        return "none"
    if isinstance(val, float):
        return f"{val:g}"
    return str(val)


def _parse_cmd(text):
    """Parse a single input and print the result in test_cases.txt format."""
    from martruns.commands.parser import CommandParser

    cmd = CommandParser().parse(text)
    print(f"> {text}")
    print(f"intent: {cmd.intent.value}")
    print(f"entity: {_fmt(cmd.entity)}")
    print(f"amount: {_fmt(cmd.amount)}")
    print(f"note: {_fmt(cmd.note)}")
    print(f"confidence: {cmd.confidence:.2f}")


async def _chat():
    from martruns.commands.router import CommandRouter
    from martruns.session import MIN_TRANSCRIPT_CHARS, Transcript, VoiceSession
    from martruns.store.memory import DEFAULT_SAVE_PATH, MemoryMarketStore

    router = CommandRouter(MemoryMarketStore(save_path=DEFAULT_SAVE_PATH))
    session = VoiceSession(router, speak=lambda text: print(f"< {text}"), source="[chat]")
    session.start_listening()
    print("Type a command (empty line or Ctrl+D to quit).")
    while True:
        try:
            line = input("> ").strip()
        except EOFError:
            break
        if not line:
            break
        if len(line) < MIN_TRANSCRIPT_CHARS:
            # The session ignores very short input; say so instead of going quiet
            print("< (too short)")
            continue
        await session.on_transcript(Transcript(line))
        if session.error is not None:
            print(f"< {session.error.message}")
            session.reset()
            session.start_listening()


if __name__ == "__main__" or not sys.argv[0]:
    if len(sys.argv) >= 3 and sys.argv[1] == "-parse":
        _parse_cmd(" ".join(sys.argv[2:]))
    elif len(sys.argv) >= 2 and sys.argv[1] == "-chat":
        asyncio.run(_chat())
    else:
        from martruns.main import main
        main()
