"""Voice session: wake word detection and the listen/process/speak cycle.

States:
    idle        waiting for a wake word
    listening   the next final transcript is a command
    processing  a command is being routed
    speaking    the response is being played; input is ignored so the
                assistant never hears its own voice as a command
    error       a device or service failure; reset() returns to idle

Transcripts come from whatever front end is attached (microphone + STT,
chat, tests) as Transcript values. Interim transcripts are only remembered
for display; nothing is dispatched until a final one arrives.
"""

from dataclasses import dataclass
from enum import Enum

# Final transcripts this short are treated as noise
MIN_TRANSCRIPT_CHARS = 3

WAKE_WORDS = [
    "hey martruns",
    "hey matrons",
    "hey mart runs",
    "hey mat runs",
    "hey martin's",
    "hey martins",
    "market assistant",
    "hey market",
    "martruns",
    "matrons",
    "mart runs",
]


class State(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    PROCESSING = "processing"
    SPEAKING = "speaking"
    ERROR = "error"


_TRANSITIONS = {
    State.IDLE: {State.LISTENING, State.ERROR},
    State.LISTENING: {State.PROCESSING, State.IDLE, State.ERROR},
    State.PROCESSING: {State.SPEAKING, State.LISTENING, State.IDLE, State.ERROR},
    State.SPEAKING: {State.LISTENING, State.IDLE, State.ERROR},
    State.ERROR: {State.IDLE},
}


@dataclass(frozen=True)
class Transcript:
    text: str
    confidence: float = 1.0
    is_final: bool = True


@dataclass(frozen=True)
class VoiceError:
    type: str          # permission, network, browser, audio, service, security, unknown
    code: str
    message: str
    suggestion: str = ""
    recoverable: bool = True


def detect_wake_word(transcript, wake_words=WAKE_WORDS):
    """True if any wake phrase appears in the transcript (case-insensitive)."""
    t = (transcript or "").lower().strip()
    return any(w.lower() in t for w in wake_words)


def strip_wake_word(transcript, wake_words=WAKE_WORDS):
    """Return the text after the earliest wake phrase, or the text unchanged.

    >>> strip_wake_word("Hey MartRuns, add milk")
    'add milk'
    """
    text = transcript or ""
    lower = text.lower()
    best = None  # (start, -length)
    for w in wake_words:
        i = lower.find(w.lower())
        if i >= 0 and (best is None or (i, -len(w)) < best):
            best = (i, -len(w))
    if best is None:
        return text.strip()
    end = best[0] - best[1]
    return text[end:].lstrip(" ,.!?").strip()


def _log(msg):
    print(msg, flush=True)


class VoiceSession:
    """Drives one conversation with the assistant.

    Args:
        router: CommandRouter used for final transcripts.
        speak: callable(text) that plays a response and returns when done,
            or None for silent front ends.
        on_state: optional callable(old_state, new_state).
        source: tag used in the router's request log.
    """

    def __init__(self, router, speak=None, on_state=None, wake_words=WAKE_WORDS,
                 source="[voice]"):
        self.router = router
        self.wake_words = wake_words
        self.source = source
        self.state = State.IDLE
        self.error = None
        self.interim = ""
        self.last_command = None
        self._speak = speak
        self._on_state = on_state

    def _set(self, new):
        if new not in _TRANSITIONS[self.state]:
            raise ValueError(f"Can't go from {self.state.value} to {new.value}")
        old = self.state
        self.state = new
        if self._on_state is not None:
            self._on_state(old, new)

    @property
    def accepting_input(self):
        """False while processing or speaking; front ends should drop audio then."""
        return self.state in (State.IDLE, State.LISTENING)

    def start_listening(self):
        if self.state is not State.LISTENING:
            self._set(State.LISTENING)

    def stop(self):
        """Return to idle from any state. Keeps self.error; reset() clears it."""
        if self.state is not State.IDLE:
            self._set(State.IDLE)

    def fail(self, error):
        self.error = error
        if self.state is not State.ERROR:
            self._set(State.ERROR)

    def reset(self):
        self.error = None
        if self.state is not State.IDLE:
            self._set(State.IDLE)

    async def on_transcript(self, transcript):
        """Feed one transcript. Returns the response text if a command ran."""
        if not self.accepting_input:
            return None

        if not transcript.is_final:
            self.interim = transcript.text
            return None
        self.interim = ""

        text = transcript.text.strip()
        woken = detect_wake_word(text, self.wake_words)
        if self.state is State.IDLE:
            if not woken:
                return None
            self._set(State.LISTENING)
        if woken:
            text = strip_wake_word(text, self.wake_words)

        if len(text) < MIN_TRANSCRIPT_CHARS:
            return None
        return await self._process(text)

    async def _process(self, text):
        self._set(State.PROCESSING)
        try:
            response, command = await self.router.route(text, source=self.source)
        except Exception as e:
            _log(f"[session] processing failed: {e}")
            self.fail(VoiceError(
                "service", "PROCESSING_FAILED", "Failed to process command",
                "Try again or restart the voice assistant"))
            return None

        self.last_command = command
        self._set(State.SPEAKING)
        if self._speak is not None:
            try:
                self._speak(response)
            except Exception as e:
                # Still go back to listening; the text was produced
                _log(f"[session] speech failed: {e}")
        if self.state is State.SPEAKING:
            self._set(State.LISTENING)
        return response
