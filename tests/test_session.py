"""Voice session state machine and wake word handling."""

import asyncio

import pytest

from martruns.session import (
    State, Transcript, VoiceError, VoiceSession, detect_wake_word, strip_wake_word,
)


class FakeRouter:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    async def route(self, text, source="[voice]"):
        self.calls.append(text)
        if self.fail:
            raise RuntimeError("boom")
        return f"ok: {text}", None


def _session(**kwargs):
    router = kwargs.pop("router", FakeRouter())
    spoken = []
    session = VoiceSession(router, speak=spoken.append, **kwargs)
    return session, router, spoken


def _hear(session, text, is_final=True):
    return asyncio.run(session.on_transcript(Transcript(text, 0.9, is_final)))


@pytest.mark.parametrize("text", [
    "Hey MartRuns", "hey matrons add milk", "ok market assistant", "  MART RUNS  ",
])
def test_detect_wake_word(text):
    assert detect_wake_word(text)


@pytest.mark.parametrize("text", ["hey siri", "add milk", "", None])
def test_no_wake_word(text):
    assert not detect_wake_word(text)


def test_custom_wake_words():
    assert detect_wake_word("computer, add milk", ["computer"])
    assert not detect_wake_word("hey martruns", ["computer"])


def test_strip_wake_word():
    assert strip_wake_word("Hey MartRuns, add milk") == "add milk"
    assert strip_wake_word("hey mart runs i need eggs") == "i need eggs"
    assert strip_wake_word("add milk") == "add milk"
    assert strip_wake_word("hey martruns") == ""


def test_idle_ignores_speech_without_wake_word():
    session, router, spoken = _session()
    assert _hear(session, "I need milk") is None
    assert session.state is State.IDLE
    assert router.calls == []


def test_wake_word_with_command():
    session, router, spoken = _session()
    response = _hear(session, "hey martruns I need milk")
    assert router.calls == ["I need milk"]
    assert response == "ok: I need milk"
    assert spoken == ["ok: I need milk"]
    assert session.state is State.LISTENING


def test_wake_word_alone_starts_listening():
    session, router, spoken = _session()
    assert _hear(session, "Hey MartRuns.") is None
    assert session.state is State.LISTENING
    _hear(session, "remove kale")
    assert router.calls == ["remove kale"]


def test_interim_transcripts_never_dispatch():
    session, router, spoken = _session()
    session.start_listening()
    assert _hear(session, "I need mi", is_final=False) is None
    assert session.interim == "I need mi"
    assert router.calls == []
    _hear(session, "I need milk")
    assert session.interim == ""
    assert router.calls == ["I need milk"]


def test_short_final_transcripts_ignored():
    session, router, spoken = _session()
    session.start_listening()
    assert _hear(session, "ok") is None
    assert _hear(session, "  a ") is None
    assert router.calls == []


def test_no_dispatch_while_speaking_or_processing():
    session, router, spoken = _session()
    session.start_listening()
    session._set(State.PROCESSING)
    assert _hear(session, "I need milk") is None
    session._set(State.SPEAKING)
    assert not session.accepting_input
    assert _hear(session, "I need milk") is None
    assert router.calls == []


def test_state_changes_reported():
    changes = []
    session, router, spoken = _session(on_state=lambda old, new: changes.append(new))
    session.start_listening()
    _hear(session, "I need milk")
    assert changes == [State.LISTENING, State.PROCESSING, State.SPEAKING, State.LISTENING]


def test_routing_failure_moves_to_error():
    session, router, spoken = _session(router=FakeRouter(fail=True))
    session.start_listening()
    assert _hear(session, "I need milk") is None
    assert session.state is State.ERROR
    assert session.error.code == "PROCESSING_FAILED"
    assert spoken == []
    session.reset()
    assert session.state is State.IDLE
    assert session.error is None


def test_speech_failure_still_returns_to_listening():
    def broken_speaker(text):
        raise OSError("no output device")

    session = VoiceSession(FakeRouter(), speak=broken_speaker)
    session.start_listening()
    assert asyncio.run(session.on_transcript(Transcript("I need milk"))) == "ok: I need milk"
    assert session.state is State.LISTENING


def test_fail_and_stop_from_any_state():
    session, router, spoken = _session()
    session.fail(VoiceError("audio", "NO_MIC", "No microphone found"))
    assert session.state is State.ERROR
    assert not session.accepting_input
    session.stop()
    assert session.state is State.IDLE


def test_illegal_transition_raises():
    session, router, spoken = _session()
    with pytest.raises(ValueError):
        session._set(State.SPEAKING)
    session.fail(VoiceError("audio", "NO_MIC", "No microphone found"))
    with pytest.raises(ValueError):
        session.start_listening()
