"""MartRuns voice loop.

Every utterance is end-pointed with Silero VAD and transcribed with whisper.
The VoiceSession decides what to do with it: in idle it only reacts to a
wake word ("hey martruns ..."), once listening every utterance is a command.
While a command is processed or the answer is spoken the microphone is
ignored, so the assistant never hears itself.

Usage:
    python -m martruns
"""

import asyncio
import time

from martruns.audio.mic import open_mic_stream, SAMPLE_RATE
from martruns.commands.router import CommandRouter
from martruns.session import State, VoiceError, VoiceSession, WAKE_WORDS
from martruns.store.memory import MemoryMarketStore, DEFAULT_SAVE_PATH
from martruns.stt.whisper import load_model as load_whisper, transcribe
from martruns.tts.piper import load_voice, speak
from martruns.vad.silero import UtteranceRecorder, load_vad_model

# Go back to waiting for the wake word after this long without a command
LISTEN_TIMEOUT = 20  # seconds
# Ignore blips shorter than this
MIN_AUDIO_SAMPLES = SAMPLE_RATE // 10


def log(msg):
    print(msg, flush=True)


def _timed(label, fn):
    log(f"Loading {label}...")
    t0 = time.time()
    result = fn()
    log(f"  {label} ready ({time.time() - t0:.1f}s)")
    return result


def build_session(store=None, speak_fn=speak):
    router = CommandRouter(store or MemoryMarketStore(save_path=DEFAULT_SAVE_PATH))

    def on_state(old, new):
        log(f"  [{old.value} -> {new.value}]")

    def say(text):
        log(f"  Response: \"{text}\"")
        speak_fn(text)

    return VoiceSession(router, speak=say, on_state=on_state)


def main():
    t_start = time.time()
    vad = _timed("VAD model", load_vad_model)
    whisper = _timed("whisper model", load_whisper)
    _timed("TTS voice", load_voice)

    session = build_session()

    try:
        from martruns.telegram_bot import start_telegram
        start_telegram(session.router)
    except Exception as e:
        log(f"Telegram bot failed to start: {e}")

    log(f"All models loaded in {time.time() - t_start:.1f}s")
    log(f"Say \"{WAKE_WORDS[0]}\" followed by a command.\n")

    # The audio thread only feeds whatever recorder is current; None drops audio
    current = {"recorder": UtteranceRecorder(vad)}
    listening_since = None

    def on_audio(block, overflow):
        rec = current["recorder"]
        if rec is not None:
            rec.add(block)

    stream = open_mic_stream(on_audio)
    try:
        while True:
            time.sleep(0.05)
            rec = current["recorder"]
            if rec is None or not rec.finished:
                continue
            current["recorder"] = None

            if session.state is State.LISTENING and listening_since is None:
                listening_since = time.time()

            audio = rec.audio()
            if rec.outcome == "no_speech" or len(audio) < MIN_AUDIO_SAMPLES:
                if (session.state is State.LISTENING
                        and time.time() - listening_since > LISTEN_TIMEOUT):
                    log("  (no command, going back to sleep)")
                    session.stop()
            else:
                try:
                    transcript = transcribe(audio, whisper)
                except Exception as e:
                    log(f"  Transcription failed: {e}")
                    session.fail(VoiceError("service", "STT_FAILED",
                                            "Couldn't transcribe that",
                                            "Check the whisper model install"))
                else:
                    log(f"  [{transcript.confidence:.2f}] \"{transcript.text}\"")
                    if transcript.text:
                        response = asyncio.run(session.on_transcript(transcript))
                        if response is not None:
                            listening_since = time.time()

            if session.state is State.ERROR:
                log(f"  Error: {session.error.message}. {session.error.suggestion}")
                session.reset()
            if session.state is not State.LISTENING:
                listening_since = None

            current["recorder"] = UtteranceRecorder(vad)

    except KeyboardInterrupt:
        log("\nShutting down.")
    finally:
        stream.stop()
        stream.close()


if __name__ == "__main__":
    main()
