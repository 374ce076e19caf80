"""Text-to-speech with Piper, played through the default output device.

Usage (say a couple of sample responses):
    python -m martruns.tts.piper
"""

import os
import re

import numpy as np
import sounddevice as sd
from piper import PiperVoice, SynthesisConfig

MODELS_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
    "models", "piper")
VOICE = "en_US-amy-medium"
LENGTH_SCALE = 0.85  # < 1.0 speaks faster

_CURRENCY_WORDS = {
    "$": "dollars",
    "€": "euros",
    "£": "pounds",
    "₦": "naira",
    "₵": "cedis",
}
_PRICE_RE = re.compile(r"([$€£₦₵])(\d+(?:\.\d+)?)")

_voice = None
_output_rate = None


def spoken_form(text):
    """'$3.50' -> '3.50 dollars', so the voice doesn't spell the symbol."""
    def _say(m):
        amount = m.group(2)
        if amount.endswith(".00"):
            amount = amount[:-3]
        return f"{amount} {_CURRENCY_WORDS[m.group(1)]}"
    return _PRICE_RE.sub(_say, text)


def load_voice(name=VOICE):
    global _voice
    if _voice is None:
        path = os.path.join(MODELS_DIR, f"{name}.onnx")
        _voice = PiperVoice.load(path, f"{path}.json")
    return _voice


def synthesize(text, voice=None):
    """Returns (int16 audio, sample_rate)."""
    voice = voice or load_voice()
    chunks = list(voice.synthesize(spoken_form(text),
                                   syn_config=SynthesisConfig(length_scale=LENGTH_SCALE)))
    if not chunks:
        return np.zeros(0, dtype=np.int16), 22050
    return np.concatenate([c.audio_int16_array for c in chunks]), chunks[0].sample_rate


def _device_rate():
    global _output_rate
    if _output_rate is None:
        _output_rate = int(sd.query_devices(kind="output")["default_samplerate"])
    return _output_rate


def _to_rate(audio, src, dst):
    """Linear-interpolation resample; good enough for speech."""
    if src == dst or not len(audio):
        return audio
    n = int(len(audio) * dst / src)
    t = np.linspace(0, 1, n)
    return np.interp(t, np.linspace(0, 1, len(audio)), audio.astype(np.float64)).astype(np.int16)


def speak(text, voice=None):
    """Synthesize and play text. Blocks until playback ends."""
    if not text or not text.strip():
        return
    audio, rate = synthesize(text.strip(), voice)
    out_rate = _device_rate()
    sd.play(_to_rate(audio, rate, out_rate), samplerate=out_rate)
    sd.wait()


if __name__ == "__main__":
    for phrase in ["Added milk to your shopping list. What else do you need?",
                   "Spent $65.00 of $100.00. Remaining: $35.00."]:
        print(phrase)
        speak(phrase)
