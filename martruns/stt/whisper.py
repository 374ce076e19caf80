"""Speech-to-text with faster-whisper.

transcribe() returns a final Transcript whose confidence is the mean
per-segment probability, exp(avg_logprob), so quiet mumbles can be told
apart from clear speech.
"""

import math
import os

import numpy as np

# ctranslate2 and other OpenMP users can clash on macOS
os.environ.setdefault("KMP_DUPLICATE_LIB_OK", "TRUE")

from faster_whisper import WhisperModel

from martruns.session import Transcript

MODEL_SIZE = "small"
COMPUTE_TYPE = "int8"

# Grocery words whisper tends to miss without a hint
INITIAL_PROMPT = ("Shopping list: add milk, eggs, bread, tomatoes. "
                  "Budget is $50. Mark the chicken as done.")

_model = None


def load_model(size=MODEL_SIZE, compute_type=COMPUTE_TYPE):
    global _model
    if _model is None:
        _model = WhisperModel(size, device="cpu", compute_type=compute_type)
    return _model


def transcribe(audio, model=None, language="en"):
    """int16 16 kHz mono audio -> Transcript (text may be empty)."""
    model = model or load_model()
    segments, _ = model.transcribe(
        audio.astype(np.float32) / 32768.0,
        language=language,
        vad_filter=True,
        initial_prompt=INITIAL_PROMPT,
    )
    segments = list(segments)
    text = " ".join(s.text.strip() for s in segments).strip()
    if segments:
        confidence = sum(math.exp(s.avg_logprob) for s in segments) / len(segments)
    else:
        confidence = 0.0
    return Transcript(text=text, confidence=round(confidence, 2), is_final=True)
