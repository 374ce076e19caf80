"""Utterance end-pointing with the Silero VAD model run through onnxruntime.

The model file ships inside the openwakeword package, so no torch install is
needed. Silero wants 512-sample float frames at 16 kHz; UtteranceRecorder
re-blocks the microphone's 100ms chunks into those frames and decides when
the speaker has finished.
"""

import os

import numpy as np
import onnxruntime as ort

FRAME = 512                  # samples per Silero call at 16 kHz
FRAME_MS = FRAME * 1000 / 16000
SPEECH_THRESHOLD = 0.5
END_SILENCE_MS = 800         # trailing silence that ends an utterance
NO_SPEECH_MS = 4000          # give up if nobody starts talking
MAX_UTTERANCE_S = 12

_session = None


def model_path():
    import openwakeword
    path = os.path.join(os.path.dirname(openwakeword.__file__),
                        "resources", "models", "silero_vad.onnx")
    if not os.path.exists(path):
        raise FileNotFoundError(f"Silero VAD model missing: {path}")
    return path


def load_vad_model():
    """Cached single-threaded onnxruntime session for the VAD model."""
    global _session
    if _session is None:
        opts = ort.SessionOptions()
        opts.inter_op_num_threads = 1
        opts.intra_op_num_threads = 1
        _session = ort.InferenceSession(model_path(), sess_options=opts)
    return _session


class SpeechProbability:
    """Carries the model's recurrent state between frames."""

    def __init__(self, session, sample_rate=16000):
        self.session = session
        self.sr = np.array(sample_rate, dtype=np.int64)
        self.reset()

    def reset(self):
        self.state = (np.zeros((2, 1, 64), dtype=np.float32),
                      np.zeros((2, 1, 64), dtype=np.float32))

    def __call__(self, frame):
        h, c = self.state
        out, h, c = self.session.run(None, {
            "input": frame.reshape(1, -1).astype(np.float32),
            "sr": self.sr, "h": h, "c": c,
        })
        self.state = (h, c)
        return float(out[0][0])


class UtteranceRecorder:
    """Collects one utterance. Feed blocks with add(); poll finished.

    outcome is None while recording, then one of "speech", "no_speech"
    or "too_long".
    """

    def __init__(self, session, threshold=SPEECH_THRESHOLD,
                 end_silence_ms=END_SILENCE_MS, no_speech_ms=NO_SPEECH_MS,
                 max_seconds=MAX_UTTERANCE_S):
        self._prob = SpeechProbability(session)
        self.threshold = threshold
        self._end_frames = int(end_silence_ms / FRAME_MS)
        self._give_up_frames = int(no_speech_ms / FRAME_MS)
        self._max_frames = int(max_seconds * 1000 / FRAME_MS)
        self._pending = np.zeros(0, dtype=np.int16)
        self._blocks = []
        self._frames = 0
        self._quiet = 0
        self.heard_speech = False
        self.outcome = None

    @property
    def finished(self):
        return self.outcome is not None

    def add(self, block):
        if self.finished:
            return
        self._blocks.append(block)
        self._pending = np.concatenate([self._pending, block])
        while len(self._pending) >= FRAME and not self.finished:
            frame, self._pending = self._pending[:FRAME], self._pending[FRAME:]
            self._step(self._prob(frame.astype(np.float32) / 32768.0))

    def _step(self, p):
        self._frames += 1
        if p >= self.threshold:
            self.heard_speech = True
            self._quiet = 0
        else:
            self._quiet += 1

        if self.heard_speech and self._quiet >= self._end_frames:
            self.outcome = "speech"
        elif not self.heard_speech and self._frames >= self._give_up_frames:
            self.outcome = "no_speech"
        elif self._frames >= self._max_frames:
            self.outcome = "too_long"

    def audio(self):
        """Everything recorded so far as one int16 array (possibly empty)."""
        if not self._blocks:
            return np.zeros(0, dtype=np.int16)
        return np.concatenate(self._blocks)
