"""Microphone capture: 16 kHz mono int16 blocks delivered to a callback.

Usage (check the input level for a few seconds):
    python -m martruns.audio.mic
"""

import numpy as np
import sounddevice as sd

SAMPLE_RATE = 16000
BLOCK_SIZE = 1600  # 100ms

# Input devices to prefer, by substring of the device name, best first.
# Empty means use the system default.
PREFERRED_DEVICES = []


def input_devices():
    """[(index, name)] for every device with at least one input channel."""
    return [(i, d["name"]) for i, d in enumerate(sd.query_devices())
            if d["max_input_channels"] > 0]


def pick_device(preferred=None):
    """Index of the first preferred device present, or None for the default."""
    available = input_devices()
    for wanted in (PREFERRED_DEVICES if preferred is None else preferred):
        for i, name in available:
            if wanted.lower() in name.lower():
                return i
    return None


def open_mic_stream(callback, device=None, block_size=BLOCK_SIZE):
    """Start capturing. callback(block, overflowed) runs on the audio thread.

    Returns:
        The started sounddevice.InputStream; the caller stops and closes it.
    """
    def _on_block(indata, frames, time_info, status):
        if status:
            print(f"[mic] {status}", flush=True)
        callback(indata[:, 0].copy(), bool(status and status.input_overflow))

    stream = sd.InputStream(
        samplerate=SAMPLE_RATE,
        channels=1,
        dtype="int16",
        blocksize=block_size,
        device=pick_device() if device is None else device,
        callback=_on_block,
    )
    stream.start()
    return stream


if __name__ == "__main__":
    import time

    for i, name in input_devices():
        print(f"  [{i}] {name}")
    blocks = []
    stream = open_mic_stream(lambda block, _: blocks.append(block))
    print("Recording 3 seconds...")
    try:
        time.sleep(3)
    finally:
        stream.stop()
        stream.close()
    audio = np.concatenate(blocks) if blocks else np.zeros(0, dtype=np.int16)
    peak = int(np.max(np.abs(audio))) if len(audio) else 0
    print(f"{len(audio) / SAMPLE_RATE:.1f}s captured, peak {peak}")
    if peak < 100:
        print("Very low signal; is the microphone muted?")
