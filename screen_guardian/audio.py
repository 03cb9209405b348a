import math
import struct
import threading
import winsound


def _wrap_wav_header(pcm_data: bytes, sample_rate: int) -> bytes:
    data_size = len(pcm_data)
    riff_size = 36 + data_size
    header = struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        riff_size,
        b"WAVE",
        b"fmt ",
        16,
        1,
        1,
        sample_rate,
        sample_rate * 2,
        2,
        16,
        b"data",
        data_size,
    )
    return header + pcm_data


def warning_chime_wav(sample_rate: int = 44100, volume: float = 0.4) -> bytes:
    notes = [784.00, 659.25]
    duration_sec = 0.18
    max_amp = int(32767 * max(0.0, min(1.0, volume)))

    frames = bytearray()
    for freq in notes:
        n_samples = int(sample_rate * duration_sec)
        for i in range(n_samples):
            t = i / sample_rate
            envelope = 1.0 - (i / n_samples)
            frames += struct.pack("<h", int(max_amp * envelope * math.sin(2.0 * math.pi * freq * t)))

    return _wrap_wav_header(frames, sample_rate)


def trigger_warning_sound() -> None:
    def _play():
        winsound.PlaySound(warning_chime_wav(), winsound.SND_MEMORY)

    threading.Thread(target=_play, daemon=True).start()


def trigger_blocking_sound() -> None:
    winsound.PlaySound("SystemHand", winsound.SND_ALIAS | winsound.SND_ASYNC)


def trigger_passcode_error_sound() -> None:
    winsound.PlaySound("SystemExclamation", winsound.SND_ALIAS | winsound.SND_ASYNC)
