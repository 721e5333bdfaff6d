"""
Captura de audio: acumula muestras PCM de una sesión de grabación en un único blob WAV.

- Una sola grabación activa a la vez.
- `SoundDeviceSource` alimenta el grabador desde el micrófono (sounddevice + numpy).
"""
from __future__ import annotations

import io
import logging
import wave
from typing import List, Optional

from voicenotes.core.errors import RecordingError

_log = logging.getLogger("voicenotes.client.recorder")


def pcm_to_wav(pcm: bytes, sample_rate: int = 16000, channels: int = 1, sample_width: int = 2) -> bytes:
    """Envuelve PCM crudo (16-bit little endian por defecto) en un contenedor WAV."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm)
    return buf.getvalue()


class AudioRecorder:
    def __init__(self, sample_rate: int = 16000, channels: int = 1, sample_width: int = 2) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.sample_width = sample_width
        self._chunks: List[bytes] = []
        self._active = False

    @property
    def is_recording(self) -> bool:
        return self._active

    @property
    def duration_seconds(self) -> float:
        frame_bytes = self.channels * self.sample_width
        return sum(len(c) for c in self._chunks) / float(frame_bytes * self.sample_rate)

    def start(self) -> None:
        if self._active:
            raise RecordingError("Ya hay una grabación activa")
        self._chunks = []
        self._active = True

    def append(self, chunk: bytes) -> None:
        if not self._active:
            raise RecordingError("No hay grabación activa")
        if chunk:
            self._chunks.append(bytes(chunk))

    def stop(self) -> bytes:
        """Cierra la sesión y devuelve el blob WAV."""
        if not self._active:
            raise RecordingError("No hay grabación activa")
        self._active = False
        pcm = b"".join(self._chunks)
        self._chunks = []
        return pcm_to_wav(pcm, self.sample_rate, self.channels, self.sample_width)


class SoundDeviceSource:
    """
    Micrófono vía sounddevice.InputStream.

    El callback convierte cada bloque float32 a PCM int16 y lo agrega al grabador.
    """

    def __init__(self, recorder: AudioRecorder, blocksize: int = 1024, device: Optional[int] = None) -> None:
        self.recorder = recorder
        self.blocksize = blocksize
        self.device = device
        self.stream = None

    def _callback(self, indata, frames, time_info, status) -> None:
        import numpy as np

        if status:
            _log.warning("sounddevice status: %s", status)
        pcm = (np.clip(indata, -1.0, 1.0) * 32767).astype("<i2").tobytes()
        if self.recorder.is_recording:
            self.recorder.append(pcm)

    def start(self) -> None:
        # Import perezoso: PortAudio solo se carga al usar el micrófono
        import sounddevice as sd

        self.recorder.start()
        try:
            self.stream = sd.InputStream(
                samplerate=self.recorder.sample_rate,
                channels=self.recorder.channels,
                dtype="float32",
                blocksize=self.blocksize,
                device=self.device,
                callback=self._callback,
            )
            self.stream.start()
        except Exception as e:
            # El grabador no puede quedar activo si el dispositivo no abrió
            _log.error("No se pudo abrir el micrófono: %s", e)
            self.stream = None
            self.recorder.stop()
            raise RecordingError(f"No se pudo abrir el micrófono: {e}") from e

    def stop(self) -> bytes:
        if self.stream is not None:
            self.stream.stop()
            self.stream.close()
            self.stream = None
        return self.recorder.stop()
