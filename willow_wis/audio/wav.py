"""RIFF/WAVE container header synthesis for raw PCM audio.

WHY: Willow devices stream bare little-endian PCM samples, but Whisper on
Workers AI only accepts a recognized audio container. Prepending a minimal
44-byte WAV header is enough for the backend to parse the audio.

HOW: struct.pack writes the whole canonical header in one call with a
little-endian format string, then the payload is appended verbatim.

RULES:
- Header is always exactly 44 bytes; output is 44 + len(payload)
- Tags at offsets 0/8/12/36 are b"RIFF", b"WAVE", b"fmt ", b"data"
- Every multi-byte field is little-endian
- fmt sub-chunk size is 16 and format code is 1 (uncompressed PCM)
- Byte rate and block alignment are truncated to whole bytes
- Parameters are NOT validated: out-of-range values wrap to the field
  width (2^16 / 2^32) so any non-negative input encodes without error
- An empty payload yields a header-only stream with data length 0
- Callers are expected to reject empty audio before calling synthesize()
"""

from __future__ import annotations

import struct

HEADER_SIZE = 44
"""Size in bytes of the canonical PCM WAV header."""

PCM_FMT_CHUNK_SIZE = 16
PCM_FORMAT_CODE = 1

_HEADER_STRUCT = struct.Struct("<4sI4s4sIHHIIHH4sI")

_U16 = 0xFFFF
_U32 = 0xFFFFFFFF


def build_header(
    data_length: int,
    sample_rate_hz: int,
    bits_per_sample: int,
    channel_count: int,
) -> bytes:
    """Build the 44-byte WAV preamble for ``data_length`` bytes of PCM.

    Args:
        data_length: Length in bytes of the PCM payload that follows.
        sample_rate_hz: Samples per second per channel.
        bits_per_sample: Sample width in bits (normally 8 or 16).
        channel_count: Number of interleaved channels.

    Returns:
        The header bytes, always ``HEADER_SIZE`` long.
    """
    byte_rate = (sample_rate_hz * channel_count * bits_per_sample) // 8
    block_align = (channel_count * bits_per_sample) // 8

    return _HEADER_STRUCT.pack(
        b"RIFF",
        (HEADER_SIZE - 8 + data_length) & _U32,
        b"WAVE",
        b"fmt ",
        PCM_FMT_CHUNK_SIZE,
        PCM_FORMAT_CODE,
        channel_count & _U16,
        sample_rate_hz & _U32,
        byte_rate & _U32,
        block_align & _U16,
        bits_per_sample & _U16,
        b"data",
        data_length & _U32,
    )


def synthesize(
    payload: bytes,
    sample_rate_hz: int,
    bits_per_sample: int,
    channel_count: int,
) -> bytes:
    """Wrap raw PCM samples in a WAV container.

    WHY: The transcription backend parses the container tag, format tag
    and field layout before touching the samples; bare PCM is rejected.

    HOW: Builds the header from the payload length and concatenates the
    untouched payload after it.

    RULES:
    - Pure and deterministic: no I/O, no shared state
    - Never raises for non-negative integer parameters

    Args:
        payload: Raw interleaved PCM bytes. Should be non-empty; emptiness
            is a caller-side policy and is not rejected here.
        sample_rate_hz: Samples per second per channel.
        bits_per_sample: Sample width in bits.
        channel_count: Number of interleaved channels.

    Returns:
        ``HEADER_SIZE + len(payload)`` bytes of WAV data.
    """
    payload = bytes(payload)
    return build_header(len(payload), sample_rate_hz, bits_per_sample, channel_count) + payload


def is_wav(data: bytes) -> bool:
    """Return True if ``data`` already starts with a RIFF/WAVE signature."""
    return len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WAVE"
