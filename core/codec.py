"""
Float32 vector <-> bytes codec for stored embeddings.

Layout: each element as a 4-byte IEEE-754 little-endian float, in vector
order. Decoding never raises; anything malformed comes back as an empty list,
which the similarity scorer treats as unscorable.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

import core.config as config

FLOAT32_LE = np.dtype("<f4")


def encode(vector: Sequence[float]) -> bytes:
    return np.asarray(vector, dtype=FLOAT32_LE).tobytes()


def decode(data: Optional[bytes]) -> List[float]:
    if not data or not isinstance(data, (bytes, bytearray, memoryview)):
        return []
    raw = bytes(data)
    if len(raw) % FLOAT32_LE.itemsize != 0:
        config.logger.warning(
            "embedding_decode_failed",
            extra={"byte_length": len(raw)},
        )
        return []
    return np.frombuffer(raw, dtype=FLOAT32_LE).astype(float).tolist()
