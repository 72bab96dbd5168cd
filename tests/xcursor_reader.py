"""Minimal Xcursor reader used to check encoder output."""

import struct
from dataclasses import dataclass
from typing import List


@dataclass
class XcursorChunk:
    offset: int
    nominal: int
    version: int
    width: int
    height: int
    xhot: int
    yhot: int
    delay: int
    pixels: bytes  # B, G, R, A


@dataclass
class XcursorFile:
    header_len: int
    version: int
    toc: List[tuple]
    chunks: List[XcursorChunk]


def read_xcursor(blob: bytes) -> XcursorFile:
    magic, header_len, version, count = struct.unpack_from("<4sIII", blob, 0)
    assert magic == b"Xcur", magic
    toc = [struct.unpack_from("<III", blob, header_len + 12 * i) for i in range(count)]
    chunks = []
    for chunk_type, nominal, offset in toc:
        (chunk_header_len, c_type, c_nominal, c_version,
         width, height, xhot, yhot, delay) = struct.unpack_from("<9I", blob, offset)
        assert chunk_header_len == 36
        assert c_type == chunk_type
        assert c_nominal == nominal
        start = offset + chunk_header_len
        pixels = blob[start:start + width * height * 4]
        assert len(pixels) == width * height * 4
        chunks.append(XcursorChunk(offset, c_nominal, c_version, width, height, xhot, yhot, delay, pixels))
    return XcursorFile(header_len, version, toc, chunks)
