"""Write rendered cursor frames as an X11 Xcursor file.

Layout (all integers are little-endian 32-bit unsigned):

    header   "Xcur", header length, file version, ToC entry count
    ToC      one (type, nominal size, file offset) entry per image
    images   chunk header followed by width * height B, G, R, A pixels

See https://www.x.org/releases/X11R7.7/doc/man/man3/Xcursor.3.xhtml
"""

import io
import struct
from typing import BinaryIO, Sequence

from .errors import CursorWriteError
from .render import RenderedImage

MAGIC = b"Xcur"
HEADER_LEN = 16
TOC_ENTRY_LEN = 12
IMAGE_HEADER_LEN = 36
BYTES_PER_PIXEL = 4
FILE_VERSION = 1
IMAGE_TYPE = 0xFFFD0002
IMAGE_VERSION = 1
# frames are static, the delay only matters for animations
FRAME_DELAY_MS = 1


def _check(img: RenderedImage):
    expected = img.width * img.height * BYTES_PER_PIXEL
    if len(img.pixels) != expected:
        raise ValueError(
            f"{img.width}x{img.height} image carries {len(img.pixels)} pixel bytes, expected {expected}")


def toc_offsets(images: Sequence[RenderedImage]):
    """File offset of each image chunk."""
    offsets = []
    offset = HEADER_LEN + len(images) * TOC_ENTRY_LEN
    for img in images:
        offsets.append(offset)
        offset += IMAGE_HEADER_LEN + img.width * img.height * BYTES_PER_PIXEL
    return offsets


def _bgra(pixels: bytes) -> bytes:
    out = bytearray(len(pixels))
    out[0::4], out[1::4], out[2::4], out[3::4] = pixels[2::4], pixels[1::4], pixels[0::4], pixels[3::4]
    return bytes(out)


def _header(count):
    return MAGIC + struct.pack("<III", HEADER_LEN, FILE_VERSION, count)


def _toc_entry(size, offset):
    # only image entries are written; the other entry type is comments
    return struct.pack("<III", IMAGE_TYPE, size, offset)


def _image_chunk_header(img: RenderedImage):
    return struct.pack(
        "<9I",
        IMAGE_HEADER_LEN,
        IMAGE_TYPE,
        img.width,  # nominal size
        IMAGE_VERSION,
        img.width,
        img.height,
        img.xhot,
        img.yhot,
        FRAME_DELAY_MS,
    )


def write(out: BinaryIO, images: Sequence[RenderedImage]):
    """Write `images` to the binary stream `out` as one Xcursor file."""
    for img in images:
        _check(img)

    try:
        out.write(_header(len(images)))
        for img, offset in zip(images, toc_offsets(images)):
            out.write(_toc_entry(img.width, offset))
        for img in images:
            out.write(_image_chunk_header(img))
            out.write(_bgra(img.pixels))
    except OSError as e:
        raise CursorWriteError(f"failed to write cursor data: {e}") from e


def encode(images: Sequence[RenderedImage]) -> bytes:
    buffer = io.BytesIO()
    write(buffer, images)
    return buffer.getvalue()
