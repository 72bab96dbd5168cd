import os

from wand.color import Color
from wand.image import Image

from .render import RenderedImage


def unpremultiply(pixels: bytes) -> bytes:
    """Convert premultiplied R, G, B, A bytes to straight alpha."""
    out = bytearray(pixels)
    for i in range(0, len(out), 4):
        a = out[i + 3]
        if a in (0, 255):
            continue
        for c in range(i, i + 3):
            out[c] = min(255, (out[c] * 255 + a // 2) // a)
    return bytes(out)


def write_preview(image: RenderedImage, png_path):
    """Save a rendered frame as a PNG using wand."""
    with Image(width=image.width, height=image.height, background=Color("transparent")) as img:
        img.depth = 8  # Ensure 8-bit channels
        img.import_pixels(
            width=image.width,
            height=image.height,
            channel_map="RGBA",
            storage="char",
            data=unpremultiply(image.pixels),
        )
        img.save(filename=png_path)


def write_previews(name, images, directory):
    """Write `<name>_<size>.png` for every frame of a cursor and return the paths."""
    os.makedirs(directory, exist_ok=True)
    paths = []
    for image in images:
        png_path = os.path.join(directory, f"{name}_{image.width}.png")
        write_preview(image, png_path)
        paths.append(png_path)
    return paths
