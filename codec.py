"""
PNG read/write helpers backed by Pillow.

Everything else in the project works on RGBA ``PIL.Image`` objects; this is
the only module that touches image files directly.
"""

from __future__ import annotations

from typing import Tuple

from PIL import Image

Rect = Tuple[int, int, int, int]  # x, y, width, height

WHITE = (255, 255, 255, 255)


def decode(path: str) -> Tuple[int, int, Image.Image]:
    """Read *path* and return ``(width, height, rgba_image)``.

    Raises OSError (PIL's UnidentifiedImageError included) when the file
    cannot be read.
    """
    with Image.open(path) as src:
        img = src.convert("RGBA")
    return img.width, img.height, img


def crop_region(img: Image.Image, rect: Rect, flatten: bool = False) -> Image.Image:
    """Return the *rect* region of *img* as a new image.

    With *flatten*, the region is composited over opaque white so that every
    output pixel has alpha 255.
    """
    x, y, w, h = rect
    region = img.crop((x, y, x + w, y + h))
    if flatten:
        background = Image.new("RGBA", region.size, WHITE)
        region = Image.alpha_composite(background, region)
    return region


def encode_region(img: Image.Image, rect: Rect, path: str, flatten: bool = False) -> None:
    """Write the *rect* region of *img* to *path* as a PNG."""
    crop_region(img, rect, flatten).save(path, format="PNG")
