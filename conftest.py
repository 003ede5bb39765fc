"""Shared fixtures: build 9-patch images from marker strings.

A track string describes one border edge without its corners: ``#`` is an
opaque black marker pixel, ``.`` is transparent.
"""

import pytest
from PIL import Image

BLACK = (0, 0, 0, 255)

# 9px tracks with a single 1px marker in the middle: an 11x11 image.
CENTER_MARK = "....#...."


def interior_color(x: int, y: int):
    """Opaque colour unique to each interior pixel of a small test image."""
    return (x * 20 % 256, y * 20 % 256, 128, 255)


def draw_ninepatch(top=CENTER_MARK, left=CENTER_MARK, right=None, bottom=None, fill=None):
    right = left if right is None else right
    bottom = top if bottom is None else bottom
    assert len(bottom) == len(top) and len(right) == len(left)
    w, h = len(top) + 2, len(left) + 2
    img = Image.new("RGBA", (w, h), (0, 0, 0, 0))
    px = img.load()
    for y in range(1, h - 1):
        for x in range(1, w - 1):
            px[x, y] = fill or interior_color(x, y)
    for i, ch in enumerate(top):
        if ch == "#":
            px[i + 1, 0] = BLACK
    for i, ch in enumerate(bottom):
        if ch == "#":
            px[i + 1, h - 1] = BLACK
    for i, ch in enumerate(left):
        if ch == "#":
            px[0, i + 1] = BLACK
    for i, ch in enumerate(right):
        if ch == "#":
            px[w - 1, i + 1] = BLACK
    return img


@pytest.fixture
def make_ninepatch():
    return draw_ninepatch


@pytest.fixture
def ninepatch_file(tmp_path):
    """Factory saving a 9-patch into tmp_path and returning its path."""
    def _write(name="btn.9.png", image=None, **tracks):
        img = image if image is not None else draw_ninepatch(**tracks)
        path = tmp_path / name
        img.save(path)
        return str(path)
    return _write
