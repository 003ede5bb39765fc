"""
End-to-end conversion of 9-patch PNGs into slices plus an HTML page.

For ``/path/btn.9.png`` this writes ``/path/images/btn_<i>.png`` for every
grid cell and ``/path/btn.html``.  Validation runs to completion before
anything is written, so a malformed asset leaves no files behind.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Tuple

import markup
import ninepatch
import slicer
from ninepatch import AssetIOError, NinePatchAsset, NinePatchGrid

logger = logging.getLogger(__name__)


@dataclass
class ConvertOptions:
    """Settings for one conversion run."""
    flatten: bool = False            # composite slices over white (no alpha)
    images_dir: str = "images"
    width: Optional[int] = None      # demo container size, default 2x interior
    height: Optional[int] = None
    element_id: Optional[str] = None  # defaults to the asset name
    class_name: str = ""

    def demo_size(self, grid: NinePatchGrid) -> Tuple[int, int]:
        width = self.width if self.width is not None else 2 * (grid.width - 2)
        height = self.height if self.height is not None else 2 * (grid.height - 2)
        return width, height


@dataclass
class ConversionResult:
    asset: NinePatchAsset
    grid: NinePatchGrid
    slices: List[slicer.SliceAsset]
    document_path: str


def document_path(asset: NinePatchAsset) -> str:
    return os.path.join(asset.directory, f"{asset.name}.html")


def render(asset: NinePatchAsset, grid: NinePatchGrid, options: Optional[ConvertOptions] = None) -> str:
    """Return the HTML page for an already decoded asset."""
    options = options or ConvertOptions()
    width, height = options.demo_size(grid)
    element_id = options.element_id if options.element_id is not None else asset.name
    return markup.render_document(
        grid, asset.name, asset.filename, asset.directory, width, height,
        element_id=element_id, class_name=options.class_name, images_dir=options.images_dir,
    )


def convert(path: str, options: Optional[ConvertOptions] = None) -> ConversionResult:
    """Convert one ``.9.png`` file.  Raises a NinePatchError subclass on failure."""
    options = options or ConvertOptions()
    asset, grid = ninepatch.read(path)
    logger.info("%s: %d columns x %d rows", asset.filename, grid.column_count, grid.row_count)

    images = os.path.join(asset.directory, options.images_dir)
    slices = slicer.export_slices(asset, grid, images, flatten=options.flatten)

    text = render(asset, grid, options)
    out = document_path(asset)
    try:
        markup.write_document(text, out)
    except OSError as e:
        raise AssetIOError(asset.name, f"cannot write {out}: {e}") from e
    return ConversionResult(asset, grid, slices, out)


def find_ninepatches(directory: str) -> List[str]:
    """Return the ``.9.png`` files directly inside *directory*, sorted."""
    return sorted(
        os.path.join(directory, f) for f in os.listdir(directory)
        if ninepatch.is_ninepatch_path(f) and os.path.isfile(os.path.join(directory, f))
    )
