"""
Cut a decoded 9-patch into one PNG per grid cell.

Cells are cropped from the source image at their interior coordinates (the
1px marker ring is never part of a slice) and written as
``<name>_<index>.png``, with *index* counting cells row-major.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Tuple

from PIL import Image

import codec
from ninepatch import AssetIOError, GridCell, NinePatchAsset, NinePatchGrid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SliceAsset:
    cell_index: int
    crop_rect: Tuple[int, int, int, int]
    output_path: str


def crop_rect(cell: GridCell) -> Tuple[int, int, int, int]:
    """Return the (x, y, width, height) source rectangle of *cell*."""
    return cell.x, cell.y, cell.width, cell.height


def slice_filename(name: str, index: int) -> str:
    return f"{name}_{index}.png"


def plan_slices(name: str, grid: NinePatchGrid, directory: str) -> List[SliceAsset]:
    """Return the SliceAsset of every cell without touching the disk."""
    return [
        SliceAsset(cell.index, crop_rect(cell), os.path.join(directory, slice_filename(name, cell.index)))
        for cell in grid.cells
    ]


def slice_image(asset: NinePatchAsset, grid: NinePatchGrid, flatten: bool = False) -> List[Image.Image]:
    """Crop every cell of *grid* out of *asset*, row-major."""
    return [codec.crop_region(asset.image, crop_rect(cell), flatten) for cell in grid.cells]


def export_slices(
    asset: NinePatchAsset, grid: NinePatchGrid, directory: str, flatten: bool = False
) -> List[SliceAsset]:
    """Write each cell of *grid* as an individual PNG in *directory*.

    Returns the written slices.  A failure stops at the failing cell; files
    written before it are left in place.
    """
    try:
        os.makedirs(directory, exist_ok=True)
    except OSError as e:
        raise AssetIOError(asset.name, f"cannot create {directory}: {e}") from e

    slices = plan_slices(asset.name, grid, directory)
    for s in slices:
        try:
            codec.encode_region(asset.image, s.crop_rect, s.output_path, flatten)
        except OSError as e:
            raise AssetIOError(asset.name, f"cannot write {s.output_path}: {e}") from e
        logger.debug("Wrote %s %s", s.output_path, s.crop_rect)
    logger.info("%s: wrote %d slices to %s", asset.name, len(slices), directory)
    return slices
