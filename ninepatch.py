"""
Core 9-patch logic: border decoding and grid building, no file output.

A 9-patch PNG carries resize metadata in its outermost 1px ring.  Opaque
black pixels mark stretchable spans, transparent pixels mark fixed spans:

    . . # # . .        top    -> columns (fixed / stretch)
    .         .        left   -> rows    (fixed / stretch)
    #         #        right  -> vertical content padding
    #         #        bottom -> horizontal content padding
    .         .
    . . # # . .

The top and left tracks are split into alternating fixed/stretch runs and
crossed into a grid of cells covering the interior (the image minus the
ring).  The right and bottom tracks each hold exactly one stretch run that
marks where foreground content goes.
"""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple

from PIL import Image

import codec

logger = logging.getLogger(__name__)

SUFFIX = ".9.png"

TRANSPARENT = 0
OPAQUE = 255


class RunKind(enum.Enum):
    FIXED = "fixed"
    STRETCH = "stretch"


class Edge(enum.Enum):
    TOP = "top"
    LEFT = "left"
    RIGHT = "right"
    BOTTOM = "bottom"


class CellKind(enum.Enum):
    FIXED = "fixed"
    REPEAT_BOTH = "repeat"
    REPEAT_X = "repeat-x"
    REPEAT_Y = "repeat-y"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
class NinePatchError(Exception):
    """Base class for everything that aborts the conversion of one asset."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(f"{name}: {message}" if name else message)
        self.name = name


class NotANinePatchError(NinePatchError):
    def __init__(self, name: str) -> None:
        super().__init__(name, f"not a 9-patch PNG, the file name must end in {SUFFIX} (e.g. button{SUFFIX})")


class FormatError(NinePatchError, ValueError):
    """The border markers break one of the 9-patch rules."""


class ImageTooSmallError(FormatError):
    def __init__(self, name: str, width: int, height: int) -> None:
        super().__init__(name, f"image is {width}x{height}, a 9-patch must be at least 3x3")
        self.width = width
        self.height = height


class _PixelError(FormatError):
    rule = ""

    def __init__(self, name: str, x: int, y: int) -> None:
        super().__init__(name, f"pixel ({x}, {y}): {self.rule}")
        self.x = x
        self.y = y


class CornerNotTransparentError(_PixelError):
    rule = "the four corner pixels must have alpha 0"


class MarkerNotBlackError(_PixelError):
    rule = "opaque border pixels must be pure black (0, 0, 0)"


class EdgeAlphaNotBinaryError(_PixelError):
    rule = "border pixels only allow alpha 0 or 255"


class MissingOrMultipleContentMarkerError(FormatError):
    def __init__(self, name: str, edge: Edge, count: int) -> None:
        super().__init__(
            name, f"the {edge.value} edge must have exactly one black line, found {count}"
        )
        self.edge = edge
        self.count = count


class AssetIOError(NinePatchError):
    """Reading or writing a file failed; the OSError is chained as __cause__."""


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class NinePatchAsset:
    path: str
    name: str
    width: int
    height: int
    image: Image.Image

    @property
    def filename(self) -> str:
        return os.path.basename(self.path)

    @property
    def directory(self) -> str:
        return os.path.dirname(self.path)


@dataclass(frozen=True)
class BorderRun:
    """A maximal span of equal pixels on one border track.

    *start* indexes the track, which excludes the corner pixels, so track
    index 0 is image coordinate 1.  *weight* is only set on stretch runs.
    """
    kind: RunKind
    start: int
    length: int
    weight: Optional[int] = None

    @property
    def end(self) -> int:
        return self.start + self.length

    @property
    def is_stretch(self) -> bool:
        return self.kind is RunKind.STRETCH


@dataclass(frozen=True)
class ContentArea:
    """Padding between the container edges and the foreground content."""
    top: int
    bottom: int
    left: int
    right: int


@dataclass(frozen=True)
class GridCell:
    index: int
    row: int
    col: int
    x: int
    y: int
    width: int
    height: int
    kind: CellKind
    # (horizontal, vertical); None for a dimension that does not stretch.
    filler_weight: Tuple[Optional[int], Optional[int]] = (None, None)


@dataclass(frozen=True)
class NinePatchGrid:
    width: int
    height: int
    edges: Dict[Edge, Tuple[BorderRun, ...]]
    cells: Tuple[GridCell, ...]
    content_area: ContentArea

    @property
    def columns(self) -> Tuple[BorderRun, ...]:
        return self.edges[Edge.TOP]

    @property
    def rows(self) -> Tuple[BorderRun, ...]:
        return self.edges[Edge.LEFT]

    @property
    def column_count(self) -> int:
        return len(self.columns)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def cell(self, row: int, col: int) -> GridCell:
        return self.cells[row * self.column_count + col]


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------
def is_ninepatch_path(path: str) -> bool:
    return path.lower().endswith(SUFFIX)


def base_name(path: str) -> str:
    """``/a/btn.9.png`` -> ``btn``."""
    filename = os.path.basename(path)
    return filename[: -len(SUFFIX)] if is_ninepatch_path(filename) else filename


def load_asset(path: str) -> NinePatchAsset:
    """Check the file name and decode *path* into a NinePatchAsset."""
    path = os.path.realpath(path)
    if not is_ninepatch_path(path):
        raise NotANinePatchError(os.path.basename(path))
    name = base_name(path)
    try:
        width, height, img = codec.decode(path)
    except (OSError, Image.DecompressionBombError) as e:
        raise AssetIOError(name, f"cannot read {path}: {e}") from e
    logger.debug("Decoded %s (%dx%d)", path, width, height)
    return NinePatchAsset(path, name, width, height, img)


# ---------------------------------------------------------------------------
# Border sampling
# ---------------------------------------------------------------------------
def _ring(width: int, height: int):
    """Yield the (x, y) of every border pixel, row-major."""
    for y in range(height):
        if y == 0 or y == height - 1:
            for x in range(width):
                yield x, y
        else:
            yield 0, y
            yield width - 1, y


def validate_border(pixels, width: int, height: int, name: str = "") -> None:
    """Raise a FormatError for the first border pixel breaking the rules.

    *pixels* is indexed ``pixels[x, y] -> (r, g, b, a)``, as returned by
    ``Image.load()``.
    """
    if width < 3 or height < 3:
        raise ImageTooSmallError(name, width, height)
    corners = {(0, 0), (width - 1, 0), (0, height - 1), (width - 1, height - 1)}
    for x, y in _ring(width, height):
        r, g, b, a = pixels[x, y]
        if (x, y) in corners:
            if a != TRANSPARENT:
                raise CornerNotTransparentError(name, x, y)
        elif a == OPAQUE:
            if (r, g, b) != (0, 0, 0):
                raise MarkerNotBlackError(name, x, y)
        elif a != TRANSPARENT:
            raise EdgeAlphaNotBinaryError(name, x, y)


def sample_border(pixels, width: int, height: int) -> Dict[Edge, List[int]]:
    """Return the alpha values of the four border tracks, corners excluded."""
    inner_x = range(1, width - 1)
    inner_y = range(1, height - 1)
    return {
        Edge.TOP: [pixels[x, 0][3] for x in inner_x],
        Edge.LEFT: [pixels[0, y][3] for y in inner_y],
        Edge.RIGHT: [pixels[width - 1, y][3] for y in inner_y],
        Edge.BOTTOM: [pixels[x, height - 1][3] for x in inner_x],
    }


# ---------------------------------------------------------------------------
# Runs and weights
# ---------------------------------------------------------------------------
def segment_runs(alphas: Sequence[int]) -> List[BorderRun]:
    """Split a track into maximal runs: alpha 0 is fixed, alpha 255 stretches."""
    runs: List[BorderRun] = []
    start = 0
    for i in range(1, len(alphas) + 1):
        if i == len(alphas) or alphas[i] != alphas[start]:
            kind = RunKind.STRETCH if alphas[start] == OPAQUE else RunKind.FIXED
            runs.append(BorderRun(kind, start, i - start))
            start = i
    return runs


def stretch_weights(lengths: Sequence[int]) -> List[int]:
    """Reduce stretch lengths to the smallest integer ratio.

    ``[2, 4, 6]`` -> ``[0, 1, 2]`` (multiples of the shortest, minus one).
    When any length is not a multiple of the shortest, or a zero length makes
    the ratio undefined, the raw lengths are returned instead.
    """
    if not lengths:
        return []
    shortest = min(lengths)
    if shortest > 0 and all(n % shortest == 0 for n in lengths):
        return [n // shortest - 1 for n in lengths]
    return list(lengths)


def normalize_runs(runs: Sequence[BorderRun]) -> Tuple[BorderRun, ...]:
    """Return *runs* with the weight of every stretch run filled in."""
    weights = iter(stretch_weights([r.length for r in runs if r.is_stretch]))
    return tuple(replace(r, weight=next(weights)) if r.is_stretch else replace(r, weight=None)
                 for r in runs)


def decode_edges(asset: NinePatchAsset) -> Dict[Edge, Tuple[BorderRun, ...]]:
    """Validate the border of *asset* and return the weighted runs per edge."""
    pixels = asset.image.load()
    validate_border(pixels, asset.width, asset.height, asset.name)
    tracks = sample_border(pixels, asset.width, asset.height)
    edges: Dict[Edge, Tuple[BorderRun, ...]] = {}
    for edge, alphas in tracks.items():
        edges[edge] = normalize_runs(segment_runs(alphas))
        logger.debug("%s %s: %s", asset.name, edge.value,
                     [(r.kind.value, r.start, r.length, r.weight) for r in edges[edge]])
    return edges


# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------
_CELL_KINDS = {
    (RunKind.FIXED, RunKind.FIXED): CellKind.FIXED,
    (RunKind.STRETCH, RunKind.FIXED): CellKind.REPEAT_X,
    (RunKind.FIXED, RunKind.STRETCH): CellKind.REPEAT_Y,
    (RunKind.STRETCH, RunKind.STRETCH): CellKind.REPEAT_BOTH,
}


def classify(column: RunKind, row: RunKind) -> CellKind:
    """Cell kind for a column run kind (top edge) and a row run kind (left edge)."""
    return _CELL_KINDS[(column, row)]


def check_content_marker(edge: Edge, runs: Sequence[BorderRun], name: str = "") -> None:
    count = sum(1 for r in runs if r.is_stretch)
    if count != 1:
        raise MissingOrMultipleContentMarkerError(name, edge, count)


def content_padding(runs: Sequence[BorderRun]) -> Tuple[int, int]:
    """Return the (before, after) padding described by a content-marker edge.

    With one stretch run and alternating kinds the edge has at most a fixed
    run on each side of it.
    """
    assert 1 <= len(runs) <= 3 and sum(1 for r in runs if r.is_stretch) == 1, runs
    before = runs[0].length if not runs[0].is_stretch else 0
    after = runs[-1].length if not runs[-1].is_stretch else 0
    return before, after


def build_grid(edges: Dict[Edge, Sequence[BorderRun]], width: int, height: int,
               name: str = "") -> NinePatchGrid:
    """Cross the top-edge columns with the left-edge rows into a cell grid."""
    check_content_marker(Edge.RIGHT, edges[Edge.RIGHT], name)
    check_content_marker(Edge.BOTTOM, edges[Edge.BOTTOM], name)

    columns = tuple(edges[Edge.TOP])
    rows = tuple(edges[Edge.LEFT])
    cells: List[GridCell] = []
    for j, row in enumerate(rows):
        for i, col in enumerate(columns):
            cells.append(GridCell(
                index=len(cells), row=j, col=i,
                x=1 + col.start, y=1 + row.start,
                width=col.length, height=row.length,
                kind=classify(col.kind, row.kind),
                filler_weight=(col.weight, row.weight),
            ))

    top, bottom = content_padding(edges[Edge.RIGHT])
    left, right = content_padding(edges[Edge.BOTTOM])
    content = ContentArea(top, bottom, left, right)
    logger.debug("%s: %dx%d grid, content area %s", name, len(rows), len(columns), content)
    return NinePatchGrid(
        width=width,
        height=height,
        edges={edge: tuple(runs) for edge, runs in edges.items()},
        cells=tuple(cells),
        content_area=content,
    )


def parse(asset: NinePatchAsset) -> NinePatchGrid:
    """Decode the border of an already loaded asset into its grid."""
    return build_grid(decode_edges(asset), asset.width, asset.height, asset.name)


def read(path: str) -> Tuple[NinePatchAsset, NinePatchGrid]:
    """Load *path* and decode its grid."""
    asset = load_asset(path)
    return asset, parse(asset)
