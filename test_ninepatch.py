"""Unit tests for ninepatch.py: run with: python -m pytest test_ninepatch.py"""

import os

import pytest
from PIL import Image

from ninepatch import (
    AssetIOError, BorderRun, CellKind, ContentArea, CornerNotTransparentError,
    Edge, EdgeAlphaNotBinaryError, FormatError, ImageTooSmallError,
    MarkerNotBlackError, MissingOrMultipleContentMarkerError, NinePatchAsset,
    NotANinePatchError, RunKind, base_name, build_grid, check_content_marker, classify,
    content_padding, decode_edges, load_asset, normalize_runs, parse, read,
    sample_border, segment_runs, stretch_weights, validate_border,
)

F, S = RunKind.FIXED, RunKind.STRETCH
T, B = 0, 255


def _runs(*spec):
    """``_runs((F, 2), (S, 1))`` -> consecutive BorderRuns."""
    runs, start = [], 0
    for kind, length in spec:
        runs.append(BorderRun(kind, start, length))
        start += length
    return runs


def decode_edges_of(img):
    """decode_edges() for an in-memory image."""
    return decode_edges(NinePatchAsset("x.9.png", "x", img.width, img.height, img))


def _edges(top, left, right, bottom):
    return {
        Edge.TOP: normalize_runs(_runs(*top)),
        Edge.LEFT: normalize_runs(_runs(*left)),
        Edge.RIGHT: normalize_runs(_runs(*right)),
        Edge.BOTTOM: normalize_runs(_runs(*bottom)),
    }


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------
class TestLoad:
    def test_base_name(self):
        assert base_name("/a/b/button.9.png") == "button"
        assert base_name("Panel.9.PNG") == "Panel"

    def test_load(self, ninepatch_file):
        asset = load_asset(ninepatch_file("btn.9.png"))
        assert asset.name == "btn"
        assert asset.filename == "btn.9.png"
        assert (asset.width, asset.height) == (11, 11)
        assert asset.image.mode == "RGBA"
        assert os.path.isabs(asset.path)

    def test_suffix_is_case_insensitive(self, ninepatch_file):
        assert load_asset(ninepatch_file("BTN.9.PNG")).name == "BTN"

    def test_not_a_ninepatch(self, ninepatch_file):
        with pytest.raises(NotANinePatchError, match=r"\.9\.png"):
            load_asset(ninepatch_file("btn.png"))

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "broken.9.png"
        path.write_bytes(b"not a png")
        with pytest.raises(AssetIOError, match="broken") as info:
            load_asset(str(path))
        assert isinstance(info.value.__cause__, OSError)

    def test_missing_file(self, tmp_path):
        with pytest.raises(AssetIOError):
            load_asset(str(tmp_path / "missing.9.png"))

    def test_oversized_image(self, ninepatch_file, monkeypatch):
        path = ninepatch_file()
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
        with pytest.raises(AssetIOError, match="^btn: cannot read") as info:
            load_asset(path)
        assert isinstance(info.value.__cause__, Image.DecompressionBombError)


# ---------------------------------------------------------------------------
# Border validation
# ---------------------------------------------------------------------------
class TestValidateBorder:
    def _check(self, img):
        validate_border(img.load(), img.width, img.height, "btn")

    def test_valid(self, make_ninepatch):
        self._check(make_ninepatch())

    def test_minimal_3x3(self, make_ninepatch):
        self._check(make_ninepatch("#", "#"))

    def test_too_small(self):
        with pytest.raises(ImageTooSmallError, match="2x5"):
            self._check(Image.new("RGBA", (2, 5), (0, 0, 0, 0)))

    @pytest.mark.parametrize("corner", [(0, 0), (10, 0), (0, 10), (10, 10)])
    def test_opaque_corner(self, make_ninepatch, corner):
        img = make_ninepatch()
        img.putpixel(corner, (0, 0, 0, 255))
        with pytest.raises(CornerNotTransparentError) as info:
            self._check(img)
        assert (info.value.x, info.value.y) == corner

    def test_half_transparent_corner(self, make_ninepatch):
        img = make_ninepatch()
        img.putpixel((10, 10), (0, 0, 0, 128))
        with pytest.raises(CornerNotTransparentError):
            self._check(img)

    def test_marker_not_black(self, make_ninepatch):
        img = make_ninepatch()
        img.putpixel((0, 3), (255, 0, 0, 255))
        with pytest.raises(MarkerNotBlackError, match=r"\(0, 3\)") as info:
            self._check(img)
        assert (info.value.x, info.value.y) == (0, 3)

    def test_edge_alpha_not_binary(self, make_ninepatch):
        img = make_ninepatch()
        img.putpixel((4, 10), (0, 0, 0, 128))
        with pytest.raises(EdgeAlphaNotBinaryError) as info:
            self._check(img)
        assert (info.value.x, info.value.y) == (4, 10)

    def test_transparent_colour_is_ignored(self, make_ninepatch):
        img = make_ninepatch()
        img.putpixel((3, 0), (255, 255, 255, 0))
        self._check(img)

    def test_errors_are_value_errors_naming_the_asset(self, make_ninepatch):
        img = make_ninepatch()
        img.putpixel((0, 0), (0, 0, 0, 255))
        with pytest.raises(ValueError, match="^btn: "):
            self._check(img)


# ---------------------------------------------------------------------------
# Border sampling
# ---------------------------------------------------------------------------
class TestSampleBorder:
    def test_tracks(self, make_ninepatch):
        img = make_ninepatch(top="#....", left="..#", right="...", bottom="....#")
        tracks = sample_border(img.load(), img.width, img.height)
        assert tracks[Edge.TOP] == [B, T, T, T, T]
        assert tracks[Edge.LEFT] == [T, T, B]
        assert tracks[Edge.RIGHT] == [T, T, T]
        assert tracks[Edge.BOTTOM] == [T, T, T, T, B]

    def test_corners_excluded(self, make_ninepatch):
        img = make_ninepatch()
        tracks = sample_border(img.load(), img.width, img.height)
        assert len(tracks[Edge.TOP]) == len(tracks[Edge.BOTTOM]) == img.width - 2
        assert len(tracks[Edge.LEFT]) == len(tracks[Edge.RIGHT]) == img.height - 2


# ---------------------------------------------------------------------------
# Run segmentation
# ---------------------------------------------------------------------------
TRACKS = [
    [T],
    [B],
    [T, T, B, B, B, T],
    [B, T, B, T, B],
    [B, B, T, T],
    [T, B, B, B, B, B, B, T, T, B],
]


class TestSegmentRuns:
    def test_basic(self):
        assert segment_runs([T, T, B, T, T, T]) == _runs((F, 2), (S, 1), (F, 3))

    def test_trailing_stretch_is_flushed(self):
        assert segment_runs([T, B, B]) == _runs((F, 1), (S, 2))

    def test_single_run(self):
        assert segment_runs([B] * 5) == [BorderRun(S, 0, 5)]

    @pytest.mark.parametrize("alphas", TRACKS)
    def test_partition(self, alphas):
        runs = segment_runs(alphas)
        assert runs[0].start == 0
        assert runs[-1].end == len(alphas)
        for prev, nxt in zip(runs, runs[1:]):
            assert prev.end == nxt.start
        assert sum(r.length for r in runs) == len(alphas)

    @pytest.mark.parametrize("alphas", TRACKS)
    def test_alternation(self, alphas):
        runs = segment_runs(alphas)
        for prev, nxt in zip(runs, runs[1:]):
            assert prev.kind is not nxt.kind


# ---------------------------------------------------------------------------
# Weights
# ---------------------------------------------------------------------------
class TestStretchWeights:
    def test_commensurate(self):
        assert stretch_weights([2, 4, 6]) == [0, 1, 2]

    def test_single(self):
        assert stretch_weights([7]) == [0]

    def test_equal(self):
        assert stretch_weights([3, 3]) == [0, 0]

    def test_fallback_to_lengths(self):
        assert stretch_weights([2, 3]) == [2, 3]
        assert stretch_weights([4, 2, 5]) == [4, 2, 5]

    def test_zero_length_falls_back(self):
        assert stretch_weights([0, 2, 1]) == [0, 2, 1]

    def test_empty(self):
        assert stretch_weights([]) == []

    def test_normalize_runs(self):
        runs = normalize_runs(_runs((F, 1), (S, 2), (F, 3), (S, 4)))
        assert [r.weight for r in runs] == [None, 0, None, 1]
        assert [r.length for r in runs] == [1, 2, 3, 4]

    def test_no_stretch_runs(self):
        runs = normalize_runs(_runs((F, 9)))
        assert runs[0].weight is None

    def test_deterministic_and_idempotent(self):
        runs = _runs((S, 3), (F, 1), (S, 9), (F, 2), (S, 6))
        once = normalize_runs(runs)
        assert normalize_runs(runs) == once
        assert normalize_runs(once) == once
        assert [r.weight for r in once if r.is_stretch] == [0, 2, 1]


# ---------------------------------------------------------------------------
# Classification / content area
# ---------------------------------------------------------------------------
class TestClassify:
    def test_table(self):
        assert classify(F, F) is CellKind.FIXED
        assert classify(S, F) is CellKind.REPEAT_X
        assert classify(F, S) is CellKind.REPEAT_Y
        assert classify(S, S) is CellKind.REPEAT_BOTH


class TestContentPadding:
    def test_three_runs(self):
        assert content_padding(_runs((F, 2), (S, 1), (F, 3))) == (2, 3)

    def test_stretch_only(self):
        assert content_padding(_runs((S, 5))) == (0, 0)

    def test_fixed_first(self):
        assert content_padding(_runs((F, 4), (S, 2))) == (4, 0)

    def test_stretch_first(self):
        assert content_padding(_runs((S, 2), (F, 4))) == (0, 4)

    def test_single_marker_passes(self):
        check_content_marker(Edge.RIGHT, _runs((F, 2), (S, 1), (F, 3)))

    def test_missing_marker(self):
        with pytest.raises(MissingOrMultipleContentMarkerError, match="right") as info:
            check_content_marker(Edge.RIGHT, _runs((F, 6)), "btn")
        assert info.value.edge is Edge.RIGHT
        assert info.value.count == 0

    def test_multiple_markers(self):
        with pytest.raises(MissingOrMultipleContentMarkerError, match="bottom") as info:
            check_content_marker(Edge.BOTTOM, _runs((S, 1), (F, 1), (S, 1)))
        assert info.value.count == 2


# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------
LAYOUTS = [
    ("....#....", "....#...."),
    ("#", "#"),
    ("..##..####..", ".#.##"),
    ("######", "..#"),
    ("#.#.#", "......#"),
]


class TestBuildGrid:
    def test_end_to_end_11x11(self, make_ninepatch):
        img = make_ninepatch()
        edges = decode_edges_of(img)
        grid = build_grid(edges, 11, 11, "btn")

        assert (grid.row_count, grid.column_count) == (3, 3)
        assert len(grid.cells) == 9
        center = grid.cell(1, 1)
        assert center.kind is CellKind.REPEAT_BOTH
        assert center.filler_weight == (0, 0)
        assert (center.x, center.y, center.width, center.height) == (5, 5, 1, 1)
        assert grid.content_area == ContentArea(4, 4, 4, 4)

    def test_cell_kinds(self, make_ninepatch):
        grid = build_grid(decode_edges_of(make_ninepatch()), 11, 11)
        kinds = [c.kind for c in grid.cells]
        assert kinds == [
            CellKind.FIXED, CellKind.REPEAT_X, CellKind.FIXED,
            CellKind.REPEAT_Y, CellKind.REPEAT_BOTH, CellKind.REPEAT_Y,
            CellKind.FIXED, CellKind.REPEAT_X, CellKind.FIXED,
        ]
        assert grid.cell(0, 0).filler_weight == (None, None)
        assert grid.cell(0, 1).filler_weight == (0, None)
        assert grid.cell(1, 0).filler_weight == (None, 0)

    def test_row_major_indices(self, make_ninepatch):
        img = make_ninepatch("..##..####..", ".#.##", right="#####", bottom="#" * 12)
        grid = build_grid(decode_edges_of(img), 14, 7)
        for i, cell in enumerate(grid.cells):
            assert cell.index == i
            assert (cell.row, cell.col) == divmod(i, grid.column_count)

    @pytest.mark.parametrize("top,left", LAYOUTS)
    def test_tiling(self, make_ninepatch, top, left):
        w, h = len(top) + 2, len(left) + 2
        img = make_ninepatch(top, left, right="#" * len(left), bottom="#" * len(top))
        grid = build_grid(decode_edges_of(img), w, h)

        for row in range(grid.row_count):
            cells = [grid.cell(row, col) for col in range(grid.column_count)]
            assert sum(c.width for c in cells) == w - 2
            assert cells[0].x == 1
            for a, b in zip(cells, cells[1:]):
                assert a.x + a.width == b.x
        for col in range(grid.column_count):
            cells = [grid.cell(row, col) for row in range(grid.row_count)]
            assert sum(c.height for c in cells) == h - 2
            assert cells[0].y == 1
            for a, b in zip(cells, cells[1:]):
                assert a.y + a.height == b.y

    def test_weights_follow_ratio(self, make_ninepatch):
        img = make_ninepatch("#..##..####", "...", right="###", bottom="#" * 11)
        grid = build_grid(decode_edges_of(img), 13, 5)
        assert [c.filler_weight[0] for c in grid.cells if c.row == 0] == [0, None, 1, None, 3]

    def test_content_area_partial(self, make_ninepatch):
        img = make_ninepatch(right="..######", bottom="#####...", left="........", top="........")
        grid = build_grid(decode_edges_of(img), 10, 10)
        assert grid.content_area == ContentArea(top=2, bottom=0, left=0, right=3)

    def test_missing_content_marker(self, make_ninepatch):
        img = make_ninepatch(right=".........")
        with pytest.raises(MissingOrMultipleContentMarkerError, match="right.*found 0"):
            build_grid(decode_edges_of(img), 11, 11, "btn")


# ---------------------------------------------------------------------------
# parse / read
# ---------------------------------------------------------------------------
class TestRead:
    def test_read(self, ninepatch_file):
        asset, grid = read(ninepatch_file())
        assert asset.name == "btn"
        assert len(grid.cells) == 9
        assert grid.edges[Edge.RIGHT] == tuple(normalize_runs(_runs((F, 4), (S, 1), (F, 4))))

    def test_fresh_state_per_asset(self, ninepatch_file):
        _, first = read(ninepatch_file("a.9.png"))
        _, second = read(ninepatch_file("b.9.png", top="#........"))
        assert first.column_count == 3
        assert second.column_count == 2

    def test_validation_before_grid(self, ninepatch_file):
        img = Image.new("RGBA", (5, 5), (0, 0, 0, 0))
        img.putpixel((2, 0), (0, 0, 0, 128))
        asset = load_asset(ninepatch_file(image=img))
        with pytest.raises(FormatError):
            parse(asset)

    def test_several_stretch_runs_on_top_and_left(self):
        edges = _edges([(S, 1), (F, 1), (S, 1)], [(S, 1), (F, 1), (S, 1)], [(S, 3)], [(S, 3)])
        grid = build_grid(edges, 5, 5)
        assert len(grid.cells) == 9
        assert grid.content_area == ContentArea(0, 0, 0, 0)
