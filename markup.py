"""
HTML/CSS output for a sliced 9-patch.

The page reproduces the resizable background with a table: one ``<td>`` per
grid cell, each showing its slice through ``background-image`` stretched to
100% of the cell.  Tables have no flex ratios, so stretch columns and rows
are sized by hidden 1px ``<img />`` fillers whose count is the cell's
stretch weight.
"""

from __future__ import annotations

import html
import logging
from typing import List, Optional

from ninepatch import CellKind, GridCell, NinePatchGrid
from slicer import slice_filename

logger = logging.getLogger(__name__)

FILLER = "<img />"
LINE_BREAK = "<br />"

STYLE_BLOCK = (
    "<style>\n"
    ".nine-patch {position:relative;}\n"
    ".nine-patch div {position:absolute; z-index:100; top:0; right:0; bottom:0; left:0; overflow:hidden;}\n"
    ".nine-patch table {position:relative; width:100%; height:100%; padding:0; margin:0; border:0; "
    "border-collapse:collapse;}\n"
    ".nine-patch table tr {padding:0; margin:0; border:0;}\n"
    ".nine-patch table tr td {padding:0; margin:0; border:0; background-position:left top; "
    "background-repeat:repeat; background-size:100% 100%; -moz-background-size: 100% 100%; "
    "-webkit-background-size: 100% 100%; -o-background-size: 100% 100%;}\n"
    ".nine-patch table tr td img {padding:0; margin:0; border:0; width:1px; height:1px; "
    "background:none; visibility:hidden;}\n"
    "</style>\n"
)


def filler_markup(horizontal: Optional[int], vertical: Optional[int]) -> str:
    """Filler markers: *horizontal* side by side, *vertical* stacked with line breaks."""
    horizontal = horizontal or 0
    vertical = vertical or 0
    if not horizontal and not vertical:
        return ""
    return FILLER * max(horizontal, 1) + (LINE_BREAK + FILLER) * max(vertical - 1, 0)


def _cell_fillers(cell: GridCell) -> str:
    # Only the first row sizes the columns and only the first column sizes
    # the rows.
    horizontal, vertical = cell.filler_weight
    return filler_markup(horizontal if cell.row == 0 else None,
                         vertical if cell.col == 0 else None)


def render_cell(cell: GridCell, name: str, images_dir: str = "images") -> str:
    attrs = ""
    if cell.row == 0 and cell.kind in (CellKind.FIXED, CellKind.REPEAT_Y):
        attrs += f" width='{cell.width}px'"
    if cell.col == 0 and cell.kind in (CellKind.FIXED, CellKind.REPEAT_X):
        attrs += f" height='{cell.height}px'"
    url = f"{images_dir}/{slice_filename(name, cell.index)}"
    fillers = "" if cell.kind is CellKind.FIXED else _cell_fillers(cell)
    return f"<td{attrs} style='background-image:url({html.escape(url)});'>{fillers}</td>"


def render_table(grid: NinePatchGrid, name: str, images_dir: str = "images") -> str:
    lines: List[str] = ["\t<table cellpadding='0' cellspacing='0'>"]
    for cell in grid.cells:
        if cell.index % grid.column_count == 0:
            lines.append("\t\t<tr>")
        lines.append("\t\t\t" + render_cell(cell, name, images_dir))
        if (cell.index + 1) % grid.column_count == 0:
            lines.append("\t\t</tr>")
    lines.append("\t</table>")
    return "\n".join(lines) + "\n"


def render_snippet(
    grid: NinePatchGrid,
    name: str,
    width: int,
    height: int,
    element_id: str = "",
    class_name: str = "",
    images_dir: str = "images",
) -> str:
    """The container div to paste into a page: content overlay plus table."""
    ca = grid.content_area
    classes = " ".join(c for c in ("nine-patch", class_name) if c)
    id_attr = f" id='{html.escape(element_id)}'" if element_id else ""
    return (
        f"<div{id_attr} class='{html.escape(classes)}' style='width:{width}px; height:{height}px;'>\n"
        f"\t<div style='top:{ca.top}px; bottom:{ca.bottom}px; left:{ca.left}px; right:{ca.right}px;'>\n"
        "\t\tEntry Content\n"
        "\t</div>\n"
        "\n"
        + render_table(grid, name, images_dir)
        + "</div>\n"
    )


def render_document(
    grid: NinePatchGrid,
    name: str,
    source_filename: str,
    source_directory: str,
    width: int,
    height: int,
    element_id: str = "",
    class_name: str = "",
    images_dir: str = "images",
) -> str:
    """A standalone page with setup instructions, a live demo and copyable code."""
    snippet = render_snippet(grid, name, width, height, element_id, class_name, images_dir)
    images_path = f"{source_directory}/{images_dir}"
    return (
        "<html>\n"
        "<head>\n"
        + STYLE_BLOCK
        + "</head>\n"
        "<body>\n"
        f"<h4>Step1: Copy {html.escape(images_path)}/* images to HTTP server {html.escape(images_dir)} directory.</h4>\n"
        "<h4>Step2: Copy CSS code to head tag.</h4>\n"
        "<textarea rows='10' cols='60'>\n"
        + html.escape(STYLE_BLOCK)
        + "</textarea>\n"
        f"<h2>{html.escape(source_filename)}</h2>\n"
        f"<img src='./{html.escape(source_filename)}' />\n"
        + snippet
        + "<h4>Copy this HTML code</h4>\n"
        "<textarea rows='10' cols='60'>\n"
        + html.escape(snippet)
        + "</textarea>\n"
        "</body>\n"
        "</html>\n"
    )


def write_document(text: str, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    logger.info("Wrote %s", path)
