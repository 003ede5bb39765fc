"""
Tkinter-based 9-Patch inspector.

Layout
------
+-------------------------------+------------------+
|  Source image with decoded    |  Cells / HTML     |
|  column and row guides        |  preview          |
+-------------------------------+------------------+
|  Status                                           |
+-------------------------------+------------------+
"""

from __future__ import annotations

import os
import tkinter as tk
from tkinter import filedialog, messagebox, ttk
from typing import List, Optional, Tuple

from PIL import Image, ImageTk

import converter
import markup
import ninepatch
import slicer
from ninepatch import CellKind, NinePatchAsset, NinePatchError, NinePatchGrid


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
GUIDE_COLOR = "#ff3333"
CONTENT_COLOR = "#33aaff"
GUIDE_WIDTH = 1
CANVAS_BG = "#2b2b2b"
PREVIEW_BG = "#1e1e1e"
PREVIEW_GAP = 4          # pixels between preview cells

CELL_COLORS = {
    CellKind.FIXED: "#555555",
    CellKind.REPEAT_X: "#d7ba7d",
    CellKind.REPEAT_Y: "#4ec9b0",
    CellKind.REPEAT_BOTH: "#c586c0",
}


class App(tk.Tk):
    """Main application window."""

    def __init__(self) -> None:
        super().__init__()
        self.title("9-Patch to HTML")
        self.configure(bg="#333")
        self.minsize(960, 600)

        # State -----------------------------------------------------------
        self._asset: Optional[NinePatchAsset] = None
        self._grid: Optional[NinePatchGrid] = None
        self._tk_img: Optional[ImageTk.PhotoImage] = None
        self._pv_imgs: List[ImageTk.PhotoImage] = []
        self._zoom: float = 1.0
        self._pan_offset: Tuple[float, float] = (0.0, 0.0)
        self._pan_start: Optional[Tuple[int, int]] = None

        self._build_ui()
        self._bind_keys()

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------
    def _build_ui(self) -> None:
        toolbar = ttk.Frame(self)
        toolbar.pack(fill=tk.X, padx=4, pady=(4, 0))

        ttk.Button(toolbar, text="Load 9-Patch…", command=self._load_image).pack(side=tk.LEFT, padx=2)
        ttk.Separator(toolbar, orient=tk.VERTICAL).pack(side=tk.LEFT, fill=tk.Y, padx=6)

        self._flatten = tk.BooleanVar(value=False)
        ttk.Checkbutton(toolbar, text="Flatten on white", variable=self._flatten,
                        command=self._redraw_preview).pack(side=tk.LEFT, padx=4)
        ttk.Button(toolbar, text="Convert", command=self._convert).pack(side=tk.LEFT, padx=2)

        main = ttk.PanedWindow(self, orient=tk.HORIZONTAL)
        main.pack(fill=tk.BOTH, expand=True, padx=4, pady=4)

        self._canvas = tk.Canvas(main, bg=CANVAS_BG, highlightthickness=0)
        main.add(self._canvas, weight=3)

        right_frame = ttk.Frame(main)
        main.add(right_frame, weight=2)

        preview_bar = ttk.Frame(right_frame)
        preview_bar.pack(side=tk.TOP, fill=tk.X, pady=(4, 2))

        self._preview_mode = tk.StringVar(value="Cells")
        for mode in ("Cells", "HTML"):
            ttk.Radiobutton(preview_bar, text=mode, variable=self._preview_mode,
                            value=mode, command=self._on_mode_change).pack(side=tk.LEFT, padx=4)

        self._res_var = tk.StringVar(value="")
        ttk.Label(preview_bar, textvariable=self._res_var,
                  font=("TkDefaultFont", 10, "bold")).pack(side=tk.RIGHT, padx=8)

        self._preview = tk.Canvas(right_frame, bg=PREVIEW_BG, highlightthickness=0)

        self._html_frame = ttk.Frame(right_frame)
        self._html_text = tk.Text(self._html_frame, bg=PREVIEW_BG, fg="#cccccc",
                                  font=("Consolas", 11), wrap=tk.NONE,
                                  insertbackground="#cccccc", borderwidth=0,
                                  highlightthickness=0, padx=12, pady=8,
                                  state=tk.DISABLED)
        scroll_y = ttk.Scrollbar(self._html_frame, orient=tk.VERTICAL, command=self._html_text.yview)
        scroll_x = ttk.Scrollbar(self._html_frame, orient=tk.HORIZONTAL, command=self._html_text.xview)
        self._html_text.configure(yscrollcommand=scroll_y.set, xscrollcommand=scroll_x.set)
        scroll_y.pack(side=tk.RIGHT, fill=tk.Y)
        scroll_x.pack(side=tk.BOTTOM, fill=tk.X)
        self._html_text.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)

        self._preview.pack(fill=tk.BOTH, expand=True)

        status_bar = ttk.Frame(self)
        status_bar.pack(fill=tk.X, padx=4, pady=(0, 4))
        self._status_var = tk.StringVar(value="Load a .9.png to begin.")
        ttk.Label(status_bar, textvariable=self._status_var).pack(side=tk.LEFT, padx=4)

        self._canvas.bind("<Configure>", lambda _: self._redraw())
        self._canvas.bind("<MouseWheel>", self._on_scroll)
        self._canvas.bind("<ButtonPress-1>", self._on_pan_start)
        self._canvas.bind("<B1-Motion>", self._on_pan_move)
        self._preview.bind("<Configure>", lambda _: self._redraw_preview())

    def _bind_keys(self) -> None:
        self.bind("<Control-o>", lambda _: self._load_image())
        self.bind("<Control-s>", lambda _: self._convert())

    # ------------------------------------------------------------------
    # Loading / converting
    # ------------------------------------------------------------------
    def _load_image(self) -> None:
        path = filedialog.askopenfilename(
            filetypes=[("9-Patch PNG", "*.9.png"), ("All files", "*.*")]
        )
        if not path:
            return
        try:
            asset, grid = ninepatch.read(path)
        except NinePatchError as e:
            messagebox.showerror("Not a valid 9-patch", str(e))
            return

        self._asset, self._grid = asset, grid
        self._fit_zoom()
        self._redraw()
        self._redraw_preview()
        ca = grid.content_area
        self._status_var.set(
            f"{asset.filename}  |  {asset.width}×{asset.height}, "
            f"{grid.column_count}×{grid.row_count} cells, "
            f"content padding {ca.top}/{ca.right}/{ca.bottom}/{ca.left}"
        )

    def _options(self) -> converter.ConvertOptions:
        return converter.ConvertOptions(flatten=self._flatten.get())

    def _convert(self) -> None:
        if self._asset is None:
            messagebox.showwarning("No image", "Load a 9-patch first.")
            return
        try:
            result = converter.convert(self._asset.path, self._options())
        except NinePatchError as e:
            messagebox.showerror("Conversion failed", str(e))
            return
        self._status_var.set(
            f"Saved {len(result.slices)} slices + {os.path.basename(result.document_path)}"
        )

    # ------------------------------------------------------------------
    # Coordinate helpers
    # ------------------------------------------------------------------
    def _fit_zoom(self) -> None:
        """Set zoom so the image fits the canvas with some padding."""
        if self._asset is None:
            return
        cw = self._canvas.winfo_width() or 600
        ch = self._canvas.winfo_height() or 400
        pad = 40
        zx = (cw - pad) / self._asset.width
        zy = (ch - pad) / self._asset.height
        self._zoom = min(zx, zy, 16.0)
        self._pan_offset = (
            (cw - self._asset.width * self._zoom) / 2,
            (ch - self._asset.height * self._zoom) / 2,
        )

    def _img_to_canvas(self, ix: float, iy: float) -> Tuple[float, float]:
        ox, oy = self._pan_offset
        return ix * self._zoom + ox, iy * self._zoom + oy

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------
    def _redraw(self) -> None:
        c = self._canvas
        c.delete("all")
        if self._asset is None or self._grid is None:
            return

        img = self._asset.image
        z = self._zoom
        # Render image at current zoom
        display = img.resize((max(1, int(img.width * z)), max(1, int(img.height * z))), Image.NEAREST)
        self._tk_img = ImageTk.PhotoImage(display)
        ox, oy = self._pan_offset
        c.create_image(ox, oy, anchor=tk.NW, image=self._tk_img)

        w, h = img.width, img.height
        # Column boundaries
        for run in self._grid.columns[1:]:
            x0, y0 = self._img_to_canvas(1 + run.start, 1)
            x1, y1 = self._img_to_canvas(1 + run.start, h - 1)
            c.create_line(x0, y0, x1, y1, fill=GUIDE_COLOR, width=GUIDE_WIDTH, dash=(4, 4))
        # Row boundaries
        for run in self._grid.rows[1:]:
            x0, y0 = self._img_to_canvas(1, 1 + run.start)
            x1, y1 = self._img_to_canvas(w - 1, 1 + run.start)
            c.create_line(x0, y0, x1, y1, fill=GUIDE_COLOR, width=GUIDE_WIDTH, dash=(4, 4))

        ca = self._grid.content_area
        x0, y0 = self._img_to_canvas(1 + ca.left, 1 + ca.top)
        x1, y1 = self._img_to_canvas(w - 1 - ca.right, h - 1 - ca.bottom)
        c.create_rectangle(x0, y0, x1, y1, outline=CONTENT_COLOR, width=2)

    def _redraw_preview(self) -> None:
        self._preview.delete("all")
        self._pv_imgs = []
        if self._asset is None or self._grid is None:
            self._res_var.set("")
            return
        if self._preview_mode.get() == "HTML":
            self._preview_html()
        else:
            self._preview_cells()

    def _preview_cells(self) -> None:
        pv = self._preview
        grid = self._grid
        slices = slicer.slice_image(self._asset, grid, flatten=self._flatten.get())
        pw = pv.winfo_width() or 300
        ph = pv.winfo_height() or 300

        col_widths = [run.length for run in grid.columns]
        row_heights = [run.length for run in grid.rows]
        self._res_var.set(f"Interior: {sum(col_widths)} x {sum(row_heights)} px")

        gap = PREVIEW_GAP
        avail_w = pw - gap * (len(col_widths) + 1)
        avail_h = ph - gap * (len(row_heights) + 1)
        scale = min(avail_w / sum(col_widths), avail_h / sum(row_heights), 16.0)
        if scale <= 0:
            scale = 1

        grid_w = sum(max(1, int(cw * scale)) for cw in col_widths) + gap * (len(col_widths) - 1)
        grid_h = sum(max(1, int(rh * scale)) for rh in row_heights) + gap * (len(row_heights) - 1)
        start_x = (pw - grid_w) // 2
        y = (ph - grid_h) // 2

        for row in range(grid.row_count):
            x = start_x
            rh = max(1, int(row_heights[row] * scale))
            for col in range(grid.column_count):
                cell = grid.cell(row, col)
                cw_px = max(1, int(col_widths[col] * scale))
                resized = slices[cell.index].resize((cw_px, rh), Image.NEAREST)
                tki = ImageTk.PhotoImage(resized)
                self._pv_imgs.append(tki)
                pv.create_image(x, y, anchor=tk.NW, image=tki)
                pv.create_rectangle(x, y, x + cw_px, y + rh, outline=CELL_COLORS[cell.kind], width=2)
                x += cw_px + gap
            y += rh + gap

    def _preview_html(self) -> None:
        opts = self._options()
        width, height = opts.demo_size(self._grid)
        text = markup.render_snippet(self._grid, self._asset.name, width, height,
                                     element_id=self._asset.name, images_dir=opts.images_dir)
        self._res_var.set(f"Demo: {width} x {height} px")

        tw = self._html_text
        tw.config(state=tk.NORMAL)
        tw.delete("1.0", tk.END)
        tw.insert("1.0", text)
        tw.config(state=tk.DISABLED)

    def _on_mode_change(self) -> None:
        if self._preview_mode.get() == "HTML":
            self._preview.pack_forget()
            self._html_frame.pack(fill=tk.BOTH, expand=True)
        else:
            self._html_frame.pack_forget()
            self._preview.pack(fill=tk.BOTH, expand=True)
        self._redraw_preview()

    # ------------------------------------------------------------------
    # Zoom / Pan
    # ------------------------------------------------------------------
    def _on_scroll(self, event: tk.Event) -> None:
        if self._asset is None:
            return
        # Zoom towards cursor
        old_z = self._zoom
        factor = 1.1 if event.delta > 0 else 1 / 1.1
        self._zoom = max(0.5, min(self._zoom * factor, 64.0))

        cx, cy = event.x, event.y
        ox, oy = self._pan_offset
        ratio = self._zoom / old_z
        self._pan_offset = (
            cx - (cx - ox) * ratio,
            cy - (cy - oy) * ratio,
        )
        self._redraw()

    def _on_pan_start(self, event: tk.Event) -> None:
        if self._asset is None:
            self._load_image()
            return
        self._pan_start = (event.x, event.y)

    def _on_pan_move(self, event: tk.Event) -> None:
        if self._pan_start is None:
            return
        dx = event.x - self._pan_start[0]
        dy = event.y - self._pan_start[1]
        ox, oy = self._pan_offset
        self._pan_offset = (ox + dx, oy + dy)
        self._pan_start = (event.x, event.y)
        self._redraw()
