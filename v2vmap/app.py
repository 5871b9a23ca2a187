"""Desktop window showing the map, roads and vehicles."""

from __future__ import annotations

import argparse
import base64
import logging
from typing import TYPE_CHECKING

from .loader import RoadGraphLoadError
from .mapview import MAX_ZOOM, MIN_ZOOM, MapModel
from .tiles import TileManager

if TYPE_CHECKING:
    import tkinter

logger = logging.getLogger(__name__)

START_LAT = 47.75
START_LON = 7.335888
START_ZOOM = 14
WINDOW_WIDTH = 800
WINDOW_HEIGHT = 600
BUTTON_MARGIN = 12
BUTTON_SIZE = 28
BUTTON_GAP = 6
PLACEHOLDER_COLOR = "#ebebeb"
VEHICLE_FILL = "#ffd700"


def _zoom_level(text: str) -> int:
    try:
        value = int(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid zoom level: {text!r}") from exc
    if not MIN_ZOOM <= value <= MAX_ZOOM:
        raise argparse.ArgumentTypeError(f"zoom must be between {MIN_ZOOM} and {MAX_ZOOM}")
    return value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse the command line."""
    parser = argparse.ArgumentParser(prog="v2vmap", description="Show roads and vehicles on a map.")
    parser.add_argument("--lat", type=float, default=START_LAT, help="initial center latitude")
    parser.add_argument("--lon", type=float, default=START_LON, help="initial center longitude")
    parser.add_argument("--zoom", type=_zoom_level, default=START_ZOOM, help="initial zoom level")
    parser.add_argument("--width", type=int, default=WINDOW_WIDTH, help="window width")
    parser.add_argument("--height", type=int, default=WINDOW_HEIGHT, help="window height")
    parser.add_argument("--osm", default=None, help="OSM file to load at start")
    return parser.parse_args(argv)


def zoom_button_positions(
    width: int, margin: int = BUTTON_MARGIN, size: int = BUTTON_SIZE, gap: int = BUTTON_GAP
) -> list[tuple[int, int]]:
    """Top-left corners of the zoom-in, zoom-out and load buttons."""
    x = width - size - margin
    return [(x, margin + i * (size + gap)) for i in range(3)]


class MapWindow:
    """A canvas drawing a MapModel, with zoom and file controls."""

    def __init__(self, root: tkinter.Misc, model: MapModel) -> None:
        import tkinter as tk

        self._tk = tk
        self.root = root
        self.model = model
        self.canvas = tk.Canvas(root, background=PLACEHOLDER_COLOR, highlightthickness=0)
        self.canvas.pack(fill="both", expand=True)
        self._status = tk.Label(root, anchor="w", justify="left")
        self._status.pack(fill="x")
        self._images: list[tkinter.PhotoImage] = []
        self._drag_start: tuple[int, int] | None = None
        self._drag_last: tuple[int, int] | None = None

        self._zoom_in_button = tk.Button(
            self.canvas, text="+", command=lambda: self._zoom_to(model.zoom + 1)
        )
        self._zoom_out_button = tk.Button(
            self.canvas, text="-", command=lambda: self._zoom_to(model.zoom - 1)
        )
        self._load_button = tk.Button(self.canvas, text="📁", command=self.load_osm)

        self.canvas.bind("<Configure>", self._on_configure)
        self.canvas.bind("<ButtonPress-1>", self._on_press)
        self.canvas.bind("<B1-Motion>", self._on_motion)
        self.canvas.bind("<ButtonRelease-1>", self._on_release)
        self.canvas.bind("<Double-Button-1>", self._on_double_click)
        self.canvas.bind("<MouseWheel>", lambda e: self._on_wheel(e, e.delta > 0))
        self.canvas.bind("<Button-4>", lambda e: self._on_wheel(e, True))
        self.canvas.bind("<Button-5>", lambda e: self._on_wheel(e, False))
        self._place_buttons(model.viewport_size[0])
        self.redraw()

    def _place_buttons(self, width: int) -> None:
        buttons = (self._zoom_in_button, self._zoom_out_button, self._load_button)
        for button, (x, y) in zip(buttons, zoom_button_positions(width)):
            button.place(x=x, y=y, width=BUTTON_SIZE, height=BUTTON_SIZE)

    def _origin(self) -> tuple[float, float]:
        cx, cy = self.model.center_scene()
        width, height = self.model.viewport_size
        return cx - width / 2.0, cy - height / 2.0

    def _to_scene(self, x: float, y: float) -> tuple[float, float]:
        ox, oy = self._origin()
        return ox + x, oy + y

    def _photo(self, data: bytes | None) -> tkinter.PhotoImage | None:
        if not data:
            return None
        try:
            return self._tk.PhotoImage(data=base64.b64encode(data))
        except self._tk.TclError:
            return None

    def redraw(self) -> None:
        """Draw tiles, roads and vehicles for the current model state."""
        canvas = self.canvas
        canvas.delete("all")
        self._images.clear()
        ox, oy = self._origin()
        size = self.model.tile_size
        for info in self.model.tiles.values():
            x, y = info.x - ox, info.y - oy
            image = self._photo(info.data)
            if image is None:
                canvas.create_rectangle(x, y, x + size, y + size, fill=PLACEHOLDER_COLOR, outline="")
            else:
                canvas.create_image(x, y, image=image, anchor="nw")
                self._images.append(image)
        for segment in self.model.road_segments():
            canvas.create_line(
                segment.x1 - ox, segment.y1 - oy, segment.x2 - ox, segment.y2 - oy,
                fill="red", width=1.5,
            )
        for marker in self.model.vehicle_markers():
            x, y, r = marker.x - ox, marker.y - oy, marker.radius
            item = canvas.create_oval(x - r, y - r, x + r, y + r, fill=VEHICLE_FILL, outline="black")
            canvas.tag_bind(item, "<Enter>", lambda _e, text=marker.tooltip: self._status.config(text=text))
            canvas.tag_bind(item, "<Leave>", lambda _e: self._status.config(text=""))
        self._zoom_in_button.config(state="normal" if self.model.can_zoom_in() else "disabled")
        self._zoom_out_button.config(state="normal" if self.model.can_zoom_out() else "disabled")

    def _zoom_to(self, zoom: int) -> None:
        self.model.zoom_to_level(min(MAX_ZOOM, max(MIN_ZOOM, zoom)))
        self.redraw()

    def _on_configure(self, event: tkinter.Event) -> None:
        self.model.resize(event.width, event.height)
        self._place_buttons(event.width)
        self.redraw()

    def _on_press(self, event: tkinter.Event) -> None:
        self._drag_start = self._drag_last = (event.x, event.y)
        self.canvas.config(cursor="fleur")

    def _on_motion(self, event: tkinter.Event) -> None:
        if self._drag_last is None:
            return
        lx, ly = self._drag_last
        self.canvas.move("all", event.x - lx, event.y - ly)
        self._drag_last = (event.x, event.y)

    def _on_release(self, event: tkinter.Event) -> None:
        self.canvas.config(cursor="")
        if self._drag_start is None:
            return
        sx, sy = self._drag_start
        self._drag_start = self._drag_last = None
        self.model.pan_by(event.x - sx, event.y - sy)
        self.redraw()

    def _on_double_click(self, event: tkinter.Event) -> None:
        if self.model.zoom_in_on(*self._to_scene(event.x, event.y)):
            self.redraw()

    def _on_wheel(self, event: tkinter.Event, zoom_in: bool) -> None:
        sx, sy = self._to_scene(event.x, event.y)
        if self.model.zoom_at(sx, sy, zoom_in):
            self.redraw()

    def _load_path(self, path: str) -> None:
        try:
            graph = self.model.load_road_graph_from_file(path)
        except RoadGraphLoadError as exc:
            logger.warning("failed to load road graph: %s", exc)
            return
        logger.info(
            "road graph loaded: %d nodes, %d edges", len(graph.nodes()), len(graph.edges())
        )
        self.redraw()

    def load_osm(self) -> None:
        """Ask for an OSM file and load it as the road graph."""
        from tkinter import filedialog

        path = filedialog.askopenfilename(
            parent=self.root,
            title="Ouvrir un fichier OSM",
            filetypes=[("Fichiers OSM", "*.osm *.osm.pbf"), ("Tous les fichiers", "*.*")],
        )
        if path:
            self._load_path(path)


def main(argv: list[str] | None = None) -> int:
    """Open the map window."""
    args = parse_args(argv)
    import tkinter as tk

    logging.basicConfig(level=logging.INFO)
    root = tk.Tk()
    root.title("v2v map")
    root.geometry(f"{args.width}x{args.height}")
    model = MapModel(TileManager(), args.width, args.height)
    window = MapWindow(root, model)

    def start() -> None:
        model.set_center_lat_lon(args.lat, args.lon, args.zoom)
        window.redraw()
        if args.osm:
            window._load_path(args.osm)

    root.after(0, start)
    root.mainloop()
    return 0