# v2vmap

v2vmap shows a tiled street map, loads a road network from an
OpenStreetMap `.osm` XML file and scatters simulated vehicles along the
roads. Each vehicle has a speed and a radio transmission radius for
vehicle-to-vehicle experiments. It depends only on the standard library.
The window uses tkinter.

## Running the viewer

```
v2vmap
```

Options:

- `--lat`, `--lon` set the initial centre. The default is 47.75, 7.335888.
- `--zoom` sets the initial zoom level, from 0 to 19. The default is 14.
- `--width`, `--height` set the window size. The default is 800×600.
- `--osm PATH` loads an OSM file at start.

Controls:

- Drag with the left mouse button to pan.
- Use the mouse wheel or the `+` / `-` buttons to zoom by one level.
- Double-click to centre on a point and zoom in.
- The folder button opens an `.osm` file.

The file's roads are drawn in red, and 60 vehicles appear as yellow
markers. Vehicles are spread over the edges and reused in turn when there
are fewer edges than vehicles. Hovering a marker shows its id, position,
speed, transmission radius and road type in the status line below the map.

Tiles are fetched from the OpenStreetMap tile server. They are kept in
memory, with the last 100 tiles held, and on disk, capped at 50 MB. The
disk cache goes under `$XDG_CACHE_HOME` or `~/.cache`.

## Using the library

Road networks can be loaded and inspected without the window:

```python
from v2vmap.loader import RoadGraphLoadError, load_from_osm_file

try:
    graph = load_from_osm_file("town.osm")
except RoadGraphLoadError as exc:
    print("could not load:", exc)
else:
    print(len(graph.nodes()), "nodes,", len(graph.edges()), "edges")
    for edge in graph.edges()[:5]:
        print(edge.highway_type, round(edge.length_meters, 1), "m")
```

Loading rules:

- Only drivable highway types are kept, from motorway through service
  roads.
- Two-way roads produce an edge in each direction.
- `oneway=-1` roads keep only the reverse edge.
- Missing or unparsable `maxspeed` tags default to 50 km/h, and `mph`
  values are converted to km/h.
- Edge lengths are haversine distances in metres.
- Malformed XML raises `RoadGraphLoadError`. `load_from_osm_data` does
  the same for bytes or text already in memory.

The other modules can also be used on their own:

- `v2vmap.roadgraph` – `RoadGraph`, `RoadNode` and `RoadEdge`. Nodes and
  edges can be looked up by index or by id.
- `v2vmap.vehicle` – the `Vehicle` record.
- `v2vmap.projection` – Web Mercator conversions between longitude /
  latitude and scene pixels: `lon_lat_to_scene`, `scene_to_lon_lat`,
  `clamp_latitude`, `normalize_longitude` and `tile_key`.
- `v2vmap.tiles` – `TileManager`, memory and disk caches in front of a
  fetch function. Subscribers registered with `subscribe` receive
  `(z, x, y, data)`. The fetch function can be replaced, for example in
  tests.
- `v2vmap.osm_download` – `OSMDownloader.fetch_bounding_box`. It posts an
  Overpass query for the highway ways inside a bounding box, with their
  nodes, and returns the XML. It raises `DownloadError` on failure.
- `v2vmap.mapview` – `MapModel`, the state of the map apart from any
  toolkit. It holds the centre, the zoom, the visible tiles, an optional
  limit region, road segments and vehicle markers.

## What it does not do

- `.osm.pbf` files are not read. They raise `RoadGraphLoadError`.
- Vehicles are placed once when a road graph is loaded. They do not move,
  and no messages between them are simulated.
- The viewer has no button to download an area. To use
  `OSMDownloader`, call it from code and pass its result to
  `load_from_osm_data`.

## Tests

Install the `test` extra and run `pytest` from the project directory.