[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "v2vmap"
version = "0.1.0"
description = "Slippy-map viewer that loads OpenStreetMap road networks and places simulated V2V vehicles on them"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "openstreetmap",
    "osm",
    "road-graph",
    "map-tiles",
    "web-mercator",
    "overpass",
    "v2v",
    "vehicle-simulation",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: X11 Applications",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: GIS",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
v2vmap = "v2vmap.app:main"

[tool.hatch.build.targets.wheel]
packages = ["v2vmap"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
