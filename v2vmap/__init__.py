"""Map viewer with OpenStreetMap road graphs, tile caching and simulated V2V vehicles."""

__version__ = "0.1.0"