"""Read-only HTTP/JSON interface over an OSM PBF extract."""

__version__ = "0.1.0"
