"""Application configuration loaded from environment variables.

These only provide defaults for the command line; the source file path is
resolved once at startup and handed to the app explicitly.
"""

import os

# Path to the OSM PBF extract served by the API (overridden by --osmfile)
OSM_FILE = os.getenv("OSM_FILE")

# Address the HTTP server binds to
HOST = os.getenv("OSMREST_HOST", "127.0.0.1")
PORT = int(os.getenv("OSMREST_PORT", "8080"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Comma-separated list of origins allowed to call the API from a browser
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
