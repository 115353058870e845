"""Allow running the server as a module.

Usage:
    python -m osmrest --osmfile extract.osm.pbf
"""

import sys

from osmrest.cli import main

if __name__ == "__main__":
    sys.exit(main())
