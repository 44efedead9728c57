"""Defaults for the viewer. Every value can be overridden from the environment."""
import os
from pathlib import Path

_DEFAULT_CATALOG = Path(__file__).resolve().parent.parent / "data" / "STARS.DAT"

CATALOG_PATH = Path(os.environ.get("STARFIELD_CATALOG", _DEFAULT_CATALOG))
LOG_LEVEL = os.environ.get("STARFIELD_LOG_LEVEL", "INFO").upper()

# -- Start-up view --
DEFAULT_RA = float(os.environ.get("STARFIELD_RA", 300.0))
DEFAULT_DEC = float(os.environ.get("STARFIELD_DEC", 40.0))
DEFAULT_FOV = float(os.environ.get("STARFIELD_FOV", 60.0))
DEFAULT_MAG = float(os.environ.get("STARFIELD_MAG", 6.5))
DEFAULT_ROTATION = float(os.environ.get("STARFIELD_ROTATION", 0.0))

# -- Viewport --
DEFAULT_WIDTH = int(os.environ.get("STARFIELD_WIDTH", 640))
DEFAULT_HEIGHT = int(os.environ.get("STARFIELD_HEIGHT", 480))
