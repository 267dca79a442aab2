#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

Drop thumbnails into ``thumbnails/`` and run:

    python main.py my_photo.jpg

Or use the full CLI:

    python -m photomosaic.cli --help
    python -m photomosaic.cli my_photo.jpg -t "pics/**/*.png" -T 24 -a rgb
"""

from photomosaic.cli import app

if __name__ == "__main__":
    app()
