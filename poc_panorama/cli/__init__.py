"""CLI module for panorama preparation tools.

Provides the `pano` command-line interface for inspecting camera presets and
source image stacks.
"""

from poc_panorama.cli.main import app

__all__ = ["app"]
