"""
Configuration & Path Management
===============================
This module serves as the central registry for file paths and the tuning
constants of the map viewport.

Why is this file needed?
------------------------
1. Abstraction: It prevents hardcoded paths and magic numbers (zoom bounds,
   tap threshold, drift frequencies...) scattered throughout the code.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find assets (the default bubble network) when the app is frozen.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    DEFAULT_BUBBLES_PATH (str): Absolute path to the bundled bubble network.
    ViewportConfig: Frozen dataclass with every viewport constant.
    DEFAULT_CONFIG (ViewportConfig): The shared default instance.
"""
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # config.py is in src/bubblemap/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


@dataclass(frozen=True)
class ViewportConfig:
    """Tuning constants for the 2D map viewport."""
    # fit to content
    fit_margin: float = 0.42
    fit_min_scale: float = 10.0
    fit_max_scale: float = 46.0
    min_scale_factor: float = 0.6
    max_scale_factor: float = 2.6
    min_range: float = 1.0

    # scale bounds before the first fit
    initial_min_scale: float = 8.0
    initial_max_scale: float = 64.0

    # gestures
    tap_threshold_px: float = 4.0
    wheel_sensitivity: float = 0.001

    # hit testing
    selection_radius_px: float = 28.0

    # drift animation
    drift_freq_x: float = 0.6
    drift_freq_y: float = 0.65
    drift_phase_y: float = 1.2
    drift_min: float = 0.25
    drift_spread: float = 0.2
    phase_step: float = 0.3

    # drawing
    grid_step_px: float = 80.0
    node_radius_px: float = 11.0
    focused_radius_px: float = 15.0
    glow_lightness: float = 0.16
    max_tag_preview: int = 2
    # nodes and links outside the focused bubble's relations
    dimmed_node_opacity: float = 0.3
    dimmed_link_opacity: float = 0.25

    # frame scheduling (ms)
    frame_interval_ms: int = 16


DEFAULT_CONFIG = ViewportConfig()

ASSETS_PATH: str = get_resource_path("assets")
DEFAULT_BUBBLES_PATH: str = os.path.join(ASSETS_PATH, "bubbles_default.json")

if not os.path.exists(ASSETS_PATH):
    logger.warning(f"Assets path not found at {ASSETS_PATH}")
