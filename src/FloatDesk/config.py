"""
Tunable defaults for the overlay window manager.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class OverlayConfig:
    """Geometry, timing and storage-key defaults shared by the overlay components."""
    default_width: int = 400
    default_height: int = 300
    min_width: int = 200
    min_height: int = 150

    # New windows spawn at origin + random(0..jitter) on each axis.
    spawn_origin_x: int = 100
    spawn_origin_y: int = 100
    spawn_jitter_x: int = 300
    spawn_jitter_y: int = 200

    # One visible update per frame while dragging or resizing.
    frame_interval_ms: int = 16

    default_blur_mode: str = "accessible"
    default_auto_hide: bool = False

    layouts_key: str = "layouts"
    license_key: str = "license"
    blur_mode_key: str = "blurMode"
    auto_hide_key: str = "autoHide"
    ai_settings_key: str = "aiSettings"
    domain_rules_key: str = "domainRules"
    todos_key: str = "todos"
    stats_key: str = "stats"


DEFAULT_CONFIG = OverlayConfig()

BLUR_MODES = ("blur", "accessible")
