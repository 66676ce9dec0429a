"""
Text -> sparse 3D point cloud.

The phrase is drawn white-on-black with OpenCV, sampled on a grid, jittered
to hide the grid, then mapped into world space:
  x in [-10, 10], y in [-10, 10] * (height / width), z in [-0.1, 0.1]

GlyphCache keeps one read-only cloud per phrase key. Clouds can be built
eagerly, lazily on first use, or on a background thread.
"""
from __future__ import annotations

import logging
import threading

import cv2
import numpy as np

from params import pget

log = logging.getLogger(__name__)

FONT = cv2.FONT_HERSHEY_DUPLEX
WORLD_HALF = 10.0
DEPTH_JITTER = 0.1
JITTER_FRAC = 0.15
BRIGHT_THRESH = 127
MAX_TEXT_WIDTH = 0.9


def _fit_font(text, width, font_px):
    (_, base_h), _ = cv2.getTextSize(text, FONT, 1.0, 1)
    scale = font_px / max(base_h, 1)
    thickness = max(1, int(round(scale * 2.0)))
    (tw, th), _ = cv2.getTextSize(text, FONT, scale, thickness)

    # Long phrases shrink to fit the canvas
    if tw > width * MAX_TEXT_WIDTH:
        scale *= (width * MAX_TEXT_WIDTH) / tw
        thickness = max(1, int(round(scale * 2.0)))
        (tw, th), _ = cv2.getTextSize(text, FONT, scale, thickness)
    return scale, thickness, tw, th


def rasterize_text(text: str, width: int, height: int, font_px: int = 120) -> np.ndarray:
    """Bold, centered white text on a black (height, width) uint8 canvas."""
    img = np.zeros((height, width), dtype=np.uint8)
    if not text or not text.strip():
        return img
    scale, thickness, tw, th = _fit_font(text, width, font_px)
    org = ((width - tw) // 2, (height + th) // 2)
    cv2.putText(img, text, org, FONT, scale, 255, thickness, cv2.LINE_AA)
    return img


def generate_text_points(text: str, width: int, height: int, density: int = 6,
                         rng=None, font_px: int = 120) -> np.ndarray:
    """
    Sample the rasterized text every `density` pixels.

    Returns a read-only (M, 3) float32 array in scan (row-major) order.
    M depends on the glyph coverage; callers must not assume M == particle count.
    """
    width = int(width)
    height = int(height)
    density = int(density)
    if width <= 0 or height <= 0:
        raise ValueError(f"canvas must be positive, got {width}x{height}")
    if density < 1:
        raise ValueError(f"density must be >= 1, got {density}")
    if rng is None:
        rng = np.random.default_rng()

    img = rasterize_text(text, width, height, font_px=font_px)
    rows, cols = np.nonzero(img[::density, ::density] > BRIGHT_THRESH)
    n = len(rows)

    amp = JITTER_FRAC * density
    px = cols.astype(np.float32) * density + rng.uniform(-amp, amp, n).astype(np.float32)
    py = rows.astype(np.float32) * density + rng.uniform(-amp, amp, n).astype(np.float32)
    np.clip(px, 0.0, width, out=px)
    np.clip(py, 0.0, height, out=py)

    pts = np.empty((n, 3), dtype=np.float32)
    pts[:, 0] = (px / width - 0.5) * (2.0 * WORLD_HALF)
    pts[:, 1] = -(py / height - 0.5) * (2.0 * WORLD_HALF) * (height / width)
    pts[:, 2] = rng.uniform(-DEPTH_JITTER, DEPTH_JITTER, n)

    pts.setflags(write=False)
    log.debug("glyph cloud %r: %d points (density=%d)", text, n, density)
    return pts


class GlyphCache:
    """
    Phrase key -> point cloud.

    get() never raises: a phrase that is unknown, failed, or still building
    on the background thread returns None and the caller falls back to the
    ambient sphere.
    """

    def __init__(self, params=None, rng=None, lazy: bool = True):
        self.phrases = dict(pget(params, "phrases", {}) or {})
        self.width = int(pget(params, "glyph_width", 1024))
        self.height = int(pget(params, "glyph_height", 512))
        self.density = int(pget(params, "glyph_density", 6))
        self.font_px = int(pget(params, "glyph_font_px", 120))
        self.lazy = bool(lazy)
        self.rng = rng if rng is not None else np.random.default_rng()

        self._clouds = {}
        self._failed = set()
        self._reported = set()
        self._lock = threading.Lock()
        self._thread = None

    # ---------- building ----------
    def build(self, keys=None):
        """Generate every requested phrase that is not cached yet."""
        for key in (self.phrases if keys is None else keys):
            self._build_one(key)

    def start(self):
        """Build all phrases on a daemon thread. Disables lazy building."""
        if self._thread and self._thread.is_alive():
            return
        # rng is not thread-safe; only the worker generates from now on
        self.lazy = False
        self._thread = threading.Thread(target=self.build, daemon=True)
        self._thread.start()

    def join(self, timeout=None):
        if self._thread:
            self._thread.join(timeout=timeout)

    def _build_one(self, key):
        with self._lock:
            if key in self._clouds or key in self._failed:
                return self._clouds.get(key)
            text = self.phrases.get(key)
        if text is None:
            with self._lock:
                self._failed.add(key)
            log.warning("no phrase configured for %r", key)
            return None

        try:
            cloud = generate_text_points(text, self.width, self.height, self.density,
                                         rng=self.rng, font_px=self.font_px)
        except (ValueError, cv2.error):
            log.exception("glyph generation failed for %r", key)
            with self._lock:
                self._failed.add(key)
            return None

        with self._lock:
            self._clouds.setdefault(key, cloud)
            return self._clouds[key]

    # ---------- lookup ----------
    def ready(self, key) -> bool:
        with self._lock:
            return key in self._clouds

    def get(self, key):
        with self._lock:
            cloud = self._clouds.get(key)
            failed = key in self._failed
        if cloud is None and self.lazy and not failed:
            cloud = self._build_one(key)

        if cloud is None or len(cloud) == 0:
            if key not in self._reported:
                self._reported.add(key)
                log.warning("glyph cloud %r not available, staying in ambient mode", key)
            return None
        return cloud

    def put(self, key, cloud):
        """Publish an externally generated cloud (read-only copy)."""
        arr = np.array(cloud, dtype=np.float32).reshape(-1, 3)
        arr.setflags(write=False)
        with self._lock:
            self._clouds[key] = arr
            self._failed.discard(key)
        self._reported.discard(key)
