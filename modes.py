from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from gestures import Gesture, classify
from landmarks import (
    as_hand,
    hand_centroid,
    openness_ratio,
    select_hands,
    to_world,
    viewport_size,
)
from params import pget

WHITE_CUTOFF = 0.95


class VisualMode(Enum):
    IDLE = "idle"
    INTERACTIVE = "interactive"
    TEXT = "text"


def hex_to_rgb(value) -> tuple[float, float, float]:
    """'#RRGGBB' / 'RGB' / (r, g, b) in 0..1 -> (r, g, b) floats in 0..1."""
    if isinstance(value, str):
        s = value.strip().lstrip("#")
        if len(s) == 3:
            s = "".join(c * 2 for c in s)
        if len(s) != 6:
            raise ValueError(f"bad hex color: {value!r}")
        return tuple(int(s[i:i + 2], 16) / 255.0 for i in (0, 2, 4))
    r, g, b = (float(c) for c in value)
    return (min(max(r, 0.0), 1.0), min(max(g, 0.0), 1.0), min(max(b, 0.0), 1.0))


def is_white(color) -> bool:
    return all(c > WHITE_CUTOFF for c in color)


@dataclass
class Resolution:
    """Everything the integrator needs to know about this frame's hands."""
    mode: VisualMode
    target_color: tuple[float, float, float]
    phrase: Optional[str] = None
    cloud: Optional[np.ndarray] = None
    holding: bool = False
    diffusion: float = 1.0
    rotation_speed: float = 0.0
    spin_rate: float = 0.0          # yaw rad/s; 0 outside single-hand interaction
    hand_center: Optional[tuple[float, float]] = None
    gestures: tuple = field(default_factory=tuple)


class ModeResolver:
    """
    Maps the visible hands to a visual mode.

      0 hands                 -> IDLE, base color
      1 hand, FIVE            -> TEXT (one-hand phrase)
      1 hand, otherwise       -> INTERACTIVE, openness drives diffusion/spin
      2+ hands, matched pair  -> TEXT (pair phrase)
      2+ hands, otherwise     -> INTERACTIVE, hand distance picks the color

    With more than two hands only the two largest palms count.
    A phrase whose cloud is not ready falls back to INTERACTIVE.
    """

    def __init__(self, params=None, glyphs=None):
        self.params = params
        self.glyphs = glyphs
        self.viewport = viewport_size(
            float(pget(params, "camera_fov_deg", 60.0)),
            float(pget(params, "camera_distance", 15.0)),
            float(pget(params, "aspect", 16.0 / 9.0)),
        )
        self.base_color = hex_to_rgb(pget(params, "base_color", "#00FFFF"))
        self.near_color = hex_to_rgb(pget(params, "near_color", "#FFFFFF"))
        self.mid_color = hex_to_rgb(pget(params, "mid_color", "#FF0000"))
        self.far_color = hex_to_rgb(pget(params, "far_color", "#00FFFF"))
        self.near_dist = float(pget(params, "near_dist", 3.5))
        self.mid_dist = float(pget(params, "mid_dist", 8.0))

        self.one_hand_phrase = pget(params, "one_hand_phrase", "HELLO")
        self.pair_phrases = dict(pget(params, "pair_phrases", {}) or {})

        self.edge_zone = float(pget(params, "edge_zone", 0.2))
        self.edge_spin = float(pget(params, "edge_spin", 2.0))
        self.idle_spin = float(pget(params, "idle_spin", 0.1))
        self.open_ratio_min = float(pget(params, "open_ratio_min", 1.0))
        self.open_ratio_max = float(pget(params, "open_ratio_max", 3.0))
        self.diffusion_min = float(pget(params, "diffusion_min", 1.0))
        self.diffusion_max = float(pget(params, "diffusion_max", 4.0))
        self.spin_min = float(pget(params, "spin_min", 0.2))
        self.spin_max = float(pget(params, "spin_max", 2.2))

    def set_base_color(self, color):
        self.base_color = hex_to_rgb(color)

    def _cloud(self, phrase):
        if phrase is None or self.glyphs is None:
            return None
        return self.glyphs.get(phrase)

    def world_centroid(self, hand):
        cx, cy = hand_centroid(hand)
        return to_world(cx, cy, self.viewport)

    def resolve(self, hands) -> Resolution:
        valid = [h for h in (as_hand(h) for h in (hands or ())) if h is not None]
        if not valid:
            return Resolution(VisualMode.IDLE, self.base_color)

        centers = [self.world_centroid(h) for h in valid]
        center = (
            sum(c[0] for c in centers) / len(centers),
            sum(c[1] for c in centers) / len(centers),
        )

        if len(valid) == 1:
            res = self._one_hand(valid[0])
        else:
            res = self._two_hands(select_hands(valid, 2))

        res.hand_center = center
        res.holding = res.mode is VisualMode.INTERACTIVE and is_white(res.target_color)
        return res

    def _one_hand(self, hand) -> Resolution:
        g = classify(hand)
        if g is Gesture.FIVE:
            cloud = self._cloud(self.one_hand_phrase)
            if cloud is not None:
                return Resolution(VisualMode.TEXT, self.base_color,
                                  phrase=self.one_hand_phrase, cloud=cloud, gestures=(g,))

        span = max(self.open_ratio_max - self.open_ratio_min, 1e-6)
        t = (openness_ratio(hand) - self.open_ratio_min) / span
        t = min(max(t, 0.0), 1.0)
        diffusion = self.diffusion_min + t * (self.diffusion_max - self.diffusion_min)
        rotation_speed = self.spin_min + t * (self.spin_max - self.spin_min)

        raw_x, _ = hand_centroid(hand)
        if raw_x < self.edge_zone:
            spin = self.edge_spin
        elif raw_x > 1.0 - self.edge_zone:
            spin = -self.edge_spin
        else:
            spin = self.idle_spin + rotation_speed

        return Resolution(VisualMode.INTERACTIVE, self.base_color,
                          diffusion=diffusion, rotation_speed=rotation_speed,
                          spin_rate=spin, gestures=(g,))

    def _two_hands(self, pair) -> Resolution:
        g1, g2 = classify(pair[0]), classify(pair[1])
        if g1 is g2:
            phrase = self.pair_phrases.get(g1.value)
            cloud = self._cloud(phrase)
            if cloud is not None:
                return Resolution(VisualMode.TEXT, self.base_color,
                                  phrase=phrase, cloud=cloud, gestures=(g1, g2))

        (x1, y1), (x2, y2) = (self.world_centroid(h) for h in pair)
        avg = (abs(x1) + abs(y1) + abs(x2) + abs(y2)) / 4.0
        if avg < self.near_dist:
            color = self.near_color
        elif avg < self.mid_dist:
            color = self.mid_color
        else:
            color = self.far_color
        return Resolution(VisualMode.INTERACTIVE, color, gestures=(g1, g2))
