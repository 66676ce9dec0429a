from __future__ import annotations

import logging

import numpy as np

from glyphs import GlyphCache
from landmarks import as_hand, interaction_points
from modes import ModeResolver, hex_to_rgb
from params import Params
from particles import ParticleIntegrator, ParticleSystem

log = logging.getLogger(__name__)


class ParticleEngine:
    """
    One frame in, two buffers out.

      engine = ParticleEngine(Params())
      pos, colors = engine.update(hands, dt)   # hands: list of 21-landmark hands
      engine.update(None, dt)                  # no new detection, reuse the last one
      engine.set_base_color("#FF00FF")

    Instances are independent; nothing is global.
    """

    def __init__(self, params=None, seed=None, glyphs=None, background_glyphs: bool = False):
        self.params = params if params is not None else Params()
        glyph_seq, sys_seq, int_seq = np.random.SeedSequence(seed).spawn(3)

        self.glyphs = glyphs if glyphs is not None else GlyphCache(
            self.params, rng=np.random.default_rng(glyph_seq))
        if background_glyphs:
            self.glyphs.start()

        self.resolver = ModeResolver(self.params, self.glyphs)
        self.system = ParticleSystem(self.params, rng=np.random.default_rng(sys_seq))
        self.integrator = ParticleIntegrator(self.system, self.params, rng=np.random.default_rng(int_seq))

        self._hands = []
        self.last = None
        self.frames = 0

    def set_base_color(self, color):
        rgb = hex_to_rgb(color)
        self.resolver.set_base_color(rgb)
        self.integrator.set_color(rgb)
        log.info("base color -> %s", color)

    def update(self, hands=None, dt: float = 1.0 / 60.0):
        if hands is not None:
            hands = list(hands)
            valid = [h for h in (as_hand(h) for h in hands) if h is not None]
            if len(valid) != len(hands):
                log.debug("frame %d: dropped %d malformed hand(s)", self.frames, len(hands) - len(valid))
            self._hands = valid

        res = self.resolver.resolve(self._hands)
        points = interaction_points(self._hands, self.resolver.viewport)
        self.integrator.step(res, points, dt)

        if self.last is None or res.mode is not self.last.mode:
            log.debug("mode -> %s (%s)", res.mode.value, res.phrase)
        self.last = res
        self.frames += 1
        return self.system.buffers()

    @property
    def rotation(self):
        rot = self.integrator.rotation.view()
        rot.setflags(write=False)
        return rot

    @property
    def mode(self):
        return None if self.last is None else self.last.mode
