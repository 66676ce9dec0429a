"""
Particle cloud driven by the resolved hand mode.

State (owned by ParticleSystem, never reallocated):
- pos:    Nx3 current positions (world units)
- home:   Nx3 seed positions on a sphere shell, read-only
- colors: Nx3 RGB in [0..1], every particle shares the smoothed color

Each frame ParticleIntegrator:
- builds a target per particle (glyph point, or home * diffusion + noise)
- pushes targets away from fingertips / palms near the *current* position
- while holding, adds chaos noise and a spiralling flee from the hands
- eases positions toward the targets, eases the shared color
"""
from __future__ import annotations

import math

import numpy as np

from landmarks import EPS
from modes import VisualMode, hex_to_rgb
from params import pget


class ParticleSystem:
    def __init__(self, params=None, rng=None):
        self.params = params
        self.rng = rng if rng is not None else np.random.default_rng(0)
        self.n = int(pget(params, "num_particles", 8000))
        if self.n <= 0:
            raise ValueError(f"num_particles must be positive, got {self.n}")

        r_min = float(pget(params, "sphere_radius_min", 4.0))
        r_max = float(pget(params, "sphere_radius_max", 6.0))

        # Uniform directions on the sphere, radius inside the shell band
        theta = self.rng.random(self.n) * 2.0 * math.pi
        phi = np.arccos(self.rng.random(self.n) * 2.0 - 1.0)
        r = r_min + self.rng.random(self.n) * (r_max - r_min)

        home = np.empty((self.n, 3), dtype=np.float32)
        home[:, 0] = r * np.sin(phi) * np.cos(theta)
        home[:, 1] = r * np.sin(phi) * np.sin(theta)
        home[:, 2] = r * np.cos(phi)
        home.setflags(write=False)
        self.home = home

        self.pos = home.copy()
        self.colors = np.empty((self.n, 3), dtype=np.float32)
        self.colors[:] = hex_to_rgb(pget(params, "base_color", "#00FFFF"))

    def reset(self):
        self.pos[:] = self.home

    def buffers(self):
        """Read-only (positions, colors) views for the renderer."""
        pos = self.pos.view()
        pos.setflags(write=False)
        colors = self.colors.view()
        colors.setflags(write=False)
        return pos, colors


def wrap_cloud(cloud, n: int, out=None):
    """
    Map particle i to cloud point i % len(cloud).

    Lossy when len(cloud) does not divide n: the first n % len(cloud) points
    get one extra particle, and with len(cloud) > n the tail of the cloud is
    never used. Returns None for an empty cloud.
    """
    m = len(cloud)
    if m == 0:
        return None
    idx = np.arange(n) % m
    if out is None:
        return np.asarray(cloud, dtype=np.float32)[idx]
    np.take(cloud, idx, axis=0, out=out)
    return out


class ParticleIntegrator:
    def __init__(self, system: ParticleSystem, params=None, rng=None):
        self.system = system
        self.rng = rng if rng is not None else np.random.default_rng()

        self.noise_amp = float(pget(params, "noise_amp", 0.2))
        self.noise_speed = float(pget(params, "noise_speed", 2.0))
        self.morph_amp = float(pget(params, "morph_amp", 2.0))
        self.morph_speed = float(pget(params, "morph_speed", 8.0))
        self.chaos_jitter = float(pget(params, "chaos_jitter", 1.5))
        self.flee_push = float(pget(params, "flee_push", 8.0))
        self.flee_swirl = float(pget(params, "flee_swirl", 4.0))
        self.flee_swirl_freq = float(pget(params, "flee_swirl_freq", 5.0))
        self.text_spread = float(pget(params, "text_spread", 0.04))
        self.text_wobble_speed = float(pget(params, "text_wobble_speed", 1.0))

        self.force_default = tuple(pget(params, "force_default", (3.5, 3.0)))
        self.force_text = tuple(pget(params, "force_text", (1.5, 8.0)))
        self.force_holding = tuple(pget(params, "force_holding", (8.0, 15.0)))

        self.follow_rate = float(pget(params, "follow_rate", 0.1))
        self.follow_rate_holding = float(pget(params, "follow_rate_holding", 0.15))
        self.color_rate = float(pget(params, "color_rate", 0.1))
        self.text_unrotate = float(pget(params, "text_unrotate", 3.0))
        self.dt_max = float(pget(params, "dt_max", 0.1))

        n = system.n
        idx = np.arange(n, dtype=np.float32)
        # Per-index phases, fixed for the lifetime of the system
        self._ph_ambient = idx * 0.1
        self._ph_morph_x = idx * 0.3 + 0.1
        self._ph_morph_y = idx * 0.3
        self._ph_morph_z = idx * 0.3 + 0.2
        self._ph_text = (idx * 0.5, idx * 0.9, idx * 1.2)

        # Scratch buffers reused every frame
        self.target = np.empty((n, 3), dtype=np.float32)
        self._delta = np.empty((n, 3), dtype=np.float32)
        self._jitter = np.empty((n, 3), dtype=np.float32)
        self._d2 = np.empty(n, dtype=np.float32)
        self._a = np.empty(n, dtype=np.float32)
        self._b = np.empty(n, dtype=np.float32)
        self._c = np.empty(n, dtype=np.float32)
        self._mask = np.empty(n, dtype=bool)
        self._wrapped = {}

        self.color = np.array(system.colors[0], dtype=np.float32)
        self.rotation = np.zeros(3, dtype=np.float32)   # pitch, yaw, roll
        self.time = 0.0

    # ---------- controls ----------
    def set_color(self, rgb):
        """Snap the shared color (e.g. user picked a new base color)."""
        self.color[:] = rgb
        self.system.colors[:] = self.color

    def force_profile(self, mode: VisualMode, holding: bool):
        """(radius, multiplier) for finger repulsion."""
        if mode is VisualMode.TEXT:
            return self.force_text
        if holding:
            return self.force_holding
        return self.force_default

    # ---------- per frame ----------
    def step(self, res, points=None, dt: float = 1.0 / 60.0):
        dt = min(max(float(dt), 0.0), self.dt_max)
        self.time += dt
        t = self.time
        pos = self.system.pos
        target = self.target

        wrapped = self._wrapped_cloud(res) if res.mode is VisualMode.TEXT else None
        mode = res.mode
        if mode is VisualMode.TEXT and wrapped is None:
            # No usable cloud: ambient sphere for this frame
            mode = VisualMode.INTERACTIVE
        holding = bool(res.holding) and mode is VisualMode.INTERACTIVE

        if mode is VisualMode.TEXT:
            np.copyto(target, wrapped)
            self._add_text_wobble(t)
        else:
            np.multiply(self.system.home, float(res.diffusion), out=target)
            self._add_ambient_noise(t)
            if holding:
                self._add_chaos(t)

        if points is not None and len(points) > 0:
            radius, force = self.force_profile(mode, holding)
            self.apply_repulsion(points, radius, force)
            if holding and res.hand_center is not None:
                self._apply_flee(res.hand_center, t)

        rate = self.follow_rate_holding if holding else self.follow_rate
        np.subtract(target, pos, out=self._delta)
        self._delta *= rate
        pos += self._delta

        self.color += (np.asarray(res.target_color, dtype=np.float32) - self.color) * self.color_rate
        self.system.colors[:] = self.color

        self._update_rotation(res, mode, dt)

    # ---------- targets ----------
    def _wrapped_cloud(self, res):
        cloud = res.cloud
        if cloud is None or len(cloud) == 0:
            return None
        cached = self._wrapped.get(res.phrase)
        if cached is not None and cached[0] is cloud:
            return cached[1]
        wrapped = wrap_cloud(cloud, self.system.n)
        wrapped.setflags(write=False)
        self._wrapped[res.phrase] = (cloud, wrapped)
        return wrapped

    def _add_text_wobble(self, t):
        a = self._a
        for axis, phase in enumerate(self._ph_text):
            np.add(phase, self.text_wobble_speed * t, out=a)
            if axis == 1:
                np.cos(a, out=a)
            else:
                np.sin(a, out=a)
            a *= self.text_spread
            self.target[:, axis] += a

    def _add_ambient_noise(self, t):
        if self.noise_amp == 0.0:
            return
        np.add(self._ph_ambient, self.noise_speed * t, out=self._a)
        np.sin(self._a, out=self._b)
        np.cos(self._a, out=self._c)
        self._b *= self.noise_amp
        self._c *= self.noise_amp
        self.target[:, 0] += self._b
        self.target[:, 1] += self._c

    def _add_chaos(self, t):
        a = self._a
        wt = self.morph_speed * t
        for axis, phase, fn in ((0, self._ph_morph_x, np.sin),
                                (1, self._ph_morph_y, np.cos),
                                (2, self._ph_morph_z, np.sin)):
            np.add(phase, wt, out=a)
            fn(a, out=a)
            a *= self.morph_amp
            self.target[:, axis] += a

        # Fresh every frame: the cloud should never settle while held
        self.rng.random(out=self._jitter, dtype=np.float32)
        self._jitter -= 0.5
        self._jitter *= self.chaos_jitter
        self.target += self._jitter

    # ---------- forces ----------
    def apply_repulsion(self, points, radius: float, force: float):
        """
        Push targets away from each point that is within `radius` of the
        particle's current position. Falloff is (1 - d^2 / r^2); a point at
        or beyond the radius contributes nothing.
        """
        pos = self.system.pos
        r2 = float(radius) * float(radius)
        if r2 <= 0.0:
            return
        d2, w = self._d2, self._a
        for p in np.asarray(points, dtype=np.float32).reshape(-1, 3):
            np.subtract(pos, p, out=self._delta)
            np.einsum("ij,ij->i", self._delta, self._delta, out=d2)
            np.divide(d2, r2, out=w)
            np.subtract(1.0, w, out=w)
            np.greater_equal(d2, r2, out=self._mask)
            np.copyto(w, 0.0, where=self._mask)
            w *= float(force)
            self._delta *= w[:, None]
            self.target += self._delta

    def _apply_flee(self, center, t):
        pos = self.system.pos
        dx, dy, dist = self._a, self._b, self._d2
        np.subtract(pos[:, 0], float(center[0]), out=dx)
        np.subtract(pos[:, 1], float(center[1]), out=dy)
        np.hypot(dx, dy, out=dist)
        np.less(dist, EPS, out=self._mask)
        np.copyto(dist, 0.1, where=self._mask)
        dx /= dist
        dy /= dist

        swirl = self.flee_swirl * math.sin(t * self.flee_swirl_freq)
        tmp = self._c
        # Radial push out of the hands
        np.multiply(dx, self.flee_push, out=tmp)
        self.target[:, 0] += tmp
        np.multiply(dy, self.flee_push, out=tmp)
        self.target[:, 1] += tmp
        # Tangential swirl, direction flips with sin(t)
        np.multiply(dy, -swirl, out=tmp)
        self.target[:, 0] += tmp
        np.multiply(dx, swirl, out=tmp)
        self.target[:, 1] += tmp

    # ---------- rotation ----------
    def _update_rotation(self, res, mode, dt):
        if mode is VisualMode.TEXT:
            # Ease back to face the camera so the text reads
            k = min(1.0, self.text_unrotate * dt)
            self.rotation *= (1.0 - k)
        elif mode is VisualMode.INTERACTIVE:
            self.rotation[1] += float(res.spin_rate) * dt
