"""
Tests for the hand -> visual mode resolver.

Run with: python -m pytest test_modes.py -v
"""

import unittest

import numpy as np

from gestures import Gesture
from glyphs import GlyphCache
from hand_shapes import FIST, ONE, OPEN, TWO, make_hand
from modes import ModeResolver, VisualMode, hex_to_rgb, is_white
from params import Params

CYAN = (0.0, 1.0, 1.0)
WHITE = (1.0, 1.0, 1.0)
RED = (1.0, 0.0, 0.0)


def _cloud(tag):
    return np.full((4, 3), tag, dtype=np.float32)


class TestHexToRgb(unittest.TestCase):

    def test_formats(self):
        self.assertEqual(hex_to_rgb("#00FFFF"), CYAN)
        self.assertEqual(hex_to_rgb("ff0000"), RED)
        self.assertEqual(hex_to_rgb("#fff"), WHITE)
        self.assertEqual(hex_to_rgb((2.0, -1.0, 0.5)), (1.0, 0.0, 0.5))

    def test_bad_hex(self):
        with self.assertRaises(ValueError):
            hex_to_rgb("#12345")

    def test_is_white(self):
        self.assertTrue(is_white(WHITE))
        self.assertFalse(is_white(CYAN))


class TestModeResolver(unittest.TestCase):

    def setUp(self):
        self.params = Params()
        self.glyphs = GlyphCache(self.params, lazy=False)
        self.clouds = {}
        for i, key in enumerate(("HELLO", "PHOTO", "YUFU", "WITHME")):
            self.clouds[key] = _cloud(i)
            self.glyphs.put(key, self.clouds[key])
        self.resolver = ModeResolver(self.params, self.glyphs)

    # ------------------------------------------------------------
    # Idle
    # ------------------------------------------------------------

    def test_no_hands_is_idle(self):
        for hands in (None, [], [None], [make_hand()[:10]]):
            res = self.resolver.resolve(hands)
            self.assertIs(res.mode, VisualMode.IDLE)
            self.assertEqual(res.target_color, CYAN)
            self.assertIsNone(res.cloud)
            self.assertFalse(res.holding)

    def test_idle_follows_base_color(self):
        self.resolver.set_base_color("#FF00FF")
        self.assertEqual(self.resolver.resolve([]).target_color, (1.0, 0.0, 1.0))

    # ------------------------------------------------------------
    # One hand
    # ------------------------------------------------------------

    def test_one_open_hand_shows_hello(self):
        res = self.resolver.resolve([make_hand(OPEN)])
        self.assertIs(res.mode, VisualMode.TEXT)
        self.assertEqual(res.phrase, "HELLO")
        np.testing.assert_array_equal(res.cloud, self.clouds["HELLO"])

    def test_one_hand_interactive(self):
        res = self.resolver.resolve([make_hand(FIST)])
        self.assertIs(res.mode, VisualMode.INTERACTIVE)
        self.assertEqual(res.gestures, (Gesture.FIST,))
        self.assertEqual(res.target_color, CYAN)
        # closed hand: minimum diffusion and spin
        self.assertAlmostEqual(res.diffusion, 1.0)
        self.assertAlmostEqual(res.rotation_speed, 0.2)
        self.assertAlmostEqual(res.spin_rate, 0.1 + 0.2)
        self.assertFalse(res.holding)

    def test_openness_maps_diffusion_and_spin(self):
        res = self.resolver.resolve([make_hand((False, True, True, True, True))])
        self.assertIs(res.mode, VisualMode.INTERACTIVE)
        self.assertGreater(res.diffusion, 1.0)
        self.assertLess(res.diffusion, 4.0)
        t_diff = (res.diffusion - 1.0) / 3.0
        t_spin = (res.rotation_speed - 0.2) / 2.0
        self.assertAlmostEqual(t_diff, t_spin, places=5)

    def test_edges_override_spin(self):
        left = self.resolver.resolve([make_hand(FIST, center=(0.1, 0.5))])
        right = self.resolver.resolve([make_hand(FIST, center=(0.9, 0.5))])
        self.assertEqual(left.spin_rate, 2.0)
        self.assertEqual(right.spin_rate, -2.0)

    def test_missing_cloud_falls_back(self):
        resolver = ModeResolver(self.params, GlyphCache(self.params, lazy=False))
        res = resolver.resolve([make_hand(OPEN)])
        self.assertIs(res.mode, VisualMode.INTERACTIVE)
        self.assertIsNone(res.cloud)

    def test_no_glyph_source(self):
        res = ModeResolver(self.params).resolve([make_hand(OPEN), make_hand(OPEN)])
        self.assertIs(res.mode, VisualMode.INTERACTIVE)

    # ------------------------------------------------------------
    # Two hands
    # ------------------------------------------------------------

    def test_matched_pairs_pick_phrase(self):
        cases = ((OPEN, "PHOTO"), (ONE, "YUFU"), (TWO, "WITHME"))
        for shape, phrase in cases:
            hands = [make_hand(shape, center=(0.3, 0.5)), make_hand(shape, center=(0.7, 0.5))]
            res = self.resolver.resolve(hands)
            self.assertIs(res.mode, VisualMode.TEXT, phrase)
            self.assertEqual(res.phrase, phrase)
            np.testing.assert_array_equal(res.cloud, self.clouds[phrase])

    def test_mismatched_pair_is_interactive(self):
        res = self.resolver.resolve([make_hand(ONE), make_hand(TWO, center=(0.9, 0.9))])
        self.assertIs(res.mode, VisualMode.INTERACTIVE)
        self.assertEqual(res.gestures, (Gesture.ONE, Gesture.TWO))

    def test_hands_together_are_white_and_holding(self):
        res = self.resolver.resolve([make_hand(FIST, center=(0.45, 0.5)),
                                     make_hand(FIST, center=(0.55, 0.5))])
        self.assertIs(res.mode, VisualMode.INTERACTIVE)
        self.assertEqual(res.target_color, WHITE)
        self.assertTrue(res.holding)
        self.assertAlmostEqual(res.hand_center[0], 0.0, places=4)
        self.assertAlmostEqual(res.hand_center[1], 0.0, places=4)

    def test_hands_apart_are_red(self):
        res = self.resolver.resolve([make_hand(FIST, center=(0.25, 0.5)),
                                     make_hand(FIST, center=(0.75, 0.5))])
        self.assertEqual(res.target_color, RED)
        self.assertFalse(res.holding)

    def test_hands_far_apart_are_cyan(self):
        res = self.resolver.resolve([make_hand(FIST, center=(0.05, 0.1)),
                                     make_hand(FIST, center=(0.95, 0.9))])
        self.assertEqual(res.target_color, CYAN)
        self.assertFalse(res.holding)

    def test_text_mode_never_holds(self):
        res = self.resolver.resolve([make_hand(OPEN, center=(0.48, 0.5)),
                                     make_hand(OPEN, center=(0.52, 0.5))])
        self.assertIs(res.mode, VisualMode.TEXT)
        self.assertFalse(res.holding)

    def test_malformed_hand_is_ignored(self):
        res = self.resolver.resolve([make_hand(OPEN), [(0.0, 0.0, 0.0)] * 5])
        self.assertEqual(res.phrase, "HELLO")

    # ------------------------------------------------------------
    # More than two hands
    # ------------------------------------------------------------

    def test_three_hands_use_two_largest(self):
        hands = [
            make_hand(FIST, center=(0.5, 0.5), scale=0.4),
            make_hand(ONE, center=(0.2, 0.5), scale=1.2),
            make_hand(ONE, center=(0.8, 0.5), scale=1.1),
        ]
        res = self.resolver.resolve(hands)
        self.assertIs(res.mode, VisualMode.TEXT)
        self.assertEqual(res.phrase, "YUFU")

    def test_resolve_is_repeatable(self):
        hands = [make_hand(TWO), make_hand(FIST, center=(0.2, 0.8))]
        a = self.resolver.resolve(hands)
        b = self.resolver.resolve(hands)
        self.assertEqual(a.mode, b.mode)
        self.assertEqual(a.target_color, b.target_color)
        self.assertEqual(a.gestures, b.gestures)


if __name__ == "__main__":
    unittest.main()
