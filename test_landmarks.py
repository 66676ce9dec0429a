"""
Tests for the landmark geometry helpers.

Run with: python -m pytest test_landmarks.py -v
"""

import math
import unittest
from types import SimpleNamespace

import numpy as np

import landmarks
from hand_shapes import FIST, OPEN, make_hand


class TestAsHand(unittest.TestCase):

    def test_array_passthrough(self):
        hand = make_hand()
        out = landmarks.as_hand(hand)
        self.assertEqual(out.shape, (21, 3))
        self.assertEqual(out.dtype, np.float32)
        np.testing.assert_allclose(out, hand)

    def test_tuples_dicts_and_objects(self):
        hand = make_hand()
        tuples = [tuple(p) for p in hand]
        dicts = [{"x": p[0], "y": p[1], "z": p[2]} for p in hand]
        objs = [SimpleNamespace(x=p[0], y=p[1], z=p[2]) for p in hand]
        for form in (tuples, dicts, objs, {"landmarks": tuples}):
            np.testing.assert_allclose(landmarks.as_hand(form), hand, atol=1e-6)

    def test_two_dimensional_points_get_zero_depth(self):
        pts = [(0.1 * i, 0.2) for i in range(21)]
        out = landmarks.as_hand(pts)
        self.assertEqual(out.shape, (21, 3))
        self.assertTrue(np.all(out[:, 2] == 0.0))

    def test_rejects_malformed(self):
        self.assertIsNone(landmarks.as_hand(None))
        self.assertIsNone(landmarks.as_hand([]))
        self.assertIsNone(landmarks.as_hand(make_hand()[:20]))
        self.assertIsNone(landmarks.as_hand([(0.0, 0.0, 0.0)] * 22))
        self.assertIsNone(landmarks.as_hand(["bad"] * 21))
        self.assertIsNone(landmarks.as_hand(np.full((21, 3), "x")))
        self.assertIsNone(landmarks.as_hand(np.full((21, 3), None)))

        nan_hand = make_hand()
        nan_hand[3, 1] = np.nan
        self.assertIsNone(landmarks.as_hand(nan_hand))


class TestGeometry(unittest.TestCase):

    def test_distance(self):
        self.assertAlmostEqual(landmarks.distance((0, 0, 0), (1, 2, 2)), 3.0)
        self.assertAlmostEqual(landmarks.distance2d((0, 0, 5), (3, 4, -5)), 5.0)

    def test_extension(self):
        open_hand = make_hand(OPEN)
        fist = make_hand(FIST)
        self.assertEqual(landmarks.extended_fingers(open_hand), (True,) * 5)
        self.assertEqual(landmarks.extended_fingers(fist), (False,) * 5)
        self.assertTrue(landmarks.is_finger_extended(open_hand, landmarks.INDEX_TIP, landmarks.INDEX_PIP))

    def test_palm_size_has_floor(self):
        flat = np.zeros((21, 3), dtype=np.float32)
        self.assertEqual(landmarks.palm_size(flat), landmarks.EPS)
        # degenerate palm does not divide by zero
        self.assertTrue(math.isfinite(landmarks.openness_ratio(flat)))

    def test_openness_ratio(self):
        self.assertGreater(landmarks.openness_ratio(make_hand(OPEN)), 2.0)
        self.assertLess(landmarks.openness_ratio(make_hand(FIST)), 1.0)

    def test_hand_centroid(self):
        cx, cy = landmarks.hand_centroid(make_hand(center=(0.3, 0.7)))
        self.assertAlmostEqual(cx, 0.3, places=5)
        self.assertAlmostEqual(cy, 0.7, places=5)

    def test_viewport_size(self):
        w, h = landmarks.viewport_size(60.0, 15.0, 2.0)
        self.assertAlmostEqual(h, 2 * 15 * math.tan(math.radians(30)), places=5)
        self.assertAlmostEqual(w, 2 * h, places=5)

    def test_to_world_is_mirrored(self):
        self.assertEqual(landmarks.to_world(0.5, 0.5, (20.0, 10.0)), (0.0, 0.0))
        x, y = landmarks.to_world(0.0, 0.0, (20.0, 10.0))
        self.assertEqual((x, y), (10.0, 5.0))


class TestInteractionPoints(unittest.TestCase):

    def test_six_points_per_hand(self):
        hands = [make_hand(), make_hand(FIST, center=(0.2, 0.2))]
        pts = landmarks.interaction_points(hands, (20.0, 10.0))
        self.assertEqual(pts.shape, (12, 3))
        self.assertTrue(np.all(pts[:, 2] == 0.0))

        tip = hands[0][landmarks.INDEX_TIP]
        self.assertAlmostEqual(pts[1, 0], (0.5 - tip[0]) * 20.0, places=4)
        self.assertAlmostEqual(pts[1, 1], (0.5 - tip[1]) * 10.0, places=4)

    def test_no_hands(self):
        self.assertEqual(landmarks.interaction_points([], (20.0, 10.0)).shape, (0, 3))


class TestSelectHands(unittest.TestCase):

    def test_keeps_two_or_fewer(self):
        hands = [make_hand(), make_hand(scale=0.5)]
        self.assertEqual(len(landmarks.select_hands(hands)), 2)
        self.assertIs(landmarks.select_hands(hands)[0], hands[0])

    def test_largest_palms_first(self):
        small = make_hand(scale=0.5)
        medium = make_hand(scale=1.0)
        large = make_hand(scale=1.5)
        picked = landmarks.select_hands([small, medium, large])
        self.assertEqual(len(picked), 2)
        self.assertIs(picked[0], large)
        self.assertIs(picked[1], medium)

    def test_ties_keep_detector_order(self):
        a = make_hand()
        b, c = a.copy(), a.copy()
        picked = landmarks.select_hands([a, b, c])
        self.assertIs(picked[0], a)
        self.assertIs(picked[1], b)


def _hands_result(hands):
    """Shaped like a MediaPipe Hands result."""
    multi = []
    for hand in hands:
        multi.append(SimpleNamespace(landmark=[SimpleNamespace(x=p[0], y=p[1], z=p[2]) for p in hand]))
    return SimpleNamespace(multi_hand_landmarks=multi)


class TestLandmarksFromResult(unittest.TestCase):

    def test_converts_each_hand(self):
        src = [make_hand(), make_hand(center=(0.2, 0.3))]
        out = landmarks.landmarks_from_result(_hands_result(src))
        self.assertEqual(len(out), 2)
        self.assertEqual(out[0].dtype, np.float32)
        np.testing.assert_allclose(out[1], src[1], atol=1e-6)

    def test_empty_and_malformed(self):
        self.assertEqual(landmarks.landmarks_from_result(None), [])
        self.assertEqual(landmarks.landmarks_from_result(SimpleNamespace(multi_hand_landmarks=None)), [])
        self.assertEqual(landmarks.landmarks_from_result(_hands_result([make_hand()[:12]])), [])

    def test_keeps_valid_hands_only(self):
        out = landmarks.landmarks_from_result(_hands_result([make_hand()[:12], make_hand(FIST)]))
        self.assertEqual(len(out), 1)


if __name__ == "__main__":
    unittest.main()
