"""Synthetic hands for the tests: straight fingers fanned out from the wrist."""
import math

import numpy as np

# degrees from straight up, thumb first
FINGER_ANGLES = (-70.0, -25.0, -5.0, 12.0, 28.0)

# wrist distance of (base, pivot, next, tip) joints
THUMB_OPEN = (0.04, 0.07, 0.10, 0.13)
THUMB_CLOSED = (0.04, 0.07, 0.06, 0.05)
FINGER_OPEN = (0.10, 0.14, 0.17, 0.20)
FINGER_CLOSED = (0.10, 0.13, 0.10, 0.07)

OPEN = (True, True, True, True, True)
FIST = (False, False, False, False, False)
ONE = (False, True, False, False, False)
TWO = (False, True, True, False, False)


def make_hand(extended=OPEN, center=(0.5, 0.5), scale=1.0):
    """(21, 3) hand whose palm centroid (wrist, index MCP, pinky MCP) sits at `center`."""
    pts = np.zeros((21, 3), dtype=np.float32)
    for finger, (angle, is_open) in enumerate(zip(FINGER_ANGLES, extended)):
        if finger == 0:
            dists = THUMB_OPEN if is_open else THUMB_CLOSED
        else:
            dists = FINGER_OPEN if is_open else FINGER_CLOSED
        a = math.radians(angle)
        dx, dy = math.sin(a), -math.cos(a)
        for j, d in enumerate(dists):
            pts[1 + finger * 4 + j, 0] = dx * d * scale
            pts[1 + finger * 4 + j, 1] = dy * d * scale

    centroid = pts[[0, 5, 17], :2].mean(axis=0)
    pts[:, 0] += center[0] - centroid[0]
    pts[:, 1] += center[1] - centroid[1]
    return pts
