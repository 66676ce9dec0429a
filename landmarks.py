"""
Geometry helpers over a single hand's 21 landmarks.

A hand is a (21, 3) float32 array of normalized camera coordinates
(x, y in 0..1, z relative depth), indexed in MediaPipe's joint order.
"""
from __future__ import annotations

import logging
import math

import numpy as np

log = logging.getLogger(__name__)

NUM_LANDMARKS = 21
EPS = 1e-6

WRIST = 0
THUMB_MCP = 2
THUMB_TIP = 4
INDEX_MCP = 5
INDEX_PIP = 6
INDEX_TIP = 8
MIDDLE_MCP = 9
MIDDLE_PIP = 10
MIDDLE_TIP = 12
RING_MCP = 13
RING_PIP = 14
RING_TIP = 16
PINKY_MCP = 17
PINKY_PIP = 18
PINKY_TIP = 20

# (tip, pivot) per finger, thumb first
FINGERS = (
    (THUMB_TIP, THUMB_MCP),
    (INDEX_TIP, INDEX_PIP),
    (MIDDLE_TIP, MIDDLE_PIP),
    (RING_TIP, RING_PIP),
    (PINKY_TIP, PINKY_PIP),
)

# Fingertips + palm center push particles around
INTERACTION_JOINTS = (THUMB_TIP, INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP, MIDDLE_MCP)
CENTROID_JOINTS = (WRIST, INDEX_MCP, PINKY_MCP)


def _point(lm):
    if isinstance(lm, dict):
        return (lm.get("x", 0.0), lm.get("y", 0.0), lm.get("z", 0.0))
    if hasattr(lm, "x") and hasattr(lm, "y"):
        return (lm.x, lm.y, getattr(lm, "z", 0.0))
    if len(lm) == 2:
        return (lm[0], lm[1], 0.0)
    return (lm[0], lm[1], lm[2])


def as_hand(landmarks):
    """
    Coerce one hand into a (21, 3) float32 array.

    Accepts an ndarray, a list of (x, y[, z]) tuples, dicts with x/y/z keys,
    objects with .x/.y/.z (MediaPipe landmarks), or a dict/object carrying a
    "landmarks" list. Returns None for anything that is not exactly 21
    finite points.
    """
    if landmarks is None:
        return None
    if isinstance(landmarks, dict) and "landmarks" in landmarks:
        landmarks = landmarks["landmarks"]
    elif hasattr(landmarks, "landmark"):
        landmarks = landmarks.landmark

    try:
        if isinstance(landmarks, np.ndarray):
            arr = landmarks.astype(np.float32, copy=False)
            if arr.ndim == 2 and arr.shape[1] == 2:
                arr = np.concatenate([arr, np.zeros((arr.shape[0], 1), np.float32)], axis=1)
        else:
            pts = [_point(lm) for lm in landmarks]
            arr = np.asarray(pts, dtype=np.float32)
    except (TypeError, ValueError, IndexError, KeyError):
        log.debug("rejecting hand: unreadable landmarks")
        return None

    if arr.shape != (NUM_LANDMARKS, 3):
        log.debug("rejecting hand: shape %s", arr.shape)
        return None
    if not np.all(np.isfinite(arr)):
        log.debug("rejecting hand: non-finite landmarks")
        return None
    return arr


def distance(a, b) -> float:
    """Euclidean distance between two 3D points."""
    dx = float(a[0]) - float(b[0])
    dy = float(a[1]) - float(b[1])
    dz = float(a[2]) - float(b[2])
    return math.sqrt(dx * dx + dy * dy + dz * dz)


def distance2d(a, b) -> float:
    return math.hypot(float(a[0]) - float(b[0]), float(a[1]) - float(b[1]))


def is_finger_extended(hand, tip: int, pivot: int) -> bool:
    # Tip further from the wrist than its pivot joint
    wrist = hand[WRIST]
    return distance(wrist, hand[tip]) > distance(wrist, hand[pivot])


def extended_fingers(hand) -> tuple[bool, bool, bool, bool, bool]:
    """(thumb, index, middle, ring, pinky) extension flags."""
    return tuple(is_finger_extended(hand, tip, pivot) for tip, pivot in FINGERS)


def palm_size(hand) -> float:
    """Wrist to index MCP in the image plane, floored at EPS."""
    return max(distance2d(hand[WRIST], hand[INDEX_MCP]), EPS)


def openness_ratio(hand) -> float:
    """Thumb-to-pinky spread relative to palm size."""
    return distance2d(hand[THUMB_TIP], hand[PINKY_TIP]) / palm_size(hand)


def hand_centroid(hand) -> tuple[float, float]:
    """Normalized (x, y) of the palm triangle wrist / index MCP / pinky MCP."""
    pts = hand[list(CENTROID_JOINTS)]
    return float(pts[:, 0].mean()), float(pts[:, 1].mean())


def viewport_size(fov_deg: float, distance_to_plane: float, aspect: float) -> tuple[float, float]:
    """World-space (width, height) of the z=0 plane seen by a perspective camera."""
    h = 2.0 * distance_to_plane * math.tan(math.radians(fov_deg) * 0.5)
    return h * aspect, h


def to_world(x: float, y: float, viewport) -> tuple[float, float]:
    # Mirrored X so the cloud moves like a mirror image of the user
    vw, vh = viewport
    return (0.5 - x) * vw, (0.5 - y) * vh


def interaction_points(hands, viewport) -> np.ndarray:
    """(K, 3) world points for every fingertip and palm center, z=0."""
    vw, vh = viewport
    out = np.zeros((len(hands) * len(INTERACTION_JOINTS), 3), dtype=np.float32)
    k = 0
    for hand in hands:
        for idx in INTERACTION_JOINTS:
            out[k, 0] = (0.5 - hand[idx, 0]) * vw
            out[k, 1] = (0.5 - hand[idx, 1]) * vh
            k += 1
    return out


def select_hands(hands, limit: int = 2):
    """
    Pick at most `limit` hands, largest palm first.

    Detector order is not stable across frames when more than two hands are
    visible; palm size (closest to the camera) is. Ties keep detector order.
    """
    if len(hands) <= limit:
        return list(hands)
    order = sorted(range(len(hands)), key=lambda i: (-palm_size(hands[i]), i))
    return [hands[i] for i in order[:limit]]


def landmarks_from_result(res):
    """MediaPipe Hands result -> list of (21, 3) float32 arrays, normalized coords."""
    if res is None or not getattr(res, "multi_hand_landmarks", None):
        return []
    out = []
    for hand_lms in res.multi_hand_landmarks:
        hand = as_hand(hand_lms)
        if hand is not None:
            out.append(hand)
    return out
