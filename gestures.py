from __future__ import annotations

from enum import Enum

from landmarks import as_hand, extended_fingers


class Gesture(Enum):
    ONE = "one"
    TWO = "two"
    FIVE = "five"
    FIST = "fist"
    UNKNOWN = "unknown"


def classify(hand) -> Gesture:
    """
    Reduce one hand to a gesture label. Never raises: missing or malformed
    input is UNKNOWN.

    Rules, first match wins:
      all five extended                       -> FIVE
      index only (thumb ignored)              -> ONE
      index + middle only (thumb ignored)     -> TWO
      at most one extended and index curled   -> FIST
    """
    hand = as_hand(hand)
    if hand is None:
        return Gesture.UNKNOWN

    thumb, index, middle, ring, pinky = extended_fingers(hand)
    open_count = sum((thumb, index, middle, ring, pinky))

    if open_count == 5:
        return Gesture.FIVE
    if index and not middle and not ring and not pinky:
        return Gesture.ONE
    if index and middle and not ring and not pinky:
        return Gesture.TWO
    if open_count <= 1 and not index:
        return Gesture.FIST
    return Gesture.UNKNOWN
