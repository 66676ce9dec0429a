import cv2

import mediapipe as mp

from landmarks import landmarks_from_result


class Hands:
    """
    MediaPipe hands wrapper.

    process(frame_bgr) returns the frame's HandObservation: a list with one
    (21, 3) array per detected hand, x/y in 0..1 of the frame, z relative
    depth. Empty list when nothing is detected.
    """

    def __init__(self, max_hands=2, det_conf=0.5, track_conf=0.5):
        self.max_hands = max_hands
        self.mp_hands = mp.solutions.hands
        self.hands = self.mp_hands.Hands(
            static_image_mode=False,
            max_num_hands=max_hands,
            model_complexity=1,
            min_detection_confidence=float(det_conf),
            min_tracking_confidence=float(track_conf),
        )

    def process(self, frame_bgr):
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

        # Fixes NORM_RECT without IMAGE_DIMENSIONS warning
        self.hands._image_width, self.hands._image_height = frame_bgr.shape[1], frame_bgr.shape[0]  # type: ignore[attr-defined]

        return landmarks_from_result(self.hands.process(frame_rgb))

    def close(self):
        self.hands.close()
