from __future__ import annotations
import math
import numpy as np
import cv2


class PointRenderer:
    """Lightweight renderer that projects the particle buffers into a viewport."""

    def __init__(self, width: int = 1280, height: int = 720, camera_distance: float = 15.0, fov_deg: float = 60.0):
        self.width = int(width)
        self.height = int(height)
        self.camera_distance = float(camera_distance)
        # focal length in pixels for the vertical FOV
        self.f = (self.height * 0.5) / math.tan(math.radians(fov_deg) * 0.5)

    def project(self, positions, rotation):
        """World points -> (xs, ys) pixel ints of the points in front of the camera."""
        pitch, yaw, roll = float(rotation[0]), float(rotation[1]), float(rotation[2])
        cyaw, syaw = math.cos(yaw), math.sin(yaw)
        cp, sp = math.cos(pitch), math.sin(pitch)
        cr, sr = math.cos(roll), math.sin(roll)

        Rz = np.array([[cr, -sr, 0], [sr, cr, 0], [0, 0, 1]], dtype=np.float32)
        Ry = np.array([[cyaw, 0, syaw], [0, 1, 0], [-syaw, 0, cyaw]], dtype=np.float32)
        Rx = np.array([[1, 0, 0], [0, cp, -sp], [0, sp, cp]], dtype=np.float32)
        R = Rz @ Ry @ Rx

        pts = positions @ R.T
        zz = self.camera_distance - pts[:, 2]
        front = zz > 0.1
        xs = (self.width * 0.5 + pts[front, 0] / zz[front] * self.f).astype(np.int32)
        ys = (self.height * 0.5 - pts[front, 1] / zz[front] * self.f).astype(np.int32)
        return xs, ys, front

    def render(self, positions, colors, rotation, background=None, glow: bool = True):
        img = np.zeros((self.height, self.width, 3), dtype=np.uint8)

        xs, ys, front = self.project(positions, rotation)
        inside = (xs >= 0) & (xs < self.width) & (ys >= 0) & (ys < self.height)

        # RGB 0..1 -> BGR 0..255
        bgr = (colors[front][inside][:, ::-1] * 255.0).astype(np.uint8)
        img[ys[inside], xs[inside]] = bgr
        img = cv2.dilate(img, np.ones((2, 2), np.uint8))

        if glow:
            blur = cv2.GaussianBlur(img, (0, 0), 3)
            img = cv2.addWeighted(img, 0.8, blur, 0.6, 0)

        if background is not None:
            bg = cv2.resize(background, (self.width, self.height))
            img = cv2.add((bg * 0.35).astype(np.uint8), img)
        return img
