# app.py - hand-driven particle cloud demo
import logging
import time

import cv2

from engine import ParticleEngine
from hands import Hands
from params import Params
from renderer import PointRenderer

WINDOW_NAME = "Gesture Particles"
VIEW_W = 1280
VIEW_H = 720
SHOW_CAMERA = True

# Number keys pick the base color
COLOR_KEYS = {
    ord("1"): "#00FFFF",
    ord("2"): "#FF00FF",
    ord("3"): "#FFD700",
    ord("4"): "#7CFC00",
}


def open_camera(max_index=6):
    for i in range(max_index):
        cap = cv2.VideoCapture(i)
        if cap.isOpened():
            ok, _ = cap.read()
            if ok:
                print(f"✅ Using camera index: {i}")
                return cap
        cap.release()
    raise RuntimeError(f"❌ No working camera found (0–{max_index-1}).")


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    params = Params()
    params.aspect = VIEW_W / VIEW_H

    cap = open_camera()
    tracker = Hands(max_hands=2)
    engine = ParticleEngine(params, background_glyphs=True)
    renderer = PointRenderer(VIEW_W, VIEW_H, params.camera_distance, params.camera_fov_deg)

    cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)

    print("\n" + "=" * 60)
    print("✨ GESTURE PARTICLES")
    print("=" * 60)
    print("   One open hand         -> HELLO")
    print("   Two hands: 5+5 / 1+1 / 2+2 -> PHOTO / YUFU / WITH ME")
    print("   One hand: open/close to breathe, move to the edges to spin")
    print("   Two hands together    -> the cloud runs away")
    print("   1-4 base color | R reset | ESC exit")
    print("=" * 60 + "\n")

    prev = time.time()
    fps_smooth = 0.0

    while True:
        ok, frame = cap.read()
        if not ok:
            break

        frame = cv2.flip(frame, 1)

        now = time.time()
        dt = max(1e-6, now - prev)
        prev = now
        fps = 1.0 / dt
        fps_smooth = fps if fps_smooth == 0 else 0.9 * fps_smooth + 0.1 * fps

        hands = tracker.process(frame)
        positions, colors = engine.update(hands, dt)

        composed = renderer.render(positions, colors, engine.rotation,
                                   background=frame if SHOW_CAMERA else None)

        status = f"FPS: {fps_smooth:5.1f}  {engine.mode.value}"
        if engine.last.phrase:
            status += f"  [{engine.last.phrase}]"
        cv2.putText(composed, status, (12, composed.shape[0] - 12), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 128), 2, cv2.LINE_AA)

        cv2.imshow(WINDOW_NAME, composed)

        key = cv2.waitKey(1) & 0xFF
        if key == 27:
            break
        if key in COLOR_KEYS:
            engine.set_base_color(COLOR_KEYS[key])
        elif key in (ord("r"), ord("R")):
            engine.system.reset()

    cap.release()
    tracker.close()
    cv2.destroyAllWindows()

    print("\n✅ Shutdown complete")


if __name__ == "__main__":
    main()
