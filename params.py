class Params:
    """
    All tunable knobs live here so you don't hunt through code.
    """
    def __init__(self):
        # Particle count (fixed for the lifetime of a ParticleSystem)
        self.num_particles = 8000

        # Home sphere shell (world units)
        self.sphere_radius_min = 4.0
        self.sphere_radius_max = 6.0

        # Camera / viewport (world plane at z=0 seen by a perspective camera)
        self.camera_distance = 15.0
        self.camera_fov_deg = 60.0
        self.aspect = 16.0 / 9.0

        # Ambient drift around the home sphere
        self.noise_amp = 0.2
        self.noise_speed = 2.0

        # "Holding" chaos (both hands close together)
        self.morph_amp = 2.0
        self.morph_speed = 8.0
        self.chaos_jitter = 1.5     # full width of the per-frame random jitter
        self.flee_push = 8.0
        self.flee_swirl = 4.0
        self.flee_swirl_freq = 5.0

        # Text mode wobble (keeps glyphs alive, stays tight)
        self.text_spread = 0.04
        self.text_wobble_speed = 1.0

        # Finger repulsion: (radius, force multiplier) per mode
        self.force_default = (3.5, 3.0)
        self.force_text = (1.5, 8.0)
        self.force_holding = (8.0, 15.0)

        # Smoothing (per frame, not per second)
        self.follow_rate = 0.1
        self.follow_rate_holding = 0.15
        self.color_rate = 0.1
        self.dt_max = 0.1           # clamp long frames (s)

        # Rotation (rad / s)
        self.edge_zone = 0.2
        self.edge_spin = 2.0
        self.idle_spin = 0.1
        self.text_unrotate = 3.0

        # Openness -> diffusion / spin
        self.open_ratio_min = 1.0
        self.open_ratio_max = 3.0
        self.diffusion_min = 1.0
        self.diffusion_max = 4.0
        self.spin_min = 0.2
        self.spin_max = 2.2

        # Two-hand color bands (average |x|,|y| of hand centroids, world units)
        self.near_dist = 3.5
        self.mid_dist = 8.0

        # Colors (hex, RGB)
        self.base_color = "#00FFFF"
        self.near_color = "#FFFFFF"
        self.mid_color = "#FF0000"
        self.far_color = "#00FFFF"

        # Glyph rasterization
        self.glyph_width = 1024
        self.glyph_height = 512
        self.glyph_density = 6
        self.glyph_font_px = 120

        # Phrase key -> text. Hershey fonts are ASCII only, so these are English
        # stand-ins; the original Chinese phrases (大家好 / 我是玉福 / 和我一起 /
        # 走进摄影世界) need a CJK-capable rasterizer in place of cv2.putText.
        self.phrases = {
            "HELLO": "HELLO",
            "YUFU": "I AM YUFU",
            "WITHME": "WITH ME",
            "PHOTO": "PHOTO WORLD",
        }

        # Gesture combination -> phrase key
        self.one_hand_phrase = "HELLO"
        self.pair_phrases = {
            "five": "PHOTO",
            "one": "YUFU",
            "two": "WITHME",
        }


def pget(p, key, default=None):
    """Read a knob from a Params object or a plain dict."""
    if p is None:
        return default
    if isinstance(p, dict):
        return p.get(key, default)
    return getattr(p, key, default)
