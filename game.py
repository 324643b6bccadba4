# =============================================================================
# Prize Wheel Overlay
# A Pygame application showing a borderless prize wheel: weighted, colored
# segments that spin on demand, tick as they pass the pointer and settle on
# a weight-biased random winner.
#
# Key Features:
# - Segments, weights, colors and messages read from a TOML config file.
# - Stable per-label colors for segments that do not name one.
# - Quintic ease-out spin of 10-14 full turns with a random final offset.
# - Pointer that takes on the color of the segment it points at.
# - Jittered tick sound on every segment boundary the pointer crosses.
# - Winner banner once the wheel comes to rest.
#
# Usage:
#   python game.py [config.toml]
#
# Controls:
# - SPACE / LEFT CLICK on the wheel:  Spin the wheel.
# - ESC:                              Quit the application.
# =============================================================================

# ========= IMPORTS =========
import logging
import math
import sys

import pygame

from tick_audio import PygameTickPlayer, init_mixer
from wheel import create_session, is_bright, parse_hex_color, SETTLED
from wheel_config import FALLBACK_CENTER_GRAY, load_config

logger = logging.getLogger(__name__)

# =============================================================================
# --- CONFIGURATION ---
# Display and drawing parameters. Wheel contents come from the config file.
# =============================================================================

# --- DISPLAY ---
WINDOW_SIZE  = (600, 600)
WINDOW_TITLE = "Prize Wheel"
FPS          = 120       # Target frames per second for smooth animation.

# --- WHEEL GEOMETRY ---
WHEEL_RADIUS      = 250
BACKDROP_MARGIN   = 5       # Dark disc drawn this far beyond the wheel's edge.
ARC_STEPS_PER_RAD = 15      # Polygon resolution of each wedge's outer arc.
MIN_ARC_STEPS     = 3

# --- POINTER ---
POINTER_HALF_WIDTH = 15
POINTER_BASE_ABOVE = 20     # Base of the triangle, in px above the rim.
POINTER_TIP_BELOW  = 10     # Tip of the triangle, in px inside the rim.

# --- FONTS ---
FONT_LABEL  = "Arial"
FONT_WINNER = "Arial Black"

# --- COLORS ---
COLOR_BLACK       = (0, 0, 0)
COLOR_WHITE       = (255, 255, 255)
COLOR_BACKGROUND  = (0, 0, 0)
BACKDROP_ALPHA    = 220
WINNER_BG_ALPHA   = 200
WINNER_PADDING_PX = 12


# ========= UI HELPERS =========

def blit_center(surface, img, center):
    """Draws an image onto a surface, with the image's center at the specified coordinate."""
    surface.blit(img, img.get_rect(center=center))

def wedge_points(center, radius, start, width):
    """Polygon approximating a pie slice from angle `start` spanning `width` radians."""
    cx, cy = center
    steps = max(MIN_ARC_STEPS, int(width * ARC_STEPS_PER_RAD))
    points = [(cx, cy)]
    for i in range(steps + 1):
        a = start + (i / steps) * width
        points.append((cx + radius * math.cos(a), cy + radius * math.sin(a)))
    return points

def draw_pointer(surface, cx, cy, radius, color):
    """Draws the fixed triangular pointer at the top of the wheel."""
    tip   = (cx, cy - radius + POINTER_TIP_BELOW)
    left  = (cx - POINTER_HALF_WIDTH, cy - radius - POINTER_BASE_ABOVE)
    right = (cx + POINTER_HALF_WIDTH, cy - radius - POINTER_BASE_ABOVE)
    pygame.draw.polygon(surface, color, (tip, left, right))
    pygame.draw.polygon(surface, COLOR_BLACK, (tip, left, right), width=2)

def render_lines(font, text, color):
    """Renders multi-line text (pygame fonts only do single lines) to one surface."""
    lines = [font.render(line, True, color) for line in text.split("\n")]
    width  = max(s.get_width() for s in lines)
    height = sum(s.get_height() for s in lines)
    surf = pygame.Surface((width, height), pygame.SRCALPHA)
    y = 0
    for s in lines:
        surf.blit(s, s.get_rect(midtop=(width / 2, y)))
        y += s.get_height()
    return surf


# ========= GAME =========
class Game:
    """The overlay window: turns input into wheel requests and draws the wheel each frame."""
    def __init__(self, config):
        """Initializes Pygame, audio and the display, then builds the wheel from `config`."""
        init_mixer()
        pygame.init()
        self.clock = pygame.time.Clock()

        # --- Display Setup ---
        self.screen = pygame.display.set_mode(WINDOW_SIZE, pygame.NOFRAME)
        pygame.display.set_caption(WINDOW_TITLE)
        self.cx, self.cy = WINDOW_SIZE[0] // 2, WINDOW_SIZE[1] // 2

        # --- Appearance ---
        self.center_color = parse_hex_color(config.center_color) or FALLBACK_CENTER_GRAY
        self.inner_radius = WHEEL_RADIUS * config.radius_ratio
        self.winner_template = config.winner_template
        self.show_borders = config.borders
        self.label_font = None
        if config.label_size > 0:
            self.label_font = pygame.font.SysFont(FONT_LABEL, int(config.label_size))
        self.winner_font = pygame.font.SysFont(FONT_WINNER, max(1, int(config.winner_size)), bold=True)

        # --- Wheel ---
        self.wheel = create_session(config.segments, config.spin_duration_ms, tick_sink=PygameTickPlayer())
        self.label_surfs = self._prerender_labels()

    def _prerender_labels(self):
        """One label surface per segment, in wheel order; None when labels are hidden."""
        if self.label_font is None:
            return [None] * len(self.wheel.segments)
        return [
            self.label_font.render(seg.label, True, COLOR_BLACK if is_bright(seg.color) else COLOR_WHITE)
            for seg in self.wheel.segments
        ]

    def run(self):
        logger.info("Ready. Press SPACE or click the wheel to spin.")
        dt = 0.0 # Delta time (time since last frame)
        running = True
        while running:
            running = self._handle_events()      # Process user input
            self._update_state(dt)               # Advance the wheel simulation
            self._draw()                         # Render the current frame
            dt = self.clock.tick(FPS) / 1000.0   # Control frame rate
        pygame.quit()

    def _handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT: return False
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE: return False
                if event.key == pygame.K_SPACE: self.wheel.request_spin()
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                if self._inside_wheel(event.pos): self.wheel.request_spin()
        return True

    def _inside_wheel(self, pos):
        return math.hypot(pos[0] - self.cx, pos[1] - self.cy) <= WHEEL_RADIUS

    def _update_state(self, dt):
        if self.wheel.update(dt) == SETTLED:
            pygame.display.set_caption(f"{WINDOW_TITLE} - {self.wheel.winning_label}")

    def _draw(self):
        """Main drawing function; the wheel state is only read here, never changed."""
        self.screen.fill(COLOR_BACKGROUND)
        self._draw_wheel()
        draw_pointer(self.screen, self.cx, self.cy, WHEEL_RADIUS, self.wheel.pointer_color)
        self._draw_winner()
        pygame.display.flip()

    def _draw_wheel(self):
        center = (self.cx, self.cy)

        # Translucent backdrop behind the wheel
        backdrop = pygame.Surface(WINDOW_SIZE, pygame.SRCALPHA)
        pygame.draw.circle(backdrop, (*COLOR_BLACK, BACKDROP_ALPHA), center, WHEEL_RADIUS + BACKDROP_MARGIN)
        self.screen.blit(backdrop, (0, 0))

        rotation = self.wheel.rotation
        label_radius = self.inner_radius + (WHEEL_RADIUS - self.inner_radius) * 0.5
        for (start, width, seg), label in zip(self.wheel.layout.arcs(), self.label_surfs):
            angle = rotation + start
            points = wedge_points(center, WHEEL_RADIUS, angle, width)
            stroke = COLOR_BLACK if self.show_borders else seg.color
            pygame.draw.polygon(self.screen, seg.color, points)
            pygame.draw.polygon(self.screen, stroke, points, width=1)

            if label is not None:
                mid = angle + width * 0.5
                pos = (self.cx + label_radius * math.cos(mid), self.cy + label_radius * math.sin(mid))
                blit_center(self.screen, label, pos)

        # Center hub
        pygame.draw.circle(self.screen, self.center_color, center, self.inner_radius)
        pygame.draw.circle(self.screen, COLOR_BLACK, center, self.inner_radius, width=2)

    def _draw_winner(self):
        message = self.wheel.winner_message(self.winner_template)
        if message is None:
            return
        text = render_lines(self.winner_font, message, COLOR_WHITE)
        panel = pygame.Surface((text.get_width() + 2 * WINNER_PADDING_PX,
                                text.get_height() + 2 * WINNER_PADDING_PX), pygame.SRCALPHA)
        panel.fill((*COLOR_BLACK, WINNER_BG_ALPHA))
        blit_center(panel, text, (panel.get_width() / 2, panel.get_height() / 2))
        blit_center(self.screen, panel, (self.cx, self.cy))


# ========= ENTRY POINT =========
def main(argv=None):
    logging.basicConfig(format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s", level=logging.INFO)
    argv = sys.argv[1:] if argv is None else argv
    config = load_config(argv[0] if argv else None)
    game = Game(config)
    game.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
