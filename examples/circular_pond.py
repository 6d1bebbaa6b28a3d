"""
Circular pond driven frame by frame with the wave field engine.

A 1200x800 display is mapped onto a lattice with 4 pixels per cell. A few
scripted taps excite the pond and every animation frame advances the field
by one step.
"""

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.animation import FuncAnimation

from ripplelab.modeling import WaveField, circle, circle_outline
from ripplelab.simulators.pond import height_to_rgb, screen_to_lattice

# Display and lattice
SCREEN_WIDTH, SCREEN_HEIGHT = 1200, 800
CELL_SIZE = 4
WIDTH, HEIGHT = SCREEN_WIDTH // CELL_SIZE, SCREEN_HEIGHT // CELL_SIZE
POND_RADIUS = 150 / CELL_SIZE

# Physics
WAVE_SPEED = 0.5
DAMPING = 0.995
DISPLAY_RANGE = 80.0

# Scripted taps: frame -> (pixel x, pixel y, strength, radius)
TAPS = {
    0: (600, 400, 20.0, 8.0),
    50: (540, 360, 20.0, 8.0),
    90: (680, 450, -20.0, 6.0),
    91: (680, 450, -20.0, 6.0),
}
NUM_FRAMES = 400

cx, cy = WIDTH / 2, HEIGHT / 2
field = WaveField(WIDTH, HEIGHT, circle(cx, cy, POND_RADIUS), wave_speed=WAVE_SPEED, damping=DAMPING)
outline = circle_outline(cx, cy, POND_RADIUS)
closed = np.vstack([outline, outline[:1]])

fig, ax = plt.subplots(figsize=(9, 6))
im = ax.imshow(height_to_rgb(field.heights, field.mask, display_range=DISPLAY_RANGE), origin="upper")
ax.plot(closed[:, 0], closed[:, 1], color="#c89664", linewidth=2)
title = ax.set_title("Step 0")


def update(frame):
    if frame in TAPS:
        px, py, strength, radius = TAPS[frame]
        x, y = screen_to_lattice(px, py, CELL_SIZE)
        field.excite(x, y, strength, radius)
    field.step()
    im.set_data(height_to_rgb(field.heights, field.mask, display_range=DISPLAY_RANGE))
    title.set_text(f"Step {field.step_count} - energy {field.energy():.1f}")
    return [im, title]


ani = FuncAnimation(fig, update, frames=NUM_FRAMES, interval=30, blit=False)
plt.show()
