"""Game constants — timing and movement costs."""

# -- Timing --------------------------------------------------------------

AI_TURN_DELAY_MS: float = 500.0
"""Delay between the turn passing to the AI and the AI acting."""

# -- Movement ------------------------------------------------------------

MOVE_COST_PER_HEX: int = 1
"""Movement points spent per hex of distance travelled."""

# -- Default board -------------------------------------------------------

DEFAULT_MASK: list[list[int]] = [
    [1, 1, 1, 1, 1, 1],
    [1, 0, 1, 1, 1, 1],
    [1, 1, 1, 0, 1, 1],
    [1, 1, 1, 1, 1, 1],
    [1, 1, 1, 1, 1, 1],
    [1, 1, 1, 0, 1, 1],
]
"""6x6 board used when no map file is available."""
