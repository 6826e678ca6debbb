# rate_chart.py

import pygame

import constants

# Plot margins in pixels
LEFT_MARGIN = 40
RIGHT_MARGIN = 10
TOP_MARGIN = 10
BOTTOM_MARGIN = 30


class ReactionChart:
    """
    Reaction rate vs. temperature chart.

    The reference curve comes from `rate_function`, which main.py binds to
    KineticsEngine.theoretical_rate so the curve always uses the engine's
    speed policy. The measured rate is plotted as a dot at the current
    temperature.
    """
    def __init__(self, rate_function, temperature_getter, rate_getter):
        self.rate_function = rate_function
        self.temperature_getter = temperature_getter
        self.rate_getter = rate_getter
        self.min_t = constants.CHART_MIN_TEMP
        self.max_t = constants.CHART_MAX_TEMP
        self.font = pygame.font.Font(None, 18)
        self.samples = self.sample_curve()

    def sample_curve(self):
        """(temperature, theoretical rate) pairs across the chart's range."""
        step = constants.CHART_SAMPLE_STEP
        temps = range(int(self.min_t), int(self.max_t) + 1, step)
        return [(float(t), self.rate_function(float(t))) for t in temps]

    def x_for_temp(self, t: float, width: int) -> float:
        return LEFT_MARGIN + ((t - self.min_t) / (self.max_t - self.min_t)) * (width - LEFT_MARGIN - RIGHT_MARGIN)

    def y_for_rate(self, rate: float, max_rate: float, height: int) -> float:
        return (height - BOTTOM_MARGIN) - (rate / max_rate) * (height - BOTTOM_MARGIN - TOP_MARGIN)

    def max_rate(self, measured: float) -> float:
        peak = max(rate for _, rate in self.samples)
        return max(peak, measured) * 1.1

    def draw(self, surface: pygame.Surface):
        width, height = surface.get_size()
        surface.fill(constants.BACKGROUND)

        # Axes
        pygame.draw.lines(surface, constants.AXIS_COLOR, False, [
            (LEFT_MARGIN, TOP_MARGIN),
            (LEFT_MARGIN, height - BOTTOM_MARGIN),
            (width - RIGHT_MARGIN, height - BOTTOM_MARGIN),
        ])

        measured = self.rate_getter()
        max_rate = self.max_rate(measured)

        # Reference curve
        points = [(self.x_for_temp(t, width), self.y_for_rate(r, max_rate, height)) for t, r in self.samples]
        if len(points) > 1:
            pygame.draw.lines(surface, constants.CURVE_COLOR, False, points, 2)

        # Current temperature marker and measured rate
        current = self.temperature_getter()
        cx = self.x_for_temp(min(max(current, self.min_t), self.max_t), width)
        pygame.draw.line(surface, constants.MARKER_COLOR, (cx, height - BOTTOM_MARGIN), (cx, TOP_MARGIN))
        ry = self.y_for_rate(measured, max_rate, height)
        pygame.draw.circle(surface, constants.MARKER_COLOR, (int(cx), int(ry)), 5)

        # Labels
        self._label(surface, "0", (LEFT_MARGIN - 5, height - BOTTOM_MARGIN + 4))
        self._label(surface, "Temp (°C)", (width // 2 - 30, height - 16))
        self._label(surface, f"{current:.0f}°C", (cx + 4, TOP_MARGIN + 2))
        self._label(surface, f"{measured:.2f} r/s", (cx + 6, ry - 16))
        axis_label = pygame.transform.rotate(self.font.render("Rate (relative)", True, constants.LABEL_COLOR), 90)
        surface.blit(axis_label, (4, height // 2 - axis_label.get_height() // 2))

    def _label(self, surface, text, pos):
        surface.blit(self.font.render(text, True, constants.LABEL_COLOR), (int(pos[0]), int(pos[1])))
