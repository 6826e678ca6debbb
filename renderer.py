# renderer.py

import math

import pygame

import constants
from particle import is_catalyst


def pie_slice_points(center, radius, start_angle, end_angle, steps=12):
    """Polygon outline of a circular sector, apex at the centre."""
    cx, cy = center
    points = [(cx, cy)]
    for i in range(steps + 1):
        ang = start_angle + (end_angle - start_angle) * i / steps
        points.append((cx + math.cos(ang) * radius, cy + math.sin(ang) * radius))
    return points


def spiky_outline_points(center, radius, shape_seed, denature_factor, t, spikes=11):
    """
    Jittering star outline for a denatured catalyst. The distortion grows
    with denature_factor.
    """
    cx, cy = center
    points = []
    for i in range(spikes):
        ang = (i / spikes) * math.pi * 2
        jitter = math.sin(t + i * 1.7 + shape_seed) * 0.4 + 0.6
        rr = radius * (0.6 + jitter * 0.6 * (0.3 + 0.7 * denature_factor))
        points.append((cx + math.cos(ang) * rr, cy + math.sin(ang) * rr))
    return points


class SimulationRenderer:
    """
    Draws a particle snapshot onto a pygame surface.

    The renderer only ever sees ParticleSnapshot / ReactionEvent records;
    the ripple animations it keeps are its own state.
    """
    def __init__(self):
        self.ripples = []
        self.font = pygame.font.Font(None, 20)

    def add_events(self, events):
        self.ripples.extend(events)

    def draw(self, surface: pygame.Surface, snapshot, now: float, hud_lines=()):
        surface.fill(constants.BACKGROUND)
        self._draw_glow(surface, snapshot)

        for p in snapshot:
            if is_catalyst(p):
                self._draw_catalyst(surface, p, now)
            else:
                self._draw_substrate(surface, p)

        self._draw_ripples(surface, now)

        y = 6
        for line in hud_lines:
            label = self.font.render(line, True, constants.LABEL_COLOR)
            surface.blit(label, (8, y))
            y += label.get_height() + 2

    def _draw_glow(self, surface, snapshot):
        """Cheap bloom: draw catalysts, shrink, blow back up, add on top."""
        width, height = surface.get_size()
        scale = constants.BLOOM_RADIUS
        if width < scale or height < scale:
            return
        glow_surface = pygame.Surface((width, height), pygame.SRCALPHA)
        for p in snapshot:
            if is_catalyst(p):
                color = constants.DENATURED_COLOR if p.denatured else constants.CATALYST_COLOR
                pygame.draw.circle(glow_surface, (*color, 255), _int_point(p.position), int(p.radius * 1.3))

        scaled_size = (width // scale, height // scale)
        scaled_surface = pygame.transform.smoothscale(glow_surface, scaled_size)
        blurred_surface = pygame.transform.smoothscale(scaled_surface, (width, height))

        intensity = constants.BLOOM_INTENSITY
        blurred_surface.fill((intensity, intensity, intensity), special_flags=pygame.BLEND_RGB_MULT)
        surface.blit(blurred_surface, (0, 0), special_flags=pygame.BLEND_RGB_ADD)

    def _draw_catalyst(self, surface, p, now):
        r = p.radius
        if not p.denatured:
            wobble = 1 + 0.05 * math.sin(p.shape_seed + now / 0.9)
            rect = pygame.Rect(0, 0, int(2 * r * wobble), int(2 * r))
            rect.center = _int_point(p.position)
            pygame.draw.ellipse(surface, constants.CATALYST_COLOR, rect)
            # Active site notch
            facing = p.shape_seed * 0.2 + now / 5.0
            notch = pie_slice_points(p.position, r * 0.85, facing - 0.5, facing + 0.5)
            pygame.draw.polygon(surface, constants.CATALYST_NOTCH_COLOR, notch)
            return

        t = now / 0.4
        outline = spiky_outline_points(p.position, r, p.shape_seed, p.denature_factor, t)
        pygame.draw.polygon(surface, constants.DENATURED_COLOR, outline)
        pygame.draw.polygon(surface, constants.WHITE, outline, max(1, int(r * 0.09)))
        for i in range(4):
            ang = (i / 4) * math.pi * 2 + t * 0.8
            rad = r * 0.35 + 4 * math.sin(t * 1.3 + i)
            bx = p.position[0] + math.cos(ang) * rad * 0.7
            by = p.position[1] + math.sin(ang) * rad * 0.7
            blob = pygame.Rect(0, 0, 12, 8)
            blob.center = (int(bx), int(by))
            pygame.draw.ellipse(surface, constants.DENATURED_BLOB_COLOR, blob)

    def _draw_substrate(self, surface, p):
        spread = 1.8
        rot = p.orientation or 0.0
        wedge = pie_slice_points(p.position, p.radius, rot - spread / 2, rot + spread / 2, steps=8)
        pygame.draw.polygon(surface, constants.SUBSTRATE_COLOR, wedge)
        # Ridge highlight
        tip = (p.position[0] + math.cos(rot) * p.radius, p.position[1] + math.sin(rot) * p.radius)
        pygame.draw.line(surface, constants.SUBSTRATE_RIDGE_COLOR, _int_point(p.position), _int_point(tip),
                         max(1, int(p.radius * 0.18)))

    def _draw_ripples(self, surface, now):
        duration = constants.REACTION_RIPPLE_DURATION
        self.ripples = [e for e in self.ripples if now - e.started < duration]
        if not self.ripples:
            return
        overlay = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        for event in self.ripples:
            t = max(0.0, (now - event.started) / duration)
            alpha = int(255 * (1 - t))
            radius = int(10 + t * 40)
            pygame.draw.circle(overlay, (250, 250, 250, alpha), (int(event.x), int(event.y)), radius,
                               int(2 + (1 - t) * 2))
        surface.blit(overlay, (0, 0))


class TemperatureSlider:
    """Horizontal integer slider for the ambient temperature."""
    def __init__(self, rect, min_value=constants.CHART_MIN_TEMP, max_value=constants.CHART_MAX_TEMP,
                 value=25.0):
        self.rect = pygame.Rect(rect)
        self.min_value = min_value
        self.max_value = max_value
        self.value = value
        self.dragging = False
        self.font = pygame.font.Font(None, 22)

    def value_at(self, x: int) -> float:
        span = max(1, self.rect.width)
        fraction = min(max((x - self.rect.left) / span, 0.0), 1.0)
        return float(round(self.min_value + fraction * (self.max_value - self.min_value)))

    def handle_event(self, event):
        """Returns the new temperature if the event moved the slider, else None."""
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and self.rect.collidepoint(event.pos):
            self.dragging = True
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self.dragging = False
            return None
        elif event.type != pygame.MOUSEMOTION or not self.dragging:
            return None

        new_value = self.value_at(event.pos[0])
        if new_value == self.value:
            return None
        self.value = new_value
        return new_value

    def nudge(self, delta: float) -> float:
        self.value = min(max(self.value + delta, self.min_value), self.max_value)
        return self.value

    def draw(self, surface):
        track = pygame.Rect(self.rect.left, self.rect.centery - 2, self.rect.width, 4)
        pygame.draw.rect(surface, constants.AXIS_COLOR, track)
        fraction = (self.value - self.min_value) / (self.max_value - self.min_value)
        knob_x = self.rect.left + int(fraction * self.rect.width)
        pygame.draw.circle(surface, constants.MARKER_COLOR, (knob_x, self.rect.centery), 8)
        label = self.font.render(f"Temperature: {self.value:.0f} °C", True, constants.LABEL_COLOR)
        surface.blit(label, (self.rect.left, self.rect.top - 18))


def _int_point(point):
    return int(point[0]), int(point[1])
