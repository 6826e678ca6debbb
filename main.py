# main.py

import json
import time
import logging

import pygame
import numpy as np

import constants
import logger_setup
from kinetics_engine import KineticsEngine
from rate_chart import ReactionChart
from renderer import SimulationRenderer, TemperatureSlider

# Get the application's dedicated logger
logger = logging.getLogger("enzyme_sim")

STATUS_LOG_INTERVAL = 120  # Ticks between status log lines


def compute_layout(window_width: int):
    """
    Splits the window into arena, chart and slider bands for a given width.
    Heights scale with the width relative to the 800 px baseline, clamped
    for extreme sizes.

    Returns (arena_rect, chart_rect, slider_rect, total_height).
    """
    scale = min(constants.MAX_LAYOUT_SCALE, max(constants.MIN_LAYOUT_SCALE, window_width / constants.WIDTH))
    sim_height = round(constants.SIM_HEIGHT * scale)
    chart_height = round(constants.CHART_HEIGHT * max(constants.MIN_LAYOUT_SCALE, scale))

    arena_rect = pygame.Rect(0, 0, window_width, sim_height)
    slider_rect = pygame.Rect(20, sim_height + 20, max(1, window_width - 40), constants.SLIDER_HEIGHT - 24)
    chart_rect = pygame.Rect(0, sim_height + constants.SLIDER_HEIGHT, window_width, chart_height)
    total_height = sim_height + constants.SLIDER_HEIGHT + chart_height
    return arena_rect, chart_rect, slider_rect, total_height


def run_simulation_loop(engine, screen, clock):
    """
    The main loop: input, one simulation step, drawing. Runs until the window
    is closed.
    """
    arena_rect, chart_rect, slider_rect, _ = compute_layout(screen.get_width())
    renderer = SimulationRenderer()
    slider = TemperatureSlider(slider_rect, value=engine.temperature)
    chart = ReactionChart(engine.theoretical_rate, lambda: engine.temperature, engine.current_rate_per_10s)

    running = True
    tick = 0
    while running:
        # Event handling
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.VIDEORESIZE:
                arena_rect, chart_rect, slider_rect, total_height = compute_layout(max(200, event.w))
                screen = pygame.display.set_mode((arena_rect.width, total_height), pygame.RESIZABLE)
                engine.resize(arena_rect.width, arena_rect.height)
                slider.rect = slider_rect
            elif event.type == pygame.KEYDOWN and event.key in (pygame.K_UP, pygame.K_DOWN):
                engine.set_temperature(slider.nudge(1 if event.key == pygame.K_UP else -1))
            else:
                new_value = slider.handle_event(event)
                if new_value is not None:
                    engine.set_temperature(new_value)

        # --- Simulation Update ---
        now = time.monotonic()
        engine.advance(now)
        renderer.add_events(engine.drain_reaction_events())
        rate = engine.current_rate_per_10s(now)

        # --- Logging (throttled) ---
        if tick % STATUS_LOG_INTERVAL == 0:
            logger.debug(
                f"Tick={tick}, "
                f"Temperature={engine.temperature:.1f}, "
                f"SpeedFactor={engine.last_speed_factor:.3f}, "
                f"Rate={rate:.2f}/s, "
                f"TotalProducts={engine.total_products}, "
                f"Denatured={engine.denatured_count()}/{engine.store.catalyst_count}"
            )

        # --- Drawing ---
        screen.fill(constants.BACKGROUND)
        hud = (
            f"Rate: {rate:.1f} reactions/s",
            f"Products: {engine.total_products}",
        )
        renderer.draw(screen.subsurface(arena_rect), engine.particles_snapshot(), now, hud)
        slider.draw(screen)
        chart.draw(screen.subsurface(chart_rect))

        pygame.display.flip()
        clock.tick(constants.FPS)
        tick += 1

    return tick


def main():
    """
    Main function to initialize and run the enzyme kinetics simulation.
    """
    # --- Setup ---
    logger_setup.setup_logging()

    with open('config.json', 'r') as f:
        config = json.load(f)
    sim_config = config['simulation']

    logger.info("Application starting...")
    logger.info(f"Loaded configuration: {config}")

    # Initialize the master random number generator (RNG)
    rng = np.random.default_rng(config['master_seed'])
    logger.info(f"Master RNG initialized with seed: {config['master_seed']}")

    # --- Initialization ---
    pygame.init()
    arena_rect, _, _, total_height = compute_layout(constants.WIDTH)
    screen = pygame.display.set_mode((constants.WIDTH, total_height), pygame.RESIZABLE)
    pygame.display.set_caption(constants.TITLE)
    clock = pygame.time.Clock()

    engine = KineticsEngine(
        config=sim_config,
        rng=rng,
        bounds=(arena_rect.width, arena_rect.height)
    )

    ticks = run_simulation_loop(engine, screen, clock)

    logger.info(
        f"Application shutting down after {ticks} ticks; "
        f"{engine.total_products} products formed."
    )
    pygame.quit()


if __name__ == "__main__":
    main()
