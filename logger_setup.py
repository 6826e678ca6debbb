# logger_setup.py

import logging
import os
import json

LOGGER_NAME = "enzyme_sim"


def setup_logging(config_path='config.json', runs_dir='runs'):
    """
    Configures the "enzyme_sim" logger that the particle store, the kinetics
    engine and the pygame loop all write to.

    Each run gets its own runs/<run_id>/simulation.log, so denaturation events
    and periodic temperature/rate lines from different sessions stay apart.
    Calling it again (e.g. from tests) replaces the handlers instead of
    stacking them.

    Data Contract:
    - Inputs:
        - config_path (str) - Path to the configuration file.
        - runs_dir (str) - Directory under which per-run log folders are created.
    - Outputs: The configured logging.Logger.
    - Side Effects:
        - Configures the "enzyme_sim" logger.
        - Creates directories for log files.
    - Invariants: Assumes the config file contains 'run_id' and a 'logging' dictionary
      with 'level' and 'format'.
    """
    with open(config_path, 'r') as f:
        config = json.load(f)

    run_id = config['run_id']
    log_config = config['logging']

    # --- Get a dedicated logger for the application ---
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_config['level'])

    # --- Prevent logs from propagating to the root logger ---
    logger.propagate = False

    # --- Create directories for logs ---
    log_dir = os.path.join(runs_dir, run_id)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'simulation.log')

    # --- Create formatter and handlers ---
    formatter = logging.Formatter(log_config['format'])

    # File handler
    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(formatter)

    # Console handler
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    # --- Add handlers to the logger ---
    # Close and clear existing handlers so a second call does not duplicate output
    if logger.hasHandlers():
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)

    logger.info(f"Logging initialized. Run ID: {run_id}. Log file: {log_file}")
    return logger
