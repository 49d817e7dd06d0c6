import logging
import os
import sys


def setup_logger(run_id: str, log_dir: str = "logs", log_level=logging.DEBUG, console: bool = True) -> logging.Logger:
    """
    Configures a DUAL LOGGING SYSTEM for an expert system session:
    - Standard Log (INFO): inference_{run_id}.log
    - Extended Log (DEBUG): inference_{run_id}_extended.log

    The logger itself is set to log_level (DEBUG by default) to capture rule
    matching details. Individual handlers filter messages based on their level.

    Args:
        run_id (str): Unique identifier for the session.
        log_dir (str): Directory for the log files (created if missing).
        log_level (int): Base logging level (default: logging.DEBUG).
        console (bool): Whether to also log INFO+ to stdout.

    Returns:
        logging.Logger: Configured logger with dual file handlers (+ console).
    """
    os.makedirs(log_dir, exist_ok=True)

    # Log filenames
    standard_log_file = os.path.join(log_dir, f"inference_{run_id}.log")
    extended_log_file = os.path.join(log_dir, f"inference_{run_id}_extended.log")

    logger = logging.getLogger(f"expert_system_{run_id}")
    logger.setLevel(log_level)
    logger.propagate = False

    # Same run_id twice - close and drop the previous handlers
    if logger.handlers:
        close_logger(logger)

    formatter = logging.Formatter('%(asctime)s | %(levelname)-8s | %(message)s', datefmt='%Y-%m-%d %H:%M:%S')

    # ========== HANDLER 1: Standard Log (INFO level) ==========
    standard_handler = logging.FileHandler(standard_log_file, mode='w', encoding='utf-8')
    standard_handler.setLevel(logging.INFO)
    standard_handler.setFormatter(formatter)
    logger.addHandler(standard_handler)

    # ========== HANDLER 2: Extended Log (DEBUG level) ==========
    extended_handler = logging.FileHandler(extended_log_file, mode='w', encoding='utf-8')
    extended_handler.setLevel(logging.DEBUG)
    extended_handler.setFormatter(formatter)
    logger.addHandler(extended_handler)

    # ========== HANDLER 3: Console (INFO level) ==========
    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    logger.info(f"Dual Logger initialized. Standard: {standard_log_file}, Extended: {extended_log_file}")
    return logger


def close_logger(logger: logging.Logger) -> None:
    """
    Flushes, closes and detaches all handlers of the logger.

    Should be called at the end of a session so the log files are complete
    and can be copied or removed.
    """
    for handler in list(logger.handlers):
        handler.flush()
        handler.close()
        logger.removeHandler(handler)
