# feed_log.py
# Logging helpers shared by the fetcher, the publisher and the web app

import logging
import os
from datetime import datetime

BASE_DIR = os.path.dirname(__file__)
LOG_FILE = os.getenv("RELEASE_FEED_LOG_FILE", os.path.join(BASE_DIR, "feed_log.txt"))
MAX_LOG_LINES = 100

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger("release_feed")


def set_log_file(path):
    global LOG_FILE
    LOG_FILE = path


def log_message(message):
    """Log message to file and console"""
    logger.info(message)
    if not LOG_FILE:
        return
    try:
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(f"{datetime.now().isoformat()} - {message}\n")
    except OSError as e:
        logger.error(f"Failed to write to log file: {e}")


def cleanup_old_logs(max_lines=MAX_LOG_LINES):
    if not LOG_FILE:
        return
    try:
        if os.path.exists(LOG_FILE):
            with open(LOG_FILE, "r", encoding="utf-8") as f:
                lines = f.readlines()
            if len(lines) > max_lines:
                with open(LOG_FILE, "w", encoding="utf-8") as f:
                    f.writelines(lines[-max_lines:])
    except OSError as e:
        logger.error(f"Error cleaning up logs: {e}")
