import os
from datetime import datetime


def write_log(log_path, message):
    """Append message to log file"""
    if log_path:
        os.makedirs(os.path.dirname(log_path) or '.', exist_ok=True)
        with open(log_path, 'a') as f:
            timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
            f.write(f"[{timestamp}] {message}\n")


def file_logger(log_path):
    """
    Build a logger callable for the service layer.

    Returns None when log_path is empty, so service functions skip logging.
    """
    if not log_path:
        return None

    def log(message):
        write_log(log_path, message)

    return log
