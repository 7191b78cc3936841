"""Environment and utility functions."""

import logging
import os
import sys
from pathlib import Path

from ..config import ENV_FILE, HF_TOKEN_KEY, LOG_FORMAT, LOG_DATE_FORMAT

# Default log file location
DEFAULT_LOG_FILE = "drawing_cleaner.log"


def setup_logging(level: int = logging.INFO, log_file: str | None = DEFAULT_LOG_FILE) -> None:
    """Set up logging configuration.

    Logs are written to both console (stderr) and a file.

    Args:
        level: Logging level
        log_file: Path to log file (None to disable file logging)
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
            handlers.append(file_handler)
        except OSError as e:
            # Fall back to console-only if file logging fails
            print(f"Warning: Could not open log file '{log_file}': {e}", file=sys.stderr)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True  # Replace any existing handlers
    )


def _read_token_from_file(env_file: str = ENV_FILE) -> str | None:
    """Read the Hugging Face token from a .env file."""
    env_path = Path(env_file)
    if not env_path.exists():
        return None
    try:
        with open(env_path, encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if line.startswith(f"{HF_TOKEN_KEY}="):
                    token = line.split('=', 1)[1].strip()
                    if token and token != 'your_token_here':
                        return token
    except OSError as e:
        logging.getLogger(__name__).debug(f"Failed to read {env_file}: {e}")
    return None


def load_hf_token(env_file: str = ENV_FILE) -> str | None:
    """Load Hugging Face token from environment or .env file.

    Only needed for gated model repositories; public models download
    without a token.

    Returns:
        Token string or None if not found
    """
    token = os.getenv(HF_TOKEN_KEY)
    if token:
        return token

    token = _read_token_from_file(env_file)
    if token:
        os.environ[HF_TOKEN_KEY] = token
    return token
