import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

POOL_SIZE_MIN, POOL_SIZE_MAX = 1, 255
THRESHOLD_MIN, THRESHOLD_MAX = 0, 255

OUTPUT_SUFFIX = "_BINARIZED.bmp"
LOG_FORMAT = '%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s'
LOG_DATEFMT = '%H:%M:%S'


def _bounded_env_int(name: str, fallback: int, low: int, high: int) -> int:
    """
    Read an integer from the environment, keeping *fallback* when the value
    is missing, non-numeric or outside [low, high].
    """
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return fallback
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not a number, using {fallback}")
        return fallback
    if not low <= value <= high:
        logger.warning(f"{name}={value} is outside [{low}, {high}], using {fallback}")
        return fallback
    return value


LOG_LEVEL = os.getenv("BINARIZER_LOG_LEVEL", "INFO").upper()
DEFAULT_POOL_SIZE = _bounded_env_int("BINARIZER_DEFAULT_POOL_SIZE", 5, POOL_SIZE_MIN, POOL_SIZE_MAX)
DEFAULT_THRESHOLD = _bounded_env_int("BINARIZER_DEFAULT_THRESHOLD", 127, THRESHOLD_MIN, THRESHOLD_MAX)
