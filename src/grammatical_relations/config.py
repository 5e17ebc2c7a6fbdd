"""Configuration for the Universal Chinese grammatical relations package."""

import logging
import os
from pathlib import Path


# Base directories
PACKAGE_DIR = Path(__file__).parent
DATA_DIR = PACKAGE_DIR / "data"

# Relation table (ordered relation definitions with their tree patterns)
DEFAULT_RELATIONS_FILE = Path(
    os.environ.get(
        "GRAMMATICAL_RELATIONS_TABLE",
        DATA_DIR / "universal_chinese.yaml",
    )
)

# Language variant served by the default table
LANGUAGE = "UniversalChinese"

# Name of the pattern binding that designates the dependent node
TARGET_NODE_NAME = "target"

# Logging
LOG_LEVEL = os.environ.get("GRAMMATICAL_RELATIONS_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging for scripts and notebooks using this package."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO),
                        format=LOG_FORMAT)
