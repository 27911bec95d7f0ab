import logging
import os
import sys
from typing import Optional, Sequence

import yaml

from exceptions import ConfigurationError
from scoring_schema import ScoringConfig, validate_scoring_config

APP_VERSION = "1.0.0"
CONFIG_FILENAME = "scoring.yaml"
# Installed by the ``share/musclerank`` data-files entry in pyproject.toml.
CONFIG_SEARCH_PATHS = (
    os.path.join(os.path.dirname(os.path.abspath(__file__)), CONFIG_FILENAME),
    os.path.join(sys.prefix, "share", "musclerank", CONFIG_FILENAME),
)


def default_config_path(candidates: Optional[Sequence[str]] = None) -> str:
    """Return the first existing default scoring config, else the first candidate."""
    candidates = candidates or CONFIG_SEARCH_PATHS
    for path in candidates:
        if os.path.exists(path):
            return path
    return candidates[0]


DEFAULT_CONFIG_PATH = default_config_path()

logger = logging.getLogger(__name__)


class ScoringConfigFile:
    """Load the scoring parameters from a YAML (or JSON) document."""

    def __init__(self, path: str = DEFAULT_CONFIG_PATH) -> None:
        self.path = path

    def read(self) -> dict:
        if not os.path.exists(self.path):
            raise ConfigurationError(f"scoring config not found: {self.path}")
        with open(self.path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"cannot parse {self.path}: {e}") from e
        if data is None:
            raise ConfigurationError(f"scoring config is empty: {self.path}")
        return data

    def load(self) -> ScoringConfig:
        config = validate_scoring_config(self.read())
        logger.info("loaded scoring config v%s from %s", config.version, self.path)
        return config


def load_scoring_config(path: str = DEFAULT_CONFIG_PATH) -> ScoringConfig:
    return ScoringConfigFile(path).load()
