import logging
import os
from pathlib import Path

from src.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Startup configuration is unusable."""


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.

    Raises:
        ConfigError: data dir not writable or required env vars missing
    """
    ops = rules.ops

    if ops.data_dir_required:
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"Data dir {data_dir} cannot be created: {e}") from e
        if not os.access(data_dir, os.W_OK):
            raise ConfigError(f"Data dir {data_dir} is not writable")

    missing = [name for name in ops.required_env if not os.environ.get(name)]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    logger.info("Configuration validated (data dir: %s)", data_dir)
