import logging
import os
from pathlib import Path

from src.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when the environment does not satisfy the ops rules."""


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.

    Raises:
        ConfigError: Missing data dir or required environment variables
    """
    ops = rules.ops

    # 1. Data dir holds the SQLite database
    if ops.data_dir_required:
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"Data directory {data_dir} is not usable: {e}") from e
        if not os.access(data_dir, os.W_OK):
            raise ConfigError(f"Data directory {data_dir} is not writable")

    # 2. Required env
    missing = [name for name in ops.required_env if name not in os.environ]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    # 3. Cron secret is optional; without it the cron endpoints are open
    if not os.environ.get(ops.cron.secret_env):
        logger.warning(
            "%s is not set; cron endpoints accept unauthenticated requests",
            ops.cron.secret_env,
        )

    logger.info("Configuration validated (data dir %s)", data_dir)
