"""Entry point: parse the application arguments and report the configuration."""

import logging
import sys

from ovdkargs.config import current_config, parse_app_args
from ovdkargs.logs import level_name, setup_logging

logger = logging.getLogger("ovdkargs")


def main(argv=None):
    if argv is None:
        argv = sys.argv
    # Fatal argument errors exit inside parse_app_args.
    if parse_app_args(argv) < 0:
        print("Error: Invalid frame size", file=sys.stderr)
        return 1

    config = current_config()
    setup_logging(config.log_level)
    logger.info("Ports in use: %s", config.ports() or "none")
    logger.info("Log level: %s", level_name(config.log_level))
    logger.info("Maximum frame size: %d", config.max_frame_size)
    if config.stats_enabled:
        logger.info(
            "Printing stats every %ds on core %d", config.stats_interval, config.stats_core
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
