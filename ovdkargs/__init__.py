"""Application argument parsing for the DPDK vSwitch datapath."""

from ovdkargs.config import (
    AppConfig,
    ConfigError,
    FrameSizeError,
    current_config,
    get_log_level,
    get_max_frame_size,
    get_portmask,
    get_stats_core,
    get_stats_interval,
    parse_app_args,
    parse_args,
    usage,
)

__all__ = [
    "AppConfig",
    "ConfigError",
    "FrameSizeError",
    "current_config",
    "get_log_level",
    "get_max_frame_size",
    "get_portmask",
    "get_stats_core",
    "get_stats_interval",
    "parse_app_args",
    "parse_args",
    "usage",
]
