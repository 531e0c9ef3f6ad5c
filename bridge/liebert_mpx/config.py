# Liebert MPX Bridge
# Created by Matthew Valancy, Valpatel Software LLC
# Copyright 2026 GPL-3.0 License
# https://github.com/mvalancy/CyberPower-PDU

"""Configuration from environment variables with validation."""

import logging
import os

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration is invalid."""


class Config:
    def __init__(self):
        self.host = os.environ.get("MPX_HOST", "")
        # Factory credentials of the MPX web interface
        self.username = os.environ.get("MPX_USERNAME", "Liebert")
        self.password = os.environ.get("MPX_PASSWORD", "Liebert")

        self.http_timeout = self._float("MPX_HTTP_TIMEOUT", "10", 0.5, 120)
        self.log_level = os.environ.get("MPX_LOG_LEVEL", "INFO").upper()

        if any(c in self.host for c in "/ "):
            raise ConfigError(f"MPX_HOST must be a bare host[:port]: {self.host!r}")

        self._log_config()

    @staticmethod
    def _float(env: str, default: str, min_val: float, max_val: float) -> float:
        raw = os.environ.get(env, default)
        try:
            val = float(raw)
        except (ValueError, TypeError):
            raise ConfigError(f"{env}={raw!r} is not a valid number")
        if not (min_val <= val <= max_val):
            raise ConfigError(f"{env}={val} out of range [{min_val}, {max_val}]")
        return val

    def _log_config(self):
        logger.debug(
            "Config: host=%s user=%s timeout=%.1fs log=%s",
            self.host or "(unset)", self.username, self.http_timeout,
            self.log_level,
        )
