"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: optimiser endpoint, local timezone, verbosity.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from pbropt.schemas.base import PbrBaseModel


class CLIConfig(PbrBaseModel):
    """Command-line configuration overrides.

    Operational-only settings that override user and param configs.
    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(
            endpoint="https://example.org/api/optimizer",
            timezone="Europe/Zurich",
            log_level="DEBUG",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    endpoint: Optional[str] = None
    timezone: Optional[str] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None
    log_file: Optional[str] = None

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.endpoint is not None:
            overrides["optimiser"] = {"endpoint": self.endpoint}

        if self.timezone is not None:
            overrides["aligner"] = {"timezone": self.timezone}

        logging_overrides = {}
        if self.log_level is not None:
            logging_overrides["level"] = self.log_level
        if self.log_file is not None:
            logging_overrides["log_file"] = self.log_file
        if logging_overrides:
            overrides["logging"] = logging_overrides

        return overrides
