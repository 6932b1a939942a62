"""ParamConfig: Expert defaults for the reconciliation pipeline.

This module defines the complete default configuration. ALL tunable
parameters must have defaults here. No runtime code should define
fallback values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from pbropt.schemas.base import PbrBaseModel, validate_timezone


# =============================================================================
# Nested Configuration Models
# =============================================================================

class ReconcilerConfig(PbrBaseModel):
    """Biomass reconciliation configuration.

    The two thresholds are empirical; they are exposed here rather than
    hard-coded so a facility can tune them.
    """
    run_start_threshold: float = Field(
        0.1, ge=0, description="Biomass below this value marks a possible run start"
    )
    plausibility_factor: float = Field(
        1.1, gt=0, description="Spline values above factor * max observed biomass are rejected"
    )
    spline_method: Literal["pchip", "natural"] = "pchip"
    densify_step: float = Field(
        0.05, gt=0, le=1.0, description="Spline sampling step as a fraction of the run span"
    )

    @field_validator("run_start_threshold", "plausibility_factor", "densify_step", mode="before")
    @classmethod
    def coerce_to_float(cls, v):
        """Allow int or float."""
        return float(v)

    @field_validator("spline_method", mode="before")
    @classmethod
    def normalize_method_name(cls, v):
        """Normalize method names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class AlignerConfig(PbrBaseModel):
    """Hourly alignment configuration."""
    timezone: str = Field("UTC", description="IANA zone used for local timestamps and hour keys")
    initial_biomass: float = Field(0.0, ge=0, description="Carried value before the first resolved hour")

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v):
        return validate_timezone(v)


class OptimiserConfig(PbrBaseModel):
    """Remote optimiser endpoint configuration."""
    endpoint: str = "http://localhost:8000/api/optimizer"
    timeout_sec: float = Field(30.0, gt=0)
    max_retries: int = Field(2, ge=0, le=10)
    retry_backoff_sec: float = Field(1.0, ge=0)


class LoggingConfig(PbrBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_file: Optional[str] = None


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(PbrBaseModel):
    """Complete expert configuration with all defaults.

    This is the single source of truth for all pipeline parameters.
    Every tunable parameter MUST have a default here.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    reconciler: ReconcilerConfig = Field(default_factory=ReconcilerConfig)
    aligner: AlignerConfig = Field(default_factory=AlignerConfig)
    optimiser: OptimiserConfig = Field(default_factory=OptimiserConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
