"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict, field_validator
from pbropt.schemas.base import PbrBaseModel, validate_timezone


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalReconcilerConfig(PbrBaseModel):
    """Runtime reconciler configuration."""
    run_start_threshold: float = Field(ge=0)
    plausibility_factor: float = Field(gt=0)
    spline_method: Literal["pchip", "natural"]
    densify_step: float = Field(gt=0, le=1.0)


class InternalAlignerConfig(PbrBaseModel):
    """Runtime aligner configuration."""
    timezone: str
    initial_biomass: float = Field(ge=0)

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v):
        return validate_timezone(v)


class InternalOptimiserConfig(PbrBaseModel):
    """Runtime optimiser client configuration."""
    endpoint: str
    timeout_sec: float = Field(gt=0)
    max_retries: int = Field(ge=0, le=10)
    retry_backoff_sec: float = Field(ge=0)


class InternalLoggingConfig(PbrBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    log_file: Optional[str]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(PbrBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that processing code sees.
    It is fully validated, immutable, and contains explicit values for
    all parameters.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.threshold = config.reconciler.run_start_threshold  # NOT .get()
            self.timezone = config.aligner.timezone

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation

    All of that happens during config resolution, not in runtime code.
    """

    reconciler: InternalReconcilerConfig
    aligner: InternalAlignerConfig
    optimiser: InternalOptimiserConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
