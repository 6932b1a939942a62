"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., TIMEZONE → timezone, OPTIMISER_URL → endpoint).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient to accept
both uppercase and lowercase keys, integers where floats are expected, etc.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from pbropt.schemas.base import PbrBaseModel


class UserReconcilerConfig(PbrBaseModel):
    """User-facing reconciler config."""
    run_start_threshold: Optional[float] = None
    plausibility_factor: Optional[float] = None
    spline_method: Optional[str] = None
    densify_step: Optional[float] = None

    @field_validator("spline_method", mode="before")
    @classmethod
    def normalize_method(cls, v):
        """Normalize method names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserAlignerConfig(PbrBaseModel):
    """User-facing aligner config."""
    timezone: Optional[str] = None
    initial_biomass: Optional[float] = None


class UserOptimiserConfig(PbrBaseModel):
    """User-facing optimiser config."""
    endpoint: Optional[str] = None
    timeout_sec: Optional[float] = None
    max_retries: Optional[int] = None
    retry_backoff_sec: Optional[float] = None


class UserConfig(PbrBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    Usage
    -----
        user_cfg = UserConfig(
            TIMEZONE="Europe/Zurich",
            RUN_START_THRESHOLD=0.2,
            OPTIMISER_URL="https://example.org/api/optimizer",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Reconciler settings (flat aliases)
    run_start_threshold: Optional[float] = Field(None, alias="RUN_START_THRESHOLD")
    plausibility_factor: Optional[float] = Field(None, alias="PLAUSIBILITY_FACTOR")
    spline_method: Optional[str] = Field(None, alias="SPLINE_METHOD")
    densify_step: Optional[float] = Field(None, alias="DENSIFY_STEP")

    # Aligner settings (flat aliases)
    timezone: Optional[str] = Field(None, alias="TIMEZONE")

    # Optimiser settings (flat aliases)
    endpoint: Optional[str] = Field(None, alias="OPTIMISER_URL")
    timeout_sec: Optional[float] = Field(None, alias="OPTIMISER_TIMEOUT_SEC")
    max_retries: Optional[int] = Field(None, alias="OPTIMISER_MAX_RETRIES")

    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL"
    )
    log_file: Optional[str] = Field(None, alias="LOG_FILE")

    # Nested overrides (advanced users)
    reconciler: Optional[UserReconcilerConfig] = None
    aligner: Optional[UserAlignerConfig] = None
    optimiser: Optional[UserOptimiserConfig] = None

    model_config = PbrBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("run_start_threshold", "plausibility_factor", "densify_step",
                     "timeout_sec", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("spline_method", mode="before")
    @classmethod
    def normalize_method_names(cls, v):
        """Normalize method names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        # Reconciler section
        reconciler = {}
        if self.run_start_threshold is not None:
            reconciler["run_start_threshold"] = self.run_start_threshold
        if self.plausibility_factor is not None:
            reconciler["plausibility_factor"] = self.plausibility_factor
        if self.spline_method is not None:
            reconciler["spline_method"] = self.spline_method
        if self.densify_step is not None:
            reconciler["densify_step"] = self.densify_step

        # Merge with explicit reconciler config
        if self.reconciler is not None:
            reconciler.update(self.reconciler.model_dump(exclude_none=True))

        if reconciler:
            overrides["reconciler"] = reconciler

        # Aligner section
        aligner = {}
        if self.timezone is not None:
            aligner["timezone"] = self.timezone

        if self.aligner is not None:
            aligner.update(self.aligner.model_dump(exclude_none=True))

        if aligner:
            overrides["aligner"] = aligner

        # Optimiser section
        optimiser = {}
        if self.endpoint is not None:
            optimiser["endpoint"] = self.endpoint
        if self.timeout_sec is not None:
            optimiser["timeout_sec"] = self.timeout_sec
        if self.max_retries is not None:
            optimiser["max_retries"] = self.max_retries

        if self.optimiser is not None:
            optimiser.update(self.optimiser.model_dump(exclude_none=True))

        if optimiser:
            overrides["optimiser"] = optimiser

        # Logging section
        logging_cfg = {}
        if self.log_level is not None:
            logging_cfg["level"] = self.log_level
        if self.log_file is not None:
            logging_cfg["log_file"] = self.log_file

        if logging_cfg:
            overrides["logging"] = logging_cfg

        return overrides
