"""Layered configuration resolution.

Three layers contribute to the runtime config, lowest priority first:

    ParamConfig   complete expert defaults
    UserConfig    the user's CONFIG dict (flat aliases, nested overrides)
    CLIConfig     per-invocation operational switches

``resolve_config`` is the only place where they are combined.
"""

from typing import Optional, Type, TypeVar, Union

from pbropt.schemas.base import PbrBaseModel
from pbropt.schemas.cli import CLIConfig
from pbropt.schemas.internal import InternalConfig
from pbropt.schemas.param import ParamConfig
from pbropt.schemas.user import UserConfig

ModelT = TypeVar("ModelT", bound=PbrBaseModel)


def deep_merge(base: dict, *overrides: dict) -> dict:
    """Return a new dict with ``overrides`` applied left to right.

    Mappings present on both sides merge key by key; any other value in an
    override replaces the base value. Inputs are left untouched.

    Examples
    --------
    >>> deep_merge({"aligner": {"timezone": "UTC", "initial_biomass": 0.0}},
    ...            {"aligner": {"timezone": "Europe/Zurich"}})
    {'aligner': {'timezone': 'Europe/Zurich', 'initial_biomass': 0.0}}
    """
    merged = dict(base)
    for layer in overrides:
        for key, value in layer.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = deep_merge(current, value)
            else:
                merged[key] = value
    return merged


def _as_model(model_cls: Type[ModelT], value) -> ModelT:
    """Validate a dict layer (None or {} means an empty layer)."""
    if isinstance(value, model_cls):
        return value
    return model_cls.model_validate(value or {})


def resolve_config(
    param_cfg: Union[dict, ParamConfig],
    user_cfg: Optional[Union[dict, UserConfig]] = None,
    cli_cfg: Optional[Union[dict, CLIConfig]] = None,
) -> InternalConfig:
    """Merge the three layers and freeze the result.

    Parameters
    ----------
    param_cfg : dict or ParamConfig
        Expert defaults. A dict is validated (``{}`` gives every default).
    user_cfg : dict or UserConfig, optional
        User overrides.
    cli_cfg : dict or CLIConfig, optional
        Command-line overrides; they win over the user layer.

    Returns
    -------
    InternalConfig
        Immutable runtime configuration.

    Raises
    ------
    pydantic.ValidationError
        If a layer, or the merged result, is invalid (for example an unknown
        timezone or a negative threshold).

    Examples
    --------
    >>> config = resolve_config(ParamConfig(), {"TIMEZONE": "Europe/Zurich"},
    ...                         {"log_level": "DEBUG"})
    >>> config.aligner.timezone, config.logging.level
    ('Europe/Zurich', 'DEBUG')
    """
    param = _as_model(ParamConfig, param_cfg)
    user = _as_model(UserConfig, user_cfg)
    cli = _as_model(CLIConfig, cli_cfg)

    merged = deep_merge(
        param.model_dump(),
        user.to_internal_overrides(),
        cli.to_internal_overrides(),
    )
    return InternalConfig.model_validate(merged)
