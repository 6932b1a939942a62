"""Core optimiser run logic.

This module contains the actual runner, separated from argument parsing.
Scripts are thin wrappers; this is the real implementation.
"""

import sys
import json
import logging
import importlib.util
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from pbropt.contracts.failure import NetworkFailure, ReconciliationError
from pbropt.pipeline.client import OptimiserClient
from pbropt.pipeline.processor import ReconciliationPipeline
from pbropt.reconcile.models import Dataset
from pbropt.schemas import CLIConfig, InternalConfig, ParamConfig, UserConfig, resolve_config


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DATA_ERROR = 1
EXIT_NETWORK_ERROR = 2


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def read_table(path: str, sep: str = ",") -> List[List[str]]:
    """Read a CSV export as a raw grid of strings.

    The header and unit rows are kept as data rows; no type inference is
    done so that timestamps and decimal commas reach the parsers untouched.
    """
    frame = pd.read_csv(path, header=None, dtype=str, keep_default_na=False, sep=sep)
    return frame.values.tolist()


def setup_logging(config: InternalConfig) -> None:
    """Configure the root logger from the resolved config."""
    log_level = getattr(logging, config.logging.level.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Clear existing handlers and add new ones
    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if config.logging.log_file:
        log_path = Path(config.logging.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    # stderr keeps stdout free for the payload
    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    logger.debug("Logging: level=%s, file=%s", config.logging.level, config.logging.log_file)


def build_config(user_config_path: Optional[str] = None,
                 cli_args: Optional[Dict[str, Any]] = None,
                 verbose: bool = False) -> InternalConfig:
    """Resolve Param < User < CLI into the runtime config."""
    param_cfg = ParamConfig()

    user_cfg = None
    if user_config_path:
        user_cfg = UserConfig.model_validate(load_user_config_dict(user_config_path))

    cli_args = dict(cli_args or {})
    if verbose and "log_level" not in cli_args:
        cli_args["log_level"] = "DEBUG"
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    return resolve_config(param_cfg, user_cfg, cli_cfg)


def run_optimise(
    sensor_path: str,
    lab_path: str,
    reactor_type: str,
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    solver_config: Optional[Dict[str, Any]] = None,
    output_path: Optional[str] = None,
    submit: bool = False,
    verbose: bool = False,
    sep: str = ",",
    session=None,
) -> int:
    """Reconcile a sensor/lab table pair and emit or submit the payload.

    Parameters
    ----------
    sensor_path, lab_path : str
        CSV exports of the sensor and lab tables (header row, unit row, data).
    reactor_type : str
        ``"agroscope"`` or ``"zhaw"``.
    user_config_path : str, optional
        Python file with a CONFIG dict.
    cli_args : dict, optional
        CLI overrides. Keys: endpoint, timezone, log_level, log_file.
    solver_config : dict, optional
        Object with optional ``config``, ``bounds``, ``horizon`` and
        ``impact`` entries, passed through to the optimiser untouched.
    output_path : str, optional
        Where to write the payload (or response with ``submit``). Defaults
        to stdout.
    submit : bool
        POST the payload to the optimiser instead of only printing it.
    sep : str
        Field separator of both CSV files.
    session : requests.Session, optional
        HTTP session for the client (for testing).

    Returns
    -------
    int
        0 on success, 1 on a fatal data error, 2 on a network error.

    Examples
    --------
    Write the payload for inspection::

        run_optimise("sensor.csv", "lab.csv", "zhaw", output_path="payload.json")
    """
    config = build_config(user_config_path, cli_args, verbose)
    setup_logging(config)

    if verbose:
        logger.debug("Full internal configuration:\n%s",
                     json.dumps(config.model_dump(), indent=2))

    solver_config = solver_config or {}
    try:
        dataset = Dataset(
            data=read_table(sensor_path, sep),
            metadata=read_table(lab_path, sep),
            reactor_type=reactor_type,
        )
        pipeline = ReconciliationPipeline(config)
        payload = pipeline.build_payload(
            dataset,
            config=solver_config.get("config"),
            bounds=solver_config.get("bounds"),
            horizon=solver_config.get("horizon"),
            impact_weights=solver_config.get("impact"),
        )
    except ReconciliationError as e:
        logger.error("Reconciliation failed [%s]: %s", e.kind.value, e.message)
        return EXIT_DATA_ERROR

    result: Any = payload.to_dict()
    if submit:
        client = OptimiserClient(config, session=session)
        try:
            result = client.submit(payload)
        except NetworkFailure as e:
            logger.error("Optimiser unreachable at %s: %s. Check the endpoint and retry.",
                         config.optimiser.endpoint, e.message)
            return EXIT_NETWORK_ERROR

    text = result if isinstance(result, str) else json.dumps(result, indent=2, sort_keys=True)
    if output_path:
        Path(output_path).write_text(text + "\n", encoding="utf-8")
        logger.info("Wrote %s", output_path)
    else:
        sys.stdout.write(text + "\n")

    return EXIT_OK
