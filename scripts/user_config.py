"""Optimiser user configuration.

This is the user-facing configuration file. Modify settings here to customize
the reconciliation. Advanced settings are in src/pbropt/schemas/param.py

Usage:
    python scripts/run_optimiser.py sensor.csv lab.csv --reactor-type zhaw --config scripts/user_config.py
"""

CONFIG = {
    # ========================================================================
    # LOCAL TIME
    # ========================================================================
    "TIMEZONE": "Europe/Zurich",   # Zone of the "dd.MM.yyyy HH:mm:ss.SSS" exports

    # ========================================================================
    # BIOMASS RECONCILIATION
    # ========================================================================
    "RUN_START_THRESHOLD": 0.1,    # g/L, lab values below this mark a new run
    "PLAUSIBILITY_FACTOR": 1.1,    # reject spline values above factor * max observed
    "SPLINE_METHOD": "pchip",      # "pchip" or "natural"

    # ========================================================================
    # OPTIMISER SERVICE
    # ========================================================================
    "OPTIMISER_URL": "http://localhost:8000/api/optimizer",
    "OPTIMISER_TIMEOUT_SEC": 30,
    "OPTIMISER_MAX_RETRIES": 2,

    # ========================================================================
    # LOGGING
    # ========================================================================
    "LOG_LEVEL": "INFO",
    "LOG_FILE": None,
}
