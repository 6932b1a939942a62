"""Root-level pytest fixtures for the pbropt test suite.

Provides shared configuration fixtures following Pydantic-based architecture,
plus builders for the raw sensor and lab tables the pipeline consumes.
All tests must use these fixtures instead of creating raw dict configs.
"""

import pytest

from pbropt.schemas import ParamConfig, UserConfig, resolve_config


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults.

    Use this as the base for all test configs. Override specific values
    using make_config or by creating custom UserConfig instances.
    """
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Use this when tests don't care about specific config values and just
    need a valid InternalConfig to pass to constructors.

    Examples
    --------
    >>> def test_pipeline_init(internal_config):
    ...     pipeline = ReconciliationPipeline(internal_config)
    ...     assert pipeline.timezone == "UTC"
    """
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Use this when you need to override specific values for a test.
    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_custom_threshold(make_config):
    ...     config = make_config(RUN_START_THRESHOLD=0.2)
    ...     assert config.reconciler.run_start_threshold == 0.2
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        else:
            return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Raw Table Fixtures
# =============================================================================

SENSOR_UNITS = {
    "timestring": "",
    "PAR": "umol/m2/s",
    "PAR.1": "umol/m2/s",
    "PAR.2": "umol/m2/s",
    "TEMPERATURE": "degC",
    "FLOW.OF.ALGAE": "L/h",
}


@pytest.fixture
def make_sensor_table():
    """Factory for raw sensor tables.

    Each row is ``(timestamp, irradiance, temperature)``. For ``zhaw`` the
    irradiance may be a pair ``(par1, par2)``.

    Examples
    --------
    >>> table = make_sensor_table("agroscope", [("2024-06-01T00:00:00.000Z", 100, 20)])
    >>> table[0]
    ['timestring', 'PAR', 'TEMPERATURE', 'FLOW.OF.ALGAE']
    """
    def _make(reactor_type, rows, include_flow=True):
        if reactor_type == "zhaw":
            header = ["timestring", "PAR.1", "PAR.2", "TEMPERATURE"]
        else:
            header = ["timestring", "PAR", "TEMPERATURE"]
        if include_flow:
            header.append("FLOW.OF.ALGAE")

        table = [header, [SENSOR_UNITS[h] for h in header]]
        for ts, irradiance, temperature in rows:
            if reactor_type == "zhaw":
                par = list(irradiance) if isinstance(irradiance, (tuple, list)) \
                    else [irradiance, irradiance]
            else:
                par = [irradiance]
            row = [ts] + par + [temperature]
            if include_flow:
                row.append("12.5")
            table.append(row)
        return table

    return _make


@pytest.fixture
def make_lab_table():
    """Factory for raw lab tables.

    Each row is ``(timestamp, biomass)`` or ``(timestamp, biomass, dose)``.
    Set ``with_nutrient=False`` to leave the dose column out entirely.
    """
    def _make(reactor_type, rows, with_nutrient=True):
        if reactor_type == "zhaw":
            biomass_col, nutrient_col = "Trockenmasse", "Naehrstoffzugabe"
        else:
            biomass_col, nutrient_col = "Trockensubstanz", "N.Dosierung"

        header = ["timestring", biomass_col]
        units = ["", "g/L"]
        if with_nutrient:
            header.append(nutrient_col)
            units.append("g")

        table = [header, units]
        for row in rows:
            ts, biomass = row[0], row[1]
            dose = row[2] if len(row) > 2 else ""
            out = [ts, biomass]
            if with_nutrient:
                out.append(dose)
            table.append(out)
        return table

    return _make


@pytest.fixture
def hourly_iso():
    """ISO timestamps ``2024-06-01T{HH}:00:00.000Z`` for the given hours."""
    def _make(*hours, minute=0):
        return [f"2024-06-01T{h:02d}:{minute:02d}:00.000Z" for h in hours]

    return _make
