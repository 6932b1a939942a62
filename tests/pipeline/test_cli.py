"""Tests for the optimiser command-line runner."""

import json
import logging

import pytest
import requests

from pbropt.cli import main
from pbropt.cli.run_optimise import (
    EXIT_DATA_ERROR,
    EXIT_NETWORK_ERROR,
    EXIT_OK,
    build_config,
    load_user_config_dict,
    read_table,
    run_optimise,
)

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def restore_root_logging():
    """setup_logging replaces the root handlers; put them back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _write_csv(path, rows):
    path.write_text("\n".join(",".join(str(c) for c in row) for row in rows) + "\n")
    return str(path)


@pytest.fixture
def csv_files(tmp_path, make_sensor_table, make_lab_table, hourly_iso):
    sensor = make_sensor_table("zhaw", [(ts, "100", "20.0") for ts in hourly_iso(*range(6))])
    t = hourly_iso(0, 5)
    lab = make_lab_table("zhaw", [(t[0], "0.05"), (t[1], "1.0")])
    return _write_csv(tmp_path / "sensor.csv", sensor), _write_csv(tmp_path / "lab.csv", lab)


@pytest.fixture
def user_config_file(tmp_path):
    path = tmp_path / "user_config.py"
    path.write_text('CONFIG = {"TIMEZONE": "Europe/Zurich", "RUN_START_THRESHOLD": 0.2}\n')
    return str(path)


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = 0

    def post(self, url, **kwargs):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.response


class FakeResponse:
    status_code = 200
    text = '{"schedule": [1, 2, 3]}'


class TestConfigLoading:

    def test_load_user_config_dict(self, user_config_file):
        assert load_user_config_dict(user_config_file)["TIMEZONE"] == "Europe/Zurich"

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_user_config_dict(str(tmp_path / "nope.py"))

    def test_config_without_dict(self, tmp_path):
        path = tmp_path / "empty.py"
        path.write_text("X = 1\n")
        with pytest.raises(ValueError, match="No CONFIG dict"):
            load_user_config_dict(str(path))

    def test_cli_beats_user_file(self, user_config_file):
        config = build_config(user_config_file, {"timezone": "UTC", "endpoint": None})
        assert config.aligner.timezone == "UTC"
        assert config.reconciler.run_start_threshold == 0.2

    def test_verbose_sets_debug(self):
        assert build_config(verbose=True).logging.level == "DEBUG"


class TestRunOptimise:

    def test_read_table_keeps_raw_strings(self, csv_files):
        table = read_table(csv_files[0])
        assert table[0][0] == "timestring"
        assert table[1][0] == ""
        assert table[2][0] == "2024-06-01T00:00:00.000Z"

    def test_writes_payload(self, csv_files, tmp_path):
        out = tmp_path / "payload.json"
        code = run_optimise(*csv_files, "zhaw", output_path=str(out),
                            solver_config={"horizon": {"hours": 24}})

        assert code == EXIT_OK
        body = json.loads(out.read_text())
        assert len(body["series"]) == 6
        assert body["series"][0]["X"] == 0.05
        assert body["series"][5]["X"] == 1.0
        assert body["horizon"] == {"hours": 24}

    def test_payload_to_stdout(self, csv_files, capsys):
        assert run_optimise(*csv_files, "zhaw") == EXIT_OK
        body = json.loads(capsys.readouterr().out)
        assert set(body) == {"series", "config", "bounds", "horizon", "impact"}

    def test_data_error_exit_code(self, csv_files):
        # zhaw tables lack the agroscope biomass column
        assert run_optimise(*csv_files, "agroscope") == EXIT_DATA_ERROR

    def test_submit_writes_response(self, csv_files, tmp_path):
        out = tmp_path / "response.json"
        session = FakeSession(response=FakeResponse())

        code = run_optimise(*csv_files, "zhaw", output_path=str(out), submit=True,
                            session=session)

        assert code == EXIT_OK
        assert json.loads(out.read_text()) == {"schedule": [1, 2, 3]}
        assert session.calls == 1

    def test_network_error_exit_code(self, csv_files, tmp_path):
        config_path = tmp_path / "no_retry.py"
        config_path.write_text('CONFIG = {"OPTIMISER_MAX_RETRIES": 0}\n')
        session = FakeSession(error=requests.ConnectionError("refused"))

        code = run_optimise(*csv_files, "zhaw", user_config_path=str(config_path),
                            submit=True, session=session)

        assert code == EXIT_NETWORK_ERROR
        assert session.calls == 1


class TestMain:

    def test_main_end_to_end(self, csv_files, tmp_path):
        out = tmp_path / "payload.json"
        code = main([*csv_files, "--reactor-type", "zhaw", "--output", str(out),
                     "--solver-config", '{"config": {"solver": "ipopt"}}'])
        assert code == EXIT_OK
        assert json.loads(out.read_text())["config"] == {"solver": "ipopt"}

    def test_main_rejects_bad_solver_json(self, csv_files):
        assert main([*csv_files, "--reactor-type", "zhaw", "--solver-config", "{nope"]) == 1

    def test_main_requires_reactor_type(self, csv_files):
        with pytest.raises(SystemExit):
            main(list(csv_files))
