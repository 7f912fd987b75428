import json
import logging
from unittest import mock

import pytest
from click.testing import CliRunner

from bnet_export import __version__
from bnet_export.cli.main import cli
from bnet_export.core.exceptions import RestoreRejected
from bnet_export.core.models import Credentials, ExportResult

URI = (
    "otpauth://totp/Battle.net:US-1234-5678-9012"
    "?secret=JBSWY3DPEHPK3PXP&issuer=Battle.net&algorithm=SHA1&digits=8&period=30"
)
RESULT = ExportResult(serial="US-1234-5678-9012", issuer="Battle.net", label="US-1234-5678-9012", uri=URI)
OPTIONS = ["export", "-t", "ST=US-abc", "-s", "US-1234-5678-9012", "-r", "ABCDEFGHIJ"]


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    yield
    # setup_logging binds handlers to the runner's streams
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def mock_export():
    with mock.patch("bnet_export.cli.commands.export_authenticator", return_value=RESULT) as patched:
        yield patched


def test_export_prints_uri(runner, mock_export):
    result = runner.invoke(cli, OPTIONS + ["--yes"])

    assert result.exit_code == 0, result.output
    assert URI in result.output
    assert "SHA1 / 8 digits / 30s" in result.output
    credentials = mock_export.call_args[0][0]
    assert credentials == Credentials(session_token="US-abc", serial="US-1234-5678-9012", restore_code="ABCDEFGHIJ")


def test_export_passes_label_and_issuer(runner, mock_export):
    result = runner.invoke(cli, OPTIONS + ["--yes", "--label", "Player#1234", "--issuer", "Blizzard"])

    assert result.exit_code == 0, result.output
    assert mock_export.call_args[1]["label"] == "Player#1234"
    assert mock_export.call_args[1]["issuer"] == "Blizzard"


def test_export_json_output(runner, mock_export):
    result = runner.invoke(cli, OPTIONS + ["--yes", "--json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"serial": "US-1234-5678-9012", "uri": URI}


def test_export_error_exits_non_zero(runner):
    error = RestoreRejected("restore request failed with HTTP 400. Response: {}", status_code=400)
    with mock.patch("bnet_export.cli.commands.export_authenticator", side_effect=error):
        result = runner.invoke(cli, OPTIONS + ["--yes"])

    assert result.exit_code == 1
    assert "RestoreRejected: restore request failed with HTTP 400" in result.output
    assert "otpauth://" not in result.output


def test_export_error_as_json(runner):
    error = RestoreRejected("restore request failed with HTTP 400", status_code=400)
    with mock.patch("bnet_export.cli.commands.export_authenticator", side_effect=error):
        result = runner.invoke(cli, OPTIONS + ["--yes", "--json"])

    assert result.exit_code == 1
    assert json.loads(result.output) == {
        "kind": "RestoreRejected",
        "message": "restore request failed with HTTP 400",
        "status_code": 400,
    }


def test_export_prompts_for_missing_values(runner, mock_export):
    result = runner.invoke(cli, ["export", "--yes"], input="ST=US-abc\nUS-1234\nABCDEFGHIJ\n")

    assert result.exit_code == 0, result.output
    credentials = mock_export.call_args[0][0]
    assert credentials.session_token == "US-abc"
    assert credentials.serial == "US-1234"
    assert credentials.restore_code == "ABCDEFGHIJ"


def test_export_reads_environment(runner, mock_export, monkeypatch):
    monkeypatch.setenv("BNET_SESSION_TOKEN", "ST=US-env")
    monkeypatch.setenv("BNET_SERIAL", "EU-1111")
    monkeypatch.setenv("BNET_RESTORE_CODE", "ENVCODE")

    result = runner.invoke(cli, ["export", "--yes"])

    assert result.exit_code == 0, result.output
    assert mock_export.call_args[0][0].serial == "EU-1111"


def test_export_empty_input_is_rejected(runner, mock_export):
    result = runner.invoke(cli, ["export", "--yes", "-t", "ST=US-abc", "-r", "ABC"], input="\n")

    assert result.exit_code == 1
    assert "InputError: authenticator serial is required" in result.output
    mock_export.assert_not_called()


def test_export_warns_and_can_be_cancelled(runner, mock_export):
    result = runner.invoke(cli, OPTIONS, input="n\n")

    assert result.exit_code == 1
    assert "single-use" in result.output
    mock_export.assert_not_called()


def test_export_missing_config_file(runner, mock_export):
    result = runner.invoke(cli, OPTIONS + ["--yes", "--config", "nope.yml"])

    assert result.exit_code == 1
    assert "ConfigurationError" in result.output
    mock_export.assert_not_called()


def test_validate_config_defaults(runner):
    result = runner.invoke(cli, ["validate-config"])

    assert result.exit_code == 0, result.output
    assert "Configuration is valid" in result.output
    assert "Battle.net" in result.output


def test_validate_config_missing_file(runner):
    result = runner.invoke(cli, ["validate-config", "--config", "nope.yml"])

    assert result.exit_code == 1
    assert "Configuration file not found" in result.output


def test_version(runner):
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output
