import pytest

from aws_mfa_manager import __version__, cli
from aws_mfa_manager.config_loader import DEFAULT_CREDENTIALS_FILE
from aws_mfa_manager.credential_store import CredentialStore
from aws_mfa_manager.errors import MissingDeviceError

from .conftest import FakeExchanger


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.parse_args(["--version"])
    assert excinfo.value.code == 0
    assert capsys.readouterr().out == f"{__version__}\n"


def test_defaults_leave_explicit_values_unset():
    args = cli.parse_args([])
    assert args.profile is None
    assert args.device is None
    assert args.duration is None
    assert args.token is None
    assert args.region is None
    assert args.force is False
    assert args.long_term_suffix == "long-term"
    assert args.short_term_suffix == "none"
    assert args.credentials_file == DEFAULT_CREDENTIALS_FILE


def test_main_refreshes(monkeypatch, credentials_file):
    exchanger = FakeExchanger()
    monkeypatch.setattr(cli, "CredentialRefresher", lambda: _refresher(exchanger))

    code = cli.main(["--force", "--token", "123456", "--credentials-file", str(credentials_file)])

    assert code == 0
    assert len(exchanger.calls) == 1
    assert CredentialStore.load(credentials_file).get("default", "expiration") == "2026-02-09 12:00:00"


def test_main_reports_errors(monkeypatch, caplog, tmp_path):
    class Failing:
        def refresh_once(self, inputs, region=None):
            raise MissingDeviceError("missing MFA device")

    monkeypatch.setattr(cli, "CredentialRefresher", Failing)

    code = cli.main(["--credentials-file", str(tmp_path / "credentials")])

    assert code == 1
    assert "missing MFA device" in caplog.text


def _refresher(exchanger):
    from aws_mfa_manager.refresher import CredentialRefresher

    return CredentialRefresher(env={}, exchanger=exchanger)
