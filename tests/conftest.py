from datetime import datetime, timezone

import pytest

from aws_mfa_manager.session_exchange import SessionCredentials


class FakeExchanger:
    def __init__(self, credentials=None, error=None):
        self.calls = []
        self._credentials = credentials or SessionCredentials(
            access_key_id="ASIATEMP",
            secret_access_key="temp-secret",
            session_token="temp-session-token",
            expiration=datetime(2026, 2, 9, 12, 0, 0, tzinfo=timezone.utc),
        )
        self._error = error

    def exchange(self, **kwargs):
        self.calls.append(kwargs)
        if self._error is not None:
            raise self._error
        return self._credentials


@pytest.fixture
def fake_exchanger():
    return FakeExchanger()


@pytest.fixture
def credentials_file(tmp_path):
    path = tmp_path / "aws" / "credentials"
    path.parent.mkdir()
    path.write_text(
        "[default-long-term]\n"
        "aws_access_key_id = AKIALONG\n"
        "aws_secret_access_key = long-secret\n"
        "aws_mfa_device = arn:aws:iam::123456789012:mfa/me\n",
        encoding="utf-8",
    )
    return path
