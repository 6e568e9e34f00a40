from datetime import datetime, timezone

import boto3
import pytest
from botocore.stub import Stubber

from aws_mfa_manager import session_exchange
from aws_mfa_manager.errors import ExchangeError
from aws_mfa_manager.session_exchange import StsSessionExchanger

PARAMS = {
    "DurationSeconds": 3600,
    "SerialNumber": "arn:aws:iam::123456789012:mfa/me",
    "TokenCode": "123456",
}


@pytest.fixture
def sts_stub(monkeypatch):
    client = boto3.client(
        "sts",
        region_name="us-east-1",
        aws_access_key_id="AKIALONG",
        aws_secret_access_key="long-secret",
    )
    created = []

    def fake_client(service, **kwargs):
        created.append((service, kwargs))
        return client

    monkeypatch.setattr(session_exchange.boto3, "client", fake_client)
    with Stubber(client) as stubber:
        yield stubber, created


def _exchange():
    return StsSessionExchanger().exchange(
        region="eu-west-1",
        access_key_id="AKIALONG",
        secret_access_key="long-secret",
        serial_number=PARAMS["SerialNumber"],
        token_code=PARAMS["TokenCode"],
        duration_seconds=PARAMS["DurationSeconds"],
    )


def test_exchange_returns_session(sts_stub):
    stubber, created = sts_stub
    stubber.add_response(
        "get_session_token",
        {
            "Credentials": {
                "AccessKeyId": "ASIATEMPKEY12345",
                "SecretAccessKey": "temp-secret",
                "SessionToken": "temp-token",
                "Expiration": datetime(2026, 2, 9, 12, 0, 0, tzinfo=timezone.utc),
            }
        },
        PARAMS,
    )

    session = _exchange()

    assert session.access_key_id == "ASIATEMPKEY12345"
    assert session.session_token == "temp-token"
    assert session.expiration == datetime(2026, 2, 9, 12, 0, 0, tzinfo=timezone.utc)
    assert session.missing_fields() == []
    service, kwargs = created[0]
    assert service == "sts"
    assert kwargs["region_name"] == "eu-west-1"
    assert kwargs["aws_access_key_id"] == "AKIALONG"


def test_exchange_wraps_client_errors(sts_stub):
    stubber, _ = sts_stub
    stubber.add_client_error("get_session_token", service_error_code="AccessDenied", http_status_code=403)

    with pytest.raises(ExchangeError):
        _exchange()


def test_exchange_requires_region_and_keys():
    exchanger = StsSessionExchanger()
    with pytest.raises(ExchangeError):
        exchanger.exchange(
            region="",
            access_key_id="a",
            secret_access_key="b",
            serial_number="s",
            token_code="123456",
            duration_seconds=900,
        )
    with pytest.raises(ExchangeError):
        exchanger.exchange(
            region="us-east-1",
            access_key_id="",
            secret_access_key="b",
            serial_number="s",
            token_code="123456",
            duration_seconds=900,
        )
