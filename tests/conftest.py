"""Shared fixtures: throwaway RSA key, service-account JSON, fake HTTP responses."""

import json

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from engines.config import BingConfig, GoogleConfig, IndexerConfig, NaverConfig

SA_EMAIL = "indexer@test-project.iam.gserviceaccount.com"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None, reason=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else (json.dumps(payload) if payload is not None else "")
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON")
        return self._payload


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_key):
    return rsa_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture
def service_account_json(private_key_pem):
    return json.dumps({"type": "service_account", "client_email": SA_EMAIL, "private_key": private_key_pem})


@pytest.fixture
def config(service_account_json):
    return IndexerConfig(
        bing=BingConfig(api_key="test-key"),
        google=GoogleConfig(service_account_json=service_account_json),
        naver=NaverConfig(delay=0),
        batch_delay=0,
    )
