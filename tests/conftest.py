import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from spinnaker_resource.config import Config, configure_logging

API = "https://gate.example.com"


@pytest.fixture
def config():
    config = Config(
        SPINNAKER_API=API + "/",
        SPINNAKER_APPLICATION="checkout",
        SPINNAKER_PIPELINE="deploy-prod",
        AUTH_METHOD="ldap",
        LDAP_USERNAME="ci-bot",
        LDAP_PASSWORD="hunter2",
        X509_CERT="",
        X509_KEY="",
        OVERRIDE_LOGGING="DEBUG",
    )

    configure_logging(config)

    return config


@pytest.fixture
def make_response():
    def _make_response(status: int = 200, body=b"", headers=None):
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode()

        mock_response = MagicMock()
        mock_response.status = status
        mock_response.read = AsyncMock(return_value=body)
        mock_response.headers = headers or {}
        mock_response.text = AsyncMock(
            side_effect=lambda encoding="utf-8", errors="strict": body.decode(
                encoding, errors
            )
        )
        mock_response.__aenter__.return_value = mock_response
        mock_response.__aexit__.return_value = None
        return mock_response

    return _make_response


@pytest.fixture
def make_session():
    def _make_session(get_routes=None, post_response=None):
        """Session mock answering GET requests by url from ``get_routes``"""
        get_routes = get_routes or {}

        session = MagicMock()
        session.get = MagicMock(side_effect=lambda url, **kwargs: get_routes[url])
        session.post = MagicMock(return_value=post_response)
        session.close = AsyncMock()
        return session

    return _make_session
