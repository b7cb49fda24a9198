import hashlib
import hmac
from unittest.mock import MagicMock
from urllib.parse import urlencode

import pytest

from shopinstall import ShopInstallConfig, ShopInstallService
from shopinstall.storage.memory_shim import MemoryTokenStore


TEST_API_KEY = "test-api-key"
TEST_API_SECRET = "test-api-secret"
TEST_COOKIE_SECRET = "test-cookie-secret"
TEST_SHOP = "foo.example"
TEST_REDIRECT_URI = "https://app.example/auth/callback"


def sign_params(params, secret=TEST_API_SECRET):
    """Sign query params the way shopify does, returning a copy with `hmac`."""
    pairs = sorted((k, v) for k, v in params.items() if k != "hmac")
    message = urlencode(pairs, safe=":/")
    signed = dict(params)
    signed["hmac"] = hmac.new(
        secret.encode("utf8"), message.encode("utf8"), hashlib.sha256
    ).hexdigest()
    return signed


def make_response(status_code=200, json_payload=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if json_payload is None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = json_payload
    return response


@pytest.fixture
def config():
    return ShopInstallConfig(
        api_key=TEST_API_KEY,
        api_secret=TEST_API_SECRET,
        access_scopes=("read_products",),
        redirect_uri=TEST_REDIRECT_URI,
    )


@pytest.fixture
def token_store():
    return MemoryTokenStore()


@pytest.fixture
def products_api():
    return MagicMock()


@pytest.fixture
def service(config, token_store, products_api):
    return ShopInstallService(
        config, token_store=token_store, products_api=products_api
    )
