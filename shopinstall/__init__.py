"""
@NOTE: What a "shop" is.

shop_host: The value shopify sends us as the `shop` parameter, something like
    "{shop_name}.myshopify.com".  We key everything on it and never trust it
    until the hmac on the request checks out.

@NOTE: How the install works.

1. Shopify (or the merchant) hits the authorize endpoint with `shop` and `hmac`.
   We check the hmac, and if we already hold a token for the shop we send them
   straight to the app.  Otherwise we set a short lived cookie with a random
   nonce and redirect to shopify's consent screen with the same nonce as `state`.
2. Shopify redirects back to the callback with `code`, `shop`, `hmac` and
   `state`.  The `state` must match the cookie, the hmac must check out, then
   we trade the code for an offline access token and keep it for the shop.

Every step takes a RequestContext and either returns a Redirect or raises a
ShopInstallError, the web layer turns those into responses.
"""
import logging
import os
from dataclasses import dataclass, field
from urllib.parse import urlencode

import requests
import zope.interface

from .errors import (
    BadRequest,
    ConfigurationError,
    HmacInvalid,
    OriginUnverified,
    TokenExchangeFailed,
    Unauthenticated,
)
from .interfaces import (
    IHmacVerifier,
    IProductsAPI,
    IShopInstallService,
    IStateTokenManager,
    ITokenStore,
)
from .products_api import ProductsAPIService
from .scopes import get_missing_scopes
from .state import MINUTE_IN_SECONDS, CookieDirective, StateTokenManager
from .storage.memory_shim import MemoryTokenStore
from .util import build_app_url, is_valid_shop_host, parse_scopes
from .verification import HmacVerifier

logger = logging.getLogger(__name__)


DEFAULT_API_VERSION = "2026-01"


@dataclass
class ShopInstallConfig:
    """
    Mechanism to provide configuration to ShopInstallService.
    """

    api_key: str
    api_secret: str
    # The shopify access scopes that our app needs, such as read_products.
    access_scopes: tuple
    # Where shopify sends the callback with our grant code.
    redirect_uri: str
    api_version: str = DEFAULT_API_VERSION
    # Used to carry the nonce between authorize and callback.
    state_cookie_name: str = "shopinstall_state"
    state_max_age_in_seconds: int = 5 * MINUTE_IN_SECONDS
    # Only turn this off for local development over plain http.
    secure_cookies: bool = True
    # Where the user lands once the shop is authorized.
    app_view_path: str = "/app.html"
    token_exchange_timeout_in_seconds: float = 10
    api_timeout_in_seconds: float = 30

    @classmethod
    def from_environ(cls, environ=None):
        """Build the config from environment variables, read once at startup."""
        environ = os.environ if environ is None else environ
        required = (
            "SHOPIFY_API_KEY",
            "SHOPIFY_API_SECRET",
            "SHOPIFY_SCOPES",
            "REDIRECT_URI",
        )
        missing = [name for name in required if not environ.get(name)]
        if missing:
            raise ConfigurationError(
                f"Missing environment variables: {', '.join(missing)}"
            )
        secure_cookies = environ.get("SHOPINSTALL_SECURE_COOKIES", "true")
        return cls(
            api_key=environ["SHOPIFY_API_KEY"],
            api_secret=environ["SHOPIFY_API_SECRET"],
            access_scopes=parse_scopes(environ["SHOPIFY_SCOPES"]),
            redirect_uri=environ["REDIRECT_URI"],
            api_version=environ.get("SHOPIFY_API_VERSION") or DEFAULT_API_VERSION,
            secure_cookies=secure_cookies.strip().lower() not in ("0", "false", "no"),
        )


@dataclass
class RequestContext:
    """What a flow step gets to see of the incoming request."""

    params: dict = field(default_factory=dict)
    # Cookie values, already checked and unsigned by the web layer.
    cookies: dict = field(default_factory=dict)


@dataclass
class Redirect:
    """Send the user-agent to `url`, setting `cookies` on the way."""

    url: str
    cookies: list = field(default_factory=list)


@zope.interface.implementer(IShopInstallService)
@dataclass
class ShopInstallService:
    """
    Run the shopify oauth install and hand out the tokens it produces.
    """

    config: ShopInstallConfig
    token_store: ITokenStore = None
    hmac_verifier: IHmacVerifier = None
    state_manager: IStateTokenManager = None
    products_api: IProductsAPI = None

    def __post_init__(self):
        if self.token_store is None:
            self.token_store = MemoryTokenStore()
        if self.hmac_verifier is None:
            self.hmac_verifier = HmacVerifier(self.config.api_secret)
        if self.state_manager is None:
            self.state_manager = StateTokenManager(
                cookie_name=self.config.state_cookie_name,
                max_age=self.config.state_max_age_in_seconds,
                secure=self.config.secure_cookies,
            )
        if self.products_api is None:
            self.products_api = ProductsAPIService(
                api_version=self.config.api_version,
                timeout=self.config.api_timeout_in_seconds,
            )

    def begin_auth(self, context):
        """
        Redirect to shopify to request a token, unless we already have one.
        """
        params = context.params
        missing = self.get_missing_params(params, ("shop", "hmac"))
        if missing:
            raise BadRequest.missing(missing)

        shop_host = params["shop"]
        if not self.hmac_verifier.verify(params):
            logger.warning(f"HMAC BAD on authorize request for shop {shop_host!r}")
            raise HmacInvalid()
        if not is_valid_shop_host(shop_host):
            raise BadRequest("Shop is not properly formatted.")

        if self.token_store.get(shop_host):
            logger.info(f"Shop {shop_host} is already authorized, skip oauth.")
            return Redirect(self.get_app_url(shop_host))

        nonce, cookie = self.state_manager.issue()
        return Redirect(self.get_authorize_url(shop_host, nonce), cookies=[cookie])

    def auth_callback(self, context):
        """
        Validate oauth callback, get access token, then redirect to the app.

        Once the state has been matched the state cookie is cleared whatever
        happens next, the nonce is only good for one try.
        """
        params = context.params
        missing = self.get_missing_params(params, ("code", "shop", "hmac", "state"))
        if missing:
            raise BadRequest.missing(missing)

        shop_host = params["shop"]
        cookie_nonce = context.cookies.get(self.state_manager.cookie_name)
        if not self.state_manager.validate(params["state"], cookie_nonce):
            logger.warning(f"State does not match cookie for shop {shop_host!r}")
            raise OriginUnverified()

        #
        # Clear state cookie because it served its purpose and is now invalid.
        #
        clear_cookies = [self.state_manager.clear()]

        if not self.hmac_verifier.verify(params):
            logger.warning(f"HMAC BAD on oauth callback for shop {shop_host!r}")
            raise HmacInvalid(cookies=clear_cookies)
        if not is_valid_shop_host(shop_host):
            raise BadRequest("Shop is not properly formatted.", cookies=clear_cookies)

        try:
            access_token, access_scopes = self.request_access_token(
                shop_host,
                params["code"],
                self.config.api_key,
                self.config.api_secret,
            )
        except TokenExchangeFailed as e:
            e.cookies.extend(clear_cookies)
            raise

        missing_scopes = get_missing_scopes(access_scopes, self.config.access_scopes)
        if missing_scopes:
            logger.warning(
                f"Shop {shop_host} did not grant scopes: {','.join(missing_scopes)}"
            )

        self.token_store.put(shop_host, access_token)
        logger.info(f"Installed for shop {shop_host}")
        return Redirect(self.get_app_url(shop_host), cookies=clear_cookies)

    def fetch_products(self, shop_host):
        """Run the product query for a shop we hold a token for."""
        if not shop_host or not isinstance(shop_host, str):
            raise Unauthenticated()
        access_token = self.token_store.get(shop_host)
        if not access_token:
            raise Unauthenticated()
        return self.products_api.fetch_products(shop_host, access_token)

    def request_access_token(self, shop_host, grant_code, api_key, api_secret):
        """
        Use grant code from shopify to fetch the access token using a post request.

        Returns a 2-tuple of (access_token, access_scopes).
        """
        try:
            response = requests.post(
                f"https://{shop_host}/admin/oauth/access_token",
                json={
                    "client_id": api_key,
                    "client_secret": api_secret,
                    "code": grant_code,
                },
                timeout=self.config.token_exchange_timeout_in_seconds,
            )
        except requests.RequestException as e:
            logger.error(f"Error exchanging code for access token for {shop_host}: {e}")
            raise TokenExchangeFailed()

        if response.status_code != requests.codes.ok:
            logger.error(
                f"Error exchanging code for access token for {shop_host}: "
                f"{response.status_code} {response.text}"
            )
            raise TokenExchangeFailed()

        try:
            json_payload = response.json()
        except ValueError:
            json_payload = None
        access_token = (
            json_payload.get("access_token") if isinstance(json_payload, dict) else None
        )
        if not access_token or not isinstance(access_token, str):
            logger.error(
                f"No access_token in token response for {shop_host}: {response.text}"
            )
            raise TokenExchangeFailed()

        # Convert access scopes into a list.
        access_scopes = [
            scope.strip()
            for scope in str(json_payload.get("scope") or "").split(",")
            if scope.strip()
        ]
        return access_token, access_scopes

    def get_authorize_url(self, shop_host, nonce):
        query = sorted(
            {
                "client_id": self.config.api_key,
                # The scopes our app needs, like read_products.
                "scope": ",".join(self.config.access_scopes),
                "redirect_uri": self.config.redirect_uri,
                "state": nonce,
            }.items()
        )
        return f"https://{shop_host}/admin/oauth/authorize?{urlencode(query)}"

    def get_app_url(self, shop_host):
        return build_app_url(self.config.app_view_path, shop_host)

    def get_missing_params(self, params, names):
        return [name for name in names if not params.get(name)]


__all__ = [
    "CookieDirective",
    "Redirect",
    "RequestContext",
    "ShopInstallConfig",
    "ShopInstallService",
]
