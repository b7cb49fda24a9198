from zope.interface import Attribute, Interface


class IWebShim(Interface):
    def get_request_context():
        """Build the RequestContext for the current request."""

    def set_cookie(response, directive):
        """Apply a CookieDirective to the given response."""


class ITokenStore(Interface):
    def put(shop, access_token):
        """Store the access token for the shop, replacing any existing one."""

    def get(shop):
        """Return the access token for the shop or None."""


class IHmacVerifier(Interface):
    def verify(query):
        """Return True if the query was signed with our secret."""


class IStateTokenManager(Interface):
    cookie_name = Attribute("Name of the cookie carrying the nonce.")

    def issue():
        """Return a 2-tuple of (nonce, cookie directive)."""

    def validate(supplied_nonce, cookie_nonce):
        """Return True if both nonces are present and equal."""

    def clear():
        """Return a cookie directive that removes the state cookie."""


class IProductsAPI(Interface):
    def fetch_products(shop, access_token):
        """Return the raw product query payload for the shop."""


class IShopInstallService(Interface):
    pass
