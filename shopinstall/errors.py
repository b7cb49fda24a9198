"""
Failures that end a request.

Each error knows the status it should be rendered with and a message that is
safe to show to the user-agent.  Anything sensitive stays in the logs.
"""
import json


class ShopInstallError(Exception):
    status_code = 500
    default_message = "Internal server error."

    def __init__(self, message=None, cookies=None):
        self.message = message or self.default_message
        # Cookie directives that must still be applied to the error response.
        self.cookies = list(cookies or [])
        super().__init__(self.message)


class BadRequest(ShopInstallError):
    status_code = 400
    default_message = "Bad request."

    @classmethod
    def missing(cls, names, cookies=None):
        return cls(f"Missing {' or '.join(names)} parameter.", cookies=cookies)


class HmacInvalid(ShopInstallError):
    status_code = 400
    default_message = "HMAC signature does not match."


class OriginUnverified(ShopInstallError):
    status_code = 403
    default_message = "Request origin could not be verified."


class TokenExchangeFailed(ShopInstallError):
    status_code = 500
    default_message = "Error exchanging code for access token."


class Unauthenticated(ShopInstallError):
    status_code = 401
    default_message = "Not authenticated."


class UpstreamQueryFailed(ShopInstallError):
    status_code = 500
    default_message = "Error fetching products."

    @classmethod
    def from_errors(cls, errors):
        """Build from the `errors` list of a graphql response, if there is one."""
        if errors:
            return cls(json.dumps(errors))
        return cls()


class ConfigurationError(ValueError):
    pass
