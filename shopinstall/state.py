import hmac
import secrets
from dataclasses import dataclass

import zope.interface

from .interfaces import IStateTokenManager


MINUTE_IN_SECONDS = 60


ZERO_SECONDS = 0


NONCE_ENTROPY_IN_BYTES = 16


@dataclass(frozen=True)
class CookieDirective:
    """A cookie the web layer should set on the outgoing response."""

    name: str
    value: str
    max_age: int
    httponly: bool = True
    samesite: str = "lax"
    secure: bool = True


@zope.interface.implementer(IStateTokenManager)
@dataclass
class StateTokenManager:
    """
    Issue and check the nonce shopify hands back to us as `state`.

    The nonce lives only in the cookie, we keep nothing server side, so
    once the cookie is cleared or expires the nonce is gone for good.
    """

    cookie_name: str = "shopinstall_state"
    max_age: int = 5 * MINUTE_IN_SECONDS
    secure: bool = True

    def issue(self):
        nonce = secrets.token_hex(NONCE_ENTROPY_IN_BYTES)
        return nonce, self._directive(nonce, self.max_age)

    def validate(self, supplied_nonce, cookie_nonce):
        if not supplied_nonce or not cookie_nonce:
            return False
        if not isinstance(supplied_nonce, str) or not isinstance(cookie_nonce, str):
            return False
        return hmac.compare_digest(
            supplied_nonce.encode("utf8"), cookie_nonce.encode("utf8")
        )

    def clear(self):
        return self._directive("", ZERO_SECONDS)

    def _directive(self, value, max_age):
        return CookieDirective(
            name=self.cookie_name,
            value=value,
            max_age=max_age,
            httponly=True,
            samesite="lax",
            secure=self.secure,
        )
