import logging
import hmac
import hashlib
from dataclasses import dataclass
from urllib.parse import urlencode

import zope.interface

from .interfaces import IHmacVerifier


logger = logging.getLogger(__name__)


@zope.interface.implementer(IHmacVerifier)
@dataclass
class HmacVerifier:
    """
    Check the `hmac` query parameter shopify adds to requests it sends our way.

    Every failure is just False, the caller can't tell a tampered value from
    a garbled one.
    """

    api_secret: str

    def verify(self, query):
        try:
            hmac_to_check = query.get("hmac")
            if not hmac_to_check or not isinstance(hmac_to_check, str):
                return False
            our_hmac = self.calculate_hmac(query.items())
            return hmac.compare_digest(
                our_hmac.encode("utf8"), hmac_to_check.encode("utf8")
            )
        except (AttributeError, TypeError, ValueError):
            logger.debug("Query could not be encoded for hmac check.", exc_info=True)
            return False

    def calculate_hmac(self, param_items):
        encoded_params = self.encode_params_for_hmac(param_items)
        # Generate the hex digest for the sorted parameters using the secret.
        return hmac.new(
            self.api_secret.encode("utf8"),
            encoded_params.encode("utf8"),
            hashlib.sha256,
        ).hexdigest()

    def encode_params_for_hmac(self, param_items):
        """
        Encode params with special shopify rules.

        RULE #1: ("k[]", ["1", "2"]) is converted to ("k", '["1", "2"]')
        RULE #2: safe chars are ":/" for whatever reason.
        """
        params_to_encode = []
        for (k, v) in sorted(param_items):
            if k == "hmac":
                continue
            elif k.endswith("[]"):
                k = k[:-2]
                values = [v] if isinstance(v, str) else v
                v = "[{}]".format(", ".join(f'"{item}"' for item in values))
            params_to_encode.append((k, v))

        return urlencode(params_to_encode, safe=":/")
