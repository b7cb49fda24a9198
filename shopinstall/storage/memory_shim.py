import threading
from dataclasses import dataclass, field

import zope.interface

from ..interfaces import ITokenStore


@zope.interface.implementer(ITokenStore)
@dataclass
class MemoryTokenStore:
    """
    Keep access tokens in a dict for the lifetime of the process.

    Only the oauth callback writes here, everything else reads.
    """

    tokens: dict = field(default_factory=dict)
    lock: object = field(default_factory=threading.Lock, repr=False)

    def put(self, shop, access_token):
        with self.lock:
            self.tokens[shop] = access_token

    def get(self, shop):
        with self.lock:
            return self.tokens.get(shop)
