import logging
from dataclasses import dataclass

from pyramid.httpexceptions import HTTPFound, status_map
from pyramid.request import Request
from pyramid.response import Response
import zope.interface

from .. import RequestContext
from ..errors import BadRequest
from ..interfaces import IWebShim


logger = logging.getLogger(__name__)


@dataclass
class PyramidWebShimConfig:
    # This is used to sign cookies.
    cookie_secret: str
    cookie_salt: str = None


@zope.interface.implementer(IWebShim)
@dataclass
class PyramidWebShim:
    """Shim between the install flow and pyramid for web tasks."""

    # Builds a serializer from (secret, salt), see `cookieserializer`.
    signed_serializer: object
    # Configuration params that describe how we should behave.
    config: PyramidWebShimConfig
    # The current request.
    request: Request

    def get_request_context(self, cookie_names=()):
        return RequestContext(
            params=self.get_params(),
            cookies={name: self.get_cookie(name) for name in cookie_names},
        )

    def get_params(self):
        params = {}
        try:
            for name in self.request.GET.keys():
                if name.endswith("[]"):
                    params[name] = self.request.GET.getall(name)
                else:
                    params[name] = self.request.GET.get(name)
        except UnicodeDecodeError:
            raise BadRequest("Query string could not be decoded.")
        return params

    def _serializer(self):
        return self.signed_serializer(
            self.config.cookie_secret, self.config.cookie_salt
        )

    def set_cookie(self, response, directive):
        response.set_cookie(
            directive.name,
            self._serializer().dumps(directive.value),
            max_age=directive.max_age,
            httponly=directive.httponly,
            samesite=directive.samesite,
            secure=directive.secure,
            path="/",
        )

    def get_cookie(self, name, default=None):
        if name not in self.request.cookies:
            return default
        try:
            return self._serializer().loads(self.request.cookies[name])
        except ValueError:
            logger.info(f"Cookie {name} has a bad signature, ignoring it.")
            return default

    def redirect(self, outcome):
        response = HTTPFound(location=outcome.url)
        for directive in outcome.cookies:
            self.set_cookie(response, directive)
        return response

    def response_json(self, payload):
        return Response(json_body=payload)

    def error_response(self, error):
        response = status_map[error.status_code](
            text=error.message, content_type="text/plain"
        )
        for directive in error.cookies:
            self.set_cookie(response, directive)
        return response
