import logging
import os
import socketserver
from pathlib import Path
from wsgiref.simple_server import WSGIServer, make_server

from dotenv import load_dotenv
from pyramid.config import Configurator
from pyramid.response import FileResponse

from .. import ShopInstallConfig, ShopInstallService
from ..cookieserializer import get_default_signed_serializer
from ..errors import BadRequest, ShopInstallError
from ..interfaces import IShopInstallService
from .pyramid_shim import PyramidWebShim, PyramidWebShimConfig


logger = logging.getLogger(__name__)


PUBLIC_DIR = Path(__file__).resolve().parent.parent / "public"


def get_service(request):
    return request.registry.getUtility(IShopInstallService)


def home_view(request):
    return FileResponse(str(PUBLIC_DIR / "index.html"), request=request)


def app_view(request):
    return FileResponse(str(PUBLIC_DIR / "app.html"), request=request)


def begin_auth_view(request):
    service = get_service(request)
    outcome = service.begin_auth(request.web_shim.get_request_context())
    return request.web_shim.redirect(outcome)


def auth_callback_view(request):
    service = get_service(request)
    context = request.web_shim.get_request_context(
        cookie_names=(service.state_manager.cookie_name,)
    )
    return request.web_shim.redirect(service.auth_callback(context))


def products_view(request):
    try:
        body = request.json_body
    except ValueError:
        raise BadRequest("Request body must be json.")
    shop_host = body.get("shop") if isinstance(body, dict) else None
    payload = get_service(request).fetch_products(shop_host)
    return request.web_shim.response_json(payload)


def shop_install_error_view(exc, request):
    return request.web_shim.error_response(exc)


def make_app(config, web_config, token_store=None, products_api=None):
    """Build the wsgi app around a single ShopInstallService."""
    service = ShopInstallService(
        config, token_store=token_store, products_api=products_api
    )

    def web_shim(request):
        return PyramidWebShim(get_default_signed_serializer, web_config, request)

    with Configurator() as configurator:
        configurator.registry.registerUtility(service, IShopInstallService)
        configurator.add_request_method(web_shim, "web_shim", reify=True)

        configurator.add_route("home", "/")
        configurator.add_route("app_view", config.app_view_path)
        configurator.add_route("begin_auth", "/api")
        configurator.add_route("auth_callback", "/auth/callback")
        configurator.add_route("products", "/api/products")

        configurator.add_view(home_view, route_name="home", request_method="GET")
        configurator.add_view(app_view, route_name="app_view", request_method="GET")
        configurator.add_view(
            begin_auth_view, route_name="begin_auth", request_method="GET"
        )
        configurator.add_view(
            auth_callback_view, route_name="auth_callback", request_method="GET"
        )
        configurator.add_view(
            products_view, route_name="products", request_method="POST"
        )
        configurator.add_exception_view(
            shop_install_error_view, context=ShopInstallError
        )
        return configurator.make_wsgi_app()


class ThreadingWSGIServer(socketserver.ThreadingMixIn, WSGIServer):
    daemon_threads = True


def main():
    load_dotenv()
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    config = ShopInstallConfig.from_environ()
    web_config = PyramidWebShimConfig(
        cookie_secret=os.environ.get("SHOPINSTALL_COOKIE_SECRET") or config.api_secret
    )
    app = make_app(config, web_config)
    port = int(os.environ.get("PORT", 3000))
    with make_server("", port, app, server_class=ThreadingWSGIServer) as server:
        logger.info(f"Server listening at http://localhost:{port}")
        server.serve_forever()


if __name__ == "__main__":
    main()
