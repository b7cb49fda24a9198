import re
from urllib.parse import urlencode


SHOP_HOST_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9\-.]*$")


def is_valid_shop_host(shop_host):
    """Check that the shop looks like a host before we put it in a url."""
    if not shop_host or not isinstance(shop_host, str):
        return False
    return bool(SHOP_HOST_RE.match(shop_host)) and ".." not in shop_host


def build_app_url(app_view_path, shop_host):
    return f"{app_view_path}?{urlencode({'shop': shop_host})}"


def parse_scopes(scopes):
    """Split a comma separated scope string into a tuple, dropping blanks."""
    if not scopes:
        return ()
    if isinstance(scopes, str):
        scopes = scopes.split(",")
    return tuple(scope.strip() for scope in scopes if scope.strip())
