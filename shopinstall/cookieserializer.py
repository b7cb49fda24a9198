from webob.cookies import SignedSerializer


DEFAULT_COOKIE_SALT = "shopinstall.cookies"


def get_default_signed_serializer(secret, salt=None, hashalg="sha512", serializer=None):
    return SignedSerializer(
        secret, salt or DEFAULT_COOKIE_SALT, hashalg, serializer=serializer
    )
