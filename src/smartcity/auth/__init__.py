"""Mock bearer-token authentication over the user directory."""

from smartcity.auth.middleware import AuthMiddleware, require_actor
from smartcity.auth.provider import AuthProvider, MockAuthProvider

__all__ = [
    "AuthMiddleware",
    "AuthProvider",
    "MockAuthProvider",
    "require_actor",
]
