from .security import CurrentPrincipal, Principal, current_principal, decode_token, issue_token
from .settings import AuthSettings, get_auth_settings

__all__ = [
    "AuthSettings",
    "get_auth_settings",
    "Principal",
    "CurrentPrincipal",
    "current_principal",
    "decode_token",
    "issue_token",
]
