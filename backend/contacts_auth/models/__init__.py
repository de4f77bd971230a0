from contacts_auth.models.account import Account
from contacts_auth.models.session import RefreshSession

__all__ = [
    "Account",
    "RefreshSession",
]
