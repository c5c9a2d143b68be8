from authcore.models.account import Account
from authcore.models.refresh_token import RefreshToken

__all__ = ["Account", "RefreshToken"]
