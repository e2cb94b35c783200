from medvault.web.routers.auth import router as auth_router
from medvault.web.routers.profile import router as profile_router
from medvault.web.routers.vault import router as vault_router

__all__ = [
    "auth_router",
    "profile_router",
    "vault_router",
]
