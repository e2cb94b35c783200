from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

from medvault.web.deps import VAULT_SESSION_HEADER


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="MedVault API",
            version="0.1.0",
            summary="Secure medical document vault unlocked by email one-time codes",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "description": "Bearer token authentication (preferred)",
            },
            "AuthTokenCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": "auth_token",
                "description": "Authentication token stored in cookie",
            },
            "VaultSession": {
                "type": "apiKey",
                "in": "header",
                "name": VAULT_SESSION_HEADER,
                "description": "Vault session reference returned by /vault/access/verify",
            },
        }

        openapi_schema["security"] = [
            {"BearerAuth": []},
            {"AuthTokenCookie": []},
        ]

        public_endpoints = {
            ("POST", "/api/v1/auth/login"),
            ("GET", "/health"),
        }

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in public_endpoints:
                    operation["security"] = []
                elif path.startswith("/api/v1/vault/documents"):
                    operation["security"] = [
                        {"BearerAuth": [], "VaultSession": []},
                        {"AuthTokenCookie": [], "VaultSession": []},
                    ]

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Invalid credentials", "type": "authentication_error"},
                {"message": "The code is incorrect or expired", "type": "invalid_or_expired_code"},
                {"message": "Vault is locked, verify a one-time code first", "type": "vault_locked"},
            ]
        }
    }
