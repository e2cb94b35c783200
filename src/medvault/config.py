from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str
    host: str
    port: int
    debug: bool
    cors_origins: list[str] = []
    documents_path: str  # Directory path for storing vault document payloads

    # Vault access sessions
    otp_ttl_seconds: int = 600  # Validity window of a one-time code (10 minutes)
    otp_max_pending_sessions: int = 5  # Unexpired unverified sessions allowed per owner before RateLimited
    otp_send_timeout_seconds: float = 5.0
    debug_echo_otp: bool = False  # Return the issued code in the API response (development only)
    session_grace_seconds: int = 3600  # Expired sessions are kept this long before the sweeper removes them
    sweep_interval_seconds: int = 300  # 0 disables the background sweeper
    session_ttl_index: bool = True  # Let MongoDB also expire sessions after the grace period

    # Vault documents
    max_document_size: int = 10 * 1024 * 1024
    max_documents_per_owner: int = 200

    # Outgoing email; without smtp_host codes are only logged as dispatched
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_from: str = "vault@medvault.local"
    smtp_starttls: bool = True

    # Optional account created on startup
    bootstrap_email: str | None = None
    bootstrap_password: str | None = None

    model_config = {
        "env_file": [".env"],
        "env_prefix": "MEDVAULT_",
        "extra": "ignore",
    }
