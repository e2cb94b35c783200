import re
from datetime import UTC, datetime

OTP_CODE_RE = re.compile(r"^[0-9]{6}$")


def is_otp_code(value: str) -> bool:
    return bool(OTP_CODE_RE.fullmatch(value))


def now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from MongoDB."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
