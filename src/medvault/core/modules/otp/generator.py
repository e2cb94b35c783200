"""One-time code generation."""

import secrets
from collections.abc import Collection

OTP_DIGITS = 6


def generate_otp_code(exclude: Collection[str] = ()) -> str:
    """Draw a zero-padded six-digit code from the OS CSPRNG.

    Codes listed in exclude are re-drawn, so an owner never holds two live
    sessions with the same code value.
    """
    if len(exclude) >= 10**OTP_DIGITS:
        raise ValueError("No free one-time code values left")
    while True:
        code = f"{secrets.randbelow(10**OTP_DIGITS):0{OTP_DIGITS}d}"
        if code not in exclude:
            return code
