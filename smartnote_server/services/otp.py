# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Six-digit one-time codes."""

import re
import secrets

OTP_PATTERN = re.compile(r"^[0-9]{6}$")


def generate_otp() -> str:
    """Uniformly random code in 100000..999999."""
    return str(100000 + secrets.randbelow(900000))


def is_valid_otp(code: str | None) -> bool:
    return bool(code) and OTP_PATTERN.fullmatch(code) is not None


def reset_email_body(code: str, expire_minutes: int) -> str:
    return (
        f"Your password reset OTP is: {code}\n\n"
        f"Enter this code in the app along with your new password.\n\n"
        f"The code expires in {expire_minutes} minutes."
    )
