"""
Password strength validation.

Example:
    from common.utils import validate_password

    is_valid, errors = validate_password("weakpass")
    if not is_valid:
        print("Password errors:", errors)

    is_valid, errors = validate_password(
        "MyP@ss123",
        min_length=10,
        require_special=True,
    )
"""

import re
from typing import List, Tuple, Optional

COMMON_PASSWORDS = [
    "123456",
    "password",
    "12345678",
    "qwerty",
    "123456789",
    "12345",
    "1234",
    "111111",
    "1234567",
    "dragon",
    "123123",
    "baseball",
    "iloveyou",
    "trustno1",
    "sunshine",
    "princess",
    "football",
    "welcome",
    "shadow",
    "superman",
    "password1",
    "password123",
    "admin",
    "letmein",
    "monkey",
    "abc123",
    "starwars",
]


def validate_password(
    password: str,
    min_length: int = 8,
    max_length: int = 128,
    require_uppercase: bool = True,
    require_lowercase: bool = True,
    require_digit: bool = True,
    require_special: bool = False,
    special_chars: str = r"!@#$%^&*(),.?\":{}|<>",
    reject_common: bool = True,
) -> Tuple[bool, List[str]]:
    """
    Validate password strength.

    Args:
        password: The password to validate
        min_length: Minimum password length
        max_length: Maximum password length
        require_uppercase: Require at least one uppercase letter
        require_lowercase: Require at least one lowercase letter
        require_digit: Require at least one digit
        require_special: Require at least one special character
        special_chars: String of allowed special characters
        reject_common: Reject passwords from the common-password list

    Returns:
        Tuple of (is_valid: bool, errors: List[str])

    Examples:
        >>> is_valid, errors = validate_password("weak")
        >>> print(is_valid)
        False

        >>> is_valid, errors = validate_password("StrongP@ss123")
        >>> print(is_valid)
        True
    """
    errors: List[str] = []

    if len(password) < min_length:
        errors.append(f"Password must be at least {min_length} characters")

    if len(password) > max_length:
        errors.append(f"Password must be no more than {max_length} characters")

    if require_uppercase and not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")

    if require_lowercase and not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")

    if require_digit and not re.search(r"\d", password):
        errors.append("Password must contain at least one digit")

    if require_special:
        escaped_chars = re.escape(special_chars)
        if not re.search(f"[{escaped_chars}]", password):
            errors.append("Password must contain at least one special character")

    if reject_common and check_common_passwords(password):
        errors.append("This is a commonly used password")

    return len(errors) == 0, errors


def check_common_passwords(
    password: str,
    common_passwords: Optional[List[str]] = None,
) -> bool:
    """
    Check if password is in a list of common passwords.

    Args:
        password: The password to check
        common_passwords: List of common passwords. If None, uses built-in list.

    Returns:
        True if password is common (should be rejected)
    """
    if common_passwords is None:
        common_passwords = COMMON_PASSWORDS

    return password.lower() in [p.lower() for p in common_passwords]
