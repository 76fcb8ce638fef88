"""Input validation run before any authentication state is touched."""

import string

from email_validator import EmailNotValidError, validate_email

from clockwork_auth.application.exceptions.exceptions import ValidationFailedError
from clockwork_auth.application.services.auth_config import PasswordPolicy


def check_email(email: str) -> str:
    """
    Validate email syntax and return the normalized (lowercase) address.

    Deliverability (DNS) is not checked; a syntactically valid address is
    enough to create an account.

    Raises:
        ValidationFailedError: If the address is not syntactically valid
    """
    try:
        result = validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationFailedError("Invalid email address", details=[str(e)]) from e
    return result.normalized.lower()


def password_violations(password: str, policy: PasswordPolicy) -> list[str]:
    """Return every rule the password breaks (empty when it is acceptable)."""
    violations = []
    if len(password) < policy.min_length:
        violations.append(f"Password must be at least {policy.min_length} characters long")
    if policy.require_uppercase and not any(c.isupper() for c in password):
        violations.append("Password must contain an uppercase letter")
    if policy.require_lowercase and not any(c.islower() for c in password):
        violations.append("Password must contain a lowercase letter")
    if policy.require_digit and not any(c.isdigit() for c in password):
        violations.append("Password must contain a digit")
    if policy.require_special and not any(c in string.punctuation for c in password):
        violations.append("Password must contain a special character")
    return violations


def check_password(password: str, policy: PasswordPolicy) -> None:
    """
    Enforce the password policy.

    Raises:
        ValidationFailedError: Listing all failing rules in `details`
    """
    violations = password_violations(password, policy)
    if violations:
        raise ValidationFailedError("Password does not meet requirements", details=violations)
