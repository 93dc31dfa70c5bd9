"""
Email address validation shared by the lookup endpoint and the importer.
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email

from apps.core.exceptions import ValidationError
from apps.members.crypto import normalize_email

# RFC 5321 path limit
MAX_EMAIL_LENGTH = 254


def clean_email(value: object) -> str:
    """
    Normalize and validate an email address.

    Args:
        value: Raw value from a request or a file cell

    Returns:
        The normalized email

    Raises:
        ValidationError: If the value is empty, too long or not email-shaped
    """
    if value is None:
        raise ValidationError("Email address is required")

    email = normalize_email(str(value))
    if not email:
        raise ValidationError("Email address is required")
    if len(email) > MAX_EMAIL_LENGTH:
        raise ValidationError(f"Email address exceeds {MAX_EMAIL_LENGTH} characters")

    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationError("Invalid email address") from None
    return email
