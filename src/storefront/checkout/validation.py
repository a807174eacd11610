"""Checks that gate the form → processing transition."""

from protean.exceptions import ValidationError

from storefront.cart.items import CartItem
from storefront.checkout.contact import EmailAddress


def validate_submission(wallet_address: str | None, items: list[CartItem], email: str) -> EmailAddress:
    """Validate a checkout submission and return the buyer's email address.

    Raises ``ValidationError`` carrying a single user-facing message.
    """
    if not wallet_address:
        raise ValidationError({"wallet": ["Please connect your wallet to continue"]})

    if not items:
        raise ValidationError({"cart": ["No items in cart"]})

    email = (email or "").strip()
    if not email:
        raise ValidationError({"email": ["Please enter your email address"]})

    try:
        return EmailAddress(address=email)
    except ValidationError:
        raise ValidationError({"email": ["Please enter a valid email address"]}) from None


def first_message(error: ValidationError) -> str:
    """Flatten a protean ``ValidationError`` into its first message."""
    for messages in error.messages.values():
        if messages:
            return messages[0] if isinstance(messages, list) else str(messages)
    return "Invalid input"
