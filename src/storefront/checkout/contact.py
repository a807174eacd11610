"""EmailAddress value object for the buyer's contact address."""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from storefront.domain import storefront

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


@storefront.value_object
class EmailAddress:
    """Where the purchase confirmation and download links are sent.

    Structural check only: one ``@``, no whitespace, and a dot in the domain.
    """

    address: String(required=True, max_length=254)

    @invariant.post
    def verify_email_address(self):
        if not is_valid_email(self.address):
            raise ValidationError({"address": [f"Invalid email address: {self.address!r}"]})
