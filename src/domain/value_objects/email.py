"""A Value Object representing an email address in the domain.

This class encapsulates the properties and validation rules of an email address,
ensuring that any email reaching the account store is normalized and well formed.
As a Value Object, it is immutable, and equality is based on its value.
"""

import re
from dataclasses import dataclass
from typing import ClassVar

from structlog import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Email:
    """An immutable, self-validating email address.

    This Value Object enforces several business rules upon instantiation:
    - Conforms to a standard email format.
    - Has a reasonable length.
    - Is automatically normalized to lowercase, so that account lookups and the
      unique constraint on accounts agree on one spelling.

    Attributes:
        value: The string representation of the email address.
    """

    value: str

    MAX_LENGTH: ClassVar[int] = 254
    MIN_LENGTH: ClassVar[int] = 5
    EMAIL_PATTERN: ClassVar[re.Pattern] = re.compile(
        r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    )

    def __post_init__(self):
        """Performs validation and normalization after initialization."""
        if not isinstance(self.value, str):
            raise TypeError("Email value must be a string.")

        normalized_value = self.value.strip().lower()
        object.__setattr__(self, "value", normalized_value)

        if not (self.MIN_LENGTH <= len(normalized_value) <= self.MAX_LENGTH):
            raise ValueError(
                f"Email length must be between {self.MIN_LENGTH} and {self.MAX_LENGTH} characters."
            )
        if not self.EMAIL_PATTERN.match(normalized_value):
            raise ValueError("Invalid email format.")

        logger.debug("Email validated successfully", email=self.mask_for_logging())

    @property
    def domain(self) -> str:
        """Returns the domain part of the email address."""
        return self.value.split("@")[1]

    def mask_for_logging(self) -> str:
        """Returns a masked version of the email for safe logging.

        Example: 'us**@e*****.com'
        """
        local, domain_part = self.value.split("@")
        masked_local = f"{local[:2]}{'*' * max(len(local) - 2, 0)}"
        masked_domain = f"{domain_part[:1]}{'*' * max(len(domain_part) - 2, 0)}{domain_part[-1:]}"
        return f"{masked_local}@{masked_domain}"

    def __str__(self) -> str:
        return self.value
