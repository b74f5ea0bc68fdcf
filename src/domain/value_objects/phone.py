"""A Value Object representing a phone number split into country code and number."""

import re
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True, slots=True)
class Phone:
    """An immutable phone number.

    Both parts are normalized to digits only (a leading '+' or any separators in
    the input are dropped) so that lookups match the unique (country code,
    number) pair stored on accounts.

    Attributes:
        country_code: Country calling code without the '+' sign, e.g. "55".
        number: National number, e.g. "11987654321".
    """

    country_code: str
    number: str

    COUNTRY_CODE_PATTERN: ClassVar[re.Pattern] = re.compile(r"^[0-9]{1,3}$")
    NUMBER_PATTERN: ClassVar[re.Pattern] = re.compile(r"^[0-9]{4,14}$")

    def __post_init__(self):
        if not isinstance(self.country_code, str) or not isinstance(self.number, str):
            raise TypeError("Phone country code and number must be strings.")

        country_code = re.sub(r"\D", "", self.country_code)
        number = re.sub(r"\D", "", self.number)
        object.__setattr__(self, "country_code", country_code)
        object.__setattr__(self, "number", number)

        if not self.COUNTRY_CODE_PATTERN.match(country_code):
            raise ValueError("Invalid phone country code.")
        if not self.NUMBER_PATTERN.match(number):
            raise ValueError("Invalid phone number.")

    @property
    def subject(self) -> str:
        """Country code and number concatenated, the way the SMS gateway and
        the PHONE sign-in identity address this phone."""
        return f"{self.country_code}{self.number}"

    @property
    def e164(self) -> str:
        return f"+{self.subject}"

    def mask_for_logging(self) -> str:
        """Returns the phone with all but the last two digits masked.

        Example: '+55*********21'
        """
        return f"+{self.country_code}{'*' * (len(self.number) - 2)}{self.number[-2:]}"

    def __str__(self) -> str:
        return self.e164
