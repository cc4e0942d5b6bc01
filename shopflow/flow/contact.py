"""Synthetic contact details for the checkout form."""

from __future__ import annotations

import random
from dataclasses import dataclass

EMAIL_TEMPLATE = "test{number}@example.com"
EMAIL_NUMBER_UPPER = 1000
PHONE_UPPER = 10**10
PHONE_DIGITS = 11


@dataclass(frozen=True, slots=True)
class ContactDetails:
    email: str
    phone: str


def generate_email(rng: random.Random | None = None) -> str:
    """Return ``test<0-999>@example.com``."""

    rng = rng or random.Random()
    return EMAIL_TEMPLATE.format(number=rng.randrange(EMAIL_NUMBER_UPPER))


def generate_phone(rng: random.Random | None = None) -> str:
    """Return a value in ``[0, 10**10)`` as an 11-digit zero-padded string."""

    rng = rng or random.Random()
    return f"{rng.randrange(PHONE_UPPER):0{PHONE_DIGITS}d}"


def generate_contact(rng: random.Random | None = None) -> ContactDetails:
    rng = rng or random.Random()
    return ContactDetails(email=generate_email(rng), phone=generate_phone(rng))
