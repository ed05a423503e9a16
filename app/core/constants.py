# app/core/constants.py

from decimal import Decimal

HOURS_MIN = 1
HOURS_MAX = 180

RATE_MIN = Decimal("50")
RATE_MAX = Decimal("2000")

NOTES_MAX_LENGTH = 250
NAME_MAX_LENGTH = 80
EMAIL_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 6

INVALID_CREDENTIALS_MESSAGE = "Invalid email, password or role."
AWAITING_APPROVAL_MESSAGE = (
    "Your account has been created but is awaiting HR approval. "
    "You will be able to log in once HR activates your profile."
)
