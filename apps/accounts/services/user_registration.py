"""User registration service."""

import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from .exceptions import UserRegistrationError

User = get_user_model()
logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    display_name: str = ""
) -> User:
    """
    Register a new user.

    Args:
        email: User's email address
        password: User's password (will be hashed)
        display_name: Optional display name shown to other group members

    Returns:
        Created User instance

    Raises:
        UserRegistrationError: If the email is already taken
    """
    try:
        user = User.objects.create_user(
            email=email,
            password=password,
            display_name=display_name
        )
    except IntegrityError:
        raise UserRegistrationError(f"An account with email {email} already exists")

    logger.info("Registered user %s", user.id)
    return user
