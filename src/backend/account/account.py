"""Account aggregate: a registered storefront user and their credentials.

Accounts are looked up by email at sign-in, so email is unique across all
accounts (enforced by the registration and profile handlers, which need a
repository query to check it). The password is only ever held as a bcrypt
hash.
"""

import os
from datetime import UTC, datetime

import bcrypt
from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, String, Text

from backend.domain import backend

# Work factor for password hashes; tests lower it through the environment
_BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

MIN_PASSWORD_LENGTH = 6

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


def normalize_email(email):
    return (email or "").strip().lower()


def hash_password(password):
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=_BCRYPT_ROUNDS)).decode("utf-8")


def _check_password_length(password):
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError({"password": [f"Password must be at least {MIN_PASSWORD_LENGTH} characters"]})


@backend.aggregate
class Account:
    """A person who can sign in to the storefront and place orders.

    Holds the profile shown in the app (name, phone, delivery address) and the
    hashed credential checked at sign-in.
    """

    email: String(required=True, max_length=254)
    full_name: String(required=True, max_length=150)
    phone: String(max_length=30)
    address: Text()
    password_hash: String(required=True, max_length=128)
    registered_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def email_must_have_a_domain(self):
        if self.email and "@" not in self.email:
            raise ValidationError({"email": [f"Invalid email address: {self.email!r}"]})

    @classmethod
    def register(cls, email, password, full_name, phone=None, address=None):
        _check_password_length(password)
        now = datetime.now(UTC)
        return cls(
            email=normalize_email(email),
            full_name=full_name,
            phone=phone or None,
            address=address or None,
            password_hash=hash_password(password),
            registered_at=now,
            updated_at=now,
        )

    def verify_password(self, password):
        if not password:
            return False
        return bcrypt.checkpw(password.encode("utf-8"), self.password_hash.encode("utf-8"))

    def update_profile(self, full_name=_UNSET, email=_UNSET, phone=_UNSET, address=_UNSET):
        if full_name is not _UNSET:
            if not full_name:
                raise ValidationError({"full_name": ["Full name is required"]})
            self.full_name = full_name
        if email is not _UNSET:
            if not email:
                raise ValidationError({"email": ["Email is required"]})
            self.email = normalize_email(email)
        if phone is not _UNSET:
            self.phone = phone or None
        if address is not _UNSET:
            self.address = address or None
        self.updated_at = datetime.now(UTC)

    def change_password(self, new_password):
        _check_password_length(new_password)
        self.password_hash = hash_password(new_password)
        self.updated_at = datetime.now(UTC)

    def profile_dict(self):
        """Public representation; never includes the credential."""
        return {
            "id": str(self.id),
            "email": self.email,
            "full_name": self.full_name,
            "phone": self.phone,
            "address": self.address,
        }


@backend.repository(part_of=Account)
class AccountRepository:
    def find_by_email(self, email) -> Account | None:
        """Find an Account by (normalized) email."""
        accounts = self._dao.query.filter(email=normalize_email(email)).all().items
        return accounts[0] if accounts else None
