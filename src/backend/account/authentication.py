"""Sign-in and sign-out: commands, handlers and token lookup."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from backend.account.access_token import AccessToken
from backend.account.account import Account
from backend.domain import backend
from backend.errors import AuthenticationFailed

logger = structlog.get_logger(__name__)


@backend.command(part_of="AccessToken")
class SignIn:
    """Exchange an email and password for a new access token."""

    email: String(required=True, max_length=254)
    password: String(required=True, max_length=128)


@backend.command(part_of="AccessToken")
class SignOut:
    """Revoke an access token."""

    token: Identifier(required=True)


@backend.command_handler(part_of=AccessToken)
class AuthenticationHandler:
    @handle(SignIn)
    def sign_in(self, command):
        account = current_domain.repository_for(Account).find_by_email(command.email)
        if account is None or not account.verify_password(command.password):
            logger.info("Sign-in rejected", email=command.email)
            raise AuthenticationFailed()

        token = AccessToken.issue(account_id=str(account.id))
        current_domain.repository_for(AccessToken).add(token)
        logger.info("Signed in", account_id=str(account.id))
        return str(token.id)

    @handle(SignOut)
    def sign_out(self, command):
        repo = current_domain.repository_for(AccessToken)
        token = repo.get(command.token)
        token.revoke()
        repo.add(token)
        logger.info("Signed out", account_id=str(token.account_id))


def resolve_token(token_id):
    """Return the active AccessToken for ``token_id``, or None."""
    try:
        token = current_domain.repository_for(AccessToken).get(token_id)
    except ObjectNotFoundError:
        return None
    return token if token.is_active else None


def check_password(account_id, password) -> bool:
    """True when ``password`` is the account's current one. Issues no token."""
    account = current_domain.repository_for(Account).get(account_id)
    return account.verify_password(password)
