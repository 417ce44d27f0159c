"""Account registration: command and handler."""

from protean import handle
from protean.exceptions import InvalidOperationError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from backend.account.account import Account
from backend.domain import backend


@backend.command(part_of="Account")
class RegisterAccount:
    """Create a new account that can sign in with email and password."""

    email: String(required=True, max_length=254)
    password: String(required=True, max_length=128)
    full_name: String(required=True, max_length=150)
    phone: String(max_length=30)
    address: Text()


@backend.command_handler(part_of=Account)
class RegisterAccountHandler:
    @handle(RegisterAccount)
    def register_account(self, command):
        repo = current_domain.repository_for(Account)
        if repo.find_by_email(command.email) is not None:
            raise InvalidOperationError("Email is already registered")

        account = Account.register(
            email=command.email,
            password=command.password,
            full_name=command.full_name,
            phone=command.phone,
            address=command.address,
        )
        repo.add(account)
        return str(account.id)
