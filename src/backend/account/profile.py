"""Profile and password changes: commands and handler.

Only fields present on the command are changed.
"""

from protean import handle
from protean.exceptions import InvalidOperationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from backend.account.account import Account, normalize_email
from backend.domain import backend


@backend.command(part_of="Account")
class UpdateProfile:
    account_id = Identifier(required=True)
    full_name = String(max_length=150)
    email = String(max_length=254)
    phone = String(max_length=30)
    address = Text()


@backend.command(part_of="Account")
class ChangePassword:
    account_id = Identifier(required=True)
    new_password = String(required=True, max_length=128)


@backend.command_handler(part_of=Account)
class ManageAccountHandler:
    @handle(UpdateProfile)
    def update_profile(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)

        if command.email is not None and normalize_email(command.email) != account.email:
            existing = repo.find_by_email(command.email)
            if existing is not None and str(existing.id) != str(account.id):
                raise InvalidOperationError("Email is already registered")

        changes = {
            field: getattr(command, field)
            for field in ("full_name", "email", "phone", "address")
            if getattr(command, field) is not None
        }
        account.update_profile(**changes)
        repo.add(account)

    @handle(ChangePassword)
    def change_password(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        account.change_password(command.new_password)
        repo.add(account)
