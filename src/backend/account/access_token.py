"""AccessToken aggregate: a signed-in session for one account.

The token's identity doubles as the bearer value handed to the client.
A revoked token stays in the store so a late sign-out or lookup can tell
"expired" apart from "never existed".
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier

from backend.domain import backend


@backend.aggregate
class AccessToken:
    account_id = Identifier(required=True)
    issued_at = DateTime()
    revoked_at = DateTime()

    @classmethod
    def issue(cls, account_id):
        return cls(account_id=account_id, issued_at=datetime.now(UTC))

    @property
    def is_active(self):
        return self.revoked_at is None

    def revoke(self):
        # Revoking twice keeps the original revocation time
        if self.revoked_at is None:
            self.revoked_at = datetime.now(UTC)
