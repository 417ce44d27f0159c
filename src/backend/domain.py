"""Backend bounded context: accounts, access tokens and orders.

A local implementation of the persistence/auth collaborator the storefront
talks to. It keeps user accounts (login by email), issues and revokes access
tokens, and records orders placed from a client cart. Order status is changed
only from the operator side; clients observe it by refetching.
"""

import structlog
from protean.domain import Domain

backend = Domain(name="backend")

logger = structlog.get_logger(__name__)
