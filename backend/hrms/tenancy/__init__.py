"Tenancy: session authentication, company scoping and RBAC for the dispatch pipeline."

from .constants import AUTH_MIDDLEWARE, RBAC_MIDDLEWARE, SUPER_ROLE, TENANT_MIDDLEWARE  # noqa: F401
from .identity import Identity, IdentityStore  # noqa: F401
