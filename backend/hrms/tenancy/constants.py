"""
Constants for tenancy and access-control concerns.
"""

# Middleware identifiers used in route configuration.
AUTH_MIDDLEWARE = "auth"
TENANT_MIDDLEWARE = "tenant"
RBAC_MIDDLEWARE = "rbac"

# Role whose members pass every permission check. The RBAC middleware is the
# only place that consults it, via is_super_role().
SUPER_ROLE = "Admin"

# Keys of the payload stored in the session store.
SESSION_USER_KEY = "user"
SESSION_PERMISSIONS_KEY = "permissions"
