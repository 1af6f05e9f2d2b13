"""Deterministic resource naming helpers."""

import re

SERVICE_ACCOUNT_SUFFIX = ".gserviceaccount.com"
GOOGLE_APIS_SUFFIX = ".googleapis.com"


def to_kebab_case(value: str) -> str:
    """Convert camelCase, snake_case and dotted identifiers to kebab-case."""
    value = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", value)
    return value.replace("_", "-").replace(".", "-").lower()


def role_suffix(role: str, qualified: bool = False) -> str:
    """Return the kebab-cased trailing segment of an IAM role.

    >>> role_suffix("roles/cloudsql.instanceUser")
    'instance-user'
    >>> role_suffix("roles/cloudsql.instanceUser", qualified=True)
    'cloudsql-instance-user'
    """
    leaf = role.rsplit("/", 1)[-1]
    if not qualified:
        leaf = leaf.rsplit(".", 1)[-1]
    return to_kebab_case(leaf) or "unknown"


def binding_name(principal: str, role: str, qualified: bool = False) -> str:
    """Derive the resource name of a role binding from (principal, role)."""
    return f"{principal}-x-{role_suffix(role, qualified)}"


def api_resource_name(api: str) -> str:
    """Resource name of an API activation, e.g. ``sqladmin`` for sqladmin.googleapis.com."""
    return to_kebab_case(api.removesuffix(GOOGLE_APIS_SUFFIX))


def iam_database_user_name(email: str) -> str:
    """Cloud SQL expects service-account IAM users without the domain suffix."""
    return email.removesuffix(SERVICE_ACCOUNT_SUFFIX)


def sanitize_email(email: str) -> str:
    return re.sub(r"[@.]", "-", email)


def fqdn(name: str) -> str:
    """Normalize a DNS name so it ends with a trailing dot."""
    return name if name.endswith(".") else f"{name}."
