"""Which components each environment provisions.

Evaluated once at start-up. Components receive the resulting booleans and
never compare environment names themselves.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Mapping


class Environment(str, Enum):
    """Deployment stage, taken from the stack name."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class Availability(str, Enum):
    """Cloud SQL availability type."""

    ZONAL = "ZONAL"
    REGIONAL = "REGIONAL"


@dataclass(frozen=True)
class EnvironmentPolicy:
    """Per-environment inclusion and sizing decisions."""

    # Prod owns the folder; other stacks look it up through the prod stack
    creates_folder: bool
    github_organization: bool
    identity_provider: bool
    # Cloud Router + NAT
    egress: bool
    public_dns: bool
    cluster: bool
    database: bool
    branch_protection: bool
    # Deployment branch policy: custom policies instead of protected branches
    custom_branch_policies: bool
    database_availability: Availability
    deletion_protection: bool
    allow_action_failure: bool
    # Frontend accepts localhost redirects
    frontend_dev_mode: bool
    # Frontend served at the apex domain instead of <env>.<domain>
    serves_apex: bool
    extra_apis: tuple[str, ...] = field(default_factory=tuple)


POLICIES: dict[Environment, EnvironmentPolicy] = {
    Environment.DEV: EnvironmentPolicy(
        creates_folder=False,
        github_organization=False,
        identity_provider=True,
        egress=True,
        public_dns=True,
        cluster=True,
        database=True,
        branch_protection=False,
        custom_branch_policies=True,
        database_availability=Availability.ZONAL,
        deletion_protection=False,
        allow_action_failure=True,
        frontend_dev_mode=True,
        serves_apex=False,
    ),
    Environment.STAGING: EnvironmentPolicy(
        creates_folder=False,
        github_organization=False,
        identity_provider=False,
        egress=True,
        public_dns=True,
        cluster=True,
        database=True,
        branch_protection=False,
        custom_branch_policies=False,
        database_availability=Availability.REGIONAL,
        deletion_protection=True,
        allow_action_failure=False,
        frontend_dev_mode=False,
        serves_apex=False,
    ),
    Environment.PROD: EnvironmentPolicy(
        creates_folder=True,
        github_organization=True,
        identity_provider=False,
        # Cost reduction: no egress or public DNS infrastructure in prod yet
        egress=False,
        public_dns=False,
        cluster=False,
        database=False,
        branch_protection=True,
        custom_branch_policies=False,
        database_availability=Availability.REGIONAL,
        deletion_protection=True,
        allow_action_failure=False,
        frontend_dev_mode=False,
        serves_apex=True,
        extra_apis=("securitycenter.googleapis.com",),
    ),
}

# Fields that stack configuration may override under the `components` key
OVERRIDABLE = {
    "cluster": "cluster",
    "database": "database",
    "identityProvider": "identity_provider",
    "githubOrganization": "github_organization",
}


def resolve_policy(
    environment: Environment,
    overrides: Mapping[str, bool] | None = None,
) -> EnvironmentPolicy:
    """Return the policy for an environment with configured overrides applied."""
    policy = POLICIES[environment]
    if not overrides:
        return policy
    changes = {OVERRIDABLE[key]: value for key, value in overrides.items() if key in OVERRIDABLE}
    return replace(policy, **changes)
