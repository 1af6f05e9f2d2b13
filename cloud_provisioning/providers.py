"""Provider configuration for the non-default providers.

GCP resources use the default provider (ADC) and name their project
explicitly. GitHub, Cloudflare and Zitadel need explicit
credentials from the ``cloud-provisioning`` configuration.
"""

import pulumi
import pulumi_cloudflare as cloudflare
import pulumi_github as github
import pulumiverse_zitadel as zitadel

from cloud_provisioning.config import GitHubConfig, ZitadelConfig


def create_github_provider(
    name: str,
    owner: str,
    config: GitHubConfig,
    parent: pulumi.Resource | None = None,
) -> github.Provider:
    """Create a GitHub provider acting on an organization.

    Args:
        name: Provider resource name
        owner: Organization the provider manages
        config: GitHub credentials
        parent: Parent resource for dependency tracking
    """
    return github.Provider(
        name,
        owner=owner,
        token=pulumi.Output.secret(config.token),
        opts=pulumi.ResourceOptions(parent=parent),
    )


def create_cloudflare_provider(
    name: str,
    api_token: str,
    parent: pulumi.Resource | None = None,
) -> cloudflare.Provider:
    return cloudflare.Provider(
        name,
        api_token=pulumi.Output.secret(api_token),
        opts=pulumi.ResourceOptions(parent=parent),
    )


def create_zitadel_provider(
    name: str,
    config: ZitadelConfig,
    parent: pulumi.Resource | None = None,
) -> zitadel.Provider:
    """Create a Zitadel provider authenticated with a machine-user JWT profile."""
    return zitadel.Provider(
        name,
        domain=config.domain,
        jwt_profile_json=pulumi.Output.secret(config.pulumi_jwt_profile_json),
        opts=pulumi.ResourceOptions(parent=parent),
    )
