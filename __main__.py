"""Liverty Music cloud provisioning - Pulumi entry point."""

import pulumi

from cloud_provisioning.cloud import CloudInfrastructure
from cloud_provisioning.components.github_organization import (
    GitHubOrganizationComponent,
    RepositoryName,
)
from cloud_provisioning.components.github_repository import (
    GitHubRepositoryComponent,
    deployment_variables,
)
from cloud_provisioning.config import load_config
from cloud_provisioning.identity import IdentityProvider
from cloud_provisioning.policy import Environment
from cloud_provisioning.stack_reference import FOLDER_ID_EXPORT, stack_name

# Fails before any resource is registered if configuration is incomplete
config = load_config()
policy = config.policy
environment = config.environment.value

pulumi.log.info(f"Provisioning {config.display_name} ({environment})")

# 1. GitHub organization and repositories (owned by one stack)
github_org = None
if policy.github_organization:
    github_org = GitHubOrganizationComponent(
        "organization",
        brand_id=config.brand_id,
        display_name=config.display_name,
        github_config=config.github,
        buf_config=config.buf,
    )

# 2. End-user identity provider
if policy.identity_provider:
    IdentityProvider(config.brand_id, config)
else:
    pulumi.log.info(f"Identity provider not managed by the {environment} stack")

# 3. GCP infrastructure
cloud = CloudInfrastructure(
    config, prod_stack=stack_name(Environment.PROD, config.pulumi_organization)
)

# 4. Per-repository deployment environments, fed from the GCP outputs
variables = deployment_variables(
    region=cloud.region,
    project_id=cloud.project_id,
    workload_identity_provider=cloud.github_workload_identity_provider,
    service_account_email=cloud.github_actions_sa_email,
)
repository_opts = pulumi.ResourceOptions(depends_on=[github_org] if github_org else [])

GitHubRepositoryComponent(
    RepositoryName.BACKEND.value,
    environment,
    brand_id=config.brand_id,
    github_config=config.github,
    variables=variables,
    secrets={"BUF_TOKEN": config.buf.token},
    branch_protection=policy.branch_protection,
    custom_branch_policies=policy.custom_branch_policies,
    required_status_checks=["lint", "test"],
    opts=repository_opts,
)
GitHubRepositoryComponent(
    RepositoryName.FRONTEND.value,
    environment,
    brand_id=config.brand_id,
    github_config=config.github,
    variables=variables,
    branch_protection=policy.branch_protection,
    custom_branch_policies=policy.custom_branch_policies,
    opts=repository_opts,
)

# Exports
if policy.creates_folder:
    # Read by the dev and staging stacks
    pulumi.export(FOLDER_ID_EXPORT, cloud.folder_id)
pulumi.export("project_id", cloud.project_id)
pulumi.export("project_number", cloud.project_number)
pulumi.export("region", cloud.region)
pulumi.export("github_workload_identity_provider", cloud.github_workload_identity_provider)
pulumi.export("github_actions_sa_email", cloud.github_actions_sa_email)
pulumi.export("github_environment", environment)
if cloud.network.public_zone_nameservers is not None:
    pulumi.export("public_zone_nameservers", cloud.network.public_zone_nameservers)
