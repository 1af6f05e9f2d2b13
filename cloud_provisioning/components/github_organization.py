"""GitHub organization settings, repositories and organization secrets."""

from enum import Enum

import pulumi
import pulumi_github as github

from cloud_provisioning.config import BufConfig, GitHubConfig
from cloud_provisioning.providers import create_github_provider


class RepositoryName(str, Enum):
    CLOUD_PROVISIONING = "cloud-provisioning"
    SPECIFICATION = "specification"
    BACKEND = "backend"
    FRONTEND = "frontend"


# (description, template repository under the configured owner)
REPOSITORIES: dict[RepositoryName, tuple[str, str | None]] = {
    RepositoryName.CLOUD_PROVISIONING: ("Cloud Provisioning", "cloud-provisioning-scaffold"),
    RepositoryName.SPECIFICATION: ("Specification", "protobuf-scaffold"),
    RepositoryName.BACKEND: ("Backend", "go-backend-scaffold"),
    RepositoryName.FRONTEND: ("Frontend", None),
}

DEFAULT_REPOSITORY_ARGS = dict(
    visibility="public",
    has_issues=True,
    delete_branch_on_merge=True,
    vulnerability_alerts=True,
    allow_merge_commit=True,
    allow_squash_merge=False,
    allow_rebase_merge=False,
)


class GitHubOrganizationComponent(pulumi.ComponentResource):
    """Organization-wide GitHub resources, owned by the prod stack."""

    def __init__(
        self,
        name: str,
        brand_id: str,
        display_name: str,
        github_config: GitHubConfig,
        buf_config: BufConfig,
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("liverty-music:github:Organization", name, None, opts)

        self.provider = create_github_provider("github-provider", brand_id, github_config, parent=self)
        child_opts = pulumi.ResourceOptions(parent=self, provider=self.provider)

        self.organization_settings = github.OrganizationSettings(
            brand_id,
            name=display_name,
            description=display_name,
            default_repository_permission="read",
            billing_email=github_config.billing_email,
            members_can_create_private_repositories=False,
            members_can_create_pages=True,
            opts=child_opts,
        )

        self.repositories: dict[RepositoryName, github.Repository] = {}
        for repository, (description, template) in REPOSITORIES.items():
            self.repositories[repository] = github.Repository(
                repository.value,
                name=repository.value,
                description=description,
                template=(
                    github.RepositoryTemplateArgs(owner=github_config.owner, repository=template)
                    if template
                    else None
                ),
                **DEFAULT_REPOSITORY_ARGS,
                opts=child_opts,
            )

        self.secrets: list[github.ActionsSecret | github.ActionsOrganizationSecret] = [
            github.ActionsSecret(
                "buf-token",
                repository=self.repositories[RepositoryName.SPECIFICATION].name,
                secret_name="BUF_TOKEN",
                plaintext_value=pulumi.Output.secret(buf_config.token),
                opts=child_opts,
            )
        ]

        organization_secrets = {
            "gemini-api-key": ("GEMINI_API_KEY", github_config.gemini_api_key),
            "anthropic-api-key": ("ANTHROPIC_API_KEY", github_config.anthropic_api_key),
        }
        for resource_name, (secret_name, value) in organization_secrets.items():
            if not value:
                continue
            self.secrets.append(
                github.ActionsOrganizationSecret(
                    resource_name,
                    secret_name=secret_name,
                    visibility="all",
                    plaintext_value=pulumi.Output.secret(value),
                    opts=child_opts,
                )
            )

        self.register_outputs(
            {
                "repositories": {k.value: r.full_name for k, r in self.repositories.items()},
            }
        )
