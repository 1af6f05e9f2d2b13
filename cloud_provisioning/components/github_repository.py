"""Per-repository, per-environment GitHub Actions settings."""

from typing import Mapping, Sequence

import pulumi
import pulumi_github as github

from cloud_provisioning.config import GitHubConfig
from cloud_provisioning.providers import create_github_provider

PROTECTED_BRANCH = "main"


class GitHubRepositoryComponent(pulumi.ComponentResource):
    """Deployment environment of one repository for one stage.

    Creates:
    - Repository environment with a deployment branch policy
    - Actions environment variables and secrets
    - Branch protection on ``main`` (when ``branch_protection``)
    """

    def __init__(
        self,
        repository: str,
        environment: str,
        brand_id: str,
        github_config: GitHubConfig,
        variables: Mapping[str, pulumi.Input[str]],
        branch_protection: bool,
        custom_branch_policies: bool,
        secrets: Mapping[str, pulumi.Input[str]] | None = None,
        required_status_checks: Sequence[str] = (),
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__(
            f"liverty-music:github:Repository:{repository}:{environment}",
            repository,
            None,
            opts,
        )

        # A provider per component so any stack can manage its own environments
        provider = create_github_provider(
            f"github-provider-{repository}-{environment}", brand_id, github_config, parent=self
        )
        child_opts = pulumi.ResourceOptions(parent=self, provider=provider)

        self.environment = github.RepositoryEnvironment(
            repository,
            repository=repository,
            environment=environment,
            deployment_branch_policy=github.RepositoryEnvironmentDeploymentBranchPolicyArgs(
                protected_branches=not custom_branch_policies,
                custom_branch_policies=custom_branch_policies,
            ),
            opts=child_opts,
        )

        self.variables = [
            github.ActionsEnvironmentVariable(
                f"{repository}-env-{key}",
                repository=repository,
                environment=self.environment.environment,
                variable_name=key,
                value=value,
                opts=child_opts,
            )
            for key, value in variables.items()
        ]

        self.secrets = [
            github.ActionsEnvironmentSecret(
                f"{repository}-secret-{key}",
                repository=repository,
                environment=self.environment.environment,
                secret_name=key,
                plaintext_value=pulumi.Output.secret(value),
                opts=child_opts,
            )
            for key, value in (secrets or {}).items()
        ]

        # Only one stack may own the rule, so it lives with prod
        self.branch_protection: github.BranchProtection | None = None
        if branch_protection:
            self.branch_protection = github.BranchProtection(
                f"{repository}-protection",
                repository_id=repository,
                pattern=PROTECTED_BRANCH,
                enforce_admins=True,
                allows_deletions=False,
                allows_force_pushes=False,
                required_linear_history=False,
                require_conversation_resolution=False,
                required_status_checks=(
                    [
                        github.BranchProtectionRequiredStatusCheckArgs(
                            # Branches must be up to date before merging
                            strict=True,
                            contexts=list(required_status_checks),
                        )
                    ]
                    if required_status_checks
                    else None
                ),
                # Pull requests required; nobody pushes to main directly
                required_pull_request_reviews=[
                    github.BranchProtectionRequiredPullRequestReviewArgs(
                        dismiss_stale_reviews=False,
                        restrict_dismissals=False,
                        required_approving_review_count=0,
                        require_code_owner_reviews=False,
                    )
                ],
                restrict_pushes=[],
                opts=child_opts,
            )

        self.register_outputs(
            {
                "environment": self.environment.environment,
                "variables": [v.variable_name for v in self.variables],
            }
        )


def deployment_variables(
    region: pulumi.Input[str],
    project_id: pulumi.Input[str],
    workload_identity_provider: pulumi.Input[str],
    service_account_email: pulumi.Input[str],
) -> dict[str, pulumi.Input[str]]:
    """Variables CI pipelines need to authenticate to and deploy into GCP."""
    return {
        "GCP_REGION": region,
        "GCP_PROJECT_ID": project_id,
        "GCP_WORKLOAD_IDENTITY_PROVIDER": workload_identity_provider,
        "GCP_SERVICE_ACCOUNT": service_account_email,
    }
