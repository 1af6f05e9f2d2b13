"""Workload identity federation for Pulumi Deployments and GitHub Actions."""

import pulumi
import pulumi_gcp as gcp

from cloud_provisioning.conditions import AttributeCondition, PrincipalSetMatch
from cloud_provisioning.services.iam import IamService, Roles

PULUMI_OIDC_ISSUER = "https://api.pulumi.com/oidc"
GITHUB_OIDC_ISSUER = "https://token.actions.githubusercontent.com"


def pulumi_deploy_condition(pulumi_org: str) -> AttributeCondition:
    """Only deployments of one Pulumi organization may use the provider."""
    return AttributeCondition.prefix("assertion.sub", f"pulumi:deploy:org:{pulumi_org}:")


def github_owner_condition(owner: str) -> AttributeCondition:
    return AttributeCondition.exact("attribute.repository_owner", owner)


def github_repository_match(owner: str, repository: str) -> PrincipalSetMatch:
    return PrincipalSetMatch("repository", f"{owner}/{repository}")


class WorkloadIdentityComponent(pulumi.ComponentResource):
    """Federation pool with one provider per external CI/CD system.

    Creates:
    - Pool ``external-providers``
    - ``pulumi-provider`` (Pulumi Deployments OIDC) and ``github-provider``
      (GitHub Actions OIDC), each gated by an attribute condition
    - ``pulumi-cloud`` service account: owner on the project, folder viewer,
      impersonable by any principal the Pulumi provider admits
    - ``github-actions`` service account: registry writer, impersonable only
      from the configured CI repository
    """

    def __init__(
        self,
        name: str,
        iam: IamService,
        environment: str,
        folder_id: pulumi.Input[str],
        github_owner: str,
        ci_repository: str,
        pulumi_org: str,
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("liverty-music:gcp:WorkloadIdentityComponent", name, None, opts)

        project = iam.project
        pool_opts = pulumi.ResourceOptions(parent=self, depends_on=iam.prerequisites)

        # 1. Pool shared by all external providers
        self.pool = gcp.iam.WorkloadIdentityPool(
            "external-providers",
            workload_identity_pool_id="external-providers",
            project=project.project_id,
            display_name="Workload Identity Pool",
            description=f"Workload Identity Pool for external providers in {environment} environment",
            opts=pool_opts,
        )

        # 2. Pulumi Deployments
        self.pulumi_condition = pulumi_deploy_condition(pulumi_org)
        self.provider = gcp.iam.WorkloadIdentityPoolProvider(
            "pulumi-provider",
            workload_identity_pool_id=self.pool.workload_identity_pool_id,
            workload_identity_pool_provider_id="pulumi-provider",
            project=project.project_id,
            display_name="Pulumi Deployments OIDC Provider",
            description="OIDC Provider for Pulumi Deployments authentication",
            attribute_mapping={"google.subject": "assertion.sub"},
            attribute_condition=self.pulumi_condition.expression(),
            oidc=gcp.iam.WorkloadIdentityPoolProviderOidcArgs(
                issuer_uri=PULUMI_OIDC_ISSUER,
                allowed_audiences=[pulumi_org],
            ),
            opts=pulumi.ResourceOptions(parent=self, depends_on=[self.pool]),
        )

        # 3. GitHub Actions
        self.github_condition = github_owner_condition(github_owner)
        self.github_provider = gcp.iam.WorkloadIdentityPoolProvider(
            "github-provider",
            workload_identity_pool_id=self.pool.workload_identity_pool_id,
            workload_identity_pool_provider_id="github-provider",
            project=project.project_id,
            display_name="GitHub Actions OIDC Provider",
            description="OIDC Provider for GitHub Actions authentication",
            attribute_mapping={
                "google.subject": "assertion.sub",
                "attribute.actor": "assertion.actor",
                "attribute.repository": "assertion.repository",
                "attribute.repository_owner": "assertion.repository_owner",
            },
            attribute_condition=self.github_condition.expression(),
            oidc=gcp.iam.WorkloadIdentityPoolProviderOidcArgs(
                issuer_uri=GITHUB_OIDC_ISSUER,
            ),
            opts=pulumi.ResourceOptions(parent=self, depends_on=[self.pool]),
        )

        # 4. Pulumi Deployments identity
        pulumi_sa_name = "pulumi-cloud"
        pulumi_sa = iam.create_service_account(
            pulumi_sa_name,
            pulumi_sa_name,
            "Pulumi Cloud Service Account",
            "Service Account for Pulumi Deployments to provision resources",
            parent=self,
        )
        # The provider's attribute condition already restricts who gets in
        iam.bind_wif_user(pulumi_sa_name, PrincipalSetMatch.any(), pulumi_sa, self.pool, parent=self)
        iam.bind_project_roles([Roles.Project.OWNER], pulumi_sa_name, pulumi_sa.email, parent=self)
        iam.bind_folder_roles(
            [Roles.ResourceManager.FOLDER_VIEWER],
            pulumi_sa_name,
            pulumi_sa.email,
            folder_id,
            parent=self,
        )

        # 5. GitHub Actions identity
        github_sa_name = "github-actions"
        self.github_actions_service_account = iam.create_service_account(
            github_sa_name,
            github_sa_name,
            "GitHub Actions Service Account",
            "Service Account for GitHub Actions to push images to Artifact Registry",
            parent=self,
        )
        self.github_actions_sa_email = self.github_actions_service_account.email
        iam.bind_project_roles(
            [Roles.ArtifactRegistry.WRITER],
            github_sa_name,
            self.github_actions_sa_email,
            parent=self,
        )
        self.ci_match = github_repository_match(github_owner, ci_repository)
        iam.bind_wif_user(
            github_sa_name,
            self.ci_match,
            self.github_actions_service_account,
            self.pool,
            parent=self,
        )

        self.github_provider_name = self.github_provider.name

        self.register_outputs(
            {
                "pool": self.pool.name,
                "provider": self.provider.name,
                "github_provider": self.github_provider_name,
                "github_actions_sa_email": self.github_actions_sa_email,
            }
        )
