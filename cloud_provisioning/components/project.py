"""Organization folder, project and base API enablement."""

import pulumi
import pulumi_gcp as gcp

from cloud_provisioning.config import Config
from cloud_provisioning.services.api import ApiService
from cloud_provisioning.services.iam import IamService
from cloud_provisioning.stack_reference import FOLDER_ID_EXPORT, ExportedState

BASE_APIS = [
    "cloudresourcemanager.googleapis.com",  # Folder and project management
    "serviceusage.googleapis.com",  # API enablement
    "iam.googleapis.com",  # Service accounts
    "cloudbilling.googleapis.com",
    "compute.googleapis.com",  # VPC and subnets
    "storage.googleapis.com",
    "logging.googleapis.com",
    "monitoring.googleapis.com",
    "cloudtrace.googleapis.com",
    "geminicloudassist.googleapis.com",
    "cloudasset.googleapis.com",  # Recommended for Gemini Cloud Assist
    "recommender.googleapis.com",  # Recommended for Gemini Cloud Assist
]

IAM_APIS = ["iam.googleapis.com", "cloudresourcemanager.googleapis.com"]


class ProjectComponent(pulumi.ComponentResource):
    """Folder and project for one environment.

    Creates:
    - Organization folder (prod only; other environments look up the folder
      exported by the prod stack)
    - Project ``<brand>-<environment>`` inside the folder
    - Base API activations

    Exposes the ``ApiService`` and ``IamService`` that every other component
    uses, both bound to this project.
    """

    def __init__(
        self,
        name: str,
        config: Config,
        prod_stack: str,
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("liverty-music:gcp:ProjectComponent", name, None, opts)

        policy = config.policy
        child_opts = pulumi.ResourceOptions(parent=self)

        # 1. Folder
        if policy.creates_folder:
            self.folder = gcp.organizations.Folder(
                config.brand_id,
                display_name=config.display_name,
                parent=f"organizations/{config.gcp.organization_id}",
                opts=child_opts,
            )
        else:
            prod = ExportedState(prod_stack, opts=child_opts)
            self.folder = gcp.organizations.Folder.get(
                config.brand_id,
                id=prod.require(FOLDER_ID_EXPORT).apply(lambda folder_id: f"folders/{folder_id}"),
                opts=child_opts,
            )
        self.folder_id = self.folder.folder_id

        # 2. Project
        environment = config.environment.value
        self.project = gcp.organizations.Project(
            config.brand_id,
            project_id=config.project_id,
            name=f"{config.display_name} -{environment}-",
            folder_id=self.folder_id,
            billing_account=config.gcp.billing_account,
            deletion_policy="ABANDON",
            labels={"environment": environment},
            opts=pulumi.ResourceOptions(parent=self, depends_on=[self.folder]),
        )
        self.project_id = self.project.project_id
        self.project_number = self.project.number

        # 3. APIs
        self.apis = ApiService(self.project, parent=self)
        self.enabled_apis = self.apis.enable_apis(BASE_APIS + list(policy.extra_apis))
        self.iam = IamService(self.project, depends_on=self.apis.enable_apis(IAM_APIS))

        self.register_outputs(
            {
                "folder_id": self.folder_id,
                "project_id": self.project_id,
                "project_number": self.project_number,
            }
        )
