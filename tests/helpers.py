"""Builders shared by the component tests. Call only inside @pulumi.runtime.test."""
import pulumi_gcp as gcp

from cloud_provisioning.components.project import IAM_APIS
from cloud_provisioning.config import GitHubConfig
from cloud_provisioning.services.api import ApiService
from cloud_provisioning.services.iam import IamService

# Resource type module -> API its calls need
TYPE_APIS = {
    "gcp:compute/": "compute.googleapis.com",
    "gcp:dns/": "dns.googleapis.com",
    "gcp:certificatemanager/": "certificatemanager.googleapis.com",
    "gcp:sql/": "sqladmin.googleapis.com",
    "gcp:container/": "container.googleapis.com",
    "gcp:secretmanager/": "secretmanager.googleapis.com",
    "gcp:artifactregistry/": "artifactregistry.googleapis.com",
    "gcp:serviceaccount/": "iam.googleapis.com",
    "gcp:iam/": "iam.googleapis.com",
    "gcp:discoveryengine/": "discoveryengine.googleapis.com",
}


def required_api(typ: str) -> str | None:
    for prefix, api in TYPE_APIS.items():
        if typ.startswith(prefix):
            return api
    return None


def project_services(project_id: str = "liverty-music-dev"):
    project = gcp.organizations.Project(
        "liverty-music",
        project_id=project_id,
        name="Liverty Music -dev-",
        billing_account="AAAAAA-BBBBBB-CCCCCC",
    )
    apis = ApiService(project)
    iam = IamService(project, depends_on=apis.enable_apis(IAM_APIS))
    return project, apis, iam


def github_config() -> GitHubConfig:
    return GitHubConfig(owner="pannpers", token="ghp_test", billing_email="billing@liverty-music.app")


def assert_api_dependencies(recorder, apis):
    """Every recorded resource that calls a Google API waits on its activation."""
    enabled = apis.enabled
    checked = 0
    for record in recorder.records:
        api = required_api(record.type_)
        if api is None:
            continue
        assert api in enabled, f"{record.type_} {record.name}: {api} never enabled"
        assert recorder.reaches(record.resource, enabled[api]), (
            f"{record.type_} {record.name} does not depend on {api}"
        )
        checked += 1
    assert checked > 0
