"""
Pytest configuration and shared fixtures.
Component tests run against Pulumi's in-process mocks; no engine or cloud
credentials are needed. Pure helpers are tested directly.
"""
import pulumi
import pytest

PROJECT_NUMBER = "123456789012"
FOLDER_ID = "987654321"
INSTANCE_HASH = "1a2b3c4d5e6f"
NAMESERVERS = [
    "ns-cloud-a1.googledomains.com.",
    "ns-cloud-a2.googledomains.com",
    "ns-cloud-a3.googledomains.com.",
    "ns-cloud-a4.googledomains.com",
]


class RecordingMocks(pulumi.runtime.Mocks):
    """Echo inputs back as state and fill in provider-computed attributes."""

    def __init__(self):
        self.stack_outputs: dict = {}

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        state = dict(args.inputs)
        typ = args.typ
        resource_id = args.resource_id or f"{args.name}_id"

        if typ == "gcp:organizations/project:Project":
            state["number"] = PROJECT_NUMBER
        elif typ == "gcp:organizations/folder:Folder":
            state["folderId"] = resource_id.removeprefix("folders/") if args.resource_id else FOLDER_ID
            state["name"] = f"folders/{state['folderId']}"
        elif typ == "gcp:serviceaccount/account:Account":
            project = state.get("project") or "test-project"
            state["email"] = f"{state['accountId']}@{project}.iam.gserviceaccount.com"
            state["name"] = f"projects/{project}/serviceAccounts/{state['email']}"
        elif typ == "gcp:sql/databaseInstance:DatabaseInstance":
            region = state.get("region", "asia-northeast2")
            state["dnsName"] = f"{INSTANCE_HASH}.{region}.sql.goog."
            state["pscServiceAttachmentLink"] = (
                f"projects/tenant-project/regions/{region}/serviceAttachments/a-{INSTANCE_HASH}"
            )
            state["connectionName"] = f"{state.get('project')}:{region}:{state['name']}"
        elif typ == "gcp:dns/managedZone:ManagedZone":
            state["nameServers"] = list(NAMESERVERS)
        elif typ == "gcp:certificatemanager/dnsAuthorization:DnsAuthorization":
            state["dnsResourceRecords"] = [
                {
                    "name": f"_acme-challenge.{state['domain']}.",
                    "type": "CNAME",
                    "data": "0123abcd.authorize.certificatemanager.goog.",
                }
            ]
        elif typ == "gcp:compute/globalAddress:GlobalAddress":
            state["address"] = "34.0.0.1"
        elif typ == "gcp:iam/workloadIdentityPoolProvider:WorkloadIdentityPoolProvider":
            state["name"] = (
                f"projects/{PROJECT_NUMBER}/locations/global/workloadIdentityPools/"
                f"{state['workloadIdentityPoolId']}/providers/{state['workloadIdentityPoolProviderId']}"
            )
        elif typ == "pulumi:pulumi:StackReference":
            state["outputs"] = dict(self.stack_outputs)
            state["secretOutputNames"] = []

        return [resource_id, state]

    def call(self, args: pulumi.runtime.MockCallArgs):
        return {}


MOCKS = RecordingMocks()
pulumi.runtime.set_mocks(MOCKS, project="cloud-provisioning", stack="dev", preview=False)


class ResourceRecorder:
    """Transformation that records every resource registered beneath a component.

    Passed as ``ResourceOptions(transformations=[recorder])``; children
    inherit it from their parent.
    """

    def __init__(self):
        self.records: list[pulumi.ResourceTransformationArgs] = []

    def __call__(self, args: pulumi.ResourceTransformationArgs):
        self.records.append(args)
        return None

    @property
    def opts(self) -> pulumi.ResourceOptions:
        return pulumi.ResourceOptions(transformations=[self])

    def of_type(self, typ: str) -> list[pulumi.ResourceTransformationArgs]:
        return [r for r in self.records if r.type_ == typ]

    def names(self, typ: str) -> list[str]:
        return [r.name for r in self.of_type(typ)]

    def opts_of(self, resource: pulumi.Resource) -> pulumi.ResourceOptions | None:
        for record in self.records:
            if record.resource is resource:
                return record.opts
        return None

    def depends_on(self, resource: pulumi.Resource) -> list[pulumi.Resource]:
        opts = self.opts_of(resource)
        return list(opts.depends_on or []) if opts else []

    def reaches(self, resource: pulumi.Resource, target: pulumi.Resource) -> bool:
        """Whether ``target`` is a direct or transitive explicit prerequisite."""
        pending, seen = [resource], set()
        while pending:
            current = pending.pop()
            if id(current) in seen:
                continue
            seen.add(id(current))
            for dep in self.depends_on(current):
                if dep is target:
                    return True
                pending.append(dep)
        return False


@pytest.fixture
def mocks():
    MOCKS.stack_outputs = {}
    return MOCKS


@pytest.fixture
def recorder():
    return ResourceRecorder()


@pytest.fixture
def raw_config():
    return {
        "gcp": {
            "organizationId": "111111111111",
            "billingAccount": "AAAAAA-BBBBBB-CCCCCC",
        },
        "github": {
            "owner": "pannpers",
            "token": "ghp_test",
            "billingEmail": "billing@liverty-music.app",
        },
        "buf": {"token": "buf_test"},
        "zitadel": {
            "orgId": "300000000000000001",
            "domain": "auth.liverty-music.app",
            "pulumiJwtProfileJson": "{}",
        },
    }
