"""Liverty Music infrastructure components."""

from cloud_provisioning.components.data_store import ConcertDataStore
from cloud_provisioning.components.dns_delegation import DnsSubdomainDelegation
from cloud_provisioning.components.github_organization import GitHubOrganizationComponent
from cloud_provisioning.components.github_repository import GitHubRepositoryComponent
from cloud_provisioning.components.kubernetes import KubernetesComponent
from cloud_provisioning.components.network import NetworkComponent
from cloud_provisioning.components.postgres import PostgresComponent
from cloud_provisioning.components.project import ProjectComponent
from cloud_provisioning.components.workload_identity import WorkloadIdentityComponent
from cloud_provisioning.components.zitadel_actions import ActionsComponent
from cloud_provisioning.components.zitadel_frontend import FrontendComponent

__all__ = [
    "ActionsComponent",
    "ConcertDataStore",
    "DnsSubdomainDelegation",
    "FrontendComponent",
    "GitHubOrganizationComponent",
    "GitHubRepositoryComponent",
    "KubernetesComponent",
    "NetworkComponent",
    "PostgresComponent",
    "ProjectComponent",
    "WorkloadIdentityComponent",
]
