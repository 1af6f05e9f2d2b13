"""Factories shared by the GCP components."""

from cloud_provisioning.services.api import ApiService
from cloud_provisioning.services.iam import IamService, Roles

__all__ = ["ApiService", "IamService", "Roles"]
