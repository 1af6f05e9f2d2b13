"""GCP regions and per-region address plans."""

from dataclasses import dataclass

TOKYO = "asia-northeast1"
OSAKA = "asia-northeast2"

REGION_NAMES = {
    TOKYO: "tokyo",
    OSAKA: "osaka",
}

DEFAULT_REGION = OSAKA


@dataclass(frozen=True)
class AddressPlan:
    """CIDR ranges claimed in one region."""

    # Primary range for GKE nodes and PSC endpoints
    subnet_cidr: str
    pods_cidr: str
    services_cidr: str
    # GKE control plane
    master_cidr: str
    # Reserved inside subnet_cidr for the Cloud SQL PSC endpoint
    postgres_psc_ip: str


ADDRESS_PLANS = {
    OSAKA: AddressPlan(
        subnet_cidr="10.10.0.0/20",
        pods_cidr="10.20.0.0/16",
        services_cidr="10.30.0.0/20",
        master_cidr="172.16.0.0/28",
        postgres_psc_ip="10.10.10.10",
    ),
}


def region_name(region: str) -> str:
    """Short name used in resource names, e.g. ``osaka``."""
    return REGION_NAMES.get(region, region)
