"""Stack configuration schema and loader."""

from typing import Any

import pulumi
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from cloud_provisioning.errors import ConfigurationError
from cloud_provisioning.policy import Environment, EnvironmentPolicy, resolve_policy
from cloud_provisioning.region import ADDRESS_PLANS, DEFAULT_REGION

CONFIG_NAMESPACE = "cloud-provisioning"

BRAND_ID = "liverty-music"
DISPLAY_NAME = "Liverty Music"
APP_DOMAIN = "liverty-music.app"
PULUMI_ORGANIZATION = "pannpers"


class _Section(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


class RuntimeSecret(_Section):
    """A secret stored in Secret Manager and readable by the backend."""

    name: str = Field(..., pattern=r"^[a-z0-9-]+$", min_length=1, max_length=255)
    value: str = Field(..., min_length=1)


class GcpConfig(_Section):
    organization_id: str = Field(..., min_length=1)
    billing_account: str = Field(..., min_length=1)
    region: str = Field(default=DEFAULT_REGION)
    iam_database_users: list[str] = Field(default_factory=list)
    runtime_secrets: list[RuntimeSecret] = Field(default_factory=list)


class GitHubConfig(_Section):
    owner: str = Field(..., min_length=1)
    token: str = Field(..., min_length=1)
    billing_email: str = Field(..., min_length=1)
    gemini_api_key: str | None = None
    anthropic_api_key: str | None = None


class BufConfig(_Section):
    token: str = Field(..., min_length=1)


class ZitadelConfig(_Section):
    org_id: str = Field(..., min_length=1)
    domain: str = Field(..., min_length=1)
    pulumi_jwt_profile_json: str = Field(..., min_length=1)


class PublicDnsConfig(_Section):
    """Public domain whose per-environment subdomain is delegated to Cloud DNS."""

    domain: str = Field(..., min_length=1)
    cloudflare_api_token: str = Field(..., min_length=1)
    cloudflare_zone_id: str = Field(..., min_length=1)


class ComponentOverrides(_Section):
    cluster: bool | None = None
    database: bool | None = None
    identity_provider: bool | None = None
    github_organization: bool | None = None


class Config(_Section):
    """Everything the program needs, built once and passed to every component."""

    environment: Environment
    brand_id: str = BRAND_ID
    display_name: str = DISPLAY_NAME
    app_domain: str = APP_DOMAIN
    pulumi_organization: str = PULUMI_ORGANIZATION
    gcp: GcpConfig
    github: GitHubConfig
    buf: BufConfig
    zitadel: ZitadelConfig | None = None
    public_dns: PublicDnsConfig | None = None
    components: ComponentOverrides = Field(default_factory=ComponentOverrides)

    @property
    def policy(self) -> EnvironmentPolicy:
        return resolve_policy(
            self.environment,
            self.components.model_dump(by_alias=True, exclude_none=True),
        )

    @property
    def project_id(self) -> str:
        return f"{self.brand_id}-{self.environment.value}"


def parse_config(environment: str, raw: dict[str, Any]) -> Config:
    """Validate raw configuration sections for an environment.

    Raises:
        ConfigurationError: if a required value is missing or malformed.
    """
    try:
        env = Environment(environment)
    except ValueError:
        allowed = ", ".join(e.value for e in Environment)
        raise ConfigurationError(
            f"Stack '{environment}' is not a known environment (expected one of: {allowed})"
        ) from None

    try:
        config = Config.model_validate({**raw, "environment": env})
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid '{CONFIG_NAMESPACE}' configuration: {problems}") from e

    if config.gcp.region not in ADDRESS_PLANS:
        raise ConfigurationError(f"No address plan is defined for region '{config.gcp.region}'")
    if config.policy.identity_provider and config.zitadel is None:
        raise ConfigurationError(
            f"'{CONFIG_NAMESPACE}:zitadel' is required for the {env.value} environment"
        )
    return config


def load_config() -> Config:
    """Load and validate configuration from the current Pulumi stack."""
    config = pulumi.Config(CONFIG_NAMESPACE)
    raw = {
        key: value
        for key in ("gcp", "github", "buf", "zitadel", "publicDns", "components")
        if (value := config.get_object(key)) is not None
    }
    if organization := config.get("pulumiOrganization"):
        raw["pulumiOrganization"] = organization
    return parse_config(pulumi.get_stack(), raw)
