"""Zitadel identity resources for end-user authentication."""

import pulumi
import pulumiverse_zitadel as zitadel

from cloud_provisioning.components.zitadel_actions import ActionsComponent
from cloud_provisioning.components.zitadel_frontend import FrontendComponent, frontend_domain
from cloud_provisioning.config import Config
from cloud_provisioning.errors import ConfigurationError
from cloud_provisioning.providers import create_zitadel_provider


class IdentityProvider:
    """Zitadel project, frontend application, login policy and token actions."""

    def __init__(self, name: str, config: Config):
        if config.zitadel is None:
            raise ConfigurationError("'cloud-provisioning:zitadel' is required for the identity provider")
        zitadel_config = config.zitadel
        policy = config.policy

        self.provider = create_zitadel_provider(f"{name}-provider", zitadel_config)

        self.project = zitadel.Project(
            name,
            name=name,
            org_id=zitadel_config.org_id,
            project_role_assertion=False,
            project_role_check=False,
            has_project_check=False,
            # Default private labeling avoids policy conflicts with instance SMTP
            private_labeling_setting="PRIVATE_LABELING_SETTING_UNSPECIFIED",
            opts=pulumi.ResourceOptions(provider=self.provider),
        )

        self.frontend = FrontendComponent(
            name,
            org_id=zitadel_config.org_id,
            project_id=self.project.id,
            domain=frontend_domain(config.environment.value, config.app_domain, policy.serves_apex),
            dev_mode=policy.frontend_dev_mode,
            provider=self.provider,
        )

        self.actions = ActionsComponent(
            name,
            org_id=zitadel_config.org_id,
            allowed_to_fail=policy.allow_action_failure,
            provider=self.provider,
        )
