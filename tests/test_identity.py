"""Tests for the Zitadel identity resources."""
import pulumi
import pytest

from cloud_provisioning.components.zitadel_actions import ADD_EMAIL_CLAIM, load_script
from cloud_provisioning.components.zitadel_frontend import LOCAL_ORIGIN, frontend_domain
from cloud_provisioning.config import parse_config
from cloud_provisioning.errors import ConfigurationError
from cloud_provisioning.identity import IdentityProvider


def test_frontend_domain():
    assert frontend_domain("dev", "liverty-music.app", apex=False) == "dev.liverty-music.app"
    assert frontend_domain("prod", "liverty-music.app", apex=True) == "liverty-music.app"


def test_email_claim_script_defines_action_function():
    script = load_script("add_email_claim.js")

    assert f"function {ADD_EMAIL_CLAIM}(" in script


@pulumi.runtime.test
def test_dev_identity_provider(raw_config):
    identity = IdentityProvider("liverty-music", parse_config("dev", raw_config))

    def check(args):
        redirect_uris, dev_mode, allowed_to_fail, user_login = args
        assert redirect_uris == [
            "https://dev.liverty-music.app/auth/callback",
            f"{LOCAL_ORIGIN}/auth/callback",
        ]
        assert dev_mode is True
        assert allowed_to_fail is True
        assert user_login is False

    return pulumi.Output.all(
        identity.frontend.application.redirect_uris,
        identity.frontend.application.dev_mode,
        identity.actions.add_email_claim_action.allowed_to_fail,
        identity.frontend.login_policy.user_login,
    ).apply(check)


def test_identity_provider_requires_zitadel(raw_config):
    del raw_config["zitadel"]
    config = parse_config("staging", raw_config)

    with pytest.raises(ConfigurationError):
        IdentityProvider("liverty-music", config)
