"""Zitadel actions and their trigger wiring."""

from pathlib import Path

import pulumi
import pulumiverse_zitadel as zitadel

SCRIPTS_DIR = Path(__file__).resolve().parent.parent / "scripts"

# Zitadel invokes the script function by the action name
ADD_EMAIL_CLAIM = "addEmailClaim"


def load_script(filename: str) -> str:
    return (SCRIPTS_DIR / filename).read_text(encoding="utf-8")


class ActionsComponent(pulumi.ComponentResource):
    """Injects the ``email`` claim into every JWT access token."""

    def __init__(
        self,
        name: str,
        org_id: pulumi.Input[str],
        allowed_to_fail: bool,
        provider: zitadel.Provider,
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("liverty-music:zitadel:Actions", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self, provider=provider)

        self.add_email_claim_action = zitadel.Action(
            "add-email-claim",
            org_id=org_id,
            name=ADD_EMAIL_CLAIM,
            script=load_script("add_email_claim.js"),
            timeout="10s",
            allowed_to_fail=allowed_to_fail,
            opts=child_opts,
        )

        # Complement Token flow, fired right before the access token is signed
        self.pre_access_token_trigger = zitadel.TriggerActions(
            "customise-token-pre-access",
            org_id=org_id,
            flow_type="FLOW_TYPE_CUSTOMISE_TOKEN",
            trigger_type="TRIGGER_TYPE_PRE_ACCESS_TOKEN_CREATION",
            action_ids=[self.add_email_claim_action.id],
            opts=pulumi.ResourceOptions(
                parent=self,
                provider=provider,
                depends_on=[self.add_email_claim_action],
            ),
        )

        self.register_outputs({"add_email_claim_action_id": self.add_email_claim_action.id})
