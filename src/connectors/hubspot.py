"""HubSpot connector: account details and CRM objects."""

from enum import Enum

from authcore.oauth2 import ProviderProfile, raw_text_error_message
from config.config import ProviderSettings
from connectors.base import ProviderAdapter

AUTH_URL = "https://app.hubspot.com/oauth/authorize"
TOKEN_URL = "https://api.hubapi.com/oauth/v1/token"
API_ENDPOINT = "https://api.hubapi.com"

DEFAULT_LIST_LIMIT = 10


class CrmObject(str, Enum):
    CALLS = "calls"
    CONTACTS = "contacts"
    EMAILS = "emails"
    MEETINGS = "meetings"
    NOTES = "notes"
    TASKS = "tasks"


# Properties always requested for engagement objects
DEFAULT_PROPERTIES: dict[CrmObject, tuple[str, ...]] = {
    CrmObject.CALLS: (
        "hs_activity_type",
        "hs_attachment_ids",
        "hs_call_body",
        "hs_call_callee_object_id",
        "hs_call_direction",
        "hs_call_disposition",
        "hs_call_duration",
        "hs_call_from_number",
        "hs_call_recording_url",
        "hs_call_status",
        "hs_call_title",
        "hs_call_to_number",
        "hs_createdate",
        "hs_lastmodifieddate",
        "hs_timestamp",
        "hubspot_owner_id",
    ),
    CrmObject.NOTES: (
        "hs_attachment_ids",
        "hs_note_body",
        "hs_timestamp",
        "hubspot_owner_id",
    ),
    CrmObject.TASKS: (
        "hs_timestamp",
        "hs_task_body",
        "hubspot_owner_id",
        "hs_task_subject",
        "hs_task_status",
        "hs_task_priority",
        "hs_task_type",
    ),
    CrmObject.EMAILS: (
        "hs_timestamp",
        "hs_email_direction",
        "hubspot_owner_id",
        "hs_email_html",
        "hs_email_status",
        "hs_email_subject",
        "hs_email_text",
        "hs_attachment_ids",
        "hs_email_from_email",
        "hs_email_from_firstname",
        "hs_email_from_lastname",
        "hs_email_to_email",
        "hs_email_to_firstname",
        "hs_email_to_lastname",
    ),
}


def properties_param(obj: CrmObject, properties: list[str] | None = None) -> str | None:
    """Comma-joined default properties for the object followed by the requested ones."""
    merged = [*DEFAULT_PROPERTIES.get(obj, ()), *(properties or [])]
    return ",".join(merged) if merged else None


class HubSpotConnector(ProviderAdapter):
    api_endpoint = API_ENDPOINT
    default_scopes = ("crm.objects.contacts.read",)

    @classmethod
    def build_profile(cls, settings: ProviderSettings) -> ProviderProfile:
        # HubSpot has no PKCE support, wants client credentials in the form body
        # and reports token errors as plain text or non-standard JSON
        return ProviderProfile(
            name="hubspot.com",
            auth_url=AUTH_URL,
            token_url=TOKEN_URL,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            redirect_url=settings.redirect_url,
            pkce=False,
            credentials_in_body=True,
            error_body_parser=raw_text_error_message,
        )

    async def account_id(self) -> str:
        details = await self.account_details()
        return str(details["portalId"])

    async def account_details(self) -> dict:
        return await self._get_json("/account-info/v3/details")

    async def get_object(
        self,
        obj: CrmObject,
        object_id: str,
        properties: list[str] | None = None,
        associations: list[str] | None = None,
    ) -> dict:
        query = []
        props = properties_param(obj, properties)
        if props:
            query.append(("properties", props))
        if associations:
            query.append(("associations", ",".join(associations)))
        return await self._get_json(f"/crm/v3/objects/{obj.value}/{object_id}", query)

    async def list_objects(
        self,
        obj: CrmObject,
        properties: list[str] | None = None,
        associations: list[str] | None = None,
        after: str | None = None,
        limit: int | None = None,
    ) -> dict:
        """List CRM objects; pass the response's paging.next.after to continue."""
        query = []
        props = properties_param(obj, properties)
        if props:
            query.append(("properties", props))
        query.append(("limit", str(limit or DEFAULT_LIST_LIMIT)))
        if after:
            query.append(("after", after))
        if associations:
            query.append(("associations", ",".join(associations)))
        return await self._get_json(f"/crm/v3/objects/{obj.value}", query)


__all__ = ["CrmObject", "HubSpotConnector", "properties_param"]
