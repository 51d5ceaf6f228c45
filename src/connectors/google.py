"""
Google connectors: Calendar, Drive and Sheets.

All three share one OAuth client registration and token endpoint; each is a
separate credential (its own id and scopes).
"""

import re
import urllib.parse
from datetime import datetime

from authcore.errors.exceptions import BadRequest
from authcore.oauth2 import ProviderProfile
from config.config import ProviderSettings
from connectors.base import ProviderAdapter

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://www.googleapis.com/oauth2/v3/token"
REVOKE_URL = "https://oauth2.googleapis.com/revoke"
USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"

# Google-native documents must be exported rather than downloaded
EXPORT_MIME_TYPES = {
    "application/vnd.google-apps.document": "text/plain",
    "application/vnd.google-apps.spreadsheet": (
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    ),
    "application/vnd.google-apps.presentation": "text/plain",
}

FILE_METADATA_FIELDS = (
    "kind",
    "id",
    "name",
    "mimeType",
    "description",
    "starred",
    "parents",
    "version",
    "sharingUser",
    "lastModifyingUser",
    "webViewLink",
    "createdTime",
    "modifiedTime",
    "sharedWithMeTime",
)

_CELL = r"(?:[A-Za-z]{1,3}[1-9][0-9]*|[A-Za-z]{1,3}|[1-9][0-9]*)"
A1_RANGE_PATTERN = re.compile(rf"^{_CELL}(?::{_CELL})?$")


def validate_a1_range(sheet_id: str, cell_range: str) -> str:
    """
    Build "<sheet>!<range>" A1 notation, rejecting malformed input.

    Raises:
        BadRequest: If the sheet name is empty or the range is not A1 notation
    """
    if not sheet_id or not sheet_id.strip():
        raise BadRequest("Sheet name must not be empty")
    if not A1_RANGE_PATTERN.match(cell_range or ""):
        raise BadRequest(
            f"Invalid cell range {cell_range!r}: expected A1 notation such as 'A1:C10'",
            context={"sheet_id": sheet_id},
        )
    return f"{sheet_id}!{cell_range}"


class GoogleConnector(ProviderAdapter):
    """Shared OAuth profile and user lookup for Google services."""

    provider_id = ""

    @classmethod
    def build_profile(cls, settings: ProviderSettings) -> ProviderProfile:
        return ProviderProfile(
            name=cls.provider_id,
            auth_url=AUTH_URL,
            token_url=TOKEN_URL,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            redirect_url=settings.redirect_url,
            revoke_url=REVOKE_URL,
            pkce=True,
            # Without offline access Google never issues a refresh token
            extra_authorize_params=(("access_type", "offline"),),
        )

    async def account_id(self) -> str:
        user = await self.get_user()
        return user["email"]

    async def get_user(self) -> dict:
        """User associated with this credential."""
        return await self._get_json(USERINFO_URL)


class GoogleCalendar(GoogleConnector):
    provider_id = "calendar.google.com"
    api_endpoint = "https://www.googleapis.com/calendar/v3"
    default_scopes = ("https://www.googleapis.com/auth/calendar.readonly",)

    async def list_calendars(self, next_page: str | None = None) -> dict:
        query = [("pageToken", next_page)] if next_page else []
        return await self._get_json("/users/me/calendarList", query)

    async def list_calendar_events(
        self,
        calendar_id: str,
        after: datetime | None = None,
        before: datetime | None = None,
        next_page: str | None = None,
    ) -> dict:
        """List events for a calendar. Use "primary" for the user's primary calendar."""
        query = [("pageToken", next_page)] if next_page else []
        query.append(("orderBy", "updated"))
        if after:
            query.append(("timeMin", after.isoformat()))
        if before:
            query.append(("timeMax", before.isoformat()))
        return await self._get_json(f"/calendars/{calendar_id}/events", query)

    async def get_calendar_event(self, calendar_id: str, event_id: str) -> dict:
        return await self._get_json(f"/calendars/{calendar_id}/events/{event_id}")


class GoogleDrive(GoogleConnector):
    provider_id = "drive.google.com"
    api_endpoint = "https://www.googleapis.com/drive/v3"
    default_scopes = ("https://www.googleapis.com/auth/drive.readonly",)

    async def list_files(self, next_page: str | None = None, query: str | None = None) -> dict:
        params = [("pageToken", next_page)] if next_page else []
        if query:
            params.append(("q", query))
        params.append(("orderBy", "viewedByMeTime desc"))
        return await self._get_json("/files", params)

    async def get_file_metadata(self, file_id: str) -> dict:
        return await self._get_json(f"/files/{file_id}", [("fields", ",".join(FILE_METADATA_FIELDS))])

    async def download_file(self, file_id: str) -> bytes:
        """
        Download file contents, exporting Google-native documents.

        Raises:
            BadRequest: If the file is a Google-native type that cannot be exported
        """
        metadata = await self.get_file_metadata(file_id)
        mime_type = metadata.get("mimeType", "")

        endpoint = f"/files/{file_id}"
        if mime_type.startswith("application/vnd.google-apps"):
            export_type = EXPORT_MIME_TYPES.get(mime_type)
            if export_type is None:
                raise BadRequest(f"Unsupported file type: {mime_type}", context={"file_id": file_id})
            endpoint = f"{endpoint}/export"
            params = [("mimeType", export_type)]
        else:
            params = [("alt", "media")]

        response = await self.manager.call(self._url(endpoint), params)
        if not response.ok:
            # Raises AuthError or RequestError for any error status
            self.manager.json_or_raise(response)
        return response.content


class GoogleSheets(GoogleConnector):
    provider_id = "sheets.google.com"
    api_endpoint = "https://sheets.googleapis.com/v4"
    default_scopes = ("https://www.googleapis.com/auth/spreadsheets",)

    async def get(self, spreadsheet_id: str) -> dict:
        return await self._get_json(f"/spreadsheets/{spreadsheet_id}")

    async def read_range(self, spreadsheet_id: str, sheet_id: str, cell_range: str) -> dict:
        """
        Read cell values using A1 notation.

        Raises:
            BadRequest: If the range is malformed (before any network call)
        """
        return await self._get_json(self._values_path(spreadsheet_id, sheet_id, cell_range))

    async def update_range(
        self,
        spreadsheet_id: str,
        sheet_id: str,
        cell_range: str,
        values: list[str],
        value_input_option: str = "USER_ENTERED",
    ) -> dict:
        """
        Write one row of values into a range.

        Raises:
            BadRequest: If the range is malformed (before any network call)
        """
        path = self._values_path(spreadsheet_id, sheet_id, cell_range)
        return await self._send_json(
            "PUT",
            path,
            {"values": [list(values)]},
            query=[("valueInputOption", value_input_option)],
        )

    @staticmethod
    def _values_path(spreadsheet_id: str, sheet_id: str, cell_range: str) -> str:
        notation = validate_a1_range(sheet_id, cell_range)
        return f"/spreadsheets/{spreadsheet_id}/values/{urllib.parse.quote(notation, safe='!:')}"


__all__ = [
    "GoogleConnector",
    "GoogleCalendar",
    "GoogleDrive",
    "GoogleSheets",
    "validate_a1_range",
]
