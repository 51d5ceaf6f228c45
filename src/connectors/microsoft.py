"""Microsoft Graph connector: user profile and To Do task lists."""

from authcore.oauth2 import ProviderProfile
from config.config import ProviderSettings
from connectors.base import ProviderAdapter

AUTH_URL = "https://login.microsoftonline.com/common/oauth2/v2.0/authorize"
TOKEN_URL = "https://login.microsoftonline.com/common/oauth2/v2.0/token"
API_ENDPOINT = "https://graph.microsoft.com/v1.0"


class MicrosoftConnector(ProviderAdapter):
    api_endpoint = API_ENDPOINT
    default_scopes = ("offline_access", "User.Read", "Tasks.ReadWrite")

    def __init__(self, manager, scopes=None):
        super().__init__(manager, scopes)
        self._display_name: str | None = None

    @classmethod
    def build_profile(cls, settings: ProviderSettings) -> ProviderProfile:
        return ProviderProfile(
            name="graph.microsoft.com",
            auth_url=AUTH_URL,
            token_url=TOKEN_URL,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            redirect_url=settings.redirect_url,
            pkce=True,
        )

    async def account_id(self) -> str:
        """Display name of the signed-in user, fetched once."""
        if self._display_name is None:
            user = await self.get_user()
            self._display_name = user["displayName"]
        return self._display_name

    async def get_user(self) -> dict:
        return await self._get_json("/me")

    async def get_task_lists(self) -> dict:
        return await self._get_json("/me/todo/lists")

    async def get_tasks(self, task_list_id: str) -> dict:
        return await self._get_json(f"/me/todo/lists/{task_list_id}/tasks")

    async def add_task(self, task_list_id: str, task: dict) -> dict:
        return await self._send_json("POST", f"/me/todo/lists/{task_list_id}/tasks", task)

    async def create_task_list(self, display_name: str) -> dict:
        return await self._send_json("POST", "/me/todo/lists", {"displayName": display_name})


__all__ = ["MicrosoftConnector"]
