"""Reddit connector: user identity and saved/upvoted listings."""

from dataclasses import dataclass, field

from authcore import __version__
from authcore.oauth2 import ProviderProfile
from authcore.oauth2.http import QueryParams
from config.config import ProviderSettings
from connectors.base import ProviderAdapter

AUTH_URL = "https://www.reddit.com/api/v1/authorize"
TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
API_ENDPOINT = "https://oauth.reddit.com"

# Reddit rejects requests without a descriptive <platform>:<app id>:<version> User-Agent
USER_AGENT = f"python:saas-connectors:v{__version__}"

MIN_LISTING_LIMIT = 1
MAX_LISTING_LIMIT = 100


def clamp_limit(limit: int) -> int:
    return max(MIN_LISTING_LIMIT, min(MAX_LISTING_LIMIT, limit))


@dataclass
class Listing:
    """Posts from one listing page; pass `after` to fetch the next one."""

    data: list[dict] = field(default_factory=list)
    after: str | None = None


class RedditConnector(ProviderAdapter):
    api_endpoint = API_ENDPOINT
    default_scopes = ("identity", "history", "read")
    configurable_user_agent = False

    def __init__(self, manager, scopes=None):
        super().__init__(manager, scopes)
        self._username: str | None = None

    @classmethod
    def build_profile(cls, settings: ProviderSettings) -> ProviderProfile:
        return ProviderProfile(
            name="oauth.reddit.com",
            auth_url=AUTH_URL,
            token_url=TOKEN_URL,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            redirect_url=settings.redirect_url,
            pkce=True,
            extra_authorize_params=(("duration", "permanent"),),
            user_agent=USER_AGENT,
            token_headers=(("User-Agent", USER_AGENT),),
        )

    async def account_id(self) -> str:
        """Reddit username, fetched once."""
        if self._username is None:
            user = await self.get_user()
            self._username = user["name"]
        return self._username

    async def get_user(self) -> dict:
        return await self._get_json("/api/v1/me")

    async def get_post(self, post_id: str) -> dict | None:
        """Fetch a post by fullname (e.g. "t3_abc123"); None if it does not exist."""
        listing = await self._listing("/api/info", [("id", post_id)])
        return listing.data[0] if listing.data else None

    async def list_saved(self, after: str | None = None, limit: int = 25) -> Listing:
        username = await self.account_id()
        return await self._listing(f"/user/{username}/saved", self._listing_query(after, limit))

    async def list_upvoted(self, after: str | None = None, limit: int = 25) -> Listing:
        username = await self.account_id()
        return await self._listing(f"/user/{username}/upvoted", self._listing_query(after, limit))

    @staticmethod
    def _listing_query(after: str | None, limit: int) -> list[tuple[str, str]]:
        query = [("t", "all"), ("limit", str(clamp_limit(limit)))]
        if after:
            query.append(("after", after))
        return query

    async def _listing(self, path: str, query: QueryParams) -> Listing:
        body = await self._get_json(path, query)
        data = body.get("data") or {}
        posts = [child.get("data", {}) for child in data.get("children", [])]
        return Listing(data=posts, after=data.get("after"))


__all__ = ["Listing", "RedditConnector", "clamp_limit"]
