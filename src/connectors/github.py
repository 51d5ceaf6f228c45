"""GitHub connector: user, repositories, stars and issues."""

from dataclasses import dataclass
from typing import Any, Mapping

from authcore.oauth2 import ProviderProfile
from authcore.oauth2.http import QueryParams
from config.config import ProviderSettings
from connectors.base import ProviderAdapter

AUTH_URL = "https://github.com/login/oauth/authorize"
TOKEN_URL = "https://github.com/login/oauth/access_token"
API_ENDPOINT = "https://api.github.com"


@dataclass
class Page:
    """One page of a paginated listing."""

    result: Any
    next_page: int | None = None


def has_next_page(headers: Mapping[str, str]) -> bool:
    """True when the Link header advertises a rel="next" page."""
    link = headers.get("Link") or headers.get("link") or ""
    return 'rel="next"' in link


class GitHubConnector(ProviderAdapter):
    api_endpoint = API_ENDPOINT
    default_scopes = ("repo", "user")

    @classmethod
    def build_profile(cls, settings: ProviderSettings) -> ProviderProfile:
        return ProviderProfile(
            name="api.github.com",
            auth_url=AUTH_URL,
            token_url=TOKEN_URL,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            redirect_url=settings.redirect_url,
            pkce=True,
        )

    async def account_id(self) -> str:
        user = await self.get_user()
        return user["login"]

    async def get_user(self) -> dict:
        return await self._get_json("/user")

    async def get_repo(self, repo_or_url: str) -> dict:
        """Fetch a repository by "owner/name" or by its API URL."""
        return await self._get_json(self._repo_url(repo_or_url))

    async def get_issue(self, issue_or_url: str) -> dict:
        """Fetch an issue by "owner/name/issues/N" or by its API URL."""
        return await self._get_json(self._repo_url(issue_or_url))

    async def list_issues(self, page: int | None = None) -> Page:
        return await self._paginate("/issues", page, [("filter", "all")])

    async def list_repos(self, page: int | None = None) -> Page:
        return await self._paginate("/user/repos", page)

    async def list_starred(self, page: int | None = None) -> Page:
        return await self._paginate("/user/starred", page)

    @staticmethod
    def _repo_url(repo_or_url: str) -> str:
        if repo_or_url.startswith(f"{API_ENDPOINT}/repos"):
            return repo_or_url
        return f"{API_ENDPOINT}/repos/{repo_or_url}"

    async def _paginate(self, path: str, page: int | None, query: QueryParams = ()) -> Page:
        current = page or 1
        response = await self.manager.call(self._url(path), [*query, ("page", str(current))])
        result = self.manager.json_or_raise(response)
        next_page = current + 1 if has_next_page(response.headers) else None
        return Page(result=result, next_page=next_page)


__all__ = ["GitHubConnector", "Page", "has_next_page"]
