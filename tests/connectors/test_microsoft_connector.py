"""Tests for the Microsoft Graph connector."""

from canned_responses import json_response

from connectors.microsoft import MicrosoftConnector


class TestMicrosoftConnector:
    def test_profile(self, settings):
        profile = MicrosoftConnector.build_profile(settings)

        assert profile.name == "graph.microsoft.com"
        assert profile.pkce is True

    def test_default_scopes_request_offline_access(self, settings):
        connector = MicrosoftConnector.from_settings(settings)

        assert "offline_access" in connector.scopes
        assert "code_challenge_method=S256" in connector.authorize().authorization_url

    async def test_account_id_is_cached(self, settings, fresh_credential, mock_get):
        mock_get.return_value = json_response({"displayName": "Ada Lovelace"})
        connector = MicrosoftConnector.from_settings(settings, fresh_credential)

        assert await connector.account_id() == "Ada Lovelace"
        assert await connector.account_id() == "Ada Lovelace"

        mock_get.assert_awaited_once()
        assert mock_get.call_args.args[0] == "https://graph.microsoft.com/v1.0/me"

    async def test_get_tasks(self, settings, fresh_credential, mock_get):
        connector = MicrosoftConnector.from_settings(settings, fresh_credential)

        await connector.get_tasks("list-1")

        assert mock_get.call_args.args[0] == "https://graph.microsoft.com/v1.0/me/todo/lists/list-1/tasks"

    async def test_add_task_posts_json(self, settings, fresh_credential, mock_request):
        mock_request.return_value = json_response({"id": "task-1", "title": "Write report"}, status=201)
        connector = MicrosoftConnector.from_settings(settings, fresh_credential)

        created = await connector.add_task("list-1", {"title": "Write report"})

        assert created["id"] == "task-1"
        args, kwargs = mock_request.call_args
        assert args == ("POST", "https://graph.microsoft.com/v1.0/me/todo/lists/list-1/tasks")
        assert kwargs["json_body"] == {"title": "Write report"}

    async def test_create_task_list(self, settings, fresh_credential, mock_request):
        connector = MicrosoftConnector.from_settings(settings, fresh_credential)

        await connector.create_task_list("Groceries")

        assert mock_request.call_args.kwargs["json_body"] == {"displayName": "Groceries"}
