"""Tests for GitHub provider."""

import logging

import responses
import pytest
from responses import matchers

from ReClone.models import ProviderConfig
from ReClone.providers.base import RemoteRequestError
from ReClone.providers.github import GitHubProvider, RateLimitError

API = "https://api.github.com/orgs/testorg/repos"
ENV = {"GITHUB_TOKEN": "ghp_test123"}


def _config(**overrides) -> ProviderConfig:
    values = dict(name="TestOrg", local_path="/work")
    values.update(overrides)
    return ProviderConfig(**values)


def _repo(name: str, archived: bool = False) -> dict:
    return {
        "full_name": f"testorg/{name}",
        "ssh_url": f"git@github.com:testorg/{name}.git",
        "clone_url": f"https://github.com/testorg/{name}.git",
        "archived": archived,
        "default_branch": "main",
    }


class TestFetchRepositories:
    @responses.activate
    def test_lists_org_repos(self):
        responses.add(
            responses.GET,
            API,
            json=[_repo("alpha"), _repo("legacy", archived=True), _repo("beta")],
            match=[
                matchers.query_param_matcher({"page": "1"}),
                matchers.header_matcher({"Authorization": "Bearer ghp_test123"}),
            ],
        )
        responses.add(
            responses.GET, API, json=[], match=[matchers.query_param_matcher({"page": "2"})]
        )
        provider = GitHubProvider(_config(), env=ENV)

        repos = provider.fetch_repositories()

        assert [r.destination_path for r in repos] == ["/work/testorg/alpha", "/work/testorg/beta"]
        assert repos[0].clone_url == "git@github.com:testorg/alpha.git"
        assert repos[0].default_branch == "main"

    @responses.activate
    def test_https_clone_url(self):
        responses.add(
            responses.GET, API, json=[_repo("alpha")],
            match=[matchers.query_param_matcher({"page": "1"})],
        )
        provider = GitHubProvider(_config(use_ssh=False, max_results=1), env=ENV)

        repos = provider.fetch_repositories()

        assert repos[0].clone_url == "https://github.com/testorg/alpha.git"
        assert len(responses.calls) == 1

    @responses.activate
    @pytest.mark.parametrize("missing", ["full_name", "ssh_url", "clone_url"])
    def test_incomplete_entries_skipped(self, missing):
        incomplete = _repo("broken")
        incomplete[missing] = None
        responses.add(
            responses.GET, API, json=[incomplete, _repo("alpha")],
            match=[matchers.query_param_matcher({"page": "1"})],
        )
        responses.add(
            responses.GET, API, json=[], match=[matchers.query_param_matcher({"page": "2"})]
        )
        for use_ssh in (True, False):
            provider = GitHubProvider(_config(use_ssh=use_ssh), env=ENV)
            repos = provider.fetch_repositories()
            assert [r.destination_path for r in repos] == ["/work/testorg/alpha"]

    @responses.activate
    def test_pages_until_cap(self):
        for page, names in ((1, ["a", "b"]), (2, ["c", "d"]), (3, ["e"])):
            responses.add(
                responses.GET, API, json=[_repo(n) for n in names],
                match=[matchers.query_param_matcher({"page": str(page)})],
            )
        provider = GitHubProvider(_config(max_results=3), env=ENV)

        repos = provider.fetch_repositories()

        assert [r.destination_path for r in repos] == [
            "/work/testorg/a", "/work/testorg/b", "/work/testorg/c",
        ]
        assert len(responses.calls) == 2


class TestAPIErrors:
    @responses.activate
    def test_403_raises(self):
        responses.add(responses.GET, API, json={"message": "Forbidden"}, status=403)
        provider = GitHubProvider(_config(), env=ENV)
        with pytest.raises(RemoteRequestError, match="Access denied"):
            provider.fetch_repositories()


class TestRateLimit:
    @responses.activate
    @pytest.mark.parametrize("status", [403, 429])
    def test_rate_limit_raises(self, status):
        responses.add(
            responses.GET,
            API,
            json={"message": "API rate limit exceeded"},
            status=status,
            headers={
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": "9999999999",
            },
        )
        provider = GitHubProvider(_config(), env=ENV)
        with pytest.raises(RateLimitError):
            provider.fetch_repositories()

    @responses.activate
    def test_last_allowed_request_still_succeeds(self):
        responses.add(
            responses.GET,
            API,
            json=[_repo("alpha")],
            status=200,
            headers={
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": "9999999999",
            },
        )
        provider = GitHubProvider(_config(max_results=1), env=ENV)

        repos = provider.fetch_repositories()

        assert [r.destination_path for r in repos] == ["/work/testorg/alpha"]

    @responses.activate
    def test_malformed_header_falls_back_to_status(self):
        responses.add(
            responses.GET,
            API,
            json={"message": "Forbidden"},
            status=403,
            headers={"X-RateLimit-Remaining": "lots"},
        )
        provider = GitHubProvider(_config(), env=ENV)
        with pytest.raises(RemoteRequestError, match="Access denied") as excinfo:
            provider.fetch_repositories()
        assert not isinstance(excinfo.value, RateLimitError)

    def test_rate_limit_error_message(self):
        err = RateLimitError(reset_at=0)
        assert "rate limit exceeded" in str(err).lower()
        assert isinstance(err, RemoteRequestError)


class TestConfiguration:
    def test_defaults(self):
        provider = GitHubProvider(_config(), env={})
        assert provider.base_url == "https://api.github.com"
        assert provider.env_var == "GITHUB_TOKEN"
        assert provider.session.headers["Accept"] == "application/vnd.github+json"

    def test_missing_token(self, caplog):
        provider = GitHubProvider(_config(), env={})
        with caplog.at_level(logging.INFO):
            assert provider.validate_configuration() is False
        assert "https://github.com/settings/tokens" in caplog.text
