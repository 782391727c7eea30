"""
GitHub connector.

REST v3 for profile, repositories and per-repo languages;
GraphQL for yearly contribution counters (token required,
zeros without one).
"""

import asyncio
import logging
from typing import Any, Optional

from core.clock import parse_timestamp
from platform_metrics.types import (
    GitHubContributionStats,
    GitHubData,
    GitHubProfile,
    GitHubRepository,
    Platform,
)

from .base import BasePlatformConnector
from .exceptions import AuthenticationError, ConnectorError, FetchError, RateLimitError


logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
GITHUB_GRAPHQL_URL = "https://api.github.com/graphql"

CONTRIBUTIONS_QUERY = """
query($username: String!) {
  user(login: $username) {
    contributionsCollection {
      totalCommitContributions
      totalPullRequestContributions
      totalIssueContributions
      totalPullRequestReviewContributions
      contributionCalendar {
        weeks {
          contributionDays {
            contributionCount
            date
          }
        }
      }
    }
  }
}
"""


def contribution_streaks(contributions_by_day: dict[str, int]) -> tuple[int, int]:
    """
    Return (current_streak, longest_streak) in days.

    The current streak counts back from the latest day.
    """
    longest = 0
    running = 0
    for day in sorted(contributions_by_day):
        if contributions_by_day[day] > 0:
            running += 1
            longest = max(longest, running)
        else:
            running = 0

    current = 0
    for day in sorted(contributions_by_day, reverse=True):
        if contributions_by_day[day] > 0:
            current += 1
        else:
            break
    return current, longest


class GitHubConnector(BasePlatformConnector):
    """Fetches a GitHub user's profile, repositories and contributions."""

    REPOSITORY_LIMIT = 50
    PAGE_SIZE = 100

    def __init__(
        self,
        token: Optional[str] = None,
        repository_limit: int = REPOSITORY_LIMIT,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self._token = token
        self._repository_limit = repository_limit

    @property
    def platform(self) -> Platform:
        return Platform.GITHUB

    def _get_default_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self.USER_AGENT,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _rest(self, endpoint: str, username: Optional[str] = None, **params) -> Any:
        try:
            return await self._make_request(
                "GET",
                f"{GITHUB_API_URL}{endpoint}",
                params=params or None,
                username=username,
            )
        except FetchError as e:
            # Unauthenticated GitHub answers 403 when the hourly quota is gone
            if e.status_code == 403:
                raise RateLimitError("GitHub API rate limit exceeded", platform="github", status_code=403)
            raise

    async def fetch_raw(self, username: str) -> dict[str, Any]:
        profile, repos, contributions = await asyncio.gather(
            self._rest(f"/users/{username}", username=username),
            self._fetch_repositories(username),
            self._fetch_contributions(username),
        )
        return {"profile": profile, "repositories": repos, "contributions": contributions}

    async def _fetch_repositories(self, username: str) -> list[dict[str, Any]]:
        repos: list[dict[str, Any]] = []
        page = 1
        while len(repos) < self._repository_limit:
            batch = await self._rest(
                f"/users/{username}/repos",
                username=username,
                per_page=self.PAGE_SIZE,
                page=page,
                sort="updated",
            )
            if not batch:
                break
            repos.extend(batch[: self._repository_limit - len(repos)])
            if len(batch) < self.PAGE_SIZE:
                break
            page += 1

        languages = await asyncio.gather(
            *(self._fetch_languages(username, repo.get("name", "")) for repo in repos)
        )
        for repo, repo_languages in zip(repos, languages):
            repo["languages"] = repo_languages
        return repos

    async def _fetch_languages(self, username: str, repo_name: str) -> dict[str, int]:
        try:
            return await self._rest(f"/repos/{username}/{repo_name}/languages") or {}
        except ConnectorError as e:
            # One repository's languages are not worth failing the platform
            logger.debug(f"[github] Languages unavailable for {repo_name}: {e}")
            return {}

    async def _fetch_contributions(self, username: str) -> Optional[dict[str, Any]]:
        if not self._token:
            return None

        result = await self._make_request(
            "POST",
            GITHUB_GRAPHQL_URL,
            json_body={"query": CONTRIBUTIONS_QUERY, "variables": {"username": username}},
        )
        if result.get("errors"):
            message = result["errors"][0].get("message", "unknown error")
            if "credentials" in message.lower():
                raise AuthenticationError(f"GitHub GraphQL error: {message}", platform="github")
            logger.warning(f"[github] GraphQL error for {username}: {message}")
            return None
        return (result.get("data") or {}).get("user")

    def decode(self, raw: dict[str, Any], username: str) -> GitHubData:
        profile = raw["profile"]
        stats = self._decode_contributions(raw.get("contributions"))

        repositories = [
            GitHubRepository(
                name=repo["name"],
                description=repo.get("description"),
                url=repo.get("html_url"),
                language=repo.get("language"),
                languages=dict(repo.get("languages") or {}),
                stars=repo.get("stargazers_count"),
                forks=repo.get("forks_count"),
                watchers=repo.get("watchers_count"),
                open_issues=repo.get("open_issues_count"),
                is_fork=bool(repo.get("fork")),
                topics=list(repo.get("topics") or []),
                license=(repo.get("license") or {}).get("spdx_id"),
                created_at=parse_timestamp(repo.get("created_at")),
                updated_at=parse_timestamp(repo.get("updated_at")),
                pushed_at=parse_timestamp(repo.get("pushed_at")),
            )
            for repo in raw.get("repositories") or []
        ]

        return GitHubData(
            profile=GitHubProfile(
                username=profile.get("login") or username,
                name=profile.get("name"),
                bio=profile.get("bio"),
                avatar_url=profile.get("avatar_url"),
                url=profile.get("html_url"),
                company=profile.get("company"),
                location=profile.get("location"),
                followers=profile.get("followers"),
                following=profile.get("following"),
                public_repos=profile.get("public_repos"),
                created_at=parse_timestamp(profile.get("created_at")),
                contributions=stats,
            ),
            activity=repositories,
        )

    @staticmethod
    def _decode_contributions(user: Optional[dict[str, Any]]) -> GitHubContributionStats:
        if not user:
            return GitHubContributionStats()

        collection = user.get("contributionsCollection") or {}
        calendar = collection.get("contributionCalendar") or {}
        by_day: dict[str, int] = {}
        for week in calendar.get("weeks") or []:
            for day in week.get("contributionDays") or []:
                by_day[day["date"]] = int(day.get("contributionCount") or 0)

        current, longest = contribution_streaks(by_day)
        return GitHubContributionStats(
            total_commits=collection.get("totalCommitContributions"),
            total_prs=collection.get("totalPullRequestContributions"),
            total_issues=collection.get("totalIssueContributions"),
            total_reviews=collection.get("totalPullRequestReviewContributions"),
            contributions_by_day=by_day,
            current_streak=current,
            longest_streak=longest,
        )
