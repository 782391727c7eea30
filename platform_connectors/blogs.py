"""
Blog connectors: Dev.to, Hashnode and Medium.

All three produce BlogData; the aggregator averages them into
the long-form-content family.
"""

import logging
import math
from typing import Any, Optional

from core.clock import parse_timestamp
from platform_metrics.types import BlogData, BlogPost, BlogProfile, Platform

from .base import BasePlatformConnector
from .exceptions import ProfileNotFoundError


logger = logging.getLogger(__name__)

DEVTO_API_URL = "https://dev.to/api"
HASHNODE_GRAPHQL_URL = "https://gql.hashnode.com"

# Characters per estimated minute of reading (Hashnode has no reading time)
CHARS_PER_READING_MINUTE = 1500


# ============================================================
# DEV.TO
# ============================================================


class DevToConnector(BasePlatformConnector):
    """Dev.to public API. Follower counts are not exposed (always 0)."""

    ARTICLE_LIMIT = 30

    def __init__(self, api_key: Optional[str] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._api_key = api_key

    @property
    def platform(self) -> Platform:
        return Platform.DEVTO

    def _get_default_headers(self) -> dict[str, str]:
        headers = super()._get_default_headers()
        if self._api_key:
            headers["api-key"] = self._api_key
        return headers

    async def fetch_raw(self, username: str) -> dict[str, Any]:
        user = await self._make_request(
            "GET",
            f"{DEVTO_API_URL}/users/by_username",
            params={"url": username},
            username=username,
        )
        articles = await self._make_request(
            "GET",
            f"{DEVTO_API_URL}/articles",
            params={"username": username, "per_page": self.ARTICLE_LIMIT},
        )
        return {"user": user, "articles": articles or []}

    def decode(self, raw: dict[str, Any], username: str) -> BlogData:
        user = raw["user"]
        posts = [
            BlogPost(
                title=article.get("title") or "",
                url=article.get("url"),
                published_at=parse_timestamp(article.get("published_at")),
                reading_time_minutes=article.get("reading_time_minutes"),
                reactions=article.get("public_reactions_count"),
                comments=article.get("comments_count"),
                tags=_devto_tags(article.get("tag_list", article.get("tags"))),
                cover_image=article.get("cover_image"),
                excerpt=article.get("description"),
            )
            for article in raw.get("articles") or []
        ]
        return BlogData(
            profile=BlogProfile(
                platform=Platform.DEVTO,
                username=user.get("username") or username,
                name=user.get("name"),
                bio=user.get("summary"),
                followers=0,
            ),
            activity=posts,
            platform=Platform.DEVTO,
        )


def _devto_tags(value: Any) -> list[str]:
    """Dev.to sends tags either as a list or as "a, b, c"."""
    if not value:
        return []
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    return [str(tag) for tag in value]


# ============================================================
# HASHNODE
# ============================================================


HASHNODE_QUERY = """
query GetUser($username: String!) {
  user(username: $username) {
    username
    name
    tagline
    followersCount
    posts(page: 1, pageSize: 50) {
      nodes {
        title
        url
        brief
        publishedAt
        reactionCount
        responseCount
        coverImage { url }
        tags { name }
        content { markdown }
      }
    }
  }
}
"""


class HashnodeConnector(BasePlatformConnector):
    """Hashnode GraphQL API."""

    def __init__(self, token: Optional[str] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._token = token

    @property
    def platform(self) -> Platform:
        return Platform.HASHNODE

    def _get_default_headers(self) -> dict[str, str]:
        headers = super()._get_default_headers()
        headers["Content-Type"] = "application/json"
        if self._token:
            headers["Authorization"] = self._token
        return headers

    async def fetch_raw(self, username: str) -> dict[str, Any]:
        result = await self._make_request(
            "POST",
            HASHNODE_GRAPHQL_URL,
            json_body={"query": HASHNODE_QUERY, "variables": {"username": username}},
        )
        user = (result.get("data") or {}).get("user")
        if result.get("errors") or not user:
            raise ProfileNotFoundError("hashnode", username)
        return {"user": user}

    def decode(self, raw: dict[str, Any], username: str) -> BlogData:
        user = raw["user"]
        nodes = ((user.get("posts") or {}).get("nodes")) or []

        posts = []
        for node in nodes:
            markdown = ((node.get("content") or {}).get("markdown")) or ""
            posts.append(
                BlogPost(
                    title=node.get("title") or "",
                    url=node.get("url"),
                    published_at=parse_timestamp(node.get("publishedAt")),
                    reading_time_minutes=math.ceil(len(markdown) / CHARS_PER_READING_MINUTE),
                    reactions=node.get("reactionCount"),
                    comments=node.get("responseCount"),
                    tags=[t["name"] for t in node.get("tags") or [] if t.get("name")],
                    cover_image=(node.get("coverImage") or {}).get("url"),
                    excerpt=node.get("brief"),
                )
            )

        return BlogData(
            profile=BlogProfile(
                platform=Platform.HASHNODE,
                username=user.get("username") or username,
                name=user.get("name"),
                bio=user.get("tagline"),
                followers=user.get("followersCount"),
            ),
            activity=posts,
            platform=Platform.HASHNODE,
        )


# ============================================================
# MEDIUM
# ============================================================


class MediumConnector(BasePlatformConnector):
    """
    Medium has no public API.

    Returns the profile shell with no posts, so the calculator's
    empty-activity path applies.
    """

    @property
    def platform(self) -> Platform:
        return Platform.MEDIUM

    async def fetch_raw(self, username: str) -> dict[str, Any]:
        return {"username": username}

    def decode(self, raw: dict[str, Any], username: str) -> BlogData:
        return BlogData(
            profile=BlogProfile(platform=Platform.MEDIUM, username=raw.get("username") or username),
            activity=[],
            platform=Platform.MEDIUM,
        )
