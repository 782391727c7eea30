"""
Twitter connector (API v2, bearer token).
"""

import logging
from typing import Any, Optional

from core.clock import parse_timestamp
from platform_metrics.types import Platform, Tweet, TwitterData, TwitterProfile

from .base import BasePlatformConnector
from .exceptions import AuthenticationError, ProfileNotFoundError


logger = logging.getLogger(__name__)

TWITTER_API_URL = "https://api.twitter.com/2"


class TwitterConnector(BasePlatformConnector):
    """Fetches a Twitter profile and its recent tweets."""

    TWEET_LIMIT = 100

    def __init__(self, bearer_token: Optional[str] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._bearer_token = bearer_token

    @property
    def platform(self) -> Platform:
        return Platform.TWITTER

    def _get_default_headers(self) -> dict[str, str]:
        headers = super()._get_default_headers()
        if self._bearer_token:
            headers["Authorization"] = f"Bearer {self._bearer_token}"
        return headers

    async def fetch_raw(self, username: str) -> dict[str, Any]:
        if not self._bearer_token:
            raise AuthenticationError("Twitter bearer token not configured", platform="twitter")

        user = await self._make_request(
            "GET",
            f"{TWITTER_API_URL}/users/by/username/{username}",
            params={"user.fields": "description,public_metrics,verified,created_at,location"},
            username=username,
        )
        if not user.get("data"):
            raise ProfileNotFoundError("twitter", username)

        user_id = user["data"]["id"]
        tweets = await self._make_request(
            "GET",
            f"{TWITTER_API_URL}/users/{user_id}/tweets",
            params={
                "max_results": self.TWEET_LIMIT,
                "tweet.fields": "created_at,public_metrics,entities,referenced_tweets",
            },
        )
        return {"user": user["data"], "tweets": tweets.get("data") or []}

    def decode(self, raw: dict[str, Any], username: str) -> TwitterData:
        user = raw["user"]
        metrics = user.get("public_metrics") or {}

        tweets = []
        for item in raw.get("tweets") or []:
            counters = item.get("public_metrics") or {}
            references = item.get("referenced_tweets") or []
            hashtags = [h.get("tag", "") for h in (item.get("entities") or {}).get("hashtags") or []]
            tweets.append(
                Tweet(
                    id=str(item["id"]),
                    text=item.get("text") or "",
                    created_at=parse_timestamp(item.get("created_at")),
                    likes=counters.get("like_count"),
                    retweets=counters.get("retweet_count"),
                    replies=counters.get("reply_count"),
                    quotes=counters.get("quote_count"),
                    is_retweet=any(ref.get("type") == "retweeted" for ref in references),
                    hashtags=[tag for tag in hashtags if tag],
                )
            )

        return TwitterData(
            profile=TwitterProfile(
                username=user.get("username") or username,
                name=user.get("name"),
                # The API returns "" for an empty bio
                bio=user.get("description") or None,
                location=user.get("location"),
                followers=metrics.get("followers_count"),
                following=metrics.get("following_count"),
                tweet_count=metrics.get("tweet_count"),
                listed_count=metrics.get("listed_count"),
                verified=bool(user.get("verified")),
                created_at=parse_timestamp(user.get("created_at")),
            ),
            activity=tweets,
        )
