"""Ethos Network data collection service for RepInsight."""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from ..core.config import settings
from ..core.constants import EthosConstants
from ..core.errors import EthosAPIError
from ..core.models import EthosProfile, Review, Sentiment

logger = logging.getLogger(__name__)


def _user_to_profile(user: Dict[str, Any], userkey: str, **overrides) -> EthosProfile:
    userkeys = user.get("userkeys") or []
    profile = EthosProfile(
        userkey=userkeys[0] if userkeys else user.get("userkey") or userkey,
        twitter=user.get("username"),
        primary_wallet=user.get("primaryAddress"),
        display_name=user.get("displayName") or user.get("name") or user.get("username"),
        avatar_url=user.get("avatarUrl") or user.get("avatar"),
        score=user.get("score"),
    )
    for key, value in overrides.items():
        if value is not None:
            setattr(profile, key, value)
    return profile


def activity_to_review(item: Dict[str, Any], sentiment: Sentiment, userkey: str) -> Review:
    """Normalize one review activity from the API into a Review."""
    data = item.get("data") or item
    author = item.get("author") or {}
    subject = item.get("subject") or {}

    timestamp = item.get("timestamp") or data.get("createdAt") or item.get("createdAt")
    if isinstance(timestamp, (int, float)):
        created_at = datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat().replace("+00:00", "Z")
    else:
        created_at = timestamp

    raw = {
        "id": data.get("id") or item.get("id"),
        "createdAt": created_at,
        "comment": data.get("comment") or data.get("body") or data.get("content"),
        "author": (author.get("userkey") if isinstance(author, dict) else None) or data.get("author"),
        "subject": (subject.get("userkey") if isinstance(subject, dict) else None) or userkey,
    }
    votes = item.get("votes")
    if votes:
        raw["votes"] = {"upvotes": votes.get("upvotes") or 0, "downvotes": votes.get("downvotes") or 0}

    return Review.from_dict(raw, score=sentiment.value)


class EthosService:
    """Ethos Network API client (profiles and received reviews)."""

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None, session=None):
        self.base_url = (base_url or settings.ethos_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.ethos_api_key
        self.session = session or requests.Session()
        self.headers = {"Content-Type": "application/json"}
        if self.api_key:
            self.headers["Authorization"] = f"Bearer {self.api_key}"

    def _request(self, method: str, endpoint: str, **kwargs) -> Any:
        url = f"{self.base_url}{endpoint}"
        response = self.session.request(
            method, url, headers=self.headers, timeout=EthosConstants.REQUEST_TIMEOUT, **kwargs
        )
        if not response.ok:
            logger.error(f"Ethos API error: {response.status_code} for {endpoint}")
            raise EthosAPIError(
                f"Ethos API error: {response.status_code} {response.reason}",
                status_code=response.status_code,
                endpoint=endpoint,
            )
        return response.json()

    def resolve_profile(self, userkey: str) -> EthosProfile:
        """Fetch the profile (including current score) behind a userkey."""
        parts = userkey.split(":")

        # "service:x.com:<account id>"
        if len(parts) >= 3 and parts[0] == "service" and parts[1] == "x.com" and parts[2]:
            data = self._request("POST", "/users/by/x", json={"accountIdsOrUsernames": [parts[2]]})
            if isinstance(data, list) and data:
                return _user_to_profile(data[0], userkey)

        # "address:<wallet>"
        if len(parts) >= 2 and parts[0] == "address" and parts[1]:
            data = self._request("POST", "/users/by/address", json={"addresses": [parts[1]]})
            if isinstance(data, list) and data:
                return _user_to_profile(data[0], userkey, primary_wallet=parts[1])

        logger.warning(f"Unable to fetch full profile for userkey: {userkey}")
        return EthosProfile(userkey=userkey, display_name=userkey)

    def fetch_reviews_page(self, userkey: str, sentiment: Sentiment, offset: int = 0) -> List[Dict[str, Any]]:
        """Fetch one page of review activities received by ``userkey``."""
        params = {
            "userkey": userkey,
            "direction": "subject",
            "activityType": "review",
            "excludeSpam": "true",
            "limit": str(EthosConstants.PAGE_LIMIT),
            "offset": str(offset),
            "reviewScore": sentiment.value,
        }
        data = self._request("GET", "/activities/userkey", params=params)
        return data if isinstance(data, list) else []

    def fetch_all_reviews(self, userkey: str) -> Dict[Sentiment, List[Review]]:
        """Fetch every review received by ``userkey``, grouped by sentiment."""
        results: Dict[Sentiment, List[Review]] = {s: [] for s in Sentiment}

        for sentiment in Sentiment:
            offset = 0
            while True:
                page = self.fetch_reviews_page(userkey, sentiment, offset)
                if not page:
                    break

                results[sentiment].extend(activity_to_review(item, sentiment, userkey) for item in page)

                if len(page) < EthosConstants.PAGE_LIMIT:
                    break
                offset += EthosConstants.PAGE_LIMIT
                time.sleep(EthosConstants.PAGE_DELAY)

        total = sum(len(v) for v in results.values())
        logger.info(f"Fetched {total} reviews for {userkey}")
        return results
