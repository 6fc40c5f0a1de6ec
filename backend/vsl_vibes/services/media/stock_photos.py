"""
Stock photo search adapters (Pexels primary, Pixabay secondary).

Both return the same photo shape so the Image Resolver and the search
endpoints can treat them interchangeably.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

import httpx

from ...config import PEXELS_SEARCH_URL, PIXABAY_SEARCH_URL, get_api_key
from .http import require_key, send_json


@dataclass
class StockPhoto:
    url: str
    thumbnail: Optional[str] = None
    photographer: Optional[str] = None
    id: Optional[str] = None
    alt: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


class PexelsClient:
    """Pexels search, landscape orientation."""

    name = "pexels"

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = PEXELS_SEARCH_URL,
    ):
        self.api_key = api_key
        self.client = client
        self.base_url = base_url

    async def search(self, query: str, per_page: int = 5) -> List[StockPhoto]:
        api_key = require_key(get_api_key("PEXELS_API_KEY", self.api_key),
                              "Pexels API key not configured", self.name)
        data = await send_json(
            "GET",
            self.base_url,
            provider=self.name,
            client=self.client,
            params={"query": query, "per_page": per_page, "orientation": "landscape"},
            headers={"Authorization": api_key},
        )
        photos = []
        for photo in data.get("photos") or []:
            src = photo.get("src") or {}
            url = src.get("large2x") or src.get("large") or src.get("original")
            if not url:
                continue
            photos.append(StockPhoto(
                id=str(photo["id"]) if photo.get("id") is not None else None,
                url=url,
                thumbnail=src.get("medium"),
                photographer=photo.get("photographer"),
                alt=photo.get("alt"),
            ))
        return photos


class PixabayClient:
    """Pixabay search, horizontal photos with safesearch."""

    name = "pixabay"

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = PIXABAY_SEARCH_URL,
    ):
        self.api_key = api_key
        self.client = client
        self.base_url = base_url

    async def search(self, query: str, per_page: int = 1) -> List[StockPhoto]:
        api_key = require_key(get_api_key("PIXABAY_API_KEY", self.api_key),
                              "Pixabay API key missing", self.name)
        # Pixabay rejects per_page outside 3..200
        data = await send_json(
            "GET",
            self.base_url,
            provider=self.name,
            client=self.client,
            params={
                "key": api_key,
                "q": query,
                "image_type": "photo",
                "orientation": "horizontal",
                "per_page": min(max(per_page, 3), 200),
                "safesearch": "true",
            },
        )
        photos = []
        for hit in (data.get("hits") or [])[:max(per_page, 1)]:
            url = hit.get("largeImageURL") or hit.get("webformatURL")
            if not url:
                continue
            photos.append(StockPhoto(
                id=str(hit["id"]) if hit.get("id") is not None else None,
                url=url,
                thumbnail=hit.get("previewURL") or hit.get("webformatURL"),
                photographer=hit.get("user"),
                alt=hit.get("tags"),
            ))
        return photos
