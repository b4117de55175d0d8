"""Unsplash stock photo search."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Literal

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from app.core.background import spawn_background
from app.core.config import settings

logger = logging.getLogger(__name__)

UNSPLASH_API_URL = "https://api.unsplash.com"

Orientation = Literal["landscape", "portrait", "squarish"]


class _PhotoUrls(BaseModel):
    model_config = ConfigDict(extra="ignore")

    regular: str


class _Photo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    urls: _PhotoUrls


class _SearchResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    total: int = 0
    results: list[_Photo] = []


class UnsplashImageFinder:
    """Finds one illustrative photo per post.

    ``find_image`` never raises: the image is decoration, so every failure is
    logged and reported as ``None``.
    """

    def __init__(
        self,
        access_key: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        track_downloads: bool = True,
    ) -> None:
        self._access_key = access_key if access_key is not None else settings.unsplash_access_key
        self._timeout = timeout or settings.image_search_timeout_seconds
        self._transport = transport
        self._track_downloads = track_downloads

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=UNSPLASH_API_URL,
            timeout=self._timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Client-ID {self._access_key}",
                "Accept-Version": "v1",
            },
        )

    async def find_image(
        self, keywords: Sequence[str], orientation: Orientation | None = "landscape"
    ) -> str | None:
        if not self._access_key:
            logger.warning("UNSPLASH_ACCESS_KEY environment variable is not set")
            return None

        query = " ".join(keyword.strip() for keyword in keywords if keyword.strip())
        if not query:
            logger.warning("No keywords provided for image search")
            return None

        params = {"query": query, "per_page": "10", "order_by": "relevant"}
        if orientation:
            params["orientation"] = orientation

        try:
            # httpx timeouts are per phase; cap the whole search as well.
            async with asyncio.timeout(self._timeout), self._client() as client:
                response = await client.get("/search/photos", params=params)
            if response.status_code != httpx.codes.OK:
                logger.error(
                    "Unsplash API error: %s %s", response.status_code, response.reason_phrase
                )
                return None
            data = _SearchResponse.model_validate(response.json())
        except (httpx.TimeoutException, TimeoutError):
            logger.warning("Unsplash search timed out for query %r", query)
            return None
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.error("Error fetching image from Unsplash: %s", e)
            return None
        except Exception:
            logger.exception("Unexpected error during Unsplash search for %r", query)
            return None

        if not data.results:
            logger.info("No images found for query %r", query)
            return None

        photo = data.results[0]
        if self._track_downloads:
            spawn_background(self.track_download(photo.id), name=f"unsplash-download-{photo.id}")
        return photo.urls.regular

    async def track_download(self, photo_id: str) -> None:
        """Report a photo use, as the Unsplash API guidelines require."""
        async with self._client() as client:
            response = await client.get(f"/photos/{photo_id}/download")
            response.raise_for_status()
