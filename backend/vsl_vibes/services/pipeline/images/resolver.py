"""
Image Resolver

Fills in background image URLs for slides that carry an image keyword.

Flow per target slide (sequential):
1. Serve repeated keywords from the per-run cache
2. Ask the primary provider while its breaker allows it
3. Fall back to the secondary provider when the primary is open, failed,
   or found nothing for this keyword
4. Sleep between lookups (longer after primary calls)
5. Complete the slide's background image, choosing a layout by position
   parity when the slide has no explicit image layout
"""

import asyncio
import copy
import math
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Protocol

from ....config.pipeline import PRIMARY_LOOKUP_DELAY, SECONDARY_LOOKUP_DELAY
from ....core.exceptions import CredentialError, ProviderError
from ....core.logging import get_logger
from ....models.deck import BackgroundImage, Slide
from ...media.stock_photos import PexelsClient, PixabayClient, StockPhoto
from ..concurrency import CancellationToken
from .breaker import CircuitBreaker

logger = get_logger(__name__, component="image_resolver")


class PhotoSearch(Protocol):
    name: str

    async def search(self, query: str, per_page: int = ...) -> List[StockPhoto]:
        ...


def normalize_keyword(keyword: str) -> str:
    return " ".join(keyword.lower().split())


def is_image_target(slide: Slide) -> bool:
    """Slides that should get a stock photo: keyword, no url, not infographic or headshot."""
    return slide.needs_image and not slide.is_infographic and slide.headshot is None


def attach_image(slide: Slide, url: str, index: int) -> None:
    """
    Complete the slide's background image in place.

    Slides already laid out as backdrop or split keep their descriptor;
    others alternate by deck position: even -> split, odd -> blurred backdrop.
    """
    explicit = slide.background_image is not None and slide.style.background in ("image", "split")
    if explicit:
        slide.background_image.url = url
    elif index % 2 == 0:
        slide.style.background = "split"
        slide.style.text_color = "black"
        slide.style.split_ratio = slide.style.split_ratio or 50
        slide.background_image = BackgroundImage(
            url=url, opacity=100, blur=0, display_mode="split", image_position_y=35,
        )
    else:
        slide.style.background = "image"
        slide.style.text_color = "white"
        slide.background_image = BackgroundImage(url=url, opacity=40, blur=8, display_mode="blurred")
    slide.has_background_image = True


def _outcome_status(error: ProviderError) -> Optional[int]:
    # A missing key behaves like a rejected one for the rest of the run
    if isinstance(error, CredentialError):
        return 401
    return error.status_code


@dataclass
class ResolveResult:
    slides: List[Slide]
    resolved: int = 0
    unresolved: List[str] = field(default_factory=list)
    cache_hits: int = 0
    primary_calls: int = 0
    secondary_calls: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "resolved": self.resolved,
            "unresolved": len(self.unresolved),
            "cache_hits": self.cache_hits,
            "primary_calls": self.primary_calls,
            "secondary_calls": self.secondary_calls,
        }


class ImageResolver:
    """
    Resolves stock photos for a deck.

    Breakers and the keyword cache are created per ``resolve`` call, so a
    provider tripped in one run is tried again in the next. By default the
    breakers never go half-open, so a tripped provider stays skipped for the
    rest of the run however long it takes.

    Usage:
        resolver = ImageResolver()
        result = await resolver.resolve(slides)
    """

    def __init__(
        self,
        primary: Optional[PhotoSearch] = None,
        secondary: Optional[PhotoSearch] = None,
        primary_delay: float = PRIMARY_LOOKUP_DELAY,
        secondary_delay: float = SECONDARY_LOOKUP_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        breaker_reset_timeout: float = math.inf,
    ):
        self.primary = primary or PexelsClient()
        self.secondary = secondary or PixabayClient()
        self.primary_delay = primary_delay
        self.secondary_delay = secondary_delay
        self.sleep = sleep
        self.clock = clock
        self.breaker_reset_timeout = breaker_reset_timeout

    async def resolve(
        self,
        slides: List[Slide],
        cancel_token: Optional[CancellationToken] = None,
    ) -> ResolveResult:
        """Return a copy of ``slides`` with images resolved where possible."""
        slides = copy.deepcopy(slides)
        result = ResolveResult(slides=slides)
        breakers = {
            provider.name: CircuitBreaker(provider.name, reset_timeout=self.breaker_reset_timeout, clock=self.clock)
            for provider in (self.primary, self.secondary)
        }
        cache: Dict[str, str] = {}

        targets = [(index, slide) for index, slide in enumerate(slides) if is_image_target(slide)]
        logger.info("Resolving images", extra={"targets": len(targets)})

        for index, slide in targets:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            key = normalize_keyword(slide.image_keyword)
            if key in cache:
                result.cache_hits += 1
                attach_image(slide, cache[key], index)
                result.resolved += 1
                continue

            url = await self._lookup(slide.image_keyword, breakers, result)
            if url:
                cache[key] = url
                attach_image(slide, url, index)
                result.resolved += 1
            else:
                result.unresolved.append(slide.id)

        logger.info("Image resolution complete", extra=result.to_dict())
        return result

    async def _lookup(
        self,
        keyword: str,
        breakers: Dict[str, CircuitBreaker],
        result: ResolveResult,
    ) -> Optional[str]:
        primary_breaker = breakers[self.primary.name]
        if primary_breaker.allow_request():
            result.primary_calls += 1
            url = await self._search(self.primary, keyword, primary_breaker)
            await self.sleep(self.primary_delay)
            if url:
                return url

        secondary_breaker = breakers[self.secondary.name]
        if not secondary_breaker.allow_request():
            return None
        result.secondary_calls += 1
        url = await self._search(self.secondary, keyword, secondary_breaker)
        await self.sleep(self.secondary_delay)
        return url

    async def _search(self, provider: PhotoSearch, keyword: str, breaker: CircuitBreaker) -> Optional[str]:
        try:
            photos = await provider.search(keyword, 1)
        except ProviderError as e:
            breaker.record(_outcome_status(e))
            logger.warning("Image lookup failed", extra={
                "provider": provider.name,
                "keyword": keyword,
                "status_code": e.status_code,
                "breaker": breaker.state.value,
            })
            return None

        breaker.record_success()
        if not photos:
            logger.debug("No photos found", extra={"provider": provider.name, "keyword": keyword})
            return None
        return photos[0].url
