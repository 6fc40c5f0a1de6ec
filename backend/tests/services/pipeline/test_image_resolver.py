"""
Tests for the Image Resolver stage: breaker policy, provider fallback,
keyword cache and layout by deck position.
"""

import pytest

from vsl_vibes.core.exceptions import CredentialError, GenerationCancelled, RateLimitError, UpstreamError
from vsl_vibes.models.deck import BackgroundImage, new_slide_from_text
from vsl_vibes.services.media.stock_photos import StockPhoto
from vsl_vibes.services.pipeline import CancellationToken
from vsl_vibes.services.pipeline.images import (
    BreakerAction,
    BreakerState,
    CircuitBreaker,
    ImageKeywordGenerator,
    ImageResolver,
    attach_image,
    fallback_keyword,
    is_image_target,
    policy_for,
)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class FakePhotos:
    """Photo search double: outcomes keyed by query, ``default`` otherwise."""

    def __init__(self, name, default="https://img.example/{query}.jpg", outcomes=None):
        self.name = name
        self.default = default
        self.outcomes = outcomes or {}
        self.queries = []

    async def search(self, query, per_page=1):
        self.queries.append(query)
        outcome = self.outcomes.get(query, self.default)
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is None:
            return []
        return [StockPhoto(url=outcome.format(query=query.replace(" ", "-")))]


def _targets(*keywords):
    return [new_slide_from_text(f"Slide {i}", image_keyword=kw) for i, kw in enumerate(keywords)]


def _resolver(primary, secondary):
    sleeps = []

    async def sleep(seconds):
        sleeps.append(seconds)

    resolver = ImageResolver(primary=primary, secondary=secondary, primary_delay=1.0,
                             secondary_delay=0.3, sleep=sleep, clock=FakeClock())
    return resolver, sleeps


class TestBreakerPolicy:
    @pytest.mark.parametrize("status,action", [
        (200, BreakerAction.CLOSE),
        (204, BreakerAction.CLOSE),
        (429, BreakerAction.OPEN),
        (401, BreakerAction.OPEN),
        (403, BreakerAction.OPEN),
        (500, BreakerAction.COUNT),
        (503, BreakerAction.COUNT),
        (None, BreakerAction.COUNT),
        (404, BreakerAction.IGNORE),
    ])
    def test_policy_table(self, status, action):
        assert policy_for(status) is action


class TestCircuitBreaker:
    def test_opens_after_threshold(self):
        breaker = CircuitBreaker("pexels", failure_threshold=3, clock=FakeClock())
        breaker.record(500)
        breaker.record(None)
        assert breaker.state is BreakerState.CLOSED
        breaker.record(502)
        assert breaker.state is BreakerState.OPEN
        assert not breaker.allow_request()

    def test_success_resets_count(self):
        breaker = CircuitBreaker("pexels", failure_threshold=2, clock=FakeClock())
        breaker.record(500)
        breaker.record_success()
        breaker.record(500)
        assert breaker.state is BreakerState.CLOSED
        assert breaker.failures == 1

    def test_rate_limit_opens_immediately(self):
        breaker = CircuitBreaker("pexels", clock=FakeClock())
        assert breaker.record(429) is BreakerState.OPEN

    def test_half_open_cycle(self):
        clock = FakeClock()
        breaker = CircuitBreaker("pexels", reset_timeout=300, clock=clock)
        breaker.record(429)

        clock.now += 299
        assert breaker.state is BreakerState.OPEN
        clock.now += 1
        assert breaker.state is BreakerState.HALF_OPEN
        assert breaker.allow_request()

        # A failed probe reopens
        breaker.record(500)
        assert breaker.state is BreakerState.OPEN

        clock.now += 300
        assert breaker.state is BreakerState.HALF_OPEN
        breaker.record(200)
        assert breaker.state is BreakerState.CLOSED


class TestAttachImage:
    def test_parity_layout(self):
        even, odd = _targets("a", "b")
        attach_image(even, "https://img/a.jpg", 0)
        attach_image(odd, "https://img/b.jpg", 1)

        assert even.style.background == "split"
        assert even.background_image.display_mode == "split"
        assert odd.style.background == "image"
        assert odd.style.text_color == "white"
        assert odd.background_image.display_mode == "blurred"
        assert even.has_background_image and odd.has_background_image

    def test_explicit_layout_is_kept(self):
        slide = _targets("a")[0]
        slide.style.background = "image"
        slide.background_image = BackgroundImage(url="", opacity=70, blur=2, display_mode="crisp")

        attach_image(slide, "https://img/a.jpg", 0)

        assert slide.style.background == "image"
        assert slide.background_image.display_mode == "crisp"
        assert slide.background_image.opacity == 70
        assert slide.background_image.url == "https://img/a.jpg"

    def test_targets_exclude_infographic_and_resolved(self):
        plain, infographic, resolved, no_keyword = _targets("a", "b", "c", None)
        infographic.is_infographic = True
        resolved.background_image = BackgroundImage(url="https://done.jpg")
        assert is_image_target(plain)
        assert not is_image_target(infographic)
        assert not is_image_target(resolved)
        assert not is_image_target(no_keyword)


class TestImageResolver:
    @pytest.mark.asyncio
    async def test_primary_serves_all(self):
        primary, secondary = FakePhotos("pexels"), FakePhotos("pixabay")
        resolver, sleeps = _resolver(primary, secondary)

        result = await resolver.resolve(_targets("ocean", "desert"))

        assert result.resolved == 2
        assert result.primary_calls == 2 and result.secondary_calls == 0
        assert secondary.queries == []
        assert sleeps == [1.0, 1.0]
        assert result.slides[0].background_image.url == "https://img.example/ocean.jpg"

    @pytest.mark.asyncio
    async def test_rate_limit_switches_to_secondary_for_rest_of_run(self):
        primary = FakePhotos("pexels", outcomes={"one": RateLimitError("429", status_code=429)})
        secondary = FakePhotos("pixabay", default="https://pixabay.example/{query}.jpg")
        resolver, sleeps = _resolver(primary, secondary)

        result = await resolver.resolve(_targets("one", "two", "three"))

        assert primary.queries == ["one"]
        assert secondary.queries == ["one", "two", "three"]
        assert result.resolved == 3
        assert all("pixabay" in s.background_image.url for s in result.slides)
        assert sleeps == [1.0, 0.3, 0.3, 0.3]

    @pytest.mark.asyncio
    async def test_tripped_primary_stays_skipped_in_a_long_run(self):
        primary = FakePhotos("pexels", outcomes={"k0": RateLimitError("429", status_code=429)})
        secondary = FakePhotos("pixabay", default="https://pixabay.example/{query}.jpg")
        clock = FakeClock()

        async def slow_sleep(seconds):
            clock.now += 200

        resolver = ImageResolver(primary=primary, secondary=secondary, sleep=slow_sleep, clock=clock)
        result = await resolver.resolve(_targets("k0", "k1", "k2", "k3", "k4"))

        assert primary.queries == ["k0"]
        assert secondary.queries == ["k0", "k1", "k2", "k3", "k4"]
        assert result.resolved == 5

    @pytest.mark.asyncio
    async def test_empty_primary_result_tries_secondary(self):
        primary = FakePhotos("pexels", outcomes={"rare": None})
        secondary = FakePhotos("pixabay", default="https://pixabay.example/{query}.jpg")
        resolver, _ = _resolver(primary, secondary)

        result = await resolver.resolve(_targets("rare", "common"))

        assert secondary.queries == ["rare"]
        assert result.slides[1].background_image.url == "https://img.example/common.jpg"

    @pytest.mark.asyncio
    async def test_missing_credential_opens_breaker(self):
        primary = FakePhotos("pexels", default=CredentialError("Pexels API key missing", status_code=400))
        secondary = FakePhotos("pixabay")
        resolver, _ = _resolver(primary, secondary)

        await resolver.resolve(_targets("a", "b"))

        assert primary.queries == ["a"]

    @pytest.mark.asyncio
    async def test_repeated_keywords_hit_cache(self):
        primary, secondary = FakePhotos("pexels"), FakePhotos("pixabay")
        resolver, _ = _resolver(primary, secondary)

        result = await resolver.resolve(_targets("Sunset Beach", "sunset  beach", "sunset beach"))

        assert primary.queries == ["Sunset Beach"]
        assert result.cache_hits == 2
        assert len({s.background_image.url for s in result.slides}) == 1

    @pytest.mark.asyncio
    async def test_both_providers_down_leaves_slide_unresolved(self):
        primary = FakePhotos("pexels", default=UpstreamError("boom", status_code=500))
        secondary = FakePhotos("pixabay", default=None)
        resolver, _ = _resolver(primary, secondary)
        slides = _targets("a")

        result = await resolver.resolve(slides)

        assert result.unresolved == [slides[0].id]
        assert result.slides[0].background_image is None

    @pytest.mark.asyncio
    async def test_input_not_mutated(self):
        slides = _targets("a")
        resolver, _ = _resolver(FakePhotos("pexels"), FakePhotos("pixabay"))
        await resolver.resolve(slides)
        assert slides[0].background_image is None

    @pytest.mark.asyncio
    async def test_cancel(self):
        token = CancellationToken()
        token.cancel()
        resolver, _ = _resolver(FakePhotos("pexels"), FakePhotos("pixabay"))
        with pytest.raises(GenerationCancelled):
            await resolver.resolve(_targets("a"), token)


class TestImageKeyword:
    def test_fallback_keyword(self):
        assert fallback_keyword("I was broke and desperate") == "I was broke"
        assert fallback_keyword("") == "abstract background"

    @pytest.mark.asyncio
    async def test_llm_failure_uses_first_words(self, failing_engine):
        keyword = await ImageKeywordGenerator(engine=failing_engine).generate("We made two million dollars")
        assert keyword == "We made two"

    @pytest.mark.asyncio
    async def test_quotes_are_stripped(self):
        from unittest.mock import AsyncMock, MagicMock

        engine = MagicMock()
        engine.generate = AsyncMock(return_value='"business success celebration"\nextra')
        keyword = await ImageKeywordGenerator(engine=engine).generate("We made $2 million", emotion="triumph")
        assert keyword == "business success celebration"
        assert "Emotion: triumph" in engine.generate.call_args.args[0]
