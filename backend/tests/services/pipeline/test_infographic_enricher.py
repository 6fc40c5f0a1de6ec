"""
Tests for the Infographic Enricher stage.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from vsl_vibes.models.deck import new_slide_from_text
from vsl_vibes.services.pipeline.infographic import (
    FALLBACK_EMOJI,
    ContextSlide,
    InfographicEnricher,
    icon_to_emoji,
    is_svg_markup,
    normalize_lines,
)
from vsl_vibes.services.pipeline.schemas import InfographicLinesPayload


def _context(*texts):
    return [ContextSlide(id=f"s{i}", full_script_text=text) for i, text in enumerate(texts)]


def _engine(handler):
    engine = MagicMock()
    engine.generate_json = AsyncMock(side_effect=handler)
    return engine


def _deck(*texts, infographic=()):
    slides = [new_slide_from_text(text) for text in texts]
    for index in infographic:
        slides[index].is_infographic = True
    return slides


class TestIcons:
    def test_known_and_unknown_icons(self):
        assert icon_to_emoji("brain") == "🧠"
        assert icon_to_emoji("definitely-not-an-icon") == FALLBACK_EMOJI

    def test_svg_markup(self):
        assert is_svg_markup('<svg viewBox="0 0 10 10"><circle r="4"/></svg>')
        assert not is_svg_markup("circle with a dot")


class TestNormalizeLines:
    def test_current_moved_first_and_unknown_ids_dropped(self):
        context = _context("Your brain", "burns 20%", "of your energy")
        payload = InfographicLinesPayload(
            bundled_slide_ids=["s1", "ghost", "s0", "s1"],
            captions=["Burns 20%", "boo", "", "dup"],
        )

        lines = normalize_lines(payload, context[0], context, max_lines=5)

        assert lines.bundled_slide_ids == ["s0", "s1"]
        # Blank caption falls back to the slide text
        assert lines.captions == ["Your brain", "Burns 20%"]

    def test_current_inserted_when_missing_and_capped(self):
        context = _context("a", "b", "c", "d")
        payload = InfographicLinesPayload(bundled_slide_ids=["s1", "s2", "s3"], captions=["B", "C", "D"])

        lines = normalize_lines(payload, context[0], context, max_lines=2)

        assert lines.bundled_slide_ids == ["s0", "s1"]
        assert lines.captions == ["a", "B"]


class TestVisual:
    @pytest.mark.asyncio
    async def test_failure_yields_fallback_emoji(self, failing_engine):
        enricher = InfographicEnricher(visual_engine=failing_engine, lines_engine=failing_engine)
        visual = await enricher.visual("Your brain burns 20% of your energy")
        assert visual.type == "emoji"
        assert visual.value == FALLBACK_EMOJI
        assert visual.reasoning == "Fallback due to error"

    @pytest.mark.asyncio
    async def test_icon_is_mapped_to_emoji(self, json_engine, failing_engine):
        enricher = InfographicEnricher(visual_engine=json_engine({"type": "icon", "value": "no-such-icon"}),
                                       lines_engine=failing_engine)
        visual = await enricher.visual("text")
        assert (visual.type, visual.value) == ("emoji", FALLBACK_EMOJI)

    @pytest.mark.asyncio
    async def test_invalid_svg_falls_back(self, json_engine, failing_engine):
        enricher = InfographicEnricher(visual_engine=json_engine({"type": "svg", "value": "a pie chart"}),
                                       lines_engine=failing_engine)
        visual = await enricher.visual("text")
        assert visual.value == FALLBACK_EMOJI

    @pytest.mark.asyncio
    async def test_emoji_passes_through(self, json_engine, failing_engine):
        enricher = InfographicEnricher(visual_engine=json_engine({"type": "emoji", "value": "⚡"}),
                                       lines_engine=failing_engine)
        assert (await enricher.visual("text")).value == "⚡"


class TestLines:
    @pytest.mark.asyncio
    async def test_failure_yields_current_slide_only(self, failing_engine):
        enricher = InfographicEnricher(visual_engine=failing_engine, lines_engine=failing_engine)
        current, *rest = _context("Your brain", "burns 20%")
        lines = await enricher.lines(current, rest)
        assert lines.bundled_slide_ids == ["s0"]
        assert lines.captions == ["Your brain"]

    @pytest.mark.asyncio
    async def test_context_is_limited(self, json_engine, failing_engine):
        engine = json_engine({"bundledSlideIds": ["s0"], "captions": ["x"]})
        enricher = InfographicEnricher(visual_engine=failing_engine, lines_engine=engine, context_size=2)
        current, *rest = _context("a", "b", "c", "d", "e")

        await enricher.lines(current, rest)

        prompt = engine.generate_json.call_args.args[0]
        assert "[s2]" in prompt
        assert "[s3]" not in prompt


class TestEnrich:
    @pytest.mark.asyncio
    async def test_absorbs_following_slides(self, failing_engine):
        slides = _deck("Your brain", "burns 20%", "of your energy", "Next idea", infographic=(0,))

        def lines(prompt, **kwargs):
            return {"bundledSlideIds": [slides[1].id, slides[0].id, slides[2].id],
                    "captions": ["Burns 20%", "Your brain", "Of your energy"]}

        enricher = InfographicEnricher(visual_engine=failing_engine, lines_engine=_engine(lines))
        result = await enricher.enrich(slides)

        enriched = result.slides[0]
        assert enriched.infographic_captions == ["Your brain", "Burns 20%", "Of your energy"]
        assert enriched.absorbed_slide_ids == [slides[1].id, slides[2].id]
        assert enriched.infographic_visual.value == FALLBACK_EMOJI
        assert result.enriched == 1
        assert result.visual_fallbacks == [slides[0].id]
        assert result.lines_fallbacks == []
        # Input deck untouched
        assert slides[0].absorbed_slide_ids == []

    @pytest.mark.asyncio
    async def test_slide_is_never_absorbed_twice(self, failing_engine):
        slides = _deck("first", "second", "shared", infographic=(0, 1))
        shared_id = slides[2].id
        # Both infographic slides try to bundle the shared slide
        answers = iter([
            {"bundledSlideIds": [slides[0].id, shared_id], "captions": ["", ""]},
            {"bundledSlideIds": [slides[1].id, shared_id], "captions": ["", ""]},
        ])

        def lines(prompt, **kwargs):
            return next(answers)

        enricher = InfographicEnricher(visual_engine=failing_engine, lines_engine=_engine(lines))
        result = await enricher.enrich(slides)

        first, second, _ = result.slides
        assert first.absorbed_slide_ids == [shared_id]
        assert first.infographic_captions == ["first", "shared"]
        assert second.absorbed_slide_ids == []
        assert second.infographic_captions == ["second"]

    @pytest.mark.asyncio
    async def test_all_failures_still_enrich(self, failing_engine):
        slides = _deck("Only infographic", infographic=(0,))
        enricher = InfographicEnricher(visual_engine=failing_engine, lines_engine=failing_engine)

        result = await enricher.enrich(slides)

        slide = result.slides[0]
        assert slide.infographic_captions == ["Only infographic"]
        assert slide.absorbed_slide_ids == []
        assert result.to_dict() == {"enriched": 1, "visual_fallbacks": 1, "lines_fallbacks": 1}

    @pytest.mark.asyncio
    async def test_non_infographic_decks_are_untouched(self, failing_engine):
        slides = _deck("a", "b")
        result = await InfographicEnricher(visual_engine=failing_engine, lines_engine=failing_engine).enrich(slides)
        assert result.enriched == 0
        failing_engine.generate_json.assert_not_called()
