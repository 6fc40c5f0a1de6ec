"""
Tests for the Style Director stage and preset application.
"""

import pytest

from vsl_vibes.models.deck import GRADIENTS, new_slide_from_text
from vsl_vibes.services.pipeline.schemas import StyleDecision, default_decision
from vsl_vibes.services.pipeline.styling import (
    StyleDirector,
    apply_decision,
    apply_decisions,
    normalize_chunk_size,
)


def _slides(*texts, keyword=None):
    return [new_slide_from_text(text, image_keyword=keyword) for text in texts]


def _decision(slide_id, **fields):
    return StyleDecision.model_validate({"slideId": slide_id, **fields})


class TestChunkSize:
    @pytest.mark.parametrize("value,expected", [(20, 20), (50, 50), (30, 20), (None, 20), (0, 20)])
    def test_normalize(self, value, expected):
        assert normalize_chunk_size(value) == expected


class TestStyleDecision:
    def test_out_of_range_values_are_clamped(self):
        decision = _decision("s1", preset="image-text", splitRatio=95, blur=50,
                             infographicAbsorbCount=9, opacity=140)
        assert decision.split_ratio == 70
        assert decision.blur == 20
        assert decision.infographic_absorb_count == 4
        assert decision.crispness == 100

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), "1e999", "Infinity"])
    def test_non_finite_numbers_are_dropped(self, value):
        decision = _decision("s1", crispness=value, blur=value, splitRatio=value,
                             infographicAbsorbCount=value, textSize=value)
        assert decision.crispness is None
        assert decision.blur is None
        assert decision.split_ratio is None
        assert decision.infographic_absorb_count == 0
        assert decision.text_size == 72

    def test_unknown_values_fall_back(self):
        decision = _decision(42, preset="neon-rave", textColor="pink", gradientName="green")
        assert decision.slide_id == "42"
        assert decision.preset == "white-background"
        assert decision.text_color is None
        assert decision.gradient_name is None

    def test_default_decision(self):
        decision = default_decision("s1")
        assert decision.preset == "white-background"
        assert decision.text_color == "black"


class TestPresets:
    def test_black_background(self):
        slide = _slides("Dark truth")[0]
        styled = apply_decision(slide, _decision(slide.id, preset="black-background"))
        assert styled.style.background == "dark"
        assert styled.style.text_color == "white"

    def test_image_backdrop(self):
        slide = _slides("City lights", keyword="city night")[0]
        styled = apply_decision(slide, _decision(slide.id, preset="image-backdrop",
                                                 displayMode="crisp", crispness=70))
        assert styled.style.background == "image"
        assert styled.has_background_image
        assert styled.background_image.opacity == 70
        assert styled.background_image.blur == 8
        assert styled.background_image.display_mode == "crisp"
        assert styled.background_image.url == ""

    def test_image_text(self):
        slide = _slides("Split me", keyword="laptop")[0]
        styled = apply_decision(slide, _decision(slide.id, preset="image-text", splitRatio=60))
        assert styled.style.background == "split"
        assert styled.style.split_ratio == 60
        assert styled.background_image.opacity == 100
        assert styled.background_image.blur == 0
        assert styled.background_image.image_position_y == 35

    def test_infographic_defaults_to_purple(self):
        slide = _slides("20% of your energy")[0]
        styled = apply_decision(slide, _decision(slide.id, preset="infographic", isInfographic=True))
        assert styled.is_infographic
        assert styled.style.background == "gradient"
        assert styled.style.gradient_name == "purple"
        assert styled.style.gradient == GRADIENTS["purple"]
        assert styled.style.text_color == "white"

    def test_headshot(self):
        slide = _slides("I'm Dr. Lee")[0]
        styled = apply_decision(slide, _decision(slide.id, preset="headshot-bio"))
        assert styled.headshot is not None

    def test_emphasis_and_default_styles(self):
        slide = _slides("This secret changes everything")[0]
        styled = apply_decision(slide, _decision(
            slide.id, boldWords=["secret"], underlineWords=["changes"], circleWords=["everything"],
        ))
        assert styled.underline_styles == {"changes": "brush-red"}
        assert styled.circle_styles == {"everything": "red-solid"}
        emphasis = {segment.text: segment.emphasis for segment in styled.segments}
        assert emphasis == {"This": "none", "secret": "bold", "changes": "underline", "everything": "circle"}

    def test_input_slide_not_mutated(self):
        slide = _slides("Keep me")[0]
        apply_decision(slide, _decision(slide.id, preset="black-background", boldWords=["Keep"]))
        assert slide.style.background == "white"
        assert slide.bold_words == []

    def test_apply_decisions_leaves_undecided_slides(self):
        slides = _slides("a", "b")
        styled = apply_decisions(slides, [_decision(slides[0].id, preset="black-background")])
        assert styled[0].style.background == "dark"
        assert styled[1].style.background == "white"


class TestStyleDirector:
    @pytest.mark.asyncio
    async def test_failure_yields_default_for_every_slide(self, failing_engine):
        slides = _slides("a", "b", "c")
        decisions = await StyleDirector(engine=failing_engine).decide(slides)
        assert [d.slide_id for d in decisions] == [s.id for s in slides]
        assert all(d.preset == "white-background" for d in decisions)

    @pytest.mark.asyncio
    async def test_infinite_numbers_do_not_break_the_chunk(self, json_engine):
        slides = _slides("a", "b")
        infinity = float("inf")
        engine = json_engine([
            {"slideId": slides[0].id, "preset": "image-backdrop", "crispness": infinity, "blur": infinity},
            {"slideId": slides[1].id, "preset": "image-text", "splitRatio": infinity},
        ])
        decisions = await StyleDirector(engine=engine).decide(slides)
        assert [d.preset for d in decisions] == ["image-backdrop", "image-text"]
        assert decisions[0].crispness is None
        assert decisions[1].split_ratio is None

    @pytest.mark.asyncio
    async def test_missing_ids_get_default(self, json_engine):
        slides = _slides("a", "b")
        engine = json_engine([{"slideId": slides[1].id, "preset": "black-background"},
                              {"slideId": "unknown", "preset": "infographic"}])
        decisions = await StyleDirector(engine=engine).decide(slides)
        assert [d.preset for d in decisions] == ["white-background", "black-background"]

    @pytest.mark.asyncio
    async def test_chunks_are_sent_separately(self, json_engine):
        slides = _slides(*[f"line {i}" for i in range(25)])
        engine = json_engine([], [])
        director = StyleDirector(engine=engine, chunk_size=20)

        decisions = await director.decide(slides)

        assert engine.generate_json.await_count == 2
        assert len(decisions) == 25

    @pytest.mark.asyncio
    async def test_style_applies_decisions(self, json_engine):
        slides = _slides("a")
        engine = json_engine([{"slideId": slides[0].id, "preset": "black-background"}])
        styled = await StyleDirector(engine=engine).style(slides, "moody")
        assert styled[0].style.background == "dark"
        assert "moody" in engine.generate_json.call_args.args[0]

    @pytest.mark.asyncio
    async def test_empty_deck(self, failing_engine):
        assert await StyleDirector(engine=failing_engine).decide([]) == []
