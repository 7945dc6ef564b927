import asyncio

import pytest
from langchain_core.runnables import RunnableLambda

from catalog_search.core.exceptions import GenerationServiceFailure
from catalog_search.services.advice_service import (
    EMPTY_FALLBACK,
    AdviceContext,
    AdviceGenerator,
    AdviceMode,
    FallbackAdviceProvider,
    LLMAdviceProvider,
)


def llm_returning(text):
    return RunnableLambda(lambda _: text)


def llm_raising(error):
    def _raise(_):
        raise error

    return RunnableLambda(_raise)


class TestFallbackAdvice:
    @pytest.mark.parametrize(
        "total, expected",
        [
            (1, "✨ Er is 1 perfect product voor je gevonden!"),
            (7, "🎨 Ik heb 7 mooie producten voor je gevonden!"),
            (10, "🎨 Ik heb 10 mooie producten voor je gevonden!"),
            (23, "✨ Ik heb 23 producten gevonden! Bekijk ze allemaal en vind jouw favoriet."),
        ],
    )
    def test_results_buckets(self, total, expected):
        assert FallbackAdviceProvider.render(AdviceMode.RESULTS, total) == expected

    def test_empty(self):
        assert FallbackAdviceProvider.render(AdviceMode.EMPTY, 0) == EMPTY_FALLBACK
        assert "euro" in EMPTY_FALLBACK


class TestLLMAdvice:
    @pytest.mark.asyncio
    async def test_returns_stripped_model_text(self):
        provider = LLMAdviceProvider(llm=llm_returning("  🎨 Mooie keuze!  \n"))

        advice = await provider.generate(AdviceMode.RESULTS, AdviceContext("kat beeld", 3))

        assert advice == "🎨 Mooie keuze!"

    @pytest.mark.asyncio
    async def test_prompt_carries_query_and_summary(self):
        seen = []

        def capture(prompt_value):
            seen.append(prompt_value.to_string())
            return "✨ Leuk!"

        provider = LLMAdviceProvider(llm=RunnableLambda(capture))
        await provider.generate(
            AdviceMode.EMPTY,
            AdviceContext("draak", 0, catalog_summary="Beschikbare producttypes: beeld"),
        )

        assert '"draak"' in seen[0]
        assert "Beschikbare producttypes: beeld" in seen[0]

    @pytest.mark.asyncio
    async def test_model_error_becomes_generation_failure(self):
        provider = LLMAdviceProvider(llm=llm_raising(RuntimeError("boom")))

        with pytest.raises(GenerationServiceFailure):
            await provider.generate(AdviceMode.RESULTS, AdviceContext("kat", 2))

    @pytest.mark.asyncio
    async def test_empty_output_is_a_failure(self):
        provider = LLMAdviceProvider(llm=llm_returning("   "))

        with pytest.raises(GenerationServiceFailure):
            await provider.generate(AdviceMode.RESULTS, AdviceContext("kat", 2))

    @pytest.mark.asyncio
    async def test_timeout_is_a_failure(self):
        async def slow(_):
            await asyncio.sleep(1)
            return "te laat"

        provider = LLMAdviceProvider(llm=RunnableLambda(slow), timeout=0.01)

        with pytest.raises(GenerationServiceFailure):
            await provider.generate(AdviceMode.RESULTS, AdviceContext("kat", 2))


class TestAdviceGenerator:
    @pytest.mark.asyncio
    async def test_uses_model_when_available(self):
        generator = AdviceGenerator(primary=LLMAdviceProvider(llm=llm_returning("✨ Top!")))

        assert await generator.generate(AdviceMode.RESULTS, AdviceContext("kat", 1)) == "✨ Top!"

    @pytest.mark.asyncio
    async def test_falls_back_on_failure(self):
        generator = AdviceGenerator(
            primary=LLMAdviceProvider(llm=llm_raising(RuntimeError("boom")))
        )

        advice = await generator.generate(AdviceMode.RESULTS, AdviceContext("kat", 7))

        assert advice == "🎨 Ik heb 7 mooie producten voor je gevonden!"

    @pytest.mark.asyncio
    async def test_empty_mode_falls_back_to_suggestions(self):
        generator = AdviceGenerator(primary=LLMAdviceProvider(llm=llm_returning("")))

        advice = await generator.generate(AdviceMode.EMPTY, AdviceContext("draak", 0))

        assert advice == EMPTY_FALLBACK
