"""
Advisory messages shown above the search results.

``AdviceGenerator`` asks the chat model first and falls back to fixed Dutch
templates when the model fails, so a search never fails because of its advice.
"""
import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate

from catalog_search.core.config import settings
from catalog_search.core.exceptions import GenerationServiceFailure
from catalog_search.services.llm_factory import get_llm

logger = logging.getLogger(__name__)


class AdviceMode(str, enum.Enum):
    RESULTS = "results"
    EMPTY = "empty"


@dataclass
class AdviceContext:
    query: str
    total: int
    catalog_summary: str = ""


class AdviceProvider(Protocol):
    async def generate(self, mode: AdviceMode, context: AdviceContext) -> str:
        ...


SYSTEM_PROMPT = (
    "Je bent de enthousiaste winkelassistent van een webshop met kunstcadeaus "
    "(beelden, schilderijen, vazen, mokken en meer). Je schrijft altijd in het "
    "Nederlands, warm en persoonlijk, zonder opsommingstekens of markdown."
)

RESULTS_PROMPT = """Schrijf een kort bericht over deze zoekresultaten.
Zoekopdracht: "{query}"
Aantal gevonden producten: {total}

{catalog_summary}

Richtlijnen:
- 2 tot 4 zinnen, begin met één passende emoji (🎨, ✨, 🎁, 💎, 🌟 of 💫)
- Vertel wat deze producten bijzonder maakt
- Bij 1 resultaat: noem het een perfecte match
- Bij 2-10 resultaten: benadruk de zorgvuldige selectie
- Bij 11-30 resultaten: benadruk de variatie
- Bij meer dan 30: moedig aan om rustig rond te kijken en een favoriet te kiezen
- Vraag NOOIT om meer details, er zijn resultaten gevonden

Geef alleen het bericht terug."""

EMPTY_PROMPT = """De klant zocht naar: "{query}"
Deze zoekopdracht leverde geen resultaten op.

{catalog_summary}

Schrijf een warm, positief bericht (3-4 zinnen, geen negatieve woorden) dat:
- begint met een vrolijke emoji (✨, 🎨, 💫, 🎁 of 🌟)
- kort benoemt waar de klant naar zoekt
- 1 of 2 vragen stelt over type, thema of budget
- 2 of 3 concrete zoekvoorbeelden geeft met ECHTE types en thema's uit de catalogus,
  altijd met een budget in euro's, bijvoorbeeld "kat beeld onder 50 euro" of
  "bloemen vaas max 80 euro"
- positief eindigt

Geef alleen het bericht terug."""


class LLMAdviceProvider:
    def __init__(self, llm=None, timeout: Optional[float] = None):
        self.llm = llm if llm is not None else get_llm()
        self.timeout = timeout or settings.ADVICE_TIMEOUT_SECONDS
        self.chains = {
            AdviceMode.RESULTS: self._chain(RESULTS_PROMPT),
            AdviceMode.EMPTY: self._chain(EMPTY_PROMPT),
        }

    def _chain(self, template: str):
        prompt = ChatPromptTemplate.from_messages(
            [("system", SYSTEM_PROMPT), ("user", template)]
        )
        return prompt | self.llm | StrOutputParser()

    async def generate(self, mode: AdviceMode, context: AdviceContext) -> str:
        try:
            advice = await asyncio.wait_for(
                self.chains[mode].ainvoke(
                    {
                        "query": context.query,
                        "total": context.total,
                        "catalog_summary": context.catalog_summary,
                    }
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise GenerationServiceFailure(
                f"Advice generation exceeded {self.timeout}s"
            ) from e
        except Exception as e:
            raise GenerationServiceFailure(str(e)) from e

        advice = (advice or "").strip()
        if not advice:
            raise GenerationServiceFailure("Empty advice returned")
        return advice


EMPTY_FALLBACK = (
    "✨ Wat leuk dat je hier bent! Laten we samen het perfecte kunstcadeau vinden. "
    "Zoek je een beeld, schilderij, vaas of mok? Probeer bijvoorbeeld: "
    "\"kat beeld onder 50 euro\", \"sportbeeld max 100 euro\" of "
    "\"bloemen vaas onder 80 euro\"."
)


class FallbackAdviceProvider:
    """Fixed templates keyed on the result count bucket; cannot fail."""

    async def generate(self, mode: AdviceMode, context: AdviceContext) -> str:
        return self.render(mode, context.total)

    @staticmethod
    def render(mode: AdviceMode, total: int) -> str:
        if mode is AdviceMode.EMPTY or total <= 0:
            return EMPTY_FALLBACK
        if total == 1:
            return "✨ Er is 1 perfect product voor je gevonden!"
        if total <= 10:
            return f"🎨 Ik heb {total} mooie producten voor je gevonden!"
        return f"✨ Ik heb {total} producten gevonden! Bekijk ze allemaal en vind jouw favoriet."


class AdviceGenerator:
    def __init__(
        self,
        primary: Optional[AdviceProvider] = None,
        fallback: Optional[FallbackAdviceProvider] = None,
    ):
        self.primary = primary or LLMAdviceProvider()
        self.fallback = fallback or FallbackAdviceProvider()

    async def generate(self, mode: AdviceMode, context: AdviceContext) -> str:
        try:
            return await self.primary.generate(mode, context)
        except GenerationServiceFailure as e:
            logger.warning(
                f"⚠️ Advice generation failed ({mode.value}), using fallback: {e}"
            )
            return await self.fallback.generate(mode, context)
