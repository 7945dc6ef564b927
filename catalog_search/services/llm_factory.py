from langchain_groq import ChatGroq
from langchain_google_genai import GoogleGenerativeAIEmbeddings
from catalog_search.core.config import settings


def get_llm():
    """Chat model used for advice messages (Groq - Llama 3)."""
    return ChatGroq(
        temperature=settings.LLM_TEMPERATURE,
        model=settings.LLM_MODEL,
        groq_api_key=settings.GROQ_API_KEY,
        timeout=settings.ADVICE_TIMEOUT_SECONDS,
        max_retries=0,
    )


def get_embeddings():
    """Embedding model shared by ingestion and search (Google)."""
    return GoogleGenerativeAIEmbeddings(
        model=settings.EMBEDDING_MODEL,
        google_api_key=settings.GOOGLE_API_KEY,
    )
