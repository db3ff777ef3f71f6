from .content_normalizer import ContentNormalizer
from .text_chunker import TextChunker
from .embedding_service import EmbeddingService
from .query_expander import QueryExpander
from .retriever import Retriever
from .answer_synthesizer import AnswerSynthesizer
from .response_cache import ResponseCache
from .background_tasks import BackgroundTaskSupervisor
from .ingestion_service import IngestionService
from .assistant_service import AssistantService

__all__ = [
    "ContentNormalizer",
    "TextChunker",
    "EmbeddingService",
    "QueryExpander",
    "Retriever",
    "AnswerSynthesizer",
    "ResponseCache",
    "BackgroundTaskSupervisor",
    "IngestionService",
    "AssistantService",
]
