from .ai import (
    ChatRequest,
    AnswerSchema,
    SourceSchema,
    ResourceDescriptorSchema,
    PopularQuestionSchema,
    CacheStatsSchema,
    IngestionResultSchema,
    MessageSchema,
)

__all__ = [
    "ChatRequest",
    "AnswerSchema",
    "SourceSchema",
    "ResourceDescriptorSchema",
    "PopularQuestionSchema",
    "CacheStatsSchema",
    "IngestionResultSchema",
    "MessageSchema",
]
