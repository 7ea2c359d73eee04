"""Keyword-weighted retriever over the fixed knowledge corpus."""

from __future__ import annotations

import re
from collections.abc import Sequence

from avatar_assistant.config import RetrievalConfig
from avatar_assistant.retrieval.corpus import KNOWLEDGE_BASE
from avatar_assistant.types import Document, ScoredDocument

KEYWORD_WEIGHTS: dict[str, int] = {
    "protein": 3,
    "fitbrain": 3,
    "trivia": 3,
    "game": 2,
    "shopping": 3,
    "list": 2,
    "meal": 2,
    "calendar": 2,
    "craving": 3,
    "water": 2,
    "habit": 3,
    "focus": 2,
    "mindset": 2,
    "nutrition": 2,
    "log": 2,
    "track": 2,
    "challenge": 2,
}

_NAVIGATION_VERBS = re.compile(r"\b(?:open|go|take|navigate|show|view)\b")
_ACTION_VERBS = re.compile(r"\b(?:add|create|start|begin|make)\b")


class KeywordRetriever:
    """Scores every document and returns the top-k.

    Zero-score documents stay eligible: when nothing in the corpus shares a
    keyword with the query the retriever still returns `k` documents in corpus
    order. Python's `sorted` is stable, so equal scores keep corpus order.
    """

    def __init__(
        self,
        corpus: Sequence[Document] = KNOWLEDGE_BASE,
        config: RetrievalConfig | None = None,
    ) -> None:
        self.corpus = tuple(corpus)
        self.config = config or RetrievalConfig()
        self._contents = tuple(f"{doc.title} {doc.text}".lower() for doc in self.corpus)

    def score(self, query: str, document: Document) -> int:
        return self._score(query.lower(), f"{document.title} {document.text}".lower(), document)

    def retrieve(self, query: str, k: int | None = None) -> list[Document]:
        return [hit.document for hit in self.retrieve_scored(query, k)]

    def retrieve_scored(self, query: str, k: int | None = None) -> list[ScoredDocument]:
        limit = self.config.default_k if k is None else k
        if limit <= 0:
            return []

        query_lower = (query or "").lower()
        scored = [
            (self._score(query_lower, content, doc), doc)
            for doc, content in zip(self.corpus, self._contents)
        ]
        ranked = sorted(scored, key=lambda item: item[0], reverse=True)
        return [
            ScoredDocument(document=doc, score=score, rank=i + 1)
            for i, (score, doc) in enumerate(ranked[:limit])
        ]

    def _score(self, query_lower: str, content_lower: str, document: Document) -> int:
        score = 0
        for keyword, weight in KEYWORD_WEIGHTS.items():
            if keyword in query_lower and keyword in content_lower:
                score += weight

        if document.route and _NAVIGATION_VERBS.search(query_lower):
            score += self.config.navigation_bonus
        if _ACTION_VERBS.search(query_lower):
            score += self.config.action_bonus
        return score
