from avatar_assistant.config import RetrievalConfig
from avatar_assistant.retrieval.corpus import KNOWLEDGE_BASE
from avatar_assistant.retrieval.retriever import KeywordRetriever
from avatar_assistant.types import Document


def _doc(doc_id: str, text: str, route: str | None = None) -> Document:
    return Document(doc_id=doc_id, domain="app", title=doc_id, text=text, route=route)


def test_returns_at_most_k_sorted_by_score() -> None:
    retriever = KeywordRetriever()
    for query in ("how much protein per meal", "open shopping list", "habit focus mindset", "xyz"):
        hits = retriever.retrieve_scored(query, 3)
        assert len(hits) <= 3
        scores = [hit.score for hit in hits]
        assert scores == sorted(scores, reverse=True)


def test_protein_question_ranks_protein_docs_first() -> None:
    docs = KeywordRetriever().retrieve("how much protein do I need", 2)
    assert [doc.doc_id for doc in docs] == ["nut-1", "nut-2"]


def test_navigation_bonus_applies_only_to_routed_docs() -> None:
    retriever = KeywordRetriever(
        corpus=[_doc("plain", "nothing relevant"), _doc("routed", "nothing relevant", "/x")],
        config=RetrievalConfig(navigation_bonus=2, action_bonus=1),
    )
    hits = retriever.retrieve_scored("open it", 2)
    assert [(hit.document.doc_id, hit.score) for hit in hits] == [("routed", 2), ("plain", 0)]


def test_action_bonus_applies_to_every_doc() -> None:
    retriever = KeywordRetriever(corpus=[_doc("a", "alpha"), _doc("b", "beta")])
    assert [hit.score for hit in retriever.retrieve_scored("add something", 2)] == [1, 1]


def test_ties_keep_corpus_order() -> None:
    corpus = [_doc(f"d{i}", "shopping list") for i in range(5)]
    retriever = KeywordRetriever(corpus=corpus)
    hits = retriever.retrieve("shopping", 5)
    assert [doc.doc_id for doc in hits] == ["d0", "d1", "d2", "d3", "d4"]


def test_zero_score_documents_are_still_returned() -> None:
    retriever = KeywordRetriever()
    hits = retriever.retrieve_scored("quantum chromodynamics", 3)
    assert len(hits) == 3
    assert all(hit.score == 0 for hit in hits)
    assert [hit.document for hit in hits] == list(KNOWLEDGE_BASE[:3])


def test_small_corpus_returns_everything_it_has() -> None:
    retriever = KeywordRetriever(corpus=[_doc("only", "water")])
    assert [doc.doc_id for doc in retriever.retrieve("unrelated", 3)] == ["only"]


def test_non_positive_k_returns_nothing() -> None:
    assert KeywordRetriever().retrieve("protein", 0) == []


def test_keyword_weights_accumulate() -> None:
    retriever = KeywordRetriever()
    shopping = next(doc for doc in KNOWLEDGE_BASE if doc.doc_id == "app-2")
    # shopping (3) + list (2); no verbs in the query.
    assert retriever.score("shopping list tips", shopping) == 5
