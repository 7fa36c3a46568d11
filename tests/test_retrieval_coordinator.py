import pytest

from citeflow.retrieval import (
    LinkRankingPolicy,
    RetrievalCoordinator,
    RetrievalError,
    RetrieverConfig,
    RetrieverError,
)
from tests.fakes import BlockingRetriever, FailingRetriever, StaticRetriever, make_personal_document


@pytest.mark.asyncio
async def test_documents_are_concatenated_in_registration_order(web_documents):
    exa = StaticRetriever(web_documents["exa"])
    serp = StaticRetriever(web_documents["serp"])
    coordinator = RetrievalCoordinator(per_retriever_limit=2)

    documents = await coordinator.retrieve(
        "python asyncio",
        [RetrieverConfig("serp", serp), RetrieverConfig("exa", exa)],
    )

    assert documents == web_documents["serp"][:2] + web_documents["exa"][:2]
    assert exa.calls == [("python asyncio", 2)]
    assert serp.calls == [("python asyncio", 2)]


@pytest.mark.asyncio
async def test_ranked_policy_is_applied_to_gathered_results(web_documents):
    coordinator = RetrievalCoordinator(policy=LinkRankingPolicy())

    documents = await coordinator.retrieve(
        "q",
        [
            RetrieverConfig("exa", StaticRetriever(web_documents["exa"])),
            RetrieverConfig("serp", StaticRetriever(web_documents["serp"])),
        ],
    )

    assert [document.link for document in documents] == ["https://c.example.com", "https://a.example.com"]


@pytest.mark.asyncio
async def test_empty_results_are_not_an_error():
    note = make_personal_document("remember the milk")
    coordinator = RetrievalCoordinator()

    documents = await coordinator.retrieve(
        "q",
        [RetrieverConfig("exa", StaticRetriever([])), RetrieverConfig("personal", StaticRetriever([note]))],
    )

    assert documents == [note]


@pytest.mark.asyncio
async def test_first_failure_cancels_other_retrievers():
    slow_one = BlockingRetriever()
    slow_two = BlockingRetriever()
    failing = FailingRetriever(RetrieverError("serp", "quota exceeded"), delay=0.01)
    coordinator = RetrievalCoordinator()

    with pytest.raises(RetrievalError) as excinfo:
        await coordinator.retrieve(
            "q",
            [
                RetrieverConfig("exa", slow_one),
                RetrieverConfig("serp", failing),
                RetrieverConfig("personal", slow_two),
            ],
        )

    assert excinfo.value.source == "serp"
    assert isinstance(excinfo.value.cause, RetrieverError)
    assert "error while retrieving documents from serp" in str(excinfo.value)
    assert slow_one.started.is_set() and slow_two.started.is_set()
    assert slow_one.cancelled and slow_two.cancelled


@pytest.mark.asyncio
async def test_retrieve_requires_retrievers():
    with pytest.raises(ValueError):
        await RetrievalCoordinator().retrieve("q", [])


def test_limit_must_be_positive():
    with pytest.raises(ValueError):
        RetrievalCoordinator(per_retriever_limit=0)
