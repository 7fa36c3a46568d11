import logging

import pytest

from citeflow.retrieval.combination import ConcatenationPolicy, LinkRankingPolicy, build_policy
from tests.fakes import make_personal_document


def test_concatenation_follows_registration_order(web_documents):
    results = {"serp": web_documents["serp"], "exa": web_documents["exa"]}

    combined = ConcatenationPolicy().combine(results, ["exa", "serp"])

    assert combined == web_documents["exa"] + web_documents["serp"]


def test_ranking_reorders_content_by_ranking_links(web_documents, caplog):
    results = dict(web_documents)

    with caplog.at_level(logging.INFO, logger="citeflow.retrieval.combination"):
        combined = LinkRankingPolicy().combine(results, ["exa", "serp"])

    assert [document.link for document in combined] == ["https://c.example.com", "https://a.example.com"]
    assert all(document.web_reference.api_source == "exa" for document in combined)
    assert "https://missing.example.com" in caplog.text


def test_ranking_appends_other_sources_after_ranked_documents(web_documents):
    note = make_personal_document("my note")
    results = {**web_documents, "personal": [note]}

    combined = LinkRankingPolicy().combine(results, ["personal", "exa", "serp"])

    assert combined[-1] is note
    assert len(combined) == 3


def test_ranking_without_ranking_source_concatenates(web_documents):
    results = {"exa": web_documents["exa"]}

    combined = LinkRankingPolicy().combine(results, ["exa"])

    assert combined == web_documents["exa"]


def test_build_policy():
    assert isinstance(build_policy("concatenate"), ConcatenationPolicy)
    policy = build_policy(" Ranked ", content_source="full", ranking_source="rank")
    assert policy == LinkRankingPolicy(content_source="full", ranking_source="rank")
    with pytest.raises(ValueError):
        build_policy("rrf")
