from __future__ import annotations

import pytest

from citeflow.documents import Document
from tests.fakes import make_web_document


@pytest.fixture
def web_documents() -> dict[str, list[Document]]:
    return {
        "exa": [
            make_web_document("https://a.example.com", source="exa"),
            make_web_document("https://b.example.com", source="exa"),
            make_web_document("https://c.example.com", source="exa"),
        ],
        "serp": [
            make_web_document("https://c.example.com", source="serp"),
            make_web_document("https://missing.example.com", source="serp"),
            make_web_document("https://a.example.com", source="serp"),
        ],
    }
