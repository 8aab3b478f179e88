"""Shared fixtures for citedb tests."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict
from unittest.mock import MagicMock

import pytest

from citedb import ArxivMetadata, ClawxivMetadata, Store
from citedb.config import default_schema_path
from citedb.store import dumps_entries


@pytest.fixture
def make_entry():
    """Factory fixture for creating database records."""

    def _make_entry(**kwargs) -> Dict[str, Any]:
        entry = {
            "id": kwargs.pop("id", "doe2020example"),
            "authors": ["Doe, Jane", "Smith, John"],
            "title": "Example Title",
            "year": 2020,
        }
        entry.update(kwargs)
        return entry

    return _make_entry


@pytest.fixture
def sample_entries(make_entry):
    """Three valid records in id order."""
    return [
        make_entry(
            id="du2023improving",
            authors=["Du, Yilun", "Li, Shuang"],
            title="Improving Factuality and Reasoning in Language Models through Multiagent Debate",
            year=2023,
            venue="arXiv preprint",
            arxiv="2305.14325v1",
            tags=["multi-agent", "debate"],
            abstract="Large language models have demonstrated remarkable capabilities.",
            bibtex_type="preprint",
            added="2026-01-15",
        ),
        make_entry(
            id="liang2023encouraging",
            authors=["Liang, Tian"],
            title="Encouraging Divergent Thinking in Large Language Models through Multi-Agent Debate",
            year=2023,
            tags=["multi-agent"],
            added="2026-01-16",
        ),
        make_entry(
            id="vaswani2017attention",
            authors=["Vaswani, Ashish", "Shazeer, Noam"],
            title="Attention Is All You Need",
            year=2017,
            venue="Advances in Neural Information Processing Systems",
            doi="10.5555/3295222.3295349",
            pages="5998--6008",
            volume="30",
            tags=["transformers"],
            bibtex_type="inproceedings",
            added="2026-01-10",
        ),
    ]


@pytest.fixture
def db_path(tmp_path, sample_entries):
    """A canonical database file on disk."""
    path = tmp_path / "citations.json"
    path.write_text(dumps_entries(sample_entries), encoding="utf-8")
    return path


@pytest.fixture
def store(db_path):
    return Store.load(db_path)


@pytest.fixture
def schema_path():
    """The JSON Schema bundled with the package."""
    return default_schema_path()


@pytest.fixture
def schema(schema_path):
    with open(schema_path, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def logger():
    """Create a test logger."""
    return logging.getLogger("test")


ARXIV_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title type="html">ArXiv Query: id_list=1706.03762</title>
  <id>http://arxiv.org/api/abc</id>
  <entry>
    <id>http://arxiv.org/abs/1706.03762v7</id>
    <updated>2023-08-02T00:41:18Z</updated>
    <published>2017-06-12T17:57:34Z</published>
    <title>Attention Is All
      You Need</title>
    <summary>  The dominant sequence transduction models are based on complex
recurrent or convolutional neural networks.
</summary>
    <author>
      <name>Ashish Vaswani</name>
    </author>
    <author>
      <name>Noam Shazeer</name>
    </author>
    <author>
      <name>Aidan N. Gomez</name>
    </author>
    <category term="cs.CL" scheme="http://arxiv.org/schemas/atom"/>
    <category term="cs.LG" scheme="http://arxiv.org/schemas/atom"/>
  </entry>
</feed>
"""


@pytest.fixture
def arxiv_feed():
    """An arXiv API Atom response with a single entry."""
    return ARXIV_FEED


@pytest.fixture
def arxiv_metadata():
    return ArxivMetadata(
        entry_id="http://arxiv.org/abs/2301.07041v2",
        title="Verified   Citations\n for Agents",
        authors=["Jane Q. Public", "Madonna", "Smith, John"],
        published="2023-01-17T12:00:00Z",
        abstract=" We study\n\ncitations. ",
        categories=["cs.AI", "cs.CL", "cs.AI"],
    )


@pytest.fixture
def clawxiv_payload():
    """A clawXiv API paper object."""
    return {
        "paper_id": "clawxiv.2602.00011",
        "title": "Agents Citing Agents",
        "authors": [{"name": "Ada Lovelace", "affiliation": "Engine Lab"}, {"name": "Turing, Alan"}],
        "created_at": "2026-02-03T10:00:00Z",
        "abstract": "On citation hygiene.",
        "categories": ["cs.MA"],
        "url": "https://www.clawxiv.org/abs/clawxiv.2602.00011",
    }


@pytest.fixture
def clawxiv_metadata(clawxiv_payload):
    return ClawxivMetadata(
        paper_id=clawxiv_payload["paper_id"],
        title=clawxiv_payload["title"],
        authors=clawxiv_payload["authors"],
        created_at=clawxiv_payload["created_at"],
        abstract=clawxiv_payload["abstract"],
        categories=clawxiv_payload["categories"],
        url=clawxiv_payload["url"],
        version_count=3,
    )


@pytest.fixture
def make_response():
    """Factory for mocked httpx responses."""

    def _make_response(status_code: int = 200, text: str = "", json_data: Any = None) -> MagicMock:
        resp = MagicMock()
        resp.status_code = status_code
        resp.text = text
        if isinstance(json_data, Exception):
            resp.json.side_effect = json_data
        else:
            resp.json.return_value = json_data
        return resp

    return _make_response
