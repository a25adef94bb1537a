from datetime import datetime, timezone

from kb_server.knowledge.keyword import keyword_score, keyword_search
from kb_server.knowledge.models import Document, Section


def make_doc(doc_id, title, content, sections=()):
    return Document(
        id=doc_id,
        title=title,
        content=content,
        path=f"/kb/{doc_id}.md",
        modified_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        sections=tuple(sections),
    )


def test_title_and_section_hits_outweigh_body_hits():
    doc = make_doc(
        "deploy",
        "Deploy Guide",
        "# Deploy Guide\n## Deploy steps\ndeploy now",
        [
            Section(title="Deploy Guide", level=1, content=""),
            Section(title="Deploy steps", level=2, content="deploy now"),
        ],
    )

    # title +10, three body occurrences, two section titles +5 each
    assert keyword_score(doc, "deploy") == 10 + 3 + 5 + 5


def test_body_only_match():
    doc = make_doc("faq", "FAQ", "reset the router, then reset again")
    assert keyword_score(doc, "reset") == 2


def test_search_sorts_filters_and_caps():
    docs = [
        make_doc("none", "Other", "nothing relevant"),
        make_doc("body", "Notes", "cache cache"),
        make_doc("title", "Cache Tuning", "tips"),
    ]

    hits = keyword_search(docs, "CACHE", limit=5)

    assert [doc.id for doc, _ in hits] == ["title", "body"]
    assert [score for _, score in hits] == [10.0, 2.0]
    assert len(keyword_search(docs, "cache", limit=1)) == 1


def test_blank_query_matches_nothing():
    docs = [make_doc("a", "A", "text")]

    assert keyword_search(docs, "", limit=5) == []
    assert keyword_search(docs, "   ", limit=5) == []
