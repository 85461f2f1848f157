from datetime import date, datetime, timedelta, timezone

import pytest

from sitecorpus.exceptions import FrontMatterError, InvalidDateError, MissingFieldError
from sitecorpus.frontmatter import (
    dump,
    parse_author,
    parse_collection,
    parse_document,
    read_header,
    split,
)

from conftest import page


ARTICLE = """---
title: Hexagonal Architecture with Java and Spring
date: 2019-11-03
authors: [tom]
categories: [Software Craft]
tags: [architecture, hexagonal]
summary: Ports and adapters, explained.
weight: 3
url: /hexagonal-architecture/
image: images/hexagon.png
---

The term "Hexagonal Architecture" has been around for a long time.
"""


def test_split_returns_header_and_untouched_body():
    header, body = split(ARTICLE)
    assert header.startswith("title: Hexagonal")
    assert body == '\nThe term "Hexagonal Architecture" has been around for a long time.\n'


def test_split_tolerates_bom_and_crlf():
    header, body = split("\ufeff---\r\ntitle: X\r\n---\r\nBody\r\n")
    assert header == "title: X"
    assert body == "Body\n"


def test_split_without_header_fails():
    with pytest.raises(FrontMatterError, match="no front-matter"):
        split("# Just markdown\n", "posts/plain.md")


def test_split_unterminated_header_fails():
    with pytest.raises(FrontMatterError, match="not terminated"):
        split("---\ntitle: X\n\nBody\n")


def test_parse_document_reads_recognized_keys():
    doc = parse_document(ARTICLE, "posts/hexagonal", source="posts/hexagonal.md")

    assert doc.id == "posts/hexagonal"
    assert doc.source == "posts/hexagonal.md"
    assert doc.title == "Hexagonal Architecture with Java and Spring"
    assert doc.date == date(2019, 11, 3)
    assert doc.timestamp == datetime(2019, 11, 3, tzinfo=timezone.utc)
    assert doc.authors == ("tom",)
    assert doc.categories == ("Software Craft",)
    assert doc.tags == ("architecture", "hexagonal")
    assert doc.summary == "Ports and adapters, explained."
    assert doc.weight == 3
    assert doc.url == "/hexagonal-architecture/"
    assert doc.draft is False


def test_unrecognized_keys_are_preserved():
    doc = parse_document(ARTICLE, "posts/hexagonal")
    assert doc.extra == {"image": "images/hexagon.png"}


def test_single_author_and_scalar_terms_become_lists():
    doc = parse_document(
        page(title="T", date="2023-01-17", author="tom", tags="junit"), "posts/t"
    )
    assert doc.authors == ("tom",)
    assert doc.tags == ("junit",)


def test_missing_title_raises():
    with pytest.raises(MissingFieldError) as info:
        parse_document(page(date="2023-01-17"), "posts/untitled", source="posts/untitled.md")
    assert info.value.field == "title"
    assert info.value.path == "posts/untitled.md"


def test_blank_title_raises():
    with pytest.raises(MissingFieldError):
        parse_document(page(title="   ", date="2023-01-17"), "posts/blank")


def test_published_document_needs_a_date():
    with pytest.raises(MissingFieldError) as info:
        parse_document(page(title="No date"), "posts/nodate")
    assert info.value.field == "date"


def test_draft_may_omit_date():
    doc = parse_document(page(title="Work in progress", draft=True), "posts/wip")
    assert doc.draft is True
    assert doc.date is None
    assert doc.timestamp is None


@pytest.mark.parametrize("value", ["not-a-date", "2023-13-45", "17.01.2023", 20230117])
def test_malformed_date_raises(value):
    with pytest.raises(InvalidDateError) as info:
        parse_document(page(title="T", date=value), "posts/t")
    assert info.value.field == "date"


def test_impossible_yaml_timestamp_raises_invalid_date():
    with pytest.raises(InvalidDateError):
        parse_document("---\ntitle: T\ndate: 2023-02-30\n---\n", "posts/t")


def test_iso_datetime_strings_are_parsed():
    doc = parse_document(page(title="T", date="2023-01-17T10:30:00Z"), "posts/t")
    assert doc.timestamp == datetime(2023, 1, 17, 10, 30, tzinfo=timezone.utc)


def test_offset_datetimes_normalize_to_utc():
    doc = parse_document("---\ntitle: T\ndate: 2023-01-17T10:00:00+02:00\n---\n", "posts/t")
    assert doc.timestamp == datetime(2023, 1, 17, 8, 0, tzinfo=timezone.utc)
    assert doc.date.utcoffset() == timedelta(hours=2)


def test_string_draft_flag_is_coerced():
    doc = parse_document(page(title="T", draft="true"), "posts/t")
    assert doc.draft is True


def test_invalid_draft_flag_raises():
    with pytest.raises(FrontMatterError) as info:
        parse_document(page(title="T", date="2023-01-17", draft="maybe"), "posts/t")
    assert info.value.field == "draft"


def test_non_mapping_header_raises():
    with pytest.raises(FrontMatterError, match="mapping"):
        parse_document("---\n- a\n- b\n---\n", "posts/list")


def test_invalid_yaml_raises():
    with pytest.raises(FrontMatterError, match="Invalid YAML"):
        parse_document("---\ntitle: [unclosed\n---\n", "posts/bad")


def test_empty_identifier_raises():
    with pytest.raises(MissingFieldError):
        parse_document(page(title="T", date="2023-01-17"), "")


def test_documents_are_immutable():
    doc = parse_document(ARTICLE, "posts/hexagonal")
    with pytest.raises(AttributeError):
        doc.title = "Other"
    with pytest.raises(TypeError):
        doc.data["title"] = "Other"


def test_round_trip_is_lossless_for_recognized_keys():
    doc = parse_document(ARTICLE, "posts/hexagonal", source="posts/hexagonal.md")
    again = parse_document(dump(doc), doc.id, source=doc.source)

    assert again == doc
    for key in doc.RECOGNIZED:
        assert again.data.get(key) == doc.data.get(key)
    assert again.body == doc.body


def test_round_trip_with_datetime_and_draft():
    text = "---\ntitle: T\ndate: 2023-01-17T10:00:00+02:00\ndraft: true\nseries: junit5\n---\nBody\n"
    doc = parse_document(text, "posts/t")
    assert parse_document(dump(doc), "posts/t") == doc


def test_dump_orders_recognized_keys_first():
    doc = parse_document(
        "---\nimage: x.png\ndate: 2023-01-17\ntitle: T\n---\nBody\n", "posts/t"
    )
    header = dump(doc).split("---\n")[1]
    keys = [line.split(":")[0] for line in header.splitlines()]
    assert keys == ["title", "date", "image"]


def test_read_header_does_not_validate():
    assert read_header("---\ntype: author\n---\n") == {"type": "author"}


def test_parse_author():
    author = parse_author(
        page(
            "Tom writes about software architecture.\n",
            name="Tom Hombergs",
            social=[{"platform": "github", "url": "https://github.com/thombergs"}],
        ),
        "tom",
        source="authors/tom.md",
    )
    assert author.id == "tom"
    assert author.name == "Tom Hombergs"
    assert author.bio == "Tom writes about software architecture."
    assert author.social == (("github", "https://github.com/thombergs"),)


def test_author_falls_back_to_title_for_name():
    author = parse_author(page(title="Tom"), "tom")
    assert author.name == "Tom"


def test_author_needs_a_name():
    with pytest.raises(MissingFieldError) as info:
        parse_author(page(social={}), "nobody")
    assert info.value.field == "name"


def test_author_social_must_be_structured():
    with pytest.raises(FrontMatterError):
        parse_author(page(name="Tom", social="github"), "tom")


def test_parse_collection():
    coll = parse_collection(
        page(type="tutorial", title="JUnit 5", chapters=["/tutorials/junit5/nested/", "tutorials/junit5/assertions"]),
        "tutorials/junit5",
    )
    assert coll.title == "JUnit 5"
    assert coll.members == ("tutorials/junit5/nested", "tutorials/junit5/assertions")
    assert coll.ordered is True


def test_collection_without_members_is_unordered():
    coll = parse_collection(page(title="Spring Boot", tag="spring-boot"), "series/spring-boot")
    assert coll.members == ()
    assert coll.ordered is False
    assert coll.tag == "spring-boot"


def test_collection_needs_a_title():
    with pytest.raises(MissingFieldError):
        parse_collection(page(members=["a"]), "series/x")


def test_impossible_timestamp_under_other_key_is_not_blamed_on_date():
    with pytest.raises(InvalidDateError) as info:
        parse_document("---\ntitle: T\ndate: 2023-02-01\nlastmod: 2023-02-30\n---\n", "posts/t")
    assert info.value.field is None
    assert info.value.detail.startswith("Malformed timestamp")
