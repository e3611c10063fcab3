"""Tests for distill_page.distill_page module."""

import time
from dataclasses import replace
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from annotate_text.model_registry import ModelRegistry
from annotate_text.models import DEFAULT_CATEGORIES, EntityCategory
from common.errors import (
    MalformedInputError,
    ModelUnavailableError,
    PipelineTimeoutError,
    SourceUnreachableError,
)
from distill_page.config import Config, PipelineConfig
from distill_page.distill_page import obtain_document, run
from extract_content.models import ExtractedDocument, RawDocument

TRIP = ExtractedDocument(title="Trip Report", body="John Smith visited Paris. He works for Acme Corp.")
TRIP_PAGE = (
    b"<html><head><title>Trip Report</title></head><body>"
    b"<nav><a href='/'>Home</a> <a href='/news'>News</a></nav>"
    b"<article><p>John Smith visited Paris last week to meet partners of the company. "
    b"He works for Acme Corp. and travels to France several times a year.</p></article>"
    b"</body></html>"
)


class TestRun:
    def test_trip_report(self, registry) -> None:
        record = run(TRIP, registry)

        assert record.to_dict() == {
            "title": "Trip Report",
            "content": "John Smith visited Paris. He works for Acme Corp.",
            "persons": ["John Smith"],
            "locations": ["Paris"],
            "organizations": ["Acme Corp."],
        }

    def test_deduplicates_repeated_mentions(self, registry) -> None:
        document = ExtractedDocument(title=None, body="Jane Doe spoke first. Later Jane Doe spoke again.")
        assert run(document, registry).to_dict() == {
            "content": "Jane Doe spoke first. Later Jane Doe spoke again.",
            "persons": ["Jane Doe"],
        }

    def test_categories_without_entities_are_omitted(self, registry) -> None:
        record = run(ExtractedDocument(title="Note", body="Nothing to see here."), registry)
        assert record.to_dict() == {"title": "Note", "content": "Nothing to see here."}

    def test_present_categories_are_non_empty(self, registry) -> None:
        record = run(TRIP, registry)
        assert all(record.entities.values())
        assert set(record.entities) == set(DEFAULT_CATEGORIES)

    def test_empty_body_loads_no_models(self) -> None:
        loader = MagicMock()
        record = run(ExtractedDocument(title="Empty", body=""), ModelRegistry(loader=loader))

        assert record.to_dict() == {"title": "Empty", "content": ""}
        loader.assert_not_called()

    def test_is_idempotent(self, registry) -> None:
        assert run(TRIP, registry).to_dict() == run(TRIP, registry).to_dict()

    def test_parallel_matches_sequential(self, registry) -> None:
        sequential = run(TRIP, registry, Config(pipeline=PipelineConfig(parallel_categories=False)))
        parallel = run(TRIP, registry, Config(pipeline=PipelineConfig(parallel_categories=True, max_workers=3)))
        assert parallel == sequential

    def test_category_models_are_resolved_per_category(self, nlp) -> None:
        loader = MagicMock(return_value=nlp)
        organization = replace(DEFAULT_CATEGORIES[2], model="lg")
        config = Config(entities=(DEFAULT_CATEGORIES[0], DEFAULT_CATEGORIES[1], organization))

        run(TRIP, ModelRegistry(loader=loader), config)

        assert sorted(call.args[0] for call in loader.call_args_list) == ["en_core_web_lg", "en_core_web_sm"]

    def test_missing_category_model_fails_request(self, nlp) -> None:
        def loader(name):
            if name == "en_core_web_lg":
                raise OSError("not installed")
            return nlp

        organization = replace(DEFAULT_CATEGORIES[2], model="lg")
        config = Config(entities=(DEFAULT_CATEGORIES[0], organization))

        with pytest.raises(ModelUnavailableError):
            run(TRIP, ModelRegistry(loader=loader), config)

    def test_parallel_failure_fails_request(self, nlp) -> None:
        def loader(name):
            if name == "en_core_web_lg":
                raise OSError("not installed")
            return nlp

        organization = replace(DEFAULT_CATEGORIES[2], model="lg")
        config = Config(
            entities=(DEFAULT_CATEGORIES[0], DEFAULT_CATEGORIES[1], organization),
            pipeline=PipelineConfig(parallel_categories=True),
        )

        with pytest.raises(ModelUnavailableError):
            run(TRIP, ModelRegistry(loader=loader), config)

    def test_custom_category(self, registry) -> None:
        lakes = EntityCategory(name="lake", output_key="lakes", model="sm", labels=frozenset({"LOC"}))
        document = ExtractedDocument(title=None, body="We walked around Lake Geneva.")

        record = run(document, registry, Config(entities=(lakes,)))

        assert record.to_dict() == {"content": "We walked around Lake Geneva.", "lakes": ["Lake Geneva"]}

    def test_passed_deadline_raises_timeout(self, registry) -> None:
        with pytest.raises(PipelineTimeoutError) as exc_info:
            run(TRIP, registry, deadline=time.monotonic() - 1)
        assert exc_info.value.kind == "timeout"

    def test_future_deadline_completes(self, registry) -> None:
        assert run(TRIP, registry, deadline=time.monotonic() + 60).content == TRIP.body

    def test_malformed_bytes_raise(self, registry) -> None:
        with pytest.raises(MalformedInputError):
            run(b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR", registry)

    def test_raw_html_is_extracted(self, registry) -> None:
        record = run(TRIP_PAGE, registry).to_dict()

        assert record["title"] == "Trip Report"
        assert "John Smith visited Paris" in record["content"]
        assert "Home" not in record["content"]
        assert record["persons"] == ["John Smith"]
        assert record["organizations"] == ["Acme Corp."]


class TestObtainDocument:
    def test_extracted_document_passes_through(self) -> None:
        assert obtain_document(TRIP, Config()) is TRIP

    def test_dict_with_body(self) -> None:
        document = obtain_document({"title": "T", "body": "Text."}, Config())
        assert document == ExtractedDocument(title="T", body="Text.")

    def test_object_with_content(self) -> None:
        document = obtain_document(SimpleNamespace(title="", content="Text."), Config())
        assert document == ExtractedDocument(title=None, body="Text.")

    def test_dict_without_body_raises(self) -> None:
        with pytest.raises(MalformedInputError):
            obtain_document({"title": "T"}, Config())

    @patch("distill_page.distill_page.extract_content")
    @patch("distill_page.distill_page.fetch_page")
    def test_url_is_fetched_then_extracted(self, mock_fetch, mock_extract) -> None:
        raw = RawDocument(content=b"<html></html>", url="https://example.com/a")
        mock_fetch.return_value = raw
        mock_extract.return_value = TRIP
        config = Config()

        assert obtain_document("https://example.com/a", config) is TRIP

        mock_fetch.assert_called_once_with(
            "https://example.com/a",
            timeout=config.fetch.request_timeout,
            user_agent=config.fetch.user_agent,
        )
        assert mock_extract.call_args.args == (raw,)
        assert mock_extract.call_args.kwargs["fallback"] is config.extraction.fallback

    @patch("distill_page.distill_page.fetch_page")
    def test_unreachable_url_raises(self, mock_fetch) -> None:
        mock_fetch.side_effect = SourceUnreachableError("connection refused")
        with pytest.raises(SourceUnreachableError):
            obtain_document("https://example.invalid/", Config())

    @patch("distill_page.distill_page.extract_content")
    def test_bytes_are_extracted(self, mock_extract) -> None:
        mock_extract.return_value = TRIP
        assert obtain_document(b"<html></html>", Config()) is TRIP
        assert mock_extract.call_args.args == (b"<html></html>",)
