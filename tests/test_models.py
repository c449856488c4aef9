import pytest
from pydantic import ValidationError

from micro_scraper.errors import InputError, NavigationError
from micro_scraper.models import AttemptOutcome, ScrapeRequest, ScrapeResult
from micro_scraper.utils import error_details


@pytest.mark.parametrize(
    "url",
    ["https://example.com", "http://localhost:8080/path?q=1", "HTTPS://Example.com/#frag"],
)
def test_from_query_accepts_http_urls(url):
    req = ScrapeRequest.from_query(url)

    assert req.target_url.scheme in {"http", "https"}
    assert req.url.lower().startswith(req.target_url.scheme)


@pytest.mark.parametrize(
    "url",
    [
        None,
        "",
        "   ",
        "example.com",
        "/relative/path",
        "mailto:a@b.c",
        "file:///etc/passwd",
        "http://host:notaport/",
        "http://exa mple.com",
        "http://exa<mple.com/",
        'http://a"b.com',
    ],
)
def test_from_query_rejects_malformed_urls(url):
    with pytest.raises(InputError) as excinfo:
        ScrapeRequest.from_query(url)

    assert isinstance(excinfo.value.__cause__, ValidationError)


def test_direct_construction_validates_url():
    with pytest.raises(ValidationError):
        ScrapeRequest(target_url="ftp://example.com")


def test_request_from_query_normalizes_blank_user_agent():
    req = ScrapeRequest.from_query(" https://example.com ", "")

    assert req.url == "https://example.com/"
    assert req.user_agent is None


def test_request_is_immutable():
    req = ScrapeRequest.from_query("https://example.com", "UA")
    with pytest.raises(Exception):
        req.user_agent = "other"


def test_result_serializes_with_wire_names():
    result = ScrapeResult(title="T", meta_description="D")

    assert result.to_response() == {"title": "T", "metaDescription": "D", "h1": None, "status": 200}


def test_attempt_outcome_ok_flag():
    assert AttemptOutcome(attempt=1, result=ScrapeResult()).ok
    assert not AttemptOutcome(attempt=2, error=NavigationError("down")).ok


def test_error_details_falls_back_to_class_name():
    assert error_details(RuntimeError("")) == "RuntimeError"
    assert error_details(RuntimeError(" browser gone ")) == "browser gone"
