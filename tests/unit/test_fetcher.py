import httpx
import pytest

from py_sdmx_schema.config import AppSettings, HttpSettings
from py_sdmx_schema.exceptions import SdmxFetchError
from py_sdmx_schema.fetcher import Fetcher, is_url, normalize_sdmx_url


@pytest.fixture
def app_settings():
    """Fixture for AppSettings with retries that do not sleep."""
    return AppSettings(http=HttpSettings(max_attempts=3, backoff_min=0, backoff_max=0))


@pytest.mark.parametrize(
    "text",
    [
        "https://stats.example.org/rest/dataflow/SPC/DF_BP50",
        "http://example.com",
        "ftp://files.example.org/data.xml",
        "www.example.org/rest",
        "stats-nsi-stable.pacificdata.org/rest/dataflow/SPC/DF_BP50/1.0",
    ],
)
def test_is_url_accepts_urls(text):
    assert is_url(text)


@pytest.mark.parametrize("text", ["<Structure/>", "", "   ", "not a url", "localhost"])
def test_is_url_rejects_xml_and_plain_text(text):
    assert not is_url(text)


def test_normalize_adds_protocol_and_references():
    assert (
        normalize_sdmx_url("stats.example.org/rest/dataflow/SPC/DF_BP50")
        == "https://stats.example.org/rest/dataflow/SPC/DF_BP50?references=all"
    )
    assert (
        normalize_sdmx_url("https://example.org/rest/dataflow?detail=full")
        == "https://example.org/rest/dataflow?detail=full&references=all"
    )


def test_normalize_keeps_explicit_references():
    url = "https://example.org/rest/dataflow/SPC/DF?references=none"
    assert normalize_sdmx_url(url) == url


def test_normalize_rejects_non_urls():
    with pytest.raises(ValueError):
        normalize_sdmx_url("<xml/>")


def test_fetch_returns_inline_xml_unchanged(app_settings, mocker):
    fetcher = Fetcher(app_settings)
    mock_get = mocker.patch("httpx.Client.get")

    assert fetcher.fetch_sdmx_xml("<Structure/>") == "<Structure/>"
    mock_get.assert_not_called()


def test_fetch_rejects_empty_and_non_xml(app_settings):
    fetcher = Fetcher(app_settings)
    with pytest.raises(SdmxFetchError, match="empty"):
        fetcher.fetch_sdmx_xml("  ")
    with pytest.raises(SdmxFetchError, match="valid XML or a URL"):
        fetcher.fetch_sdmx_xml("just some words")


def test_fetch_downloads_normalized_url(app_settings, mocker):
    fetcher = Fetcher(app_settings)
    response = httpx.Response(
        200,
        text="<Structure/>",
        request=httpx.Request("GET", "https://example.org/rest/dataflow?references=all"),
    )
    mock_get = mocker.patch("httpx.Client.get", return_value=response)

    assert fetcher.fetch_sdmx_xml("example.org/rest/dataflow") == "<Structure/>"
    mock_get.assert_called_once_with("https://example.org/rest/dataflow?references=all")


def test_fetch_retries_server_errors(app_settings, mocker):
    fetcher = Fetcher(app_settings)
    request = httpx.Request("GET", "https://example.org/rest?references=all")
    mock_get = mocker.patch(
        "httpx.Client.get",
        side_effect=[
            httpx.Response(503, request=request),
            httpx.Response(200, text="<Structure/>", request=request),
        ],
    )

    assert fetcher.fetch_sdmx_xml("https://example.org/rest") == "<Structure/>"
    assert mock_get.call_count == 2


def test_fetch_does_not_retry_client_errors(app_settings, mocker):
    fetcher = Fetcher(app_settings)
    mock_logger_error = mocker.patch("py_sdmx_schema.fetcher.logger.error")
    request = httpx.Request("GET", "https://example.org/rest?references=all")
    mock_get = mocker.patch(
        "httpx.Client.get", return_value=httpx.Response(404, request=request)
    )

    with pytest.raises(httpx.HTTPStatusError):
        fetcher.fetch_sdmx_xml("https://example.org/rest")

    assert mock_get.call_count == 1
    assert "HTTP error while downloading" in mock_logger_error.call_args[0][0]


def test_fetch_gives_up_after_max_attempts(app_settings, mocker):
    fetcher = Fetcher(app_settings)
    mock_get = mocker.patch(
        "httpx.Client.get", side_effect=httpx.ConnectError("connection refused")
    )

    with pytest.raises(httpx.ConnectError):
        fetcher.fetch_sdmx_xml("https://example.org/rest")

    assert mock_get.call_count == 3


def test_fetch_rejects_empty_body(app_settings, mocker):
    fetcher = Fetcher(app_settings)
    request = httpx.Request("GET", "https://example.org/rest?references=all")
    mocker.patch("httpx.Client.get", return_value=httpx.Response(200, text="  ", request=request))

    with pytest.raises(SdmxFetchError, match="Empty response body"):
        fetcher.fetch_sdmx_xml("https://example.org/rest")
