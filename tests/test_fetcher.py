"""Tests for the page fetcher."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from structdata.exceptions import FetchError
from structdata.fetcher import FetchedPage, PageFetcher


def make_response(status_code=200, text="<html></html>", url="https://example.com/"):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.url = url
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} Error", response=response
        )
    return response


class TestPageFetcher:
    """Test cases for PageFetcher."""

    @pytest.fixture
    def fetcher(self):
        fetcher = PageFetcher(user_agent="TestBot/1.0", timeout=5, max_retries=3)
        fetcher.session = MagicMock()
        return fetcher

    def test_initialization(self):
        fetcher = PageFetcher(user_agent="CustomBot/1.0")

        assert fetcher.user_agent == "CustomBot/1.0"
        assert fetcher.session.headers["User-Agent"] == "CustomBot/1.0"

    def test_fetch_success(self, fetcher):
        fetcher.session.get.return_value = make_response(text="<html>ok</html>", url="https://example.com/final")

        page = fetcher.fetch("https://example.com/start")

        assert isinstance(page, FetchedPage)
        assert page.html == "<html>ok</html>"
        assert page.url == "https://example.com/final"
        assert page.status_code == 200
        fetcher.session.get.assert_called_once_with("https://example.com/start", timeout=5, allow_redirects=True)

    @patch("structdata.fetcher.time.sleep")
    def test_retries_then_succeeds(self, mock_sleep, fetcher):
        fetcher.session.get.side_effect = [requests.exceptions.Timeout(), make_response()]

        page = fetcher.fetch("https://example.com/")

        assert page.status_code == 200
        assert fetcher.session.get.call_count == 2
        assert mock_sleep.call_count == 1

    @patch("structdata.fetcher.time.sleep")
    def test_gives_up_after_max_retries(self, mock_sleep, fetcher):
        fetcher.session.get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch("https://example.com/")

        assert fetcher.session.get.call_count == 3
        assert mock_sleep.call_count == 2
        assert exc_info.value.url == "https://example.com/"
        assert "Connection error" in exc_info.value.reason

    @patch("structdata.fetcher.time.sleep")
    def test_client_error_not_retried(self, mock_sleep, fetcher):
        fetcher.session.get.return_value = make_response(status_code=404)

        with pytest.raises(FetchError):
            fetcher.fetch("https://example.com/missing")

        assert fetcher.session.get.call_count == 1
        mock_sleep.assert_not_called()

    @patch("structdata.fetcher.time.sleep")
    def test_server_error_retried(self, mock_sleep, fetcher):
        fetcher.session.get.side_effect = [make_response(status_code=503), make_response()]

        assert fetcher.fetch("https://example.com/").status_code == 200

    @pytest.mark.integration
    def test_fetch_real_page(self):
        page = PageFetcher().fetch("https://example.com")

        assert page.status_code == 200
        assert "<html" in page.html.lower()
