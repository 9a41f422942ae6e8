"""Tests for the command-line interface."""

import io
import json
from unittest.mock import patch

import pytest

from structdata.cli import main
from structdata.exceptions import FetchError
from structdata.fetcher import FetchedPage

PAGE = """
<html><head>
<script type="application/ld+json">
{"@context": "https://schema.org", "@type": "Person", "name": "Jane Doe",
 "url": "https://example.com/jane", "image": "https://example.com/jane.png"}
</script>
</head><body></body></html>
"""


@pytest.fixture
def page_file(tmp_path):
    path = tmp_path / "page.html"
    path.write_text(PAGE, encoding="utf-8")
    return path


class TestCli:
    """Test cases for the structdata command."""

    def test_text_output(self, page_file, capsys):
        exit_code = main(["analyze", str(page_file)])
        out = capsys.readouterr().out

        assert exit_code == 0
        assert "Overall Score: 40/100" in out
        assert "JSON-LD: 1 item(s)" in out
        assert "Person: 1" in out

    def test_json_output(self, page_file, capsys):
        exit_code = main(["analyze", str(page_file), "--json"])
        data = json.loads(capsys.readouterr().out)

        assert exit_code == 0
        assert data["score"] == 40
        assert data["details"]["hasStructuredData"] is True

    def test_seo_output(self, page_file, capsys):
        exit_code = main(["analyze", str(page_file), "--seo"])
        data = json.loads(capsys.readouterr().out)

        assert exit_code == 0
        assert data["schemaTypes"] == {"Person": 1}

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(PAGE.encode("utf-8"))))

        exit_code = main(["analyze", "-", "--json"])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out)["score"] == 40

    def test_thresholds_file(self, page_file, tmp_path, capsys):
        config = tmp_path / "thresholds.json"
        config.write_text(json.dumps({"thresholds": {"presence_points": 50}}))

        main(["analyze", str(page_file), "--json", "--thresholds", str(config)])

        assert json.loads(capsys.readouterr().out)["score"] == 60

    def test_thresholds_from_env(self, page_file, monkeypatch, capsys):
        monkeypatch.setenv("STRUCTDATA_THRESHOLD_PRESENCE_POINTS", "45")

        main(["analyze", str(page_file), "--json"])

        assert json.loads(capsys.readouterr().out)["score"] == 55

    def test_missing_file(self, tmp_path, capsys):
        exit_code = main(["analyze", str(tmp_path / "nope.html")])

        assert exit_code == 1
        assert "cannot read" in capsys.readouterr().err

    @patch("structdata.cli.PageFetcher")
    def test_url_is_fetched(self, mock_fetcher, capsys):
        mock_fetcher.return_value.fetch.return_value = FetchedPage(
            url="https://example.com/final", html=PAGE, status_code=200, load_time=0.1
        )

        exit_code = main(["analyze", "https://example.com/", "--json"])

        assert exit_code == 0
        mock_fetcher.return_value.fetch.assert_called_once_with("https://example.com/")
        assert json.loads(capsys.readouterr().out)["score"] == 40

    @patch("structdata.cli.PageFetcher")
    def test_fetch_error(self, mock_fetcher, capsys):
        mock_fetcher.return_value.fetch.side_effect = FetchError("https://example.com/", "timeout")

        exit_code = main(["analyze", "https://example.com/"])

        assert exit_code == 1
        assert "Failed to fetch" in capsys.readouterr().err

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()
