"""Tests for wiki module."""

import pytest
from httpx import Request, RequestError, Response

from osrs_data.config import Settings
from osrs_data.exceptions import ConfigurationError, WikiError
from osrs_data.pacer import RequestPacer
from osrs_data.wiki import WikiClient, clean_display_title

API_URL = "https://oldschool.runescape.wiki/api.php"


def _json_response(data, status: int = 200) -> Response:
    return Response(status, json=data, request=Request("GET", API_URL))


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, user_agent="test-bot", request_interval=0)


@pytest.fixture
def client(settings: Settings) -> WikiClient:
    return WikiClient(settings)


class TestClientSetup:
    def test_missing_user_agent_refused_before_any_request(self, mocker):
        mock_get = mocker.patch("httpx.get")

        with pytest.raises(ConfigurationError, match="OSRS_USER_AGENT"):
            WikiClient(Settings(_env_file=None, user_agent=None))

        mock_get.assert_not_called()

    def test_blank_user_agent_refused(self):
        with pytest.raises(ConfigurationError):
            WikiClient(Settings(_env_file=None, user_agent="   "))

    def test_user_agent_header_format(self, client: WikiClient):
        assert client.headers == {"User-Agent": "test-bot - osrs-data"}

    def test_every_request_waits_on_pacer(self, mocker, settings: Settings):
        pacer = mocker.Mock(spec=RequestPacer)
        mocker.patch("httpx.get", return_value=_json_response({"query": {}}))

        client = WikiClient(settings, pacer=pacer)
        client.query({"action": "query"})
        client.query({"action": "query"})

        assert pacer.wait.call_count == 2


class TestQuery:
    def test_sends_json_format_and_headers(self, mocker, client: WikiClient):
        mock_get = mocker.patch("httpx.get", return_value=_json_response({"query": {}}))

        client.query({"action": "query", "list": "allpages"})

        _, kwargs = mock_get.call_args
        assert kwargs["params"]["format"] == "json"
        assert kwargs["params"]["list"] == "allpages"
        assert kwargs["headers"]["User-Agent"] == "test-bot - osrs-data"

    def test_error_envelope_raises(self, mocker, client: WikiClient):
        mocker.patch(
            "httpx.get",
            return_value=_json_response({"error": {"code": "nosuchpageid", "info": "No page"}}),
        )

        with pytest.raises(WikiError, match="returned an error: No page"):
            client.query({"action": "parse"})

    def test_http_error(self, mocker, client: WikiClient):
        mocker.patch(
            "httpx.get", return_value=Response(500, request=Request("GET", API_URL))
        )

        with pytest.raises(WikiError, match="HTTP 500"):
            client.query({"action": "query"})

    def test_network_error(self, mocker, client: WikiClient):
        mocker.patch("httpx.get", side_effect=RequestError("Connection timeout"))

        with pytest.raises(WikiError, match="Network error"):
            client.query({"action": "query"})

    def test_invalid_json(self, mocker, client: WikiClient):
        mocker.patch(
            "httpx.get",
            return_value=Response(200, content=b"not json", request=Request("GET", API_URL)),
        )

        with pytest.raises(WikiError, match="Invalid JSON response"):
            client.query({"action": "query"})


class TestPaginate:
    def test_follows_continuation_until_exhausted(self, mocker, client: WikiClient):
        responses = [
            _json_response(
                {
                    "continue": {"apcontinue": f"P{i}", "continue": "-||"},
                    "query": {"allpages": [{"pageid": i, "title": f"Page {i}"}]},
                }
            )
            for i in range(1, 4)
        ]
        responses.append(
            _json_response({"query": {"allpages": [{"pageid": 4, "title": "Page 4"}]}})
        )
        mock_get = mocker.patch("httpx.get", side_effect=responses)

        batches = list(client.paginate("apcontinue", "allpages", {"list": "allpages"}))

        assert len(batches) == 4
        assert [p["pageid"] for batch in batches for p in batch] == [1, 2, 3, 4]
        assert mock_get.call_count == 4
        second_params = mock_get.call_args_list[1].kwargs["params"]
        assert second_params["apcontinue"] == "P1"
        assert second_params["continue"] == "-||"
        assert second_params["list"] == "allpages"

    def test_failure_mid_sequence_keeps_earlier_batches(self, mocker, client: WikiClient):
        mocker.patch(
            "httpx.get",
            side_effect=[
                _json_response(
                    {
                        "continue": {"apcontinue": "B"},
                        "query": {"allpages": [{"pageid": 1, "title": "A"}]},
                    }
                ),
                RequestError("Connection reset"),
            ],
        )

        batches = list(client.paginate("apcontinue", "allpages", {"list": "allpages"}))

        assert batches == [[{"pageid": 1, "title": "A"}]]

    def test_strict_failure_raised_after_earlier_batches(self, mocker, client: WikiClient):
        mocker.patch(
            "httpx.get",
            side_effect=[
                _json_response(
                    {
                        "continue": {"apcontinue": "B"},
                        "query": {"allpages": [{"pageid": 1, "title": "A"}]},
                    }
                ),
                RequestError("Connection reset"),
            ],
        )
        batches = []

        with pytest.raises(WikiError, match="Network error"):
            for batch in client.paginate("apcontinue", "allpages", {}, strict=True):
                batches.append(batch)

        assert batches == [[{"pageid": 1, "title": "A"}]]

    def test_dict_results_become_lists(self, mocker, client: WikiClient):
        mocker.patch(
            "httpx.get",
            return_value=_json_response(
                {"query": {"pages": {"10": {"pageid": 10, "title": "Torch"}}}}
            ),
        )

        batches = list(client.paginate("rdcontinue", "pages", {"prop": "redirects"}))

        assert batches == [[{"pageid": 10, "title": "Torch"}]]

    def test_missing_query_yields_empty_batch(self, mocker, client: WikiClient):
        mocker.patch("httpx.get", return_value=_json_response({"batchcomplete": ""}))

        assert list(client.paginate("apcontinue", "allpages", {})) == [[]]


class TestParsePage:
    def test_returns_parsed_page(self, mocker, client: WikiClient):
        mocker.patch(
            "httpx.get",
            return_value=_json_response(
                {
                    "parse": {
                        "title": "Torch",
                        "pageid": 1213,
                        "revid": 555,
                        "displaytitle": "<span>Torch</span>",
                        "text": {"*": "<p>A lit torch.</p>"},
                        "wikitext": {"*": "{{Infobox Item|name=Torch}}"},
                        "properties": [{"name": "defaultsort", "*": "Torch"}],
                    }
                }
            ),
        )

        page = client.parse_page(1213)

        assert page.page_id == 1213
        assert page.title == "Torch"
        assert page.display_title == "Torch"
        assert page.revision_id == 555
        assert page.html == "<p>A lit torch.</p>"
        assert page.wikitext == "{{Infobox Item|name=Torch}}"
        assert page.properties == [{"name": "defaultsort", "value": "Torch"}]

    def test_invalid_page_id(self, mocker, client: WikiClient):
        mock_get = mocker.patch("httpx.get")

        with pytest.raises(WikiError, match="Invalid page ID"):
            client.parse_page(0)

        mock_get.assert_not_called()

    def test_unexpected_format(self, mocker, client: WikiClient):
        mocker.patch("httpx.get", return_value=_json_response({"parse": {"title": "Torch"}}))

        with pytest.raises(WikiError, match="Unexpected parse response format"):
            client.parse_page(1)


class TestExportPages:
    def test_posts_titles_and_returns_bytes(self, mocker, client: WikiClient):
        mock_post = mocker.patch(
            "httpx.post",
            return_value=Response(
                200, content=b"<mediawiki/>", request=Request("POST", "http://test.com")
            ),
        )

        result = client.export_pages(["Torch", "Bones"])

        assert result == b"<mediawiki/>"
        data = mock_post.call_args.kwargs["data"]
        assert data["pages"] == "Torch\nBones"
        assert data["curonly"] == "1"

    def test_empty_titles_rejected(self, client: WikiClient):
        with pytest.raises(WikiError, match="empty title list"):
            client.export_pages([])


class TestGeLimits:
    def test_bookkeeping_keys_dropped(self, mocker, client: WikiClient):
        mocker.patch(
            "httpx.get",
            return_value=_json_response(
                {"%LAST_UPDATE%": 1700000000, "Torch": 1000, "Bones": 13000.0, "Odd": "x"}
            ),
        )

        assert client.fetch_ge_limits() == {"Torch": 1000, "Bones": 13000}

    def test_http_error(self, mocker, client: WikiClient):
        mocker.patch("httpx.get", return_value=Response(503, request=Request("GET", API_URL)))

        with pytest.raises(WikiError, match="HTTP 503"):
            client.fetch_ge_limits()


def test_clean_display_title():
    assert clean_display_title("<span class='x'>Amulet of glory (4)</span>") == (
        "Amulet of glory (4)"
    )
    assert clean_display_title("Tom &amp; Jerry") == "Tom & Jerry"
