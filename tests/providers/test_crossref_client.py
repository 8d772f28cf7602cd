import asyncio

import httpx
import pytest

from codedict.config import CrossRefSettings
from codedict.errors import FetchError
from codedict.providers.crossref.client import CrossRefClient, parse_crossref_csv


class TestParseCrossrefCsv:
    """Tests for parse_crossref_csv."""

    def test_maps_code_to_id(self):
        mapping = parse_crossref_csv("code,understat\n100,7322\n200,1250\n")
        assert mapping.ids == {"100": "7322", "200": "1250"}
        assert mapping.rows_read == 2
        assert len(mapping) == 2

    def test_skips_rows_without_code_or_id(self):
        mapping = parse_crossref_csv("code,understat\n100,\n,55\n200,1250\n")
        assert mapping.ids == {"200": "1250"}
        assert mapping.rows_read == 3

    def test_last_value_wins_for_repeated_codes(self):
        mapping = parse_crossref_csv("code,understat\n100,1\n100,2\n100,\n")
        assert mapping.ids == {"100": "2"}

    def test_normalizes_spreadsheet_numbers(self):
        mapping = parse_crossref_csv("code,understat\n100.0, 7322.0 \n")
        assert mapping.ids == {"100": "7322"}

    def test_tolerates_bom_and_padded_header(self):
        mapping = parse_crossref_csv("\ufeff code , understat ,extra\n100,7322,x\n")
        assert mapping.ids == {"100": "7322"}

    def test_custom_columns_and_names(self):
        text = "fpl_code,us_id,us_name\n100,7322,Bukayo Saka\n200,1250,\n"
        mapping = parse_crossref_csv(text, code_column="fpl_code", id_column="us_id", name_column="us_name")
        assert mapping.ids == {"100": "7322", "200": "1250"}
        assert mapping.names == {"100": "Bukayo Saka"}

    def test_missing_name_column_is_ignored(self):
        mapping = parse_crossref_csv("code,understat\n100,7322\n", name_column="name")
        assert mapping.names == {}
        assert mapping.ids == {"100": "7322"}

    def test_missing_required_column_raises(self):
        with pytest.raises(FetchError, match="understat"):
            parse_crossref_csv("code,other\n100,1\n")


def test_client_requires_url():
    with pytest.raises(ValueError):
        CrossRefClient(CrossRefSettings())


def test_fetch_mapping_uses_configured_columns(monkeypatch):
    asyncio.run(_assert_fetch_mapping_uses_configured_columns(monkeypatch))


async def _assert_fetch_mapping_uses_configured_columns(monkeypatch):
    settings = CrossRefSettings(url="https://example.com/ids.csv", code_column="fpl", id_column="us")
    client = CrossRefClient(settings)

    async def fake_get_text(self, url):
        assert url == "https://example.com/ids.csv"
        return "fpl,us\n100,7322\n"

    monkeypatch.setattr(CrossRefClient, "_get_text", fake_get_text, raising=False)
    try:
        mapping = await client.fetch_mapping()
    finally:
        await client.close()

    assert mapping.ids == {"100": "7322"}


def test_fetch_mapping_attaches_url_to_parse_errors(monkeypatch):
    async def fake_get_text(self, url):
        return "a,b\n1,2\n"

    monkeypatch.setattr(CrossRefClient, "_get_text", fake_get_text, raising=False)

    async def run():
        async with CrossRefClient(CrossRefSettings(url="https://example.com/ids.csv")) as client:
            await client.fetch_mapping()

    with pytest.raises(FetchError) as exc_info:
        asyncio.run(run())
    assert exc_info.value.url == "https://example.com/ids.csv"


@pytest.mark.asyncio
async def test_http_status_maps_to_fetch_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(404, text="gone"))
    async with httpx.AsyncClient(transport=transport) as http:
        client = CrossRefClient(CrossRefSettings(url="https://example.com/ids.csv"), client=http)
        with pytest.raises(FetchError) as exc_info:
            await client.fetch_mapping()
    assert exc_info.value.status_code == 404


def test_exponent_ids_are_kept_verbatim():
    mapping = parse_crossref_csv("code,understat\n100,1e5000\n200,7322\n")
    assert mapping.ids == {"100": "1e5000", "200": "7322"}
