"""
WikiDataSource tests against the in-memory wiki server.
"""
import io
from datetime import datetime, timezone

import pytest

from azwiki.exceptions.wiki_exceptions import WikiApiError, WikiDeserializationError
from azwiki.sources.external.azure_devops.wiki.models import (
    GitVersionDescriptor,
    GitVersionOptions,
    GitVersionType,
    VersionControlRecursionType,
    WikiPageMoveParameters,
    WikiType,
)
from tests.fixtures.wiki_server import PROJECT, WIKI_ID, WIKI_NAME

PAGES_PREFIX = f"/contoso/{PROJECT}/_apis/wiki/wikis/{WIKI_ID}/pages"


@pytest.mark.integration
class TestWikis:

    @pytest.mark.asyncio
    async def test_get_wikis(self, data_source, wiki_server):
        wikis = await data_source.get_wikis()
        assert wikis.count == 1
        assert wikis.value[0].id == WIKI_ID
        assert wikis.value[0].type == WikiType.PROJECTWIKI
        assert wikis.value[0].versions[0].version == "wikiMaster"
        request = wiki_server.requests[0]
        assert request.url.path == f"/contoso/{PROJECT}/_apis/wiki/wikis"
        assert request.url.params["api-version"] == "7.1-preview.2"

    @pytest.mark.asyncio
    async def test_get_wiki_by_name(self, data_source):
        wiki = await data_source.get_wiki(WIKI_NAME)
        assert wiki.name == WIKI_NAME
        assert wiki.mapped_path == "/"

    @pytest.mark.asyncio
    async def test_create_wiki_sends_lowercase_type(self, data_source, wiki_server):
        wiki = await data_source.create_wiki(
            "Docs", WikiType.CODEWIKI, project_id="project-1",
            repository_id="repo-1", mapped_path="/docs", branch_name="main",
        )
        assert wiki.name == "Docs"
        request = wiki_server.requests[-1]
        assert request.method == "POST"
        assert request.headers["Content-Type"] == "application/json"
        body = request.read().decode()
        assert '"type": "codewiki"' in body
        assert '"version": {"version": "main"}' in body

    @pytest.mark.asyncio
    async def test_update_wiki(self, data_source, wiki_server):
        wiki = await data_source.update_wiki(
            WIKI_ID, name="Renamed", versions=[GitVersionDescriptor(version="release")]
        )
        assert wiki.name == "Renamed"
        assert wiki.versions[0].version == "release"
        assert wiki_server.requests[-1].method == "PATCH"

    @pytest.mark.asyncio
    async def test_delete_wiki(self, data_source, wiki_server):
        wiki = await data_source.delete_wiki(WIKI_ID)
        assert wiki.id == WIKI_ID
        assert wiki_server.requests[-1].method == "DELETE"

    @pytest.mark.asyncio
    async def test_unknown_wiki_is_api_error(self, data_source):
        with pytest.raises(WikiApiError) as exc_info:
            await data_source.get_wiki("nope")
        assert exc_info.value.status_code == 404
        assert exc_info.value.type_key == "WikiNotFoundException"
        assert exc_info.value.operation == "get_wiki"


@pytest.mark.integration
class TestPages:

    @pytest.mark.asyncio
    async def test_create_page_carries_etag(self, data_source):
        page = await data_source.create_or_update_page(WIKI_ID, "/Home", "# Home")
        assert page.path == "/Home"
        assert page.e_tag == "1"

    @pytest.mark.asyncio
    async def test_unquoted_etag(self, data_source, wiki_server):
        wiki_server.etag_quoting = False
        page = await data_source.create_or_update_page(WIKI_ID, "/Home", "# Home")
        assert page.e_tag == "1"

    @pytest.mark.asyncio
    async def test_missing_etag_header_leaves_field_unset(self, data_source, wiki_server):
        wiki_server.add_page("/Home", "x")
        wiki_server.send_etag = False
        page = await data_source.get_page(WIKI_ID, "/Home")
        assert page.path == "/Home"
        assert page.e_tag is None

    @pytest.mark.asyncio
    async def test_content_round_trip(self, data_source, faker_instance):
        content = "# Title\n\n" + faker_instance.paragraph() + "\n\n```\n{\"k\": 1}\n```\n"
        page = await data_source.create_or_update_page(WIKI_ID, "/Notes", content, comment="first draft")
        assert await data_source.get_page_content(WIKI_ID, page.id) == content

        edited = content + "\nmore"
        page = await data_source.update_page_by_id(WIKI_ID, page.id, edited, e_tag=page.e_tag)
        assert await data_source.get_page_content(WIKI_ID, page.id) == edited

    @pytest.mark.asyncio
    async def test_update_by_path_with_etag(self, data_source, wiki_server):
        created = await data_source.create_or_update_page(WIKI_ID, "/Home", "v1")
        updated = await data_source.create_or_update_page(WIKI_ID, "/Home", "v2", e_tag=created.e_tag)
        assert updated.e_tag == "2"
        assert wiki_server.requests[-1].headers["If-Match"] == "1"
        assert "If-Match" not in wiki_server.requests[0].headers

    @pytest.mark.asyncio
    async def test_stale_etag_is_api_error(self, data_source):
        created = await data_source.create_or_update_page(WIKI_ID, "/Home", "v1")
        await data_source.update_page_by_id(WIKI_ID, created.id, "v2", e_tag=created.e_tag)

        with pytest.raises(WikiApiError) as exc_info:
            await data_source.update_page_by_id(WIKI_ID, created.id, "v3", e_tag=created.e_tag)
        assert exc_info.value.status_code == 412
        assert exc_info.value.type_key == "WikiPageHasConflictsException"
        assert not isinstance(exc_info.value, WikiDeserializationError)

    @pytest.mark.asyncio
    async def test_repeated_reads_are_identical(self, data_source, wiki_server):
        wiki_server.add_page("/Home", "stable")
        first = await data_source.get_page(WIKI_ID, "/Home", include_content=True)
        second = await data_source.get_page(WIKI_ID, "/Home", include_content=True)
        assert first == second
        assert first.e_tag == second.e_tag == "1"
        assert first.content == "stable"

    @pytest.mark.asyncio
    async def test_get_page_query(self, data_source, wiki_server):
        wiki_server.add_page("/Team Notes", "x")
        version = GitVersionDescriptor(
            version="wikiMaster",
            version_type=GitVersionType.BRANCH,
            version_options=GitVersionOptions.NONE,
        )
        page = await data_source.get_page(
            WIKI_ID, "/Team Notes",
            recursion_level=VersionControlRecursionType.ONELEVEL,
            version=version,
        )
        assert page.path == "/Team Notes"
        params = wiki_server.requests[-1].url.params
        assert params["recursionLevel"] == "ONELEVEL"
        assert params["versionType"] == "BRANCH"
        assert params["versionOptions"] == "NONE"
        assert params["version"] == "wikiMaster"

    @pytest.mark.asyncio
    async def test_unset_optional_params_are_absent(self, data_source, wiki_server):
        wiki_server.add_page("/Home", "x")
        await data_source.get_page(WIKI_ID, "/Home")
        params = wiki_server.requests[-1].url.params
        assert set(params.keys()) == {"api-version", "path"}
        for name in ("comment", "includeContent", "recursionLevel", "version", "versionType", "versionOptions"):
            assert name not in params

    @pytest.mark.asyncio
    async def test_get_page_by_id(self, data_source, wiki_server):
        stored = wiki_server.add_page("/Home", "x")
        page = await data_source.get_page_by_id(WIKI_ID, stored.id, include_content=False)
        assert page.id == stored.id
        assert page.e_tag == "1"
        request = wiki_server.requests[-1]
        assert request.url.path == f"{PAGES_PREFIX}/{stored.id}"
        assert request.url.params["includeContent"] == "false"

    @pytest.mark.asyncio
    async def test_page_as_zip(self, data_source, wiki_server):
        stored = wiki_server.add_page("/Home", "zipped")
        stream = await data_source.get_page_as_zip(WIKI_ID, stored.id)
        data = b"".join([chunk async for chunk in stream])
        assert data == b"PK\x03\x04zipped"
        assert wiki_server.zip_streams[-1].closed
        assert wiki_server.requests[-1].headers["Accept"] == "application/zip"

    @pytest.mark.asyncio
    async def test_page_as_zip_missing_page(self, data_source, wiki_server):
        with pytest.raises(WikiApiError) as exc_info:
            await data_source.get_page_as_zip(WIKI_ID, 999)
        assert exc_info.value.status_code == 404
        assert exc_info.value.type_key == "WikiPageNotFoundException"
        assert exc_info.value.operation == "get_page_as_zip"
        assert wiki_server.zip_streams == []

    @pytest.mark.asyncio
    async def test_page_as_zip_closed_early_releases_connection(self, data_source, wiki_server):
        stored = wiki_server.add_page("/Home", "zipped")
        stream = await data_source.get_page_as_zip(WIKI_ID, stored.id)
        first = await stream.__anext__()
        await stream.aclose()

        served = wiki_server.zip_streams[-1]
        assert first == b"PK\x03\x04"
        assert served.sent == [b"PK\x03\x04"]
        assert served.closed

    @pytest.mark.asyncio
    async def test_comment_with_reserved_characters(self, data_source, wiki_server):
        await data_source.create_or_update_page(WIKI_ID, "/Home", "x", comment="a&b c")
        request = wiki_server.requests[-1]
        assert b"comment=a%26b%20c" in request.url.query
        assert request.url.params["comment"] == "a&b c"
        assert request.url.params["path"] == "/Home"

    @pytest.mark.asyncio
    async def test_path_with_percent_sign(self, data_source, wiki_server):
        created = await data_source.create_or_update_page(WIKI_ID, "/Growth 100%", "x")
        assert "/Growth 100%" in wiki_server.pages
        page = await data_source.get_page(WIKI_ID, "/Growth 100%")
        assert page.id == created.id

    @pytest.mark.asyncio
    async def test_delete_by_id_forwards_version(self, data_source, wiki_server):
        stored = wiki_server.add_page("/Home", "x")
        version = GitVersionDescriptor(
            version="main",
            version_type=GitVersionType.BRANCH,
            version_options=GitVersionOptions.PREVIOUSCHANGE,
        )
        await data_source.delete_page_by_id(WIKI_ID, stored.id, comment="gone", version=version)
        params = wiki_server.requests[-1].url.params
        assert params["version"] == "main"
        assert params["versionType"] == "BRANCH"
        assert params["versionOptions"] == "PREVIOUSCHANGE"
        assert params["comment"] == "gone"

    @pytest.mark.asyncio
    async def test_delete_by_path_and_by_id_set_etag(self, data_source, wiki_server):
        first = wiki_server.add_page("/One", "1")
        second = wiki_server.add_page("/Two", "2")

        deleted = await data_source.delete_page(WIKI_ID, "/One", comment="clean up")
        assert deleted.id == first.id
        assert deleted.e_tag == "2"
        assert b"comment=clean%20up" in wiki_server.requests[-1].url.query

        deleted = await data_source.delete_page_by_id(WIKI_ID, second.id)
        assert deleted.path == "/Two"
        assert deleted.e_tag == "2"
        assert wiki_server.pages == {}

    @pytest.mark.asyncio
    async def test_missing_page(self, data_source):
        with pytest.raises(WikiApiError) as exc_info:
            await data_source.get_page(WIKI_ID, "/Nowhere")
        assert exc_info.value.status_code == 404


@pytest.mark.integration
class TestAttachmentsMovesAndStats:

    @pytest.mark.asyncio
    async def test_create_attachment_from_bytes(self, data_source, wiki_server):
        attachment = await data_source.create_attachment(WIKI_ID, "diagram.png", b"\x89PNG")
        assert attachment.path == "/.attachments/diagram.png"
        assert attachment.e_tag == "attachment-1"
        request = wiki_server.requests[-1]
        assert request.method == "PUT"
        assert request.headers["Content-Type"] == "application/octet-stream"
        assert request.read() == b"iVBORw=="

    @pytest.mark.asyncio
    async def test_create_attachment_from_file(self, data_source):
        attachment = await data_source.create_attachment(
            WIKI_ID, "notes.txt", io.BytesIO(b"hello"),
            version=GitVersionDescriptor(version="main", version_type=GitVersionType.BRANCH),
        )
        assert attachment.name == "notes.txt"

    @pytest.mark.asyncio
    async def test_page_move(self, data_source, wiki_server):
        wiki_server.add_page("/Draft", "x")
        move = await data_source.create_page_move(
            WIKI_ID,
            WikiPageMoveParameters(path="/Draft", new_path="/Published", new_order=0),
            comment="publish draft",
        )
        assert move.new_path == "/Published"
        assert move.page.path == "/Published"
        assert move.e_tag == "2"
        assert "/Published" in wiki_server.pages

    @pytest.mark.asyncio
    async def test_page_stats(self, data_source, wiki_server):
        stored = wiki_server.add_page("/Home", "x")
        detail = await data_source.get_page_stats(WIKI_ID, stored.id, page_views_for_days=7)
        assert detail.id == stored.id
        assert [s.count for s in detail.view_stats] == [3, 7]
        assert detail.view_stats[0].day == datetime(2024, 5, 1, tzinfo=timezone.utc)
        request = wiki_server.requests[-1]
        assert request.url.path == f"{PAGES_PREFIX}/{stored.id}/stats"
        assert request.url.params["pageViewsForDays"] == "7"
