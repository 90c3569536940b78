import base64
import logging
from typing import Any, AsyncIterator, BinaryIO, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel  # type: ignore

from azwiki.config.constants.azure_devops import (
    WIKI_AREA,
    ApiVersion,
    ContentType,
    HeaderName,
)
from azwiki.sources.client.azure_devops.azure_devops import AzureDevOpsClient
from azwiki.sources.client.http.http_request import BodyMode, HTTPRequest
from azwiki.sources.client.http.pending_response import PendingResponse
from azwiki.sources.external.azure_devops.wiki.materializer import (
    extract_etag,
    materialize,
)
from azwiki.sources.external.azure_devops.wiki.models import (
    GitVersionDescriptor,
    VersionControlRecursionType,
    WikiAttachment,
    WikiPage,
    WikiPageDetail,
    WikiPageMove,
    WikiPageMoveParameters,
    WikiType,
    WikiV2,
    WikiV2Collection,
)
from azwiki.sources.external.azure_devops.wiki.params import (
    build_query,
    version_query,
    wiki_type_value,
)

T = TypeVar("T", bound=BaseModel)

_JSON_CONTENT = {HeaderName.CONTENT_TYPE.value: ContentType.JSON.value}


class WikiDataSource:
    """Typed operations over the wiki, page, attachment and page-move resources.

    Metadata operations return pydantic models; page, attachment and page-move
    results carry the response `etag` in `e_tag`, to be passed back as
    `e_tag=` on the next edit. Content operations return the page as-is.
    """

    def __init__(
        self,
        client: AzureDevOpsClient,
        project: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Default init for the wiki data source."""
        self._client = client.get_client()
        if self._client is None:
            raise ValueError('HTTP client is not initialized')
        self.project = project or self._client.get_project()
        self.logger = logger or logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # core
    # ------------------------------------------------------------------

    def _dispatch(
        self,
        operation: str,
        method: str,
        api_version: ApiVersion,
        wiki_identifier: Optional[str] = None,
        sub_path: Optional[str] = None,
        query: Optional[Dict[str, str]] = None,
        body: Union[Dict[str, Any], BaseModel, str, bytes, None] = None,
        headers: Optional[Dict[str, str]] = None,
        body_mode: BodyMode = BodyMode.TEXT,
    ) -> PendingResponse:
        req = HTTPRequest(
            method=method,
            area=WIKI_AREA,
            project=self.project,
            resource_id=wiki_identifier,
            sub_path=sub_path,
            api_version=api_version.value,
            headers=dict(headers or {}),
            query=dict(query or {}),
            body=body,
            body_mode=body_mode,
            operation=operation,
        )
        return self._client.dispatch(req)

    async def _execute(self, model: Type[T], operation: str, method: str, api_version: ApiVersion, **kwargs: Any) -> T:
        """Dispatch, read the etag header and materialize the body into `model`"""
        pending = self._dispatch(operation, method, api_version, **kwargs)
        headers = await pending.headers()
        e_tag = extract_etag(headers)
        body = await pending.body()
        return materialize(body, model, injected={HeaderName.ETAG.value: e_tag}, operation=operation)

    # ------------------------------------------------------------------
    # wikis
    # ------------------------------------------------------------------

    async def create_wiki(
        self,
        name: str,
        wiki_type: WikiType,
        project_id: Optional[str] = None,
        repository_id: Optional[str] = None,
        mapped_path: Optional[str] = None,
        branch_name: Optional[str] = None,
    ) -> WikiV2:
        """Creates the wiki resource.

        Args:
            name: Wiki name
            wiki_type: Type of the wiki, sent lowercased
            project_id: ID of the project in which the wiki is to be created
            repository_id: Backing git repository, not required for project wikis
            mapped_path: Folder inside the repository shown as the wiki, not required for project wikis
            branch_name: Branch the wiki is published from, not required for project wikis
        """
        body: Dict[str, Any] = {
            "name": name,
            "type": wiki_type_value(wiki_type),
            "projectId": project_id,
            "repositoryId": repository_id,
            "mappedPath": mapped_path,
        }
        if branch_name is not None:
            body["version"] = {"version": branch_name}
        body = {k: v for k, v in body.items() if v is not None}
        return await self._execute(
            WikiV2, "create_wiki", "POST", ApiVersion.WIKI,
            body=body, headers=_JSON_CONTENT,
        )

    async def get_wiki(self, wiki_identifier: str) -> WikiV2:
        """Gets the wiki corresponding to the wiki ID or wiki name provided."""
        return await self._execute(
            WikiV2, "get_wiki", "GET", ApiVersion.WIKI, wiki_identifier=wiki_identifier,
        )

    async def get_wikis(self) -> WikiV2Collection:
        """Gets all wikis in a project or collection."""
        return await self._execute(WikiV2Collection, "get_wikis", "GET", ApiVersion.WIKI)

    async def update_wiki(
        self,
        wiki_identifier: str,
        name: Optional[str] = None,
        versions: Optional[List[GitVersionDescriptor]] = None,
    ) -> WikiV2:
        """Renames a wiki or changes the versions (branches) it publishes."""
        body: Dict[str, Any] = {}
        if name is not None:
            body["name"] = name
        if versions is not None:
            body["versions"] = [v.model_dump(by_alias=True, exclude_none=True, mode="json") for v in versions]
        return await self._execute(
            WikiV2, "update_wiki", "PATCH", ApiVersion.WIKI,
            wiki_identifier=wiki_identifier, body=body, headers=_JSON_CONTENT,
        )

    async def delete_wiki(self, wiki_identifier: str) -> WikiV2:
        """Deletes the wiki corresponding to the wiki ID or wiki name provided."""
        return await self._execute(
            WikiV2, "delete_wiki", "DELETE", ApiVersion.WIKI, wiki_identifier=wiki_identifier,
        )

    # ------------------------------------------------------------------
    # attachments and page moves
    # ------------------------------------------------------------------

    async def create_attachment(
        self,
        wiki_identifier: str,
        name: str,
        content: Union[bytes, BinaryIO],
        version: Optional[GitVersionDescriptor] = None,
    ) -> WikiAttachment:
        """Creates an attachment in the wiki.

        The service only accepts the file as a base64 string, sent as an
        octet stream.
        """
        raw = content if isinstance(content, bytes) else content.read()
        query = build_query(name=name, **version_query(version))
        return await self._execute(
            WikiAttachment, "create_attachment", "PUT", ApiVersion.WIKI_PAGES,
            wiki_identifier=wiki_identifier,
            sub_path="attachments",
            query=query,
            body=base64.b64encode(raw).decode("ascii"),
            headers={HeaderName.CONTENT_TYPE.value: ContentType.OCTET_STREAM.value},
        )

    async def create_page_move(
        self,
        wiki_identifier: str,
        parameters: WikiPageMoveParameters,
        comment: Optional[str] = None,
        version: Optional[GitVersionDescriptor] = None,
    ) -> WikiPageMove:
        """Moves a page to `parameters.new_path` and/or reorders it among its siblings."""
        query = build_query(comment=comment, **version_query(version))
        return await self._execute(
            WikiPageMove, "create_page_move", "POST", ApiVersion.WIKI_PAGES,
            wiki_identifier=wiki_identifier,
            sub_path="pagemoves",
            query=query,
            body=parameters,
            headers=_JSON_CONTENT,
        )

    # ------------------------------------------------------------------
    # pages
    # ------------------------------------------------------------------

    async def create_or_update_page(
        self,
        wiki_identifier: str,
        path: str,
        content: str,
        comment: Optional[str] = None,
        e_tag: Optional[str] = None,
        version: Optional[GitVersionDescriptor] = None,
    ) -> WikiPage:
        """Creates or edits a wiki page.

        Editing an existing page requires the `e_tag` of the revision being
        replaced; creating a page must omit it.
        """
        query = build_query(path=path, comment=comment, **version_query(version))
        headers = dict(_JSON_CONTENT)
        if e_tag is not None:
            headers[HeaderName.IF_MATCH.value] = e_tag
        return await self._execute(
            WikiPage, "create_or_update_page", "PUT", ApiVersion.WIKI_PAGES,
            wiki_identifier=wiki_identifier,
            sub_path="pages",
            query=query,
            body={"content": content},
            headers=headers,
        )

    async def update_page_by_id(
        self,
        wiki_identifier: str,
        page_id: int,
        content: str,
        e_tag: str,
        comment: Optional[str] = None,
    ) -> WikiPage:
        """Edits a wiki page addressed by id."""
        headers = dict(_JSON_CONTENT)
        headers[HeaderName.IF_MATCH.value] = e_tag
        return await self._execute(
            WikiPage, "update_page_by_id", "PATCH", ApiVersion.WIKI_PAGES,
            wiki_identifier=wiki_identifier,
            sub_path=f"pages/{page_id}",
            query=build_query(comment=comment),
            body={"content": content},
            headers=headers,
        )

    async def get_page(
        self,
        wiki_identifier: str,
        path: str,
        include_content: Optional[bool] = None,
        recursion_level: Optional[VersionControlRecursionType] = None,
        version: Optional[GitVersionDescriptor] = None,
    ) -> WikiPage:
        """Gets metadata of the wiki page for the provided path."""
        query = build_query(
            path=path,
            includeContent=include_content,
            recursionLevel=recursion_level,
            **version_query(version),
        )
        return await self._execute(
            WikiPage, "get_page", "GET", ApiVersion.WIKI_PAGES,
            wiki_identifier=wiki_identifier, sub_path="pages", query=query,
        )

    async def get_page_by_id(
        self,
        wiki_identifier: str,
        page_id: int,
        include_content: Optional[bool] = None,
        recursion_level: Optional[VersionControlRecursionType] = None,
    ) -> WikiPage:
        """Gets metadata of the wiki page for the provided page id."""
        query = build_query(includeContent=include_content, recursionLevel=recursion_level)
        return await self._execute(
            WikiPage, "get_page_by_id", "GET", ApiVersion.WIKI_PAGES,
            wiki_identifier=wiki_identifier, sub_path=f"pages/{page_id}", query=query,
        )

    async def get_page_content(self, wiki_identifier: str, page_id: int) -> str:
        """Raw markdown of a page, exactly as stored."""
        pending = self._dispatch(
            "get_page_content", "GET", ApiVersion.WIKI_PAGES,
            wiki_identifier=wiki_identifier,
            sub_path=f"pages/{page_id}",
            headers={HeaderName.ACCEPT.value: ContentType.TEXT.value},
        )
        return await pending.body()

    async def get_page_as_zip(self, wiki_identifier: str, page_id: int) -> AsyncIterator[bytes]:
        """Page archive as a byte stream.

        The connection stays open until the iterator is exhausted or closed.
        """
        pending = self._dispatch(
            "get_page_as_zip", "GET", ApiVersion.WIKI_PAGES,
            wiki_identifier=wiki_identifier,
            sub_path=f"pages/{page_id}",
            headers={HeaderName.ACCEPT.value: ContentType.ZIP.value},
            body_mode=BodyMode.STREAM,
        )
        return await pending.body()

    async def delete_page(
        self,
        wiki_identifier: str,
        path: str,
        comment: Optional[str] = None,
        version: Optional[GitVersionDescriptor] = None,
    ) -> WikiPage:
        """Deletes the page at `path`; the result carries the etag of the deletion."""
        query = build_query(path=path, comment=comment, **version_query(version))
        return await self._execute(
            WikiPage, "delete_page", "DELETE", ApiVersion.WIKI_PAGES,
            wiki_identifier=wiki_identifier, sub_path="pages", query=query, headers=_JSON_CONTENT,
        )

    async def delete_page_by_id(
        self,
        wiki_identifier: str,
        page_id: int,
        comment: Optional[str] = None,
        version: Optional[GitVersionDescriptor] = None,
    ) -> WikiPage:
        """Deletes the page with id `page_id`; the result carries the etag of the deletion."""
        return await self._execute(
            WikiPage, "delete_page_by_id", "DELETE", ApiVersion.WIKI_PAGES,
            wiki_identifier=wiki_identifier,
            sub_path=f"pages/{page_id}",
            query=build_query(comment=comment, **version_query(version)),
            headers=_JSON_CONTENT,
        )

    async def get_page_stats(
        self,
        wiki_identifier: str,
        page_id: int,
        page_views_for_days: Optional[int] = None,
    ) -> WikiPageDetail:
        """Page id, path and daily view counts."""
        return await self._execute(
            WikiPageDetail, "get_page_stats", "GET", ApiVersion.WIKI_PAGES,
            wiki_identifier=wiki_identifier,
            sub_path=f"pages/{page_id}/stats",
            query=build_query(pageViewsForDays=page_views_for_days),
        )
