"""
Cursor-paginated search over data objects.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable

from dxport.logging import get_logger
from dxport.models.data import (
    FindDataOptions,
    FindDataResponse,
    FindDataResult,
    FindDataScope,
    ListFolderOptions,
    NameFilter,
    ObjectClass,
)
from dxport.models.location import RemoteLocation
from dxport.paths import ROOT, is_file_id, split_path
from dxport.services.base import BaseService, with_retries

if TYPE_CHECKING:
    from dxport.api.client import AsyncPlatformClient

logger = get_logger(__name__)

FetchPage = Callable[[FindDataOptions], Awaitable[FindDataResponse]]


async def paginate(
    fetch_page: FetchPage,
    criteria: FindDataOptions,
    retries: int = 0,
) -> list[FindDataResult]:
    """
    Collect every page of a search.

    Each request carries the previous page's ``next`` cursor as ``starting``;
    the loop ends on the first page without a cursor. Results keep the
    platform's page order. Any error aborts the whole search.

    Args:
        fetch_page: Coroutine fetching one page for the given criteria.
        criteria: Search criteria; not modified.
        retries: Extra attempts per page on transport failure.
    """
    results: list[FindDataResult] = []
    page_criteria = criteria
    pages = 0

    while True:
        current = page_criteria
        response = await with_retries(
            lambda: fetch_page(current),
            retries,
            f"search page {pages + 1}",
        )
        pages += 1
        results.extend(response.results)

        if response.next is None:
            break
        page_criteria = criteria.model_copy(update={"starting": response.next})

    logger.debug(f"Search returned {len(results)} results in {pages} pages")
    return results


class SearchService(BaseService):
    """
    Data object search.

    Example:
        >>> search = SearchService(client)
        >>> files = await search.find_files_by_path(location)
    """

    def __init__(self, client: AsyncPlatformClient, retries: int = 0) -> None:
        super().__init__(client)
        self._retries = retries

    async def find_data(self, options: FindDataOptions) -> list[FindDataResult]:
        """Run ``system/findDataObjects`` across all pages."""
        return await paginate(self._client.search_page, options, self._retries)

    async def find_files_by_path(self, location: RemoteLocation) -> list[FindDataResult]:
        """
        Find files matching a resolved location.

        Identifiers are looked up directly; paths match the basename as a
        glob inside the parent folder, without recursion.
        """
        if is_file_id(location.path):
            options = FindDataOptions(
                object_class=ObjectClass.FILE,
                id=[location.path],
                scope=FindDataScope(project=location.container_id),
                describe=True,
            )
        else:
            folder, name = split_path(location.path)
            options = FindDataOptions(
                object_class=ObjectClass.FILE,
                name=NameFilter(glob=name),
                scope=FindDataScope(
                    project=location.container_id,
                    folder=folder,
                    recurse=False,
                ),
                describe=True,
            )
        return await self.find_data(options)

    async def find_folder_files(self, container_id: str, folder: str) -> list[FindDataResult]:
        """All files under a folder, recursively."""
        options = FindDataOptions(
            object_class=ObjectClass.FILE,
            scope=FindDataScope(project=container_id, folder=folder, recurse=True),
            describe=True,
        )
        return await self.find_data(options)

    async def is_folder(self, location: RemoteLocation, include_hidden: bool = False) -> bool:
        """Check whether a resolved path names an existing folder."""
        if is_file_id(location.path):
            return False
        if location.path.rstrip(ROOT) == "":
            return True

        parent, _ = split_path(location.path)
        listing = await self._client.list_folder(
            location.container_id,
            ListFolderOptions(
                folder=parent,
                only="folders",
                describe=False,
                include_hidden=include_hidden,
                has_subfolder_flags=True,
            ),
        )
        return location.path.rstrip(ROOT) in listing.folder_names
