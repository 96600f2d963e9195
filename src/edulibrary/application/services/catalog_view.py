from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from edulibrary.application.services.catalog_service import CatalogService
from edulibrary.application.services.query_builder import admin_search_predicate
from edulibrary.core.errors import LibraryError
from edulibrary.domain.models.query import FilterState
from edulibrary.domain.models.resource import Resource

logger = logging.getLogger(__name__)

VIEW_LOADING = "loading"
VIEW_READY = "ready"
VIEW_EMPTY = "empty"
VIEW_ERROR = "error"


@dataclass(slots=True)
class CatalogView:
    """One page's transient copy of the catalog.

    The list goes stale as soon as another client writes; it is only brought
    back in line by refresh() or by the local patch applied after a download.
    """

    service: CatalogService
    filter_state: FilterState = field(default_factory=FilterState)
    limit: int | None = None
    resources: list[Resource] = field(default_factory=list)
    error: str | None = None
    loaded: bool = False

    @property
    def status(self) -> str:
        if self.error is not None:
            return VIEW_ERROR
        if not self.loaded:
            return VIEW_LOADING
        return VIEW_READY if self.resources else VIEW_EMPTY

    def refresh(self, filter_state: FilterState | None = None) -> str:
        if filter_state is not None:
            self.filter_state = filter_state
        try:
            self.resources = self.service.list_resources(self.filter_state, limit=self.limit)
        except LibraryError as exc:
            logger.error("Catalog listing failed: %s", exc)
            self.error = str(exc)
            self.loaded = True
            return self.status
        self.error = None
        self.loaded = True
        return self.status

    def download(self, resource_id: str) -> Resource:
        """Bump the counter in the store, then patch the held copy in place."""
        updated = self.service.increment_download_count(resource_id)
        self.apply_download_increment(resource_id)
        return updated

    def apply_download_increment(self, resource_id: str) -> bool:
        for idx, resource in enumerate(self.resources):
            if resource.id == resource_id:
                self.resources[idx] = replace(resource, download_count=resource.download_count + 1)
                return True
        return False

    def search_local(self, term: str | None) -> list[Resource]:
        predicate = admin_search_predicate(term)
        return [resource for resource in self.resources if predicate.matches(resource)]
