# media_catalog/services/search_service.py

import logging

from media_catalog.sa.repositories.media_item import MediaItemRepository
from media_catalog.models.media import MediaType
from media_catalog.models.search import SearchCriteria, SortCriteria, Page

logger = logging.getLogger(__name__)


class SearchService:
    """Paginated catalog search for front ends.

    Only title, type and genre narrow the results. Category filtering exists in
    the repository but is not part of this entry point, and results always come
    back ordered by title whatever `sort_by` asks for.
    """

    def __init__(self, repository: MediaItemRepository):
        self.repository = repository

    def search(self, criteria: SearchCriteria) -> Page:
        """Run a search.

        Args:
            criteria: Search criteria with a 0-based page number

        Returns:
            Page of (items, total_count)
        """
        if criteria.sort_by != SortCriteria.TITLE:
            logger.debug(f"Sort by {criteria.sort_by.value} is not supported, ordering by title")

        media_type = None
        if criteria.type and criteria.type.strip():
            media_type = MediaType.parse(criteria.type)
            if media_type is None:
                logger.debug(f"Ignoring unrecognised media type filter: {criteria.type!r}")

        return self.repository.get_paged(
            criteria.page + 1,
            criteria.page_size,
            search_term=criteria.title if criteria.title and criteria.title.strip() else None,
            media_type=media_type,
            category=None,
            genre=criteria.genre if criteria.genre and criteria.genre.strip() else None,
            include_deleted=False
        )
