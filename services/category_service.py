import logging

from database.storage import CategoriesStorage
from models.category import Category, Direction
from network.api import FinanceAPI
from network.errors import NoConnectivityError
from utils.text import is_subsequence

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, api: FinanceAPI, mirror: CategoriesStorage):
        self._api = api
        self._mirror = mirror

    async def get_all(self) -> list[Category]:
        try:
            categories = await self._api.fetch_categories()
        except NoConnectivityError:
            logger.info("Offline: serving categories from the local mirror")
            return self._mirror.get_all()
        self._mirror.replace_all(categories)
        return categories

    async def get_by_direction(self, direction: Direction) -> list[Category]:
        try:
            categories = await self._api.fetch_categories_by_direction(direction)
        except NoConnectivityError:
            logger.info("Offline: serving %s categories from the local mirror", direction.value)
            return self._mirror.get_by_direction(direction)
        self._mirror.replace_all(categories, direction)
        return categories

    async def search(self, query: str, direction: Direction | None = None) -> list[Category]:
        if direction is None:
            categories = await self.get_all()
        else:
            categories = await self.get_by_direction(direction)
        return filter_categories(categories, query)


def filter_categories(categories: list[Category], query: str) -> list[Category]:
    """Names containing the query's letters in order, case-insensitively."""
    query = query.strip()
    if not query:
        return list(categories)
    return [c for c in categories if is_subsequence(query, c.name)]
