from models.category import Category
from presenters.base import Presenter
from services.category_service import CategoryService, filter_categories


class CategoriesPresenter(Presenter):
    def __init__(self, categories: CategoryService):
        super().__init__()
        self._categories = categories
        self._all: list[Category] = []
        self.items: list[Category] = []
        self.query = ""

    async def load(self):
        async with self._busy():
            self._all = await self._categories.get_all()
            self.items = filter_categories(self._all, self.query)

    def apply_search(self, query: str):
        self.query = query
        self.items = filter_categories(self._all, query)
