import pytest

from models.category import Category, Direction
from services.category_service import filter_categories

from conftest import GROCERIES, RESTAURANTS, SALARY


@pytest.mark.asyncio
async def test_get_all_replaces_mirror(services, api):
    mirror = services.categories._mirror
    mirror.replace_all([Category(99, "Old", "🗑", Direction.OUTCOME)])

    assert await services.categories.get_all() == [SALARY, GROCERIES, RESTAURANTS]
    assert mirror.get_all() == [SALARY, GROCERIES, RESTAURANTS]


@pytest.mark.asyncio
async def test_offline_reads_mirror(services, api):
    await services.categories.get_all()
    api.offline = True

    assert await services.categories.get_all() == [SALARY, GROCERIES, RESTAURANTS]
    assert await services.categories.get_by_direction(Direction.INCOME) == [SALARY]


@pytest.mark.asyncio
async def test_direction_fetch_keeps_other_direction(services, api):
    await services.categories.get_all()
    api.categories = [SALARY, RESTAURANTS]

    await services.categories.get_by_direction(Direction.OUTCOME)

    assert services.categories._mirror.get_all() == [SALARY, RESTAURANTS]


def test_search_is_case_insensitive_subsequence():
    cats = [SALARY, GROCERIES, RESTAURANTS]
    assert filter_categories(cats, "grc") == [GROCERIES]
    assert filter_categories(cats, "RST") == [RESTAURANTS]
    assert filter_categories(cats, "  ") == cats
    assert filter_categories(cats, "xyz") == []


@pytest.mark.asyncio
async def test_search_by_direction(services, api):
    assert await services.categories.search("a", Direction.INCOME) == [SALARY]
