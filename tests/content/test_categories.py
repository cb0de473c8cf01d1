"""Category administration."""

from __future__ import annotations

import pytest

from fincomm import errors
from fincomm.content.categories import CategoryService
from fincomm.content.kinds import ACADEMY, BLOG


async def test_list_counts_only_published(db_session, make_category, make_post) -> None:
    credit = await make_category(slug="credit", name_pt="Crédito")
    await make_category(slug="payments", name_pt="Pagamentos")
    await make_post(category_id=credit.id)
    await make_post(category_id=credit.id)
    await make_post(published=False, category_id=credit.id)

    listed = await CategoryService(db_session, BLOG).list_categories()

    assert [c["slug"] for c in listed] == ["credit", "payments"]
    assert listed[0]["entity_count"] == 2
    assert listed[1]["entity_count"] == 0


async def test_kinds_have_separate_categories(db_session, make_category) -> None:
    await make_category(kind="blog", slug="shared-name")
    assert await CategoryService(db_session, ACADEMY).list_categories() == []


async def test_create_and_conflict(db_session) -> None:
    svc = CategoryService(db_session, BLOG)
    category = await svc.create("Regulação", "Regulation", "regulation")
    await db_session.commit()
    assert category.id is not None

    with pytest.raises(errors.ConflictError):
        await svc.create("Outra", "Other", "regulation")


async def test_same_slug_allowed_across_kinds(db_session) -> None:
    await CategoryService(db_session, BLOG).create("Pix", "Pix", "pix")
    await CategoryService(db_session, ACADEMY).create("Pix", "Pix", "pix")
    await db_session.commit()


async def test_update(db_session, make_category) -> None:
    category = await make_category(slug="old-slug")
    svc = CategoryService(db_session, BLOG)
    updated = await svc.update(category.id, {"slug": "new-slug", "name_en": "Renamed"})
    await db_session.commit()
    assert updated.slug == "new-slug"
    assert updated.name_en == "Renamed"


async def test_update_slug_conflict(db_session, make_category) -> None:
    await make_category(slug="taken")
    category = await make_category(slug="mine")
    with pytest.raises(errors.ConflictError):
        await CategoryService(db_session, BLOG).update(category.id, {"slug": "taken"})


async def test_update_missing(db_session) -> None:
    with pytest.raises(errors.NotFoundError):
        await CategoryService(db_session, BLOG).update(404, {"name_en": "x"})


async def test_delete_unused(db_session, make_category) -> None:
    category = await make_category(kind="academy")
    svc = CategoryService(db_session, ACADEMY)
    await svc.delete(category.id)
    await db_session.commit()
    assert await svc.list_categories() == []


async def test_delete_in_use_conflicts(db_session, make_category, make_post) -> None:
    category = await make_category()
    await make_post(published=False, category_id=category.id)
    with pytest.raises(errors.ConflictError, match="1 associated"):
        await CategoryService(db_session, BLOG).delete(category.id)


async def test_delete_missing(db_session) -> None:
    with pytest.raises(errors.NotFoundError):
        await CategoryService(db_session, BLOG).delete(999)


@pytest.mark.parametrize("field", ["slug", "name_pt", "name_en"])
async def test_update_cannot_clear_required_field(db_session, make_category, field) -> None:
    category = await make_category()
    with pytest.raises(errors.ValidationError, match=f"{field} cannot be null"):
        await CategoryService(db_session, BLOG).update(category.id, {field: None})
