"""Tests for TagService and the tag API."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from draftbox.core.exceptions import InvalidArgumentError, NotFoundError
from draftbox.db.models import DesignTag, Tag
from draftbox.services.design import DesignService
from draftbox.services.tag import TagService


async def count_rows(db_session, model) -> int:
    result = await db_session.execute(select(func.count()).select_from(model))
    return result.scalar()


# =============================================================================
# Create
# =============================================================================


class TestCreateTag:
    """Tests for create_tag."""

    async def test_creates_with_default_color(self, db_session):
        """A new tag gets the default color when none is given."""
        tag, created = await TagService(db_session).create_tag("Promo")

        assert created is True
        assert tag.name == "Promo"
        assert tag.color == "#6B7280"

    async def test_same_name_different_case_returns_existing(self, db_session):
        """Creating "promo" after "Promo" returns the first tag."""
        service = TagService(db_session)
        first, _ = await service.create_tag("Promo", "#FF0000")

        second, created = await service.create_tag("promo")

        assert created is False
        assert second.id == first.id
        assert second.name == "Promo"
        assert await count_rows(db_session, Tag) == 1

    async def test_existing_tag_color_not_changed(self, db_session):
        """Re-creating a tag does not recolor it."""
        service = TagService(db_session)
        await service.create_tag("Sale", "#00FF00")

        tag, _ = await service.create_tag("SALE", "#0000FF")

        assert tag.color == "#00FF00"

    async def test_whitespace_trimmed(self, db_session):
        """Surrounding whitespace is not part of the name."""
        service = TagService(db_session)
        tag, _ = await service.create_tag("  summer  ")
        again, created = await service.create_tag("Summer")

        assert tag.name == "summer"
        assert again.id == tag.id
        assert created is False

    async def test_non_ascii_name_returns_existing(self, db_session):
        """Names with accented letters are found again instead of inserted twice."""
        service = TagService(db_session)
        first, created = await service.create_tag("Émail")
        again, created_again = await service.create_tag("Émail")
        shouted, _ = await service.create_tag("ÉMAIL")

        assert created is True
        assert created_again is False
        assert again.id == first.id
        assert shouted.id == first.id
        assert await count_rows(db_session, Tag) == 1

    async def test_concurrent_create_returns_winner(self, db_session, monkeypatch):
        """If another writer inserts the name after our lookup, its tag is returned."""
        service = TagService(db_session)
        winner, _ = await service.create_tag("Promo")
        lookup = TagService.find_by_name
        calls = []

        async def stale_first_lookup(self, name):
            calls.append(name)
            if len(calls) == 1:
                return None
            return await lookup(self, name)

        monkeypatch.setattr(TagService, "find_by_name", stale_first_lookup)

        tag, created = await service.create_tag("promo", "#000000")

        assert created is False
        assert tag.id == winner.id
        assert tag.color == "#6B7280"
        assert await count_rows(db_session, Tag) == 1

    @pytest.mark.parametrize("name", ["", "   ", None])
    async def test_empty_name_rejected(self, db_session, name):
        """Tags need a non-blank name."""
        with pytest.raises(InvalidArgumentError):
            await TagService(db_session).create_tag(name)


# =============================================================================
# Update / delete
# =============================================================================


class TestUpdateTag:
    """Tests for update_tag."""

    async def test_rename_and_recolor(self, db_session):
        """Both name and color can change."""
        service = TagService(db_session)
        tag, _ = await service.create_tag("old")

        updated = await service.update_tag(tag.id, name="new", color="#123456")

        assert updated.name == "new"
        assert updated.color == "#123456"

    async def test_case_only_rename_allowed(self, db_session):
        """Changing only the case of a tag's own name is fine."""
        service = TagService(db_session)
        tag, _ = await service.create_tag("promo")

        updated = await service.update_tag(tag.id, name="PROMO")

        assert updated.name == "PROMO"

    async def test_rename_to_other_tags_name_rejected(self, db_session):
        """Renaming onto another tag's name would break uniqueness."""
        service = TagService(db_session)
        await service.create_tag("taken")
        tag, _ = await service.create_tag("free")

        with pytest.raises(InvalidArgumentError):
            await service.update_tag(tag.id, name="Taken")

    async def test_unknown_tag_not_found(self, db_session):
        """Updating a tag that does not exist fails with NotFound."""
        with pytest.raises(NotFoundError):
            await TagService(db_session).update_tag("missing", name="x")


class TestDeleteTag:
    """Tests for delete_tag."""

    async def test_delete_removes_associations(self, db_session):
        """Deleting a tag removes it from every design but keeps the designs."""
        tags = TagService(db_session)
        designs = DesignService(db_session)
        tag, _ = await tags.create_tag("doomed")
        a = await designs.create_design("A")
        b = await designs.create_design("B")
        await tags.add_tag_to_design(a.id, tag.id)
        await tags.add_tag_to_design(b.id, tag.id)

        await tags.delete_tag(tag.id)

        assert await count_rows(db_session, Tag) == 0
        assert await count_rows(db_session, DesignTag) == 0
        assert (await designs.get_design(a.id)).tags == []

    async def test_unknown_tag_not_found(self, db_session):
        """Deleting a tag that does not exist fails with NotFound."""
        with pytest.raises(NotFoundError):
            await TagService(db_session).delete_tag("missing")


# =============================================================================
# Design associations
# =============================================================================


class TestDesignTags:
    """Tests for add_tag_to_design and remove_tag_from_design."""

    async def test_add_twice_keeps_one_row(self, db_session):
        """The second add is a no-op."""
        tags = TagService(db_session)
        design = await DesignService(db_session).create_design("A")
        tag, _ = await tags.create_tag("promo")

        assert await tags.add_tag_to_design(design.id, tag.id) is True
        assert await tags.add_tag_to_design(design.id, tag.id) is False

        assert await count_rows(db_session, DesignTag) == 1

    async def test_remove_absent_is_noop(self, db_session):
        """Removing a tag the design does not carry succeeds quietly."""
        tags = TagService(db_session)
        design = await DesignService(db_session).create_design("A")
        tag, _ = await tags.create_tag("promo")

        assert await tags.remove_tag_from_design(design.id, tag.id) is False

    async def test_remove_present(self, db_session):
        """Removing a carried tag drops the association."""
        tags = TagService(db_session)
        designs = DesignService(db_session)
        design = await designs.create_design("A")
        tag, _ = await tags.create_tag("promo")
        await tags.add_tag_to_design(design.id, tag.id)

        assert await tags.remove_tag_from_design(design.id, tag.id) is True
        assert (await designs.get_design(design.id)).tags == []

    async def test_unknown_design_or_tag_not_found(self, db_session):
        """Both ends of the association must exist."""
        tags = TagService(db_session)
        design = await DesignService(db_session).create_design("A")
        tag, _ = await tags.create_tag("promo")

        with pytest.raises(NotFoundError):
            await tags.add_tag_to_design("missing", tag.id)
        with pytest.raises(NotFoundError):
            await tags.add_tag_to_design(design.id, "missing")


# =============================================================================
# Listing
# =============================================================================


class TestListTags:
    """Tests for get_all_tags."""

    async def test_usage_counts_and_order(self, db_session):
        """Tags are listed by name with the number of designs using them."""
        tags = TagService(db_session)
        designs = DesignService(db_session)
        winter, _ = await tags.create_tag("winter")
        autumn, _ = await tags.create_tag("autumn")
        await tags.create_tag("spring")
        for name in ["A", "B"]:
            design = await designs.create_design(name)
            await tags.add_tag_to_design(design.id, winter.id)
        design = await designs.create_design("C")
        await tags.add_tag_to_design(design.id, autumn.id)

        listing = await tags.get_all_tags()

        assert [(t["name"], t["usage_count"]) for t in listing] == [
            ("autumn", 1),
            ("spring", 0),
            ("winter", 2),
        ]


# =============================================================================
# API
# =============================================================================


class TestTagApi:
    """Tests for the /api/v1/tags endpoints."""

    async def test_create_then_recreate_status_codes(self, client):
        """A new tag returns 201; a case-insensitive duplicate returns 200 with the same ID."""
        first = await client.post("/api/v1/tags", json={"name": "Promo"})
        assert first.status_code == 201

        second = await client.post("/api/v1/tags", json={"name": "promo"})
        assert second.status_code == 200
        assert second.json()["id"] == first.json()["id"]

        listing = (await client.get("/api/v1/tags")).json()
        assert len(listing) == 1
        assert listing[0]["usage_count"] == 0

    async def test_blank_name_returns_400(self, client):
        """Blank tag names are rejected."""
        response = await client.post("/api/v1/tags", json={"name": "  "})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ARGUMENT"

    async def test_update_color_only(self, client):
        """PUT with only a color leaves the name alone."""
        tag = (await client.post("/api/v1/tags", json={"name": "promo"})).json()

        response = await client.put(f"/api/v1/tags/{tag['id']}", json={"color": "#ABCDEF"})

        assert response.status_code == 200
        assert response.json()["name"] == "promo"
        assert response.json()["color"] == "#ABCDEF"

    async def test_non_ascii_recreate_returns_200(self, client):
        """Re-creating an accented tag name is not a server error."""
        first = await client.post("/api/v1/tags", json={"name": "Café"})
        second = await client.post("/api/v1/tags", json={"name": "Café"})

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["id"] == first.json()["id"]

    async def test_delete(self, client):
        """DELETE removes the tag and unknown IDs return 404."""
        tag = (await client.post("/api/v1/tags", json={"name": "promo"})).json()

        assert (await client.delete(f"/api/v1/tags/{tag['id']}")).status_code == 200
        assert (await client.delete(f"/api/v1/tags/{tag['id']}")).status_code == 404
