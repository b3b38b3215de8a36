"""
Tests for CategoryService: uniqueness, image lifecycle, not-found handling.
"""
from pathlib import Path

import pytest

from catalog_api.core.exceptions import (
    BadRequest,
    Conflict,
    NotFound,
    PersistenceError,
    UniqueConstraintViolation,
    ValidationError,
)
from catalog_api.services.category_service import CategoryService
from catalog_api.services.media_store import CATEGORIES, PRODUCTS, IncomingFile

from conftest import png, stored_files

PUMPS = {"name": "Pumps", "description": "Industrial pumps unit"}


@pytest.fixture
def service(test_db, media):
    return CategoryService(test_db, media)


@pytest.mark.unit
class TestCreate:
    def test_create_without_image(self, service):
        category = service.create(PUMPS)
        assert category.id is not None
        assert category.name == "Pumps"
        assert category.image_url is None

    def test_duplicate_name_is_conflict_and_no_second_row(self, service):
        service.create(PUMPS)
        with pytest.raises(Conflict, match="Category already exists"):
            service.create({**PUMPS, "description": "Another description"})
        assert len(service.list()) == 1

    def test_create_with_image(self, service, media):
        category = service.create(PUMPS, png())
        assert category.image_url.startswith("/uploads/categories/")
        assert media.exists(category.image_url)

    def test_uploaded_file_wins_over_image_url(self, service):
        category = service.create(
            {**PUMPS, "imageUrl": "http://cdn.example.com/pumps.png"}, png()
        )
        assert category.image_url.startswith("/uploads/categories/")

    def test_image_url_field_is_kept(self, service):
        category = service.create({**PUMPS, "imageUrl": "http://cdn.example.com/pumps.png"})
        assert category.image_url == "http://cdn.example.com/pumps.png"

    def test_invalid_payload(self, service, upload_root):
        with pytest.raises(ValidationError):
            service.create({"name": "P"}, png())
        assert service.list() == []
        assert stored_files(upload_root) == []

    def test_rejected_image_creates_nothing(self, service, upload_root):
        with pytest.raises(BadRequest):
            service.create(PUMPS, IncomingFile("pumps.gif", "image/gif", b"GIF89a"))
        assert service.list() == []
        assert stored_files(upload_root) == []

    def test_failed_insert_removes_stored_image(self, service, upload_root, monkeypatch):
        def broken_insert(**values):
            raise PersistenceError("connection lost")

        monkeypatch.setattr(service.categories, "insert", broken_insert)
        with pytest.raises(PersistenceError):
            service.create(PUMPS, png())
        assert stored_files(upload_root) == []


@pytest.mark.unit
class TestReadUpdateDelete:
    def test_get_and_list(self, service):
        pumps = service.create(PUMPS)
        valves = service.create({"name": "Valves", "description": "Gate and ball valves"})

        assert service.get(pumps.id).name == "Pumps"
        assert [c.id for c in service.list()] == [pumps.id, valves.id]
        with pytest.raises(NotFound, match="Category not found"):
            service.get(999)

    def test_partial_update(self, service):
        pumps = service.create(PUMPS)
        updated = service.update(pumps.id, {"description": "Rotary and piston pumps"})
        assert updated.name == "Pumps"
        assert updated.description == "Rotary and piston pumps"

    def test_update_missing(self, service):
        with pytest.raises(NotFound):
            service.update(999, {"name": "Motors"})

    def test_rename_onto_existing_name_is_conflict(self, service):
        service.create(PUMPS)
        valves = service.create({"name": "Valves", "description": "Gate and ball valves"})
        with pytest.raises(Conflict):
            service.update(valves.id, {"name": "Pumps"})

    def test_new_image_replaces_old_file(self, service, media):
        pumps = service.create(PUMPS, png("old.png"))
        old_url = pumps.image_url

        updated = service.update(pumps.id, {}, png("new.png"))
        assert updated.image_url != old_url
        assert media.exists(updated.image_url)
        assert not media.exists(old_url)

    def test_delete_removes_row_and_image(self, service, media, upload_root):
        pumps = service.create(PUMPS, png())
        image_url = pumps.image_url

        result = service.delete(pumps.id)
        assert result == {"success": True, "message": "Successfully deleted 'Pumps'"}
        assert not media.exists(image_url)
        assert stored_files(upload_root) == []
        with pytest.raises(NotFound):
            service.get(pumps.id)

    def test_delete_missing_is_not_found(self, service):
        with pytest.raises(NotFound):
            service.delete(999)

    def test_delete_survives_image_removal_failure(self, service, media, monkeypatch):
        pumps = service.create(PUMPS, png())

        def locked(self, *args, **kwargs):
            raise PermissionError("locked")

        monkeypatch.setattr(Path, "unlink", locked)

        assert service.delete(pumps.id)["success"] is True
        assert service.list() == []

    def test_failed_update_keeps_old_image(self, service, media, upload_root, monkeypatch):
        pumps = service.create(PUMPS, png("old.png"))
        old_url = pumps.image_url

        def racing_update(category_id, values):
            raise UniqueConstraintViolation("UNIQUE constraint failed: categories.name")

        monkeypatch.setattr(service.categories, "update", racing_update)
        with pytest.raises(Conflict):
            service.update(pumps.id, {"name": "Valves"}, png("new.png"))

        assert media.exists(old_url)
        assert stored_files(upload_root) == [media.path_for(old_url)]
        assert service.get(pumps.id).image_url == old_url


@pytest.mark.unit
class TestImageOwnership:
    @pytest.fixture
    def service(self, test_db, media):
        return CategoryService(test_db, media, base_url="http://testserver/")

    @pytest.mark.parametrize("host", ["https://cdn.example.com", "http://testserver"])
    def test_delete_leaves_other_entities_files_alone(self, service, media, host):
        product_image = media.store(PRODUCTS, png())
        pumps = service.create({**PUMPS, "imageUrl": f"{host}{product_image}"})

        service.delete(pumps.id)
        assert media.exists(product_image)

    def test_replacing_a_foreign_url_keeps_the_file(self, service, media):
        product_image = media.store(PRODUCTS, png())
        pumps = service.create({**PUMPS, "imageUrl": f"https://cdn.example.com{product_image}"})

        service.update(pumps.id, {}, png("new.png"))
        assert media.exists(product_image)

    def test_own_uploaded_url_is_removed_with_the_category(self, service, media):
        uploaded = media.store(CATEGORIES, png())
        pumps = service.create({**PUMPS, "imageUrl": f"http://testserver{uploaded}"})

        service.delete(pumps.id)
        assert not media.exists(uploaded)
