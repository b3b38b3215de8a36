import pytest

from conftest import PNG_BYTES, stored_files, upload

pytestmark = pytest.mark.e2e

PUMPS = {"name": "Pumps", "description": "Industrial pumps unit"}


def test_category_lifecycle(client):
    response = client.post("/categories", data=PUMPS)
    assert response.status_code == 201
    created = response.json()
    assert created["name"] == "Pumps"
    assert created["description"] == "Industrial pumps unit"
    assert isinstance(created["id"], int)

    response = client.get(f"/categories/{created['id']}")
    assert response.status_code == 200
    assert response.json() == created

    response = client.get("/categories")
    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == [created["id"]]

    response = client.delete(f"/categories/{created['id']}")
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Successfully deleted 'Pumps'"}

    response = client.get(f"/categories/{created['id']}")
    assert response.status_code == 404
    assert response.json() == {"error": "Category not found"}


def test_duplicate_name_is_conflict(client):
    assert client.post("/categories", data=PUMPS).status_code == 201

    response = client.post(
        "/categories", data={"name": "Pumps", "description": "Second pumps entry"}
    )
    assert response.status_code == 409
    assert response.json() == {"error": "Category already exists"}
    assert len(client.get("/categories").json()) == 1


def test_missing_fields_report_details(client):
    response = client.post("/categories", data={"name": "P"})
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation error"
    assert {d["path"] for d in body["details"]} == {"name", "description"}


def test_non_numeric_id_is_rejected(client):
    response = client.get("/categories/abc")
    assert response.status_code == 400
    assert response.json() == {
        "error": "Validation error",
        "details": [{"path": "id", "message": "Invalid category ID format"}],
    }


def test_disallowed_image_type_creates_nothing(client, upload_root):
    response = client.post(
        "/categories",
        data=PUMPS,
        files={"image": upload("pumps.gif", "image/gif", b"GIF89a")},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Only image files (jpeg, jpg, png, webp) are allowed"}
    assert client.get("/categories").json() == []
    assert stored_files(upload_root) == []


def test_image_is_served_and_removed_with_category(client, upload_root):
    response = client.post("/categories", data=PUMPS, files={"image": upload("pumps.png")})
    assert response.status_code == 201
    category = response.json()
    assert category["imageUrl"].startswith("/uploads/categories/")

    image = client.get(category["imageUrl"])
    assert image.status_code == 200
    assert image.content == PNG_BYTES

    assert client.delete(f"/categories/{category['id']}").status_code == 200
    assert client.get(category["imageUrl"]).status_code == 404
    assert stored_files(upload_root) == []


def test_update_replaces_image(client, upload_root):
    category = client.post(
        "/categories", data=PUMPS, files={"image": upload("old.png")}
    ).json()

    response = client.put(
        f"/categories/{category['id']}",
        data={"description": "Rotary and piston pumps"},
        files={"image": upload("new.png")},
    )
    assert response.status_code == 200
    updated = response.json()
    assert updated["name"] == "Pumps"
    assert updated["description"] == "Rotary and piston pumps"
    assert updated["imageUrl"] != category["imageUrl"]
    assert client.get(category["imageUrl"]).status_code == 404
    assert len(stored_files(upload_root)) == 1


def test_update_and_delete_missing(client):
    assert client.put("/categories/999", data={"name": "Motors"}).status_code == 404
    assert client.delete("/categories/999").status_code == 404


@pytest.mark.parametrize("host", ["https://cdn.example.com", "http://testserver"])
def test_deleting_a_category_never_removes_product_images(client, host):
    product = client.post(
        "/products",
        data={"name": "Pump X1", "description": "Centrifugal pump for clean water"},
        files=[("images", upload())],
    ).json()
    product_image = product["machineData"]["images"][0]

    category = client.post(
        "/categories", data={**PUMPS, "imageUrl": f"{host}{product_image}"}
    ).json()
    assert client.delete(f"/categories/{category['id']}").status_code == 200

    assert client.get(product_image).status_code == 200
