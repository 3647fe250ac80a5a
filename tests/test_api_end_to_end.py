import httpx
import pytest

from conftest import store_url
from main import app
from routers.dependencies import get_image_store


@pytest.fixture
async def client(database, image_store):
    app.dependency_overrides[get_image_store] = lambda: image_store
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client
    app.dependency_overrides.clear()


async def _register_and_login(client, name, email, password="password123"):
    response = await client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text

    response = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["success"] is True
    token = body["resultData"]["accessToken"]
    return {"Authorization": f"Bearer {token}"}


def _image_files(count):
    return [("images", (f"photo{index}.jpg", b"\xff\xd8\xff\xe0", "image/jpeg")) for index in range(count)]


@pytest.mark.anyio
async def test_create_with_six_images_is_rejected_and_nothing_saved(client, image_store):
    headers = await _register_and_login(client, "Alice", "alice@example.com")

    response = await client.post(
        "/api/products/with-images",
        data={"name": "Camera", "price": "250"},
        files=_image_files(6),
        headers=headers,
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["statusCode"] == 400
    assert image_store.uploaded == []

    listing = await client.get("/api/products")
    assert listing.json()["resultData"]["total"] == 0


@pytest.mark.anyio
async def test_other_user_cannot_modify_but_can_read(client, image_store):
    alice = await _register_and_login(client, "Alice", "alice@example.com")
    created = await client.post(
        "/api/products/with-images",
        data={"name": "Camera", "price": "250", "description": "Mirrorless body"},
        files=_image_files(3),
        headers=alice,
    )
    assert created.status_code == 201, created.text
    product = created.json()["resultData"]
    assert len(product["images"]) == 3

    bob = await _register_and_login(client, "Bob", "bob@example.com")
    product_url = f"/api/products/{product['id']}"

    patched = await client.patch(product_url, json={"name": "Stolen"}, headers=bob)
    assert patched.status_code == 403
    assert patched.json()["message"] == "You can only update your own products"

    put = await client.put(product_url, data={"existingImages": "[]"}, headers=bob)
    assert put.status_code == 403

    malformed_put = await client.put(product_url, data={"existingImages": "not json"}, headers=bob)
    assert malformed_put.status_code == 403

    mistyped_patch = await client.patch(product_url, json={"price": "free"}, headers=bob)
    assert mistyped_patch.status_code == 403

    deleted = await client.delete(product_url, headers=bob)
    assert deleted.status_code == 403
    assert image_store.destroyed == []

    fetched = await client.get(product_url)
    assert fetched.status_code == 200
    data = fetched.json()["resultData"]
    assert data["name"] == "Camera"
    assert data["owner"] == {"id": data["ownerId"], "name": "Alice", "email": "alice@example.com"}
    assert "password" not in fetched.text.lower()


@pytest.mark.anyio
async def test_listing_shape_and_search(client):
    headers = await _register_and_login(client, "Alice", "alice@example.com")
    for index in range(12):
        response = await client.post(
            "/api/products",
            json={"name": f"Widget {index}", "price": 3, "description": "plain"},
            headers=headers,
        )
        assert response.status_code == 201
    await client.post(
        "/api/products",
        json={"name": "Gadget", "price": 3, "description": "Has a HIDDEN feature"},
        headers=headers,
    )

    page_two = (await client.get("/api/products", params={"page": 2, "limit": 10})).json()["resultData"]
    assert set(page_two) == {"items", "total", "page", "limit", "totalPages"}
    assert (page_two["total"], page_two["page"], page_two["limit"], page_two["totalPages"]) == (13, 2, 10, 2)
    assert len(page_two["items"]) == 3

    found = (await client.get("/api/products", params={"search": "hidden"})).json()["resultData"]
    assert [item["name"] for item in found["items"]] == ["Gadget"]

    bad = await client.get("/api/products", params={"page": "abc"})
    assert bad.status_code == 400


@pytest.mark.anyio
async def test_owner_update_and_delete_lifecycle(client, image_store):
    headers = await _register_and_login(client, "Alice", "alice@example.com")
    created = await client.post(
        "/api/products",
        json={"name": "Lamp", "price": "12.5", "images": [store_url("a"), "https://cdn.example.com/x.png"]},
        headers=headers,
    )
    product_id = created.json()["resultData"]["id"]
    product_url = f"/api/products/{product_id}"

    renamed = await client.patch(product_url, json={"name": "Desk Lamp"}, headers=headers)
    assert renamed.status_code == 200
    assert renamed.json()["resultData"]["images"] == [store_url("a"), "https://cdn.example.com/x.png"]

    replaced = await client.put(
        product_url,
        data={"existingImages": f'["{store_url("a")}"]', "price": "15"},
        files=_image_files(1),
        headers=headers,
    )
    assert replaced.status_code == 200, replaced.text
    result = replaced.json()["resultData"]
    assert result["images"] == [store_url("a"), store_url("photo0")]
    assert result["price"] == 15.0

    malformed = await client.put(product_url, data={"existingImages": "not json"}, headers=headers)
    assert malformed.status_code == 400

    mistyped = await client.patch(product_url, json={"price": "free"}, headers=headers)
    assert mistyped.status_code == 400
    assert mistyped.json()["message"] == "Price must be a number"

    cleared = await client.patch(product_url, json={"images": []}, headers=headers)
    assert cleared.json()["resultData"]["images"] == []

    deleted = await client.delete(product_url, headers=headers)
    assert deleted.status_code == 200
    assert (await client.get(product_url)).status_code == 404


@pytest.mark.anyio
async def test_delete_skips_foreign_urls(client, image_store):
    headers = await _register_and_login(client, "Alice", "alice@example.com")
    created = await client.post(
        "/api/products",
        json={"name": "Lamp", "price": 1, "images": [store_url("a"), "https://cdn.example.com/x.png"]},
        headers=headers,
    )
    product_id = created.json()["resultData"]["id"]

    response = await client.delete(f"/api/products/{product_id}", headers=headers)

    assert response.status_code == 200
    assert image_store.destroyed == ["catalog-products/a"]


@pytest.mark.anyio
async def test_auth_errors(client):
    await _register_and_login(client, "Alice", "alice@example.com")

    duplicate = await client.post(
        "/api/auth/register",
        json={"name": "Alice 2", "email": "alice@example.com", "password": "password123"},
    )
    assert duplicate.status_code == 409

    wrong = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrong-pass"})
    assert wrong.status_code == 401
    assert wrong.json()["message"] == "Invalid credentials"

    anonymous = await client.post("/api/products", json={"name": "Lamp", "price": 1})
    assert anonymous.status_code == 401

    forged = await client.get("/api/auth/profile", headers={"Authorization": "Bearer not-a-token"})
    assert forged.status_code == 401


@pytest.mark.anyio
async def test_profile_and_request_validation(client):
    headers = await _register_and_login(client, "Alice", "alice@example.com")

    profile = await client.get("/api/auth/profile", headers=headers)
    assert profile.json()["resultData"]["email"] == "alice@example.com"

    invalid = await client.post("/api/products", json={"name": "Lamp", "price": "free"}, headers=headers)
    assert invalid.status_code == 400
    assert invalid.json()["message"] == "Validation failed"

    negative = await client.post("/api/products", json={"name": "Lamp", "price": -1}, headers=headers)
    assert negative.status_code == 400
    assert negative.json()["error"][0]["field"] == "price"


@pytest.mark.anyio
async def test_upload_endpoints(client, image_store):
    headers = await _register_and_login(client, "Alice", "alice@example.com")

    single = await client.post(
        "/api/upload/single",
        files={"image": ("front.png", b"\x89PNG", "image/png")},
        headers=headers,
    )
    assert single.status_code == 201
    assert single.json()["resultData"]["imageUrl"] == store_url("front")

    rejected = await client.post(
        "/api/upload/single",
        files={"image": ("notes.txt", b"hello", "text/plain")},
        headers=headers,
    )
    assert rejected.status_code == 400

    many = await client.post("/api/upload/multiple", files=_image_files(2), headers=headers)
    assert many.status_code == 201
    assert len(many.json()["resultData"]["imageUrls"]) == 2

    anonymous = await client.post("/api/upload/multiple", files=_image_files(1))
    assert anonymous.status_code == 401
