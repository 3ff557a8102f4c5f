# flake8: noqa
import pytest
from fastapi.testclient import TestClient

from recipeshare import app as app_module
from recipeshare.engine import InteractionEngine
from recipeshare.schemas import Category
from recipeshare.store import RecipeStore


client = TestClient(app_module.app)

ALICE = {"X-User-Id": "alice", "X-User-Name": "Alice"}
BOB = {"X-User-Id": "bob", "X-User-Name": "Bob"}


@pytest.fixture(autouse=True)
def fresh_engine(make_recipe):
    # every test gets its own store, seeded with two recipes
    store = RecipeStore()
    store.upsert(make_recipe(id="r1", title="Doro Wat", tags=["Doro Wat", "stew"], likes=5, authorId="alice"))
    store.upsert(make_recipe(id="r2", title="Shiro", tags=["Shiro"], region="Tigray"))
    engine = InteractionEngine(store)
    cats = [Category(id="2", name="Doro Wat"), Category(id="5", name="Shiro")]
    app_module.app.dependency_overrides[app_module.get_engine] = lambda: engine
    app_module.app.dependency_overrides[app_module.get_categories] = lambda: cats
    yield engine
    app_module.app.dependency_overrides.clear()


def test_list_and_category_filter():
    res = client.get("/api/recipes")
    assert res.status_code == 200
    assert [r["id"] for r in res.json()] == ["r1", "r2"]

    # by category id and by name
    res = client.get("/api/recipes?category=5")
    assert [r["id"] for r in res.json()] == ["r2"]
    res = client.get("/api/recipes?category=doro%20wat")
    assert [r["id"] for r in res.json()] == ["r1"]

    res = client.get("/api/recipes?category=Tigray&by=region")
    assert [r["id"] for r in res.json()] == ["r2"]

    res = client.get("/api/recipes?category=Pasta")
    assert res.json() == []


def test_search_query():
    res = client.get("/api/recipes?q=shi")
    assert [r["id"] for r in res.json()] == ["r2"]


def test_categories_endpoint():
    res = client.get("/api/categories")
    assert res.status_code == 200
    assert [c["name"] for c in res.json()] == ["Doro Wat", "Shiro"]


def test_recipe_json_uses_camel_case():
    res = client.get("/api/recipes/r1")
    assert res.status_code == 200
    data = res.json()
    for key in ("imageUrl", "prepTime", "ratingCount", "isLiked", "isSaved", "authorId"):
        assert key in data


def test_unknown_recipe_404():
    res = client.get("/api/recipes/nope")
    assert res.status_code == 404
    res = client.post("/api/recipes/nope/rating", json={"value": 3}, headers=ALICE)
    assert res.status_code == 404


def test_like_is_idempotent_and_per_viewer():
    res = client.post("/api/recipes/r1/like", headers=ALICE)
    assert res.status_code == 200
    assert res.json()["likes"] == 6 and res.json()["isLiked"] is True

    res = client.post("/api/recipes/r1/like", headers=ALICE)
    assert res.json()["likes"] == 6

    res = client.get("/api/recipes/r1", headers=BOB)
    assert res.json()["isLiked"] is False

    res = client.delete("/api/recipes/r1/like", headers=ALICE)
    assert res.json()["likes"] == 5 and res.json()["isLiked"] is False


def test_actions_require_viewer():
    res = client.post("/api/recipes/r1/like")
    assert res.status_code == 401


def test_save_and_unsave():
    res = client.post("/api/recipes/r2/save", headers=BOB)
    assert res.json()["isSaved"] is True
    res = client.delete("/api/recipes/r2/save", headers=BOB)
    assert res.json()["isSaved"] is False


def test_rating_flow():
    res = client.post("/api/recipes/r2/rating", json={"value": 4}, headers=ALICE)
    assert res.status_code == 200
    assert res.json()["rating"] == 4.0 and res.json()["ratingCount"] == 1

    res = client.post("/api/recipes/r2/rating", json={"value": 2}, headers=BOB)
    assert res.json()["rating"] == 3.0 and res.json()["ratingCount"] == 2

    res = client.post("/api/recipes/r2/rating", json={"value": 7}, headers=BOB)
    assert res.status_code == 422
    assert client.get("/api/recipes/r2").json()["ratingCount"] == 2


def test_comments_flow():
    res = client.post("/api/recipes/r1/comments", json={"text": "Amazing", "id": "req-1"}, headers=BOB)
    assert res.status_code == 201
    # re-delivery of the same request id
    client.post("/api/recipes/r1/comments", json={"text": "Amazing", "id": "req-1"}, headers=BOB)

    res = client.get("/api/recipes/r1/comments")
    assert res.status_code == 200
    comments = res.json()
    assert len(comments) == 1
    assert comments[0]["userName"] == "Bob"
    assert comments[0]["recipeId"] == "r1"

    res = client.post("/api/recipes/r1/comments", json={"text": "   "}, headers=BOB)
    assert res.status_code == 422


def test_publish_and_delete():
    payload = {
        "title": "Kitfo",
        "prepTime": 15,
        "servings": 2,
        "difficulty": "medium",
        "tags": ["Kitfo"],
        "ingredients": [{"id": "1", "name": "beef", "amount": "500", "unit": "g"}],
    }
    res = client.post("/api/recipes", json=payload, headers=BOB)
    assert res.status_code == 201
    obj = res.json()
    rid = obj["id"]
    assert obj["authorId"] == "bob" and obj["likes"] == 0

    # only the author may delete
    res = client.delete(f"/api/recipes/{rid}", headers=ALICE)
    assert res.status_code == 403

    res = client.delete(f"/api/recipes/{rid}", headers=BOB)
    assert res.status_code == 200
    assert res.json().get("deleted") is True
    assert client.get(f"/api/recipes/{rid}").status_code == 404


def test_publish_validation():
    # title is required
    res = client.post("/api/recipes", json={"servings": 2}, headers=BOB)
    assert res.status_code == 422
    res = client.post("/api/recipes", json={"title": "X", "servings": 0}, headers=BOB)
    assert res.status_code == 422


def test_edit_recipe_keeps_interactions():
    client.post("/api/recipes/r1/like", headers=BOB)
    client.post("/api/recipes/r1/comments", json={"text": "Yum"}, headers=BOB)

    payload = {"title": "Doro Wat Deluxe", "servings": 6, "tags": ["stew"]}
    # only the author (alice) may edit
    res = client.put("/api/recipes/r1", json=payload, headers=BOB)
    assert res.status_code == 403

    res = client.put("/api/recipes/r1", json=payload, headers=ALICE)
    assert res.status_code == 200
    data = res.json()
    assert data["title"] == "Doro Wat Deluxe" and data["servings"] == 6
    assert data["likes"] == 6
    assert len(data["comments"]) == 1

    res = client.put("/api/recipes/nope", json=payload, headers=ALICE)
    assert res.status_code == 404
