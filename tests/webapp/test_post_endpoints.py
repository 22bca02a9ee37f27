import pytest

from i18n.translations import get_message


@pytest.mark.integration
def test_create_post_with_image_and_serve_it(client, make_user, auth_headers, png_bytes):
    alice = make_user("alice")

    created = client.post(
        "/api/posts",
        data={"content": "my drawing", "tags": ["illustration", "progress"]},
        files=[("images", ("art.png", png_bytes(), "image/png"))],
        headers=auth_headers(alice),
    ).json()
    assert created["success"] is True

    page = client.get(f"/api/posts/{created['post_id']}").json()
    post = page["thread"]["post"]
    assert post["tags"] == ["illustration", "progress"]
    assert len(post["image_urls"]) == 1
    assert page["available_emojis"] == ["👏", "💖", "🤣"]

    image = client.get(post["image_urls"][0])
    assert image.status_code == 200
    assert image.content == png_bytes()


@pytest.mark.integration
def test_uploaded_image_is_served_as_an_image_whatever_its_filename(client, make_user, auth_headers, png_bytes):
    alice = make_user("alice")

    created = client.post(
        "/api/posts",
        data={"content": "sneaky", "tags": ["chat"]},
        files=[("images", ("evil.html", png_bytes(), "image/png"))],
        headers=auth_headers(alice),
    ).json()
    assert created["success"] is True

    [url] = client.get(f"/api/posts/{created['post_id']}").json()["thread"]["post"]["image_urls"]
    assert url.endswith(".png")
    served = client.get(url)
    assert served.headers["content-type"] == "image/png"


@pytest.mark.integration
def test_image_whose_contents_do_not_match_its_type_is_rejected(client, make_user, auth_headers, png_bytes):
    alice = make_user("alice")

    body = client.post(
        "/api/posts",
        data={"content": "mislabelled", "tags": ["chat"]},
        files=[("images", ("photo.jpg", png_bytes(), "image/jpeg"))],
        headers=auth_headers(alice),
    ).json()

    assert body == {"success": False, "error": get_message("image_type_mismatch")}


@pytest.mark.integration
def test_create_post_requires_login(client, db):
    body = client.post("/api/posts", data={"content": "hi", "tags": ["chat"]}).json()

    assert body == {"success": False, "error": get_message("login_required")}


@pytest.mark.integration
def test_post_page_not_found(client, db):
    assert client.get("/api/posts/missing").status_code == 404


@pytest.mark.integration
def test_reply_react_and_delete(client, make_user, auth_headers):
    alice = make_user("alice")
    bob = make_user("bob")
    alice_headers = auth_headers(alice)
    bob_headers = auth_headers(bob)
    post_id = client.post(
        "/api/posts", data={"content": "hello", "tags": ["chat"]}, headers=alice_headers
    ).json()["post_id"]

    reply = client.post(f"/api/posts/{post_id}/replies", json={"content": "hi back"}, headers=bob_headers).json()
    assert reply["success"] is True

    reaction = client.post(f"/api/posts/{post_id}/reactions", json={"emoji": "💖"}, headers=bob_headers).json()
    assert reaction == {"success": True, "error": None, "action": "added"}

    thread = client.get(f"/api/posts/{post_id}", headers=bob_headers).json()["thread"]
    assert thread["reactions"] == [{"emoji": "💖", "count": 1, "user_reacted": True}]
    assert [r["post"]["content"] for r in thread["replies"]] == ["hi back"]
    assert thread["replies"][0]["post"]["tags"] == ["chat"]
    assert thread["replies"][0]["can_delete"] is True

    forbidden = client.delete(f"/api/posts/{post_id}", headers=bob_headers).json()
    assert forbidden["error"] == get_message("post_delete_forbidden")

    assert client.delete(f"/api/posts/{post_id}", headers=alice_headers).json()["success"] is True
    assert client.get(f"/api/posts/{post_id}").status_code == 404


@pytest.mark.integration
def test_deepest_reply_page_offers_no_reply(client, make_user, auth_headers):
    alice = make_user("alice")
    bob = make_user("bob")
    alice_headers = auth_headers(alice)
    bob_headers = auth_headers(bob)
    post_id = client.post(
        "/api/posts", data={"content": "hello", "tags": ["chat"]}, headers=alice_headers
    ).json()["post_id"]
    level1 = client.post(f"/api/posts/{post_id}/replies", json={"content": "one"}, headers=bob_headers).json()
    level2 = client.post(
        f"/api/posts/{level1['post_id']}/replies", json={"content": "two"}, headers=alice_headers
    ).json()

    thread = client.get(f"/api/posts/{level2['post_id']}", headers=bob_headers).json()["thread"]

    assert thread["depth"] == 2
    assert thread["can_reply"] is False
