from contentshare.services.secret_store import link_secret_key


def test_generate_link_returns_share_url(client, owner, create_content):
    _, headers = owner
    content = create_content(headers)

    resp = client.post(f"/api/links/{content['id']}/generate-link", json={"maxAccess": 3}, headers=headers)

    assert resp.status_code == 201
    body = resp.get_json()
    token = body["details"]["link"]
    assert body["link"] == f"http://testserver/content/{token}"
    assert body["details"]["max_access"] == 3
    assert body["details"]["access_count"] == 0
    assert body["details"]["state"] == "active"


def test_guests_and_strangers_cannot_generate(client, owner, other, create_content):
    _, owner_headers = owner
    _, other_headers = other
    content = create_content(owner_headers)
    url = f"/api/links/{content['id']}/generate-link"

    assert client.post(url, json={}).status_code == 403
    assert client.post(url, json={}, headers=other_headers).status_code == 403


def test_generate_for_unknown_content(client, owner):
    _, headers = owner
    resp = client.post("/api/links/00000000-0000-0000-0000-000000000000/generate-link", json={}, headers=headers)
    assert resp.status_code == 404


def test_link_access_counts_until_exhausted(client, owner, create_content, generate_link):
    _, headers = owner
    content = create_content(headers)
    token = generate_link(content["id"], headers, maxAccess=2)

    for _ in range(2):
        resp = client.get(f"/content/{token}")
        assert resp.status_code == 200
        assert resp.get_json()["content"]["id"] == content["id"]

    resp = client.get(f"/content/{token}")
    assert resp.status_code == 403
    assert resp.get_json()["error"]["code"] == "LINK_EXHAUSTED"


def test_expired_link_is_refused(client, owner, create_content, generate_link):
    _, headers = owner
    content = create_content(headers)
    token = generate_link(content["id"], headers, expirationDate="2000-01-01T00:00:00Z")

    resp = client.get(f"/content/{token}")
    assert resp.status_code == 403
    assert resp.get_json()["error"]["code"] == "LINK_EXPIRED"


def test_unknown_link_is_not_found(client):
    assert client.get("/content/deadbeef").status_code == 404


def test_private_content_through_link_code(client, store, owner, create_content, generate_link):
    _, headers = owner
    content = create_content(headers, is_public=False, type="Survey")
    token = generate_link(content["id"], headers, secretCode="abc")

    assert client.get(f"/content/{token}").status_code == 403
    assert client.get(f"/content/{token}?secret_code=wrong").status_code == 403
    assert client.get(f"/content/{token}?secret_code=abc").status_code == 200
    # The content's own code is good through a link too
    assert client.get(f"/content/{token}?secret_code={content['secret_code']}").status_code == 200

    store.advance(3601)
    assert client.get(f"/content/{token}?secret_code=abc").status_code == 403


def test_link_to_deleted_content_is_not_found(client, owner, create_content, generate_link):
    _, headers = owner
    content = create_content(headers)
    token = generate_link(content["id"], headers)

    client.delete(f"/api/content/{content['id']}", headers=headers)

    assert client.get(f"/content/{token}").status_code == 404


def test_all_links_is_scoped_and_annotated(client, owner, other, admin, create_content, generate_link):
    _, owner_headers = owner
    _, other_headers = other
    _, admin_headers = admin
    content = create_content(owner_headers, title="Birds")
    generate_link(content["id"], owner_headers)
    generate_link(content["id"], owner_headers, expirationDate="2000-01-01T00:00:00Z")

    mine = client.get("/api/links/all-links", headers=owner_headers).get_json()["links"]
    assert len(mine) == 2
    assert {link["title"] for link in mine} == {"Birds"}
    assert sorted(link["state"] for link in mine) == ["active", "expired"]

    assert client.get("/api/links/all-links", headers=other_headers).get_json()["links"] == []
    assert len(client.get("/api/links/all-links", headers=admin_headers).get_json()["links"]) == 2
    assert client.get("/api/links/all-links").status_code == 403


def test_update_link_settings(client, owner, other, create_content, generate_link):
    _, headers = owner
    _, other_headers = other
    content = create_content(headers)
    token = generate_link(content["id"], headers, maxAccess=1)
    client.get(f"/content/{token}")
    assert client.get(f"/content/{token}").status_code == 403

    assert client.put(f"/api/links/update-link/{token}", json={"maxAccess": 5}, headers=other_headers).status_code == 403

    resp = client.put(f"/api/links/update-link/{token}", json={"maxAccess": None}, headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()["link"]["max_access"] is None
    assert resp.get_json()["link"]["state"] == "active"
    assert client.get(f"/content/{token}").status_code == 200


def test_update_link_requires_a_field(client, owner, create_content, generate_link):
    _, headers = owner
    content = create_content(headers)
    token = generate_link(content["id"], headers)
    assert client.put(f"/api/links/update-link/{token}", json={}, headers=headers).status_code == 400


def test_delete_link(client, owner, other, create_content, generate_link):
    _, headers = owner
    _, other_headers = other
    content = create_content(headers)
    token = generate_link(content["id"], headers)

    assert client.delete(f"/api/links/delete-link/{token}", headers=other_headers).status_code == 403
    assert client.delete(f"/api/links/delete-link/{token}", headers=headers).status_code == 200
    assert client.delete(f"/api/links/delete-link/{token}", headers=headers).status_code == 404
    assert client.get(f"/content/{token}").status_code == 404


def test_admin_can_list_and_delete_links_of_deleted_content(client, owner, admin, create_content, generate_link):
    _, owner_headers = owner
    _, admin_headers = admin
    content = create_content(owner_headers)
    token = generate_link(content["id"], owner_headers)
    client.delete(f"/api/content/{content['id']}", headers=owner_headers)

    listed = client.get("/api/links/all-links", headers=admin_headers).get_json()["links"]
    assert [link["link"] for link in listed] == [token]
    assert listed[0]["orphaned"] is True
    assert listed[0]["title"] is None

    assert client.get("/api/links/all-links", headers=owner_headers).get_json()["links"] == []
    assert client.delete(f"/api/links/delete-link/{token}", headers=owner_headers).status_code == 403
    assert client.delete(f"/api/links/delete-link/{token}", headers=admin_headers).status_code == 200
    assert client.get("/api/links/all-links", headers=admin_headers).get_json()["links"] == []


def test_delete_link_drops_its_secret_code(client, store, owner, create_content, generate_link):
    _, headers = owner
    content = create_content(headers, is_public=False, type="Survey")
    token = generate_link(content["id"], headers, secretCode="abc")
    assert store.get(link_secret_key(token)) == "abc"

    assert client.delete(f"/api/links/delete-link/{token}", headers=headers).status_code == 200
    assert store.get(link_secret_key(token)) is None


def test_link_settings_use_camel_case_keys(client, owner, create_content):
    _, headers = owner
    content = create_content(headers)
    url = f"/api/links/{content['id']}/generate-link"

    resp = client.post(url, json={"maxAccess": 2, "expirationDate": "2100-01-01T00:00:00Z"}, headers=headers)
    assert resp.status_code == 201
    assert resp.get_json()["details"]["max_access"] == 2
    assert resp.get_json()["details"]["expiration_date"].startswith("2100-01-01")

    assert client.post(url, json={"max_access": 2}, headers=headers).status_code == 400
