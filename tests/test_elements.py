def test_elements_get_sequential_positions(client, owner, create_content, add_elements):
    _, headers = owner
    content = create_content(headers)

    first = add_elements(content["id"], headers, count=2)
    more = add_elements(content["id"], headers, count=1)

    assert [e["position"] for e in first] == [1, 2]
    assert more[0]["position"] == 3


def test_explicit_positions_are_skipped_by_sequential_ones(client, owner, create_content):
    _, headers = owner
    content = create_content(headers)
    body = {"elements": [
        {"element_type": "Question", "data": {"text": "a"}, "position": 1},
        {"element_type": "Option", "data": {"text": "b"}},
    ]}

    resp = client.post(f"/api/content-elements/{content['id']}/elements", json=body, headers=headers)

    assert resp.status_code == 201
    assert [e["position"] for e in resp.get_json()["elements"]] == [1, 2]


def test_duplicate_explicit_positions_are_rejected(client, owner, create_content):
    _, headers = owner
    content = create_content(headers)
    body = {"elements": [
        {"element_type": "Question", "data": {}, "position": 2},
        {"element_type": "Question", "data": {}, "position": 2},
    ]}
    resp = client.post(f"/api/content-elements/{content['id']}/elements", json=body, headers=headers)
    assert resp.status_code == 400


def test_elements_are_listed_by_position(client, owner, create_content):
    _, headers = owner
    content = create_content(headers)
    body = {"elements": [
        {"element_type": "Question", "data": {"text": "last"}, "position": 5},
        {"element_type": "Question", "data": {"text": "first"}, "position": 1},
    ]}
    client.post(f"/api/content-elements/{content['id']}/elements", json=body, headers=headers)

    resp = client.get(f"/api/content-elements/{content['id']}/elements")

    assert resp.status_code == 200
    assert [e["data"]["text"] for e in resp.get_json()["elements"]] == ["first", "last"]


def test_private_elements_follow_the_read_rule(client, owner, create_content, add_elements):
    _, headers = owner
    resp = client.post("/api/content/", json={"title": "S", "type": "Survey", "is_public": False}, headers=headers)
    content = resp.get_json()["content"]
    add_elements(content["id"], headers)

    url = f"/api/content-elements/{content['id']}/elements"
    assert client.get(url).status_code == 403
    assert client.get(f"{url}?secret_code={content['secret_code']}").status_code == 200


def test_strangers_cannot_change_elements(client, owner, other, create_content, add_elements):
    _, owner_headers = owner
    _, other_headers = other
    content = create_content(owner_headers)
    element = add_elements(content["id"], owner_headers, count=1)[0]

    assert client.post(
        f"/api/content-elements/{content['id']}/elements",
        json={"elements": [{"element_type": "Question", "data": {}}]},
        headers=other_headers,
    ).status_code == 403
    assert client.put(
        f"/api/content-elements/elements/{element['id']}", json={"data": {"text": "x"}}, headers=other_headers
    ).status_code == 403
    assert client.delete(f"/api/content-elements/elements/{element['id']}", headers=other_headers).status_code == 403


def test_update_and_delete_element(client, owner, create_content, add_elements):
    _, headers = owner
    content = create_content(headers)
    element = add_elements(content["id"], headers, count=1)[0]
    url = f"/api/content-elements/elements/{element['id']}"

    resp = client.put(url, json={"data": {"text": "edited"}, "position": 7}, headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()["element"]["data"] == {"text": "edited"}
    assert resp.get_json()["element"]["position"] == 7

    assert client.delete(url, headers=headers).status_code == 200
    assert client.delete(url, headers=headers).status_code == 404
