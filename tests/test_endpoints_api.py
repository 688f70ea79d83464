import pytest

JSON_API = "application/vnd.api+json"


def endpoint_document(verb="GET", path="/greeting", code=200, headers=None, body='"{ "message": "Hello, world" }"'):
    return {
        "data": {
            "type": "endpoints",
            "attributes": {
                "verb": verb,
                "path": path,
                "response": {
                    "code": code,
                    "headers": {"Content-Type": "application/json"} if headers is None else headers,
                    "body": body,
                },
            },
        }
    }


def error_detail(response) -> str:
    errors = response.json()["errors"]
    assert len(errors) == 1
    return errors[0]["detail"]


@pytest.mark.asyncio
async def test_list_empty(client):
    response = await client.get("/endpoints")
    assert response.status_code == 200
    assert response.headers["content-type"] == JSON_API
    assert response.text == '{"data":[]}'


@pytest.mark.asyncio
async def test_create_endpoint(client):
    response = await client.post("/endpoints", json=endpoint_document())
    assert response.status_code == 201
    assert response.headers["content-type"] == JSON_API
    assert response.json() == {
        "data": {
            "type": "endpoints",
            "id": 1,
            "attributes": {
                "verb": "GET",
                "path": "/greeting",
                "response": {
                    "code": 200,
                    "headers": {"Content-Type": "application/json"},
                    "body": '"{ "message": "Hello, world" }"',
                },
            },
        }
    }
    assert list(response.json()["data"]) == ["type", "id", "attributes"]


@pytest.mark.asyncio
async def test_create_ignores_client_supplied_id(client):
    document = endpoint_document()
    document["data"]["id"] = 77
    response = await client.post("/endpoints", json=document)
    assert response.status_code == 201
    assert response.json()["data"]["id"] == 1


@pytest.mark.asyncio
async def test_list_after_create(client):
    await client.post("/endpoints", json=endpoint_document(path="/one"))
    await client.post("/endpoints", json=endpoint_document(path="/two"))

    response = await client.get("/endpoints")
    data = response.json()["data"]
    assert [e["id"] for e in data] == [1, 2]
    assert [e["attributes"]["path"] for e in data] == ["/one", "/two"]


@pytest.mark.asyncio
async def test_create_duplicate_conflicts(client, registry):
    first = await client.post("/endpoints", json=endpoint_document())
    assert first.status_code == 201

    second = await client.post("/endpoints", json=endpoint_document(code=500, body="other"))
    assert second.status_code == 409
    assert second.headers["content-type"] == JSON_API
    assert second.json()["errors"][0]["code"] == "Conflict"
    assert error_detail(second) == "Endpoint `GET /greeting` already exists"
    assert len(await registry.fetch_all()) == 1


@pytest.mark.asyncio
async def test_same_path_different_verb_allowed(client):
    await client.post("/endpoints", json=endpoint_document(verb="GET"))
    response = await client.post("/endpoints", json=endpoint_document(verb="POST"))
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_create_invalid_verb(client, registry):
    response = await client.post("/endpoints", json=endpoint_document(verb="GETS"))
    assert response.status_code == 400
    assert response.headers["content-type"] == JSON_API
    assert response.json() == {
        "errors": [{
            "code": "Bad Request",
            "detail": "Key: 'Endpoint.Attributes.Verb' Error:Field validation for 'Verb' failed on the 'oneof' tag",
        }]
    }
    assert await registry.fetch_all() == []


@pytest.mark.asyncio
async def test_create_malformed_json(client):
    response = await client.post(
        "/endpoints",
        content=b'{"data": {',
        headers={"Content-Type": JSON_API},
    )
    assert response.status_code == 400
    assert error_detail(response).startswith("Unable to decode request body:")


@pytest.mark.asyncio
async def test_create_empty_body(client):
    response = await client.post("/endpoints")
    assert response.status_code == 400
    assert error_detail(response).startswith("Unable to decode request body:")


@pytest.mark.asyncio
async def test_update_endpoint(client):
    await client.post("/endpoints", json=endpoint_document())

    response = await client.patch(
        "/endpoints/1",
        json=endpoint_document(verb="POST", path="/post_it", code=201, headers={"x-api-key": "k"}, body="done"),
    )
    assert response.status_code == 201
    assert response.headers["content-type"] == JSON_API
    data = response.json()["data"]
    assert data["id"] == 1
    assert data["attributes"]["verb"] == "POST"
    assert data["attributes"]["response"] == {"code": 201, "headers": {"x-api-key": "k"}, "body": "done"}

    listing = (await client.get("/endpoints")).json()["data"]
    assert listing == [data]


@pytest.mark.asyncio
async def test_update_unknown_id(client, registry):
    await client.post("/endpoints", json=endpoint_document())
    before = await registry.fetch_all()

    response = await client.patch("/endpoints/99", json=endpoint_document(path="/other"))
    assert response.status_code == 404
    assert response.json()["errors"][0]["code"] == "Not Found"
    assert error_detail(response) == "Requested Endpoint with ID `99` does not exist"
    assert await registry.fetch_all() == before


@pytest.mark.asyncio
async def test_update_invalid_body(client):
    await client.post("/endpoints", json=endpoint_document())
    response = await client.patch("/endpoints/1", json=endpoint_document(code=700))
    assert response.status_code == 400
    assert "'Code' failed on the 'lte' tag" in error_detail(response)


@pytest.mark.asyncio
async def test_delete_endpoint(client):
    await client.post("/endpoints", json=endpoint_document())

    response = await client.delete("/endpoints/1")
    assert response.status_code == 204
    assert response.content == b""

    listing = await client.get("/endpoints")
    assert listing.json() == {"data": []}


@pytest.mark.asyncio
async def test_delete_unknown_id(client):
    response = await client.delete("/endpoints/1")
    assert response.status_code == 404
    assert response.headers["content-type"] == JSON_API
    assert error_detail(response) == "Requested Endpoint with ID `1` does not exist"


@pytest.mark.asyncio
async def test_delete_twice(client):
    await client.post("/endpoints", json=endpoint_document())
    assert (await client.delete("/endpoints/1")).status_code == 204
    assert (await client.delete("/endpoints/1")).status_code == 404


@pytest.mark.asyncio
async def test_storage_error_is_redacted(client, registry, caplog):
    await registry.close()

    response = await client.get("/endpoints")
    assert response.status_code == 500
    assert response.headers["content-type"] == JSON_API
    assert response.json() == {
        "errors": [{"code": "Internal Server Error", "detail": "Something went horribly wrong :("}]
    }
    assert "registry is not open" in caplog.text


@pytest.mark.asyncio
async def test_id_beyond_integer_range_is_not_found(client, registry):
    await client.post("/endpoints", json=endpoint_document())
    huge = "99999999999999999999999"

    response = await client.delete(f"/endpoints/{huge}")
    assert response.status_code == 404
    assert error_detail(response) == f"Requested Endpoint with ID `{huge}` does not exist"

    response = await client.patch(f"/endpoints/{huge}", json=endpoint_document(path="/other"))
    assert response.status_code == 404
    assert error_detail(response) == f"Requested Endpoint with ID `{huge}` does not exist"

    assert len(await registry.fetch_all()) == 1


@pytest.mark.asyncio
async def test_create_rejects_unencodable_header(client, registry):
    response = await client.post("/endpoints", json=endpoint_document(headers={"X-Name": "日本"}))
    assert response.status_code == 400
    assert error_detail(response) == (
        "Key: 'Endpoint.Attributes.Response.Headers[X-Name]' "
        "Error:Field validation for 'Headers[X-Name]' failed on the 'latin1' tag"
    )
    assert await registry.fetch_all() == []


@pytest.mark.asyncio
async def test_update_rejects_invalid_header_name(client):
    await client.post("/endpoints", json=endpoint_document())
    response = await client.patch("/endpoints/1", json=endpoint_document(headers={"Bad Name": "x"}))
    assert response.status_code == 400
    assert "'Headers[Bad Name]' failed on the 'token' tag" in error_detail(response)


@pytest.mark.asyncio
async def test_latin1_header_value_replays(client):
    await client.post("/endpoints", json=endpoint_document(path="/cafe", headers={"X-Name": "café"}, body="ok"))
    response = await client.get("/cafe")
    assert response.status_code == 200
    assert response.headers["x-name"] == "café"
