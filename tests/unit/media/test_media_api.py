import pytest

from fastapi.testclient import TestClient

from tests.helpers.media import AUTH_HEADERS, TINY_PNG, build_limits


def upload_files(client: TestClient, *names: str, entity_id="E1", company_id="C1", **extra):
    files = [("files", (name, TINY_PNG, "image/png")) for name in names]
    data = {"entityId": entity_id, "entityType": "product", "companyId": company_id, **extra}
    return client.post("/media/upload", files=files, data=data, headers=AUTH_HEADERS)


def test_upload_then_list_entity(client: TestClient) -> None:
    response = upload_files(client, "a.png", "b.png")

    assert response.status_code == 200
    body = response.json()
    assert [item["storedName"] for item in body] == ["E1-0.png", "E1-1.png"]
    assert [item["position"] for item in body] == [0, 1]
    assert body[0]["companyId"] == "C1"
    assert body[0]["sizeBytes"] == len(TINY_PNG)

    listing = client.get("/media/entity/E1", headers=AUTH_HEADERS)

    assert listing.status_code == 200
    assert listing.json() == [
        {
            "id": body[0]["id"],
            "storedName": "E1-0.png",
            "originalName": "a.png",
            "mimeType": "image/png",
            "url": "/media/file/E1-0.png",
            "position": 0,
        },
        {
            "id": body[1]["id"],
            "storedName": "E1-1.png",
            "originalName": "b.png",
            "mimeType": "image/png",
            "url": "/media/file/E1-1.png",
            "position": 1,
        },
    ]


def test_upload_with_start_position(client: TestClient) -> None:
    response = upload_files(client, "a.png", position="3")

    assert response.status_code == 200
    assert response.json()[0]["storedName"] == "E1-3.png"


def test_upload_with_negative_position_is_rejected(client: TestClient) -> None:
    response = upload_files(client, "a.png", position="-1")

    assert response.status_code == 400
    assert response.json()["detail"]["failure_reason"] == "invalid_request"


def test_list_unknown_entity_is_empty(client: TestClient) -> None:
    response = client.get("/media/entity/unknown", headers=AUTH_HEADERS)

    assert response.status_code == 200
    assert response.json() == []


def test_list_corrupted_aggregate_is_internal_error(app_factory, tmp_path) -> None:
    client = TestClient(app_factory())
    uploads = tmp_path / "uploads"
    uploads.mkdir(parents=True, exist_ok=True)
    (uploads / "E1.json").write_text("{broken", encoding="utf-8")

    response = client.get("/media/entity/E1", headers=AUTH_HEADERS)

    assert response.status_code == 500
    assert response.json()["detail"]["failure_reason"] == "internal_error"


def test_upload_without_files_is_bad_request(client: TestClient) -> None:
    response = client.post(
        "/media/upload",
        data={"entityId": "E1", "entityType": "product", "companyId": "C1"},
        headers=AUTH_HEADERS,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == {
        "status": "error",
        "failure_reason": "invalid_request",
        "details": "No files uploaded",
    }


def test_upload_missing_company_is_bad_request(client: TestClient) -> None:
    response = client.post(
        "/media/upload",
        files=[("files", ("a.png", TINY_PNG, "image/png"))],
        data={"entityId": "E1", "entityType": "product"},
        headers=AUTH_HEADERS,
    )

    assert response.status_code == 400


def test_upload_unsupported_type(client: TestClient) -> None:
    response = client.post(
        "/media/upload",
        files=[("files", ("notes.txt", b"hello", "text/plain"))],
        data={"entityId": "E1", "entityType": "product", "companyId": "C1"},
        headers=AUTH_HEADERS,
    )

    assert response.status_code == 415
    assert response.json()["detail"]["failure_reason"] == "unsupported_media_type"


def test_upload_too_large(app_factory) -> None:
    client = TestClient(app_factory(upload_limits=build_limits(max_file_size_bytes=16)))

    response = client.post(
        "/media/upload",
        files=[("files", ("big.png", b"\x00" * 64, "image/png"))],
        data={"entityId": "E1", "entityType": "product", "companyId": "C1"},
        headers=AUTH_HEADERS,
    )

    assert response.status_code == 413
    assert response.json()["detail"]["failure_reason"] == "payload_too_large"


def test_protected_routes_require_credentials(client: TestClient) -> None:
    assert client.get("/media/entity/E1").status_code == 401
    assert client.delete("/media/E1/0", params={"companyId": "C1"}).status_code == 401

    response = client.get(
        "/media/entity/E1",
        headers={"X-API-Key": "wrong", "X-Service-Name": "catalog-service"},
    )

    assert response.status_code == 401
    assert response.json()["detail"]["failure_reason"] == "unauthorized"


def test_file_route_is_public_and_cacheable(client: TestClient) -> None:
    upload_files(client, "a.png")

    response = client.get("/media/file/E1-0.png")

    assert response.status_code == 200
    assert response.content == TINY_PNG
    assert response.headers["content-type"] == "image/png"
    assert response.headers["cache-control"] == "public, max-age=31536000"
    assert response.headers["access-control-allow-origin"] == "*"


def test_file_route_never_serves_metadata(client: TestClient) -> None:
    upload_files(client, "a.png")

    assert client.get("/media/file/E1.json").status_code == 404
    assert client.get("/media/file/missing.png").status_code == 404


def test_delete_by_owner_removes_file(client: TestClient) -> None:
    upload_files(client, "a.png")

    response = client.delete("/media/E1/0", params={"companyId": "C1"}, headers=AUTH_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"message": "Media deleted successfully", "removed": ["E1-0.png"]}
    assert client.get("/media/file/E1-0.png").status_code == 404


def test_delete_by_other_company_is_forbidden_while_cached(client: TestClient) -> None:
    upload_files(client, "a.png", company_id="C1")

    response = client.delete("/media/E1/0", params={"companyId": "C2"}, headers=AUTH_HEADERS)

    assert response.status_code == 403
    assert response.json()["detail"]["failure_reason"] == "forbidden"
    assert client.get("/media/file/E1-0.png").status_code == 200


def test_delete_by_other_company_is_allowed_when_cold(client: TestClient) -> None:
    upload_files(client, "a.png", company_id="C1")
    client.app.state.asset_cache.clear()

    response = client.delete("/media/E1/0", params={"companyId": "C2"}, headers=AUTH_HEADERS)

    assert response.status_code == 200


def test_delete_with_read_through_denies_cold_slot(app_factory) -> None:
    client = TestClient(app_factory(ownership_read_through=True))
    upload_files(client, "a.png", company_id="C1")
    client.app.state.asset_cache.clear()

    response = client.delete("/media/E1/0", params={"companyId": "C2"}, headers=AUTH_HEADERS)

    assert response.status_code == 403


def test_delete_requires_company_id(client: TestClient) -> None:
    response = client.delete("/media/E1/0", headers=AUTH_HEADERS)

    assert response.status_code == 400
    assert response.json()["detail"]["details"] == "Company ID is required"


def test_listing_keeps_deleted_entry_by_default(client: TestClient) -> None:
    upload_files(client, "a.png", "b.png")
    client.delete("/media/E1/0", params={"companyId": "C1"}, headers=AUTH_HEADERS)

    listing = client.get("/media/entity/E1", headers=AUTH_HEADERS).json()

    assert [item["position"] for item in listing] == [0, 1]


def test_listing_drops_deleted_entry_when_pruning(app_factory) -> None:
    client = TestClient(app_factory(prune_metadata_on_delete=True))
    upload_files(client, "a.png", "b.png")
    client.delete("/media/E1/0", params={"companyId": "C1"}, headers=AUTH_HEADERS)

    listing = client.get("/media/entity/E1", headers=AUTH_HEADERS).json()

    assert [item["position"] for item in listing] == [1]


@pytest.mark.parametrize(
    ("entity_id", "company_id"),
    [("../x", "C1"), (".hidden", "C1"), ("E1.v2", "C1"), ("E1", "acme.co")],
)
def test_upload_with_unsafe_ids_is_bad_request(client: TestClient, entity_id: str, company_id: str) -> None:
    response = upload_files(client, "a.png", entity_id=entity_id, company_id=company_id)

    assert response.status_code == 400
    assert response.json()["detail"]["failure_reason"] == "invalid_request"


def test_list_and_delete_with_unsafe_entity_id_are_bad_requests(client: TestClient) -> None:
    listing = client.get("/media/entity/.hidden", headers=AUTH_HEADERS)
    deletion = client.delete("/media/E1.v2/0", params={"companyId": "C1"}, headers=AUTH_HEADERS)

    assert listing.status_code == 400
    assert deletion.status_code == 400
    assert deletion.json()["detail"]["failure_reason"] == "invalid_request"


def test_dotted_neighbour_survives_slot_replacement(client: TestClient, tmp_path) -> None:
    uploads = tmp_path / "uploads"
    upload_files(client, "a.png", entity_id="E1")
    (uploads / "E1-0.v2-0.png").write_bytes(b"other")

    response = upload_files(client, "b.webp", entity_id="E1")

    assert response.status_code == 200
    assert (uploads / "E1-0.v2-0.png").read_bytes() == b"other"
    assert not (uploads / "E1-0.png").exists()
