from fastapi.testclient import TestClient


def test_ssk_requires_participant_and_content(client: TestClient, make_engagement) -> None:
    base = f"/v1/engagements/{make_engagement()}"

    response = client.post(f"{base}/ssk", json={"participant_name": " ", "start": "x"})
    assert response.status_code == 400
    assert response.json()["detail"] == "participant_name is required."

    response = client.post(f"{base}/ssk", json={"participant_name": "Sam", "start": "  ", "keep": ""})
    assert response.status_code == 400
    assert response.json()["detail"] == "At least one of Start, Stop, or Keep must have content."


def test_ssk_responses_are_listed_in_creation_order(client: TestClient, make_engagement) -> None:
    base = f"/v1/engagements/{make_engagement()}"

    for name in ("Sam", "Alex"):
        response = client.post(f"{base}/ssk", json={"participant_name": name, "keep": "Standups"})
        assert response.status_code == 201

    rows = client.get(f"{base}/ssk").json()
    assert [row["participant_name"] for row in rows] == ["Sam", "Alex"]
    assert rows[0]["stop_text"] == ""


def test_swot_submission_and_listing(client: TestClient, make_engagement) -> None:
    base = f"/v1/engagements/{make_engagement()}"

    created = client.post(f"{base}/swot", json={"strengths": ["Brand"], "threats": ["Rates"]})
    assert created.status_code == 201
    assert isinstance(created.json()["id"], int)

    rows = client.get(f"{base}/swot").json()
    assert rows[0]["strengths"] == ["Brand"]
    assert rows[0]["weaknesses"] == []
    assert rows[0]["participant_name"] is None


def test_vision_is_replaced_on_each_save(client: TestClient, make_engagement) -> None:
    base = f"/v1/engagements/{make_engagement()}"

    assert client.get(f"{base}/vision").json() is None

    client.put(f"{base}/vision", json={"purpose": "Grow", "annual_goals": ["Hire 3"]})
    response = client.put(f"{base}/vision", json={"bhag": "Biggest in the state"})
    assert response.status_code == 200

    vision = client.get(f"{base}/vision").json()
    assert vision["bhag"] == "Biggest in the state"
    assert vision["purpose"] is None
    assert vision["annual_goals"] is None


def test_strategy_brainstorm_upsert_status_codes(client: TestClient, make_engagement) -> None:
    base = f"/v1/engagements/{make_engagement()}"

    first = client.put(f"{base}/strategy-ideation", json={"anchors": {"notes": "Local first"}})
    assert first.status_code == 201
    assert first.json()["anchors"] == {"notes": "Local first"}

    second = client.put(f"{base}/strategy-ideation", json={"people": {"notes": "Apprentices"}})
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]

    view = client.get(f"{base}/strategy-ideation").json()
    assert view["status"] == "complete"
    assert view["brainstorm"]["people"] == {"notes": "Apprentices"}
    assert view["items"] == []


def test_strategy_view_before_any_input(client: TestClient, make_engagement) -> None:
    view = client.get(f"/v1/engagements/{make_engagement()}/strategy-ideation").json()

    assert view == {"status": "not_ready", "brainstorm": None, "items": []}


def test_strategy_item_crud(client: TestClient, make_engagement) -> None:
    base = f"/v1/engagements/{make_engagement()}"

    missing = client.post(f"{base}/strategy-ideation/items", json={"theme": "Expand"})
    assert missing.status_code == 400
    assert missing.json()["detail"] == "theme and domain are required"

    created = client.post(
        f"{base}/strategy-ideation/items",
        json={"theme": "Expand north", "domain": "growth_market", "source_tags": ["swot", "vision"]},
    )
    assert created.status_code == 201
    item_id = created.json()["id"]

    empty_update = client.put(f"/v1/strategy-ideation/items/{item_id}", json={})
    assert empty_update.status_code == 400
    assert empty_update.json()["detail"] == "No valid fields to update"

    updated = client.put(f"/v1/strategy-ideation/items/{item_id}", json={"description": "Two branches"})
    assert updated.status_code == 200
    assert updated.json()["description"] == "Two branches"
    assert updated.json()["source_tags"] == ["swot", "vision"]

    assert client.put("/v1/strategy-ideation/items/nope", json={"theme": "x"}).status_code == 404

    items = client.get(f"{base}/strategy-ideation").json()["items"]
    assert [item["theme"] for item in items] == ["Expand north"]

    assert client.delete(f"/v1/strategy-ideation/items/{item_id}").json() == {"ok": True}
    assert client.get(f"{base}/strategy-ideation").json()["items"] == []
