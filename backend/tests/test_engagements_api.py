from fastapi.testclient import TestClient


def test_create_engagement_validates_required_fields(client: TestClient) -> None:
    response = client.post(
        "/v1/engagements",
        json={"company_name": "  ", "leader_name": "Jordan", "financial_year_end": "2024-06-30"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Company name is required"

    response = client.post("/v1/engagements", json={"company_name": "Acme", "leader_name": "Jordan"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Financial year end is required"


def test_create_and_fetch_engagement(client: TestClient, make_engagement) -> None:
    engagement_id = make_engagement(engagement_name="FY26 plan")

    response = client.get(f"/v1/engagements/{engagement_id}")
    assert response.status_code == 200
    body = response.json()
    assert body["company_name"] == "Acme Pty Ltd"
    assert body["financial_year_end"] == "2024-06-30"
    assert body["engagement_name"] == "FY26 plan"

    listing = client.get("/v1/engagements").json()
    assert [e["id"] for e in listing["engagements"]] == [engagement_id]


def test_unknown_engagement_is_not_found(client: TestClient) -> None:
    for path in ("", "/dashboard", "/review", "/ssk-swot-export", "/financials", "/ssk"):
        response = client.get(f"/v1/engagements/does-not-exist{path}")
        assert response.status_code == 404, path
        assert response.json() == {"detail": "Engagement not found"}


def _statuses(dashboard: dict) -> dict[str, dict]:
    return {card["key"]: card for phase in dashboard["phases"] for card in phase["modules"]}


def test_dashboard_for_new_engagement(client: TestClient, make_engagement) -> None:
    engagement_id = make_engagement()

    dashboard = client.get(f"/v1/engagements/{engagement_id}/dashboard").json()
    cards = _statuses(dashboard)

    assert [phase["title"] for phase in dashboard["phases"]] == [
        "Phase I – Input Gathering",
        "Phase II – Vision & Goal Setting",
        "Phase III – Strategy Ideation & Prioritisation",
        "Phase IV – Building the One-Page Plan",
    ]
    assert cards["ssk"]["status"] == "not_started"
    assert cards["ssk"]["count"] == 0
    assert cards["strategy_ideation"]["status"] == "not_ready"
    assert cards["strategy_ideation"]["enabled"] is False
    assert cards["strategy_ideation"]["href"] is None
    assert cards["a3_plan"]["status_label"] == "Coming soon"
    assert dashboard["has_review_summary"] is False


def test_dashboard_unlocks_strategy_ideation(client: TestClient, make_engagement) -> None:
    engagement_id = make_engagement()
    base = f"/v1/engagements/{engagement_id}"

    client.post(f"{base}/ssk", json={"participant_name": "Sam", "start": "Weekly demos"})
    client.put(f"{base}/vision", json={"purpose": "Help trades grow", "core_kpis": ["Revenue"]})

    cards = _statuses(client.get(f"{base}/dashboard").json())

    assert cards["ssk"]["status"] == "in_progress"
    assert cards["ssk"]["count"] == 1
    assert cards["vision"]["status"] == "in_progress"
    assert cards["strategy_ideation"]["status"] == "available"
    assert cards["strategy_ideation"]["href"] == f"/engagement/{engagement_id}/strategy-ideation"

    client.put(f"{base}/strategy-ideation", json={"anchors": {"notes": "Stay local"}})
    cards = _statuses(client.get(f"{base}/dashboard").json())
    assert cards["strategy_ideation"]["status"] == "complete"


def test_review_and_export(client: TestClient, make_engagement) -> None:
    engagement_id = make_engagement(company_name="Acme & Sons, Ltd")
    base = f"/v1/engagements/{engagement_id}"

    client.post(f"{base}/ssk", json={"participant_name": "Sam", "start": "A\n\n B", "stop": " ", "keep": "C"})
    client.post(f"{base}/swot", json={"participant_name": "Kim", "strengths": ['He said "hi"', " "]})

    review = client.get(f"{base}/review").json()
    assert review["start_items"] == ["A", "B"]
    assert review["keep_items"] == ["C"]
    assert review["strengths"] == ['He said "hi"']

    response = client.get(f"{base}/ssk-swot-export")
    assert response.status_code == 200
    assert response.headers["content-type"] == "text/csv; charset=utf-8"
    assert response.headers["content-disposition"] == 'attachment; filename="acme-sons-ltd.csv"'

    lines = response.text.split("\r\n")
    assert len(lines) == 4
    assert lines[1].startswith('"Acme & Sons, Ltd","SSK","start","A\n\n B","Sam",')
    assert lines[2].startswith('"Acme & Sons, Ltd","SSK","keep","C","Sam",')
    assert lines[3].startswith('"Acme & Sons, Ltd","SWOT","strength","He said ""hi""","Kim",')
