ISSUES_URL = "/api/v1/issues"


def _titles(resp):
    return [item["title"] for item in resp.json()["items"]]


def test_list_is_public_and_newest_first(authorized_client, create_issue):
    client, headers, _ = authorized_client
    for title in ("First", "Second", "Third"):
        create_issue(headers, title=title)

    resp = client.get(ISSUES_URL)
    assert resp.status_code == 200
    data = resp.json()
    assert _titles(resp) == ["Third", "Second", "First"]
    assert data["page"] == 1
    assert data["limit"] == 10
    assert data["total"] == 3
    assert data["page_count"] == 1


def test_pagination_counts_and_page_past_end(authorized_client, create_issue):
    client, headers, _ = authorized_client
    for index in range(7):
        create_issue(headers, title=f"Issue {index}")

    page_one = client.get(ISSUES_URL, params={"limit": 3}).json()
    assert page_one["total"] == 7
    assert page_one["page_count"] == 3
    assert len(page_one["items"]) == 3

    last = client.get(ISSUES_URL, params={"limit": 3, "page": 3}).json()
    assert len(last["items"]) == 1

    beyond = client.get(ISSUES_URL, params={"limit": 3, "page": 9}).json()
    assert beyond["items"] == []
    assert beyond["total"] == 7


def test_filter_by_status(authorized_client, admin_headers, create_issue):
    client, headers, _ = authorized_client
    open_issue = create_issue(headers, title="Still open")
    done = create_issue(headers, title="Done")
    client.patch(f"{ISSUES_URL}/{done['id']}/status", json={"status": "resolved"}, headers=admin_headers)

    resp = client.get(ISSUES_URL, params={"status": "resolved"})
    assert _titles(resp) == ["Done"]

    resp = client.get(ISSUES_URL, params={"status": "pending"})
    assert [item["id"] for item in resp.json()["items"]] == [open_issue["id"]]


def test_text_search_ranks_by_matches(authorized_client, create_issue):
    client, headers, _ = authorized_client
    create_issue(headers, title="Pothole", description="Road damage")
    create_issue(headers, title="Pothole near streetlight", description="Streetlight flickers above pothole")
    create_issue(headers, title="Graffiti", description="Paint on wall")

    resp = client.get(ISSUES_URL, params={"q": "pothole streetlight"})
    assert _titles(resp) == ["Pothole near streetlight", "Pothole"]
    assert resp.json()["total"] == 2


def test_geo_search_returns_nearest_first(authorized_client, create_issue):
    client, headers, _ = authorized_client
    create_issue(headers, title="Far", lng=12.60, lat=55.70)
    create_issue(headers, title="Exact", lng=12.5683, lat=55.6761)
    create_issue(headers, title="Near", lng=12.5700, lat=55.6770)
    create_issue(headers, title="London", lng=-0.1278, lat=51.5074)

    resp = client.get(ISSUES_URL, params={"lng": 12.5683, "lat": 55.6761, "radius": 5000})
    assert resp.status_code == 200
    assert _titles(resp) == ["Exact", "Near", "Far"]


def test_geo_filter_needs_all_three_parameters(authorized_client, create_issue):
    client, headers, _ = authorized_client
    create_issue(headers, title="Copenhagen", lng=12.5683, lat=55.6761)
    create_issue(headers, title="London", lng=-0.1278, lat=51.5074)

    resp = client.get(ISSUES_URL, params={"lng": 12.5683, "lat": 55.6761})
    assert resp.json()["total"] == 2


def test_invalid_query_reports_every_field(test_app_client):
    client, _ = test_app_client

    resp = client.get(
        ISSUES_URL,
        params={"status": "closed", "page": 0, "limit": 500, "lat": 95, "lng": "east", "radius": 0},
    )
    assert resp.status_code == 400
    fields = {error["field"] for error in resp.json()["errors"]}
    assert fields == {"status", "page", "limit", "lat", "lng", "radius"}


def test_huge_page_number_returns_empty_page_with_total(authorized_client, create_issue):
    client, headers, _ = authorized_client
    create_issue(headers, title="Only one")

    resp = client.get(ISSUES_URL, params={"page": "10000000000000000000"})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["items"] == []
    assert data["total"] == 1
    assert data["page_count"] == 1


def test_huge_radius_covers_the_whole_globe(authorized_client, create_issue):
    client, headers, _ = authorized_client
    create_issue(headers, title="Copenhagen", lng=12.5683, lat=55.6761)
    create_issue(headers, title="London", lng=-0.1278, lat=51.5074)

    resp = client.get(ISSUES_URL, params={"lng": 0, "lat": 0, "radius": str(10**20)})
    assert resp.status_code == 200, resp.text
    assert _titles(resp) == ["London", "Copenhagen"]
