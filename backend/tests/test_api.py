# backend/tests/test_api.py
import datetime as dt
from fastapi.testclient import TestClient

from supplier_dashboard.api.analytics import default_window
from supplier_dashboard.api.dashboard import compute_dashboard_stats
from supplier_dashboard.services.snapshots import analytics_key, load_snapshot

GQL_DATA = {
    "topProducts": [{"productId": "p9", "productName": "Cable Tray", "totalOrdersCreated": 3, "totalRevenue": 90}],
    "orderAnalyticsSummary": {
        "totalRevenue": 1200,
        "totalOrders": 10,
        "revenueTrend": [{"date": "Aug 2025", "totalAmount": 100, "count": 1},
                         {"date": "Sep 2025", "totalAmount": 300, "count": 3}],
        "ordersByDate": [{"date": "2025-09-02", "count": 3, "totalAmount": 300}],
        "paymentStatus": {"completed": 9, "failed": 1},
    },
}

def test_health(client: TestClient):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


# ====================== GraphQL proxy ======================

def test_proxy_requires_dates(client: TestClient, upstream):
    r = client.post("/api/analytics", json={"variables": {"startDate": "2025-01-01"}})
    assert r.status_code == 400
    assert r.json() == {"errors": [{"message": "Missing startDate or endDate"}]}
    assert upstream.calls == []

def test_proxy_forwards_auth_and_passes_status_through(client: TestClient, upstream, fake_response):
    upstream.respond(fake_response({"data": GQL_DATA}, status_code=200))
    r = client.post(
        "/api/analytics",
        json={"startDate": "2025-04-01", "endDate": "2025-09-30"},
        headers={"Authorization": "Bearer t0k", "X-Company-ID": "77"},
    )
    assert r.status_code == 200
    assert r.headers["cache-control"] == "no-store"
    assert r.json()["data"]["orderAnalyticsSummary"]["totalOrders"] == 10

    call = upstream.calls[0]
    assert call["method"] == "POST"
    assert call["headers"]["Authorization"] == "Bearer t0k"
    assert call["headers"]["X-Company-ID"] == "77"
    assert call["json"]["variables"] == {"startDate": "2025-04-01", "endDate": "2025-09-30", "limit": 10}

def test_proxy_passes_non_json_body_as_text(client: TestClient, upstream, fake_response):
    upstream.respond(fake_response(None, status_code=502, text="Bad Gateway", content_type="text/plain"))
    r = client.post("/api/analytics", json={"variables": {"startDate": "2025-01-01", "endDate": "2025-02-01"}})
    assert r.status_code == 502
    assert r.text == "Bad Gateway"

def test_proxy_transport_error_is_500(client: TestClient):
    r = client.post("/api/analytics", json={"startDate": "2025-01-01", "endDate": "2025-02-01"})
    assert r.status_code == 500
    assert "unreachable" in r.json()["errors"][0]["message"]


# ==================== Supplier analytics ====================

def test_supplier_analytics_live_data_is_mapped_and_cached(client: TestClient, upstream, fake_response):
    upstream.respond(fake_response({"data": GQL_DATA}))
    r = client.get("/api/v1/supplier/analytics?start_date=2025-04-01&end_date=2025-09-30&limit=5")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True and body["error"] is None
    assert body["period"] == {"startDate": "2025-04-01", "endDate": "2025-09-30"}

    data = body["data"]
    assert data["revenue"]["totalRevenue"] == 1200
    assert data["revenue"]["revenueGrowth"] == 200
    assert data["revenue"]["monthlyData"] == [
        {"month": "Aug", "revenue": 100, "orders": 0},
        {"month": "Sep", "revenue": 300, "orders": 3},
    ]
    assert data["orders"]["statusBreakdown"][0] == {"status": "Completed", "count": 9, "percentage": 90}
    assert data["products"]["topProducts"][0]["id"] == "p9"
    # buyer metrics come from the bundled mocks
    assert data["buyers"]["totalBuyers"] == 156

    assert load_snapshot(analytics_key("2025-04-01", "2025-09-30", 5)) == GQL_DATA

def test_supplier_analytics_falls_back_to_cached_snapshot(client: TestClient, upstream, fake_response):
    upstream.respond(fake_response({"data": GQL_DATA}))
    client.get("/api/v1/supplier/analytics?start_date=2025-04-01&end_date=2025-09-30")

    # upstream now unreachable
    r = client.get("/api/v1/supplier/analytics?start_date=2025-04-01&end_date=2025-09-30")
    body = r.json()
    assert body["success"] is True
    assert "unreachable" in body["error"]
    assert body["data"]["revenue"]["totalRevenue"] == 1200

def test_supplier_analytics_falls_back_to_mocks(client: TestClient):
    r = client.get("/api/v1/supplier/analytics?start_date=2025-01-01&end_date=2025-06-30")
    body = r.json()
    assert r.status_code == 200
    assert body["success"] is True
    assert body["data"]["revenue"]["totalRevenue"] == 284500
    assert len(body["data"]["revenue"]["monthlyData"]) == 6

def test_supplier_analytics_graphql_errors_use_fallback(client: TestClient, upstream, fake_response):
    upstream.respond(fake_response({"errors": [{"message": "Unauthorized"}]}))
    body = client.get("/api/v1/supplier/analytics?start_date=2025-01-01&end_date=2025-06-30").json()
    assert body["error"] == "Unauthorized"
    assert body["data"]["orders"]["totalOrders"] == 301

def test_supplier_analytics_empty_payload_uses_fallback_without_error(client: TestClient, upstream, fake_response):
    upstream.respond(fake_response({"data": {}}))
    body = client.get("/api/v1/supplier/analytics?start_date=2025-01-01&end_date=2025-06-30").json()
    assert body["error"] is None
    assert body["data"]["revenue"]["totalRevenue"] == 284500

def test_supplier_analytics_default_window(client: TestClient):
    body = client.get("/api/v1/supplier/analytics").json()
    start, end = default_window()
    assert body["period"] == {"startDate": start, "endDate": end}

def test_default_window_spans_six_months():
    assert default_window(dt.date(2025, 9, 27)) == ("2025-04-01", "2025-09-27")
    assert default_window(dt.date(2025, 2, 10)) == ("2024-09-01", "2025-02-10")

def test_supplier_analytics_rejects_bad_dates(client: TestClient):
    assert client.get("/api/v1/supplier/analytics?start_date=2025-13-01").status_code == 400
    r = client.get("/api/v1/supplier/analytics?start_date=2025-06-01&end_date=2025-01-01")
    assert r.status_code == 400

def test_supplier_analytics_single_metric(client: TestClient, upstream):
    r = client.get("/api/v1/supplier/analytics?metric=buyers")
    assert r.status_code == 200
    assert r.json()["id"] == "buyers"
    assert upstream.calls == []

    r = client.get("/api/v1/supplier/analytics?metric=churn")
    assert r.status_code == 404
    assert r.json()["detail"] == "Metric not found"


# ======================== Dashboard ========================

def test_dashboard_uses_mock_pages_when_upstream_is_down(client: TestClient, upstream):
    r = client.get("/api/v1/supplier/dashboard")
    assert r.status_code == 200
    body = r.json()
    stats = body["stats"]
    assert stats["totalProducts"] == 4
    assert stats["activeOrders"] == 3
    assert stats["newRfqs"] == 3
    assert len(body["recentOrders"]) == 3
    assert set(body["errors"]) == {"products", "orders", "rfqs"}
    assert all("unreachable" in msg for msg in body["errors"].values())
    assert {c["url"] for c in upstream.calls} == {
        "https://upstream.test/api/v1/company/products",
        "https://upstream.test/api/v1/company/orders",
        "https://upstream.test/api/v1/company/market/rfqs",
    }

def test_dashboard_prefers_live_pages(client: TestClient, upstream, fake_response):
    def page(rows, total=None):
        return fake_response({"data": rows, "meta": {"total": total if total is not None else len(rows)}})

    upstream.route("/company/products", page([{"id": 1}]))
    upstream.route("/company/orders", page(
        [{"id": 9, "status": "Processing", "total_amount": "10.00", "created_at": "2020-01-01T00:00:00Z"}]))
    upstream.route("/market/rfqs", page([{"id": 3}], total=25))
    body = client.get("/api/v1/supplier/dashboard").json()
    assert body["errors"] == {"products": None, "orders": None, "rfqs": None}
    assert body["stats"]["totalProducts"] == 1
    assert body["stats"]["activeOrders"] == 1
    assert body["stats"]["newRfqs"] == 25

def test_compute_dashboard_stats_monthly_revenue():
    orders = {"data": [
        {"status": "pending", "total_amount": "100.50", "created_at": "2025-09-02T09:15:00Z"},
        {"status": "completed", "total_amount": "50", "created_at": "2025-09-30T23:00:00+00:00"},
        {"status": "shipped", "total_amount": "999", "created_at": "2025-08-31T10:00:00Z"},
        {"status": "cancelled", "total_amount": None, "created_at": None},
    ]}
    stats = compute_dashboard_stats({"data": []}, orders, {"data": [{}, {}], "meta": {}}, today=dt.date(2025, 9, 15))
    assert stats.monthlyRevenue == 150.5
    assert stats.activeOrders == 2
    assert stats.newRfqs == 2
    assert stats.totalProducts == 0


# ===================== Snapshot cache / DB =====================

def test_snapshot_fallback_reads_off_the_event_loop(monkeypatch):
    import asyncio, threading
    from supplier_dashboard.services import loaders

    reader_threads = []

    def recording_load(key):
        reader_threads.append(threading.get_ident())
        return None

    monkeypatch.setattr(loaders, "load_snapshot", recording_load)

    async def scenario():
        return await loaders.analytics_controller("2025-01-01", "2025-06-30").load()

    outcome = asyncio.run(scenario())
    assert outcome.data.revenue.totalRevenue == 284500   # bundled mocks after an empty cache
    assert len(reader_threads) == 1
    assert reader_threads[0] != threading.get_ident()

def test_snapshot_save_overwrites_existing_key():
    from supplier_dashboard.services.snapshots import save_snapshot
    key = analytics_key("2025-01-01", "2025-06-30", 10)
    assert save_snapshot(key, {"v": 1}) is True
    assert save_snapshot(key, {"v": 2}) is True
    assert load_snapshot(key) == {"v": 2}

def test_app_import_bootstraps_snapshot_table():
    from sqlalchemy import inspect
    from supplier_dashboard.db.session import Base, engine
    from supplier_dashboard.main import maybe_bootstrap

    Base.metadata.drop_all(bind=engine)
    maybe_bootstrap()
    assert "payload_snapshots" in inspect(engine).get_table_names()
