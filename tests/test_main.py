"""
Tests for application-level routes and error handlers.
"""

from fastapi.testclient import TestClient


class TestApp:

    def test_health(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_unknown_path_is_json_404(self, client: TestClient):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json() == {"detail": "Resource not found"}

    def test_not_found_detail_is_kept(self, client: TestClient):
        response = client.get("/api/orders/987")
        assert response.json() == {"detail": "Order not found"}
