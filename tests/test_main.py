"""
Tests for licensekeeper/main.py module.
"""

from fastapi.testclient import TestClient

from licensekeeper import __version__
from licensekeeper.main import app


class TestApp:
    """Tests for the FastAPI application."""

    def test_root(self):
        """Test the root endpoint reports the service version."""
        client = TestClient(app)

        response = client.get("/")

        assert response.status_code == 200
        assert response.json() == {"message": "licensekeeper", "version": __version__}

    def test_license_routes_mounted(self):
        """Test the license routes are mounted under /api."""
        paths = {route.path for route in app.routes}

        assert "/api/license" in paths
        assert "/api/license/refresh" in paths
        assert "/api/license/addons" in paths
