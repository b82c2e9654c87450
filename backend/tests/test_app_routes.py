"""Regression tests for application route registration."""
import pytest
from fastapi.routing import APIRoute

from app.main import app


@pytest.mark.parametrize(
    ("path", "method"),
    [
        ("/body-analysis", "POST"),
        ("/body-analysis/latest", "GET"),
        ("/body-analysis/history", "GET"),
        ("/diet-recommendations", "POST"),
        ("/diet-recommendations/latest", "GET"),
        ("/diet-recommendations/history", "GET"),
        ("/workout-recommendations", "POST"),
        ("/workout-recommendations/latest", "GET"),
        ("/workout-recommendations/history", "GET"),
    ],
)
def test_recommendation_route_registered_once(path: str, method: str) -> None:
    """Ensure each recommendation endpoint is mounted exactly once."""
    routes = [
        route
        for route in app.routes
        if isinstance(route, APIRoute) and route.path == path and method in route.methods
    ]
    assert len(routes) == 1
