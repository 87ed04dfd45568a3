"""
Integration test fixtures
"""

import pytest


@pytest.fixture
def assert_page():
    """Check the pagination envelope and return its data."""

    def _assert_page(response, records: int, current: int = 1, limit: int = 100, pages: int = None):
        assert response.status_code == 200, response.text
        body = response.json()
        expected_pages = pages if pages is not None else -(-records // limit)
        assert body["pagination"] == {
            "current": current,
            "limit": limit,
            "records": records,
            "pages": expected_pages,
        }
        return body["data"]

    return _assert_page
