"""Tests for correlation ID header on all responses."""


def test_correlation_id_on_success(client):
    """Test that correlation ID is included on successful responses."""
    response = client.get("/health")
    assert response.status_code == 200
    assert "X-Correlation-ID" in response.headers
    assert len(response.headers["X-Correlation-ID"]) == 8  # 4 bytes as hex


def test_correlation_id_on_challenge_rejection(client, auth_headers):
    """Test that correlation ID is included when a stale challenge is refused."""
    response = client.post(
        "/api/v1/license/validate-secure",
        json={"service_name": "ocr"},
        headers={**auth_headers, "X-Challenge": "00000000abc"},
    )
    assert response.status_code == 401
    assert len(response.headers["X-Correlation-ID"]) == 8


def test_correlation_id_on_404_error(client, auth_headers):
    """Test that correlation ID is included on 404 error responses (HTTPException)."""
    response = client.get("/api/v1/license/licenses/unknown", headers=auth_headers)
    assert response.status_code == 404
    assert len(response.headers["X-Correlation-ID"]) == 8


def test_correlation_id_on_validation_error(client):
    """Test that correlation ID is included on validation error (422) responses."""
    response = client.post("/api/v1/license/validate", json={"service_name": ""})
    assert response.status_code == 422
    assert len(response.headers["X-Correlation-ID"]) == 8


def test_correlation_id_on_unauthorized_error(client):
    """Test that correlation ID is included on 401 error responses (HTTPException)."""
    response = client.get("/api/v1/license/licenses", headers={"Authorization": "InvalidFormat"})
    assert response.status_code == 401
    assert len(response.headers["X-Correlation-ID"]) == 8


def test_correlation_ids_unique_across_requests(client):
    """Test that each request gets a unique correlation ID."""
    response1 = client.get("/health")
    response2 = client.get("/health")

    corr_id_1 = response1.headers.get("X-Correlation-ID")
    corr_id_2 = response2.headers.get("X-Correlation-ID")

    assert corr_id_1 != corr_id_2, "Correlation IDs should be unique across requests"


def test_hash_header_exposed_to_browsers(client):
    """CORS preflight lets browser verifiers read the hash header."""
    response = client.get("/health", headers={"Origin": "http://localhost:3000"})
    exposed = response.headers.get("Access-Control-Expose-Headers", "")
    assert "X-Response-Hash" in exposed
