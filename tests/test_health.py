def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}


def test_api_docs_available(client):
    response = client.get("/docs")
    assert response.status_code == 200
