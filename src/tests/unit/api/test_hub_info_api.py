"""Tests for GET /hub_info/."""

from unittest.mock import patch

from storehub.core.authentication import get_challenge_text


class TestHubInfo:
    """Discovery endpoint tests."""

    def test_returns_discovery_document(self, client) -> None:
        response = client.get("/hub_info/")

        assert response.status_code == 200
        assert response.json() == {
            "challenge_text": get_challenge_text("hub.test"),
            "latest_auth_version": "v1",
            "read_url_prefix": "https://read.hub.test/",
        }

    def test_short_challenge_text_is_500(self, client) -> None:
        with patch(
            "storehub.app.api.v1.hub_info.get_challenge_text", return_value="too-short"
        ):
            response = client.get("/hub_info/")

        assert response.status_code == 500
        assert response.json() == {"message": "Server challenge text misconfigured"}
        assert "too-short" not in response.text

    def test_challenge_text_signs_valid_tokens(self, client, signer) -> None:
        challenge = client.get("/hub_info/").json()["challenge_text"]
        token = signer.v0_token(challenge)

        response = client.post(
            f"/store/{signer.address}/a.txt",
            content=b"x",
            headers={"Authorization": f"bearer {token}"},
        )
        assert response.status_code == 202

    def test_health(self, client) -> None:
        assert client.get("/health").json() == {"status": "ok"}

    def test_metrics(self, client) -> None:
        client.get("/hub_info/")
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "storehub_http_requests_total" in response.text

    def test_cors_allows_any_origin(self, client) -> None:
        response = client.get("/hub_info/", headers={"Origin": "https://app.test"})
        assert response.headers["access-control-allow-origin"] == "*"
