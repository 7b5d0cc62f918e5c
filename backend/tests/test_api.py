"""
Jam Session Backend — HTTP API Tests
======================================

What:  End-to-end checks through the FastAPI app: auth, status codes, the
       error envelope, query parameter parsing and middleware headers.
How:   httpx AsyncClient over ASGITransport; the database session is the
       mock from conftest, tokens are really signed.
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.dialects import postgresql

from conftest import make_token, result_with


class TestAuthentication:

    @pytest.mark.asyncio
    async def test_missing_token(self, test_client):
        response = await test_client.get("/jams")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_token_signed_with_another_secret(self, test_client):
        token = make_token("javier@example.com", secret="someone-elses-secret")

        response = await test_client.get("/users", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_token_with_numeric_email_claim(self, test_client):
        token = make_token(12345)

        response = await test_client.get("/users", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_health_is_public(self, test_client):
        with patch("jamsession.routes.health.check_database", AsyncMock(return_value=True)):
            response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_health_without_database(self, test_client):
        with patch("jamsession.routes.health.check_database", AsyncMock(return_value=False)):
            response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"


class TestJamEndpoints:

    @pytest.mark.asyncio
    async def test_get_missing_jam_is_400(self, test_client, mock_db_session, auth_headers):
        mock_db_session.execute.return_value = result_with(one=None)

        response = await test_client.get("/jams/999", headers=auth_headers())

        assert response.status_code == 400
        assert response.json()["message"] == "The jam you are trying to retrieve doesn't exist in the db"

    @pytest.mark.asyncio
    async def test_jam_id_beyond_int4_is_400(self, test_client, mock_db_session, auth_headers):
        response = await test_client.get("/jams/99999999999", headers=auth_headers())

        assert response.status_code == 400
        assert response.json()["details"][0]["loc"] == ["path", "jam_id"]
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ids_in_body_beyond_int4_are_400(self, test_client, mock_db_session, auth_headers):
        created = await test_client.post(
            "/jams",
            json={"author": 2**31, "coordinates": [6.3, 4]},
            headers=auth_headers(),
        )
        updated = await test_client.put(
            "/jams/1",
            json={"attendants": [1, 2**31]},
            headers=auth_headers(),
        )

        assert created.status_code == 400
        assert created.json()["details"][0]["loc"] == ["body", "author"]
        assert updated.status_code == 400
        assert updated.json()["details"][0]["loc"] == ["body", "attendants", 1]
        mock_db_session.get.assert_not_awaited()
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_jam(self, test_client, mock_db_session, make_user, assign_identity, auth_headers):
        mock_db_session.get.return_value = make_user(3, email="author@example.com")
        mock_db_session.add.side_effect = assign_identity

        response = await test_client.post(
            "/jams",
            json={"author": 3, "coordinates": [6.3, 4]},
            headers=auth_headers(),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["id"] == 42
        assert body["author"]["id"] == 3
        assert [attendant["id"] for attendant in body["attendants"]] == [3]
        assert body["coordinates"] == {"type": "Point", "coordinates": [6.3, 4.0]}

    @pytest.mark.asyncio
    async def test_create_jam_with_bad_coordinates(self, test_client, auth_headers):
        response = await test_client.post(
            "/jams",
            json={"author": 3, "coordinates": [6.3]},
            headers=auth_headers(),
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert isinstance(body["details"], list)

    @pytest.mark.asyncio
    async def test_delete_by_other_user_is_403(self, test_client, mock_db_session, make_jam, auth_headers):
        mock_db_session.execute.return_value = result_with(one=make_jam(4))

        response = await test_client.delete("/jams/4", headers=auth_headers("intruder@example.com"))

        assert response.status_code == 403
        mock_db_session.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_by_author_is_204(self, test_client, mock_db_session, make_jam, auth_headers):
        jam = make_jam(4)
        mock_db_session.execute.return_value = result_with(one=jam)

        response = await test_client.delete("/jams/4", headers=auth_headers("javier@example.com"))

        assert response.status_code == 204
        assert response.content == b""
        mock_db_session.delete.assert_awaited_once_with(jam)

    @pytest.mark.asyncio
    async def test_list_near_point(self, test_client, mock_db_session, make_jam, auth_headers):
        mock_db_session.execute.return_value = result_with(many=[make_jam(1)])

        response = await test_client.get(
            "/jams",
            params={"point[lng]": "6.3", "point[lat]": "4", "point[maxDistance]": "1000"},
            headers=auth_headers(),
        )

        assert response.status_code == 200
        assert [jam["id"] for jam in response.json()] == [1]
        statement = mock_db_session.execute.call_args[0][0]
        assert "ST_DWithin" in str(statement.compile(dialect=postgresql.dialect()))

    @pytest.mark.asyncio
    async def test_list_with_non_numeric_point_returns_everything(
        self, test_client, mock_db_session, auth_headers
    ):
        mock_db_session.execute.return_value = result_with(many=[])

        response = await test_client.get(
            "/jams",
            params={"point[lng]": "east", "point[lat]": "4"},
            headers=auth_headers(),
        )

        assert response.status_code == 200
        statement = mock_db_session.execute.call_args[0][0]
        assert "ST_DWithin" not in str(statement.compile(dialect=postgresql.dialect()))

    @pytest.mark.asyncio
    async def test_list_with_latitude_out_of_range(self, test_client, auth_headers):
        response = await test_client.get(
            "/jams",
            params={"point[lng]": "6.3", "point[lat]": "95"},
            headers=auth_headers(),
        )

        assert response.status_code == 400
        assert response.json()["details"][0]["loc"] == ["query", "point[lat]"]


class TestUserEndpoints:

    @pytest.mark.asyncio
    async def test_user_id_out_of_range_is_400(self, test_client, mock_db_session, auth_headers):
        too_big = await test_client.get("/users/2147483648", headers=auth_headers())
        zero = await test_client.delete("/users/0", headers=auth_headers())

        assert too_big.status_code == 400
        assert zero.status_code == 400
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_availability_without_profile(self, test_client, mock_db_session, auth_headers):
        mock_db_session.execute.return_value = result_with(one=None)

        response = await test_client.put(
            "/me/availability",
            json={"is_available": True},
            headers=auth_headers("ghost@example.com"),
        )

        assert response.status_code == 400
        assert response.json()["details"] == [
            {
                "loc": ["header", "Authorization"],
                "msg": "The authenticated user doesn't exist in the db",
                "type": "value_error",
            }
        ]

    @pytest.mark.asyncio
    async def test_create_user_with_invalid_body(self, test_client, auth_headers):
        response = await test_client.post(
            "/users",
            json={"nickname": "J", "email": "not-an-email"},
            headers=auth_headers(),
        )

        assert response.status_code == 400
        fields = {tuple(error["loc"]) for error in response.json()["details"]}
        assert ("body", "nickname") in fields
        assert ("body", "email") in fields

    @pytest.mark.asyncio
    async def test_create_user_with_taken_email(self, test_client, mock_db_session, auth_headers):
        mock_db_session.execute.return_value = result_with(one=1)

        response = await test_client.post(
            "/users",
            json={"nickname": "Javier", "email": "javier@example.com"},
            headers=auth_headers(),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "The specified e-mail address already exists"

    @pytest.mark.asyncio
    async def test_update_availability_uses_token_email(
        self, test_client, mock_db_session, make_user, auth_headers
    ):
        mock_db_session.execute.return_value = result_with(one=make_user(1))

        response = await test_client.put(
            "/me/availability",
            json={"is_available": True, "instruments": ["guitar"]},
            headers=auth_headers("javier@example.com"),
        )

        assert response.status_code == 201
        assert response.json()["is_available"] is True
        statement = mock_db_session.execute.call_args[0][0]
        compiled = statement.compile(dialect=postgresql.dialect())
        assert "javier@example.com" in compiled.params.values()

    @pytest.mark.asyncio
    async def test_delete_test_users(self, test_client, mock_db_session, auth_headers):
        mock_db_session.execute.return_value = result_with(rowcount=0)

        response = await test_client.delete("/testusers", headers=auth_headers())

        assert response.status_code == 204


class TestMiddleware:

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client, mock_db_session, auth_headers):
        mock_db_session.execute.return_value = result_with(one=None)
        headers = {**auth_headers(), "X-Request-ID": "abc12345"}

        response = await test_client.get("/jams/1", headers=headers)

        assert response.headers["X-Request-ID"] == "abc12345"
        assert response.json()["request_id"] == "abc12345"

    @pytest.mark.asyncio
    async def test_request_id_is_generated(self, test_client):
        response = await test_client.get("/jams")

        assert len(response.headers["X-Request-ID"]) == 8
