"""
User API contract tests

Exercises /api/v1/users on the standalone registry app.
"""

import pytest

from core.access_control import MANAGER_ROLE
from tests.contracts.user.data_contract import UserTestDataFactory, caller_headers


@pytest.mark.api
@pytest.mark.asyncio
class TestUserEndpoints:

    async def test_health_and_info(self, user_api, assertions):
        response = await user_api.get("/health")
        assertions.assert_http_success(response)
        assert response.json()["service"] == "user_service"

        info = (await user_api.get("/info")).json()
        assert info["roles"]["MANAGER"] == MANAGER_ROLE

    async def test_create_and_get(self, user_api, deployer, assertions):
        body = UserTestDataFactory.make_create_request(score=10)

        response = await user_api.post("/api/v1/users", json=body, headers=caller_headers(deployer))

        assertions.assert_http_success(response, 201)
        assert response.json()["user"] == body
        fetched = await user_api.get(f"/api/v1/users/{body['id']}")
        assert fetched.json() == body

    async def test_unknown_user_returns_zero_record(self, user_api):
        response = await user_api.get("/api/v1/users/424242")
        assert response.json() == {"id": 0, "phone": 0, "score": 0}

    async def test_error_mapping(self, user_api, deployer, stranger, assertions):
        headers = caller_headers(deployer)
        body = UserTestDataFactory.make_create_request()

        response = await user_api.post("/api/v1/users", json=body, headers=caller_headers(stranger))
        assertions.assert_error_code(response, 403, "AccessControl")

        response = await user_api.post("/api/v1/users", json={**body, "id": 0}, headers=headers)
        assertions.assert_error_code(response, 400, "Error_UserInfoParamsInvalid")

        await user_api.post("/api/v1/users", json=body, headers=headers)
        response = await user_api.post("/api/v1/users", json=body, headers=headers)
        assertions.assert_error_code(response, 409, "Error_UserAlreadyExists")

        response = await user_api.put(
            "/api/v1/users/999999999999", json={"phone": 1, "score": 1}, headers=headers
        )
        assertions.assert_error_code(response, 404, "Error_UserNotExists")

    async def test_missing_caller_header(self, user_api):
        response = await user_api.post("/api/v1/users", json=UserTestDataFactory.make_create_request())
        assert response.status_code == 422

    async def test_negative_score_rejected_by_validation(self, user_api, deployer):
        body = UserTestDataFactory.make_create_request(score=-1)
        response = await user_api.post("/api/v1/users", json=body, headers=caller_headers(deployer))
        assert response.status_code == 422

    async def test_charge_score(self, user_api, deployer):
        headers = caller_headers(deployer)
        body = UserTestDataFactory.make_create_request(score=0)
        await user_api.post("/api/v1/users", json=body, headers=headers)

        response = await user_api.post(
            f"/api/v1/users/{body['id']}/charge", json={"amount": 900}, headers=headers
        )

        assert response.json()["user"]["score"] == 900


@pytest.mark.api
@pytest.mark.asyncio
class TestRoleEndpoints:

    async def test_grant_check_revoke(self, user_api, deployer, stranger):
        headers = caller_headers(deployer)
        body = {"role": MANAGER_ROLE, "account": stranger}

        granted = await user_api.post("/api/v1/users/roles", json=body, headers=headers)
        assert granted.json()["changed"] is True

        check = await user_api.get(f"/api/v1/users/roles/{MANAGER_ROLE}/{stranger}")
        assert check.json()["has_role"] is True

        revoked = await user_api.request("DELETE", "/api/v1/users/roles", json=body, headers=headers)
        assert revoked.json()["changed"] is True

        check = await user_api.get(f"/api/v1/users/roles/{MANAGER_ROLE}/{stranger}")
        assert check.json()["has_role"] is False

    async def test_renounce_own_role(self, user_api, deployer):
        body = {"role": MANAGER_ROLE, "account": deployer}
        response = await user_api.request(
            "DELETE", "/api/v1/users/roles", json=body, headers=caller_headers(deployer)
        )
        assert response.json()["changed"] is True

        check = await user_api.get(f"/api/v1/users/roles/{MANAGER_ROLE}/{deployer}")
        assert check.json()["has_role"] is False

    async def test_grant_denied_for_stranger(self, user_api, stranger, assertions):
        body = {"role": MANAGER_ROLE, "account": stranger}
        response = await user_api.post("/api/v1/users/roles", json=body, headers=caller_headers(stranger))
        assertions.assert_error_code(response, 403, "AccessControl")

    async def test_malformed_account(self, user_api, deployer):
        body = {"role": MANAGER_ROLE, "account": "0xabc"}
        response = await user_api.post("/api/v1/users/roles", json=body, headers=caller_headers(deployer))
        assert response.status_code == 400
