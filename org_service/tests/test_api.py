import pytest
from org_service.models.organisation import Role

@pytest.fixture
def acme(client, make_user, auth_headers):
    """Acme with an admin (u1), an Eng team, and a plain member (u3) on that team"""
    u1 = make_user("u1@x.com", name="Founder")
    u2 = make_user("u2@x.com")
    u3 = make_user("u3@x.com")

    response = client.post(f"/users/{u1.id}/organizations", json={"name": "Acme"}, headers=auth_headers(u1))
    assert response.status_code == 200
    org_id = response.json()["id"]

    response = client.post(f"/organizations/{org_id}/teams", json={"name": "Eng"}, headers=auth_headers(u1))
    assert response.status_code == 200
    team_id = response.json()["id"]

    client.post(
        f"/organizations/{org_id}/users", json={"email": "u3@x.com", "role": "MEMBER"}, headers=auth_headers(u1)
    )
    client.post(
        f"/organizations/{org_id}/teams/{team_id}/users",
        json={"email": "u3@x.com", "role": "MEMBER"},
        headers=auth_headers(u1)
    )
    return {"u1": u1, "u2": u2, "u3": u3, "org_id": org_id, "team_id": team_id}

class TestAuthentication:
    def test_missing_token_is_rejected(self, client, acme):
        response = client.get(f"/organizations/{acme['org_id']}")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_token_is_rejected(self, client, acme):
        response = client.get(
            f"/organizations/{acme['org_id']}", headers={"Authorization": "Bearer not-a-token"}
        )
        assert response.status_code == 401

    def test_users_only_act_on_themselves(self, client, acme, auth_headers):
        response = client.get(f"/users/{acme['u1'].id}/organizations", headers=auth_headers(acme["u2"]))
        assert response.status_code == 403
        assert response.json()["detail"] == "USER_SELF_ONLY"

class TestOrganizationRoutes:
    def test_list_user_organizations(self, client, acme, auth_headers):
        response = client.get(f"/users/{acme['u1'].id}/organizations", headers=auth_headers(acme["u1"]))
        assert response.status_code == 200
        body = response.json()
        assert [(org["name"], org["role"]) for org in body] == [("Acme", "ADMIN")]

    def test_create_organization_requires_name(self, client, acme, auth_headers):
        response = client.post(
            f"/users/{acme['u2'].id}/organizations", json={"name": " "}, headers=auth_headers(acme["u2"])
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "ORGANIZATION_NAME_REQUIRED"

    def test_get_organization_reports_role(self, client, acme, auth_headers):
        response = client.get(f"/organizations/{acme['org_id']}", headers=auth_headers(acme["u3"]))
        assert response.status_code == 200
        body = response.json()
        assert body["organization"]["name"] == "Acme"
        assert body["role"] == "MEMBER"

    def test_outsider_cannot_view_organization(self, client, acme, auth_headers):
        response = client.get(f"/organizations/{acme['org_id']}", headers=auth_headers(acme["u2"]))
        assert response.status_code == 403
        assert response.json()["detail"] == "ORGANIZATION_MEMBER_ONLY"

    def test_list_teams_and_users(self, client, acme, auth_headers):
        headers = auth_headers(acme["u3"])

        teams = client.get(f"/organizations/{acme['org_id']}/teams", headers=headers).json()
        assert [team["name"] for team in teams] == ["Eng"]

        users = client.get(f"/organizations/{acme['org_id']}/users?limit=1&offset=1", headers=headers).json()
        assert [(user["email"], user["role"]) for user in users] == [("u3@x.com", "MEMBER")]

    def test_negative_pagination_is_rejected(self, client, acme, auth_headers):
        response = client.get(f"/organizations/{acme['org_id']}/teams?limit=-1", headers=auth_headers(acme["u1"]))
        assert response.status_code == 422

    def test_member_cannot_create_team(self, client, acme, auth_headers):
        response = client.post(
            f"/organizations/{acme['org_id']}/teams", json={"name": "Ops"}, headers=auth_headers(acme["u3"])
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "ORGANIZATION_ADMIN_ONLY"

    def test_add_unknown_user(self, client, acme, auth_headers):
        response = client.post(
            f"/organizations/{acme['org_id']}/users",
            json={"email": "ghost@x.com", "role": "MEMBER"},
            headers=auth_headers(acme["u1"])
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "USER_NOT_FOUND"

    def test_add_user_with_unknown_role(self, client, acme, auth_headers):
        response = client.post(
            f"/organizations/{acme['org_id']}/users",
            json={"email": "u2@x.com", "role": "member"},
            headers=auth_headers(acme["u1"])
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "INVALID_ROLE"

    def test_add_user_with_mixed_case_email(self, client, resolver, acme, auth_headers):
        response = client.post(
            f"/organizations/{acme['org_id']}/users",
            json={"email": "U2@X.com", "role": "ADMIN"},
            headers=auth_headers(acme["u1"])
        )
        assert response.status_code == 200
        assert resolver.organization_role(acme["u2"].id, acme["org_id"]) is Role.ADMIN

class TestTeamRoutes:
    def test_get_team_with_both_roles(self, client, acme, auth_headers):
        response = client.get(
            f"/organizations/{acme['org_id']}/teams/{acme['team_id']}", headers=auth_headers(acme["u3"])
        )
        assert response.status_code == 200
        body = response.json()
        assert body["team"]["name"] == "Eng"
        assert body["organization_role"] == "MEMBER"
        assert body["team_role"] == "MEMBER"

    def test_organization_admin_views_team_without_team_role(self, client, acme, auth_headers):
        response = client.get(
            f"/organizations/{acme['org_id']}/teams/{acme['team_id']}", headers=auth_headers(acme["u1"])
        )
        assert response.status_code == 200
        assert response.json()["organization_role"] == "ADMIN"
        assert response.json()["team_role"] is None

    def test_list_team_users(self, client, acme, auth_headers):
        response = client.get(
            f"/organizations/{acme['org_id']}/teams/{acme['team_id']}/users", headers=auth_headers(acme["u3"])
        )
        assert [(user["email"], user["role"]) for user in response.json()] == [("u3@x.com", "MEMBER")]

    def test_cross_organization_team_is_rejected(self, client, acme, auth_headers):
        u2 = acme["u2"]
        other_id = client.post(
            f"/users/{u2.id}/organizations", json={"name": "Globex"}, headers=auth_headers(u2)
        ).json()["id"]
        foreign_team = client.post(
            f"/organizations/{other_id}/teams", json={"name": "Ops"}, headers=auth_headers(u2)
        ).json()["id"]

        response = client.get(
            f"/organizations/{acme['org_id']}/teams/{foreign_team}", headers=auth_headers(acme["u1"])
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "TEAM_ORGANIZATION_MISMATCH"

    def test_outsider_cannot_discover_teams(self, client, acme, auth_headers):
        u1, u2 = acme["u1"], acme["u2"]
        other_id = client.post(
            f"/users/{u1.id}/organizations", json={"name": "Globex"}, headers=auth_headers(u1)
        ).json()["id"]
        foreign_team = client.post(
            f"/organizations/{other_id}/teams", json={"name": "Ops"}, headers=auth_headers(u1)
        ).json()["id"]

        for team_id in (acme["team_id"], 999, foreign_team):
            response = client.get(f"/organizations/{acme['org_id']}/teams/{team_id}", headers=auth_headers(u2))
            assert response.status_code == 403
            assert response.json()["detail"] == "TEAM_MEMBER_ONLY"

        response = client.post(
            f"/organizations/{acme['org_id']}/teams/999/users",
            json={"email": "u2@x.com", "role": "ADMIN"},
            headers=auth_headers(u2)
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "TEAM_ADMIN_ONLY"

    def test_team_member_cannot_add_users(self, client, resolver, acme, auth_headers):
        client.post(
            f"/organizations/{acme['org_id']}/users",
            json={"email": "u2@x.com", "role": "MEMBER"},
            headers=auth_headers(acme["u1"])
        )

        response = client.post(
            f"/organizations/{acme['org_id']}/teams/{acme['team_id']}/users",
            json={"email": "u2@x.com", "role": "MEMBER"},
            headers=auth_headers(acme["u3"])
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "TEAM_ADMIN_ONLY"
        assert resolver.team_role(acme["u2"].id, acme["team_id"]) is None

    def test_team_admin_can_add_and_remove_users(self, client, resolver, acme, auth_headers):
        u1_headers = auth_headers(acme["u1"])
        client.post(
            f"/organizations/{acme['org_id']}/users", json={"email": "u2@x.com", "role": "MEMBER"}, headers=u1_headers
        )
        client.post(
            f"/organizations/{acme['org_id']}/teams/{acme['team_id']}/users",
            json={"email": "u3@x.com", "role": "ADMIN"},
            headers=u1_headers
        )
        u3_headers = auth_headers(acme["u3"])

        response = client.post(
            f"/organizations/{acme['org_id']}/teams/{acme['team_id']}/users",
            json={"email": "u2@x.com", "role": "MEMBER"},
            headers=u3_headers
        )
        assert response.status_code == 200
        assert resolver.team_role(acme["u2"].id, acme["team_id"]) is Role.MEMBER

        response = client.delete(
            f"/organizations/{acme['org_id']}/teams/{acme['team_id']}/users/{acme['u2'].id}", headers=u3_headers
        )
        assert response.status_code == 200
        assert resolver.team_role(acme["u2"].id, acme["team_id"]) is None
        assert resolver.organization_role(acme["u2"].id, acme["org_id"]) is Role.MEMBER

    def test_organization_admin_without_team_role_manages_team(self, client, resolver, acme, auth_headers):
        u1_headers = auth_headers(acme["u1"])
        assert resolver.team_role(acme["u1"].id, acme["team_id"]) is None

        response = client.delete(
            f"/organizations/{acme['org_id']}/teams/{acme['team_id']}/users/{acme['u3'].id}", headers=u1_headers
        )

        assert response.status_code == 200
        assert resolver.team_role(acme["u3"].id, acme["team_id"]) is None

class TestEndToEnd:
    def test_acme_scenario(self, client, resolver, make_user, auth_headers):
        u1 = make_user("u1@x.com")
        u2 = make_user("u2@x.com")
        headers = auth_headers(u1)

        org_id = client.post(f"/users/{u1.id}/organizations", json={"name": "Acme"}, headers=headers).json()["id"]
        assert client.get(f"/organizations/{org_id}", headers=headers).json()["role"] == "ADMIN"

        team_id = client.post(f"/organizations/{org_id}/teams", json={"name": "Eng"}, headers=headers).json()["id"]

        response = client.post(
            f"/organizations/{org_id}/teams/{team_id}/users",
            json={"email": "u2@x.com", "role": "MEMBER"},
            headers=headers
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "ORGANIZATION_USER_REQUIRED"

        response = client.post(
            f"/organizations/{org_id}/users", json={"email": "u2@x.com", "role": "MEMBER"}, headers=headers
        )
        assert response.status_code == 200

        response = client.post(
            f"/organizations/{org_id}/teams/{team_id}/users",
            json={"email": "u2@x.com", "role": "MEMBER"},
            headers=headers
        )
        assert response.status_code == 200
        assert resolver.team_role(u2.id, team_id) is Role.MEMBER

        response = client.delete(f"/organizations/{org_id}/users/{u2.id}", headers=headers)
        assert response.status_code == 200
        assert resolver.team_role(u2.id, team_id) is None
        assert resolver.organization_role(u2.id, org_id) is None
