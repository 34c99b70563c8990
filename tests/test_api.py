from conftest import PASSWORD, auth_headers
from rbac_module.models import Institution

RBAC = "/api/v1/rbac"
SCHOOL = "/api/v1/school"
ONBOARDING = "/api/v1/onboarding"


def _login(client, email):
    response = client.post(f"{RBAC}/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def test_login_and_me(client, make_user, institution):
    make_user("principal@greenvalley.ac.ke", "institution_admin", institution_id=institution.id)
    headers = _login(client, "Principal@GreenValley.ac.ke")

    body = client.get(f"{RBAC}/me", headers=headers).json()
    assert body["email"] == "principal@greenvalley.ac.ke"
    assert body["roles"] == [{"role": "institution_admin", "institution_id": institution.id}]


def test_login_rejects_bad_password(client, make_user):
    make_user("someone@greenvalley.ac.ke")
    response = client.post(f"{RBAC}/auth/login", json={"email": "someone@greenvalley.ac.ke", "password": "wrong-pass"})
    assert response.status_code == 401


def test_platform_admin_creates_institution_and_adds_staff(client, make_user):
    root = make_user("root@classbridge.io", "super_admin")
    response = client.post(
        f"{RBAC}/institutions",
        json={"name": "Hillside Academy", "email": "info@hillside.ac.ke"},
        headers=auth_headers(root),
    )
    assert response.status_code == 201, response.text
    created = response.json()
    assert created["onboarding_status"] == "pending"

    response = client.post(
        f"{RBAC}/institutions/{created['id']}/users",
        json={"email": "bursar@hillside.ac.ke", "password": PASSWORD, "role": "bursar"},
        headers=auth_headers(root),
    )
    assert response.status_code == 201, response.text
    assert response.json()["roles"] == [{"role": "bursar", "institution_id": created["id"]}]


def test_only_platform_admins_create_institutions(client, make_user, institution):
    admin = make_user("principal@greenvalley.ac.ke", "institution_admin", institution_id=institution.id)
    response = client.post(f"{RBAC}/institutions", json={"name": "Other School"}, headers=auth_headers(admin))
    assert response.status_code == 403


def test_staff_cannot_add_users(client, make_user, institution):
    teacher = make_user("teacher@greenvalley.ac.ke", "teacher", institution_id=institution.id)
    response = client.post(
        f"{RBAC}/institutions/{institution.id}/users",
        json={"email": "new@greenvalley.ac.ke", "password": PASSWORD, "role": "teacher"},
        headers=auth_headers(teacher),
    )
    assert response.status_code == 403


def test_onboarding_requires_auth_and_institution_context(client, make_user, institution):
    assert client.get(f"{ONBOARDING}/progress").status_code == 401

    admin = make_user("principal@greenvalley.ac.ke", "institution_admin", institution_id=institution.id)
    assert client.get(f"{ONBOARDING}/progress", headers=auth_headers(admin)).status_code == 400
    assert client.get(f"{ONBOARDING}/progress", headers=auth_headers(admin, 9999)).status_code == 404

    outsider = make_user("outsider@elsewhere.ac.ke")
    assert client.get(f"{ONBOARDING}/progress", headers=auth_headers(outsider, institution.id)).status_code == 403


def test_role_without_steps_gets_forbidden_code(client, make_user, institution):
    parent = make_user("parent@greenvalley.ac.ke", "parent", institution_id=institution.id)
    response = client.get(f"{ONBOARDING}/progress", headers=auth_headers(parent, institution.id))
    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "no_accessible_steps"


def test_steps_are_filtered_by_role(client, make_user, institution):
    bursar = make_user("bursar@greenvalley.ac.ke", "bursar", institution_id=institution.id)
    response = client.get(f"{ONBOARDING}/steps", headers=auth_headers(bursar, institution.id))
    assert [step["id"] for step in response.json()] == ["fee_structure", "data_import"]


def test_full_onboarding_flow(client, make_user, institution):
    admin = make_user("principal@greenvalley.ac.ke", "institution_owner", institution_id=institution.id)
    headers = auth_headers(admin, institution.id)

    state = client.get(f"{ONBOARDING}/progress", headers=headers).json()
    assert state["progress"]["current_step"] == "institution_profile"
    assert state["completion_percentage"] == 0
    assert len(state["steps"]) == 7

    response = client.post(f"{ONBOARDING}/progress/step", json={"step": "class_setup"}, headers=headers)
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "invalid_transition"

    response = client.post(f"{ONBOARDING}/go-live", json={}, headers=headers)
    assert response.status_code == 409
    assert response.json()["detail"]["missing"] == ["profile", "academic_years", "classes"]

    assert client.put(f"{SCHOOL}/profile", json={"email": "Office@GreenValley.ac.ke"}, headers=headers).status_code == 200
    response = client.post(
        f"{ONBOARDING}/progress/complete",
        json={"step": "institution_profile", "step_data": {"email": "office@greenvalley.ac.ke"}, "expected_version": 1},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    state = response.json()
    assert state["progress"]["current_step"] == "academic_calendar"
    assert state["progress"]["version"] == 2

    response = client.put(
        f"{ONBOARDING}/progress/step-data",
        json={"step": "academic_calendar", "data": {"term": 1}, "expected_version": 1},
        headers=headers,
    )
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "concurrent_update"

    assert client.post(f"{SCHOOL}/academic-years", json={"name": "2026"}, headers=headers).status_code == 201
    assert client.post(f"{SCHOOL}/classes", json={"name": "Form 1", "stream": "East"}, headers=headers).status_code == 201

    checklist = client.get(f"{ONBOARDING}/checklist", headers=headers).json()
    assert checklist["can_go_live"] is True
    assert checklist["missing"] == []

    response = client.post(f"{ONBOARDING}/go-live", json={}, headers=headers)
    assert response.status_code == 200, response.text
    progress = response.json()["progress"]
    assert progress["is_locked"] is True
    assert "go_live" in progress["completed_steps"]

    response = client.post(f"{ONBOARDING}/progress/back", json={}, headers=headers)
    assert response.status_code == 409

    institution_view = client.get(f"{RBAC}/institutions/{institution.id}", headers=headers).json()
    assert institution_view["onboarding_status"] == "completed"
    assert institution_view["go_live_at"] is not None


def test_finance_officer_go_live_needs_fee_items(client, make_user, institution):
    bursar = make_user("bursar@greenvalley.ac.ke", "bursar", institution_id=institution.id)
    headers = auth_headers(bursar, institution.id)
    assert client.get(f"{ONBOARDING}/progress", headers=headers).json()["progress"]["current_step"] == "fee_structure"

    checklist = client.get(f"{ONBOARDING}/checklist", headers=headers).json()
    assert [item["id"] for item in checklist["items"]] == ["fee_items"]
    assert checklist["missing"] == ["fee_items"]

    response = client.post(f"{SCHOOL}/fee-items", json={"name": "Tuition", "amount": "15000.00"}, headers=headers)
    assert response.status_code == 201, response.text
    assert client.post(f"{ONBOARDING}/go-live", json={}, headers=headers).status_code == 200


def test_record_writes_are_role_gated(client, make_user, institution):
    teacher = make_user("teacher@greenvalley.ac.ke", "teacher", institution_id=institution.id)
    headers = auth_headers(teacher, institution.id)
    assert client.post(f"{SCHOOL}/fee-items", json={"name": "Bus", "amount": "10"}, headers=headers).status_code == 403
    assert client.post(f"{SCHOOL}/subjects", json={"name": "Mathematics"}, headers=headers).status_code == 201
    assert [s["name"] for s in client.get(f"{SCHOOL}/subjects", headers=headers).json()] == ["Mathematics"]


def test_student_class_must_belong_to_institution(client, make_user, institution):
    admin = make_user("principal@greenvalley.ac.ke", "institution_admin", institution_id=institution.id)
    response = client.post(
        f"{SCHOOL}/students",
        json={"full_name": "Amani Otieno", "class_id": 4242},
        headers=auth_headers(admin, institution.id),
    )
    assert response.status_code == 404


def test_roles_without_checklist_items_cannot_go_live(client, make_user, institution):
    admin = make_user("principal@greenvalley.ac.ke", "institution_admin", institution_id=institution.id)
    assert client.get(f"{ONBOARDING}/progress", headers=auth_headers(admin, institution.id)).status_code == 200

    parent = make_user("parent@greenvalley.ac.ke", "parent", institution_id=institution.id)
    response = client.post(f"{ONBOARDING}/go-live", json={}, headers=auth_headers(parent, institution.id))
    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "not_permitted"

    state = client.get(f"{ONBOARDING}/progress", headers=auth_headers(admin, institution.id)).json()
    assert state["progress"]["is_locked"] is False


def test_institution_details_limited_to_members(client, db, make_user, institution):
    rival = Institution(name="Rival School", email="secret@rival.ac.ke")
    db.add(rival)
    db.commit()

    teacher = make_user("teacher@greenvalley.ac.ke", "teacher", institution_id=institution.id)
    assert client.get(f"{RBAC}/institutions/{rival.id}", headers=auth_headers(teacher)).status_code == 403
    assert client.get(f"{RBAC}/institutions/{institution.id}", headers=auth_headers(teacher)).status_code == 200

    root = make_user("root@classbridge.io", "super_admin")
    assert client.get(f"{RBAC}/institutions/{rival.id}", headers=auth_headers(root)).status_code == 200
