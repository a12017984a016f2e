import re
from datetime import datetime, timedelta

from bson import ObjectId
from fastapi.testclient import TestClient

from conftest import VALID_JOB, auth
from talentlink.main import app
from talentlink.services.job_service import build_listing_query


# --- Create ---

def test_create_job_sets_poster_and_defaults(test_client, register_user):
    token, user = register_user(name="Grace Hopper")

    response = test_client.post("/api/jobs", json=VALID_JOB, headers=auth(token))

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    job = body["job"]
    assert job["postedBy"]["id"] == user["id"]
    assert job["postedBy"]["name"] == "Grace Hopper"
    assert job["status"] == "active"
    assert job["views"] == 0
    assert job["featured"] is False
    assert job["applications"] == []
    assert job["expiresAt"] is not None


def test_create_job_rejects_49_character_description(test_client, register_user):
    token, _ = register_user()
    payload = {**VALID_JOB, "description": "x" * 49}

    response = test_client.post("/api/jobs", json=payload, headers=auth(token))

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert {"field": "description", "message": "Description must be between 50 and 2000 characters"} in errors


def test_create_job_with_50_character_description(test_client, register_user):
    token, _ = register_user(name="Linus")
    payload = {**VALID_JOB, "description": "y" * 50}

    response = test_client.post("/api/jobs", json=payload, headers=auth(token))

    assert response.status_code == 201
    assert response.json()["job"]["postedBy"]["name"] == "Linus"


def test_create_job_validates_every_field(test_client, register_user):
    token, _ = register_user()
    payload = {**VALID_JOB, "title": "abc", "type": "Gig", "skills": ["  "]}

    response = test_client.post("/api/jobs", json=payload, headers=auth(token))

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert fields == {"title", "type", "skills"}


def test_create_job_requires_auth(test_client):
    response = test_client.post("/api/jobs", json=VALID_JOB)

    assert response.status_code == 401
    assert response.json() == {"message": "Invalid or expired token"}


def test_create_job_rejects_garbage_token(test_client):
    response = test_client.post("/api/jobs", json=VALID_JOB, headers=auth("not-a-jwt"))

    assert response.status_code == 401


# --- List ---

def test_listing_excludes_expired_and_inactive_jobs(test_client, register_user, create_job, mongo_db):
    token, user = register_user()
    visible = create_job(token, title="Visible Python role")
    now = datetime.utcnow()
    base = {**VALID_JOB, "posted_by": ObjectId(user["id"]), "applications": [], "views": 0,
            "featured": False, "created_at": now, "updated_at": now}
    mongo_db["jobs"].insert_many([
        {**base, "title": "Expired role", "status": "active", "expires_at": now - timedelta(minutes=1)},
        {**base, "title": "Closed role", "status": "closed", "expires_at": now + timedelta(days=5)},
        {**base, "title": "Draft role", "status": "draft", "expires_at": now + timedelta(days=5)},
    ])

    response = test_client.get("/api/jobs")

    assert response.status_code == 200
    body = response.json()
    assert [job["id"] for job in body["jobs"]] == [visible["id"]]
    assert body["pagination"] == {"current": 1, "pages": 1, "total": 1}


def test_listing_filters_type_and_location(test_client, register_user, create_job):
    token, _ = register_user()
    berlin = create_job(token, location="Berlin, Germany", type="Full-time")
    create_job(token, location="Munich, Germany", type="Full-time")
    create_job(token, location="Berlin Mitte", type="Contract")

    response = test_client.get("/api/jobs", params={"location": "BERLIN", "type": "Full-time"})

    jobs = response.json()["jobs"]
    assert [job["id"] for job in jobs] == [berlin["id"]]


def test_listing_location_is_literal_substring(test_client, register_user, create_job):
    token, _ = register_user()
    create_job(token, location="Berlin, Germany")

    response = test_client.get("/api/jobs", params={"location": "B.*n"})

    assert response.json()["jobs"] == []


def test_listing_hides_applications(test_client, register_user, create_job):
    poster_token, _ = register_user()
    applicant_token, _ = register_user()
    job = create_job(poster_token)
    test_client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=auth(applicant_token))

    response = test_client.get("/api/jobs")

    assert response.json()["jobs"][0]["applications"] == []


def test_listing_puts_featured_first_then_newest(test_client, register_user, create_job):
    token, _ = register_user()
    first = create_job(token, title="First posted role")
    second = create_job(token, title="Second posted role")
    third = create_job(token, title="Third posted role")
    test_client.put(f"/api/jobs/{first['id']}", json={"featured": True}, headers=auth(token))

    response = test_client.get("/api/jobs")

    ids = [job["id"] for job in response.json()["jobs"]]
    assert ids[0] == first["id"]
    assert set(ids[1:]) == {second["id"], third["id"]}


def test_pagination_counts_pages_and_allows_pages_past_the_end(test_client, register_user, create_job):
    token, _ = register_user()
    for i in range(5):
        create_job(token, title=f"Backend role number {i}")

    page_two = test_client.get("/api/jobs", params={"page": 2, "limit": 2}).json()
    past_end = test_client.get("/api/jobs", params={"page": 4, "limit": 2})

    assert page_two["pagination"] == {"current": 2, "pages": 3, "total": 5}
    assert len(page_two["jobs"]) == 2
    assert past_end.status_code == 200
    assert past_end.json()["jobs"] == []
    assert past_end.json()["pagination"]["pages"] == 3


def test_pagination_rejects_page_zero(test_client):
    response = test_client.get("/api/jobs", params={"page": 0})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "page"


def test_build_listing_query_always_restricts_to_active_unexpired():
    now = datetime(2026, 1, 1)

    query = build_listing_query(job_type="Contract", location="new york (nyc)", search="python", now=now)

    assert query["status"] == "active"
    assert query["expires_at"] == {"$gt": now}
    assert query["type"] == "Contract"
    assert query["location"]["$options"] == "i"
    pattern = query["location"]["$regex"]
    assert re.search(pattern, "new york (nyc) office")
    assert not re.search(pattern, "new yorkk nyc")
    assert query["$text"] == {"$search": "python"}


def test_build_listing_query_without_filters():
    query = build_listing_query(now=datetime(2026, 1, 1))

    assert set(query) == {"status", "expires_at"}


# The $text branch is only checked above as a built query; mongomock cannot run it.
def test_listing_full_text_search(live_mongo_db):
    client = TestClient(app)
    token = client.post("/api/auth/register", json={
        "name": "Search Poster", "email": "search@example.com", "password": "secret1"
    }).json()["token"]
    for title, skills in [("Rust Systems Engineer", ["Rust"]), ("Senior Python Engineer", ["Python"])]:
        response = client.post("/api/jobs", json={**VALID_JOB, "title": title, "skills": skills},
                               headers=auth(token))
        assert response.status_code == 201, response.text

    body = client.get("/api/jobs", params={"search": "rust"}).json()

    assert [job["title"] for job in body["jobs"]] == ["Rust Systems Engineer"]
    assert body["pagination"]["total"] == 1


# --- Detail ---

def test_get_job_counts_views(test_client, register_user, create_job):
    token, _ = register_user()
    job = create_job(token)

    first = test_client.get(f"/api/jobs/{job['id']}").json()["job"]
    second = test_client.get(f"/api/jobs/{job['id']}").json()["job"]

    assert first["views"] == 1
    assert second["views"] == 2


def test_get_job_shows_applications_to_poster_only(test_client, register_user, create_job):
    poster_token, _ = register_user()
    applicant_token, applicant = register_user(name="Applicant Amy")
    job = create_job(poster_token)
    test_client.post(f"/api/jobs/{job['id']}/apply", json={"coverLetter": "Hi!"}, headers=auth(applicant_token))

    as_poster = test_client.get(f"/api/jobs/{job['id']}", headers=auth(poster_token)).json()["job"]
    as_applicant = test_client.get(f"/api/jobs/{job['id']}", headers=auth(applicant_token)).json()["job"]
    anonymous = test_client.get(f"/api/jobs/{job['id']}").json()["job"]

    assert len(as_poster["applications"]) == 1
    application = as_poster["applications"][0]
    assert application["user"] == {"id": applicant["id"], "name": "Applicant Amy", "avatar": applicant["avatar"]}
    assert application["status"] == "pending"
    assert application["coverLetter"] == "Hi!"
    assert as_applicant["applications"] == []
    assert anonymous["applications"] == []


def test_get_job_unknown_or_malformed_id(test_client):
    assert test_client.get(f"/api/jobs/{ObjectId()}").status_code == 404
    response = test_client.get("/api/jobs/not-an-id")
    assert response.status_code == 404
    assert response.json() == {"message": "Job not found"}


# --- Update ---

def test_update_job_by_poster(test_client, register_user, create_job):
    token, _ = register_user()
    job = create_job(token)

    response = test_client.put(
        f"/api/jobs/{job['id']}",
        json={"title": "Staff Python Engineer", "status": "closed"},
        headers=auth(token),
    )

    assert response.status_code == 200
    updated = response.json()["job"]
    assert updated["title"] == "Staff Python Engineer"
    assert updated["status"] == "closed"
    assert updated["company"] == VALID_JOB["company"]


def test_update_job_by_someone_else_is_forbidden(test_client, register_user, create_job):
    poster_token, _ = register_user()
    other_token, _ = register_user()
    job = create_job(poster_token)

    response = test_client.put(f"/api/jobs/{job['id']}", json={"title": "Hijacked title"}, headers=auth(other_token))

    assert response.status_code == 403
    assert response.json() == {"message": "Not authorized to update this job"}


def test_update_job_validates_partial_fields(test_client, register_user, create_job):
    token, _ = register_user()
    job = create_job(token)

    response = test_client.put(f"/api/jobs/{job['id']}", json={"requirements": "too short"}, headers=auth(token))

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "requirements"


# --- Apply ---

def test_apply_twice_is_rejected(test_client, register_user, create_job):
    poster_token, _ = register_user()
    applicant_token, _ = register_user()
    job = create_job(poster_token)

    first = test_client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=auth(applicant_token))
    second = test_client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=auth(applicant_token))

    assert first.status_code == 200
    assert first.json() == {"message": "Application submitted successfully", "success": True}
    assert second.status_code == 400
    assert "already applied" in second.json()["message"]
    detail = test_client.get(f"/api/jobs/{job['id']}", headers=auth(poster_token)).json()["job"]
    assert len(detail["applications"]) == 1


def test_apply_without_body(test_client, register_user, create_job):
    poster_token, _ = register_user()
    applicant_token, _ = register_user()
    job = create_job(poster_token)

    response = test_client.post(f"/api/jobs/{job['id']}/apply", headers=auth(applicant_token))

    assert response.status_code == 200


def test_apply_to_closed_job(test_client, register_user, create_job):
    poster_token, _ = register_user()
    applicant_token, _ = register_user()
    job = create_job(poster_token)
    test_client.put(f"/api/jobs/{job['id']}", json={"status": "closed"}, headers=auth(poster_token))

    response = test_client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=auth(applicant_token))

    assert response.status_code == 400
    assert response.json() == {"message": "Job is no longer accepting applications"}


def test_apply_to_missing_job(test_client, register_user):
    token, _ = register_user()

    response = test_client.post(f"/api/jobs/{ObjectId()}/apply", json={}, headers=auth(token))

    assert response.status_code == 404


# --- Application review ---

def test_application_status_follows_transition_table(test_client, register_user, create_job):
    poster_token, _ = register_user()
    applicant_token, applicant = register_user()
    job = create_job(poster_token)
    test_client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=auth(applicant_token))
    url = f"/api/jobs/{job['id']}/applications/{applicant['id']}"

    reviewed = test_client.put(url, json={"status": "reviewed"}, headers=auth(poster_token))
    back_to_pending = test_client.put(url, json={"status": "pending"}, headers=auth(poster_token))
    accepted = test_client.put(url, json={"status": "accepted"}, headers=auth(poster_token))
    flipped = test_client.put(url, json={"status": "rejected"}, headers=auth(poster_token))

    assert reviewed.status_code == 200
    assert reviewed.json()["application"]["status"] == "reviewed"
    assert reviewed.json()["application"]["user"]["id"] == applicant["id"]
    assert back_to_pending.status_code == 400
    assert accepted.status_code == 200
    assert flipped.status_code == 400
    assert flipped.json()["message"] == "Cannot change application from accepted to rejected"


def test_application_review_is_poster_only(test_client, register_user, create_job):
    poster_token, _ = register_user()
    applicant_token, applicant = register_user()
    job = create_job(poster_token)
    test_client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=auth(applicant_token))

    response = test_client.put(
        f"/api/jobs/{job['id']}/applications/{applicant['id']}",
        json={"status": "accepted"},
        headers=auth(applicant_token),
    )

    assert response.status_code == 403


def test_application_review_unknown_applicant(test_client, register_user, create_job):
    poster_token, _ = register_user()
    job = create_job(poster_token)

    response = test_client.put(
        f"/api/jobs/{job['id']}/applications/{ObjectId()}",
        json={"status": "reviewed"},
        headers=auth(poster_token),
    )

    assert response.status_code == 404


# --- Posted by me ---

def test_posted_jobs_lists_own_jobs_with_applications(test_client, register_user, create_job):
    poster_token, _ = register_user()
    other_token, _ = register_user()
    mine = create_job(poster_token)
    create_job(other_token)
    test_client.post(f"/api/jobs/{mine['id']}/apply", json={}, headers=auth(other_token))

    response = test_client.get("/api/jobs/user/posted", headers=auth(poster_token))

    body = response.json()
    assert [job["id"] for job in body["jobs"]] == [mine["id"]]
    assert len(body["jobs"][0]["applications"]) == 1
    assert body["pagination"]["total"] == 1


def test_posted_jobs_requires_auth(test_client):
    assert test_client.get("/api/jobs/user/posted").status_code == 401
