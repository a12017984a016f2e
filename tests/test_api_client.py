import httpx
import pytest

from conftest import VALID_JOB
from talentlink.client import ApiClient, ApiError, TokenStore


@pytest.fixture
def api(test_client):
    """ApiClient talking to the app in-process through the TestClient transport."""
    return ApiClient("http://testserver/api", credentials=TokenStore(), http=test_client)


def test_register_stores_token_and_sends_it(api):
    body = api.register({"name": "Client Carol", "email": "carol@example.com", "password": "secret1"})

    assert api.credentials.get_token() == body["token"]
    assert api.get_current_user()["user"]["email"] == "carol@example.com"


def test_login_and_logout(api):
    api.register({"name": "Client Carol", "email": "carol@example.com", "password": "secret1"})
    api.credentials.clear()

    with pytest.raises(ApiError) as excinfo:
        api.get_current_user()
    assert excinfo.value.status_code == 401

    api.login("carol@example.com", "secret1")
    assert api.get_current_user()["user"]["name"] == "Client Carol"


def test_error_carries_server_message(api):
    with pytest.raises(ApiError) as excinfo:
        api.login("nobody@example.com", "secret1")

    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Invalid credentials"
    assert str(excinfo.value) == "Invalid credentials"


def test_validation_error_summary(api):
    api.register({"name": "Client Carol", "email": "carol@example.com", "password": "secret1"})

    with pytest.raises(ApiError) as excinfo:
        api.create_job({**VALID_JOB, "description": "too short"})

    error = excinfo.value
    assert error.status_code == 400
    assert error.errors == [
        {"field": "description", "message": "Description must be between 50 and 2000 characters"}
    ]
    assert error.message == "description: Description must be between 50 and 2000 characters"


def test_job_flow(test_client):
    employer = ApiClient("http://testserver/api", credentials=TokenStore(), http=test_client)
    seeker = ApiClient("http://testserver/api", credentials=TokenStore(), http=test_client)
    employer.register({"name": "Employer Eve", "email": "eve@example.com", "password": "secret1",
                       "role": "employer"})
    seeker_id = seeker.register({"name": "Seeker Sam", "email": "sam@example.com",
                                 "password": "secret1"})["user"]["id"]

    job = employer.create_job(VALID_JOB)["job"]
    listed = seeker.get_jobs(location="berlin", type=None, limit=5)
    applied = seeker.apply_to_job(job["id"], cover_letter="Pick me")
    reviewed = employer.update_application_status(job["id"], seeker_id, "reviewed")
    posted = employer.get_user_posted_jobs()

    assert [j["id"] for j in listed["jobs"]] == [job["id"]]
    assert applied["success"] is True
    assert reviewed["application"]["status"] == "reviewed"
    assert posted["jobs"][0]["applications"][0]["coverLetter"] == "Pick me"


def test_social_flow(test_client):
    alice = ApiClient("http://testserver/api", credentials=TokenStore(), http=test_client)
    bob = ApiClient("http://testserver/api", credentials=TokenStore(), http=test_client)
    alice_id = alice.register({"name": "Alice", "email": "alice@example.com", "password": "secret1"})["user"]["id"]
    bob_id = bob.register({"name": "Bob Builder", "email": "bob@example.com", "password": "secret1"})["user"]["id"]

    alice.send_connection_request(bob_id)
    assert [e["user"]["id"] for e in bob.get_connection_requests()["incoming"]] == [alice_id]
    bob.respond_to_connection(alice_id, "accepted")

    post = bob.create_post({"content": "Shipping today", "visibility": "connections"})["post"]
    assert alice.like_post(post["id"])["liked"] is True
    assert alice.comment_on_post(post["id"], "Congrats")["commentCount"] == 1
    assert [p["id"] for p in alice.get_user_posts(bob_id)["posts"]] == [post["id"]]
    assert bob.get_posts()["posts"] == []

    found = alice.search_users("bob builder")
    assert [u["id"] for u in found["users"]] == [bob_id]
    assert alice.update_profile({"skills": ["Welding"]})["user"]["skills"] == ["Welding"]
    assert bob.get_user_profile(alice_id)["user"]["skills"] == ["Welding"]


def test_refresh_token_replaces_stored_token(api):
    api.register({"name": "Client Carol", "email": "carol@example.com", "password": "secret1"})

    body = api.refresh_token()

    assert api.credentials.get_token() == body["token"]


def test_bearer_header_only_when_token_present():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("Authorization"))
        return httpx.Response(200, json={"posts": [], "pagination": {"current": 1, "pages": 0, "total": 0}})

    store = TokenStore()
    with ApiClient("http://api.test/api/", credentials=store,
                   http=httpx.Client(transport=httpx.MockTransport(handler))) as api:
        api.get_posts()
        store.set_token("abc")
        api.get_posts()

    assert seen == [None, "Bearer abc"]


def test_non_json_error_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad Gateway")

    api = ApiClient("http://api.test/api", http=httpx.Client(transport=httpx.MockTransport(handler)))

    with pytest.raises(ApiError) as excinfo:
        api.get_job("abc")

    assert excinfo.value.status_code == 502
    assert excinfo.value.message == "API request failed"
