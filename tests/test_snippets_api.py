"""Snippet endpoint tests."""

SNIPPETS_URL = "/api/v1/snippets"


def create_snippet(client, headers=None, **fields):
    payload = {"title": "Snippet", "code": "console.log(1)"}
    payload.update(fields)
    response = client.post(SNIPPETS_URL, json=payload, headers=headers or {})
    assert response.status_code == 201
    return response.json()["snippet"]


def listed_titles(client, headers=None, **params):
    response = client.get(SNIPPETS_URL, params=params, headers=headers or {})
    assert response.status_code == 200
    return [s["title"] for s in response.json()["snippets"]]


class TestHealthCheck:
    """Tests for health check endpoint."""

    def test_health_check(self, client):
        """Test that health check returns healthy status."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "Code Snippet Manager"


class TestCreateSnippet:
    """Tests for snippet creation."""

    def test_create_as_user(self, client, auth_headers, test_user):
        response = client.post(
            SNIPPETS_URL,
            headers=auth_headers,
            json={"title": "Hello", "code": "print('hi')", "language": "python", "tags": ["intro"]},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["anonymous_id"] is None
        snippet = data["snippet"]
        assert snippet["owner"]["email"] == test_user["email"]
        assert snippet["is_anonymous"] is False
        assert snippet["tags"] == ["intro"]
        assert snippet["can_edit"] is True
        assert snippet["can_delete"] is True
        assert "anonymous_id" not in snippet

    def test_create_as_guest_mints_anonymous_id(self, client):
        response = client.post(SNIPPETS_URL, json={"title": "t", "code": "c"})
        assert response.status_code == 201
        data = response.json()
        assert data["anonymous_id"]
        assert response.headers["X-Anonymous-ID"] == data["anonymous_id"]
        assert data["snippet"]["is_anonymous"] is True
        assert data["snippet"]["owner"] is None
        assert data["snippet"]["language"] == "javascript"

    def test_create_with_session_echoes_it(self, client, anon_headers):
        response = client.post(SNIPPETS_URL, json={"title": "t", "code": "c"}, headers=anon_headers)
        assert response.status_code == 201
        assert response.json()["anonymous_id"] == "anon-1"

    def test_create_missing_code(self, client):
        response = client.post(SNIPPETS_URL, json={"title": "t"})
        assert response.status_code == 422

    def test_create_blank_title(self, client):
        response = client.post(SNIPPETS_URL, json={"title": "   ", "code": "c"})
        assert response.status_code == 400

    def test_create_overlong_tag(self, client):
        response = client.post(SNIPPETS_URL, json={"title": "t", "code": "c", "tags": ["ok", "x" * 65]})
        assert response.status_code == 422

    def test_create_overlong_anonymous_id(self, client):
        response = client.post(
            SNIPPETS_URL, json={"title": "t", "code": "c"}, headers={"X-Anonymous-ID": "a" * 256}
        )
        assert response.status_code == 422

    def test_invalid_token_is_rejected(self, client):
        response = client.post(
            SNIPPETS_URL,
            json={"title": "t", "code": "c"},
            headers={"Authorization": "Bearer not-a-token", "X-Anonymous-ID": "anon-1"},
        )
        assert response.status_code == 401


class TestListSnippets:
    """Tests for listing snippets."""

    def test_list_pagination(self, client):
        for i in range(3):
            create_snippet(client, title=f"s{i}")

        response = client.get(SNIPPETS_URL, params={"page": 1, "limit": 2})
        assert response.status_code == 200
        data = response.json()
        assert data["total_snippets"] == 3
        assert data["total_pages"] == 2
        assert data["current_page"] == 1
        assert [s["title"] for s in data["snippets"]] == ["s2", "s1"]

    def test_list_filters(self, client):
        create_snippet(client, title="py", language="python", tags=["web"])
        create_snippet(client, title="go", language="go", tags=["web"])

        assert listed_titles(client, language="python") == ["py"]
        assert set(listed_titles(client, tag="web")) == {"py", "go"}
        assert listed_titles(client, search="py") == ["py"]

    def test_private_owned_snippet_hidden_from_others(
        self, client, auth_headers, other_auth_headers, anon_headers
    ):
        create_snippet(client, auth_headers, title="diary", is_public=False)

        assert listed_titles(client, auth_headers) == ["diary"]
        assert listed_titles(client, other_auth_headers) == []
        assert listed_titles(client, anon_headers) == []
        assert listed_titles(client) == []


class TestSearchSnippets:
    """Tests for the search endpoint."""

    def test_short_query_rejected(self, client):
        response = client.get(f"{SNIPPETS_URL}/search", params={"q": " a "})
        assert response.status_code == 400

    def test_exact_title_ignores_case(self, client):
        create_snippet(client, title="My Helper")
        create_snippet(client, title="My Helper Extended")

        response = client.get(
            f"{SNIPPETS_URL}/search", params={"q": "my helper", "exact_title": True}
        )
        assert response.status_code == 200
        data = response.json()
        assert [s["title"] for s in data["snippets"]] == ["My Helper"]
        assert data["total_results"] == 1
        assert data["query"] == "my helper"

    def test_tag_only_match(self, client):
        create_snippet(client, title="Plain", code="x = 1", tags=["memoization"])
        create_snippet(client, title="Other", code="y = 2")

        response = client.get(f"{SNIPPETS_URL}/search", params={"q": "memo"})
        assert [s["title"] for s in response.json()["snippets"]] == ["Plain"]

    def test_include_private(self, client, anon_headers):
        create_snippet(client, anon_headers, title="hidden gem", is_public=False)

        public_only = client.get(f"{SNIPPETS_URL}/search", params={"q": "gem"}, headers=anon_headers)
        assert public_only.json()["total_results"] == 0

        with_private = client.get(
            f"{SNIPPETS_URL}/search",
            params={"q": "gem", "include_private": True},
            headers=anon_headers,
        )
        data = with_private.json()
        assert data["total_results"] == 1
        assert data["include_private"] is True


class TestMySnippets:
    """Tests for listing the caller's own snippets."""

    def test_guest_rejected(self, client):
        response = client.get(f"{SNIPPETS_URL}/me/snippets")
        assert response.status_code == 401

    def test_anonymous_session(self, client, anon_headers, other_anon_headers):
        create_snippet(client, anon_headers, title="mine", is_public=False)
        create_snippet(client, other_anon_headers, title="theirs")

        response = client.get(f"{SNIPPETS_URL}/me/snippets", headers=anon_headers)
        assert response.status_code == 200
        assert [s["title"] for s in response.json()["snippets"]] == ["mine"]

    def test_authenticated(self, client, auth_headers):
        create_snippet(client, auth_headers, title="a", is_public=False)
        create_snippet(client, auth_headers, title="b")

        response = client.get(f"{SNIPPETS_URL}/me/snippets", headers=auth_headers)
        assert [s["title"] for s in response.json()["snippets"]] == ["b", "a"]


class TestGetSnippet:
    """Tests for fetching a single snippet."""

    def test_view_count_increments(self, client):
        snippet = create_snippet(client)

        client.get(f"{SNIPPETS_URL}/{snippet['id']}")
        response = client.get(f"{SNIPPETS_URL}/{snippet['id']}")
        assert response.status_code == 200
        assert response.json()["view_count"] == 2
        assert response.json()["revision"] == 1

    def test_not_found(self, client):
        fake_id = "00000000-0000-0000-0000-000000000000"
        response = client.get(f"{SNIPPETS_URL}/{fake_id}")
        assert response.status_code == 404

    def test_private_forbidden(self, client, anon_headers, other_anon_headers):
        snippet = create_snippet(client, anon_headers, is_public=False)

        assert client.get(f"{SNIPPETS_URL}/{snippet['id']}", headers=other_anon_headers).status_code == 403
        assert client.get(f"{SNIPPETS_URL}/{snippet['id']}", headers=anon_headers).status_code == 200

    def test_permissions_reported_for_caller(self, client, anon_headers, other_anon_headers):
        snippet = create_snippet(client, anon_headers)

        data = client.get(f"{SNIPPETS_URL}/{snippet['id']}", headers=other_anon_headers).json()
        assert data["can_edit"] is True
        assert data["can_delete"] is False


class TestUpdateSnippet:
    """Tests for updating snippets."""

    def test_partial_update(self, client, anon_headers):
        snippet = create_snippet(client, anon_headers, description="old")

        response = client.put(
            f"{SNIPPETS_URL}/{snippet['id']}",
            headers=anon_headers,
            json={"description": "  new  ", "tags": ["x"]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["description"] == "new"
        assert data["tags"] == ["x"]
        assert data["title"] == "Snippet"
        assert data["revision"] == 2

    def test_blank_code_rejected(self, client, anon_headers):
        snippet = create_snippet(client, anon_headers)
        response = client.put(
            f"{SNIPPETS_URL}/{snippet['id']}", headers=anon_headers, json={"code": "  "}
        )
        assert response.status_code == 400

    def test_overlong_tag_rejected(self, client, anon_headers):
        snippet = create_snippet(client, anon_headers)
        response = client.put(
            f"{SNIPPETS_URL}/{snippet['id']}", headers=anon_headers, json={"tags": ["x" * 65]}
        )
        assert response.status_code == 422

    def test_not_found(self, client):
        fake_id = "00000000-0000-0000-0000-000000000000"
        response = client.put(f"{SNIPPETS_URL}/{fake_id}", json={"title": "x"})
        assert response.status_code == 404

    def test_revision_conflict(self, client, anon_headers, other_anon_headers):
        snippet = create_snippet(client, anon_headers)
        url = f"{SNIPPETS_URL}/{snippet['id']}"

        first = client.put(url, headers=anon_headers, json={"title": "A", "expected_revision": 1})
        assert first.status_code == 200

        second = client.put(url, headers=other_anon_headers, json={"title": "B", "expected_revision": 1})
        assert second.status_code == 409

    def test_last_write_wins_without_revision(self, client, anon_headers, other_anon_headers):
        snippet = create_snippet(client, anon_headers)
        url = f"{SNIPPETS_URL}/{snippet['id']}"

        client.put(url, headers=anon_headers, json={"title": "A"})
        response = client.put(url, headers=other_anon_headers, json={"title": "B"})
        assert response.status_code == 200
        assert response.json()["title"] == "B"


class TestDeleteSnippet:
    """Tests for deleting snippets."""

    def test_owner_deletes(self, client, auth_headers):
        snippet = create_snippet(client, auth_headers)

        response = client.delete(f"{SNIPPETS_URL}/{snippet['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"{SNIPPETS_URL}/{snippet['id']}").status_code == 404

    def test_guest_cannot_delete_public(self, client, auth_headers):
        snippet = create_snippet(client, auth_headers)
        response = client.delete(f"{SNIPPETS_URL}/{snippet['id']}")
        assert response.status_code == 403

    def test_anonymous_cannot_delete_owned(self, client, auth_headers, anon_headers):
        snippet = create_snippet(client, auth_headers, is_public=False)
        response = client.delete(f"{SNIPPETS_URL}/{snippet['id']}", headers=anon_headers)
        assert response.status_code == 403


class TestAnonymousSessionScenario:
    """Two anonymous sessions sharing one snippet."""

    def test_private_then_public(self, client, anon_headers, other_anon_headers):
        snippet = create_snippet(
            client, anon_headers, title="Fib", code="function fib(n){}", is_public=False
        )
        url = f"{SNIPPETS_URL}/{snippet['id']}"

        assert "Fib" not in listed_titles(client, other_anon_headers)
        assert "Fib" in listed_titles(client, anon_headers)

        denied = client.put(url, headers=other_anon_headers, json={"title": "Fib v2"})
        assert denied.status_code == 403

        published = client.put(url, headers=anon_headers, json={"is_public": True})
        assert published.status_code == 200
        assert published.json()["is_public"] is True

        edited = client.put(url, headers=other_anon_headers, json={"title": "Fib v2"})
        assert edited.status_code == 200
        assert edited.json()["title"] == "Fib v2"

        deleted = client.delete(url, headers=other_anon_headers)
        assert deleted.status_code == 403

        assert client.delete(url, headers=anon_headers).status_code == 200
