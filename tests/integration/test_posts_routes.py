"""
Integration tests for /api/admin/posts and the public /api/posts pages.
"""
from models.comment import Comment
from models.post import Post, Tag


def _payload(**overrides):
    body = {
        "title": "Hello World",
        "slug": "hello-world",
        "content": "# Hello\n\nThis is **the** first post.",
        "tags": ["Intro", "meta"],
        "status": "draft",
    }
    body.update(overrides)
    return body


class TestCreate:

    def test_author_creates_draft(self, client, make_user, auth_headers):
        author = make_user("author")
        resp = client.post("/api/admin/posts", json=_payload(), headers=auth_headers(author))
        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "Post created successfully"
        post = body["post"]
        assert post["status"] == "draft"
        assert post["published_at"] is None
        assert post["author_id"] == author.id
        assert post["excerpt"] == "Hello This is the first post."
        assert post["tags"] == ["Intro", "meta"]

    def test_publishing_on_create_stamps_date(self, client, make_user, auth_headers):
        author = make_user("author")
        resp = client.post("/api/admin/posts", json=_payload(status="published"), headers=auth_headers(author))
        assert resp.json()["post"]["published_at"] is not None

    def test_missing_fields_reported_together(self, client, make_user, auth_headers):
        resp = client.post("/api/admin/posts", json={}, headers=auth_headers(make_user("author")))
        assert resp.status_code == 400
        body = resp.json()
        assert body["message"] == "Missing required fields: title, slug, content"
        assert set(body["details"]) == {"title", "slug", "content"}

    def test_bad_slug(self, client, make_user, auth_headers):
        resp = client.post("/api/admin/posts", json=_payload(slug="My Post!"), headers=auth_headers(make_user("author")))
        assert resp.status_code == 400
        assert resp.json()["details"]["slug"].startswith("Invalid slug format")

    def test_duplicate_slug(self, client, make_user, auth_headers, make_post):
        author = make_user("author")
        make_post(author, slug="hello-world")
        resp = client.post("/api/admin/posts", json=_payload(), headers=auth_headers(author))
        assert resp.status_code == 409
        assert resp.json()["message"] == "A post with this slug already exists"

    def test_tags_are_shared_case_insensitively(self, client, make_user, auth_headers, db):
        headers = auth_headers(make_user("author"))
        client.post("/api/admin/posts", json=_payload(slug="one", tags=["Python"]), headers=headers)
        client.post("/api/admin/posts", json=_payload(slug="two", tags=["python", "PYTHON"]), headers=headers)
        assert db.query(Tag).filter_by(slug="python").count() == 1
        assert db.query(Post).filter_by(slug="two").one().tags == ["python"]

    def test_reader_cannot_create(self, client, make_user, auth_headers):
        resp = client.post("/api/admin/posts", json=_payload(), headers=auth_headers(make_user("reader")))
        assert resp.status_code == 403
        assert resp.json()["reason"] == "insufficient_role"

    def test_anonymous_cannot_create(self, client):
        assert client.post("/api/admin/posts", json=_payload()).status_code == 401


class TestUpdate:

    def test_published_at_survives_republish(self, client, make_user, auth_headers):
        headers = auth_headers(make_user("author"))
        post = client.post("/api/admin/posts", json=_payload(status="published"), headers=headers).json()["post"]
        first = post["published_at"]

        url = f"/api/admin/posts/{post['id']}"
        assert client.put(url, json={"status": "draft"}, headers=headers).json()["post"]["published_at"] == first
        again = client.put(url, json={"status": "published"}, headers=headers).json()["post"]
        assert again["status"] == "published"
        assert again["published_at"] == first

    def test_partial_update_leaves_other_fields(self, client, make_user, auth_headers, make_post):
        author = make_user("author")
        post = make_post(author, title="Old title", tags=["keep"])
        resp = client.put(f"/api/admin/posts/{post.id}", json={"title": "New title"}, headers=auth_headers(author))
        assert resp.status_code == 200
        body = resp.json()["post"]
        assert body["title"] == "New title"
        assert body["tags"] == ["keep"]
        assert body["slug"] == post.slug

    def test_author_cannot_edit_someone_elses_post(self, client, make_user, auth_headers, make_post):
        post = make_post(make_user("author"))
        other = make_user("author")
        resp = client.put(f"/api/admin/posts/{post.id}", json={"title": "Mine now"}, headers=auth_headers(other))
        assert resp.status_code == 403
        assert resp.json()["reason"] == "not_owner"
        assert client.get(f"/api/admin/posts/{post.id}", headers=auth_headers(other)).status_code == 403

    def test_author_cannot_touch_post_without_author(self, client, make_user, auth_headers, make_post, db):
        post = make_post(None, title="Orphan")
        headers = auth_headers(make_user("author"))
        url = f"/api/admin/posts/{post.id}"

        resp = client.put(url, json={"title": "Taken over"}, headers=headers)
        assert resp.status_code == 403
        assert resp.json()["reason"] == "not_owner"
        assert client.get(url, headers=headers).status_code == 403
        db.expire_all()
        assert db.get(Post, post.id).title == "Orphan"

    def test_admin_edits_any_post(self, client, make_user, auth_headers, make_post):
        post = make_post(make_user("author"))
        resp = client.put(f"/api/admin/posts/{post.id}", json={"title": "Edited"}, headers=auth_headers(make_user("admin")))
        assert resp.status_code == 200

    def test_slug_clash_on_update(self, client, make_user, auth_headers, make_post):
        author = make_user("author")
        make_post(author, slug="taken")
        post = make_post(author, slug="free")
        resp = client.put(f"/api/admin/posts/{post.id}", json={"slug": "taken"}, headers=auth_headers(author))
        assert resp.status_code == 409

    def test_unknown_post(self, client, make_user, auth_headers):
        resp = client.put("/api/admin/posts/999", json={"title": "x"}, headers=auth_headers(make_user("admin")))
        assert resp.status_code == 404


class TestDelete:

    def test_author_cannot_delete_even_own_post(self, client, make_user, auth_headers, make_post):
        author = make_user("author")
        post = make_post(author)
        resp = client.delete(f"/api/admin/posts/{post.id}", headers=auth_headers(author))
        assert resp.status_code == 403

    def test_admin_delete_removes_comments(self, client, make_user, auth_headers, make_post, db):
        post = make_post(make_user("author"))
        db.add(Comment(post_id=post.id, author_name="Ann", author_email="ann@mailbox.org",
                       content="A perfectly fine comment", status="approved"))
        db.commit()

        resp = client.delete(f"/api/admin/posts/{post.id}", headers=auth_headers(make_user("admin")))
        assert resp.status_code == 200
        db.expire_all()
        assert db.query(Post).count() == 0
        assert db.query(Comment).count() == 0


class TestList:

    def test_author_sees_only_own_posts(self, client, make_user, auth_headers, make_post):
        author = make_user("author")
        make_post(author, status="draft")
        make_post(author, status="published")
        make_post(make_user("author"))

        body = client.get("/api/admin/posts", headers=auth_headers(author)).json()
        assert len(body["posts"]) == 2
        assert body["counts"] == {"total": 2, "draft": 1, "published": 1, "archived": 0}

    def test_admin_filter_and_pagination(self, client, make_user, auth_headers, make_post):
        author = make_user("author")
        for _ in range(3):
            make_post(author, status="draft")
        make_post(author, status="archived")

        body = client.get(
            "/api/admin/posts", params={"status": "draft", "limit": 2}, headers=auth_headers(make_user("admin")),
        ).json()
        assert len(body["posts"]) == 2
        assert body["pagination"] == {"total": 3, "limit": 2, "offset": 0}
        assert body["counts"]["total"] == 4


class TestPublic:

    def test_list_only_published(self, client, make_user, make_post):
        author = make_user("author", full_name="Pat Author")
        make_post(author, slug="visible", tags=["intro"])
        make_post(author, slug="hidden", status="draft")
        make_post(author, slug="old", status="archived")

        body = client.get("/api/posts").json()
        assert body["count"] == 1
        post = body["posts"][0]
        assert post["slug"] == "visible"
        assert post["author"] == "Pat Author"
        assert post["readingTime"] == 1
        assert post["tags"] == ["intro"]

    def test_post_without_author_name_is_anonymous(self, client, make_post):
        make_post(None, slug="orphan")
        assert client.get("/api/posts/orphan").json()["author"] == "Anonymous"

    def test_detail_renders_html(self, client, make_post):
        make_post(None, slug="rendered", content="# Heading\n\nSome *text*.")
        body = client.get("/api/posts/rendered").json()
        assert "<h1>Heading</h1>" in body["content"]
        assert "<em>text</em>" in body["content"]

    def test_draft_is_not_found(self, client, make_post):
        make_post(None, slug="secret", status="draft")
        resp = client.get("/api/posts/secret")
        assert resp.status_code == 404
        assert resp.json()["message"] == "Post not found: secret"

    def test_search(self, client, make_post):
        make_post(None, slug="a", title="Learning FastAPI")
        make_post(None, slug="b", title="Other", content="mentions fastapi in the body")
        make_post(None, slug="c", title="Nothing", content="unrelated")
        make_post(None, slug="d", title="FastAPI draft", status="draft")

        body = client.get("/api/posts/search", params={"q": "FASTAPI"}).json()
        assert body["query"] == "FASTAPI"
        assert {p["slug"] for p in body["posts"]} == {"a", "b"}

    def test_search_needs_a_query(self, client):
        assert client.get("/api/posts/search", params={"q": "  "}).status_code == 400
