"""
Integration tests for public tag pages and the tag manager.
"""
import pytest

from models.post import Post, Tag


@pytest.fixture
def admin_headers(make_user, auth_headers):
    return auth_headers(make_user("super_admin"))


class TestPublicTags:

    def test_counts_come_from_published_posts(self, client, make_post):
        make_post(None, tags=["Python", "web"])
        make_post(None, tags=["python"])
        make_post(None, tags=["rust"], status="draft")

        body = client.get("/api/tags").json()
        assert body["count"] == 2
        assert body["tags"] == [
            {"name": "python", "displayName": "Python", "postCount": 2},
            {"name": "web", "displayName": "Web", "postCount": 1},
        ]

    def test_popular_sort_and_limit(self, client, make_post):
        make_post(None, tags=["alpha"])
        make_post(None, tags=["zeta"])
        make_post(None, tags=["zeta"])

        body = client.get("/api/tags", params={"sort": "popular", "limit": 1}).json()
        assert [t["name"] for t in body["tags"]] == ["zeta"]

    def test_tag_detail(self, client, make_post):
        make_post(None, slug="one", tags=["Python"])
        make_post(None, slug="two", tags=["web"])
        body = client.get("/api/tags/PYTHON").json()
        assert body["name"] == "python"
        assert body["postCount"] == 1
        assert [p["slug"] for p in body["posts"]] == ["one"]

    def test_unused_tag_is_not_found(self, client, make_post):
        make_post(None, tags=["hidden"], status="draft")
        assert client.get("/api/tags/hidden").status_code == 404


class TestTagManager:

    def test_list_counts_every_status(self, client, make_post, admin_headers):
        make_post(None, tags=["python"], status="draft")
        make_post(None, tags=["python"])
        body = client.get("/api/admin/tags", headers=admin_headers).json()
        assert body["success"] is True
        assert [(t["slug"], t["post_count"]) for t in body["tags"]] == [("python", 2)]

    def test_rename_rewrites_posts(self, client, make_post, admin_headers, db):
        post = make_post(None, tags=["py", "web"])
        tag = db.query(Tag).filter_by(slug="py").one()

        resp = client.put(f"/api/admin/tags/{tag.id}", json={"name": "Python"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["tag"]["slug"] == "python"

        db.expire_all()
        assert db.get(Post, post.id).tags == ["Python", "web"]

    def test_rename_clash(self, client, make_post, admin_headers, db):
        make_post(None, tags=["python", "py"])
        tag = db.query(Tag).filter_by(slug="py").one()
        resp = client.put(f"/api/admin/tags/{tag.id}", json={"name": "Python"}, headers=admin_headers)
        assert resp.status_code == 409

    def test_rename_needs_a_name(self, client, make_post, admin_headers, db):
        make_post(None, tags=["py"])
        tag = db.query(Tag).one()
        resp = client.put(f"/api/admin/tags/{tag.id}", json={"name": "  "}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Tag name required"

    def test_tag_in_use_cannot_be_deleted(self, client, make_post, admin_headers, db):
        make_post(None, tags=["python"])
        tag = db.query(Tag).one()
        resp = client.delete(f"/api/admin/tags/{tag.id}", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Cannot delete tag. It is used by 1 post(s)."

    def test_unused_tag_is_deleted(self, client, admin_headers, db):
        db.add(Tag(name="Lonely", slug="lonely"))
        db.commit()
        tag = db.query(Tag).one()
        assert client.delete(f"/api/admin/tags/{tag.id}", headers=admin_headers).status_code == 200
        assert db.query(Tag).count() == 0

    def test_unknown_tag(self, client, admin_headers):
        assert client.delete("/api/admin/tags/404", headers=admin_headers).status_code == 404

    def test_admin_role_is_not_enough(self, client, make_user, auth_headers):
        assert client.get("/api/admin/tags", headers=auth_headers(make_user("admin"))).status_code == 403
