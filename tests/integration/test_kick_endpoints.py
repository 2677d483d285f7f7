"""Integration tests for kick endpoints."""
import pytest
from bson import ObjectId


CLIMBING = {"title": "Learn Rock Climbing", "category": "Adventure"}


@pytest.mark.asyncio
class TestKickCreate:
    """Tests for POST /kicks."""

    async def test_create_and_fetch_defaults(self, app_client, signup):
        """Test a new kick is Open with no comments when fetched back."""
        headers, user = await signup(app_client, "alex")

        response = await app_client.post("/kicks", json=CLIMBING, headers=headers)
        assert response.status_code == 201
        kick_id = response.json()["id"]

        response = await app_client.get(f"/kicks/{kick_id}", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Learn Rock Climbing"
        assert data["category"] == "Adventure"
        assert data["status"] == "Open"
        assert data["comments"] == []
        assert data["ownerId"] == user["id"]
        assert data["owner"] == {"id": user["id"], "username": "alex"}

    async def test_create_ignores_author_in_body(self, app_client, signup):
        """Test the stored owner is always the caller."""
        headers, user = await signup(app_client, "alex")
        _, other = await signup(app_client, "sam")

        response = await app_client.post(
            "/kicks",
            json={**CLIMBING, "author": other["id"], "ownerId": other["id"]},
            headers=headers,
        )

        assert response.status_code == 201
        assert response.json()["ownerId"] == user["id"]

    async def test_create_with_optional_fields(self, app_client, signup):
        headers, _ = await signup(app_client, "alex")

        response = await app_client.post(
            "/kicks",
            json={
                "title": "See the cherry blossoms",
                "category": "Travel",
                "description": "Kyoto in spring",
                "location": "Kyoto",
                "targetDate": "2027-04-01",
            },
            headers=headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["targetDate"] == "2027-04-01"
        assert data["location"] == "Kyoto"

    async def test_create_invalid_category(self, app_client, signup, test_db):
        """Test an unknown category is a 400 and nothing is stored."""
        headers, _ = await signup(app_client, "alex")

        response = await app_client.post(
            "/kicks", json={"title": "Something", "category": "Invalid"}, headers=headers
        )

        assert response.status_code == 400
        assert "category" in response.json()["error"]
        assert await test_db["kicks"].count_documents({}) == 0

    async def test_create_missing_fields(self, app_client, signup):
        headers, _ = await signup(app_client, "alex")

        response = await app_client.post("/kicks", json={"description": "no title"}, headers=headers)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields: title, category"}

    async def test_create_description_required_variant(self, make_client, signup):
        async with make_client(kick_description_required=True) as client:
            headers, _ = await signup(client, "alex")

            response = await client.post("/kicks", json=CLIMBING, headers=headers)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields: description"}


@pytest.mark.asyncio
class TestKickRead:
    """Tests for GET /kicks and GET /kicks/{id}."""

    async def test_list_only_own_newest_first(self, app_client, signup):
        alex, _ = await signup(app_client, "alex")
        sam, _ = await signup(app_client, "sam")

        await app_client.post("/kicks", json={"title": "First", "category": "Hobbies"}, headers=alex)
        await app_client.post("/kicks", json={"title": "Second", "category": "Skills"}, headers=alex)
        await app_client.post("/kicks", json={"title": "Not mine", "category": "Other"}, headers=sam)

        response = await app_client.get("/kicks", headers=alex)

        assert response.status_code == 200
        titles = [kick["title"] for kick in response.json()]
        assert titles == ["Second", "First"]
        assert response.json()[0]["owner"]["username"] == "alex"

    async def test_get_invalid_id(self, app_client, signup):
        headers, _ = await signup(app_client, "alex")

        response = await app_client.get("/kicks/not-an-id", headers=headers)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid kick id"}

    async def test_get_not_found(self, app_client, signup):
        headers, _ = await signup(app_client, "alex")

        response = await app_client.get(f"/kicks/{ObjectId()}", headers=headers)

        assert response.status_code == 404
        assert response.json() == {"error": "Kick not found"}

    async def test_get_other_users_kick_allowed_by_default(self, app_client, signup):
        """Pin the default read policy: any authenticated caller can fetch by id."""
        alex, _ = await signup(app_client, "alex")
        sam, _ = await signup(app_client, "sam")
        created = await app_client.post("/kicks", json=CLIMBING, headers=alex)

        response = await app_client.get(f"/kicks/{created.json()['id']}", headers=sam)

        assert response.status_code == 200

    async def test_get_other_users_kick_restricted(self, make_client, signup):
        """Pin the owner-only read policy when it is switched on."""
        async with make_client(restrict_kick_reads_to_owner=True) as client:
            alex, _ = await signup(client, "alex")
            sam, _ = await signup(client, "sam")
            created = await client.post("/kicks", json=CLIMBING, headers=alex)
            kick_id = created.json()["id"]

            as_sam = await client.get(f"/kicks/{kick_id}", headers=sam)
            as_alex = await client.get(f"/kicks/{kick_id}", headers=alex)

        assert as_sam.status_code == 403
        assert as_alex.status_code == 200


@pytest.mark.asyncio
class TestKickUpdate:
    """Tests for PUT /kicks/{id} and PATCH /kicks/{id}/status."""

    async def test_update_partial(self, app_client, signup):
        headers, _ = await signup(app_client, "alex")
        created = await app_client.post("/kicks", json=CLIMBING, headers=headers)
        kick_id = created.json()["id"]

        response = await app_client.put(
            f"/kicks/{kick_id}",
            json={"location": "Yosemite", "completedDate": "2027-06-01"},
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["location"] == "Yosemite"
        assert data["completedDate"] == "2027-06-01"
        assert data["title"] == "Learn Rock Climbing"

    async def test_update_empty_body(self, app_client, signup):
        """Test an empty update is a 400 and leaves the kick alone."""
        headers, _ = await signup(app_client, "alex")
        created = await app_client.post("/kicks", json=CLIMBING, headers=headers)
        kick_id = created.json()["id"]

        before = await app_client.get(f"/kicks/{kick_id}", headers=headers)

        response = await app_client.put(f"/kicks/{kick_id}", json={}, headers=headers)

        assert response.status_code == 400
        assert response.json() == {"error": "At least one field is required for update"}
        after = await app_client.get(f"/kicks/{kick_id}", headers=headers)
        assert after.json() == before.json()

    async def test_update_not_owner(self, app_client, signup):
        """Test a non-owner gets 403 and the kick is unchanged."""
        alex, _ = await signup(app_client, "alex")
        sam, _ = await signup(app_client, "sam")
        created = await app_client.post("/kicks", json=CLIMBING, headers=alex)
        kick_id = created.json()["id"]

        response = await app_client.put(f"/kicks/{kick_id}", json={"title": "Mine now"}, headers=sam)

        assert response.status_code == 403
        fetched = await app_client.get(f"/kicks/{kick_id}", headers=alex)
        assert fetched.json()["title"] == "Learn Rock Climbing"

    async def test_update_whitespace_title(self, app_client, signup):
        """Test a blank title is rejected and the stored title is kept."""
        headers, _ = await signup(app_client, "alex")
        created = await app_client.post("/kicks", json=CLIMBING, headers=headers)
        kick_id = created.json()["id"]

        response = await app_client.put(f"/kicks/{kick_id}", json={"title": "   "}, headers=headers)

        assert response.status_code == 400
        assert "title" in response.json()["error"]
        fetched = await app_client.get(f"/kicks/{kick_id}", headers=headers)
        assert fetched.json()["title"] == "Learn Rock Climbing"

    async def test_update_returns_comment_authors(self, app_client, signup):
        alex, _ = await signup(app_client, "alex")
        sam, _ = await signup(app_client, "sam")
        created = await app_client.post("/kicks", json=CLIMBING, headers=alex)
        kick_id = created.json()["id"]
        await app_client.post(f"/kicks/{kick_id}/comments", json={"text": "Go"}, headers=sam)

        response = await app_client.put(
            f"/kicks/{kick_id}", json={"location": "Yosemite"}, headers=alex
        )

        assert response.status_code == 200
        assert response.json()["comments"][0]["author"]["username"] == "sam"

    async def test_update_invalid_category(self, app_client, signup):
        headers, _ = await signup(app_client, "alex")
        created = await app_client.post("/kicks", json=CLIMBING, headers=headers)

        response = await app_client.put(
            f"/kicks/{created.json()['id']}", json={"category": "Invalid"}, headers=headers
        )

        assert response.status_code == 400

    async def test_status_transition(self, app_client, signup):
        headers, _ = await signup(app_client, "alex")
        created = await app_client.post("/kicks", json=CLIMBING, headers=headers)
        kick_id = created.json()["id"]

        completed = await app_client.patch(
            f"/kicks/{kick_id}/status", json={"status": "Completed"}, headers=headers
        )
        reopened = await app_client.patch(
            f"/kicks/{kick_id}/status", json={"status": "Open"}, headers=headers
        )

        assert completed.status_code == 200
        assert completed.json()["status"] == "Completed"
        assert reopened.json()["status"] == "Open"

    async def test_status_invalid_and_missing(self, app_client, signup):
        headers, _ = await signup(app_client, "alex")
        created = await app_client.post("/kicks", json=CLIMBING, headers=headers)
        kick_id = created.json()["id"]

        invalid = await app_client.patch(
            f"/kicks/{kick_id}/status", json={"status": "Abandoned"}, headers=headers
        )
        missing = await app_client.patch(f"/kicks/{kick_id}/status", json={}, headers=headers)

        assert invalid.status_code == 400
        assert missing.status_code == 400
        assert missing.json() == {"error": "Missing required fields: status"}

    async def test_status_not_owner(self, app_client, signup):
        alex, _ = await signup(app_client, "alex")
        sam, _ = await signup(app_client, "sam")
        created = await app_client.post("/kicks", json=CLIMBING, headers=alex)

        response = await app_client.patch(
            f"/kicks/{created.json()['id']}/status", json={"status": "Completed"}, headers=sam
        )

        assert response.status_code == 403


@pytest.mark.asyncio
class TestKickDelete:
    """Tests for DELETE /kicks/{id}."""

    async def test_delete_not_owner(self, app_client, signup):
        alex, _ = await signup(app_client, "alex")
        sam, _ = await signup(app_client, "sam")
        created = await app_client.post("/kicks", json=CLIMBING, headers=alex)
        kick_id = created.json()["id"]

        response = await app_client.delete(f"/kicks/{kick_id}", headers=sam)

        assert response.status_code == 403
        assert (await app_client.get(f"/kicks/{kick_id}", headers=alex)).status_code == 200

    async def test_delete_removes_comments(self, app_client, signup):
        """Test deleting a kick takes its comments with it."""
        alex, _ = await signup(app_client, "alex")
        sam, _ = await signup(app_client, "sam")
        created = await app_client.post("/kicks", json=CLIMBING, headers=alex)
        kick_id = created.json()["id"]
        comment = await app_client.post(
            f"/kicks/{kick_id}/comments", json={"text": "Good luck"}, headers=sam
        )
        comment_id = comment.json()["id"]

        response = await app_client.delete(f"/kicks/{kick_id}", headers=alex)

        assert response.status_code == 200
        assert response.json() == {"message": "Kick deleted successfully"}
        assert (await app_client.get(f"/kicks/{kick_id}", headers=alex)).status_code == 404
        edit = await app_client.put(
            f"/kicks/{kick_id}/comments/{comment_id}", json={"text": "Still here?"}, headers=sam
        )
        assert edit.status_code == 404

    async def test_delete_not_found(self, app_client, signup):
        headers, _ = await signup(app_client, "alex")

        response = await app_client.delete(f"/kicks/{ObjectId()}", headers=headers)

        assert response.status_code == 404
