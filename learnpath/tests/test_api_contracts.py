"""
learnpath/tests/test_api_contracts.py
API Contract Verification Tests

These tests verify:
1. Success and error responses use the standard envelopes
2. HTTP status codes are correct (400 / 401 / 403 / 404 / 409)
3. Role enforcement on management endpoints
4. Catalog, outline and progress flows over HTTP

PRINCIPLE: APIs are contracts. Contracts must never break.
"""
import pytest

from learnpath.errors import ErrorCode
from learnpath.orm.content import ContentType
from learnpath.orm.user_progress import UserProgress


def assert_error_shape(data, code=None):
    assert data["success"] is False
    assert "error" in data
    assert "message" in data
    assert "code" in data
    if code:
        assert data["code"] == code


class TestErrorResponseFormat:
    """Verify all error responses follow the standard format"""

    @pytest.mark.asyncio
    async def test_401_without_token(self, client):
        response = await client.get("/api/categories")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert_error_shape(response.json(), ErrorCode.AUTH_REQUIRED)

    @pytest.mark.asyncio
    async def test_401_with_garbage_token(self, client):
        response = await client.get("/api/categories", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert_error_shape(response.json(), ErrorCode.AUTH_INVALID)

    @pytest.mark.asyncio
    async def test_403_for_insufficient_role(self, client, student_headers):
        response = await client.post("/api/categories", json={"name": "Web", "slug": "web"}, headers=student_headers)
        assert response.status_code == 403
        data = response.json()
        assert_error_shape(data, ErrorCode.PERMISSION_DENIED)
        assert data["details"]["current_role"] == "STUDENT"

    @pytest.mark.asyncio
    async def test_404_not_found_format(self, client):
        response = await client.get("/api/path/99999")
        assert response.status_code == 404
        assert_error_shape(response.json(), ErrorCode.PATH_NOT_FOUND)

    @pytest.mark.asyncio
    async def test_validation_error_is_400_with_field_details(self, client):
        response = await client.post(
            "/api/auth/register",
            json={"email": "not-an-email", "password": "123", "name": "Al"}
        )
        assert response.status_code == 400
        data = response.json()
        assert_error_shape(data, ErrorCode.VALIDATION_ERROR)
        fields = {e["field"] for e in data["details"]["errors"]}
        assert {"email", "password"} <= fields

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_envelope(self, client):
        response = await client.get("/api/does-not-exist")
        assert response.status_code == 404
        assert_error_shape(response.json(), ErrorCode.NOT_FOUND)


class TestHealthEndpoints:
    """Verify health endpoints return proper structure"""

    @pytest.mark.asyncio
    async def test_main_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data

    @pytest.mark.asyncio
    async def test_errors_health(self, client):
        response = await client.get("/api/errors/health")
        assert response.status_code == 200
        data = response.json()
        assert "status_codes" in data
        assert "TREE_INVALID" in data["error_codes"]

    @pytest.mark.asyncio
    async def test_openapi_documents_error_envelope(self, client):
        response = await client.get("/openapi.json")
        assert response.status_code == 200
        schema = response.json()
        assert "ErrorResponse" in schema["components"]["schemas"]
        delete_path = schema["paths"]["/api/path/{path_id}"]["delete"]["responses"]
        assert delete_path["403"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")


class TestCategories:

    @pytest.mark.asyncio
    async def test_admin_creates_and_anyone_authenticated_reads(self, client, admin_headers, student_headers):
        created = await client.post(
            "/api/categories", json={"name": "Web Development", "slug": "web-dev"}, headers=admin_headers
        )
        assert created.status_code == 201
        body = created.json()
        assert body["success"] is True
        assert body["data"]["slug"] == "web-dev"

        listed = await client.get("/api/categories", headers=student_headers)
        assert [c["slug"] for c in listed.json()["data"]] == ["web-dev"]

    @pytest.mark.asyncio
    async def test_teacher_cannot_create_category(self, client, teacher_headers):
        response = await client.post("/api/categories", json={"name": "Web", "slug": "web"}, headers=teacher_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_duplicate_slug_is_409(self, client, admin_headers, seed):
        await seed.category("Programming", slug="programming")
        response = await client.post(
            "/api/categories", json={"name": "Programming 2", "slug": "programming"}, headers=admin_headers
        )
        assert response.status_code == 409
        assert_error_shape(response.json(), ErrorCode.DUPLICATE_SLUG)

    @pytest.mark.asyncio
    async def test_detail_lists_paths(self, client, student_headers, seed):
        category = await seed.category()
        await seed.path(category.id, "Second", order=2)
        await seed.path(category.id, "First", order=1)

        response = await client.get(f"/api/categories/{category.id}", headers=student_headers)
        assert response.status_code == 200
        assert [p["title"] for p in response.json()["data"]["paths"]] == ["First", "Second"]


class TestLearningPaths:

    @pytest.mark.asyncio
    async def test_create_assigns_next_order(self, client, teacher_headers, seed):
        category = await seed.category()
        await seed.path(category.id, "Existing", order=4)

        response = await client.post(
            "/api/path", json={"title": "New path", "category_id": category.id}, headers=teacher_headers
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["order"] == 5
        assert data["node_count"] == 0
        assert data["category"]["id"] == category.id

    @pytest.mark.asyncio
    async def test_create_with_missing_category_is_404(self, client, teacher_headers):
        response = await client.post(
            "/api/path", json={"title": "Orphan", "category_id": 777}, headers=teacher_headers
        )
        assert response.status_code == 404
        assert_error_shape(response.json(), ErrorCode.CATEGORY_NOT_FOUND)

    @pytest.mark.asyncio
    async def test_student_cannot_create_path(self, client, student_headers, seed):
        category = await seed.category()
        response = await client.post(
            "/api/path", json={"title": "Nope", "category_id": category.id}, headers=student_headers
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_list_is_public_and_filtered(self, client, seed):
        web = await seed.category("Web")
        data = await seed.category("Data")
        await seed.path(web.id, "HTML", order=1)
        await seed.path(data.id, "Pandas", order=1)

        everything = await client.get("/api/path")
        assert everything.status_code == 200
        assert len(everything.json()["data"]) == 2

        filtered = await client.get("/api/path", params={"category_id": web.id})
        assert [p["title"] for p in filtered.json()["data"]] == ["HTML"]

        all_again = await client.get("/api/path", params={"category_id": 0})
        assert len(all_again.json()["data"]) == 2

    @pytest.mark.asyncio
    async def test_update_via_put_and_post(self, client, teacher_headers, seed):
        category = await seed.category()
        path = await seed.path(category.id, "Draft")

        put = await client.put(f"/api/path/{path.id}", json={"title": "Final"}, headers=teacher_headers)
        assert put.status_code == 200
        assert put.json()["data"]["title"] == "Final"

        post = await client.post(f"/api/path/{path.id}", json={"difficulty": "ADVANCED"}, headers=teacher_headers)
        assert post.status_code == 200
        assert post.json()["data"]["difficulty"] == "ADVANCED"
        assert post.json()["data"]["title"] == "Final"

    @pytest.mark.asyncio
    async def test_reorder(self, client, teacher_headers, seed):
        category = await seed.category()
        first = await seed.path(category.id, "First", order=1)
        second = await seed.path(category.id, "Second", order=2)

        response = await client.put(
            "/api/path/reorder",
            json={"updates": [{"id": first.id, "order": 2}, {"id": second.id, "order": 1}]},
            headers=teacher_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"] == {"updated": 2}

        listed = await client.get("/api/path")
        assert [p["title"] for p in listed.json()["data"]] == ["Second", "First"]

    @pytest.mark.asyncio
    async def test_delete_blocked_by_progress(self, client, admin_headers, student, seed, session_factory):
        category = await seed.category()
        path = await seed.path(category.id)
        async with session_factory() as session:
            session.add(UserProgress(user_id=student.id, path_id=path.id, completed_nodes=[]))
            await session.commit()

        response = await client.delete(f"/api/path/{path.id}", headers=admin_headers)
        assert response.status_code == 400
        assert_error_shape(response.json(), ErrorCode.CONSTRAINT_VIOLATION)

    @pytest.mark.asyncio
    async def test_delete_removes_nodes(self, client, admin_headers, seed):
        category = await seed.category()
        path = await seed.path(category.id)
        node = await seed.node(path.id, "Intro")

        response = await client.delete(f"/api/path/{path.id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Learning path deleted"}

        assert (await client.get(f"/api/nodes/{node.id}")).status_code == 404


class TestNodes:

    @pytest.mark.asyncio
    async def test_tree_endpoint(self, client, seed):
        category = await seed.category()
        path = await seed.path(category.id)
        video = await seed.content(type=ContentType.VIDEO, title="Intro video")
        root = await seed.node(path.id, "Module", order=1)
        await seed.node(path.id, "Lesson 2", order=2, parent_id=root.id)
        await seed.node(path.id, "Lesson 1", order=1, parent_id=root.id, content_id=video.id)

        response = await client.get("/api/nodes/tree", params={"path_id": path.id})
        assert response.status_code == 200
        roots = response.json()["data"]
        assert [r["title"] for r in roots] == ["Module"]
        children = roots[0]["children"]
        assert [c["title"] for c in children] == ["Lesson 1", "Lesson 2"]
        assert children[0]["content"] == {"id": video.id, "type": "VIDEO", "title": "Intro video"}

    @pytest.mark.asyncio
    async def test_tree_for_missing_path_is_404(self, client):
        response = await client.get("/api/nodes/tree", params={"path_id": 9999})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_parent_from_other_path_rejected(self, client, teacher_headers, seed):
        category = await seed.category()
        path_a = await seed.path(category.id, "A")
        path_b = await seed.path(category.id, "B")
        foreign = await seed.node(path_b.id, "Elsewhere")

        response = await client.post(
            "/api/nodes",
            json={"title": "Child", "order": 1, "path_id": path_a.id, "parent_id": foreign.id},
            headers=teacher_headers,
        )
        assert response.status_code == 400
        assert response.json()["details"]["errors"][0]["field"] == "parent_id"

    @pytest.mark.asyncio
    async def test_cycle_rejected(self, client, teacher_headers, seed):
        category = await seed.category()
        path = await seed.path(category.id)
        parent = await seed.node(path.id, "Parent")
        child = await seed.node(path.id, "Child", parent_id=parent.id)

        response = await client.put(
            f"/api/nodes/{parent.id}", json={"parent_id": child.id}, headers=teacher_headers
        )
        assert response.status_code == 400
        assert_error_shape(response.json(), ErrorCode.TREE_INVALID)

    @pytest.mark.asyncio
    async def test_only_admin_deletes(self, client, teacher_headers, admin_headers, seed):
        category = await seed.category()
        path = await seed.path(category.id)
        node = await seed.node(path.id, "Doomed")

        assert (await client.delete(f"/api/nodes/{node.id}", headers=teacher_headers)).status_code == 403

        response = await client.delete(f"/api/nodes/{node.id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["deleted_ids"] == [node.id]


    @pytest.mark.asyncio
    async def test_create_requires_order(self, client, teacher_headers, seed):
        category = await seed.category()
        path = await seed.path(category.id)

        response = await client.post("/api/nodes", json={"title": "A", "path_id": path.id}, headers=teacher_headers)
        assert response.status_code == 400
        data = response.json()
        assert_error_shape(data, ErrorCode.VALIDATION_ERROR)
        assert [e["field"] for e in data["details"]["errors"]] == ["order"]

    @pytest.mark.asyncio
    async def test_negative_order_rejected(self, client, teacher_headers, seed):
        category = await seed.category()
        path = await seed.path(category.id)
        node = await seed.node(path.id, "A", order=1)

        created = await client.post(
            "/api/nodes", json={"title": "B", "order": -1, "path_id": path.id}, headers=teacher_headers
        )
        assert created.status_code == 400

        updated = await client.put(f"/api/nodes/{node.id}", json={"order": -5}, headers=teacher_headers)
        assert updated.status_code == 400

        reordered = await client.post(
            "/api/nodes/reorder", json={"updates": [{"id": node.id, "order": -2}]}, headers=teacher_headers
        )
        assert reordered.status_code == 400

    @pytest.mark.asyncio
    async def test_node_detail_shape(self, client, seed):
        category = await seed.category()
        path = await seed.path(category.id)
        quiz = await seed.content(type=ContentType.QUIZ, title="Checkpoint")
        await seed.question(quiz.id, correct_answer=1)
        video = await seed.content(type=ContentType.VIDEO, title="Walkthrough")
        parent = await seed.node(path.id, "Module", order=1)
        node = await seed.node(path.id, "Lesson", order=1, parent_id=parent.id, content_id=quiz.id)
        await seed.node(path.id, "Part 2", order=2, parent_id=node.id)
        await seed.node(path.id, "Part 1", order=1, parent_id=node.id, content_id=video.id)

        response = await client.get(f"/api/nodes/{node.id}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["parent"]["id"] == parent.id
        assert data["content"]["title"] == "Checkpoint"
        assert data["content"]["questions"][0]["correct_answer"] == 1
        assert [c["title"] for c in data["children"]] == ["Part 1", "Part 2"]
        assert data["children"][0]["content"] == {"id": video.id, "type": "VIDEO", "title": "Walkthrough"}
        assert data["children"][1]["content"] is None


class TestContentAndQuestions:

    @pytest.mark.asyncio
    async def test_create_quiz_and_check_answer(self, client, teacher_headers, student_headers):
        created = await client.post(
            "/api/content",
            json={
                "type": "QUIZ",
                "title": "HTML quiz",
                "questions": [
                    {"question": "What does HTML stand for?", "options": ["a", "b", "HyperText Markup Language"], "correct_answer": 2}
                ],
            },
            headers=teacher_headers,
        )
        assert created.status_code == 201
        question_id = created.json()["data"]["questions"][0]["id"]

        right = await client.post(f"/api/questions/{question_id}/check", json={"user_answer": 2}, headers=student_headers)
        assert right.json()["data"]["is_correct"] is True

        wrong = await client.post(f"/api/questions/{question_id}/check", json={"user_answer": 0}, headers=student_headers)
        assert wrong.json()["data"] == {"is_correct": False, "correct_answer": 2, "explanation": None}

    @pytest.mark.asyncio
    async def test_check_answer_requires_token(self, client, seed):
        quiz = await seed.content(type=ContentType.QUIZ)
        question = await seed.question(quiz.id)
        response = await client.post(f"/api/questions/{question.id}/check", json={"user_answer": 0})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_video_without_url_is_400(self, client, teacher_headers):
        response = await client.post(
            "/api/content", json={"type": "VIDEO", "title": "Clip"}, headers=teacher_headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_via_post_replaces_questions(self, client, teacher_headers, seed):
        quiz = await seed.content(type=ContentType.QUIZ)
        await seed.question(quiz.id)
        await seed.question(quiz.id)

        response = await client.post(
            f"/api/content/{quiz.id}",
            json={"questions": [{"question": "Only this one?", "options": ["y", "n"], "correct_answer": 0}]},
            headers=teacher_headers,
        )
        assert response.status_code == 200
        assert [q["question"] for q in response.json()["data"]["questions"]] == ["Only this one?"]

    @pytest.mark.asyncio
    async def test_content_detail_lists_nodes(self, client, seed):
        category = await seed.category()
        path = await seed.path(category.id)
        article = await seed.content()
        node = await seed.node(path.id, "Reading", content_id=article.id)

        response = await client.get(f"/api/content/{article.id}")
        assert response.status_code == 200
        assert response.json()["data"]["nodes"] == [{"id": node.id, "title": "Reading", "path_id": path.id}]


class TestProgressFlow:

    @pytest.mark.asyncio
    async def test_start_complete_and_stats(self, client, student_headers, seed):
        category = await seed.category()
        path = await seed.path(category.id)
        a = await seed.node(path.id, "A", order=1)
        b = await seed.node(path.id, "B", order=2)

        started = await client.post("/api/progress/start", json={"path_id": path.id}, headers=student_headers)
        assert started.status_code == 201
        record = started.json()["data"]
        assert record["current_node_id"] == a.id
        assert record["status"] == "IN_PROGRESS"

        again = await client.post("/api/progress/start", json={"path_id": path.id}, headers=student_headers)
        assert again.json()["data"]["id"] == record["id"]

        await client.post(f"/api/progress/{path.id}/complete", json={"node_id": a.id}, headers=student_headers)
        summary = (await client.get(f"/api/progress/{path.id}", headers=student_headers)).json()["data"]
        assert summary["progress_percentage"] == 50
        assert summary["current_node_id"] == b.id
        assert summary["path"]["id"] == path.id

        done = await client.post(f"/api/progress/{path.id}/complete", json={"node_id": b.id}, headers=student_headers)
        assert done.json()["data"]["status"] == "COMPLETED"

        stats = (await client.get("/api/progress/stats", headers=student_headers)).json()["data"]
        assert stats["completed_paths"] == 1
        assert stats["overall_progress"] == 100

    @pytest.mark.asyncio
    async def test_complete_without_record_is_404(self, client, student_headers, seed):
        category = await seed.category()
        path = await seed.path(category.id)
        node = await seed.node(path.id, "A")

        response = await client.post(
            f"/api/progress/{path.id}/complete", json={"node_id": node.id}, headers=student_headers
        )
        assert response.status_code == 404
        assert_error_shape(response.json(), ErrorCode.PROGRESS_NOT_FOUND)

    @pytest.mark.asyncio
    async def test_progress_requires_token(self, client):
        assert (await client.get("/api/progress")).status_code == 401

    @pytest.mark.asyncio
    async def test_abandon_then_list_empty(self, client, student_headers, seed):
        category = await seed.category()
        path = await seed.path(category.id)
        await client.post("/api/progress/start", json={"path_id": path.id}, headers=student_headers)

        response = await client.delete(f"/api/progress/{path.id}", headers=student_headers)
        assert response.status_code == 200

        listed = await client.get("/api/progress", headers=student_headers)
        assert listed.json()["data"] == []
