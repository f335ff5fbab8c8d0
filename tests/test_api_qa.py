"""
Integration tests for Q&A endpoints
"""
import pytest
from knowledge_base.models.question import Question


@pytest.mark.integration
class TestQuestions:
    """Test question CRUD"""

    def test_ask_question(self, client, member_headers, member_user):
        response = client.post(
            "/api/qa/questions",
            json={"title": "  VPN access?  ", "body": "How do I get VPN access?"},
            headers=member_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "VPN access?"
        assert data["is_answered"] is False
        assert data["author"]["full_name"] == "Mona Member"

    def test_blank_title_rejected(self, client, member_headers):
        response = client.post("/api/qa/questions", json={"title": " ", "body": "Body"}, headers=member_headers)

        assert response.status_code == 400
        assert "title" in response.json()["detail"]["errors"]

    def test_requires_login(self, client):
        assert client.get("/api/qa/questions").status_code == 401

    def test_list_filters(self, client, make_question, member_user, other_user, member_headers):
        make_question("Open one", member_user)
        make_question("Answered one", other_user, answered=True)

        answered = client.get("/api/qa/questions", params={"answered": "true"}, headers=member_headers).json()
        mine = client.get("/api/qa/questions", params={"author_id": member_user.id}, headers=member_headers).json()

        assert [q["title"] for q in answered["data"]] == ["Answered one"]
        assert [q["title"] for q in mine["data"]] == ["Open one"]
        assert mine["count"] == 1

    def test_only_author_edits(self, client, make_question, member_user, member_headers, other_headers):
        question = make_question("Original", member_user)

        assert client.patch(f"/api/qa/questions/{question.id}", json={"title": "X"}, headers=other_headers).status_code == 403

        response = client.patch(f"/api/qa/questions/{question.id}", json={"title": "Edited"}, headers=member_headers)
        assert response.status_code == 200
        assert response.json()["title"] == "Edited"

    def test_delete_question_removes_answers(self, client, make_question, make_answer, member_user, other_user, member_headers):
        question = make_question("To delete", member_user)
        make_answer(question, other_user)

        assert client.delete(f"/api/qa/questions/{question.id}", headers=member_headers).status_code == 204
        assert client.get(f"/api/qa/questions/{question.id}", headers=member_headers).status_code == 404


@pytest.mark.integration
class TestAnswers:
    """Test answering and accepting"""

    def test_answer_question(self, client, make_question, member_user, other_headers):
        question = make_question("Printer?", member_user)

        response = client.post(
            f"/api/qa/questions/{question.id}/answers",
            json={"content": "Use the second floor printer"},
            headers=other_headers,
        )

        assert response.status_code == 201
        assert response.json()["is_accepted"] is False

    def test_answer_missing_question(self, client, member_headers):
        response = client.post("/api/qa/questions/999/answers", json={"content": "Hello"}, headers=member_headers)

        assert response.status_code == 404

    def test_accept_answer(self, client, make_question, make_answer, member_user, other_user, member_headers, db_session):
        question = make_question("Printer?", member_user)
        first = make_answer(question, other_user, content="First answer")
        second = make_answer(question, other_user, content="Second answer")

        assert client.post(f"/api/qa/answers/{first.id}/accept", headers=member_headers).status_code == 200
        response = client.post(f"/api/qa/answers/{second.id}/accept", headers=member_headers)

        assert response.status_code == 200
        detail = client.get(f"/api/qa/questions/{question.id}", headers=member_headers).json()
        assert detail["is_answered"] is True
        assert [(a["id"], a["is_accepted"]) for a in detail["answers"]] == [(second.id, True), (first.id, False)]

    def test_only_question_author_accepts(self, client, make_question, make_answer, member_user, other_user, other_headers):
        question = make_question("Printer?", member_user)
        answer = make_answer(question, other_user)

        response = client.post(f"/api/qa/answers/{answer.id}/accept", headers=other_headers)

        assert response.status_code == 403

    def test_answers_sorted_accepted_first_then_newest(self, client, make_question, make_answer, member_user, other_user, member_headers):
        question = make_question("Printer?", member_user)
        oldest = make_answer(question, other_user, content="Oldest")
        accepted = make_answer(question, other_user, content="Accepted", accepted=True)
        newest = make_answer(question, other_user, content="Newest")

        answers = client.get(f"/api/qa/questions/{question.id}", headers=member_headers).json()["answers"]

        assert [a["id"] for a in answers] == [accepted.id, newest.id, oldest.id]

    def test_deleting_only_accepted_answer_reopens_question(
        self, client, make_question, make_answer, member_user, other_user, other_headers, db_session
    ):
        question = make_question("Printer?", member_user, answered=True)
        answer = make_answer(question, other_user, accepted=True)

        assert client.delete(f"/api/qa/answers/{answer.id}", headers=other_headers).status_code == 204

        db_session.expire_all()
        assert db_session.get(Question, question.id).is_answered is False

    def test_only_answer_author_edits(self, client, make_question, make_answer, member_user, other_user, member_headers, other_headers):
        question = make_question("Printer?", member_user)
        answer = make_answer(question, other_user)

        assert client.patch(f"/api/qa/answers/{answer.id}", json={"content": "Mine now"}, headers=member_headers).status_code == 403

        response = client.patch(f"/api/qa/answers/{answer.id}", json={"content": "Updated"}, headers=other_headers)
        assert response.json()["content"] == "Updated"
