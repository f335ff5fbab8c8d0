"""
Integration tests for the search endpoint
"""
import pytest


@pytest.mark.integration
class TestSearch:
    """Test query validation and result shaping"""

    @pytest.mark.parametrize("q", [None, "", " a ", "x"])
    def test_query_too_short(self, client, q):
        params = {"q": q} if q is not None else {}

        response = client.get("/api/search", params=params)

        assert response.status_code == 400
        assert "at least 2 characters" in response.json()["detail"]

    def test_query_too_long(self, client):
        response = client.get("/api/search", params={"q": "a" * 201})

        assert response.status_code == 400

    def test_invalid_type(self, client):
        response = client.get("/api/search", params={"q": "policy", "type": "users"})

        assert response.status_code == 400

    def test_result_shape(self, client, make_article, member_user):
        article = make_article("Travel policy", member_user, body="Book travel through the portal", excerpt="How to travel")

        response = client.get("/api/search", params={"q": "  travel  "})

        assert response.status_code == 200
        data = response.json()
        assert data["query"] == "travel"
        assert data["count"] == 1
        result = data["results"][0]
        assert result["type"] == "article"
        assert result["id"] == article.id
        assert result["title"] == "Travel policy"
        assert result["excerpt"] == "How to travel"
        assert result["url"] == f"/articles/{article.id}"
        assert 0 < result["rank"] <= 1
        assert set(result) == {"type", "id", "title", "excerpt", "rank", "created_at", "url"}

    def test_drafts_not_searchable(self, client, make_article, member_user):
        make_article("Travel draft", member_user, status="draft")

        assert client.get("/api/search", params={"q": "travel"}).json()["results"] == []

    def test_all_terms_must_match(self, client, make_article, member_user):
        make_article("Travel policy", member_user)
        make_article("Travel tips", member_user)

        results = client.get("/api/search", params={"q": "travel policy"}).json()["results"]

        assert [r["title"] for r in results] == ["Travel policy"]

    def test_questions_and_answers(self, client, make_article, make_question, make_answer, member_user, other_user):
        make_article("Laptop setup", member_user)
        question = make_question("Who orders monitors?", other_user, body="Need a second screen")
        answered = make_question("Printer access", other_user, body="How do I print?")
        make_answer(answered, member_user, content="Ask IT for a laptop printer driver")

        response = client.get("/api/search", params={"q": "laptop", "type": "questions"})
        results = response.json()["results"]

        assert [(r["type"], r["id"]) for r in results] == [("question", answered.id)]
        assert results[0]["url"] == f"/qa/questions/{answered.id}"
        assert question.id not in [r["id"] for r in results]

    def test_type_all_mixes_results_by_rank(self, client, make_article, make_question, member_user):
        make_article("Laptop setup", member_user)
        make_question("Laptop battery", member_user, body="Laptop battery drains fast")

        results = client.get("/api/search", params={"q": "laptop"}).json()["results"]

        assert {r["type"] for r in results} == {"article", "question"}
        assert results == sorted(results, key=lambda r: r["rank"], reverse=True)

    def test_limit(self, client, make_article, member_user):
        for index in range(3):
            make_article(f"Handbook part {index}", member_user)

        data = client.get("/api/search", params={"q": "handbook", "limit": 2}).json()

        assert data["count"] == 2
