from types import SimpleNamespace

import pytest

from legal_qa.errors import CorpusError, LLMError
from legal_qa.llm import NO_ANSWER_MESSAGE, LLMClient
from server.app import create_app
from conftest import FakeLLMClient


@pytest.fixture
def llm():
    return FakeLLMClient()


@pytest.fixture
def client(settings, llm):
    app = create_app(settings=settings, llm_client=llm)
    app.config["TESTING"] = True
    return app.test_client()


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    data = response.get_json()
    assert data["status"] == "ok"
    assert data["llmConfigured"] is True
    assert data["timestamp"].endswith("Z")


def test_index_page(client):
    response = client.get("/")

    assert response.status_code == 200
    assert b"Legal QA System" in response.data


def test_ask_returns_answer_and_sources(client, llm):
    response = client.post("/api/ask", json={"question": "What does negligence require?"})

    assert response.status_code == 200
    data = response.get_json()
    assert data["answer"] == "Generated answer"
    assert 0 < len(data["sources"]) <= 2
    assert data["sources"][0]["filename"] == "negligence.txt"
    assert set(data["sources"][0]) == {"text", "filename", "score"}

    docs, question = llm.calls[0]
    assert question == "What does negligence require?"
    assert [d["filename"] for d in docs] == [s["filename"] for s in data["sources"]]


@pytest.mark.parametrize("body", [
    {"question": ""},
    {"question": "   "},
    {"question": 42},
    {},
    ["question"],
])
def test_ask_rejects_invalid_question(client, llm, body):
    response = client.post("/api/ask", json=body)

    assert response.status_code == 400
    assert response.get_json()["error"] == "Invalid request"
    assert llm.calls == []


def test_ask_rejects_non_json_body(client):
    response = client.post("/api/ask", data="question=hi", content_type="text/plain")

    assert response.status_code == 400


def test_ask_without_llm_configured(settings):
    app = create_app(settings=settings, llm_client=FakeLLMClient(configured=False))
    client = app.test_client()

    response = client.post("/api/ask", json={"question": "What is a contract?"})

    assert response.status_code == 503
    assert response.get_json()["error"] == "Service unavailable"

    health = client.get("/api/health").get_json()
    assert health["llmConfigured"] is False


def test_ask_without_relevant_documents(client, llm):
    response = client.post("/api/ask", json={"question": "xylophone quasar zebra"})

    assert response.status_code == 200
    assert response.get_json() == {"answer": NO_ANSWER_MESSAGE, "sources": []}
    assert llm.calls == []


def test_ask_llm_failure_is_500(settings):
    llm = FakeLLMClient(error=LLMError("OpenAI API failed: boom"))
    client = create_app(settings=settings, llm_client=llm).test_client()

    response = client.post("/api/ask", json={"question": "What is copyright?"})

    assert response.status_code == 500
    data = response.get_json()
    assert data["error"] == "Internal server error"
    assert data["message"] == "OpenAI API failed: boom"


def test_unknown_route_is_json_404(client):
    response = client.get("/api/missing")

    assert response.status_code == 404
    assert response.get_json() == {
        "error": "Not found",
        "message": "Route GET /api/missing not found"
    }


def test_wrong_method_is_json_405(client):
    response = client.get("/api/ask")

    assert response.status_code == 405
    assert response.get_json()["error"] == "Method Not Allowed"


def test_missing_corpus_fails_startup(settings, tmp_path):
    settings.documents_dir = tmp_path / "nowhere"

    with pytest.raises(CorpusError):
        create_app(settings=settings, llm_client=FakeLLMClient())


def test_cors_header(client):
    response = client.get("/api/health", headers={"Origin": "http://localhost:3000"})

    assert response.headers["Access-Control-Allow-Origin"] in ("*", "http://localhost:3000")


class StubRetriever:
    document_count = 1

    def __init__(self, results):
        self.results = results
        self.questions = []

    def retrieve(self, question, top_k=None):
        self.questions.append((question, top_k))
        return self.results


def test_routes_use_injected_retriever(settings, llm):
    results = [{"text": "Stub text", "filename": "stub.txt", "score": 0.5}]
    retriever = StubRetriever(results)
    client = create_app(settings=settings, llm_client=llm, retriever=retriever).test_client()

    response = client.post("/api/ask", json={"question": "anything"})

    assert response.get_json()["sources"] == results
    assert retriever.questions == [("anything", settings.top_k)]


def test_empty_completion_is_string_answer(settings):
    completions = SimpleNamespace(create=lambda **kwargs: SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=None))]
    ))
    sdk_client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    llm = LLMClient("openai", client=sdk_client)
    client = create_app(settings=settings, llm_client=llm).test_client()

    response = client.post("/api/ask", json={"question": "What is copyright?"})

    assert response.status_code == 200
    assert response.get_json()["answer"] == ""
