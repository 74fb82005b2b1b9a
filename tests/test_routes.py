import io

import requests

from conftest import feed_response, rss_xml
from newspulse.services.search_client import SearchAPIError

TECH_A = {"category": "technology", "url": "https://a.example.com/rss"}
TECH_B = {"category": "technology", "url": "https://b.example.com/rss"}

TECH_ITEMS = [
    ("Chip breakthrough", "https://a.example.com/1", "Faster chips", "Mon, 06 Oct 2025 10:00:00 GMT"),
    ("Data breach", "https://a.example.com/2", "Millions affected", "Mon, 06 Oct 2025 12:00:00 GMT"),
    ("Patch Tuesday", "https://a.example.com/3", "Routine updates", "Mon, 06 Oct 2025 08:00:00 GMT"),
]


def load_technology(services, feed_session):
    def get(url, **kwargs):
        if url == TECH_A["url"]:
            return feed_response(rss_xml("Tech Times", TECH_ITEMS))
        raise requests.Timeout("timed out")

    feed_session.get.side_effect = get
    services["feed_fetcher"].feeds = [TECH_A, TECH_B]
    return services["feed_fetcher"].run_fetcher()


def test_index_and_health(client):
    assert client.get("/").status_code == 200

    response = client.get("/health")
    body = response.get_json()
    assert response.status_code == 200
    assert body["dependencies"]["google_ai_key"] == "present"
    assert body["dependencies"]["scheduler"] == "not started"
    assert body["limits"]["max_audio_bytes"] == 24 * 1024 * 1024


def test_categories_overview_before_load(client):
    body = client.get("/api/articles").get_json()
    assert body["available_categories"] == ["breaking", "technology", "business", "science", "health"]
    assert body["articles_per_category"]["technology"]["article_count"] == 0
    assert body["initial_load_complete"] is False


def test_category_is_loading_before_first_fetch(client):
    response = client.get("/api/articles/technology")
    assert response.status_code == 202
    assert response.get_json()["status"] == "loading"


def test_unknown_category_lists_valid_ones(client):
    response = client.get("/api/articles/sports")
    assert response.status_code == 404
    assert "technology" in response.get_json()["available_categories"]


def test_one_timing_out_source_still_serves_analysis(client, services, feed_session, scores_by_title):
    scores_by_title.update({"Chip breakthrough": 0.8, "Data breach": -0.7, "Patch Tuesday": 0.1})

    load_technology(services, feed_session)

    b_calls = [c for c in feed_session.get.call_args_list if c.args[0] == TECH_B["url"]]
    assert len(b_calls) == 3
    state = services["cache"].get_state("technology")
    assert state.last_error is None
    assert [a.title for a in state.articles] == ["Data breach", "Chip breakthrough", "Patch Tuesday"]

    response = client.get("/api/articles/technology")
    body = response.get_json()
    assert response.status_code == 200
    assert body["category"] == "technology"
    assert body["summary"]["total_articles"] == 3
    assert [a["title"] for a in body["articles"]["positive"]] == ["Chip breakthrough"]
    assert [a["title"] for a in body["articles"]["negative"]] == ["Data breach"]
    assert [a["title"] for a in body["articles"]["neutral"]] == ["Patch Tuesday"]
    assert body["cache_status"]["from_cache"] is False

    again = client.get("/api/articles/technology").get_json()
    assert again["cache_status"]["from_cache"] is True
    assert again["articles"] == body["articles"]

    overview = client.get("/api/articles").get_json()
    assert overview["initial_load_complete"] is True
    assert overview["articles_per_category"]["technology"]["has_analysis"] is True


def test_category_with_no_working_sources_returns_error(client, services, feed_session):
    feed_session.get.side_effect = requests.ConnectionError("refused")
    services["feed_fetcher"].feeds = [TECH_A]
    services["feed_fetcher"].run_fetcher()

    response = client.get("/api/articles/technology")

    assert response.status_code == 500
    assert response.get_json()["error"] == "Error fetching articles"


def test_chat_requires_message(client):
    assert client.post("/api/chat", json={}).status_code == 400
    assert client.post("/api/chat", json={"message": "   "}).status_code == 400
    assert client.post("/api/chat", data="not json").status_code == 400


def test_chat_rejects_non_object_json_body(client, mock_search, mock_llm):
    for body in (["hello"], "hello", 42):
        assert client.post("/api/chat", json=body).status_code == 400
        assert client.post("/api/chat/test", json=body).status_code == 400
    mock_search.search.assert_not_called()
    mock_llm.generate_text.assert_not_called()


def test_chat_answers_with_search_context(client, mock_search, mock_llm):
    response = client.post("/api/chat", json={"message": "What happened in tech today?"})

    assert response.status_code == 200
    assert response.get_json() == {"answer": "Here is a short answer."}
    mock_search.search.assert_called_once_with("What happened in tech today?")
    prompt = mock_llm.generate_text.call_args.args[0]
    assert "• Result one: First snippet\n• Result two: " in prompt
    assert "User: What happened in tech today?\nBot:" in prompt


def test_chat_reports_collaborator_failure(client, mock_search):
    mock_search.search.side_effect = SearchAPIError("RAPIDAPI_KEY not set in environment")

    response = client.post("/api/chat", json={"message": "hello"})

    assert response.status_code == 500
    body = response.get_json()
    assert body["error"] == "Failed to get answer"
    assert "RAPIDAPI_KEY" in body["detail"]


def test_chat_test_endpoint_is_deterministic(client, mock_search, mock_llm):
    first = client.post("/api/chat/test", json={"message": "ping"})
    second = client.post("/api/chat/test", json={"message": "ping"})

    assert first.status_code == second.status_code == 200
    assert first.get_json() == second.get_json() == {
        "answer": "This is a mock answer to: 'ping'. (Context: Mock context for: ping)",
        "context": "Mock context for: ping",
    }
    mock_search.search.assert_not_called()
    mock_llm.generate_text.assert_not_called()
    assert client.post("/api/chat/test", json={}).status_code == 400


def test_voice_to_text_requires_audio(client):
    response = client.post("/api/voice-to-text", data={}, content_type="multipart/form-data")
    assert response.status_code == 400
    assert response.get_json()["error"] == "No audio file uploaded"


def test_voice_to_text_returns_transcript(client, mock_llm):
    data = {"audio": (io.BytesIO(b"fake-webm-bytes"), "clip.webm", "audio/webm")}

    response = client.post("/api/voice-to-text", data=data, content_type="multipart/form-data")

    assert response.status_code == 200
    assert response.get_json() == {"text": "hello world"}
    audio, mime_type, language = mock_llm.transcribe.call_args.args
    assert audio == b"fake-webm-bytes"
    assert mime_type == "audio/webm"
    assert language == "en"


def test_voice_to_text_without_text_returns_raw_response(client, mock_llm):
    mock_llm.transcribe.return_value = ("", {"candidates": [], "prompt_feedback": {"block_reason": "OTHER"}})
    data = {"audio": (io.BytesIO(b"noise"), "clip.webm", "audio/webm")}

    body = client.post("/api/voice-to-text", data=data, content_type="multipart/form-data").get_json()

    assert body["error"] == "No transcription text returned"
    assert body["whisperResp"]["prompt_feedback"]["block_reason"] == "OTHER"


def test_voice_to_text_collaborator_failure(client, mock_llm):
    mock_llm.transcribe.side_effect = ValueError("GOOGLE_API_KEY not set in environment")
    data = {"audio": (io.BytesIO(b"noise"), "clip.webm", "audio/webm")}

    response = client.post("/api/voice-to-text", data=data, content_type="multipart/form-data")

    assert response.status_code == 500
    assert response.get_json()["error"] == "Failed to transcribe audio"


def test_llm_news_summary(client, services, feed_session, mock_llm):
    assert client.get("/api/llm-news-summary/technology").status_code == 404

    load_technology(services, feed_session)
    response = client.get("/api/llm-news-summary/technology")

    assert response.status_code == 200
    assert response.get_json() == {"summary": "Here is a short answer."}
    prompt = mock_llm.generate_text.call_args.args[0]
    assert "1. [Data breach]: Millions affected" in prompt


def test_llm_news_summary_failure(client, services, feed_session, mock_llm):
    load_technology(services, feed_session)
    mock_llm.generate_text.side_effect = RuntimeError("quota exceeded")

    response = client.get("/api/llm-news-summary/technology")

    assert response.status_code == 500
    assert response.get_json()["detail"] == "quota exceeded"
