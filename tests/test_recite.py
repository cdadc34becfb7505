import base64
import io
import json

from app.services.llm_gateway import LlmError

BODY = {
    "recitedText": "Plants use sunlight to make food.",
    "expectedText": "Photosynthesis converts light energy into chemical energy stored in glucose.",
}

GOOD_EVALUATION = {
    "accuracy": 72,
    "missingParts": ["glucose"],
    "incorrectParts": [],
    "summary": "Good overall idea, be more precise.",
}

BODY_LANGUAGE = {
    "confidence": 7,
    "nervousness": 3,
    "posture": "upright",
    "eyeContact": "steady",
    "facialExpression": "calm",
    "suggestions": ["slow down"],
}


def test_recite_evaluate_parsed(test_client, fake_llm):
    fake_llm.replies.append("```json\n" + json.dumps(GOOD_EVALUATION) + "\n```")
    r = test_client.post("/api/recite/evaluate", json=BODY)
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["accuracy"] == 72
    assert data["missingParts"] == ["glucose"]
    assert "error" not in data and "raw" not in data
    assert BODY["expectedText"] in fake_llm.prompts[0]


def test_recite_evaluate_fallback_is_served(test_client, fake_llm):
    fake_llm.replies.append("The student did fine.")
    r = test_client.post("/api/recite/evaluate", json=BODY)
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["accuracy"] == 50
    assert data["incorrectParts"] == []
    assert len(data["missingParts"]) == 1
    assert data["summary"]
    assert data["raw"] == "The student did fine."
    assert data["error"] == "LLM did not return valid JSON"


def test_recite_evaluate_wrong_shape_uses_fallback(test_client, fake_llm):
    fake_llm.replies.append('{"accuracy": 180, "summary": "?"}')
    r = test_client.post("/api/recite/evaluate", json=BODY)
    assert r.status_code == 200
    assert r.json()["accuracy"] == 50
    assert "error" in r.json()


def test_recite_evaluate_llm_down(test_client, fake_llm):
    fake_llm.replies.append(LlmError("connection refused"))
    r = test_client.post("/api/recite/evaluate", json=BODY)
    assert r.status_code == 500
    assert r.json() == {"error": "AI analysis failed"}


def test_recite_evaluate_missing_field(test_client):
    r = test_client.post("/api/recite/evaluate", json={"recitedText": "hi"})
    assert r.status_code == 400
    assert r.json()["error"] == "Missing required field: expectedText"


def _media():
    return {"media": ("clip.webm", io.BytesIO(b"fake-video-bytes"), "video/webm")}


def test_recite_media_disabled_skips_vision(test_client, fake_llm):
    fake_llm.replies.append(json.dumps(GOOD_EVALUATION))
    r = test_client.post("/api/recite/evaluate-media", data=BODY, files=_media())
    assert r.status_code == 200, r.text
    assert "bodyLanguage" not in r.json()
    assert fake_llm.media_calls == []


def test_recite_media_enabled_adds_body_language(client_factory, fake_llm):
    client = client_factory(ENABLE_VIDEO_ANALYSIS="true")
    fake_llm.replies.append(json.dumps(GOOD_EVALUATION))
    fake_llm.media_replies.append("Analysis:\n" + json.dumps(BODY_LANGUAGE))

    r = client.post("/api/recite/evaluate-media", data=BODY, files=_media())
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["accuracy"] == 72
    assert data["bodyLanguage"]["confidence"] == 7
    assert data["bodyLanguage"]["suggestions"] == ["slow down"]

    _, media_b64, mime = fake_llm.media_calls[0]
    assert base64.b64decode(media_b64) == b"fake-video-bytes"
    assert mime == "video/webm"


def test_recite_media_vision_failure_is_swallowed(client_factory, fake_llm):
    client = client_factory(ENABLE_VIDEO_ANALYSIS="true")
    fake_llm.replies.append(json.dumps(GOOD_EVALUATION))
    fake_llm.media_replies.append(LlmError("vision model not installed"))

    r = client.post("/api/recite/evaluate-media", data=BODY, files=_media())
    assert r.status_code == 200, r.text
    assert r.json()["accuracy"] == 72
    assert "bodyLanguage" not in r.json()


def test_recite_media_unparseable_vision_is_swallowed(client_factory, fake_llm):
    client = client_factory(ENABLE_VIDEO_ANALYSIS="true")
    fake_llm.replies.append(json.dumps(GOOD_EVALUATION))
    fake_llm.media_replies.append('{"confidence": 42}')

    r = client.post("/api/recite/evaluate-media", data=BODY, files=_media())
    assert r.status_code == 200
    assert "bodyLanguage" not in r.json()


def test_recite_media_without_file(client_factory, fake_llm):
    client = client_factory(ENABLE_VIDEO_ANALYSIS="true")
    fake_llm.replies.append(json.dumps(GOOD_EVALUATION))

    r = client.post("/api/recite/evaluate-media", data=BODY)
    assert r.status_code == 200, r.text
    assert fake_llm.media_calls == []


def test_recite_media_missing_text_field(test_client):
    r = test_client.post("/api/recite/evaluate-media", data={"recitedText": "hi"}, files=_media())
    assert r.status_code == 400
    assert r.json()["error"] == "Missing required field: expectedText"


def test_recite_evaluate_blank_text_is_rejected(test_client, fake_llm):
    r = test_client.post("/api/recite/evaluate", json=dict(BODY, recitedText="   "))
    assert r.status_code == 400
    assert r.json()["error"] == "Missing required field: recitedText (empty)"
    assert fake_llm.prompts == []


def test_recite_media_blank_text_is_rejected(test_client, fake_llm):
    r = test_client.post("/api/recite/evaluate-media", data=dict(BODY, expectedText="  "))
    assert r.status_code == 400
    assert r.json()["error"] == "Missing required field: expectedText (empty)"
    assert fake_llm.prompts == []
