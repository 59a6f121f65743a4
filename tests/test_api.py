"""Test the HTTP API with FastAPI's test client."""

from pathlib import Path
from fastapi.testclient import TestClient

from recgen.api.main import app
from recgen.api.routers import generator as generator_router
from recgen.generators.jira_requirements import build_requirement
from recgen.sources.jira import JiraStory

FIXTURES = Path(__file__).parent / "fixtures"
RECORDING = FIXTURES / "login_recording.java"

client = TestClient(app)


def test_healthz():
    """Test the health endpoint."""
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["service"] == "recording-test-generator"


def test_preview(tmp_path):
    """Test that preview returns artifacts and writes nothing."""
    response = client.post("/generator/preview", json={
        "recording": RECORDING.read_text(encoding="utf-8"),
        "featureName": "login page",
        "pageUrl": "/login",
        "story": "PROJ-1",
        "frameworkRoot": str(tmp_path),
    })

    assert response.status_code == 200
    body = response.json()
    assert body["className"] == "LoginPage"
    assert "extends BasePage" in body["artifacts"]["pageObject"]
    assert body["writes"] == []
    assert not (tmp_path / "src").exists()


def test_recording_generation(tmp_path):
    """Test writing artifacts through the API."""
    response = client.post("/generator/recording", json={
        "recordingPath": str(RECORDING),
        "featureName": "LoginPage",
        "pageUrl": "/login",
        "story": "PROJ-1",
        "frameworkRoot": str(tmp_path),
    })

    assert response.status_code == 200
    assert len(response.json()["writes"]) == 3
    assert (tmp_path / "src/test/java/stepDefs/LoginPageSteps.java").exists()


def test_recording_not_found(tmp_path):
    """Test that a missing recording maps to 404."""
    response = client.post("/generator/recording", json={
        "recordingPath": str(tmp_path / "missing.java"),
        "featureName": "LoginPage",
        "frameworkRoot": str(tmp_path),
    })

    assert response.status_code == 404


def test_unknown_framework_root(tmp_path):
    """Test that a missing framework root maps to 404."""
    response = client.get("/generator/framework", params={"frameworkRoot": str(tmp_path / "nope")})

    assert response.status_code == 404


def test_framework_and_structure(tmp_path):
    """Test framework analysis and structure endpoints."""
    framework = client.get("/generator/framework", params={"frameworkRoot": str(tmp_path)})
    structure = client.get("/generator/structure/LoginPage", params={"frameworkRoot": str(tmp_path)})

    assert framework.status_code == 200
    assert framework.json()["pageObjects"] == {}
    assert structure.status_code == 200
    assert structure.json()["isValid"] is False
    assert len(structure.json()["missingFiles"]) == 3


def test_jira_requirement(monkeypatch):
    """Test the JIRA requirement endpoint and its error mapping."""
    story = JiraStory(key="PROJ-8", summary="Crash on save", issue_type="Bug")
    monkeypatch.setattr(generator_router, "generate_from_jira_story",
                        lambda key, auto_detect=True, **kwargs: build_requirement(story, auto_detect))

    response = client.get("/generator/jira/PROJ-8")
    assert response.status_code == 200
    assert response.json()["testName"] == "CrashOnSave"
    assert response.json()["draftFeature"].startswith("@PROJ-8 @CrashOnSave")

    def unavailable(key, auto_detect=True, **kwargs):
        raise RuntimeError("Jira request network error: down")

    monkeypatch.setattr(generator_router, "generate_from_jira_story", unavailable)
    assert client.get("/generator/jira/PROJ-8").status_code == 502
