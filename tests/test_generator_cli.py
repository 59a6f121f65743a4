"""Test the recgen command line entry point."""

from pathlib import Path

from recgen import generator_cli
from recgen.generators.jira_requirements import build_requirement
from recgen.sources.jira import JiraStory

FIXTURES = Path(__file__).parent / "fixtures"
RECORDING = FIXTURES / "login_recording.java"


def test_recording_mode(tmp_path, capsys):
    """Test that four positional arguments generate the artifacts."""
    code = generator_cli.main([
        str(RECORDING), "login page", "https://app.example.com/login", "PROJ-1",
        "--project-root", str(tmp_path),
    ])

    assert code == 0
    assert (tmp_path / "src/main/java/pages/LoginPage.java").exists()
    assert (tmp_path / "src/test/java/features/LoginPage.feature").exists()
    assert (tmp_path / "src/test/java/stepDefs/LoginPageSteps.java").exists()
    assert "GENERATED LoginPage" in capsys.readouterr().out


def test_recording_mode_missing_file(tmp_path):
    """Test that a missing recording exits with status 1."""
    code = generator_cli.main([
        str(tmp_path / "missing.java"), "Login", "/login", "PROJ-1", "--project-root", str(tmp_path),
    ])

    assert code == 1
    assert not (tmp_path / "src").exists()


def test_wrong_argument_count(tmp_path, capsys):
    """Test that an unsupported argument count prints usage."""
    assert generator_cli.main(["a", "b", "--project-root", str(tmp_path)]) == 1
    assert "Usage:" in capsys.readouterr().out


def test_self_check(tmp_path, capsys):
    """Test the framework self-check with no positional arguments."""
    assert generator_cli.main(["--project-root", str(tmp_path)]) == 0

    out = capsys.readouterr().out
    assert "FRAMEWORK CONFIGURATION" in out
    assert "INCOMPLETE" in out


def test_jira_mode_writes_draft(tmp_path, monkeypatch, capsys):
    """Test JIRA mode with a draft feature file."""
    story = JiraStory(key="PROJ-8", summary="Crash on save", issue_type="Bug")
    monkeypatch.setattr(generator_cli, "generate_from_jira_story",
                        lambda key, **kwargs: build_requirement(story))

    code = generator_cli.main(["PROJ-8", "--write-draft", "--project-root", str(tmp_path)])

    assert code == 0
    draft = tmp_path / "src/test/java/features/CrashOnSave.feature"
    assert draft.read_text(encoding="utf-8").startswith("@PROJ-8 @CrashOnSave")
    assert "Verify Crash on save - Happy Path" in capsys.readouterr().out


def test_jira_mode_failure(tmp_path, monkeypatch):
    """Test that a JIRA failure exits with status 1."""
    def failing(key, **kwargs):
        raise RuntimeError("Missing Jira environment variables: JIRA_EMAIL")

    monkeypatch.setattr(generator_cli, "generate_from_jira_story", failing)

    assert generator_cli.main(["PROJ-8", "--project-root", str(tmp_path)]) == 1
