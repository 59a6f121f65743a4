"""Test rendering, reconciliation and validation of generated artifacts."""

import pytest
from pathlib import Path

from recgen.core.errors import ArtifactValidationError
from recgen.generators.artifact_emitter import (
    FEATURE,
    PAGE_OBJECT,
    STEP_DEFINITIONS,
    ArtifactEmitter,
    LoginPageObject,
    cucumber_expression,
    defined_step_phrases,
    feature_step_phrases,
    find_login_block,
    normalize_feature_step,
    parse_login_page_object,
    reconcile_step_definitions,
    step_keyword_for,
    validate_artifact,
    validate_artifact_set,
)
from recgen.generators.locator_resolver import LocatorResolver
from recgen.generators.method_namer import MethodNamer
from recgen.recorder.action_extractor import extract_actions

FIXTURES = Path(__file__).parent / "fixtures"

LOGIN_PAGE_SOURCE = """package pages;

public class Login extends BasePage {
    public static void enterUsername(Page page, String text) { }
    public static void enterPassword(Page page, String text) { }
    public static void clickSignIn(Page page) { }
}
"""


def _named_actions(text):
    actions = extract_actions(text)
    LocatorResolver().resolve_actions(actions)
    return MethodNamer().assign(actions)


def _emit(login_page=None, include_page_object=True):
    actions = _named_actions((FIXTURES / "login_recording.java").read_text(encoding="utf-8"))
    return ArtifactEmitter().emit(
        actions,
        "LoginPage",
        story="PROJ-101",
        page_path="/login",
        login_page=login_page,
        include_page_object=include_page_object,
    )


def test_page_object_contents():
    """Test constants, navigation and per-action methods of the page object."""
    page = _emit().page_object_source

    assert page.startswith("package pages;")
    assert "public class LoginPage extends BasePage {" in page
    assert 'private static final String PAGE_PATH = "/login";' in page
    assert " * @story PROJ-101" in page
    assert "    // Username - Priority 1: Static ID" in page
    assert (
        '    private static final String USERNAME = "//input[@id=\'username\'] | //button[@id=\'username\'] | '
        "//textarea[@id='username'] | //select[@id='username'] | //*[@id='username']\";"
    ) in page
    assert "    // Login - Priority 4: Label/Name" in page
    assert page.count("public static void navigateToLoginPage(Page page) {") == 1
    assert "public static void enterUsername(Page page, String text) {" in page
    assert "enterText(USERNAME, text);" in page
    assert "selectDropDownValueByText(COUNTRY, option);" in page
    assert 'page.locator(SEARCH).press("Enter");' in page
    assert "clickOnElement(REMEMBER_ME);" in page
    assert page.count("TimeoutConfig.waitShort();") == 6
    for imp in ("import com.microsoft.playwright.Page;", "import configs.loadProps;",
                "import configs.TimeoutConfig;", "import java.util.logging.Logger;"):
        assert imp in page


def test_feature_file_contents():
    """Test the scenario outline and its examples table."""
    feature = _emit().feature_file_source

    assert feature.startswith("@PROJ-101 @LoginPage\nFeature: LoginPage Test")
    assert "  Scenario Outline: Complete LoginPage workflow" in feature
    assert "    Given user navigates to LoginPage page" in feature
    assert '    And user enters "<username>" into username' in feature
    assert "    When user clicks on login" in feature
    assert '    And user selects "<country>" from country' in feature
    assert "    And user presses key on search" in feature
    assert "    And user checks remember me" in feature
    assert feature.rstrip().splitlines()[-1].strip() == "| tomsmith | SuperSecretPassword! | India |"
    assert "      | username | password | country |" in feature
    assert "    Then page should be updated" in feature


def test_step_definitions_match_feature():
    """Test that every feature phrase has exactly one step definition."""
    artifacts = _emit()
    steps = artifacts.step_definition_source

    assert "public class LoginPageSteps extends browserSelector {" in steps
    assert '@And("user enters {string} into username")' in steps
    assert "    public void enterUsername(String text) {" in steps
    assert "        LoginPage.enterUsername(page, text);" in steps
    assert '@When("user clicks on login")' in steps
    assert "    public void selectCountry(String option) {" in steps
    assert "        page.waitForLoadState();" in steps
    assert artifacts.stubs_added == []

    defined = defined_step_phrases(steps)
    assert len(defined) == len(set(defined))
    assert len(feature_step_phrases(artifacts.feature_file_source)) == len(defined)
    _, added = reconcile_step_definitions(artifacts.feature_file_source, steps)
    assert added == []
    validate_artifact_set(artifacts)


def test_existing_page_object_not_rendered():
    """Test that the page object can be left out while the other artifacts are rendered."""
    artifacts = _emit(include_page_object=False)

    assert artifacts.page_object_source is None
    assert "Feature: LoginPage Test" in artifacts.feature_file_source
    validate_artifact_set(artifacts)


def test_login_reuse():
    """Test that a recorded login is replaced by configuration-driven login steps."""
    artifacts = _emit(login_page=LoginPageObject("Login", submit_method="clickSignIn"))
    page = artifacts.page_object_source
    feature = artifacts.feature_file_source
    steps = artifacts.step_definition_source

    assert artifacts.login_reused
    assert "private static final String USERNAME =" not in page
    assert "private static final String PASSWORD =" not in page
    assert "private static final String LOGIN =" not in page
    assert "COUNTRY" in page
    assert "    When User enters valid username from configuration" in feature
    assert "    And User enters valid password from configuration" in feature
    assert "    And User clicks on Sign In button" in feature
    assert "into username" not in feature
    assert "import pages.Login;" in steps
    assert "import configs.loadProps;" in steps
    assert "        Login.enterUsername(page, username);" in steps
    assert "        Login.enterPassword(page, password);" in steps
    assert "        Login.clickSignIn(page);" in steps
    assert artifacts.stubs_added == []


def test_login_reuse_without_submit_method():
    """Test that the submit click stays recorded when the login page has no submit method."""
    artifacts = _emit(login_page=LoginPageObject("Login"))

    assert "User clicks on Sign In button" not in artifacts.feature_file_source
    assert "    And user clicks on login" in artifacts.feature_file_source
    assert "private static final String LOGIN =" in artifacts.page_object_source


def test_find_login_block_leaves_other_password_fields():
    """Test that only the first username/password/submit sequence is detected."""
    actions = _named_actions("\n".join([
        'page.locator("#email").fill("a@b.com");',
        'page.locator("#password").fill("secret");',
        'page.getByRole(AriaRole.BUTTON, new Page.GetByRoleOptions().setName("Sign in")).click();',
        'page.getByLabel("New Password").fill("secret2");',
    ]))

    assert find_login_block(actions) == {1: "username", 2: "password", 3: "submit"}
    assert find_login_block(actions, with_submit=False) == {1: "username", 2: "password"}
    assert find_login_block(actions[1:]) == {}


def test_parse_login_page_object():
    """Test detection of login-capable page objects."""
    login = parse_login_page_object("Login", LOGIN_PAGE_SOURCE)

    assert login.class_name == "Login"
    assert login.submit_method == "clickSignIn"
    assert parse_login_page_object("Other", "public static void enterUsername(Page page) {}") is None


def test_reconcile_adds_pending_stubs():
    """Test that feature phrases without a definition get pending stubs."""
    feature = "\n".join([
        "Feature: Demo",
        "  Scenario: Demo",
        "    Given user is logged in",
        '    When user searches for "shoes"',
        "    Then user sees the dashboard",
    ])
    steps = "package stepDefs;\n\npublic class DemoSteps extends browserSelector {\n}\n"

    updated, added = reconcile_step_definitions(feature, steps)

    assert added == ["user is logged in", 'user searches for "shoes"', "user sees the dashboard"]
    assert '@Given("user is logged in")' in updated
    assert '@Then("user searches for {string}")' in updated
    assert "public void userSearchesFor(String arg1) {" in updated
    assert "public void userSeesTheDashboard() {" in updated
    assert "io.cucumber.java.PendingException" in updated
    assert updated.rstrip().endswith("}")

    again, added_again = reconcile_step_definitions(feature, updated)
    assert added_again == []
    assert again == updated


def test_step_keywords_and_expressions():
    """Test stub keyword choice and Cucumber expression escaping."""
    assert step_keyword_for("user is logged in") == "Given"
    assert step_keyword_for("user clicks save") == "When"
    assert step_keyword_for("dashboard is shown") == "Then"
    assert cucumber_expression('user enters "x" into name') == "user enters {string} into name"
    assert cucumber_expression("user opens a/b (beta)") == r"user opens a\/b \(beta\)"


def test_normalize_feature_step():
    """Test tidying of generated step lines."""
    assert normalize_feature_step("user clicks on save.") == "When user clicks on save"
    assert normalize_feature_step('And  user enters ""x"" into y') == 'And user enters "x" into y'
    assert normalize_feature_step("Then done!") == "Then done"


def test_validate_artifacts():
    """Test structural validation of each artifact kind."""
    with pytest.raises(ArtifactValidationError) as exc:
        validate_artifact(FEATURE, "  ")
    assert exc.value.artifact == FEATURE

    with pytest.raises(ArtifactValidationError, match="Scenario"):
        validate_artifact(FEATURE, "Feature: X\n")
    with pytest.raises(ArtifactValidationError, match="Examples"):
        validate_artifact(FEATURE, 'Feature: X\n  Scenario Outline: Y\n    When user enters "<a>" into b\n')
    with pytest.raises(ArtifactValidationError, match="column"):
        validate_artifact(FEATURE, "\n".join([
            "Feature: X",
            "  Scenario Outline: Y",
            '    When user enters "<a>" into b',
            '    And user enters "<c>" into d',
            "    Examples:",
            "      | a |",
            "      | 1 |",
        ]))
    with pytest.raises(ArtifactValidationError, match="BasePage"):
        validate_artifact(PAGE_OBJECT, "package pages;\npublic class X {}\n")
    with pytest.raises(ArtifactValidationError, match="no value"):
        validate_artifact(PAGE_OBJECT, 'package pages;\nclass X extends BasePage {\n'
                                       '  private static final String SAVE = "";\n}\n')
    with pytest.raises(ArtifactValidationError, match="browserSelector"):
        validate_artifact(STEP_DEFINITIONS, "package stepDefs;\npublic class XSteps {}\n")

    validate_artifact(FEATURE, "Feature: X\n  Scenario: Y\n    Given a\n")


def test_registration_form_is_not_a_login():
    """Test that a sign-up recording keeps its recorded steps when a login page exists."""
    actions = _named_actions("\n".join([
        'page.locator("#email").fill("new@b.com");',
        'page.locator("#password").fill("secret");',
        'page.locator("#confirmPassword").fill("secret");',
        'page.getByRole(AriaRole.BUTTON, new Page.GetByRoleOptions().setName("Create account")).click();',
    ]))
    artifacts = ArtifactEmitter().emit(
        actions, "Register", login_page=LoginPageObject("Login", submit_method="clickSignIn"),
    )
    feature = artifacts.feature_file_source

    assert find_login_block(actions) == {}
    assert not artifacts.login_reused
    assert "from configuration" not in feature
    assert 'user enters "<email>" into email' in feature
    assert 'user enters "<password>" into password' in feature
    assert "user clicks on create account" in feature
    assert "import pages.Login;" not in artifacts.step_definition_source


def test_login_needs_sign_in_click():
    """Test that a password fill followed by an unrelated click is not a login block."""
    actions = _named_actions("\n".join([
        'page.locator("#email").fill("a@b.com");',
        'page.locator("#password").fill("secret");',
        'page.locator("text=Create account").click();',
    ]))

    assert find_login_block(actions) == {}
    assert find_login_block(actions, with_submit=False) == {}


def test_examples_columns_unique_per_element():
    """Test that two fields whose phrases differ only by spacing keep separate values."""
    actions = _named_actions("\n".join([
        'page.locator("#firstName").fill("Ann");',
        'page.getByLabel("Firstname").fill("Bob");',
    ]))
    artifacts = ArtifactEmitter().emit(actions, "Profile")
    feature = artifacts.feature_file_source
    rows = [line.strip() for line in feature.splitlines() if line.strip().startswith("|")]
    header = [cell.strip() for cell in rows[0].strip("|").split("|")]
    values = [cell.strip() for cell in rows[1].strip("|").split("|")]

    assert len(header) == 2
    assert len(set(header)) == 2
    assert header[0] == "firstname"
    assert values == ["Ann", "Bob"]
    assert f'user enters "<{header[0]}>" into first name' in feature
    assert f'user enters "<{header[1]}>" into firstname' in feature
    validate_artifact_set(artifacts)


def test_username_and_sign_in_recording():
    """Test the canonical username plus sign-in recording end to end."""
    actions = _named_actions("\n".join([
        'page.locator("#Username").fill("x");',
        'page.locator("text=Sign In").click();',
    ]))
    artifacts = ArtifactEmitter().emit(actions, "Login")
    page = artifacts.page_object_source
    feature = artifacts.feature_file_source
    steps = artifacts.step_definition_source

    assert "public static void enterUsername(Page page, String text) {" in page
    assert "public static void clickSignIn(Page page) {" in page
    assert 'user enters "<username>" into username' in feature
    assert "      | username |" in feature
    assert "      | x |" in feature
    assert "        Login.enterUsername(page, text);" in steps
    assert "        Login.clickSignIn(page);" in steps
    validate_artifact_set(artifacts)
