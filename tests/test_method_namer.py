"""Test method, constant and phrase naming for recorded actions."""

from recgen.generators.method_namer import (
    MethodNamer,
    constant_name_for,
    method_name_for,
    phrase_name,
    sanitize_class_name,
    step_text_for,
)
from recgen.recorder.models import ActionKind, RecordedAction


def test_method_names_by_kind():
    """Test the per-kind method name rules."""
    assert method_name_for(ActionKind.CLICK, "SignIn", 1) == "clickSignIn"
    assert method_name_for(ActionKind.FILL, "FirstName", 1) == "enterFirstName"
    assert method_name_for(ActionKind.FILL, "SearchBox", 1) == "searchBox"
    assert method_name_for(ActionKind.FILL, "EmailAddress", 1) == "enterEmail"
    assert method_name_for(ActionKind.FILL, "Password", 1) == "enterPassword"
    assert method_name_for(ActionKind.FILL, "Username", 1) == "enterUsername"
    assert method_name_for(ActionKind.SELECT, "Country", 1) == "selectCountry"
    assert method_name_for(ActionKind.CHECK, "DarkModeToggle", 1) == "toggleDarkMode"
    assert method_name_for(ActionKind.CHECK, "Remember", 1) == "checkRemember"
    assert method_name_for(ActionKind.PRESS, "Search", 1) == "pressKeyOnSearch"
    assert method_name_for(ActionKind.NAVIGATE, "", 1) == "navigateTo"


def test_reserved_and_empty_names_fall_back():
    """Test that a method is never named 'value' and empty names get performAction<n>."""
    assert method_name_for(ActionKind.FILL, "Value", 7) == "performAction7"
    assert method_name_for(ActionKind.CLICK, "", 3) == "performAction3"


def test_constant_and_phrase_names():
    """Test constant and phrase conversion of readable names."""
    assert constant_name_for("FirstName") == "FIRST_NAME"
    assert constant_name_for("SignIn") == "SIGN_IN"
    assert constant_name_for("") == "ELEMENT"
    assert phrase_name("FirstName") == "first name"
    assert step_text_for(ActionKind.CLICK, "SignIn") == "user clicks on sign in"
    assert step_text_for(ActionKind.FILL, "FirstName") == "user enters text into first name"
    assert step_text_for(ActionKind.CHECK, "remember me") == "user checks remember me"


def test_collisions_get_numeric_suffix():
    """Test that different elements with the same readable name get distinct names."""
    actions = [
        RecordedAction(2, ActionKind.FILL, "#email", resolved_locator="//a", readable_name="Email"),
        RecordedAction(5, ActionKind.FILL, "#email2", resolved_locator="//b", readable_name="Email"),
    ]
    MethodNamer().assign(actions)

    assert [a.method_name for a in actions] == ["enterEmail", "enterEmail5"]
    assert [a.element_constant_name for a in actions] == ["EMAIL", "EMAIL5"]
    assert [a.element_phrase for a in actions] == ["email", "email 5"]
    assert actions[1].step_text == "user enters text into email 5"


def test_repeated_locator_reuses_names():
    """Test that the same locator keeps the names of its first occurrence."""
    actions = [
        RecordedAction(2, ActionKind.CLICK, "#save", resolved_locator="//save", readable_name="Save"),
        RecordedAction(4, ActionKind.CLICK, "#save", resolved_locator="//save", readable_name="Save"),
        RecordedAction(6, ActionKind.CHECK, "#save", resolved_locator="//save", readable_name="Save"),
    ]
    MethodNamer().assign(actions)

    assert actions[0].method_name == actions[1].method_name == "clickSave"
    assert actions[2].method_name == "checkSave"
    assert {a.element_constant_name for a in actions} == {"SAVE"}


def test_navigation_action_naming():
    """Test that navigation actions get navigateTo and no element names."""
    actions = MethodNamer().assign([RecordedAction(1, ActionKind.NAVIGATE, None, "")])

    assert actions[0].method_name == "navigateTo"
    assert actions[0].element_constant_name == ""


def test_sanitize_class_name():
    """Test feature-name to class-name conversion."""
    assert sanitize_class_name("user login") == "UserLogin"
    assert sanitize_class_name("userLogin") == "UserLogin"
    assert sanitize_class_name("my-feature_v2") == "MyFeatureV2"
    assert sanitize_class_name("123 flow") == "Test123Flow"
    assert sanitize_class_name("").startswith("TestFeature")
    assert sanitize_class_name("!!!").startswith("TestFeature")
    print("✓ Class name sanitisation passed")
