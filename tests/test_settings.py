import json

import pytest

from config.settings import (
    ConfigError,
    Organization,
    ProgramConfig,
    Settings,
    initialize_config,
)


def write_json(path, data):
    path.write_text(json.dumps(data))
    return str(path)


def scripted_prompt(*answers):
    answers = list(answers)

    def _prompt(_message):
        return answers.pop(0)
    return _prompt


def test_load_legacy_file(tmp_path):
    path = write_json(tmp_path / "config.json", {"organizationChoice": 2, "pollingRate": "300"})

    settings = Settings.load_from_file(path)

    assert settings.program.organization_choice is Organization.UTEM
    assert settings.program.organization_choice.numeric_only
    assert settings.program.polling_interval_ms == 300
    assert settings.reader.port == 0


def test_reader_section_overrides_defaults(tmp_path):
    path = write_json(tmp_path / "config.json", {
        "organizationChoice": 1,
        "pollingRate": "250",
        "reader": {"port": 2, "no_tag_codes": [62536, 1], "reconnect_after_errors": 0}
    })

    settings = Settings.load_from_file(path)

    assert settings.reader.port == 2
    assert settings.reader.no_tag_codes == (62536, 1)
    assert settings.reader.reconnect_after_errors == 0


def test_save_round_trip_keeps_legacy_keys(tmp_path):
    path = str(tmp_path / "config.json")
    Settings(program=ProgramConfig(Organization.UPSI, "500")).save_to_file(path)

    with open(path) as f:
        data = json.load(f)
    assert data["organizationChoice"] == 3
    assert data["pollingRate"] == "500"
    assert Settings.load_from_file(path).program.organization_choice is Organization.UPSI


def test_program_config_is_immutable():
    config = ProgramConfig(Organization.ASCC, "250")
    with pytest.raises(Exception):
        config.polling_rate = "1"


@pytest.mark.parametrize("data", [
    {"organizationChoice": 9, "pollingRate": "250"},
    {"organizationChoice": 1, "pollingRate": "0"},
    {"organizationChoice": 1, "pollingRate": "fast"},
    {"pollingRate": "250"},
    [1, 2],
])
def test_invalid_content_raises(tmp_path, data):
    path = write_json(tmp_path / "config.json", data)
    with pytest.raises(ConfigError):
        Settings.load_from_file(path)


def test_unparseable_file_raises(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError):
        Settings.load_from_file(str(path))


def test_missing_file_raises(tmp_path):
    with pytest.raises(ConfigError):
        Settings.load_from_file(str(tmp_path / "missing.json"))


def test_invalid_port_raises(tmp_path):
    path = write_json(tmp_path / "config.json", {
        "organizationChoice": 1, "pollingRate": "250", "reader": {"port": 9}
    })
    with pytest.raises(ConfigError):
        Settings.load_from_file(path)


def test_first_run_prompts_and_writes(tmp_path):
    path = tmp_path / "config.json"

    settings = initialize_config(str(path), prompt=scripted_prompt("4", ""))

    assert path.exists()
    assert settings.program.organization_choice is Organization.UUM
    assert settings.program.polling_rate == "250"


def test_existing_file_skips_prompt(tmp_path):
    path = write_json(tmp_path / "config.json", {"organizationChoice": 5, "pollingRate": "100"})

    def no_prompt(_message):
        raise AssertionError("prompted")

    settings = initialize_config(path, prompt=no_prompt)
    assert settings.program.organization_choice is Organization.OTHER


def test_first_run_retries_bad_answers(tmp_path, logger):
    path = tmp_path / "config.json"

    settings = initialize_config(
        str(path), prompt=scripted_prompt("x", "250", "2", "100"), logger=logger
    )

    assert settings.program.organization_choice is Organization.UTEM
    assert any("[WARNING]" in m for m in logger.get_messages())


def test_gives_up_after_attempts(tmp_path):
    path = tmp_path / "config.json"
    with pytest.raises(ConfigError):
        initialize_config(str(path), attempts=3, prompt=scripted_prompt(*["7", "250"] * 3))
    assert not path.exists()


def test_valid_answers_on_last_attempt_are_used(tmp_path):
    path = tmp_path / "config.json"

    settings = initialize_config(
        str(path), attempts=3, prompt=scripted_prompt("x", "250", "9", "250", "2", "100")
    )

    assert path.exists()
    assert settings.program.organization_choice is Organization.UTEM
    assert settings.program.polling_interval_ms == 100


@pytest.mark.parametrize("codes", ["62536", 62536, {"code": 62536}])
def test_no_tag_codes_must_be_a_list(tmp_path, codes):
    path = write_json(tmp_path / "config.json", {
        "organizationChoice": 1, "pollingRate": "250", "reader": {"no_tag_codes": codes}
    })
    with pytest.raises(ConfigError):
        Settings.load_from_file(path)


def test_class_tables_are_not_settable(tmp_path):
    path = write_json(tmp_path / "config.json", {
        "organizationChoice": 1, "pollingRate": "250", "reader": {"PORTS": {"9": "USB10"}, "port": 1}
    })

    settings = Settings.load_from_file(path)

    assert 9 not in settings.reader.PORTS
    assert "9" not in settings.reader.PORTS
    assert settings.reader.port == 1
