"""Unit tests for configuration loading and validation."""

import warnings

import pytest

from lostfound.config import ConfigurationError, load_config
from lostfound.config.duration import (
    DurationParseError,
    parse_duration,
    seconds_to_human_readable,
    validate_duration_range,
)
from lostfound.config.environment import DEFAULT_DATABASE_URL, load_environment_config
from lostfound.config.loader import parse_app_config
from lostfound.config.models import AppConfig, MatchingConfig, ScoringWeights
from lostfound.config.validators import check_for_warnings


class TestParseDuration:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("30d", 30 * 86400),
            ("2w", 14 * 86400),
            ("12h", 12 * 3600),
            ("1d12h", 36 * 3600),
            ("P30D", 30 * 86400),
            ("PT1H", 3600),
            ("P1DT12H", 36 * 3600),
            ("p2w", 14 * 86400),
        ],
    )
    def test_valid_durations(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "   ", "30", "30x", "abc", "P", "PT", "P1DT", "0d", "PT0S"])
    def test_invalid_durations(self, value):
        with pytest.raises(DurationParseError):
            parse_duration(value)

    def test_non_string_rejected(self):
        with pytest.raises(DurationParseError, match="must be a string"):
            parse_duration(30)

    def test_range_validation(self):
        validate_duration_range(3600)
        with pytest.raises(DurationParseError, match="too short"):
            validate_duration_range(60, label="Recency window")
        with pytest.raises(DurationParseError, match="too long"):
            validate_duration_range(400 * 86400)

    def test_human_readable(self):
        assert seconds_to_human_readable(1) == "1 second"
        assert seconds_to_human_readable(120) == "2 minutes"
        assert seconds_to_human_readable(3600) == "1 hour"
        assert seconds_to_human_readable(30 * 86400) == "30 days"


class TestMatchingConfig:
    def test_defaults(self):
        config = MatchingConfig()

        assert config.notify_threshold == 25
        assert config.email_threshold == 50
        assert config.candidate_limit == 50
        assert config.top_n == 5
        assert config.recency_window_seconds == 30 * 86400
        assert config.weights.as_dict() == {
            "category": 30,
            "keywords": 30,
            "location": 20,
            "recency": 10,
            "distance": 10,
        }

    def test_weights_must_sum_to_100(self):
        with pytest.raises(ValueError, match="sum to 100"):
            ScoringWeights(category=40)

    def test_custom_weights(self):
        weights = ScoringWeights(category=40, keywords=30, location=10, recency=10, distance=10)
        assert weights.category == 40

    @pytest.mark.parametrize("field", ["notify_threshold", "email_threshold"])
    def test_thresholds_bounded(self, field):
        with pytest.raises(ValueError):
            MatchingConfig(**{field: 101})
        with pytest.raises(ValueError):
            MatchingConfig(**{field: -1})

    def test_recency_window_too_short(self):
        with pytest.raises(ValueError, match="too short"):
            MatchingConfig(recency_window="10m")

    def test_campus_overrides(self):
        config = MatchingConfig(
            campuses={
                "north": {"recency_window": "7d"},
                "south": {"auto_match_enabled": False},
            }
        )

        assert config.recency_window_for("north") == 7 * 86400
        assert config.recency_window_for("south") == 30 * 86400
        assert config.recency_window_for("elsewhere") == 30 * 86400
        assert config.recency_window_for(None) == 30 * 86400
        assert config.is_enabled_for("north")
        assert not config.is_enabled_for("south")
        assert config.is_enabled_for(None)

    def test_invalid_campus_window(self):
        with pytest.raises(ValueError):
            MatchingConfig(campuses={"north": {"recency_window": "soon"}})


class TestParseAppConfig:
    def test_empty_mapping_gives_defaults(self):
        config = parse_app_config({})
        assert config == AppConfig()

    def test_errors_are_readable(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_app_config(
                {
                    "matching": {"notify_threshold": "high", "weights": {"category": 90}},
                    "logging": {"level": "LOUD"},
                }
            )

        error = exc_info.value
        assert error.message == "Configuration validation failed"
        assert any("matching -> notify_threshold" in line for line in error.errors)
        assert any("sum to 100" in line for line in error.errors)
        assert any("logging -> level" in line for line in error.errors)
        assert "Suggestions:" in str(error)


class TestLoadConfig:
    def test_loads_yaml_file(self, tmp_path, mock_env_vars):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            """
matching:
  notify_threshold: 30
  email_threshold: 60
  campuses:
    north:
      recency_window: "14d"
email:
  app_name: "Campus Finds"
logging:
  format: json
"""
        )

        app_config, env_config = load_config(config_file)

        assert app_config.matching.notify_threshold == 30
        assert app_config.matching.recency_window_for("north") == 14 * 86400
        assert app_config.email.app_name == "Campus Finds"
        assert app_config.logging.format == "json"
        assert env_config.database_url == "sqlite:///:memory:"

    def test_empty_file_uses_defaults(self, tmp_path, mock_env_vars):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        app_config, _ = load_config(config_file)

        assert app_config == AppConfig()

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_no_file_found(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigurationError) as exc_info:
            load_config()
        assert "Tried: config.yaml" in exc_info.value.errors

    def test_falls_back_to_config_directory(self, tmp_path, monkeypatch, mock_env_vars):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "config.yaml").write_text("matching:\n  top_n: 3\n")

        app_config, _ = load_config()

        assert app_config.matching.top_n == 3

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("matching: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Failed to parse YAML"):
            load_config(config_file)

    def test_top_level_must_be_mapping(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(config_file)

    def test_warnings_are_emitted(self, tmp_path, mock_env_vars):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("email:\n  enabled: false\n")

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            load_config(config_file)

        assert any("Match emails are disabled" in str(w.message) for w in caught)


class TestWarnings:
    def test_default_config_has_no_warnings(self):
        assert check_for_warnings(AppConfig()) == []

    def test_suspicious_settings(self):
        config = AppConfig(
            matching={
                "notify_threshold": 0,
                "email_threshold": 0,
                "top_n": 50,
                "candidate_limit": 10,
                "campuses": {"south": {"auto_match_enabled": False}},
            }
        )

        messages = check_for_warnings(config)

        assert any("notify_threshold is 0" in m for m in messages)
        assert any("can never be reached" in m for m in messages)
        assert any("campus 'south'" in m for m in messages)

    def test_email_threshold_below_notify(self):
        config = AppConfig(matching={"notify_threshold": 60, "email_threshold": 40})
        assert any("email_threshold (40)" in m for m in check_for_warnings(config))


class TestEnvironmentConfig:
    def test_defaults(self, mock_env_vars):
        mock_env_vars.delenv("DATABASE_URL")

        env_config = load_environment_config()

        assert env_config.database_url == DEFAULT_DATABASE_URL
        assert env_config.smtp_port == 587
        assert env_config.environment == "local"
        assert not env_config.smtp_configured

    def test_smtp_settings(self, mock_env_vars):
        mock_env_vars.setenv("SMTP_HOST", "smtp.example.com")
        mock_env_vars.setenv("SMTP_PORT", "465")
        mock_env_vars.setenv("SMTP_USER", "bot")
        mock_env_vars.setenv("SMTP_PASS", "secret")
        mock_env_vars.setenv("SMTP_SENDER_EMAIL", "lost@example.edu")

        env_config = load_environment_config()

        assert env_config.smtp_configured
        assert env_config.smtp_port == 465
        assert env_config.smtp_sender_email == "lost@example.edu"

    def test_all_errors_reported_together(self, mock_env_vars):
        mock_env_vars.setenv("SMTP_PORT", "abc")
        mock_env_vars.setenv("SMTP_SENDER_EMAIL", "not-an-email")
        mock_env_vars.setenv("LOG_LEVEL", "LOUD")
        mock_env_vars.setenv("SMTP_USER", "bot")

        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()

        errors = exc_info.value.errors
        assert len(errors) == 4
        assert any("SMTP_PORT" in e for e in errors)
        assert any("SMTP_SENDER_EMAIL" in e for e in errors)
        assert any("LOG_LEVEL" in e for e in errors)
        assert any("SMTP_USER is set" in e for e in errors)

    def test_port_out_of_range(self, mock_env_vars):
        mock_env_vars.setenv("SMTP_PORT", "70000")
        with pytest.raises(ConfigurationError, match="Environment variable validation failed"):
            load_environment_config()
