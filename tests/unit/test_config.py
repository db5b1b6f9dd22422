"""Unit tests for the YAML configuration loader."""

from pathlib import Path

import pytest

from linguacare.config import LinguacareConfig


def write_config(directory, text):
    path = Path(directory) / "linguacare.yaml"
    path.write_text(text, encoding="utf-8")
    return path


@pytest.mark.unit
class TestLinguacareConfig:
    """Test configuration loading and lookup."""

    def test_dot_notation_lookup(self, temp_data_dir):
        path = write_config(temp_data_dir, (
            "audio:\n"
            "  sample_rate: 16000\n"
            "speech:\n"
            "  failsafe_seconds: 8.0\n"
        ))
        config = LinguacareConfig(str(path))

        assert config.get('audio.sample_rate') == 16000
        assert config.get('speech.failsafe_seconds') == 8.0
        assert config.get('speech.missing', 'fallback') == 'fallback'
        assert config.get('audio.sample_rate.nested') is None

    def test_set_creates_sections(self, temp_data_dir):
        config = LinguacareConfig(str(write_config(temp_data_dir, "audio:\n  channels: 1\n")))

        config.set('recording.time_limit_seconds', 10.0)

        assert config.get('recording.time_limit_seconds') == 10.0

    def test_relative_paths_resolved(self, temp_data_dir):
        """Test storage and log paths are relative to the config file."""
        path = write_config(temp_data_dir, (
            "storage:\n"
            "  data_directory: data\n"
            "logging:\n"
            "  file_path: data/logs/linguacare.log\n"
        ))
        config = LinguacareConfig(str(path))

        assert config.get_data_directory() == str((Path(temp_data_dir) / "data").absolute())
        assert config.get('logging.file_path') == str(Path(temp_data_dir) / "data/logs/linguacare.log")

    def test_preferences_file_default(self, temp_data_dir):
        config = LinguacareConfig(str(write_config(temp_data_dir, "storage:\n  data_directory: data\n")))

        assert config.get_preferences_file() == str(
            (Path(temp_data_dir) / "data").absolute() / "preferences.json"
        )

    def test_preferences_file_configured(self, temp_data_dir):
        path = write_config(temp_data_dir, "storage:\n  preferences_file: prefs/voices.json\n")
        config = LinguacareConfig(str(path))

        assert config.get_preferences_file() == str((Path(temp_data_dir) / "prefs/voices.json").absolute())

    def test_missing_file(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            LinguacareConfig(str(Path(temp_data_dir) / "absent.yaml"))

    def test_empty_file(self, temp_data_dir):
        with pytest.raises(ValueError, match="empty"):
            LinguacareConfig(str(write_config(temp_data_dir, "")))

    def test_invalid_yaml(self, temp_data_dir):
        with pytest.raises(ValueError, match="Invalid YAML"):
            LinguacareConfig(str(write_config(temp_data_dir, "audio: [unclosed\n")))

    def test_top_level_must_be_mapping(self, temp_data_dir):
        with pytest.raises(ValueError, match="mapping"):
            LinguacareConfig(str(write_config(temp_data_dir, "- just\n- a list\n")))

    def test_example_config_loads(self):
        """Test the shipped example configuration is valid."""
        example = Path(__file__).resolve().parents[2] / "linguacare.example.yaml"
        config = LinguacareConfig(str(example))

        assert config.get('recording.time_limit_seconds') == 15.0
        assert config.get('speech.failsafe_seconds') == 8.0
