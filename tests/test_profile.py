"""
Profile Tests
=============

Tests for the persisted user profile: defaults, renaming, corrupt
files and write failures.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from incubate.core.errors import StorageError, ValidationError
from incubate.main import IncubateApp
from incubate.schemas.profile import UserProfile
from incubate.services.profile import ProfileStore


@pytest.fixture
def profiles(tmp_path) -> ProfileStore:
    return ProfileStore(tmp_path / "profile.json", default_first_name="friend")


class TestLoad:
    """Tests for ProfileStore.load."""

    def test_missing_file_gives_default(self, profiles):
        profile = profiles.load()

        assert profile.first_name == "friend"
        assert profile.streak_count == 0
        assert profile.welcome_message == "Welcome back, friend"

    def test_corrupt_file_gives_default(self, profiles):
        profiles.path.write_text("{not json", encoding="utf-8")

        assert profiles.load() == profiles.default()

    def test_invalid_values_give_default(self, profiles):
        profiles.path.write_text('{"first_name": "   ", "streak_count": -1}', encoding="utf-8")

        assert profiles.load().first_name == "friend"


class TestSave:
    """Tests for saving and renaming."""

    def test_rename_persists(self, profiles):
        profiles.save(UserProfile(first_name="Sam", streak_count=3))

        updated = profiles.set_first_name("  Alex ")

        assert updated.first_name == "Alex"
        assert updated.streak_count == 3

        reloaded = ProfileStore(profiles.path).load()
        assert reloaded == updated
        assert reloaded.welcome_message == "Welcome back, Alex"

    def test_creates_missing_directory(self, tmp_path):
        profiles = ProfileStore(tmp_path / "nested" / "profile.json")

        profiles.set_first_name("Sam")

        assert profiles.path.exists()
        assert not Path(f"{profiles.path}.tmp").exists()

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_is_rejected(self, profiles, name):
        with pytest.raises(ValidationError) as exc_info:
            profiles.set_first_name(name)

        assert exc_info.value.detail["field"] == "first_name"
        assert not profiles.path.exists()

    def test_overlong_name_is_rejected(self, profiles):
        with pytest.raises(ValidationError):
            profiles.set_first_name("x" * 101)

    def test_write_failure_raises_storage_error(self, profiles):
        with patch.object(Path, "write_text", side_effect=OSError("read-only")):
            with pytest.raises(StorageError):
                profiles.save(UserProfile(first_name="Sam"))


class TestAppWiring:
    """The container exposes a profile store next to the database."""

    def test_uses_settings(self, settings):
        settings = settings.model_copy(update={"USER_FIRST_NAME": "Robin"})

        app = IncubateApp(settings)

        assert app.profiles.path == settings.DATA_DIR / "profile.json"
        assert app.profiles.load().welcome_message == "Welcome back, Robin"
