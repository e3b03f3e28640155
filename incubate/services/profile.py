"""
Profile Store
=============

Keeps the user's profile as a small JSON document next to the database.
A missing or unreadable file yields the default profile.
"""

import logging
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from incubate.core.errors import StorageError, ValidationError
from incubate.schemas.profile import UserProfile

logger = logging.getLogger(__name__)


class ProfileStore:
    """Load and save the ``UserProfile``."""

    def __init__(self, path: Path, default_first_name: str = "friend"):
        self.path = path
        self.default_first_name = default_first_name

    def default(self) -> UserProfile:
        return UserProfile(first_name=self.default_first_name)

    def load(self) -> UserProfile:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return self.default()
        except OSError as exc:
            logger.warning("Could not read profile %s: %s", self.path, exc)
            return self.default()

        try:
            return UserProfile.model_validate_json(raw)
        except PydanticValidationError as exc:
            logger.warning("Ignoring corrupt profile %s: %s", self.path, exc)
            return self.default()

    def save(self, profile: UserProfile) -> None:
        """
        Write the profile, replacing the previous file in one step.

        Raises:
            StorageError: If the file can't be written
        """
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(profile.model_dump_json(), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            logger.error("Failed to save profile: %s", exc)
            raise StorageError("The profile could not be saved", operation="save_profile") from exc

    def set_first_name(self, first_name: str) -> UserProfile:
        """
        Rename the user and persist the change.

        Raises:
            ValidationError: If the name is blank
        """
        first_name = first_name.strip()
        if not first_name:
            raise ValidationError("First name must not be blank", field="first_name")

        current = self.load()
        try:
            profile = UserProfile(first_name=first_name, streak_count=current.streak_count)
        except PydanticValidationError as exc:
            raise ValidationError("First name is too long", field="first_name") from exc
        self.save(profile)
        logger.info("Profile name updated")
        return profile
