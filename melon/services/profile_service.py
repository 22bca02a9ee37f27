"""
Service for profiles, onboarding and avatars.
"""
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from i18n.translations import get_message
from models.models import ActionResult, Profile, UploadedImage
from models.validations import OnboardingInput, ProfileUpdateInput, first_error_message
from repositories.profiles_repo import ProfilesRepository
from services.image_service import AVATAR_IMAGE_TYPES, ImageService
from services.storage_service import StorageService
from utils.errors import StorageError
from utils.logger import get_logger
from utils.page_cache import revalidate_path

logger = get_logger(__name__)


class ProfileService:
    def __init__(self, profiles_repo: ProfilesRepository, storage: StorageService, image_service: ImageService):
        self.profiles_repo = profiles_repo
        self.storage = storage
        self.image_service = image_service

    def get_profile(self, user_id: str) -> Optional[Profile]:
        return self.profiles_repo.get_profile(user_id)

    def get_profile_by_username(self, username: str) -> Optional[Profile]:
        return self.profiles_repo.get_profile_by_username(username)

    def needs_onboarding(self, user_id: str) -> bool:
        profile = self.profiles_repo.get_profile(user_id)
        return profile is None or not profile.onboarding_completed

    def check_username_availability(self, username: str, current_user_id: Optional[str] = None) -> bool:
        """True when no other user holds ``username``. The caller's own username counts as available."""
        username = (username or "").strip()
        if not username:
            return False
        return not self.profiles_repo.is_username_taken(username, exclude_user_id=current_user_id)

    def complete_onboarding(
        self,
        user_id: Optional[str],
        username: str,
        display_name: Optional[str],
        bio: Optional[str],
        interests: List[str],
    ) -> ActionResult:
        if not user_id:
            return ActionResult.fail(get_message("login_required"))

        try:
            data = OnboardingInput(username=username, display_name=display_name, bio=bio, interests=interests)
        except ValidationError as e:
            return ActionResult.fail(first_error_message(e))

        try:
            if self.profiles_repo.is_username_taken(data.username, exclude_user_id=user_id):
                return ActionResult.fail(get_message("username_taken"))
            self.profiles_repo.upsert_profile(
                user_id,
                username=data.username,
                display_name=data.display_name,
                bio=data.bio,
                interests=data.interests,
                onboarding_completed=True,
            )
        except IntegrityError as e:
            # Lost a race for the username between the check and the write
            logger.warning(f"Username {data.username!r} conflict for user {user_id}: {e}")
            return ActionResult.fail(get_message("username_taken"))
        except Exception as e:
            logger.error(f"Error completing onboarding for user {user_id}: {e}")
            return ActionResult.fail(get_message("profile_update_failed"))

        logger.info(f"User {user_id} completed onboarding as @{data.username}")
        return ActionResult.ok(username=data.username)

    def update_profile(
        self,
        user_id: Optional[str],
        display_name: Optional[str],
        bio: Optional[str],
        interests: List[str],
    ) -> ActionResult:
        if not user_id:
            return ActionResult.fail(get_message("login_required"))

        try:
            data = ProfileUpdateInput(display_name=display_name, bio=bio, interests=interests)
        except ValidationError as e:
            return ActionResult.fail(first_error_message(e))

        try:
            updated = self.profiles_repo.update_profile(user_id, data.display_name, data.bio, data.interests)
        except Exception as e:
            logger.error(f"Error updating profile of user {user_id}: {e}")
            return ActionResult.fail(get_message("profile_update_failed"))
        if not updated:
            return ActionResult.fail(get_message("profile_not_found"))
        self._revalidate_feeds()
        return ActionResult.ok()

    def update_avatar(self, user_id: Optional[str], upload: UploadedImage) -> ActionResult:
        """Replace the avatar. Failing to delete the previous file does not fail the update."""
        if not user_id:
            return ActionResult.fail(get_message("login_required"))

        error = self.image_service.validate(upload, AVATAR_IMAGE_TYPES)
        if error:
            return ActionResult.fail(error)

        profile = self.profiles_repo.get_profile(user_id)
        if profile is None:
            return ActionResult.fail(get_message("profile_not_found"))

        if profile.avatar_url:
            self._delete_avatar_file(user_id, profile.avatar_url)

        try:
            prepared = self.image_service.resize(upload)
            path = self.storage.build_object_path("avatars", user_id, prepared.content_type)
            avatar_url = self.storage.upload(path, prepared.data)
        except StorageError as e:
            return ActionResult.fail(e.message)
        except Exception as e:
            logger.error(f"Error processing avatar for user {user_id}: {e}")
            return ActionResult.fail(get_message("avatar_update_failed"))

        try:
            self.profiles_repo.set_avatar_url(user_id, avatar_url)
        except Exception as e:
            logger.error(f"Error saving avatar url for user {user_id}: {e}")
            return ActionResult.fail(get_message("avatar_update_failed"))

        self._revalidate_feeds()
        return ActionResult.ok(avatar_url=avatar_url)

    def remove_avatar(self, user_id: Optional[str]) -> ActionResult:
        if not user_id:
            return ActionResult.fail(get_message("login_required"))

        profile = self.profiles_repo.get_profile(user_id)
        if profile is None:
            return ActionResult.fail(get_message("profile_not_found"))

        if profile.avatar_url:
            self._delete_avatar_file(user_id, profile.avatar_url)

        try:
            self.profiles_repo.set_avatar_url(user_id, None)
        except Exception as e:
            logger.error(f"Error clearing avatar of user {user_id}: {e}")
            return ActionResult.fail(get_message("avatar_remove_failed"))
        self._revalidate_feeds()
        return ActionResult.ok()

    @staticmethod
    def _revalidate_feeds() -> None:
        # Feeds embed author names and avatars
        revalidate_path("/home")
        revalidate_path("/everyone")

    def _delete_avatar_file(self, user_id: str, avatar_url: str) -> None:
        try:
            self.storage.remove_urls([avatar_url])
        except StorageError as e:
            logger.warning(f"Could not delete previous avatar of user {user_id}: {e}")
