"""Profile image handling on top of blob storage."""

import logging
import uuid
from io import BytesIO

from botocore.exceptions import BotoCoreError, ClientError
from sqlalchemy.orm import Session

from snippet_manager.config import settings
from snippet_manager.models.user import User
from snippet_manager.storage.blob_storage import BlobStorage, S3Storage
from snippet_manager.services.user_service import UserService
from snippet_manager.services.exceptions import DeliveryError, InvalidInputError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


class ProfileService:
    """Service for storing and removing profile images."""

    def __init__(self, db: Session, blob_storage: BlobStorage):
        """
        Initialize the profile service.

        Args:
            db: SQLAlchemy database session
            blob_storage: Blob storage client for S3/compatible storage
        """
        self.db = db
        self.blob_storage = blob_storage
        self.users = UserService(db)

    def upload_profile_image(self, user: User, content: bytes, content_type: str) -> User:
        """
        Store a new profile image and point the profile at it.

        The previous image is removed afterwards if it lives in our storage.

        Args:
            user: User whose profile is updated
            content: Raw image bytes
            content_type: MIME type reported by the client

        Returns:
            Updated User instance

        Raises:
            InvalidInputError: If the file is empty, too large or not an image
            DeliveryError: If the storage provider fails
        """
        extension = IMAGE_EXTENSIONS.get(content_type)
        if not extension:
            raise InvalidInputError("Only JPEG, PNG, GIF and WebP images are allowed")

        if not content:
            raise InvalidInputError("Image file is empty")

        if len(content) > settings.MAX_PROFILE_IMAGE_BYTES:
            raise InvalidInputError(
                f"Image exceeds {settings.MAX_PROFILE_IMAGE_BYTES // (1024 * 1024)}MB limit"
            )

        key = S3Storage.build_profile_image_key(str(user.id), uuid.uuid4().hex, extension)
        try:
            self.blob_storage.upload_file(key, BytesIO(content), content_type)
        except (ClientError, BotoCoreError) as e:
            raise DeliveryError(f"Failed to store profile image: {e}")

        previous_url = user.profile_image_url
        user = self.users.set_profile_image(user, self.blob_storage.public_url(key))

        self._delete_stored_image(previous_url)
        return user

    def remove_profile_image(self, user: User) -> User:
        """Clear the profile image, deleting our stored copy if any."""
        previous_url = user.profile_image_url
        user = self.users.set_profile_image(user, None)

        self._delete_stored_image(previous_url)
        return user

    def _delete_stored_image(self, url) -> None:
        if not url:
            return

        key = self.blob_storage.key_from_url(url)
        if key and not self.blob_storage.delete(key):
            logger.warning(f"Could not delete old profile image {key}")
