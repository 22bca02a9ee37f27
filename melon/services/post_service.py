"""
Service for posts, replies, feeds and reply threads.
"""
import uuid
from typing import Dict, List, Optional

from pydantic import ValidationError

from i18n.translations import get_message
from models.enums import MAX_REPLY_DEPTH, NotificationType
from models.models import ActionResult, Post, Reaction, ThreadNode, UploadedImage
from models.validations import PostInput, ReplyInput, first_error_message
from repositories.posts_repo import DEFAULT_FEED_LIMIT, PostsRepository
from services.image_service import MAX_IMAGES_PER_POST, POST_IMAGE_TYPES, ImageService
from services.notification_service import NotificationService
from services.reaction_service import ReactionService, aggregate_reactions
from services.storage_service import StorageService
from utils.errors import StorageError
from utils.logger import get_logger
from utils.page_cache import revalidate_path
from utils.tags import normalize_tag

logger = get_logger(__name__)


class PostService:
    """Creates and deletes posts and assembles the read models the pages show."""

    def __init__(
        self,
        posts_repo: PostsRepository,
        reaction_service: ReactionService,
        notification_service: NotificationService,
        storage: StorageService,
        image_service: ImageService,
    ):
        self.posts_repo = posts_repo
        self.reaction_service = reaction_service
        self.notification_service = notification_service
        self.storage = storage
        self.image_service = image_service

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_post(
        self,
        user_id: Optional[str],
        content: str,
        tags: List[str],
        images: Optional[List[UploadedImage]] = None,
    ) -> ActionResult:
        if not user_id:
            return ActionResult.fail(get_message("login_required"))

        try:
            data = PostInput(content=content, tags=tags)
        except ValidationError as e:
            return ActionResult.fail(first_error_message(e))

        images = [img for img in (images or []) if img.size > 0]
        if len(images) > MAX_IMAGES_PER_POST:
            return ActionResult.fail(get_message("post_too_many_images", max=MAX_IMAGES_PER_POST))
        for image in images:
            error = self.image_service.validate(image, POST_IMAGE_TYPES)
            if error:
                return ActionResult.fail(error)

        post_id = str(uuid.uuid4())
        try:
            self.posts_repo.create_post(user_id, data.content, data.tags, post_id=post_id)
        except Exception as e:
            logger.error(f"Error creating post for user {user_id}: {e}")
            return ActionResult.fail(get_message("post_create_failed"))

        if images:
            try:
                image_urls = self._upload_post_images(post_id, images)
                self.posts_repo.update_image_urls(post_id, image_urls)
            except Exception as e:
                logger.error(f"Image upload for post {post_id} failed, removing post: {e}")
                self._discard_post(post_id)
                if isinstance(e, StorageError):
                    return ActionResult.fail(e.message)
                return ActionResult.fail(get_message("post_create_failed"))

        logger.info(f"User {user_id} created post {post_id} with {len(images)} image(s)")
        self._revalidate_feeds()
        return ActionResult.ok(post_id=post_id)

    def _upload_post_images(self, post_id: str, images: List[UploadedImage]) -> List[str]:
        uploaded: List[str] = []
        try:
            for image in images:
                prepared = self.image_service.resize(image)
                path = self.storage.build_object_path("posts", post_id, prepared.content_type)
                uploaded.append(self.storage.upload(path, prepared.data))
        except Exception:
            try:
                self.storage.remove_urls(uploaded)
            except StorageError as cleanup_error:
                logger.warning(f"Could not clean up images of post {post_id}: {cleanup_error}")
            raise
        return uploaded

    def _discard_post(self, post_id: str) -> None:
        try:
            self.posts_repo.delete_post(post_id)
        except Exception as e:
            logger.error(f"Could not remove post {post_id} after failed upload: {e}")

    def create_reply(self, user_id: Optional[str], parent_post_id: str, content: str) -> ActionResult:
        """Reply to a post. The reply inherits the parent's tags."""
        if not user_id:
            return ActionResult.fail(get_message("login_required"))

        try:
            data = ReplyInput(content=content)
        except ValidationError as e:
            return ActionResult.fail(first_error_message(e))

        try:
            parent = self.posts_repo.get_post(parent_post_id)
        except Exception as e:
            logger.error(f"Error loading parent post {parent_post_id}: {e}")
            return ActionResult.fail(get_message("reply_create_failed"))
        if parent is None:
            return ActionResult.fail(get_message("post_not_found"))

        try:
            reply = self.posts_repo.create_post(
                user_id,
                data.content,
                parent.tags,
                parent_post_id=parent.id,
            )
        except Exception as e:
            logger.error(f"Error creating reply to {parent_post_id} by user {user_id}: {e}")
            return ActionResult.fail(get_message("reply_create_failed"))

        result = self.notification_service.create_notification(
            recipient_id=parent.user_id,
            actor_id=user_id,
            notification_type=NotificationType.REPLY,
            post_id=parent.id,
        )
        if not result.success:
            logger.warning(f"Reply notification for post {parent.id} failed: {result.error}")

        self._revalidate_feeds()
        revalidate_path(f"/posts/{parent.id}")
        return ActionResult.ok(post_id=reply.id)

    def delete_post(self, user_id: Optional[str], post_id: str) -> ActionResult:
        """Delete one of the caller's posts together with its stored images."""
        if not user_id:
            return ActionResult.fail(get_message("login_required"))

        try:
            post = self.posts_repo.get_post(post_id)
        except Exception as e:
            logger.error(f"Error loading post {post_id} for deletion: {e}")
            return ActionResult.fail(get_message("post_delete_failed"))
        if post is None or post.user_id != str(user_id):
            return ActionResult.fail(get_message("post_delete_forbidden"))

        if post.image_urls:
            try:
                self.storage.remove_urls(post.image_urls)
            except StorageError as e:
                # Storage failures never block the row deletion.
                logger.error(f"Image deletion error for post {post_id}: {e}")

        try:
            deleted = self.posts_repo.delete_post(post_id, user_id=user_id)
        except Exception as e:
            logger.error(f"Error deleting post {post_id}: {e}")
            return ActionResult.fail(get_message("post_delete_failed"))
        if not deleted:
            return ActionResult.fail(get_message("post_delete_forbidden"))

        logger.info(f"User {user_id} deleted post {post_id}")
        self._revalidate_feeds()
        revalidate_path(f"/posts/{post_id}")
        return ActionResult.ok()

    @staticmethod
    def _revalidate_feeds() -> None:
        revalidate_path("/home")
        revalidate_path("/everyone")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_post_by_id(self, post_id: str) -> Optional[Post]:
        return self.posts_repo.get_post(post_id)

    def get_posts(self, limit: int = DEFAULT_FEED_LIMIT) -> List[Post]:
        return self.posts_repo.list_posts(limit=limit)

    def get_home_feed(self, user_id: str, limit: int = DEFAULT_FEED_LIMIT) -> List[Post]:
        return self.posts_repo.list_home_feed(user_id, limit=limit)

    def get_posts_by_user(self, user_id: str, limit: int = DEFAULT_FEED_LIMIT) -> List[Post]:
        return self.posts_repo.list_posts_by_user(user_id, limit=limit)

    def get_posts_by_tag(self, tag: str, limit: int = DEFAULT_FEED_LIMIT) -> List[Post]:
        return self.posts_repo.list_posts_by_tag(normalize_tag(tag), limit=limit)

    def get_replies(self, post_id: str) -> List[Post]:
        return self.posts_repo.list_replies(post_id)

    def get_thread_depth(self, post: Post) -> int:
        """Number of ancestors above the post, capped at MAX_REPLY_DEPTH. A deleted parent still counts."""
        depth = 0
        current: Optional[Post] = post
        while current is not None and current.parent_post_id and depth < MAX_REPLY_DEPTH:
            depth += 1
            current = self.posts_repo.get_post(current.parent_post_id)
        return depth

    def build_thread(
        self,
        post: Post,
        viewer_id: Optional[str],
        depth: Optional[int] = None,
        reactions_by_post: Optional[Dict[str, List[Reaction]]] = None,
    ) -> ThreadNode:
        """
        Nest a post's replies down to MAX_REPLY_DEPTH.

        Nodes at the maximum depth expose no reply control and no children.
        Without an explicit depth, a reply starts at its depth in its thread.
        """
        if depth is None:
            depth = self.get_thread_depth(post)
        replies: List[Post] = []
        if depth < MAX_REPLY_DEPTH:
            replies = self.get_replies(post.id)

        if reactions_by_post is None:
            reactions_by_post = {}
        missing = [p.id for p in [post] + replies if p.id not in reactions_by_post]
        if missing:
            fetched = self.reaction_service.get_reactions_for_posts(missing)
            for pid in missing:
                reactions_by_post[pid] = fetched.get(pid, [])

        is_author = viewer_id is not None and post.user_id == str(viewer_id)
        return ThreadNode(
            post=post,
            depth=depth,
            can_reply=viewer_id is not None and depth < MAX_REPLY_DEPTH,
            can_delete=is_author,
            can_react=viewer_id is not None and not is_author,
            reactions=aggregate_reactions(reactions_by_post.get(post.id, []), viewer_id),
            replies=[
                self.build_thread(reply, viewer_id, depth + 1, reactions_by_post)
                for reply in replies
            ],
        )

    def build_threads(self, posts: List[Post], viewer_id: Optional[str]) -> List[ThreadNode]:
        """Threads for a feed, sharing one batched reaction lookup for the top level."""
        reactions_by_post = dict(self.reaction_service.get_reactions_for_posts([p.id for p in posts]))
        for post in posts:
            reactions_by_post.setdefault(post.id, [])
        return [self.build_thread(p, viewer_id, 0, reactions_by_post) for p in posts]
