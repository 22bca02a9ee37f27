import os
import sys

import pytest

# Ensure melon is importable in tests (e.g., `import services...`).
MELON_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "melon"))
if MELON_DIR not in sys.path:
    sys.path.insert(0, MELON_DIR)


@pytest.fixture
def db(tmp_path, monkeypatch):
    """Point the app at a fresh SQLite database with the full schema."""
    from db.database import reset_engine
    from db.schema import ensure_schema

    for var in ("ENVIRONMENT", "DATABASE_URL_PROD", "DATABASE_URL_STAGING"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'melon.db'}")
    reset_engine()
    ensure_schema()
    yield
    reset_engine()


@pytest.fixture(autouse=True)
def _clear_page_cache():
    from utils.page_cache import get_page_cache

    get_page_cache().clear()
    yield
    get_page_cache().clear()


@pytest.fixture
def make_user(db):
    """Create an account with a completed profile and return its id."""
    from repositories.accounts_repo import AccountsRepository
    from repositories.profiles_repo import ProfilesRepository

    def _make(username: str, display_name: str = None, onboarded: bool = True) -> str:
        account = AccountsRepository().create_account(f"{username.lower()}@example.com", "not-a-real-hash")
        if onboarded:
            ProfilesRepository().upsert_profile(
                account.id,
                username=username,
                display_name=display_name,
                bio=None,
                interests=["illustration"],
            )
        return account.id

    return _make


@pytest.fixture
def storage(tmp_path):
    from services.storage_service import StorageService

    return StorageService(str(tmp_path / "storage"), "http://testserver")


@pytest.fixture
def services(db, storage):
    """Services wired the same way the webapp dependencies wire them."""
    from types import SimpleNamespace

    from repositories.accounts_repo import AccountsRepository
    from repositories.auth_session_repo import AuthSessionRepository
    from repositories.follows_repo import FollowsRepository
    from repositories.notifications_repo import NotificationsRepository
    from repositories.posts_repo import PostsRepository
    from repositories.profiles_repo import ProfilesRepository
    from repositories.reactions_repo import ReactionsRepository
    from services.auth_service import AuthService
    from services.follow_service import FollowService
    from services.image_service import ImageService
    from services.notification_service import NotificationService
    from services.post_service import PostService
    from services.profile_service import ProfileService
    from services.reaction_service import ReactionService

    image_service = ImageService()
    notifications = NotificationService(NotificationsRepository())
    reactions = ReactionService(ReactionsRepository())
    return SimpleNamespace(
        notifications=notifications,
        reactions=reactions,
        posts=PostService(PostsRepository(), reactions, notifications, storage, image_service),
        follows=FollowService(FollowsRepository(), ProfilesRepository(), notifications),
        profiles=ProfileService(ProfilesRepository(), storage, image_service),
        auth=AuthService(AccountsRepository(), AuthSessionRepository()),
    )


@pytest.fixture
def png_bytes():
    """Factory for small in-memory PNG files."""
    import io

    from PIL import Image

    def _make(width: int = 40, height: int = 30) -> bytes:
        buffer = io.BytesIO()
        Image.new("RGB", (width, height), (20, 120, 60)).save(buffer, format="PNG")
        return buffer.getvalue()

    return _make


class _ASGITestClient:
    """Sync wrapper around httpx.AsyncClient + ASGITransport (works with httpx 0.28+)."""

    def __init__(self, app, base_url: str = "http://testserver"):
        self._app = app
        self._base_url = base_url

    def _request(self, method: str, url: str, **kwargs):
        import asyncio

        import httpx

        async def _run():
            async with httpx.AsyncClient(
                transport=httpx.ASGITransport(app=self._app),
                base_url=self._base_url,
            ) as client:
                return await client.request(method, url, **kwargs)

        return asyncio.run(_run())

    def get(self, url: str, **kwargs):
        return self._request("GET", url, **kwargs)

    def post(self, url: str, **kwargs):
        return self._request("POST", url, **kwargs)

    def patch(self, url: str, **kwargs):
        return self._request("PATCH", url, **kwargs)

    def delete(self, url: str, **kwargs):
        return self._request("DELETE", url, **kwargs)


@pytest.fixture
def client(db, tmp_path):
    from webapp.api import create_webapp_api

    app = create_webapp_api(root_dir=str(tmp_path / "webroot"))
    return _ASGITestClient(app)


@pytest.fixture
def auth_headers(db):
    """Bearer headers for a fresh session of the given account."""
    from repositories.auth_session_repo import AuthSessionRepository

    def _headers(user_id: str) -> dict:
        session = AuthSessionRepository().create_session(user_id)
        return {"Authorization": f"Bearer {session.session_token}"}

    return _headers
