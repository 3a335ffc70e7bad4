# app/domain/session.py
from enum import Enum
from typing import TYPE_CHECKING

from app.domain.errors import InvalidStateError, PermissionDeniedError

if TYPE_CHECKING:
    from app.infrastructure.schemas import UserProfile


class SessionStatus(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    SIGNED_OUT = "signed_out"


class SessionState:
    """
    Authentication and profile state for one caller.

    uninitialized -> loading -> ready(user, profile) | ready(user, None)
    any state -> signed_out

    A profile of None in the ready state means the identity provider knows the
    user but profile setup was never completed.
    """

    def __init__(self) -> None:
        self.status = SessionStatus.UNINITIALIZED
        self.user_id: str | None = None
        self.profile: "UserProfile | None" = None

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.READY

    @property
    def needs_profile_setup(self) -> bool:
        return self.is_authenticated and self.profile is None

    def begin_loading(self, user_id: str) -> None:
        if self.status not in (SessionStatus.UNINITIALIZED, SessionStatus.SIGNED_OUT):
            raise InvalidStateError(f"Cannot start loading from {self.status.value}")
        self.status = SessionStatus.LOADING
        self.user_id = user_id
        self.profile = None

    def ready(self, profile: "UserProfile | None") -> None:
        if self.status is not SessionStatus.LOADING:
            raise InvalidStateError(f"Cannot become ready from {self.status.value}")
        self.status = SessionStatus.READY
        self.profile = profile

    def sign_out(self) -> None:
        self.status = SessionStatus.SIGNED_OUT
        self.user_id = None
        self.profile = None

    def require_user_id(self) -> str:
        if not self.is_authenticated or self.user_id is None:
            raise PermissionDeniedError("Not signed in")
        return self.user_id

    def require_profile(self) -> "UserProfile":
        self.require_user_id()
        if self.profile is None:
            raise PermissionDeniedError("Profile setup required")
        return self.profile
