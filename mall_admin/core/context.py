from dataclasses import dataclass
from typing import Optional

from fastapi import BackgroundTasks

from mall_admin.core.permissions import AuthUser


@dataclass
class RequestContext:
    """Identity and request metadata handed explicitly to every mutation."""

    user: Optional[AuthUser] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    background_tasks: Optional[BackgroundTasks] = None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None
