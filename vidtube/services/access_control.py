from typing import Any, Optional, TypeVar

from vidtube.core.errors import Forbidden, NotFound
from vidtube.models.users import Users

T = TypeVar("T")


def require_found(entity: Optional[T], name: str) -> T:
    if entity is None:
        raise NotFound(f"{name} not found")
    return entity


def is_owner(principal: Users, entity: Any) -> bool:
    return entity.owner_id == principal.id


def require_owner(principal: Users, entity: Any, action: str = "modify this resource") -> None:
    if not is_owner(principal, entity):
        raise Forbidden(f"Only the owner can {action}")


def require_any_owner(principal: Users, *entities: Any, action: str = "modify this resource") -> None:
    if not any(is_owner(principal, entity) for entity in entities):
        raise Forbidden(f"Only the owner can {action}")
