from types import SimpleNamespace
from uuid import uuid4

import pytest

from vidtube.core.errors import Forbidden, NotFound
from vidtube.services.access_control import is_owner, require_any_owner, require_found, require_owner


def _user():
    return SimpleNamespace(id=uuid4())


def _owned_by(user):
    return SimpleNamespace(owner_id=user.id)


def test_require_found_returns_entity():
    entity = object()
    assert require_found(entity, "Video") is entity


def test_require_found_raises_not_found():
    with pytest.raises(NotFound) as exc:
        require_found(None, "Tweet")
    assert exc.value.message == "Tweet not found"
    assert exc.value.status_code == 404


def test_owner_passes_and_stranger_is_forbidden():
    owner, stranger = _user(), _user()
    video = _owned_by(owner)

    assert is_owner(owner, video)
    require_owner(owner, video)

    with pytest.raises(Forbidden) as exc:
        require_owner(stranger, video, "delete this video")
    assert exc.value.status_code == 403
    assert "delete this video" in exc.value.message


def test_any_owner_accepts_either_entity_owner():
    playlist_owner, video_owner, stranger = _user(), _user(), _user()
    playlist, video = _owned_by(playlist_owner), _owned_by(video_owner)

    require_any_owner(playlist_owner, playlist, video)
    require_any_owner(video_owner, playlist, video)

    with pytest.raises(Forbidden):
        require_any_owner(stranger, playlist, video, action="add videos to this playlist")
