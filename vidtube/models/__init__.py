from vidtube.models.users import Users, WatchHistory
from vidtube.models.videos import Video
from vidtube.models.comments import Comment
from vidtube.models.tweets import Tweet
from vidtube.models.playlists import Playlist, PlaylistVideo
from vidtube.models.subscriptions import Subscription
from vidtube.models.likes import Like

__all__ = [
    "Users",
    "WatchHistory",
    "Video",
    "Comment",
    "Tweet",
    "Playlist",
    "PlaylistVideo",
    "Subscription",
    "Like",
]
