from typing import Dict, List, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy import false, func, or_, select, update
from sqlalchemy.orm import aliased
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import InvalidInput, NotFound
from vidtube.models.comments import Comment
from vidtube.models.likes import Like
from vidtube.models.playlists import Playlist, PlaylistVideo
from vidtube.models.subscriptions import Subscription
from vidtube.models.tweets import Tweet
from vidtube.models.users import Users, WatchHistory
from vidtube.models.videos import Video
from vidtube.schemas.comment import CommentItem
from vidtube.schemas.common import Page
from vidtube.schemas.playlist import PlaylistDetail, PlaylistSummary, PlaylistVideoItem
from vidtube.schemas.subscription import LatestVideo, SubscribedChannelItem, SubscriberItem
from vidtube.schemas.tweet import TweetItem
from vidtube.schemas.user import ChannelProfile, OwnerProfile, OwnerSummary
from vidtube.schemas.video import (
    ChannelStats,
    ChannelVideo,
    VideoDetail,
    VideoFeedItem,
    VideoOwner,
    WatchedVideo,
)
from vidtube.services.access_control import require_found
from vidtube.services.relationships import insert_unique

SORT_FIELDS = {
    "createdAt": Video.created_at,
    "created_at": Video.created_at,
    "views": Video.views,
    "duration": Video.duration,
    "title": Video.title,
}
ASCENDING = {"asc", "ascending", "1"}
DESCENDING = {"desc", "descending", "-1"}


def subscribers_count(user_id_column):
    edge = aliased(Subscription)
    return select(func.count(edge.id)).where(edge.channel_id == user_id_column).scalar_subquery()


def subscriptions_count(user_id_column):
    edge = aliased(Subscription)
    return select(func.count(edge.id)).where(edge.subscriber_id == user_id_column).scalar_subquery()


def is_subscribed(channel_id_column, subscriber_id: Optional[UUID]):
    if subscriber_id is None:
        return false()
    edge = aliased(Subscription)
    return (
        select(edge.id)
        .where(edge.channel_id == channel_id_column, edge.subscriber_id == subscriber_id)
        .exists()
    )


def likes_count(target: str, target_id_column):
    edge = aliased(Like)
    return select(func.count(edge.id)).where(getattr(edge, target) == target_id_column).scalar_subquery()


def is_liked(target: str, target_id_column, viewer_id: Optional[UUID]):
    if viewer_id is None:
        return false()
    edge = aliased(Like)
    return (
        select(edge.id)
        .where(getattr(edge, target) == target_id_column, edge.liked_by_id == viewer_id)
        .exists()
    )


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ViewComposer:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _execute(self, stmt):
        # views must reflect counters bumped by earlier UPDATE statements
        return await self.db.execute(stmt.execution_options(populate_existing=True))

    async def _count(self, stmt) -> int:
        total = await self.db.scalar(select(func.count()).select_from(stmt.subquery()))
        return int(total or 0)

    async def _require_user(self, user_id: UUID) -> None:
        found = await self.db.scalar(select(Users.id).where(Users.id == user_id))
        require_found(found, "User")

    async def channel_profile(self, username: str, viewer_id: Optional[UUID] = None) -> ChannelProfile:
        if not username or not username.strip():
            raise NotFound("Channel does not exist")

        stmt = select(
            Users,
            subscribers_count(Users.id).label("subscribers_count"),
            subscriptions_count(Users.id).label("channels_subscribed_to_count"),
            is_subscribed(Users.id, viewer_id).label("is_subscribed"),
        ).where(func.lower(Users.username) == username.strip().lower())

        row = (await self._execute(stmt)).one_or_none()
        if row is None:
            raise NotFound("Channel does not exist")

        user, subscriber_total, subscribed_to_total, subscribed = row
        return ChannelProfile(
            id=user.id,
            full_name=user.full_name,
            username=user.username,
            email=user.email,
            avatar=user.avatar,
            cover_image=user.cover_image,
            subscribers_count=subscriber_total,
            channels_subscribed_to_count=subscribed_to_total,
            is_subscribed=bool(subscribed),
        )

    async def video_detail(self, video_id: UUID, viewer_id: UUID) -> VideoDetail:
        found = await self.db.scalar(select(Video.id).where(Video.id == video_id))
        require_found(found, "Video")

        await self.db.execute(
            update(Video)
            .where(Video.id == video_id)
            .values(views=Video.views + 1, updated_at=Video.updated_at)
        )
        await self.db.commit()

        already_watched = await self.db.scalar(
            select(WatchHistory.id).where(
                WatchHistory.user_id == viewer_id, WatchHistory.video_id == video_id
            )
        )
        if already_watched is None:
            await insert_unique(self.db, WatchHistory(user_id=viewer_id, video_id=video_id))

        stmt = (
            select(
                Video,
                Users,
                likes_count("video_id", Video.id).label("likes_count"),
                is_liked("video_id", Video.id, viewer_id).label("is_liked"),
                subscribers_count(Users.id).label("subscribers_count"),
                is_subscribed(Users.id, viewer_id).label("is_subscribed"),
            )
            .join(Users, Users.id == Video.owner_id)
            .where(Video.id == video_id)
        )
        video, owner, like_total, liked, subscriber_total, subscribed = (await self._execute(stmt)).one()

        logger.debug(f"Video {video_id} viewed by {viewer_id}, views={video.views}")
        return VideoDetail(
            id=video.id,
            video_file=video.video_file,
            thumbnail=video.thumbnail,
            title=video.title,
            description=video.description,
            duration=video.duration,
            views=video.views,
            is_published=video.is_published,
            created_at=video.created_at,
            owner=VideoOwner(
                id=owner.id,
                username=owner.username,
                avatar=owner.avatar,
                subscribers_count=subscriber_total,
                is_subscribed=bool(subscribed),
            ),
            likes_count=like_total,
            is_liked=bool(liked),
        )

    async def video_comments(
        self, video_id: UUID, viewer_id: Optional[UUID], page: int = 1, limit: int = 10
    ) -> Page[CommentItem]:
        found = await self.db.scalar(select(Video.id).where(Video.id == video_id))
        require_found(found, "Video")

        base = select(Comment.id).where(Comment.video_id == video_id)
        stmt = (
            select(
                Comment,
                Users,
                likes_count("comment_id", Comment.id).label("likes_count"),
                is_liked("comment_id", Comment.id, viewer_id).label("is_liked"),
            )
            .join(Users, Users.id == Comment.owner_id)
            .where(Comment.video_id == video_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )

        docs = [
            CommentItem(
                id=comment.id,
                content=comment.content,
                created_at=comment.created_at,
                owner=OwnerProfile.model_validate(owner),
                likes_count=like_total,
                is_liked=bool(liked),
            )
            for comment, owner, like_total, liked in (await self._execute(stmt)).all()
        ]
        return Page.build(docs, await self._count(base), page, limit)

    async def user_tweets(
        self, user_id: UUID, viewer_id: Optional[UUID], page: int = 1, limit: int = 10
    ) -> Page[TweetItem]:
        await self._require_user(user_id)

        base = select(Tweet.id).where(Tweet.owner_id == user_id)
        stmt = (
            select(
                Tweet,
                Users,
                likes_count("tweet_id", Tweet.id).label("likes_count"),
                is_liked("tweet_id", Tweet.id, viewer_id).label("is_liked"),
            )
            .join(Users, Users.id == Tweet.owner_id)
            .where(Tweet.owner_id == user_id)
            .order_by(Tweet.created_at.desc(), Tweet.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )

        docs = [
            TweetItem(
                id=tweet.id,
                content=tweet.content,
                created_at=tweet.created_at,
                owner=OwnerProfile.model_validate(owner),
                likes_count=like_total,
                is_liked=bool(liked),
            )
            for tweet, owner, like_total, liked in (await self._execute(stmt)).all()
        ]
        return Page.build(docs, await self._count(base), page, limit)

    async def playlist_detail(self, playlist_id: UUID) -> PlaylistDetail:
        playlist = require_found(
            await self.db.get(Playlist, playlist_id, populate_existing=True), "Playlist"
        )
        owner = await self.db.get(Users, playlist.owner_id)

        stmt = (
            select(Video)
            .join(PlaylistVideo, PlaylistVideo.video_id == Video.id)
            .where(PlaylistVideo.playlist_id == playlist_id, Video.is_published.is_(True))
            .order_by(PlaylistVideo.id)
        )
        videos = [PlaylistVideoItem.model_validate(v) for v in (await self._execute(stmt)).scalars().all()]

        return PlaylistDetail(
            id=playlist.id,
            name=playlist.name,
            description=playlist.description,
            created_at=playlist.created_at,
            updated_at=playlist.updated_at,
            total_videos=len(videos),
            total_views=sum(v.views for v in videos),
            videos=videos,
            owner=OwnerProfile.model_validate(owner),
        )

    async def user_playlists(self, user_id: UUID) -> List[PlaylistSummary]:
        await self._require_user(user_id)

        totals = (
            select(
                PlaylistVideo.playlist_id.label("playlist_id"),
                func.count(Video.id).label("total_videos"),
                func.sum(Video.views).label("total_views"),
            )
            .join(Video, Video.id == PlaylistVideo.video_id)
            .where(Video.is_published.is_(True))
            .group_by(PlaylistVideo.playlist_id)
            .subquery()
        )
        stmt = (
            select(
                Playlist,
                func.coalesce(totals.c.total_videos, 0),
                func.coalesce(totals.c.total_views, 0),
            )
            .outerjoin(totals, totals.c.playlist_id == Playlist.id)
            .where(Playlist.owner_id == user_id)
            .order_by(Playlist.updated_at.desc(), Playlist.id)
        )

        return [
            PlaylistSummary(
                id=playlist.id,
                name=playlist.name,
                description=playlist.description,
                total_videos=int(video_total),
                total_views=int(view_total),
                updated_at=playlist.updated_at,
            )
            for playlist, video_total, view_total in (await self._execute(stmt)).all()
        ]

    async def video_feed(
        self,
        query: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_type: Optional[str] = None,
        owner_id: Optional[UUID] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[VideoFeedItem]:
        sort_column = SORT_FIELDS.get(sort_by or "createdAt")
        if sort_column is None:
            raise InvalidInput(f"Cannot sort videos by '{sort_by}'")

        direction = (sort_type or "desc").lower()
        if direction not in ASCENDING | DESCENDING:
            raise InvalidInput(f"Unknown sort type '{sort_type}'")

        filters = [Video.is_published.is_(True)]
        if query and query.strip():
            pattern = f"%{_escape_like(query.strip())}%"
            filters.append(
                or_(
                    Video.title.ilike(pattern, escape="\\"),
                    Video.description.ilike(pattern, escape="\\"),
                )
            )
        if owner_id is not None:
            filters.append(Video.owner_id == owner_id)

        if direction in ASCENDING:
            order_by = (sort_column.asc(), Video.id.asc())
        else:
            order_by = (sort_column.desc(), Video.id.desc())

        stmt = (
            select(Video, Users)
            .join(Users, Users.id == Video.owner_id)
            .where(*filters)
            .order_by(*order_by)
            .offset((page - 1) * limit)
            .limit(limit)
        )

        docs = [
            VideoFeedItem(
                id=video.id,
                video_file=video.video_file,
                thumbnail=video.thumbnail,
                title=video.title,
                description=video.description,
                duration=video.duration,
                views=video.views,
                created_at=video.created_at,
                owner=OwnerSummary.model_validate(owner),
            )
            for video, owner in (await self._execute(stmt)).all()
        ]
        return Page.build(docs, await self._count(select(Video.id).where(*filters)), page, limit)

    async def watch_history(self, user_id: UUID) -> List[WatchedVideo]:
        stmt = (
            select(Video, Users)
            .join(WatchHistory, WatchHistory.video_id == Video.id)
            .outerjoin(Users, Users.id == Video.owner_id)
            .where(WatchHistory.user_id == user_id)
            .order_by(WatchHistory.id)
        )
        return [
            self._watched(video, owner)
            for video, owner in (await self._execute(stmt)).all()
        ]

    async def liked_videos(self, user_id: UUID) -> List[WatchedVideo]:
        stmt = (
            select(Video, Users)
            .join(Like, Like.video_id == Video.id)
            .join(Users, Users.id == Video.owner_id)
            .where(Like.liked_by_id == user_id, Video.is_published.is_(True))
            .order_by(Like.created_at.desc(), Like.id.desc())
        )
        return [
            self._watched(video, owner)
            for video, owner in (await self._execute(stmt)).all()
        ]

    @staticmethod
    def _watched(video: Video, owner: Optional[Users]) -> WatchedVideo:
        return WatchedVideo(
            id=video.id,
            video_file=video.video_file,
            thumbnail=video.thumbnail,
            title=video.title,
            description=video.description,
            duration=video.duration,
            views=video.views,
            created_at=video.created_at,
            owner=OwnerProfile.model_validate(owner) if owner is not None else None,
        )

    async def channel_subscribers(self, channel_id: UUID) -> List[SubscriberItem]:
        await self._require_user(channel_id)

        stmt = (
            select(
                Users,
                subscribers_count(Users.id).label("subscribers_count"),
                is_subscribed(Users.id, channel_id).label("subscribed_to_subscriber"),
            )
            .join(Subscription, Subscription.subscriber_id == Users.id)
            .where(Subscription.channel_id == channel_id)
            .order_by(Subscription.created_at.desc(), Subscription.id)
        )
        return [
            SubscriberItem(
                id=user.id,
                username=user.username,
                full_name=user.full_name,
                avatar=user.avatar,
                subscribers_count=subscriber_total,
                subscribed_to_subscriber=bool(subscribed_back),
            )
            for user, subscriber_total, subscribed_back in (await self._execute(stmt)).all()
        ]

    async def subscribed_channels(self, subscriber_id: UUID) -> List[SubscribedChannelItem]:
        await self._require_user(subscriber_id)

        stmt = (
            select(Users)
            .join(Subscription, Subscription.channel_id == Users.id)
            .where(Subscription.subscriber_id == subscriber_id)
            .order_by(Subscription.created_at.desc(), Subscription.id)
        )
        channels = (await self._execute(stmt)).scalars().all()
        latest = await self._latest_videos([c.id for c in channels])

        return [
            SubscribedChannelItem(
                id=channel.id,
                username=channel.username,
                full_name=channel.full_name,
                avatar=channel.avatar,
                latest_video=latest.get(channel.id),
            )
            for channel in channels
        ]

    async def _latest_videos(self, owner_ids: List[UUID]) -> Dict[UUID, LatestVideo]:
        if not owner_ids:
            return {}
        ranked = (
            select(
                Video,
                func.row_number()
                .over(partition_by=Video.owner_id, order_by=(Video.created_at.desc(), Video.id.desc()))
                .label("position"),
            )
            .where(Video.owner_id.in_(owner_ids), Video.is_published.is_(True))
            .subquery()
        )
        latest_video = aliased(Video, ranked)
        rows = (await self._execute(select(latest_video).where(ranked.c.position == 1))).scalars().all()
        return {video.owner_id: LatestVideo.model_validate(video) for video in rows}

    async def channel_stats(self, user_id: UUID) -> ChannelStats:
        video_total, view_total = (
            await self.db.execute(
                select(func.count(Video.id), func.coalesce(func.sum(Video.views), 0)).where(
                    Video.owner_id == user_id
                )
            )
        ).one()
        subscriber_total = await self.db.scalar(
            select(func.count(Subscription.id)).where(Subscription.channel_id == user_id)
        )
        like_total = await self.db.scalar(
            select(func.count(Like.id))
            .join(Video, Video.id == Like.video_id)
            .where(Video.owner_id == user_id)
        )
        return ChannelStats(
            total_videos=int(video_total or 0),
            total_views=int(view_total or 0),
            total_subscribers=int(subscriber_total or 0),
            total_likes=int(like_total or 0),
        )

    async def channel_videos(self, user_id: UUID) -> List[ChannelVideo]:
        stmt = (
            select(Video, likes_count("video_id", Video.id).label("likes_count"))
            .where(Video.owner_id == user_id)
            .order_by(Video.created_at.desc(), Video.id.desc())
        )
        return [
            ChannelVideo(
                id=video.id,
                video_file=video.video_file,
                thumbnail=video.thumbnail,
                title=video.title,
                description=video.description,
                duration=video.duration,
                views=video.views,
                is_published=video.is_published,
                created_at=video.created_at,
                likes_count=like_total,
            )
            for video, like_total in (await self._execute(stmt)).all()
        ]
