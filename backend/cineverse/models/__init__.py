from cineverse.models.user import User, Role
from cineverse.models.group import Group, GroupMember, GroupMemberRole, GroupMemberStatus
from cineverse.models.series import Series
from cineverse.models.post import Post, PostType, PostStatus, Visibility, MediaLink, PostView, post_likes, post_dislikes, split_genres, join_genres
from cineverse.models.review import Review
from cineverse.models.favorite import FavoritePost
from cineverse.models.subtitle import Subtitle

__all__ = ["User", "Role", "Group", "GroupMember", "GroupMemberRole", "GroupMemberStatus", "Series", "Post", "PostType", "PostStatus", "Visibility", "MediaLink", "PostView", "post_likes", "post_dislikes", "split_genres", "join_genres", "Review", "FavoritePost", "Subtitle"]
