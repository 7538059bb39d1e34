from cineverse.actions.posts import (
    list_posts, get_post, save_post, delete_post, update_post_status,
    get_posts_for_admin, get_posts_by_series_id, increment_view_count,
)
from cineverse.actions.reviews import create_review, delete_review, get_review_tree, REVIEW_TREE_DEPTH
from cineverse.actions.favorites import toggle_like_post, toggle_favorite_post, get_favorite_posts, get_favorite_posts_by_user_id
from cineverse.actions.subtitles import create_subtitle, delete_subtitle, can_user_download_subtitle

__all__ = [
    "list_posts", "get_post", "save_post", "delete_post", "update_post_status",
    "get_posts_for_admin", "get_posts_by_series_id", "increment_view_count",
    "create_review", "delete_review", "get_review_tree", "REVIEW_TREE_DEPTH",
    "toggle_like_post", "toggle_favorite_post", "get_favorite_posts", "get_favorite_posts_by_user_id",
    "create_subtitle", "delete_subtitle", "can_user_download_subtitle",
]
