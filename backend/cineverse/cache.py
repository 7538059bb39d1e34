"""Path invalidation for rendered pages.

There is no cache in front of the database. Mutations announce which page
paths went stale; whatever renders those pages registers a listener.
"""
import logging

logger = logging.getLogger("cineverse.cache")

_listeners = []


def add_listener(callback):
    _listeners.append(callback)


def remove_listener(callback):
    if callback in _listeners:
        _listeners.remove(callback)


def revalidate_path(path: str):
    logger.debug("Revalidate %s", path)
    for callback in list(_listeners):
        callback(path)


def invalidate_post_cache(post_id=None, series_id=None, author_id=None):
    revalidate_path("/")
    revalidate_path("/manage")
    if post_id:
        revalidate_path(f"/movies/{post_id}")
    if series_id:
        revalidate_path(f"/series/{series_id}")
    if author_id:
        revalidate_path(f"/profile/{author_id}")
