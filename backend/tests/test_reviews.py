from datetime import datetime, timedelta

import pytest

from cineverse.actions import create_review, delete_review, get_review_tree
from cineverse.actions.reviews import collect_subtree_ids
from cineverse.errors import InvalidArgument, NotAuthenticated, NotAuthorized, NotFound
from cineverse.models import Review


@pytest.fixture
def post(user, make_post):
    return make_post(user)


def test_top_level_review_keeps_rating(db, user, post):
    node = create_review(db, user, post.id, "  Loved it  ", 9)

    assert node.rating == 9
    assert node.comment == "Loved it"
    assert node.parent_id is None
    assert node.user.id == user.id


def test_reply_rating_is_zero(db, user, make_user, post):
    root = create_review(db, user, post.id, "Loved it", 9)
    reply = create_review(db, make_user(), post.id, "Same", 7, parent_id=root.id)

    assert reply.rating == 0
    assert reply.parent_id == root.id


def test_review_requires_sign_in(db, post):
    with pytest.raises(NotAuthenticated):
        create_review(db, None, post.id, "Hi", 5)


def test_review_on_missing_post(db, user):
    with pytest.raises(NotFound):
        create_review(db, user, 999, "Hi", 5)


def test_reply_to_missing_parent(db, user, post):
    with pytest.raises(NotFound):
        create_review(db, user, post.id, "Hi", 0, parent_id=999)


def test_reply_must_stay_on_same_post(db, user, make_post, post):
    other = make_post(user, title="Other")
    root = create_review(db, user, other.id, "Elsewhere", 5)

    with pytest.raises(InvalidArgument):
        create_review(db, user, post.id, "Hi", 0, parent_id=root.id)


def test_blank_review_rejected(db, user, post):
    with pytest.raises(InvalidArgument):
        create_review(db, user, post.id, "   ", 5)


def test_tree_order_and_depth(db, user, post):
    base = datetime(2024, 1, 1)
    old_root = Review(post_id=post.id, user_id=user.id, comment="old", rating=5, created_at=base)
    new_root = Review(post_id=post.id, user_id=user.id, comment="new", rating=8, created_at=base + timedelta(days=1))
    db.add_all([old_root, new_root])
    db.commit()

    # Chain of four replies below the old root
    parent = old_root
    for level in range(1, 5):
        child = Review(post_id=post.id, user_id=user.id, parent_id=parent.id,
                       comment=f"level {level}", created_at=base + timedelta(hours=level))
        db.add(child)
        db.commit()
        parent = child

    tree = get_review_tree(db, post.id)

    assert [node.comment for node in tree] == ["new", "old"]
    level1 = tree[1].replies[0]
    level2 = level1.replies[0]
    level3 = level2.replies[0]
    assert [level1.comment, level2.comment, level3.comment] == ["level 1", "level 2", "level 3"]
    assert level3.replies == []


def test_replies_oldest_first(db, user, post):
    root = create_review(db, user, post.id, "root", 5)
    base = datetime(2024, 1, 1)
    db.add_all([
        Review(post_id=post.id, user_id=user.id, parent_id=root.id, comment="second", created_at=base + timedelta(minutes=5)),
        Review(post_id=post.id, user_id=user.id, parent_id=root.id, comment="first", created_at=base),
    ])
    db.commit()

    tree = get_review_tree(db, post.id)

    assert [r.comment for r in tree[0].replies] == ["first", "second"]


def test_delete_removes_subtree(db, user, post):
    root = create_review(db, user, post.id, "root", 5)
    child = create_review(db, user, post.id, "child", 0, parent_id=root.id)
    create_review(db, user, post.id, "grandchild", 0, parent_id=child.id)
    keep = create_review(db, user, post.id, "unrelated", 3)

    assert [len(level) for level in collect_subtree_ids(db, root.id)] == [1, 1, 1]

    delete_review(db, user, root.id)

    remaining = [r.id for r in db.query(Review).all()]
    assert remaining == [keep.id]


def test_only_owner_or_super_admin_deletes(db, user, make_user, super_admin, post):
    node = create_review(db, user, post.id, "mine", 5)

    with pytest.raises(NotAuthorized):
        delete_review(db, make_user(), node.id)

    delete_review(db, super_admin, node.id)
    assert db.query(Review).count() == 0


def test_owner_of_reply_can_delete_under_someone_elses_root(db, user, make_user, post):
    other = make_user()
    root = create_review(db, other, post.id, "theirs", 5)
    reply = create_review(db, user, post.id, "mine", 0, parent_id=root.id)

    delete_review(db, user, reply.id)

    assert [r.id for r in db.query(Review).all()] == [root.id]


def test_delete_missing_review(db, user):
    with pytest.raises(NotFound):
        delete_review(db, user, 42)
