"""Best-image selection policy.

The policy is an ordered list of predicates evaluated left-to-right.  The
first post that satisfies *every* predicate wins; when no post qualifies
the first post is used unconditionally.  Selection never randomises: the
choice is persisted in the durable cache, so identical upstream ordering
must always produce the same pick.

Default predicates, in evaluation order:

1. the post has a file location;
2. its format is a whitelisted still-image format (``jpg``, ``png``);
3. its rating is not an excluded (most explicit) classification (``e``).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from kexplorer.models.entities import Post

PostPredicate = Callable[[Post], bool]

DEFAULT_SAFE_FORMATS: tuple[str, ...] = ("jpg", "png")
DEFAULT_EXCLUDED_RATINGS: tuple[str, ...] = ("e",)


def has_file_url(post: Post) -> bool:
    return bool(post.file_url)


def format_in(formats: Iterable[str]) -> PostPredicate:
    """Return a predicate accepting posts whose ``file_ext`` is in *formats*."""
    allowed = frozenset(fmt.lower() for fmt in formats)

    def _predicate(post: Post) -> bool:
        return (post.file_ext or "").lower() in allowed

    return _predicate


def rating_not_in(ratings: Iterable[str]) -> PostPredicate:
    """Return a predicate rejecting posts whose ``rating`` is in *ratings*."""
    excluded = frozenset(ratings)

    def _predicate(post: Post) -> bool:
        return post.rating not in excluded

    return _predicate


def build_predicates(
    safe_formats: Iterable[str] = DEFAULT_SAFE_FORMATS,
    excluded_ratings: Iterable[str] = DEFAULT_EXCLUDED_RATINGS,
) -> tuple[PostPredicate, ...]:
    """Return the default predicate list with configurable whitelists."""
    return (has_file_url, format_in(safe_formats), rating_not_in(excluded_ratings))


DEFAULT_PREDICATES = build_predicates()


def select_best_post(
    posts: Sequence[Post],
    predicates: Sequence[PostPredicate] = DEFAULT_PREDICATES,
) -> Post | None:
    """Return the first post satisfying all *predicates*, else the first post.

    Returns ``None`` only for an empty sequence.
    """
    if not posts:
        return None
    for post in posts:
        if all(predicate(post) for predicate in predicates):
            return post
    return posts[0]
