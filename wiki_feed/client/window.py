"""Render window: the slice of the feed materialized for display."""


def render_window(cursor: int, length: int) -> range:
    """Indices of the previous, current and next articles around ``cursor``.

    The window is ``[max(0, cursor - 1), min(length, cursor + 2))`` so at most
    three articles are rendered regardless of feed length. An empty feed
    yields an empty range.
    """
    if length <= 0:
        return range(0, 0)
    return range(max(0, cursor - 1), min(length, cursor + 2))
