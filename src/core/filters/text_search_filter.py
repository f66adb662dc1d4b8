"""Text- and tag-based filtering for image records."""

from core.models.image import ImageRecord


class TextSearchFilter:
    """Filter images by case-insensitive substring search.

    An image matches when its original file name or its description
    contains the search term. Users can find an image from a fragment
    of either without remembering exact naming.
    """

    @staticmethod
    def apply(items: list[ImageRecord], search_term: str | None) -> list[ImageRecord]:
        """Apply the text filter to items.

        Blank search terms leave the list untouched.
        """
        if not search_term or not search_term.strip():
            return items

        needle = search_term.strip().lower()
        return [
            item
            for item in items
            if needle in item.original_name.lower() or needle in (item.description or "").lower()
        ]


class TagFilter:
    """Keep images carrying at least one of the requested tags."""

    @staticmethod
    def apply(items: list[ImageRecord], tags: list[str] | None) -> list[ImageRecord]:
        if not tags:
            return items

        wanted = set(tags)
        return [item for item in items if wanted.intersection(item.tags)]
