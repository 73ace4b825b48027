"""Multi-line item descriptions for guest post and link insertion services."""

GUEST_POST_NAME = "Guest Post Publication"
LINK_INSERTION_NAME = "Link Insertion Service"


def _join(lines: list[tuple[str, str]], header: str) -> str:
    parts = [header]
    parts.extend(f"{label}: {value}" for label, value in lines if value)
    return "\n".join(parts).strip()


def guest_post_description(
    service_name: str = "",
    url: str = "",
    title: str = "",
    details: str = "",
    publication_date: str = "",
) -> str:
    """Describe a published guest post.

    Lines, in order: display name, published URL, article title, details,
    publication date. Empty fields are skipped.

    Args:
        service_name: Display name, "Guest Post Publication" when empty
        url: Published article URL
        title: Article title
        details: Free-text extra detail
        publication_date: Publication date as text

    Returns:
        Trimmed multi-line description
    """
    return _join(
        [
            ("Published URL", url),
            ("Article Title", title),
            ("Details", details),
            ("Publication Date", publication_date),
        ],
        header=service_name or GUEST_POST_NAME,
    )


def link_insertion_description(
    url: str = "",
    anchor_text: str = "",
    insertion_date: str = "",
    details: str = "",
) -> str:
    """Describe a link insertion; always headed "Link Insertion Service"."""
    return _join(
        [
            ("Target URL", url),
            ("Anchor Text", anchor_text),
            ("Insertion Date", insertion_date),
            ("Details", details),
        ],
        header=LINK_INSERTION_NAME,
    )
