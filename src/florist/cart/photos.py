"""Reference photos pasted into a cart item's note.

Customers used to paste image links into the free-text note. Those links
are moved into ``photo_urls`` and removed from the note so the florist sees
a clean note and a list of pictures.
"""

import re

_URL = re.compile(r"https?://\S+", re.IGNORECASE)
_IMAGE_SUFFIX = re.compile(r"\.(jpg|jpeg|png|webp|gif)(?:[?#]\S*)?$", re.IGNORECASE)
_IMAGE_HOSTS = ("res.cloudinary.com",)


def is_image_url(url: str) -> bool:
    return bool(_IMAGE_SUFFIX.search(url)) or any(host in url.lower() for host in _IMAGE_HOSTS)


def extract_photo_urls(note: str | None) -> tuple[str, list[str]]:
    """Split ``note`` into the note without image links and the image links.

    Non-image links stay in the note. Repeated whitespace left behind by a
    removed link is collapsed.
    """
    if not note:
        return "", []

    urls = [url for url in _URL.findall(note) if is_image_url(url)]
    cleaned = note
    for url in urls:
        cleaned = cleaned.replace(url, "")
    cleaned = re.sub(r"[ \t]{2,}", " ", cleaned)
    cleaned = re.sub(r"\n{2,}", "\n", cleaned).strip()
    return cleaned, urls


def merge_photo_urls(*groups) -> list[str]:
    """Concatenate URL lists, keeping the first occurrence of each URL."""
    merged = []
    for group in groups:
        for url in group or ():
            if url and url not in merged:
                merged.append(url)
    return merged
