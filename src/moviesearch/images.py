"""
Poster URL resolution for TMDB image paths.
"""

from typing import Literal, Optional

TMDB_IMAGE_BASE = "https://image.tmdb.org/t/p"
PLACEHOLDER_POSTER = "/placeholder-poster.svg"
POSTER_SIZES = ("w200", "w300", "w500", "original")

PosterSize = Literal["w200", "w300", "w500", "original"]


def poster_url(poster_path: Optional[str], size: PosterSize = "w500") -> str:
    """Full poster URL, or the placeholder when the movie has no poster."""
    if size not in POSTER_SIZES:
        raise ValueError(f"Unknown poster size {size!r}, expected one of {POSTER_SIZES}")
    if not poster_path:
        return PLACEHOLDER_POSTER
    return f"{TMDB_IMAGE_BASE}/{size}{poster_path}"
