"""Mood blueprints that drive the discovery queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class MoodBlueprint:
    """Genre and keyword hints used to find titles matching a mood."""

    key: str
    genres: tuple[str, ...]
    keywords: tuple[str, ...]
    min_rating: float

    def genre_query(self, page: int) -> dict[str, str | int | float]:
        """Parameters for the genre-based discovery call."""

        return {
            "with_genres": ",".join(self.genres),
            "vote_average.gte": self.min_rating,
            "sort_by": "popularity.desc",
            "vote_count.gte": 200,
            "page": page,
        }

    def keyword_query(self, page: int) -> dict[str, str | int | float]:
        """Parameters for the keyword-based discovery call."""

        return {
            "with_keywords": "|".join(self.keywords),
            "vote_average.gte": self.min_rating,
            "sort_by": "popularity.desc",
            "vote_count.gte": 150,
            "page": page,
        }


MOOD_BLUEPRINTS: Mapping[str, MoodBlueprint] = {
    blueprint.key: blueprint
    for blueprint in [
        MoodBlueprint(
            key="happy",
            genres=("35", "10751"),  # Comedy, Family
            keywords=("feel-good", "happy", "comedy", "uplifting"),
            min_rating=7.0,
        ),
        MoodBlueprint(
            key="melancholic",
            genres=("18",),  # Drama
            keywords=("emotional", "drama", "touching", "melancholy"),
            min_rating=7.2,
        ),
        MoodBlueprint(
            key="excited",
            genres=("28", "12"),  # Action, Adventure
            keywords=("action", "adventure", "thrilling", "exciting"),
            min_rating=6.8,
        ),
        MoodBlueprint(
            key="relaxed",
            genres=("99", "10751"),  # Documentary, Family
            keywords=("calm", "relaxing", "peaceful", "gentle"),
            min_rating=6.5,
        ),
        MoodBlueprint(
            key="tense",
            genres=("53", "9648"),  # Thriller, Mystery
            keywords=("suspense", "thriller", "mystery", "intense"),
            min_rating=7.0,
        ),
        MoodBlueprint(
            key="romantic",
            genres=("10749",),  # Romance
            keywords=("romance", "love", "romantic", "relationship"),
            min_rating=6.8,
        ),
        MoodBlueprint(
            key="thoughtful",
            genres=("18", "99"),  # Drama, Documentary
            keywords=("thought-provoking", "philosophical", "deep", "meaningful"),
            min_rating=7.5,
        ),
        MoodBlueprint(
            key="energetic",
            genres=("28", "12", "16"),  # Action, Adventure, Animation
            keywords=("action", "fast-paced", "dynamic", "energetic"),
            min_rating=6.5,
        ),
    ]
}


def get_mood(key: str) -> MoodBlueprint:
    """Return the blueprint for *key* or raise ``ValueError``."""

    normalized = (key or "").strip().lower()
    try:
        return MOOD_BLUEPRINTS[normalized]
    except KeyError as exc:
        raise ValueError(f"Invalid mood: {key!r}") from exc
