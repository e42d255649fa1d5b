import re
from dataclasses import dataclass, astuple
from typing import List, Protocol

from booklender.config import (
    DEFAULT_GENRE_WEIGHT,
    DEFAULT_AUTHOR_WEIGHT,
    DEFAULT_RATING_WEIGHT,
    DEFAULT_POPULARITY_WEIGHT,
    WEIGHT_STEP,
    GENRE_WEIGHT_BOUNDS,
    AUTHOR_WEIGHT_BOUNDS,
)

BOOK_ID_PATTERN = re.compile(r"B\d{3}")


# Book record
@dataclass
class Book:
    book_id: str
    title: str
    author: str
    genre: str
    avg_rating: float = 0.0
    available: bool = True
    borrow_count: int = 0

    def is_valid(self) -> bool:
        """
        Id must look like B001, text fields non-empty,
        rating within 0.0..5.0 and a non-negative borrow count.
        """
        if not isinstance(self.book_id, str) or not BOOK_ID_PATTERN.fullmatch(self.book_id):
            return False
        if not self.title or not self.author or not self.genre:
            return False
        if not 0.0 <= self.avg_rating <= 5.0:
            return False
        return self.borrow_count >= 0

    def __str__(self) -> str:
        status = "Available" if self.available else "Checked out"
        return (
            f"Book[{self.book_id}] {self.title} by {self.author} ({self.genre}), "
            f"Rating: {self.avg_rating:.1f}, Borrowed {self.borrow_count} times, {status}"
        )


# Rating record
@dataclass(frozen=True)
class Rating:
    user_id: str
    book_id: str
    score: int

    def __post_init__(self):
        if isinstance(self.score, bool) or not isinstance(self.score, int):
            raise ValueError(f"Rating must be an integer, got {self.score!r}")
        if not 1 <= self.score <= 5:
            raise ValueError("Rating must be between 1 and 5")


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# Recommendation weights
@dataclass
class Weights:
    genre: float = DEFAULT_GENRE_WEIGHT
    author: float = DEFAULT_AUTHOR_WEIGHT
    rating: float = DEFAULT_RATING_WEIGHT
    popularity: float = DEFAULT_POPULARITY_WEIGHT

    def adjust(self, increase: bool) -> "Weights":
        """
        Nudge genre/author influence up or down by one step.

        Genre and author are clamped to their bounds, then rating and
        popularity are rescaled so the four weights sum to 1.0 again.
        Author gives way when genre + author would exceed 1.0, so no
        weight ever goes negative.
        """
        delta = WEIGHT_STEP if increase else -WEIGHT_STEP

        self.genre = clamp(self.genre + delta, *GENRE_WEIGHT_BOUNDS)
        self.author = clamp(self.author + delta, *AUTHOR_WEIGHT_BOUNDS)
        if self.genre + self.author > 1.0:
            self.author = 1.0 - self.genre

        total = self.genre + self.author + self.rating + self.popularity
        remaining = max(0.0, 1 - self.genre - self.author)
        self.rating = (self.rating / total) * remaining
        self.popularity = max(0.0, 1 - self.genre - self.author - self.rating)
        return self

    def total(self) -> float:
        return sum(astuple(self))

    def __str__(self) -> str:
        return (
            f"Genre: {self.genre:.2f}, Author: {self.author:.2f}, "
            f"Rating: {self.rating:.2f}, Popularity: {self.popularity:.2f}"
        )


class Storage(Protocol):
    """Persistence the catalog and recommender call through (see CsvStore)."""

    def load_books(self) -> List[Book]: ...

    def save_books(self, books: List[Book]) -> None: ...

    def load_ratings(self) -> List[Rating]: ...

    def save_ratings(self, ratings: List[Rating]) -> None: ...
