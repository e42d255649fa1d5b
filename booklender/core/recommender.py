import logging
import math
from collections import Counter
from typing import List, Optional, Tuple

import numpy as np

from booklender.config import (
    DEFAULT_RECOMMENDATION_COUNT,
    LOG_FORMAT,
    LOG_LEVEL,
    MIN_LIKED_SCORE,
)
from booklender.core.catalog import Catalog
from booklender.core.models import Book, Rating, Storage, Weights

# Logging
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger("recommender")


def round_one_decimal(value: float) -> float:
    """Round half-up to one decimal place (4.25 -> 4.3)."""
    return math.floor(value * 10 + 0.5) / 10


class Recommender:
    """
    Personalized top-N suggestions from a user's rating history.

    Each unrated book is scored as a weighted sum of four terms:
      - genre matches the user's preferred genre
      - author matches the user's preferred author
      - average rating / 5
      - borrow count / highest borrow count in the catalog
    Users without any ratings get the catalog's most popular books.
    """

    def __init__(self, catalog: Catalog, storage: Storage, weights: Optional[Weights] = None):
        self.catalog = catalog
        self.storage = storage
        self.weights = weights if weights is not None else Weights()
        self.ratings: List[Rating] = self._canonical_ratings(storage.load_ratings())

        logger.info(f"Loaded {len(self.ratings)} ratings")

    def _canonical_id(self, book_id: str) -> str:
        book = self.catalog.find_by_id(book_id)
        return book.book_id if book is not None else book_id

    # Stored ids may differ in case from the catalog; the last row per pair wins
    def _canonical_ratings(self, ratings: List[Rating]) -> List[Rating]:
        by_pair = {}
        for r in ratings:
            rating = Rating(r.user_id, self._canonical_id(r.book_id), r.score)
            key = (rating.user_id, rating.book_id)
            by_pair.pop(key, None)
            by_pair[key] = rating
        return list(by_pair.values())

    def ratings_for(self, user_id: str) -> List[Rating]:
        return [r for r in self.ratings if r.user_id == user_id]

    # Most frequent attribute among the user's liked books
    def _preferred(self, user_ratings: List[Rating], attribute: str) -> Optional[str]:
        counts = Counter()
        for rating in user_ratings:
            if rating.score < MIN_LIKED_SCORE:
                continue
            book = self.catalog.find_by_id(rating.book_id)
            if book is not None:
                counts[getattr(book, attribute)] += 1

        if not counts:
            return None
        # most_common keeps first-seen order among equal counts
        return counts.most_common(1)[0][0]

    def preferred_genre(self, user_id: str) -> Optional[str]:
        return self._preferred(self.ratings_for(user_id), "genre")

    def preferred_author(self, user_id: str) -> Optional[str]:
        return self._preferred(self.ratings_for(user_id), "author")

    def scored_recommendations(self, user_id: str, n: int = DEFAULT_RECOMMENDATION_COUNT) -> List[Tuple[Book, float]]:
        user_ratings = self.ratings_for(user_id)

        # Cold start: nothing to personalize on
        if not user_ratings:
            return [(book, 0.0) for book in self.catalog.popular(n)]

        if n <= 0:
            return []

        pref_genre = self._preferred(user_ratings, "genre")
        pref_author = self._preferred(user_ratings, "author")

        books = self.catalog.all_books()
        rated_ids = {r.book_id for r in user_ratings}
        candidates = [b for b in books if b.book_id not in rated_ids]
        if not candidates:
            return []

        max_borrows = max((b.borrow_count for b in books), default=0) or 1

        genre_match = np.array([b.genre == pref_genre for b in candidates], dtype=np.float64)
        author_match = np.array([b.author == pref_author for b in candidates], dtype=np.float64)
        avg_ratings = np.array([b.avg_rating for b in candidates], dtype=np.float64)
        borrows = np.array([b.borrow_count for b in candidates], dtype=np.float64)

        w = self.weights
        scores = (
            genre_match * w.genre
            + author_match * w.author
            + (avg_ratings / 5.0) * w.rating
            + (borrows / max_borrows) * w.popularity
        )

        # Stable sort: equal scores keep catalog order
        order = np.argsort(-scores, kind="stable")[:n]

        logger.debug(
            f"Scored {len(candidates)} books for {user_id} "
            f"(genre={pref_genre}, author={pref_author})"
        )
        return [(candidates[i], float(scores[i])) for i in order]

    def recommend(self, user_id: str, n: int = DEFAULT_RECOMMENDATION_COUNT) -> List[Book]:
        return [book for book, _ in self.scored_recommendations(user_id, n)]

    def add_rating(self, user_id: str, book_id: str, score: int) -> Rating:
        book_id = self._canonical_id(book_id)

        # Raises ValueError before anything is touched
        rating = Rating(user_id, book_id, score)

        self.ratings = [
            r for r in self.ratings
            if not (r.user_id == user_id and r.book_id == book_id)
        ]
        self.ratings.append(rating)
        self.storage.save_ratings(list(self.ratings))

        self._update_book_rating(book_id)
        return rating

    def _update_book_rating(self, book_id: str):
        scores = [r.score for r in self.ratings if r.book_id == book_id]
        if not scores:
            return

        average = round_one_decimal(sum(scores) / len(scores))
        if self.catalog.set_average_rating(book_id, average):
            logger.info(f"Average rating for {book_id} is now {average}")

    def adjust_weights(self, increase: bool) -> Weights:
        self.weights.adjust(increase)
        logger.info(f"Weights adjusted → {self.weights}")
        return self.weights


if __name__ == "__main__":
    from booklender.core.search_index import SearchIndex
    from booklender.utils.csv_store import CsvStore

    store = CsvStore(backup=False)
    catalog = Catalog(store)
    recommender = Recommender(catalog, store)

    for book in recommender.recommend("alice"):
        print(book)
    for book in SearchIndex(catalog).smart_search("hobit"):
        print(book)
