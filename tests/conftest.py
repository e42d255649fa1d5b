"""
Pytest configuration and fixtures.
"""

import copy

import pytest

from booklender.core.catalog import Catalog
from booklender.core.models import Book
from booklender.core.recommender import Recommender
from booklender.core.search_index import SearchIndex


class MemoryStore:
    """In-memory storage provider that records every save."""

    def __init__(self, books=None, ratings=None):
        self.books = list(books or [])
        self.ratings = list(ratings or [])
        self.book_saves = 0
        self.rating_saves = 0

    def load_books(self):
        return copy.deepcopy(self.books)

    def save_books(self, books):
        self.books = copy.deepcopy(books)
        self.book_saves += 1

    def load_ratings(self):
        return list(self.ratings)

    def save_ratings(self, ratings):
        self.ratings = list(ratings)
        self.rating_saves += 1


def make_books():
    return [
        Book("B001", "Harry Potter", "Rowling", "Fantasy", 4.5, True, 10),
        Book("B002", "The Hobbit", "Tolkien", "Fantasy", 4.7, True, 7),
        Book("B003", "Dune", "Herbert", "Sci-Fi", 4.4, False, 12),
        Book("B004", "Foundation", "Asimov", "Sci-Fi", 4.2, True, 3),
        Book("B005", "I Robot", "Asimov", "Sci-Fi", 4.0, True, 7),
        Book("B006", "Emma", "Austen", "Romance", 3.9, True, 0),
    ]


@pytest.fixture
def store():
    """Create a storage double seeded with the sample books."""
    return MemoryStore(make_books())


@pytest.fixture
def catalog(store):
    """Create a catalog over the sample books."""
    return Catalog(store)


@pytest.fixture
def recommender(catalog, store):
    """Create a recommender with default weights and no ratings."""
    return Recommender(catalog, store)


@pytest.fixture
def search_index(catalog):
    """Create a search index over the sample catalog."""
    return SearchIndex(catalog)
