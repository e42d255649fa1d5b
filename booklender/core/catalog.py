import logging
from typing import List, Optional

from booklender.core.models import Book, Storage

logger = logging.getLogger("catalog")


class Catalog:
    """
    In-memory book collection loaded once from a storage provider.

    Lookups on unknown ids return None / [] / False rather than raising.
    Every mutation (borrow, return, average rating update) is pushed back
    to storage straight away.
    """

    def __init__(self, storage: Storage):
        self.storage = storage
        self._books: List[Book] = []

        self.load()

    # Load books from storage, dropping anything invalid
    def load(self):
        loaded = self.storage.load_books()
        self._books = [b for b in loaded if b.is_valid()]

        dropped = len(loaded) - len(self._books)
        if dropped:
            logger.warning(f"Dropped {dropped} invalid book records")
        logger.info(f"Loaded {len(self._books)} books into catalog")

    def save(self):
        self.storage.save_books(list(self._books))

    def __len__(self) -> int:
        return len(self._books)

    def all_books(self) -> List[Book]:
        return list(self._books)

    def find_by_id(self, book_id: Optional[str]) -> Optional[Book]:
        if book_id is None:
            return None
        wanted = book_id.lower()
        return next((b for b in self._books if b.book_id.lower() == wanted), None)

    # Case-insensitive substring match on title or author
    def search(self, text: Optional[str]) -> List[Book]:
        if text is None:
            return []
        needle = text.lower()
        return [
            b for b in self._books
            if needle in b.title.lower() or needle in b.author.lower()
        ]

    def popular(self, n: int) -> List[Book]:
        if n <= 0:
            return []
        # sorted() is stable, so equal borrow counts keep catalog order
        ranked = sorted(self._books, key=lambda b: b.borrow_count, reverse=True)
        return ranked[:n]

    def similar(self, reference: Book, n: int) -> List[Book]:
        """Books sharing the reference's genre or author, reference excluded."""
        results = []
        if n <= 0:
            return results

        for book in self._books:
            if book.book_id == reference.book_id:
                continue
            if book.genre == reference.genre or book.author == reference.author:
                results.append(book)
                if len(results) >= n:
                    break
        return results

    def borrow(self, book_id: str) -> bool:
        book = self.find_by_id(book_id)
        if book is None or not book.available:
            return False

        book.available = False
        book.borrow_count += 1
        self.save()
        logger.info(f"Borrowed {book.book_id} ({book.borrow_count} total)")
        return True

    def return_book(self, book_id: str):
        book = self.find_by_id(book_id)
        if book is None:
            return

        book.available = True
        self.save()
        logger.info(f"Returned {book.book_id}")

    def set_average_rating(self, book_id: str, value: float) -> bool:
        book = self.find_by_id(book_id)
        if book is None:
            return False

        book.avg_rating = value
        self.save()
        return True
