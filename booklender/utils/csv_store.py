import csv
import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from booklender.config import (
    BOOKS_CSV_PATH,
    RATINGS_CSV_PATH,
    BACKUP_ON_SAVE,
    MAX_BACKUPS,
    BOOK_CSV_COLUMNS,
    RATING_CSV_COLUMNS,
)
from booklender.core.models import Book, Rating

logger = logging.getLogger("csv_store")

BOOK_HEADER = ["id", "title", "author", "genre", "rating", "isAvailable", "borrowCount"]
RATING_HEADER = ["user_id", "book_id", "rating"]


def parse_book_row(row: List[str]) -> Book:
    """Build a Book from one data row. Raises ValueError on bad numbers."""
    book_id, title, author, genre, rating, available, borrows = (f.strip() for f in row)
    return Book(
        book_id=book_id,
        title=title,
        author=author,
        genre=genre,
        avg_rating=float(rating),
        available=available.lower() == "true",
        borrow_count=int(borrows),
    )


def book_to_row(book: Book) -> List[str]:
    return [
        book.book_id,
        book.title,
        book.author,
        book.genre,
        str(book.avg_rating),
        str(book.available).lower(),
        str(book.borrow_count),
    ]


# CSV Store Class
class CsvStore:
    """
    Flat-file storage for books and ratings.

    Nothing here raises on a bad file: book rows that fail to parse or
    validate are skipped one at a time, while a rating file with any bad
    row is rejected as a whole and loads as an empty list.
    """

    def __init__(self, books_path=BOOKS_CSV_PATH, ratings_path=RATINGS_CSV_PATH,
                 backup=BACKUP_ON_SAVE, max_backups=MAX_BACKUPS):
        self.books_path = Path(books_path)
        self.ratings_path = Path(ratings_path)
        self.backup = backup
        self.max_backups = max_backups

    # Read all non-blank rows, None if the file is missing or unreadable
    def _read_rows(self, path: Path) -> Optional[List[List[str]]]:
        if not path.exists():
            logger.warning(f"CSV file not found: {path}")
            return None

        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                return [row for row in csv.reader(f) if row]
        except (OSError, csv.Error, ValueError) as e:
            logger.error(f"Failed reading {path}: {e}")
            return None

    def _write_rows(self, path: Path, header: List[str], rows: List[List[str]]):
        try:
            os.makedirs(path.parent, exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(header)
                writer.writerows(rows)
        except (OSError, csv.Error) as e:
            logger.error(f"Failed writing {path}: {e}")

    def validate_csv_file(self, path, expected_cols: int) -> bool:
        """Header plus at least one data row, every row expected_cols wide."""
        rows = self._read_rows(Path(path))
        return rows is not None and self._rows_are_valid(rows, expected_cols, path)

    def _rows_are_valid(self, rows: List[List[str]], expected_cols: int, path) -> bool:
        for line_no, row in enumerate(rows, start=1):
            if len(row) != expected_cols:
                logger.warning(f"Format error at line {line_no} of {path}")
                return False
        return len(rows) > 1

    def backup_file(self, path) -> Optional[Path]:
        """
        Copy path to <stem>_YYYYmmdd_HHMMSS.bak and prune old copies.

        Only the newest max_backups copies are kept. Two saves within the
        same second share one backup name, so the later copy replaces the
        earlier one.
        """
        path = Path(path)
        if not path.exists():
            return None

        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        target = path.with_name(f"{path.stem}_{stamp}.bak")
        try:
            shutil.copyfile(path, target)
        except OSError as e:
            logger.error(f"Backup of {path} failed: {e}")
            return None

        self._prune_backups(path)
        return target

    # Fixed-width timestamps sort by name, oldest first
    def _prune_backups(self, path: Path):
        backups = sorted(path.parent.glob(f"{path.stem}_*.bak"))
        for old in backups[:max(0, len(backups) - self.max_backups)]:
            try:
                old.unlink()
            except OSError as e:
                logger.error(f"Failed removing old backup {old}: {e}")

    # Books
    def load_books(self) -> List[Book]:
        rows = self._read_rows(self.books_path)
        if not rows:
            return []

        books = []
        for line_no, row in enumerate(rows[1:], start=2):
            if len(row) != BOOK_CSV_COLUMNS:
                logger.warning(f"Skipping book row {line_no}: expected {BOOK_CSV_COLUMNS} columns, got {len(row)}")
                continue
            try:
                book = parse_book_row(row)
            except ValueError as e:
                logger.warning(f"Skipping book row {line_no}: {e}")
                continue
            if not book.is_valid():
                logger.warning(f"Skipping invalid book row {line_no}: {row[0]}")
                continue
            books.append(book)

        logger.info(f"Loaded {len(books)} books from {self.books_path}")
        return books

    def save_books(self, books: List[Book]):
        if self.backup:
            self.backup_file(self.books_path)
        self._write_rows(self.books_path, BOOK_HEADER, [book_to_row(b) for b in books])

    # Ratings
    def load_ratings(self) -> List[Rating]:
        rows = self._read_rows(self.ratings_path)
        if rows is None or not self._rows_are_valid(rows, RATING_CSV_COLUMNS, self.ratings_path):
            logger.warning(f"The rating CSV format is incorrect: {self.ratings_path}")
            return []

        try:
            ratings = [
                Rating(user_id.strip(), book_id.strip(), int(score))
                for user_id, book_id, score in rows[1:]
            ]
        except ValueError as e:
            logger.warning(f"Rejecting rating file {self.ratings_path}: {e}")
            return []

        logger.info(f"Loaded {len(ratings)} ratings from {self.ratings_path}")
        return ratings

    def save_ratings(self, ratings: List[Rating]):
        rows = [[r.user_id, r.book_id, str(r.score)] for r in ratings]
        self._write_rows(self.ratings_path, RATING_HEADER, rows)
