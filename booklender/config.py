import os
from dotenv import load_dotenv

load_dotenv()

# Base directory
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))

# File Paths
DATA_DIR = os.getenv("BOOKLENDER_DATA_DIR", os.path.join(BASE_DIR, "data"))
BOOKS_CSV_PATH = os.path.join(DATA_DIR, "books.csv")
RATINGS_CSV_PATH = os.path.join(DATA_DIR, "ratings.csv")

# Storage Configuration
BACKUP_ON_SAVE = os.getenv("BOOKLENDER_BACKUP_ON_SAVE", "true").lower() == "true"
MAX_BACKUPS = int(os.getenv("BOOKLENDER_MAX_BACKUPS", "5"))
BOOK_CSV_COLUMNS = 7
RATING_CSV_COLUMNS = 3

# Logging Configuration
LOG_LEVEL = os.getenv("BOOKLENDER_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"

# Recommendation Configuration
DEFAULT_RECOMMENDATION_COUNT = 5
MIN_LIKED_SCORE = 4
DEFAULT_GENRE_WEIGHT = 0.4
DEFAULT_AUTHOR_WEIGHT = 0.3
DEFAULT_RATING_WEIGHT = 0.2
DEFAULT_POPULARITY_WEIGHT = 0.1
WEIGHT_STEP = 0.05
GENRE_WEIGHT_BOUNDS = (0.1, 0.6)
AUTHOR_WEIGHT_BOUNDS = (0.1, 0.5)

# Search Configuration
MAX_SUGGESTIONS = 5
MAX_EDIT_DISTANCE = 2
MIN_CORRECTION_LENGTH = 3
