import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
DATA_DIR = BASE_DIR / os.getenv("DATA_DIR", "data")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")

# --- Logging ---
LOG_FILENAME = os.getenv("LOG_FILENAME", "bookstore_sync.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", str(5 * 1024 * 1024)))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "3"))

# --- Collection Keys ---
# Same keys the point-of-sale app uses, so snapshots can be shared.
INVENTORY_KEY = os.getenv("INVENTORY_KEY", "nobel_inventory")
SALES_GOALS_KEY = os.getenv("SALES_GOALS_KEY", "nobel_sales_goals")
SALES_LOG_KEY = os.getenv("SALES_LOG_KEY", "nobel_daily_sales_log")

# --- Webhook ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")

# --- Import Rules ---
HEADER_SCAN_ROWS = int(os.getenv("HEADER_SCAN_ROWS", "50"))
MIN_ISBN_LENGTH = int(os.getenv("MIN_ISBN_LENGTH", "6"))
LOW_STOCK_THRESHOLD = int(os.getenv("LOW_STOCK_THRESHOLD", "3"))
DEFAULT_GENRE = os.getenv("DEFAULT_GENRE", "Geral")

# --- Display Sentinels ---
# Only used when rendering; an unset title/author is None internally.
UNTITLED_DISPLAY = "Título não informado"
UNKNOWN_AUTHOR_DISPLAY = "Desconhecido"

# Placeholders older snapshots stored literally. Read back as "unset".
LEGACY_TITLE_SENTINELS = {
    "título não informado",
    "titulo nao informado",
    "livro sem título",
    "livro sem titulo",
    "untitled",
}
LEGACY_AUTHOR_SENTINELS = {
    "desconhecido",
    "autor desconhecido",
    "não localizado",
    "nao localizado",
    "unknown",
}
