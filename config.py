import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class Settings:
    # Storage
    books_file: str = os.getenv("LIBRARY_BOOKS_FILE", "books.txt")
    history_file: str = os.getenv("LIBRARY_HISTORY_FILE", "history.txt")

    # Lending rules
    borrow_limit_per_user: int = int(os.getenv("BORROW_LIMIT_PER_USER", "2"))

    # Admin credentials for catalog changes
    admin_username: str = os.getenv("ADMIN_USERNAME", "admin")
    admin_password: str = os.getenv("ADMIN_PASSWORD", "1234")

    # Pagination
    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

    # Application
    app_name: str = os.getenv("APP_NAME", "Library Book Manager")
    log_level: str = os.getenv("LOG_LEVEL", "WARNING").upper()
    debug: bool = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")


settings = Settings()
