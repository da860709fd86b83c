import logging
import os
from dataclasses import dataclass

DEFAULT_MODEL = "gemini-2.5-flash"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class AppSettings:
    api_key: str = ""
    model: str = DEFAULT_MODEL
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_sender: str = ""
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppSettings":
        smtp_user = os.getenv("SMTP_USER", "").strip()
        try:
            smtp_port = int(os.getenv("SMTP_PORT", "587") or 587)
        except ValueError:
            smtp_port = 587
        return cls(
            api_key=(os.getenv("GEMINI_API_KEY", "") or os.getenv("GOOGLE_API_KEY", "")).strip(),
            model=os.getenv("GEMINI_MODEL", "").strip() or DEFAULT_MODEL,
            smtp_host=os.getenv("SMTP_HOST", "").strip(),
            smtp_port=smtp_port,
            smtp_user=smtp_user,
            smtp_password=os.getenv("SMTP_PASSWORD", ""),
            smtp_sender=os.getenv("SMTP_SENDER", "").strip() or smtp_user,
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )


def resolve_api_key(sidebar_key: str, settings: AppSettings) -> str:
    # Sidebar input wins, else env var fallback
    return (sidebar_key or "").strip() or settings.api_key


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once; later calls are no-ops (Streamlit reruns the script)."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
