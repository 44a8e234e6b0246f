from pydantic import PrivateAttr
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Loan Application Wizard API"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./loan_wizard.db"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Client-side locations the wizard points the user at
    apply_path: str = "/apply"
    login_path: str = "/login"
    dashboard_path: str = "/dashboard"

    min_applicant_age: int = 18
    # Persist the draft on every successful "Next"
    autosave_on_advance: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    _is_sqlite: bool = PrivateAttr(default=False)
    _is_postgresql: bool = PrivateAttr(default=False)

    def model_post_init(self, __context: object) -> None:
        _scheme = self.database_url.split(":")[0].lower()
        object.__setattr__(self, "_is_sqlite", "sqlite" in _scheme)
        object.__setattr__(self, "_is_postgresql", "postgresql" in _scheme)

    @property
    def is_sqlite(self) -> bool:
        return self._is_sqlite

    @property
    def is_postgresql(self) -> bool:
        return self._is_postgresql

    def draft_location(self, draft_id: str) -> str:
        """Navigable location that resumes the given draft on reload."""
        return f"{self.apply_path}?draft={draft_id}"


settings = Settings()
