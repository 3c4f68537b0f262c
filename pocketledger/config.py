from pathlib import Path
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

# Load .env from repo root for local development.
ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(dotenv_path=ENV_PATH)

class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True, populate_by_name=True)
    local_tz: str = Field(default="Europe/Rome", alias="LOCAL_TZ")
    daily_cutover: str = Field(default="00:00", alias="DAILY_CUTOVER")
    chart_points: int = Field(default=6, alias="CHART_POINTS")
    upcoming_count: int = Field(default=8, alias="UPCOMING_COUNT")
    cashflow_months: int = Field(default=6, alias="CASHFLOW_MONTHS")
    kpi_default_range: str = Field(default="28D", alias="KPI_DEFAULT_RANGE")

settings = Settings()
