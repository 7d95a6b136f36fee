# campaign_dashboard/config.py
import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "dashboard.yaml"


class SourceConfig(BaseModel):
    # Local copies of the spreadsheet exports; relative paths resolve
    # against the config file's directory.
    campaign_csv: str = "data/campaign_export.csv"
    demographics_csv: Optional[str] = None


class DashboardSettings(BaseModel):
    default_range_days: int = 30
    range_options: List[int] = [7, 14, 30, 60, 90]
    campaigns_per_page: int = 10
    ad_sets_per_page: int = 8

    @field_validator("default_range_days", "campaigns_per_page", "ad_sets_per_page")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v


class FunnelSettings(BaseModel):
    """
    Stage labels and the conversion bands used to color each step.
    A step converting at >= good_threshold percent is 'good', at
    >= warn_threshold is 'warn', otherwise 'poor'.
    """
    labels: Dict[str, str] = {}
    good_threshold: float = 30.0
    warn_threshold: float = 10.0


class InsightSettings(BaseModel):
    roas_excellent: float = 3.0
    roas_poor: float = 1.0
    ctr_high: float = 2.0
    ctr_low: float = 0.5
    cpc_efficient: float = 1.0
    max_insights: int = 4


class DashboardConfig(BaseModel):
    source: SourceConfig = Field(default_factory=SourceConfig)
    dashboard: DashboardSettings = Field(default_factory=DashboardSettings)
    funnel: FunnelSettings = Field(default_factory=FunnelSettings)
    insights: InsightSettings = Field(default_factory=InsightSettings)
    base_dir: Path = Path(".")

    def resolve(self, relative: str) -> Path:
        path = Path(relative)
        return path if path.is_absolute() else self.base_dir / path

    @property
    def campaign_csv_path(self) -> Path:
        return self.resolve(self.source.campaign_csv)

    @property
    def demographics_csv_path(self) -> Optional[Path]:
        if not self.source.demographics_csv:
            return None
        return self.resolve(self.source.demographics_csv)


def load_config(path: Optional[str | Path] = None) -> DashboardConfig:
    if path is None:
        path = os.environ.get("DASHBOARD_CONFIG", DEFAULT_CONFIG_PATH)
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return DashboardConfig(**{**raw, "base_dir": path.resolve().parent})
