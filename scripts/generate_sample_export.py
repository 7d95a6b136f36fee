"""
Sample Export Generator

Writes synthetic campaign and demographics exports to the paths named in
dashboard.yaml, so the API can be run locally without the real spreadsheet.
"""
import argparse
import sys
from datetime import date

from campaign_dashboard.config import load_config
from campaign_dashboard.sample_data import generate_campaign_export, generate_demographics_export


def write_exports(config_path=None, days=90, seed=42, today=None):
    config = load_config(config_path)

    campaign_path = config.campaign_csv_path
    campaign_path.parent.mkdir(parents=True, exist_ok=True)
    campaign_path.write_bytes(generate_campaign_export(days=days, seed=seed, today=today).encode("utf-8"))
    print(f"[OK] Campaign export -> {campaign_path}")

    demographics_path = config.demographics_csv_path
    if demographics_path is None:
        print("[SKIP] No demographics_csv configured")
        return 0
    demographics_path.parent.mkdir(parents=True, exist_ok=True)
    demographics_path.write_bytes(generate_demographics_export(seed=seed).encode("utf-8"))
    print(f"[OK] Demographics export -> {demographics_path}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate synthetic spreadsheet exports")
    parser.add_argument("--config", default=None, help="Path to dashboard.yaml")
    parser.add_argument("--days", type=int, default=90)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--today", type=date.fromisoformat, default=None, help="Last export day (YYYY-MM-DD)")
    args = parser.parse_args()
    sys.exit(write_exports(args.config, args.days, args.seed, args.today))
