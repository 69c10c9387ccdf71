from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from person_sync.config import load_settings
from person_sync.crm_client import PipedriveClient
from person_sync.errors import CrmApiError, SyncError, ValidationError, status_hint
from person_sync.sync import SyncResult, sync_person

logger = logging.getLogger("person_sync")

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Create or update one Pipedrive person from a JSON document")
    p.add_argument("--input", default="inputData.json", help="JSON document to sync")
    p.add_argument("--mapping", default="mappings.json",
                   help="Mapping table: JSON array of {inputKey, pipedriveKey} or CSV with those columns")
    p.add_argument("--env-file", default=".env", help="dotenv file with PIPEDRIVE_* settings")
    p.add_argument("--dry-run", action="store_true", help="Map and search, but do not write to Pipedrive")
    p.add_argument("--log", default=None, help="Write a one-row CSV sync log to this path")
    return p.parse_args(argv)

def load_json(path: str) -> Any:
    try:
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)
    except (OSError, ValueError) as e:
        raise ValidationError(f"Cannot read JSON from {path}: {e}") from e

def load_mapping_rows(path: str) -> Any:
    if Path(path).suffix.lower() == ".csv":
        try:
            mp = pd.read_csv(path, dtype=str)
        except (OSError, ValueError) as e:
            raise ValidationError(f"Cannot read mapping CSV {path}: {e}") from e
        missing = {"inputKey", "pipedriveKey"} - set(mp.columns)
        if missing:
            raise ValidationError(f"Mapping CSV {path} is missing columns: {', '.join(sorted(missing))}")
        mp = mp.dropna(subset=["inputKey", "pipedriveKey"])
        return mp[["inputKey", "pipedriveKey"]].to_dict(orient="records")
    return load_json(path)

def write_sync_log(path: str, row: Dict[str, Any]) -> None:
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame([row]).to_csv(log_path, index=False)

def report(result: SyncResult) -> None:
    if result.action == "skipped":
        plan = "update" if result.person else "create"
        print(json.dumps({"action": plan, "person_id": result.person_id, "payload": result.record}, indent=2))
        return
    logger.info("Person sync completed successfully!")
    print(json.dumps(result.person, indent=2))

def run(args: argparse.Namespace) -> int:
    settings = load_settings(args.env_file)
    logging.getLogger().setLevel(settings.log_level)

    document = load_json(args.input)
    mappings = load_mapping_rows(args.mapping)
    client = PipedriveClient(settings.to_client_config())

    result = sync_person(document, mappings, client, dry_run=args.dry_run)
    report(result)
    if args.log:
        write_sync_log(args.log, {
            "status": "ok",
            "action": result.action,
            "name": result.name,
            "person_id": result.person_id,
            "status_code": None,
            "reason": "dry_run" if args.dry_run else "",
        })
    return 0

def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        return run(args)
    except SyncError as e:
        if isinstance(e, CrmApiError):
            logger.error("Pipedrive API Error: %s", e)
            hint = status_hint(e.status_code)
            if hint:
                logger.error(hint)
        else:
            logger.error("Error syncing person to Pipedrive: %s", e)
        if args.log:
            write_sync_log(args.log, {
                "status": "error",
                "action": "",
                "name": "",
                "person_id": None,
                "status_code": getattr(e, "status_code", None),
                "reason": str(e),
            })
        print(f"Failed to sync person to Pipedrive: {e}", file=sys.stderr)
        return 1

if __name__ == "__main__":
    raise SystemExit(main())
