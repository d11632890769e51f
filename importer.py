"""Bulk-import MMI or UCAT questions from a CSV file into Supabase."""
import argparse
import logging
from pathlib import Path

from db import get_supabase_uncached, insert_questions_bulk
from engine import MMI_TABLE, UCAT_TABLE
from medprep.csv_upload import prepare_upload, REQUIRED_HEADERS

TABLES = {"mmi": MMI_TABLE, "ucat": UCAT_TABLE}


def upload_batch(client, batch, chunk_size: int | None = None) -> int:
    """Insert a prepared UploadBatch into its table. One all-or-nothing insert unless chunk_size is given."""
    return insert_questions_bulk(client, TABLES[batch.upload_type], batch.payload, chunk_size=chunk_size)


def run_import(csv_path: Path, upload_type: str, chunk_size: int | None = None, dry_run: bool = False, client=None) -> int:
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV not found: {csv_path}")
    batch = prepare_upload(csv_path.read_text(encoding="utf-8-sig"), upload_type)
    if dry_run:
        print(f"Dry run: would insert {len(batch.payload)} {upload_type.upper()} questions from {csv_path}")
        if batch.payload:
            print("Sample row:", batch.payload[0])
        return 0
    client = client or get_supabase_uncached()
    n = upload_batch(client, batch, chunk_size=chunk_size)
    print(f"Uploaded {n} {upload_type.upper()} questions from {csv_path}")
    return n


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    parser = argparse.ArgumentParser(description="Import MMI or UCAT questions from CSV into Supabase.")
    parser.add_argument("csv", help="Path to .csv")
    parser.add_argument(
        "--type",
        choices=sorted(TABLES),
        default="mmi",
        help="Question type. Required headers: "
        + "; ".join(f"{t}: {', '.join(h)}" for t, h in REQUIRED_HEADERS.items()),
    )
    parser.add_argument("--chunk-size", type=int, default=None, help="Insert in chunks of N rows (default: one all-or-nothing insert)")
    parser.add_argument("--dry-run", action="store_true", help="Parse and validate only, do not insert")
    args = parser.parse_args()
    run_import(Path(args.csv), args.type, chunk_size=args.chunk_size, dry_run=args.dry_run)
