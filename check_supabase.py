"""
Check the Supabase connection and the MMI / Ucat tables.
Run after executing the SQL printed by init_db.py:  python check_supabase.py
"""
import sys

from db import get_supabase_uncached, get_question_counts
from engine import MMI_TABLE, UCAT_TABLE, SECTION_LABELS


def check_connection() -> bool:
    print("Checking Supabase connection...")
    try:
        client = get_supabase_uncached()
        print("✓ Client created successfully")

        for table in (MMI_TABLE, UCAT_TABLE):
            response = client.table(table).select("id").limit(1).execute()
            print(f"✓ {table} table exists (rows: {len(response.data)})")

        counts = get_question_counts(client)
        print(f"\n✓ MMI questions: {counts['mmi']}")
        print(f"✓ UCAT questions: {counts['ucat']}")
        for section, label in SECTION_LABELS.items():
            print(f"    {section:<4} {label:<24} {counts.get(section, 0)}")
    except Exception as e:
        print(f"\n✗ Error: {e}")
        print("\nPlease:")
        print("  1. Run the SQL from `python init_db.py` in the Supabase SQL Editor")
        print("  2. Check .env has SUPABASE_URL and SUPABASE_KEY")
        return False
    return True


if __name__ == "__main__":
    sys.exit(0 if check_connection() else 1)
