"""Print the Supabase schema for MedPrep (run it in the Supabase SQL Editor)."""
import argparse
import os

from dotenv import load_dotenv

load_dotenv()

SCHEMA_SQL = """
-- MMI prompts with model answers
CREATE TABLE IF NOT EXISTS "MMI" (
    id BIGINT GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
    question TEXT,
    answer TEXT,
    created_at TIMESTAMPTZ DEFAULT NOW()
);

-- UCAT multiple choice (2-5 options, correct_answer is 1-based)
CREATE TABLE IF NOT EXISTS "Ucat" (
    id BIGINT GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
    question TEXT,
    "answer 1" TEXT,
    "answer 2" TEXT,
    "answer 3" TEXT,
    "answer 4" TEXT,
    "answer 5" TEXT,
    correct_answer INT CHECK (correct_answer IS NULL OR correct_answer BETWEEN 1 AND 5),
    type VARCHAR(5),
    created_at TIMESTAMPTZ DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_ucat_type ON "Ucat"(type);
"""


def schema_statements() -> list[str]:
    return [s.strip() for s in SCHEMA_SQL.split(";") if s.strip()]


def main():
    parser = argparse.ArgumentParser(description="Print the MedPrep schema SQL.")
    parser.add_argument("--statements", action="store_true", help="Print one numbered statement at a time")
    args = parser.parse_args()

    print("MedPrep schema")
    print(f"URL: {os.getenv('SUPABASE_URL') or '(SUPABASE_URL not set)'}")
    if args.statements:
        statements = schema_statements()
        for i, stmt in enumerate(statements, 1):
            print(f"\n-- {i}/{len(statements)}")
            print(stmt + ";")
    else:
        print(SCHEMA_SQL)
    print("\nRun this SQL in Supabase: SQL Editor > New Query.")


if __name__ == "__main__":
    main()
