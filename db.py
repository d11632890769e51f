"""Supabase access for MMI and UCAT tables. Client is cached via Streamlit."""
import logging
import os

import streamlit as st
from dotenv import load_dotenv
from supabase import create_client, Client

from engine import MMI_TABLE, UCAT_TABLE, UCAT_SECTIONS

load_dotenv()

log = logging.getLogger(__name__)

PAGE_SIZE = 1000


def _env_client() -> Client:
    url = os.environ.get("SUPABASE_URL")
    key = os.environ.get("SUPABASE_KEY") or os.environ.get("SUPABASE_ANON_KEY")
    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY (or SUPABASE_ANON_KEY) must be set")
    return create_client(url, key)


@st.cache_resource
def get_supabase() -> Client:
    return _env_client()


def get_supabase_uncached() -> Client:
    """For CLI/scripts (no Streamlit context)."""
    return _env_client()


def _fetch_all(query_factory):
    """Page through a select with .range() (PostgREST caps rows per request)."""
    all_rows = []
    offset = 0
    while True:
        r = query_factory().range(offset, offset + PAGE_SIZE - 1).execute()
        data = r.data or []
        if not data:
            break
        all_rows.extend(data)
        if len(data) < PAGE_SIZE:
            break
        offset += PAGE_SIZE
    return all_rows


# --- MMI ---

def count_mmi_questions(client: Client | None = None) -> int:
    client = client or get_supabase()
    r = client.table(MMI_TABLE).select("id", count="exact").limit(0).execute()
    return getattr(r, "count", None) or 0


def get_mmi_question_by_index(index: int, client: Client | None = None) -> dict | None:
    """Row at position `index` when ordered by id ascending, or None."""
    client = client or get_supabase()
    r = (
        client.table(MMI_TABLE)
        .select("id, question, answer")
        .order("id")
        .range(index, index)
        .execute()
    )
    data = r.data or []
    return data[0] if data else None


def insert_mmi_question(question: str, answer: str, client: Client | None = None):
    client = client or get_supabase()
    return client.table(MMI_TABLE).insert({"question": question, "answer": answer}).execute()


# --- UCAT ---

def get_ucat_questions(types: list[str], client: Client | None = None) -> list[dict]:
    """All UCAT rows whose type is one of `types`."""
    client = client or get_supabase()
    if not types:
        return []
    return _fetch_all(lambda: client.table(UCAT_TABLE).select("*").in_("type", list(types)).order("id"))


def insert_ucat_question(row: dict, client: Client | None = None):
    client = client or get_supabase()
    return client.table(UCAT_TABLE).insert(row).execute()


# --- Bulk ---

def insert_questions_bulk(client: Client, table: str, rows: list[dict], chunk_size: int | None = None) -> int:
    """
    Insert rows into `table`. Returns the number of rows sent.
    With no chunk_size the rows go in one insert, so PostgREST applies all or nothing.
    With chunk_size, chunks already inserted stay committed if a later one fails.
    """
    if not rows:
        return 0
    chunk_size = chunk_size or len(rows)
    n_chunks = (len(rows) + chunk_size - 1) // chunk_size
    committed = 0
    for i in range(0, len(rows), chunk_size):
        chunk = rows[i : i + chunk_size]
        chunk_num = i // chunk_size + 1
        log.info("Inserting %s chunk %d/%d (%d rows)", table, chunk_num, n_chunks, len(chunk))
        try:
            client.table(table).insert(chunk).execute()
        except Exception:
            log.error("Insert into %s failed at chunk %d/%d; %d rows already committed", table, chunk_num, n_chunks, committed)
            raise
        committed += len(chunk)
    return committed


def get_question_counts(client: Client | None = None) -> dict:
    """Returns dict with mmi, ucat and per-section counts (for the admin page)."""
    client = client or get_supabase()
    out = {"mmi": count_mmi_questions(client), "ucat": 0}
    for section in UCAT_SECTIONS:
        r = client.table(UCAT_TABLE).select("id", count="exact").eq("type", section).limit(0).execute()
        out[section] = getattr(r, "count", None) or 0
    r = client.table(UCAT_TABLE).select("id", count="exact").limit(0).execute()
    out["ucat"] = getattr(r, "count", None) or 0
    return out
