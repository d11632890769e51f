"""MedPrep — daily MMI questions, UCAT practice and question uploads."""
import sys
from datetime import date
from pathlib import Path

# Ensure project root is in path
project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import streamlit as st

from db import get_ucat_questions, insert_mmi_question, insert_ucat_question, get_question_counts, get_supabase
from engine import (
    UCAT_SECTIONS,
    SECTION_LABELS,
    UCAT_MAX_OPTIONS,
    TIMER_PRESETS_MINUTES,
    QUESTION_COUNT_PRESETS,
    PREP_PRESETS_SECONDS,
    RESPONSE_PRESETS_SECONDS,
)
from importer import upload_batch
from medprep.csv_upload import prepare_upload, CsvUploadError, REQUIRED_HEADERS
from medprep.daily import pick_daily_question, pick_random_question
from medprep.mmi_timer import MmiTimer, PREP
from medprep.quiz import QuizSession, select_questions, format_seconds, SETUP, IN_PROGRESS, TIMED, UNTIMED
from medprep.streak import (
    StreakTracker,
    build_last_days,
    streak_progress,
    is_up_to_date,
    is_best_streak,
    motivational_line,
)
from medprep.submissions import build_mmi_row, build_ucat_row

PAGES = ["Home", "MMI Prep", "UCAT Prep", "Submit Questions", "Admin"]

st.set_page_config(page_title="MedPrep", layout="wide")
st.sidebar.title("MedPrep")
# Allow URL to open a specific page
default_page = st.query_params.get("page", "Home")
if default_page not in PAGES:
    default_page = "Home"
page = st.sidebar.radio("Navigate", PAGES, index=PAGES.index(default_page), label_visibility="collapsed")

tracker = StreakTracker()


def _go(target: str):
    st.query_params["page"] = target
    st.rerun()


def _ucat_options_form(prefix: str):
    answers = [
        st.text_input(f"Answer {i + 1}" + (" (optional)" if i == UCAT_MAX_OPTIONS - 1 else ""), key=f"{prefix}_a{i}")
        for i in range(UCAT_MAX_OPTIONS)
    ]
    correct = st.number_input("Correct answer index (1-5)", min_value=1, max_value=UCAT_MAX_OPTIONS, step=1, key=f"{prefix}_correct")
    qtype = st.selectbox(
        "Question type",
        [""] + list(UCAT_SECTIONS),
        format_func=lambda s: f"{SECTION_LABELS[s]} ({s})" if s else "Select type",
        key=f"{prefix}_type",
    )
    return answers, correct, qtype


# ----- Home -----
if page == "Home":
    today = date.today()
    stats = tracker.read()
    st.caption("Daily MMI Studio")
    st.header("Train every day. Track every reveal.")
    st.write(
        "Build a consistent prep rhythm with daily questions, quick practice sessions, "
        "and focused timers. Your streak lives here."
    )

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        label = "Day streak (peak)" if is_best_streak(stats) else "Day streak"
        st.metric(label, stats.streak)
    with col2:
        st.metric("Best streak", stats.best)
    with col3:
        st.metric("Total reveals", stats.total)
    with col4:
        st.metric("Last reveal", stats.last_date or "—")
    st.progress(streak_progress(stats) / 100)

    if is_up_to_date(stats, today):
        st.success(motivational_line(stats, today))
    else:
        st.warning(motivational_line(stats, today))

    history = set(stats.history)
    for col, day in zip(st.columns(7), build_last_days(7, today)):
        with col:
            st.write(day["label"])
            st.write("●" if day["date"] in history else "○")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Go to daily question", type="primary", use_container_width=True):
            _go("MMI Prep")
    with col2:
        if st.button("Jump to UCAT prep", use_container_width=True):
            _go("UCAT Prep")

    st.divider()
    st.subheader("Focus for today")
    st.write(
        "Try a 4 minute prep + 6 minute response. Aim for structure: opening stance, "
        "two key points, and a balanced close."
    )
    st.subheader("Weekly rhythm")
    st.markdown(
        "- Mon/Wed/Fri: ethical dilemma questions\n"
        "- Tue/Thu: teamwork + leadership prompts\n"
        "- Weekend: full timing drills and reflection"
    )

# ----- MMI Prep -----
elif page == "MMI Prep":
    if "mmi_practice_mode" not in st.session_state:
        st.session_state["mmi_practice_mode"] = False
    if "mmi_answer_revealed" not in st.session_state:
        st.session_state["mmi_answer_revealed"] = False
    if "mmi_timer" not in st.session_state:
        st.session_state["mmi_timer"] = MmiTimer()

    if not st.session_state["mmi_practice_mode"]:
        st.header("Daily MMI Question")
        if "mmi_daily" not in st.session_state:
            try:
                st.session_state["mmi_daily"] = pick_daily_question()
            except Exception as e:
                st.error(f"Failed to load daily MMI question. {e}")
                st.stop()
        daily = st.session_state["mmi_daily"]
        st.write((daily or {}).get("question") or "No daily question available yet.")

        revealed = st.session_state["mmi_answer_revealed"]
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Hide Answer" if revealed else "Reveal Answer", type="primary"):
                st.session_state["mmi_answer_revealed"] = not revealed
                if not revealed:
                    tracker.record_reveal()
                st.rerun()
        with col2:
            if st.button("Generate question"):
                st.session_state["mmi_practice_mode"] = True
                st.session_state["mmi_answer_revealed"] = False
                st.rerun()
        if st.session_state["mmi_answer_revealed"]:
            st.info((daily or {}).get("answer") or "No answer available.")
        st.stop()

    # Practice mode
    st.header("Practice MMI Question")
    if st.session_state.get("mmi_practice") is None:
        try:
            st.session_state["mmi_practice"] = pick_random_question()
        except Exception as e:
            st.error(f"Failed to load practice MMI question. {e}")
    practice = st.session_state.get("mmi_practice")
    st.write((practice or {}).get("question") or "No practice question available yet.")

    timer: MmiTimer = st.session_state["mmi_timer"]
    revealed = st.session_state["mmi_answer_revealed"]
    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button("Disable timer" if timer.enabled else "Enable timer"):
            timer.toggle()
            st.rerun()
    with col2:
        if st.button("Hide Answer" if revealed else "Reveal Answer"):
            st.session_state["mmi_answer_revealed"] = not revealed
            st.rerun()
    with col3:
        if st.button("Generate new question"):
            st.session_state["mmi_answer_revealed"] = False
            st.session_state["mmi_practice"] = None
            st.rerun()

    if timer.enabled:
        timer.refresh()
        col1, col2 = st.columns(2)
        with col1:
            prep = st.selectbox(
                "Prep time",
                PREP_PRESETS_SECONDS,
                index=PREP_PRESETS_SECONDS.index(timer.prep_duration),
                format_func=lambda s: f"{s // 60} min",
            )
            if prep != timer.prep_duration:
                timer.set_prep_duration(prep)
                st.rerun()
        with col2:
            resp = st.selectbox(
                "Response time",
                RESPONSE_PRESETS_SECONDS,
                index=RESPONSE_PRESETS_SECONDS.index(timer.response_duration),
                format_func=lambda s: f"{s // 60} min",
            )
            if resp != timer.response_duration:
                timer.set_response_duration(resp)
                st.rerun()

        running = timer.prep_running if timer.phase == PREP else timer.response_running
        st.subheader("Prep Timer" if timer.phase == PREP else "Response Timer")
        st.metric("Time left", format_seconds(timer.remaining()))
        col1, col2, col3, col4 = st.columns(4)
        with col1:
            if st.button("Running..." if running else "Start", disabled=running or timer.remaining() == 0):
                timer.start()
                st.rerun()
        with col2:
            if timer.phase != PREP and st.button("Stop", disabled=not timer.response_running):
                timer.stop()
                st.rerun()
        with col3:
            if st.button("Finish", disabled=timer.remaining() == 0):
                timer.finish()
                st.rerun()
        with col4:
            if st.button("Refresh"):
                st.rerun()

    if st.session_state["mmi_answer_revealed"]:
        st.info((practice or {}).get("answer") or "No answer available.")
    if st.button("Back to Daily Question"):
        st.session_state["mmi_practice_mode"] = False
        st.rerun()

# ----- UCAT Prep -----
elif page == "UCAT Prep":
    if "ucat_session" not in st.session_state:
        st.session_state["ucat_session"] = QuizSession()
    session: QuizSession = st.session_state["ucat_session"]
    setup = session.setup

    if session.state == SETUP:
        st.header("Select UCAT Sections to Practice")
        cols = st.columns(len(UCAT_SECTIONS))
        for col, section in zip(cols, UCAT_SECTIONS):
            with col:
                picked = section in setup.sections
                if st.button(("✓ " if picked else "") + SECTION_LABELS[section], key=f"sec_{section}", use_container_width=True):
                    setup.toggle_section(section)
                    st.rerun()

        st.subheader("Select Practice Mode")
        mode = st.radio(
            "Practice mode",
            [TIMED, UNTIMED],
            index=None if setup.practice_mode is None else [TIMED, UNTIMED].index(setup.practice_mode),
            format_func=lambda m: "Timed Practice" if m == TIMED else "Untimed Practice",
            horizontal=True,
            label_visibility="collapsed",
        )
        if mode and mode != setup.practice_mode:
            setup.set_mode(mode)

        if setup.is_timed:
            st.caption("Timer Settings")
            timer_choice = st.radio(
                "Timer",
                list(TIMER_PRESETS_MINUTES) + ["custom"],
                format_func=lambda m: "Custom" if m == "custom" else f"{m} min",
                horizontal=True,
            )
            if timer_choice == "custom":
                setup.set_custom_minutes(st.number_input("Custom minutes", min_value=1, max_value=120, value=12))
            else:
                setup.choose_timer(timer_choice)

        st.subheader("Select Number of Questions")
        count_choice = st.radio(
            "Questions",
            list(QUESTION_COUNT_PRESETS) + ["custom"],
            format_func=lambda c: "Custom" if c == "custom" else f"{c} questions",
            horizontal=True,
        )
        if count_choice == "custom":
            setup.set_custom_questions(st.number_input("Custom questions", min_value=1, max_value=200, value=12))
        else:
            setup.choose_question_count(count_choice)

        if st.button("Start", type="primary", disabled=not setup.can_start):
            try:
                rows = get_ucat_questions(sorted(setup.sections))
                session.start(select_questions(rows, setup.total_questions))
                st.rerun()
            except ValueError as e:
                st.warning(str(e))
            except Exception as e:
                st.error(f"Failed to load questions: {e}")
        st.stop()

    if session.state == IN_PROGRESS and session.check_timer():
        st.rerun()

    if session.state == IN_PROGRESS:
        q = session.current_question
        n = len(session.questions)
        col1, col2 = st.columns([3, 1])
        with col1:
            st.caption(f"Question {session.current_index + 1} / {n}")
            st.progress(session.current_index / n if n else 0)
        with col2:
            remaining = session.time_remaining()
            if remaining is not None:
                st.metric("Time left", format_seconds(remaining))

        if q.section:
            st.caption(SECTION_LABELS.get(q.section, q.section))
        st.write(q.prompt)
        option_labels = "ABCDE"
        chosen = st.radio(
            "Choose one:",
            range(len(q.options)),
            index=session.selected_answers.get(session.current_index),
            format_func=lambda i: f"{option_labels[i]}. {q.options[i]}",
            key=f"ucat_q_{session.current_index}",
        )
        if chosen is not None:
            session.select_answer(chosen)
        label = "Finish" if session.is_last_question else "Next question"
        if st.button(label, type="primary", disabled=chosen is None):
            session.next_question()
            st.rerun()
        st.stop()

    # Summary
    summary = session.summary()
    st.header("Session Summary")
    st.metric("Score", f"{summary['correct_count']} / {summary['total']} correct")
    for result in summary["results"]:
        text = f"Question {result['number']}: {'Correct' if result['is_correct'] else 'Incorrect'}"
        if result["is_correct"]:
            st.success(text)
        else:
            st.error(text)
    if st.button("Back to setup"):
        session.reset()
        st.rerun()

# ----- Submit Questions -----
elif page == "Submit Questions":
    st.header("Submit a Question")
    st.caption("Contribute new UCAT or MMI questions. Make sure the question text is clear and accurate.")
    mode = st.radio("Type", ["MMI", "UCAT"], horizontal=True, key="submit_mode")

    if mode == "MMI":
        question = st.text_area("Question", placeholder="Describe a time you had to deliver difficult feedback...", key="submit_mmi_q")
        answer = st.text_area("Model answer", placeholder="Start with context, then show your reasoning...", key="submit_mmi_a")
        if st.button("Submit MMI", type="primary"):
            try:
                row = build_mmi_row(question, answer)
                insert_mmi_question(row["question"], row["answer"])
                st.success("MMI question submitted.")
            except Exception as e:
                st.error(str(e))
    else:
        question = st.text_area("Question", placeholder="Which statement best supports the conclusion?", key="submit_ucat_q")
        answers, correct, qtype = _ucat_options_form("submit_ucat")
        if st.button("Submit UCAT", type="primary"):
            try:
                insert_ucat_question(build_ucat_row(question, answers, correct, qtype))
                st.success("UCAT question submitted.")
            except Exception as e:
                st.error(str(e))

# ----- Admin -----
elif page == "Admin":
    st.header("Question Upload Studio")
    st.caption("Add individual MMI or UCAT questions, or upload a CSV to bulk insert.")

    try:
        counts = get_question_counts()
        cols = st.columns(2 + len(UCAT_SECTIONS))
        cols[0].metric("MMI", counts["mmi"])
        cols[1].metric("UCAT", counts["ucat"])
        for col, section in zip(cols[2:], UCAT_SECTIONS):
            col.metric(section, counts.get(section, 0))
    except Exception as e:
        st.warning(f"Could not load question counts. Check .env (SUPABASE_URL, SUPABASE_KEY). {e}")

    tab_mmi, tab_ucat, tab_csv = st.tabs(["Single MMI Question", "Single UCAT Question", "Bulk CSV Upload"])
    with tab_mmi:
        question = st.text_area("Question", placeholder="Describe a time you had to manage conflict...", key="admin_mmi_q")
        answer = st.text_area("Answer", placeholder="Structure your response with...", key="admin_mmi_a")
        if st.button("Save MMI", type="primary"):
            try:
                row = build_mmi_row(question, answer)
                insert_mmi_question(row["question"], row["answer"])
                st.success("MMI question added.")
            except Exception as e:
                st.error(str(e))

    with tab_ucat:
        question = st.text_area("Question", placeholder="Which data set best supports the conclusion...", key="admin_ucat_q")
        answers, correct, qtype = _ucat_options_form("admin_ucat")
        if st.button("Save UCAT", type="primary"):
            try:
                insert_ucat_question(build_ucat_row(question, answers, correct, qtype))
                st.success("UCAT question added.")
            except Exception as e:
                st.error(str(e))

    with tab_csv:
        upload_type = st.selectbox("Upload type", ["mmi", "ucat"], format_func=str.upper)
        st.caption(f"Required headers for {upload_type.upper()}: {', '.join(REQUIRED_HEADERS[upload_type])}")
        uploaded = st.file_uploader("CSV file", type=["csv"])
        if uploaded is not None and st.button("Upload", type="primary"):
            try:
                batch = prepare_upload(uploaded.getvalue().decode("utf-8-sig"), upload_type)
                st.caption("Preview (first rows):")
                st.json(batch.preview)
                n = upload_batch(get_supabase(), batch)
                st.success(f"Uploaded {n} {upload_type.upper()} questions.")
            except CsvUploadError as e:
                st.error(str(e))
            except Exception as e:
                st.error(f"Upload failed. {e}")
