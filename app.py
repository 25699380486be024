# app.py
import os
import logging
import streamlit as st
import pandas as pd
from dotenv import load_dotenv

from main import build_pipeline, config_from_env, parse_keywords, run_keyword
from tools import lead_stats

import sys
import asyncio

if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())


def run_pipeline(keywords, max_results, browser):
    extractor, url_filter = build_pipeline(config_from_env())
    leads = []
    for keyword in keywords:
        leads.extend(run_keyword(extractor, url_filter, keyword, max_results, browser))
    return leads


# ----------------- Streamlit UI -----------------
def main():
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    st.title("🔍 Lead Scraper")

    st.sidebar.header("Configuration")
    extractor, url_filter = build_pipeline(config_from_env())
    for label, ok in (("AI URL Filter", url_filter.is_available()), ("AI Lead Extractor", extractor.is_available())):
        st.sidebar.markdown(f"{label}: {'✅ Available' if ok else '❌ Not Available'}")

    keyword_input = st.sidebar.text_input("Keywords (comma-separated)", value=os.getenv("KEYWORDS", ""))
    max_results = st.sidebar.number_input("Results per keyword", min_value=1, max_value=100,
                                          value=int(os.getenv("MAX_RESULTS", "10")))
    browser = st.sidebar.selectbox("Browser", ["chromium", "firefox", "webkit"], index=0)

    if st.button("🚀 Run Scraper"):
        keywords = parse_keywords(keyword_input)
        if not keywords:
            st.error("❌ No valid keywords found.")
            st.stop()

        with st.spinner("Searching, scraping and extracting..."):
            try:
                leads = run_pipeline(keywords, max_results, browser)
            except Exception as e:
                st.error(f"❌ Error: {str(e)}")
                st.stop()

        st.success(f"✅ Done. {len(leads)} leads found")
        st.json(lead_stats(leads))
        if leads:
            df = pd.DataFrame([lead.to_row() for lead in leads])
            st.dataframe(df.head(50))
            st.download_button("⬇️ Download CSV", df.to_csv(index=False), file_name="leads.csv")


if __name__ == "__main__":
    main()
