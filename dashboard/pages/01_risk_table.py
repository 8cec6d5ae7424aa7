"""Per-driver risk table and report export."""
import streamlit as st
import httpx
import pandas as pd
import os

API_URL = os.getenv("API_URL", "http://localhost:8000")
LEVEL_EMOJI = {"Red": "🔴", "Yellow": "🟡", "Green": "🟢"}

st.set_page_config(page_title="Risk Table", page_icon="📋", layout="wide")
st.title("📋 Driver Risk Table")

analysis = st.session_state.get("analysis")
if not analysis:
    st.warning("No analysis yet. Upload a telemetry file on the main page.")
    st.stop()

risks = pd.DataFrame(analysis.get("risks", []))
if risks.empty:
    st.info("The uploaded file has no driver rows.")
    st.stop()

levels = st.multiselect("Risk levels", ["Red", "Yellow", "Green"], default=["Red", "Yellow", "Green"])
view = risks[risks["risk_level"].isin(levels)].copy()
view["risk_level"] = view["risk_level"].map(lambda lvl: f"{LEVEL_EMOJI.get(lvl, '')} {lvl}")
view["total_score"] = view["total_score"].round(3)
view["rank_percent"] = view["rank_percent"].round(1)

st.dataframe(view.rename(columns={
    "car_number": "Vehicle", "driver_name": "Driver", "total_score": "Risk Score",
    "risk_level": "Level", "rank_percent": "Rank %",
}), use_container_width=True, hide_index=True)

upload = st.session_state.get("upload")
if upload:
    name, content = upload
    if st.button("Prepare XLSX report"):
        try:
            response = httpx.post(f"{API_URL}/api/analysis/export", files={"file": (name, content)},
                                  params={"mask_names": st.session_state.get("mask_names", True)}, timeout=60)
            response.raise_for_status()
            st.download_button("⬇ Download report", response.content, file_name="Safety_Report.xlsx",
                               mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
        except Exception as e:
            st.error(f"Export failed: {e}")
