"""Fleet Safety Dashboard - Main App."""
import streamlit as st
import httpx
import plotly.express as px
import pandas as pd
import os

st.set_page_config(
    page_title="Fleet Safety - Risk Intelligence",
    page_icon="🚚",
    layout="wide",
    initial_sidebar_state="expanded",
)

API_URL = os.getenv("API_URL", "http://localhost:8000")
LEVEL_COLORS = {"Red": "#e11d48", "Yellow": "#f59e0b", "Green": "#10b981"}


def post_file(endpoint: str, name: str, content: bytes, params: dict):
    """POST a spreadsheet to the FastAPI backend."""
    try:
        response = httpx.post(f"{API_URL}{endpoint}", files={"file": (name, content)},
                              params=params, timeout=60)
        if response.status_code != 200:
            return {"error": response.json().get("detail", response.text)}
        return response.json()
    except Exception as e:
        return {"error": str(e)}


def get_api(endpoint: str, params: dict = None):
    """Helper to call the FastAPI backend."""
    try:
        response = httpx.get(f"{API_URL}{endpoint}", params=params or {}, timeout=10)
        return response.json()
    except Exception as e:
        return {"error": str(e)}


# Sidebar
st.sidebar.title("🚚 Fleet Safety")
st.sidebar.markdown("**Driver Risk Intelligence**")
st.sidebar.divider()

uploaded = st.sidebar.file_uploader("Telemetry export", type=["xlsx", "xls", "csv"])
fuel_price = st.sidebar.number_input("Fuel price (KRW / L)", min_value=0.0, value=1650.0, step=10.0)
mask_names = st.sidebar.checkbox("Mask driver names", value=True)

if uploaded is not None and st.sidebar.button("Analyze", use_container_width=True):
    content = uploaded.getvalue()
    result = post_file("/api/analysis/upload", uploaded.name, content,
                       {"fuel_price": fuel_price, "mask_names": mask_names})
    if "error" in result:
        st.sidebar.error(result["error"])
    else:
        st.session_state["analysis"] = result
        st.session_state["upload"] = (uploaded.name, content)
        st.session_state["mask_names"] = mask_names
        st.session_state.pop("insight", None)

if st.sidebar.button("Load demo fleet", use_container_width=True):
    result = get_api("/api/analysis/demo", {"fuel_price": fuel_price, "mask_names": mask_names})
    if "error" in result:
        st.sidebar.error(result["error"])
    else:
        st.session_state["analysis"] = result
        st.session_state.pop("upload", None)
        st.session_state.pop("insight", None)

st.sidebar.divider()
st.sidebar.caption("Scores are weighted incidents per 100 km")

# Main content
st.title("🚚 Fleet Safety Risk Intelligence")
analysis = st.session_state.get("analysis")
if not analysis:
    st.info("👈 Upload a telemetry spreadsheet in the sidebar to classify drivers.")
    st.stop()

econ = analysis.get("economic_impact", {})
dist = analysis.get("risk_distribution", {})

col1, col2, col3, col4 = st.columns(4)
with col1:
    st.metric("Vehicles", f"{analysis.get('total_vehicles', 0):,}")
with col2:
    st.metric("High Risk (Red)", dist.get("Red", 0), delta_color="inverse")
with col3:
    st.metric("Cost Saving Potential", f"₩{econ.get('cost_saved_krw', 0):,.0f}")
with col4:
    st.metric("CO2 Reduction", f"{econ.get('co2_reduced_kg', 0):,.0f} kg")

st.divider()

left, right = st.columns(2)
with left:
    st.subheader("Risk Level Distribution")
    df_dist = pd.DataFrame([{"level": k, "count": v} for k, v in dist.items()])
    if not df_dist.empty:
        fig = px.pie(df_dist, names="level", values="count", color="level",
                     color_discrete_map=LEVEL_COLORS, hole=0.4)
        fig.update_layout(height=380)
        st.plotly_chart(fig, use_container_width=True)

with right:
    st.subheader("Behavior Frequency (per 100 km)")
    df_beh = pd.DataFrame(analysis.get("behaviors", []))
    if not df_beh.empty:
        fig = px.bar(df_beh, x="label", y="avg_per_100km", text="total_count",
                     labels={"label": "Behavior", "avg_per_100km": "Per 100 km"},
                     color_discrete_sequence=["#6366f1"])
        fig.update_layout(height=380)
        st.plotly_chart(fig, use_container_width=True)

st.subheader("Executive Summary")
if "upload" not in st.session_state:
    st.caption("Upload a telemetry file to generate a narrative summary.")
elif st.button("Generate narrative"):
    name, content = st.session_state["upload"]
    with st.spinner("Writing summary..."):
        st.session_state["insight"] = post_file("/api/analysis/insights/upload", name, content,
                                                {"fuel_price": fuel_price})
insight = st.session_state.get("insight")
if insight:
    if "error" in insight:
        st.error(insight["error"])
    else:
        st.markdown(insight.get("text", ""))
        st.caption(f"Source: {insight.get('source', 'unknown')}")

st.divider()
st.info("👈 Open the Risk Table page for the per-driver breakdown and XLSX export.")
