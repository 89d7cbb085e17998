import streamlit as st
import requests
import pandas as pd

from config import load_settings
from history_store import HistoryStore

settings = load_settings()
API_ANALYZE = settings.api_url.rstrip("/") + "/api/symptom-analyzer"

st.set_page_config(page_title="HealthMate Symptom Checker", page_icon="🏥", layout="centered")

st.title("🏥 HealthMate Symptom Checker")
st.info("This tool is for educational purposes only. It does not provide medical advice.")

symptoms = st.text_area("Describe your symptoms:", max_chars=500,
                        placeholder="e.g. mild fever and sore throat")
share_location = st.checkbox("Suggest nearby facilities")
lat = st.number_input("Latitude", value=28.6, format="%.4f", disabled=not share_location)
lng = st.number_input("Longitude", value=77.2, format="%.4f", disabled=not share_location)

st.sidebar.header("🔐 Session")
token = st.sidebar.text_input("Session token (optional)", type="password")
user_id = st.sidebar.text_input("User id for history")

if st.button("Analyze Symptoms"):
    if not symptoms.strip():
        st.warning("Please enter symptoms first.")
    else:
        body = {"symptoms": symptoms, "saveToHistory": bool(token)}
        if share_location:
            body["userLocation"] = {"lat": lat, "lng": lng}
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            resp = requests.post(API_ANALYZE, json=body, headers=headers, timeout=60)
            data = resp.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            st.error(f"Could not reach the backend: {e}")
            st.stop()

        if not resp.ok:
            st.error(data.get("error", "Analysis failed"))
            st.caption(data.get("details", ""))
        else:
            st.subheader(f"🔎 Severity: {data['severity']} · Urgency: {data['urgencyLevel']}")
            st.write(data["healthInsights"])
            for title, key in (("Possible causes", "possibleCauses"),
                               ("🩺 Recommended actions", "recommendedActions"),
                               ("🏠 Home remedies", "homeRemedies")):
                st.markdown(f"**{title}**")
                for item in data[key]:
                    st.write("•", item)
            st.warning(data["seekCare"])
            if data["hasLocationSuggestions"]:
                st.subheader("📍 Nearby facilities")
                st.dataframe(pd.DataFrame(data["nearbyFacilities"]))

st.sidebar.header("📊 Analysis History")
if user_id.strip():
    rows = HistoryStore(settings.history_db_path).recent(user_id.strip())
    if rows:
        df = pd.DataFrame([
            {"when": r["created_at"], "symptoms": r["symptoms"],
             "severity": r["analysis_result"].get("severity"),
             "urgency": r["analysis_result"].get("urgencyLevel")}
            for r in rows
        ])
        st.sidebar.dataframe(df)
    else:
        st.sidebar.info("No history yet.")
