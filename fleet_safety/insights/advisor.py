"""
Narrative safety insights for fleet managers.
Gemini when an API key is configured, template narrative otherwise.
Nothing here feeds back into scoring.
"""
import json
import logging

import google.generativeai as genai

from fleet_safety.config import settings

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a senior fleet safety consultant. Public safety comes first: "
    "focus on accident prevention, driver protection and carbon reduction, "
    "not on revenue."
)

REQUEST_TIMEOUT_SECONDS = 30


def generate_insight(summary: dict) -> dict:
    """
    Returns {"text": str, "source": "gemini" | "template"}.
    Never raises: any provider failure falls back to the template.
    """
    api_key = settings.gemini_api_key
    if not api_key:
        return {"text": _fallback_insight(summary), "source": "template"}

    try:
        return {"text": _call_gemini(_build_prompt(summary), api_key), "source": "gemini"}
    except Exception as e:
        logger.warning("Gemini insight generation failed, using template: %s", e)
        return {"text": _fallback_insight(summary), "source": "template"}


def _build_prompt(summary: dict) -> str:
    return f"""Fleet safety management report for executives of public agencies and transport operators.

ANALYSIS SUMMARY:
{json.dumps(summary, ensure_ascii=False, indent=2)}

INSTRUCTIONS:
1. Treat safety as a value that is never traded off.
2. Focus on accident prevention, driver protection, contribution to public safety and carbon neutrality.
3. Propose immediate coaching for high-risk (Red) drivers and systemic countermeasures.
4. Reference the actual numbers above. Professional tone, 3-4 paragraphs."""


def _call_gemini(prompt: str, api_key: str) -> str:
    genai.configure(api_key=api_key)
    model = genai.GenerativeModel(settings.gemini_model, system_instruction=SYSTEM_INSTRUCTION)
    response = model.generate_content(
        prompt,
        generation_config=genai.GenerationConfig(temperature=settings.insight_temperature),
        request_options={"timeout": REQUEST_TIMEOUT_SECONDS},
    )
    text = (response.text or "").strip()
    if not text:
        raise ValueError("empty response")
    return text


def _fallback_insight(summary: dict) -> str:
    """Deterministic narrative built from the summary numbers."""
    total = summary.get("total_vehicles", 0)
    if total == 0:
        return "No driving records were analyzed. Upload a telemetry file to generate a safety report."

    dist = summary.get("risk_distribution", {})
    red = dist.get("Red", 0)
    yellow = dist.get("Yellow", 0)
    green = dist.get("Green", 0)
    econ = summary.get("economic_impact", {})
    top = summary.get("top_behaviors", [])

    paragraphs = [
        f"{total} vehicles were analyzed: {red} high-risk (Red), {yellow} caution (Yellow) "
        f"and {green} good (Green).",
    ]
    if red > 0:
        paragraphs.append(
            f"The {red} Red drivers should receive one-to-one safety coaching immediately, "
            "followed by a re-assessment on the next reporting cycle."
        )
    else:
        paragraphs.append("No driver is currently in the high-risk tier. Keep the monitoring cadence.")

    if top:
        paragraphs.append("Most frequent behaviors: " + ", ".join(top) + ".")

    paragraphs.append(
        f"Correcting these behaviors is estimated to save {econ.get('fuel_saved_liters', 0):,.1f} L of fuel "
        f"({econ.get('cost_saved_krw', 0):,.0f} KRW) and {econ.get('co2_reduced_kg', 0):,.1f} kg of CO2."
    )
    return "\n\n".join(paragraphs)
