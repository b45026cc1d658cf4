import logging
import os

from flask import Flask, jsonify, request

from cashout_sim.amortization import build_schedule
from cashout_sim.data_models import MAX_TERM_MONTHS
from cashout_sim.engine import compute_simulation_results
from cashout_sim.risks import build_risk_flags
from cashout_sim.sanitize import sanitize_simulation
from cashout_sim.summary import summarize
from cashout_sim.utils import to_decimal

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.json.sort_keys = False
app.config["MAX_CONTENT_LENGTH"] = int(os.environ.get("CASHOUT_SIM_MAX_CONTENT_LENGTH", str(2 * 1024 * 1024)))


class ApiError(Exception):
    pass


@app.errorhandler(ApiError)
def _bad_request(exc):
    return jsonify({"error": str(exc)}), 400


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ApiError("Request body must be a JSON object")
    return payload


def _simulation_payload(payload: dict) -> dict:
    # accept either a bare simulation or {"simulation": {...}}
    inner = payload.get("simulation")
    return inner if isinstance(inner, dict) else payload


@app.get("/health")
def health():
    return jsonify({"status": "ok"})


@app.post("/api/simulate")
def simulate():
    simulation = sanitize_simulation(_simulation_payload(_json_body()))
    results = compute_simulation_results(simulation)
    logger.debug("Simulated %d months for %r", len(results.timeline), simulation.name)
    data = results.to_dict()
    data["summary"] = summarize(simulation, results).to_dict()
    return jsonify(data)


@app.post("/api/schedule")
def schedule():
    payload = _json_body()
    try:
        months = int(payload.get("months", 0))
    except (TypeError, ValueError, OverflowError):
        raise ApiError("months must be an integer")
    if months <= 0:
        raise ApiError("Term must be positive")
    if months > MAX_TERM_MONTHS:
        raise ApiError(f"Term must not exceed {MAX_TERM_MONTHS} months")
    system = str(payload.get("system", "SAC")).upper()
    entries = build_schedule(
        system,
        to_decimal(payload.get("principal")),
        to_decimal(payload.get("annualRate")),
        months,
    )
    return jsonify({"system": "PRICE" if system == "PRICE" else "SAC", "schedule": [e.to_dict() for e in entries]})


@app.post("/api/risks")
def risks():
    payload = _json_body()
    simulation = sanitize_simulation(_simulation_payload(payload))
    project_tolerance = payload.get("projectToleranceDays")
    try:
        project_tolerance = int(project_tolerance) if project_tolerance is not None else None
    except (TypeError, ValueError, OverflowError):
        raise ApiError("projectToleranceDays must be an integer")
    flags = build_risk_flags(simulation, project_tolerance)
    return jsonify({"flags": [flag.to_dict() for flag in flags]})


if __name__ == "__main__":
    print("Starting cash-out simulator API...")
    app.run(debug=os.environ.get("FLASK_DEBUG") == "1")
