# mock_botframework.py
# Simple mock of the Bot Framework token endpoint, the Bot Connector reply
# endpoint and the sensor API for local testing.

import os
from datetime import datetime, timezone

from flask import Flask, jsonify, request

app = Flask(__name__)

MOCK_TOKEN = "MOCKTOKEN"

# Replies failing with 401 before the mock starts accepting them, to exercise the retry path.
FAIL_FIRST_REPLIES = int(os.environ.get("MOCK_FAIL_FIRST_REPLIES", "0"))

STATE = {"replies": [], "failures": 0, "tokens_issued": 0}

# device/location id -> reading
READINGS = {
    "b764034949e0c8643f09689666669b8c": {
        "name": "Balcony",
        "sensors": [
            {"type": "temperature", "value": 21.2345},
            {"type": "absolutepressure", "value": 1012.3},
            {"type": "seaLevelPressure", "value": 1015.6},
        ],
    },
    "b8f82803b0d69415ef92a36519fb1d81": {
        "name": "Living room",
        "sensors": [
            {"type": "temperature", "value": 22.005},
            {"type": "absolutepressure", "value": 1011.96},
            {"type": "seaLevelPressure", "value": 1015.2},
        ],
    },
    "home": {
        "name": "Home",
        "sensors": [
            {"type": "temperature", "value": 19.5},
            {"type": "absolutepressure", "value": 1009.0},
            {"type": "seaLevelPressure", "value": 1013.25},
        ],
    },
}


def _reading(reading_id):
    data = READINGS.get(reading_id)
    if data is None:
        return None
    return dict(data, timestamp=datetime.now(timezone.utc).isoformat())


@app.route("/botframework.com/oauth2/v2.0/token", methods=["POST"])
def token():
    if request.form.get("grant_type") != "client_credentials" or not request.form.get("client_id"):
        return jsonify({"error": "invalid_request"}), 400
    STATE["tokens_issued"] += 1
    return jsonify({"token_type": "Bearer", "expires_in": 3600, "access_token": MOCK_TOKEN})


@app.route("/v3/conversations/<conversation_id>/activities/<activity_id>", methods=["POST"])
def reply(conversation_id, activity_id):
    if request.headers.get("Authorization") != "Bearer " + MOCK_TOKEN:
        return jsonify({"error": {"code": "Unauthorized"}}), 401
    if STATE["failures"] < FAIL_FIRST_REPLIES:
        STATE["failures"] += 1
        return jsonify({"error": {"code": "ServiceError"}}), 500
    activity = request.get_json(force=True)
    STATE["replies"].append({"conversation": conversation_id, "replyTo": activity_id, "activity": activity})
    return jsonify({"id": "reply-%d" % len(STATE["replies"])})


@app.route("/_state")
def state():
    return jsonify(STATE)


@app.route("/sensors/data/<device_id>/current")
def device_current(device_id):
    reading = _reading(device_id)
    if reading is None:
        return jsonify({"error": "device not found"}), 404
    return jsonify(reading)


@app.route("/sensors/locations/<location>/latest")
def location_latest(location):
    reading = _reading(location)
    if reading is None:
        return jsonify({"error": "location not found"}), 404
    return jsonify([reading])


if __name__ == "__main__":
    # Runs on http://localhost:8080
    app.run(host="0.0.0.0", port=8080, debug=True)
