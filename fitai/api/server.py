"""
FitAI HTTP API - Flask backend.

Endpoints:
- POST /sendPushNotification: templated push to a user's devices
- POST /registerToken: persist an FCM token for the caller
- POST /notificationPreferences: save reminder settings for the caller
- POST /linkCoach: link the caller to a coach by code
- POST /registerTrainer: register the caller as a coach
- POST /exportUserData: GDPR export for the caller
- POST /deleteUserAccount: GDPR erasure for the caller

Callers authenticate with a Firebase ID token (Authorization: Bearer ...).

Run locally:
    python -m fitai.api.server
"""

from __future__ import annotations

import logging
import os

from firebase_admin import auth
from flask import Flask, jsonify, request
from flask_cors import CORS

from fitai.firestore_client import get_firebase_app
from fitai.gdpr import ConfirmationRequiredError, GdprService
from fitai.notifications.errors import PersistenceError
from fitai.notifications.sender import PushSender
from fitai.notifications.token_store import FirestoreTokenStore
from fitai.trainers.rewards import InvalidCoachCodeError, TrainerAlreadyExistsError, TrainerService
from fitai.users.settings import SettingsError, SettingsValidationError, update_notification_preferences

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)


def verify_id_token(id_token: str) -> dict:
    """Verify a Firebase ID token and return its claims."""
    return auth.verify_id_token(id_token, app=get_firebase_app())


def get_push_sender() -> PushSender:
    return PushSender()


def get_token_store() -> FirestoreTokenStore:
    return FirestoreTokenStore()


def get_gdpr_service() -> GdprService:
    return GdprService()


def get_trainer_service() -> TrainerService:
    return TrainerService()


class AuthError(Exception):
    """Raised when the caller cannot be authenticated."""
    pass


def _authenticated_user_id() -> str:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        raise AuthError("Unauthorized")
    try:
        uid = verify_id_token(header.split("Bearer ", 1)[1]).get("uid")
    except Exception as e:
        logger.warning("Invalid ID token: %s", e)
        raise AuthError("Invalid token") from e
    if not uid:
        raise AuthError("Invalid token")
    return uid


@app.errorhandler(AuthError)
def unauthorized(error):
    return jsonify({"error": str(error)}), 401


@app.errorhandler(405)
def method_not_allowed(_error):
    return jsonify({"error": "Method not allowed"}), 405


@app.route("/health")
def health():
    return jsonify({"status": "ok"})


@app.route("/sendPushNotification", methods=["POST"])
def send_push_notification():
    _authenticated_user_id()

    body = request.get_json(silent=True) or {}
    user_id = body.get("userId")
    template_id = body.get("templateId")
    if not user_id or not template_id:
        return jsonify({"error": "userId and templateId are required"}), 400

    try:
        result = get_push_sender().send_notification_to_user(
            user_id, template_id, body.get("customData") or {}
        )
    except Exception as e:
        logger.error("[sendPushNotification] Error: %s", e)
        return jsonify({"error": str(e)}), 500
    return jsonify(result), (200 if result.get("success") else 400)


@app.route("/registerToken", methods=["POST"])
def register_token():
    user_id = _authenticated_user_id()

    body = request.get_json(silent=True) or {}
    token = body.get("token")
    if not token:
        return jsonify({"error": "token is required"}), 400

    try:
        get_token_store().save_token(
            user_id,
            token,
            platform=body.get("platform") or "web",
            user_agent=body.get("userAgent") or request.headers.get("User-Agent", ""),
        )
    except PersistenceError as e:
        logger.error("[registerToken] %s", e)
        return jsonify({"success": False, "error": "Could not save token"}), 500
    return jsonify({"success": True})


@app.route("/notificationPreferences", methods=["POST"])
def save_notification_preferences():
    user_id = _authenticated_user_id()

    body = request.get_json(silent=True) or {}
    try:
        prefs = update_notification_preferences(
            user_id,
            workout_reminder=bool(body.get("workoutReminder")),
            reminder_hour_utc=body.get("reminderHourUTC"),
            reminder_days=body.get("reminderDays") or [],
        )
    except SettingsValidationError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    except SettingsError as e:
        return jsonify({"success": False, "error": str(e)}), 500
    return jsonify({"success": True, "notificationPreferences": prefs.to_dict()})


@app.route("/linkCoach", methods=["POST"])
def link_coach():
    user_id = _authenticated_user_id()

    body = request.get_json(silent=True) or {}
    coach_code = body.get("coachCode")
    if not coach_code:
        return jsonify({"error": "coachCode is required"}), 400

    try:
        result = get_trainer_service().link_student_to_coach(user_id, coach_code)
    except InvalidCoachCodeError as e:
        return jsonify({"success": False, "error": str(e)}), 404
    except Exception as e:
        logger.error("[linkCoach] Error: %s", e)
        return jsonify({"success": False, "error": "Error al vincular coach"}), 500
    return jsonify(result)


@app.route("/registerTrainer", methods=["POST"])
def register_trainer():
    user_id = _authenticated_user_id()

    body = request.get_json(silent=True) or {}
    try:
        result = get_trainer_service().register_as_trainer(user_id, body)
    except TrainerAlreadyExistsError as e:
        return jsonify({"success": False, "error": str(e)}), 409
    except Exception as e:
        logger.error("[registerTrainer] Error: %s", e)
        return jsonify({"success": False, "error": "Error al registrar coach"}), 500
    return jsonify({"success": True, "coachCode": result["coachCode"]})


@app.route("/exportUserData", methods=["POST"])
def export_user_data():
    user_id = _authenticated_user_id()

    try:
        data = get_gdpr_service().export_user_data(user_id)
    except Exception as e:
        logger.error("GDPR Export Error: %s", e)
        return jsonify({"error": "Error al exportar datos"}), 500
    return jsonify({
        "success": True,
        "message": "Datos exportados correctamente",
        "data": data,
    })


@app.route("/deleteUserAccount", methods=["POST"])
def delete_user_account():
    user_id = _authenticated_user_id()

    body = request.get_json(silent=True) or {}
    try:
        deleted = get_gdpr_service().delete_user_account(user_id, body.get("confirmDelete"))
    except ConfirmationRequiredError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        logger.error("GDPR Delete Error: %s", e)
        return jsonify({"error": "Error al eliminar cuenta"}), 500
    return jsonify({
        "success": True,
        "message": "Cuenta eliminada correctamente",
        "documentsDeleted": deleted,
    })


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", "8080")), debug=False)
