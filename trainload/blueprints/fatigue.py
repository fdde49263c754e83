from flask import Blueprint, request, jsonify
from ..app import get_db_connection, release_db_connection, jwt_required, logger, owns_user_path
from ..fatigue import (
    get_user_fatigue,
    apply_workout_to_fatigue,
    classify_recovery_status,
    is_ready_to_train,
    fatigue_modifier,
)
from ..models import WorkoutLog

fatigue_bp = Blueprint('fatigue', __name__, url_prefix='/v1/users')


def _snapshot_response(snapshot):
    payload = snapshot.to_dict()
    payload['recovery_status'] = classify_recovery_status(snapshot.current_fatigue)
    payload['ready_to_train'] = is_ready_to_train(snapshot.current_fatigue)
    payload['load_modifier'] = round(fatigue_modifier(snapshot.current_fatigue), 4)
    return payload


@fatigue_bp.route('/<uuid:user_id>/fatigue', methods=['GET'])
@jwt_required
def get_fatigue(user_id):
    if not owns_user_path(user_id):
        logger.warning(f"Forbidden attempt to read fatigue of user {user_id}.")
        return jsonify(error="Forbidden. You can only view your own fatigue."), 403

    conn = None
    try:
        conn = get_db_connection()
        snapshot = get_user_fatigue(str(user_id), conn)
        return jsonify(_snapshot_response(snapshot)), 200
    finally:
        if conn:
            release_db_connection(conn)


@fatigue_bp.route('/<uuid:user_id>/fatigue/workouts', methods=['POST'])
@jwt_required
def log_workout_fatigue(user_id):
    """Applies a completed workout log to the user's fatigue snapshot."""
    if not owns_user_path(user_id):
        logger.warning(f"Forbidden attempt to update fatigue of user {user_id}.")
        return jsonify(error="Forbidden. You can only update your own fatigue."), 403

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify(error="Request body must be a JSON workout log."), 400
    try:
        workout_log = WorkoutLog.from_dict(data, user_id=str(user_id))
    except ValueError as e:
        return jsonify(error=f"Invalid workout log: {e}"), 400

    conn = None
    try:
        conn = get_db_connection()
        written = apply_workout_to_fatigue(str(user_id), workout_log, conn)
        if written is None:
            return jsonify(
                error="Fatigue was not updated. The snapshot is missing or was changed concurrently; reload and retry."
            ), 409
        return jsonify(_snapshot_response(written)), 200
    finally:
        if conn:
            release_db_connection(conn)
