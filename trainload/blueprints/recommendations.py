import math

from flask import Blueprint, request, jsonify
from ..app import get_db_connection, release_db_connection, jwt_required, logger, owns_user_path
from ..ideal_weight import calculate_weight_recommendation
from ..alternatives import (
    ExerciseProfile,
    get_exercise_profile,
    get_alternatives,
    recommend_alternative_rir,
)
from ..constants import MIN_RECOMMENDED_RIR, MAX_RECOMMENDED_RIR

recommendations_bp = Blueprint('recommendations', __name__)


def _parse_rir(value):
    """Integer RIR in 0-4 (accepts numeric strings). Raises ValueError otherwise."""
    if isinstance(value, bool):
        raise ValueError("target_rir must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError("target_rir must be an integer")
    rir = int(value)
    if not MIN_RECOMMENDED_RIR <= rir <= MAX_RECOMMENDED_RIR:
        raise ValueError(f"target_rir must be between {MIN_RECOMMENDED_RIR} and {MAX_RECOMMENDED_RIR}")
    return rir


def _resolve_profile(value, label):
    """A catalog id or an inline profile object."""
    if isinstance(value, str):
        profile = get_exercise_profile(value)
        if profile is None:
            raise LookupError(f"Unknown {label} exercise '{value}'.")
        return profile
    if isinstance(value, dict):
        return ExerciseProfile.from_dict(value)
    raise ValueError(f"'{label}' must be an exercise id or profile object.")


@recommendations_bp.route('/v1/users/<uuid:user_id>/exercises/<exercise_id>/ideal-weight', methods=['GET'])
@jwt_required
def get_ideal_weight(user_id, exercise_id):
    if not owns_user_path(user_id):
        logger.warning(f"Forbidden attempt to get weight recommendation for user {user_id}.")
        return jsonify(error="Forbidden. You can only get recommendations for your own profile."), 403

    try:
        target_reps = int(request.args.get('reps', ''))
        target_rir = float(request.args.get('rir', ''))
    except ValueError:
        return jsonify(error="Query parameters 'reps' (integer) and 'rir' (number) are required."), 400
    if not math.isfinite(target_rir):
        return jsonify(error="Query parameter 'rir' must be a finite number."), 400

    conn = None
    try:
        conn = get_db_connection()
        recommendation = calculate_weight_recommendation(str(user_id), exercise_id, target_reps, target_rir, conn)
    finally:
        if conn:
            release_db_connection(conn)

    if recommendation is None:
        return jsonify(error="'reps' must be at least 1 and 'rir' cannot be negative."), 400

    return jsonify({
        "user_id": str(user_id),
        "exercise_id": exercise_id,
        "target_reps": target_reps,
        "target_rir": target_rir,
        **recommendation,
    }), 200


@recommendations_bp.route('/v1/exercises/<exercise_id>/alternatives', methods=['GET'])
@jwt_required
def list_alternatives(exercise_id):
    target = get_exercise_profile(exercise_id)
    if target is None:
        return jsonify(error=f"Unknown exercise '{exercise_id}'."), 404

    target_rir = None
    if 'rir' in request.args:
        try:
            target_rir = _parse_rir(request.args['rir'])
        except ValueError as e:
            return jsonify(error=str(e)), 400

    alternatives = []
    for alternative in get_alternatives(exercise_id):
        entry = alternative.to_dict()
        if target_rir is not None:
            entry['recommended_rir'] = recommend_alternative_rir(target, alternative, target_rir)
        alternatives.append(entry)

    return jsonify({"exercise": target.to_dict(), "target_rir": target_rir, "alternatives": alternatives}), 200


@recommendations_bp.route('/v1/exercises/alternative-rir', methods=['POST'])
@jwt_required
def alternative_rir():
    data = request.get_json(silent=True) or {}
    try:
        target = _resolve_profile(data.get('target'), 'target')
        alternative = _resolve_profile(data.get('alternative'), 'alternative')
        target_rir = _parse_rir(data.get('target_rir'))
    except LookupError as e:
        return jsonify(error=str(e)), 404
    except (TypeError, ValueError) as e:
        return jsonify(error=str(e)), 400

    recommended = recommend_alternative_rir(target, alternative, target_rir)
    logger.info(f"Alternative RIR: {target.id}@{target_rir} -> {alternative.id}@{recommended}")
    return jsonify({
        "target_exercise_id": target.id,
        "alternative_exercise_id": alternative.id,
        "target_rir": target_rir,
        "recommended_rir": recommended,
    }), 200
