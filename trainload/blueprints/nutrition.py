from flask import Blueprint, request, jsonify
from ..app import jwt_required, logger
from ..nutrition import generate_nutrition_plan

nutrition_bp = Blueprint('nutrition', __name__, url_prefix='/v1/nutrition')

REQUIRED_FIELDS = ('weight_kg', 'height_cm', 'age', 'activity_level')


@nutrition_bp.route('/plan', methods=['POST'])
@jwt_required
def nutrition_plan():
    data = request.get_json(silent=True) or {}
    missing = [f for f in REQUIRED_FIELDS if data.get(f) is None]
    if missing:
        return jsonify(error=f"Missing required fields: {', '.join(missing)}"), 400

    try:
        plan = generate_nutrition_plan(
            weight_kg=data['weight_kg'],
            height_cm=data['height_cm'],
            age=data['age'],
            sex=data.get('sex', 'unknown'),
            activity_level=data['activity_level'],
            goal=data.get('goal', 'maintain'),
            diet_type=data.get('diet_type', 'balanced'),
        )
    except ValueError as e:
        return jsonify(error=str(e)), 400

    logger.info(f"Nutrition plan: goal={plan['goal']} diet={plan['diet_type']} calories={plan['calories_target']}")
    return jsonify(plan), 200
