from flask import Blueprint, jsonify
from redis.exceptions import RedisError
from ..app import logger, limiter

system_bp = Blueprint('system', __name__, url_prefix='/v1/system')


@system_bp.route('/trigger-fatigue-recovery', methods=['POST'])
@limiter.limit("5 per day") # Very strict limit for a system-level trigger
def trigger_fatigue_recovery():
    # Meant to be called by the scheduler inside the private network; not exposed publicly.
    logger.info("Received request to trigger nightly fatigue recovery.")
    from .. import tasks  # Imported here to avoid circular dependency on startup
    try:
        job = tasks.enqueue_nightly_fatigue_recovery()
    except RedisError as e:
        logger.error(f"Failed to enqueue fatigue recovery: {e}", exc_info=True)
        return jsonify(error="Job queue unavailable"), 503
    logger.info(f"Enqueued fatigue recovery job {job.id}")
    return jsonify({"message": "Fatigue recovery enqueued", "job_id": job.id}), 200
