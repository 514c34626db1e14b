"""
SafeTrip — Accident Prediction API
POST /api/predict-accident

Body (camelCase, every field optional):
    {"speedKmh": 95, "weatherCondition": "Rain", "timeHour": 22,
     "trafficLevel": "heavy", "incidentHistoryCount": 2}

Always answers 200: missing or malformed fields fall back to defaults.
"""

import logging
from typing import Any

from fastapi import APIRouter, Request

from safetrip.engine.normalize import normalize_risk_input
from safetrip.engine.risk_scorer import predict_risk
from safetrip.models.schemas import RiskPredictionResponse

logger = logging.getLogger("safetrip.api.predict")

router = APIRouter(prefix="/api", tags=["Prediction"])


async def _read_json(request: Request) -> Any:
    body = await request.body()
    if not body:
        return {}
    try:
        return await request.json()
    except ValueError:
        logger.warning("Prediction request with unparseable body; using defaults")
        return {}


@router.post("/predict-accident", response_model=RiskPredictionResponse)
async def predict_accident(request: Request):
    payload = await _read_json(request)
    result = predict_risk(normalize_risk_input(payload))

    logger.info(
        f"AI Prediction: Risk={result.probability}% | Status={result.level.value} "
        f"| Factor={result.headline_factor or 'None'}"
    )
    return result.to_dict()
