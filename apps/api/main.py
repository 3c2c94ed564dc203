from contextlib import asynccontextmanager
from typing import Any, Literal, Optional
import logging, time

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel

from penalty.config import META_PATH, MODEL_PATH
from penalty.errors import InputValidationError, NotReadyError, PredictionError
from penalty.pipeline import PredictionContext, PredictionPipeline, load_context
from penalty.utils import setup_logging

logger = logging.getLogger(__name__)

# ---- Input schema (numerics pass through untouched; the validator parses them,
# so JSON true/false is rejected instead of coerced to 1.0/0.0) ----
class PenaltyInputs(BaseModel):
    velocity: Any = None
    angle: Any = None
    distance: Any = None
    pressure: Literal["Alta", "Media", "Baja"]
    foot: Literal["Derecho", "Izquierdo"]

    def as_form_values(self) -> dict:
        return {
            "velocity": self.velocity,
            "angle": self.angle,
            "distance": self.distance,
            "pressure_level": self.pressure,
            "dominant_foot": self.foot,
        }

class PredictionOut(BaseModel):
    label: str
    probability: float
    message: str
    latency_ms: float


def create_app(context: Optional[PredictionContext] = None) -> FastAPI:
    """Build the API. Without a context, metadata + model are loaded at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging("api")
        if context is None:
            app.state.context = load_context(META_PATH, MODEL_PATH)
        else:
            app.state.context = context
        yield

    app = FastAPI(title="Penalty Goal Predictor API", version="1.0.0", lifespan=lifespan)

    @app.get("/health")
    def health(request: Request):
        return {"status": "ok", **request.app.state.context.status()}

    @app.post("/predict", response_model=PredictionOut)
    def predict(x: PenaltyInputs, request: Request):
        t0 = time.time()
        pipeline = PredictionPipeline(request.app.state.context)
        try:
            result = pipeline.predict(x.as_form_values())
        except NotReadyError as e:
            raise HTTPException(status_code=503, detail=str(e))
        except InputValidationError as e:
            raise HTTPException(
                status_code=422,
                detail={"field": e.result.field, "message": e.result.message},
            )
        except PredictionError as e:
            logger.error("Inference failed: %s", e)
            raise HTTPException(status_code=400, detail=f"inference_error: {e}")

        return {
            "label": result.label,
            "probability": result.probability,
            "message": result.render(),
            "latency_ms": round((time.time() - t0) * 1000, 2),
        }

    return app


app = create_app()
