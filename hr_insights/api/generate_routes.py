# hr_insights/api/generate_routes.py

import io
from datetime import date
from typing import Optional

import pandas as pd
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, Field
from sqlmodel import Session

from hr_insights.config import PRESETS, get_preset
from hr_insights.database import get_session
from hr_insights.exceptions import HRInsightsError, SourceDataError
from hr_insights.generation.pipeline import run_generation
from hr_insights.source import ingest_source

router = APIRouter(prefix="/api/generate", tags=["Generation"])


class GenerationRequest(BaseModel):
    preset: str = "default"
    seed: Optional[int] = None
    as_of: Optional[date] = None
    review_window_months: Optional[int] = Field(default=None, ge=0, le=120)
    benefit_active_probability: Optional[float] = Field(default=None, ge=0.0, le=1.0)


def _build_config(request: GenerationRequest):
    if request.preset not in PRESETS:
        raise HTTPException(status_code=400, detail=f"Unknown preset: {request.preset}")
    overrides = request.model_dump(exclude={"preset"}, exclude_none=True)
    try:
        return get_preset(request.preset, **overrides)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/presets")
def list_presets():
    return {"presets": list(PRESETS.keys())}


@router.post("/run")
def run_generation_endpoint(request: GenerationRequest, session: Session = Depends(get_session)):
    config = _build_config(request)
    try:
        return run_generation(session, config)
    except HRInsightsError as e:
        raise HTTPException(status_code=500, detail=f"Generation failed: {str(e)}")


@router.post("/dataset")
async def upload_dataset(file: UploadFile = File(...), seed: Optional[int] = None,
                         session: Session = Depends(get_session)):
    # 1. Validate file provided and type
    if not file or not file.filename:
        raise HTTPException(status_code=400, detail="No file provided. Please select a CSV file to upload.")
    if not file.filename.endswith(".csv"):
        raise HTTPException(status_code=400, detail="Only CSV files are accepted.")

    # 2. Read CSV
    contents = await file.read()
    try:
        df = pd.read_csv(io.BytesIO(contents))
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Could not read CSV: {str(e)}")

    # 3. Load source table
    try:
        rows = ingest_source(session, df)
    except SourceDataError as e:
        raise HTTPException(status_code=400, detail=str(e))

    # 4. Generate
    config = _build_config(GenerationRequest(seed=seed))
    try:
        report = run_generation(session, config)
    except HRInsightsError as e:
        raise HTTPException(status_code=500, detail=f"Source loaded but generation failed: {str(e)}")

    return {"status": "success", "source_rows": rows, "generation": report}
