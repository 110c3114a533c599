# smartassist/routers/diagnoses.py
from __future__ import annotations

import base64
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from smartassist.ai import AIClient, AIError
from smartassist.deps import get_ai_client, get_current_user_id, get_storage
from smartassist.schemas import (
    DiagnoseIn, DiagnoseOut, DiagnosisOut, DiagnosisUpdate, ImageAnalysisOut,
)
from smartassist.storage import Storage, StorageError

router = APIRouter(prefix="/api", tags=["diagnoses"])
log = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB


@router.get("/diagnoses", response_model=List[DiagnosisOut])
def list_diagnoses(
    storage: Storage = Depends(get_storage),
    user_id: str = Depends(get_current_user_id),
):
    return storage.get_user_diagnoses(user_id)


@router.get("/diagnoses/{diagnosis_id}", response_model=DiagnosisOut)
def get_diagnosis(diagnosis_id: str, storage: Storage = Depends(get_storage)):
    diagnosis = storage.get_diagnosis(diagnosis_id)
    if not diagnosis:
        raise HTTPException(status_code=404, detail="Diagnosis not found")
    return diagnosis


@router.patch("/diagnoses/{diagnosis_id}", response_model=DiagnosisOut)
def update_diagnosis(
    diagnosis_id: str,
    payload: DiagnosisUpdate,
    storage: Storage = Depends(get_storage),
):
    data = payload.model_dump(exclude_unset=True)
    try:
        diagnosis = storage.update_diagnosis(diagnosis_id, data)
    except StorageError as e:
        raise HTTPException(status_code=400, detail=f"Error updating diagnosis: {e}")
    if not diagnosis:
        raise HTTPException(status_code=404, detail="Diagnosis not found")
    return diagnosis


@router.post("/diagnose", response_model=DiagnoseOut)
def diagnose(
    payload: DiagnoseIn,
    storage: Storage = Depends(get_storage),
    ai: AIClient = Depends(get_ai_client),
    user_id: str = Depends(get_current_user_id),
):
    """
    One chat turn with the assistant.

    Without diagnosisId a new open diagnosis session is stored; with it, that
    session is updated. Stored messages = submitted history + this exchange.
    A failed save after a successful AI call is not retried.
    """
    existing = None
    if payload.diagnosis_id:
        existing = storage.get_diagnosis(payload.diagnosis_id)
        if not existing:
            raise HTTPException(status_code=404, detail="Diagnosis not found")

    history = [m.model_dump() for m in payload.conversation_history]
    try:
        result = ai.diagnose_issue(
            payload.issue,
            appliance_type=payload.appliance_type,
            brand=payload.brand,
            model=payload.model,
            conversation_history=history,
        )
    except AIError as e:
        log.error("diagnose failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Error processing diagnosis: {e}")

    messages = history + [
        {"role": "user", "content": payload.issue},
        {"role": "assistant", "content": result.conversation_response},
    ]
    try:
        if existing:
            diagnosis = storage.update_diagnosis(existing.id, {
                "messages": messages,
                "diagnosis": result.diagnosis,
                "solution": result.solution,
            })
        else:
            diagnosis = storage.create_diagnosis({
                "user_id": user_id,
                "appliance_id": payload.appliance_id,
                "issue": payload.issue,
                "messages": messages,
                "diagnosis": result.diagnosis,
                "solution": result.solution,
                "status": "open",
                "resolved": False,
            })
    except StorageError as e:
        raise HTTPException(status_code=500, detail=f"Error processing diagnosis: {e}")

    return DiagnoseOut(
        diagnosis_id=diagnosis.id,
        response=result.conversation_response,
        diagnosis=result.diagnosis,
        solution=result.solution,
    )


@router.post("/analyze-image", response_model=ImageAnalysisOut)
def analyze_image(
    image: Optional[UploadFile] = File(None),
    userDescription: Optional[str] = Form(None),
    applianceType: Optional[str] = Form(None),
    storage: Storage = Depends(get_storage),
    ai: AIClient = Depends(get_ai_client),
    user_id: str = Depends(get_current_user_id),
):
    """
    Photo-based diagnosis. Only image/* uploads up to 5MB reach the model.
    """
    if image is None:
        raise HTTPException(status_code=400, detail="No image file provided")
    if not (image.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image files are allowed")

    # read one byte past the limit so oversize uploads are caught without loading them whole
    raw = image.file.read(MAX_IMAGE_BYTES + 1)
    if len(raw) > MAX_IMAGE_BYTES:
        raise HTTPException(status_code=413, detail="Image exceeds the 5MB limit")
    if not raw:
        raise HTTPException(status_code=400, detail="No image file provided")

    base64_image = base64.b64encode(raw).decode("ascii")
    try:
        result = ai.analyze_appliance_image(
            base64_image,
            appliance_type=applianceType,
            user_description=userDescription,
        )
    except AIError as e:
        log.error("analyze-image failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Error analyzing image: {e}")

    try:
        diagnosis = storage.create_diagnosis({
            "user_id": user_id,
            "issue": userDescription or "Image-based diagnosis",
            "messages": [],
            "diagnosis": result.analysis,
            "solution": result.recommendations,
            "image_analysis": result.analysis,
            "status": "open",
            "resolved": False,
        })
    except StorageError as e:
        raise HTTPException(status_code=500, detail=f"Error analyzing image: {e}")

    return ImageAnalysisOut(
        diagnosis_id=diagnosis.id,
        analysis=result.analysis,
        identified_issues=result.identified_issues,
        recommendations=result.recommendations,
    )
