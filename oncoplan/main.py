"""
OncoPlan - FastAPI Application

Stateless planning API: every request carries the Patient aggregate (and
optionally unsaved draft markers) and receives the transformed aggregate or
derived values back. Endpoints for:
- Marker classification
- Pathway recommendation and regimen composition
- Per-drug dose computation
- Plan lock / unlock
- Schedule preview and commit
"""
from datetime import date, datetime

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load environment variables
load_dotenv()

from oncoplan.config import settings
from oncoplan.core.clinical import Patient
from oncoplan.core.dosing import body_surface_area
from oncoplan.core.markers import ClassifiedMarkers, classify
from oncoplan.core.plan import DoseInputs
from oncoplan.models.plan import (
    ClassifyRequest,
    CommitRequest,
    DoseRequest,
    DoseResponse,
    DoseRow,
    HealthResponse,
    LockRequest,
    PatientRequest,
    RegimenRequest,
    ScheduleRequest,
    ScheduleResponse,
)
from oncoplan.services import PlanningService
from oncoplan.utils import (
    OncoPlanError,
    PlanLockError,
    PlanLockedError,
    RegimenSelectionError,
    ScheduleError,
    get_logger,
    setup_logging,
)

setup_logging(level=settings.log_level, log_file=settings.log_file)
logger = get_logger(__name__)


# ---- FastAPI Application ----

app = FastAPI(
    title=settings.app_name,
    description="Breast-cancer treatment pathway, regimen and dosage-lock engine",
    version=settings.version,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

START_TIME = datetime.now()

_planning_service = PlanningService()


# ---- Error Handlers ----

_STATUS_BY_ERROR = {
    PlanLockError: 422,
    PlanLockedError: 409,
    RegimenSelectionError: 404,
    ScheduleError: 422,
}


@app.exception_handler(OncoPlanError)
async def oncoplan_error_handler(request: Request, exc: OncoPlanError):
    status_code = _STATUS_BY_ERROR.get(type(exc), 400)
    logger.warning(f"{request.method} {request.url.path} → {status_code} {exc.code}: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# ---- API Endpoints ----

@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=settings.version,
        timestamp=datetime.now().isoformat(),
        uptime_seconds=(datetime.now() - START_TIME).total_seconds(),
    )


@app.post("/api/v1/markers/classify", response_model=ClassifiedMarkers, tags=["Markers"])
async def classify_markers(request: ClassifyRequest):
    """Parse free-text markers into numeric values."""
    return classify(request.markers)


@app.post("/api/v1/pathways", response_model=Patient, tags=["Pathways"])
async def recommend_pathways(request: PatientRequest):
    """
    Regenerate the two pathway options and preselect the recommended one.

    The draft markers (if given) are saved onto the returned patient.
    """
    return _planning_service.recommend_pathways(request.patient, request.markers)


@app.post("/api/v1/regimens", response_model=Patient, tags=["Regimens"])
async def compose_regimens(request: RegimenRequest):
    """Compose per-modality regimen options and apply the default selection."""
    patient = request.patient
    if request.pathway_id is not None and patient.pathway_options:
        patient = _planning_service.select_pathway(patient, request.pathway_id)
    return _planning_service.compose_regimens(patient, request.markers, request.pathway_id)


@app.post("/api/v1/doses", response_model=DoseResponse, tags=["Doses"])
async def regimen_doses(request: DoseRequest):
    """Per-drug standard and loading doses for one regimen of the plan."""
    plan = request.patient.detailed_plan
    regimen = plan.find(request.modality, request.regimen_id) if plan else None
    if regimen is None:
        raise RegimenSelectionError(
            f"Regimen '{request.regimen_id}' is not a {request.modality.value} option.",
            selection_id=request.regimen_id,
        )

    rows = []
    for doses in _planning_service.regimen_doses(request.patient, regimen, request.markers):
        rows.append(DoseRow(
            drug=doses.name,
            dose=doses.standard.text,
            milligrams=doses.standard.milligrams,
            loading_dose=doses.loading.text if doses.loading else None,
            loading_milligrams=doses.loading.milligrams if doses.loading else None,
            locked=doses.standard.locked,
        ))

    inputs = DoseInputs.from_patient(request.patient, request.markers)
    return DoseResponse(
        regimen_id=regimen.id,
        body_surface_area=round(body_surface_area(inputs.height_cm, inputs.weight_kg), 2),
        doses=rows,
    )


@app.post("/api/v1/plan/lock", response_model=Patient, tags=["Plan"])
async def lock_plan(request: LockRequest):
    """Freeze the selected regimens' doses and snapshot the markers."""
    return _planning_service.lock(request.patient, request.markers, request.modalities)


@app.post("/api/v1/plan/unlock", response_model=Patient, tags=["Plan"])
async def unlock_plan(request: PatientRequest):
    """Clear every dose snapshot and the marker snapshot."""
    return _planning_service.unlock(request.patient)


@app.post("/api/v1/schedule/preview", response_model=ScheduleResponse, tags=["Schedule"])
async def preview_schedule(request: ScheduleRequest):
    """Expand the selected regimens into dated draft events."""
    today = request.today or date.today()
    events = _planning_service.preview_schedule(request.patient, request.start_dates, today)
    return ScheduleResponse(event_count=len(events), events=events)


@app.post("/api/v1/schedule/commit", response_model=Patient, tags=["Schedule"])
async def commit_schedule(request: CommitRequest):
    """Append confirmed draft events to the patient's timeline."""
    if not request.events:
        raise HTTPException(status_code=400, detail="No events to commit")
    return _planning_service.commit_schedule(request.patient, request.events)


# ---- Run with uvicorn ----
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
