import logging
from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.concurrency import run_in_threadpool

from dental_opinion import __version__
from dental_opinion.config import Settings, configure_logging, get_settings
from dental_opinion.flow import Failed, SubmissionFlow, Succeeded
from dental_opinion.gemini import Analyzer, GeminiAnalyzer
from dental_opinion.intake import ScanFile, advisory_warnings, carried_scan, make_preview, read_upload
from dental_opinion.render import render_page
from dental_opinion.schemas import AnalysisResult, ErrorResponse, PreviewResponse

logger = logging.getLogger(__name__)


async def _run_submission(analyzer: Analyzer, upload: Optional[UploadFile], concern: str, carried: Optional[ScanFile] = None):
    # a freshly picked file wins over the one carried from the previous page
    scan = await read_upload(upload) or carried
    flow = SubmissionFlow()
    # select_file builds the preview with Pillow; keep it off the event loop
    await run_in_threadpool(flow.select_file, scan)
    flow.set_concern(concern)
    await run_in_threadpool(flow.submit, analyzer)
    return flow, scan


def create_app(settings: Optional[Settings] = None, analyzer: Optional[Analyzer] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    if analyzer is None:
        analyzer = GeminiAnalyzer.from_settings(settings)
    if not settings.gemini_api_key and isinstance(analyzer, GeminiAnalyzer):
        logger.warning("GEMINI_API_KEY is not set; every analysis will fail until it is configured.")

    app = FastAPI(title="Dental Scan Second Opinion API", version=__version__)
    app.state.settings = settings
    app.state.analyzer = analyzer

    # ----- Endpoints -----
    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request):
        return render_page(request, SubmissionFlow())

    @app.post("/", response_class=HTMLResponse)
    async def submit_form(
        request: Request,
        file: Optional[UploadFile] = File(None),
        concern: str = Form(""),
        scan_name: Optional[str] = Form(None),
        scan_type: Optional[str] = Form(None),
        scan_data: Optional[str] = Form(None),
    ):
        carried = carried_scan(scan_name, scan_type, scan_data)
        flow, scan = await _run_submission(app.state.analyzer, file, concern, carried)
        warnings = advisory_warnings(scan) if scan is not None else []
        return render_page(request, flow, warnings)

    @app.post("/preview", response_model=PreviewResponse)
    async def preview(file: UploadFile = File(...)):
        scan = await read_upload(file)
        if scan is None:
            raise HTTPException(status_code=422, detail="No file uploaded.")
        return PreviewResponse(
            filename=scan.filename,
            mime_type=scan.mime_type,
            size=scan.size,
            preview=await run_in_threadpool(make_preview, scan),
            warnings=advisory_warnings(scan),
        )

    @app.post(
        "/analyze",
        response_model=AnalysisResult,
        responses={422: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    )
    async def analyze(file: Optional[UploadFile] = File(None), concern: str = Form("")):
        flow, _ = await _run_submission(app.state.analyzer, file, concern)
        state = flow.state
        if isinstance(state, Succeeded):
            return state.result
        if isinstance(state, Failed):
            status_code = 422 if state.validation else 502
            return JSONResponse(status_code=status_code, content=ErrorResponse(detail=state.message).model_dump())
        # a fresh flow per request is never superseded
        raise RuntimeError(f"Unexpected submission state: {state!r}")

    return app


app = create_app()
