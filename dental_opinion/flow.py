"""Submission flow for one page of the UI.

The flow owns the selected file, its preview, the concern text and exactly
one of four states:

    Idle -> Loading -> Succeeded | Failed

Validation runs at the start of ``submit`` and fails without calling the
analyzer.

The web handlers build a fresh flow per request, but a flow can also live
across submissions (one per page session when embedded elsewhere). For that
case each submission takes a generation number, and a reply that arrives
after a newer submission or a new file has started is dropped so the flow
always shows the latest submission. Calls are expected from one logical
thread of control, so there is no locking.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Union

from dental_opinion.errors import AnalysisError
from dental_opinion.gemini import Analyzer
from dental_opinion.intake import ScanFile, make_preview
from dental_opinion.schemas import AnalysisRequest, AnalysisResult

logger = logging.getLogger(__name__)

MISSING_FILE_MESSAGE = "Please upload a dental scan file."
MISSING_CONCERN_MESSAGE = "Please describe your concern."
FAILURE_PREFIX = "Analysis failed: "


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    generation: int


@dataclass(frozen=True)
class Succeeded:
    result: AnalysisResult


@dataclass(frozen=True)
class Failed:
    message: str
    validation: bool = False


FlowState = Union[Idle, Loading, Succeeded, Failed]


class SubmissionFlow:
    def __init__(self):
        self.file: Optional[ScanFile] = None
        self.preview: Optional[str] = None
        self.concern: str = ""
        self.state: FlowState = Idle()
        self._generation = 0

    # ----- inputs -----
    def select_file(self, scan: Optional[ScanFile]) -> None:
        """New file: drop any shown result or error and any reply still in flight."""
        self._generation += 1
        self.file = scan
        self.state = Idle()
        self.preview = make_preview(scan) if scan is not None else None

    def set_concern(self, text: str) -> None:
        self.concern = text or ""

    # ----- derived view state -----
    @property
    def loading(self) -> bool:
        return isinstance(self.state, Loading)

    @property
    def result(self) -> Optional[AnalysisResult]:
        return self.state.result if isinstance(self.state, Succeeded) else None

    @property
    def error(self) -> Optional[str]:
        return self.state.message if isinstance(self.state, Failed) else None

    @property
    def can_submit(self) -> bool:
        return not self.loading and self.file is not None and self.concern != ""

    # ----- submission -----
    def submit(self, analyzer: Analyzer) -> FlowState:
        if self.file is None:
            self.state = Failed(MISSING_FILE_MESSAGE, validation=True)
            return self.state
        if not self.concern.strip():
            self.state = Failed(MISSING_CONCERN_MESSAGE, validation=True)
            return self.state

        self._generation += 1
        generation = self._generation
        self.state = Loading(generation)
        request = AnalysisRequest(image=self.file.data, mime_type=self.file.mime_type, concern=self.concern)

        try:
            outcome: FlowState = Succeeded(analyzer.analyze(request))
        except AnalysisError as e:
            logger.warning("Submission %d failed: %s", generation, e)
            outcome = Failed(f"{FAILURE_PREFIX}{e}")

        if generation != self._generation:
            logger.info("Dropping reply for superseded submission %d", generation)
        else:
            self.state = outcome
        return self.state
