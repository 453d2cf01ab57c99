import io
import json

import pytest
from PIL import Image

from dental_opinion.gemini import Analyzer
from dental_opinion.intake import ScanFile
from dental_opinion.schemas import AnalysisResult

SAMPLE_RESULT = {
    "observation": "No obvious decay visible.",
    "potential_issues": ["Mild plaque buildup near gumline"],
    "recommendations": ["Schedule a cleaning within 3 months"],
    "disclaimer": "This is not a substitute for an in-person exam.",
}


class FakeAnalyzer(Analyzer):
    def __init__(self, result=None, error=None, hook=None):
        self.result = result
        self.error = error
        self.hook = hook
        self.calls = []

    def analyze(self, request):
        self.calls.append(request)
        if self.hook is not None:
            self.hook(request)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def sample_result():
    return AnalysisResult.model_validate_json(json.dumps(SAMPLE_RESULT))


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (64, 48), (210, 200, 190)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def scan(png_bytes):
    return ScanFile(filename="scan.png", mime_type="image/png", data=png_bytes)


@pytest.fixture
def make_analyzer():
    return FakeAnalyzer
