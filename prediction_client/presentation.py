"""Result rules used by the screens that display a prediction."""

from dataclasses import dataclass
from typing import Optional

from .schemas import Detection, PredictionResponse

# Labels that describe a correctly closed part even when the service
# reports isSuccess=false
ALWAYS_POSITIVE_LABELS = frozenset({"fuel lid close", "tyre cap close"})


def is_positive(detection: Detection) -> bool:
    """Whether a detection should be shown as a pass."""
    if detection.label.strip().lower() in ALWAYS_POSITIVE_LABELS:
        return True
    return detection.is_success


@dataclass(frozen=True)
class ResultView:
    """What the result screen shows for one detection."""

    label: str
    description: str
    is_positive: bool
    confidence: float

    @classmethod
    def from_detection(cls, detection: Detection) -> "ResultView":
        return cls(
            label=detection.label,
            description=detection.description,
            is_positive=is_positive(detection),
            confidence=detection.confidence,
        )


def build_result_view(response: PredictionResponse) -> Optional[ResultView]:
    """Build the view for the primary (first-ranked) detection."""
    primary = response.primary
    if primary is None:
        return None
    return ResultView.from_detection(primary)


def format_result(view: ResultView) -> str:
    """Render a view as plain text."""
    status = "PASS" if view.is_positive else "FAIL"
    lines = [f"[{status}] {view.label} (confidence {view.confidence:.2f})"]
    if view.description:
        lines.append(view.description)
    return "\n".join(lines)
