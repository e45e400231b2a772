import pytest

from mediadesk.formatting import describe_progress, format_time
from mediadesk.models import ProgressInfo


@pytest.mark.parametrize(
    "seconds, text",
    [
        (0, "0.000s"),
        (59.9994, "59.999s"),
        (61.5, "1m 1.500s"),
        (3723.25, "1h 2m 3.250s"),
        (7200, "2h 0.000s"),
    ],
)
def test_format_time(seconds, text):
    assert format_time(seconds) == text


def test_describe_progress_includes_remaining_only_when_known():
    info = ProgressInfo(
        status="Converting", current=3, total=8, percentage=37.5, items_per_second=1.25, elapsed_time=12
    )
    assert describe_progress(info) == (
        "Converting  |  1.2 items/sec  |  Elapsed: 12.000s  |  3 / 8 (37.5%)"
    )
    with_eta = info.model_copy(update={"estimated_remaining": 90.0})
    assert "Remaining: 1m 30.000s" in describe_progress(with_eta)
