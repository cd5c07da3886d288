import csv
import logging
from pathlib import Path
from typing import Iterable

from upload_timings.timings import Timing

logger = logging.getLogger(__name__)

CSV_HEADER = ["timestamp", "instance", "fileName", "requestTimeInSeconds"]
CSV_FILENAME = "timings.csv"


def timing_to_row(timing: Timing) -> list[str]:
    """
    Converts a timing to its CSV fields.
    The request time is always rendered with 4 decimal places.
    """
    return [
        timing.timestamp,
        timing.instance,
        timing.file_name,
        f"{timing.request_time_in_seconds:.4f}",
    ]


def write_csv(timings: Iterable[Timing], results_path: Path) -> Path:
    """
    Writes the timings to results_path/timings.csv, replacing any previous report.

    Args:
        timings: Timings in the order they were observed.
        results_path: Directory for the report. Created if missing.

    Returns:
        Path of the written CSV file.
    """
    results_path = Path(results_path)
    results_path.mkdir(parents=True, exist_ok=True)

    csv_path = results_path / CSV_FILENAME
    count = 0
    with open(csv_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for timing in timings:
            writer.writerow(timing_to_row(timing))
            count += 1

    logger.info(f"Wrote {count} timings to {csv_path}")
    return csv_path
