import io

from image_optimizer.processor import FileOutcome
from image_optimizer.reporter import RunReporter, RunTotals, format_size


def _success(index, original=1000, output=400):
    return FileOutcome(index, f"in{index}.png", original, f"out{index}.png", output)


def _failure(index):
    return FileOutcome(index, f"bad{index}.png", 500, None, 0, "cannot identify image file")


def test_format_size():
    assert format_size(512) == "512.0 B"
    assert format_size(2048) == "2.0 KB"
    assert format_size(3 * 1024 * 1024) == "3.0 MB"


def test_totals_count_only_successes():
    totals = RunTotals()
    for outcome in (_success(1), _failure(2), _success(3, 2000, 1000)):
        totals.add(outcome)
    assert totals.files_attempted == 3
    assert totals.files_succeeded == 2
    assert totals.files_failed == 1
    assert totals.total_original_bytes == 3000
    assert totals.total_output_bytes == 1400
    assert totals.saved_bytes == 1600


def test_total_reduction():
    totals = RunTotals()
    totals.add(_success(1))
    assert f"{totals.reduction_percent:.2f}%" == "60.00%"
    assert RunTotals().reduction_percent == 0.0


def test_progress_line_overwrites_in_place():
    stream = io.StringIO()
    reporter = RunReporter(2, stream=stream)
    reporter.record(_success(1))
    reporter.record(_success(2))
    output = stream.getvalue()
    assert "\rProcessing 1 of 2" in output
    assert "\rProcessing 2 of 2" in output
    assert "Processing 1 of 2\n" not in output


def test_no_progress_line_before_first_file():
    stream = io.StringIO()
    RunReporter(3, stream=stream)
    assert stream.getvalue() == ""


def test_errors_printed_inline():
    stream = io.StringIO()
    reporter = RunReporter(1, stream=stream)
    reporter.record(_failure(1))
    assert "Error processing bad1.png: cannot identify image file\n" in stream.getvalue()


def test_summary_without_table():
    stream = io.StringIO()
    reporter = RunReporter(2, show_report=False, stream=stream)
    reporter.record(_success(1))
    reporter.record(_failure(2))
    totals = reporter.finish()

    output = stream.getvalue()
    assert totals.files_succeeded == 1
    assert "Images optimized: 1 of 2" in output
    assert "Errors: 1" in output
    assert "Total reduction: 60.00%" in output
    assert "Reduction" not in output
    assert "Optimized images" not in output


def test_table_rows_in_discovery_order(monkeypatch):
    monkeypatch.setenv("COLUMNS", "200")
    stream = io.StringIO()
    reporter = RunReporter(3, show_report=True, stream=stream)
    for outcome in (_success(1), _failure(2), _success(3)):
        reporter.record(outcome)
    reporter.finish()

    lines = stream.getvalue().splitlines()
    assert any("Optimized images" in line for line in lines)
    assert any("Reduction" in line and "Status" in line for line in lines)

    def row_of(name):
        return next(i for i, line in enumerate(lines) if name in line and "Error processing" not in line)

    first, failed, last = row_of("in1.png"), row_of("bad2.png"), row_of("in3.png")
    assert first < failed < last
    assert "60.00%" in lines[first]
    assert "error: cannot identify image file" in lines[failed]


def test_table_keeps_bracketed_paths(monkeypatch):
    monkeypatch.setenv("COLUMNS", "200")
    stream = io.StringIO()
    reporter = RunReporter(1, show_report=True, stream=stream)
    reporter.record(FileOutcome(1, "photo[1].png", 10, "out/photo[1].png", 5))
    reporter.finish()
    assert "photo[1].png" in stream.getvalue()
