"""Log Scanner - matches a unit's journal since its last start against its rules.

The journal is read newest-first and never held in memory as a whole.
Reading stops at the first of:
- the unit's start-boundary message (nothing older matters),
- the last rule being retired (nothing more can be found),
- the end of the journal.
"""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import ValidationError

from unit_doctor.checks import DiagnosticContext
from unit_doctor.model.evidence import Severity
from unit_doctor.model.journal import LogEntry
from unit_doctor.rules.model import HandlerMatcher, LogMatcher, StaticMatcher, UnitSpec, log_prelude
from unit_doctor.scanner.journal import LogSourceError, open_journal


class StopReason(Enum):
    """Why a scan stopped reading."""

    BOUNDARY = "boundary"  # reached the unit's last start
    EXHAUSTED = "exhausted"  # every rule was retired
    END_OF_LOG = "end_of_log"
    NO_RULES = "no_rules"  # unit has no matchers; journal not opened
    SOURCE_ERROR = "source_error"


@dataclass
class ScanResult:
    """Bookkeeping for one unit's scan (findings go to the sink)."""

    unit: str
    stop: StopReason = StopReason.END_OF_LOG
    lines_read: int = 0
    fired: list[str] = field(default_factory=list)  # matcher ids, in firing order


def scan_unit_logs(spec: UnitSpec, ctx: DiagnosticContext) -> ScanResult:
    """Scan one unit's journal since its last start.

    Failing to start the journal reader is reported once through the sink
    and ends this unit's scan only.
    """
    result = ScanResult(unit=spec.name)
    if not spec.matchers:
        result.stop = StopReason.NO_RULES
        return result

    # Working copy: retiring a matcher here never touches the catalog.
    working: list[LogMatcher] = list(spec.matchers)

    try:
        with open_journal(ctx.connector, spec.name) as lines:
            for line in lines:
                result.lines_read += 1
                if not line.strip():
                    continue

                entry = _parse_entry(line, ctx)
                if entry is None:
                    continue

                if spec.start_boundary.search(entry.message):
                    result.stop = StopReason.BOUNDARY
                    break

                working = _apply_first_match(spec.name, entry, working, ctx, result)
                if not working:
                    result.stop = StopReason.EXHAUSTED
                    break
    except LogSourceError as e:
        ctx.sink.emit(Severity.ERROR, "sdLogReadErr", {
            "tmpl": """
Diagnostics failed to query journalctl for the '{{ unit }}' unit logs.
This should be very unusual, so please report this error:
{{ error }}""",
            "unit": spec.name,
            "error": f"({type(e.cause).__name__}) {e.cause}",
        })
        result.stop = StopReason.SOURCE_ERROR

    return result


def _parse_entry(line: str, ctx: DiagnosticContext) -> LogEntry | None:
    """Parse one JSON record; report (at debug) and skip it when malformed."""
    try:
        return LogEntry.from_json_line(line)
    except ValidationError as e:
        ctx.sink.emit(Severity.DEBUG, "sdLogBadJSON", {
            "tmpl": "Couldn't read the JSON for this log message:\n{{ message }}\nGot error {{ error }}",
            "message": line.rstrip("\r\n"),
            "error": f"(ValidationError) {e.errors(include_url=False)[0]['msg']}",
        })
        return None


def _apply_first_match(
    unit: str,
    entry: LogEntry,
    working: list[LogMatcher],
    ctx: DiagnosticContext,
    result: ScanResult,
) -> list[LogMatcher]:
    """Fire the first matcher that matches `entry`.

    Returns the working list to use for the next entry: unchanged, or
    rebuilt without the matcher when it is retired.
    """
    for matcher in working:
        match = matcher.search(entry.message)
        if match is None:
            continue

        if isinstance(matcher, HandlerMatcher):
            keep = bool(matcher.handler(ctx, matcher, unit, entry, match.groups()))
        elif isinstance(matcher, StaticMatcher):
            ctx.sink.emit(matcher.severity, matcher.id, {
                "text": log_prelude(unit, entry) + matcher.interpretation,
                "unit": unit,
                "logMsg": entry.message,
            })
            keep = matcher.persistent
        else:
            raise TypeError(f"unsupported matcher type: {type(matcher).__name__}")

        result.fired.append(matcher.id)
        if keep:
            return working
        return [m for m in working if m is not matcher]

    return working
