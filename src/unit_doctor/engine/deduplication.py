"""Deduplication and ranking of findings."""

from dataclasses import replace

from unit_doctor.model.finding import Finding


def deduplicate_findings(findings: list[Finding]) -> list[Finding]:
    """Collapse repeated findings and rank the rest.

    Findings with the same (id, text) are reported once; the evidence of
    the repeats is merged into the first one. The result is ordered by
    severity (ERROR first), keeping emission order within a severity.
    The input findings are not modified.
    """
    if not findings:
        return []

    deduped: list[Finding] = []
    seen_keys: dict[tuple[str, str], Finding] = {}

    for f in findings:
        key = (f.id, f.text)
        base = seen_keys.get(key)
        if base is None:
            copy = replace(f, evidence=list(f.evidence), fields=dict(f.fields))
            seen_keys[key] = copy
            deduped.append(copy)
            continue

        for ev in f.evidence:
            if ev not in base.evidence:
                base.evidence.append(ev)

    return sorted(deduped, key=lambda x: x.severity.rank)
