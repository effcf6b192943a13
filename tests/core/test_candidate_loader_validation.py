from __future__ import annotations

import json
from pathlib import Path

import pytest

from hrmatching.errors import InvalidCriteriaSet
from hrmatching.pipeline import CandidateLoadError, CandidateLoader, CriteriaLoader


def test_candidate_loader_raises_on_invalid_json(tmp_path: Path):
    loader = CandidateLoader()
    path = tmp_path / "candidates.jsonl"
    path.write_text('{"candidate_id": "C-001"}\n{invalid}', encoding="utf-8")

    with pytest.raises(CandidateLoadError) as exc:
        loader.load(path)
    assert "invalid JSON" in str(exc.value)


def test_candidate_loader_skips_invalid_and_reports(tmp_path: Path):
    loader = CandidateLoader()
    path = tmp_path / "candidates.jsonl"
    records = [
        {"payload": {"candidate_id": "C-001", "experience_years": 3}},
        {"candidate_id": "C-002", "skills": [{"name": "React", "level": 300}]},
        {"candidate_id": "C-001"},
    ]
    path.write_text("\n".join(json.dumps(item) for item in records), encoding="utf-8")

    with pytest.raises(CandidateLoadError) as exc:
        loader.load(path)
    error = exc.value
    assert error.errors[0].startswith("line 2:")
    assert "duplicate candidate_id 'C-001'" in error.errors[1]
    assert [candidate.candidate_id for candidate in error.partial] == ["C-001"]


def test_criteria_loader_invalid_json(tmp_path: Path):
    path = tmp_path / "job.json"
    path.write_text("{invalid", encoding="utf-8")

    with pytest.raises(InvalidCriteriaSet):
        CriteriaLoader().load(path)


def test_criteria_loader_reads_yaml_template_reference(tmp_path: Path):
    path = tmp_path / "job.yaml"
    path.write_text(
        "job_id: JD-042\ntemplate: marketing-digital\ntitle: Community manager\n",
        encoding="utf-8",
    )

    job = CriteriaLoader().load(path)

    assert job.job_id == "JD-042"
    assert job.title == "Community manager"
    assert job.get_criterion("skills-social") is not None


def test_criteria_loader_unknown_template(tmp_path: Path):
    path = tmp_path / "job.json"
    path.write_text(json.dumps({"job_id": "JD-1", "template": "nope"}), encoding="utf-8")

    with pytest.raises(InvalidCriteriaSet):
        CriteriaLoader().load(path)
