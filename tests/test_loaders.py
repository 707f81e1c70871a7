from __future__ import annotations

import copy
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from topup_report.exceptions import DuplicateCompanyError, RecordSetError
from topup_report.loaders import (
    build_companies,
    company_key,
    group_users,
    read_companies,
    read_records,
    read_users,
)

COMPANIES = [
    {"id": 2, "name": "Beta", "top_up": 5, "email_status": False},
    {"id": 1, "name": "Acme", "top_up": 10, "email_status": True},
]


def _user_rec(uid: int, last: str, company_id: object) -> dict[str, object]:
    return {
        "id": uid,
        "first_name": f"F{uid}",
        "last_name": last,
        "email": f"u{uid}@example.com",
        "email_status": True,
        "active_status": True,
        "tokens": 0,
        "company_id": company_id,
    }


def test_build_companies_keys_by_id() -> None:
    companies = build_companies(COMPANIES)
    assert sorted(companies) == [1, 2]
    assert companies[1].name == "Acme"


def test_duplicate_company_id_raises() -> None:
    with pytest.raises(DuplicateCompanyError) as exc:
        build_companies([COMPANIES[1], {**COMPANIES[0], "id": 1}])
    assert exc.value.company_id == 1
    assert "Duplicate company id found: 1" in str(exc.value)


def test_invalid_company_record_propagates() -> None:
    with pytest.raises(ValidationError):
        build_companies([{"id": 1, "name": "Acme"}])


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(1, 1), ("2", 2), (" 3 ", 3), (None, None), ("abc", None), (True, None), (1.5, None)],
)
def test_company_key(raw: object, expected: int | None) -> None:
    assert company_key(raw) == expected


def test_group_users_binds_and_groups_in_input_order() -> None:
    companies = build_companies(COMPANIES)
    records = [
        _user_rec(1, "Young", 1),
        _user_rec(2, "Adams", 2),
        _user_rec(3, "Brown", "1"),
        _user_rec(4, "Cole", 99),
    ]
    groups = group_users(records, companies)

    assert [u.id for u in groups[1]] == [1, 3]
    assert [u.id for u in groups[2]] == [2]
    assert [u.id for u in groups[None]] == [4]
    assert groups[1][0].company is companies[1]
    assert groups[None][0].company is None
    assert isinstance(groups[1], tuple)


def test_group_users_does_not_modify_raw_records() -> None:
    companies = build_companies(COMPANIES)
    records = [_user_rec(1, "Young", 1), _user_rec(2, "Cole", None)]
    before = copy.deepcopy(records)
    group_users(records, companies)
    assert records == before


def test_user_without_company_id_key_has_no_company() -> None:
    rec = _user_rec(5, "Doe", 1)
    del rec["company_id"]
    groups = group_users([rec], build_companies(COMPANIES))
    assert list(groups) == [None]


def test_read_records_rejects_non_array(tmp_path: Path) -> None:
    p = tmp_path / "companies.json"
    p.write_text(json.dumps({"id": 1}), encoding="utf-8")
    with pytest.raises(RecordSetError):
        read_records(p)


def test_read_records_rejects_non_object_element(tmp_path: Path) -> None:
    p = tmp_path / "users.json"
    p.write_text(json.dumps([{"id": 1}, 5]), encoding="utf-8")
    with pytest.raises(RecordSetError) as exc:
        read_records(p)
    assert "record 1" in str(exc.value)


def test_read_files_logs_and_loads(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level("INFO")
    cp = tmp_path / "companies.json"
    up = tmp_path / "users.json"
    cp.write_text(json.dumps(COMPANIES), encoding="utf-8")
    up.write_text(json.dumps([_user_rec(1, "Young", 2)]), encoding="utf-8")

    companies = read_companies(cp)
    groups = read_users(up, companies)

    assert groups[2][0].company is companies[2]
    assert f"Reading companies file '{cp}'." in caplog.text
    assert f"Reading users file '{up}'." in caplog.text


def test_nan_top_up_in_file_is_rejected(tmp_path: Path) -> None:
    p = tmp_path / "companies.json"
    p.write_text(
        '[{"id": 1, "name": "Acme", "top_up": NaN, "email_status": true}]',
        encoding="utf-8",
    )
    with pytest.raises(ValidationError) as exc:
        build_companies(read_records(p))
    assert "top_up must be a positive number" in str(exc.value)


def test_infinite_tokens_in_file_are_rejected(tmp_path: Path) -> None:
    p = tmp_path / "users.json"
    rec = json.dumps(_user_rec(1, "Young", 1)).replace('"tokens": 0', '"tokens": Infinity')
    p.write_text(f"[{rec}]", encoding="utf-8")
    with pytest.raises(ValidationError) as exc:
        group_users(read_records(p), build_companies(COMPANIES))
    assert "tokens must be a number" in str(exc.value)
