"""
Assignment normalisation shared by job creation and job updates

Requests may carry `assignedEmployees` as plain ids or as
{"employeeId", "payAmount"} objects, or only the legacy `assignedTo`
(+ `employeePay`). Everything is reduced to an ordered, de-duplicated list.
"""

import math
import re
from typing import Any, Optional


class AssignmentError(ValueError):
    """Raised with a user-facing message when an assignment is invalid"""


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def normalize_assignments(
    assigned_employees: Optional[list[Any]],
    assigned_to: Any = None,
    employee_pay: Any = None,
) -> list[dict[str, Any]]:
    """
    Returns [{"employeeId": int, "payAmount": raw or None}, ...] keeping the
    first occurrence of each employee.
    """
    entries: list[dict[str, Any]] = []
    for entry in assigned_employees or []:
        if isinstance(entry, dict):
            employee_id = _to_int(entry.get("employeeId"))
            pay = entry.get("payAmount")
        else:
            employee_id = _to_int(entry)
            pay = None
        if employee_id is not None:
            entries.append({"employeeId": employee_id, "payAmount": pay})

    if not entries and assigned_to not in (None, ""):
        employee_id = _to_int(assigned_to)
        if employee_id is not None:
            entries.append({"employeeId": employee_id, "payAmount": employee_pay})

    seen = set()
    unique = []
    for entry in entries:
        if entry["employeeId"] in seen:
            continue
        seen.add(entry["employeeId"])
        unique.append(entry)
    return unique


def resolve_pay(
    assignments: list[dict[str, Any]],
    employees_by_id: dict[int, Any],
    plan_price: Optional[float],
    fallback_pay: Any = None,
) -> list[dict[str, Any]]:
    """
    Apply pay rules to normalised assignments.

    Returns:
        [{"employee_id", "pay_amount" (float rounded to 2dp or None), "pay_type"}]

    Raises:
        AssignmentError: per_job employee without pay, negative or non-numeric
            pay, or pay above a positive plan price
    """
    price_cap = float(plan_price) if plan_price else 0.0
    resolved = []
    for entry in assignments:
        employee = employees_by_id[entry["employeeId"]]
        pay_type = getattr(employee, "pay_type", None) or "hourly"
        raw_pay = entry.get("payAmount")
        if raw_pay is None or raw_pay == "":
            raw_pay = fallback_pay

        missing = raw_pay is None or raw_pay == ""
        if pay_type == "per_job" and missing:
            name = f"{employee.first_name} {employee.last_name}".strip()
            raise AssignmentError(f"Pay per job is required for {name}")

        pay_amount = None
        if not missing:
            try:
                pay_value = float(raw_pay)
            except (TypeError, ValueError) as e:
                raise AssignmentError("Invalid employee pay amount") from e
            if not math.isfinite(pay_value) or pay_value < 0:
                raise AssignmentError("Invalid employee pay amount")
            if price_cap > 0 and pay_value > price_cap:
                raise AssignmentError("Employee pay cannot exceed cleaning plan price")
            pay_amount = round(pay_value, 2)

        resolved.append({"employee_id": entry["employeeId"], "pay_amount": pay_amount, "pay_type": pay_type})
    return resolved


def diff_assignments(existing_ids: list[int], new_ids: list[int]) -> tuple[list[int], list[int], list[int]]:
    """(removed, added, kept) preserving the order of the input lists"""
    existing_set = set(existing_ids)
    new_set = set(new_ids)
    removed = [i for i in existing_ids if i not in new_set]
    added = [i for i in new_ids if i not in existing_set]
    kept = [i for i in new_ids if i in existing_set]
    return removed, added, kept


_HOURS = re.compile(r"(\d+(?:\.\d+)?)\s*h")
_MINUTES = re.compile(r"(\d+(?:\.\d+)?)\s*m")


def parse_duration_minutes(value: Optional[str]) -> int:
    """
    "2h 30m" -> 150, "45 mins" -> 45, "90" -> 90.
    Parsed hour/minute values never go below 15; anything unreadable is 60.
    """
    if not value:
        return 60
    normalized = str(value).lower()
    hours = _HOURS.search(normalized)
    minutes = _MINUTES.search(normalized)
    if hours or minutes:
        total = (round(float(hours.group(1)) * 60) if hours else 0) + (
            round(float(minutes.group(1))) if minutes else 0
        )
        return max(15, total)
    match = re.match(r"\s*(\d+)", normalized)
    if match and int(match.group(1)) > 0:
        return int(match.group(1))
    return 60
