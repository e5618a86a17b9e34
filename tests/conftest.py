from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List

import duckdb
import pytest

# Ensure the package is importable when running tests from a source checkout.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def colleges() -> List[Dict[str, object]]:
    return [
        {
            "id": 1,
            "name": "AIIMS Delhi",
            "city": "New Delhi",
            "state": "Delhi",
            "college_type": "MEDICAL",
            "management_type": "GOVERNMENT",
            "total_courses": 42,
        },
        {
            "id": 2,
            "name": "JIPMER Puducherry",
            "city": "Puducherry",
            "state": "Puducherry",
            "college_type": "MEDICAL",
            "management_type": "GOVERNMENT",
            "total_courses": 30,
        },
        {
            "id": 3,
            "name": "Government Medical College Srinagar",
            "city": "Srinagar",
            "state": "JAMMU AND KASHMIR",
            "college_type": "MEDICAL",
            "management_type": "Govt.",
            "total_courses": 12,
        },
        {
            "id": 4,
            "name": "Sri Ram Dental Trust College",
            "city": "Jammu",
            "state": "JAMMU & KASHMIR",
            "college_type": "DENTAL",
            "management_type": "Trust",
            "total_courses": 3,
        },
        {
            "id": 5,
            "name": "Apollo Hospitals",
            "city": "Chennai",
            "state": "Tamil Nadu",
            "college_type": "DNB",
            "management_type": "GOVERNMENT",
            "total_courses": 8,
        },
        {
            "id": 6,
            "name": "Manipal Dental College",
            "city": "Mangalore",
            "state": "Karnataka",
            "college_type": "DENTAL",
            "management_type": "PRIVATE",
            "total_courses": 0,
        },
        {
            "id": 7,
            "name": "Rural Health Centre",
            "college_type": "MEDICAL",
            "management_type": "Society",
            "total_courses": 1,
        },
    ]


@pytest.fixture()
def db_path(tmp_path: Path, colleges) -> Path:
    path = tmp_path / "colleges.duckdb"
    con = duckdb.connect(str(path))
    con.execute(
        """
        CREATE TABLE colleges (
            id INTEGER PRIMARY KEY,
            name TEXT,
            city TEXT,
            state TEXT,
            college_type TEXT,
            management_type TEXT,
            total_courses INTEGER
        )
        """
    )
    for college in colleges:
        con.execute(
            "INSERT INTO colleges VALUES (?, ?, ?, ?, ?, ?, ?)",
            [
                college["id"],
                college["name"],
                college.get("city"),
                college.get("state"),
                college["college_type"],
                college["management_type"],
                college["total_courses"],
            ],
        )
    con.execute(
        """
        CREATE TABLE courses (
            id INTEGER PRIMARY KEY,
            college_id INTEGER,
            course_name TEXT,
            course_type TEXT,
            total_seats INTEGER,
            duration TEXT
        )
        """
    )
    con.execute(
        "INSERT INTO courses VALUES (?, ?, ?, ?, ?, ?), (?, ?, ?, ?, ?, ?), (?, ?, ?, ?, ?, ?)",
        [
            1, 1, "MBBS", "UG", 125, "5.5 years",
            2, 1, "MD GENERAL MEDICINE", "PG", 20, "3 years",
            3, 2, "MBBS", "UG", 200, "5.5 years",
        ],
    )
    con.close()
    return path
