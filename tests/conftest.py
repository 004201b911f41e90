"""Shared fixtures: a small asset file on disk."""

import pytest

ASSET_YAML = """
tool:
  name: Rotary hammer
  category: Drilling
  serialNumber: BSH-0042
  dailyRate: 45.0
state:
  asOfDate: '2024-03-20'
bookings:
  - code: AL0001
    startDate: '2024-03-01'
    endDateExpected: '2024-03-10'
    endDateActual: '2024-03-08'
    status: returned
    customer: Maria Souza
  - code: MN0001
    startDate: '2024-03-09'
    endDateExpected: '2024-03-11'
    status: maintenance
    notes: Brush service
  - code: AL0002
    startDate: '2024-03-18'
    endDateExpected: '2024-03-25'
    status: active
    customer: Construtora Lima
    dailyRate: 40.0
"""


@pytest.fixture
def hammer_file(tmp_path):
    path = tmp_path / "hammer.yaml"
    path.write_text(ASSET_YAML)
    return path
