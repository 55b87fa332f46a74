"""
Shared fixtures: sample datasets and settings with immediate history.
"""
import pytest
from app.core.config import Settings

MONTHS = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']
REGIONS = ['North', 'South', 'East', 'West']


@pytest.fixture
def sales_rows():
    """Twelve months of revenue across four regions."""
    return [
        {'Month': f"{month} 2024", 'Revenue': 12000 + i * 1500, 'Region': REGIONS[i % 4]}
        for i, month in enumerate(MONTHS)
    ]


@pytest.fixture
def rich_rows():
    """Sixty orders with ids, two metrics, two dimensions, a date and a status."""
    categories = ['Hardware', 'Software', 'Services', 'Training', 'Support', 'Cloud',
                  'Storage', 'Network', 'Security', 'Consulting', 'Licensing', 'Devices']
    return [
        {
            'order_id': 1000 + i,
            'Date': f"2024-{(i % 12) + 1:02d}-{(i % 28) + 1:02d}",
            'Sales': 250.5 + i * 10,
            'Profit': 40 + (i % 7) * 3.25,
            'Product': f"Product {i % 15}",
            'Category': categories[i % 12],
            'Status': 'open' if i % 3 else 'closed',
        }
        for i in range(60)
    ]


@pytest.fixture
def settings():
    """Default settings, except history snapshots are taken immediately."""
    return Settings(history_debounce_ms=0)
