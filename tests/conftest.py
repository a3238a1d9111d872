import pytest

from icope_risk.core.catalog import default_catalog
from icope_risk.core.lifecycle import AssessmentLifecycle
from tests.helpers import FIXED_NOW


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def lifecycle(catalog):
    return AssessmentLifecycle(catalog, clock=lambda: FIXED_NOW)
