"""Shared fixtures for the telemetry tests."""
import pytest
from rest_framework.test import APIClient

from telemetry.records import EquipmentRecord, classify_status
from telemetry.session import DashboardService, SessionStateService
from telemetry.storage import DatabaseKeyValueStore

from .stubs import StubCollaborator

EXAMPLE_CSV = (
    "timestamp,equipment_id,type,flowrate,pressure,temperature\n"
    "2024-01-01,EQ-1,Pump,80,600,50\n"
    "2024-01-01,EQ-2,Pump,80,200,50"
)


@pytest.fixture(autouse=True)
def instant_insights(settings):
    """The placeholder collaborator should not make the suite sleep."""
    settings.TELEMETRY = {**getattr(settings, "TELEMETRY", {}), "INSIGHT_LATENCY_SECONDS": 0}


@pytest.fixture
def example_csv():
    return EXAMPLE_CSV


@pytest.fixture
def make_record():
    counter = {"n": 0}

    def factory(temperature=50.0, pressure=200.0, flowrate=80.0, equipment_id=None, type="Pump"):
        counter["n"] += 1
        n = counter["n"]
        return EquipmentRecord(
            id=f"row-{n}",
            timestamp="2024-01-01T00:00:00Z",
            equipment_id=f"EQ-{n}" if equipment_id is None else equipment_id,
            type=type,
            flowrate=flowrate,
            pressure=pressure,
            temperature=temperature,
            status=classify_status(temperature, pressure),
        )

    return factory


@pytest.fixture
def user(django_user_model):
    return django_user_model.objects.create_user(username="operator", password="s3cret-pass")


@pytest.fixture
def store(user):
    return DatabaseKeyValueStore(user)


@pytest.fixture
def state(store):
    return SessionStateService(store)


@pytest.fixture
def collaborator():
    return StubCollaborator()


@pytest.fixture
def service(state, collaborator):
    return DashboardService(state, collaborator)


@pytest.fixture
def api_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client
