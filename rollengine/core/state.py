from fastapi import Request

from rollengine.engine.roll_engine import RollEngine
from rollengine.services.persistence import ProfileWriter
from rollengine.services.profile_store import InMemoryProfileStore


def get_roll_engine(request: Request) -> RollEngine:
    return request.app.state.roll_engine


def get_profile_store(request: Request) -> InMemoryProfileStore:
    return request.app.state.profile_store


def get_profile_writer(request: Request) -> ProfileWriter:
    return request.app.state.profile_writer
