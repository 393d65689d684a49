from fastapi import Request

from app.config import Settings, settings
from app.fitness.persistence import build_backend
from app.fitness.service import FitnessService


def create_service(cfg: Settings = settings) -> FitnessService:
    return FitnessService(build_backend(cfg))


async def get_service(request: Request) -> FitnessService:
    return request.app.state.service
