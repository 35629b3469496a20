from __future__ import annotations

from typing import List

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from src.db import Base
from src.quiz.models import LearningItem


@pytest_asyncio.fixture
async def session_factory() -> async_sessionmaker:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    try:
        yield factory
    finally:
        await engine.dispose()


@pytest.fixture
def catalog() -> List[LearningItem]:
    return [
        LearningItem(id="fr", primary_term="Paris", secondary_term="France", region="Europe"),
        LearningItem(
            id="ua",
            primary_term="Kyiv",
            primary_alternatives=("Kiev",),
            secondary_term="Ukraine",
            region="Europe",
        ),
        LearningItem(
            id="dk",
            primary_term="Copenhagen",
            primary_alternatives=("København",),
            secondary_term="Denmark",
            region="Europe",
        ),
        LearningItem(id="jp", primary_term="Tokyo", secondary_term="Japan", region="Asia"),
        LearningItem(
            id="mm",
            primary_term="Naypyidaw",
            secondary_term="Myanmar",
            secondary_alternatives=("Burma",),
            region="Asia",
        ),
        LearningItem(
            id="bo",
            primary_term="Sucre",
            primary_alternatives=("La Paz",),
            secondary_term="Bolivia",
            region="South America",
            has_multiple_valid_primaries=True,
        ),
    ]
