import asyncio
import copy
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from nejiba.db.models import Base
from nejiba.db.session import get_db_session
from nejiba.main import app

ACTIVITY = {
    "title": "دائرة الأسماء",
    "description": "يجلس الأطفال في دائرة ويعرّف كل واحد بنفسه",
    "activityType": "نقاش ومشاركة",
    "mainSteps": ["اجلسوا في دائرة", "كل طفل يقول اسمه", "صفقوا لكل صديق"],
    "energyLevel": "low",
    "whatYouNeed": ["كرة صغيرة"],
    "lifeSkillsFocus": ["confidence", "friendship"],
    "confidenceBuildingMoment": "عندما يقول الطفل اسمه أمام الجميع",
    "whyItMatters": "التعريف بالنفس أول خطوة للثقة",
    "visualCues": ["رفع اليد", "الإشارة للطفل التالي", "التصفيق"],
    "spokenPhrases": ["أهلاً بكم!", "دورك الآن", "أحسنت!"],
}

PLAN = {
    "title": {"ar": "ورشة: الثقة بالنفس", "en": "Self Confidence"},
    "introduction": {
        "phrase1": "مرحباً يا أبطال!",
        "phrase2": "اليوم نتكلم عن الثقة",
        "phrase3": "رح نلعب ونصنع ونتعلم",
    },
    "generalInfo": {
        "duration": "60 دقيقة",
        "ageGroup": "8-10",
        "participants": "12",
        "level": "مبتدئ",
    },
    "objectives": [
        {"ar": "التعريف بالنفس", "en": "Introduce yourself"},
        {"ar": "التحدث أمام المجموعة", "en": "Speak in a group"},
        {"ar": "تشجيع الأصدقاء", "en": "Encourage friends"},
    ],
    "materials": ["كرة", "أوراق ملونة", "أقلام", "شريط لاصق", "مقص"],
    "timeline": [ACTIVITY],
}


@pytest.fixture
def activity():
    return copy.deepcopy(ACTIVITY)


@pytest.fixture
def plan():
    return copy.deepcopy(PLAN)


@pytest.fixture
def client(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)

    async def create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_tables())
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    yield TestClient(app)
    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())
