"""
Testes para o seed de categorias e funcionário de balcão.
"""

from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from circulation.db import seed
from circulation.models import MemberType, Staff


@pytest.mark.anyio
async def test_seed_is_idempotent(session_factory):
    with patch.object(seed, "async_session_factory", session_factory):
        assert await seed.seed_member_types() == len(seed.MEMBER_TYPES)
        assert await seed.seed_member_types() == 0
        await seed.seed_staff()
        await seed.seed_staff()

    async with session_factory() as db:
        student = (
            await db.execute(select(MemberType).where(MemberType.type_name == "Student"))
        ).scalar_one()
        staff_count = (await db.execute(select(func.count(Staff.id)))).scalar_one()

    assert student.max_books_allowed == 5
    assert student.loan_duration_days == 14
    assert student.fine_per_day == Decimal("0.25")
    assert staff_count == 1
