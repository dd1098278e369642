"""
Script de seed para criar dados iniciais no banco.

Uso:
    python -m circulation.db.seed

Cria as tabelas, as categorias de sócio padrão e um
funcionário de balcão, se ainda não existirem.
"""

import asyncio
import logging
from decimal import Decimal

from sqlalchemy import select

from circulation.db.session import async_session_factory, create_tables
from circulation.models.member import MemberType, Staff

logger = logging.getLogger(__name__)

# (nome, máx. livros, dias de prazo, multa/dia, anuidade, descrição)
MEMBER_TYPES = [
    ("Student", 5, 14, "0.25", "0.00", "For registered students with valid student ID"),
    ("Faculty", 10, 30, "0.50", "0.00", "For faculty members and teaching staff"),
    ("Staff", 7, 21, "0.50", "0.00", "For library and university staff members"),
    ("Public", 3, 14, "1.00", "25.00", "For general public members"),
    ("Senior", 5, 21, "0.25", "10.00", "For senior citizens aged 65 and above"),
    ("Child", 3, 7, "0.00", "0.00", "For children under 12 years old"),
    ("Premium", 15, 45, "0.25", "100.00", "Premium membership with extended privileges"),
]

DESK_STAFF = {
    "employee_id": "EMP001",
    "first_name": "Circulation",
    "last_name": "Desk",
    "email": "circulation.desk@library.local",
    "position": "Librarian",
}


async def seed_member_types() -> int:
    """Cria as categorias que faltam. Retorna quantas foram criadas."""
    created = 0
    async with async_session_factory() as db:
        result = await db.execute(select(MemberType.type_name))
        existing = set(result.scalars().all())

        for name, max_books, duration, fine, fee, description in MEMBER_TYPES:
            if name in existing:
                continue
            db.add(
                MemberType(
                    type_name=name,
                    max_books_allowed=max_books,
                    loan_duration_days=duration,
                    fine_per_day=Decimal(fine),
                    membership_fee=Decimal(fee),
                    description=description,
                )
            )
            created += 1

        await db.commit()

    logger.info(f"{created} categoria(s) de sócio criada(s)")
    return created


async def seed_staff() -> None:
    """Cria o funcionário de balcão se não existir."""
    async with async_session_factory() as db:
        result = await db.execute(
            select(Staff).where(Staff.employee_id == DESK_STAFF["employee_id"])
        )
        if result.scalar_one_or_none():
            logger.info(f"Funcionário já existe: {DESK_STAFF['employee_id']}")
            return

        staff = Staff(**DESK_STAFF)
        db.add(staff)
        await db.commit()
        logger.info(f"Funcionário criado: {DESK_STAFF['employee_id']} (ID: {staff.id})")


async def main() -> None:
    """Executa todos os seeds."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    logger.info("Executando seeds...")
    await create_tables()
    await seed_member_types()
    await seed_staff()
    logger.info("Seeds concluídos!")


if __name__ == "__main__":
    asyncio.run(main())
