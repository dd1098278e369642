"""
Locks por chave para serializar escritas sobre a mesma cópia ou título.

Uso:
    async with copy_locks.acquire(copy_id):
        ...

Ordem de aquisição sempre cópia -> título, para que devolução (que
oferece a cópia à fila do título) nunca entre em deadlock com reservas.
Os locks valem dentro de um processo; entre processos quem garante a
exclusão é o SELECT ... FOR UPDATE dos repositórios.
"""

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedLock:
    """
    Conjunto de asyncio.Lock indexados por chave.

    Cada lock é criado sob demanda e descartado quando o último
    interessado o libera, então o dicionário não cresce sem limite.
    """

    def __init__(self, name: str):
        self.name = name
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._waiters: dict[Hashable, int] = {}

    @asynccontextmanager
    async def acquire(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def is_locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)


copy_locks = KeyedLock("copy")
book_locks = KeyedLock("book")
