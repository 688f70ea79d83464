"""Endpoint registry backed by an async SQLAlchemy session factory."""
import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from echo.database import create_engine, ensure_database_dir, init_db, normalize_database_url
from echo.errors import StorageError
from echo.models import EndpointRecord
from echo.schemas import Attributes, Endpoint, Response

logger = logging.getLogger(__name__)

# Ids are SQLite INTEGER primary keys assigned from 1
MAX_ENDPOINT_ID = 2**63 - 1


def _valid_id(endpoint_id: int) -> bool:
    return 1 <= endpoint_id <= MAX_ENDPOINT_ID


def _columns(endpoint: Endpoint) -> dict:
    attributes = endpoint.attributes
    return {
        "type": endpoint.type,
        "verb": attributes.verb,
        "path": attributes.path,
        "code": attributes.response.code,
        "headers": json.dumps(attributes.response.headers),
        "body": attributes.response.body,
    }


def _to_response(record: EndpointRecord) -> Response:
    return Response(code=record.code, headers=json.loads(record.headers), body=record.body)


def _to_endpoint(record: EndpointRecord) -> Endpoint:
    return Endpoint(
        type=record.type,
        id=record.id,
        attributes=Attributes(verb=record.verb, path=record.path, response=_to_response(record)),
    )


class Registry:
    """Owns the id -> endpoint mapping.

    Uniqueness of (verb, path) is left to the caller; the registry stores
    whatever it is given.
    """

    def __init__(self, database_url: str = None):
        self.database_url = normalize_database_url(database_url)
        self.engine: Optional[AsyncEngine] = None
        self.session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    async def open(self) -> None:
        if self.engine is not None:
            return
        ensure_database_dir(self.database_url)
        self.engine = create_engine(self.database_url)
        try:
            self.session_maker = await init_db(self.engine)
        except SQLAlchemyError as e:
            raise StorageError(f"unable to create tables: {e}") from e

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
        self.engine = None
        self.session_maker = None

    @asynccontextmanager
    async def _session(self, action: str) -> AsyncIterator[AsyncSession]:
        if self.session_maker is None:
            raise StorageError(f"unable to {action}: registry is not open")
        try:
            async with self.session_maker() as session:
                yield session
        except (SQLAlchemyError, ValueError) as e:
            # ValueError covers undecodable headers and rows that no longer validate.
            # Ids outside the INTEGER range never reach a query: get, update and
            # delete reject them up front.
            raise StorageError(f"unable to {action}: {e}") from e

    async def seed(self) -> None:
        """Load the demo endpoints unless the registry already holds data."""
        from echo.seed import SEED_ENDPOINTS

        async with self._session("seed endpoints") as session:
            count = await session.scalar(select(func.count()).select_from(EndpointRecord))
            if count:
                logger.info(f"Registry already holds {count} endpoints, skipping seed")
                return
            session.add_all([EndpointRecord(**_columns(e)) for e in SEED_ENDPOINTS])
            await session.commit()
        logger.info(f"Seeded {len(SEED_ENDPOINTS)} endpoints")

    async def create(self, endpoint: Endpoint) -> Endpoint:
        async with self._session("create endpoint") as session:
            record = EndpointRecord(**_columns(endpoint))
            session.add(record)
            await session.commit()
            await session.refresh(record)
            created = _to_endpoint(record)
        logger.info(f"Created endpoint {created.id}: {created.attributes.verb} {created.attributes.path}")
        return created

    async def fetch_all(self) -> list[Endpoint]:
        async with self._session("fetch endpoints") as session:
            result = await session.execute(select(EndpointRecord).order_by(EndpointRecord.id))
            return [_to_endpoint(record) for record in result.scalars().all()]

    async def get(self, endpoint_id: int) -> Optional[Endpoint]:
        if not _valid_id(endpoint_id):
            return None
        async with self._session("fetch endpoint") as session:
            record = await session.get(EndpointRecord, endpoint_id)
            if record is None:
                return None
            return _to_endpoint(record)

    async def find(self, verb: str, path: str) -> Optional[Response]:
        """Exact, case-sensitive match on verb and path."""
        async with self._session("find endpoint") as session:
            result = await session.execute(
                select(EndpointRecord)
                .where(EndpointRecord.verb == verb, EndpointRecord.path == path)
                .order_by(EndpointRecord.id)
                .limit(1)
            )
            record = result.scalar_one_or_none()
            if record is None:
                return None
            return _to_response(record)

    async def update(self, endpoint_id: int, endpoint: Endpoint) -> Optional[Endpoint]:
        """Replace verb, path and response of an existing endpoint."""
        if not _valid_id(endpoint_id):
            return None
        async with self._session("update endpoint") as session:
            record = await session.get(EndpointRecord, endpoint_id)
            if record is None:
                return None
            for column, value in _columns(endpoint).items():
                setattr(record, column, value)
            await session.commit()
            await session.refresh(record)
            updated = _to_endpoint(record)
        logger.info(f"Updated endpoint {endpoint_id}: {updated.attributes.verb} {updated.attributes.path}")
        return updated

    async def delete(self, endpoint_id: int) -> bool:
        if not _valid_id(endpoint_id):
            return False
        async with self._session("delete endpoint") as session:
            result = await session.execute(delete(EndpointRecord).where(EndpointRecord.id == endpoint_id))
            await session.commit()
        if result.rowcount == 0:
            return False
        logger.info(f"Deleted endpoint {endpoint_id}")
        return True


def get_registry(request: Request) -> Registry:
    return request.app.state.registry
