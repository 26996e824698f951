from typing import Optional

from fastapi import Header
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.repositories.audit_log_repository import SqlAlchemyAuditLogRepository
from src.adapter.repositories.document_sequence_repository import SqlAlchemyDocumentSequenceRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.audit_log_writer import AuditLogWriter
from src.app.services.numbering_service import NumberingService


def create_engine(db_uri: str, **kwargs) -> AsyncEngine:
    """
    Create the async engine

    SQLite connections are switched to explicit BEGIN IMMEDIATE: savepoints
    (used for number collision retries) behave transactionally, and writers
    take the database write lock up front so concurrent issuers wait on the
    busy timeout instead of failing a lock upgrade.
    """
    engine = create_async_engine(db_uri, echo=False, future=True, **kwargs)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine.sync_engine, "connect")
        def _disable_implicit_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def _explicit_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = create_engine(ApplicationConfig.DB_URI)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


async def get_account_id(x_account_id: str = Header(..., min_length=1)) -> str:
    """Owning account of the request (X-Account-Id header)"""
    return x_account_id


async def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Acting user recorded in the audit trail (X-User-Id header)"""
    return x_user_id


def build_numbering_service(session: AsyncSession) -> NumberingService:
    return NumberingService(
        SqlAlchemyDocumentSequenceRepository(session),
        padding=ApplicationConfig.DOCUMENT_NUMBER_PADDING,
        max_collision_retries=ApplicationConfig.NUMBER_COLLISION_MAX_RETRIES,
    )


def build_audit_writer(session: AsyncSession) -> AuditLogWriter:
    return AuditLogWriter(SqlAlchemyUnitOfWork(session), SqlAlchemyAuditLogRepository(session))
