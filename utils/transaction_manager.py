import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncGenerator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_commit, session_rollback
from exceptions.base import StorefrontException
from exceptions.common import StorageException

logger = logging.getLogger(__name__)


class TransactionManager:
    """
    Utility class for running one logical engine operation as a single atomic
    unit against the relational store.

    Correctness relies on the store's transaction isolation plus unique
    constraints (one order per cart, one active cart per identity). There is
    no in-process lock table and no automatic retry: a failed transaction
    rolls back and surfaces an error to the caller.
    """

    @staticmethod
    @asynccontextmanager
    async def atomic(session: AsyncSession | Session, operation: str) -> AsyncGenerator[Any, None]:
        """
        Context manager for atomic database transactions.

        Commits when the block completes, rolls back on any error. Typed
        engine exceptions pass through unchanged; SQLAlchemy errors are
        wrapped in StorageException (with integrity_violation set for
        constraint failures).

        Usage:
            async with TransactionManager.atomic(session, "create_order"):
                # Database operations here
                await session_execute(stmt, session)
        """
        transaction_start = datetime.utcnow()
        logger.debug(f"Transaction '{operation}' started at {transaction_start}")

        try:
            yield session
            await session_commit(session)
            duration = (datetime.utcnow() - transaction_start).total_seconds()
            logger.debug(f"Transaction '{operation}' committed successfully in {duration:.2f}s")

        except StorefrontException:
            await TransactionManager._rollback(session, operation)
            raise

        except IntegrityError as e:
            await TransactionManager._rollback(session, operation)
            logger.warning(f"Integrity violation during '{operation}': {str(e.orig)}")
            raise StorageException(operation, str(e.orig), integrity_violation=True) from e

        except SQLAlchemyError as e:
            await TransactionManager._rollback(session, operation)
            logger.error(f"Storage error during '{operation}': {str(e)}")
            raise StorageException(operation, str(e)) from e

        except Exception:
            await TransactionManager._rollback(session, operation)
            raise

    @staticmethod
    async def _rollback(session: AsyncSession | Session, operation: str) -> None:
        try:
            await session_rollback(session)
            logger.info(f"Transaction '{operation}' rolled back")
        except SQLAlchemyError as rollback_error:
            logger.critical(f"Failed to rollback transaction '{operation}': {str(rollback_error)}")
            raise
