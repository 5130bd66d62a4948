"""Lifecycle base class for dbgateway components.

Components that own an external resource (a connection pool, a file handle)
move through a fixed set of states. This module provides the state machine
and the async initialize/cleanup protocol; subclasses implement the
resource-specific work in ``_async_initialize`` and ``_async_cleanup``.

Classes:
    LifecycleState: States a component moves through
    LifecycleComponent: Base class with async lifecycle management

Example:
    >>> class PoolOwner(LifecycleComponent):
    ...     async def _async_initialize(self) -> None:
    ...         self._pool = await create_pool()
    ...
    ...     async def _async_cleanup(self) -> None:
    ...         await self._pool.close()
"""

import asyncio
from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar

import structlog

from .exceptions import ErrorCodes, GatewayException

logger = structlog.get_logger(__name__)


class LifecycleState(str, Enum):
    """Lifecycle states.

    ``DISCONNECTED`` is terminal: a component that reached it is never
    initialized again.
    """

    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class LifecycleComponent(ABC):
    """Base class for components with async lifecycle management.

    Initialization and cleanup are serialized with locks and every state
    transition is logged. A failed initialization releases whatever was
    partially acquired before re-raising the original error.

    Attributes:
        component_name: Name of the component for logging and identification
    """

    component_name: ClassVar[str] = "LifecycleComponent"

    def __init__(self) -> None:
        self._state: LifecycleState = LifecycleState.UNINITIALIZED
        self._initialization_lock = asyncio.Lock()
        self._cleanup_lock = asyncio.Lock()

    @property
    def state(self) -> LifecycleState:
        """Get current component state."""
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is LifecycleState.CONNECTED

    def _set_state(self, new_state: LifecycleState) -> None:
        """Set component state and log the transition.

        Args:
            new_state: New state to set
        """
        self._state = new_state
        logger.debug(
            "Component state changed",
            component=self.component_name,
            new_state=new_state.value,
        )

    async def initialize(self) -> None:
        """Initialize the component.

        Raises:
            GatewayException: If the component is not in the initial state
            Exception: Whatever ``_async_initialize`` raised
        """
        async with self._initialization_lock:
            if self._state is not LifecycleState.UNINITIALIZED:
                raise GatewayException(
                    f"Cannot initialize {self.component_name} in state: {self._state.value}",
                    code=ErrorCodes.INVALID_STATE,
                    context={
                        "component": self.component_name,
                        "current_state": self._state.value,
                    },
                )

            self._set_state(LifecycleState.CONNECTING)
            logger.info("Initializing component", component=self.component_name)

            try:
                await self._async_initialize()
            except BaseException as e:
                logger.error(
                    "Component initialization failed",
                    component=self.component_name,
                    error=str(e),
                )
                await self._release_after_failure()
                self._set_state(LifecycleState.DISCONNECTED)
                raise

            self._set_state(LifecycleState.CONNECTED)
            logger.info("Component initialized successfully", component=self.component_name)

    async def cleanup(self) -> None:
        """Release component resources.

        Calling this on a component that is not connected is a no-op.
        """
        async with self._cleanup_lock:
            if self._state is not LifecycleState.CONNECTED:
                return

            logger.info("Cleaning up component", component=self.component_name)
            try:
                await self._async_cleanup()
            except Exception as e:
                # Don't raise during cleanup to avoid masking original errors
                logger.error(
                    "Component cleanup failed",
                    component=self.component_name,
                    error=str(e),
                )
            finally:
                self._set_state(LifecycleState.DISCONNECTED)

    async def _release_after_failure(self) -> None:
        try:
            await self._async_cleanup()
        except Exception as e:
            logger.warning(
                "Cleanup after failed initialization raised",
                component=self.component_name,
                error=str(e),
            )

    @abstractmethod
    async def _async_initialize(self) -> None:
        """Perform async initialization work."""

    async def _async_cleanup(self) -> None:
        """Perform async cleanup work.

        Subclasses override this to release their resources. It may be
        called after a partially failed initialization, so implementations
        must tolerate resources that were never acquired.
        """

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"name={self.component_name!r}, "
            f"state={self._state.value!r})"
        )
