"""Host Adapter Interface (Protocol).

Defines the contract each CAD host implements for the bridge. Every
operation runs on the host's own execution context and signals completion
exactly once with a Success or a Failure.
"""
from __future__ import annotations

import functools
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Protocol, TypeVar, Union, runtime_checkable

from ifc_bridge.domain.models import ElementInfo, ExportConfiguration
from ifc_bridge.domain.value_objects import GlobalId
from ifc_bridge.shared.logging import get_logger
from ifc_bridge.shared.result import Failure, Success, err

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class HostFailure:
    """Reason a host operation did not succeed."""

    reason: str
    not_found: bool = False

    def __str__(self) -> str:
        return self.reason


HostResult = Union[Success[T], Failure[HostFailure]]


@runtime_checkable
class HostAdapter(Protocol):
    """Capability set every host provides to the dispatcher."""

    @property
    def host_name(self) -> str: ...

    def select_by_id(self, native_id: int) -> HostResult[ElementInfo]: ...
    def select_by_global_id(self, global_id: GlobalId) -> HostResult[ElementInfo]: ...
    def list_configurations(self) -> HostResult[list[str]]: ...
    def export_ifc(
        self, configuration: ExportConfiguration, output_path: Path,
    ) -> HostResult[Path]: ...
    def get_selected_elements(self) -> HostResult[list[ElementInfo]]: ...


def guarded(operation: str, fn: Callable[..., Any]) -> Callable[..., Success[Any] | Failure[HostFailure]]:
    """Wrap an adapter call so exceptions become a Failure.

    Adapter exceptions never reach the transport layer; a call that returns
    something other than a Result is treated as a failed completion.

    Args:
        operation: Name used in logs and failure reasons
        fn: Adapter callable

    Returns:
        Callable returning a Result
    """

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Success[Any] | Failure[HostFailure]:
        try:
            result = fn(*args, **kwargs)
        except Exception as e:
            logger.exception("Host operation raised", operation=operation)
            return err(HostFailure(f"{type(e).__name__}: {e}"))
        if not isinstance(result, (Success, Failure)):
            logger.error("Host operation returned no completion", operation=operation)
            return err(HostFailure(f"{operation} did not signal completion"))
        return result

    return wrapper


__all__ = ["HostAdapter", "HostFailure", "HostResult", "guarded"]
