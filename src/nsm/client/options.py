"""Client configuration: declared capabilities and one handler per lifecycle event."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from typing_extensions import Self

from nsm.shared.exceptions import ConfigurationError
from nsm.types import ClientCapability


class OpenFnT(Protocol):
    """Open (or switch to) the project at ``project_path``.

    Raise ``NsmError`` to report a specific error code to the server.
    """

    async def __call__(self, project_path: str, display_name: str, client_id: str) -> None: ...


class SaveFnT(Protocol):
    """Save the current project.

    Raise ``NsmError`` to report a specific error code to the server.
    """

    async def __call__(self) -> None: ...


class ShowGuiFnT(Protocol):
    async def __call__(self, visible: bool) -> None: ...


class SessionLoadedFnT(Protocol):
    async def __call__(self) -> None: ...


@dataclass(frozen=True)
class ClientOptions:
    capabilities: tuple[ClientCapability, ...] = ()
    open_callback: OpenFnT | None = None
    save_callback: SaveFnT | None = None
    gui_callback: ShowGuiFnT | None = None
    session_loaded_callback: SessionLoadedFnT | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "capabilities", tuple(ClientCapability(c) for c in self.capabilities))

    @classmethod
    def build(cls, *changes: Callable[[Self], Self]) -> Self:
        """Apply ``changes`` in order to empty options.

        Example:
            options = ClientOptions.build(
                lambda o: o.with_capabilities(ClientCapability.DIRTY),
                lambda o: o.with_open_callback(open_project),
                lambda o: o.with_save_callback(save_project),
            )
        """
        options = cls()
        for change in changes:
            options = change(options)
        return options

    def with_capabilities(self, *capabilities: ClientCapability) -> Self:
        return dataclasses.replace(self, capabilities=capabilities)

    def with_open_callback(self, callback: OpenFnT) -> Self:
        return dataclasses.replace(self, open_callback=callback)

    def with_save_callback(self, callback: SaveFnT) -> Self:
        return dataclasses.replace(self, save_callback=callback)

    def with_gui_callback(self, callback: ShowGuiFnT) -> Self:
        return dataclasses.replace(self, gui_callback=callback)

    def with_session_loaded_callback(self, callback: SessionLoadedFnT) -> Self:
        return dataclasses.replace(self, session_loaded_callback=callback)

    def has_capability(self, capability: ClientCapability) -> bool:
        return capability in self.capabilities

    def validate(self) -> None:
        """Check that every mandatory handler is present.

        Raises:
            ConfigurationError: If the open or save handler is missing, or if
                optional-gui is declared without a show/hide handler
        """
        if self.open_callback is None:
            raise ConfigurationError("no client open handler configured")
        if self.save_callback is None:
            raise ConfigurationError("no client save handler configured")
        if self.has_capability(ClientCapability.OPTIONAL_GUI) and self.gui_callback is None:
            raise ConfigurationError("option optional-gui set, but no optional gui handler configured")

