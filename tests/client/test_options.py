import pytest

from nsm.client.options import ClientOptions
from nsm.shared.exceptions import ConfigurationError
from nsm.types import ClientCapability


async def open_project(project_path: str, display_name: str, client_id: str) -> None:  # pragma: no cover
    pass


async def save_project() -> None:  # pragma: no cover
    pass


async def show_gui(visible: bool) -> None:  # pragma: no cover
    pass


def test_build_applies_changes_in_order():
    options = ClientOptions.build(
        lambda o: o.with_capabilities(ClientCapability.SWITCH),
        lambda o: o.with_capabilities(ClientCapability.DIRTY, ClientCapability.PROGRESS),
        lambda o: o.with_open_callback(open_project),
        lambda o: o.with_save_callback(save_project),
    )

    assert options.capabilities == (ClientCapability.DIRTY, ClientCapability.PROGRESS)
    assert options.open_callback is open_project
    assert options.save_callback is save_project
    assert options.gui_callback is None
    options.validate()


def test_with_methods_return_new_options():
    base = ClientOptions()
    changed = base.with_capabilities(ClientCapability.DIRTY)

    assert base.capabilities == ()
    assert changed.has_capability(ClientCapability.DIRTY)
    assert not base.has_capability(ClientCapability.DIRTY)


def test_capabilities_accept_tokens():
    options = ClientOptions(capabilities=("dirty", "optional-gui"))  # type: ignore[arg-type]

    assert options.capabilities == (ClientCapability.DIRTY, ClientCapability.OPTIONAL_GUI)


def test_unknown_capability_token():
    with pytest.raises(ValueError):
        ClientOptions(capabilities=("teleport",))  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("options", "message"),
    [
        (ClientOptions(save_callback=save_project), "no client open handler configured"),
        (ClientOptions(open_callback=open_project), "no client save handler configured"),
        (
            ClientOptions(
                capabilities=(ClientCapability.OPTIONAL_GUI,),
                open_callback=open_project,
                save_callback=save_project,
            ),
            "option optional-gui set, but no optional gui handler configured",
        ),
    ],
)
def test_validate_reports_missing_handler(options: ClientOptions, message: str):
    with pytest.raises(ConfigurationError) as exc_info:
        options.validate()
    assert str(exc_info.value) == message


def test_optional_gui_with_handler_is_valid():
    options = ClientOptions(
        capabilities=(ClientCapability.OPTIONAL_GUI,),
        open_callback=open_project,
        save_callback=save_project,
        gui_callback=show_gui,
    )

    options.validate()
