import pytest

from mp3repair.commands.resetdatabase import ResetDatabaseCommand
from mp3repair.commands.services import RUNNING, STOP_PENDING, STOPPED, ServiceGateway, SystemServiceGateway
from mp3repair.errors import ServiceManagementFailure, UserInputInvalid


class FakeGateway(ServiceGateway):
    """Scripted service manager"""

    def __init__(self, states=(STOPPED,), stop_state=STOP_PENDING, fail_query=False):
        self.states = list(states)
        self.stop_state = stop_state
        self.fail_query = fail_query
        self.calls = []

    def query(self, service):
        self.calls.append(("query", service))
        if self.fail_query:
            raise ServiceManagementFailure("access denied")
        return self.states.pop(0) if len(self.states) > 1 else self.states[0]

    def stop(self, service):
        self.calls.append(("stop", service))
        return self.stop_state

    def list_services(self):
        self.calls.append(("list",))
        return {RUNNING: ["Alpha", "Beta"], STOPPED: ["Gamma"]}


@pytest.fixture
def metadata_dir(tmp_path):
    directory = tmp_path / "Media Player"
    directory.mkdir()
    for name in ("CurrentDatabase_372.wmdb", "LocalMLS_3.wmdb", "keep.txt"):
        (directory / name).write_text("db")
    return directory


def run_reset(config, bus, marker, gateway, metadata_dir, *flags):
    command = ResetDatabaseCommand(config, bus, marker=marker, gateway=gateway)
    command.poll_interval = 0.01
    return command.run(["-metadata", str(metadata_dir), *flags])


def test_not_dirty_short_circuits(config, bus, marker, metadata_dir):
    gateway = FakeGateway()
    assert run_reset(config, bus, marker, gateway, metadata_dir)
    assert bus.console_lines == ['Running "resetDatabase" is not necessary, as no track files have been edited']
    assert gateway.calls == []
    assert len(list(metadata_dir.iterdir())) == 3


def test_stops_service_and_deletes_files(config, bus, marker, metadata_dir):
    marker.mark_dirty(bus)
    gateway = FakeGateway(states=[RUNNING, STOP_PENDING, STOPPED])
    assert run_reset(config, bus, marker, gateway, metadata_dir, "-service", "Sharing")
    assert ("stop", "Sharing") in gateway.calls
    assert sorted(p.name for p in metadata_dir.iterdir()) == ["keep.txt"]
    assert f'2 out of 2 metadata files have been deleted from "{metadata_dir}"' in bus.console_lines
    assert not marker.is_dirty()


def test_service_already_stopped(config, bus, marker, metadata_dir):
    marker.mark_dirty(bus)
    gateway = FakeGateway(states=[STOPPED])
    assert run_reset(config, bus, marker, gateway, metadata_dir)
    assert [call[0] for call in gateway.calls] == ["query"]
    assert not marker.is_dirty()


def test_service_failure_still_deletes(config, bus, marker, metadata_dir):
    marker.mark_dirty(bus)
    gateway = FakeGateway(fail_query=True)
    assert run_reset(config, bus, marker, gateway, metadata_dir)
    assert 'The service "WMPNetworkSVC" cannot be opened: access denied' in bus.error_text
    assert "The following services are available:" in bus.console_lines
    assert '    "Gamma"' in bus.console_lines
    assert sorted(p.name for p in metadata_dir.iterdir()) == ["keep.txt"]


def test_stop_timeout(config, bus, marker, metadata_dir):
    marker.mark_dirty(bus)
    gateway = FakeGateway(states=[RUNNING, STOP_PENDING])
    assert run_reset(config, bus, marker, gateway, metadata_dir, "-timeout", "1")
    assert "could not be stopped within the 1 second timeout" in bus.error_text


def test_no_metadata_files(config, bus, marker, tmp_path):
    marker.mark_dirty(bus)
    empty = tmp_path / "empty"
    empty.mkdir()
    assert run_reset(config, bus, marker, FakeGateway(), empty)
    assert f'No metadata files were found in "{empty}"' in bus.console_lines
    assert not marker.is_dirty()


def test_unreadable_metadata_directory_keeps_marker(config, bus, marker, tmp_path):
    marker.mark_dirty(bus)
    assert not run_reset(config, bus, marker, FakeGateway(), tmp_path / "missing")
    assert marker.is_dirty()


@pytest.mark.parametrize("flags", [["-timeout", "0"], ["-timeout", "61"], ["-extension", "wmdb"]])
def test_invalid_flags(config, bus, marker, metadata_dir, flags):
    with pytest.raises(UserInputInvalid):
        run_reset(config, bus, marker, FakeGateway(), metadata_dir, *flags)


def test_configured_timeout_is_clamped(bus, marker):
    from mp3repair.config import ConfigManager

    config = ConfigManager(data={"resetDatabase": {"timeout": 500}})
    command = ResetDatabaseCommand(config, bus, marker=marker, gateway=FakeGateway())
    assert command.defaults["timeout"] == 60


class TestSystemGateway:

    def test_parses_state(self, monkeypatch):
        class Result:
            returncode = 0
            stdout = "SERVICE_NAME: WMPNetworkSvc\n        TYPE : 10 WIN32_OWN_PROCESS\n        STATE : 4  RUNNING\n"
            stderr = ""

        monkeypatch.setattr("mp3repair.commands.services.subprocess.run", lambda *a, **k: Result())
        assert SystemServiceGateway().query("WMPNetworkSvc") == RUNNING

    def test_lists_services(self, monkeypatch):
        class Result:
            returncode = 0
            stdout = (
                "SERVICE_NAME: Beta\n        STATE : 1  STOPPED\n\n"
                "SERVICE_NAME: Alpha\n        STATE : 4  RUNNING\n\n"
                "SERVICE_NAME: Aardvark\n        STATE : 1  STOPPED\n"
            )
            stderr = ""

        monkeypatch.setattr("mp3repair.commands.services.subprocess.run", lambda *a, **k: Result())
        assert SystemServiceGateway().list_services() == {RUNNING: ["Alpha"], STOPPED: ["Aardvark", "Beta"]}

    def test_missing_executable(self):
        gateway = SystemServiceGateway(executable="no-such-service-manager-executable")
        with pytest.raises(ServiceManagementFailure):
            gateway.query("anything")

    def test_failure_exit_code(self, monkeypatch):
        class Result:
            returncode = 1060
            stdout = "The specified service does not exist as an installed service."
            stderr = ""

        monkeypatch.setattr("mp3repair.commands.services.subprocess.run", lambda *a, **k: Result())
        with pytest.raises(ServiceManagementFailure, match="does not exist"):
            SystemServiceGateway().stop("nothing")
