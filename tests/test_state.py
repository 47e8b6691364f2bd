from vmpreflight.preflight import NetworkMode
from vmpreflight.state import SetupState


def test_new_state_is_cold(tmp_path):
    state = SetupState.load(tmp_path)
    assert not state.setup_completed
    assert state.is_cold_start(NetworkMode.SYSTEM)


def test_completed_setup_persists(tmp_path):
    SetupState(tmp_path).mark_setup_completed(NetworkMode.USER)

    state = SetupState.load(tmp_path)
    assert state.setup_completed
    assert not state.is_cold_start(NetworkMode.USER)
    # Switching network mode needs the full checks again
    assert state.is_cold_start(NetworkMode.SYSTEM)


def test_clear_removes_file(tmp_path):
    state = SetupState(tmp_path)
    state.mark_setup_completed(NetworkMode.SYSTEM)
    state.clear()

    assert not state.state_file.exists()
    assert SetupState.load(tmp_path).is_cold_start(NetworkMode.SYSTEM)


def test_corrupt_state_is_cold(tmp_path, caplog):
    (tmp_path / SetupState.STATE_FILENAME).write_text("{not json")

    with caplog.at_level("WARNING"):
        state = SetupState.load(tmp_path)
    assert state.is_cold_start(NetworkMode.SYSTEM)
    assert "Ignoring unreadable setup state" in caplog.text
