from pursuit_web.scenario import CellKind, ErrorState, Scenario, SessionStatus
from pursuit_web.view import RUNNING_LABEL, START_LABEL, project


def test_text_projection():
    scenario = Scenario(3)
    scenario.set_cell(0, 0, CellKind.RUNNER)
    scenario.set_cell(1, 1, CellKind.OBSTACLE)
    scenario.set_cell(2, 2, CellKind.CATCHER)
    view = project(scenario.view(), SessionStatus.RUNNING, ErrorState("oops"))
    assert view.to_text() == "R . .\n. # .\n. . C\n[running]\n! oops"


def test_projection_labels_and_lock():
    scenario = Scenario(2)
    running = project(scenario.view(), SessionStatus.AWAITING_START)
    idle = project(scenario.view(), SessionStatus.STOPPED)
    assert running.start_label == RUNNING_LABEL
    assert not running.editable
    assert idle.start_label == START_LABEL
    assert idle.editable
    assert idle.error is None
    assert "!" not in idle.to_text()


def test_projection_does_not_track_later_edits():
    scenario = Scenario(2)
    view = project(scenario.view(), SessionStatus.IDLE)
    scenario.set_cell(0, 0, CellKind.RUNNER)
    assert view.rows[0][0] is CellKind.EMPTY
