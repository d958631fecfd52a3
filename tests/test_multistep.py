from machineimage.multistep import StateBag, Step, StepAction, run_steps

class RecordingStep(Step):
    def __init__(self, name, action, journal):
        self.name = name
        self.action = action
        self.journal = journal

    def run(self, state):
        self.journal.append(("run", self.name))

        return self.action

    def cleanup(self, state):
        self.journal.append(("cleanup", self.name))

def test_run_steps_in_order_and_cleanup_in_reverse():
    journal = []
    state = StateBag()

    steps = [
        RecordingStep("first", StepAction.CONTINUE, journal),
        RecordingStep("second", StepAction.CONTINUE, journal)
    ]

    assert run_steps(steps, state) == StepAction.CONTINUE
    assert journal == [
        ("run", "first"),
        ("run", "second"),
        ("cleanup", "second"),
        ("cleanup", "first")
    ]
    assert "halted" not in state

def test_halt_stops_the_sequence():
    journal = []
    state = StateBag()

    steps = [
        RecordingStep("first", StepAction.HALT, journal),
        RecordingStep("second", StepAction.CONTINUE, journal)
    ]

    assert run_steps(steps, state) == StepAction.HALT
    assert journal == [("run", "first"), ("cleanup", "first")]
    assert state.get("halted") is True

def test_state_bag():
    state = StateBag(config="config")

    assert state.get("config") == "config"
    assert state.get("missing", 1) == 1

    state.put("error", "boom")

    assert "error" in state
