import pytest

from machineimage.driver import Driver
from machineimage.exceptions import MachineImageAlreadyExists
from machineimage.multistep import StateBag, StepAction
from machineimage.step_check_existing_machine_image import StepCheckExistingMachineImage

class DriverMock(Driver):
    def __init__(self, exists=False):
        self.exists = exists
        self.calls = []

    def machine_image_exists(self, project_id, name):
        self.calls.append((project_id, name))

        return self.exists

class UiMock:
    def __init__(self):
        self.said = []
        self.errors = []

    def say(self, message):
        self.said.append(message)

    def error(self, message):
        self.errors.append(message)

@pytest.fixture
def state(prepared_config):
    return StateBag(config=prepared_config, driver=DriverMock(), ui=UiMock())

def test_continue_when_image_does_not_exist(state):
    action = StepCheckExistingMachineImage().run(state)

    config = state.get("config")

    assert action == StepAction.CONTINUE
    assert config.machine_image_already_exists is False
    assert state.get("driver").calls == [(config.project_id, config.machine_image_name)]
    assert "error" not in state
    assert state.get("ui").said == ["Checking machine image does not exist..."]

def test_continue_without_image_regardless_of_force(state):
    state.get("config").packer_force = True

    assert StepCheckExistingMachineImage().run(state) == StepAction.CONTINUE
    assert "error" not in state

def test_halt_when_image_exists(state):
    state.get("driver").exists = True

    action = StepCheckExistingMachineImage().run(state)

    config = state.get("config")
    err = state.get("error")

    assert action == StepAction.HALT
    assert config.machine_image_already_exists is True
    assert isinstance(err, MachineImageAlreadyExists)
    assert config.machine_image_name in str(err)
    assert config.project_id in str(err)
    assert "force" in str(err)
    assert state.get("ui").errors == [str(err)]

def test_force_continues_when_image_exists(state):
    state.get("driver").exists = True
    state.get("config").packer_force = True

    action = StepCheckExistingMachineImage().run(state)

    assert action == StepAction.CONTINUE
    assert state.get("config").machine_image_already_exists is True
    assert "error" not in state

def test_cleanup_is_a_noop(state):
    StepCheckExistingMachineImage().cleanup(state)

    assert "error" not in state
